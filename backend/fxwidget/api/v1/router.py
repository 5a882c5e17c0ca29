"""
API v1 router that aggregates all endpoint routers.
All routes are public; the rate source needs no credentials.
"""

from fastapi import APIRouter

from fxwidget.api.v1.endpoints import (
    health,
    rates,
    widget,
)

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(rates.router, prefix="/rates", tags=["rates"])
api_router.include_router(widget.router, prefix="/widget", tags=["widget"])
