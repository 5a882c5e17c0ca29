"""
Site page routes.
Serves HTML pages with the shared header and footer injected.
"""

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

from fxwidget.deps.di_container import get_container

router = APIRouter()


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def index() -> HTMLResponse:
    """Site landing page."""
    controller = get_container().page_controller()
    return HTMLResponse(await controller.get_page("/"))


@router.get("/pages/{page_path:path}", response_class=HTMLResponse, include_in_schema=False)
async def sub_page(page_path: str) -> HTMLResponse:
    """Pages under ``/pages/``; links in their components are rewritten one level up."""
    controller = get_container().page_controller()
    return HTMLResponse(await controller.get_page(f"/pages/{page_path}"))
