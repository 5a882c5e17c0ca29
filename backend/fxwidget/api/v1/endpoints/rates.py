"""
Exchange rate API endpoints.
"""

from fastapi import APIRouter, Query, Request

from fxwidget.core.config import settings
from fxwidget.core.rate_limit import limiter
from fxwidget.deps.di_container import get_container
from fxwidget.schemas.conversion import ConversionRequest, ConversionResult
from fxwidget.schemas.rates import RatesResponse

router = APIRouter()


@router.get("", response_model=RatesResponse)
async def get_rates() -> RatesResponse:
    """Get the cached rate table and header labels."""
    controller = get_container().rates_controller()
    return await controller.get_rates()


@router.post("/refresh", response_model=RatesResponse)
@limiter.limit(settings.RATE_LIMIT_REFRESH)
async def refresh_rates(request: Request) -> RatesResponse:
    """Fetch rates now instead of waiting for the next scheduled refresh."""
    controller = get_container().rates_controller()
    return await controller.refresh_rates()


@router.get("/convert", response_model=ConversionResult)
async def convert(
    from_currency: str = Query(..., min_length=3, max_length=3, alias="from"),
    to_currency: str = Query(..., min_length=3, max_length=3, alias="to"),
    amount: str = Query(""),
) -> ConversionResult:
    """Convert an amount with the cached rates; unparseable amounts give the placeholder."""
    controller = get_container().rates_controller()
    return await controller.convert(
        ConversionRequest(from_currency=from_currency, to_currency=to_currency, amount=amount)
    )
