"""
Exchange rate controller.
"""

from fxwidget.controllers.base_controller import BaseController
from fxwidget.schemas.conversion import ConversionRequest, ConversionResult
from fxwidget.schemas.rates import RatesResponse
from fxwidget.services.exchange_widget_service import ExchangeWidgetService
from fxwidget.services.refresh_scheduler import RateRefreshScheduler


class RatesController(BaseController):
    """Controller for rate snapshot and conversion operations."""

    def __init__(self, widget_service: ExchangeWidgetService, scheduler: RateRefreshScheduler):
        self.widget_service = widget_service
        self.scheduler = scheduler

    async def get_rates(self) -> RatesResponse:
        """Get the cached rate table."""
        return self.widget_service.get_rates()

    async def refresh_rates(self) -> RatesResponse:
        """Fetch rates on demand and return the resulting snapshot."""
        await self.scheduler.refresh_now()
        return self.widget_service.get_rates()

    async def convert(self, request: ConversionRequest) -> ConversionResult:
        """Convert an amount against the cached table."""
        return self.widget_service.convert(request)
