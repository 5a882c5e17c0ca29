"""
Widget controller.
"""

from fxwidget.controllers.base_controller import BaseController
from fxwidget.schemas.widget import WidgetEvent, WidgetEventRequest, WidgetStateResponse
from fxwidget.services.exchange_widget_service import ExchangeWidgetService


class WidgetController(BaseController):
    """Controller for widget interactions."""

    def __init__(self, widget_service: ExchangeWidgetService):
        self.widget_service = widget_service

    async def get_state(self) -> WidgetStateResponse:
        """Get the current selection and view."""
        return self.widget_service.get_state()

    async def dispatch_event(self, event: WidgetEventRequest, flush: bool = False) -> WidgetStateResponse:
        """
        Dispatch a UI event to the widget.

        Args:
            event: Event type and control value
            flush: Run a debounced recalculation before returning

        Returns:
            Widget state after the handlers ran
        """
        await self.widget_service.dispatch(event.type, event.value)
        if flush:
            await self.widget_service.flush_pending()
        return self.widget_service.get_state()

    async def swap(self) -> WidgetStateResponse:
        """Swap the selected currencies."""
        await self.widget_service.dispatch(WidgetEvent.SWAP_CLICK)
        return self.widget_service.get_state()
