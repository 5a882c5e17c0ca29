"""
Widget API endpoints.
Each POST mirrors one control event on the converter page.
"""

from fastapi import APIRouter, Query

from fxwidget.deps.di_container import get_container
from fxwidget.schemas.widget import WidgetEventRequest, WidgetStateResponse

router = APIRouter()


@router.get("", response_model=WidgetStateResponse)
async def get_widget() -> WidgetStateResponse:
    """Get the current selection and rendered view."""
    controller = get_container().widget_controller()
    return await controller.get_state()


@router.post("/events", response_model=WidgetStateResponse)
async def dispatch_event(
    event: WidgetEventRequest,
    flush: bool = Query(False, description="Apply a debounced recalculation before responding"),
) -> WidgetStateResponse:
    """Dispatch a control event (currency change, amount input, swap click)."""
    controller = get_container().widget_controller()
    return await controller.dispatch_event(event, flush=flush)


@router.post("/swap", response_model=WidgetStateResponse)
async def swap_currencies() -> WidgetStateResponse:
    """Swap source and target currency."""
    controller = get_container().widget_controller()
    return await controller.swap()
