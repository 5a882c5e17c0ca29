"""
Widget state Pydantic schemas.
The view mirrors the output elements of the converter page.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, Field


class WidgetEvent(str, Enum):
    """UI events the widget listens to."""
    FROM_CURRENCY_CHANGE = "from_currency_change"
    TO_CURRENCY_CHANGE = "to_currency_change"
    AMOUNT_INPUT = "amount_input"
    SWAP_CLICK = "swap_click"


class WidgetSelection(BaseModel):
    """Current values of the input controls."""
    from_currency: str
    to_currency: str
    amount: str


class WidgetView(BaseModel):
    """Rendered output of the widget."""
    rates: Dict[str, str] = Field(default_factory=dict, description="Header rate labels by currency")
    update_time: str = ""
    loading: bool = False
    to_amount: str = ""
    conversion_rate: str = ""
    conversion_info: str = ""
    swap_rotation: int = 0


class WidgetEventRequest(BaseModel):
    """A UI event dispatched to the widget."""
    type: WidgetEvent
    value: Optional[str] = Field(None, description="New control value for change/input events")


class WidgetStateResponse(BaseModel):
    """Full widget snapshot returned by the widget endpoints."""
    selection: WidgetSelection
    view: WidgetView
    rates_status: str
    last_update: Optional[datetime] = None
    recalculation_pending: bool = False
