"""
Conversion request/result schemas.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ConversionRequest(BaseModel):
    """A single conversion; ``amount`` is the raw text typed by the user."""
    from_currency: str = Field(..., min_length=3, max_length=3, description="Source currency code")
    to_currency: str = Field(..., min_length=3, max_length=3, description="Target currency code")
    amount: str = Field("", description="Amount as typed by the user")


class ConversionResult(BaseModel):
    """Formatted outcome of a conversion."""
    from_currency: str
    to_currency: str
    amount: str
    result: str = Field(..., description="Converted amount, or the placeholder")
    conversion_rate: str = Field(..., description="Units of target per one unit of source")
    value: Optional[float] = None
    rate_value: Optional[float] = None
    decimals: int
