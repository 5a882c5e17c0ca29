"""
Exchange rate Pydantic schemas.
"""

from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ExternalRatesPayload(BaseModel):
    """Body returned by the public exchange rate API."""
    result: str
    rates: Dict[str, float]

    @field_validator("rates")
    @classmethod
    def rates_must_be_positive(cls, value: Dict[str, float]) -> Dict[str, float]:
        for code, rate in value.items():
            if not rate > 0:
                raise ValueError(f"Rate for {code} must be positive, got {rate}")
        return value


class RateTable(BaseModel):
    """
    Snapshot of rates relative to the base currency.
    Frozen: a refresh builds a new table instead of patching this one.
    """
    model_config = ConfigDict(frozen=True)

    base: str = Field(..., min_length=3, max_length=3)
    rates: Dict[str, float]
    fetched_at: datetime

    def __contains__(self, currency: object) -> bool:
        return currency in self.rates

    def get_rate(self, currency: str) -> float:
        """Rate of ``currency`` against the base currency."""
        return self.rates[currency]


class RatesResponse(BaseModel):
    """Current rate snapshot with its header display labels."""
    status: str = Field(..., description="ok, error or pending")
    base: str
    rates: Dict[str, float] = {}
    display: Dict[str, str] = {}
    update_time: str = ""
    fetched_at: Optional[datetime] = None
