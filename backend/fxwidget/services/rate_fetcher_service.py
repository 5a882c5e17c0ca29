"""
Rate fetcher service.
Fetches one exchange rate snapshot from the public API and validates it.
"""

import asyncio
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional

import aiohttp
from pydantic import ValidationError

from fxwidget.core.config import settings
from fxwidget.core.exceptions import RateFetchError
from fxwidget.core.integrations.http.http_client import HttpClient
from fxwidget.core.logging import get_logger
from fxwidget.schemas.rates import ExternalRatesPayload, RateTable
from fxwidget.services.base_service import BaseService

logger = get_logger(__name__)


class RateFetcherService(BaseService):
    """Service that turns one API response into a RateTable."""

    def __init__(
        self,
        http_client: HttpClient,
        api_url: Optional[str] = None,
        base_currency: Optional[str] = None,
        required_currencies: Optional[Iterable[str]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.http_client = http_client
        self.api_url = api_url or settings.RATES_API_URL
        self.base_currency = base_currency or settings.BASE_CURRENCY
        if required_currencies is None:
            required_currencies = [*settings.SUPPORTED_CURRENCIES, *settings.DISPLAYED_RATES]
        self.required_currencies: List[str] = sorted(set(required_currencies))
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def fetch(self) -> RateTable:
        """
        Fetch and validate the current rate snapshot.

        Returns:
            A new RateTable

        Raises:
            RateFetchError: transport failure, non-success status or malformed body
        """
        try:
            data = await self.http_client.get(self.api_url)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise RateFetchError("Exchange rate request failed", details=repr(e)) from e
        except ValueError as e:
            # Body was not valid JSON
            raise RateFetchError("Exchange rate response is not JSON", details=str(e)) from e

        if not isinstance(data, dict):
            raise RateFetchError("Exchange rate response is not an object")

        if data.get("result") != "success":
            raise RateFetchError(
                "Exchange rate API reported a failure",
                details={"result": data.get("result")},
            )

        try:
            payload = ExternalRatesPayload.model_validate(data)
        except ValidationError as e:
            raise RateFetchError("Exchange rate data is malformed", details=str(e)) from e

        rates = dict(payload.rates)
        rates.setdefault(self.base_currency, 1.0)

        missing = [code for code in self.required_currencies if code not in rates]
        if missing:
            raise RateFetchError(
                "Exchange rate data is missing currencies",
                details={"missing": missing},
            )

        table = RateTable(base=self.base_currency, rates=rates, fetched_at=self._clock())
        logger.info(
            f"Fetched {len(rates)} exchange rates",
            extra={"base": table.base, "fetched_at": table.fetched_at.isoformat()},
        )
        return table
