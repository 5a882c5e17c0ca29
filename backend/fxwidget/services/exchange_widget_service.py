"""
Exchange widget service.
Owns the cached rate table, the current selection and the rendered view, and
reacts to UI events the way the converter page does.
"""

import asyncio
import inspect
from collections import defaultdict
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, List, Optional, Union
from zoneinfo import ZoneInfo

from fxwidget.core.config import settings
from fxwidget.core.exceptions import RateFetchError, UnsupportedCurrencyError
from fxwidget.core.logging import get_logger
from fxwidget.schemas.conversion import ConversionRequest, ConversionResult
from fxwidget.schemas.rates import RateTable, RatesResponse
from fxwidget.schemas.widget import WidgetEvent, WidgetSelection, WidgetView, WidgetStateResponse
from fxwidget.services.base_service import BaseService
from fxwidget.services.rate_fetcher_service import RateFetcherService
from fxwidget.utils.currency_converter import convert, format_number
from fxwidget.utils.debounce import Debouncer

logger = get_logger(__name__)

EventHandler = Callable[[Optional[str]], Union[None, Awaitable[None]]]


class ExchangeWidgetService(BaseService):
    """
    Stateful currency converter widget.

    All mutation happens on the event loop inside event handlers, so no locking
    is needed. Overlapping fetches are sequenced: each fetch takes a ticket and
    only outcomes newer than the last applied one reach the state.
    """

    def __init__(
        self,
        rate_fetcher: RateFetcherService,
        supported_currencies: Optional[List[str]] = None,
        displayed_rates: Optional[Dict[str, int]] = None,
        debounce_seconds: Optional[float] = None,
        swap_animation_seconds: Optional[float] = None,
        display_timezone: Optional[str] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.rate_fetcher = rate_fetcher
        self.supported_currencies = list(supported_currencies or settings.SUPPORTED_CURRENCIES)
        self.displayed_rates = dict(displayed_rates or settings.DISPLAYED_RATES)
        self.swap_animation_seconds = (
            settings.SWAP_ANIMATION_SECONDS if swap_animation_seconds is None else swap_animation_seconds
        )
        self.display_timezone = ZoneInfo(display_timezone or settings.DISPLAY_TIMEZONE)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

        # Cached data
        self.exchange_rates: Optional[RateTable] = None
        self.last_update: Optional[datetime] = None
        self.rates_status = "pending"

        # Input controls
        self.from_currency = settings.DEFAULT_FROM_CURRENCY
        self.to_currency = settings.DEFAULT_TO_CURRENCY
        self.from_amount = settings.DEFAULT_AMOUNT

        # Output elements
        placeholder = settings.PLACEHOLDER_TEXT
        self.view = WidgetView(
            rates={code: placeholder for code in self.displayed_rates},
            to_amount=placeholder,
            conversion_rate=placeholder,
        )

        self._fetch_ticket = 0
        self._applied_ticket = 0
        self._in_flight = 0
        self._swap_reset: Optional[asyncio.TimerHandle] = None
        self._listeners: Dict[WidgetEvent, List[EventHandler]] = defaultdict(list)
        self._debounced_calculate = Debouncer(
            self.calculate_exchange,
            settings.INPUT_DEBOUNCE_SECONDS if debounce_seconds is None else debounce_seconds,
        )
        self.bind_events()

    # Events

    def bind_events(self) -> None:
        """Attach the default handlers for the widget controls."""
        self.subscribe(WidgetEvent.FROM_CURRENCY_CHANGE, self._on_from_currency_change)
        self.subscribe(WidgetEvent.TO_CURRENCY_CHANGE, self._on_to_currency_change)
        self.subscribe(WidgetEvent.AMOUNT_INPUT, self._on_amount_input)
        self.subscribe(WidgetEvent.SWAP_CLICK, self._on_swap_click)

    def subscribe(self, event: WidgetEvent, handler: EventHandler) -> None:
        """Register a handler; handlers run in subscription order."""
        self._listeners[WidgetEvent(event)].append(handler)

    def unsubscribe(self, event: WidgetEvent, handler: EventHandler) -> None:
        """Remove a previously registered handler."""
        listeners = self._listeners[WidgetEvent(event)]
        if handler in listeners:
            listeners.remove(handler)

    async def dispatch(self, event: WidgetEvent, value: Optional[str] = None) -> None:
        """Run every handler subscribed to ``event``."""
        for handler in list(self._listeners[WidgetEvent(event)]):
            result = handler(value)
            if inspect.isawaitable(result):
                await result

    def _on_from_currency_change(self, value: Optional[str]) -> None:
        self.from_currency = self._validate_currency(value)
        self.calculate_exchange()

    def _on_to_currency_change(self, value: Optional[str]) -> None:
        self.to_currency = self._validate_currency(value)
        self.calculate_exchange()

    def _on_amount_input(self, value: Optional[str]) -> None:
        self.from_amount = value or ""
        self._debounced_calculate()

    async def _on_swap_click(self, value: Optional[str]) -> None:
        await self.swap_currencies()

    def _validate_currency(self, code: Optional[str]) -> str:
        normalized = (code or "").strip().upper()
        if normalized not in self.supported_currencies:
            raise UnsupportedCurrencyError(code or "")
        return normalized

    # Rates

    async def fetch_exchange_rates(self) -> bool:
        """
        Fetch a new rate table and refresh the view.

        Failures never propagate: they switch every header rate to the error
        sentinel and the update label to the failure text.

        Returns:
            True if a new table was applied
        """
        self._fetch_ticket += 1
        ticket = self._fetch_ticket
        self._in_flight += 1
        self.view.loading = True

        try:
            table = await self.rate_fetcher.fetch()
        except RateFetchError as e:
            if ticket <= self._applied_ticket:
                logger.info(f"Ignoring failure of superseded rate fetch #{ticket}")
                return False
            self._applied_ticket = ticket
            logger.warning(
                f"Exchange rate update failed: {e.message}",
                extra={"details": e.details, "ticket": ticket},
            )
            self._show_fetch_error()
            return False
        finally:
            self._in_flight -= 1
            self.view.loading = self._in_flight > 0

        if ticket <= self._applied_ticket:
            logger.info(f"Discarding stale rate table from fetch #{ticket}")
            return False

        self._applied_ticket = ticket
        self.exchange_rates = table
        self.last_update = self._clock()
        self.rates_status = "ok"

        self.update_rate_display()
        self.update_time_display()
        self.calculate_exchange()

        logger.info("Exchange rates updated", extra={"ticket": ticket, "currencies": len(table.rates)})
        return True

    def _show_fetch_error(self) -> None:
        self.rates_status = "error"
        self.view.update_time = settings.UPDATE_FAILED_TEXT
        self.view.rates = {code: settings.RATE_ERROR_TEXT for code in self.displayed_rates}

    def update_rate_display(self) -> None:
        """Render the header rate labels from the cached table."""
        if self.exchange_rates is None:
            return

        self.view.rates = {
            code: format_number(self.exchange_rates.get_rate(code), decimals)
            for code, decimals in self.displayed_rates.items()
        }

    def update_time_display(self) -> None:
        """Render the last update time as ``HH:MM <suffix>`` in the display timezone."""
        if not self.last_update:
            return

        local = self.last_update.astimezone(self.display_timezone)
        self.view.update_time = f"{local:%H:%M} {settings.UPDATE_TIME_SUFFIX}"

    # Conversion

    def calculate_exchange(self) -> Optional[ConversionResult]:
        """Recompute the conversion for the current selection."""
        if self.exchange_rates is None:
            return None

        result = convert(self.current_request(), self.exchange_rates)
        self.view.to_amount = result.result
        self.view.conversion_rate = result.conversion_rate
        self.view.conversion_info = f"1 {result.from_currency} = {result.conversion_rate} {result.to_currency}"
        return result

    def current_request(self) -> ConversionRequest:
        """The conversion described by the input controls."""
        return ConversionRequest(
            from_currency=self.from_currency,
            to_currency=self.to_currency,
            amount=self.from_amount,
        )

    def convert(self, request: ConversionRequest) -> ConversionResult:
        """Convert an arbitrary request against the cached table without touching the view."""
        request = ConversionRequest(
            from_currency=self._validate_currency(request.from_currency),
            to_currency=self._validate_currency(request.to_currency),
            amount=request.amount,
        )
        return convert(request, self.exchange_rates)

    async def swap_currencies(self) -> Optional[ConversionResult]:
        """Exchange source and target currency and recompute."""
        self.from_currency, self.to_currency = self.to_currency, self.from_currency
        result = self.calculate_exchange()

        self.view.swap_rotation = 180
        if self._swap_reset is not None:
            self._swap_reset.cancel()
        self._swap_reset = asyncio.get_running_loop().call_later(
            self.swap_animation_seconds, self._reset_swap_rotation
        )
        return result

    def _reset_swap_rotation(self) -> None:
        self._swap_reset = None
        self.view.swap_rotation = 0

    async def flush_pending(self) -> None:
        """Run a debounced recalculation immediately if one is waiting."""
        await self._debounced_calculate.flush()

    def close(self) -> None:
        """Cancel pending work before shutdown."""
        self._debounced_calculate.cancel()
        if self._swap_reset is not None:
            self._swap_reset.cancel()
            self._swap_reset = None

    # Snapshots

    def get_state(self) -> WidgetStateResponse:
        """Current selection and view."""
        return WidgetStateResponse(
            selection=WidgetSelection(
                from_currency=self.from_currency,
                to_currency=self.to_currency,
                amount=self.from_amount,
            ),
            view=self.view.model_copy(deep=True),
            rates_status=self.rates_status,
            last_update=self.last_update,
            recalculation_pending=self._debounced_calculate.pending,
        )

    def get_rates(self) -> RatesResponse:
        """Cached rate table together with its header labels."""
        table = self.exchange_rates
        return RatesResponse(
            status=self.rates_status,
            base=table.base if table else settings.BASE_CURRENCY,
            rates=dict(table.rates) if table else {},
            display=dict(self.view.rates),
            update_time=self.view.update_time,
            fetched_at=table.fetched_at if table else None,
        )
