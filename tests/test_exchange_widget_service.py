"""
Exchange widget service tests: fetch/display cycle, events, swap and sequencing.
"""

import asyncio
from datetime import datetime, timezone

import aiohttp
import pytest

from fxwidget.core.exceptions import RateFetchError, UnsupportedCurrencyError
from fxwidget.schemas.conversion import ConversionRequest
from fxwidget.schemas.rates import RateTable
from fxwidget.schemas.widget import WidgetEvent
from fxwidget.services.exchange_widget_service import ExchangeWidgetService

from conftest import FIXED_NOW, success_payload


def make_widget(rate_fetcher, **kwargs) -> ExchangeWidgetService:
    kwargs.setdefault("debounce_seconds", 0.01)
    kwargs.setdefault("swap_animation_seconds", 0.01)
    return ExchangeWidgetService(rate_fetcher, clock=lambda: FIXED_NOW, **kwargs)


@pytest.fixture
def widget(rate_fetcher):
    widget = make_widget(rate_fetcher)
    yield widget
    widget.close()


@pytest.fixture
async def loaded_widget(widget, fake_http_client):
    fake_http_client.queue(success_payload())
    assert await widget.fetch_exchange_rates() is True
    return widget


def test_initial_state_shows_placeholders(widget):
    state = widget.get_state()

    assert state.rates_status == "pending"
    assert state.selection.from_currency == "USD"
    assert state.selection.to_currency == "KRW"
    assert state.view.to_amount == "--"
    assert state.view.conversion_rate == "--"
    assert state.view.rates == {"KRW": "--", "JPY": "--", "EUR": "--"}
    assert widget.calculate_exchange() is None


@pytest.mark.asyncio
async def test_successful_fetch_updates_every_display(loaded_widget):
    view = loaded_widget.view

    assert loaded_widget.rates_status == "ok"
    assert view.rates == {"KRW": "1,300.00", "JPY": "150.00", "EUR": "0.9000"}
    assert view.update_time == "12:05 업데이트"
    assert view.to_amount == "1,300"
    assert view.conversion_rate == "1,300"
    assert view.conversion_info == "1 USD = 1,300 KRW"
    assert view.loading is False
    assert loaded_widget.last_update == FIXED_NOW


@pytest.mark.asyncio
async def test_malformed_response_shows_error_for_every_currency(widget, fake_http_client):
    fake_http_client.queue({"result": "success"})

    assert await widget.fetch_exchange_rates() is False

    assert widget.rates_status == "error"
    assert widget.view.rates == {"KRW": "오류", "JPY": "오류", "EUR": "오류"}
    assert widget.view.update_time == "업데이트 실패"
    assert widget.view.to_amount == "--"
    assert widget.view.loading is False


@pytest.mark.asyncio
async def test_failure_after_success_keeps_previous_table(loaded_widget, fake_http_client):
    previous = loaded_widget.exchange_rates
    fake_http_client.queue(aiohttp.ClientConnectionError("offline"))

    assert await loaded_widget.fetch_exchange_rates() is False

    assert loaded_widget.exchange_rates is previous
    assert loaded_widget.view.rates == {"KRW": "오류", "JPY": "오류", "EUR": "오류"}
    # Conversions keep working from the cached table
    await loaded_widget.dispatch(WidgetEvent.TO_CURRENCY_CHANGE, "EUR")
    assert loaded_widget.view.to_amount == "0.90"


@pytest.mark.asyncio
async def test_currency_change_recomputes_immediately(loaded_widget):
    await loaded_widget.dispatch(WidgetEvent.TO_CURRENCY_CHANGE, "eur")

    assert loaded_widget.to_currency == "EUR"
    assert loaded_widget.view.to_amount == "0.90"
    assert loaded_widget.view.conversion_info == "1 USD = 0.90 EUR"

    await loaded_widget.dispatch(WidgetEvent.FROM_CURRENCY_CHANGE, "JPY")
    assert loaded_widget.view.conversion_rate == "0.01"


@pytest.mark.asyncio
async def test_unsupported_currency_is_rejected(loaded_widget):
    with pytest.raises(UnsupportedCurrencyError):
        await loaded_widget.dispatch(WidgetEvent.FROM_CURRENCY_CHANGE, "XYZ")

    assert loaded_widget.from_currency == "USD"


@pytest.mark.asyncio
async def test_amount_input_is_debounced(loaded_widget):
    for text in ("1", "10", "100"):
        await loaded_widget.dispatch(WidgetEvent.AMOUNT_INPUT, text)

    # Still showing the result for the previous amount
    assert loaded_widget.view.to_amount == "1,300"
    assert loaded_widget.get_state().recalculation_pending is True

    await asyncio.sleep(0.05)

    assert loaded_widget.view.to_amount == "130,000"
    assert loaded_widget.get_state().recalculation_pending is False


@pytest.mark.asyncio
async def test_invalid_amount_shows_placeholder(loaded_widget):
    await loaded_widget.dispatch(WidgetEvent.AMOUNT_INPUT, "ten")
    await loaded_widget.flush_pending()

    assert loaded_widget.view.to_amount == "--"
    assert loaded_widget.view.conversion_rate == "1,300"


@pytest.mark.asyncio
async def test_huge_amount_is_rendered_by_every_path(widget, fake_http_client):
    widget.from_amount = "1e30"
    fake_http_client.queue(success_payload({**success_payload()["rates"], "EUR": 1e30}))

    assert await widget.fetch_exchange_rates() is True
    assert widget.rates_status == "ok"
    assert widget.view.to_amount.startswith("1,300,000,000,000,000")
    assert widget.view.rates["EUR"] == "1" + ",000" * 10 + ".0000"

    await widget.dispatch(WidgetEvent.AMOUNT_INPUT, "2e30")
    await asyncio.sleep(0.05)

    assert widget.view.to_amount.startswith("2,600,000,000,000,000")
    assert widget.get_state().recalculation_pending is False


@pytest.mark.asyncio
async def test_swap_twice_restores_selection_and_result(loaded_widget):
    await loaded_widget.dispatch(WidgetEvent.AMOUNT_INPUT, "25")
    await loaded_widget.flush_pending()
    before = loaded_widget.get_state()

    await loaded_widget.dispatch(WidgetEvent.SWAP_CLICK)
    assert loaded_widget.from_currency == "KRW"
    assert loaded_widget.to_currency == "USD"
    assert loaded_widget.view.to_amount == "0.02"

    await loaded_widget.swap_currencies()
    after = loaded_widget.get_state()

    assert after.selection == before.selection
    assert after.view.to_amount == before.view.to_amount == "32,500"


@pytest.mark.asyncio
async def test_swap_rotation_resets_after_animation(loaded_widget):
    await loaded_widget.swap_currencies()
    assert loaded_widget.view.swap_rotation == 180

    await asyncio.sleep(0.05)

    assert loaded_widget.view.swap_rotation == 0


@pytest.mark.asyncio
async def test_quick_second_swap_restarts_the_animation(rate_fetcher, fake_http_client):
    widget = make_widget(rate_fetcher, swap_animation_seconds=0.1)
    fake_http_client.queue(success_payload())
    await widget.fetch_exchange_rates()

    await widget.swap_currencies()
    await asyncio.sleep(0.06)
    await widget.swap_currencies()
    await asyncio.sleep(0.06)

    # The first swap's reset must not cut the second animation short
    assert widget.view.swap_rotation == 180

    await asyncio.sleep(0.08)
    assert widget.view.swap_rotation == 0
    widget.close()


@pytest.mark.asyncio
async def test_close_cancels_pending_rotation_reset(rate_fetcher):
    widget = make_widget(rate_fetcher, swap_animation_seconds=0.02)

    await widget.swap_currencies()
    widget.close()
    await asyncio.sleep(0.05)

    assert widget.view.swap_rotation == 180


@pytest.mark.asyncio
async def test_extra_subscribers_run_after_default_handlers(loaded_widget):
    seen = []

    async def on_change(value):
        seen.append((value, loaded_widget.view.to_amount))

    loaded_widget.subscribe(WidgetEvent.TO_CURRENCY_CHANGE, on_change)
    await loaded_widget.dispatch(WidgetEvent.TO_CURRENCY_CHANGE, "EUR")
    loaded_widget.unsubscribe(WidgetEvent.TO_CURRENCY_CHANGE, on_change)
    await loaded_widget.dispatch(WidgetEvent.TO_CURRENCY_CHANGE, "JPY")

    assert seen == [("EUR", "0.90")]


@pytest.mark.asyncio
async def test_convert_does_not_touch_the_view(loaded_widget):
    result = loaded_widget.convert(
        ConversionRequest(from_currency="usd", to_currency="EUR", amount="10")
    )

    assert result.result == "9.00"
    assert loaded_widget.view.to_amount == "1,300"

    with pytest.raises(UnsupportedCurrencyError):
        loaded_widget.convert(ConversionRequest(from_currency="USD", to_currency="GBP", amount="1"))


class GatedFetcher:
    """Fetcher whose calls resolve only when the test releases them."""

    def __init__(self):
        self.pending = []

    async def fetch(self):
        future = asyncio.get_running_loop().create_future()
        self.pending.append(future)
        return await future


def _table(krw: float) -> RateTable:
    return RateTable(
        base="USD",
        rates={"USD": 1.0, "KRW": krw, "JPY": 150.0, "EUR": 0.9, "CNY": 7.2},
        fetched_at=datetime(2026, 10, 17, tzinfo=timezone.utc),
    )


@pytest.mark.asyncio
async def test_stale_response_does_not_overwrite_newer_one():
    fetcher = GatedFetcher()
    widget = make_widget(fetcher)

    older = asyncio.create_task(widget.fetch_exchange_rates())
    newer = asyncio.create_task(widget.fetch_exchange_rates())
    await asyncio.sleep(0)
    assert widget.view.loading is True

    fetcher.pending[1].set_result(_table(1400.0))
    assert await newer is True
    assert widget.view.loading is True

    fetcher.pending[0].set_result(_table(1300.0))
    assert await older is False

    assert widget.exchange_rates.get_rate("KRW") == 1400.0
    assert widget.view.to_amount == "1,400"
    assert widget.view.loading is False


@pytest.mark.asyncio
async def test_stale_failure_does_not_replace_newer_success():
    fetcher = GatedFetcher()
    widget = make_widget(fetcher)

    older = asyncio.create_task(widget.fetch_exchange_rates())
    newer = asyncio.create_task(widget.fetch_exchange_rates())
    await asyncio.sleep(0)

    fetcher.pending[1].set_result(_table(1400.0))
    await newer
    fetcher.pending[0].set_exception(RateFetchError("late failure"))
    await older

    assert widget.rates_status == "ok"
    assert widget.view.rates["KRW"] == "1,400.00"
