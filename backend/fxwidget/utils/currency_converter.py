"""
Currency conversion utility.
Converts through the base currency of a rate table and formats results for display.
"""

import math
import re
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Iterable, Mapping, Optional

from fxwidget.core.config import settings
from fxwidget.schemas.conversion import ConversionRequest, ConversionResult
from fxwidget.schemas.rates import RateTable


# Rates are relative to the base currency (1 USD = 1.0)
# Example: 1 USD = 1300 KRW, so KRW rate is 1300.0
_AMOUNT_PATTERN = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")


def get_decimal_places(currency: str, zero_decimal_currencies: Optional[Iterable[str]] = None) -> int:
    """
    Get the number of decimal places used to display an amount in a currency.

    Args:
        currency: Currency code (e.g., "KRW", "EUR")
        zero_decimal_currencies: Codes shown without decimals (defaults to config)

    Returns:
        0 for zero-decimal currencies, 2 otherwise
    """
    if zero_decimal_currencies is None:
        zero_decimal_currencies = settings.ZERO_DECIMAL_CURRENCIES
    return 0 if currency.upper() in zero_decimal_currencies else 2


def parse_amount(text: Optional[str]) -> Optional[float]:
    """Parse user input into a finite number, or None when it is not one."""
    if text is None:
        return None
    text = text.strip()
    if not _AMOUNT_PATTERN.match(text):
        return None
    value = float(text)
    if math.isinf(value):
        return None
    return value


def format_number(value: Optional[float], decimals: int, placeholder: Optional[str] = None) -> str:
    """
    Format a number with grouping and a fixed number of decimals.

    Uses ko-KR conventions: comma thousands separator, dot decimal point.
    Returns the placeholder for missing or non-finite values.
    """
    if placeholder is None:
        placeholder = settings.PLACEHOLDER_TEXT
    if value is None or math.isnan(value) or math.isinf(value):
        return placeholder

    number = Decimal(str(value))
    quantum = Decimal(1).scaleb(-decimals)
    with localcontext() as ctx:
        # quantize needs room for every integer digit plus the decimals
        ctx.prec = max(ctx.prec, number.adjusted() + decimals + 2)
        rounded = number.quantize(quantum, rounding=ROUND_HALF_UP)
    return f"{rounded:,.{decimals}f}"


def convert_amount(amount: float, from_currency: str, to_currency: str, rates: Mapping[str, float]) -> float:
    """
    Convert an amount between two currencies via the base currency.

    Args:
        amount: Amount in the source currency
        from_currency: Source currency code
        to_currency: Target currency code
        rates: Rates relative to the base currency

    Returns:
        Amount in the target currency
    """
    if from_currency == to_currency:
        return amount

    amount_in_base = amount / rates[from_currency]
    return amount_in_base * rates[to_currency]


def conversion_rate(from_currency: str, to_currency: str, rates: Mapping[str, float]) -> float:
    """How many units of the target currency equal one unit of the source currency."""
    if from_currency == to_currency:
        return 1.0
    return rates[to_currency] / rates[from_currency]


def convert(request: ConversionRequest, rate_table: Optional[RateTable]) -> ConversionResult:
    """
    Convert a request under the given rate table.

    The amount and the unit rate are both shown at the target currency's precision.
    Without a rate table every output is the placeholder; an amount that is not a
    number only blanks the converted amount.
    """
    decimals = get_decimal_places(request.to_currency)
    value = None
    rate_value = None

    if rate_table is not None:
        rate_value = conversion_rate(request.from_currency, request.to_currency, rate_table.rates)
        amount = parse_amount(request.amount)
        if amount is not None:
            value = convert_amount(amount, request.from_currency, request.to_currency, rate_table.rates)

    return ConversionResult(
        from_currency=request.from_currency,
        to_currency=request.to_currency,
        amount=request.amount,
        result=format_number(value, decimals),
        conversion_rate=format_number(rate_value, decimals),
        value=value,
        rate_value=rate_value,
        decimals=decimals,
    )
