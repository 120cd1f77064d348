"""Currency formatting for amounts held as integer cents."""

from decimal import Decimal, ROUND_DOWN
from typing import Any

_CENTS = Decimal(100)


def _to_cents(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"Not a cents amount: {value!r}")
    if isinstance(value, int):
        return value
    try:
        amount = Decimal(str(value).strip())
    except Exception as e:
        raise ValueError(f"Not a cents amount: {value!r}") from e
    if not amount.is_finite() or amount != amount.to_integral_value():
        raise ValueError(f"Cents amount must be integral: {value!r}")
    return int(amount)


def _with_sign(body: str) -> str:
    if body.startswith("-"):
        return f"-${body[1:]}"
    return f"${body}"


def format_dollars_no_sign(cents: Any) -> str:
    """Whole dollars with thousands separators, e.g. 123456 -> '1,234'."""
    value = _to_cents(cents)
    dollars = (Decimal(abs(value)) / _CENTS).quantize(Decimal(1), rounding=ROUND_DOWN)
    body = f"{int(dollars):,}"
    return f"-{body}" if value < 0 and dollars else body


def format_dollars_with_sign(cents: Any) -> str:
    """Whole dollars with a leading '$', e.g. 123456 -> '$1,234'."""
    return _with_sign(format_dollars_no_sign(cents))


def format_dollars_and_cents_no_sign(cents: Any) -> str:
    """Dollars and cents, e.g. 123456 -> '1,234.56'."""
    value = _to_cents(cents)
    body = f"{Decimal(abs(value)) / _CENTS:,.2f}"
    return f"-{body}" if value < 0 else body


def format_dollars_and_cents_with_sign(cents: Any) -> str:
    """Dollars and cents with a leading '$', e.g. 123456 -> '$1,234.56'."""
    return _with_sign(format_dollars_and_cents_no_sign(cents))
