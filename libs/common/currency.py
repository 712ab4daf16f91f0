"""Currency conversion utilities for unit wallets.

Internal storage unit: kobo (smallest NGN unit, 100 kobo = ₦1).
API / display unit: Naira as ``Decimal`` with two decimal places.

Binary floats never carry money: every conversion goes through ``Decimal``
and rounds half-up to the kobo.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

# ─── constants ───────────────────────────────────────────────────────────────

KOBO_PER_NAIRA: int = 100
NAIRA_QUANTUM = Decimal("0.01")

MoneyInput = Union[Decimal, int, str]


# ─── conversion helpers ───────────────────────────────────────────────────────


def to_decimal(value: MoneyInput) -> Decimal:
    """Coerce an API amount into ``Decimal`` without passing through float."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # repr() of a float is the shortest string that round-trips
        return Decimal(repr(value))
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"Not a monetary amount: {value!r}") from exc


def round_kobo(kobo: Decimal) -> int:
    """Round a fractional kobo amount half-up to a whole kobo."""
    return int(kobo.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def naira_to_kobo(naira: MoneyInput) -> int:
    """Convert Naira to kobo (round half-up). ₦1 = 100 kobo."""
    return round_kobo(to_decimal(naira) * KOBO_PER_NAIRA)


def kobo_to_naira(kobo: int) -> Decimal:
    """Convert kobo to Naira. 100 kobo = ₦1."""
    return (Decimal(kobo) / KOBO_PER_NAIRA).quantize(NAIRA_QUANTUM)


def has_sub_kobo_precision(naira: MoneyInput) -> bool:
    """True when the amount carries more than two decimal places."""
    value = to_decimal(naira)
    return value != value.quantize(NAIRA_QUANTUM)


def format_naira(kobo: int) -> str:
    """Human-readable amount for log lines and descriptions, e.g. ₦1,500.00."""
    return f"₦{kobo_to_naira(kobo):,.2f}"
