"""
Fixed-point quantities.

Tonnage is stored as integer kilograms and money as integer cents so that
stock arithmetic in SQL stays exact. The wire format still speaks tonnes and
currency units; conversion happens only at the boundaries (validation on the
way in, to_dict and reports on the way out).
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, localcontext
from typing import Any

KG_PER_TONNE = 1000
CENTS_PER_UNIT = 100

# Keeps values inside a signed 64-bit column with room for sums.
MAX_MINOR_UNITS = 10 ** 15


def parse_decimal(value: Any) -> Decimal | None:
    """Exact decimal for a JSON number or numeric string; None if not a finite number."""
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        number = Decimal(value)
    elif isinstance(value, float):
        # str() gives the shortest repr, so 0.1 parses as Decimal("0.1")
        number = Decimal(str(value))
    elif isinstance(value, str):
        try:
            number = Decimal(value.strip())
        except InvalidOperation:
            return None
    else:
        return None
    if not number.is_finite():
        return None
    return number


def to_minor(amount: Decimal, scale: int) -> int | None:
    """Scale to integer minor units, or None when the amount is finer than one unit."""
    with localcontext() as ctx:
        # enough digits that scaling never rounds
        ctx.prec = len(amount.as_tuple().digits) + len(str(scale))
        scaled = amount * scale
    if scaled != scaled.to_integral_value() or (amount and not scaled):
        return None
    return int(scaled)


def decimal_places(scale: int) -> int:
    return len(str(scale)) - 1


def tonnes_to_kg(tonnes: Any) -> int:
    kg = to_minor(parse_decimal(tonnes), KG_PER_TONNE)
    if kg is None:
        raise ValueError(f"{tonnes!r} is not a whole number of kilograms")
    return kg


def units_to_cents(amount: Any) -> int:
    cents = to_minor(parse_decimal(amount), CENTS_PER_UNIT)
    if cents is None:
        raise ValueError(f"{amount!r} is not a whole number of cents")
    return cents


def kg_to_tonnes(kg: int | None) -> float:
    return (kg or 0) / KG_PER_TONNE


def cents_to_units(cents: int | None) -> float:
    return (cents or 0) / CENTS_PER_UNIT
