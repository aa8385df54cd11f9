"""
pricing/money.py

Decimal helpers shared by the pricing engine.

Everything inside the engine is Decimal with full precision; rounding happens
only through round_money()/round_rupee() at a display or persistence boundary.
"""
from __future__ import annotations

import logging
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation, getcontext
from typing import Any

# Keep plenty of precision for intermediate math
getcontext().prec = 28

__all__ = [
    "ZERO",
    "HUNDRED",
    "to_decimal",
    "clamp_non_negative",
    "non_negative_input",
    "round_money",
    "round_rupee",
]

ZERO = Decimal("0")
HUNDRED = Decimal("100")

_log = logging.getLogger(__name__)


def to_decimal(x: Any) -> Decimal:
    """
    Convert numbers to Decimal without float artefacts (via str()).

    Raises ValueError for text that is not a number: rejecting garbage is the
    caller's job (see utils.validators.parse_decimal), so reaching here with
    one is a programming error.
    """
    if isinstance(x, Decimal):
        return x
    if x is None:
        return ZERO
    try:
        return Decimal(str(x))
    except (InvalidOperation, ValueError, TypeError) as e:
        raise ValueError(f"Not a number: {x!r}") from e


def clamp_non_negative(x: Decimal) -> Decimal:
    """Return x if x > 0, else 0."""
    return x if x > ZERO else ZERO


def non_negative_input(x: Any, field: str) -> Decimal:
    """
    Lenient input policy: negatives are clamped to zero, never rejected.
    Each clamp is logged so bad data stays visible.
    """
    d = to_decimal(x)
    if d < ZERO:
        _log.warning("Negative %s (%s) clamped to zero.", field, d)
        return ZERO
    return d


def round_money(x: Any, places: int = 2) -> Decimal:
    """Round half-up to `places` decimals (paise by default)."""
    q = Decimal(1).scaleb(-places)
    return to_decimal(x).quantize(q, rounding=ROUND_HALF_UP)


def round_rupee(x: Any) -> Decimal:
    """Round half-up to a whole rupee (invoice net amount)."""
    return to_decimal(x).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
