"""
pricing/exchange.py

Old-gold exchange credit: the customer's gold is valued and subtracted from
the payable total.

    net_weight  = max(0, weight_grams - less_weight)
    fine_weight = net_weight * tunch / 100        (0 when tunch <= 0)
    value       = fine_weight * rate_per_gram

With the defaults (no less weight, 100% tunch) value == weight_grams * rate.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from .money import HUNDRED, ZERO, non_negative_input, to_decimal

__all__ = ["credit_value", "ExchangeGold"]


def credit_value(weight_grams, rate_per_gram) -> Decimal:
    """weight * rate, both clamped at >= 0."""
    return non_negative_input(weight_grams, "exchange weight") * non_negative_input(
        rate_per_gram, "exchange rate"
    )


@dataclass(frozen=True)
class ExchangeGold:
    weight_grams: Decimal
    rate_per_gram: Decimal
    purity: str = ""
    less_weight: Decimal = ZERO
    tunch: Decimal = HUNDRED
    product_name: str = ""

    @property
    def net_weight(self) -> Decimal:
        gross = non_negative_input(self.weight_grams, "exchange weight")
        less = non_negative_input(self.less_weight, "exchange less weight")
        return max(ZERO, gross - less)

    @property
    def fine_weight(self) -> Decimal:
        tunch = to_decimal(self.tunch)
        if tunch <= ZERO:
            return ZERO
        return self.net_weight * tunch / HUNDRED

    @property
    def value(self) -> Decimal:
        return credit_value(self.fine_weight, self.rate_per_gram)
