"""
pricing/cart.py

Cart roll-up: subtotal of line totals plus a flat-percentage GST.
The GST rate is always passed in (PricingSettings.gst_rate_percent).
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from .line_item import ItemPrice
from .money import HUNDRED, ZERO, non_negative_input

__all__ = ["CartTotals", "aggregate"]


@dataclass(frozen=True)
class CartTotals:
    subtotal: Decimal
    gst: Decimal
    gst_rate_percent: Decimal
    item_count: int

    @property
    def gross_total(self) -> Decimal:
        return self.subtotal + self.gst


def aggregate(
    items: Iterable[ItemPrice],
    gst_rate_percent,
    gst_included: bool = True,
) -> CartTotals:
    """
    subtotal = sum(line_total); gst = subtotal * rate / 100.

    With gst_included=False the bill carries no GST at all (gst = 0).
    An empty cart gives zeros.
    """
    subtotal = ZERO
    count = 0
    for it in items:
        subtotal += it.line_total
        count += it.quantity
    rate = non_negative_input(gst_rate_percent, "GST rate") if gst_included else ZERO
    return CartTotals(
        subtotal=subtotal,
        gst=subtotal * rate / HUNDRED,
        gst_rate_percent=rate,
        item_count=count,
    )
