"""
pricing/line_item.py

Per-line pricing for the cart.

    net_weight     = max(0, total_weight - less_weight)
    material_cost  = net_weight * material_rate
    making_charges = net_weight * making_rate_per_gram
    stone_amount   = carats * rate_per_carat * stone_quantity   (has_stones, all factors > 0)
    line_total     = (material_cost + making_charges + stone_amount + va_charges) * quantity

Negative inputs are clamped to zero (logged), never rejected.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Iterable, List

from .money import ZERO, non_negative_input, to_decimal
from .rates import MetalRateTable, SOURCE_DEFAULT

__all__ = [
    "SOURCE_CUSTOM",
    "CartLineItem",
    "ItemPrice",
    "price_line_item",
    "price_cart",
]

SOURCE_CUSTOM = "custom"

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CartLineItem:
    """
    Snapshot of a product at add-to-cart time.

    quantity and selected_weight are the only fields the cart edits; use
    with_quantity()/with_selected_weight() to get an updated copy.
    """
    product_id: str
    quantity: int = 1
    unit_weight_grams: Decimal = ZERO
    material_type: str = ""
    material_name: str = ""
    making_rate_per_gram: Decimal = ZERO
    has_stones: bool = False
    stone_carat_weight: Decimal = ZERO
    stone_rate_per_carat: Decimal = ZERO
    stone_quantity: Decimal = ZERO
    va_charges: Decimal = ZERO
    less_weight: Decimal = ZERO
    selected_weight: Decimal = ZERO
    custom_rate: Decimal = ZERO
    name: str = ""

    @property
    def total_weight(self) -> Decimal:
        sel = to_decimal(self.selected_weight)
        return sel if sel > ZERO else to_decimal(self.unit_weight_grams)

    def with_quantity(self, quantity: int) -> "CartLineItem":
        return replace(self, quantity=quantity)

    def with_selected_weight(self, weight) -> "CartLineItem":
        return replace(self, selected_weight=to_decimal(weight))


@dataclass(frozen=True)
class ItemPrice:
    product_id: str
    quantity: int
    net_weight: Decimal
    material_rate: Decimal
    rate_source: str
    material_cost: Decimal
    making_charges: Decimal
    stone_amount: Decimal
    va_charges: Decimal
    unit_total: Decimal
    line_total: Decimal
    name: str = ""

    @property
    def is_estimated(self) -> bool:
        """True when the material rate came from the default-rate fallback."""
        return self.rate_source == SOURCE_DEFAULT


def _stone_amount(item: CartLineItem) -> Decimal:
    if not item.has_stones:
        return ZERO
    carats = to_decimal(item.stone_carat_weight)
    rate = to_decimal(item.stone_rate_per_carat)
    qty = to_decimal(item.stone_quantity)
    if carats > ZERO and rate > ZERO and qty > ZERO:
        return carats * rate * qty
    return ZERO


def price_line_item(item: CartLineItem, rates: MetalRateTable) -> ItemPrice:
    pid = item.product_id

    quantity = int(item.quantity or 0)
    if quantity < 0:
        _log.warning("Negative quantity (%s) for %s clamped to zero.", quantity, pid)
        quantity = 0

    custom = non_negative_input(item.custom_rate, f"custom rate for {pid}")
    if custom > ZERO:
        material_rate, source = custom, SOURCE_CUSTOM
    else:
        found = rates.lookup(item.material_type, item.material_name or None)
        material_rate, source = found.rate, found.source
        if found.is_fallback:
            _log.warning("Pricing %s with the default gold rate (estimated).", pid)

    total_weight = non_negative_input(item.total_weight, f"weight for {pid}")
    less_weight = non_negative_input(item.less_weight, f"less weight for {pid}")
    net_weight = max(ZERO, total_weight - less_weight)

    making_rate = non_negative_input(item.making_rate_per_gram, f"making rate for {pid}")
    va_charges = non_negative_input(item.va_charges, f"VA charges for {pid}")

    material_cost = net_weight * material_rate
    making_charges = net_weight * making_rate
    stone_amount = _stone_amount(item)

    unit_total = material_cost + making_charges + stone_amount + va_charges
    return ItemPrice(
        product_id=pid,
        quantity=quantity,
        net_weight=net_weight,
        material_rate=material_rate,
        rate_source=source,
        material_cost=material_cost,
        making_charges=making_charges,
        stone_amount=stone_amount,
        va_charges=va_charges,
        unit_total=unit_total,
        line_total=unit_total * quantity,
        name=item.name,
    )


def price_cart(items: Iterable[CartLineItem], rates: MetalRateTable) -> List[ItemPrice]:
    return [price_line_item(it, rates) for it in items]
