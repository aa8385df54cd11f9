"""
pricing/product_price.py

Product-definition pricing: gross weight grows by a making percentage, labour
is charged on the grown weight, and stone weights are taken out of the metal
basis while stone prices are added back as flat amounts.

    making_weight   = gross_weight * making_percentage / 100
    new_weight      = gross_weight + making_weight
    labour_charges  = labour_rate_per_gram * new_weight
    effective_metal = max(0, new_weight - stone weights in grams)
    metal_price     = effective_metal * gold_rate_per_gram
    total_price     = metal_price + stone prices + labour_charges

Pure: same inputs, same Decimal outputs.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from .money import HUNDRED, ZERO, to_decimal

__all__ = [
    "ProductStone",
    "StonePriceBreakdown",
    "calculate_stone_prices",
    "ProductPriceInputs",
    "ProductPriceResult",
    "calculate_product_price",
]


def _nn(x) -> Decimal:
    d = to_decimal(x)
    return d if d > ZERO else ZERO


# -----------------------------
# Stones
# -----------------------------

@dataclass(frozen=True)
class ProductStone:
    """
    One stone row on a product.

    weight is in grams. For Diamond/Solitaire the carat (cent) value is kept in
    quantity and amount already equals carats * rate.
    """
    name: str
    weight: Decimal = ZERO
    amount: Decimal = ZERO
    quantity: Decimal = ZERO
    rate: Decimal = ZERO


@dataclass(frozen=True)
class StonePriceBreakdown:
    kundan_price: Decimal = ZERO
    kundan_weight: Decimal = ZERO
    jarkan_price: Decimal = ZERO
    jarkan_weight: Decimal = ZERO
    diamond_price: Decimal = ZERO
    diamond_carats: Decimal = ZERO
    diamond_weight_grams: Decimal = ZERO
    solitaire_price: Decimal = ZERO
    solitaire_carats: Decimal = ZERO
    solitaire_weight_grams: Decimal = ZERO
    color_stones_price: Decimal = ZERO
    color_stones_weight: Decimal = ZERO


_NAMED = ("kundan", "jarkan", "diamond", "solitaire")


def calculate_stone_prices(stones: Iterable[ProductStone]) -> StonePriceBreakdown:
    """Group stones by kind; anything not Kundan/Jarkan/Diamond/Solitaire is a colour stone."""
    sums = {k: [ZERO, ZERO, ZERO] for k in _NAMED + ("color",)}  # price, grams, carats
    for s in stones:
        kind = (s.name or "").strip().lower()
        bucket = sums[kind] if kind in _NAMED else sums["color"]
        bucket[0] += to_decimal(s.amount)
        bucket[1] += to_decimal(s.weight)
        bucket[2] += to_decimal(s.quantity)
    return StonePriceBreakdown(
        kundan_price=sums["kundan"][0],
        kundan_weight=sums["kundan"][1],
        jarkan_price=sums["jarkan"][0],
        jarkan_weight=sums["jarkan"][1],
        diamond_price=sums["diamond"][0],
        diamond_carats=sums["diamond"][2],
        diamond_weight_grams=sums["diamond"][1],
        solitaire_price=sums["solitaire"][0],
        solitaire_carats=sums["solitaire"][2],
        solitaire_weight_grams=sums["solitaire"][1],
        color_stones_price=sums["color"][0],
        color_stones_weight=sums["color"][1],
    )


# -----------------------------
# Calculator
# -----------------------------

@dataclass(frozen=True)
class ProductPriceInputs:
    gross_weight: Decimal
    making_percentage: Decimal
    labour_rate_per_gram: Decimal
    gold_rate_per_gram: Decimal
    kundan_price: Decimal = ZERO
    kundan_weight: Decimal = ZERO
    jarkan_price: Decimal = ZERO
    jarkan_weight: Decimal = ZERO
    diamond_price: Decimal = ZERO
    diamond_weight_grams: Decimal = ZERO
    solitaire_price: Decimal = ZERO
    solitaire_weight_grams: Decimal = ZERO
    color_stones_price: Decimal = ZERO
    color_stones_weight: Decimal = ZERO

    @classmethod
    def from_stones(
        cls,
        *,
        gross_weight,
        making_percentage,
        labour_rate_per_gram,
        gold_rate_per_gram,
        stones: StonePriceBreakdown,
    ) -> "ProductPriceInputs":
        return cls(
            gross_weight=to_decimal(gross_weight),
            making_percentage=to_decimal(making_percentage),
            labour_rate_per_gram=to_decimal(labour_rate_per_gram),
            gold_rate_per_gram=to_decimal(gold_rate_per_gram),
            kundan_price=stones.kundan_price,
            kundan_weight=stones.kundan_weight,
            jarkan_price=stones.jarkan_price,
            jarkan_weight=stones.jarkan_weight,
            diamond_price=stones.diamond_price,
            diamond_weight_grams=stones.diamond_weight_grams,
            solitaire_price=stones.solitaire_price,
            solitaire_weight_grams=stones.solitaire_weight_grams,
            color_stones_price=stones.color_stones_price,
            color_stones_weight=stones.color_stones_weight,
        )


@dataclass(frozen=True)
class ProductPriceResult:
    making_weight: Decimal
    new_weight: Decimal
    labour_charges: Decimal
    effective_metal_weight: Decimal
    metal_price: Decimal
    total_stones_price: Decimal
    total_stones_weight: Decimal
    total_price: Decimal


def calculate_product_price(inputs: ProductPriceInputs) -> ProductPriceResult:
    gross_weight = _nn(inputs.gross_weight)
    making_pct = min(max(to_decimal(inputs.making_percentage), ZERO), HUNDRED)
    labour_rate = _nn(inputs.labour_rate_per_gram)
    gold_rate = _nn(inputs.gold_rate_per_gram)

    making_weight = gross_weight * making_pct / HUNDRED
    new_weight = gross_weight + making_weight
    labour_charges = labour_rate * new_weight

    stones_weight = (
        _nn(inputs.kundan_weight)
        + _nn(inputs.jarkan_weight)
        + _nn(inputs.diamond_weight_grams)
        + _nn(inputs.solitaire_weight_grams)
        + _nn(inputs.color_stones_weight)
    )
    stones_price = (
        _nn(inputs.kundan_price)
        + _nn(inputs.jarkan_price)
        + _nn(inputs.diamond_price)
        + _nn(inputs.solitaire_price)
        + _nn(inputs.color_stones_price)
    )

    effective_metal = max(ZERO, new_weight - stones_weight)
    metal_price = effective_metal * gold_rate

    return ProductPriceResult(
        making_weight=making_weight,
        new_weight=new_weight,
        labour_charges=labour_charges,
        effective_metal_weight=effective_metal,
        metal_price=metal_price,
        total_stones_price=stones_price,
        total_stones_weight=stones_weight,
        total_price=metal_price + stones_price + labour_charges,
    )
