"""
pricing/discount.py

Bill-level discount in one of three modes:

  AMOUNT         discount = min(value, subtotal)
  PERCENTAGE     discount = subtotal * value / 100      (not clamped, flagged outside 0..100)
  TOTAL_PAYABLE  discount = max(0, subtotal - value)    (value is the price the customer pays)

Over-discounting is never raised here; settle() turns a negative payable into
a NegativePayableWarning.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from decimal import Decimal

from .money import HUNDRED, ZERO, non_negative_input, to_decimal

__all__ = ["DiscountMode", "DiscountSpec", "DiscountResult", "apply_discount"]


class DiscountMode(str, enum.Enum):
    AMOUNT = "amount"
    PERCENTAGE = "percentage"
    TOTAL_PAYABLE = "total_payable"


@dataclass(frozen=True)
class DiscountSpec:
    mode: DiscountMode = DiscountMode.AMOUNT
    value: Decimal = ZERO

    @classmethod
    def none(cls) -> "DiscountSpec":
        return cls(DiscountMode.AMOUNT, ZERO)

    @classmethod
    def amount(cls, value) -> "DiscountSpec":
        return cls(DiscountMode.AMOUNT, to_decimal(value))

    @classmethod
    def percentage(cls, value) -> "DiscountSpec":
        return cls(DiscountMode.PERCENTAGE, to_decimal(value))

    @classmethod
    def total_payable(cls, value) -> "DiscountSpec":
        return cls(DiscountMode.TOTAL_PAYABLE, to_decimal(value))


@dataclass(frozen=True)
class DiscountResult:
    amount: Decimal
    mode: DiscountMode
    value: Decimal
    out_of_range: bool = False
    message: str = ""


def apply_discount(subtotal, spec: DiscountSpec | None) -> DiscountResult:
    sub = to_decimal(subtotal)
    if spec is None:
        spec = DiscountSpec.none()
    value = to_decimal(spec.value)
    mode = DiscountMode(spec.mode)

    if mode is DiscountMode.PERCENTAGE:
        amount = sub * value / HUNDRED
        if value < ZERO or value > HUNDRED:
            return DiscountResult(
                amount, mode, value, True,
                f"Discount percentage {value}% is outside 0-100%.",
            )
        return DiscountResult(amount, mode, value)

    if mode is DiscountMode.TOTAL_PAYABLE:
        target = non_negative_input(value, "target payable")
        return DiscountResult(max(ZERO, sub - target), mode, value)

    # AMOUNT
    flat = non_negative_input(value, "discount amount")
    return DiscountResult(min(flat, max(sub, ZERO)), mode, value)
