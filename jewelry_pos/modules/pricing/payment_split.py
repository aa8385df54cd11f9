"""
pricing/payment_split.py

Allocation of a payable total across cash / card / bank / online, with the
due (credit) amount always derived from the other four:

    due = max(0, total_amount - (cash + card + bank + online))

A split is valid iff cash + card + bank + online + due == total_amount within
EPSILON and nothing is overpaid. Every rule violation comes back as a
SplitValidation / AdjustedDue value with a message; nothing here raises.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal

from ...constants import EPSILON
from .money import ZERO, clamp_non_negative, non_negative_input, to_decimal

__all__ = [
    "PaymentSplit",
    "SplitValidation",
    "AdjustedDue",
    "derive_due",
    "rebalance",
    "validate",
    "is_valid",
    "adjusted_due",
    "status_from_paid",
]

_EPS = Decimal(EPSILON)


@dataclass(frozen=True)
class PaymentSplit:
    cash: Decimal = ZERO
    card: Decimal = ZERO
    bank: Decimal = ZERO
    online: Decimal = ZERO
    due: Decimal = ZERO
    total_amount: Decimal = ZERO

    @property
    def paid(self) -> Decimal:
        return self.cash + self.card + self.bank + self.online

    @property
    def total_allocated(self) -> Decimal:
        return self.paid + self.due

    @classmethod
    def of(cls, total_amount, *, cash=0, card=0, bank=0, online=0) -> "PaymentSplit":
        """Build a split with the due already derived."""
        return rebalance(
            cls(
                cash=to_decimal(cash),
                card=to_decimal(card),
                bank=to_decimal(bank),
                online=to_decimal(online),
            ),
            total_amount,
        )

    def with_channel(self, channel: str, amount) -> "PaymentSplit":
        """Replace one channel and re-derive the due."""
        if channel not in ("cash", "card", "bank", "online"):
            raise ValueError(f"Unknown payment channel: {channel!r}")
        return rebalance(replace(self, **{channel: to_decimal(amount)}), self.total_amount)


@dataclass(frozen=True)
class SplitValidation:
    is_valid: bool
    paid: Decimal
    due: Decimal
    total_amount: Decimal
    difference: Decimal
    overpaid_by: Decimal = ZERO
    message: str = ""


@dataclass(frozen=True)
class AdjustedDue:
    value: Decimal
    is_blocking: bool
    message: str = ""


def derive_due(total_amount, cash=0, card=0, bank=0, online=0) -> Decimal:
    paid = to_decimal(cash) + to_decimal(card) + to_decimal(bank) + to_decimal(online)
    return clamp_non_negative(to_decimal(total_amount) - paid)


def rebalance(split: PaymentSplit, total_amount) -> PaymentSplit:
    """
    Return a new split for `total_amount` with channels clamped at >= 0 and
    the due re-derived. The input split is not modified.
    """
    cash = non_negative_input(split.cash, "cash amount")
    card = non_negative_input(split.card, "card amount")
    bank = non_negative_input(split.bank, "bank amount")
    online = non_negative_input(split.online, "online amount")
    total = to_decimal(total_amount)
    return PaymentSplit(
        cash=cash,
        card=card,
        bank=bank,
        online=online,
        due=derive_due(total, cash, card, bank, online),
        total_amount=total,
    )


def validate(split: PaymentSplit, epsilon=_EPS) -> SplitValidation:
    eps = to_decimal(epsilon)
    paid = split.paid
    total = to_decimal(split.total_amount)
    difference = paid + split.due - total
    overpaid_by = clamp_non_negative(paid - total)

    if overpaid_by >= eps:
        msg = f"Payments exceed the total by {overpaid_by:,.2f}."
        return SplitValidation(False, paid, split.due, total, difference, overpaid_by, msg)
    if abs(difference) >= eps:
        msg = (
            f"Payment breakdown {paid + split.due:,.2f} does not match "
            f"the total {total:,.2f}."
        )
        return SplitValidation(False, paid, split.due, total, difference, ZERO, msg)
    return SplitValidation(True, paid, split.due, total, difference)


def is_valid(split: PaymentSplit, epsilon=_EPS) -> bool:
    return validate(split, epsilon).is_valid


def adjusted_due(split: PaymentSplit, new_discount_amount) -> AdjustedDue:
    """
    Due left after a discount applied once the split was already confirmed.
    A negative value means the customer has overpaid: the split must be redone
    before the order can be confirmed.
    """
    value = to_decimal(split.due) - to_decimal(new_discount_amount)
    if value < ZERO:
        return AdjustedDue(
            value,
            True,
            f"Discount exceeds the due amount by {-value:,.2f}; redo the payment split.",
        )
    return AdjustedDue(value, False)


def status_from_paid(total, paid, epsilon=_EPS) -> str:
    """
    Badge for order persistence:
      - 'paid'    if paid >= total (within epsilon, like validate())
      - 'partial' if 0 < paid < total
      - 'unpaid'  if paid == 0
    """
    total = to_decimal(total)
    paid = to_decimal(paid)
    if paid > total - to_decimal(epsilon):
        return "paid"
    if paid > ZERO:
        return "partial"
    return "unpaid"
