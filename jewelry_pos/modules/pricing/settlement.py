"""
pricing/settlement.py

The full pricing pipeline as one pure function:

    rates -> line prices -> subtotal + GST -> discount -> exchange credit -> payment split

settle() is cheap and side-effect free; callers run it again on every edit
(rate, quantity, discount, exchange, split) instead of patching a previous
result. Business-rule problems come back as flags and warnings on the result,
never as exceptions.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Optional, Tuple

from ...config import PricingSettings
from .cart import aggregate
from .discount import DiscountResult, DiscountSpec, apply_discount
from .exchange import ExchangeGold
from .line_item import CartLineItem, ItemPrice, price_cart
from .money import ZERO, clamp_non_negative, round_rupee
from .payment_split import PaymentSplit, SplitValidation, rebalance, validate
from .rates import MetalRateTable

__all__ = ["NegativePayableWarning", "SettlementResult", "settle"]


@dataclass(frozen=True)
class NegativePayableWarning:
    """Discount and/or exchange credit took the payable total below zero."""
    overrun: Decimal
    cause: str

    @property
    def message(self) -> str:
        return (
            f"Payable total is negative by {self.overrun:,.2f} "
            f"({self.cause}); reduce it before confirming."
        )


@dataclass(frozen=True)
class SettlementResult:
    items: Tuple[ItemPrice, ...]
    subtotal: Decimal
    discount: DiscountResult
    gst_rate_percent: Decimal
    gst: Decimal
    exchange_credit: Decimal
    final_total: Decimal
    payment_split: PaymentSplit
    split_validation: SplitValidation
    negative_payable: Optional[NegativePayableWarning] = None
    warnings: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def discount_amount(self) -> Decimal:
        return self.discount.amount

    @property
    def payable(self) -> Decimal:
        """Amount the split is allocated against (never negative)."""
        return clamp_non_negative(self.final_total)

    @property
    def net_amount(self) -> Decimal:
        """final_total rounded to the rupee, as printed on the invoice."""
        return round_rupee(self.final_total)

    @property
    def round_off(self) -> Decimal:
        return self.net_amount - self.final_total

    @property
    def has_estimated_prices(self) -> bool:
        return any(it.is_estimated for it in self.items)

    @property
    def blocking_messages(self) -> Tuple[str, ...]:
        msgs = []
        if self.negative_payable is not None:
            msgs.append(self.negative_payable.message)
        if not self.split_validation.is_valid:
            msgs.append(self.split_validation.message)
        return tuple(msgs)

    @property
    def can_confirm(self) -> bool:
        return not self.blocking_messages


def _cause(discount_amount: Decimal, exchange_credit: Decimal, before_credits: Decimal) -> str:
    if exchange_credit <= ZERO:
        return "discount"
    if discount_amount <= ZERO or before_credits - discount_amount >= ZERO:
        # the discount alone still left something to pay
        return "exchange"
    return "discount+exchange"


def settle(
    items: Iterable[CartLineItem],
    rates: MetalRateTable,
    discount: Optional[DiscountSpec] = None,
    exchange: Optional[ExchangeGold] = None,
    split: Optional[PaymentSplit] = None,
    settings: Optional[PricingSettings] = None,
    *,
    gst_included: bool = True,
) -> SettlementResult:
    settings = settings or PricingSettings()

    priced = tuple(price_cart(items, rates))
    totals = aggregate(priced, settings.gst_rate_percent, gst_included)
    disc = apply_discount(totals.subtotal, discount)
    credit = exchange.value if exchange is not None else ZERO

    before_credits = totals.subtotal + totals.gst
    final_total = before_credits - disc.amount - credit

    warnings = []
    negative = None
    if final_total < ZERO:
        negative = NegativePayableWarning(-final_total, _cause(disc.amount, credit, before_credits))
        warnings.append(negative.message)
    if disc.out_of_range:
        warnings.append(disc.message)
    estimated = [it.product_id for it in priced if it.is_estimated]
    if estimated:
        warnings.append(
            "Estimated price (default gold rate) for: " + ", ".join(estimated) + "."
        )

    payable = clamp_non_negative(final_total)
    rebalanced = rebalance(split if split is not None else PaymentSplit(), payable)

    return SettlementResult(
        items=priced,
        subtotal=totals.subtotal,
        discount=disc,
        gst_rate_percent=totals.gst_rate_percent,
        gst=totals.gst,
        exchange_credit=credit,
        final_total=final_total,
        payment_split=rebalanced,
        split_validation=validate(rebalanced, settings.epsilon),
        negative_payable=negative,
        warnings=tuple(warnings),
    )
