from decimal import Decimal

import pytest

from jewelry_pos.modules.pricing.payment_split import (
    PaymentSplit,
    adjusted_due,
    derive_due,
    is_valid,
    rebalance,
    status_from_paid,
    validate,
)


def test_due_is_derived():
    assert derive_due(11800, cash=5000, card=3000) == Decimal("3800")


def test_due_never_negative():
    assert derive_due(100, cash=150) == 0


def test_split_of_reconciles():
    s = PaymentSplit.of(Decimal("11800"), cash=5000, card=3000)
    assert s.due == Decimal("3800")
    assert s.paid == Decimal("8000")
    assert s.total_allocated == Decimal("11800")
    assert is_valid(s)


def test_overpayment_is_invalid():
    s = PaymentSplit.of(Decimal("11800"), cash=12000)
    v = validate(s)
    assert not v.is_valid
    assert v.overpaid_by == Decimal("200")
    assert "exceed" in v.message


def test_mismatch_is_invalid():
    s = PaymentSplit(cash=Decimal("100"), due=Decimal("50"), total_amount=Decimal("200"))
    v = validate(s)
    assert not v.is_valid
    assert v.difference == Decimal("-50")
    assert "does not match" in v.message


def test_difference_within_epsilon_is_valid():
    s = PaymentSplit(cash=Decimal("99.995"), total_amount=Decimal("100"))
    assert is_valid(s)


def test_rebalance_clamps_channels():
    s = rebalance(PaymentSplit(cash=Decimal("-50"), card=Decimal("100")), Decimal("300"))
    assert s.cash == 0
    assert s.due == Decimal("200")
    assert s.total_amount == Decimal("300")


@pytest.mark.parametrize(
    "total, cash, card, bank, online",
    [
        ("11800", "5000", "3000", "0", "0"),
        ("100", "0", "0", "0", "0"),
        ("999.99", "333.33", "333.33", "333.33", "0"),
        ("50000", "10000", "0", "25000", "14999.50"),
    ],
)
def test_rebalance_always_reconciles(total, cash, card, bank, online):
    s = rebalance(
        PaymentSplit(cash=Decimal(cash), card=Decimal(card), bank=Decimal(bank), online=Decimal(online)),
        Decimal(total),
    )
    assert s.paid + s.due == Decimal(total)
    assert is_valid(s)


def test_with_channel_rederives_due():
    s = PaymentSplit.of(Decimal("1000"), cash=400).with_channel("online", 100)
    assert s.due == Decimal("500")
    with pytest.raises(ValueError):
        s.with_channel("cheque", 10)


def test_adjusted_due_within_due():
    s = PaymentSplit.of(Decimal("1000"), cash=0)
    r = adjusted_due(s, Decimal("300"))
    assert r.value == Decimal("700")
    assert not r.is_blocking


def test_adjusted_due_negative_blocks():
    s = PaymentSplit.of(Decimal("1000"), cash=500)
    r = adjusted_due(s, Decimal("800"))
    assert r.value == Decimal("-300")
    assert r.is_blocking
    assert "redo the payment split" in r.message


@pytest.mark.parametrize(
    "total, paid, status",
    [
        ("100", "100", "paid"),
        ("100", "120", "paid"),
        ("6493.894", "6493.89", "paid"),
        ("100", "99.98", "partial"),
        ("100", "40", "partial"),
        ("100", "0", "unpaid"),
    ],
)
def test_status_from_paid(total, paid, status):
    assert status_from_paid(total, paid) == status
