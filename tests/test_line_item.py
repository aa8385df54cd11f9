from decimal import Decimal

import pytest

from jewelry_pos.modules.pricing.line_item import (
    SOURCE_CUSTOM,
    CartLineItem,
    price_cart,
    price_line_item,
)
from jewelry_pos.modules.pricing.rates import MetalRateTable


def ring(**kw) -> CartLineItem:
    base = dict(
        product_id="RNG-001",
        quantity=1,
        unit_weight_grams=Decimal("10"),
        material_name="Gold",
        material_type="22K",
        making_rate_per_gram=Decimal("300"),
    )
    base.update(kw)
    return CartLineItem(**base)


def test_line_total_breakdown(rates):
    p = price_line_item(ring(quantity=2, less_weight=Decimal("1"), va_charges=Decimal("200")), rates)
    assert p.net_weight == Decimal("9")
    assert p.material_rate == Decimal("5500")
    assert p.material_cost == Decimal("49500")
    assert p.making_charges == Decimal("2700")
    assert p.stone_amount == 0
    assert p.unit_total == Decimal("52400")
    assert p.line_total == Decimal("104800")
    assert not p.is_estimated


def test_stone_amount_needs_every_factor(rates):
    with_stones = ring(
        has_stones=True,
        stone_carat_weight=Decimal("0.5"),
        stone_rate_per_carat=Decimal("40000"),
        stone_quantity=Decimal("2"),
    )
    assert price_line_item(with_stones, rates).stone_amount == Decimal("40000")

    no_qty = ring(has_stones=True, stone_carat_weight=Decimal("0.5"), stone_rate_per_carat=Decimal("40000"))
    assert price_line_item(no_qty, rates).stone_amount == 0

    flag_off = ring(stone_carat_weight=Decimal("0.5"), stone_rate_per_carat=Decimal("1"), stone_quantity=1)
    assert price_line_item(flag_off, rates).stone_amount == 0


def test_selected_weight_overrides_unit_weight(rates):
    item = ring().with_selected_weight("12")
    assert item.total_weight == Decimal("12")
    assert price_line_item(item, rates).net_weight == Decimal("12")


def test_custom_rate_overrides_table(rates):
    p = price_line_item(ring(custom_rate=Decimal("6100")), rates)
    assert p.material_rate == Decimal("6100")
    assert p.rate_source == SOURCE_CUSTOM


def test_negative_quantity_clamped_to_zero(rates, caplog):
    p = price_line_item(ring(quantity=-3), rates)
    assert p.quantity == 0
    assert p.line_total == 0
    assert "clamped to zero" in caplog.text


@pytest.mark.parametrize("field", ["less_weight", "making_rate_per_gram", "va_charges"])
def test_negative_amounts_are_clamped(rates, field):
    clean = price_line_item(ring(), rates)
    dirty = price_line_item(ring(**{field: Decimal("-50")}), rates)
    assert dirty.line_total == clean.line_total - (Decimal("3000") if field == "making_rate_per_gram" else 0)


def test_less_weight_above_total_gives_zero_net(rates):
    p = price_line_item(ring(less_weight=Decimal("15")), rates)
    assert p.net_weight == 0
    assert p.line_total == 0


def test_unknown_material_is_estimated(rates):
    p = price_line_item(ring(material_name="Platinum", material_type="950"), rates)
    assert p.is_estimated
    assert p.material_rate == Decimal("5000")


def test_price_cart_keeps_order(rates):
    items = [ring(product_id="A"), ring(product_id="B", material_type="18K")]
    priced = price_cart(items, rates)
    assert [p.product_id for p in priced] == ["A", "B"]
    assert priced[1].material_rate == Decimal("4500")


@pytest.mark.parametrize(
    "field, low, high",
    [
        ("unit_weight_grams", "0", "0.001"),
        ("unit_weight_grams", "9.999", "10"),
        ("unit_weight_grams", "10", "250"),
        ("custom_rate", "0.01", "0.02"),
        ("custom_rate", "5000", "5000.01"),
        ("custom_rate", "5500", "9000"),
    ],
)
def test_line_total_never_drops_as_weight_or_rate_grows(rates, field, low, high):
    lo = price_line_item(ring(**{field: Decimal(low)}), rates)
    hi = price_line_item(ring(**{field: Decimal(high)}), rates)
    assert hi.line_total >= lo.line_total


@pytest.mark.parametrize("low, high", [("6000", "6000.01"), ("6000", "6600"), ("1", "60000")])
def test_line_total_never_drops_as_table_rate_grows(low, high):
    lo = price_line_item(ring(), MetalRateTable.from_ladders(rate_24k=low, rate_999="90"))
    hi = price_line_item(ring(), MetalRateTable.from_ladders(rate_24k=high, rate_999="90"))
    assert hi.line_total >= lo.line_total
