from decimal import Decimal

from jewelry_pos.modules.pricing.cart import aggregate
from jewelry_pos.modules.pricing.line_item import ItemPrice


def item(total, qty=1) -> ItemPrice:
    total = Decimal(str(total))
    return ItemPrice(
        product_id="X",
        quantity=qty,
        net_weight=Decimal("0"),
        material_rate=Decimal("0"),
        rate_source="custom",
        material_cost=total,
        making_charges=Decimal("0"),
        stone_amount=Decimal("0"),
        va_charges=Decimal("0"),
        unit_total=total / qty,
        line_total=total,
    )


def test_subtotal_and_gst():
    t = aggregate([item(6000, 2), item(4000)], Decimal("18"))
    assert t.subtotal == Decimal("10000")
    assert t.gst == Decimal("1800")
    assert t.item_count == 3
    assert t.gross_total == Decimal("11800")


def test_gst_can_be_left_out():
    t = aggregate([item(10000)], Decimal("18"), gst_included=False)
    assert t.gst == 0
    assert t.gst_rate_percent == 0


def test_empty_cart():
    t = aggregate([], "18")
    assert (t.subtotal, t.gst, t.item_count) == (0, 0, 0)


def test_negative_gst_rate_clamped():
    assert aggregate([item(100)], "-5").gst == 0
