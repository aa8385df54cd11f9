# tests/test_checkout_ui.py
from decimal import Decimal

import pytest

pytest.importorskip("PySide6")

from PySide6.QtCore import Qt

from jewelry_pos.database.repositories.metal_rates_repo import MetalRatesRepo
from jewelry_pos.database.repositories.products_repo import ProductsRepo
from jewelry_pos.modules.checkout.controller import CheckoutController
from jewelry_pos.modules.checkout.model import CartItemsTableModel
from jewelry_pos.modules.checkout.payment_split_form import PaymentSplitForm
from jewelry_pos.modules.pricing.line_item import CartLineItem, price_line_item
from jewelry_pos.modules.pricing.payment_split import PaymentSplit


# ---------------- PaymentSplitForm ----------------

def test_split_form_derives_due_and_enables_ok(qtbot):
    form = PaymentSplitForm(total_amount=Decimal("11800"))
    qtbot.addWidget(form)
    form.inputs["cash"].setText("5000")
    form.inputs["card"].setText("3,000")

    assert form.due.text() == "3,800.00"
    assert form.due.isReadOnly()
    assert form.btn_ok.isEnabled()

    form.accept()
    split = form.payload()
    assert split.cash == Decimal("5000")
    assert split.card == Decimal("3000")
    assert split.due == Decimal("3800")
    assert split.total_amount == Decimal("11800")


def test_split_form_blocks_overpayment(qtbot):
    form = PaymentSplitForm(total_amount=Decimal("1000"))
    qtbot.addWidget(form)
    form.inputs["cash"].setText("800")
    form.inputs["online"].setText("300")
    assert not form.btn_ok.isEnabled()
    assert "exceed" in form.lbl_status.text()
    assert form.due.text() == "0.00"


@pytest.mark.parametrize("text, message", [("abc", "not a number"), ("-5", "cannot be negative")])
def test_split_form_rejects_bad_input(qtbot, text, message):
    form = PaymentSplitForm(total_amount=Decimal("1000"))
    qtbot.addWidget(form)
    form.inputs["bank"].setText(text)
    assert not form.btn_ok.isEnabled()
    assert message in form.lbl_status.text()
    assert form._validate()[0] is False


def test_split_form_prefills_from_initial(qtbot):
    form = PaymentSplitForm(
        total_amount=Decimal("1000"), initial=PaymentSplit.of(Decimal("1000"), cash=250, online=50)
    )
    qtbot.addWidget(form)
    assert form.inputs["cash"].text() == "250.00"
    assert form.inputs["card"].text() == ""
    assert form.due.text() == "700.00"


# ---------------- CartItemsTableModel ----------------

def test_cart_model_rows(qtbot, rates):
    priced = [
        price_line_item(
            CartLineItem("RNG-001", unit_weight_grams=Decimal("10"), material_name="Gold",
                         material_type="22K", name="Plain Band"),
            rates,
        ),
        price_line_item(CartLineItem("PT-1", unit_weight_grams=Decimal("1"), material_type="Platinum"), rates),
    ]
    model = CartItemsTableModel()
    model.replace(priced)

    assert model.rowCount() == 2
    assert model.columnCount() == len(CartItemsTableModel.HEADERS)
    assert model.data(model.index(0, 1)) == "Plain Band"
    assert model.data(model.index(0, 8)) == "55,000.00"
    assert model.data(model.index(1, 1)) == "PT-1"
    assert model.data(model.index(1, 4)).endswith("*")
    assert "Estimated" in model.data(model.index(1, 4), Qt.ToolTipRole)
    assert model.data(model.index(0, 4), Qt.ToolTipRole) is None
    assert model.headerData(8, Qt.Horizontal) == "Line Total"


# ---------------- CheckoutView via controller ----------------

@pytest.fixture()
def view_ctrl(qtbot, conn, settings):
    MetalRatesRepo(conn).update_gold_rates(Decimal("6000"))
    ProductsRepo(conn).create(
        "RNG-001", "Plain Band", weight_grams=Decimal("10"),
        making_rate_per_gram=Decimal("100"), stock_quantity=3,
    )
    ctrl = CheckoutController(conn, settings)
    w = ctrl.get_widget()
    qtbot.addWidget(w)
    return ctrl, ctrl.view


def test_add_from_view_updates_totals(qtbot, view_ctrl):
    ctrl, v = view_ctrl
    assert not v.btn_confirm.isEnabled()

    v.txt_product.setText("RNG-001")
    v.btn_add.click()

    assert v.model.rowCount() == 1
    assert v.txt_product.text() == ""
    assert v.totals["subtotal"].text() == "56,000.00"
    assert v.totals["gst"].text() == "10,080.00 (18%)"
    assert v.totals["net"].text() == "₹66,080"
    assert v.totals["due"].text() == "66,080.00"
    assert v.btn_confirm.isEnabled()


def test_gst_toggle_and_discount_from_view(qtbot, view_ctrl):
    ctrl, v = view_ctrl
    ctrl.add_product("RNG-001")

    v.chk_gst.setChecked(False)
    assert v.totals["gst"].text() == "0.00 (0%)"
    assert ctrl.result.final_total == Decimal("56000")

    v.cmb_discount_mode.setCurrentIndex(v.cmb_discount_mode.findData("percentage"))
    v.txt_discount.setText("10")
    v.btn_apply_discount.click()
    assert v.totals["discount"].text() == "-5,600.00"
    assert ctrl.result.final_total == Decimal("50400")


def test_exchange_overrun_disables_confirm(qtbot, view_ctrl):
    ctrl, v = view_ctrl
    ctrl.add_product("RNG-001")
    v.txt_exchange_weight.setText("20")
    v.txt_exchange_rate.setText("6000")
    v.btn_apply_exchange.click()

    assert ctrl.result.exchange_credit == Decimal("120000")
    assert "negative" in v.lbl_warnings.text()
    assert not v.btn_confirm.isEnabled()


def test_customer_combo_lists_walk_in_first(view_ctrl):
    _, v = view_ctrl
    assert v.cmb_customer.itemText(0) == "Walk-in customer"
    assert v.cmb_customer.itemData(0) is None


@pytest.mark.parametrize("tunch, credit", [("", "60000"), ("91.6", "54960"), ("0", "0")])
def test_exchange_tunch_from_view(qtbot, view_ctrl, tunch, credit):
    ctrl, v = view_ctrl
    ctrl.add_product("RNG-001")
    v.txt_exchange_weight.setText("10")
    v.txt_exchange_rate.setText("6000")
    v.txt_exchange_tunch.setText(tunch)
    v.btn_apply_exchange.click()
    assert ctrl.result.exchange_credit == Decimal(credit)
