from PySide6.QtCore import Signal
from PySide6.QtWidgets import QWidget
from dataclasses import replace
from decimal import Decimal
import logging
import sqlite3

from ..base_module import BaseModule
from ..pricing.discount import DiscountMode, DiscountSpec, apply_discount
from ..pricing.exchange import ExchangeGold
from ..pricing.line_item import CartLineItem
from ..pricing.money import ZERO, to_decimal
from ..pricing.payment_split import AdjustedDue, PaymentSplit, adjusted_due, status_from_paid
from ..pricing.settlement import SettlementResult, settle
from ...config import PricingSettings
from ...database.repositories.customers_repo import CustomersRepo
from ...database.repositories.customers_repo import DomainError as CustomersDomainError
from ...database.repositories.metal_rates_repo import MetalRatesRepo
from ...database.repositories.metal_rates_repo import DomainError as RatesDomainError
from ...database.repositories.orders_repo import OrderHeader, OrderItem, OrdersRepo
from ...database.repositories.orders_repo import DomainError as OrdersDomainError
from ...database.repositories.products_repo import DomainError, ProductsRepo
from ...utils.helpers import fmt_money, today_str
from ...utils.ui_helpers import error, info, warn
from ...utils.validators import parse_decimal, try_parse_decimal

_log = logging.getLogger(__name__)

# every repository raises its own DomainError
DOMAIN_ERRORS = (DomainError, CustomersDomainError, RatesDomainError, OrdersDomainError)


class CheckoutController(BaseModule):
    """
    One checkout session: cart, discount, GST toggle, old-gold exchange and
    payment split.

    Every edit re-runs the whole settlement against a fresh rate snapshot and
    emits settlementChanged with the new SettlementResult. Nothing is written
    to the database until confirm().
    """

    settlementChanged = Signal(object)

    def __init__(self, conn: sqlite3.Connection, settings: PricingSettings | None = None):
        super().__init__()
        self.conn = conn
        self.settings = settings or PricingSettings.from_env()
        self.rates = MetalRatesRepo(conn)
        self.products = ProductsRepo(conn)
        self.customers = CustomersRepo(conn)
        self.orders = OrdersRepo(conn)

        self._items: list[CartLineItem] = []
        self.discount: DiscountSpec | None = None
        self.exchange: ExchangeGold | None = None
        self.split = PaymentSplit()
        self.gst_included = True
        self.customer_id: int | None = None

        self.view = None
        self.result: SettlementResult = self.recompute()

    # ------------------------------------------------------------------
    # Session state
    # ------------------------------------------------------------------
    @property
    def items(self) -> tuple[CartLineItem, ...]:
        return tuple(self._items)

    def recompute(self) -> SettlementResult:
        self.result = settle(
            self._items,
            self.rates.snapshot(self.settings),
            discount=self.discount,
            exchange=self.exchange,
            split=self.split,
            settings=self.settings,
            gst_included=self.gst_included,
        )
        self.split = self.result.payment_split
        self.settlementChanged.emit(self.result)
        return self.result

    def _check_stock(self, product_id: str, wanted: int):
        p = self.products.get(product_id)
        if p is None:
            raise DomainError(f"Product {product_id} not found.")
        if wanted > p.stock_quantity:
            raise DomainError(
                f"Only {p.stock_quantity} of {p.name} in stock ({wanted} requested)."
            )

    def _row(self, row: int) -> CartLineItem:
        if not 0 <= row < len(self._items):
            raise DomainError(f"No cart line at position {row + 1}.")
        return self._items[row]

    def add_product(self, product_id: str, quantity: int = 1) -> SettlementResult:
        product_id = (product_id or "").strip()
        if quantity < 1:
            raise DomainError("Quantity must be at least 1.")
        for i, it in enumerate(self._items):
            if it.product_id == product_id:
                self._check_stock(product_id, it.quantity + quantity)
                self._items[i] = it.with_quantity(it.quantity + quantity)
                return self.recompute()
        self._check_stock(product_id, quantity)
        self._items.append(self.products.to_cart_item(product_id, quantity))
        return self.recompute()

    def set_quantity(self, row: int, quantity: int) -> SettlementResult:
        item = self._row(row)
        if quantity < 1:
            raise DomainError("Quantity must be at least 1.")
        self._check_stock(item.product_id, quantity)
        self._items[row] = item.with_quantity(quantity)
        return self.recompute()

    def set_selected_weight(self, row: int, weight) -> SettlementResult:
        self._items[row] = self._row(row).with_selected_weight(weight)
        return self.recompute()

    def set_custom_rate(self, row: int, rate) -> SettlementResult:
        self._items[row] = replace(self._row(row), custom_rate=to_decimal(rate))
        return self.recompute()

    def remove_item(self, row: int) -> SettlementResult:
        self._row(row)
        del self._items[row]
        return self.recompute()

    def set_discount(self, spec: DiscountSpec | None) -> AdjustedDue:
        """
        Apply a discount. When payments were already split, the returned
        AdjustedDue tells whether the discount still fits inside the due.
        """
        prev = self.result.payment_split
        old = self.result.discount_amount
        new = apply_discount(self.result.subtotal, spec).amount
        impact = adjusted_due(prev, new - old)
        self.discount = spec
        self.recompute()
        if impact.is_blocking and prev.paid > ZERO:
            _log.warning(impact.message)
        return impact

    def set_gst_included(self, included: bool) -> SettlementResult:
        self.gst_included = bool(included)
        return self.recompute()

    def set_exchange(self, exchange: ExchangeGold | None) -> SettlementResult:
        self.exchange = exchange
        return self.recompute()

    def set_split(self, *, cash=0, card=0, bank=0, online=0) -> SettlementResult:
        self.split = PaymentSplit.of(self.result.payable, cash=cash, card=card, bank=bank, online=online)
        return self.recompute()

    def apply_split(self, split: PaymentSplit) -> SettlementResult:
        self.split = split
        return self.recompute()

    def set_customer(self, customer_id: int | None) -> SettlementResult:
        if customer_id is not None and self.customers.get(customer_id) is None:
            raise DomainError(f"Customer #{customer_id} not found.")
        self.customer_id = customer_id
        return self.recompute()

    def clear(self) -> SettlementResult:
        self._items = []
        self.discount = None
        self.exchange = None
        self.split = PaymentSplit()
        self.gst_included = True
        self.customer_id = None
        return self.recompute()

    # ------------------------------------------------------------------
    # Confirmation
    # ------------------------------------------------------------------
    def _build_order(self, order_id: str, date: str, r: SettlementResult):
        split = r.payment_split
        spec = self.discount
        eps = self.settings.epsilon
        # sub-epsilon remainders are rounding, not credit
        due = split.due if split.due >= eps else ZERO
        header = OrderHeader(
            order_id=order_id,
            customer_id=self.customer_id,
            date=date,
            subtotal=r.subtotal,
            discount_mode=r.discount.mode.value if spec is not None else None,
            discount_value=r.discount.value if spec is not None else ZERO,
            discount_amount=r.discount_amount,
            gst_rate_percent=r.gst_rate_percent,
            gst_amount=r.gst,
            exchange_credit=r.exchange_credit,
            final_total=r.final_total,
            round_off=r.round_off,
            net_amount=r.net_amount,
            cash=split.cash,
            card=split.card,
            bank=split.bank,
            online=split.online,
            due=due,
            paid_amount=split.paid,
            payment_status=status_from_paid(r.payable, split.paid, eps),
        )
        items = [
            OrderItem(
                item_id=None,
                order_id=order_id,
                product_id=it.product_id,
                name=it.name,
                quantity=it.quantity,
                net_weight=it.net_weight,
                material_rate=it.material_rate,
                rate_source=it.rate_source,
                material_cost=it.material_cost,
                making_charges=it.making_charges,
                stone_amount=it.stone_amount,
                va_charges=it.va_charges,
                line_total=it.line_total,
            )
            for it in r.items
        ]
        return header, items

    def confirm(self, date: str | None = None, notes: str | None = None) -> str:
        """Persist the current settlement as a confirmed order and start a new session."""
        r = self.recompute()
        if not r.items:
            raise DomainError("Cart is empty.")
        if not r.can_confirm:
            raise DomainError("\n".join(r.blocking_messages))

        date = date or today_str()
        header, items = self._build_order(self.orders.new_order_id(date), date, r)
        header.notes = notes
        order_id = self.orders.save_order(header, items)
        _log.info("Checkout confirmed %s for customer %s", order_id, self.customer_id)
        self.clear()
        return order_id

    # ------------------------------------------------------------------
    # UI
    # ------------------------------------------------------------------
    def get_widget(self) -> QWidget:
        if self.view is None:
            from .view import CheckoutView

            self.view = CheckoutView()
            self._wire()
            self._reload_customers()
            self._show(self.result)
        return self.view

    def _wire(self):
        v = self.view
        v.btn_add.clicked.connect(self._on_add)
        v.btn_remove.clicked.connect(self._on_remove)
        v.btn_apply_discount.clicked.connect(self._on_apply_discount)
        v.chk_gst.toggled.connect(self.set_gst_included)
        v.btn_apply_exchange.clicked.connect(self._on_apply_exchange)
        v.btn_split.clicked.connect(self._on_split)
        v.btn_update_rates.clicked.connect(self._on_update_rates)
        v.btn_confirm.clicked.connect(self._on_confirm)
        v.cmb_customer.currentIndexChanged.connect(self._on_customer_changed)
        self.settlementChanged.connect(self._show)

    def _reload_customers(self):
        cmb = self.view.cmb_customer
        cmb.blockSignals(True)
        cmb.clear()
        cmb.addItem("Walk-in customer", None)
        for c in self.customers.list_customers():
            label = c.name if c.balance == ZERO else f"{c.name} (owes {fmt_money(c.balance)})"
            cmb.addItem(label, c.customer_id)
        cmb.blockSignals(False)

    def _show(self, result: SettlementResult):
        if self.view is not None:
            self.view.show_result(result)

    def _read_decimal(self, widget, label: str) -> Decimal | None:
        ok, value = try_parse_decimal(widget.text())
        if not ok:
            error(self.view, "Invalid number", f"{label}: '{widget.text()}' is not a number.")
            return None
        return value

    def _on_add(self):
        code = self.view.txt_product.text().strip()
        if not code:
            return
        try:
            self.add_product(code, self.view.spin_qty.value())
        except DOMAIN_ERRORS as e:
            warn(self.view, "Cannot add item", str(e))
            return
        self.view.txt_product.clear()

    def _on_remove(self):
        row = self.view.selected_row()
        if row is not None:
            self.remove_item(row)

    def _on_customer_changed(self, _idx: int):
        self.set_customer(self.view.cmb_customer.currentData())

    def _on_apply_discount(self):
        mode = self.view.cmb_discount_mode.currentData()
        if mode is None:
            self.set_discount(None)
            return
        value = self._read_decimal(self.view.txt_discount, "Discount")
        if value is None:
            return
        had_payments = self.split.paid > ZERO
        impact = self.set_discount(DiscountSpec(DiscountMode(mode), value))
        if impact.is_blocking and had_payments:
            warn(self.view, "Discount", impact.message)

    def _on_apply_exchange(self):
        v = self.view
        weight = self._read_decimal(v.txt_exchange_weight, "Exchange weight")
        rate = self._read_decimal(v.txt_exchange_rate, "Exchange rate")
        tunch = self._read_decimal(v.txt_exchange_tunch, "Tunch")
        if weight is None or rate is None or tunch is None:
            return
        if weight == ZERO:
            self.set_exchange(None)
            return
        # blank tunch reads as fine metal; an explicit 0 stays worthless
        if not v.txt_exchange_tunch.text().strip():
            tunch = Decimal("100")
        self.set_exchange(ExchangeGold(weight_grams=weight, rate_per_gram=rate, tunch=tunch))

    def _on_split(self):
        from .payment_split_form import PaymentSplitForm

        form = PaymentSplitForm(self.view, total_amount=self.result.payable, initial=self.split)
        if form.exec():
            self.apply_split(form.payload())

    def _on_update_rates(self):
        v = self.view
        try:
            if v.txt_rate_24k.text().strip():
                self.rates.update_gold_rates(parse_decimal(v.txt_rate_24k.text()))
            if v.txt_rate_999.text().strip():
                self.rates.update_silver_rates(parse_decimal(v.txt_rate_999.text()))
        except (ValueError, RatesDomainError) as e:
            error(v, "Rates", str(e))
            return
        self.recompute()

    def _on_confirm(self):
        try:
            order_id = self.confirm()
        except DOMAIN_ERRORS as e:
            warn(self.view, "Cannot confirm", str(e))
            return
        self.view.reset_inputs()
        self._reload_customers()
        info(self.view, "Order confirmed", f"Order {order_id} saved.")
