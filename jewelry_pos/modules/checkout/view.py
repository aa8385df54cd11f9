from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QGridLayout, QPushButton, QLineEdit,
    QLabel, QGroupBox, QComboBox, QCheckBox, QSpinBox
)
from PySide6.QtCore import Qt
from ...widgets.table_view import TableView
from ...utils.helpers import fmt_money, fmt_rupees
from .model import CartItemsTableModel


class CheckoutView(QWidget):
    """
    Cart on the left, adjustments and totals on the right. Pure layout: the
    CheckoutController connects the buttons and pushes every SettlementResult
    through show_result().
    """

    def __init__(self, parent=None):
        super().__init__(parent)
        root = QHBoxLayout(self)

        # --- Cart ---
        left = QVBoxLayout()
        bar = QHBoxLayout()
        self.txt_product = QLineEdit()
        self.txt_product.setPlaceholderText("Product code")
        self.spin_qty = QSpinBox()
        self.spin_qty.setRange(1, 999)
        self.btn_add = QPushButton("Add")
        self.btn_remove = QPushButton("Remove")
        bar.addWidget(self.txt_product, 1)
        bar.addWidget(QLabel("Qty"))
        bar.addWidget(self.spin_qty)
        bar.addWidget(self.btn_add)
        bar.addWidget(self.btn_remove)
        left.addLayout(bar)

        self.table = TableView()
        self.model = CartItemsTableModel([])
        self.table.setModel(self.model)
        left.addWidget(self.table, 1)

        self.lbl_warnings = QLabel("")
        self.lbl_warnings.setWordWrap(True)
        self.lbl_warnings.setStyleSheet("color: #b45309;")
        left.addWidget(self.lbl_warnings)
        root.addLayout(left, 3)

        # --- Adjustments ---
        right = QVBoxLayout()

        box_cust = QGroupBox("Customer")
        cl = QVBoxLayout(box_cust)
        self.cmb_customer = QComboBox()
        cl.addWidget(self.cmb_customer)
        right.addWidget(box_cust)

        box_rates = QGroupBox("Today's Rates")
        rg = QGridLayout(box_rates)
        self.txt_rate_24k = QLineEdit()
        self.txt_rate_24k.setPlaceholderText("Gold 24K / g")
        self.txt_rate_999 = QLineEdit()
        self.txt_rate_999.setPlaceholderText("Silver 999 / g")
        self.btn_update_rates = QPushButton("Update")
        rg.addWidget(self.txt_rate_24k, 0, 0)
        rg.addWidget(self.txt_rate_999, 0, 1)
        rg.addWidget(self.btn_update_rates, 0, 2)
        right.addWidget(box_rates)

        box_disc = QGroupBox("Discount")
        dl = QHBoxLayout(box_disc)
        self.cmb_discount_mode = QComboBox()
        self.cmb_discount_mode.addItem("None", None)
        self.cmb_discount_mode.addItem("Amount", "amount")
        self.cmb_discount_mode.addItem("Percentage", "percentage")
        self.cmb_discount_mode.addItem("Total payable", "total_payable")
        self.txt_discount = QLineEdit()
        self.txt_discount.setPlaceholderText("0")
        self.btn_apply_discount = QPushButton("Apply")
        dl.addWidget(self.cmb_discount_mode)
        dl.addWidget(self.txt_discount, 1)
        dl.addWidget(self.btn_apply_discount)
        right.addWidget(box_disc)

        box_ex = QGroupBox("Old Gold Exchange")
        eg = QGridLayout(box_ex)
        self.txt_exchange_weight = QLineEdit()
        self.txt_exchange_weight.setPlaceholderText("Weight (g)")
        self.txt_exchange_rate = QLineEdit()
        self.txt_exchange_rate.setPlaceholderText("Rate / g")
        self.txt_exchange_tunch = QLineEdit()
        self.txt_exchange_tunch.setPlaceholderText("Tunch % (100)")
        self.btn_apply_exchange = QPushButton("Apply")
        eg.addWidget(self.txt_exchange_weight, 0, 0)
        eg.addWidget(self.txt_exchange_rate, 0, 1)
        eg.addWidget(self.txt_exchange_tunch, 1, 0)
        eg.addWidget(self.btn_apply_exchange, 1, 1)
        right.addWidget(box_ex)

        self.chk_gst = QCheckBox("Include GST")
        self.chk_gst.setChecked(True)
        right.addWidget(self.chk_gst)

        # --- Totals ---
        box_tot = QGroupBox("Totals")
        tg = QGridLayout(box_tot)
        self.totals: dict[str, QLabel] = {}
        rows = [
            ("subtotal", "Subtotal"),
            ("discount", "Discount"),
            ("gst", "GST"),
            ("exchange", "Exchange credit"),
            ("final", "Total"),
            ("round_off", "Round off"),
            ("net", "Net amount"),
            ("paid", "Paid"),
            ("due", "Due"),
        ]
        for i, (key, label) in enumerate(rows):
            value = QLabel("0.00")
            value.setAlignment(Qt.AlignRight | Qt.AlignVCenter)
            self.totals[key] = value
            tg.addWidget(QLabel(label), i, 0)
            tg.addWidget(value, i, 1)
        right.addWidget(box_tot)

        self.btn_split = QPushButton("Payment Split…")
        self.btn_confirm = QPushButton("Confirm Order")
        self.btn_confirm.setEnabled(False)
        right.addWidget(self.btn_split)
        right.addWidget(self.btn_confirm)
        right.addStretch(1)
        root.addLayout(right, 2)

    def selected_row(self) -> int | None:
        idx = self.table.currentIndex()
        return idx.row() if idx.isValid() else None

    def reset_inputs(self):
        for w in (self.txt_discount, self.txt_exchange_weight, self.txt_exchange_rate, self.txt_exchange_tunch):
            w.clear()
        self.cmb_discount_mode.setCurrentIndex(0)
        self.chk_gst.setChecked(True)

    def show_result(self, r):
        """Render a SettlementResult."""
        self.model.replace(r.items)
        self.table.resizeColumnsToContents()

        t = self.totals
        t["subtotal"].setText(fmt_money(r.subtotal))
        t["discount"].setText(f"-{fmt_money(r.discount_amount)}")
        t["gst"].setText(f"{fmt_money(r.gst)} ({fmt_money(r.gst_rate_percent, 0)}%)")
        t["exchange"].setText(f"-{fmt_money(r.exchange_credit)}")
        t["final"].setText(fmt_money(r.final_total))
        t["round_off"].setText(fmt_money(r.round_off))
        t["net"].setText(fmt_rupees(r.net_amount))
        t["paid"].setText(fmt_money(r.payment_split.paid))
        t["due"].setText(fmt_money(r.payment_split.due))

        messages = list(r.warnings)
        if not r.split_validation.is_valid:
            messages.append(r.split_validation.message)
        self.lbl_warnings.setText("\n".join(messages))
        self.btn_confirm.setEnabled(bool(r.items) and r.can_confirm)
