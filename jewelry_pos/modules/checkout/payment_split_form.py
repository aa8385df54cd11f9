from PySide6.QtWidgets import (
    QDialog,
    QDialogButtonBox,
    QVBoxLayout,
    QGroupBox,
    QLabel,
    QGridLayout,
    QLineEdit,
    QMessageBox,
)
from decimal import Decimal

from ..pricing.money import ZERO, to_decimal
from ..pricing.payment_split import PaymentSplit, rebalance, validate
from ...utils.helpers import fmt_money
from ...utils.validators import try_parse_decimal


class PaymentSplitForm(QDialog):
    """
    Split the payable amount across cash / card / bank / online.

    Due is never typed: it is whatever the four channels leave unpaid. OK is
    only enabled while the split reconciles with the total.
    """

    CHANNELS = (
        ("cash", "Cash"),
        ("card", "Card"),
        ("bank", "Bank Transfer"),
        ("online", "Online / UPI"),
    )

    def __init__(self, parent=None, *, total_amount, initial: PaymentSplit | None = None):
        super().__init__(parent)
        self.setWindowTitle("Payment Split")
        self.setModal(True)
        self._total = to_decimal(total_amount)
        self._payload = None

        outer = QVBoxLayout(self)
        outer.setContentsMargins(12, 12, 12, 12)
        outer.setSpacing(10)

        box_sum = QGroupBox("Payable")
        sum_lay = QVBoxLayout(box_sum)
        self.lbl_total = QLabel(f"Total: {fmt_money(self._total)}")
        sum_lay.addWidget(self.lbl_total)
        outer.addWidget(box_sum)

        box_pay = QGroupBox("Payment Details")
        grid = QGridLayout(box_pay)
        grid.setHorizontalSpacing(12)
        grid.setVerticalSpacing(8)

        self.inputs: dict[str, QLineEdit] = {}
        for row, (key, label) in enumerate(self.CHANNELS):
            edit = QLineEdit()
            edit.setPlaceholderText("0.00")
            if initial is not None and getattr(initial, key) > ZERO:
                edit.setText(f"{getattr(initial, key):.2f}")
            self.inputs[key] = edit
            grid.addWidget(QLabel(label), row, 0)
            grid.addWidget(edit, row, 1)

        self.due = QLineEdit()
        self.due.setReadOnly(True)
        grid.addWidget(QLabel("Due (credit)"), len(self.CHANNELS), 0)
        grid.addWidget(self.due, len(self.CHANNELS), 1)
        outer.addWidget(box_pay, 1)

        self.lbl_status = QLabel("")
        self.lbl_status.setWordWrap(True)
        outer.addWidget(self.lbl_status)

        bb = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        self.btn_ok = bb.button(QDialogButtonBox.Ok)
        self.btn_ok.setText("Apply Split")
        bb.accepted.connect(self.accept)
        bb.rejected.connect(self.reject)
        outer.addWidget(bb)

        # wiring
        for edit in self.inputs.values():
            edit.textChanged.connect(self._on_changed)

        self._on_changed()
        self.resize(420, 320)

    # --- helpers ---------------------------------------------------------

    def _read(self) -> tuple[bool, PaymentSplit | None, str]:
        values: dict[str, Decimal] = {}
        for key, label in self.CHANNELS:
            ok, val = try_parse_decimal(self.inputs[key].text())
            if not ok:
                return False, None, f"{label}: not a number."
            if val < ZERO:
                return False, None, f"{label} cannot be negative."
            values[key] = val
        return True, PaymentSplit.of(self._total, **values), ""

    def _on_changed(self, *_):
        ok, msg = self._validate()
        _, split, _ = self._read()
        self.due.setText(fmt_money(split.due) if split is not None else "")
        self.lbl_status.setText(msg)
        self.btn_ok.setEnabled(ok)

    # --- validation / payload --------------------------------------------

    def _validate(self) -> tuple[bool, str]:
        ok, split, msg = self._read()
        if not ok:
            return False, msg
        check = validate(split)
        if not check.is_valid:
            return False, check.message
        return True, ""

    def accept(self):
        ok, msg = self._validate()
        if not ok:
            QMessageBox.warning(self, "Cannot apply split", msg)
            return
        _, split, _ = self._read()
        self._payload = rebalance(split, self._total)
        super().accept()

    def payload(self) -> PaymentSplit | None:
        return self._payload
