from PySide6.QtCore import QAbstractTableModel, Qt, QModelIndex
from ...utils.helpers import fmt_money


class CartItemsTableModel(QAbstractTableModel):
    """Read-only view of the priced cart lines (ItemPrice rows)."""

    HEADERS = ["#", "Product", "Qty", "Net Wt (g)", "Rate/g", "Making", "Stones", "VA", "Line Total"]

    def __init__(self, rows: list | None = None):
        super().__init__()
        self._rows = rows or []

    def rowCount(self, parent=QModelIndex()):
        return len(self._rows)

    def columnCount(self, parent=QModelIndex()):
        return len(self.HEADERS)

    def data(self, index, role=Qt.DisplayRole):
        if not index.isValid():
            return None
        r = self._rows[index.row()]
        c = index.column()
        if role in (Qt.DisplayRole, Qt.EditRole):
            rate = fmt_money(r.material_rate)
            if r.is_estimated:
                rate += " *"
            mapping = [
                index.row() + 1,
                r.name or r.product_id,
                r.quantity,
                fmt_money(r.net_weight, 3),
                rate,
                fmt_money(r.making_charges),
                fmt_money(r.stone_amount),
                fmt_money(r.va_charges),
                fmt_money(r.line_total),
            ]
            return mapping[c]
        if role == Qt.ToolTipRole and c == 4 and r.is_estimated:
            return "Estimated: no rate configured for this material, default gold rate used."
        if role == Qt.TextAlignmentRole and c >= 2:
            return Qt.AlignRight | Qt.AlignVCenter
        return None

    def headerData(self, section, orientation, role=Qt.DisplayRole):
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section]
        return super().headerData(section, orientation, role)

    def at(self, row: int):
        return self._rows[row]

    def replace(self, rows: list):
        self.beginResetModel()
        self._rows = list(rows)
        self.endResetModel()
