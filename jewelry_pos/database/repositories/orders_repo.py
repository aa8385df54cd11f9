from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
import logging
import sqlite3
from typing import Iterable

from ...modules.pricing.money import ZERO, round_money
from .products_repo import DomainError as ProductsDomainError
from .products_repo import ProductsRepo

_log = logging.getLogger(__name__)


class DomainError(Exception):
    """Domain-level error the controller/UI can surface (toast/snackbar)."""
    pass


@dataclass
class OrderHeader:
    order_id: str
    customer_id: int | None
    date: str
    subtotal: Decimal
    discount_mode: str | None
    discount_value: Decimal
    discount_amount: Decimal
    gst_rate_percent: Decimal
    gst_amount: Decimal
    exchange_credit: Decimal
    final_total: Decimal
    round_off: Decimal
    net_amount: Decimal
    cash: Decimal
    card: Decimal
    bank: Decimal
    online: Decimal
    due: Decimal
    paid_amount: Decimal
    payment_status: str
    order_status: str = "confirmed"
    notes: str | None = None


@dataclass
class OrderItem:
    item_id: int | None
    order_id: str
    product_id: str
    name: str
    quantity: int
    net_weight: Decimal
    material_rate: Decimal
    rate_source: str
    material_cost: Decimal
    making_charges: Decimal
    stone_amount: Decimal
    va_charges: Decimal
    line_total: Decimal


def _m(x) -> str:
    # sqlite3 has no Decimal adapter; persist the rounded text
    return str(round_money(x))


class OrdersRepo:
    """
    Confirmed orders.

    save_order() is the only writer and does everything a confirmation needs
    in one transaction: header, items, stock decrement and the customer's due
    balance. Any failure rolls all of it back.
    """

    def __init__(self, conn: sqlite3.Connection):
        conn.row_factory = sqlite3.Row
        self.conn = conn

    # ---------------------------------------------------------------------
    # IDs
    # ---------------------------------------------------------------------
    def new_order_id(self, date_str: str) -> str:
        d = date_str.replace("-", "")
        prefix = f"ORD{d}-"
        row = self.conn.execute(
            "SELECT MAX(order_id) AS m FROM orders WHERE order_id LIKE ?",
            (prefix + "%",),
        ).fetchone()
        last = int(row["m"].split("-")[-1]) if row and row["m"] else 0
        return f"{prefix}{last+1:04d}"

    # ---------------------------------------------------------------------
    # READ
    # ---------------------------------------------------------------------
    def get_order(self, order_id: str) -> sqlite3.Row | None:
        return self.conn.execute("SELECT * FROM orders WHERE order_id=?", (order_id,)).fetchone()

    def list_items(self, order_id: str) -> list[sqlite3.Row]:
        return self.conn.execute(
            "SELECT * FROM order_items WHERE order_id=? ORDER BY item_id", (order_id,)
        ).fetchall()

    def list_orders(self, customer_id: int | None = None) -> list[sqlite3.Row]:
        sql = """
        SELECT o.order_id, o.date, o.customer_id, c.name AS customer_name,
               CAST(o.net_amount AS REAL)  AS net_amount,
               CAST(o.paid_amount AS REAL) AS paid_amount,
               CAST(o.due AS REAL)         AS due,
               o.payment_status, o.order_status
        FROM orders o
        LEFT JOIN customers c ON c.customer_id = o.customer_id
        """
        params: tuple = ()
        if customer_id is not None:
            sql += " WHERE o.customer_id = ?"
            params = (customer_id,)
        sql += " ORDER BY o.date DESC, o.order_id DESC"
        return self.conn.execute(sql, params).fetchall()

    # ---------------------------------------------------------------------
    # WRITE
    # ---------------------------------------------------------------------
    def _insert_header(self, h: OrderHeader):
        self.conn.execute(
            """
            INSERT INTO orders (
                order_id, customer_id, date,
                subtotal, discount_mode, discount_value, discount_amount,
                gst_rate_percent, gst_amount, exchange_credit,
                final_total, round_off, net_amount,
                cash, card, bank, online, due, paid_amount,
                payment_status, order_status, notes
            )
            VALUES (?,?,?,?,?,?,?,?,?,?,?,?,?,?,?,?,?,?,?,?,?,?)
            """,
            (
                h.order_id,
                h.customer_id,
                h.date,
                _m(h.subtotal),
                h.discount_mode,
                _m(h.discount_value),
                _m(h.discount_amount),
                _m(h.gst_rate_percent),
                _m(h.gst_amount),
                _m(h.exchange_credit),
                _m(h.final_total),
                _m(h.round_off),
                _m(h.net_amount),
                _m(h.cash),
                _m(h.card),
                _m(h.bank),
                _m(h.online),
                _m(h.due),
                _m(h.paid_amount),
                h.payment_status,
                h.order_status,
                h.notes,
            ),
        )

    def _insert_item(self, it: OrderItem) -> int:
        cur = self.conn.execute(
            """
            INSERT INTO order_items (
                order_id, product_id, name, quantity, net_weight, material_rate,
                rate_source, material_cost, making_charges, stone_amount,
                va_charges, line_total
            ) VALUES (?,?,?,?,?,?,?,?,?,?,?,?)
            """,
            (
                it.order_id,
                it.product_id,
                it.name,
                it.quantity,
                str(it.net_weight),
                _m(it.material_rate),
                it.rate_source,
                _m(it.material_cost),
                _m(it.making_charges),
                _m(it.stone_amount),
                _m(it.va_charges),
                _m(it.line_total),
            ),
        )
        return int(cur.lastrowid)

    def save_order(self, header: OrderHeader, items: Iterable[OrderItem]) -> str:
        items = list(items)
        if not items:
            raise DomainError("Cannot save an order without items.")
        owes = round_money(header.due) > ZERO
        if owes and header.customer_id is None:
            raise DomainError("Select a customer before leaving an amount due.")

        products = ProductsRepo(self.conn)
        with self.conn:
            self._insert_header(header)
            for it in items:
                it.order_id = header.order_id
                it.item_id = self._insert_item(it)
                try:
                    products.take_stock(it.product_id, it.quantity)
                except ProductsDomainError as e:
                    raise DomainError(str(e)) from e
            if header.customer_id is not None and owes:
                cur = self.conn.execute(
                    "UPDATE customers SET balance = ROUND(balance + ?, 2) WHERE customer_id=?",
                    (_m(header.due), header.customer_id),
                )
                if cur.rowcount == 0:
                    raise DomainError(f"Customer #{header.customer_id} not found.")

        _log.info(
            "Order %s saved: net %s, paid %s, due %s (%s)",
            header.order_id,
            header.net_amount,
            header.paid_amount,
            header.due,
            header.payment_status,
        )
        return header.order_id
