from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
import sqlite3

from ...modules.pricing.money import round_money, to_decimal


# Domain-level error the controller can surface directly (e.g., toast/snackbar)
class DomainError(Exception):
    pass


@dataclass
class Customer:
    customer_id: int | None
    name: str
    contact_info: str
    address: str | None
    balance: Decimal = Decimal("0")


class CustomersRepo:
    def __init__(self, conn: sqlite3.Connection):
        conn.row_factory = sqlite3.Row
        self.conn = conn

    # ---- Internal helpers -------------------------------------------------

    @staticmethod
    def _normalize_text(s: str | None) -> str | None:
        if s is None:
            return None
        return s.strip()

    @staticmethod
    def _ensure_non_empty(value: str | None, field_label: str) -> None:
        if value is None or value.strip() == "":
            raise DomainError(f"{field_label} cannot be empty.")

    @staticmethod
    def _from_row(r) -> Customer:
        return Customer(
            customer_id=r["customer_id"],
            name=r["name"],
            contact_info=r["contact_info"],
            address=r["address"],
            balance=to_decimal(r["balance"]),
        )

    # ---- Queries ----------------------------------------------------------

    def list_customers(self, active_only: bool = True) -> list[Customer]:
        """
        Returns customers. By default, only active rows (is_active=1).
        """
        sql = "SELECT customer_id, name, contact_info, address, balance FROM customers "
        if active_only:
            sql += "WHERE is_active = 1 "
        sql += "ORDER BY customer_id DESC"
        return [self._from_row(r) for r in self.conn.execute(sql).fetchall()]

    def get(self, customer_id: int) -> Customer | None:
        r = self.conn.execute(
            "SELECT customer_id, name, contact_info, address, balance "
            "FROM customers WHERE customer_id=?",
            (customer_id,),
        ).fetchone()
        return self._from_row(r) if r else None

    # ---- Commands ---------------------------------------------------------

    def create(self, name: str, contact_info: str, address: str | None = None) -> int:
        name = self._normalize_text(name)
        contact_info = self._normalize_text(contact_info)
        address = self._normalize_text(address)

        self._ensure_non_empty(name, "Customer name")
        self._ensure_non_empty(contact_info, "Contact info")

        with self.conn:
            cur = self.conn.execute(
                "INSERT INTO customers(name, contact_info, address) VALUES (?, ?, ?)",
                (name, contact_info, address),
            )
        return int(cur.lastrowid)

    def adjust_balance(self, customer_id: int, delta) -> Decimal:
        """Add `delta` (positive = customer owes more) and return the new balance."""
        current = self.get(customer_id)
        if current is None:
            raise DomainError(f"Customer #{customer_id} not found.")
        new_balance = round_money(current.balance + to_decimal(delta))
        with self.conn:
            self.conn.execute(
                "UPDATE customers SET balance=? WHERE customer_id=?",
                (str(new_balance), customer_id),
            )
        return new_balance
