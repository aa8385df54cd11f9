# jewelry_pos/database/repositories/products_repo.py
from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
import sqlite3

from ...modules.pricing.line_item import CartLineItem
from ...modules.pricing.money import ZERO, to_decimal
from ...modules.pricing.product_price import (
    ProductPriceInputs,
    ProductPriceResult,
    ProductStone,
    calculate_product_price,
    calculate_stone_prices,
)


class DomainError(Exception):
    """Domain-level error the controller/UI can surface (toast/snackbar)."""
    pass


@dataclass
class Product:
    product_id: str
    name: str
    material_name: str
    material_type: str
    weight_grams: Decimal
    less_weight: Decimal
    making_rate_per_gram: Decimal
    va_charges: Decimal
    has_stones: bool
    stone_carat_weight: Decimal
    stone_rate_per_carat: Decimal
    stone_quantity: Decimal
    stock_quantity: int
    is_active: bool = True


_COLS = (
    "product_id, name, material_name, material_type, weight_grams, less_weight, "
    "making_rate_per_gram, va_charges, has_stones, stone_carat_weight, "
    "stone_rate_per_carat, stone_quantity, stock_quantity, is_active"
)

_DECIMAL_FIELDS = (
    "weight_grams",
    "less_weight",
    "making_rate_per_gram",
    "va_charges",
    "stone_carat_weight",
    "stone_rate_per_carat",
    "stone_quantity",
)


class ProductsRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        # Use Row for named access
        self.conn.row_factory = sqlite3.Row

    @staticmethod
    def _from_row(r) -> Product:
        d = dict(r)
        for f in _DECIMAL_FIELDS:
            d[f] = to_decimal(d[f])
        d["has_stones"] = bool(d["has_stones"])
        d["is_active"] = bool(d["is_active"])
        return Product(**d)

    # ---------------------------- Products ----------------------------

    def list_products(self, active_only: bool = True) -> list[Product]:
        sql = f"SELECT {_COLS} FROM products "
        if active_only:
            sql += "WHERE is_active = 1 "
        sql += "ORDER BY name"
        return [self._from_row(r) for r in self.conn.execute(sql).fetchall()]

    def get(self, product_id: str) -> Product | None:
        r = self.conn.execute(
            f"SELECT {_COLS} FROM products WHERE product_id=?", (product_id,)
        ).fetchone()
        return self._from_row(r) if r else None

    def create(
        self,
        product_id: str,
        name: str,
        *,
        material_name: str = "Gold",
        material_type: str = "22K",
        weight_grams=0,
        less_weight=0,
        making_rate_per_gram=0,
        va_charges=0,
        stone_carat_weight=0,
        stone_rate_per_carat=0,
        stone_quantity=0,
        stock_quantity: int = 1,
    ) -> str:
        product_id = (product_id or "").strip()
        name = (name or "").strip()
        if not product_id:
            raise DomainError("Product code cannot be empty.")
        if not name:
            raise DomainError("Product name cannot be empty.")
        if int(stock_quantity) < 0:
            raise DomainError("Stock quantity cannot be negative.")
        if self.get(product_id) is not None:
            raise DomainError(f"Product {product_id} already exists.")

        amounts = {
            "weight_grams": weight_grams,
            "less_weight": less_weight,
            "making_rate_per_gram": making_rate_per_gram,
            "va_charges": va_charges,
        }
        for label, v in amounts.items():
            if to_decimal(v) < ZERO:
                raise DomainError(f"{label.replace('_', ' ').capitalize()} cannot be negative.")

        has_stones = to_decimal(stone_carat_weight) > ZERO
        with self.conn:
            self.conn.execute(
                f"INSERT INTO products({_COLS}) VALUES (?,?,?,?,?,?,?,?,?,?,?,?,?,1)",
                (
                    product_id,
                    name,
                    material_name.strip(),
                    material_type.strip(),
                    str(to_decimal(weight_grams)),
                    str(to_decimal(less_weight)),
                    str(to_decimal(making_rate_per_gram)),
                    str(to_decimal(va_charges)),
                    int(has_stones),
                    str(to_decimal(stone_carat_weight)),
                    str(to_decimal(stone_rate_per_carat)),
                    str(to_decimal(stone_quantity)),
                    int(stock_quantity),
                ),
            )
        return product_id

    def take_stock(self, product_id: str, qty: int) -> None:
        """
        Decrement stock inside the caller's transaction (no commit here), so an
        order save can roll back every line together.
        """
        if qty < 0:
            raise DomainError("Quantity to reduce cannot be negative.")
        cur = self.conn.execute(
            "UPDATE products SET stock_quantity = stock_quantity - ? "
            "WHERE product_id=? AND stock_quantity >= ?",
            (qty, product_id, qty),
        )
        if cur.rowcount == 0:
            p = self.get(product_id)
            if p is None:
                raise DomainError(f"Product {product_id} not found.")
            raise DomainError(
                f"Insufficient stock for {p.name}: {p.stock_quantity} available, {qty} requested."
            )

    def reduce_stock(self, product_id: str, qty: int) -> int:
        """Take `qty` pieces out of stock; returns what is left."""
        with self.conn:
            self.take_stock(product_id, qty)
        return self.get(product_id).stock_quantity

    # ---------------------------- Stones ----------------------------

    def add_stone(self, product_id: str, name: str, weight=0, quantity=0, rate=0, amount=None) -> int:
        """
        Attach a stone row. weight is grams; quantity is the count (or carats for
        Diamond/Solitaire). amount defaults to quantity * rate.
        """
        if self.get(product_id) is None:
            raise DomainError(f"Product {product_id} not found.")
        if not (name or "").strip():
            raise DomainError("Stone name cannot be empty.")
        amt = to_decimal(quantity) * to_decimal(rate) if amount is None else to_decimal(amount)
        with self.conn:
            cur = self.conn.execute(
                "INSERT INTO product_stones(product_id, name, weight, quantity, rate, amount) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (
                    product_id,
                    name.strip(),
                    str(to_decimal(weight)),
                    str(to_decimal(quantity)),
                    str(to_decimal(rate)),
                    str(amt),
                ),
            )
        return int(cur.lastrowid)

    def list_stones(self, product_id: str) -> list[ProductStone]:
        rows = self.conn.execute(
            "SELECT name, weight, amount, quantity, rate FROM product_stones "
            "WHERE product_id=? ORDER BY stone_id",
            (product_id,),
        ).fetchall()
        return [
            ProductStone(
                name=r["name"],
                weight=to_decimal(r["weight"]),
                amount=to_decimal(r["amount"]),
                quantity=to_decimal(r["quantity"]),
                rate=to_decimal(r["rate"]),
            )
            for r in rows
        ]

    def definition_price(
        self,
        product_id: str,
        *,
        making_percentage,
        labour_rate_per_gram,
        gold_rate_per_gram,
    ) -> ProductPriceResult:
        """Price a product the catalog way: making weight, labour, stones from product_stones."""
        p = self.get(product_id)
        if p is None:
            raise DomainError(f"Product {product_id} not found.")
        inputs = ProductPriceInputs.from_stones(
            gross_weight=p.weight_grams,
            making_percentage=making_percentage,
            labour_rate_per_gram=labour_rate_per_gram,
            gold_rate_per_gram=gold_rate_per_gram,
            stones=calculate_stone_prices(self.list_stones(product_id)),
        )
        return calculate_product_price(inputs)

    # ---------------------------- Cart ----------------------------

    def to_cart_item(self, product_id: str, quantity: int = 1) -> CartLineItem:
        p = self.get(product_id)
        if p is None or not p.is_active:
            raise DomainError(f"Product {product_id} not found.")
        return CartLineItem(
            product_id=p.product_id,
            quantity=quantity,
            unit_weight_grams=p.weight_grams,
            material_type=p.material_type,
            material_name=p.material_name,
            making_rate_per_gram=p.making_rate_per_gram,
            has_stones=p.has_stones,
            stone_carat_weight=p.stone_carat_weight,
            stone_rate_per_carat=p.stone_rate_per_carat,
            stone_quantity=p.stone_quantity,
            va_charges=p.va_charges,
            less_weight=p.less_weight,
            name=p.name,
        )
