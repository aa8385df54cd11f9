from pathlib import Path
import logging
import sqlite3
import sys

_log = logging.getLogger(__name__)

SQL = r"""
PRAGMA foreign_keys = ON;

/* ======================== RATES ======================== */

/* one row per (material, type) e.g. ('Gold','22K'), ('Silver','925') */
CREATE TABLE IF NOT EXISTS metal_rates (
    material_id    INTEGER PRIMARY KEY AUTOINCREMENT,
    material_name  TEXT    NOT NULL,
    material_type  TEXT    NOT NULL,
    price_per_gram NUMERIC NOT NULL CHECK (CAST(price_per_gram AS REAL) >= 0),
    is_active      INTEGER NOT NULL DEFAULT 1 CHECK (is_active IN (0,1)),
    updated_at     TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
CREATE UNIQUE INDEX IF NOT EXISTS idx_metal_rates_key
ON metal_rates(lower(material_name), lower(material_type));

/* ======================== CATALOG ======================== */

CREATE TABLE IF NOT EXISTS products (
    product_id           TEXT PRIMARY KEY,
    name                 TEXT    NOT NULL,
    material_name        TEXT    NOT NULL DEFAULT 'Gold',
    material_type        TEXT    NOT NULL DEFAULT '22K',
    weight_grams         NUMERIC NOT NULL DEFAULT 0 CHECK (CAST(weight_grams AS REAL) >= 0),
    less_weight          NUMERIC NOT NULL DEFAULT 0 CHECK (CAST(less_weight AS REAL) >= 0),
    making_rate_per_gram NUMERIC NOT NULL DEFAULT 0 CHECK (CAST(making_rate_per_gram AS REAL) >= 0),
    va_charges           NUMERIC NOT NULL DEFAULT 0 CHECK (CAST(va_charges AS REAL) >= 0),
    has_stones           INTEGER NOT NULL DEFAULT 0 CHECK (has_stones IN (0,1)),
    stone_carat_weight   NUMERIC NOT NULL DEFAULT 0,
    stone_rate_per_carat NUMERIC NOT NULL DEFAULT 0,
    stone_quantity       NUMERIC NOT NULL DEFAULT 0,
    stock_quantity       INTEGER NOT NULL DEFAULT 0 CHECK (stock_quantity >= 0),
    is_active            INTEGER NOT NULL DEFAULT 1 CHECK (is_active IN (0,1))
);

/* stone rows used by the product-definition calculator */
CREATE TABLE IF NOT EXISTS product_stones (
    stone_id   INTEGER PRIMARY KEY AUTOINCREMENT,
    product_id TEXT    NOT NULL,
    name       TEXT    NOT NULL,
    weight     NUMERIC NOT NULL DEFAULT 0,
    quantity   NUMERIC NOT NULL DEFAULT 0,
    rate       NUMERIC NOT NULL DEFAULT 0,
    amount     NUMERIC NOT NULL DEFAULT 0,
    FOREIGN KEY (product_id) REFERENCES products(product_id) ON DELETE CASCADE
);
CREATE INDEX IF NOT EXISTS idx_product_stones_product ON product_stones(product_id);

/* ======================== PARTIES ======================== */

CREATE TABLE IF NOT EXISTS customers (
    customer_id  INTEGER PRIMARY KEY AUTOINCREMENT,
    name         TEXT NOT NULL,
    contact_info TEXT NOT NULL,
    address      TEXT,
    /* running amount the customer still owes across orders */
    balance      NUMERIC NOT NULL DEFAULT 0,
    is_active    INTEGER NOT NULL DEFAULT 1 CHECK (is_active IN (0,1))
);

/* ======================== ORDERS ======================== */

CREATE TABLE IF NOT EXISTS orders (
    order_id         TEXT PRIMARY KEY,
    customer_id      INTEGER,
    date             DATE    NOT NULL DEFAULT CURRENT_DATE,
    subtotal         NUMERIC NOT NULL DEFAULT 0,
    discount_mode    TEXT,
    discount_value   NUMERIC NOT NULL DEFAULT 0,
    discount_amount  NUMERIC NOT NULL DEFAULT 0,
    gst_rate_percent NUMERIC NOT NULL DEFAULT 0,
    gst_amount       NUMERIC NOT NULL DEFAULT 0,
    exchange_credit  NUMERIC NOT NULL DEFAULT 0,
    final_total      NUMERIC NOT NULL DEFAULT 0,
    round_off        NUMERIC NOT NULL DEFAULT 0,
    net_amount       NUMERIC NOT NULL DEFAULT 0,
    cash             NUMERIC NOT NULL DEFAULT 0,
    card             NUMERIC NOT NULL DEFAULT 0,
    bank             NUMERIC NOT NULL DEFAULT 0,
    online           NUMERIC NOT NULL DEFAULT 0,
    due              NUMERIC NOT NULL DEFAULT 0,
    paid_amount      NUMERIC NOT NULL DEFAULT 0,
    payment_status   TEXT NOT NULL DEFAULT 'unpaid'
                     CHECK (payment_status IN ('paid','partial','unpaid')),
    order_status     TEXT NOT NULL DEFAULT 'confirmed',
    notes            TEXT,
    created_at       TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (customer_id) REFERENCES customers(customer_id)
);
CREATE INDEX IF NOT EXISTS idx_orders_customer ON orders(customer_id);

CREATE TABLE IF NOT EXISTS order_items (
    item_id        INTEGER PRIMARY KEY AUTOINCREMENT,
    order_id       TEXT    NOT NULL,
    product_id     TEXT    NOT NULL,
    name           TEXT,
    quantity       INTEGER NOT NULL CHECK (quantity >= 0),
    net_weight     NUMERIC NOT NULL DEFAULT 0,
    material_rate  NUMERIC NOT NULL DEFAULT 0,
    rate_source    TEXT    NOT NULL,
    material_cost  NUMERIC NOT NULL DEFAULT 0,
    making_charges NUMERIC NOT NULL DEFAULT 0,
    stone_amount   NUMERIC NOT NULL DEFAULT 0,
    va_charges     NUMERIC NOT NULL DEFAULT 0,
    line_total     NUMERIC NOT NULL DEFAULT 0,
    FOREIGN KEY (order_id)   REFERENCES orders(order_id) ON DELETE CASCADE,
    FOREIGN KEY (product_id) REFERENCES products(product_id)
);
CREATE INDEX IF NOT EXISTS idx_order_items_order ON order_items(order_id);
"""


def init_schema(db_path: Path | str = "jewelry_pos.db") -> None:
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path)
    try:
        conn.execute("PRAGMA journal_mode=WAL;")
        # Apply (idempotent) schema
        conn.executescript(SQL)
        conn.commit()
    finally:
        conn.close()
    _log.debug("Schema applied to %s", db_path)


if __name__ == "__main__":
    target = sys.argv[1] if len(sys.argv) > 1 else Path(__file__).resolve().parents[1] / "data" / "jewelry_pos.db"
    init_schema(target)
