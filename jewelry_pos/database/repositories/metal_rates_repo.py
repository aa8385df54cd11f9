from __future__ import annotations
from decimal import Decimal
import logging
import sqlite3

from ...config import PricingSettings
from ...modules.pricing.money import ZERO, round_money, to_decimal
from ...modules.pricing.rates import (
    MetalRate,
    MetalRateTable,
    gold_karat_ladder,
    silver_purity_ladder,
)

_log = logging.getLogger(__name__)


class DomainError(Exception):
    """Domain-level error the controller/UI can surface (toast/snackbar)."""
    pass


class MetalRatesRepo:
    """
    Per-gram metal rates. Checkout never reads this table row by row: it asks
    for snapshot() once per computation and prices against that.
    """

    def __init__(self, conn: sqlite3.Connection):
        conn.row_factory = sqlite3.Row
        self.conn = conn

    @staticmethod
    def _row_to_rate(r) -> MetalRate:
        return MetalRate(
            material_name=r["material_name"],
            material_type=r["material_type"],
            price_per_gram=to_decimal(r["price_per_gram"]),
            material_id=str(r["material_id"]),
            is_active=bool(r["is_active"]),
        )

    # ---- Queries ----------------------------------------------------------

    def list_rates(self, active_only: bool = True) -> list[MetalRate]:
        sql = (
            "SELECT material_id, material_name, material_type, price_per_gram, is_active "
            "FROM metal_rates "
        )
        if active_only:
            sql += "WHERE is_active = 1 "
        sql += "ORDER BY material_name, CAST(price_per_gram AS REAL) DESC"
        return [self._row_to_rate(r) for r in self.conn.execute(sql).fetchall()]

    def get_rate(self, material_name: str, material_type: str) -> MetalRate | None:
        r = self.conn.execute(
            "SELECT material_id, material_name, material_type, price_per_gram, is_active "
            "FROM metal_rates WHERE lower(material_name)=lower(?) AND lower(material_type)=lower(?)",
            (material_name.strip(), material_type.strip()),
        ).fetchone()
        return self._row_to_rate(r) if r else None

    def snapshot(self, settings: PricingSettings | None = None) -> MetalRateTable:
        """Immutable table of the active rates, for one pricing computation."""
        settings = settings or PricingSettings()
        return MetalRateTable(self.list_rates(active_only=True), settings.default_gold_rate)

    # ---- Commands ---------------------------------------------------------

    def _upsert(self, material_name: str, material_type: str, price_per_gram, is_active: bool) -> int:
        name = (material_name or "").strip()
        mtype = (material_type or "").strip()
        if not name or not mtype:
            raise DomainError("Material name and type are required.")
        price = to_decimal(price_per_gram)
        if price < ZERO:
            raise DomainError(f"Rate for {name} {mtype} cannot be negative.")

        existing = self.conn.execute(
            "SELECT material_id FROM metal_rates "
            "WHERE lower(material_name)=lower(?) AND lower(material_type)=lower(?)",
            (name, mtype),
        ).fetchone()
        if existing:
            self.conn.execute(
                "UPDATE metal_rates SET price_per_gram=?, is_active=?, updated_at=CURRENT_TIMESTAMP "
                "WHERE material_id=?",
                (str(round_money(price)), int(is_active), existing["material_id"]),
            )
            return int(existing["material_id"])
        cur = self.conn.execute(
            "INSERT INTO metal_rates(material_name, material_type, price_per_gram, is_active) "
            "VALUES (?, ?, ?, ?)",
            (name, mtype, str(round_money(price)), int(is_active)),
        )
        return int(cur.lastrowid)

    def upsert_rate(
        self,
        material_name: str,
        material_type: str,
        price_per_gram,
        is_active: bool = True,
    ) -> int:
        with self.conn:
            material_id = self._upsert(material_name, material_type, price_per_gram, is_active)
        _log.info("Rate %s %s set to %s/g", material_name, material_type, price_per_gram)
        return material_id

    def update_gold_rates(self, rate_24k) -> dict[int, Decimal]:
        """Rewrite the whole gold karat ladder from today's 24K rate."""
        if to_decimal(rate_24k) <= ZERO:
            raise DomainError("24K gold rate must be greater than zero.")
        ladder = gold_karat_ladder(rate_24k)
        with self.conn:
            for k, rate in ladder.items():
                self._upsert("Gold", f"{k}K", rate, True)
        _log.info("Gold rates updated from 24K=%s", rate_24k)
        return ladder

    def update_silver_rates(self, rate_999) -> dict[int, Decimal]:
        if to_decimal(rate_999) <= ZERO:
            raise DomainError("999 silver rate must be greater than zero.")
        ladder = silver_purity_ladder(rate_999)
        with self.conn:
            for p, rate in ladder.items():
                self._upsert("Silver", str(p), rate, True)
        _log.info("Silver rates updated from 999=%s", rate_999)
        return ladder

    def deactivate(self, material_id: int) -> None:
        with self.conn:
            self.conn.execute("UPDATE metal_rates SET is_active=0 WHERE material_id=?", (material_id,))
