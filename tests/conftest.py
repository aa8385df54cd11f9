# tests/conftest.py
# ---------------------------------------------------------------------
# Ground rules:
# - pytest-qt owns QApplication (use qapp/qtbot fixtures)
# - Every test gets its own SQLite file under tmp_path (schema + seed applied)
# - conn.row_factory = sqlite3.Row, PRAGMA foreign_keys=ON (via get_connection)
# - Pricing tests use an explicit MetalRateTable, never the database
# ---------------------------------------------------------------------

from __future__ import annotations

import os

# headless Qt for CI
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from decimal import Decimal

import pytest

from jewelry_pos.config import PricingSettings
from jewelry_pos.database import get_connection
from jewelry_pos.modules.pricing.rates import MetalRateTable


@pytest.fixture(autouse=True)
def _no_env_overrides(monkeypatch):
    """Keep developer shells from leaking pricing overrides into tests."""
    monkeypatch.delenv("JEWELRY_POS_GST_PERCENT", raising=False)
    monkeypatch.delenv("JEWELRY_POS_DEFAULT_GOLD_RATE", raising=False)


@pytest.fixture()
def db_path(tmp_path):
    return tmp_path / "jewelry_pos.db"


@pytest.fixture()
def conn(db_path):
    con = get_connection(db_path)
    try:
        yield con
    finally:
        con.close()


@pytest.fixture()
def settings() -> PricingSettings:
    return PricingSettings()


@pytest.fixture()
def rates() -> MetalRateTable:
    """Gold ladder from 24K=6000 (22K=5500, 18K=4500) and silver from 999=90."""
    return MetalRateTable.from_ladders(rate_24k="6000", rate_999="90", default_gold_rate="5000")


def D(x) -> Decimal:
    return Decimal(str(x))
