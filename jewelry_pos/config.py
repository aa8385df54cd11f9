from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path

from .constants import (
    DATA_DIR,
    DB_FILE_NAME,
    DEFAULT_GOLD_KARAT,
    DEFAULT_GOLD_RATE_24K,
    EPSILON,
    GST_RATE_PERCENT,
)

BASE_DIR = Path(__file__).resolve().parent
DATA_PATH = BASE_DIR / DATA_DIR
DB_PATH = DATA_PATH / DB_FILE_NAME

ENV_GST_PERCENT = "JEWELRY_POS_GST_PERCENT"
ENV_DEFAULT_GOLD_RATE = "JEWELRY_POS_DEFAULT_GOLD_RATE"


def _env_decimal(name: str, default: str) -> Decimal:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return Decimal(default)
    try:
        return Decimal(raw.strip())
    except InvalidOperation as e:
        raise ValueError(f"{name} must be a number, got {raw!r}.") from e


@dataclass(frozen=True)
class PricingSettings:
    """
    Pricing knobs shared by every screen that computes a settlement.

    gst_rate_percent is the single authoritative GST rate; call sites must
    take it from here instead of hardcoding one.
    """
    gst_rate_percent: Decimal = Decimal(GST_RATE_PERCENT)
    default_gold_rate: Decimal = Decimal(DEFAULT_GOLD_RATE_24K) * DEFAULT_GOLD_KARAT / 24
    epsilon: Decimal = Decimal(EPSILON)

    @classmethod
    def from_env(cls) -> "PricingSettings":
        base_default = Decimal(DEFAULT_GOLD_RATE_24K) * DEFAULT_GOLD_KARAT / 24
        return cls(
            gst_rate_percent=_env_decimal(ENV_GST_PERCENT, GST_RATE_PERCENT),
            default_gold_rate=_env_decimal(ENV_DEFAULT_GOLD_RATE, str(base_default)),
        )
