"""
pricing/rates.py

Read-only metal rate snapshot used by every pricing call.

A MetalRateTable is built once per computation (usually from
MetalRatesRepo.snapshot()) and passed explicitly; nothing here reaches out to
a shared manager or the database.

Lookup order for a material type:
  1) exact (material_name, material_type) match, case-insensitive
  2) gold: rate for the karat in the type ("22K"), else scaled from the nearest karat
  3) silver: rate for the purity in the type ("925"), else scaled from the nearest purity
  4) default gold rate, flagged as a fallback so callers can mark prices as estimated
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from ...config import PricingSettings
from ...constants import (
    DEFAULT_GOLD_KARAT,
    DEFAULT_SILVER_PURITY,
    GOLD_KARATS,
    SILVER_PURITIES,
)
from .money import ZERO, non_negative_input, to_decimal

__all__ = [
    "SOURCE_EXACT",
    "SOURCE_KARAT",
    "SOURCE_PURITY",
    "SOURCE_DEFAULT",
    "MetalRate",
    "RateLookup",
    "MetalRateTable",
    "extract_karat",
    "extract_silver_purity",
    "gold_karat_ladder",
    "silver_purity_ladder",
]

SOURCE_EXACT = "exact"
SOURCE_KARAT = "karat"
SOURCE_PURITY = "purity"
SOURCE_DEFAULT = "default"

_log = logging.getLogger(__name__)

_KARAT_RX = re.compile(r"(\d{1,2})\s*K", re.IGNORECASE)
_THREE_DIGITS_RX = re.compile(r"(\d{3})")


# -----------------------------
# Material type parsing
# -----------------------------

def extract_karat(text: str) -> Optional[int]:
    """Return the karat in strings like '22K Gold' / 'gold 18k', or None."""
    m = _KARAT_RX.search(text or "")
    return int(m.group(1)) if m else None


def extract_silver_purity(text: str) -> int:
    """
    Silver fineness from a material type: 999, 925 (also '92.5') or 900
    (also '90.0'). Anything else reads as 999.
    """
    t = (text or "").lower()
    if "999" in t:
        return 999
    if "925" in t or "92.5" in t:
        return 925
    if "900" in t or "90.0" in t:
        return 900
    m = _THREE_DIGITS_RX.search(t)
    if m and int(m.group(1)) in SILVER_PURITIES:
        return int(m.group(1))
    return DEFAULT_SILVER_PURITY


def gold_karat_ladder(rate_24k) -> Dict[int, Decimal]:
    """Standard karat rates derived from the 24K rate (karat/24 of fine gold)."""
    base = non_negative_input(rate_24k, "24K gold rate")
    return {k: base * k / 24 for k in GOLD_KARATS}


def silver_purity_ladder(rate_999) -> Dict[int, Decimal]:
    """Standard silver rates derived from the 999 rate."""
    base = non_negative_input(rate_999, "999 silver rate")
    return {p: base * p / 999 for p in SILVER_PURITIES}


# -----------------------------
# Types
# -----------------------------

@dataclass(frozen=True)
class MetalRate:
    material_name: str
    material_type: str
    price_per_gram: Decimal
    material_id: str = ""
    is_active: bool = True

    def __post_init__(self):
        object.__setattr__(
            self,
            "price_per_gram",
            non_negative_input(self.price_per_gram, f"rate for {self.material_name} {self.material_type}"),
        )

    @property
    def key(self) -> Tuple[str, str]:
        return (self.material_name.strip().lower(), self.material_type.strip().lower())

    @property
    def label(self) -> str:
        return f"{self.material_name} {self.material_type}".strip()

    @property
    def is_gold(self) -> bool:
        return "gold" in self.label.lower()

    @property
    def is_silver(self) -> bool:
        return "silver" in self.label.lower()

    @property
    def karat(self) -> Optional[int]:
        return extract_karat(self.material_type) if self.is_gold else None

    @property
    def purity(self) -> Optional[int]:
        return extract_silver_purity(self.material_type) if self.is_silver else None


@dataclass(frozen=True)
class RateLookup:
    rate: Decimal
    source: str
    label: str = ""

    @property
    def is_fallback(self) -> bool:
        return self.source == SOURCE_DEFAULT


class MetalRateTable:
    """Immutable {material, karat/purity} -> price-per-gram snapshot."""

    def __init__(self, rates: Iterable[MetalRate] = (), default_gold_rate=None):
        if default_gold_rate is None:
            default_gold_rate = PricingSettings().default_gold_rate
        active = tuple(r for r in rates if r.is_active)
        by_key: Dict[Tuple[str, str], MetalRate] = {}
        for r in active:
            if r.key in by_key:
                raise ValueError(f"Duplicate metal rate for {r.label!r}.")
            by_key[r.key] = r
        self.rates: Tuple[MetalRate, ...] = active
        self.default_gold_rate: Decimal = non_negative_input(default_gold_rate, "default gold rate")
        self._by_key = by_key

    def __len__(self) -> int:
        return len(self.rates)

    # ---- exact ---------------------------------------------------------

    def _exact(self, material_type: str, material_name: Optional[str]) -> Optional[MetalRate]:
        t = (material_type or "").strip().lower()
        if material_name:
            r = self._by_key.get((material_name.strip().lower(), t))
            return r if r is not None and r.price_per_gram > ZERO else None
        for r in self.rates:
            if r.key[1] == t and r.price_per_gram > ZERO:
                return r
        return None

    # ---- ladders -------------------------------------------------------

    def gold_rate_for_karat(self, karat: int) -> Optional[Decimal]:
        """
        Rate for `karat`; when that karat is not configured the nearest one is
        scaled by karat ratio. None when the table has no gold rate at all.
        """
        candidates: List[Tuple[int, Decimal]] = [
            (r.karat, r.price_per_gram)
            for r in self.rates
            if r.is_gold and r.karat and r.price_per_gram > ZERO
        ]
        if not candidates:
            return None
        for k, rate in candidates:
            if k == karat:
                return rate
        k, rate = min(candidates, key=lambda c: (abs(c[0] - karat), -c[0]))
        return rate * karat / k

    def silver_rate_for_purity(self, purity: int) -> Optional[Decimal]:
        candidates: List[Tuple[int, Decimal]] = [
            (r.purity, r.price_per_gram)
            for r in self.rates
            if r.is_silver and r.purity and r.price_per_gram > ZERO
        ]
        if not candidates:
            return None
        for p, rate in candidates:
            if p == purity:
                return rate
        p, rate = min(candidates, key=lambda c: (abs(c[0] - purity), -c[0]))
        return rate * purity / p

    # ---- public lookup -------------------------------------------------

    def lookup(self, material_type: str, material_name: Optional[str] = None) -> RateLookup:
        exact = self._exact(material_type, material_name)
        if exact is not None:
            return RateLookup(exact.price_per_gram, SOURCE_EXACT, exact.label)

        text = f"{material_name or ''} {material_type or ''}".strip()
        lowered = text.lower()
        karat = extract_karat(text)

        if "gold" in lowered or (karat is not None and "silver" not in lowered):
            k = karat or DEFAULT_GOLD_KARAT
            rate = self.gold_rate_for_karat(k)
            if rate is not None:
                return RateLookup(rate, SOURCE_KARAT, f"Gold {k}K")
        elif "silver" in lowered:
            p = extract_silver_purity(text)
            rate = self.silver_rate_for_purity(p)
            if rate is not None:
                return RateLookup(rate, SOURCE_PURITY, f"Silver {p}")

        _log.warning(
            "No metal rate for %r; using default gold rate %s.", text, self.default_gold_rate
        )
        return RateLookup(self.default_gold_rate, SOURCE_DEFAULT, "Default gold")

    @classmethod
    def from_ladders(cls, rate_24k=None, rate_999=None, default_gold_rate=None) -> "MetalRateTable":
        """Build a table from the standard gold karat / silver purity ladders."""
        rates: List[MetalRate] = []
        if rate_24k is not None:
            for k, r in gold_karat_ladder(to_decimal(rate_24k)).items():
                rates.append(MetalRate("Gold", f"{k}K", r))
        if rate_999 is not None:
            for p, r in silver_purity_ladder(to_decimal(rate_999)).items():
                rates.append(MetalRate("Silver", str(p), r))
        return cls(rates, default_gold_rate=default_gold_rate)
