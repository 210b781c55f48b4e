"""
Full jewelry price calculation — used when an admin prices a new product
and by the public price-calculator tool.

    metal cost  = grams × 24k gold price/gram × purity
    stone cost  = Σ carats × per-carat price
    total (INR) = (metal + stones) × (1 + overhead)
    total (USD) = total INR / USD→INR rate

Per-carat prices and metal purity come from the catalog when available;
otherwise they are inferred from the name. All amounts INR until the final
USD conversion.
"""

import logging
from typing import Optional

from .config import settings
from .price_estimator import round_half_up

logger = logging.getLogger(__name__)

DEFAULT_CARATS = 0.5

# Karat → purity, checked in order ("24k" before "14k" so "24k" isn't read as "4k")
KARAT_PURITY = [
    ("24", 1.0),
    ("22", 0.91),
    ("18", 0.75),
    ("14", 0.58),
]
DEFAULT_PURITY = 0.75  # 18k

FALLBACK_PRICE = {"price_inr": 95000, "price_usd": 1200}


class JewelryPricer:
    """
    Prices a piece from its composition.
    Catalog rows are optional — name-based estimates fill any gaps.
    """

    def __init__(self, metal_types: Optional[list] = None, stone_types: Optional[list] = None):
        self.metal_types = metal_types or []
        self.stone_types = stone_types or []

    def calculate(self, metal_type: str, metal_weight: float, gems: Optional[list] = None,
                  metal_type_id: Optional[int] = None) -> dict:
        """
        Args:
            metal_type: metal name, e.g. "18k Yellow Gold"
            metal_weight: grams
            gems: [{"name": str, "carats": float, "stone_type_id": int}, ...]
            metal_type_id: catalog id — takes priority over the name

        Returns:
            {"price_inr": int, "price_usd": int,
             "breakdown": {"metal_cost": int, "stone_cost": int, "overhead": int}}
        """
        try:
            purity = self.metal_purity(metal_type or "", metal_type_id)
            metal_cost = (metal_weight or 0) * settings.GOLD_24K_PRICE_PER_GRAM_INR * purity

            stone_cost = 0.0
            for gem in gems or []:
                carats = gem.get("carats") or DEFAULT_CARATS
                per_carat = self.stone_price_per_carat(gem.get("name") or "", gem.get("stone_type_id"))
                stone_cost += carats * per_carat

            base_cost = metal_cost + stone_cost
            overhead = base_cost * settings.OVERHEAD_PCT / 100.0
            price_inr = round_half_up(base_cost + overhead)
            price_usd = round_half_up(price_inr / settings.USD_TO_INR_RATE)

            return {
                "price_inr": price_inr,
                "price_usd": price_usd,
                "breakdown": {
                    "metal_cost": round_half_up(metal_cost),
                    "stone_cost": round_half_up(stone_cost),
                    "overhead": round_half_up(overhead),
                },
            }
        except Exception as e:
            logger.error("Jewelry price calculation failed: %s", e)
            return dict(FALLBACK_PRICE)

    def metal_purity(self, metal_type: str, metal_type_id: Optional[int] = None) -> float:
        """Catalog modifier (percent → fraction) when set, else karat from the name."""
        if metal_type_id is not None:
            row = _find(self.metal_types, lambda m: m.id == metal_type_id)
            if row is not None and row.price_modifier:
                return row.price_modifier / 100.0

        name = metal_type.lower().replace(" ", "")
        for karat, purity in KARAT_PURITY:
            if f"{karat}k" in name:
                return purity
        return DEFAULT_PURITY

    def stone_price_per_carat(self, gem_name: str, stone_type_id: Optional[int] = None) -> float:
        """Per-carat INR price: catalog by id, then catalog by name, then name rules."""
        if stone_type_id is not None:
            row = _find(self.stone_types, lambda s: s.id == stone_type_id)
            if row is not None and row.price_modifier:
                return row.price_modifier

        lowered = gem_name.lower()
        row = _find(self.stone_types, lambda s: s.name and s.name.lower() in lowered)
        if row is not None and row.price_modifier:
            return row.price_modifier

        return estimate_price_per_carat(gem_name)


def estimate_price_per_carat(gem_name: str) -> float:
    """Rule-of-thumb INR per-carat prices when the catalog has nothing."""
    name = (gem_name or "").lower()

    if "diamond" in name:
        if "lab" in name or "synthetic" in name:
            return 20000
        return 56000
    if "polki" in name:
        return 7000 if "lab" in name else 15000

    if "ruby" in name or "sapphire" in name:
        return 3000
    if "emerald" in name:
        return 3500
    if "tanzanite" in name:
        return 1500
    if "amethyst" in name or "quartz" in name or "morganite" in name:
        return 1500

    if "pearl" in name:
        return 300 if "south sea" in name else 100
    if "cz" in name or "zirconia" in name or "swarovski" in name:
        return 1000

    return 500


def _find(rows: list, predicate):
    for row in rows:
        if predicate(row):
            return row
    return None
