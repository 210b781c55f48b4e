"""
Customization price re-estimation.

Input: a product's original priced composition + the customer's metal/stone
substitutions + the metal and stone catalogs.
Output: PriceEstimate dict — an integer estimate in the product's display
currency, with the metal and stone deltas that produced it.

The estimate is ALWAYS original price + deltas. It never reprices a piece
from first principles (that is jewelry_pricer.py), so the admin-configured
product price is preserved. A component that can't be matched in the
catalog contributes zero delta and is reported as a warning.

Pure math — no DB, no I/O. Routers load the catalogs and pass them in.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Union

from .config import settings

logger = logging.getLogger(__name__)

def round_half_up(value: float) -> int:
    """Whole-unit rounding with halves going up (1000.5 -> 1001), not round()'s half-to-even."""
    return int(math.floor(value + 0.5))


# (slot, product name field, product weight field, selection field)
STONE_SLOTS = [
    ("main", "main_stone_type", "main_stone_weight", "main_stone_id"),
    ("secondary", "secondary_stone_type", "secondary_stone_weight", "secondary_stone_id"),
    ("other", "other_stone_type", "other_stone_weight", "other_stone_id"),
]

# Form value meaning "keep the original" — older clients send it instead of null
NONE_SELECTED = "none_selected"


# --- Pricing strategies ---
# Metals and stones both store a "price_modifier" column, but the units differ.
# Wrapping each in its own type keeps a percentage from ever being used as a
# per-carat price (or the reverse).

@dataclass(frozen=True)
class PercentageModifier:
    """Metal markup: 18 means +18% over the baseline metal."""
    percent: float

    @property
    def multiplier(self) -> float:
        return 1 + self.percent / 100.0


@dataclass(frozen=True)
class PerCaratModifier:
    """Stone price per carat, in the reference currency (INR)."""
    price_per_carat: float

    def contribution(self, carats: float, exchange_rate: float) -> float:
        """Stone value in display currency for the given weight."""
        if carats <= 0:
            return 0.0
        return carats * (self.price_per_carat / exchange_rate)


PricingStrategy = Union[PercentageModifier, PerCaratModifier]


@dataclass(frozen=True)
class CatalogEntry:
    id: int
    name: str
    strategy: PricingStrategy


def metal_catalog(rows: list) -> list:
    """Wrap metal type rows (dicts or ORM objects) as percentage-priced entries."""
    return [
        CatalogEntry(_field(r, "id"), _field(r, "name") or "", PercentageModifier(_field(r, "price_modifier") or 0.0))
        for r in rows
    ]


def stone_catalog(rows: list) -> list:
    """Wrap stone type rows (dicts or ORM objects) as per-carat-priced entries."""
    return [
        CatalogEntry(_field(r, "id"), _field(r, "name") or "", PerCaratModifier(_field(r, "price_modifier") or 0.0))
        for r in rows
    ]


def _field(row, name):
    if isinstance(row, dict):
        return row.get(name)
    return getattr(row, name, None)


class PriceEstimator:
    """
    Re-estimates a product's price after metal/stone substitutions.

    Construct once per request with the current catalogs; estimate() is
    idempotent and has no side effects.
    """

    def __init__(
        self,
        metals: list,
        stones: list,
        exchange_rate: Optional[float] = None,
        metal_share: Optional[float] = None,
    ):
        self.metals = metals
        self.stones = stones
        self.exchange_rate = exchange_rate or settings.EXCHANGE_RATE_INR_PER_USD
        self.metal_share = settings.METAL_SHARE_OF_PRICE if metal_share is None else metal_share

    @classmethod
    def from_rows(cls, metal_rows: list, stone_rows: list, **kwargs) -> "PriceEstimator":
        return cls(metal_catalog(metal_rows), stone_catalog(stone_rows), **kwargs)

    def estimate(self, product: dict, selection: Optional[dict] = None, currency: str = "USD") -> dict:
        """
        Returns a PriceEstimate dict:
            {
                "estimated_price": int,
                "original_price": float,
                "metal_delta": float,
                "stone_delta": float,
                "currency": str,
                "warnings": [str],
                "fallback": bool,    # True when the catch-all path was taken
            }

        Never raises. Any unexpected error falls back to the rounded original_price.
        """
        selection = selection or {}
        original_price = self.original_price(product)
        warnings = []

        try:
            metal_delta = self._metal_delta(product, selection, original_price, warnings)
            original_stones, new_stones = self._stone_totals(product, selection, warnings)
            stone_delta = new_stones - original_stones

            estimated = round_half_up(original_price + metal_delta + stone_delta)
            if estimated < 0:
                warnings.append(
                    f"Estimated price is negative ({estimated}) — substitutions cost more "
                    f"than the original piece is priced at. Review before quoting."
                )
                logger.warning("Negative customization estimate %s for product %s",
                               estimated, product.get("id"))

            return {
                "estimated_price": estimated,
                "original_price": original_price,
                "metal_delta": round(metal_delta, 2),
                "stone_delta": round(stone_delta, 2),
                "currency": currency,
                "warnings": warnings,
                "fallback": False,
            }
        except Exception as e:
            logger.error("Price re-estimation failed for product %s: %s", product.get("id"), e)
            return {
                "estimated_price": round_half_up(original_price),
                "original_price": original_price,
                "metal_delta": 0.0,
                "stone_delta": 0.0,
                "currency": currency,
                "warnings": warnings + [f"Estimate unavailable ({e}) — showing original price."],
                "fallback": True,
            }

    @staticmethod
    def original_price(product: dict) -> float:
        """Display-currency reference price; base price when none was calculated."""
        price = product.get("calculated_price_usd") or product.get("base_price") or 0
        try:
            return float(price)
        except (TypeError, ValueError):
            return 0.0

    # --- Metal ---

    def _metal_delta(self, product: dict, selection: dict, original_price: float, warnings: list) -> float:
        selected_id = _selected_id(selection.get("metal_type_id"))
        original_name = product.get("metal_type") or ""
        original = self._find_by_name(self.metals, original_name)

        if original is None:
            if original_name:
                warnings.append(
                    f"Original metal '{original_name}' not found in metal catalog — "
                    f"metal change not priced."
                )
                logger.warning("Metal catalog miss: %r", original_name)
            return 0.0

        if selected_id is None or selected_id == original.id:
            return 0.0

        selected = self._find_by_id(self.metals, selected_id)
        if selected is None:
            warnings.append(f"Selected metal id {selected_id} not found — keeping original metal price.")
            logger.warning("Selected metal id %s not in catalog", selected_id)
            return 0.0

        metal_share = original_price * self.metal_share
        return metal_share * (selected.strategy.multiplier / original.strategy.multiplier - 1)

    # --- Stones ---

    def _stone_totals(self, product: dict, selection: dict, warnings: list) -> tuple:
        original_total = 0.0
        new_total = 0.0

        for slot, name_field, weight_field, selection_field in STONE_SLOTS:
            weight = _to_float(product.get(weight_field))
            original_name = product.get(name_field) or ""
            original = self._find_by_name(self.stones, original_name)
            selected_id = _selected_id(selection.get(selection_field))

            original_contribution = 0.0
            if original is not None:
                original_contribution = original.strategy.contribution(weight, self.exchange_rate)
            elif original_name and weight > 0:
                warnings.append(
                    f"Original {slot} stone '{original_name}' not found in stone catalog — "
                    f"its value can't be removed from the estimate."
                )
                logger.warning("Stone catalog miss (%s): %r", slot, original_name)

            new_contribution = original_contribution
            if selected_id is not None:
                selected = self._find_by_id(self.stones, selected_id)
                if selected is None:
                    warnings.append(f"Selected {slot} stone id {selected_id} not found — keeping original stone.")
                    logger.warning("Selected stone id %s not in catalog", selected_id)
                else:
                    new_contribution = selected.strategy.contribution(weight, self.exchange_rate)

            original_total += original_contribution
            new_total += new_contribution

        return original_total, new_total

    # --- Catalog lookups ---

    @staticmethod
    def _find_by_name(entries: list, name: str) -> Optional[CatalogEntry]:
        if not name:
            return None
        wanted = name.strip().lower()
        for entry in entries:
            if entry.name.strip().lower() == wanted:
                return entry
        return None

    @staticmethod
    def _find_by_id(entries: list, entry_id: int) -> Optional[CatalogEntry]:
        for entry in entries:
            if entry.id == entry_id:
                return entry
        return None


def _selected_id(value) -> Optional[int]:
    """Normalize a form selection to an int id, or None for 'keep original'."""
    if value is None or value == "" or value == NONE_SELECTED:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _to_float(value) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0
