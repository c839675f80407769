# inventory.py

import os
import json
import math
import logging
import threading
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from .core.common_types import DEFAULT_DENSITY_G_CM3, DEFAULT_SUPPORT_MULTIPLIER, MaterialInfo
from .core.exceptions import ConfigurationError, InsufficientStockError, MaterialNotFoundError
from .core.utils import parse_price_to_pence

logger = logging.getLogger(__name__)

BUNDLED_MATERIALS_PATH = os.path.join(os.path.dirname(__file__), "processes", "print_3d", "materials.json")


class MovementType(str, Enum):
    RESTOCK = "restock"
    RESERVE = "reserve"
    RELEASE = "release"
    CONSUME = "consume"


class InventoryItem(BaseModel):
    """One spool / stock line of a material in a given colour."""
    id: str
    material: str
    colour: str = ""
    active: bool = True
    grams_available: float = Field(0.0, ge=0)
    grams_reserved: float = Field(0.0, ge=0)
    cost_per_kg_pence: int = Field(..., ge=0)
    density_g_per_cm3: float = Field(DEFAULT_DENSITY_G_CM3, gt=0)
    support_multiplier: float = Field(DEFAULT_SUPPORT_MULTIPLIER, ge=1.0)

    @model_validator(mode="before")
    @classmethod
    def _accept_legacy_columns(cls, data: Any) -> Any:
        # Older rows use *_g suffixes, is_active, or a decimal cost_per_kg_gbp
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for legacy, current in (("grams_available_g", "grams_available"),
                                ("grams_reserved_g", "grams_reserved"),
                                ("is_active", "active")):
            if legacy in data and current not in data:
                data[current] = data.pop(legacy)
        if data.get("cost_per_kg_pence") is None and data.get("cost_per_kg_gbp") is not None:
            data["cost_per_kg_pence"] = round(float(data.pop("cost_per_kg_gbp")) * 100)
        return data

    @field_validator("cost_per_kg_pence", mode="before")
    @classmethod
    def _normalise_cost(cls, v):
        # The column holds pence; only labelled strings ("£20", "gbp") are major units
        return parse_price_to_pence(v, bare_as_pence=True)

    def to_material(self) -> MaterialInfo:
        """MaterialInfo view used by the estimator (cost in major units)."""
        return MaterialInfo(
            id=self.id,
            name=f"{self.material} {self.colour}".strip(),
            cost_per_kg=self.cost_per_kg_pence / 100.0,
            density_g_cm3=self.density_g_per_cm3,
            support_multiplier=self.support_multiplier,
        )


class InventoryMovement(BaseModel):
    item_id: str
    type: MovementType
    grams: float
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class MaterialInventory:
    """
    In-process material catalog with stock reservation.

    Reservation moves grams from available to reserved under a lock, so
    concurrent quote requests can't oversell a spool. The estimation pipeline
    only reads from here.
    """

    def __init__(self, items: Iterable[InventoryItem] = ()):
        self._items: Dict[str, InventoryItem] = {item.id: item for item in items}
        self._lock = threading.Lock()
        self.movements: List[InventoryMovement] = []

    @classmethod
    def from_json(cls, path: Optional[str] = None) -> "MaterialInventory":
        """
        Loads inventory items from a JSON list. Invalid rows are skipped with a warning.

        Raises:
            ConfigurationError: If the file is missing or isn't a JSON list.
        """
        path = path or BUNDLED_MATERIALS_PATH
        if not os.path.exists(path):
            logger.error(f"Material file not found: {path}")
            raise ConfigurationError(f"Material definition file missing: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                rows = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Error decoding JSON from material file {path}: {e}", exc_info=True)
            raise ConfigurationError(f"Invalid JSON in material file: {path}") from e

        if not isinstance(rows, list):
            raise ConfigurationError(f"Material file {path} must contain a JSON list of items.")

        items = []
        for row in rows:
            try:
                items.append(InventoryItem.model_validate(row))
            except ValidationError as e:
                row_id = row.get("id", "N/A") if isinstance(row, dict) else "N/A"
                logger.warning(f"Skipping invalid material definition in {os.path.basename(path)} for ID '{row_id}': {e}")

        if not items:
            logger.warning(f"No valid materials loaded from {path}.")
        else:
            logger.info(f"Successfully loaded {len(items)} materials from {os.path.basename(path)}.")
        return cls(items)

    def get(self, item_id: str) -> InventoryItem:
        item = self._items.get(item_id)
        if item is None:
            raise MaterialNotFoundError(
                f"Material '{item_id}' is not available. Available materials: {list(self._items)}"
            )
        return item

    def get_material(self, item_id: str) -> MaterialInfo:
        return self.get(item_id).to_material()

    def list_items(self, active_only: bool = True) -> List[InventoryItem]:
        return [item for item in self._items.values() if item.active or not active_only]

    def reserve(self, item_id: str, grams: float) -> InventoryItem:
        """
        Moves grams from available to reserved.

        Raises InsufficientStockError if the item is inactive or has fewer than
        grams available. Release, consume and restock still work on inactive items.
        """
        grams = _positive_grams(grams)
        with self._lock:
            item = self.get(item_id)
            if not item.active:
                raise InsufficientStockError(f"Cannot reserve '{item_id}': item is inactive.")
            if grams > item.grams_available:
                raise InsufficientStockError(
                    f"Cannot reserve {grams:.1f}g of '{item_id}': only {item.grams_available:.1f}g available."
                )
            item.grams_available -= grams
            item.grams_reserved += grams
            self._record(item_id, MovementType.RESERVE, grams)
        logger.info(f"Reserved {grams:.1f}g of '{item_id}' ({item.grams_available:.1f}g left)")
        return item

    def release(self, item_id: str, grams: float) -> InventoryItem:
        """Returns reserved grams to available stock, e.g. when a quote is denied."""
        grams = _positive_grams(grams)
        with self._lock:
            item = self.get(item_id)
            released = min(grams, item.grams_reserved)
            item.grams_reserved -= released
            item.grams_available += released
            self._record(item_id, MovementType.RELEASE, released)
        return item

    def consume(self, item_id: str, grams: float) -> InventoryItem:
        """Drops reserved grams once the part has been printed."""
        grams = _positive_grams(grams)
        with self._lock:
            item = self.get(item_id)
            consumed = min(grams, item.grams_reserved)
            item.grams_reserved -= consumed
            self._record(item_id, MovementType.CONSUME, consumed)
        return item

    def restock(self, item_id: str, grams: float) -> InventoryItem:
        grams = _positive_grams(grams)
        with self._lock:
            item = self.get(item_id)
            item.grams_available += grams
            self._record(item_id, MovementType.RESTOCK, grams)
        return item

    def _record(self, item_id: str, movement_type: MovementType, grams: float):
        self.movements.append(InventoryMovement(item_id=item_id, type=movement_type, grams=grams))


def _positive_grams(grams: float) -> float:
    try:
        g = float(grams)
    except (TypeError, ValueError) as e:
        raise ValueError(f"grams must be a positive number, got: {grams!r}") from e
    if not math.isfinite(g) or g <= 0:
        raise ValueError(f"grams must be a positive number, got: {grams!r}")
    return g
