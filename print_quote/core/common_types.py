# core/common_types.py
import time
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ValidationError

from .exceptions import ConfigurationError

# Fallbacks used when an inventory record leaves these unset
DEFAULT_DENSITY_G_CM3 = 1.24
DEFAULT_SUPPORT_MULTIPLIER = 1.18

# --- Enums ---

class SourceFormat(str, Enum):
    """STL serialization a mesh was decoded from."""
    ASCII = "ascii"
    BINARY = "binary"

class LayerPreset(str, Enum):
    """Named print quality profiles. Each maps to a layer height and a nominal speed."""
    DRAFT = "draft"
    STANDARD = "standard"
    FINE = "fine"
    ULTRA = "ultra"

class RoundingMode(str, Enum):
    """How the final price is rounded."""
    NONE = "none"              # plain round to the currency minor unit
    UP_TO_0_05 = "up-to-0.05"  # round up to the next 0.05


def _without_unset(record: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in (record or {}).items() if v is not None}

# --- Geometry Models ---

class Vec3(BaseModel):
    x: float
    y: float
    z: float

class BoundingBox(BaseModel):
    """Axis-aligned bounding box in millimetres."""
    min: Vec3
    max: Vec3
    size: Vec3

class Geometry(BaseModel):
    """Aggregate properties of a parsed triangle mesh (millimetre units)."""
    triangle_count: int = Field(..., ge=1, description="Number of triangles parsed from the model.")
    volume_mm3: float = Field(..., description="Enclosed volume, divergence theorem over all facets.")
    area_mm2: float = Field(..., description="Total surface area of all facets.")
    bounding_box: BoundingBox
    source_format: SourceFormat = Field(..., description="Which STL encoding produced the triangles.")

# --- Material & Process Models ---

class MaterialInfo(BaseModel):
    """Material properties read by the estimator and the pricing engine."""
    id: str = Field("custom", description="Identifier of the inventory item this material came from.")
    name: Optional[str] = Field(None, description="User-friendly name (e.g., 'PLA Black').")
    cost_per_kg: float = Field(..., ge=0, allow_inf_nan=False, description="Material cost per kilogram, shop currency major unit.")
    density_g_cm3: float = Field(DEFAULT_DENSITY_G_CM3, gt=0, allow_inf_nan=False)
    support_multiplier: float = Field(DEFAULT_SUPPORT_MULTIPLIER, ge=1.0, allow_inf_nan=False,
                                      description="Mass multiplier applied when supports are enabled.")

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "MaterialInfo":
        """
        Builds a MaterialInfo from a loosely-typed store record.

        Accepts the column spellings used by the inventory store
        (``cost_per_kg_pence``, ``cost_per_kg_gbp``, ``density_g_per_cm3``...).
        Density and support multiplier fall back to their defaults; a missing
        or non-numeric cost is a ConfigurationError.
        """
        data = _without_unset(record)
        cost = data.get("cost_per_kg", data.get("cost_per_kg_gbp"))
        if cost is None and "cost_per_kg_pence" in data:
            try:
                cost = float(data["cost_per_kg_pence"]) / 100.0
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f"Material cost_per_kg_pence is not numeric: {data['cost_per_kg_pence']!r}") from e
        if cost is None:
            raise ConfigurationError(f"Material record '{data.get('id', 'N/A')}' has no cost_per_kg.")

        try:
            return cls(
                id=str(data.get("id", "custom")),
                name=data.get("name", data.get("material")),
                cost_per_kg=cost,
                density_g_cm3=data.get("density_g_cm3", data.get("density_g_per_cm3", DEFAULT_DENSITY_G_CM3)),
                support_multiplier=data.get("support_multiplier", DEFAULT_SUPPORT_MULTIPLIER),
            )
        except ValidationError as e:
            raise ConfigurationError(f"Invalid material record '{data.get('id', 'N/A')}': {e}") from e

class ProcessSettings(BaseModel):
    """Per-request print settings chosen by the customer."""
    layer_preset: Optional[LayerPreset] = Field(None, description="Quality preset; selects layer height and speed.")
    layer_height_mm: Optional[float] = Field(None, gt=0, allow_inf_nan=False,
                                             description="Explicit layer height; overrides the preset's height.")
    infill_percent: float = Field(0.0, ge=0, le=100, allow_inf_nan=False)
    supports_enabled: bool = False
    perimeters: int = Field(3, ge=1)
    extrusion_width_mm: float = Field(0.45, gt=0, allow_inf_nan=False)
    top_bottom_layers: int = Field(5, ge=0)

class PricingSettings(BaseModel):
    """Shop-wide pricing configuration. Monetary values are in the shop currency's major unit."""
    machine_rate_per_hour: float = Field(0.30, ge=0, allow_inf_nan=False)
    price_per_kwh: float = Field(0.0, ge=0, allow_inf_nan=False)
    printer_avg_watts: float = Field(120.0, ge=0, allow_inf_nan=False)
    electricity_markup: float = Field(1.1, ge=0, allow_inf_nan=False)
    material_markup: float = Field(1.5, ge=0, allow_inf_nan=False)
    labour_fee: float = Field(1.0, ge=0, allow_inf_nan=False)
    min_order_fee: float = Field(0.0, ge=0, allow_inf_nan=False)
    # Flat shop fee, charged whether or not the job itself uses supports
    supports_fee: float = Field(0.0, ge=0, allow_inf_nan=False)
    small_part_fee_threshold_g: float = Field(15.0, ge=0, allow_inf_nan=False)
    small_part_fee: float = Field(0.5, ge=0, allow_inf_nan=False)
    rounding_mode: RoundingMode = RoundingMode.NONE

    @classmethod
    def from_record(cls, record: Optional[Dict[str, Any]]) -> "PricingSettings":
        """Builds settings from a store row, using defaults for unset (None) columns."""
        try:
            return cls(**_without_unset(record))
        except ValidationError as e:
            raise ConfigurationError(f"Invalid pricing settings: {e}") from e

# --- Estimation Results ---

class MassEstimate(BaseModel):
    """Printed volume split by region, and the resulting mass."""
    shell_volume_mm3: float
    top_bottom_volume_mm3: float
    core_volume_mm3: float = Field(..., description="Interior volume after infill scaling.")
    printed_volume_mm3: float
    grams: float

class TimeEstimate(BaseModel):
    extrusion_length_mm: float
    time_seconds: float

class Extras(BaseModel):
    min_order_fee: float = 0.0
    supports_fee: float = 0.0
    small_part_fee: float = 0.0

class PriceBreakdown(BaseModel):
    """Itemized price. All values rounded to 2 decimals for presentation."""
    material_cost: float
    material_charge: float
    machine_hours: float
    machine_charge: float
    electricity_kwh: float
    electricity_cost: float
    electricity_charge: float
    labour_charge: float
    extras: Extras
    subtotal: float
    final: float

class EstimateResult(BaseModel):
    """Output of the full estimation pipeline."""
    grams: float
    time_seconds: float
    printed_volume_mm3: float
    breakdown: PriceBreakdown
    geometry: Geometry

class QuoteResult(BaseModel):
    """A priced estimate for one uploaded model file."""
    quote_id: str = Field(default_factory=lambda: f"Q-{int(time.time()*1000)}", description="Unique identifier for this quote request.")
    file_name: str = Field(..., description="Original filename of the uploaded model.")
    material_id: str
    settings: ProcessSettings
    estimate: EstimateResult
    estimated_process_time_str: str = Field(..., description="Human-readable estimated print time (e.g., '2h 30m').")
    processing_time_sec: float = Field(..., description="Total time taken for the quote generation in seconds.")
