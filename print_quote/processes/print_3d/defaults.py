# processes/print_3d/defaults.py

from typing import Dict

from pydantic import BaseModel, ConfigDict, Field

from ...core.common_types import LayerPreset, ProcessSettings


class EstimatorDefaults(BaseModel):
    """
    Constants for the closed-form mass and time estimators.

    Frozen so one instance can be shared between concurrent estimations;
    build a new instance (e.g. ``DEFAULTS.model_copy(update=...)``) to run
    the pipeline with different shop constants.
    """
    model_config = ConfigDict(frozen=True)

    layer_heights_mm: Dict[LayerPreset, float] = Field(default_factory=lambda: {
        LayerPreset.DRAFT: 0.28,
        LayerPreset.STANDARD: 0.20,
        LayerPreset.FINE: 0.16,
        LayerPreset.ULTRA: 0.12,
    })
    # Nominal traversal speed per preset, mm/s
    speeds_mm_s: Dict[LayerPreset, float] = Field(default_factory=lambda: {
        LayerPreset.DRAFT: 70.0,
        LayerPreset.STANDARD: 55.0,
        LayerPreset.FINE: 45.0,
        LayerPreset.ULTRA: 35.0,
    })
    default_preset: LayerPreset = LayerPreset.STANDARD

    # Mass model
    shell_clamp_fraction: float = 0.9      # shell may not exceed this share of the mesh volume
    footprint_area_fraction: float = 0.25  # projected footprint as a share of surface area
    min_grams: float = 1.0

    # Time model
    area_overhead_s_per_mm2: float = 0.0025
    layer_overhead_s: float = 2.0
    supports_time_multiplier: float = 1.15
    min_time_seconds: float = 600.0

    def preset_for(self, settings: ProcessSettings) -> LayerPreset:
        return settings.layer_preset or self.default_preset

    def layer_height_for(self, settings: ProcessSettings) -> float:
        """Explicit layer height wins; otherwise the preset's height."""
        if settings.layer_height_mm is not None:
            return settings.layer_height_mm
        return self.layer_heights_mm[self.preset_for(settings)]

    def speed_for(self, settings: ProcessSettings) -> float:
        preset = self.preset_for(settings)
        return self.speeds_mm_s.get(preset, self.speeds_mm_s[self.default_preset])


DEFAULTS = EstimatorDefaults()
