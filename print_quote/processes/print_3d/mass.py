# processes/print_3d/mass.py

import math
import logging

from ...core.common_types import Geometry, MassEstimate, MaterialInfo, ProcessSettings
from ...core.utils import non_negative
from .defaults import DEFAULTS, EstimatorDefaults

logger = logging.getLogger(__name__)


def estimate_mass(geometry: Geometry,
                  settings: ProcessSettings,
                  material: MaterialInfo,
                  defaults: EstimatorDefaults = DEFAULTS) -> MassEstimate:
    """
    Approximates printed material mass without slicing.

    The part is split into perimeter shell, solid top/bottom skins and an
    infill-scaled core:

        shell      = area * perimeters * extrusion_width
        top_bottom = footprint * 2 * top_bottom_layers * layer_height
        core       = max(volume - shell, 0) * infill

    Args:
        geometry: Output of the mesh analyzer.
        settings: Customer print settings.
        material: Density and support multiplier come from here.
        defaults: Estimator constants.

    Returns:
        A MassEstimate. grams is never below ``defaults.min_grams``.
    """
    volume = non_negative(geometry.volume_mm3)
    area = non_negative(geometry.area_mm2)
    bbox_x = non_negative(geometry.bounding_box.size.x)
    bbox_y = non_negative(geometry.bounding_box.size.y)
    layer_height = defaults.layer_height_for(settings)

    shell = area * settings.perimeters * settings.extrusion_width_mm
    if shell > volume:
        # Thin or degenerate geometry: walls would be thicker than the part
        shell = volume * defaults.shell_clamp_fraction

    area_share = area * defaults.footprint_area_fraction
    footprint = min(area_share, bbox_x * bbox_y or area_share)
    top_bottom = footprint * 2 * settings.top_bottom_layers * layer_height

    core = max(volume - shell, 0.0) * (settings.infill_percent / 100.0)
    printed = shell + top_bottom + core

    grams = (printed / 1000.0) * material.density_g_cm3
    if settings.supports_enabled:
        grams *= material.support_multiplier

    if not math.isfinite(grams) or grams < defaults.min_grams:
        logger.debug(f"Mass estimate {grams} below floor, clamping to {defaults.min_grams}g")
        grams = defaults.min_grams

    logger.debug(f"Mass: shell={shell:.1f} tb={top_bottom:.1f} core={core:.1f} printed={printed:.1f}mm³ -> {grams:.2f}g")
    return MassEstimate(
        shell_volume_mm3=shell,
        top_bottom_volume_mm3=top_bottom,
        core_volume_mm3=core,
        printed_volume_mm3=printed,
        grams=grams,
    )
