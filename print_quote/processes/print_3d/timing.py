# processes/print_3d/timing.py

import math
import logging

from ...core.common_types import Geometry, ProcessSettings, TimeEstimate
from ...core.utils import non_negative
from .defaults import DEFAULTS, EstimatorDefaults

logger = logging.getLogger(__name__)


def estimate_time(geometry: Geometry,
                  printed_volume_mm3: float,
                  settings: ProcessSettings,
                  defaults: EstimatorDefaults = DEFAULTS) -> TimeEstimate:
    """
    Approximates print duration from printed volume and part size.

    total = extrusion_length / speed
          + area * area_overhead        (travel, retraction)
          + layers * layer_overhead     (layer changes)

    scaled by the supports multiplier when supports are on, and never less
    than ``defaults.min_time_seconds`` (fixed setup time).
    """
    area = non_negative(geometry.area_mm2)
    bbox_z = non_negative(geometry.bounding_box.size.z)
    printed = non_negative(printed_volume_mm3)
    layer_height = defaults.layer_height_for(settings)
    speed = defaults.speed_for(settings)

    line_area = max(settings.extrusion_width_mm * layer_height, 1e-6)
    extrusion_length = printed / line_area
    extrude_s = extrusion_length / speed

    overhead_s = area * defaults.area_overhead_s_per_mm2
    layers_s = (bbox_z / layer_height) * defaults.layer_overhead_s

    total = extrude_s + overhead_s + layers_s
    if settings.supports_enabled:
        total *= defaults.supports_time_multiplier

    if not math.isfinite(total) or total < defaults.min_time_seconds:
        total = defaults.min_time_seconds

    logger.debug(f"Time: extrude={extrude_s:.0f}s overhead={overhead_s:.0f}s layers={layers_s:.0f}s -> {total:.0f}s @ {speed}mm/s")
    return TimeEstimate(extrusion_length_mm=extrusion_length, time_seconds=total)
