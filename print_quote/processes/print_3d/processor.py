# processes/print_3d/processor.py

import math
import logging
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from ...core import geometry
from ...core.common_types import EstimateResult, MaterialInfo, PricingSettings, ProcessSettings
from ...core.exceptions import ConfigurationError, InvalidEstimateError
from ...config import settings
from ...inventory import MaterialInventory
from ...pricing.engine import price
from ..base_processor import BaseProcessor
from .defaults import DEFAULTS, EstimatorDefaults
from .mass import estimate_mass
from .timing import estimate_time

logger = logging.getLogger(__name__)


def _as_process_settings(value: Union[ProcessSettings, Dict[str, Any]]) -> ProcessSettings:
    if isinstance(value, ProcessSettings):
        return value
    try:
        return ProcessSettings.model_validate(value)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid process settings: {e}") from e


def _as_material(value: Union[MaterialInfo, Dict[str, Any]]) -> MaterialInfo:
    if isinstance(value, MaterialInfo):
        return value
    return MaterialInfo.from_record(value)


def _require_positive(name: str, value: float):
    if not math.isfinite(value) or value <= 0:
        raise InvalidEstimateError(f"Estimated {name} is {value!r}; refusing to quote.")


def run_estimation(model_bytes: bytes,
                   process_settings: Union[ProcessSettings, Dict[str, Any]],
                   material: Union[MaterialInfo, Dict[str, Any]],
                   pricing_settings: Optional[PricingSettings] = None,
                   defaults: EstimatorDefaults = DEFAULTS) -> EstimateResult:
    """
    Full pipeline: mesh bytes -> geometry -> mass -> time -> price.

    Deterministic and free of shared state, so it may run concurrently from
    any number of threads or processes.

    Raises:
        MeshParseError: The bytes are not a usable STL.
        ConfigurationError: Settings or material record are invalid.
        InvalidEstimateError: Mass or time came out non-finite or non-positive.
    """
    process_settings = _as_process_settings(process_settings)
    material = _as_material(material)

    geom = geometry.analyze(model_bytes)

    mass = estimate_mass(geom, process_settings, material, defaults)
    _require_positive("grams", mass.grams)

    timing = estimate_time(geom, mass.printed_volume_mm3, process_settings, defaults)
    _require_positive("time_seconds", timing.time_seconds)

    breakdown = price(mass.grams, timing.time_seconds, material, pricing_settings)
    logger.info(f"Estimate for '{material.id}': {mass.grams:.2f}g, {timing.time_seconds:.0f}s, final {breakdown.final:.2f}")

    return EstimateResult(
        grams=mass.grams,
        time_seconds=timing.time_seconds,
        printed_volume_mm3=mass.printed_volume_mm3,
        breakdown=breakdown,
        geometry=geom,
    )


class Print3DProcessor(BaseProcessor):
    """FDM estimator built on closed-form mass and time approximations."""

    def __init__(self,
                 inventory: Optional[MaterialInventory] = None,
                 pricing_settings: Optional[PricingSettings] = None,
                 defaults: Optional[EstimatorDefaults] = None):
        super().__init__(inventory=inventory, pricing_settings=pricing_settings)
        self.defaults = defaults or DEFAULTS.model_copy(update={"default_preset": settings.default_layer_preset})

    def estimate(self,
                 model_bytes: bytes,
                 process_settings: Union[ProcessSettings, Dict[str, Any]],
                 material: Union[MaterialInfo, Dict[str, Any]],
                 pricing_settings: Optional[PricingSettings] = None) -> EstimateResult:
        return run_estimation(
            model_bytes,
            process_settings,
            material,
            pricing_settings or self.pricing_settings,
            self.defaults,
        )
