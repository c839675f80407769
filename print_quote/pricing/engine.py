# pricing/engine.py

import logging
from typing import Optional

from ..core.common_types import Extras, MaterialInfo, PriceBreakdown, PricingSettings, RoundingMode
from ..core.utils import non_negative, round2, round_up_to_step

logger = logging.getLogger(__name__)

ROUNDING_STEP = 0.05


def apply_rounding(subtotal: float, mode: RoundingMode) -> float:
    """Rounds a 2-decimal subtotal into the final price according to the shop policy."""
    if mode == RoundingMode.UP_TO_0_05:
        return round2(round_up_to_step(subtotal, ROUNDING_STEP))
    return round2(subtotal)


def price(grams: float,
          time_seconds: float,
          material: MaterialInfo,
          settings: Optional[PricingSettings] = None) -> PriceBreakdown:
    """
    Converts mass and print time into an itemized price.

    Pure function: identical inputs always give an identical breakdown.
    Negative, NaN or non-numeric grams / time_seconds are treated as 0.
    Components are summed unrounded; rounding to 2 decimals happens only
    when the breakdown is built.

    Args:
        grams: Printed material mass.
        time_seconds: Estimated print duration.
        material: Supplies cost_per_kg.
        settings: Shop pricing configuration; defaults if None.

    Returns:
        A PriceBreakdown.
    """
    settings = settings or PricingSettings()
    grams = non_negative(grams)
    time_seconds = non_negative(time_seconds)

    material_cost = (grams / 1000.0) * material.cost_per_kg
    material_charge = material_cost * settings.material_markup

    machine_hours = time_seconds / 3600.0
    machine_charge = machine_hours * settings.machine_rate_per_hour

    electricity_kwh = (settings.printer_avg_watts / 1000.0) * machine_hours
    electricity_cost = electricity_kwh * settings.price_per_kwh
    electricity_charge = electricity_cost * settings.electricity_markup

    labour_charge = settings.labour_fee

    extras = Extras(
        min_order_fee=settings.min_order_fee if settings.min_order_fee > 0 else 0.0,
        # Charged as configured, independent of ProcessSettings.supports_enabled
        supports_fee=settings.supports_fee,
        small_part_fee=settings.small_part_fee if grams < settings.small_part_fee_threshold_g else 0.0,
    )

    subtotal_raw = (
        material_charge
        + machine_charge
        + electricity_charge
        + labour_charge
        + extras.min_order_fee
        + extras.supports_fee
        + extras.small_part_fee
    )
    subtotal = round2(subtotal_raw)
    final = apply_rounding(subtotal, settings.rounding_mode)

    logger.debug(f"Priced {grams:.2f}g / {time_seconds:.0f}s: subtotal={subtotal:.2f}, final={final:.2f} ({settings.rounding_mode.value})")
    return PriceBreakdown(
        material_cost=round2(material_cost),
        material_charge=round2(material_charge),
        machine_hours=round2(machine_hours),
        machine_charge=round2(machine_charge),
        electricity_kwh=round2(electricity_kwh),
        electricity_cost=round2(electricity_cost),
        electricity_charge=round2(electricity_charge),
        labour_charge=round2(labour_charge),
        extras=Extras(
            min_order_fee=round2(extras.min_order_fee),
            supports_fee=round2(extras.supports_fee),
            small_part_fee=round2(extras.small_part_fee),
        ),
        subtotal=subtotal,
        final=final,
    )
