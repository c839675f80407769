# testing/test_pricing.py

import math

import pytest

from print_quote.core.common_types import MaterialInfo, PricingSettings, RoundingMode
from print_quote.core.exceptions import ConfigurationError
from print_quote.pricing import apply_rounding, price


def itemized_total(bd) -> float:
    return (bd.material_charge + bd.machine_charge + bd.electricity_charge + bd.labour_charge
            + bd.extras.min_order_fee + bd.extras.supports_fee + bd.extras.small_part_fee)


def test_default_breakdown(pla):
    bd = price(100.0, 3600.0, pla)
    assert bd.material_cost == 2.0
    assert bd.material_charge == 3.0
    assert bd.machine_hours == 1.0
    assert bd.machine_charge == 0.3
    assert bd.electricity_kwh == 0.12
    assert bd.electricity_cost == 0.0
    assert bd.labour_charge == 1.0
    assert bd.extras.model_dump() == {"min_order_fee": 0.0, "supports_fee": 0.0, "small_part_fee": 0.0}
    assert bd.subtotal == 4.3
    assert bd.final == 4.3


def test_price_is_idempotent(pla):
    settings = PricingSettings(price_per_kwh=0.28, min_order_fee=2.0, rounding_mode=RoundingMode.UP_TO_0_05)
    first = price(8.3576, 1569.1, pla, settings)
    second = price(8.3576, 1569.1, pla, settings)
    assert first == second
    assert first.model_dump_json() == second.model_dump_json()


@pytest.mark.parametrize("grams,seconds", [
    (1.0, 600.0),
    (8.3576, 1569.1),
    (250.0, 36000.0),
    (1234.567, 98765.4),
])
def test_subtotal_matches_items(pla, grams, seconds):
    settings = PricingSettings(price_per_kwh=0.31, min_order_fee=1.5, supports_fee=0.75)
    bd = price(grams, seconds, pla, settings)
    # the 7 items and the subtotal are each rounded to the cent independently
    assert bd.subtotal == pytest.approx(itemized_total(bd), abs=0.04)


def test_electricity_charge(pla):
    settings = PricingSettings(price_per_kwh=0.30, printer_avg_watts=120, electricity_markup=1.1)
    bd = price(100.0, 7200.0, pla, settings)
    assert bd.electricity_kwh == 0.24
    assert bd.electricity_cost == 0.07
    assert bd.electricity_charge == 0.08


def test_small_part_fee_threshold(pla):
    assert price(14.99, 600.0, pla).extras.small_part_fee == 0.5
    assert price(15.0, 600.0, pla).extras.small_part_fee == 0.0


def test_min_order_fee_is_flat(pla):
    base = price(100.0, 3600.0, pla)
    with_fee = price(100.0, 3600.0, pla, PricingSettings(min_order_fee=5.0))
    assert with_fee.extras.min_order_fee == 5.0
    assert with_fee.subtotal == pytest.approx(base.subtotal + 5.0)


def test_supports_fee_charged_as_configured(pla):
    # The engine has no notion of the job's support flag; the fee is a flat shop setting
    bd = price(100.0, 3600.0, pla, PricingSettings(supports_fee=2.0))
    assert bd.extras.supports_fee == 2.0
    assert bd.subtotal == pytest.approx(6.3)


@pytest.mark.parametrize("grams,seconds", [(-5.0, -100.0), (float("nan"), float("nan")), (None, "abc")])
def test_bad_inputs_coerced_to_zero(pla, grams, seconds):
    bd = price(grams, seconds, pla)
    assert bd.material_cost == 0.0
    assert bd.machine_hours == 0.0
    assert bd.extras.small_part_fee == 0.5
    assert bd.subtotal == 1.5
    assert math.isfinite(bd.final)


def test_rounding_modes(pla):
    settings = PricingSettings(labour_fee=1.01)
    plain = price(100.0, 3600.0, pla, settings)
    assert plain.subtotal == 4.31
    assert plain.final == 4.31

    rounded = price(100.0, 3600.0, pla, settings.model_copy(update={"rounding_mode": RoundingMode.UP_TO_0_05}))
    assert rounded.subtotal == 4.31
    assert rounded.final == 4.35


@pytest.mark.parametrize("subtotal,expected", [
    (0.0, 0.0),
    (4.30, 4.30),
    (12.35, 12.35),
    (12.36, 12.40),
    (0.01, 0.05),
    (99.99, 100.0),
])
def test_round_up_to_0_05(subtotal, expected):
    assert apply_rounding(subtotal, RoundingMode.UP_TO_0_05) == expected


def test_zero_cost_material():
    free = MaterialInfo(cost_per_kg=0.0)
    bd = price(100.0, 3600.0, free)
    assert bd.material_charge == 0.0
    assert bd.subtotal == 1.3


def test_pricing_settings_from_record_uses_defaults_for_unset():
    settings = PricingSettings.from_record({"machine_rate_per_hour": None, "labour_fee": 2.5, "rounding_mode": "up-to-0.05"})
    assert settings.machine_rate_per_hour == 0.30
    assert settings.labour_fee == 2.5
    assert settings.rounding_mode == RoundingMode.UP_TO_0_05
    assert PricingSettings.from_record(None) == PricingSettings()


@pytest.mark.parametrize("record", [{"labour_fee": -1}, {"price_per_kwh": "cheap"}, {"material_markup": float("inf")}])
def test_pricing_settings_from_record_rejects_invalid(record):
    with pytest.raises(ConfigurationError):
        PricingSettings.from_record(record)
