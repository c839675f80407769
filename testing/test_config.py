# testing/test_config.py

import pytest
from pydantic import ValidationError

from print_quote.config import Settings
from print_quote.core.common_types import LayerPreset, PricingSettings, RoundingMode
from print_quote.core.exceptions import ConfigurationError
from print_quote.processes.print_3d import processor


def test_unset_pricing_uses_defaults():
    assert Settings().pricing() == PricingSettings()


def test_pricing_overrides(monkeypatch):
    monkeypatch.setenv("LABOUR_FEE", "2.5")
    monkeypatch.setenv("PRICE_PER_KWH", "0.28")
    monkeypatch.setenv("ROUNDING_MODE", "up-to-0.05")
    pricing = Settings().pricing()
    assert pricing.labour_fee == 2.5
    assert pricing.price_per_kwh == 0.28
    assert pricing.rounding_mode == RoundingMode.UP_TO_0_05
    assert pricing.machine_rate_per_hour == 0.30


def test_invalid_pricing_value(monkeypatch):
    monkeypatch.setenv("MATERIAL_MARKUP", "-1")
    with pytest.raises(ConfigurationError):
        Settings().pricing()


def test_log_level_is_normalised(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    assert Settings().log_level == "DEBUG"


def test_invalid_log_level():
    with pytest.raises(ValidationError):
        Settings(log_level="LOUD")


def test_processor_picks_up_default_preset(monkeypatch, inventory):
    monkeypatch.setattr(processor.settings, "default_layer_preset", LayerPreset.DRAFT)
    p = processor.Print3DProcessor(inventory=inventory, pricing_settings=PricingSettings())
    assert p.defaults.default_preset == LayerPreset.DRAFT
