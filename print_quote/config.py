# config.py

import logging
from typing import Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.common_types import LayerPreset, PricingSettings, RoundingMode
from .core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class Settings(BaseSettings):
    """
    Application configuration settings loaded from environment variables and .env file.

    Pricing fields left unset fall back to the PricingSettings defaults.
    """
    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore'  # Ignore extra fields from environment/dotenv
    )

    # Logging Configuration
    log_level: str = Field("INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)")

    # Material catalog; None means the bundled materials.json
    materials_path: Optional[str] = Field(None, description="Path to an inventory JSON file.")
    default_layer_preset: LayerPreset = LayerPreset.STANDARD

    # Pricing Configuration
    machine_rate_per_hour: Optional[float] = None
    price_per_kwh: Optional[float] = None
    printer_avg_watts: Optional[float] = None
    electricity_markup: Optional[float] = None
    material_markup: Optional[float] = None
    labour_fee: Optional[float] = None
    min_order_fee: Optional[float] = None
    supports_fee: Optional[float] = None
    small_part_fee_threshold_g: Optional[float] = None
    small_part_fee: Optional[float] = None
    rounding_mode: Optional[RoundingMode] = None

    @field_validator('log_level')
    @classmethod
    def log_level_must_be_valid(cls, v):
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'log_level must be one of {valid_levels}')
        return v.upper()

    def pricing(self) -> PricingSettings:
        """Shop pricing settings built from the environment overrides."""
        return PricingSettings.from_record(self.model_dump(include=set(PricingSettings.model_fields)))


def setup_logging(level: Optional[str] = None):
    """Configures the root logger. Called by entry points, never by library code."""
    logging.basicConfig(level=level or settings.log_level, format=LOG_FORMAT)


# --- Singleton Instance ---
try:
    settings = Settings()
    logger.debug(f"Configuration loaded. Log level: {settings.log_level}, default preset: {settings.default_layer_preset.value}")
except ValidationError as e:
    logger.error(f"Failed to load application configuration: {e}")
    raise ConfigurationError(f"Invalid application configuration: {e}") from e
