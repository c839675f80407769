# processes/base_processor.py

import os
import abc
import time
import logging
from typing import Any, Dict, List, Optional, Union

from ..core.common_types import (
    EstimateResult,
    MaterialInfo,
    PricingSettings,
    ProcessSettings,
    QuoteResult,
)
from ..core import utils
from ..config import settings
from ..inventory import MaterialInventory

logger = logging.getLogger(__name__)


class BaseProcessor(abc.ABC):
    """
    Abstract Base Class for print process estimators.
    Owns the material catalog and shop pricing settings, and turns a model
    file on disk into a QuoteResult.
    """

    def __init__(self,
                 inventory: Optional[MaterialInventory] = None,
                 pricing_settings: Optional[PricingSettings] = None):
        """
        Args:
            inventory: Material catalog; loaded from the configured JSON file if None.
            pricing_settings: Shop pricing; built from the environment if None.
        """
        self.inventory = inventory or MaterialInventory.from_json(settings.materials_path)
        self.pricing_settings = pricing_settings or settings.pricing()

    def get_material_info(self, material_id: str) -> MaterialInfo:
        """
        Retrieves the MaterialInfo for an inventory item.

        Raises:
            MaterialNotFoundError: If the material_id is not in the inventory.
        """
        return self.inventory.get_material(material_id)

    def list_available_materials(self) -> List[Dict[str, Any]]:
        """Returns the active inventory items as plain dicts."""
        return [item.model_dump() for item in self.inventory.list_items()]

    @abc.abstractmethod
    def estimate(self,
                 model_bytes: bytes,
                 process_settings: Union[ProcessSettings, Dict[str, Any]],
                 material: Union[MaterialInfo, Dict[str, Any]],
                 pricing_settings: Optional[PricingSettings] = None) -> EstimateResult:
        """
        Runs the estimation pipeline on an in-memory model.

        Args:
            model_bytes: Raw model file contents.
            process_settings: Customer print settings.
            material: Material record (cost, density, support multiplier).
            pricing_settings: Overrides the processor's shop pricing if given.

        Returns:
            An EstimateResult with mass, time, price breakdown and geometry.
        """
        pass

    def generate_quote(self,
                       file_path: str,
                       material_id: str,
                       process_settings: Optional[Union[ProcessSettings, Dict[str, Any]]] = None) -> QuoteResult:
        """
        Reads a model file, resolves the material and prices it.

        Errors (FileNotFoundError, MaterialNotFoundError, MeshParseError,
        InvalidEstimateError, ConfigurationError) propagate to the caller.
        """
        total_start_time = time.time()
        file_name = os.path.basename(file_path)
        logger.info(f"Generating quote for: {file_name}, Material: {material_id}")

        material_info = self.get_material_info(material_id)
        if not os.path.exists(file_path):
            raise FileNotFoundError(f"Input file not found: {file_path}")
        with open(file_path, "rb") as f:
            model_bytes = f.read()

        process_settings = process_settings if process_settings is not None else ProcessSettings()
        estimate = self.estimate(model_bytes, process_settings, material_info)

        total_processing_time = time.time() - total_start_time
        result = QuoteResult(
            file_name=file_name,
            material_id=material_id,
            settings=process_settings,
            estimate=estimate,
            estimated_process_time_str=utils.format_time(estimate.time_seconds),
            processing_time_sec=total_processing_time,
        )
        logger.info(f"Quote {result.quote_id} finished in {total_processing_time:.3f}s. Final price: {estimate.breakdown.final:.2f}, Time: {result.estimated_process_time_str}")
        return result
