# testing/conftest.py

import logging

import pytest

from print_quote.core.common_types import Geometry, MaterialInfo, PricingSettings, ProcessSettings
from print_quote.inventory import InventoryItem, MaterialInventory
from print_quote.processes.print_3d.processor import Print3DProcessor

from generate_test_models import (
    TETRAHEDRON,
    ascii_stl,
    binary_stl,
    create_simple_cube,
    create_sphere,
    export_ascii,
    export_binary,
    make_geometry,
)

logger = logging.getLogger(__name__)


# --- Fixtures ---

@pytest.fixture(scope="session")
def tetra_ascii() -> bytes:
    return ascii_stl(TETRAHEDRON, name="tetra")

@pytest.fixture(scope="session")
def tetra_binary() -> bytes:
    return binary_stl(TETRAHEDRON)

@pytest.fixture(scope="session")
def cube_mesh():
    return create_simple_cube(10.0)

@pytest.fixture(scope="session")
def sphere_mesh():
    return create_sphere(10.0)

@pytest.fixture(scope="session")
def cube_20mm_binary() -> bytes:
    return export_binary(create_simple_cube(20.0))

@pytest.fixture(scope="session")
def cube_20mm_ascii() -> bytes:
    return export_ascii(create_simple_cube(20.0))

@pytest.fixture
def example_geometry() -> Geometry:
    """10 cm³ part, 30 cm² surface, 40 x 40 x 20 mm."""
    return make_geometry(10000.0, 3000.0, (40.0, 40.0, 20.0))

@pytest.fixture
def degenerate_geometry() -> Geometry:
    return make_geometry(0.0, 0.0)

@pytest.fixture
def pla() -> MaterialInfo:
    return MaterialInfo(id="pla_black", name="PLA Black", cost_per_kg=20.0, density_g_cm3=1.24, support_multiplier=1.18)

@pytest.fixture
def standard_settings() -> ProcessSettings:
    return ProcessSettings(layer_height_mm=0.2, infill_percent=20, supports_enabled=False,
                           perimeters=3, extrusion_width_mm=0.45, top_bottom_layers=5)

@pytest.fixture
def pricing_settings() -> PricingSettings:
    return PricingSettings()

@pytest.fixture
def inventory() -> MaterialInventory:
    return MaterialInventory([
        InventoryItem(id="pla_black", material="PLA", colour="Black", grams_available=500, cost_per_kg_pence=2000),
        InventoryItem(id="petg_clear", material="PETG", colour="Clear", grams_available=100,
                      cost_per_kg_pence=2400, density_g_per_cm3=1.27, support_multiplier=1.2),
        InventoryItem(id="tpu_red", material="TPU", colour="Red", active=False, cost_per_kg_pence=3500),
    ])

@pytest.fixture
def print3d_processor(inventory, pricing_settings) -> Print3DProcessor:
    return Print3DProcessor(inventory=inventory, pricing_settings=pricing_settings)
