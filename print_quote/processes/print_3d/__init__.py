# processes/print_3d/__init__.py

# This file makes the 'print_3d' directory a Python sub-package.

from .defaults import DEFAULTS, EstimatorDefaults
from .mass import estimate_mass
from .timing import estimate_time
from .processor import Print3DProcessor, run_estimation

__all__ = [
    "DEFAULTS",
    "EstimatorDefaults",
    "estimate_mass",
    "estimate_time",
    "Print3DProcessor",
    "run_estimation",
]
