# print_quote/__init__.py

# Instant quoting for 3D-printed parts: STL geometry -> mass & time -> price.

from . import core
from . import pricing
from . import processes
from .processes.print_3d.processor import Print3DProcessor, run_estimation

__version__ = "0.1.0"

# Define what gets imported with 'from print_quote import *'
__all__ = [
    "core",
    "pricing",
    "processes",
    "Print3DProcessor",
    "run_estimation",
]
