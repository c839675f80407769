# pricing/__init__.py

from .engine import apply_rounding, price

__all__ = [
    "apply_rounding",
    "price",
]
