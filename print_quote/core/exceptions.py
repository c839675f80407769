# core/exceptions.py

class PrintQuoteError(Exception):
    """Base class for all custom exceptions in this application."""
    stage = "quote"


class ConfigurationError(PrintQuoteError):
    """Exception raised for missing or invalid material / pricing configuration."""
    stage = "configuration"


class MeshParseError(PrintQuoteError):
    """Raised when neither STL encoding yields a usable triangle mesh."""
    stage = "mesh_parse"


class InvalidEstimateError(PrintQuoteError):
    """Raised when a mass or time estimate comes out non-finite or non-positive."""
    stage = "estimate"


class MaterialNotFoundError(ConfigurationError):
    """Exception raised when a specified material ID cannot be found in the inventory."""
    pass


class InsufficientStockError(PrintQuoteError):
    """Raised when a reservation asks for more grams than the item has available."""
    stage = "inventory"
