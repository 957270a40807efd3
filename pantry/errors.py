"""Pantry exception hierarchy.

Warehouses never raise these by default: failures are logged and degrade to
"no data". They are raised only when a Diagnostics instance runs in strict
mode, and are always handed to its ``on_error`` callback.
"""


class PantryError(Exception):
    """Base exception for all Pantry failures."""


class PantryValidationError(PantryError):
    """Raised for values that cannot be represented as JSON."""


class PantryIOError(PantryError):
    """Raised for file system failures while writing, removing or creating directories."""


class PantryParseError(PantryError):
    """Raised for stored content that is neither a JSON nor a legacy envelope."""
