"""Pantry: file-backed JSON key-value storage with permanent and volatile tiers."""

from pantry.errors import PantryError, PantryIOError, PantryParseError, PantryValidationError
from pantry.models import After, At, Envelope, Never, PersistenceTier
from pantry.storage import DataDirPathProvider, Diagnostics, PathProvider, Warehouse

__all__ = [
    "After",
    "At",
    "DataDirPathProvider",
    "Diagnostics",
    "Envelope",
    "Never",
    "PantryError",
    "PantryIOError",
    "PantryParseError",
    "PantryValidationError",
    "PathProvider",
    "PersistenceTier",
    "Warehouse",
]
