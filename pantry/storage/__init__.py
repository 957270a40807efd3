"""Storage backends for Pantry entries.

This module provides:
- Warehouse: file-backed and in-memory JSON entry handle
- PathProvider: Abstract base class for tier directory lookup
- DataDirPathProvider: PathProvider rooted at a data directory
- Diagnostics: Failure channel with optional strict mode
"""

from pantry.storage.diagnostics import Diagnostics, RecordingDiagnostics
from pantry.storage.path_provider import DataDirPathProvider, PathProvider
from pantry.storage.warehouse import Deserializable, FileSource, MemorySource, Warehouse

__all__ = [
    "DataDirPathProvider",
    "Deserializable",
    "Diagnostics",
    "FileSource",
    "MemorySource",
    "PathProvider",
    "RecordingDiagnostics",
    "Warehouse",
]
