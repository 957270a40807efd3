"""Path resolution for tiers and entries.

Tier roots come from an injected PathProvider, so tests and embedding
applications can point a Warehouse at any directory.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path

from pantry.consts import DEFAULT_DATA_DIR, NAMESPACE, PERMANENT_DIR_NAME, VOLATILE_DIR_NAME
from pantry.errors import PantryIOError
from pantry.models.model_envelope import PersistenceTier
from pantry.storage.diagnostics import Diagnostics

logger = logging.getLogger(__name__)


class PathProvider(ABC):
    """Supplies the host's storage location for each tier.

    PERMANENT maps to a "documents" style location that is kept until removed.
    VOLATILE maps to a "caches" style location the host may purge.
    """

    @abstractmethod
    def root_for(self, tier: PersistenceTier) -> Path:
        """Return the root directory for ``tier`` (without the namespace segment)."""
        ...

    def namespace_directory(self, tier: PersistenceTier) -> Path:
        """Return the namespaced directory for ``tier`` without touching the disk."""
        return self.root_for(tier) / NAMESPACE

    def base_directory(self, tier: PersistenceTier, diagnostics: Diagnostics | None = None) -> Path:
        """Return the namespaced directory for ``tier``, creating it if needed.

        Creation failures are reported but never fail the call; the path is
        returned either way.
        """
        directory = self.namespace_directory(tier)
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            error = PantryIOError(f"Couldn't create directory {directory}: {e}")
            (diagnostics or Diagnostics()).report(error)
        return directory

    def file_path(
        self, tier: PersistenceTier, key: str, diagnostics: Diagnostics | None = None
    ) -> Path:
        """Return the file for ``key``. Keys are used verbatim as file names."""
        return self.base_directory(tier, diagnostics) / key


class DataDirPathProvider(PathProvider):
    """PathProvider rooted at a single data directory.

    Directory structure:
        {data_dir}/
        ├── documents/{NAMESPACE}/{key}    # PERMANENT
        └── caches/{NAMESPACE}/{key}       # VOLATILE
    """

    def __init__(self, data_dir: Path | str = DEFAULT_DATA_DIR):
        """Initialize DataDirPathProvider.

        Args:
            data_dir: Root directory holding both tier roots.
        """
        self.data_dir = Path(data_dir)

    def root_for(self, tier: PersistenceTier) -> Path:
        if tier is PersistenceTier.PERMANENT:
            return self.data_dir / PERMANENT_DIR_NAME
        return self.data_dir / VOLATILE_DIR_NAME
