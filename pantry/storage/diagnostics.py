"""Diagnostic channel for failures that Warehouses do not surface.

By default every failure is logged and otherwise swallowed, so callers only
see "no data". A callback observes each failure; strict mode re-raises it.
"""

import logging
from collections.abc import Callable

from pantry.errors import PantryError, PantryParseError

logger = logging.getLogger(__name__)


class Diagnostics:
    """Receives failures reported by Warehouse operations."""

    def __init__(
        self,
        on_error: Callable[[PantryError], None] | None = None,
        strict: bool = False,
    ):
        """Initialize Diagnostics.

        Args:
            on_error: Called with every reported failure before any raising.
            strict: Raise reported failures instead of swallowing them.
        """
        self.on_error = on_error
        self.strict = strict

    def report(self, error: PantryError) -> None:
        """Log ``error``, hand it to the callback and raise it in strict mode."""
        if isinstance(error, PantryParseError):
            logger.debug(f"Treating unreadable entry as a miss: {error}")
        else:
            logger.warning(f"{type(error).__name__}: {error}")

        if self.on_error is not None:
            self.on_error(error)

        if self.strict:
            raise error


class RecordingDiagnostics(Diagnostics):
    """Diagnostics that keeps every reported failure in ``errors``."""

    def __init__(self, strict: bool = False):
        self.errors: list[PantryError] = []
        super().__init__(on_error=self.errors.append, strict=strict)
