"""Envelope and tier models for entries on disk."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from pantry.consts import ENVELOPE_EXPIRES_KEY, ENVELOPE_STORAGE_KEY


class PersistenceTier(str, Enum):
    """Retention class of an entry. Only selects the base directory."""

    PERMANENT = "permanent"
    VOLATILE = "volatile"


class Envelope(BaseModel):
    """On-disk unit pairing a stored value with its optional expiry.

    A missing ``expires`` means the entry never expires, which is also how
    entries written before expiry support are read back.
    """

    model_config = ConfigDict(frozen=True)

    expires: float | None = Field(default=None, description="Unix timestamp in seconds")
    storage: Any = Field(default=None, description="Stored JSON value")

    @classmethod
    def from_mapping(cls, payload: dict[str, Any]) -> "Envelope":
        """Build an envelope from a parsed file payload.

        Non-numeric ``expires`` values are ignored and read as "never expires".
        """
        return cls.model_construct(
            expires=_numeric_or_none(payload.get(ENVELOPE_EXPIRES_KEY)),
            storage=payload.get(ENVELOPE_STORAGE_KEY),
        )

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON payload written to disk, omitting absent ``expires``."""
        payload: dict[str, Any] = {}
        if self.expires is not None:
            payload[ENVELOPE_EXPIRES_KEY] = self.expires
        payload[ENVELOPE_STORAGE_KEY] = self.storage
        return payload

    def is_expired(self, now: float) -> bool:
        """Check expiry against ``now``. Entries expire once ``expires <= now``."""
        if self.expires is None:
            return False
        return not self.expires > now


def _numeric_or_none(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    try:
        return float(value)
    except OverflowError:
        return None
