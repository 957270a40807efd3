"""Reader for the legacy property-list envelope format.

Entries written by older releases are property-list dictionaries (XML or
binary) holding the same ``expires``/``storage`` keys as the JSON envelope.
They are read-only: nothing in Pantry ever writes this format, and legacy
files are left as they are when read.
"""

import logging
import plistlib
from datetime import UTC, datetime
from typing import Any
from xml.parsers.expat import ExpatError

from pantry.consts import ENVELOPE_EXPIRES_KEY

logger = logging.getLogger(__name__)

# Failures plistlib raises for content that is not a readable property list
PLIST_ERRORS = (
    plistlib.InvalidFileException,
    ExpatError,
    ValueError,
    TypeError,
    OverflowError,
    RecursionError,
)


def parse_legacy(data: bytes) -> dict[str, Any] | None:
    """Parse ``data`` as a legacy property-list dictionary.

    plistlib does its own format detection, including byte order marks, and
    rejects JSON content up front.

    A date stored under ``expires`` is dropped: older readers only honoured
    numeric timestamps, so such entries never expired.

    Args:
        data: Raw file content.

    Returns:
        The dictionary with plist-only types converted to JSON values, or None
        if ``data`` is not a property list or its root is not a dictionary.
    """
    try:
        parsed = plistlib.loads(data)
    except PLIST_ERRORS as e:
        logger.debug(f"Not a legacy property list: {e}")
        return None

    if not isinstance(parsed, dict):
        return None

    result: dict[str, Any] = {}
    try:
        for key, item in parsed.items():
            if key == ENVELOPE_EXPIRES_KEY and isinstance(item, datetime):
                continue
            result[str(key)] = _to_json_value(item)
    except RecursionError:
        logger.debug("Legacy property list is nested too deeply to convert")
        return None
    return result


def _to_json_value(value: Any) -> Any:
    """Convert plist-only types: dates become unix timestamps, data becomes text."""
    if isinstance(value, dict):
        return {str(k): _to_json_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_to_json_value(v) for v in value]
    if isinstance(value, datetime):
        # plist dates are stored in UTC and load as naive datetimes
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.timestamp()
    if isinstance(value, bytes | bytearray):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, plistlib.UID):
        return value.data
    return value


def dump_legacy(payload: dict[str, Any], binary: bool = False) -> bytes:
    """Encode ``payload`` in the legacy format.

    Pantry never writes legacy entries itself; this exists so fixtures and
    migration tooling can produce files the way older releases did.
    """
    fmt = plistlib.FMT_BINARY if binary else plistlib.FMT_XML
    return plistlib.dumps(payload, fmt=fmt)
