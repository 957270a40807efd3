"""File-backed JSON warehouse with permanent and volatile tiers.

Each top-level key is stored as one JSON envelope file:

    {"expires": 1767225600.0, "storage": <any JSON value>}

Expiry is evaluated lazily: only ``exists()`` purges entries whose
``expires`` timestamp has passed. Reads through ``load_cache()`` and the typed
getters never delete anything.

Nested values reached through ``get_object`` and ``get_object_array`` are
wrapped in in-memory warehouses. Those never touch the disk and never expire.

Consistency model: writes replace the file atomically, so readers never see a
torn file. Nothing else is coordinated; with concurrent writers the last
rename wins, and a reader racing a writer may see either version.
"""

import json
import logging
import os
import shutil
import tempfile
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeAlias, TypeVar

from pantry.consts import ENVELOPE_STORAGE_KEY, JSON_INDENT, TEMP_SUFFIX
from pantry.errors import PantryIOError, PantryParseError, PantryValidationError
from pantry.models.model_envelope import Envelope, PersistenceTier
from pantry.models.model_expiry import ExpiryPolicy, Never
from pantry.models.model_value import Value, as_array, as_object, matches_kind, validate_value
from pantry.storage.diagnostics import Diagnostics
from pantry.storage.legacy_format import parse_legacy
from pantry.storage.path_provider import DataDirPathProvider, PathProvider

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Builds a caller object from a warehouse bound to a nested value
Deserializable: TypeAlias = Callable[["Warehouse"], T | None]

# Factory failures that drop an element instead of propagating
FACTORY_ERRORS = (ValueError, TypeError, KeyError)


@dataclass(frozen=True)
class FileSource:
    """Entry stored in a file."""

    path: Path


@dataclass(frozen=True)
class MemorySource:
    """Nested value held in memory."""

    context: Value


Source: TypeAlias = FileSource | MemorySource


class Warehouse:
    """Serializes, loads and extracts a single keyed value tree.

    Construct with ``Warehouse(key, tier)`` for a file-backed entry, or with
    ``Warehouse.from_context(value, tier)`` for a nested in-memory value.
    """

    def __init__(
        self,
        key: str,
        tier: PersistenceTier = PersistenceTier.PERMANENT,
        paths: PathProvider | None = None,
        diagnostics: Diagnostics | None = None,
    ):
        """Initialize a file-backed Warehouse.

        Args:
            key: Entry key, used verbatim as the file name.
            tier: Retention tier selecting the base directory.
            paths: Tier directory provider. Defaults to DataDirPathProvider().
            diagnostics: Failure channel. Defaults to log-and-swallow.
        """
        self._bind(key, tier, paths, diagnostics)
        # Directory creation failures here are only logged; write() reports its own
        self.source: Source = FileSource(self.paths.file_path(tier, key))

    @classmethod
    def from_context(
        cls,
        context: Value,
        tier: PersistenceTier = PersistenceTier.PERMANENT,
        paths: PathProvider | None = None,
        diagnostics: Diagnostics | None = None,
    ) -> "Warehouse":
        """Create an in-memory Warehouse bound to ``context``.

        The tier is kept so nested objects created from this warehouse carry it.
        """
        warehouse = cls.__new__(cls)
        warehouse._bind("", tier, paths, diagnostics)
        warehouse.source = MemorySource(context)
        return warehouse

    def _bind(
        self,
        key: str,
        tier: PersistenceTier,
        paths: PathProvider | None,
        diagnostics: Diagnostics | None,
    ) -> None:
        self.key = key
        self.tier = tier
        self.paths = paths or DataDirPathProvider()
        self.diagnostics = diagnostics or Diagnostics()

    @property
    def path(self) -> Path | None:
        """File backing this warehouse, or None for in-memory warehouses."""
        if isinstance(self.source, FileSource):
            return self.source.path
        return None

    def _nested(self, context: Value) -> "Warehouse":
        return Warehouse.from_context(context, self.tier, self.paths, self.diagnostics)

    # === TYPED EXTRACTION ===

    def _storage_object(self) -> dict[str, Value] | None:
        return as_object(self.load_cache())

    def get_value(self, value_key: str) -> Value | None:
        """Get the raw value stored under ``value_key``.

        Returns:
            The value, or None if the entry is missing, not an object, or
            has no such key.
        """
        storage = self._storage_object()
        if storage is None:
            return None
        return storage.get(value_key)

    def get(self, value_key: str, kind: type[T]) -> T | None:
        """Get a primitive stored under ``value_key``.

        Types must match exactly: no coercion between numbers and strings,
        ``True`` is not an int and ``1`` is not a float.

        Args:
            value_key: Key inside the stored object.
            kind: Expected type (str, int, float or bool).

        Returns:
            The value if present with type ``kind``, None otherwise.
        """
        value = self.get_value(value_key)
        if not matches_kind(value, kind):
            return None
        return value

    def get_array(self, value_key: str, kind: type[T]) -> list[T] | None:
        """Get an array of primitives stored under ``value_key``.

        Elements not of type ``kind`` are dropped, order is preserved.

        Returns:
            Matching elements (possibly empty), or None if the key is missing
            or does not hold an array.
        """
        items = as_array(self.get_value(value_key))
        if items is None:
            return None
        return [item for item in items if matches_kind(item, kind)]

    def get_object(self, value_key: str, factory: Deserializable[T]) -> T | None:
        """Build an object from the value stored under ``value_key``.

        Args:
            value_key: Key inside the stored object.
            factory: Called with an in-memory Warehouse bound to the value.

        Returns:
            The factory result, or None if the key is missing or the factory
            returns None or raises ValueError, TypeError or KeyError.
        """
        storage = self._storage_object()
        if storage is None or value_key not in storage:
            return None
        return self._build(factory, storage[value_key])

    def get_object_array(self, value_key: str, factory: Deserializable[T]) -> list[T] | None:
        """Build objects from an array stored under ``value_key``.

        Elements that are not objects, and elements the factory rejects, are
        dropped.

        Returns:
            Built objects (possibly empty), or None if the key is missing or
            does not hold an array.
        """
        items = as_array(self.get_value(value_key))
        if items is None:
            return None

        results: list[T] = []
        for item in items:
            if as_object(item) is None:
                continue
            built = self._build(factory, item)
            if built is not None:
                results.append(built)
        return results

    def _build(self, factory: Deserializable[T], context: Value) -> T | None:
        try:
            return factory(self._nested(context))
        except FACTORY_ERRORS as e:
            logger.debug(f"Factory rejected nested value in {self.key or 'context'}: {e}")
            return None

    # === LOADING ===

    def load_envelope(self) -> Envelope | None:
        """Load the envelope for this warehouse.

        In-memory warehouses return their context as a never-expiring
        envelope. File-backed warehouses try the legacy format first, then
        JSON. Only mappings with a ``storage`` key count as envelopes.

        Returns:
            The envelope, or None on a miss (missing, unreadable or foreign file).
        """
        if isinstance(self.source, MemorySource):
            return Envelope.model_construct(expires=None, storage=self.source.context)

        payload = self._read_payload(self.source.path)
        if payload is None or ENVELOPE_STORAGE_KEY not in payload:
            return None
        return Envelope.from_mapping(payload)

    def load_cache(self) -> Value | None:
        """Load the stored value, or None on a miss. Never deletes expired entries."""
        envelope = self.load_envelope()
        if envelope is None:
            return None
        return envelope.storage

    def _read_payload(self, path: Path) -> dict[str, Any] | None:
        """Read ``path`` as a legacy or JSON mapping. Missing files are a silent miss."""
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            logger.debug(f"Cache miss for {path.name}")
            return None
        except OSError as e:
            self.diagnostics.report(PantryIOError(f"Couldn't read {path}: {e}"))
            return None

        legacy = parse_legacy(data)
        if legacy is not None:
            logger.debug(f"Read legacy entry {path.name}")
            return legacy

        try:
            payload = json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError, RecursionError) as e:
            self.diagnostics.report(PantryParseError(f"Unreadable entry {path}: {e}"))
            return None

        if not isinstance(payload, dict):
            self.diagnostics.report(
                PantryParseError(f"Entry {path} holds {type(payload).__name__}, not an envelope")
            )
            return None
        return payload

    # === EXPIRY ===

    def exists(self) -> bool:
        """Check whether the entry exists and has not expired.

        Expired entries are deleted as a side effect. Entries without an
        ``expires`` field never expire.

        Returns:
            True if the entry is present and valid, False otherwise.
        """
        if isinstance(self.source, MemorySource):
            return True

        path = self.source.path
        if not path.exists():
            return False

        payload = self._read_payload(path)
        if payload is None:
            return False

        envelope = Envelope.from_mapping(payload)
        if not envelope.is_expired(time.time()):
            return True

        logger.debug(f"Entry {self.key} expired at {envelope.expires}")
        self.remove()
        return False

    # === WRITING ===

    def write(self, value: Value, expires: ExpiryPolicy | None = None) -> bool:
        """Store ``value`` under this warehouse's key, replacing any previous entry.

        Args:
            value: JSON value to store.
            expires: Expiry policy. None means Never().

        Returns:
            True if the entry was written. False if the value was rejected or
            the write failed; in both cases the previous file is untouched.
        """
        if isinstance(self.source, MemorySource):
            self.diagnostics.report(
                PantryIOError("In-memory warehouses cannot be written; write the parent entry")
            )
            return False

        policy = expires if expires is not None else Never()
        envelope = Envelope.model_construct(expires=policy.resolve(time.time()), storage=value)
        payload = envelope.to_payload()

        try:
            validate_value(payload)
        except PantryValidationError as e:
            self.diagnostics.report(
                PantryValidationError(f"Not a valid JSON object for {self.key}: {e}")
            )
            return False

        try:
            text = json.dumps(payload, indent=JSON_INDENT, allow_nan=False)
        except (RecursionError, ValueError) as e:
            self.diagnostics.report(PantryValidationError(f"Couldn't serialize {self.key}: {e}"))
            return False

        path = self.source.path
        try:
            self._atomic_write(path, text)
        except OSError as e:
            self.diagnostics.report(PantryIOError(f"Couldn't write {path}: {e}"))
            return False

        logger.debug(f"Wrote {self.key} to {self.tier.value} (expires={envelope.expires})")
        return True

    @staticmethod
    def _atomic_write(path: Path, content: str) -> None:
        """Write ``content`` to a sibling temporary file, then rename it over ``path``."""
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.name}.", suffix=TEMP_SUFFIX
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    # === REMOVAL ===

    def remove(self) -> bool:
        """Delete this entry's file.

        Returns:
            True if a file was deleted, False otherwise.
        """
        if isinstance(self.source, MemorySource):
            return False

        path = self.source.path
        try:
            path.unlink()
        except OSError as e:
            self.diagnostics.report(PantryIOError(f"Error removing cache {path}: {e}"))
            return False

        logger.debug(f"Removed {self.key} from {self.tier.value}")
        return True

    @staticmethod
    def remove_all(
        tier: PersistenceTier,
        paths: PathProvider | None = None,
        diagnostics: Diagnostics | None = None,
    ) -> bool:
        """Delete every entry of ``tier`` by removing its directory.

        Returns:
            True if the directory was removed, False otherwise.
        """
        directory = (paths or DataDirPathProvider()).namespace_directory(tier)
        try:
            shutil.rmtree(directory)
        except OSError as e:
            (diagnostics or Diagnostics()).report(
                PantryIOError(f"Error removing all cache in {directory}: {e}")
            )
            return False

        logger.info(f"Removed all {tier.value} entries in {directory}")
        return True


def main() -> None:
    """Example usage of Warehouse."""
    from pantry.models.model_expiry import After

    logging.basicConfig(level=logging.DEBUG)

    # Use temporary directory for example
    with tempfile.TemporaryDirectory() as tmpdir:
        paths = DataDirPathProvider(tmpdir)

        print("=== Warehouse Example ===\n")

        print("1. Writing a permanent entry...")
        profile = Warehouse("profile", PersistenceTier.PERMANENT, paths=paths)
        profile.write(
            {
                "name": "Alice",
                "age": 34,
                "tags": ["admin", 7, "ops"],
                "address": {"city": "Lisbon"},
                "friends": [{"name": "Bob"}, "not-an-object", {"name": "Carol"}],
            }
        )

        print("\n2. Typed extraction...")
        print(f"   name = {profile.get('name', str)}")
        print(f"   age as str = {profile.get('age', str)}")
        print(f"   tags = {profile.get_array('tags', str)}")
        city = profile.get_object("address", lambda w: w.get("city", str))
        print(f"   address.city = {city}")
        friends = profile.get_object_array("friends", lambda w: w.get("name", str))
        print(f"   friends = {friends}")

        print("\n3. Writing a volatile entry that expires in 1 second...")
        session = Warehouse("session", PersistenceTier.VOLATILE, paths=paths)
        session.write({"token": "abc"}, After(seconds=1))
        print(f"   session exists: {session.exists()}")
        time.sleep(1.5)
        print(f"   session exists after 1.5s: {session.exists()}")
        print(f"   session file still on disk: {session.path.exists()}")

        print("\n4. Removing all permanent entries...")
        Warehouse.remove_all(PersistenceTier.PERMANENT, paths=paths)
        print(f"   profile exists: {profile.exists()}")


if __name__ == "__main__":
    main()
