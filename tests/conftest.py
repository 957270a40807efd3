"""Pytest configuration and fixtures."""

from collections.abc import Callable
from pathlib import Path

import pytest

from pantry.models.model_envelope import PersistenceTier
from pantry.storage.diagnostics import RecordingDiagnostics
from pantry.storage.path_provider import DataDirPathProvider
from pantry.storage.warehouse import Warehouse


@pytest.fixture
def paths(tmp_path: Path) -> DataDirPathProvider:
    """Path provider rooted at a temporary directory."""
    return DataDirPathProvider(tmp_path / "data")


@pytest.fixture
def diagnostics() -> RecordingDiagnostics:
    """Diagnostics that records failures instead of only logging them."""
    return RecordingDiagnostics()


@pytest.fixture
def make_warehouse(
    paths: DataDirPathProvider, diagnostics: RecordingDiagnostics
) -> Callable[..., Warehouse]:
    """Factory for file-backed warehouses sharing the temporary paths."""

    def _make(key: str, tier: PersistenceTier = PersistenceTier.PERMANENT) -> Warehouse:
        return Warehouse(key, tier, paths=paths, diagnostics=diagnostics)

    return _make


@pytest.fixture
def sample_profile() -> dict:
    """A nested value touching every part of the value model."""
    return {
        "name": "Alice",
        "age": 34,
        "height": 1.68,
        "admin": True,
        "nickname": None,
        "tags": ["ops", "admin"],
        "address": {"city": "Lisbon", "zip": "1100-148"},
        "friends": [
            {"name": "Bob", "age": 31},
            {"name": "Carol", "age": 29},
        ],
    }
