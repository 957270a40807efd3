"""Tests for Pantry models."""

import math
from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from pantry.errors import PantryValidationError
from pantry.models.model_envelope import Envelope, PersistenceTier
from pantry.models.model_expiry import After, At, Never
from pantry.models.model_value import (
    as_array,
    as_object,
    matches_kind,
    validate_value,
)


class TestValidateValue:
    """Tests for the JSON value validator."""

    @pytest.mark.parametrize(
        "value",
        [None, True, 0, -12, 3.5, "text", [], {}, [1, "a", None, [2.0]], {"a": {"b": [1]}}],
    )
    def test_accepts_json_values(self, value) -> None:
        """Every JSON-shaped value passes."""
        validate_value(value)

    @pytest.mark.parametrize("number", [math.nan, math.inf, -math.inf])
    def test_rejects_non_finite_numbers(self, number: float) -> None:
        """NaN and infinities cannot be written as JSON."""
        with pytest.raises(PantryValidationError, match="Non-finite"):
            validate_value({"nested": [1, number]})

    def test_rejects_cycles(self) -> None:
        """Self-referencing containers are rejected."""
        looped: dict = {"name": "loop"}
        looped["self"] = looped
        with pytest.raises(PantryValidationError, match="Cyclic"):
            validate_value(looped)

    def test_allows_shared_references(self) -> None:
        """The same list referenced twice is not a cycle."""
        shared = [1, 2]
        validate_value({"a": shared, "b": shared})

    def test_rejects_non_string_keys(self) -> None:
        """Mapping keys must be strings."""
        with pytest.raises(PantryValidationError, match="Non-string key"):
            validate_value({1: "one"})

    @pytest.mark.parametrize(
        "value",
        [(1, 2), {1, 2}, b"bytes", datetime.now(UTC), object()],
    )
    def test_rejects_foreign_types(self, value) -> None:
        """Types outside the value model are rejected."""
        with pytest.raises(PantryValidationError, match="Unsupported type"):
            validate_value({"payload": value})

    def test_error_reports_location(self) -> None:
        """Errors name the offending node."""
        with pytest.raises(PantryValidationError, match=r"\$\.items\[1\]"):
            validate_value({"items": [1, math.nan]})

    def test_deeply_nested_value(self) -> None:
        """Nesting far beyond the recursion limit is walked without overflowing."""
        deep: list = []
        for _ in range(5000):
            deep = [deep]
        validate_value(deep)

    def test_deeply_nested_error_location(self) -> None:
        """Errors deep inside a long chain still carry their location."""
        deep: list = [math.nan]
        for _ in range(3000):
            deep = [deep]
        # 3000 wrapping lists plus the index of nan inside the innermost one
        expected = r"Non-finite number nan at \$(\[0\]){3001}$"
        with pytest.raises(PantryValidationError, match=expected):
            validate_value(deep)


class TestValueAccessors:
    """Tests for shape and type helpers."""

    def test_as_object(self) -> None:
        assert as_object({"a": 1}) == {"a": 1}
        assert as_object([1]) is None
        assert as_object(None) is None

    def test_as_array(self) -> None:
        assert as_array([1, 2]) == [1, 2]
        assert as_array({"a": 1}) is None
        assert as_array("abc") is None

    def test_matches_kind_is_exact(self) -> None:
        """No coercion between bool, int and float."""
        assert matches_kind(1, int)
        assert not matches_kind(True, int)
        assert not matches_kind(1, float)
        assert not matches_kind(1.0, int)
        assert not matches_kind("1", int)
        assert matches_kind(False, bool)


class TestEnvelope:
    """Tests for the on-disk envelope model."""

    def test_from_mapping(self) -> None:
        envelope = Envelope.from_mapping({"expires": 100, "storage": {"a": 1}})
        assert envelope.expires == 100.0
        assert envelope.storage == {"a": 1}

    def test_missing_expires_never_expires(self) -> None:
        envelope = Envelope.from_mapping({"storage": 42})
        assert envelope.expires is None
        assert not envelope.is_expired(now=1e12)

    @pytest.mark.parametrize("expires", ["100", True, None, [1]])
    def test_non_numeric_expires_is_ignored(self, expires) -> None:
        """Only numbers count as expiry timestamps."""
        envelope = Envelope.from_mapping({"expires": expires, "storage": 1})
        assert envelope.expires is None

    def test_is_expired_boundary(self) -> None:
        """An entry is expired once now reaches the timestamp."""
        envelope = Envelope(expires=100.0, storage=None)
        assert not envelope.is_expired(now=99.9)
        assert envelope.is_expired(now=100.0)
        assert envelope.is_expired(now=100.1)

    def test_to_payload_omits_missing_expires(self) -> None:
        assert Envelope(storage=[1, 2]).to_payload() == {"storage": [1, 2]}
        assert Envelope(expires=5.0, storage=None).to_payload() == {
            "expires": 5.0,
            "storage": None,
        }

    def test_tier_values(self) -> None:
        assert PersistenceTier("permanent") is PersistenceTier.PERMANENT
        assert PersistenceTier("volatile") is PersistenceTier.VOLATILE


class TestExpiryPolicies:
    """Tests for expiry policy resolution."""

    def test_never(self) -> None:
        assert Never().resolve(now=1_000.0) is None

    def test_after(self) -> None:
        assert After(seconds=60).resolve(now=1_000.0) == 1_060.0

    def test_after_rejects_negative(self) -> None:
        with pytest.raises(ValidationError):
            After(seconds=-1)

    def test_after_rejects_infinite(self) -> None:
        with pytest.raises(ValidationError):
            After(seconds=math.inf)

    def test_at(self) -> None:
        moment = datetime(2030, 1, 1, tzinfo=UTC)
        assert At(moment=moment).resolve(now=0.0) == moment.timestamp()
