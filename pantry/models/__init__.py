"""Data models for Pantry."""

from pantry.models.model_envelope import Envelope, PersistenceTier
from pantry.models.model_expiry import After, At, ExpiryPolicy, Never
from pantry.models.model_value import (
    Value,
    ValueArray,
    ValueObject,
    as_array,
    as_object,
    matches_kind,
    validate_value,
)

__all__ = [
    # Envelope models
    "Envelope",
    "PersistenceTier",
    # Expiry policies
    "After",
    "At",
    "ExpiryPolicy",
    "Never",
    # Value model
    "Value",
    "ValueArray",
    "ValueObject",
    "as_array",
    "as_object",
    "matches_kind",
    "validate_value",
]
