"""
Shared exception types for mc_review_proto.
Stable surface; extend only.
"""

from __future__ import annotations

from typing import Optional


class McReviewProtoError(Exception):
    """Base exception for mc_review_proto; catch this for any package-raised error."""

    pass


class DecodeError(McReviewProtoError):
    """Bytes are not a well-formed HealthPlanFormData message, or do not parse into the domain model."""

    pass


class EncodeError(McReviewProtoError):
    """A message value violates the schema's own field constraints (e.g. unknown enum number)."""

    pass


class ConfigurationError(McReviewProtoError):
    """Missing or invalid configuration (connection string, CLI arguments). Fatal at process start."""

    pass


class StorageError(McReviewProtoError):
    """Reading or writing one revision failed at the storage layer."""

    def __init__(self, message: str, *, blob_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.blob_id = blob_id


class MigrationStepError(McReviewProtoError):
    """
    A registered migration step raised. Tagged with the step's position and name
    and with the identifier of the blob being migrated; the original exception is
    chained as __cause__.
    """

    def __init__(self, step_number: int, step_name: str, blob_id: Optional[str], reason: str) -> None:
        self.step_number = step_number
        self.step_name = step_name
        self.blob_id = blob_id
        self.reason = reason
        super().__init__(f"migration {step_number:04d}_{step_name} failed for {blob_id or '<unknown>'}: {reason}")


__all__ = [
    "ConfigurationError",
    "DecodeError",
    "EncodeError",
    "McReviewProtoError",
    "MigrationStepError",
    "StorageError",
]
