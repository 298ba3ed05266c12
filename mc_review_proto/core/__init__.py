"""
Stable facade: error taxonomy only. Do not add exports without updating __all__.
"""

from __future__ import annotations

from .errors import (
    ConfigurationError,
    DecodeError,
    EncodeError,
    McReviewProtoError,
    MigrationStepError,
    StorageError,
)

# Do not add exports without updating __all__.
__all__ = [
    "ConfigurationError",
    "DecodeError",
    "EncodeError",
    "McReviewProtoError",
    "MigrationStepError",
    "StorageError",
]
