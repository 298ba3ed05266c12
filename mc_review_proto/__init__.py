"""
mc_review_proto: versioned protobuf storage for health plan form data, and the
migration chain that upgrades stored blobs to the current proto version.
"""

from __future__ import annotations

from ._version import __version__
from .core.errors import (
    ConfigurationError,
    DecodeError,
    EncodeError,
    McReviewProtoError,
    MigrationStepError,
    StorageError,
)
from .migrations import CURRENT_PROTO_VERSION, MigrationResult, MigrationRunner, Outcome
from .proto.codec import decode, encode
from .proto.convert import read_form_data, to_domain, to_proto, write_form_data

__all__ = [
    "CURRENT_PROTO_VERSION",
    "ConfigurationError",
    "DecodeError",
    "EncodeError",
    "McReviewProtoError",
    "MigrationResult",
    "MigrationRunner",
    "MigrationStepError",
    "Outcome",
    "StorageError",
    "__version__",
    "decode",
    "encode",
    "read_form_data",
    "to_domain",
    "to_proto",
    "write_form_data",
]
