"""
Form data wire format: schema registration, codec, domain model and conversions.
"""

from __future__ import annotations

from .codec import OLDEST_PROTO_VERSION, copy_proto, decode, effective_version, encode
from .schema import HealthPlanFormData

__all__ = [
    "HealthPlanFormData",
    "OLDEST_PROTO_VERSION",
    "copy_proto",
    "decode",
    "effective_version",
    "encode",
]
