"""
Proto codec: strict transcoder between persisted bytes and HealthPlanFormData messages.
Does not upgrade data; see mc_review_proto.migrations for that.
"""

from __future__ import annotations

import logging

from google.protobuf import message as pb_message
from google.protobuf.descriptor import FieldDescriptor

from ..core.errors import DecodeError, EncodeError
from .schema import HealthPlanFormData

logger = logging.getLogger(__name__)

# A blob with no explicit proto_version predates versioning and is the oldest format.
OLDEST_PROTO_VERSION = 1


def decode(data: bytes) -> HealthPlanFormData:
    """Parse bytes into a HealthPlanFormData message. Raises DecodeError on malformed input."""
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise DecodeError(f"expected bytes, got {type(data).__name__}")
    try:
        proto = HealthPlanFormData.FromString(bytes(data))
    except pb_message.DecodeError as e:
        raise DecodeError(f"malformed HealthPlanFormData: {e}") from e
    if proto.proto_version < 0:
        raise DecodeError(f"negative proto_version {proto.proto_version}")
    return proto


def _check_enums(msg: pb_message.Message, path: str) -> None:
    for field, value in msg.ListFields():
        where = f"{path}.{field.name}"
        if field.type == FieldDescriptor.TYPE_ENUM:
            values = value if field.label == FieldDescriptor.LABEL_REPEATED else [value]
            for v in values:
                if field.enum_type.values_by_number.get(v) is None:
                    raise EncodeError(f"{where}: {v} is not a valid {field.enum_type.name}")
        elif field.type == FieldDescriptor.TYPE_MESSAGE:
            if field.label == FieldDescriptor.LABEL_REPEATED:
                for i, item in enumerate(value):
                    _check_enums(item, f"{where}[{i}]")
            else:
                _check_enums(value, where)


def encode(proto: HealthPlanFormData) -> bytes:
    """
    Serialize a HealthPlanFormData message. Raises EncodeError when an enum holds a
    number outside its declared values or the runtime refuses to serialize.
    Serialization is deterministic so identical messages produce identical bytes.
    """
    _check_enums(proto, proto.DESCRIPTOR.name)
    try:
        return proto.SerializeToString(deterministic=True)
    except pb_message.EncodeError as e:
        raise EncodeError(str(e)) from e


def effective_version(proto: HealthPlanFormData) -> int:
    """proto_version, with an unset (zero) version read as the oldest format."""
    return proto.proto_version if proto.proto_version > 0 else OLDEST_PROTO_VERSION


def copy_proto(proto: HealthPlanFormData) -> HealthPlanFormData:
    """Independent deep copy; mutations to the copy never reach the original."""
    clone = HealthPlanFormData()
    clone.CopyFrom(proto)
    return clone
