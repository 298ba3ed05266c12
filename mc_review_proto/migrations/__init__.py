"""Migration registry and runner for persisted form data protos."""

from .runner import MigrationResult, MigrationRunner, Outcome
from .steps import CURRENT_PROTO_VERSION, MIGRATIONS, MigrationStep, check_registry

__all__ = [
    "CURRENT_PROTO_VERSION",
    "MIGRATIONS",
    "MigrationResult",
    "MigrationRunner",
    "MigrationStep",
    "Outcome",
    "check_registry",
]
