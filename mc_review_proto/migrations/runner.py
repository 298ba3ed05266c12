"""
Migration runner: brings one decoded message (or one blob) up to the current version
by replaying registered steps in order, starting from the blob's effective version.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from ..core.errors import McReviewProtoError, MigrationStepError
from ..proto.codec import decode, effective_version, encode
from ..proto.schema import HealthPlanFormData
from .steps import MIGRATIONS, MigrationStep

logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    MIGRATED = "migrated"
    UP_TO_DATE = "up_to_date"
    FAILED = "failed"


@dataclass
class MigrationResult:
    """Outcome of migrating one blob. Built per run, consumed by the caller."""

    blob_id: Optional[str]
    outcome: Outcome
    proto: Optional[HealthPlanFormData] = None
    data: Optional[bytes] = None
    error: Optional[str] = None
    from_version: Optional[int] = None
    to_version: Optional[int] = None
    steps_applied: Tuple[str, ...] = ()

    @property
    def failed(self) -> bool:
        return self.outcome is Outcome.FAILED


class MigrationRunner:
    """
    Apply a migration chain to single messages.

    By default only steps whose from_version is at or above the blob's effective
    version run, and a blob already at the latest version is returned untouched.
    With replay_all=True every step runs on every blob and relies on the steps'
    own guards; the outcome is then decided by whether anything changed.
    """

    def __init__(self, steps: Optional[Sequence[MigrationStep]] = None, *, replay_all: bool = False) -> None:
        self.steps: List[MigrationStep] = list(MIGRATIONS if steps is None else steps)
        self.replay_all = replay_all

    @property
    def latest_version(self) -> int:
        return max(step.to_version for step in self.steps) if self.steps else 1

    def pending_steps(self, version: int) -> List[MigrationStep]:
        if self.replay_all:
            return list(self.steps)
        if version >= self.latest_version:
            return []
        return [step for step in self.steps if step.from_version >= version]

    def run(self, proto: HealthPlanFormData, blob_id: Optional[str] = None) -> MigrationResult:
        """
        Migrate a decoded message. Never mutates proto. Raises MigrationStepError,
        chained from the step's exception, when a step fails.
        """
        start = effective_version(proto)
        if start > self.latest_version:
            logger.warning(
                "%s has proto_version %d, newer than the latest known %d; leaving it as is",
                blob_id,
                start,
                self.latest_version,
            )
        current = proto
        applied: List[str] = []
        for step in self.pending_steps(start):
            try:
                migrated = step.apply(current)
            except Exception as e:
                raise MigrationStepError(step.number, step.name, blob_id, str(e) or type(e).__name__) from e
            if migrated != current:
                applied.append(step.label)
            current = migrated

        outcome = Outcome.MIGRATED if applied else Outcome.UP_TO_DATE
        end = effective_version(current) if applied else start
        if applied:
            logger.debug("Migrated %s from v%d to v%d via %s", blob_id, start, end, ", ".join(applied))
        return MigrationResult(
            blob_id=blob_id,
            outcome=outcome,
            proto=current if applied else proto,
            from_version=start,
            to_version=end,
            steps_applied=tuple(applied),
        )

    def run_blob(self, data: bytes, blob_id: Optional[str] = None) -> MigrationResult:
        """
        Decode, migrate and re-encode one blob. An up-to-date blob keeps its original
        bytes. DecodeError, MigrationStepError and EncodeError propagate.
        """
        result = self.run(decode(data), blob_id=blob_id)
        result.data = encode(result.proto) if result.outcome is Outcome.MIGRATED else bytes(data)
        return result

    def migrate_item(self, data: bytes, blob_id: Optional[str] = None) -> MigrationResult:
        """Batch form of run_blob: package errors become a FAILED result instead of raising."""
        try:
            return self.run_blob(data, blob_id=blob_id)
        except McReviewProtoError as e:
            logger.warning("Failed to migrate %s: %s", blob_id, e)
            return MigrationResult(blob_id=blob_id, outcome=Outcome.FAILED, error=str(e))
