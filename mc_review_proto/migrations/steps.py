"""
Migration registry: the ordered chain of transforms that upgrades persisted
HealthPlanFormData messages to the current proto version.

Each step either bumps proto_version by one or enriches data at the same version.
Every step checks its own preconditions (version and field presence) before
mutating, so re-running a step on already-migrated data is a no-op. Registration
order is the only sequencing; append new steps, never reorder or renumber.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Callable, Iterable, List, Sequence

from ..proto.codec import copy_proto, effective_version
from ..proto.schema import SUBMISSION_TYPE_CONTRACT_AND_RATES, HealthPlanFormData

logger = logging.getLogger(__name__)

# Version 2 is the first with 1-indexed months.
MONTH_FIX_BEFORE_VERSION = 2
# Rate ids are only backfilled on protos at or below this version.
RATE_ID_MAX_VERSION = 2

_RATE_ID_NAMESPACE = uuid.UUID("6f1d8a52-3c2b-4b8e-9a61-0c7e5d4f2a10")

Transform = Callable[[HealthPlanFormData], None]


@dataclass(frozen=True)
class MigrationStep:
    """One registered migration. transform mutates the working copy it is given."""

    number: int
    name: str
    from_version: int
    to_version: int
    transform: Transform

    @property
    def label(self) -> str:
        return f"{self.number:04d}_{self.name}"

    @property
    def bumps_version(self) -> bool:
        return self.to_version > self.from_version

    def apply(self, proto: HealthPlanFormData) -> HealthPlanFormData:
        """Return a migrated copy; the input is never mutated."""
        work = copy_proto(proto)
        self.transform(work)
        return work


def _dates(proto: HealthPlanFormData) -> Iterable:
    """Every present Date sub-message in the proto."""
    if proto.HasField("created_at"):
        yield proto.created_at
    if proto.HasField("contract_info"):
        contract = proto.contract_info
        for name in ("contract_date_start", "contract_date_end"):
            if contract.HasField(name):
                yield getattr(contract, name)
    for rate in proto.rate_infos:
        for name in ("rate_date_start", "rate_date_end", "rate_date_certified"):
            if rate.HasField(name):
                yield getattr(rate, name)
        if rate.HasField("rate_amendment_info"):
            amendment = rate.rate_amendment_info
            for name in ("effective_date_start", "effective_date_end"):
                if amendment.HasField(name):
                    yield getattr(amendment, name)


def _migration_0000_add_one_month(proto: HealthPlanFormData) -> None:
    """
    Months were written zero-indexed before version 2. Shift every date up by one
    and mark the proto as version 2 in the same step, so the fix applies exactly once.
    """
    if effective_version(proto) >= MONTH_FIX_BEFORE_VERSION:
        return
    for date in _dates(proto):
        date.month += 1
    proto.proto_version = MONTH_FIX_BEFORE_VERSION


def stable_rate_id(package_id: str, index: int, rate) -> str:
    """
    Identifier for a rate that was saved without one. Derived from the package id,
    the rate's position and its content, so replaying the chain yields the same id.
    """
    content = rate.SerializeToString(deterministic=True).hex()
    return str(uuid.uuid5(_RATE_ID_NAMESPACE, f"{package_id}/{index}/{content}"))


def _migration_0001_rate_ids(proto: HealthPlanFormData) -> None:
    if effective_version(proto) > RATE_ID_MAX_VERSION:
        return
    for index, rate in enumerate(proto.rate_infos):
        if not rate.id:
            rate.id = stable_rate_id(proto.id, index, rate)
            logger.debug("Assigned rate id %s to rate %d of %s", rate.id, index, proto.id)


def _migration_0002_rate_programs(proto: HealthPlanFormData) -> None:
    """Submitted contract-and-rates packages: rates with no programs inherit the package programs."""
    if proto.status != "SUBMITTED":
        return
    if proto.submission_type != SUBMISSION_TYPE_CONTRACT_AND_RATES:
        return
    if not proto.rate_infos or not proto.program_ids:
        return
    for rate in proto.rate_infos:
        if not rate.rate_program_ids:
            rate.rate_program_ids.extend(proto.program_ids)


MIGRATIONS: List[MigrationStep] = [
    MigrationStep(0, "add_one_month", 1, 2, _migration_0000_add_one_month),
    MigrationStep(1, "rate_ids", 2, 2, _migration_0001_rate_ids),
    MigrationStep(2, "rate_programs", 2, 2, _migration_0002_rate_programs),
]


def check_registry(steps: Sequence[MigrationStep]) -> None:
    """
    Raise ValueError unless steps are numbered 0..N-1 in order and versions never
    go backwards or jump by more than one.
    """
    previous = None
    for position, step in enumerate(steps):
        if step.number != position:
            raise ValueError(f"step {step.label} registered at position {position}")
        if step.to_version - step.from_version not in (0, 1):
            raise ValueError(f"step {step.label} must keep or bump the version by one")
        if previous is not None and step.from_version < previous.to_version:
            raise ValueError(f"step {step.label} starts below the version {previous.label} produces")
        previous = step


check_registry(MIGRATIONS)

CURRENT_PROTO_VERSION = MIGRATIONS[-1].to_version
