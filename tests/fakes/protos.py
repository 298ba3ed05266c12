"""
Builders for HealthPlanFormData test messages. Versions default to the oldest
format so migration tests start from pre-fix data.
"""

from __future__ import annotations

from typing import Iterable, Optional

from mc_review_proto.proto.schema import (
    SUBMISSION_TYPE_CONTRACT_AND_RATES,
    SUBMISSION_TYPE_CONTRACT_ONLY,
    HealthPlanFormData,
)

PACKAGE_ID = "0b2a7c1e-5b2d-4a51-9c7e-1f3f5e9d2a44"


def set_date(target, year: int, month: int, day: int) -> None:
    target.year = year
    target.month = month
    target.day = day


def bare_proto(version: int = 1) -> HealthPlanFormData:
    """Only proto_version set."""
    return HealthPlanFormData(proto_version=version)


def draft_proto(version: int = 1, **fields) -> HealthPlanFormData:
    proto = HealthPlanFormData(
        proto_name="STATE_SUBMISSION",
        proto_version=version,
        id=PACKAGE_ID,
        status="DRAFT",
        state_code=1,
        submission_type=SUBMISSION_TYPE_CONTRACT_ONLY,
        submission_description="a draft",
        **fields,
    )
    return proto


def submitted_rates_proto(
    version: int = 1,
    program_ids: Iterable[str] = ("p1",),
    rate_count: int = 1,
    rate_ids: Optional[Iterable[str]] = None,
    status: str = "SUBMITTED",
) -> HealthPlanFormData:
    """Contract-and-rates package with rate entries lacking programs (and ids, unless given)."""
    proto = HealthPlanFormData(
        proto_name="STATE_SUBMISSION",
        proto_version=version,
        id=PACKAGE_ID,
        status=status,
        state_code=5,
        submission_type=SUBMISSION_TYPE_CONTRACT_AND_RATES,
        submission_description="contract and rates",
    )
    proto.program_ids.extend(program_ids)
    proto.submitted_at.seconds = 1650000000
    ids = list(rate_ids) if rate_ids is not None else [""] * rate_count
    for rate_id in ids:
        rate = proto.rate_infos.add(id=rate_id, rate_type=1)
        set_date(rate.rate_date_start, 2022, 0, 1)
    return proto
