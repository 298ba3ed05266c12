"""Conversion between HealthPlanFormData messages and the tagged-union domain model."""

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from mc_review_proto.core.errors import DecodeError, EncodeError, MigrationStepError
from mc_review_proto.migrations.steps import CURRENT_PROTO_VERSION
from mc_review_proto.proto import domain as d
from mc_review_proto.proto.codec import decode, encode
from mc_review_proto.proto.convert import (
    read_form_data,
    to_domain,
    to_jsonable,
    to_proto,
    write_form_data,
)
from tests.fakes.protos import PACKAGE_ID, draft_proto, set_date, submitted_rates_proto

SUBMITTED_AT = datetime(2022, 4, 15, 12, 30, 0, 250000, tzinfo=timezone.utc)


def _locked() -> d.LockedHealthPlanFormData:
    return d.LockedHealthPlanFormData(
        id=PACKAGE_ID,
        submitted_at=SUBMITTED_AT,
        state_code="MN",
        state_number=4,
        submission_type="CONTRACT_AND_RATES",
        submission_description="rates for 2022",
        program_ids=("p1", "p2"),
        population_covered="MEDICAID",
        risk_based_contract=False,
        created_at=date(2022, 1, 31),
        contract_type="AMENDMENT",
        contract_execution_status="EXECUTED",
        contract_date_start=date(2022, 1, 1),
        contract_date_end=date(2022, 12, 31),
        managed_care_entities=("MCO",),
        federal_authorities=("STATE_PLAN", "WAIVER_1115"),
        contract_amendment_info=d.ContractAmendmentInfo(
            modified_provisions=d.ModifiedProvisions(
                modified_benefits_provided=True,
                modified_geo_area_served=False,
            )
        ),
        documents=(d.SubmissionDocument(name="a.pdf", s3_url="s3://bucket/a.pdf", sha256="abc"),),
        contract_documents=(
            d.SubmissionDocument(
                name="contract.pdf",
                s3_url="s3://bucket/contract.pdf",
                document_categories=("CONTRACT",),
            ),
        ),
        state_contacts=(d.StateContact(name="Ann", title_role="lead", email="ann@example.com"),),
        rate_infos=(
            d.RateInfo(
                id="rate-1",
                rate_type="AMENDMENT",
                rate_capitation_type="RATE_CELL",
                rate_date_start=date(2022, 1, 1),
                rate_date_end=date(2022, 12, 31),
                rate_date_certified=date(2021, 12, 1),
                rate_amendment_info=d.RateAmendmentInfo(effective_date_start=date(2022, 6, 1)),
                rate_program_ids=("p1",),
                rate_certification_name="MN-0004-RATES",
                actuary_contacts=(d.ActuaryContact(name="Bo", actuarial_firm="MERCER"),),
                actuary_communication_preference="OACT_TO_ACTUARY",
                packages_with_shared_rate_certs=(d.SharedRateCertDisplay(package_id="pkg", package_name="MN-1"),),
            ),
        ),
    )


def test_locked_round_trip_through_proto():
    form = _locked()
    assert to_domain(to_proto(form)) == form


def test_unlocked_round_trip_through_bytes():
    form = d.UnlockedHealthPlanFormData(id=PACKAGE_ID, state_code="MN", submission_type="CONTRACT_ONLY")
    assert read_form_data(write_form_data(form)) == form


def test_to_proto_writes_name_and_current_version():
    proto = to_proto(_locked())
    assert proto.proto_name == "STATE_SUBMISSION"
    assert proto.proto_version == CURRENT_PROTO_VERSION
    assert proto.status == "SUBMITTED"


def test_to_proto_generates_missing_rate_ids():
    form = d.UnlockedHealthPlanFormData(id=PACKAGE_ID, rate_infos=(d.RateInfo(), d.RateInfo(id="keep")))
    proto = to_proto(form)
    assert proto.rate_infos[0].id
    assert proto.rate_infos[1].id == "keep"


def test_enum_prefix_stripped_and_unspecified_is_none():
    domain = to_domain(decode(encode(draft_proto(version=2))))
    assert isinstance(domain, d.UnlockedHealthPlanFormData)
    assert domain.submission_type == "CONTRACT_ONLY"
    assert domain.state_code == "AS"
    assert domain.population_covered is None


def test_unknown_enum_numbers_dropped_from_lists():
    proto = draft_proto(version=2)
    proto.contract_info.federal_authorities.extend([1, 42])
    domain = to_domain(proto)
    assert domain.federal_authorities == ("STATE_PLAN",)


def test_incomplete_date_maps_to_none():
    proto = draft_proto(version=2)
    set_date(proto.contract_info.contract_date_start, 2022, 0, 1)
    assert to_domain(proto).contract_date_start is None


def test_zero_timestamp_maps_to_none():
    proto = draft_proto(version=2)
    proto.updated_at.seconds = 0
    assert to_domain(proto).updated_at is None


def test_out_of_range_timestamp_maps_to_none():
    proto = draft_proto(version=2)
    proto.updated_at.seconds = 2**62
    assert read_form_data(encode(proto)).updated_at is None


def test_out_of_range_submitted_at_is_decode_error():
    proto = submitted_rates_proto(version=2, rate_ids=["r1"])
    proto.submitted_at.seconds = -(2**62)
    with pytest.raises(DecodeError):
        read_form_data(encode(proto))


def test_missing_status_is_decode_error():
    proto = draft_proto(version=2)
    proto.status = ""
    with pytest.raises(DecodeError):
        to_domain(proto)


def test_submitted_without_submitted_at_is_decode_error():
    proto = submitted_rates_proto(version=2, rate_ids=["r1"])
    proto.ClearField("submitted_at")
    with pytest.raises(DecodeError):
        to_domain(proto)


def test_locked_requires_submission_fields():
    with pytest.raises(ValueError):
        d.LockedHealthPlanFormData(id=PACKAGE_ID, submitted_at=SUBMITTED_AT, state_code="MN")


def test_is_locked_is_exhaustive():
    assert d.is_locked(_locked()) is True
    assert d.is_locked(d.UnlockedHealthPlanFormData(id="x")) is False
    with pytest.raises(TypeError):
        d.is_locked(object())


def test_to_proto_rejects_unknown_enum_name():
    form = d.UnlockedHealthPlanFormData(id=PACKAGE_ID, state_code="ZZ")
    with pytest.raises(EncodeError):
        to_proto(form)


def test_read_form_data_migrates_old_blob():
    """Version 1 blob: zero-indexed month is fixed and rate programs backfilled on read."""
    proto = submitted_rates_proto(version=1, rate_ids=["r1"])
    domain = read_form_data(encode(proto))
    assert isinstance(domain, d.LockedHealthPlanFormData)
    assert domain.rate_infos[0].rate_date_start == date(2022, 1, 1)
    assert domain.rate_infos[0].rate_program_ids == ("p1",)


def test_read_form_data_propagates_decode_error():
    with pytest.raises(DecodeError):
        read_form_data(b"\x0a\x10abc")


def test_read_form_data_propagates_step_failure(monkeypatch):
    import mc_review_proto.migrations.runner as runner
    from mc_review_proto.migrations.steps import MIGRATIONS, MigrationStep

    def boom(proto):
        raise RuntimeError("boom")

    failing = MigrationStep(0, "add_one_month", 1, 1, boom)
    monkeypatch.setattr(runner, "MIGRATIONS", [failing] + MIGRATIONS[1:])
    with pytest.raises(MigrationStepError) as exc_info:
        read_form_data(encode(draft_proto(version=1)))
    assert exc_info.value.step_number == 0


def test_to_jsonable_uses_iso_dates():
    payload = to_jsonable(_locked())
    assert payload["status"] == "SUBMITTED"
    assert payload["contract_date_start"] == "2022-01-01"
    assert payload["submitted_at"].startswith("2022-04-15T12:30:00.250000")
    assert payload["rate_infos"][0]["rate_program_ids"] == ["p1"]
