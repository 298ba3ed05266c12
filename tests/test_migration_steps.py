"""Registered migration steps: each one guarded, idempotent, and order-sensitive as a chain."""

from __future__ import annotations

import pytest

from mc_review_proto.migrations.runner import MigrationRunner
from mc_review_proto.migrations.steps import (
    CURRENT_PROTO_VERSION,
    MIGRATIONS,
    RATE_ID_MAX_VERSION,
    MigrationStep,
    check_registry,
    stable_rate_id,
)
from mc_review_proto.proto.codec import copy_proto, encode
from tests.fakes.protos import bare_proto, draft_proto, set_date, submitted_rates_proto

ADD_ONE_MONTH, RATE_IDS, RATE_PROGRAMS = MIGRATIONS


def _dated_draft(version: int = 1, month: int = 2):
    proto = draft_proto(version=version)
    set_date(proto.contract_info.contract_date_start, 2022, month, 1)
    return proto


def test_registry_is_well_formed():
    check_registry(MIGRATIONS)
    assert [s.number for s in MIGRATIONS] == list(range(len(MIGRATIONS)))
    assert CURRENT_PROTO_VERSION == 2
    assert [s.label for s in MIGRATIONS] == [
        "0000_add_one_month",
        "0001_rate_ids",
        "0002_rate_programs",
    ]


def test_check_registry_rejects_reordered_chain():
    with pytest.raises(ValueError):
        check_registry([RATE_IDS, ADD_ONE_MONTH])


def test_apply_never_mutates_input():
    proto = submitted_rates_proto()
    before = copy_proto(proto)
    for step in MIGRATIONS:
        step.apply(proto)
    assert proto == before


@pytest.mark.parametrize(
    "proto",
    [
        bare_proto(version=0),
        bare_proto(version=1),
        _dated_draft(version=1),
        submitted_rates_proto(version=1),
        submitted_rates_proto(version=2, rate_count=2),
    ],
)
def test_every_step_is_idempotent_on_its_own_output(proto):
    """Applying a step to what it just produced changes nothing."""
    for step in MIGRATIONS:
        once = step.apply(proto)
        twice = step.apply(once)
        assert twice == once, step.label


def test_version_one_bare_proto_only_gets_version_bump():
    """protoVersion 1 and nothing else: the full chain only bumps the version."""
    proto = bare_proto(version=1)
    result = MigrationRunner().run(proto)
    assert result.proto == bare_proto(version=2)
    assert result.steps_applied == ("0000_add_one_month",)


def test_add_one_month_fixes_contract_start():
    out = ADD_ONE_MONTH.apply(_dated_draft(month=2))
    assert out.contract_info.contract_date_start.year == 2022
    assert out.contract_info.contract_date_start.month == 3
    assert out.proto_version == 2


def test_add_one_month_shifts_only_once():
    once = ADD_ONE_MONTH.apply(_dated_draft(month=2))
    twice = ADD_ONE_MONTH.apply(once)
    assert twice.contract_info.contract_date_start.month == 3


def test_add_one_month_touches_every_date():
    proto = submitted_rates_proto(version=1, rate_ids=["r1"])
    set_date(proto.created_at, 2021, 11, 30)
    set_date(proto.contract_info.contract_date_end, 2022, 11, 31)
    rate = proto.rate_infos[0]
    set_date(rate.rate_date_end, 2022, 5, 1)
    set_date(rate.rate_date_certified, 2021, 0, 15)
    set_date(rate.rate_amendment_info.effective_date_start, 2022, 6, 1)
    out = ADD_ONE_MONTH.apply(proto)
    r = out.rate_infos[0]
    assert out.created_at.month == 12
    assert out.contract_info.contract_date_end.month == 12
    assert r.rate_date_start.month == 1
    assert r.rate_date_end.month == 6
    assert r.rate_date_certified.month == 1
    assert r.rate_amendment_info.effective_date_start.month == 7
    assert not r.rate_amendment_info.HasField("effective_date_end")


def test_add_one_month_leaves_absent_dates_absent():
    out = ADD_ONE_MONTH.apply(draft_proto(version=1))
    assert not out.HasField("contract_info")
    assert not out.HasField("created_at")


def test_add_one_month_skips_current_version():
    proto = _dated_draft(version=2)
    assert ADD_ONE_MONTH.apply(proto) == proto


def test_unversioned_proto_is_bumped():
    assert ADD_ONE_MONTH.apply(bare_proto(version=0)).proto_version == 2


def test_rate_programs_backfilled_for_submitted_contract_and_rates():
    proto = submitted_rates_proto(version=2, program_ids=["p1"], rate_ids=["r1"])
    out = RATE_PROGRAMS.apply(proto)
    assert list(out.rate_infos[0].rate_program_ids) == ["p1"]


def test_rate_programs_draft_left_unchanged():
    proto = submitted_rates_proto(version=2, program_ids=["p1"], rate_ids=["r1"], status="DRAFT")
    assert RATE_PROGRAMS.apply(proto) == proto


def test_rate_programs_keeps_existing_rate_programs():
    proto = submitted_rates_proto(version=2, program_ids=["p1", "p2"], rate_ids=["r1", "r2"])
    proto.rate_infos[1].rate_program_ids.append("p2")
    out = RATE_PROGRAMS.apply(proto)
    assert list(out.rate_infos[0].rate_program_ids) == ["p1", "p2"]
    assert list(out.rate_infos[1].rate_program_ids) == ["p2"]


def test_rate_programs_needs_package_programs():
    proto = submitted_rates_proto(version=2, program_ids=[], rate_ids=["r1"])
    assert RATE_PROGRAMS.apply(proto) == proto


def test_rate_ids_assigned_once():
    """A rate without an id gets one; running the step again keeps it."""
    proto = submitted_rates_proto(version=RATE_ID_MAX_VERSION, rate_count=2)
    once = RATE_IDS.apply(proto)
    ids = [r.id for r in once.rate_infos]
    assert all(ids)
    assert ids[0] != ids[1]
    twice = RATE_IDS.apply(once)
    assert [r.id for r in twice.rate_infos] == ids


def test_rate_ids_are_reproducible():
    proto = submitted_rates_proto(version=1, rate_count=1)
    assert RATE_IDS.apply(proto).rate_infos[0].id == RATE_IDS.apply(proto).rate_infos[0].id
    assert RATE_IDS.apply(proto).rate_infos[0].id == stable_rate_id(proto.id, 0, proto.rate_infos[0])


def test_rate_ids_skip_above_threshold():
    proto = submitted_rates_proto(version=RATE_ID_MAX_VERSION + 1, rate_count=1)
    assert RATE_IDS.apply(proto) == proto


def test_full_chain_assigns_rate_id_and_second_run_keeps_it():
    runner = MigrationRunner()
    first = runner.run(submitted_rates_proto(version=1, rate_count=1))
    rate_id = first.proto.rate_infos[0].id
    assert rate_id
    second = runner.run(first.proto)
    assert second.proto.rate_infos[0].id == rate_id


@pytest.mark.parametrize(
    "proto",
    [
        bare_proto(version=1),
        bare_proto(version=0),
        draft_proto(version=1),
        submitted_rates_proto(version=1),
        submitted_rates_proto(version=2, rate_ids=["r1"]),
    ],
)
def test_chain_is_deterministic_and_version_monotonic(proto):
    runner = MigrationRunner()
    a = runner.run(proto)
    b = runner.run(proto)
    assert encode(a.proto) == encode(b.proto)
    assert a.proto.proto_version >= proto.proto_version
    assert a.proto.proto_version == CURRENT_PROTO_VERSION


def test_permuted_chain_is_detectably_different():
    """Backfilling programs before assigning ids changes the content the ids derive from."""
    proto = submitted_rates_proto(version=1, rate_count=1)
    canonical = MigrationRunner().run(proto).proto
    permuted = MigrationRunner([ADD_ONE_MONTH, RATE_PROGRAMS, RATE_IDS]).run(proto).proto
    assert list(canonical.rate_infos[0].rate_program_ids) == list(permuted.rate_infos[0].rate_program_ids)
    assert canonical.rate_infos[0].id != permuted.rate_infos[0].id
    assert encode(canonical) != encode(permuted)


def test_ids_before_month_fix_differ_from_canonical():
    """Assigning ids before the month fix hashes the zero-indexed dates."""
    proto = submitted_rates_proto(version=1, rate_count=1)
    canonical = MigrationRunner().run(proto).proto
    permuted = MigrationRunner([RATE_IDS, ADD_ONE_MONTH, RATE_PROGRAMS]).run(proto).proto
    assert canonical.rate_infos[0].rate_date_start == permuted.rate_infos[0].rate_date_start
    assert encode(canonical) != encode(permuted)


def test_custom_step_label():
    step = MigrationStep(7, "reset_description", 2, 2, lambda proto: None)
    assert step.label == "0007_reset_description"
    assert not step.bumps_version
