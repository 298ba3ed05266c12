"""Migration runner: up-to-date no-op, failure tagging, batch-form results."""

from __future__ import annotations

import pytest

from mc_review_proto.core.errors import MigrationStepError
from mc_review_proto.migrations.runner import MigrationRunner, Outcome
from mc_review_proto.migrations.steps import MIGRATIONS, MigrationStep
from mc_review_proto.proto.codec import decode, encode
from tests.fakes.protos import draft_proto, set_date, submitted_rates_proto


def _explode(proto):
    raise KeyError("missing rate table")


def test_up_to_date_blob_is_byte_identical():
    data = encode(submitted_rates_proto(version=2, rate_ids=["r1"]))
    result = MigrationRunner().run_blob(data, blob_id="row-1")
    assert result.outcome is Outcome.UP_TO_DATE
    assert result.data == data
    assert result.steps_applied == ()
    assert result.from_version == result.to_version == 2


def test_up_to_date_does_not_run_steps():
    """A current blob with a missing rate id is left alone by the default policy."""
    proto = submitted_rates_proto(version=2, rate_count=1)
    result = MigrationRunner().run(proto)
    assert result.outcome is Outcome.UP_TO_DATE
    assert result.proto is proto


def test_future_version_is_left_alone(caplog):
    proto = draft_proto(version=9)
    with caplog.at_level("WARNING"):
        result = MigrationRunner().run(proto, blob_id="future")
    assert result.outcome is Outcome.UP_TO_DATE
    assert result.proto is proto
    assert "newer than the latest" in caplog.text


def test_old_blob_is_migrated_and_reencoded():
    proto = draft_proto(version=1)
    set_date(proto.contract_info.contract_date_start, 2022, 2, 1)
    result = MigrationRunner().run_blob(encode(proto), blob_id="old.proto")
    assert result.outcome is Outcome.MIGRATED
    assert (result.from_version, result.to_version) == (1, 2)
    assert result.steps_applied == ("0000_add_one_month",)
    migrated = decode(result.data)
    assert migrated.proto_version == 2
    assert migrated.contract_info.contract_date_start.month == 3


def test_unversioned_blob_starts_at_version_one():
    result = MigrationRunner().run(draft_proto(version=0))
    assert result.from_version == 1
    assert result.to_version == 2


def test_step_failure_is_tagged_with_step_and_blob():
    steps = list(MIGRATIONS[:2]) + [MigrationStep(2, "rate_programs", 2, 2, _explode)]
    with pytest.raises(MigrationStepError) as exc_info:
        MigrationRunner(steps).run(draft_proto(version=1), blob_id="rev-42")
    err = exc_info.value
    assert err.step_number == 2
    assert err.step_name == "rate_programs"
    assert err.blob_id == "rev-42"
    assert isinstance(err.__cause__, KeyError)
    assert "0002_rate_programs" in str(err) and "rev-42" in str(err)


def test_failed_step_leaves_input_untouched():
    proto = draft_proto(version=1)
    set_date(proto.contract_info.contract_date_start, 2022, 2, 1)
    steps = [MIGRATIONS[0], MigrationStep(1, "rate_ids", 2, 2, _explode)]
    with pytest.raises(MigrationStepError):
        MigrationRunner(steps).run(proto)
    assert proto.contract_info.contract_date_start.month == 2
    assert proto.proto_version == 1


def test_migrate_item_turns_errors_into_results():
    runner = MigrationRunner()
    bad = runner.migrate_item(b"\x0a\x10abc", blob_id="corrupt")
    assert bad.outcome is Outcome.FAILED
    assert bad.failed
    assert bad.blob_id == "corrupt"
    assert bad.error

    steps = [MigrationStep(0, "add_one_month", 1, 1, _explode)]
    failed_step = MigrationRunner(steps).migrate_item(encode(draft_proto(version=1)), blob_id="x")
    assert failed_step.outcome is Outcome.FAILED
    assert "0000_add_one_month" in failed_step.error


def test_replay_all_fills_missing_rate_id_at_current_version():
    proto = submitted_rates_proto(version=2, rate_count=1)
    result = MigrationRunner(replay_all=True).run(proto)
    assert result.outcome is Outcome.MIGRATED
    assert result.proto.rate_infos[0].id
    assert result.steps_applied == ("0001_rate_ids", "0002_rate_programs")


def test_replay_all_on_migrated_blob_is_noop():
    first = MigrationRunner().run(submitted_rates_proto(version=1, rate_count=1))
    again = MigrationRunner(replay_all=True).run(first.proto)
    assert again.outcome is Outcome.UP_TO_DATE
    assert encode(again.proto) == encode(first.proto)
