"""
Tests for the record view: decoding, change-only commit and rollback.
"""
import pytest

from teraspend.core.dispatch import apply
from teraspend.core.errors import InternalError, ValidationError
from teraspend.core.record_view import RecordView


class RejectingRecord(dict):
    """Host record that refuses writes to one bin."""

    def __init__(self, *args, reject: str = "utxos", **kwargs):
        super().__init__(*args, **kwargs)
        self.reject = reject

    def __setitem__(self, key, value):
        if key == self.reject:
            raise IOError(f"bin {key} is read-only")
        super().__setitem__(key, value)


def test_load_empty_record():
    view = RecordView({})

    assert not view.exists()
    with pytest.raises(ValidationError) as exc_info:
        view.load()
    assert str(exc_info.value) == "TX_NOT_FOUND: TX not found"


def test_apply_to_empty_record():
    result = apply("spend", {}, [[0], "tx1"])
    assert result.value == "TX_NOT_FOUND: TX not found"


def test_load_malformed_bins():
    view = RecordView({"utxos": [{"index": 0, "state": "melted"}]})

    with pytest.raises(ValidationError) as exc_info:
        view.load()
    assert exc_info.value.code == "INVALID_RECORD"


def test_load_returns_detached_copy(record):
    working = RecordView(record).load()
    working.outputs[0].state = "spent"
    working.locked = True

    assert record["utxos"][0]["state"] == "unspent"
    assert record["locked"] is False


def test_commit_writes_changed_bins_only(record):
    view = RecordView(record)
    before = view.load()
    after = before.model_copy(deep=True)
    after.locked = True

    assert view.commit(before, after) == ["locked"]
    assert record["locked"] is True


def test_commit_removes_cleared_bins(record):
    record["deleteAtHeight"] = 50
    view = RecordView(record)
    before = view.load()
    after = before.model_copy(deep=True)
    after.delete_at_height = None

    view.commit(before, after)

    assert "deleteAtHeight" not in record


def test_commit_rolls_back_on_host_failure(record):
    host = RejectingRecord(record)
    snapshot = dict(host)
    view = RecordView(host)
    before = view.load()
    after = before.model_copy(deep=True)
    after.spent_count = 1
    after.outputs[0].state = "spent"
    after.outputs[0].spending_ref = "tx1"

    with pytest.raises(InternalError) as exc_info:
        view.commit(before, after)

    assert "Failed to commit record changes" in str(exc_info.value)
    assert dict(host) == snapshot


def test_apply_reports_host_failure_without_partial_write(record):
    host = RejectingRecord(record)
    snapshot = dict(host)

    result = apply("spend", host, [[0], "tx1"])

    assert not result.success
    assert result.value.startswith("INTERNAL: Failed to commit record changes")
    assert dict(host) == snapshot


def test_release_drops_record(record):
    view = RecordView(record)
    view.release()
    assert not view.exists()


def test_load_rejects_inconsistent_spent_count(record):
    record["spentCount"] = 2

    with pytest.raises(ValidationError) as exc_info:
        RecordView(record).load()

    assert exc_info.value.code == "INVALID_RECORD"
    assert "does not match 0 spent outputs" in str(exc_info.value)


def test_apply_to_inconsistent_record_changes_nothing(record):
    record["spentCount"] = 1
    snapshot = dict(record)

    result = apply("spend", record, [[0], "tx1"])

    assert result.value.startswith("INVALID_RECORD:")
    assert record == snapshot
