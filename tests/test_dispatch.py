"""
Tests for the dispatch table and the entry point.
"""
import json
import sys
from unittest.mock import Mock, patch

import pytest

from teraspend.core import dispatch
from teraspend.core.dispatch import apply
from teraspend.core.errors import InternalError
from teraspend.core.result import Result


class UntouchableRecord(dict):
    """Record that fails the test if the module reads or writes it."""

    def __getitem__(self, key):
        raise AssertionError("record was read")

    def get(self, key, default=None):
        raise AssertionError("record was read")

    def __len__(self):
        raise AssertionError("record was read")

    def __setitem__(self, key, value):
        raise AssertionError("record was written")


def test_missing_function_name(record):
    before = json.dumps(record, sort_keys=True)

    for name in (None, ""):
        result = apply(name, record, [[0], "tx1"])
        assert not result.success
        assert result.value == "function name required"

    assert json.dumps(record, sort_keys=True) == before


def test_missing_function_name_does_not_touch_record():
    result = apply(None, UntouchableRecord(), [])
    assert result.value == "function name required"


def test_unknown_function(record):
    result = apply("doesNotExist", record, [])

    assert not result.success
    assert result.value == "unknown function: doesNotExist"


def test_function_names():
    assert dispatch.function_names() == sorted([
        "freeze",
        "preserveUntil",
        "reassign",
        "setConflicting",
        "setDeleteAtHeight",
        "setLocked",
        "setMined",
        "spend",
        "unfreeze",
        "unspend",
    ])


def test_table_is_read_only():
    with pytest.raises(TypeError):
        dispatch._handlers["spend"] = Mock()


def test_resolve_returns_bound_handler():
    handler = dispatch.resolve("spend")
    assert handler.__name__ == "spend"


def test_apply_after_shutdown():
    dispatch.shutdown_module()
    try:
        result = apply("spend", {"locked": False}, [[0], "tx1"])
        assert not result.success
        assert result.value == "INTERNAL: module not initialized"
    finally:
        dispatch.init_module()

    assert "spend" in dispatch.function_names()


def test_init_module_is_idempotent():
    table = dispatch._handlers
    dispatch.init_module()
    assert dispatch._handlers is table


def test_unexpected_handler_error_is_contained(monkeypatch, record):
    failing = Mock(side_effect=RuntimeError("boom"))
    monkeypatch.setattr(dispatch, "_handlers", {"spend": failing})

    result = apply("spend", record, [[0], "tx1"])

    assert not result.success
    assert result.value == "INTERNAL: RuntimeError: boom"


def test_result_build_failure_leaves_record_unchanged(record):
    before = json.dumps(record, sort_keys=True)
    failed = Result.failure(InternalError("Failed to build result: no memory"))

    with patch("teraspend.core.machine.state_machine.build_result", return_value=failed):
        result = apply("spend", record, [[0], "tx1"])

    assert not result.success
    assert result.value == "INTERNAL: Failed to build result: no memory"
    assert json.dumps(record, sort_keys=True) == before


@pytest.mark.parametrize("function,args", [
    ("spend", [[0], "tx1"]),
    ("spend", [[9], "tx1"]),
    ("doesNotExist", []),
    (None, []),
])
def test_record_ownership_is_unchanged(record, function, args):
    refs_before = sys.getrefcount(record)

    apply(function, record, args)

    assert sys.getrefcount(record) == refs_before


def test_record_stays_usable_after_failure(record):
    apply("spend", record, [[9], "tx1"])
    assert apply("spend", record, [[0], "tx1"]).success
