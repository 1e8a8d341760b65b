import pytest

from teraspend.core.errors import (
    DispatchError,
    InputError,
    InternalError,
    TeraspendError,
    ValidationError,
)
from teraspend.core.result import Result, build_failure, build_result


def test_ok_result():
    result = Result.ok({"spentCount": 2})

    assert result.success
    assert result.value == {"status": "OK", "spentCount": 2}
    assert result.message is None


def test_ok_result_without_payload():
    assert Result.ok().value == {"status": "OK"}


def test_payload_cannot_override_status():
    assert Result.ok({"status": "NOPE"}).value == {"status": "OK"}


def test_failure_result():
    result = build_failure(ValidationError("FROZEN", "UTXO is frozen"))

    assert not result.success
    assert result.value == "FROZEN: UTXO is frozen"
    assert result.message == "FROZEN: UTXO is frozen"


def test_build_result_failure_is_contained():
    class Unreadable(dict):
        def items(self):
            raise MemoryError("out of memory")

    result = build_result(Unreadable(x=1))

    assert not result.success
    assert result.value == "INTERNAL: Failed to build result: out of memory"


@pytest.mark.parametrize("error,text", [
    (InputError(), "function name required"),
    (DispatchError("burn"), "unknown function: burn"),
    (ValidationError("LOCKED", "TX is locked and cannot be spent"), "LOCKED: TX is locked and cannot be spent"),
    (InternalError("module not initialized"), "INTERNAL: module not initialized"),
])
def test_error_text(error, text):
    assert isinstance(error, TeraspendError)
    assert str(error) == text
