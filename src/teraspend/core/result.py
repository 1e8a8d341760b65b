"""
Result returned across the module boundary.

On success the value is a map with ``status`` set to ``"OK"`` plus the
operation payload. On failure the value is a single message string. Callers
branch on ``success``, never on the shape of ``value``.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from teraspend.core.errors import InternalError, TeraspendError

STATUS_OK = "OK"
FIELD_STATUS = "status"


class Result(BaseModel):
    success: bool = Field(..., description="Whether the call succeeded")
    value: Any = Field(None, description="Status map on success, message string on failure")

    @classmethod
    def ok(cls, payload: Optional[Dict[str, Any]] = None) -> "Result":
        value = {FIELD_STATUS: STATUS_OK}
        if payload:
            for key, item in payload.items():
                if key != FIELD_STATUS:
                    value[key] = item
        return cls(success=True, value=value)

    @classmethod
    def failure(cls, error: Any) -> "Result":
        return cls(success=False, value=str(error))

    @property
    def message(self) -> Optional[str]:
        return None if self.success else self.value


def build_result(payload: Optional[Dict[str, Any]]) -> Result:
    """Wrap a handler payload, turning a build failure into a failed Result."""
    try:
        return Result.ok(payload)
    except Exception as e:
        return Result.failure(InternalError(f"Failed to build result: {str(e)}"))


def build_failure(error: TeraspendError) -> Result:
    return Result.failure(error)
