"""
Positional argument decoding for the record handlers.

The host passes arguments as an ordered list of already-decoded values.
Trailing optional arguments may be missing or None.
"""

from typing import Any, List, Optional, Sequence

from teraspend.core import errors
from teraspend.core.errors import ValidationError
from teraspend.core.models.record import BlockRef


def _invalid(message: str) -> ValidationError:
    return ValidationError(errors.INVALID_PARAMETER, message)


def arg_at(args: Optional[Sequence[Any]], position: int, default: Any = None) -> Any:
    if args is None or position >= len(args) or args[position] is None:
        return default
    return args[position]


def get_bool(args, position: int, name: str, default: Optional[bool] = None) -> bool:
    value = arg_at(args, position, default)
    if not isinstance(value, bool):
        raise _invalid(f"{name} must be a boolean")
    return value


def get_int(args, position: int, name: str, default: Optional[int] = None) -> int:
    value = arg_at(args, position, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise _invalid(f"{name} must be an integer")
    return value


def get_str(args, position: int, name: str) -> str:
    value = arg_at(args, position)
    if isinstance(value, bytes):
        value = value.hex()
    if not isinstance(value, str) or not value:
        raise _invalid(f"Missing {name}")
    return value


def get_indices(args, position: int = 0) -> List[int]:
    """Read the list of output indices.

    A bare integer is accepted as a single index. Duplicates and negative
    values are rejected here. Range checks against the record happen in the
    state machine.
    """
    value = arg_at(args, position)
    if isinstance(value, int) and not isinstance(value, bool):
        value = [value]
    if not isinstance(value, (list, tuple)) or not value:
        raise _invalid("indices must be a non-empty list of integers")

    indices = []
    for index in value:
        if isinstance(index, bool) or not isinstance(index, int):
            raise _invalid("indices must be a non-empty list of integers")
        if index < 0:
            raise ValidationError(errors.UTXO_NOT_FOUND, f"{errors.MSG_UTXO_NOT_FOUND}{index}")
        indices.append(index)

    if len(set(indices)) != len(indices):
        raise _invalid("indices must not contain duplicates")
    return indices


def get_block_ref(args, position: int = 0) -> Optional[BlockRef]:
    """Read a block reference given as a map, a bare block id or None."""
    value = arg_at(args, position)
    if value is None:
        return None
    if isinstance(value, int) and not isinstance(value, bool):
        return BlockRef(block_id=value)
    if isinstance(value, BlockRef):
        return value
    if isinstance(value, dict):
        try:
            return BlockRef.from_bin(value)
        except (KeyError, ValueError) as e:
            raise _invalid(f"Invalid block reference: {str(e)}")
    raise _invalid("blockRef must be a map, an integer block id or null")
