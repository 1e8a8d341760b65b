"""
Function-name dispatch for the UTXO record module.

The name to handler table is built once when the module is imported and
torn down at interpreter exit. It is read-only in between, so lookups need
no synchronization.
"""

import atexit
import logging
from types import MappingProxyType
from typing import Any, Callable, Mapping, MutableMapping, Optional, Sequence

from teraspend.core.config import TeraspendConfig
from teraspend.core.errors import (
    DispatchError,
    InputError,
    InternalError,
    TeraspendError,
    ValidationError,
)
from teraspend.core.machine.state_machine import UTXOStateMachine
from teraspend.core.record_view import RecordView
from teraspend.core.result import Result, build_failure

logger = logging.getLogger(__name__)

Handler = Callable[[RecordView, Optional[Sequence[Any]]], Result]

_machine = UTXOStateMachine()
_handlers: Optional[Mapping[str, Handler]] = None


def _build_table(machine: UTXOStateMachine) -> Mapping[str, Handler]:
    return MappingProxyType({
        "setLocked": machine.set_locked,
        "spend": machine.spend,
        "unspend": machine.unspend,
        "freeze": machine.freeze,
        "unfreeze": machine.unfreeze,
        "reassign": machine.reassign,
        "setMined": machine.set_mined,
        "setConflicting": machine.set_conflicting,
        "setDeleteAtHeight": machine.set_delete_at_height,
        "preserveUntil": machine.preserve_until,
    })


def init_module():
    """Build the dispatch table. Called once at import."""
    global _handlers
    if _handlers is None:
        _handlers = _build_table(_machine)
        logger.debug(f"Dispatch table ready: {sorted(_handlers)}")


def shutdown_module():
    """Tear down the dispatch table. Registered with atexit."""
    global _handlers
    _handlers = None


def configure(config: TeraspendConfig):
    """Replace the configuration used by the handlers."""
    _machine.configure(config)


def function_names():
    return sorted(_handlers) if _handlers is not None else []


def resolve(function_name: Optional[str]) -> Handler:
    """Look up the handler for ``function_name``.

    Raises:
        InputError: If the name is missing or empty
        DispatchError: If no handler is registered under the name
        InternalError: If the table has been torn down
    """
    if not function_name:
        raise InputError()
    if _handlers is None:
        raise InternalError("module not initialized")
    handler = _handlers.get(function_name)
    if handler is None:
        raise DispatchError(function_name)
    return handler


def apply(
    function_name: Optional[str],
    record: MutableMapping[str, Any],
    args: Optional[Sequence[Any]] = None,
) -> Result:
    """Single entry point: run one named operation against one record.

    The record is borrowed for the duration of the call. It is only ever
    modified through bin assignment on success, and no reference to it is
    kept once the call returns.

    Args:
        function_name: Name of the operation, e.g. "spend"
        record: Mutable mapping of bin name to value, held exclusively by the caller
        args: Positional, already-decoded arguments

    Returns:
        Result: Status map on success, message string on failure
    """
    view = None
    try:
        handler = resolve(function_name)
        view = RecordView(record)
        return handler(view, args)
    except (InputError, DispatchError) as e:
        logger.error(f"Dispatch failed: {str(e)}")
        return build_failure(e)
    except ValidationError as e:
        logger.warning(f"{function_name} rejected: {str(e)}")
        return build_failure(e)
    except TeraspendError as e:
        logger.error(f"{function_name} failed: {str(e)}")
        return build_failure(e)
    except Exception as e:
        logger.exception(f"Unexpected error in {function_name}")
        return build_failure(InternalError(f"{type(e).__name__}: {str(e)}"))
    finally:
        if view is not None:
            view.release()


init_module()
atexit.register(shutdown_module)
