"""
UTXO lifecycle state machine.

Each handler takes a ``RecordView`` and the positional argument list of one
call. It loads a detached working copy of the record, checks every
precondition against the unmutated state, applies the mutation to the copy
and commits the changed bins in one step. A handler that raises has written
nothing to the host record.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from teraspend.core import errors
from teraspend.core.config import TeraspendConfig, config as default_config
from teraspend.core.errors import ValidationError
from teraspend.core.machine import args as a
from teraspend.core.machine.retention import evaluate_delete_at_height
from teraspend.core.models.record import Reassignment, UTXORecord
from teraspend.core.models.utxo import FROZEN, SPENT, UNSPENT, UTXOEntry
from teraspend.core.record_view import RecordView
from teraspend.core.result import Result, build_result

logger = logging.getLogger(__name__)

Args = Optional[Sequence[Any]]


class UTXOStateMachine:
    """
    Transition rules for the outputs of a single transaction record.

    Transitions per output:
        unspent -> spent        spend
        spent   -> unspent      unspend
        unspent/spent -> frozen freeze (pre-freeze state is remembered)
        frozen  -> unspent/spent unfreeze (restores the pre-freeze state)
        frozen  -> unspent      reassign

    Every operation except ``set_locked`` is rejected while the record is locked.
    """

    def __init__(self, config: Optional[TeraspendConfig] = None):
        self.config = config or default_config

    def configure(self, config: TeraspendConfig):
        self.config = config

    # ------------------------------------------------------------------
    # Shared helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _require_record(view: RecordView):
        if not view.exists():
            raise ValidationError(errors.TX_NOT_FOUND, errors.MSG_TX_NOT_FOUND)

    def _begin(self, view: RecordView, guarded: bool = True):
        before = view.load()
        if guarded and before.locked:
            raise ValidationError(errors.LOCKED, errors.MSG_LOCKED)
        return before, before.model_copy(deep=True)

    def _entries(self, record: UTXORecord, indices: List[int]) -> List[UTXOEntry]:
        entries = []
        for index in indices:
            if index >= len(record.outputs):
                raise ValidationError(errors.UTXO_NOT_FOUND, f"{errors.MSG_UTXO_NOT_FOUND}{index}")
            entries.append(record.outputs[index])
        return entries

    def _retention(self, args: Args, position: int) -> int:
        retention = a.get_int(
            args, position, "blockHeightRetention", self.config.block_height_retention
        )
        if retention < 0:
            raise ValidationError(errors.INVALID_PARAMETER, "blockHeightRetention cannot be negative")
        return retention

    def _commit(
        self,
        view: RecordView,
        before: UTXORecord,
        after: UTXORecord,
        operation: str,
        payload: Dict[str, Any],
        signal: Optional[str] = None,
    ) -> Result:
        """Build the response, then write the changed bins.

        The response is built first so that a failure to build it leaves the
        record untouched.
        """
        if signal:
            payload["signal"] = signal
        result = build_result(payload)
        if not result.success:
            return result

        changed = view.commit(before, after)
        logger.debug(f"{operation}: wrote bins {changed}")
        return result

    @staticmethod
    def _block_ids(record: UTXORecord) -> List[int]:
        return [record.mined.block_id] if record.mined is not None else []

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def set_locked(self, view: RecordView, args: Args) -> Result:
        """Set or clear the lock. Not subject to the lock guard.

        Args: [value: bool]
        """
        self._require_record(view)
        value = a.get_bool(args, 0, "value")
        before, after = self._begin(view, guarded=False)

        after.locked = value
        if value:
            after.delete_at_height = None

        return self._commit(view, before, after, "setLocked", {"locked": after.locked})

    def spend(self, view: RecordView, args: Args) -> Result:
        """Mark outputs as spent by a transaction.

        Args: [indices, txRef, ignoreConflicting=False, currentBlockHeight=0,
               blockHeightRetention=<config>]
        """
        self._require_record(view)
        indices = a.get_indices(args, 0)
        tx_ref = a.get_str(args, 1, "txRef")
        ignore_conflicting = a.get_bool(args, 2, "ignoreConflicting", False)
        current_block_height = a.get_int(args, 3, "currentBlockHeight", 0)
        retention = self._retention(args, 4)

        before, after = self._begin(view)

        if after.creating:
            raise ValidationError(errors.CREATING, errors.MSG_CREATING)
        if after.conflicting and not ignore_conflicting:
            raise ValidationError(errors.CONFLICTING, errors.MSG_CONFLICTING)
        if after.is_coinbase_immature(current_block_height):
            raise ValidationError(
                errors.COINBASE_IMMATURE,
                f"{errors.MSG_COINBASE_IMMATURE}, spendable in block {after.spending_height} "
                f"or greater. Current block height is {current_block_height}",
            )

        entries = self._entries(after, indices)
        for entry in entries:
            if entry.is_frozen():
                raise ValidationError(errors.FROZEN, errors.MSG_FROZEN)
            if entry.is_spent():
                raise ValidationError(errors.SPENT, f"{errors.MSG_SPENT}{entry.spending_ref}")
            if entry.spendable_in is not None and entry.spendable_in >= current_block_height:
                raise ValidationError(
                    errors.FROZEN_UNTIL, f"{errors.MSG_FROZEN_UNTIL}{entry.spendable_in}"
                )

        for entry in entries:
            entry.state = SPENT
            entry.spending_ref = tx_ref
        after.spent_count += len(entries)

        signal = evaluate_delete_at_height(after, current_block_height, retention)
        payload = {"spentCount": after.spent_count}
        if after.mined is not None:
            payload["blockIDs"] = self._block_ids(after)
        return self._commit(view, before, after, "spend", payload, signal)

    def unspend(self, view: RecordView, args: Args) -> Result:
        """Return spent outputs to unspent.

        Args: [indices, currentBlockHeight=0, blockHeightRetention=<config>]
        """
        self._require_record(view)
        indices = a.get_indices(args, 0)
        current_block_height = a.get_int(args, 1, "currentBlockHeight", 0)
        retention = self._retention(args, 2)

        before, after = self._begin(view)

        entries = self._entries(after, indices)
        for entry in entries:
            if entry.is_frozen():
                raise ValidationError(errors.FROZEN, errors.MSG_FROZEN)
            if not entry.is_spent():
                raise ValidationError(errors.UTXO_NOT_SPENT, errors.MSG_NOT_SPENT)

        for entry in entries:
            entry.state = UNSPENT
            entry.spending_ref = None
        after.spent_count -= len(entries)

        signal = evaluate_delete_at_height(after, current_block_height, retention)
        return self._commit(
            view, before, after, "unspend", {"spentCount": after.spent_count}, signal
        )

    def freeze(self, view: RecordView, args: Args) -> Result:
        """Freeze outputs. A frozen output does not count as spent.

        Args: [indices, currentBlockHeight=0, blockHeightRetention=<config>]
        """
        self._require_record(view)
        indices = a.get_indices(args, 0)
        current_block_height = a.get_int(args, 1, "currentBlockHeight", 0)
        retention = self._retention(args, 2)

        before, after = self._begin(view)

        entries = self._entries(after, indices)
        for entry in entries:
            if entry.is_frozen():
                raise ValidationError(errors.ALREADY_FROZEN, errors.MSG_ALREADY_FROZEN)

        for entry in entries:
            if entry.is_spent():
                after.spent_count -= 1
            entry.frozen_from = entry.state
            entry.state = FROZEN

        signal = evaluate_delete_at_height(after, current_block_height, retention)
        return self._commit(
            view, before, after, "freeze", {"spentCount": after.spent_count}, signal
        )

    def unfreeze(self, view: RecordView, args: Args) -> Result:
        """Restore frozen outputs to their pre-freeze state.

        Args: [indices, currentBlockHeight=0, blockHeightRetention=<config>]
        """
        self._require_record(view)
        indices = a.get_indices(args, 0)
        current_block_height = a.get_int(args, 1, "currentBlockHeight", 0)
        retention = self._retention(args, 2)

        before, after = self._begin(view)

        entries = self._entries(after, indices)
        for entry in entries:
            if not entry.is_frozen():
                raise ValidationError(errors.UTXO_NOT_FROZEN, errors.MSG_NOT_FROZEN)

        for entry in entries:
            entry.state = entry.frozen_from or UNSPENT
            entry.frozen_from = None
            if entry.is_spent():
                after.spent_count += 1
            else:
                entry.spending_ref = None

        signal = evaluate_delete_at_height(after, current_block_height, retention)
        return self._commit(
            view, before, after, "unfreeze", {"spentCount": after.spent_count}, signal
        )

    def reassign(self, view: RecordView, args: Args) -> Result:
        """Give outputs a new owner.

        A frozen output is released to unspent. Other outputs keep their state.
        Each output becomes spendable only above ``blockHeight + spendableAfter``.

        Args: [indices, newOwner, blockHeight=0, spendableAfter=0,
               blockHeightRetention=<config>]
        """
        self._require_record(view)
        indices = a.get_indices(args, 0)
        new_owner = a.get_str(args, 1, "newOwner")
        block_height = a.get_int(args, 2, "blockHeight", 0)
        spendable_after = a.get_int(args, 3, "spendableAfter", 0)
        if spendable_after < 0:
            raise ValidationError(errors.INVALID_PARAMETER, "spendableAfter cannot be negative")
        retention = self._retention(args, 4)

        before, after = self._begin(view)
        entries = self._entries(after, indices)

        for entry in entries:
            after.reassignments.append(
                Reassignment(
                    index=entry.index,
                    previous_owner=entry.owner,
                    new_owner=new_owner,
                    block_height=block_height,
                )
            )
            entry.owner = new_owner
            if entry.is_frozen():
                entry.state = UNSPENT
                entry.frozen_from = None
                entry.spending_ref = None
            entry.spendable_in = block_height + spendable_after

        signal = evaluate_delete_at_height(after, block_height, retention)
        return self._commit(
            view,
            before,
            after,
            "reassign",
            {"reassigned": [entry.index for entry in entries]},
            signal,
        )

    def set_mined(self, view: RecordView, args: Args) -> Result:
        """Record the block the transaction was mined in, or clear it with None.

        Args: [blockRef | None, currentBlockHeight=0, blockHeightRetention=<config>]
        """
        self._require_record(view)
        block_ref = a.get_block_ref(args, 0)
        current_block_height = a.get_int(args, 1, "currentBlockHeight", 0)
        retention = self._retention(args, 2)

        before, after = self._begin(view)

        after.mined = block_ref
        if block_ref is not None:
            after.creating = False

        signal = evaluate_delete_at_height(after, current_block_height, retention)
        return self._commit(
            view, before, after, "setMined", {"blockIDs": self._block_ids(after)}, signal
        )

    def set_conflicting(self, view: RecordView, args: Args) -> Result:
        """Args: [value: bool, currentBlockHeight=0, blockHeightRetention=<config>]"""
        self._require_record(view)
        value = a.get_bool(args, 0, "value")
        current_block_height = a.get_int(args, 1, "currentBlockHeight", 0)
        retention = self._retention(args, 2)

        before, after = self._begin(view)

        after.conflicting = value
        signal = evaluate_delete_at_height(after, current_block_height, retention)

        return self._commit(
            view, before, after, "setConflicting", {"conflicting": after.conflicting}, signal
        )

    def set_delete_at_height(self, view: RecordView, args: Args) -> Result:
        """Re-run the delete-at-height policy on its own.

        Args: [currentBlockHeight=0, blockHeightRetention=<config>]
        """
        self._require_record(view)
        current_block_height = a.get_int(args, 0, "currentBlockHeight", 0)
        retention = self._retention(args, 1)

        before, after = self._begin(view)

        signal = evaluate_delete_at_height(after, current_block_height, retention)
        return self._commit(view, before, after, "setDeleteAtHeight", {}, signal)

    def preserve_until(self, view: RecordView, args: Args) -> Result:
        """Pin the record until a block height. Args: [blockHeight]"""
        self._require_record(view)
        block_height = a.get_int(args, 0, "blockHeight")
        before, after = self._begin(view)

        after.preserve_until = block_height
        after.delete_at_height = None

        return self._commit(
            view, before, after, "preserveUntil", {"preserveUntil": after.preserve_until}
        )
