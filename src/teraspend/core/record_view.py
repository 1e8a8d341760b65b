"""
Read/write adapter over the bins of a single host record.

The host hands the module a mutable mapping of bin name to value. The view
decodes those bins into a detached ``UTXORecord`` working copy and, once a
handler has finished mutating that copy, writes back only the bins that
changed. Nothing is written to the host record before ``commit``.
"""

import logging
from typing import Any, Dict, List, MutableMapping

from pydantic import ValidationError as ModelValidationError

from teraspend.core import errors
from teraspend.core.errors import InternalError, ValidationError
from teraspend.core.models.record import UTXORecord

logger = logging.getLogger(__name__)

_MISSING = object()


class RecordView:
    """Typed view of one host record, borrowed for the duration of a call."""

    def __init__(self, record: MutableMapping[str, Any]):
        self._record = record

    def exists(self) -> bool:
        return self._record is not None and len(self._record) > 0

    def load(self) -> UTXORecord:
        """Decode the record bins into a detached working copy.

        Returns:
            UTXORecord: Copy sharing no mutable state with the host record

        Raises:
            ValidationError: If the record has no bins, or its bins cannot be decoded
                or disagree with each other
        """
        if not self.exists():
            raise ValidationError(errors.TX_NOT_FOUND, errors.MSG_TX_NOT_FOUND)

        try:
            record = UTXORecord.from_bins(dict(self._record))
        except (ModelValidationError, KeyError, TypeError, AttributeError) as e:
            raise ValidationError(errors.INVALID_RECORD, f"Malformed record bins: {str(e)}")

        if record.spent_count != record.count_spent():
            raise ValidationError(
                errors.INVALID_RECORD,
                f"spentCount {record.spent_count} does not match "
                f"{record.count_spent()} spent outputs",
            )
        return record

    def commit(self, before: UTXORecord, after: UTXORecord) -> List[str]:
        """Write the bins that differ between ``before`` and ``after``.

        A bin whose new value is None is removed from the record. If the host
        rejects any write, the bins already written are restored before the
        error is raised.

        Args:
            before: Working copy as loaded
            after: Working copy after mutation

        Returns:
            List[str]: Names of the bins written

        Raises:
            InternalError: If the host record rejects a write
        """
        old_bins = before.to_bins()
        new_bins = after.to_bins()
        changed = [name for name, value in new_bins.items() if old_bins.get(name) != value]

        saved: Dict[str, Any] = {}
        try:
            for name in changed:
                saved[name] = self._record.get(name, _MISSING)
                value = new_bins[name]
                if value is None:
                    if name in self._record:
                        del self._record[name]
                else:
                    self._record[name] = value
        except Exception as e:
            logger.error(f"Failed to commit record changes, rolling back {list(saved)}: {str(e)}")
            self._restore(saved)
            raise InternalError(f"Failed to commit record changes: {str(e)}")

        return changed

    def _restore(self, saved: Dict[str, Any]):
        for name, value in saved.items():
            try:
                if value is _MISSING:
                    self._record.pop(name, None)
                else:
                    self._record[name] = value
            except Exception as e:
                logger.error(f"Failed to restore bin '{name}': {str(e)}")

    def release(self):
        """Drop the reference to the host record."""
        self._record = None
