"""
Delete-at-height policy.

A record whose outputs are all spent and whose transaction is mined can be
expired by the host once ``block_height_retention`` blocks have passed.
Conflicting transactions are expired unconditionally. ``preserveUntil``
pins a record and disables the policy.
"""

import logging
from typing import Optional

from teraspend.core.models.record import UTXORecord

logger = logging.getLogger(__name__)

SIGNAL_DELETE_AT_HEIGHT_SET = "DAHSET"
SIGNAL_DELETE_AT_HEIGHT_UNSET = "DAHUNSET"


def evaluate_delete_at_height(
    record: UTXORecord, current_block_height: int, block_height_retention: int
) -> Optional[str]:
    """Update ``record.delete_at_height`` in place.

    Args:
        record: Working copy to update
        current_block_height: Height the caller is operating at
        block_height_retention: Blocks to retain the record for; 0 disables the policy

    Returns:
        Optional[str]: DAHSET or DAHUNSET when the field changed, otherwise None
    """
    if block_height_retention <= 0:
        return None

    if record.preserve_until is not None:
        return None

    new_delete_height = current_block_height + block_height_retention

    if record.conflicting:
        if record.delete_at_height is None:
            record.delete_at_height = new_delete_height
            logger.debug(f"Conflicting record scheduled for deletion at {new_delete_height}")
            return SIGNAL_DELETE_AT_HEIGHT_SET
        return None

    if record.all_spent() and record.mined is not None:
        if record.delete_at_height is None or record.delete_at_height < new_delete_height:
            record.delete_at_height = new_delete_height
            logger.debug(f"Spent record scheduled for deletion at {new_delete_height}")
            return SIGNAL_DELETE_AT_HEIGHT_SET
        return None

    if record.delete_at_height is not None:
        record.delete_at_height = None
        return SIGNAL_DELETE_AT_HEIGHT_UNSET

    return None
