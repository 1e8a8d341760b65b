"""
JSON file record store used by the CLI in place of a database host.
"""
from teraspend.core.store.record_store import RecordStore, RecordStoreError, RecordNotFoundError, \
    RecordExistsError

__all__ = ["RecordStore", "RecordStoreError", "RecordNotFoundError", "RecordExistsError"]
