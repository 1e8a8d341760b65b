"""
File-backed record store.

Each record is one JSON document of bins under ``store_path``. The store
plays the host's part for the CLI: it loads a record, hands it to the module
and writes it back.
"""

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

from teraspend.core.config import config
from teraspend.core.models.record import UTXORecord

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.:-]+$")


class RecordStoreError(Exception):
    """Base exception for record store errors."""

    pass


class RecordNotFoundError(RecordStoreError):
    """Exception raised when a record key has no stored document."""

    pass


class RecordExistsError(RecordStoreError):
    """Exception raised when creating a record under a key already in use."""

    pass


class RecordStore:
    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else config.store_path

    def path_for(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise RecordStoreError(f"Invalid record key: {key}")
        return self.path / f"{key}.json"

    def exists(self, key: str) -> bool:
        return self.path_for(key).exists()

    def create(self, key: str, output_count: int, owner: Optional[str] = None) -> Dict[str, Any]:
        """Create a record with ``output_count`` unspent outputs.

        Raises:
            RecordExistsError: If the key is already in use
        """
        if output_count < 0:
            raise RecordStoreError("Output count cannot be negative")
        if self.exists(key):
            raise RecordExistsError(f"Record already exists: {key}")

        bins = {
            name: value
            for name, value in UTXORecord.new(output_count, owner=owner).to_bins().items()
            if value is not None
        }
        self.save(key, bins)
        logger.info(f"Created record {key} with {output_count} outputs")
        return bins

    def load(self, key: str) -> Dict[str, Any]:
        path = self.path_for(key)
        if not path.exists():
            raise RecordNotFoundError(f"Record not found: {key}")
        with open(path, "r") as f:
            return json.load(f)

    def save(self, key: str, bins: Dict[str, Any]):
        path = self.path_for(key)
        os.makedirs(path.parent, exist_ok=True)
        tmp_path = path.with_suffix(".json.tmp")
        with open(tmp_path, "w") as f:
            json.dump(bins, f, indent=2, sort_keys=True)
        os.replace(tmp_path, path)
