"""
Store Service

Loads and saves the processed-releases JSON document.

- Missing file: fresh default store
- Corrupt or schema-incompatible file: fresh default store, logged as a warning
- Save: write to a temporary file next to the target, then os.replace(),
  so a crash never leaves a half-written store
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Union

from pydantic import ValidationError

from disclosure_relay.models.store import ProcessedStore

logger = logging.getLogger(__name__)


class StoreService:
    """
    File-backed persistence for ProcessedStore.

    Usage:
        service = StoreService("data/processed.json")
        store = service.load()
        store.merge_batch(result)
        service.save(store)
    """

    def __init__(self, path: Union[str, Path] = "data/processed.json"):
        self.path = Path(path)

    def load(self) -> ProcessedStore:
        """
        Load the store, or return a default one if it is absent or unreadable.

        Returns:
            ProcessedStore instance
        """
        if not self.path.exists():
            logger.info(f"No processed store at {self.path}, starting fresh")
            return ProcessedStore()

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            store = ProcessedStore.model_validate(data)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Processed store at {self.path} is unreadable, starting fresh: {e}")
            return ProcessedStore()

        logger.info(
            f"Loaded processed store: {len(store.processed_releases)} releases, "
            f"{store.stats.total_processed} total processed"
        )
        return store

    def save(self, store: ProcessedStore) -> None:
        """
        Atomically write the store to disk.

        Raises:
            OSError: If the directory cannot be created or the file written
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(
            dir=self.path.parent,
            prefix=f".{self.path.name}.",
            suffix=".tmp"
        )
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(store.to_json())
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except OSError:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

        logger.debug(f"Saved processed store to {self.path}")
