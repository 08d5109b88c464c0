"""
File Store - JSON-file backed key-value store.

The store:
- Keeps every record in one JSON document on local disk
- Has the same expiry semantics as InMemoryStore
- Rewrites the document on every write (atomic replace)

Design decisions:
- Simple file-based storage, no database required
- Good enough for a single-process deployment and local play
"""

from __future__ import annotations
import json
import logging
import os
import time
from pathlib import Path
from typing import Any, Callable

from .store import InMemoryStore, StoredRecord, Key

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1


class JsonFileStore(InMemoryStore):
    """
    File-backed store.

    Usage:
        store = JsonFileStore("~/.sabirth/ledger.json")
        store.put(("leaderboard",), [])
    """

    def __init__(
        self,
        path: str | Path,
        clock: Callable[[], float] = time.time,
    ):
        super().__init__(clock=clock)
        self.path = Path(path).expanduser()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._load()

    def put(self, key: Key, value: Any):
        super().put(key, value)
        self._save()

    def extend_lifetime(self, key: Key, ttl: int):
        super().extend_lifetime(key, ttl)
        self._save()

    def _load(self):
        """Load records from disk. A missing file is an empty store."""
        if not self.path.exists():
            return

        with open(self.path, "r", encoding="utf-8") as f:
            document = json.load(f)

        version = document.get("version")
        if version != FORMAT_VERSION:
            raise ValueError(f"Unsupported store format version: {version}")

        for item in document.get("records", []):
            self._records[tuple(item["key"])] = StoredRecord(
                value=item["value"],
                expires_at=item.get("expires_at"),
            )
        logger.info("Loaded %d records from %s", len(self._records), self.path)

    def _save(self):
        """Write all records to disk."""
        document = {
            "version": FORMAT_VERSION,
            "records": [
                {"key": list(key), "value": record.value, "expires_at": record.expires_at}
                for key, record in self._records.items()
            ],
        }
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(document, f, indent=2)
        os.replace(tmp_path, self.path)
