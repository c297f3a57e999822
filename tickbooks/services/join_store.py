"""
Storage of join records between Tick entries and FreshBooks invoices.

The workflow and the reconciliation engine only use the JoinRecordStore
interface; where the records live is up to the caller. The command line
keeps them in a small JSON file.
"""

import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Union

from tickbooks.models.invoicing import JoinRecord

logger = logging.getLogger(__name__)


class JoinRecordStore(ABC):
    """Interface of a join record table keyed by Tick entry id."""

    @abstractmethod
    def records(self) -> List[JoinRecord]:
        """All join records."""

    @abstractmethod
    def add(self, record: JoinRecord) -> None:
        """Store a record, replacing any record for the same entry."""

    @abstractmethod
    def delete_entry(self, entry_id: int) -> bool:
        """Delete the record of an entry. Returns False if there was none."""

    def add_many(self, records: Iterable[JoinRecord]) -> None:
        for record in records:
            self.add(record)

    def invoice_ids(self) -> List[int]:
        """Distinct invoice ids, in the order they were first recorded."""
        seen: Dict[int, None] = {}
        for record in self.records():
            seen.setdefault(record.invoice_id, None)
        return list(seen)

    def entry_ids_for(self, invoice_id: int) -> List[int]:
        return [r.entry_id for r in self.records() if r.invoice_id == invoice_id]

    def __len__(self) -> int:
        return len(self.records())


class InMemoryJoinRecordStore(JoinRecordStore):
    """Join records kept in a dictionary, for tests and embedding callers."""

    def __init__(self, records: Iterable[JoinRecord] = ()):
        self._records: Dict[int, JoinRecord] = {
            record.entry_id: record for record in records
        }

    def records(self) -> List[JoinRecord]:
        return list(self._records.values())

    def add(self, record: JoinRecord) -> None:
        self._records[record.entry_id] = record

    def delete_entry(self, entry_id: int) -> bool:
        return self._records.pop(entry_id, None) is not None


class JsonFileJoinRecordStore(InMemoryJoinRecordStore):
    """
    Join records persisted to a JSON file.

    Features:
    - Loaded once on creation; a missing file is an empty store
    - Every change is written back with an atomic write (temp file + rename)
    - Thread-safe modifications with lock protection

    File Structure:
        {"version": "1.0", "last_updated": "...",
         "records": [{"entry_id": 1, "invoice_id": 2}, ...]}
    """

    FILE_VERSION = "1.0"

    def __init__(self, path: Union[str, Path]):
        """
        Open (or create on first write) the join record file.

        Args:
            path: Location of the JSON file

        Raises:
            ValueError: If the file exists but is not a valid join record file
        """
        super().__init__()
        self.path = Path(path)
        self._lock = threading.Lock()
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            logger.debug(f"Join record file not found: {self.path}")
            return

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse join record file {self.path}: {e}")
            raise ValueError(f"Corrupted join record file: {self.path}") from e

        version = data.get("version", "unknown")
        if version != self.FILE_VERSION:
            raise ValueError(
                f"Unsupported join record file version {version} "
                f"(expected {self.FILE_VERSION}): {self.path}"
            )

        for raw in data.get("records", []):
            super().add(JoinRecord(**raw))

        logger.info(f"Loaded {len(self._records)} join records from {self.path}")

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "version": self.FILE_VERSION,
            "last_updated": datetime.now().isoformat(),
            "records": [record.model_dump() for record in self._records.values()],
        }

        temp_fd, temp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(temp_path, self.path)
        except OSError:
            try:
                os.unlink(temp_path)
            except FileNotFoundError:
                pass
            raise

        logger.debug(f"Saved {len(self._records)} join records to {self.path}")

    def add(self, record: JoinRecord) -> None:
        with self._lock:
            super().add(record)
            self._save()

    def add_many(self, records: Iterable[JoinRecord]) -> None:
        with self._lock:
            for record in records:
                super().add(record)
            self._save()

    def delete_entry(self, entry_id: int) -> bool:
        with self._lock:
            deleted = super().delete_entry(entry_id)
            if deleted:
                self._save()
            return deleted
