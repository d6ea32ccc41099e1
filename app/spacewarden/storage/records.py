"""Persisted records of tracked downloads.

The reconciler only needs to list records and delete them by id, which
is what the RecordStore protocol describes. JsonlRecordStore is the
bundled implementation, keeping one JSON object per line.
"""

import json
import logging
import os
import uuid
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Protocol

from spacewarden.core.paths import ensure_dir, get_records_path
from spacewarden.storage.errors import RecordStoreError
from spacewarden.storage.models import PersistedRecord

logger = logging.getLogger(__name__)


class RecordStore(Protocol):
    """Store of tracked downloads, queried and pruned by the reconciler."""

    def query_all(self) -> list[PersistedRecord]: ...

    def delete_by_id(self, record_id: str) -> bool: ...


class JsonlRecordStore:
    """Manages tracked-download records in a JSONL file.

    Storage location: ~/.local/state/spacewarden/records.jsonl

    Appends are single writes; deletions rewrite the file atomically
    through a temporary file and os.replace().

    Args:
        path: Optional override for the record file.
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path if path is not None else get_records_path()

    @property
    def path(self) -> Path:
        """Path to the record file."""
        return self._path

    def add(self, path: str, record_id: str | None = None) -> PersistedRecord:
        """Append a record for path.

        Args:
            path: Location of the tracked file.
            record_id: Identifier to use. Generated if None.

        Returns:
            The stored record.

        Raises:
            RecordStoreError: If the file cannot be written.
        """
        record = PersistedRecord(id=record_id or uuid.uuid4().hex, path=path)
        try:
            ensure_dir(self._path.parent, "state")
        except RuntimeError as e:
            raise RecordStoreError(str(e)) from e
        try:
            with self._path.open(mode="a", encoding="utf-8") as f:
                f.write(record.to_json_line() + "\n")
                f.flush()
        except OSError as e:
            raise RecordStoreError(f"Failed to write records: {e}") from e
        return record

    def query_all(self) -> list[PersistedRecord]:
        """Read all records in file order.

        Corrupt lines are skipped with a warning. A missing file yields
        an empty list.

        Raises:
            RecordStoreError: If the file exists but cannot be read.
        """
        if not self._path.exists():
            return []

        records: list[PersistedRecord] = []
        try:
            with self._path.open(encoding="utf-8") as f:
                for line_num, line in enumerate(f, start=1):
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        records.append(PersistedRecord.from_json_line(line))
                    except (json.JSONDecodeError, ValueError) as e:
                        logger.warning("Skipping corrupt record line %d: %s", line_num, str(e))
        except OSError as e:
            raise RecordStoreError(f"Failed to read records: {e}") from e

        return records

    def delete_by_id(self, record_id: str) -> bool:
        """Remove every record with the given id.

        Returns:
            True if at least one record was removed.

        Raises:
            RecordStoreError: If the file cannot be rewritten.
        """
        records = self.query_all()
        kept = [r for r in records if r.id != record_id]
        if len(kept) == len(records):
            return False

        self._rewrite(kept)
        return True

    def _rewrite(self, records: list[PersistedRecord]) -> None:
        tmp_path: Path | None = None
        try:
            with NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=self._path.parent,
                delete=False,
                suffix=".tmp",
            ) as f:
                tmp_path = Path(f.name)
                for record in records:
                    f.write(record.to_json_line() + "\n")
            os.replace(str(tmp_path), str(self._path))
        except OSError as e:
            if tmp_path is not None and tmp_path.exists():
                tmp_path.unlink()
            raise RecordStoreError(f"Failed to rewrite records: {e}") from e
