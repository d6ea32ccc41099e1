"""Storage domain models.

This module defines the data structures exchanged between the walker,
the cache evictor, the orphan reconciler and the record store, plus the
reports the cleanup passes return.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field

from spacewarden.storage.identity import FileIdentity


class MediaState(str, Enum):
    """Mount state of the storage media holding a path.

    Attributes:
        UNKNOWN: Path is not on any known removable volume (internal storage).
        MOUNTED: Path is on a removable volume that is currently mounted.
        UNMOUNTED: Removable volume is known but not mounted right now.
    """

    UNKNOWN = "unknown"
    MOUNTED = "mounted"
    UNMOUNTED = "unmounted"


@dataclass(frozen=True, slots=True)
class FileEntry:
    """Snapshot of a non-directory entry discovered by the walker.

    Not kept in sync with the filesystem after creation.

    Attributes:
        path: Absolute path the file was found at.
        identity: Device and inode of the file.
        last_modified_at: Modification time as a POSIX timestamp.
        size_bytes: Size of the file in bytes.
        owner_id: Numeric uid owning the file.
    """

    path: str
    identity: FileIdentity
    last_modified_at: float
    size_bytes: int
    owner_id: int


class PersistedRecord(BaseModel):
    """A tracked download as seen by the record store.

    Only the two fields needed for reconciliation are modelled; other
    fields present in the store are ignored.

    Attributes:
        id: Opaque record identifier.
        path: Location of the downloaded file, if any.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: Annotated[str, Field(min_length=1, description="Record identifier")]
    path: Annotated[str | None, Field(description="Path of the stored file")] = None

    def to_json_line(self) -> str:
        """Serialize to a single JSON line."""
        return json.dumps(self.model_dump(mode="json"), separators=(",", ":"))

    @classmethod
    def from_json_line(cls, line: str) -> "PersistedRecord":
        """Deserialize from a JSON line.

        Raises:
            json.JSONDecodeError: If the line is not valid JSON.
            ValueError: If the content does not match the model.
        """
        data: dict[str, Any] = json.loads(line)
        return cls.model_validate(data)


@dataclass(slots=True)
class EvictionReport:
    """Outcome of a cache eviction pass.

    Attributes:
        target_bytes: Bytes the pass was asked to free.
        freed_bytes: Sizes of the files removed (or already gone).
        deleted: Paths removed, in deletion order.
        skipped_recent: Paths protected by the minimum age.
        failed: Paths whose deletion raised an error.
        candidates: Number of files considered.
    """

    target_bytes: int
    freed_bytes: int = 0
    deleted: list[str] = field(default_factory=list)
    skipped_recent: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    candidates: int = 0

    @property
    def satisfied(self) -> bool:
        """Whether enough bytes were freed to meet the target."""
        return self.freed_bytes >= self.target_bytes


@dataclass(slots=True)
class ReconcileReport:
    """Outcome of an orphan reconciliation pass.

    Attributes:
        tracked: Number of records whose file was found.
        deleted_records: Ids of records removed because their file is gone.
        kept_records: Ids of records kept because their media is unmounted.
        deleted_files: Disk files removed because no record references them.
        failed_files: Disk files whose deletion raised an error.
        dry_run: Whether deletions were only simulated.
    """

    tracked: int = 0
    deleted_records: list[str] = field(default_factory=list)
    kept_records: list[str] = field(default_factory=list)
    deleted_files: list[str] = field(default_factory=list)
    failed_files: list[str] = field(default_factory=list)
    dry_run: bool = False
