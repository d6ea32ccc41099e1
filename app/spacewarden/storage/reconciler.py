"""Reconciliation of tracked-download records against files on disk.

Records and disk files are matched by FileIdentity (device + inode), so
a record pointing at a file through a different path than the one the
walker finds still counts as a match.

Only the private cache dir, private files dir and download-cache root
are searched for orphaned files. Records, on the other hand, are checked
wherever they point, so a record for a missing file anywhere is pruned
while an unreferenced file outside those roots is never found.
"""

import logging
import os
from pathlib import Path

from spacewarden.core.config import WardenConfig
from spacewarden.storage.environment import LocalStorageEnvironment, StorageEnvironment
from spacewarden.storage.errors import RecordStoreError
from spacewarden.storage.identity import FileIdentity
from spacewarden.storage.models import MediaState, ReconcileReport
from spacewarden.storage.records import JsonlRecordStore, RecordStore
from spacewarden.storage.walker import FileWalker

logger = logging.getLogger(__name__)


class OrphanReconciler:
    """Deletes files without records and records without files.

    A record whose file is missing is kept when the file lives on
    removable media that is currently unmounted, since the file may come
    back when the media does.

    Args:
        environment: Resolver for the searched roots and media state.
        store: Record store to query and prune.
        owner_id: Only consider disk files owned by this uid. Defaults
            to the current process uid.
        walker: File walker used to enumerate disk files.
        dry_run: Report deletions without performing them.
    """

    def __init__(
        self,
        environment: StorageEnvironment,
        store: RecordStore,
        *,
        owner_id: int | None = None,
        walker: FileWalker | None = None,
        dry_run: bool = False,
    ) -> None:
        self._environment = environment
        self._store = store
        self._owner_id = os.getuid() if owner_id is None else owner_id
        self._walker = walker or FileWalker()
        self._dry_run = dry_run

    @classmethod
    def from_config(cls, config: WardenConfig, *, dry_run: bool = False) -> "OrphanReconciler":
        """Build a reconciler wired to the local filesystem and JSONL store."""
        return cls(
            LocalStorageEnvironment(config.storage),
            JsonlRecordStore(config.records_path),
            dry_run=dry_run,
        )

    def reconcile(self) -> ReconcileReport:
        """Run one reconciliation pass.

        Per-entry failures are logged and skipped.

        Returns:
            ReconcileReport listing what was deleted and kept.

        Raises:
            RecordStoreError: If the record store cannot be listed. Nothing
                is deleted in that case.
        """
        report = ReconcileReport(dry_run=self._dry_run)
        tracked = self._collect_tracked(report)
        report.tracked = len(tracked)

        # Roots may nest, so the same entry can be walked more than once
        visited: set[str] = set()
        for root in self._search_roots():
            for entry in self._walker.list_files(root, owner_id=self._owner_id):
                if entry.identity in tracked:
                    continue
                location = _location(entry.path)
                if location in visited:
                    continue
                visited.add(location)
                logger.debug("Missing record, deleting %s", entry.path)
                if self._dry_run:
                    report.deleted_files.append(entry.path)
                    continue
                try:
                    Path(entry.path).unlink()
                except FileNotFoundError:
                    continue
                except OSError as e:
                    logger.warning("Cannot delete orphan %s: %s", entry.path, e)
                    report.failed_files.append(entry.path)
                    continue
                report.deleted_files.append(entry.path)

        logger.info(
            "Reconciled %d tracked files: %d records pruned, %d kept, %d orphan files deleted",
            report.tracked,
            len(report.deleted_records),
            len(report.kept_records),
            len(report.deleted_files),
        )
        return report

    def _collect_tracked(self, report: ReconcileReport) -> set[FileIdentity]:
        """Identities of all recorded files that still exist.

        Records whose file is gone are pruned here unless their media is
        unmounted.
        """
        tracked: set[FileIdentity] = set()

        for record in self._store.query_all():
            if not record.path:
                continue

            try:
                identity = FileIdentity.of(record.path)
            except OSError as e:
                logger.debug("Cannot stat %s: %s", record.path, e)
                identity = None

            if identity is not None:
                tracked.add(identity)
                continue

            state = self._environment.media_state(record.path)
            if state == MediaState.UNMOUNTED:
                logger.debug("Keeping %s while its media is unmounted", record.id)
                report.kept_records.append(record.id)
                continue

            logger.debug("Missing %s, deleting record %s", record.path, record.id)
            if self._dry_run:
                report.deleted_records.append(record.id)
                continue
            try:
                self._store.delete_by_id(record.id)
            except RecordStoreError as e:
                logger.warning("Cannot delete record %s: %s", record.id, e)
                continue
            report.deleted_records.append(record.id)

        return tracked

    def _search_roots(self) -> tuple[Path, ...]:
        return (
            self._environment.private_cache_dir,
            self._environment.private_files_dir,
            self._environment.download_cache_dir,
        )


def _location(path: str) -> str:
    """Path with its parent directory resolved, the entry itself untouched."""
    head, name = os.path.split(path)
    return os.path.join(os.path.realpath(head), name)
