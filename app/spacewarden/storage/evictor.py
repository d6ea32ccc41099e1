"""Oldest-first eviction of finished downloads from the cache partition.

Only focused on freeing disk space: records pointing at evicted files
are left alone and cleaned up by the next reconciliation pass.
"""

import logging
import os
import time
from collections.abc import Callable
from pathlib import Path

from spacewarden.storage.models import EvictionReport
from spacewarden.storage.walker import FileWalker

logger = logging.getLogger(__name__)


class CacheEvictor:
    """Deletes the oldest eligible files under the download cache.

    Files under the running-transfer subtree and files owned by other
    users are never candidates. Files modified within min_delete_age
    seconds are never deleted, even if the target is not met.

    Args:
        cache_root: Download-cache root to evict from.
        running_dir_name: Directory name holding in-progress transfers.
        min_delete_age: Grace period in seconds since last modification.
        owner_id: Only evict files owned by this uid. Defaults to the
            current process uid.
        walker: File walker used to enumerate candidates.
        clock: Returns the current POSIX time.
    """

    def __init__(
        self,
        cache_root: Path,
        *,
        running_dir_name: str,
        min_delete_age: float,
        owner_id: int | None = None,
        walker: FileWalker | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._cache_root = cache_root
        self._running_dir_name = running_dir_name
        self._min_delete_age = min_delete_age
        self._owner_id = os.getuid() if owner_id is None else owner_id
        self._walker = walker or FileWalker()
        self._clock = clock

    def free_bytes(self, target_bytes: int) -> EvictionReport:
        """Delete old files until target_bytes have been freed.

        Scans the cache once. Never raises; stops when the target is met
        or candidates run out.

        Args:
            target_bytes: Number of bytes to free.

        Returns:
            EvictionReport describing what was deleted and skipped.
        """
        report = EvictionReport(target_bytes=target_bytes)

        files = list(
            self._walker.list_files(
                self._cache_root,
                exclude=self._running_dir_name,
                owner_id=self._owner_id,
            )
        )
        report.candidates = len(files)
        logger.debug("Found %d downloads on cache %s", len(files), self._cache_root)

        # Stable: equal mtimes keep walk order
        files.sort(key=lambda entry: entry.last_modified_at)

        remaining = target_bytes
        now = self._clock()
        for entry in files:
            if remaining <= 0:
                break

            if now - entry.last_modified_at < self._min_delete_age:
                logger.debug("Skipping recently modified %s", entry.path)
                report.skipped_recent.append(entry.path)
                continue

            logger.debug("Deleting %s to reclaim %d", entry.path, entry.size_bytes)
            try:
                Path(entry.path).unlink()
            except FileNotFoundError:
                logger.debug("Already gone: %s", entry.path)
            except OSError as e:
                logger.warning("Cannot delete %s: %s", entry.path, e)
                report.failed.append(entry.path)
                continue
            else:
                report.deleted.append(entry.path)

            remaining -= entry.size_bytes
            report.freed_bytes += entry.size_bytes

        logger.info(
            "Cache eviction freed %d of %d requested bytes (%d files)",
            report.freed_bytes,
            target_bytes,
            len(report.deleted),
        )
        return report
