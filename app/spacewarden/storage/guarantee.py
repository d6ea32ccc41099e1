"""Free-space guarantee for writes to a specific partition.

Before a download writes to disk, ensure() checks that the partition
backing the target has room for it on top of a reserved safety margin.
When it does not, space is reclaimed according to which partition is
short, and the check is repeated:

- data partition (or emulated external storage on top of it): ask the
  external reclaimer to free space from other caches, waiting for it
  with a hard deadline;
- download-cache partition: evict old downloads;
- anything else: nothing can be reclaimed.
"""

import logging
import os
import sys
import threading
import time
from collections.abc import Callable

from spacewarden.core.config import WardenConfig
from spacewarden.storage.environment import LocalStorageEnvironment, StorageEnvironment
from spacewarden.storage.errors import InsufficientSpaceError, StorageIOError
from spacewarden.storage.evictor import CacheEvictor
from spacewarden.storage.identity import Target, describe_target, partition_of
from spacewarden.storage.reclaimer import CommandReclaimer, CompletionSignal, ExternalReclaimer

logger = logging.getLogger(__name__)


def query_free_bytes(target: Target) -> int:
    """Return bytes available to unprivileged users on the target's partition.

    Raises:
        OSError: If the partition cannot be queried.
    """
    st = os.fstatvfs(target) if isinstance(target, int) else os.statvfs(target)
    return st.f_bavail * st.f_frsize


class SpaceGuarantee:
    """Ensures a partition has room for a write, reclaiming space if needed.

    Args:
        environment: Resolver for the data, cache and external roots.
        reclaimer: Frees space outside the download cache.
        evictor: Frees space inside the download cache.
        reserved_bytes: Margin kept free at all times, never counted as usable.
        reclaim_timeout: Seconds to wait for the external reclaimer.
        force_full_eviction: Ask the reclaimer for everything it can free
            instead of just the requested amount.
        space_query: Returns free bytes for a target.
    """

    def __init__(
        self,
        environment: StorageEnvironment,
        reclaimer: ExternalReclaimer,
        evictor: CacheEvictor,
        *,
        reserved_bytes: int,
        reclaim_timeout: float,
        force_full_eviction: bool = False,
        space_query: Callable[[Target], int] = query_free_bytes,
    ) -> None:
        self._environment = environment
        self._reclaimer = reclaimer
        self._evictor = evictor
        self._reserved_bytes = reserved_bytes
        self._reclaim_timeout = reclaim_timeout
        self._force_full_eviction = force_full_eviction
        self._space_query = space_query

    @classmethod
    def from_config(
        cls,
        config: WardenConfig,
        *,
        reclaimer: ExternalReclaimer | None = None,
    ) -> "SpaceGuarantee":
        """Build a guarantee wired to the local filesystem."""
        environment = LocalStorageEnvironment(config.storage)
        evictor = CacheEvictor(
            config.storage.download_cache_dir,
            running_dir_name=config.running_dir_name,
            min_delete_age=config.min_delete_age_seconds,
        )
        if reclaimer is None:
            reclaimer = CommandReclaimer(
                config.reclaim_command,
                timeout=config.reclaim_timeout_seconds,
            )
        return cls(
            environment,
            reclaimer,
            evictor,
            reserved_bytes=config.reserved_bytes,
            reclaim_timeout=config.reclaim_timeout_seconds,
            force_full_eviction=config.force_full_eviction,
        )

    def available_bytes(self, target: Target) -> int:
        """Usable bytes on the target's partition after the reserved margin.

        May be negative when the partition is already inside the margin.

        Raises:
            StorageIOError: If the partition cannot be queried.
        """
        try:
            free = self._space_query(target)
        except OSError as e:
            raise StorageIOError(
                f"Cannot query free space for {describe_target(target)}: {e}"
            ) from e
        return free - self._reserved_bytes

    def ensure(
        self,
        target: Target,
        required_bytes: int,
        *,
        interrupt: threading.Event | None = None,
    ) -> None:
        """Ensure required_bytes can be written to the target's partition.

        Args:
            target: Path or open file descriptor of the file being written.
            required_bytes: Bytes about to be written, excluding the margin.
            interrupt: Set if an interrupt arrives while waiting for the
                external reclaimer. The interrupt does not cut the wait short.
                When omitted, KeyboardInterrupt is raised again once the
                wait and the re-check are done.

        Raises:
            InsufficientSpaceError: If the partition is still short after reclamation.
            StorageIOError: If a query fails or external reclamation times out.
            KeyboardInterrupt: If interrupted while waiting and no interrupt
                event was given.
        """
        available = self.available_bytes(target)
        if available >= required_bytes:
            return

        partition = self._target_partition(target)
        pending = interrupt if interrupt is not None else threading.Event()
        try:
            data_partition = partition_of(self._environment.data_dir)
            cache_partition = partition_of(self._environment.download_cache_dir)
            external_partition = partition_of(self._environment.external_dir)

            if partition == data_partition or (
                partition == external_partition and self._environment.is_external_emulated()
            ):
                self._reclaim_external(required_bytes, pending)
            elif partition == cache_partition:
                self._evictor.free_bytes(required_bytes)
            else:
                logger.info(
                    "No reclamation strategy for partition %d backing %s",
                    partition,
                    describe_target(target),
                )

            available = self.available_bytes(target)
            if available < required_bytes:
                raise InsufficientSpaceError(required_bytes, available)
        finally:
            if interrupt is None and pending.is_set():
                raise KeyboardInterrupt

    def _target_partition(self, target: Target) -> int:
        try:
            st = os.fstat(target) if isinstance(target, int) else os.stat(target)
        except OSError as e:
            raise StorageIOError(
                f"Cannot resolve partition of {describe_target(target)}: {e}"
            ) from e
        return st.st_dev

    def _reclaim_external(self, required_bytes: int, interrupt: threading.Event) -> None:
        request = sys.maxsize if self._force_full_eviction else required_bytes
        logger.info("Requesting external reclamation of %d bytes", request)
        signal = self._reclaimer.request(request)
        if not self._await(signal, interrupt):
            raise StorageIOError("reclamation timed out")

    def _await(self, signal: CompletionSignal, interrupt: threading.Event) -> bool:
        """Wait for signal until the deadline, absorbing interrupts.

        Returns:
            True if the signal fired before the deadline.
        """
        deadline = time.monotonic() + self._reclaim_timeout
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return signal.is_complete
            try:
                return signal.wait(remaining)
            except KeyboardInterrupt:
                # Recorded for the caller; the deadline still applies
                logger.warning("Interrupted while waiting for reclamation; continuing")
                interrupt.set()
