"""Space guarantee, cache eviction and orphan reconciliation.

This module provides the policy layer deciding how to make room for a
write and how to keep tracked-download records consistent with the
files actually on disk.
"""

from spacewarden.storage.environment import LocalStorageEnvironment, StorageEnvironment
from spacewarden.storage.errors import (
    InsufficientSpaceError,
    RecordStoreError,
    SpaceWardenError,
    StorageIOError,
)
from spacewarden.storage.evictor import CacheEvictor
from spacewarden.storage.guarantee import SpaceGuarantee, query_free_bytes
from spacewarden.storage.identity import UNKNOWN_PARTITION, FileIdentity, partition_of
from spacewarden.storage.models import (
    EvictionReport,
    FileEntry,
    MediaState,
    PersistedRecord,
    ReconcileReport,
)
from spacewarden.storage.reclaimer import CommandReclaimer, CompletionSignal, ExternalReclaimer
from spacewarden.storage.reconciler import OrphanReconciler
from spacewarden.storage.records import JsonlRecordStore, RecordStore
from spacewarden.storage.walker import FileWalker

__all__ = [
    "UNKNOWN_PARTITION",
    "CacheEvictor",
    "CommandReclaimer",
    "CompletionSignal",
    "EvictionReport",
    "ExternalReclaimer",
    "FileEntry",
    "FileIdentity",
    "FileWalker",
    "InsufficientSpaceError",
    "JsonlRecordStore",
    "LocalStorageEnvironment",
    "MediaState",
    "OrphanReconciler",
    "PersistedRecord",
    "ReconcileReport",
    "RecordStore",
    "RecordStoreError",
    "SpaceGuarantee",
    "SpaceWardenError",
    "StorageEnvironment",
    "StorageIOError",
    "partition_of",
    "query_free_bytes",
]
