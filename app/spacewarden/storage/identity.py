"""Stable file and partition identities.

A file is identified by the device it lives on plus its inode number.
This survives renames and aliasing through different paths, and is much
cheaper than resolving canonical paths.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

# Returned when the partition of a path cannot be determined.
# Device ids are unsigned, so this never collides with a real one.
UNKNOWN_PARTITION = -1

# Target of a space request: a filesystem path or an open file descriptor
Target = str | os.PathLike[str] | int


@dataclass(frozen=True, slots=True)
class FileIdentity:
    """Identity of a physical file on a mounted partition.

    Attributes:
        partition_id: Device id (st_dev) of the backing partition.
        inode: Inode number (st_ino) within that partition.
    """

    partition_id: int
    inode: int

    @classmethod
    def from_stat(cls, st: os.stat_result) -> "FileIdentity":
        """Build an identity from a stat result."""
        return cls(partition_id=st.st_dev, inode=st.st_ino)

    @classmethod
    def of(cls, path: str | os.PathLike[str]) -> "FileIdentity":
        """Compute the identity of a path without following symlinks.

        Raises:
            OSError: If the entry cannot be stat'ed (FileNotFoundError when absent).
        """
        return cls.from_stat(os.lstat(path))


def partition_of(target: Target) -> int:
    """Return the partition id backing a path or file descriptor.

    Never raises; returns UNKNOWN_PARTITION when the query fails.
    """
    try:
        st = os.fstat(target) if isinstance(target, int) else os.stat(target)
    except OSError as e:
        logger.debug("Cannot resolve partition of %s: %s", target, e)
        return UNKNOWN_PARTITION
    return st.st_dev


def describe_target(target: Target) -> str:
    """Human-readable form of a target for log and error messages."""
    if isinstance(target, int):
        return f"fd {target}"
    return str(Path(target))
