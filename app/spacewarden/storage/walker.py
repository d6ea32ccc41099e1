"""Recursive file listing for cache eviction and orphan reconciliation.

Walks a directory tree breadth-first and yields a FileEntry for every
non-directory entry, optionally pruning a named subtree and filtering by owner.
The tree may change while it is being walked; entries that vanish are
skipped rather than reported as errors.
"""

import logging
import os
import stat
from collections import deque
from collections.abc import Iterator
from pathlib import Path

from spacewarden.storage.identity import FileIdentity
from spacewarden.storage.models import FileEntry

logger = logging.getLogger(__name__)


class FileWalker:
    """Lists non-directory entries under a root directory.

    Symlinks are reported with their own lstat data and never followed,
    so a symlinked directory is yielded rather than descended into.

    Every call to list_files() walks the tree from scratch; the
    returned iterator is not restartable.
    """

    def list_files(
        self,
        root: Path | str,
        exclude: str | None = None,
        owner_id: int | None = None,
    ) -> Iterator[FileEntry]:
        """Yield files, symlinks and other non-directory entries under root.

        Args:
            root: Directory to walk.
            exclude: Directory base name to prune entirely, or None.
            owner_id: Only yield files owned by this uid, or None for all.

        Yields:
            FileEntry for each matching entry.
        """
        dirs: deque[str] = deque([os.fspath(root)])

        while dirs:
            current = dirs.popleft()
            if exclude is not None and os.path.basename(current) == exclude:
                continue

            try:
                with os.scandir(current) as it:
                    children = list(it)
            except OSError as e:
                logger.debug("Cannot list %s: %s", current, e)
                continue

            for child in children:
                try:
                    st = child.stat(follow_symlinks=False)
                except OSError:
                    # Vanished mid-walk
                    continue

                if stat.S_ISDIR(st.st_mode):
                    dirs.append(child.path)
                    continue
                if owner_id is not None and st.st_uid != owner_id:
                    continue
                yield FileEntry(
                    path=child.path,
                    identity=FileIdentity.from_stat(st),
                    last_modified_at=st.st_mtime,
                    size_bytes=st.st_size,
                    owner_id=st.st_uid,
                )
