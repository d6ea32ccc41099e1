"""Well-known storage roots and media state.

The guarantee and the reconciler never hardcode directories; they ask a
StorageEnvironment. LocalStorageEnvironment answers from configuration
and the live mount table.
"""

import os
from pathlib import Path
from typing import Protocol

from spacewarden.core.config import StorageConfig
from spacewarden.storage.models import MediaState


class StorageEnvironment(Protocol):
    """Resolver for the directories and media state the engine depends on."""

    @property
    def data_dir(self) -> Path: ...

    @property
    def download_cache_dir(self) -> Path: ...

    @property
    def external_dir(self) -> Path: ...

    @property
    def private_cache_dir(self) -> Path: ...

    @property
    def private_files_dir(self) -> Path: ...

    def is_external_emulated(self) -> bool: ...

    def media_state(self, path: Path | str) -> MediaState: ...


class LocalStorageEnvironment:
    """StorageEnvironment backed by a StorageConfig.

    Removable volumes are configured by their mount roots. A path under
    one of them is MOUNTED while the root is a mount point and UNMOUNTED
    otherwise; any other path is on internal storage and reports UNKNOWN.

    Args:
        config: Storage roots and removable volume list.
    """

    def __init__(self, config: StorageConfig) -> None:
        self._config = config

    @property
    def data_dir(self) -> Path:
        return self._config.data_dir

    @property
    def download_cache_dir(self) -> Path:
        return self._config.download_cache_dir

    @property
    def external_dir(self) -> Path:
        return self._config.external_dir

    @property
    def private_cache_dir(self) -> Path:
        return self._config.private_cache_dir

    @property
    def private_files_dir(self) -> Path:
        return self._config.private_files_dir

    def is_external_emulated(self) -> bool:
        return self._config.external_emulated

    def media_state(self, path: Path | str) -> MediaState:
        """Classify the media holding path.

        Only the path strings are inspected, so this works for files that
        no longer exist. Relative paths and volume roots are taken relative
        to the working directory.
        """
        candidate = Path(os.path.abspath(path))
        for configured in self._config.removable_volumes:
            volume = Path(os.path.abspath(configured))
            if candidate.is_relative_to(volume):
                if self._is_mounted(volume):
                    return MediaState.MOUNTED
                return MediaState.UNMOUNTED
        return MediaState.UNKNOWN

    @staticmethod
    def _is_mounted(volume: Path) -> bool:
        return os.path.ismount(volume)
