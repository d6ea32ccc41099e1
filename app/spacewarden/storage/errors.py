"""Exceptions raised by the space guarantee and record store."""


class SpaceWardenError(Exception):
    """Base exception for storage policy errors."""


class InsufficientSpaceError(SpaceWardenError):
    """Raised when a partition cannot provide the requested space.

    Attributes:
        required_bytes: Bytes the caller asked for (excluding the reserved margin).
        available_bytes: Usable bytes measured after reclamation.
    """

    def __init__(self, required_bytes: int, available_bytes: int) -> None:
        self.required_bytes = required_bytes
        self.available_bytes = available_bytes
        super().__init__(
            f"Not enough free space; {required_bytes} requested, {available_bytes} available"
        )


class StorageIOError(SpaceWardenError):
    """Raised when a space or identity query fails, or reclamation times out."""


class RecordStoreError(SpaceWardenError):
    """Raised when the record store cannot be read or written."""
