"""spacewarden - free-space guarantees and orphan reconciliation for download storage."""

__version__ = "0.1.0"
