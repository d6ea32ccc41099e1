"""External space reclamation.

Space on the data partition is mostly held by other applications'
caches, which this process cannot delete itself. An ExternalReclaimer
asks a privileged helper to free space and hands back a single-fire
CompletionSignal that fires when the helper reports back.
"""

import logging
import subprocess
import threading
from typing import Protocol

from spacewarden.utils.shell import command_exists, run_command

logger = logging.getLogger(__name__)

BYTES_PLACEHOLDER = "{bytes}"


class CompletionSignal:
    """Single-fire completion notification.

    complete() may be called any number of times from any thread; only
    the first call has an effect.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def complete(self) -> None:
        """Mark the operation as finished and wake all waiters."""
        self._event.set()

    @property
    def is_complete(self) -> bool:
        """Whether the operation has finished."""
        return self._event.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until complete or until timeout elapses.

        Returns:
            True if the signal fired, False on timeout.
        """
        return self._event.wait(timeout)


class ExternalReclaimer(Protocol):
    """Capability that frees space outside the download cache."""

    def request(self, target_bytes: int) -> CompletionSignal:
        """Start reclaiming up to target_bytes and return its completion signal."""
        ...


class CommandReclaimer:
    """Reclaims space by running a configured helper command.

    The command runs in a daemon thread. Occurrences of ``{bytes}`` in its
    arguments are replaced by the requested byte count. The signal fires
    when the process exits, whatever its exit status; failures are
    logged. Without a command the signal fires immediately.

    Args:
        command: Argument vector of the helper, or None.
        timeout: Upper bound on the helper's run time in seconds.
    """

    def __init__(self, command: list[str] | None = None, timeout: float | None = None) -> None:
        self._command = command
        self._timeout = timeout

    def is_available(self) -> bool:
        """Check whether the helper command can be executed."""
        if not self._command:
            return False
        return command_exists(self._command[0])

    def request(self, target_bytes: int) -> CompletionSignal:
        signal = CompletionSignal()
        if not self._command:
            logger.debug("No reclaim command configured; nothing to reclaim")
            signal.complete()
            return signal

        args = [arg.replace(BYTES_PLACEHOLDER, str(target_bytes)) for arg in self._command]
        thread = threading.Thread(
            target=self._run,
            args=(args, signal),
            name="spacewarden-reclaim",
            daemon=True,
        )
        thread.start()
        return signal

    def _run(self, args: list[str], signal: CompletionSignal) -> None:
        try:
            result = run_command(args, timeout=self._timeout)
            if result.success:
                logger.info("Reclaim command finished: %s", " ".join(args))
            else:
                logger.warning(
                    "Reclaim command exited with %d: %s",
                    result.returncode,
                    result.stderr.strip(),
                )
        except (OSError, subprocess.SubprocessError) as e:
            logger.warning("Reclaim command failed: %s", e)
        finally:
            signal.complete()
