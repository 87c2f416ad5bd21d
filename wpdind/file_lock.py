"""Advisory file locking for the workspace document.

Every mutating command holds this lock around its read-modify-write of the
workspace document, so two invocations racing against the same workspace
are serialized instead of losing updates.

Public API:
    acquire_file_lock: Context manager for acquiring an exclusive lock
    LockTimeoutError: Raised when the lock cannot be acquired within timeout

Example:
    >>> from pathlib import Path
    >>> lock_path = Path("/wordpress-instances/.workspace-config.json.lock")
    >>> with acquire_file_lock(lock_path, timeout=10.0, operation="create"):
    ...     ...  # load, mutate, save

Backoff: 0.1s → 0.2s → 0.4s → 0.8s → 1.6s → 2.0s (capped)
"""

import fcntl
import time
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import TextIO

from wpdind.exceptions import WpDindError

__all__ = ["LockTimeoutError", "acquire_file_lock"]


class LockTimeoutError(WpDindError):
    """Raised when file lock cannot be acquired within timeout period."""


@contextmanager
def acquire_file_lock(
    lock_path: Path,
    timeout: float = 10.0,
    operation: str = "workspace update",
) -> Generator[None, None, None]:
    """Acquire an exclusive advisory lock on `lock_path`.

    The lock file is created if missing and left in place afterwards; only
    the flock on it matters.

    Args:
        lock_path: Path of the lock file
        timeout: Maximum seconds to wait for the lock
        operation: Description of operation (used in error messages)

    Raises:
        LockTimeoutError: If lock cannot be acquired within timeout
    """
    lock_path.parent.mkdir(parents=True, exist_ok=True)

    with open(lock_path, "a") as file_handle:
        _acquire_lock_with_backoff(file_handle, lock_path, timeout, operation)
        try:
            yield
        finally:
            fcntl.flock(file_handle.fileno(), fcntl.LOCK_UN)


def _acquire_lock_with_backoff(
    file_handle: TextIO,
    lock_path: Path,
    timeout: float,
    operation: str,
) -> None:
    """Try a non-blocking flock until it succeeds or `timeout` elapses."""
    start_time = time.monotonic()
    delay = 0.1

    while True:
        try:
            fcntl.flock(file_handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
            return
        except BlockingIOError:
            elapsed = time.monotonic() - start_time
            if elapsed >= timeout:
                raise LockTimeoutError(
                    f"Failed to acquire lock for {operation} after {timeout} seconds",
                    context=f"Lock file: {lock_path}. Another wp-dind command may be running.",
                )
            time.sleep(min(delay, timeout - elapsed))
            delay = min(delay * 2, 2.0)
