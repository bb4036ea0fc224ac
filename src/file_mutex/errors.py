"""Exception and warning types for file-mutex.

Every exception raised by the package derives from ``FileMutexError`` and,
where one fits, from the matching builtin so callers can catch either.
Non-fatal misuse is reported through the ``warnings`` module using the
``FileMutexWarning`` hierarchy.

Classes
-------
- FileMutexError            — base exception
- InvalidInputError         — bad target path argument
- ResourceNotFoundError     — target path does not exist
- ConfigurationError        — configuration override out of domain
- LockTimeoutError          — deadline elapsed before acquisition
- MaxRetriesExceededError   — too many unexpected errors in one ``lock()``
- UnlockFailedError         — releasing the lock failed
- FileMutexWarning          — base warning
- AlreadyLockedWarning, NotLockedWarning, LockFailedWarning
"""
from __future__ import annotations

from pathlib import Path


class FileMutexError(Exception):
    """Base exception for the package."""


class InvalidInputError(FileMutexError, ValueError):
    """Raised when the target path is missing, empty, or not a text path."""


class ResourceNotFoundError(FileMutexError, FileNotFoundError):
    """Raised when the resource to protect does not exist."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        super().__init__(f"The specified resource does not exist: {self.path}")


class ConfigurationError(FileMutexError, ValueError):
    """Raised when a configuration value is outside its allowed domain."""


class LockTimeoutError(FileMutexError, TimeoutError):
    """Raised when ``lock()`` gives up after ``max_wait_time`` seconds."""

    def __init__(self, lock_path: str | Path, max_wait_time: float, elapsed: float) -> None:
        self.lock_path = Path(lock_path)
        self.max_wait_time = max_wait_time
        self.elapsed = elapsed
        super().__init__(
            f"Could not acquire lock {self.lock_path} within {max_wait_time}s "
            f"(waited {elapsed:.3f}s). Another process may be holding the lock."
        )


class MaxRetriesExceededError(FileMutexError):
    """Raised when unexpected errors persist beyond ``unexpected_retry_max``.

    The last underlying error is kept on ``last_error`` and is also the
    exception's ``__cause__``.
    """

    def __init__(self, retry_max: int, last_error: BaseException) -> None:
        self.retry_max = retry_max
        self.last_error = last_error
        super().__init__(
            f"Maximum number of retries ({retry_max}) exceeded. Last error: {last_error}"
        )


class UnlockFailedError(FileMutexError):
    """Raised when releasing a held lock fails.

    The mutex is left unlocked; the lock artifact may remain on disk.
    """

    def __init__(self, lock_path: str | Path, cause: BaseException) -> None:
        self.lock_path = Path(lock_path)
        self.cause = cause
        super().__init__(f"Failed to release lock {self.lock_path}: {cause}")


# ---------------------------------------------------------------------------
# Warnings
# ---------------------------------------------------------------------------


class FileMutexWarning(UserWarning):
    """Base class for non-fatal file-mutex conditions."""


class AlreadyLockedWarning(FileMutexWarning):
    """``lock()`` was called on a mutex this instance already holds."""


class NotLockedWarning(FileMutexWarning):
    """``unlock()`` was called on a mutex this instance does not hold."""


class LockFailedWarning(FileMutexWarning):
    """An unexpected error occurred during acquisition; the attempt is retried."""
