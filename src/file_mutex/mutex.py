"""Cross-process mutual exclusion backed by an OS file lock.

``FileMutex`` protects one existing resource by contending for an exclusive
advisory lock on a companion ``<resource>.lock`` artifact.  Holding the OS
lock is the only correctness-bearing signal; the artifact's existence and
contents are diagnostic.

Acquisition is a fixed-interval polling loop.  Each iteration makes one
non-blocking attempt and then either:

- succeeds, writes owner metadata into the artifact, and returns;
- finds the lock held elsewhere (contention), closes its handle and sleeps;
- hits an unexpected ``OSError``, cleans up, counts it against
  ``unexpected_retry_max``, warns, and sleeps.

Contention is bounded only by ``max_wait_time`` and unexpected errors only by
``unexpected_retry_max``, so a persistent I/O failure is never reported as a
timeout.  Waiters are not served in FIFO order: which one wins after a
release depends on the OS scheduler.

Classes
-------
- MutexState  — UNLOCKED / LOCKED
- FileMutex   — the lock handle bound to one target path
"""
from __future__ import annotations

import logging
import os
import socket
import time
import warnings
from enum import Enum
from pathlib import Path
from types import TracebackType
from typing import Any

from file_mutex.artifact import ArtifactInfo, lock_path_for
from file_mutex.config import MutexConfig, build_config
from file_mutex.deadline import Deadline
from file_mutex.errors import (
    AlreadyLockedWarning,
    InvalidInputError,
    LockFailedWarning,
    LockTimeoutError,
    MaxRetriesExceededError,
    NotLockedWarning,
    ResourceNotFoundError,
    UnlockFailedError,
)
from file_mutex.primitive import LockHandle

logger = logging.getLogger(__name__)


def default_owner_id() -> str:
    """Return ``<hostname>:<pid>`` for the current process."""
    return f"{socket.gethostname()}:{os.getpid()}"


def _validate_target(target_path: Any) -> Path:
    if target_path is None:
        raise InvalidInputError("File path must be specified")
    if isinstance(target_path, os.PathLike):
        target_path = os.fspath(target_path)
    if not isinstance(target_path, str):
        raise InvalidInputError(
            f"File path must be a str or path-like text, got {type(target_path).__name__}"
        )
    if not target_path:
        raise InvalidInputError("File path must be specified")
    path = Path(target_path)
    if not path.exists():
        raise ResourceNotFoundError(path)
    return path


class MutexState(str, Enum):
    """Lock state of a ``FileMutex`` instance."""

    UNLOCKED = "unlocked"
    LOCKED = "locked"


class FileMutex:
    """File-based mutex guarding ``target_path`` across processes.

    Parameters
    ----------
    target_path:
        Path to an existing file (or directory) to protect.  The resource
        itself is never opened or modified.
    config:
        A ready-made ``MutexConfig``.  Mutually exclusive with ``overrides``.
    **overrides:
        ``unexpected_retry_max``, ``pause_interval`` and ``max_wait_time``.

    Raises
    ------
    InvalidInputError
        If ``target_path`` is ``None``, empty, or not a text path.
    ResourceNotFoundError
        If ``target_path`` does not exist.
    ConfigurationError
        If a configuration value is out of its domain.

    Example
    -------
    ::

        mutex = FileMutex("data.csv", max_wait_time=5)
        with mutex:
            append_rows("data.csv")

    A single instance must not be shared between threads.
    """

    def __init__(
        self,
        target_path: str | os.PathLike[str],
        config: MutexConfig | None = None,
        **overrides: Any,
    ) -> None:
        self._target_path: Path = _validate_target(target_path)
        self._config: MutexConfig = build_config(config, **overrides)
        self._lock_path: Path = lock_path_for(self._target_path)
        self._owner_id: str = default_owner_id()
        self._state: MutexState = MutexState.UNLOCKED
        self._handle: LockHandle | None = None
        self._unexpected_retry_count: int = 0
        self._contention_count: int = 0

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def target_path(self) -> Path:
        return self._target_path

    @property
    def lock_path(self) -> Path:
        """Path of the ``.lock`` artifact next to the target."""
        return self._lock_path

    @property
    def owner_id(self) -> str:
        return self._owner_id

    @property
    def config(self) -> MutexConfig:
        return self._config

    @property
    def state(self) -> MutexState:
        return self._state

    @property
    def is_locked(self) -> bool:
        return self._state is MutexState.LOCKED

    @property
    def unexpected_retry_count(self) -> int:
        """Unexpected errors seen by the current or most recent ``lock()``."""
        return self._unexpected_retry_count

    @property
    def contention_count(self) -> int:
        """Attempts that found the lock held elsewhere in the latest ``lock()``."""
        return self._contention_count

    # ------------------------------------------------------------------
    # Acquire
    # ------------------------------------------------------------------

    def _attempt(self) -> bool:
        """Make one non-blocking acquisition attempt.

        Returns True with the instance ``LOCKED``, or False on contention
        with no handle left open.  Unexpected ``OSError`` is re-raised after
        the partial handle has been cleaned up.
        """
        handle: LockHandle | None = None
        try:
            handle = LockHandle(self._lock_path)
            acquired = handle.try_acquire()
        except OSError:
            if handle is not None:
                handle.force_close()
            raise

        if not acquired:
            handle.close()
            return False

        self._handle = handle
        self._state = MutexState.LOCKED
        self._write_metadata(handle)
        logger.debug("Acquired lock %s as %s", self._lock_path, self._owner_id)
        return True

    def _write_metadata(self, handle: LockHandle) -> None:
        info = ArtifactInfo(owner_id=self._owner_id)
        try:
            handle.write_text(info.to_text())
        except OSError as exc:
            logger.warning("Could not write owner metadata to %s: %s", self._lock_path, exc)

    def _pause(self, deadline: Deadline) -> None:
        remaining = deadline.remaining()
        pause = self._config.pause_interval
        time.sleep(pause if remaining is None else min(pause, remaining))

    def lock(self) -> None:
        """Block until the lock is acquired.

        Raises
        ------
        LockTimeoutError
            If ``max_wait_time`` is set and elapses while another holder
            owns the lock.  The instance stays unlocked and ``lock()`` may be
            called again.
        MaxRetriesExceededError
            If more than ``unexpected_retry_max`` unexpected errors occur.

        Warns
        -----
        AlreadyLockedWarning
            If this instance already holds the lock (no-op).
        LockFailedWarning
            On each retried unexpected error.
        """
        if self.is_locked:
            warnings.warn(
                f"Mutex {self._lock_path} is already locked by this instance",
                AlreadyLockedWarning,
                stacklevel=2,
            )
            return

        self._unexpected_retry_count = 0
        self._contention_count = 0
        retry_max = self._config.unexpected_retry_max
        deadline = Deadline(self._config.max_wait_time)

        while True:
            try:
                if self._attempt():
                    return
            except OSError as exc:
                self._unexpected_retry_count += 1
                if self._unexpected_retry_count > retry_max:
                    logger.error(
                        "Giving up on lock %s after %d unexpected errors: %s",
                        self._lock_path,
                        self._unexpected_retry_count,
                        exc,
                    )
                    raise MaxRetriesExceededError(retry_max, exc) from exc
                message = (
                    f"Unexpected error while trying to acquire lock "
                    f"(retry {self._unexpected_retry_count}/{retry_max}): {exc} "
                    f"(owner {self._owner_id}). Will retry."
                )
                logger.warning("%s", message)
                warnings.warn(message, LockFailedWarning, stacklevel=2)
                # I/O failures are bounded by the retry budget, not the deadline.
                time.sleep(self._config.pause_interval)
                continue

            self._contention_count += 1
            logger.debug(
                "Lock %s is held elsewhere (attempt %d)",
                self._lock_path,
                self._contention_count,
            )
            if deadline.expired():
                elapsed = deadline.elapsed()
                logger.debug("Timed out waiting for %s after %.3fs", self._lock_path, elapsed)
                raise LockTimeoutError(self._lock_path, deadline.limit, elapsed)
            self._pause(deadline)

    def try_lock(self) -> bool:
        """Make a single non-blocking attempt.

        Returns True if this instance now holds the lock, False if another
        holder owns it.  Unexpected ``OSError`` propagates unchanged.
        """
        if self.is_locked:
            warnings.warn(
                f"Mutex {self._lock_path} is already locked by this instance",
                AlreadyLockedWarning,
                stacklevel=2,
            )
            return True
        return self._attempt()

    # ------------------------------------------------------------------
    # Release
    # ------------------------------------------------------------------

    def unlock(self) -> None:
        """Release the lock and delete the artifact.

        Raises
        ------
        UnlockFailedError
            If any release step fails.  All handles are still closed and the
            instance is left unlocked, but the artifact may remain on disk.

        Warns
        -----
        NotLockedWarning
            If this instance does not hold the lock (no-op).
        """
        if not self.is_locked:
            warnings.warn(
                f"Mutex {self._lock_path} is not currently locked by this instance",
                NotLockedWarning,
                stacklevel=2,
            )
            return

        handle, self._handle = self._handle, None
        self._state = MutexState.UNLOCKED
        try:
            if handle is not None:
                handle.discard()
        except Exception as exc:
            if handle is not None:
                handle.force_close()
            logger.error(
                "Failed to release lock %s: %s. The lock artifact may remain on disk.",
                self._lock_path,
                exc,
            )
            raise UnlockFailedError(self._lock_path, exc) from exc

        logger.debug("Released lock %s", self._lock_path)

    def _dispose(self) -> None:
        """Unlock if held, logging instead of raising."""
        if getattr(self, "_state", None) is not MutexState.LOCKED:
            return
        try:
            self.unlock()
        except UnlockFailedError as exc:
            logger.error("Error releasing %s during disposal: %s", self._lock_path, exc)

    # ------------------------------------------------------------------
    # Scoped acquisition
    # ------------------------------------------------------------------

    def __enter__(self) -> FileMutex:
        self.lock()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if exc_type is not None:
            # Do not mask the body's exception with a release failure.
            self._dispose()
        elif self.is_locked:
            self.unlock()

    def __del__(self) -> None:
        self._dispose()

    def __repr__(self) -> str:
        return (
            f"FileMutex(target_path={str(self._target_path)!r}, "
            f"state={self._state.value!r}, owner_id={self._owner_id!r})"
        )
