"""Host exclusive-lock primitive.

Thin wrapper over the operating system's advisory file locks:

- Unix/macOS/Linux: ``fcntl.flock()`` (whole-file lock)
- Windows: ``msvcrt.locking()`` (lock on the first byte)

Both bind the lock to an open file description, so two handles on the same
path contend even inside one process.

Public API:
    LockHandle: an open lock artifact plus its lock state
    is_contention: classify an ``OSError`` from a non-blocking attempt
"""
from __future__ import annotations

import errno
import logging
import os
import platform
from pathlib import Path
from typing import IO, TYPE_CHECKING

_system = platform.system()
if TYPE_CHECKING or _system == "Windows":
    import msvcrt  # type: ignore[import-not-found]
if TYPE_CHECKING or _system != "Windows":
    import fcntl  # type: ignore[import-not-found]

logger = logging.getLogger(__name__)

__all__ = ["LockHandle", "is_contention"]

# errno values a non-blocking lock attempt reports when another holder owns it.
_CONTENTION_ERRNOS: frozenset[int] = frozenset(
    code
    for code in (
        errno.EAGAIN,
        errno.EWOULDBLOCK,
        errno.EACCES,
        getattr(errno, "EDEADLK", None),
        getattr(errno, "EDEADLOCK", None),
    )
    if code is not None
)


def is_contention(exc: OSError) -> bool:
    """Return True if ``exc`` means "held elsewhere" rather than an I/O failure."""
    if isinstance(exc, BlockingIOError):
        return True
    if _system == "Windows" and isinstance(exc, PermissionError):
        return True
    return exc.errno in _CONTENTION_ERRNOS


def _lock_nonblocking(fh: IO[bytes]) -> None:
    if _system == "Windows":
        fh.seek(0)
        msvcrt.locking(fh.fileno(), msvcrt.LK_NBLCK, 1)  # type: ignore[attr-defined]
    else:
        fcntl.flock(fh.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)


def _unlock(fh: IO[bytes]) -> None:
    if _system == "Windows":
        fh.seek(0)
        msvcrt.locking(fh.fileno(), msvcrt.LK_UNLCK, 1)  # type: ignore[attr-defined]
    else:
        fcntl.flock(fh.fileno(), fcntl.LOCK_UN)


class LockHandle:
    """An open lock artifact and the exclusive lock taken on it.

    Parameters
    ----------
    path:
        Path of the lock artifact.
    create:
        Create the artifact if it does not exist.  Default: True.

    Raises
    ------
    OSError
        If the artifact cannot be opened or created.
    """

    def __init__(self, path: str | Path, create: bool = True) -> None:
        self.path = Path(path)
        flags = os.O_RDWR | (os.O_CREAT if create else 0)
        fd = os.open(self.path, flags, 0o644)
        try:
            self._fh: IO[bytes] | None = os.fdopen(fd, "r+b")
        except BaseException:
            os.close(fd)
            raise
        self._locked = False

    @property
    def closed(self) -> bool:
        return self._fh is None

    @property
    def locked(self) -> bool:
        return self._locked

    def _file(self) -> IO[bytes]:
        if self._fh is None:
            raise ValueError(f"Lock handle for {self.path} is closed")
        return self._fh

    def _is_current(self) -> bool:
        """True if ``path`` still names the file this handle has open."""
        if _system == "Windows":
            # Open files cannot be deleted on Windows.
            return True
        try:
            on_disk = os.stat(self.path)
        except FileNotFoundError:
            return False
        opened = os.fstat(self._file().fileno())
        return (on_disk.st_dev, on_disk.st_ino) == (opened.st_dev, opened.st_ino)

    def try_acquire(self) -> bool:
        """Make one non-blocking exclusive lock attempt.

        A lock obtained on a file that has since been unlinked or replaced
        counts as contention: the previous holder removed it while we were
        waiting, and a fresh artifact is needed.

        Returns
        -------
        bool
            True if the lock was granted, False if another holder owns it.

        Raises
        ------
        OSError
            For any failure other than ordinary contention.
        """
        fh = self._file()
        try:
            _lock_nonblocking(fh)
        except OSError as exc:
            if is_contention(exc):
                return False
            raise
        if not self._is_current():
            _unlock(fh)
            return False
        self._locked = True
        return True

    def write_text(self, text: str) -> None:
        """Replace the artifact contents with ``text``."""
        fh = self._file()
        data = text.encode("utf-8")
        fh.seek(0)
        fh.write(data)
        fh.truncate(len(data))
        fh.flush()

    def release(self) -> None:
        """Release the OS lock, leaving the handle open."""
        if not self._locked:
            return
        _unlock(self._file())
        self._locked = False

    def close(self) -> None:
        """Close the underlying file.  Closing also drops any OS lock."""
        if self._fh is None:
            return
        fh, self._fh = self._fh, None
        self._locked = False
        fh.close()

    def discard(self) -> None:
        """Release the lock, close the handle, and delete the artifact.

        On POSIX the artifact is unlinked while the lock is still held, so a
        waiter that wins the old inode sees it is stale and retries.  Windows
        refuses to delete open files, so there the handle is closed first and
        an artifact another waiter already opened is left in place.

        Raises
        ------
        OSError
            If releasing, closing or deleting fails.
        """
        if _system == "Windows":
            self.release()
            self.close()
            try:
                self.path.unlink(missing_ok=True)
            except PermissionError:
                logger.debug("Lock artifact %s is open by a waiter; left in place", self.path)
        else:
            self.path.unlink(missing_ok=True)
            self.release()
            self.close()

    def force_close(self) -> None:
        """Release and close, logging instead of raising individual failures."""
        try:
            self.release()
        except (OSError, ValueError) as exc:
            logger.debug("Error releasing lock on %s during cleanup: %s", self.path, exc)
        try:
            self.close()
        except OSError as exc:
            logger.debug("Error closing lock handle %s during cleanup: %s", self.path, exc)
