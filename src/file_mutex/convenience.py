"""Convenience API for file-mutex — one-line scoped locking.

Example
-------
::

    from file_mutex import locked
    with locked("ledger.csv", max_wait_time=5):
        append_entry("ledger.csv")

"""
from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from file_mutex.mutex import FileMutex


@contextmanager
def locked(target_path: str | os.PathLike[str], **overrides: Any) -> Generator[FileMutex, None, None]:
    """Hold a ``FileMutex`` on ``target_path`` for the duration of the block.

    Parameters
    ----------
    target_path:
        Existing resource to protect.
    **overrides:
        ``MutexConfig`` fields, e.g. ``max_wait_time=5``.

    Yields
    ------
    FileMutex
        The held mutex.

    Raises
    ------
    LockTimeoutError, MaxRetriesExceededError
        If the lock cannot be acquired.
    """
    mutex = FileMutex(target_path, **overrides)
    with mutex:
        yield mutex
