"""file-mutex — Cross-process mutual exclusion backed by OS file locks.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import file_mutex
>>> file_mutex.__version__
'0.1.0'
"""
from __future__ import annotations

# Core
from file_mutex.mutex import FileMutex, MutexState
from file_mutex.config import MutexConfig
from file_mutex.convenience import locked

# Artifact inspection
from file_mutex.artifact import (
    ArtifactInfo,
    ArtifactReport,
    ArtifactStatus,
    inspect_artifact,
    lock_path_for,
    read_artifact,
)

# Errors and warnings
from file_mutex.errors import (
    AlreadyLockedWarning,
    ConfigurationError,
    FileMutexError,
    FileMutexWarning,
    InvalidInputError,
    LockFailedWarning,
    LockTimeoutError,
    MaxRetriesExceededError,
    NotLockedWarning,
    ResourceNotFoundError,
    UnlockFailedError,
)

__version__: str = "0.1.0"

__all__ = [
    "__version__",
    # Core
    "FileMutex",
    "MutexConfig",
    "MutexState",
    "locked",
    # Artifact
    "ArtifactInfo",
    "ArtifactReport",
    "ArtifactStatus",
    "inspect_artifact",
    "lock_path_for",
    "read_artifact",
    # Errors
    "ConfigurationError",
    "FileMutexError",
    "InvalidInputError",
    "LockTimeoutError",
    "MaxRetriesExceededError",
    "ResourceNotFoundError",
    "UnlockFailedError",
    # Warnings
    "AlreadyLockedWarning",
    "FileMutexWarning",
    "LockFailedWarning",
    "NotLockedWarning",
]
