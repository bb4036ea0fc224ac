"""Lock artifact naming, diagnostic metadata, and inspection.

The lock artifact is the ``<target>.lock`` file whose OS-level lock is the
actual mutual-exclusion signal.  Its contents are diagnostic only: the
acquisition protocol writes them but never reads them back.

Classes
-------
- ArtifactInfo    — owner id and acquisition time stored in the artifact
- ArtifactStatus  — ABSENT / HELD / ORPHANED
- ArtifactReport  — result of ``inspect_artifact``

Functions
---------
- lock_path_for     — derive the artifact path from a target path
- read_artifact     — parse the metadata of an artifact, if any
- inspect_artifact  — probe whether an artifact is currently held
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from file_mutex.primitive import LockHandle

logger = logging.getLogger(__name__)

LOCK_SUFFIX = ".lock"


def lock_path_for(target_path: str | Path) -> Path:
    """Return ``target_path`` with ``.lock`` appended to its full name.

    ``data.txt`` maps to ``data.txt.lock``; the original extension is kept.
    """
    target = Path(target_path)
    return target.with_name(target.name + LOCK_SUFFIX)


class ArtifactInfo(BaseModel):
    """Diagnostic metadata written by the lock holder.

    Parameters
    ----------
    owner_id:
        Identifier of the holding process.
    acquired_at:
        UTC time the lock was acquired.
    """

    owner_id: str
    acquired_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_text(self) -> str:
        return self.model_dump_json() + "\n"

    @classmethod
    def from_text(cls, text: str) -> "ArtifactInfo":
        """Parse artifact contents.

        Raises
        ------
        pydantic.ValidationError
            If ``text`` is not a metadata document.
        """
        return cls.model_validate_json(text.strip())


class ArtifactStatus(str, Enum):
    """Observed state of a lock artifact."""

    ABSENT = "absent"
    HELD = "held"
    ORPHANED = "orphaned"


@dataclass(frozen=True)
class ArtifactReport:
    """Snapshot returned by ``inspect_artifact``.

    ``ORPHANED`` means the file exists but nobody holds its lock, typically
    left behind by an unclean shutdown or a failed unlock.  Orphans do not
    block acquisition; the next holder reuses the file.
    """

    lock_path: Path
    status: ArtifactStatus
    info: ArtifactInfo | None = None


def read_artifact(lock_path: str | Path) -> ArtifactInfo | None:
    """Return the metadata stored in ``lock_path``.

    Returns ``None`` when the file is missing, empty, or not a metadata
    document.
    """
    path = Path(lock_path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    if not text.strip():
        return None
    try:
        return ArtifactInfo.from_text(text)
    except ValidationError:
        logger.debug("Unrecognised lock artifact content in %s", path)
        return None


def inspect_artifact(lock_path: str | Path) -> ArtifactReport:
    """Report whether ``lock_path`` is absent, held, or orphaned.

    Probes with a non-blocking lock attempt that is released immediately.
    The artifact is never created, rewritten, or deleted by this call.

    Raises
    ------
    OSError
        If the artifact exists but cannot be opened.
    """
    path = Path(lock_path)
    if not path.exists():
        return ArtifactReport(lock_path=path, status=ArtifactStatus.ABSENT)

    info = read_artifact(path)
    try:
        handle = LockHandle(path, create=False)
    except FileNotFoundError:
        return ArtifactReport(lock_path=path, status=ArtifactStatus.ABSENT)
    try:
        acquired = handle.try_acquire()
    finally:
        handle.force_close()
    status = ArtifactStatus.ORPHANED if acquired else ArtifactStatus.HELD
    return ArtifactReport(lock_path=path, status=status, info=info)
