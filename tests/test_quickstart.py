"""Test that the quickstart API works for file-mutex."""
from __future__ import annotations

from pathlib import Path


def test_quickstart_import() -> None:
    from file_mutex import FileMutex, locked

    assert FileMutex is not None
    assert locked is not None


def test_quickstart_lock_unlock(tmp_path: Path) -> None:
    from file_mutex import FileMutex

    target = tmp_path / "data.txt"
    target.touch()
    mutex = FileMutex(target)
    mutex.lock()
    assert mutex.is_locked
    mutex.unlock()
    assert not mutex.is_locked


def test_quickstart_with_block(tmp_path: Path) -> None:
    from file_mutex import locked

    target = tmp_path / "data.txt"
    target.touch()
    with locked(target, max_wait_time=1) as mutex:
        target.write_text("protected write", encoding="utf-8")
        assert mutex.is_locked
    assert target.read_text(encoding="utf-8") == "protected write"


def test_quickstart_version() -> None:
    import file_mutex

    assert isinstance(file_mutex.__version__, str)
