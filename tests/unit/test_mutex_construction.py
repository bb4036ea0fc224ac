"""Construction and validation tests for FileMutex."""
from __future__ import annotations

import os
from pathlib import Path

import pytest

from file_mutex import (
    ConfigurationError,
    FileMutex,
    InvalidInputError,
    MutexConfig,
    MutexState,
    ResourceNotFoundError,
)


@pytest.fixture()
def target(tmp_path: Path) -> Path:
    path = tmp_path / "test_concurrent_file.txt"
    path.write_text("", encoding="utf-8")
    return path


class TestInvalidInput:
    def test_none_path(self) -> None:
        with pytest.raises(InvalidInputError, match="must be specified"):
            FileMutex(None)  # type: ignore[arg-type]

    def test_empty_path(self) -> None:
        with pytest.raises(InvalidInputError, match="must be specified"):
            FileMutex("")

    def test_numeric_path(self) -> None:
        with pytest.raises(InvalidInputError, match="int"):
            FileMutex(123)  # type: ignore[arg-type]

    def test_bytes_path(self, target: Path) -> None:
        with pytest.raises(InvalidInputError):
            FileMutex(os.fsencode(target))  # type: ignore[arg-type]

    def test_invalid_input_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            FileMutex("")


class TestResourceNotFound:
    def test_missing_file(self, tmp_path: Path) -> None:
        missing = tmp_path / "nonexistent.txt"
        with pytest.raises(ResourceNotFoundError) as exc_info:
            FileMutex(missing)
        assert exc_info.value.path == missing
        assert not (tmp_path / "nonexistent.txt.lock").exists()

    def test_is_file_not_found_error(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            FileMutex(str(tmp_path / "nonexistent.txt"))


class TestInvalidConfiguration:
    @pytest.mark.parametrize(
        "overrides",
        [
            {"unexpected_retry_max": -1},
            {"unexpected_retry_max": 1.5},
            {"pause_interval": 0},
            {"pause_interval": -0.1},
            {"max_wait_time": -1},
            {"pause_interval": "0.1"},
        ],
    )
    def test_rejected_before_artifact_touched(
        self, target: Path, overrides: dict[str, object]
    ) -> None:
        with pytest.raises(ConfigurationError):
            FileMutex(target, **overrides)
        assert not Path(f"{target}.lock").exists()


class TestSuccessfulConstruction:
    def test_initial_state(self, target: Path) -> None:
        mutex = FileMutex(target)
        assert mutex.state is MutexState.UNLOCKED
        assert mutex.is_locked is False
        assert mutex.unexpected_retry_count == 0
        assert mutex.contention_count == 0

    def test_no_artifact_created(self, target: Path) -> None:
        FileMutex(target)
        assert not Path(f"{target}.lock").exists()

    def test_lock_path_derived(self, target: Path) -> None:
        mutex = FileMutex(target)
        assert mutex.target_path == target
        assert mutex.lock_path == target.parent / "test_concurrent_file.txt.lock"

    def test_accepts_str(self, target: Path) -> None:
        assert FileMutex(str(target)).target_path == target

    def test_owner_id_contains_pid(self, target: Path) -> None:
        assert FileMutex(target).owner_id.endswith(f":{os.getpid()}")

    def test_default_config(self, target: Path) -> None:
        assert FileMutex(target).config == MutexConfig()

    def test_overrides(self, target: Path) -> None:
        mutex = FileMutex(target, unexpected_retry_max=50, pause_interval=0.05)
        assert mutex.config.unexpected_retry_max == 50
        assert mutex.config.pause_interval == pytest.approx(0.05)

    def test_config_object(self, target: Path) -> None:
        config = MutexConfig(max_wait_time=5)
        assert FileMutex(target, config=config).config is config

    def test_directory_target(self, tmp_path: Path) -> None:
        mutex = FileMutex(tmp_path)
        assert mutex.lock_path == tmp_path.with_name(tmp_path.name + ".lock")

    def test_repr(self, target: Path) -> None:
        text = repr(FileMutex(target))
        assert "FileMutex" in text
        assert "unlocked" in text
