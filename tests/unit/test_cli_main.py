"""Unit tests for file_mutex.cli.main.

Uses Click's test runner (CliRunner).
"""
from __future__ import annotations

import sys
from pathlib import Path

import pytest
from click.testing import CliRunner

from file_mutex import FileMutex
from file_mutex.artifact import ArtifactInfo
from file_mutex.cli.main import EXIT_TIMEOUT, cli

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def target(tmp_path: Path) -> Path:
    path = tmp_path / "data.txt"
    path.write_text("", encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


class TestVersion:
    def test_version_command(self, runner: CliRunner) -> None:
        from file_mutex import __version__

        result = runner.invoke(cli, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.output


# ---------------------------------------------------------------------------
# status
# ---------------------------------------------------------------------------


class TestStatus:
    def test_absent(self, runner: CliRunner, target: Path) -> None:
        result = runner.invoke(cli, ["status", str(target)])
        assert result.exit_code == 0
        assert "absent" in result.output

    def test_held(self, runner: CliRunner, target: Path) -> None:
        mutex = FileMutex(target)
        mutex.lock()
        try:
            result = runner.invoke(cli, ["status", str(target)])
        finally:
            mutex.unlock()
        assert result.exit_code == 0
        assert "held" in result.output

    def test_orphaned(self, runner: CliRunner, target: Path) -> None:
        Path(f"{target}.lock").write_text(
            ArtifactInfo(owner_id="gone:1").to_text(), encoding="utf-8"
        )
        result = runner.invoke(cli, ["status", str(target)])
        assert result.exit_code == 0
        assert "orphaned" in result.output
        assert "gone:1" in result.output


# ---------------------------------------------------------------------------
# run
# ---------------------------------------------------------------------------


class TestRun:
    def test_propagates_return_code(self, runner: CliRunner, target: Path) -> None:
        result = runner.invoke(
            cli, ["run", str(target), "--", sys.executable, "-c", "import sys; sys.exit(7)"]
        )
        assert result.exit_code == 7
        assert not Path(f"{target}.lock").exists()

    def test_command_runs_under_lock(self, runner: CliRunner, target: Path, tmp_path: Path) -> None:
        marker = tmp_path / "marker.txt"
        script = (
            "import pathlib, sys; "
            f"p = pathlib.Path({str(target)!r} + '.lock'); "
            f"pathlib.Path({str(marker)!r}).write_text(str(p.exists()))"
        )
        result = runner.invoke(cli, ["run", str(target), "--", sys.executable, "-c", script])
        assert result.exit_code == 0
        assert marker.read_text() == "True"

    def test_timeout_exit_code(self, runner: CliRunner, target: Path) -> None:
        holder = FileMutex(target)
        holder.lock()
        try:
            result = runner.invoke(
                cli,
                [
                    "run",
                    str(target),
                    "--max-wait-time",
                    "0.1",
                    "--pause-interval",
                    "0.02",
                    "--",
                    sys.executable,
                    "-c",
                    "pass",
                ],
            )
        finally:
            holder.unlock()
        assert result.exit_code == EXIT_TIMEOUT
        assert "Timed out" in result.output

    def test_missing_target(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(
            cli, ["run", str(tmp_path / "missing.txt"), "--", sys.executable, "-c", "pass"]
        )
        assert result.exit_code == 1
        assert "does not exist" in result.output

    def test_invalid_configuration(self, runner: CliRunner, target: Path) -> None:
        result = runner.invoke(
            cli,
            ["run", str(target), "--pause-interval", "0", "--", sys.executable, "-c", "pass"],
        )
        assert result.exit_code == 1
        assert "Invalid mutex configuration" in result.output

    def test_unknown_command(self, runner: CliRunner, target: Path) -> None:
        result = runner.invoke(cli, ["run", str(target), "--", "definitely-not-a-real-binary-xyz"])
        assert result.exit_code == 1
        assert "Could not run command" in result.output
        assert not Path(f"{target}.lock").exists()

    def test_requires_command(self, runner: CliRunner, target: Path) -> None:
        result = runner.invoke(cli, ["run", str(target)])
        assert result.exit_code != 0


# ---------------------------------------------------------------------------
# demo
# ---------------------------------------------------------------------------


class TestDemo:
    def test_demo_with_mutex(self, runner: CliRunner, tmp_path: Path) -> None:
        target = tmp_path / "demo.txt"
        result = runner.invoke(
            cli, ["demo", "--workers", "2", "--writes", "3", "--target", str(target)]
        )
        assert result.exit_code == 0, result.output
        assert "single worker" in result.output
        assert len(target.read_text(encoding="utf-8").splitlines()) == 2

    def test_rejects_zero_workers(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["demo", "--workers", "0"])
        assert result.exit_code != 0


class TestLogLevel:
    def test_invalid_log_level(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--log-level", "loud", "version"])
        assert result.exit_code != 0
