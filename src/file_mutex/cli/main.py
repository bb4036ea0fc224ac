"""CLI entry point for file-mutex.

Invoked as::

    file-mutex [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m file_mutex.cli.main

Commands
--------
- version  — Show version information
- status   — Inspect the lock artifact of a target
- run      — Run a command while holding the mutex on a target
- demo     — Run the concurrent-writer demonstration
"""
from __future__ import annotations

import logging
import subprocess
import sys
import tempfile
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from file_mutex.artifact import ArtifactStatus, inspect_artifact, lock_path_for
from file_mutex.config import DEFAULT_MAX_WAIT_TIME, DEFAULT_PAUSE_INTERVAL, DEFAULT_UNEXPECTED_RETRY_MAX
from file_mutex.errors import FileMutexError, LockTimeoutError

console = Console()

EXIT_TIMEOUT = 3

_STATUS_STYLES: dict[ArtifactStatus, str] = {
    ArtifactStatus.ABSENT: "green",
    ArtifactStatus.HELD: "yellow",
    ArtifactStatus.ORPHANED: "red",
}


def _configure_logging(level: str) -> None:
    handler = RichHandler(console=Console(stderr=True), show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    package_logger = logging.getLogger("file_mutex")
    package_logger.handlers[:] = [handler]
    package_logger.setLevel(level.upper())


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="file-mutex")
@click.option(
    "--log-level",
    default="warning",
    show_default=True,
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    help="Verbosity of library logging on stderr.",
)
def cli(log_level: str) -> None:
    """Cross-process file mutex"""
    _configure_logging(log_level)


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from file_mutex import __version__

    console.print(f"[bold]file-mutex[/bold] v{__version__}")


# ---------------------------------------------------------------------------
# status
# ---------------------------------------------------------------------------


@cli.command(name="status")
@click.argument("target", type=click.Path(path_type=Path))
def status_command(target: Path) -> None:
    """Show whether TARGET's lock artifact is absent, held, or orphaned."""
    lock_path = lock_path_for(target)
    try:
        report = inspect_artifact(lock_path)
    except OSError as exc:
        console.print(f"[red]Cannot inspect {lock_path}:[/red] {escape(str(exc))}")
        sys.exit(1)

    style = _STATUS_STYLES[report.status]
    table = Table(title=f"Lock status for {target}", show_lines=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Lock artifact", str(report.lock_path))
    table.add_row("Status", f"[{style}]{report.status.value}[/{style}]")
    if report.info is not None:
        table.add_row("Owner", report.info.owner_id)
        table.add_row("Acquired at", report.info.acquired_at.isoformat())
    console.print(table)

    if report.status is ArtifactStatus.ORPHANED:
        console.print(
            "[yellow]The artifact exists but nobody holds its lock. It was probably left "
            "by an unclean shutdown or a failed unlock and does not block acquisition.[/yellow]"
        )


# ---------------------------------------------------------------------------
# run
# ---------------------------------------------------------------------------


@cli.command(name="run")
@click.argument("target", type=click.Path(path_type=Path))
@click.argument("command", nargs=-1, required=True)
@click.option(
    "--max-wait-time",
    default=DEFAULT_MAX_WAIT_TIME,
    show_default=True,
    type=float,
    help="Seconds to wait for the lock (0 waits forever).",
)
@click.option(
    "--pause-interval",
    default=DEFAULT_PAUSE_INTERVAL,
    show_default=True,
    type=float,
    help="Seconds between acquisition attempts.",
)
@click.option(
    "--retry-max",
    default=DEFAULT_UNEXPECTED_RETRY_MAX,
    show_default=True,
    type=int,
    help="Unexpected errors tolerated before giving up.",
)
def run_command(
    target: Path,
    command: tuple[str, ...],
    max_wait_time: float,
    pause_interval: float,
    retry_max: int,
) -> None:
    """Run COMMAND while holding the mutex on TARGET.

    Exits with COMMAND's return code, or 3 if the lock was not acquired in
    time.  Separate COMMAND from options with ``--``.
    """
    from file_mutex.mutex import FileMutex

    try:
        mutex = FileMutex(
            target,
            max_wait_time=max_wait_time,
            pause_interval=pause_interval,
            unexpected_retry_max=retry_max,
        )
        with mutex:
            returncode = subprocess.run(list(command), check=False).returncode
    except LockTimeoutError as exc:
        console.print(f"[red]Timed out:[/red] {escape(str(exc))}")
        sys.exit(EXIT_TIMEOUT)
    except FileMutexError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(1)
    except OSError as exc:
        console.print(f"[red]Could not run command:[/red] {escape(str(exc))}")
        sys.exit(1)
    sys.exit(returncode)


# ---------------------------------------------------------------------------
# demo
# ---------------------------------------------------------------------------


@cli.command(name="demo")
@click.option("--workers", default=5, show_default=True, type=click.IntRange(min=1))
@click.option("--writes", default=20, show_default=True, type=click.IntRange(min=1))
@click.option(
    "--no-mutex",
    is_flag=True,
    default=False,
    help="Write without the mutex to show interleaving.",
)
@click.option(
    "--target",
    default=None,
    type=click.Path(path_type=Path),
    help="Shared file to write (default: a file in the temp directory).",
)
def demo_command(workers: int, writes: int, no_mutex: bool, target: Path | None) -> None:
    """Spawn writer processes appending to one shared file."""
    from file_mutex.demo import run_demo

    path = target if target is not None else Path(tempfile.gettempdir()) / "file_mutex_demo.txt"
    use_mutex = not no_mutex
    mode = "MUTEX PROTECTION" if use_mutex else "DIRECT file access (no mutex)"
    console.print(f"Starting {workers} writers, each writing {writes} ids, using {mode}.")

    report = run_demo(path, workers=workers, writes=writes, use_mutex=use_mutex)

    table = Table(title="Demo result", show_lines=False)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Target", str(path))
    table.add_row("Workers", str(report.workers))
    table.add_row("Lines written", str(len(report.lines)))
    table.add_row("Clean lines", str(report.clean_lines))
    table.add_row("Interleaved lines", str(report.interleaved_lines))
    table.add_row("Exit codes", ", ".join(str(code) for code in report.exit_codes))
    console.print(table)

    if use_mutex and not report.ok:
        console.print("[red]Writers interleaved or failed while using the mutex.[/red]")
        sys.exit(1)
    if report.ok:
        console.print("[green]Every line was written by a single worker.[/green]")
    else:
        console.print("[yellow]Lines interleaved without the mutex.[/yellow]")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


if __name__ == "__main__":
    cli()
