"""Concurrent-writer demonstration.

Spawns several OS processes that each append one line of their own worker
id to a shared file.  With the mutex every line is written whole; without it
the writes from different workers interleave.

Functions
---------
- append_ids  — worker body, run in a child process
- run_demo    — spawn workers, wait, and analyse the result

Classes
-------
- DemoReport  — outcome of ``run_demo``
"""
from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, field
from multiprocessing import get_context
from pathlib import Path

from file_mutex.mutex import FileMutex

logger = logging.getLogger(__name__)

_JOIN_TIMEOUT_SECONDS: float = 90.0


def _write_line(target: Path, worker_id: int, writes: int, jitter: float) -> None:
    with open(target, "a", encoding="utf-8") as fh:
        for _ in range(writes):
            fh.write(f"{worker_id} ")
            fh.flush()
            if jitter > 0:
                time.sleep(random.random() * jitter)
        fh.write("\n")
        fh.flush()


def append_ids(
    target: str,
    worker_id: int,
    writes: int,
    use_mutex: bool = True,
    jitter: float = 0.01,
    pause_interval: float = 0.01,
) -> None:
    """Append ``worker_id`` to ``target`` ``writes`` times, then a newline.

    Parameters
    ----------
    target:
        Shared file to append to.  Must exist.
    worker_id:
        Value written by this worker.
    writes:
        Number of ids to write on the line.
    use_mutex:
        Hold a ``FileMutex`` on ``target`` while writing the line.
    jitter:
        Upper bound in seconds of the random delay between writes.
    pause_interval:
        Retry interval of the mutex.
    """
    path = Path(target)
    if not use_mutex:
        _write_line(path, worker_id, writes, jitter)
        return
    with FileMutex(path, pause_interval=pause_interval):
        _write_line(path, worker_id, writes, jitter)


@dataclass
class DemoReport:
    """Result of a demonstration run.

    A line is *clean* when it holds exactly ``writes`` copies of a single
    worker id.
    """

    workers: int
    writes: int
    use_mutex: bool
    lines: list[str] = field(default_factory=list)
    exit_codes: list[int | None] = field(default_factory=list)

    def _is_clean(self, line: str) -> bool:
        tokens = line.split()
        return len(tokens) == self.writes and len(set(tokens)) == 1

    @property
    def clean_lines(self) -> int:
        return sum(1 for line in self.lines if self._is_clean(line))

    @property
    def interleaved_lines(self) -> int:
        return len(self.lines) - self.clean_lines

    @property
    def all_exited_cleanly(self) -> bool:
        return all(code == 0 for code in self.exit_codes)

    @property
    def ok(self) -> bool:
        """True when every worker succeeded and wrote one clean line."""
        return (
            self.all_exited_cleanly
            and self.interleaved_lines == 0
            and self.clean_lines == self.workers
        )


def run_demo(
    target: str | Path,
    workers: int = 5,
    writes: int = 100,
    use_mutex: bool = True,
    jitter: float = 0.01,
) -> DemoReport:
    """Run ``workers`` writer processes against ``target`` and analyse it.

    ``target`` is created or truncated first.  Workers still running after
    90 seconds are terminated and reported with a ``None`` exit code.
    """
    if workers < 1 or writes < 1:
        raise ValueError("workers and writes must both be at least 1")

    path = Path(target)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("", encoding="utf-8")

    ctx = get_context("spawn")
    processes = [
        ctx.Process(
            target=append_ids,
            args=(str(path), worker_id, writes, use_mutex, jitter),
            name=f"file-mutex-writer-{worker_id}",
        )
        for worker_id in range(1, workers + 1)
    ]
    for process in processes:
        process.start()
        logger.debug("Started writer %s (pid %s)", process.name, process.pid)

    deadline = time.monotonic() + _JOIN_TIMEOUT_SECONDS
    exit_codes: list[int | None] = []
    for process in processes:
        process.join(max(0.0, deadline - time.monotonic()))
        if process.is_alive():
            logger.warning("Writer %s still running, terminating", process.name)
            process.terminate()
            process.join()
            exit_codes.append(None)
        else:
            exit_codes.append(process.exitcode)

    lines = [line for line in path.read_text(encoding="utf-8").splitlines() if line.strip()]
    return DemoReport(
        workers=workers,
        writes=writes,
        use_mutex=use_mutex,
        lines=lines,
        exit_codes=exit_codes,
    )
