#!/usr/bin/env python3
"""Example: Concurrent writers — file-mutex

Starts several OS processes that append their id to one shared file, once
with the mutex and once without, and compares the results.

Usage:
    python examples/02_concurrent_writers.py

Requirements:
    pip install file-mutex
"""
from __future__ import annotations

import tempfile
from pathlib import Path

from file_mutex.demo import run_demo


def main() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        target = Path(tmp) / "mutex_demo.txt"
        for use_mutex in (True, False):
            report = run_demo(target, workers=5, writes=20, use_mutex=use_mutex)
            label = "with mutex" if use_mutex else "without mutex"
            print(f"{label}: {report.clean_lines} clean / {report.interleaved_lines} interleaved lines")
            print(target.read_text(encoding="utf-8"))


if __name__ == "__main__":
    main()
