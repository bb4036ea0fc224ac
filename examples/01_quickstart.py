#!/usr/bin/env python3
"""Example: Quickstart — file-mutex

Minimal working example: protect a file, append to it under the lock,
and inspect the lock artifact while it is held.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install file-mutex
"""
from __future__ import annotations

import tempfile
from pathlib import Path

import file_mutex
from file_mutex import FileMutex, inspect_artifact, locked


def main() -> None:
    print(f"file-mutex version: {file_mutex.__version__}")

    with tempfile.TemporaryDirectory() as tmp:
        target = Path(tmp) / "ledger.txt"
        target.touch()

        # Step 1: Explicit lock / unlock
        mutex = FileMutex(target, max_wait_time=5)
        mutex.lock()
        report = inspect_artifact(mutex.lock_path)
        print(f"Lock artifact {report.lock_path.name}: {report.status.value}")
        if report.info is not None:
            print(f"  owner:       {report.info.owner_id}")
            print(f"  acquired at: {report.info.acquired_at.isoformat()}")
        with open(target, "a", encoding="utf-8") as fh:
            fh.write("entry 1\n")
        mutex.unlock()

        # Step 2: Scoped locking
        with locked(target, max_wait_time=5):
            with open(target, "a", encoding="utf-8") as fh:
                fh.write("entry 2\n")

        print(f"After unlock: {inspect_artifact(mutex.lock_path).status.value}")
        print(f"Ledger contents:\n{target.read_text(encoding='utf-8')}")


if __name__ == "__main__":
    main()
