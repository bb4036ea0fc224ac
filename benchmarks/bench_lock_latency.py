"""Benchmark: Uncontended lock/unlock latency — per-cycle p50/p99.

Measures one FileMutex.lock() + unlock() round trip on a local file,
which covers artifact creation, the OS lock, the metadata write, and
artifact removal.
"""
from __future__ import annotations

import json
import sys
import tempfile
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from file_mutex.mutex import FileMutex

_WARMUP: int = 50
_ITERATIONS: int = 2_000


def bench_lock_round_trip_latency() -> dict[str, object]:
    """Benchmark FileMutex lock/unlock round-trip latency.

    Returns
    -------
    dict with keys: operation, iterations, total_seconds, ops_per_second,
    avg_latency_ms, p50_latency_ms, p99_latency_ms.
    """
    with tempfile.TemporaryDirectory() as tmp:
        target = Path(tmp) / "bench.txt"
        target.touch()
        mutex = FileMutex(target)

        for _ in range(_WARMUP):
            mutex.lock()
            mutex.unlock()

        latencies_ms: list[float] = []
        for _ in range(_ITERATIONS):
            t0 = time.perf_counter()
            mutex.lock()
            mutex.unlock()
            latencies_ms.append((time.perf_counter() - t0) * 1000)

    sorted_lats = sorted(latencies_ms)
    n = len(sorted_lats)
    total = sum(latencies_ms) / 1000

    result: dict[str, object] = {
        "operation": "lock_round_trip_latency",
        "iterations": _ITERATIONS,
        "total_seconds": round(total, 4),
        "ops_per_second": round(_ITERATIONS / total, 1),
        "avg_latency_ms": round(sum(latencies_ms) / n, 4),
        "p50_latency_ms": round(sorted_lats[n // 2], 4),
        "p99_latency_ms": round(sorted_lats[min(int(n * 0.99), n - 1)], 4),
    }
    print(
        f"[bench_lock_latency] {result['operation']}: "
        f"p50={result['p50_latency_ms']:.4f}ms  "
        f"p99={result['p99_latency_ms']:.4f}ms"
    )
    return result


def run_benchmark() -> dict[str, object]:
    """Entry point returning the benchmark result dict."""
    return bench_lock_round_trip_latency()


if __name__ == "__main__":
    result = run_benchmark()
    results_dir = Path(__file__).parent / "results"
    results_dir.mkdir(exist_ok=True)
    output_path = results_dir / "latency_baseline.json"
    with open(output_path, "w", encoding="utf-8") as fh:
        json.dump(result, fh, indent=2)
    print(f"Results saved to {output_path}")
