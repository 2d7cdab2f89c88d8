"""System information and performance measurements."""

from __future__ import annotations

import functools
import math
import os
import platform
import sys
import time
from typing import Optional

import psutil

NUM_TESTS = 1_000_000
OPERATIONS_PER_ITERATION = 4  # sin, add, multiply, divide
NUM_REPEATS = 5

_BYTES_PER_GB = 1024.0 * 1024.0 * 1024.0
_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1


def _detected_cores() -> Optional[int]:
    affinity = getattr(os, "sched_getaffinity", None)
    if affinity is not None:
        try:
            count = len(affinity(0))
        except OSError:
            count = 0
        if count:
            return count
    return os.cpu_count()


def num_cores() -> int:
    """Number of logical cores available to this process, at least 1."""
    return _detected_cores() or 1


def cpu_stats() -> tuple[int, int]:
    """Return (logical cores, CPU frequency in MHz); the frequency is 0 if unknown."""
    cpu_freq = getattr(psutil, "cpu_freq", None)
    try:
        freq = cpu_freq() if cpu_freq is not None else None
    except (OSError, NotImplementedError):
        freq = None
    mhz = int(freq.current) if freq is not None and freq.current else 0
    return num_cores(), mhz


def flops_per_cycle_per_core() -> int:
    """Double-precision operations per cycle per core for a baseline build target."""
    machine = platform.machine().lower()
    if machine in {"x86_64", "amd64"}:
        # SSE2 is the x86-64 baseline: 128-bit vectors, 4 FP64 ops.
        return 4
    return 1


def estimate_peak_gflops(num_provers: int) -> float:
    """Estimate peak GFLOP/s from the number of prover threads and clock speed."""
    _cores, mhz = cpu_stats()
    return (num_provers * mhz * flops_per_cycle_per_core()) / 1000.0


def _benchmark(cores: int, iterations: int, repeats: int) -> float:
    """Average GFLOP/s over ``repeats`` runs of the floating-point loop."""
    rates = []
    for _ in range(repeats):
        start = time.perf_counter()
        total_flops = 0
        for _ in range(cores):
            x = 1.0
            for _ in range(iterations):
                x = (math.sin(x) + 1.0) * 0.5 / 1.1
            total_flops += iterations * OPERATIONS_PER_ITERATION
        elapsed = max(time.perf_counter() - start, 1e-9)
        rates.append(total_flops / elapsed)
    return sum(rates) / repeats / 1e9


@functools.lru_cache(maxsize=None)
def measure_gflops() -> float:
    """Measure GFLOP/s of this machine; measured once, then cached."""
    cores = _detected_cores()
    if cores is None:
        print(
            "Warning: Unable to determine the number of logical cores. Defaulting to 1.",
            file=sys.stderr,
        )
        cores = 1
    return _benchmark(cores, NUM_TESTS, NUM_REPEATS)


def bytes_to_mb_i32(num_bytes: int) -> int:
    """Megabytes scaled by 1000 (three decimals), rounded half away from zero, as i32."""
    scaled = num_bytes * 1000.0 / 1_048_576.0
    rounded = math.floor(abs(scaled) + 0.5)
    value = int(math.copysign(rounded, scaled))
    return max(_I32_MIN, min(_I32_MAX, value))


def get_memory_info() -> tuple[int, int]:
    """Return (process memory, total system memory) encoded by bytes_to_mb_i32."""
    process_bytes = psutil.Process(os.getpid()).memory_info().rss
    total_bytes = psutil.virtual_memory().total
    return bytes_to_mb_i32(process_bytes), bytes_to_mb_i32(total_bytes)


def total_memory_gb() -> float:
    """Total memory of the machine in binary gigabytes."""
    return psutil.virtual_memory().total / _BYTES_PER_GB


def process_memory_gb() -> float:
    """Memory used by the current process in binary gigabytes."""
    return psutil.Process(os.getpid()).memory_info().rss / _BYTES_PER_GB