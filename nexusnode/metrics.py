"""System and proving metrics shown on the dashboard."""

from __future__ import annotations

import os
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import psutil

# Shortest interval between two CPU usage samples that gives a meaningful value.
MINIMUM_CPU_UPDATE_INTERVAL = 0.2

POINTS_PER_PROOF = 300

_BYTES_PER_MB = 1024.0 * 1024.0


class Color(Enum):
    """Display colours, valued by their terminal style names."""

    RED = "red"
    YELLOW = "yellow"
    GREEN = "green"
    CYAN = "cyan"
    WHITE = "white"
    GRAY = "grey70"
    DARK_GRAY = "bright_black"
    LIGHT_BLUE = "bright_blue"
    LIGHT_GREEN = "bright_green"
    LIGHT_YELLOW = "bright_yellow"
    LIGHT_CYAN = "bright_cyan"


_tracked: dict[int, psutil.Process] = {}


def _tracked_process(pid: int) -> Optional[psutil.Process]:
    """A long-lived handle for ``pid`` so CPU usage can be measured between samples."""
    process = _tracked.get(pid)
    if process is not None and process.is_running():
        return process
    try:
        process = psutil.Process(pid)
    except (psutil.NoSuchProcess, psutil.AccessDenied):
        _tracked.pop(pid, None)
        return None
    _tracked[pid] = process
    return process


def _format_megabytes(num_bytes: int) -> str:
    mb = num_bytes / _BYTES_PER_MB
    if mb >= 1024.0:
        return f"{mb / 1024.0:.1f} GB"
    return f"{mb:.1f} MB"


def _usage_color(value: float, red_at: float, yellow_at: float) -> Color:
    if value >= red_at:
        return Color.RED
    if value >= yellow_at:
        return Color.YELLOW
    return Color.GREEN


@dataclass
class SystemMetrics:
    """CPU and memory usage of this process and its proving subprocesses."""

    cpu_percent: float = 0.0
    ram_bytes: int = 0
    peak_ram_bytes: int = 0
    total_ram_bytes: int = 0
    # Monotonic time of the last CPU sample.
    last_cpu_update: Optional[float] = None

    @classmethod
    def initial(cls) -> "SystemMetrics":
        """Empty metrics that already know the total system memory."""
        return cls(total_ram_bytes=psutil.virtual_memory().total)

    @classmethod
    def sample(
        cls, previous_peak: int, previous: Optional["SystemMetrics"] = None
    ) -> "SystemMetrics":
        """Take a new sample, keeping the peak memory seen so far.

        CPU usage is only re-measured once MINIMUM_CPU_UPDATE_INTERVAL has
        passed since the previous sample; otherwise the previous value is kept.
        """
        now = time.monotonic()
        if previous is None or previous.last_cpu_update is None:
            update_cpu = True
        else:
            update_cpu = now - previous.last_cpu_update >= MINIMUM_CPU_UPDATE_INTERVAL

        if update_cpu:
            last_cpu_update: Optional[float] = now
        else:
            last_cpu_update = previous.last_cpu_update if previous is not None else None

        cpu_total = 0.0
        ram_total = 0
        children: list[psutil.Process] = []
        current = _tracked_process(os.getpid())
        if current is not None:
            try:
                if update_cpu:
                    cpu_total = current.cpu_percent(interval=None)
                else:
                    cpu_total = previous.cpu_percent if previous is not None else 0.0
                ram_total = current.memory_info().rss
                children = current.children(recursive=False)
            except (psutil.NoSuchProcess, psutil.AccessDenied):
                pass

        # Proving subprocesses count towards this process's usage.
        for child in children:
            try:
                if "nexus" not in child.name().lower():
                    continue
                tracked = _tracked_process(child.pid)
                if tracked is None:
                    continue
                ram_total += tracked.memory_info().rss
                if update_cpu:
                    cpu_total += tracked.cpu_percent(interval=None)
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                continue

        return cls(
            cpu_percent=cpu_total,
            ram_bytes=ram_total,
            peak_ram_bytes=max(previous_peak, ram_total),
            total_ram_bytes=psutil.virtual_memory().total,
            last_cpu_update=last_cpu_update,
        )

    def ram_ratio(self) -> float:
        """Current RAM usage as a fraction of total memory."""
        if self.total_ram_bytes == 0:
            return 0.0
        return self.ram_bytes / self.total_ram_bytes

    def peak_ram_ratio(self) -> float:
        """Peak RAM usage as a fraction of total memory."""
        if self.total_ram_bytes == 0:
            return 0.0
        return self.peak_ram_bytes / self.total_ram_bytes

    def format_ram(self) -> str:
        return _format_megabytes(self.ram_bytes)

    def format_peak_ram(self) -> str:
        return _format_megabytes(self.peak_ram_bytes)

    def cpu_color(self) -> Color:
        return _usage_color(self.cpu_percent, 80.0, 60.0)

    def ram_color(self) -> Color:
        return _usage_color(self.ram_ratio(), 0.8, 0.6)


@dataclass
class ZkVMMetrics:
    """Counters for fetched, proved and submitted tasks."""

    tasks_fetched: int = 0
    tasks_submitted: int = 0
    zkvm_runtime_secs: int = 0
    last_task_status: str = "None"
    total_points: int = 0

    def success_rate(self) -> float:
        """Submitted tasks as a percentage of fetched tasks."""
        if self.tasks_fetched == 0:
            return 0.0
        return self.tasks_submitted / self.tasks_fetched * 100.0

    def format_points(self) -> str:
        """Points with a thousands separator, or in millions from one million up."""
        points = self.total_points
        if points >= 1_000_000:
            return f"{points / 1_000_000.0:.1f}M"
        if points >= 1_000:
            return f"{points // 1_000},{points % 1_000:03d}"
        return str(points)

    def success_rate_color(self) -> Color:
        rate = self.success_rate()
        if rate >= 75.0:
            return Color.GREEN
        if rate >= 50.0:
            return Color.YELLOW
        return Color.RED

    def format_runtime(self) -> str:
        hours, rest = divmod(self.zkvm_runtime_secs, 3600)
        minutes, seconds = divmod(rest, 60)
        if hours > 0:
            return f"{hours}h {minutes}m {seconds}s"
        if minutes > 0:
            return f"{minutes}m {seconds}s"
        return f"{seconds}s"


@dataclass
class TaskFetchInfo:
    """Backoff state of task fetching, for the countdown display."""

    backoff_duration_secs: int = 0
    time_since_last_fetch_secs: int = 0
    can_fetch_now: bool = True