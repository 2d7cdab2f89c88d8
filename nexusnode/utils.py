"""Formatting helpers shared by the dashboard panels."""

from __future__ import annotations

from nexusnode.dashboard import WorkerKind
from nexusnode.metrics import Color

_WORKER_COLORS = {
    WorkerKind.TASK_FETCHER: Color.CYAN,
    WorkerKind.PROVER: Color.YELLOW,
    WorkerKind.PROOF_SUBMITTER: Color.GREEN,
}


def get_worker_color(worker: WorkerKind) -> Color:
    """Display colour for events from a worker."""
    return _WORKER_COLORS[worker]


def _byte_slice(text: str, start: int, end: int):
    data = text.encode("utf-8")
    if len(data) < end:
        return None
    try:
        return data[start:end].decode("utf-8")
    except UnicodeDecodeError:
        return None


def format_compact_timestamp(timestamp: str) -> str:
    """Shorten "YYYY-MM-DD HH:MM:SS" to "MM-DD HH:MM"; other input is returned as is."""
    parts = timestamp.split(" ")
    if len(parts) >= 2:
        month_day = _byte_slice(parts[0], 5, 10)
        hour_min = _byte_slice(parts[1], 0, 5)
        if month_day is not None and hour_min is not None:
            return f"{month_day} {hour_min}"
    return timestamp


def clean_http_error_message(msg: str) -> str:
    """Replace verbose HTTP client errors with a short message."""
    if "reqwest::Error" in msg:
        if "ConnectTimeout" in msg:
            return "Connection timeout - retrying..."
        if "TimedOut" in msg:
            return "Request timed out - retrying..."
        return "Network error - retrying..."
    return msg