"""Dashboard state and its updates from worker events."""

from __future__ import annotations

import re
import time
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

from nexusnode.metrics import POINTS_PER_PROOF, SystemMetrics, TaskFetchInfo, ZkVMMetrics
from nexusnode.system import total_memory_gb

MAX_ACTIVITY_LOGS = 50
FETCH_TIMEOUT_SECS = 5

_GOT_TASK_PATTERN = "Got task "
_UNSIGNED_PATTERN = re.compile(r"\+?[0-9]+")


class WorkerKind(Enum):
    """The worker that emitted an event."""

    TASK_FETCHER = "task_fetcher"
    PROVER = "prover"
    PROOF_SUBMITTER = "proof_submitter"


class EventType(Enum):
    SUCCESS = "success"
    ERROR = "error"
    REFRESH = "refresh"
    WAITING = "waiting"
    STATE_CHANGE = "state_change"


class LogLevel(Enum):
    TRACE = "trace"
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class ProverState(Enum):
    WAITING = "waiting"
    PROVING = "proving"


class FetchingState(Enum):
    """Whether a task fetch is under way, has timed out, or nothing is happening."""

    IDLE = "idle"
    ACTIVE = "active"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class ActivityEvent:
    """An event reported by a worker."""

    worker: WorkerKind
    event_type: EventType
    msg: str
    # Formatted as "YYYY-MM-DD HH:MM:SS".
    timestamp: str = ""
    log_level: LogLevel = LogLevel.INFO
    prover_state: Optional[ProverState] = None
    # Prover thread that emitted the event, for prover events.
    thread_id: Optional[int] = None


def extract_task_id(msg: str) -> Optional[str]:
    """Task ID following "Got task " in a message, up to the next whitespace."""
    start = msg.find(_GOT_TASK_PATTERN)
    if start < 0:
        return None
    remaining = msg[start + len(_GOT_TASK_PATTERN):]
    for index, char in enumerate(remaining):
        if char.isspace():
            return remaining[:index]
    return remaining or None


def extract_wait_seconds(msg: str) -> Optional[int]:
    """Seconds from a message of the form "...(30) seconds"."""
    start = msg.find("(")
    if start < 0:
        return None
    end = msg.find(") seconds", start)
    if end < 0:
        return None
    number = msg[start + 1:end]
    if not _UNSIGNED_PATTERN.fullmatch(number):
        return None
    value = int(number)
    if value >= 2**64:
        return None
    return value


def _is_completion_event(event: ActivityEvent) -> bool:
    return (
        event.worker is WorkerKind.TASK_FETCHER
        and event.event_type in (EventType.SUCCESS, EventType.ERROR)
        and "Step 1 of 4" not in event.msg
    )


def _is_fetching_start_event(event: ActivityEvent) -> bool:
    return (
        event.worker is WorkerKind.TASK_FETCHER
        and "Step 1 of 4: Requesting task..." in event.msg
    )


@dataclass
class DashboardState:
    """Everything the dashboard shows, kept current from worker events."""

    node_id: Optional[int] = None
    environment: Any = None
    num_threads: int = 1
    update_available: bool = False
    latest_version: Optional[str] = None
    with_background_color: bool = False
    clock: Callable[[], float] = field(default=time.monotonic, repr=False)
    start_time: Optional[float] = None
    last_task: Optional[str] = None
    current_task: Optional[str] = None
    total_ram_gb: float = field(default_factory=total_memory_gb)
    pending_events: deque = field(default_factory=deque)
    activity_logs: deque = field(default_factory=lambda: deque(maxlen=MAX_ACTIVITY_LOGS))
    system_metrics: SystemMetrics = field(default_factory=SystemMetrics.initial)
    zkvm_metrics: ZkVMMetrics = field(default_factory=ZkVMMetrics)
    task_fetch_info: TaskFetchInfo = field(default_factory=TaskFetchInfo)
    tick: int = 0
    last_submission_timestamp: Optional[str] = None
    fetching_state: FetchingState = FetchingState.IDLE
    fetching_started_at: Optional[float] = None
    current_prover_state: ProverState = ProverState.WAITING
    step2_start_time: Optional[float] = None
    # (start time, original wait seconds) of the current waiting period.
    waiting_start_info: Optional[tuple[float, int]] = None

    def __post_init__(self) -> None:
        if self.start_time is None:
            self.start_time = self.clock()

    def add_to_activity_log(self, event: ActivityEvent) -> None:
        """Append an event to the activity log, dropping the oldest when full."""
        self.activity_logs.append(event)

    def add_event(self, event: ActivityEvent) -> None:
        """Queue an event for the next update."""
        self.pending_events.append(event)

    def update(self) -> None:
        """Advance one tick: sample metrics, process queued events, refresh timers."""
        self.tick += 1
        self.system_metrics = SystemMetrics.sample(
            self.system_metrics.peak_ram_bytes, self.system_metrics
        )

        while self.pending_events:
            event = self.pending_events.popleft()
            self.add_to_activity_log(event)
            self.process_event(event)

        self._check_fetching_timeout()
        self._update_task_fetch_countdown()

    def process_event(self, event: ActivityEvent) -> None:
        """Update the state from a single event."""
        handlers = {
            WorkerKind.TASK_FETCHER: self._handle_task_fetcher_event,
            WorkerKind.PROVER: self._handle_prover_event,
            WorkerKind.PROOF_SUBMITTER: self._handle_proof_submitter_event,
        }
        handlers[event.worker](event)

        if event.event_type is EventType.STATE_CHANGE and event.prover_state is not None:
            self.current_prover_state = event.prover_state

    def _elapsed_secs(self, since: float) -> int:
        return max(0, int(self.clock() - since))

    def _handle_task_fetcher_event(self, event: ActivityEvent) -> None:
        if event.event_type is EventType.SUCCESS and "Step 1 of 4: Got task" in event.msg:
            task_id = extract_task_id(event.msg)
            if task_id is not None:
                self.last_task = self.current_task
                self.current_task = task_id
                self.zkvm_metrics.tasks_fetched += 1
                # Proving begins once the task has been fetched.
                self.step2_start_time = self.clock()

        if _is_completion_event(event):
            self.fetching_state = FetchingState.IDLE
            self.fetching_started_at = None
        elif _is_fetching_start_event(event) and self.fetching_state is not FetchingState.ACTIVE:
            self.fetching_state = FetchingState.ACTIVE
            self.fetching_started_at = self.clock()

        if "ready for next task" in event.msg:
            seconds = extract_wait_seconds(event.msg)
            if seconds is not None:
                same = (
                    self.waiting_start_info is not None
                    and self.waiting_start_info[1] == seconds
                )
                if not same:
                    self.waiting_start_info = (self.clock(), seconds)

    def _handle_prover_event(self, event: ActivityEvent) -> None:
        if event.event_type is EventType.SUCCESS:
            if (
                "Step 3 of 4: Proof generated for task" in event.msg
                and self.step2_start_time is not None
            ):
                self.zkvm_metrics.zkvm_runtime_secs += self._elapsed_secs(self.step2_start_time)
                self.zkvm_metrics.last_task_status = "Proved"
                self.step2_start_time = None
        elif event.event_type is EventType.ERROR:
            self.zkvm_metrics.last_task_status = "Proof Failed"
            self.step2_start_time = None

    def _handle_proof_submitter_event(self, event: ActivityEvent) -> None:
        metrics = self.zkvm_metrics
        if (
            event.event_type is EventType.SUCCESS
            and "Step 4 of 4: Proof submitted successfully" in event.msg
        ):
            metrics.tasks_submitted += 1
            # Earlier fetch events may have been missed if the dashboard started late.
            metrics.tasks_fetched = max(metrics.tasks_fetched, metrics.tasks_submitted)
            metrics.last_task_status = "Success"
            self.last_submission_timestamp = event.timestamp
            metrics.total_points = metrics.tasks_submitted * POINTS_PER_PROOF
        elif event.event_type is EventType.ERROR:
            metrics.last_task_status = "Submit Failed"

    def _update_task_fetch_countdown(self) -> None:
        if self.waiting_start_info is None:
            self.task_fetch_info = TaskFetchInfo()
            return
        start, original_secs = self.waiting_start_info
        elapsed = self._elapsed_secs(start)
        remaining = max(0, original_secs - elapsed)
        self.task_fetch_info = TaskFetchInfo(
            backoff_duration_secs=original_secs,
            time_since_last_fetch_secs=elapsed,
            can_fetch_now=remaining == 0,
        )
        if remaining == 0:
            self.waiting_start_info = None

    def _check_fetching_timeout(self) -> None:
        if (
            self.fetching_state is FetchingState.ACTIVE
            and self.fetching_started_at is not None
            and self._elapsed_secs(self.fetching_started_at) > FETCH_TIMEOUT_SECS
        ):
            self.fetching_state = FetchingState.TIMEOUT