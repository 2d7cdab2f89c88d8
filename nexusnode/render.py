"""Rendering of the dashboard, its panels and the login screen."""

from __future__ import annotations

from typing import Any, Optional

from rich import box
from rich.console import Group, RenderableType
from rich.layout import Layout
from rich.padding import Padding
from rich.panel import Panel
from rich.progress_bar import ProgressBar
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from nexusnode.dashboard import (
    ActivityEvent,
    DashboardState,
    EventType,
    LogLevel,
    ProverState,
)
from nexusnode.metrics import Color
from nexusnode.utils import (
    clean_http_error_message,
    format_compact_timestamp,
    get_worker_color,
)

BACKGROUND_STYLE = "on rgb(16,20,24)"
FOOTER_TEXT = "[Q] Quit | Nexus Prover Dashboard"
HEADER_HEIGHT = 4
FOOTER_HEIGHT = 2
METRICS_PERCENT = 35
DASHBOARD_MARGIN = 1
PROVING_ANIMATION_TICKS = 20


def header_title(state: DashboardState, version: str) -> str:
    """Title line, announcing an available update when there is one."""
    if state.update_available:
        if state.latest_version is not None:
            return f"NEXUS PROVER v{version} -> {state.latest_version} UPDATE AVAILABLE"
        return f"NEXUS PROVER v{version} - UPDATE AVAILABLE"
    return f"NEXUS PROVER v{version}"


def _title_color(state: DashboardState) -> Color:
    return Color.LIGHT_YELLOW if state.update_available else Color.CYAN


def header_progress(state: DashboardState) -> tuple[str, Color, int]:
    """Label, colour and percentage of the header gauge.

    Proving shows an animated gauge; waiting shows the fetch backoff countdown.
    """
    if state.current_prover_state is ProverState.PROVING:
        progress = int((state.tick % PROVING_ANIMATION_TICKS) / PROVING_ANIMATION_TICKS * 100.0)
        return "PROVING - Generating proof", Color.LIGHT_GREEN, progress

    info = state.task_fetch_info
    if not info.can_fetch_now and info.backoff_duration_secs > 0:
        remaining = max(0, info.backoff_duration_secs - info.time_since_last_fetch_secs)
        progress = int(info.time_since_last_fetch_secs / info.backoff_duration_secs * 100.0)
        if remaining > 0:
            label = f"WAITING - Ready for next task ({remaining}s)"
        else:
            label = "WAITING - Ready for next task"
        return label, Color.LIGHT_BLUE, min(progress, 100)
    return "WAITING - Ready for next task", Color.LIGHT_BLUE, 100


def format_uptime(seconds: int) -> str:
    """Uptime as days/hours/minutes, hours/minutes/seconds or minutes/seconds."""
    if seconds >= 86400:
        return (
            f"Uptime: {seconds // 86400}d {(seconds % 86400) // 3600}h "
            f"{(seconds % 3600) // 60}m"
        )
    if seconds >= 3600:
        return f"Uptime: {seconds // 3600}h {(seconds % 3600) // 60}m {seconds % 60}s"
    return f"Uptime: {seconds // 60}m {seconds % 60}s"


def _should_display(event: ActivityEvent) -> bool:
    # State changes drive the header gauge and are not shown in the log.
    return event.event_type is not EventType.STATE_CHANGE


def _status_icon(event: ActivityEvent) -> str:
    if event.event_type is EventType.SUCCESS:
        return "✅"
    if event.event_type is EventType.ERROR:
        return "" if event.log_level is LogLevel.WARN else "❌"
    return ""


def log_lines(state: DashboardState, max_lines: int) -> list[Text]:
    """The most recent displayable events, newest first, at most ``max_lines`` (at least 1)."""
    limit = max(max_lines, 1)
    lines: list[Text] = []
    for event in reversed(state.activity_logs):
        if len(lines) >= limit:
            break
        if not _should_display(event):
            continue
        line = Text()
        line.append(f"{_status_icon(event)} ")
        line.append(f"{format_compact_timestamp(event.timestamp)} ", style=Color.DARK_GRAY.value)
        line.append(
            clean_http_error_message(event.msg), style=get_worker_color(event.worker).value
        )
        lines.append(line)
    return lines


def _labelled(label: str, value: str, style: str) -> Text:
    line = Text()
    line.append(label, style=Color.GRAY.value)
    line.append(value, style=style)
    return line


def zkvm_lines(state: DashboardState) -> list[Text]:
    """Lines of the proving statistics panel."""
    metrics = state.zkvm_metrics
    status_color = {
        "Success": Color.GREEN,
        "Failed": Color.RED,
    }.get(metrics.last_task_status, Color.GRAY)
    if state.last_submission_timestamp is not None:
        last_submission = format_compact_timestamp(state.last_submission_timestamp)
    else:
        last_submission = "Never"
    return [
        _labelled("Tasks: ", str(metrics.tasks_fetched), f"bold {Color.WHITE.value}"),
        _labelled(
            "Completed: ",
            f"{metrics.tasks_submitted} / {metrics.tasks_fetched}",
            f"bold {Color.GREEN.value}",
        ),
        _labelled(
            "Success: ",
            f"{metrics.success_rate():.1f}%",
            f"bold {metrics.success_rate_color().value}",
        ),
        _labelled("Runtime: ", metrics.format_runtime(), Color.CYAN.value),
        _labelled("Last: ", metrics.last_task_status, status_color.value),
        _labelled("Last Proof: ", last_submission, Color.YELLOW.value),
    ]


def _environment_color(environment: Any) -> Color:
    custom = getattr(environment, "orchestrator_url", None) is not None
    return Color.YELLOW if custom else Color.GREEN


def _thick_rule(style: Optional[str] = None) -> Rule:
    return Rule(characters="━", style=style or "")


def render_header(state: DashboardState, version: str) -> RenderableType:
    """Title line and progress gauge."""
    title_style = f"bold {_title_color(state).value}"
    label, color, percent = header_progress(state)
    return Group(
        Text(header_title(state, version), style=title_style, justify="center"),
        _thick_rule(),
        Text(label, style=f"bold {color.value}", justify="center"),
        ProgressBar(
            total=100,
            completed=percent,
            complete_style=f"bold {color.value}",
            finished_style=f"bold {color.value}",
        ),
    )


def render_info_panel(state: DashboardState, version: str) -> Panel:
    """Node, environment, version, uptime, threads and memory."""
    node_text = f"Node: {state.node_id}" if state.node_id is not None else "Node: Disconnected"
    uptime = max(0, int(state.clock() - state.start_time))
    lines = [
        Text(node_text, style=Color.LIGHT_BLUE.value),
        Text(f"Env: {state.environment}", style=_environment_color(state.environment).value),
        Text(f"Version: {version}", style=Color.CYAN.value),
        Text(format_uptime(uptime), style=Color.LIGHT_GREEN.value),
        Text(f"Threads: {state.num_threads}", style=Color.LIGHT_YELLOW.value),
        Text(f"Memory: {state.total_ram_gb:.1f} GB", style=Color.LIGHT_CYAN.value),
    ]
    return Panel(
        Group(*lines),
        title="SYSTEM INFO",
        box=box.ROUNDED,
        border_style=Color.CYAN.value,
        padding=1,
    )


def render_logs_panel(state: DashboardState, height: int) -> Panel:
    """The activity log, fitted to a panel ``height`` rows tall."""
    lines = log_lines(state, max(height - 3, 0))
    body: RenderableType = Group(*lines) if lines else Text("Starting up...")
    return Panel(
        body,
        title="ACTIVITY LOG",
        box=box.ROUNDED,
        border_style=Color.CYAN.value,
        padding=1,
    )


def render_footer() -> RenderableType:
    """Footer with the quit key."""
    style = f"bold {Color.CYAN.value}"
    return Group(_thick_rule(), Text(FOOTER_TEXT, style=style, justify="center"))


def _gauge(title: str, percent: int, label: str, color: Color) -> Panel:
    style = f"bold {color.value}"
    return Panel(
        Group(
            ProgressBar(
                total=100,
                completed=max(0, min(percent, 100)),
                complete_style=style,
                finished_style=style,
            ),
            Text(label, style=style, justify="center"),
        ),
        title=title,
        box=box.ROUNDED,
        border_style=color.value,
    )


def render_system_metrics(state: DashboardState) -> RenderableType:
    """CPU, RAM and peak RAM gauges."""
    metrics = state.system_metrics
    return Group(
        _gauge(
            "CPU Usage",
            int(metrics.cpu_percent),
            f"{metrics.cpu_percent:.1f}%",
            metrics.cpu_color(),
        ),
        _gauge(
            "RAM Usage",
            int(metrics.ram_ratio() * 100.0),
            f"{metrics.format_ram()} / {state.total_ram_gb:.1f}GB",
            metrics.ram_color(),
        ),
        _gauge(
            "Peak RAM",
            int(metrics.peak_ram_ratio() * 100.0),
            metrics.format_peak_ram(),
            Color.LIGHT_BLUE,
        ),
    )


def render_zkvm_metrics(state: DashboardState) -> Panel:
    """Proving statistics panel."""
    return Panel(
        Group(*zkvm_lines(state)),
        title="zkVM STATS",
        box=box.ROUNDED,
        border_style=Color.CYAN.value,
        padding=1,
    )


def render_metrics_section(state: DashboardState) -> Table:
    """System and proving metrics side by side."""
    grid = Table.grid(expand=True)
    grid.add_column(ratio=1)
    grid.add_column(ratio=1)
    grid.add_row(render_system_metrics(state), render_zkvm_metrics(state))
    return grid


def render_dashboard(state: DashboardState, version: str, height: int) -> RenderableType:
    """The whole dashboard for a terminal ``height`` rows tall."""
    inner = max(height - 2 * DASHBOARD_MARGIN, 0)
    metrics_height = inner * METRICS_PERCENT // 100
    body_height = max(inner - HEADER_HEIGHT - FOOTER_HEIGHT - metrics_height, 0)

    layout = Layout()
    body = Layout(name="body", ratio=1)
    layout.split_column(
        Layout(render_header(state, version), name="header", size=HEADER_HEIGHT),
        body,
        Layout(render_metrics_section(state), name="metrics", size=metrics_height),
        Layout(render_footer(), name="footer", size=FOOTER_HEIGHT),
    )
    body.split_row(
        Layout(render_info_panel(state, version), name="info", ratio=3),
        Layout(render_logs_panel(state, body_height), name="logs", ratio=7),
    )
    style = BACKGROUND_STYLE if state.with_background_color else ""
    return Padding(layout, DASHBOARD_MARGIN, style=style)


def render_login() -> Panel:
    """Login screen with its instructions."""
    return Panel(
        Text("Press Enter to login\nPress Esc to exit"),
        title="Login",
        border_style=Color.CYAN.value,
    )