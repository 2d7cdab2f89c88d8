import io

import pytest
from rich.console import Console

from nexusnode.dashboard import (
    ActivityEvent,
    DashboardState,
    EventType,
    LogLevel,
    ProverState,
    WorkerKind,
)
from nexusnode.metrics import Color, TaskFetchInfo
from nexusnode.render import (
    format_uptime,
    header_progress,
    header_title,
    log_lines,
    render_dashboard,
    render_footer,
    render_header,
    render_info_panel,
    render_login,
    render_logs_panel,
    render_metrics_section,
    render_system_metrics,
    render_zkvm_metrics,
    zkvm_lines,
)


def _render(renderable, width=120, height=40):
    console = Console(
        width=width, height=height, record=True, file=io.StringIO(), color_system=None
    )
    console.print(renderable)
    return console.export_text()


@pytest.fixture
def state():
    now = [1000.0]
    return DashboardState(
        node_id=42,
        environment="Production",
        num_threads=2,
        clock=lambda: now[0],
    )


def _event(msg, event_type=EventType.SUCCESS, worker=WorkerKind.TASK_FETCHER, **kw):
    return ActivityEvent(
        worker=worker,
        event_type=event_type,
        msg=msg,
        timestamp="2024-01-01 12:34:56",
        **kw,
    )


def test_header_title_without_update(state):
    assert header_title(state, "1.2.3") == "NEXUS PROVER v1.2.3"


def test_header_title_with_latest_version(state):
    state.update_available = True
    state.latest_version = "v9.9.9"
    assert header_title(state, "1.2.3") == "NEXUS PROVER v1.2.3 -> v9.9.9 UPDATE AVAILABLE"


def test_header_title_update_without_latest(state):
    state.update_available = True
    assert header_title(state, "1.2.3") == "NEXUS PROVER v1.2.3 - UPDATE AVAILABLE"


def test_header_progress_proving_is_animated(state):
    state.current_prover_state = ProverState.PROVING
    seen = set()
    for tick in range(40):
        state.tick = tick
        label, color, percent = header_progress(state)
        assert label == "PROVING - Generating proof"
        assert color is Color.LIGHT_GREEN
        assert 0 <= percent < 100
        seen.add(percent)
    state.tick = 0
    assert header_progress(state)[2] == 0
    assert len(seen) > 1


def test_header_progress_waiting_ready(state):
    assert header_progress(state) == ("WAITING - Ready for next task", Color.LIGHT_BLUE, 100)


def test_header_progress_waiting_countdown(state):
    state.task_fetch_info = TaskFetchInfo(
        backoff_duration_secs=30, time_since_last_fetch_secs=10, can_fetch_now=False
    )
    label, color, percent = header_progress(state)
    assert label.startswith("WAITING - Ready for next task (")
    assert label.endswith("s)")
    assert color is Color.LIGHT_BLUE
    assert 0 < percent < 100


def test_format_uptime_forms():
    assert format_uptime(59) == "Uptime: 0m 59s"
    assert format_uptime(3600).startswith("Uptime: 1h")
    assert format_uptime(86400).startswith("Uptime: 1d")


def test_log_lines_newest_first_and_limited(state):
    for index in range(5):
        state.add_to_activity_log(_event(f"message {index}"))
    lines = log_lines(state, 3)
    assert len(lines) == 3
    assert "message 4" in lines[0].plain
    assert "message 2" in lines[-1].plain


def test_log_lines_skips_state_changes(state):
    state.add_to_activity_log(_event("visible"))
    state.add_to_activity_log(
        _event("hidden", event_type=EventType.STATE_CHANGE, prover_state=ProverState.PROVING)
    )
    lines = log_lines(state, 10)
    assert len(lines) == 1
    assert "visible" in lines[0].plain


def test_log_lines_icons_and_compact_time(state):
    state.add_to_activity_log(_event("ok"))
    state.add_to_activity_log(_event("bad", event_type=EventType.ERROR, log_level=LogLevel.ERROR))
    error_line, success_line = log_lines(state, 10)
    assert success_line.plain.startswith("✅ ")
    assert error_line.plain.startswith("❌ ")
    assert "01-01 12:34" in success_line.plain


def test_log_lines_cleans_http_errors(state):
    state.add_to_activity_log(
        _event("reqwest::Error ConnectTimeout", event_type=EventType.ERROR)
    )
    assert "Connection timeout - retrying..." in log_lines(state, 0)[0].plain


def test_zkvm_lines_defaults(state):
    plain = [line.plain for line in zkvm_lines(state)]
    assert "Completed: 0 / 0" in plain
    assert "Last Proof: Never" in plain
    assert "Last: None" in plain


def test_zkvm_lines_last_submission(state):
    state.last_submission_timestamp = "2024-01-01 12:34:56"
    plain = [line.plain for line in zkvm_lines(state)]
    assert "Last Proof: 01-01 12:34" in plain


def test_render_login_text():
    text = _render(render_login())
    assert "Press Enter to login" in text
    assert "Press Esc to exit" in text
    assert "Login" in text


def test_render_footer_text():
    assert "[Q] Quit | Nexus Prover Dashboard" in _render(render_footer())


def test_render_header_contains_title_and_label(state):
    text = _render(render_header(state, "1.2.3"))
    assert "NEXUS PROVER v1.2.3" in text
    assert "WAITING - Ready for next task" in text


def test_render_info_panel(state):
    text = _render(render_info_panel(state, "1.2.3"))
    assert "SYSTEM INFO" in text
    assert "Node: 42" in text
    assert "Env: Production" in text
    assert "Version: 1.2.3" in text
    assert "Threads: 2" in text


def test_render_info_panel_disconnected(state):
    state.node_id = None
    assert "Node: Disconnected" in _render(render_info_panel(state, "1.2.3"))


def test_render_logs_panel_empty(state):
    text = _render(render_logs_panel(state, 20))
    assert "ACTIVITY LOG" in text
    assert "Starting up..." in text


def test_render_system_metrics(state):
    text = _render(render_system_metrics(state))
    for title in ("CPU Usage", "RAM Usage", "Peak RAM"):
        assert title in text


def test_render_zkvm_metrics(state):
    text = _render(render_zkvm_metrics(state))
    assert "zkVM STATS" in text
    assert "Tasks: 0" in text


def test_render_metrics_section_has_both_parts(state):
    text = _render(render_metrics_section(state))
    assert "CPU Usage" in text
    assert "zkVM STATS" in text


def test_render_dashboard_has_all_panels(state):
    state.add_to_activity_log(_event("Step 1 of 4: Got task abc"))
    text = _render(render_dashboard(state, "1.2.3", 40))
    for part in ("NEXUS PROVER v1.2.3", "SYSTEM INFO", "ACTIVITY LOG", "[Q] Quit"):
        assert part in text
    assert "Got task abc" in text