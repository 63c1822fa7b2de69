"""
E2E tests against a real tmux server.

These use the wall clock, so timeouts are kept to a few seconds.
"""

import time

import pytest

from infinite_claude.auto_submit import AutoSubmitMonitor
from infinite_claude.daemon_logging import BaseDaemonLogger
from infinite_claude.settings import MonitorConfig

pytestmark = [pytest.mark.e2e, pytest.mark.requires_tmux]


def wait_until(predicate, timeout=10.0, interval=0.2):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return False


class TestRealTmux:
    def test_session_lifecycle(self, tmux, session):
        assert tmux.has_session(session) is True
        assert tmux.kill_session(session) is True
        assert wait_until(lambda: not tmux.has_session(session), timeout=5)

    def test_text_and_enter_are_separate(self, tmux, session):
        assert tmux.send_text(session, "hello-from-test")
        time.sleep(0.3)
        # cat only echoes a line once Enter arrives
        before = tmux.capture_pane(session, 20) or ""
        assert before.count("hello-from-test") == 1

        assert tmux.send_submit(session)
        assert wait_until(lambda: (tmux.capture_pane(session, 20) or "").count("hello-from-test") == 2)

    def test_process_alive(self, tmux, session):
        assert wait_until(lambda: tmux.process_alive(session, "cat"), timeout=5)
        assert tmux.process_alive(session, "definitely-not-running") is False

    def test_capture_missing_session(self, tmux):
        assert tmux.capture_pane("no-such-session") is None


class TestAutoSubmitAgainstTmux:
    def test_idle_session_gets_continue_prompt(self, tmux, session, tmp_path):
        tmux.send_text(session, "waiting")
        tmux.send_submit(session)
        config = MonitorConfig(poll_interval=0.5, idle_timeout_minutes=0.05, settle_interval=30)
        log = BaseDaemonLogger(log_file=tmp_path / "monitor.log")
        monitor = AutoSubmitMonitor(tmux, session, config, log)

        monitor.start()
        try:
            assert wait_until(lambda: monitor.trigger_count >= 1, timeout=15)
            assert wait_until(lambda: "Continue" in (tmux.capture_pane(session, 20) or ""))
        finally:
            monitor.stop(timeout=5)

        assert monitor.is_running is False

    def test_monitor_exits_when_session_killed(self, tmux, session, tmp_path):
        config = MonitorConfig(poll_interval=0.5, idle_timeout_minutes=10)
        log = BaseDaemonLogger(log_file=tmp_path / "monitor.log")
        monitor = AutoSubmitMonitor(tmux, session, config, log)

        monitor.start()
        tmux.kill_session(session)

        assert wait_until(lambda: not monitor.is_running, timeout=5)
        assert "not found" in (tmp_path / "monitor.log").read_text()
