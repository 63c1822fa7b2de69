"""
Babysit monitor.

A slow, long-horizon watchdog. If the pane has not changed for the stuck
threshold (15 minutes by default) and no task is in progress, it presses
Ctrl-C and sends recovery text chosen from what is on screen: an error,
open todos, or neither. It stops itself after max_runtime (8 hours by
default) or when the session disappears.
"""

from typing import Optional

from .daemon_logging import BaseDaemonLogger
from .exceptions import CaptureError
from .fingerprint import ERROR_WINDOW, STABILITY_WINDOW, STATUS_WINDOW, TODO_WINDOW, capture, digest
from .intervention import InterventionEvent, send_intervention
from .monitor_core import (
    BabysitState,
    build_nudge_event,
    decide_babysit,
    describe_nudge_reason,
    is_expired,
    should_log_check,
)
from .protocols import Clock, TmuxInterface
from .scheduler import PeriodicTask
from .settings import MonitorConfig
from .stability import StabilityTracker
from .status_patterns import ActivityClassifier


class BabysitMonitor(PeriodicTask):
    """Recovers a session that has been stuck for a long time."""

    name = "BabysitMonitor"

    def __init__(
        self,
        tmux: TmuxInterface,
        session: str,
        config: MonitorConfig,
        log: BaseDaemonLogger,
        classifier: Optional[ActivityClassifier] = None,
        clock: Optional[Clock] = None,
    ):
        super().__init__(config.babysit_poll_interval, clock)
        self.tmux = tmux
        self.session = session
        self.config = config
        self.log = log
        self.classifier = classifier or ActivityClassifier()
        self.started_at = self.clock.now()
        self.tracker = StabilityTracker(self.started_at)
        self.state = BabysitState.RUNNING
        self.check_count = 0
        self.nudge_count = 0
        self.last_event: Optional[InterventionEvent] = None

    def on_start(self) -> None:
        self.started_at = self.clock.now()
        self.tracker.reset(self.started_at)
        self.state = BabysitState.RUNNING
        self.log.info(
            f"Starting babysit monitor (checks every {self.config.babysit_poll_interval:g}s, "
            f"stuck threshold: {self.config.stuck_threshold:g}s)"
        )

    def on_stop(self) -> None:
        self.log.info(
            f"Babysit monitor finished. Total checks: {self.check_count}, nudges: {self.nudge_count}"
        )

    def elapsed(self) -> float:
        return self.clock.now() - self.started_at

    def tick(self) -> bool:
        elapsed = self.elapsed()
        if is_expired(elapsed, self.config.max_runtime):
            self.state = BabysitState.EXPIRED
            self.log.info(
                f"Babysit monitor: {self.config.max_runtime / 3600:g} hours elapsed, shutting down"
            )
            return False

        self.check_count += 1
        n = self.check_count

        if not self.tmux.has_session(self.session):
            self.state = BabysitState.SESSION_GONE
            self.log.warn(f"Babysit monitor: session '{self.session}' not found, stopping")
            self.log.debug(f"babysit[{n}]: session gone, exiting")
            return False

        try:
            content = capture(self.tmux, self.session, STABILITY_WINDOW)
        except CaptureError as e:
            self.log.warn(f"Babysit check #{n}: {e}, skipping")
            return True

        now = self.clock.now()
        current = digest(content)
        self.log.debug(f"babysit[{n}]: hash={current}, last={self.tracker.last_digest or ''}")
        if self.tracker.observe(current, now):
            self.log.debug(f"babysit[{n}]: content CHANGED, reset timer")

        stable = self.tracker.stable_for(now)
        try:
            todo_text = capture(self.tmux, self.session, TODO_WINDOW)
            error_text = capture(self.tmux, self.session, ERROR_WINDOW)
            status_text = capture(self.tmux, self.session, STATUS_WINDOW)
        except CaptureError as e:
            # No decision without the status, todo and error context
            self.log.warn(f"Babysit check #{n}: {e} (context window), skipping")
            return True
        active_todos = self.classifier.count_active_todos(todo_text)
        has_error = self.classifier.has_error_state(error_text)
        work_in_progress = self.classifier.has_work_in_progress(status_text)

        self.log.debug(
            f"babysit[{n}]: idle={stable:.0f}s, threshold={self.config.stuck_threshold:g}s, "
            f"todos={active_todos}, tasks_running={work_in_progress}, error={has_error}"
        )
        if should_log_check(n):
            self.log.info(
                f"Babysit check #{n} (elapsed: {int(elapsed // 60)}min | idle: {int(stable // 60)}min | "
                f"todos: {active_todos} | tasks_running: {work_in_progress})"
            )

        self.state = decide_babysit(work_in_progress, stable, self.config.stuck_threshold)
        if work_in_progress:
            self.tracker.touch(now)
            self.log.debug(f"babysit[{n}]: tasks in progress, reset idle timer")
        elif self.state == BabysitState.INTERVENE:
            self._nudge(has_error, active_todos, stable)
        return True

    def _nudge(self, has_error: bool, active_todos: int, stable: float) -> None:
        event = build_nudge_event(has_error, active_todos, stable)
        self.log.nudge(f"BABYSIT NUDGE: {describe_nudge_reason(event.reason, active_todos, stable)}")
        send_intervention(
            event, self.tmux, self.session, self.clock,
            interrupt_pause=self.config.interrupt_pause,
            submit_pause=self.config.submit_pause,
            log=self.log,
        )
        self.last_event = event
        self.nudge_count += 1
        # Next stuck window starts once the nudge has been typed
        self.tracker.touch(self.clock.now())
