"""
Auto-submit monitor.

Watches the session on a short interval and, once the pane has been
unchanged for the idle timeout with no task in progress, types the
continue prompt (or just presses Enter). Cycles
WATCHING -> STABLE_COUNTDOWN -> TRIGGERED -> WATCHING until stopped.
"""

from typing import Optional

from .daemon_logging import BaseDaemonLogger
from .exceptions import CaptureError
from .fingerprint import STABILITY_WINDOW, STATUS_WINDOW, capture, digest
from .intervention import InterventionEvent, send_intervention
from .monitor_core import (
    AutoSubmitState,
    build_continue_event,
    decide_auto_submit,
    should_report_countdown,
)
from .protocols import Clock, TmuxInterface
from .scheduler import PeriodicTask
from .settings import MonitorConfig
from .stability import StabilityTracker
from .status_patterns import ActivityClassifier


class AutoSubmitMonitor(PeriodicTask):
    """Nudges a momentarily idle session with the continue prompt."""

    name = "AutoSubmitMonitor"

    def __init__(
        self,
        tmux: TmuxInterface,
        session: str,
        config: MonitorConfig,
        log: BaseDaemonLogger,
        classifier: Optional[ActivityClassifier] = None,
        clock: Optional[Clock] = None,
    ):
        super().__init__(config.poll_interval, clock)
        self.tmux = tmux
        self.session = session
        self.config = config
        self.timeout_seconds = config.idle_timeout_seconds
        self.log = log
        self.classifier = classifier or ActivityClassifier()
        self.tracker = StabilityTracker(self.clock.now())
        self.state = AutoSubmitState.WATCHING
        self.check_count = 0
        self.trigger_count = 0
        self.last_event: Optional[InterventionEvent] = None

    def on_start(self) -> None:
        self.tracker.reset(self.clock.now())
        self.log.info(
            f"Starting auto-submit monitor (timeout: {self.config.idle_timeout_minutes}m, "
            f"check interval: {self.config.poll_interval:g}s)"
        )
        self.log.debug(
            f"auto_submit: started, timeout={self.timeout_seconds}s, "
            f"check_interval={self.config.poll_interval:g}s"
        )

    def on_stop(self) -> None:
        self.log.info(
            f"Auto-submit monitor stopped after {self.check_count} checks "
            f"({self.trigger_count} auto-submits)"
        )

    def tick(self) -> bool:
        self.check_count += 1
        n = self.check_count

        if not self.tmux.has_session(self.session):
            self.log.warn(f"Auto-submit monitor: session '{self.session}' not found, stopping")
            self.log.debug(f"auto_submit[{n}]: session gone, exiting")
            return False

        try:
            content = capture(self.tmux, self.session, STABILITY_WINDOW)
        except CaptureError as e:
            self.log.warn(f"Auto-submit check #{n}: {e}, skipping")
            return True

        now = self.clock.now()
        current = digest(content)
        previous = self.tracker.last_digest
        changed = self.tracker.observe(current, now)
        self.log.debug(f"auto_submit[{n}]: hash={current}, last_hash={previous or ''}")

        work_in_progress = False
        if not changed:
            try:
                work_in_progress = self._has_work_in_progress()
            except CaptureError as e:
                self.log.warn(f"Auto-submit check #{n}: {e} (status window), skipping")
                return True
            if work_in_progress:
                self.tracker.touch(now)

        stable = self.tracker.stable_for(now)
        self.state = decide_auto_submit(changed, work_in_progress, stable, self.timeout_seconds)

        if changed:
            self.log.debug(f"auto_submit[{n}]: content CHANGED, reset stable timer")
        elif work_in_progress:
            self.log.debug(f"auto_submit[{n}]: tasks in progress, reset stable timer")
        elif self.state == AutoSubmitState.TRIGGERED:
            self._trigger(stable)
            return True
        else:
            self.log.debug(f"auto_submit[{n}]: stable for {stable:.0f}s (need {self.timeout_seconds}s)")
            if should_report_countdown(stable, self.timeout_seconds, self.config.poll_interval):
                remaining = self.timeout_seconds - stable
                self.log.info(f"Content stable for {stable:.0f}s - will auto-submit in {remaining:.0f}s")
        return True

    def _has_work_in_progress(self) -> bool:
        status_text = capture(self.tmux, self.session, STATUS_WINDOW)
        return self.classifier.has_work_in_progress(status_text)

    def _trigger(self, stable: float) -> None:
        event = build_continue_event(self.config.continue_prompt, stable)
        self.log.debug(
            f"auto_submit[{self.check_count}]: TRIGGERING "
            + (f"with continue prompt: {event.text}" if event.text else "bare Enter")
        )
        send_intervention(
            event, self.tmux, self.session, self.clock,
            submit_pause=self.config.submit_pause,
            log=self.log,
        )
        self.last_event = event
        self.trigger_count += 1

        # Forget the digest so the reply (or the lack of one) is timed from
        # scratch, then give Claude time to start responding
        self.tracker.reset(self.clock.now())
        self.state = AutoSubmitState.WATCHING
        self.log.debug(f"auto_submit[{self.check_count}]: sent, settling {self.config.settle_interval:g}s")
        self.wait(self.config.settle_interval)
