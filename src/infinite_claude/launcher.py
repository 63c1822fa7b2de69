"""
Launcher for the supervised Claude Code session.

Starts (or resumes) the tmux session, sends the initial prompt, starts the
babysit and auto-submit monitors on background threads and attaches the
operator. Monitors keep running after the operator detaches.

All prompts are sent as keystrokes after Claude starts, not as CLI
arguments, so the operator can take over at any time.
"""

from dataclasses import dataclass
from typing import List, Optional

from .auto_submit import AutoSubmitMonitor
from .babysit import BabysitMonitor
from .daemon_logging import BaseDaemonLogger
from .exceptions import CaptureError, SessionError
from .fingerprint import STABILITY_WINDOW, STATUS_WINDOW, TODO_WINDOW, capture, digest
from .implementations import RealTmux
from .monitor_core import choose_resume_prompt
from .protocols import Clock, TmuxInterface
from .scheduler import PeriodicTask, SystemClock
from .settings import MonitorConfig
from .stability import StabilityTracker
from .status_patterns import ActivityClassifier


CLAUDE_PROCESS_PATTERN = "claude"

SESSION_CREATE_TIMEOUT = 30   # seconds for tmux to report the session
CLAUDE_START_TIMEOUT = 60     # seconds for the claude process to appear
CLAUDE_START_POLL = 2
KILL_SETTLE = 2

PROMPT_MAX_RETRIES = 3
PROMPT_SUBMIT_DELAY = 5       # between typing the prompt and pressing Enter
PROMPT_RETRY_DELAY = 5


def build_claude_command(model: Optional[str] = None) -> List[str]:
    cmd = ["claude", "--dangerously-skip-permissions"]
    if model:
        cmd.extend(["--model", model])
    return cmd


@dataclass
class LaunchOptions:
    """What the operator asked for on the command line."""
    initial_prompt: str
    work_dir: Optional[str] = None
    wait_time_minutes: float = 1.0
    model: Optional[str] = None
    force: bool = False


class SessionLauncher:
    """Owns the supervised session and its two monitors."""

    def __init__(
        self,
        session: str,
        config: MonitorConfig,
        log: BaseDaemonLogger,
        tmux: Optional[TmuxInterface] = None,
        clock: Optional[Clock] = None,
        classifier: Optional[ActivityClassifier] = None,
    ):
        """Initialize the launcher.

        Args:
            session: tmux session name
            config: Monitor settings
            log: Shared logger
            tmux: Optional adapter for dependency injection (testing)
            clock: Optional clock for dependency injection (testing)
            classifier: Optional activity heuristics shared by both monitors
        """
        self.session = session
        self.config = config
        self.log = log
        self.tmux = tmux if tmux else RealTmux()
        self.clock = clock if clock else SystemClock()
        self.classifier = classifier or ActivityClassifier()
        self.monitors: List[PeriodicTask] = []

    # -------------------------------------------------------------------------
    # Session lifecycle
    # -------------------------------------------------------------------------

    def kill_session(self) -> None:
        self.log.info(f"Killing existing session '{self.session}'...")
        self.tmux.kill_session(self.session)
        self.clock.pause(KILL_SETTLE)

    def is_claude_running(self) -> bool:
        if not self.tmux.has_session(self.session):
            return False
        return self.tmux.process_alive(self.session, CLAUDE_PROCESS_PATTERN)

    def start_session(self, work_dir: Optional[str] = None, model: Optional[str] = None) -> bool:
        """Create the session and wait for Claude to boot.

        Returns:
            False if tmux never reported the session. A Claude that is slow
            to appear only produces a warning.
        """
        if model:
            self.log.info(f"Using model: {model}")
        self.log.info(f"Starting new tmux session '{self.session}' with Claude Code...")

        if not self.tmux.new_session(self.session, cwd=work_dir, command=build_claude_command(model)):
            self.log.error(f"tmux refused to create session '{self.session}'")
            return False

        waited = 0
        while not self.tmux.has_session(self.session):
            if waited >= SESSION_CREATE_TIMEOUT:
                self.log.error("Failed to create tmux session")
                return False
            self.clock.pause(1)
            waited += 1

        self.log.info("Waiting for Claude Code to initialize...")
        waited = 0
        while waited < CLAUDE_START_TIMEOUT:
            if self.is_claude_running():
                self.log.success("Claude Code is running!")
                return True
            self.clock.pause(CLAUDE_START_POLL)
            waited += CLAUDE_START_POLL
            self.log.info(f"Still waiting... ({waited}s)")

        self.log.warn("Timed out waiting for Claude Code, but continuing...")
        return True

    def send_prompt(self, prompt: str) -> bool:
        """Type a prompt and submit it, retrying on tmux errors."""
        for attempt in range(1, PROMPT_MAX_RETRIES + 1):
            self.log.info(
                f"Sending prompt to session '{self.session}' (attempt {attempt}/{PROMPT_MAX_RETRIES})..."
            )
            if self.tmux.send_text(self.session, prompt):
                self.log.info(f"Waiting {PROMPT_SUBMIT_DELAY} seconds before submitting...")
                self.clock.pause(PROMPT_SUBMIT_DELAY)
                if self.tmux.send_submit(self.session):
                    self.log.success("Prompt submitted successfully!")
                    return True

            if attempt < PROMPT_MAX_RETRIES:
                self.log.warn(f"Failed to send prompt, retrying in {PROMPT_RETRY_DELAY}s...")
                self.clock.pause(PROMPT_RETRY_DELAY)

        self.log.error(f"Failed to send prompt after {PROMPT_MAX_RETRIES} attempts")
        return False

    def wait_for_idle(self, wait_minutes: float) -> bool:
        """Watch an existing session for `wait_minutes`.

        Returns:
            True if the pane stayed unchanged with no task in progress for
            the whole window, False as soon as it changes or looks busy.
        """
        wait_seconds = wait_minutes * 60
        tracker = StabilityTracker(self.clock.now())
        first = True
        while True:
            if not self.tmux.has_session(self.session):
                return False
            try:
                content = capture(self.tmux, self.session, STABILITY_WINDOW)
                status_text = capture(self.tmux, self.session, STATUS_WINDOW)
            except CaptureError as e:
                self.log.debug(f"wait_for_idle: {e}")
                return False

            now = self.clock.now()
            changed = tracker.observe(digest(content), now)
            if changed and not first:
                self.log.debug("wait_for_idle: content CHANGED, session is active")
                return False
            first = False
            if self.classifier.has_work_in_progress(status_text):
                self.log.debug("wait_for_idle: tasks in progress, not idle")
                return False

            stable = tracker.stable_for(now)
            self.log.debug(f"wait_for_idle: stable for {stable:.0f}s of {wait_seconds:.0f}s")
            if stable >= wait_seconds:
                return True
            self.clock.pause(min(self.config.poll_interval, wait_seconds - stable))

    def _has_active_todos(self) -> bool:
        try:
            text = capture(self.tmux, self.session, TODO_WINDOW)
        except CaptureError as e:
            self.log.debug(f"todo check: {e}")
            return False
        return self.classifier.count_active_todos(text) > 0

    def prepare(self, options: LaunchOptions) -> None:
        """Get a live session with a prompt submitted.

        Raises:
            SessionError: If the session is busy, cannot be created, or the
                prompt could not be delivered
        """
        if options.force and self.tmux.has_session(self.session):
            self.log.info("Force restart requested, killing existing session...")
            self.kill_session()

        if self.tmux.has_session(self.session):
            self.log.info(f"Session '{self.session}' exists")
            if not self.is_claude_running():
                self.log.warn("Claude is not running in the session, restarting...")
                self.kill_session()
            else:
                self._resume_existing(options)
                return

        if options.work_dir:
            self.log.info(f"Working directory: {options.work_dir}")
        if not self.start_session(options.work_dir, options.model):
            raise SessionError(self.session, "failed to start session")
        if not self.send_prompt(options.initial_prompt):
            self.log.error("Session is running but prompt was not sent")
            self.log.error(f"Attach manually to continue: tmux attach -t {self.session}")
            raise SessionError(self.session, "failed to send initial prompt")

    def _resume_existing(self, options: LaunchOptions) -> None:
        self.log.info(
            f"Checking whether session is idle (watching for {options.wait_time_minutes:g} minutes)..."
        )
        if not self.wait_for_idle(options.wait_time_minutes):
            self.log.warn(f"Session is active (less than {options.wait_time_minutes:g} minutes idle)")
            self.log.info("Wait for it to become idle, use --force to restart, or attach manually:")
            self.log.info(f"  tmux attach -t {self.session}")
            raise SessionError(self.session, "session is active")

        self.log.info(f"Session is idle (inactive for {options.wait_time_minutes:g}+ minutes)")
        has_todos = self._has_active_todos()
        prompt = choose_resume_prompt(options.initial_prompt, self.config.continue_prompt, has_todos)
        if prompt == self.config.continue_prompt:
            self.log.info(f"Using continue prompt: {prompt}")
        elif has_todos:
            self.log.info("Claude has active todo items, sending reminder...")
        if not self.send_prompt(prompt):
            self.log.error("Failed to send prompt, try attaching manually")
            raise SessionError(self.session, "failed to send prompt")

    # -------------------------------------------------------------------------
    # Monitors
    # -------------------------------------------------------------------------

    def create_monitors(self) -> List[PeriodicTask]:
        monitors: List[PeriodicTask] = [
            BabysitMonitor(self.tmux, self.session, self.config, self.log,
                           classifier=self.classifier, clock=self.clock),
        ]
        if self.config.auto_submit:
            monitors.append(
                AutoSubmitMonitor(self.tmux, self.session, self.config, self.log,
                                  classifier=self.classifier, clock=self.clock)
            )
        return monitors

    def start_monitors(self) -> List[PeriodicTask]:
        """Start babysit (always) and auto-submit (if enabled) in the background."""
        self.monitors = self.create_monitors()
        for monitor in self.monitors:
            monitor.start()
            self.log.info(f"{monitor.name} running in background")
        return self.monitors

    def stop_monitors(self, timeout: Optional[float] = 5.0) -> None:
        for monitor in self.monitors:
            monitor.stop(timeout=timeout)

    def wait_for_monitors(self) -> None:
        """Block until every monitor has stopped; Ctrl-C stops them."""
        try:
            for monitor in self.monitors:
                while monitor.is_running:
                    monitor.join(timeout=1.0)
        except KeyboardInterrupt:
            self.log.info("Interrupted, stopping monitors...")
            self.stop_monitors()

    def supervise(self, attach: bool = True) -> int:
        self.start_monitors()
        if attach:
            self.log.success("Session ready! Attaching...")
            self.log.info("Detach with: Ctrl+b, then d")
            self.log.mute_console()
            try:
                self.tmux.attach(self.session)
            finally:
                self.log.unmute_console()

        if any(m.is_running for m in self.monitors):
            self.log.info("Monitors still running. Press Ctrl+C to stop supervising.")
            self.wait_for_monitors()
        return 0

    def launch(self, options: LaunchOptions, attach: bool = True) -> int:
        """Full start flow. Raises SessionError if the session cannot be used."""
        self.log.section("Infinite Claude")
        self.prepare(options)
        return self.supervise(attach=attach)

    def monitor_only(self) -> int:
        """Run the auto-submit monitor in the foreground on an existing session."""
        if not self.tmux.has_session(self.session):
            self.log.error(f"Session '{self.session}' does not exist")
            self.log.info("Start a session first, then run with monitor")
            raise SessionError(self.session, "does not exist")

        self.log.info(f"Monitor mode: watching session '{self.session}' for inactivity")
        self.log.info("Press Ctrl+C to stop monitoring")
        monitor = AutoSubmitMonitor(self.tmux, self.session, self.config, self.log,
                                    classifier=self.classifier, clock=self.clock)
        self.monitors = [monitor]
        try:
            monitor.run()
        except KeyboardInterrupt:
            monitor.stop()
        return 0
