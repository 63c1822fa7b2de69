"""
Test fixtures and factories for infinite-claude unit tests.

FakeTmux and FakeClock stand in for the tmux server and wall clock so the
monitors can be driven through hours of polling in virtual time without
a terminal.
"""

import threading
from typing import Callable, Dict, List, Optional, Set, Tuple
from unittest.mock import MagicMock

from infinite_claude.daemon_logging import BaseDaemonLogger


class FakeTmux:
    """Scripted in-memory implementation of TmuxInterface.

    Each session has a current screen; capture_pane returns its last
    `lines` lines. Keystrokes are appended to `sent` as (kind, session,
    payload) tuples.
    """

    def __init__(self, screens: Optional[Dict[str, str]] = None):
        self.screens: Dict[str, str] = dict(screens or {})
        self.sessions = set(self.screens)
        self.claude_running: Dict[str, bool] = {s: True for s in self.sessions}
        self.sent: List[Tuple[str, str, Optional[str]]] = []
        self.created: List[Tuple[str, Optional[str], Optional[List[str]]]] = []
        self.killed: List[str] = []
        self.attached: List[str] = []
        self.capture_calls: List[Tuple[str, int]] = []
        self.fail_captures = False
        # Capture window sizes (line counts) that come back as errors
        self.fail_windows: Set[int] = set()
        self.fail_sends = False
        self.refuse_new_session = False
        # Called with the session name after every accepted keystroke
        self.on_send: Optional[Callable[[str], None]] = None

    def set_screen(self, session: str, text: str) -> None:
        self.screens[session] = text

    def remove_session(self, session: str) -> None:
        self.sessions.discard(session)

    def has_session(self, session: str) -> bool:
        return session in self.sessions

    def capture_pane(self, session: str, lines: int = 100) -> Optional[str]:
        self.capture_calls.append((session, lines))
        if self.fail_captures or session not in self.sessions:
            return None
        if lines in self.fail_windows:
            return None
        text = self.screens.get(session, "")
        return "\n".join(text.splitlines()[-lines:])

    def _record(self, kind: str, session: str, payload: Optional[str] = None) -> bool:
        if self.fail_sends or session not in self.sessions:
            return False
        self.sent.append((kind, session, payload))
        if self.on_send:
            self.on_send(session)
        return True

    def send_text(self, session: str, text: str) -> bool:
        return self._record("text", session, text)

    def send_submit(self, session: str) -> bool:
        return self._record("submit", session)

    def send_interrupt(self, session: str) -> bool:
        return self._record("interrupt", session)

    def new_session(self, session: str, cwd: Optional[str] = None,
                    command: Optional[List[str]] = None) -> bool:
        if self.refuse_new_session:
            return False
        self.created.append((session, cwd, command))
        self.sessions.add(session)
        self.screens.setdefault(session, "Welcome to Claude Code!\n>")
        self.claude_running.setdefault(session, True)
        return True

    def kill_session(self, session: str) -> bool:
        self.killed.append(session)
        if session not in self.sessions:
            return False
        self.sessions.discard(session)
        self.screens.pop(session, None)
        self.claude_running.pop(session, None)
        return True

    def process_alive(self, session: str, pattern: str) -> bool:
        return session in self.sessions and self.claude_running.get(session, False)

    def attach(self, session: str) -> int:
        self.attached.append(session)
        return 0

    def kinds(self) -> List[str]:
        return [kind for kind, _, _ in self.sent]


class FakeClock:
    """Virtual time for the Clock protocol.

    wait() and pause() advance time instantly. If `deadline` is set, wait()
    sets the stop event once time reaches it, which ends a PeriodicTask.run()
    loop. Callbacks registered with at() fire when time passes their moment.
    """

    def __init__(self, start: float = 0.0, deadline: Optional[float] = None):
        self.t = start
        self.deadline = deadline
        self.pauses: List[float] = []
        self.waits: List[float] = []
        self._scheduled: List[Tuple[float, Callable[[], None]]] = []

    def at(self, when: float, fn: Callable[[], None]) -> None:
        self._scheduled.append((when, fn))
        self._scheduled.sort(key=lambda item: item[0])

    def _advance(self, seconds: float) -> None:
        self.t += max(0.0, seconds)
        while self._scheduled and self._scheduled[0][0] <= self.t:
            _, fn = self._scheduled.pop(0)
            fn()

    def now(self) -> float:
        return self.t

    def wait(self, seconds: float, stop_event: threading.Event) -> bool:
        if stop_event.is_set():
            return True
        self.waits.append(seconds)
        self._advance(seconds)
        if self.deadline is not None and self.t >= self.deadline:
            stop_event.set()
        return stop_event.is_set()

    def pause(self, seconds: float) -> None:
        self.pauses.append(seconds)
        self._advance(seconds)


def create_mock_logger() -> MagicMock:
    """Logger double that records calls instead of printing."""
    return MagicMock(spec=BaseDaemonLogger)


def logged(log: MagicMock, method: str) -> List[str]:
    """Messages passed to one logger method, in order."""
    return [c.args[0] for c in getattr(log, method).call_args_list]


# =============================================================================
# Sample pane content
# =============================================================================

PANE_IDLE_PROMPT = """
⏺ I've finished the refactor. All tests pass.

──────────────────────────────────────────────────────────────────────────────
>
──────────────────────────────────────────────────────────────────────────────
  ? for shortcuts
"""

PANE_TASKS_IN_PROGRESS = """
⏺ Running the test suite in the background...

  12 tasks (8 done, 3 in progress, 1 open) · ctrl+t to hide tasks

>
"""

PANE_TASKS_NONE_IN_PROGRESS = """
⏺ Waiting for instructions.

  12 tasks (11 done, 0 in progress, 1 open) · ctrl+t to hide tasks

>
"""

PANE_WITH_TODOS = """
⏺ Update Todos
  ⎿  ☒ Read the config loader
     ◼ Add validation for poll interval
     ◻ Write tests for validation
     ◻ Update the README

>
"""

PANE_WITH_ERROR = """
⏺ Bash(npm run build)
  ⎿  src/index.ts(12,5): compilation error TS2322
     Build failed with 1 error

>
"""
