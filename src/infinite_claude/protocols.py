"""
Protocol definitions for external dependencies.

These interfaces allow dependency injection for testing, enabling us to
swap the real tmux adapter and the wall clock with scripted fakes.
"""

import threading
from typing import List, Optional, Protocol, runtime_checkable


@runtime_checkable
class TmuxInterface(Protocol):
    """Interface for the tmux session the monitors supervise.

    The session name is the target everywhere: one supervised session per
    process, addressed through its active pane.
    """

    def has_session(self, session: str) -> bool:
        """Check if a tmux session exists."""
        ...

    def capture_pane(self, session: str, lines: int = 100) -> Optional[str]:
        """Capture the last `lines` lines of the session's active pane.

        Returns:
            Pane content as string, or None on failure
        """
        ...

    def send_text(self, session: str, text: str) -> bool:
        """Type text into the pane without submitting it."""
        ...

    def send_submit(self, session: str) -> bool:
        """Press Enter in the pane."""
        ...

    def send_interrupt(self, session: str) -> bool:
        """Press Ctrl-C in the pane."""
        ...

    def new_session(self, session: str, cwd: Optional[str] = None,
                    command: Optional[List[str]] = None) -> bool:
        """Create a detached session running `command` in `cwd`."""
        ...

    def kill_session(self, session: str) -> bool:
        """Kill an entire tmux session."""
        ...

    def process_alive(self, session: str, pattern: str) -> bool:
        """Check whether a child of the pane's shell matches `pattern`."""
        ...

    def attach(self, session: str) -> int:
        """Attach the current terminal; blocks until the operator detaches.

        Returns:
            tmux exit code
        """
        ...


@runtime_checkable
class Clock(Protocol):
    """Time source and sleeper for the polling loops."""

    def now(self) -> float:
        """Monotonic seconds."""
        ...

    def wait(self, seconds: float, stop_event: threading.Event) -> bool:
        """Sleep up to `seconds`; return True if stop_event was set."""
        ...

    def pause(self, seconds: float) -> None:
        """Short uninterruptible delay between keystrokes."""
        ...
