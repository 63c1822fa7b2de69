"""
Intervention delivery.

Both monitors end up doing the same thing: optionally press Ctrl-C, type
some text, press Enter. deliver() does that and never raises; a failed
keystroke is logged and the monitor carries on to its next poll.
"""

import threading
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from .daemon_logging import BaseDaemonLogger
from .protocols import Clock, TmuxInterface


class InterventionReason(str, Enum):
    IDLE_TIMEOUT = "idle_timeout"
    STUCK_TIMEOUT = "stuck_timeout"
    ERROR_STATE = "error_state"
    PENDING_TODOS = "pending_todos"


# Keystroke sequences from the two monitors must not interleave. This does
# not deduplicate: two monitors firing together still send two interventions.
DELIVERY_LOCK = threading.Lock()


@dataclass
class InterventionEvent:
    """What was sent to the session and why. Used for logging only."""
    reason: InterventionReason
    text: str = ""
    interrupt: bool = False
    stable_seconds: float = 0.0
    delivered: bool = False
    sent_at: datetime = field(default_factory=datetime.now)

    @property
    def bare_submit(self) -> bool:
        return not self.text

    def describe(self) -> str:
        parts = []
        if self.interrupt:
            parts.append("Ctrl-C")
        parts.append(f"'{self.text}'" if self.text else "Enter")
        action = " + ".join(parts)
        outcome = "sent" if self.delivered else "FAILED"
        return (
            f"{self.reason.value}: {action} after {self.stable_seconds:.0f}s "
            f"unchanged ({outcome})"
        )


def _call(log: Optional[BaseDaemonLogger], label: str, fn, *args) -> bool:
    try:
        ok = fn(*args)
    except Exception as e:
        # The adapter contract is bool-returning, but a misbehaving one
        # must not kill the monitor thread
        if log:
            log.warn(f"{label} raised: {e}")
        return False
    if not ok and log:
        log.warn(f"{label} failed")
    return bool(ok)


def deliver(
    tmux: TmuxInterface,
    session: str,
    text: str,
    clock: Clock,
    interrupt: bool = False,
    interrupt_pause: float = 1.0,
    submit_pause: float = 1.0,
    log: Optional[BaseDaemonLogger] = None,
    lock: Optional[threading.Lock] = None,
) -> bool:
    """Send [Ctrl-C, pause,] [text, pause,] Enter to the session.

    Args:
        tmux: Session adapter
        session: Target session name
        text: Text to type; empty means just press Enter
        clock: Supplies the pauses between keystrokes
        interrupt: Press Ctrl-C first to cancel whatever is running
        log: Logger for delivery failures
        lock: Serializes whole sequences (default: DELIVERY_LOCK)

    Returns:
        True if every keystroke was accepted by tmux
    """
    with lock or DELIVERY_LOCK:
        if interrupt:
            if not _call(log, "Sending Ctrl-C", tmux.send_interrupt, session):
                return False
            clock.pause(interrupt_pause)

        if text:
            if not _call(log, "Sending text", tmux.send_text, session, text):
                return False
            clock.pause(submit_pause)

        return _call(log, "Sending Enter", tmux.send_submit, session)


def send_intervention(
    event: InterventionEvent,
    tmux: TmuxInterface,
    session: str,
    clock: Clock,
    interrupt_pause: float = 1.0,
    submit_pause: float = 1.0,
    log: Optional[BaseDaemonLogger] = None,
) -> InterventionEvent:
    """Deliver an event, record the outcome on it and log it."""
    event.delivered = deliver(
        tmux, session, event.text, clock,
        interrupt=event.interrupt,
        interrupt_pause=interrupt_pause,
        submit_pause=submit_pause,
        log=log,
    )
    if log:
        if event.delivered:
            log.nudge(event.describe())
        else:
            log.error(event.describe())
    return event
