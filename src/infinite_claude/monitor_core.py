"""
Pure business logic for the monitors.

These functions contain no I/O and are fully unit-testable.
They are used by AutoSubmitMonitor and BabysitMonitor but can be tested
independently.
"""

from enum import Enum
from typing import Tuple

from .intervention import InterventionEvent, InterventionReason


class AutoSubmitState(str, Enum):
    WATCHING = "watching"
    STABLE_COUNTDOWN = "stable_countdown"
    TRIGGERED = "triggered"


class BabysitState(str, Enum):
    RUNNING = "running"
    OK = "ok"
    INTERVENE = "intervene"
    EXPIRED = "expired"
    SESSION_GONE = "session_gone"


# Recovery wording for the babysit nudge
NUDGE_TEXT_ERROR = (
    "The last step looks like it failed. Read the error above, fix the cause "
    "or try a different approach, then continue working."
)
NUDGE_TEXT_TODOS = "Continue working on your todo items. If stuck, try a different approach."
NUDGE_TEXT_DEFAULT = "Continue working. Pick up the next task from the project directions."

# Sent when resuming an idle existing session that shows open todos
TODO_REMINDER_PROMPT = "Complete your todo items"

PROGRESS_REPORT_EVERY = 30  # seconds of stability between countdown log lines
CHECK_SUMMARY_EVERY = 10    # babysit checks between summary log lines


def decide_auto_submit(
    changed: bool,
    work_in_progress: bool,
    stable_seconds: float,
    timeout_seconds: float,
) -> AutoSubmitState:
    """Next auto-submit state for one poll.

    Pure function - no side effects, fully testable.

    A change or visible work-in-progress always means WATCHING; only
    content that is unchanged, not busy and old enough triggers.
    """
    if changed or work_in_progress:
        return AutoSubmitState.WATCHING
    if stable_seconds >= timeout_seconds:
        return AutoSubmitState.TRIGGERED
    return AutoSubmitState.STABLE_COUNTDOWN


def should_report_countdown(stable_seconds: float, timeout_seconds: float, poll_interval: float) -> bool:
    """Whether to log "will auto-submit in Ns" on this poll.

    Pure function - no side effects, fully testable.

    Fires once per PROGRESS_REPORT_EVERY seconds of stability, on the first
    poll that lands in each window.
    """
    remaining = timeout_seconds - stable_seconds
    if stable_seconds <= 0 or remaining <= 0:
        return False
    return (stable_seconds % PROGRESS_REPORT_EVERY) < poll_interval


def build_continue_event(continue_prompt: str, stable_seconds: float) -> InterventionEvent:
    """Auto-submit intervention: the continue prompt, or bare Enter if unset."""
    return InterventionEvent(
        reason=InterventionReason.IDLE_TIMEOUT,
        text=continue_prompt or "",
        interrupt=False,
        stable_seconds=stable_seconds,
    )


def decide_babysit(work_in_progress: bool, stable_seconds: float, stuck_threshold: float) -> BabysitState:
    """Whether a babysit check should nudge.

    Pure function - no side effects, fully testable.
    """
    if work_in_progress:
        return BabysitState.OK
    if stable_seconds >= stuck_threshold:
        return BabysitState.INTERVENE
    return BabysitState.OK


def is_expired(elapsed_seconds: float, max_runtime: float) -> bool:
    return elapsed_seconds >= max_runtime


def should_log_check(check_count: int) -> bool:
    """Babysit summary lines on checks 1, 11, 21, ..."""
    return check_count % CHECK_SUMMARY_EVERY == 1


def choose_nudge(has_error: bool, active_todos: int) -> Tuple[InterventionReason, str]:
    """Pick the recovery reason and wording from the pane context.

    Pure function - no side effects, fully testable.

    Error state wins over todos; todos win over the generic nudge.
    """
    if has_error:
        return InterventionReason.ERROR_STATE, NUDGE_TEXT_ERROR
    if active_todos > 0:
        return InterventionReason.PENDING_TODOS, NUDGE_TEXT_TODOS
    return InterventionReason.STUCK_TIMEOUT, NUDGE_TEXT_DEFAULT


def describe_nudge_reason(reason: InterventionReason, active_todos: int, stable_seconds: float) -> str:
    minutes = int(stable_seconds // 60)
    if reason == InterventionReason.ERROR_STATE:
        return f"Stuck with error state for {minutes}+ minutes"
    if reason == InterventionReason.PENDING_TODOS:
        return f"Stuck with {active_todos} active todos for {minutes}+ minutes"
    return f"Stuck for {minutes}+ minutes with no active todos"


def build_nudge_event(has_error: bool, active_todos: int, stable_seconds: float) -> InterventionEvent:
    reason, text = choose_nudge(has_error, active_todos)
    return InterventionEvent(
        reason=reason,
        text=text,
        interrupt=True,
        stable_seconds=stable_seconds,
    )


def choose_resume_prompt(initial_prompt: str, continue_prompt: str, has_todos: bool) -> str:
    """Prompt to send when picking up an idle existing session.

    Pure function - no side effects, fully testable.
    """
    if continue_prompt:
        return continue_prompt
    if has_todos:
        return TODO_REMINDER_PROMPT
    return initial_prompt
