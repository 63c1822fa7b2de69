"""
Content stability tracking.

Pure functions over an immutable StabilityState, plus a small mutable
StabilityTracker that each monitor owns privately. Nothing here reads the
clock or tmux; callers pass `now` and the digest in.
"""

from dataclasses import dataclass, replace
from typing import Optional, Tuple

from .fingerprint import EMPTY_DIGEST


@dataclass(frozen=True)
class StabilityState:
    """Last seen digest and when it last changed."""
    last_digest: str
    last_change_time: float

    @classmethod
    def initial(cls, now: float) -> "StabilityState":
        # Empty digest never equals a real one, so the first observation
        # always counts as a change
        return cls(last_digest=EMPTY_DIGEST, last_change_time=now)


def observe(state: StabilityState, digest: str, now: float) -> Tuple[bool, StabilityState]:
    """Record a new observation.

    Pure function - no side effects, fully testable.

    Returns:
        Tuple of (changed, new_state). The state is returned unchanged
        when the digest matches.
    """
    if digest != state.last_digest:
        return True, StabilityState(last_digest=digest, last_change_time=now)
    return False, state


def stable_duration(state: StabilityState, now: float) -> float:
    """Seconds the content has been unchanged (never negative)."""
    return max(0.0, now - state.last_change_time)


def touch(state: StabilityState, now: float) -> StabilityState:
    """Restart the timer without forgetting the digest."""
    return replace(state, last_change_time=now)


class StabilityTracker:
    """Per-monitor owner of one StabilityState."""

    def __init__(self, now: float):
        self.state = StabilityState.initial(now)

    @property
    def last_digest(self) -> Optional[str]:
        return self.state.last_digest or None

    def observe(self, digest: str, now: float) -> bool:
        changed, self.state = observe(self.state, digest, now)
        return changed

    def stable_for(self, now: float) -> float:
        return stable_duration(self.state, now)

    def touch(self, now: float) -> None:
        self.state = touch(self.state, now)

    def reset(self, now: float) -> None:
        """Forget the digest; the next observation counts as a change."""
        self.state = StabilityState.initial(now)
