"""
Settings, defaults and state paths for Infinite Claude.

Everything tunable about the monitors lives in MonitorConfig. Values are
resolved in order: built-in defaults, ~/.infinite-claude/config.yaml,
environment variables, then CLI flags.
"""

import math
import os
from dataclasses import dataclass, replace
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Optional

from .exceptions import ConfigError


DEFAULT_SESSION_NAME = "claude-code"
DEFAULT_CONTINUE_PROMPT = "Continue"
DEFAULT_DEBUG_FILE = Path("/tmp/infinite-claude-debug.log")


@dataclass(frozen=True)
class MonitorConfig:
    """Immutable configuration shared by both monitors.

    Times are in seconds except idle_timeout_minutes, which accepts
    fractions (0.5 = 30 seconds) to match the CLI flag.
    """

    # Auto-submit monitor
    poll_interval: float = 5.0
    idle_timeout_minutes: float = 1.0
    settle_interval: float = 10.0
    continue_prompt: str = DEFAULT_CONTINUE_PROMPT
    auto_submit: bool = True

    # Babysit monitor
    babysit_poll_interval: float = 300.0
    stuck_threshold: float = 900.0
    max_runtime: float = 28800.0  # 8 hours

    # Intervention delivery
    interrupt_pause: float = 1.0
    submit_pause: float = 1.0

    @property
    def idle_timeout_seconds(self) -> int:
        return idle_timeout_to_seconds(self.idle_timeout_minutes)

    def with_overrides(self, **overrides: Any) -> "MonitorConfig":
        """Return a copy with the non-None overrides applied."""
        values = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **values)

    def validate(self) -> "MonitorConfig":
        """Check value ranges, raising ConfigError on the first bad one."""
        if self.poll_interval <= 0:
            raise ConfigError(f"poll interval must be positive (got {self.poll_interval})")
        if self.babysit_poll_interval <= 0:
            raise ConfigError(
                f"babysit poll interval must be positive (got {self.babysit_poll_interval})"
            )
        if self.idle_timeout_minutes <= 0:
            raise ConfigError(
                f"auto-submit timeout must be positive (got {self.idle_timeout_minutes})"
            )
        if self.stuck_threshold <= 0:
            raise ConfigError(f"stuck threshold must be positive (got {self.stuck_threshold})")
        if self.max_runtime <= 0:
            raise ConfigError(f"max runtime must be positive (got {self.max_runtime})")
        if self.settle_interval < 0:
            raise ConfigError(f"settle interval cannot be negative (got {self.settle_interval})")
        return self


def idle_timeout_to_seconds(minutes: float) -> int:
    """Convert a fractional-minute timeout to whole seconds.

    Floors the decimal product (2.05 minutes is 123 seconds) and never
    returns less than one second.
    """
    seconds = math.floor(Decimal(str(minutes)) * 60)
    return max(1, seconds)


# Environment variables understood by the launcher
ENV_SESSION_NAME = "CLAUDE_SESSION_NAME"
ENV_CHECK_INTERVAL = "CLAUDE_CHECK_INTERVAL"
ENV_STATE_DIR = "INFINITE_CLAUDE_STATE_DIR"
ENV_TMUX_SOCKET = "INFINITE_CLAUDE_TMUX_SOCKET"


def get_env_overrides(environ: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """Read MonitorConfig overrides from the environment.

    Raises:
        ConfigError: If a variable is set but not a number
    """
    env = os.environ if environ is None else environ
    overrides: Dict[str, Any] = {}
    raw = env.get(ENV_CHECK_INTERVAL)
    if raw:
        try:
            overrides["poll_interval"] = float(raw)
        except ValueError:
            raise ConfigError(f"{ENV_CHECK_INTERVAL} must be a number (got {raw!r})")
    return overrides


# =============================================================================
# State paths
# =============================================================================

def get_state_dir() -> Path:
    """Base directory for config and logs.

    Honours INFINITE_CLAUDE_STATE_DIR so tests never touch ~/.infinite-claude.
    """
    state_dir = os.environ.get(ENV_STATE_DIR)
    if state_dir:
        return Path(state_dir)
    return Path.home() / ".infinite-claude"


def get_session_dir(session: str) -> Path:
    return get_state_dir() / "sessions" / session


def ensure_session_dir(session: str) -> Path:
    session_dir = get_session_dir(session)
    session_dir.mkdir(parents=True, exist_ok=True)
    return session_dir


def get_log_path(session: str) -> Path:
    return get_session_dir(session) / "monitor.log"
