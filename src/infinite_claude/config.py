"""
User configuration file support.

Reads ~/.infinite-claude/config.yaml. A missing or malformed file is
treated as empty so a broken config never stops a supervised session
from starting; bad values inside a well-formed file are reported.
"""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .exceptions import ConfigError
from .settings import get_state_dir


def get_config_path() -> Path:
    return get_state_dir() / "config.yaml"


CONFIG_TEMPLATE = """\
# Infinite Claude configuration
# Location: ~/.infinite-claude/config.yaml

# tmux session to create/supervise (CLAUDE_SESSION_NAME overrides)
# session: claude-code

# Claude model passed as --model (haiku, sonnet, opus)
# model: sonnet

# Auto-submit monitor
# auto_submit:
#   enabled: true
#   timeout_minutes: 1        # fractions allowed, e.g. 0.5
#   poll_interval: 5          # seconds (CLAUDE_CHECK_INTERVAL overrides)
#   settle_interval: 10       # seconds to wait after submitting
#   continue_prompt: "Continue"

# Babysit monitor
# babysit:
#   poll_interval: 300        # seconds
#   stuck_threshold: 900      # seconds of unchanged output before a nudge
#   max_runtime: 28800        # seconds before the monitor stops itself
"""


def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load the YAML config file.

    Returns:
        Config dict, or an empty dict if the file is missing, invalid,
        or does not contain a mapping.
    """
    config_path = path or get_config_path()
    if not config_path.exists():
        return {}
    try:
        with open(config_path) as f:
            data = yaml.safe_load(f)
    except (yaml.YAMLError, OSError):
        return {}
    if not isinstance(data, dict):
        return {}
    return data


# yaml key -> MonitorConfig field, per section
_AUTO_SUBMIT_KEYS = {
    "enabled": "auto_submit",
    "timeout_minutes": "idle_timeout_minutes",
    "poll_interval": "poll_interval",
    "settle_interval": "settle_interval",
    "continue_prompt": "continue_prompt",
}

_BABYSIT_KEYS = {
    "poll_interval": "babysit_poll_interval",
    "stuck_threshold": "stuck_threshold",
    "max_runtime": "max_runtime",
}


def _coerce(section: str, key: str, field_name: str, value: Any) -> Any:
    if field_name == "auto_submit":
        if not isinstance(value, bool):
            raise ConfigError(f"{section}.{key} must be true or false (got {value!r})")
        return value
    if field_name == "continue_prompt":
        return "" if value is None else str(value)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{section}.{key} must be a number (got {value!r})")
    return float(value)


def get_monitor_overrides(config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Translate the auto_submit/babysit sections into MonitorConfig fields.

    Raises:
        ConfigError: If a known key has a value of the wrong type
    """
    if config is None:
        config = load_config()

    overrides: Dict[str, Any] = {}
    for section, mapping in (("auto_submit", _AUTO_SUBMIT_KEYS), ("babysit", _BABYSIT_KEYS)):
        values = config.get(section) or {}
        if not isinstance(values, dict):
            raise ConfigError(f"'{section}' must be a mapping")
        for key, field_name in mapping.items():
            if key in values:
                overrides[field_name] = _coerce(section, key, field_name, values[key])
    return overrides


def get_configured_session(config: Optional[Dict[str, Any]] = None) -> Optional[str]:
    if config is None:
        config = load_config()
    session = config.get("session")
    return str(session) if session else None


def get_configured_model(config: Optional[Dict[str, Any]] = None) -> Optional[str]:
    if config is None:
        config = load_config()
    model = config.get("model")
    return str(model) if model else None
