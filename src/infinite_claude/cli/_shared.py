"""
Shared CLI state: Typer apps, console, options, and utilities.
"""

import os
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from rich import print as rprint
from rich.console import Console

from ..config import get_configured_session, get_monitor_overrides, load_config
from ..daemon_logging import BaseDaemonLogger
from ..exceptions import ConfigError
from ..settings import (
    DEFAULT_DEBUG_FILE,
    DEFAULT_SESSION_NAME,
    ENV_SESSION_NAME,
    MonitorConfig,
    ensure_session_dir,
    get_env_overrides,
    get_log_path,
)

# Main app
app = typer.Typer(
    name="infinite-claude",
    help="Keep a Claude Code session in tmux working unattended",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Config subcommand group
config_app = typer.Typer(
    name="config",
    help="Manage configuration",
    no_args_is_help=False,
    invoke_without_command=True,
)
app.add_typer(config_app, name="config")

# Console for rich output
console = Console()

# Session option shared by commands
SessionOption = Annotated[
    Optional[str],
    typer.Option(
        "--session",
        "-s",
        help="tmux session name (default: $CLAUDE_SESSION_NAME or claude-code)",
    ),
]


def resolve_session(session: Optional[str]) -> str:
    """CLI flag, then $CLAUDE_SESSION_NAME, then config file, then default."""
    if session:
        return session
    return os.environ.get(ENV_SESSION_NAME) or get_configured_session() or DEFAULT_SESSION_NAME


def build_config(**cli_overrides: Any) -> MonitorConfig:
    """Merge defaults, config.yaml, environment and CLI flags.

    Exits with status 1 on an invalid value.
    """
    try:
        config = MonitorConfig().with_overrides(**get_monitor_overrides(load_config()))
        config = config.with_overrides(**get_env_overrides())
        return config.with_overrides(**cli_overrides).validate()
    except ConfigError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def make_logger(session: str, debug: bool, debug_file: Optional[Path]) -> BaseDaemonLogger:
    ensure_session_dir(session)
    return BaseDaemonLogger(
        log_file=get_log_path(session),
        debug_file=(debug_file or DEFAULT_DEBUG_FILE) if debug else None,
    )
