"""
Session commands: start, monitor.
"""

from pathlib import Path
from typing import Annotated, Optional

import typer
from rich import print as rprint

from ._shared import app, SessionOption, build_config, make_logger, resolve_session


@app.command()
def start(
    prompt: Annotated[
        Optional[str], typer.Argument(help="Initial prompt to send to Claude")
    ] = None,
    pwd: Annotated[
        Optional[Path], typer.Option("--pwd", help="Directory to run Claude Code in (default: current)")
    ] = None,
    wait_time: Annotated[
        int, typer.Option("--wait-time", help="Minutes an existing session must be idle before it is reused")
    ] = 1,
    auto_submit_timeout: Annotated[
        Optional[float],
        typer.Option("--auto-submit-timeout", help="Minutes of inactivity before auto-submitting (fractions allowed)"),
    ] = None,
    no_auto_submit: Annotated[
        bool, typer.Option("--no-auto-submit", help="Disable the auto-submit monitor")
    ] = False,
    continue_prompt: Annotated[
        Optional[str],
        typer.Option("--continue-prompt", help="Prompt sent when the session goes idle ('' = just Enter)"),
    ] = None,
    check_interval: Annotated[
        Optional[float], typer.Option("--check-interval", help="Seconds between auto-submit checks")
    ] = None,
    model: Annotated[
        Optional[str], typer.Option("--model", help="Claude model to use (e.g., haiku, sonnet, opus)")
    ] = None,
    force: Annotated[
        bool, typer.Option("--force", "-f", help="Restart the session even if it exists")
    ] = False,
    debug: Annotated[
        bool, typer.Option("--debug", help="Write per-poll diagnostics to the debug file")
    ] = False,
    debug_file: Annotated[
        Optional[Path], typer.Option("--debug-file", help="Debug file (default: /tmp/infinite-claude-debug.log)")
    ] = None,
    no_attach: Annotated[
        bool, typer.Option("--no-attach", hidden=True, help="Supervise without attaching tmux")
    ] = False,
    session: SessionOption = None,
):
    """Start Claude Code in tmux with babysit and auto-submit monitors.

    Examples:
        infinite-claude start "Refactor to TypeScript"
        infinite-claude start "Refactor to TypeScript" --continue-prompt "Keep working"
        infinite-claude start --pwd ~/project "Add error handling"
        infinite-claude start --debug "Start task"
    """
    from ..config import get_configured_model
    from ..dependency_check import require_claude, require_tmux
    from ..exceptions import ClaudeNotFoundError, SessionError, TmuxNotFoundError
    from ..launcher import LaunchOptions, SessionLauncher

    if not prompt:
        rprint("[red]Error:[/red] No initial prompt provided")
        rprint('[dim]Usage: infinite-claude start [OPTIONS] "INITIAL_PROMPT"[/dim]')
        raise typer.Exit(1)

    if wait_time < 1:
        rprint("[red]Error:[/red] --wait-time must be a positive number")
        raise typer.Exit(1)

    work_dir = (pwd or Path.cwd()).expanduser()
    if not work_dir.is_dir():
        rprint(f"[red]Error:[/red] Directory '{work_dir}' does not exist")
        raise typer.Exit(1)

    try:
        require_tmux()
        require_claude()
    except (TmuxNotFoundError, ClaudeNotFoundError) as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    config = build_config(
        idle_timeout_minutes=auto_submit_timeout,
        continue_prompt=continue_prompt,
        poll_interval=check_interval,
        auto_submit=False if no_auto_submit else None,
    )
    session_name = resolve_session(session)
    log = make_logger(session_name, debug, debug_file)
    log.init_debug_file(
        session_name=session_name,
        auto_submit_timeout=f"{config.idle_timeout_minutes:g} minutes",
        check_interval=f"{config.poll_interval:g} seconds",
        babysit_stuck_threshold=f"{config.stuck_threshold:g} seconds",
    )

    launcher = SessionLauncher(session_name, config, log)
    options = LaunchOptions(
        initial_prompt=prompt,
        work_dir=str(work_dir),
        wait_time_minutes=wait_time,
        model=model or get_configured_model(),
        force=force,
    )
    try:
        code = launcher.launch(options, attach=not no_attach)
    except SessionError as e:
        log.error(str(e))
        raise typer.Exit(1)
    raise typer.Exit(code)


@app.command()
def monitor(
    auto_submit_timeout: Annotated[
        Optional[float],
        typer.Option("--auto-submit-timeout", help="Minutes of inactivity before auto-submitting (fractions allowed)"),
    ] = None,
    continue_prompt: Annotated[
        Optional[str],
        typer.Option("--continue-prompt", help="Prompt sent when the session goes idle ('' = just Enter)"),
    ] = None,
    check_interval: Annotated[
        Optional[float], typer.Option("--check-interval", help="Seconds between checks")
    ] = None,
    debug: Annotated[
        bool, typer.Option("--debug", help="Write per-poll diagnostics to the debug file")
    ] = False,
    debug_file: Annotated[
        Optional[Path], typer.Option("--debug-file", help="Debug file (default: /tmp/infinite-claude-debug.log)")
    ] = None,
    session: SessionOption = None,
):
    """Watch an existing session and auto-submit when it goes idle."""
    from ..dependency_check import require_tmux
    from ..exceptions import SessionError, TmuxNotFoundError
    from ..launcher import SessionLauncher

    try:
        require_tmux()
    except TmuxNotFoundError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    config = build_config(
        idle_timeout_minutes=auto_submit_timeout,
        continue_prompt=continue_prompt,
        poll_interval=check_interval,
    )
    session_name = resolve_session(session)
    log = make_logger(session_name, debug, debug_file)
    log.init_debug_file(
        session_name=session_name,
        auto_submit_timeout=f"{config.idle_timeout_minutes:g} minutes",
        check_interval=f"{config.poll_interval:g} seconds",
    )

    launcher = SessionLauncher(session_name, config, log)
    try:
        code = launcher.monitor_only()
    except SessionError:
        raise typer.Exit(1)
    raise typer.Exit(code)
