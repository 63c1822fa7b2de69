"""
Config commands: init, show, path.
"""

from typing import Annotated

import typer
from rich import print as rprint

from ._shared import config_app


@config_app.callback(invoke_without_command=True)
def config_default(ctx: typer.Context):
    """Show current configuration (default when no subcommand given)."""
    if ctx.invoked_subcommand is None:
        _config_show()


@config_app.command("init")
def config_init(
    force: Annotated[
        bool, typer.Option("--force", "-f", help="Overwrite existing config file")
    ] = False,
):
    """Create a config file with documented defaults.

    Creates ~/.infinite-claude/config.yaml with all options commented out.
    Use --force to overwrite an existing config file.
    """
    from .. import config as config_mod

    path = config_mod.get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    if path.exists() and not force:
        rprint(f"[yellow]Config file already exists:[/yellow] {path}")
        rprint("[dim]Use --force to overwrite[/dim]")
        raise typer.Exit(1)

    path.write_text(config_mod.CONFIG_TEMPLATE)
    rprint(f"[green]✓[/green] Created config file: [bold]{path}[/bold]")
    rprint("[dim]Edit to customize your settings[/dim]")


@config_app.command("show")
def config_show():
    """Show current configuration."""
    _config_show()


def _config_show():
    """Internal function to display current config."""
    from .. import config as config_mod
    from ..exceptions import ConfigError
    from ..settings import MonitorConfig

    path = config_mod.get_config_path()
    if not path.exists():
        rprint(f"[dim]No config file found at {path}[/dim]")
        rprint("[dim]Run 'infinite-claude config init' to create one[/dim]")
        return

    config = config_mod.load_config(path)
    if not config:
        rprint(f"[dim]Config file is empty: {path}[/dim]")
        return

    rprint(f"[bold]Configuration[/bold] ({path}):\n")

    if "session" in config:
        rprint(f"  session: {config['session']}")
    if "model" in config:
        rprint(f"  model: {config['model']}")

    try:
        effective = MonitorConfig().with_overrides(**config_mod.get_monitor_overrides(config))
    except ConfigError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if "auto_submit" in config:
        rprint("  auto_submit:")
        rprint(f"    enabled: {effective.auto_submit}")
        rprint(f"    timeout_minutes: {effective.idle_timeout_minutes:g}")
        rprint(f"    poll_interval: {effective.poll_interval:g}s")
        rprint(f"    settle_interval: {effective.settle_interval:g}s")
        rprint(f"    continue_prompt: \"{effective.continue_prompt}\"")

    if "babysit" in config:
        rprint("  babysit:")
        rprint(f"    poll_interval: {effective.babysit_poll_interval:g}s")
        rprint(f"    stuck_threshold: {effective.stuck_threshold:g}s")
        rprint(f"    max_runtime: {effective.max_runtime:g}s")


@config_app.command("path")
def config_path():
    """Show the config file path."""
    from .. import config as config_mod

    print(config_mod.get_config_path())
