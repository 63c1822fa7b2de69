"""
CLI interface for Infinite Claude using Typer.
"""

# Import shared state (apps, options, utilities) first
from ._shared import app, config_app, build_config, SessionOption  # noqa: F401

# Import submodules to register their commands with the Typer apps
from . import session  # noqa: F401
from . import config  # noqa: F401


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
