"""
Exception hierarchy for Infinite Claude.

Adapter calls report failure through return values; these exceptions mark
the places where a failure has to change control flow (a capture that came
back empty, a bad setting, a missing executable).
"""


class InfiniteClaudeError(Exception):
    """Base class for all Infinite Claude errors."""


class TmuxNotFoundError(InfiniteClaudeError):
    """tmux executable is not installed or not on PATH."""


class ClaudeNotFoundError(InfiniteClaudeError):
    """claude executable is not installed or not on PATH."""


class CaptureError(InfiniteClaudeError):
    """Pane content could not be captured."""

    def __init__(self, session: str, reason: str = "capture failed"):
        self.session = session
        self.reason = reason
        super().__init__(f"Cannot capture session '{session}': {reason}")


class ConfigError(InfiniteClaudeError):
    """A configuration value is invalid."""


class SessionError(InfiniteClaudeError):
    """The tmux session could not be created or used."""

    def __init__(self, session: str, reason: str):
        self.session = session
        self.reason = reason
        super().__init__(f"Session '{session}': {reason}")
