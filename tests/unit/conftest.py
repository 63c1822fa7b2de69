"""
Unit test configuration for infinite-claude.

Every unit test gets its own state directory so nothing touches the
user's ~/.infinite-claude.
"""

import pytest


@pytest.fixture(autouse=True)
def isolated_state_dir(tmp_path, monkeypatch):
    """Point INFINITE_CLAUDE_STATE_DIR at a temp directory."""
    state_dir = tmp_path / "state"
    monkeypatch.setenv("INFINITE_CLAUDE_STATE_DIR", str(state_dir))
    monkeypatch.delenv("CLAUDE_SESSION_NAME", raising=False)
    monkeypatch.delenv("CLAUDE_CHECK_INTERVAL", raising=False)
    monkeypatch.delenv("INFINITE_CLAUDE_TMUX_SOCKET", raising=False)
    return state_dir
