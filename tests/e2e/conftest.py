"""
E2E test fixtures for infinite-claude.

Each test gets its own session on an isolated tmux socket, running `cat`
in place of Claude so typed text is echoed back into the pane.
"""

import subprocess
import uuid

import pytest

from infinite_claude.implementations import RealTmux


# Test tmux socket (isolated from user's tmux)
TEST_TMUX_SOCKET = "infinite-claude-test"


@pytest.fixture
def tmux(check_tmux, tmp_path, monkeypatch):
    """RealTmux bound to the test socket; the server is killed afterwards."""
    monkeypatch.setenv("INFINITE_CLAUDE_STATE_DIR", str(tmp_path / "state"))
    adapter = RealTmux(socket_name=TEST_TMUX_SOCKET)
    yield adapter
    subprocess.run(
        ["tmux", "-L", TEST_TMUX_SOCKET, "kill-server"],
        capture_output=True,
    )


@pytest.fixture
def session(tmux, tmp_path):
    """A fresh session running `cat`."""
    name = f"ic-test-{uuid.uuid4().hex[:8]}"
    assert tmux.new_session(name, cwd=str(tmp_path), command=["cat"])
    yield name
    tmux.kill_session(name)
