"""
Tests for dependency checking.

Tests the dependency_check module which refuses to start a session
when an external executable is missing.
"""

from unittest.mock import MagicMock, patch

import pytest

from infinite_claude.dependency_check import (
    check_claude,
    check_tmux,
    find_executable,
    require_claude,
    require_tmux,
)
from infinite_claude.exceptions import ClaudeNotFoundError, TmuxNotFoundError


class TestFindExecutable:
    def test_finds_existing_executable(self):
        with patch("shutil.which") as mock_which:
            mock_which.return_value = "/usr/bin/tmux"
            assert find_executable("tmux") == "/usr/bin/tmux"

    def test_returns_none_for_missing(self):
        with patch("shutil.which") as mock_which:
            mock_which.return_value = None
            assert find_executable("nonexistent_binary_xyz") is None


class TestCheckTmux:
    def test_tmux_available(self):
        with patch("shutil.which", return_value="/usr/bin/tmux"):
            with patch("subprocess.run") as mock_run:
                mock_run.return_value = MagicMock(returncode=0, stdout="tmux 3.4\n")
                assert check_tmux() == (True, "/usr/bin/tmux", "tmux 3.4")

    def test_tmux_not_found(self):
        with patch("shutil.which", return_value=None):
            assert check_tmux() == (False, None, None)

    def test_version_probe_fails(self):
        with patch("shutil.which", return_value="/usr/bin/tmux"):
            with patch("subprocess.run", side_effect=OSError("exec failed")):
                assert check_tmux() == (True, "/usr/bin/tmux", None)


class TestCheckClaude:
    def test_claude_available(self):
        with patch("shutil.which", return_value="/usr/local/bin/claude"):
            with patch("subprocess.run") as mock_run:
                mock_run.return_value = MagicMock(returncode=0, stdout="1.0.0 (Claude Code)")
                available, path, version = check_claude()
        assert available is True
        assert version == "1.0.0 (Claude Code)"

    def test_nonzero_exit_has_no_version(self):
        with patch("shutil.which", return_value="/usr/local/bin/claude"):
            with patch("subprocess.run", return_value=MagicMock(returncode=1, stdout="")):
                assert check_claude() == (True, "/usr/local/bin/claude", None)


class TestRequire:
    def test_require_tmux_raises(self):
        with patch("shutil.which", return_value=None):
            with pytest.raises(TmuxNotFoundError):
                require_tmux()

    def test_require_claude_raises(self):
        with patch("shutil.which", return_value=None):
            with pytest.raises(ClaudeNotFoundError):
                require_claude()

    def test_require_tmux_returns_path(self):
        with patch("shutil.which", return_value="/usr/bin/tmux"), \
             patch("subprocess.run", return_value=MagicMock(returncode=0, stdout="tmux 3.4")):
            assert require_tmux() == "/usr/bin/tmux"

    def test_require_claude_returns_path(self):
        with patch("shutil.which", return_value="/usr/local/bin/claude"), \
             patch("subprocess.run", return_value=MagicMock(returncode=0, stdout="1.0.0")):
            assert require_claude() == "/usr/local/bin/claude"

    def test_install_hint_in_message(self):
        with patch("shutil.which", return_value=None):
            with pytest.raises(TmuxNotFoundError) as exc_info:
                require_tmux()
        assert "apt install tmux" in str(exc_info.value)
