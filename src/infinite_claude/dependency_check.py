"""
Checks for the external programs a supervised session needs.

Both tmux and the claude CLI must be on PATH before a session is started;
monitoring an existing session only needs tmux.
"""

import shutil
import subprocess
from typing import List, Optional, Tuple

from .exceptions import ClaudeNotFoundError, TmuxNotFoundError


def find_executable(name: str) -> Optional[str]:
    return shutil.which(name)


def _probe_version(cmd: List[str], timeout: int) -> Optional[str]:
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout)
    except (subprocess.SubprocessError, OSError):
        return None
    if result.returncode != 0:
        return None
    return result.stdout.strip() or None


def check_tmux() -> Tuple[bool, Optional[str], Optional[str]]:
    """Check if tmux is available and get its version.

    Returns:
        Tuple of (is_available, path, version)
    """
    path = find_executable("tmux")
    if not path:
        return False, None, None
    return True, path, _probe_version(["tmux", "-V"], timeout=5)


def check_claude() -> Tuple[bool, Optional[str], Optional[str]]:
    """Check if Claude Code CLI is available and get its version.

    Returns:
        Tuple of (is_available, path, version)
    """
    path = find_executable("claude")
    if not path:
        return False, None, None
    return True, path, _probe_version(["claude", "--version"], timeout=10)


def require_tmux() -> str:
    """Ensure tmux is available.

    Raises:
        TmuxNotFoundError: If tmux is not found
    """
    available, path, _ = check_tmux()
    if not available:
        raise TmuxNotFoundError(
            "tmux is required but not found. "
            "Install it with: brew install tmux (macOS) or apt install tmux (Linux)"
        )
    return path


def require_claude() -> str:
    """Ensure Claude Code CLI is available.

    Raises:
        ClaudeNotFoundError: If claude is not found
    """
    available, path, _ = check_claude()
    if not available:
        raise ClaudeNotFoundError(
            "Claude Code CLI is required but not found. "
            "Install it from: https://claude.ai/claude-code"
        )
    return path
