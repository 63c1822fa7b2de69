"""
Centralized activity detection patterns.

This module contains the pane-text heuristics the monitors use to tell a
busy Claude from an idle or broken one. Centralizing these makes them:
- Easier to maintain and extend
- Testable in isolation
- Swappable: monitors take an ActivityClassifier, so a different
  policy can be injected without touching the polling loops
"""

import re
from dataclasses import dataclass, field
from typing import List, Pattern

# Regex to match ANSI escape sequences (colors, cursor movement, etc.)
ANSI_ESCAPE_PATTERN = re.compile(r'\x1b\[[0-9;]*[a-zA-Z]')


def strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences from text.

    Args:
        text: Text potentially containing ANSI escape sequences

    Returns:
        Text with all ANSI escape sequences removed
    """
    return ANSI_ESCAPE_PATTERN.sub('', text)


@dataclass
class ActivityPatterns:
    """All patterns used for activity detection."""

    # Claude Code task status line, e.g.
    #   "17 tasks (10 done, 6 in progress, 1 open) · ctrl+t to hide tasks"
    # Group "active" is the in-progress count; only >= 1 means busy.
    task_status_pattern: str = r"\b\d+ tasks \([^)]*?\b(?P<active>\d+) in progress"

    # Todo list entries: ◼ (in progress) or ◻ (pending) followed by text.
    # Matched per line.
    todo_marker_pattern: str = r"[◼◻].*[a-zA-Z]"

    # Error signatures that call for recovery wording instead of a plain
    # "continue". Case-insensitive, matched against the whole window.
    error_patterns: List[str] = field(default_factory=lambda: [
        r"error.*timeout",
        r"failed.*retry",
        r"compilation error",
        r"build failed",
    ])


# Default patterns instance
DEFAULT_PATTERNS = ActivityPatterns()


def get_patterns() -> ActivityPatterns:
    """Get the activity detection patterns."""
    return DEFAULT_PATTERNS


class ActivityClassifier:
    """Applies ActivityPatterns to captured pane text."""

    def __init__(self, patterns: ActivityPatterns = None):
        self.patterns = patterns or get_patterns()
        self._task_status: Pattern = re.compile(self.patterns.task_status_pattern)
        self._todo_marker: Pattern = re.compile(self.patterns.todo_marker_pattern)
        self._errors: List[Pattern] = [
            re.compile(p, re.IGNORECASE) for p in self.patterns.error_patterns
        ]

    def has_work_in_progress(self, text: str) -> bool:
        """True if a task status line reports at least one task in progress."""
        for match in self._task_status.finditer(strip_ansi(text)):
            if int(match.group("active")) >= 1:
                return True
        return False

    def count_active_todos(self, text: str) -> int:
        """Number of lines carrying a pending/in-progress todo marker."""
        return sum(
            1 for line in strip_ansi(text).splitlines()
            if self._todo_marker.search(line)
        )

    def has_error_state(self, text: str) -> bool:
        plain = strip_ansi(text)
        return any(p.search(plain) for p in self._errors)
