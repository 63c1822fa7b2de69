"""
Tests for activity detection patterns.
"""

import pytest

from infinite_claude.status_patterns import (
    ActivityClassifier,
    ActivityPatterns,
    DEFAULT_PATTERNS,
    get_patterns,
    strip_ansi,
)

from tests.fixtures import (
    PANE_IDLE_PROMPT,
    PANE_TASKS_IN_PROGRESS,
    PANE_TASKS_NONE_IN_PROGRESS,
    PANE_WITH_ERROR,
    PANE_WITH_TODOS,
)


class TestStripAnsi:
    def test_removes_color_codes(self):
        assert strip_ansi("\x1b[31mred\x1b[0m text") == "red text"

    def test_plain_text_unchanged(self):
        assert strip_ansi("plain") == "plain"


class TestGetPatterns:
    def test_returns_defaults(self):
        assert get_patterns() is DEFAULT_PATTERNS


class TestHasWorkInProgress:
    """Tests for the task status line detector."""

    classifier = ActivityClassifier()

    def test_tasks_in_progress(self):
        assert self.classifier.has_work_in_progress(PANE_TASKS_IN_PROGRESS) is True

    def test_zero_in_progress_is_not_busy(self):
        assert self.classifier.has_work_in_progress(PANE_TASKS_NONE_IN_PROGRESS) is False

    @pytest.mark.parametrize("line,expected", [
        ("12 tasks (8 done, 3 in progress, 1 open)", True),
        ("17 tasks (10 done, 6 in progress, 1 open) · ctrl+t to hide tasks", True),
        ("20 tasks (1 done, 10 in progress, 9 open)", True),
        ("3 tasks (1 in progress, 2 open)", True),
        ("12 tasks (11 done, 0 in progress, 1 open)", False),
        ("5 tasks (5 done)", False),
        ("working on 3 in progress items", False),
    ])
    def test_status_lines(self, line, expected):
        assert self.classifier.has_work_in_progress(line) is expected

    def test_idle_prompt(self):
        assert self.classifier.has_work_in_progress(PANE_IDLE_PROMPT) is False

    def test_ansi_colored_status_line(self):
        text = "\x1b[2m12 tasks (8 done, \x1b[33m3 in progress\x1b[0m, 1 open)\x1b[0m"
        assert self.classifier.has_work_in_progress(text) is True


class TestCountActiveTodos:
    classifier = ActivityClassifier()

    def test_counts_pending_and_in_progress(self):
        assert self.classifier.count_active_todos(PANE_WITH_TODOS) == 3

    def test_completed_items_not_counted(self):
        assert self.classifier.count_active_todos("☒ Done item\n☒ Another") == 0

    def test_marker_without_text_not_counted(self):
        assert self.classifier.count_active_todos("◻\n◼ 123") == 0

    def test_no_todos(self):
        assert self.classifier.count_active_todos(PANE_IDLE_PROMPT) == 0


class TestHasErrorState:
    classifier = ActivityClassifier()

    def test_build_failure(self):
        assert self.classifier.has_error_state(PANE_WITH_ERROR) is True

    @pytest.mark.parametrize("text", [
        "Error: request timeout after 30s",
        "Upload failed, will retry in 5s",
        "COMPILATION ERROR in module",
        "build failed",
    ])
    def test_error_signatures(self, text):
        assert self.classifier.has_error_state(text) is True

    def test_clean_output(self):
        assert self.classifier.has_error_state(PANE_IDLE_PROMPT) is False


class TestCustomPatterns:
    def test_injected_patterns_are_used(self):
        patterns = ActivityPatterns(
            task_status_pattern=r"BUSY (?P<active>\d+)",
            error_patterns=[r"kaboom"],
        )
        classifier = ActivityClassifier(patterns)
        assert classifier.has_work_in_progress("BUSY 2") is True
        assert classifier.has_work_in_progress(PANE_TASKS_IN_PROGRESS) is False
        assert classifier.has_error_state("KABOOM") is True
        assert classifier.has_error_state(PANE_WITH_ERROR) is False
