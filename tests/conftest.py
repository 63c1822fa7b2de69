"""
Pytest configuration for infinite-claude tests

This module provides shared fixtures and configuration for all tests.
"""

import shutil
import subprocess

import pytest


def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line(
        "markers", "e2e: mark test as end-to-end integration test (slow)"
    )
    config.addinivalue_line(
        "markers", "requires_tmux: mark test as requiring tmux"
    )


@pytest.fixture(scope="session")
def check_tmux():
    """Skip unless a working tmux is on PATH (for E2E tests only)"""
    if shutil.which("tmux") is None:
        pytest.skip("tmux not installed or not in PATH")
    try:
        result = subprocess.run(["tmux", "-V"], capture_output=True, text=True, timeout=5)
    except (subprocess.TimeoutExpired, OSError):
        pytest.skip("tmux not available")
    if result.returncode != 0:
        pytest.skip("tmux not available")
