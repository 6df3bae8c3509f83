"""Shared test fixtures for gittimelapse tests."""

import os
from io import StringIO

import pytest
from rich.console import Console


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove GITTIMELAPSE_* variables so the host environment cannot leak in."""
    for key in list(os.environ):
        if key.startswith("GITTIMELAPSE_"):
            monkeypatch.delenv(key)


@pytest.fixture
def console() -> Console:
    """Create a wide, colorless console that records its output.

    Read the output back with ``console.export_text()``.
    """
    return Console(file=StringIO(), width=200, color_system=None, record=True)


@pytest.fixture
def error_console() -> Console:
    """Create a recording console standing in for stderr."""
    return Console(file=StringIO(), width=200, color_system=None, record=True)
