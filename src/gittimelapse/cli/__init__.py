"""The gittimelapse command-line interface."""

from ._app import create_app, main
from ._shared import ExitCode, exit_with_error
from ._timelapse import TimelapseOptions, run_timelapse

__all__ = [
    "ExitCode",
    "TimelapseOptions",
    "create_app",
    "exit_with_error",
    "main",
    "run_timelapse",
]
