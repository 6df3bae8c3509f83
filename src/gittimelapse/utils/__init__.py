"""Shared utilities for gittimelapse."""

from ._common import decode_bytes, decode_display, encode_text
from ._logging import (
    DEBUG_ENV_VAR,
    create_null_logger,
    log_duration,
    open_cli_logger,
)

__all__ = [
    "DEBUG_ENV_VAR",
    "create_null_logger",
    "decode_bytes",
    "decode_display",
    "encode_text",
    "log_duration",
    "open_cli_logger",
]
