"""Configuration models."""

from gittimelapse.config._models._config import Config
from gittimelapse.config._models._display import DisplayConfig
from gittimelapse.config._models._history import HistoryConfig
from gittimelapse.config._models._logging import LogFormat, LoggingConfig, LogLevel

__all__ = [
    "Config",
    "DisplayConfig",
    "HistoryConfig",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
]
