# pyright: reportExplicitAny=false, reportAny=false
"""Configuration container with typed access."""

from collections.abc import Sequence
from pathlib import Path
from typing import Any, ClassVar, Self

from pydantic import BaseModel, ConfigDict

from gittimelapse.config._defaults import DEFAULT_CONFIG
from gittimelapse.config._loader import deep_merge, parse_env_vars, read_toml_file
from gittimelapse.config._models._display import DisplayConfig
from gittimelapse.config._models._history import HistoryConfig
from gittimelapse.config._models._logging import LoggingConfig


class Config(BaseModel):
    """Immutable, merged configuration.

    Use :meth:`from_dict`, :meth:`from_file` or :meth:`load` rather than
    the constructor.

    Attributes:
        logging: Logging section.
        history: History walk section.
        display: Display section.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    logging: LoggingConfig = LoggingConfig()
    history: HistoryConfig = HistoryConfig()
    display: DisplayConfig = DisplayConfig()

    @classmethod
    def _build(cls, merged: dict[str, Any], *, source: str | None = None) -> Self:
        # Deferred import to avoid circular dependency
        from gittimelapse.config._validation import (  # noqa: PLC0415
            parse_config,
            raise_if_validation_errors,
        )

        schema, issues = parse_config(merged)
        raise_if_validation_errors(issues, source=source)
        return cls(
            logging=schema.logging,
            history=schema.history,
            display=schema.display,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create configuration from a dictionary merged over the defaults.

        Raises:
            ConfigValidationError: If validation fails.
        """
        return cls._build(deep_merge(DEFAULT_CONFIG, data))

    @classmethod
    def from_file(cls, path: Path) -> Self:
        """Load configuration from a single TOML file merged over the defaults.

        Raises:
            FileNotFoundError: If the file does not exist.
            ConfigLoadError: If the file cannot be parsed.
            ConfigValidationError: If validation fails.
        """
        return cls._build(
            deep_merge(DEFAULT_CONFIG, read_toml_file(path)), source=str(path)
        )

    @classmethod
    def load(
        cls,
        *,
        repository_root: Path | None = None,
        config_files: Sequence[Path] | None = None,
        include_env: bool = True,
        cli_overrides: dict[str, Any] | None = None,
    ) -> Self:
        """Load merged configuration from all sources.

        Sources are merged in precedence order
        (defaults -> files -> env -> cli).

        Args:
            repository_root: Working tree root. If None, auto-detect.
            config_files: Files to read instead of the discovered user and
                repository files, lowest precedence first.
            include_env: Include ``GITTIMELAPSE_SECTION__KEY`` variables.
            cli_overrides: CLI argument overrides, highest precedence.

        Returns:
            Merged configuration object.

        Raises:
            FileNotFoundError: If an explicit config file does not exist.
            ConfigLoadError: If a config file cannot be parsed.
            ConfigValidationError: If the merged config fails validation.
        """
        from gittimelapse.config._discovery import (  # noqa: PLC0415
            discover_config_files,
        )

        if config_files is None:
            config_files = discover_config_files(repository_root)

        merged = DEFAULT_CONFIG
        for path in config_files:
            merged = deep_merge(merged, read_toml_file(path))
        if include_env:
            merged = deep_merge(merged, parse_env_vars())
        if cli_overrides:
            merged = deep_merge(merged, cli_overrides)

        return cls._build(merged)
