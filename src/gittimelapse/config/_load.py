import os
import sys
from pathlib import Path

from gittimelapse.exceptions import ConfigError

from ._models import Config

STRICT_CONFIG_ENV_VAR = "GITTIMELAPSE_STRICT_CONFIG"


def safe_load_config(
    *,
    config_path: Path | None = None,
    repository_root: Path | None = None,
    cli_overrides: dict[str, object] | None = None,
) -> tuple[Config, str | None]:
    """Load configuration with error handling.

    Attempts to load configuration and handles errors based on the
    GITTIMELAPSE_STRICT_CONFIG environment variable:
    - If unset or "0": warn to stderr and fall back to the defaults with the
      CLI overrides applied
    - If "1": fail fast with sys.exit(1)

    When config_path is provided, the file must exist (explicit user request)
    and replaces the user and repository files. Environment variables and CLI
    overrides still apply on top of it.

    Args:
        config_path: Explicit path to config file (--config flag).
        repository_root: Working tree root, if already known.
        cli_overrides: CLI argument overrides, highest precedence.

    Returns:
        Tuple of (Config, error_message). On success, error_message is None.
    """
    strict_mode = os.environ.get(STRICT_CONFIG_ENV_VAR, "0") == "1"

    if config_path is not None and not config_path.exists():
        error_msg = f"Config file not found: {config_path}"
        print(f"Error: {error_msg}", file=sys.stderr)  # noqa: T201
        sys.exit(1)

    try:
        config = Config.load(
            repository_root=repository_root,
            config_files=[config_path] if config_path is not None else None,
            cli_overrides=cli_overrides,
        )
    except (ConfigError, OSError) as e:
        error_msg = str(e)
        if strict_mode:
            print(f"Error: {error_msg}", file=sys.stderr)  # noqa: T201
            sys.exit(1)
        print(  # noqa: T201
            f"Warning: Failed to load config: {error_msg}",
            file=sys.stderr,
        )
        return Config.from_dict(cli_overrides or {}), error_msg
    else:
        return config, None
