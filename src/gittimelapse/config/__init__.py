"""Configuration loading for gittimelapse.

Configuration is read from TOML files and the environment and merged in
precedence order: defaults, the user file, the repository's
``.gittimelapse.toml``, ``GITTIMELAPSE_SECTION__KEY`` variables and finally
command-line overrides.
"""

from ._defaults import DEFAULT_CONFIG
from ._discovery import (
    REPOSITORY_CONFIG_NAME,
    discover_config_files,
    find_repository_root,
    get_user_config_path,
)
from ._load import STRICT_CONFIG_ENV_VAR, safe_load_config
from ._loader import (
    ENV_PREFIX,
    copy_value,
    deep_merge,
    parse_env_vars,
    read_toml_file,
    set_nested_key,
)
from ._models import (
    Config,
    DisplayConfig,
    HistoryConfig,
    LogFormat,
    LoggingConfig,
    LogLevel,
)

__all__ = [
    "DEFAULT_CONFIG",
    "ENV_PREFIX",
    "REPOSITORY_CONFIG_NAME",
    "STRICT_CONFIG_ENV_VAR",
    "Config",
    "DisplayConfig",
    "HistoryConfig",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "copy_value",
    "deep_merge",
    "discover_config_files",
    "find_repository_root",
    "get_user_config_path",
    "parse_env_vars",
    "read_toml_file",
    "safe_load_config",
    "set_nested_key",
]
