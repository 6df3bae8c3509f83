"""Config path discovery utilities."""

from pathlib import Path

import platformdirs

REPOSITORY_CONFIG_NAME = ".gittimelapse.toml"


def find_repository_root(start: Path | None = None) -> Path | None:
    """Find the working tree root by searching upward for ``.git``.

    Args:
        start: Directory to start searching from. Defaults to the current
            working directory.

    Returns:
        The directory containing ``.git``, or None outside a repository.
    """
    current = (start or Path.cwd()).resolve()

    while True:
        if (current / ".git").exists():
            return current
        parent = current.parent
        if parent == current:
            return None
        current = parent


def get_user_config_path() -> Path:
    r"""Get platform-specific user config file path.

    - Linux: ``~/.config/gittimelapse/config.toml``
    - macOS: ``~/Library/Application Support/gittimelapse/config.toml``
    - Windows: ``%APPDATA%\gittimelapse\config.toml``

    The path is returned whether or not the file exists.
    """
    return platformdirs.user_config_path("gittimelapse") / "config.toml"


def _file_exists(path: Path) -> bool:
    try:
        return path.is_file()
    except OSError:
        return False


def discover_config_files(repository_root: Path | None = None) -> list[Path]:
    """Return the existing configuration files, lowest precedence first.

    The user file comes first and the repository's ``.gittimelapse.toml``
    second. Missing files are skipped.

    Args:
        repository_root: Working tree root. If None, auto-detect from the
            current directory.
    """
    candidates = [get_user_config_path()]
    root = repository_root or find_repository_root()
    if root is not None:
        candidates.append(root / REPOSITORY_CONFIG_NAME)
    return [path for path in candidates if _file_exists(path)]
