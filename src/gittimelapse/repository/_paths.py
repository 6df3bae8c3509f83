"""Conversion of filesystem paths into repository-relative tree paths."""

from pathlib import Path, PurePath

from gittimelapse.exceptions import PathOutsideRepositoryError


def _strip_root(root: Path, path: Path) -> PurePath | None:
    """Return ``path`` relative to ``root``, or None if it is not under it."""
    if not path.is_relative_to(root):
        return None
    return path.relative_to(root)


def normalize_path(root: Path, path: Path | str) -> str:
    """Convert a path into a repository-relative, ``/``-separated tree path.

    Absolute paths must lie under ``root``; the root prefix is stripped once.
    The comparison is made literally first and then with symlinks and ``..``
    segments resolved, so that ``/tmp/repo`` and ``/private/tmp/repo`` style
    aliases both work. Relative paths are taken to be repository-relative
    already and are returned unchanged apart from separator normalization.

    Args:
        root: The repository working tree root.
        path: Absolute filesystem path or repository-relative path.

    Returns:
        The repository-relative path using ``/`` separators.

    Raises:
        PathOutsideRepositoryError: If the path lies outside ``root``, escapes
            it with ``..``, or names the root itself.

    Example:
        >>> normalize_path(Path("/work/repo"), "/work/repo/src/app.py")
        'src/app.py'
        >>> normalize_path(Path("/work/repo"), "src/app.py")
        'src/app.py'
    """
    candidate = Path(path)

    relative: PurePath | None
    if candidate.is_absolute():
        relative = _strip_root(root, candidate)
        if relative is None or ".." in relative.parts:
            relative = _strip_root(root.resolve(), candidate.resolve())
        if relative is None:
            msg = f"Path is outside repository: {path}"
            raise PathOutsideRepositoryError(msg, path=candidate, root=root)
    else:
        relative = candidate

    parts = relative.parts
    if not parts:
        msg = f"Path names the repository root, not a file: {path}"
        raise PathOutsideRepositoryError(msg, path=candidate, root=root)
    if ".." in parts:
        msg = f"Path escapes the repository: {path}"
        raise PathOutsideRepositoryError(msg, path=candidate, root=root)

    return "/".join(parts)
