from pathlib import Path

import pytest

from gittimelapse.exceptions import PathOutsideRepositoryError
from gittimelapse.repository import normalize_path


class TestNormalizePath:
    def test_strips_root_from_absolute_path(self) -> None:
        assert normalize_path(Path("/work/repo"), "/work/repo/src/app.py") == "src/app.py"

    def test_accepts_path_objects(self) -> None:
        root = Path("/work/repo")

        assert normalize_path(root, root / "README.md") == "README.md"

    def test_returns_relative_path_unchanged(self) -> None:
        assert normalize_path(Path("/work/repo"), "src/app.py") == "src/app.py"

    def test_strips_root_only_once(self) -> None:
        root = Path("/work/repo")

        assert normalize_path(root, "/work/repo/work/repo/f.txt") == "work/repo/f.txt"

    def test_rejects_absolute_path_outside_root(self) -> None:
        with pytest.raises(PathOutsideRepositoryError) as exc_info:
            normalize_path(Path("/work/repo"), "/elsewhere/f.txt")

        error = exc_info.value
        assert error.path == Path("/elsewhere/f.txt")
        assert error.root == Path("/work/repo")

    def test_rejects_sibling_with_common_prefix(self) -> None:
        with pytest.raises(PathOutsideRepositoryError):
            normalize_path(Path("/work/repo"), "/work/repository/f.txt")

    def test_rejects_root_itself(self) -> None:
        with pytest.raises(PathOutsideRepositoryError):
            normalize_path(Path("/work/repo"), "/work/repo")

    def test_rejects_relative_path_escaping_root(self) -> None:
        with pytest.raises(PathOutsideRepositoryError):
            normalize_path(Path("/work/repo"), "../other/f.txt")

    def test_error_is_a_value_error(self) -> None:
        with pytest.raises(ValueError, match="outside repository"):
            normalize_path(Path("/work/repo"), "/tmp/f.txt")

    def test_resolves_symlinked_root(self, tmp_path: Path) -> None:
        real_root = tmp_path / "real"
        (real_root / "src").mkdir(parents=True)
        (real_root / "src" / "app.py").write_text("print()\n")
        alias = tmp_path / "alias"
        alias.symlink_to(real_root)

        assert normalize_path(real_root, alias / "src" / "app.py") == "src/app.py"

    def test_resolves_dot_dot_inside_root(self, tmp_path: Path) -> None:
        (tmp_path / "a").mkdir()

        assert normalize_path(tmp_path, tmp_path / "a" / ".." / "f.txt") == "f.txt"
