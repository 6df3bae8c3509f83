import shutil
from pathlib import Path

import pytest

from tests.integration._git import GitRepo

requires_git = pytest.mark.skipif(
    shutil.which("git") is None, reason="git executable not available"
)


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        if Path(item.path).is_relative_to(Path(__file__).parent):
            item.add_marker(pytest.mark.integration)
            item.add_marker(requires_git)


@pytest.fixture
def git_repo(tmp_path: Path) -> GitRepo:
    """Create an empty repository with an isolated git configuration."""
    home = tmp_path / "home"
    home.mkdir()
    return GitRepo(tmp_path / "repo", home)
