from collections.abc import Iterator
from pathlib import Path

import pytest

from gittimelapse.repository import TimelapseRepository
from tests.unit._builders import RepoBuilder


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        if Path(item.path).is_relative_to(Path(__file__).parent):
            item.add_marker(pytest.mark.unit)


@pytest.fixture
def repo_builder(tmp_path: Path) -> Iterator[RepoBuilder]:
    """Create an empty on-disk repository with a commit builder."""
    builder = RepoBuilder(tmp_path / "repo")
    yield builder
    builder.repo.close()


@pytest.fixture
def timelapse_repo(repo_builder: RepoBuilder) -> Iterator[TimelapseRepository]:
    """Open the builder's repository the way the CLI does."""
    with TimelapseRepository.discover(repo_builder.path) as repo:
        yield repo
