"""Commit builder used by unit tests to create repositories without git."""

from collections.abc import Mapping
from pathlib import Path

from dulwich.index import commit_tree
from dulwich.objects import Blob, Commit
from dulwich.repo import Repo

from gittimelapse.repository import CommitId

BASE_TIME = 1_700_000_000
DEFAULT_BRANCH = b"refs/heads/main"
REGULAR_FILE_MODE = 0o100644


class RepoBuilder:
    """Builds commits directly in a dulwich object store.

    Every commit starts from the files of its first parent; ``None`` values
    in ``files`` delete a path.
    """

    def __init__(self, path: Path) -> None:
        self.path: Path = path
        self.repo: Repo = Repo.init(str(path), mkdir=True)
        self.repo.refs.set_symbolic_ref(b"HEAD", DEFAULT_BRANCH)
        self._states: dict[CommitId, dict[str, bytes]] = {}
        self._clock: int = BASE_TIME
        self.head: CommitId | None = None

    def files_at(self, commit_id: CommitId) -> dict[str, bytes]:
        return dict(self._states[commit_id])

    def commit(
        self,
        files: Mapping[str, bytes | str | None],
        message: str = "change",
        *,
        parents: list[CommitId] | None = None,
        author: bytes = b"Test User <test@example.com>",
        timezone: int = 0,
        ref: bytes = DEFAULT_BRANCH,
    ) -> CommitId:
        if parents is None:
            parents = [self.head] if self.head is not None else []

        state = dict(self._states[parents[0]]) if parents else {}
        for path, content in files.items():
            if content is None:
                state.pop(path, None)
            else:
                state[path] = content.encode() if isinstance(content, str) else content

        store = self.repo.object_store
        entries: list[tuple[bytes, bytes, int]] = []
        for path, data in sorted(state.items()):
            blob = Blob.from_string(data)
            store.add_object(blob)
            entries.append((path.encode(), blob.id, REGULAR_FILE_MODE))

        self._clock += 60
        commit = Commit()
        commit.tree = commit_tree(store, entries)
        commit.parents = [parent.encode("ascii") for parent in parents]
        commit.author = author
        commit.committer = b"Test Committer <committer@example.com>"
        commit.author_time = commit.commit_time = self._clock
        commit.author_timezone = commit.commit_timezone = timezone
        commit.encoding = b"UTF-8"
        commit.message = message.encode() + b"\n"
        store.add_object(commit)

        commit_id = commit.id.decode("ascii")
        self._states[commit_id] = state
        self.repo.refs[ref] = commit.id
        if ref == DEFAULT_BRANCH:
            self.head = commit_id
        return commit_id
