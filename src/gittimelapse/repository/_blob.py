"""Reading file contents out of commit trees."""

import stat
from typing import Final

from dulwich.errors import NotTreeError
from dulwich.object_store import BaseObjectStore, tree_lookup_path
from dulwich.objects import S_ISGITLINK, Blob, Commit

from gittimelapse.exceptions import PathNotFoundInCommitError
from gittimelapse.repository._commits import load_commit
from gittimelapse.repository._models import CommitId
from gittimelapse.utils import encode_text


class BlobReader:
    """Reads the exact bytes of a file as recorded in a commit.

    The lookup descends the commit's tree one level per path segment and only
    enters a subtree whose name equals the next segment, so the cost depends
    on the path depth and not on the size of the tree. Instances hold no
    mutable state and may be shared.

    Example:
        >>> reader = BlobReader(repo.object_store)
        >>> reader.read_blob(commit_id, "src/app.py")
        b'print("hello")\\n'
    """

    __slots__: Final = ("_store",)

    def __init__(self, store: BaseObjectStore) -> None:
        """Initialize the reader.

        Args:
            store: Object store holding the commits and trees to read.
        """
        self._store: BaseObjectStore = store

    def read_blob(self, commit_id: CommitId, path: str) -> bytes:
        """Return the content of ``path`` in the tree of ``commit_id``.

        Args:
            commit_id: Full hex id of the commit.
            path: Repository-relative path with ``/`` separators.

        Returns:
            The raw blob bytes.

        Raises:
            NoSuchRevisionError: If ``commit_id`` does not name a commit.
            PathNotFoundInCommitError: If no file exists at exactly ``path``:
                a segment is missing, an intermediate segment is not a
                directory, or the final entry is not a regular file or symlink.
        """
        commit = load_commit(self._store, commit_id)
        return self._read_path(commit, commit_id, path)

    def blob_id(self, commit_id: CommitId, path: str) -> str:
        """Return the hex id of the blob at ``path`` in ``commit_id``.

        Raises:
            NoSuchRevisionError: If ``commit_id`` does not name a commit.
            PathNotFoundInCommitError: If no file exists at exactly ``path``.
        """
        commit = load_commit(self._store, commit_id)
        _, sha = self._lookup_file(commit, commit_id, path)
        return sha.decode("ascii")

    def _read_path(self, commit: Commit, commit_id: CommitId, path: str) -> bytes:
        _, sha = self._lookup_file(commit, commit_id, path)
        blob = self._store[sha]
        if not isinstance(blob, Blob):
            raise self._not_found(path, commit_id)
        return blob.data

    def _lookup_file(
        self, commit: Commit, commit_id: CommitId, path: str
    ) -> tuple[int, bytes]:
        if not path or any(not segment for segment in path.split("/")):
            raise self._not_found(path, commit_id)

        try:
            mode, sha = tree_lookup_path(
                self._store.__getitem__, commit.tree, encode_text(path)
            )
        except (KeyError, NotTreeError):
            raise self._not_found(path, commit_id) from None
        if stat.S_ISDIR(mode) or S_ISGITLINK(mode):
            raise self._not_found(path, commit_id)
        return mode, sha

    @staticmethod
    def _not_found(path: str, commit_id: CommitId) -> PathNotFoundInCommitError:
        msg = f"Path {path!r} not found in commit {commit_id}"
        return PathNotFoundInCommitError(msg, path=path, commit=commit_id)
