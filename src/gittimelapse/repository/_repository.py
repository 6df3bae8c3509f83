"""Repository handle used by the timeline and the command-line interface.

``TimelapseRepository`` owns the dulwich repository for the lifetime of a
session and exposes the read-only operations needed to step through a
file's history: revision resolution, path normalization, commit metadata,
history walking and blob reads.
"""

import re
from collections.abc import Iterator
from pathlib import Path
from types import TracebackType
from typing import TYPE_CHECKING, Final, Self

from dulwich.objects import Commit, Tag
from dulwich.repo import BaseRepo, Repo

from gittimelapse.exceptions import NoSuchRevisionError, RepositoryNotFoundError
from gittimelapse.repository._blob import BlobReader
from gittimelapse.repository._commits import load_commit, to_commit_record
from gittimelapse.repository._history import (
    DEFAULT_RENAME_THRESHOLD,
    HistoryWalker,
    ProgressCallback,
)
from gittimelapse.repository._models import (
    CommitId,
    CommitList,
    CommitRecord,
    HistoryEntry,
    PathChange,
)
from gittimelapse.repository._paths import normalize_path
from gittimelapse.utils import create_null_logger, log_duration

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

_MIN_SHA_ABBREV_LENGTH: Final = 4
_SHA_HEX_LENGTH: Final = 40
_HEX_DIGITS: Final = frozenset("0123456789abcdef")

# "<base>" followed by any number of "~", "~<n>" or "^" ancestry steps.
_ANCESTRY_SUFFIX: Final = re.compile(r"^(?P<base>.+?)(?P<steps>(?:~\d*|\^)*)$")
_ANCESTRY_STEP: Final = re.compile(r"~(\d*)|\^")


class TimelapseRepository:
    """Read-only access to a git repository for file history browsing.

    The class implements the context manager protocol; the underlying
    dulwich repository is closed when the context exits.

    Example:
        >>> with TimelapseRepository.discover(Path("src")) as repo:
        ...     commits = repo.find_commits("src/app.py")
        ...     content = repo.read_blob(commits.latest(), "src/app.py")
    """

    __slots__: Final = ("_blobs", "_history", "_logger", "_repo", "_root")

    def __init__(
        self,
        repo: BaseRepo,
        root: Path,
        *,
        rename_threshold: int = DEFAULT_RENAME_THRESHOLD,
        logger: "FilteringBoundLogger | None" = None,  # noqa: UP037
    ) -> None:
        """Initialize the handle around an opened repository.

        Use :meth:`discover` to locate and open a repository on disk.

        Args:
            repo: The opened dulwich repository.
            root: Working tree root the repository belongs to.
            rename_threshold: Similarity percentage for rename detection.
            logger: Optional logger for diagnostics.
        """
        self._repo: BaseRepo = repo
        self._root: Path = root
        self._logger: FilteringBoundLogger = logger or create_null_logger()
        self._history: HistoryWalker = HistoryWalker(
            repo, rename_threshold=rename_threshold, logger=self._logger
        )
        self._blobs: BlobReader = BlobReader(repo.object_store)

    @classmethod
    def discover(
        cls,
        working_dir: Path | None = None,
        *,
        rename_threshold: int = DEFAULT_RENAME_THRESHOLD,
        logger: "FilteringBoundLogger | None" = None,  # noqa: UP037
    ) -> Self:
        """Locate the repository enclosing ``working_dir`` and open it.

        Args:
            working_dir: Directory (or file) to start the upward search from.
                Defaults to the current working directory.
            rename_threshold: Similarity percentage for rename detection.
            logger: Optional logger for diagnostics.

        Returns:
            The opened repository handle.

        Raises:
            RepositoryNotFoundError: If no ``.git`` is found in
                ``working_dir`` or any of its ancestors.
        """
        if working_dir is None:
            working_dir = Path.cwd()
        root = cls._discover_root(working_dir)
        return cls(
            Repo(str(root)),
            root,
            rename_threshold=rename_threshold,
            logger=logger,
        )

    @staticmethod
    def _discover_root(working_dir: Path) -> Path:
        """Walk up from ``working_dir`` until a ``.git`` directory or file is found.

        Linked worktrees use a ``.git`` file pointing at the main repository,
        so both forms are accepted.
        """
        current = working_dir.resolve()
        if not current.is_dir():
            current = current.parent

        while True:
            if (current / ".git").exists():
                return current

            parent = current.parent
            if parent == current:
                msg = f"Not inside a Git repository: {working_dir}"
                raise RepositoryNotFoundError(msg, path=working_dir)
            current = parent

    # =========================================================================
    # Context Manager Protocol
    # =========================================================================

    def __enter__(self) -> Self:
        """Enter the context manager.

        Returns:
            The repository instance.
        """
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit the context manager and close the repository."""
        self.close()

    def close(self) -> None:
        """Close the underlying git repository and release its file handles."""
        self._repo.close()

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def root(self) -> Path:
        """Return the working tree root directory."""
        return self._root

    @property
    def history(self) -> HistoryWalker:
        """Return the history walker bound to this repository."""
        return self._history

    @property
    def blobs(self) -> BlobReader:
        """Return the blob reader bound to this repository."""
        return self._blobs

    # =========================================================================
    # Revisions and paths
    # =========================================================================

    def normalize_path(self, path: Path | str) -> str:
        """Convert ``path`` into a repository-relative tree path.

        Raises:
            PathOutsideRepositoryError: If the path is outside the root.
        """
        return normalize_path(self._root, path)

    def resolve_revision(self, name: str = "HEAD") -> CommitId:
        """Resolve a revision name to a full commit id.

        Accepts ``HEAD``, full ref names (``refs/heads/main``), short branch,
        tag and remote-tracking names, and full or abbreviated (at least 4
        characters) commit ids, optionally followed by ``~``, ``~<n>`` or
        ``^`` first-parent ancestry steps. Annotated tags are peeled to the
        commit they point at.

        Args:
            name: The revision to resolve.

        Returns:
            The full hex commit id.

        Raises:
            NoSuchRevisionError: If the name does not resolve to a commit, an
                abbreviated id is ambiguous, or an ancestry step runs past a
                root commit.
        """
        revision = name.strip()
        match = _ANCESTRY_SUFFIX.match(revision)
        if match is None:
            msg = f"Unknown revision: {name!r}"
            raise NoSuchRevisionError(msg, revision=name)

        commit_id = self._resolve_base(match.group("base"), name)
        for step in _ANCESTRY_STEP.finditer(match.group("steps")):
            count = int(step.group(1)) if step.group(1) else 1
            for _ in range(count):
                commit = load_commit(self._repo.object_store, commit_id)
                if not commit.parents:
                    msg = f"Revision {name!r} goes past a root commit"
                    raise NoSuchRevisionError(msg, revision=name)
                commit_id = commit.parents[0].decode("ascii")
        return commit_id

    def _resolve_base(self, base: str, name: str) -> CommitId:
        for ref in self._ref_candidates(base):
            try:
                sha = self._repo.refs[ref]
            except KeyError:
                continue
            return self._peel_to_commit(sha, name)

        lowered = base.lower()
        if (
            _MIN_SHA_ABBREV_LENGTH <= len(lowered) <= _SHA_HEX_LENGTH
            and set(lowered) <= _HEX_DIGITS
        ):
            return self._resolve_abbreviated_sha(lowered, name)

        msg = f"Unknown revision: {name!r}"
        raise NoSuchRevisionError(msg, revision=name)

    @staticmethod
    def _ref_candidates(base: str) -> list[bytes]:
        encoded = base.encode("utf-8")
        if base == "HEAD" or base.startswith("refs/"):
            return [encoded]
        return [
            b"refs/" + encoded,
            b"refs/tags/" + encoded,
            b"refs/heads/" + encoded,
            b"refs/remotes/" + encoded,
            b"refs/remotes/" + encoded + b"/HEAD",
        ]

    def _peel_to_commit(self, sha: bytes, name: str) -> CommitId:
        obj = self._repo[sha]
        while isinstance(obj, Tag):
            _, target = obj.object
            obj = self._repo[target]
        if not isinstance(obj, Commit):
            msg = f"Revision {name!r} does not point at a commit"
            raise NoSuchRevisionError(msg, revision=name)
        return obj.id.decode("ascii")

    def _resolve_abbreviated_sha(self, prefix: str, name: str) -> CommitId:
        """Resolve a full or abbreviated hex id to a full commit id."""
        if len(prefix) == _SHA_HEX_LENGTH:
            return self._peel_to_commit_id(prefix, name)

        needle = prefix.encode("ascii")
        matches: list[bytes] = []
        for obj_sha in self._repo.object_store:
            if not obj_sha.startswith(needle):
                continue
            try:
                obj = self._repo.object_store[obj_sha]
            except KeyError:
                continue
            if isinstance(obj, (Commit, Tag)):
                matches.append(obj_sha)

        if not matches:
            msg = f"Unknown revision: {name!r}"
            raise NoSuchRevisionError(msg, revision=name)

        if len(matches) > 1:
            msg = f"Ambiguous commit prefix: {name!r} (matches {len(matches)} objects)"
            raise NoSuchRevisionError(msg, revision=name)

        return self._peel_to_commit(matches[0], name)

    def _peel_to_commit_id(self, commit_id: str, name: str) -> CommitId:
        try:
            return self._peel_to_commit(commit_id.encode("ascii"), name)
        except KeyError as e:
            msg = f"Unknown revision: {name!r}"
            raise NoSuchRevisionError(msg, revision=name) from e

    # =========================================================================
    # Commits and history
    # =========================================================================

    def read_commit(
        self, commit_id: CommitId, *, include_message: bool = True
    ) -> CommitRecord:
        """Return the metadata of a commit.

        Args:
            commit_id: Full hex commit id.
            include_message: Decode and attach the commit message.

        Raises:
            NoSuchRevisionError: If ``commit_id`` does not name a commit.
        """
        commit = load_commit(self._repo.object_store, commit_id)
        return to_commit_record(commit, include_message=include_message)

    def changed_paths(self, commit_id: CommitId) -> list[PathChange]:
        """List the path changes between a commit and its first parent."""
        return self._history.changed_paths(commit_id)

    def iter_history(
        self,
        path: Path | str,
        *,
        revision: str = "HEAD",
        first_parent: bool = False,
        follow_renames: bool = False,
    ) -> Iterator[HistoryEntry]:
        """Lazily yield the commits that modified ``path``, newest first.

        Raises:
            NoSuchRevisionError: If ``revision`` cannot be resolved.
            PathOutsideRepositoryError: If ``path`` is outside the root.
        """
        start = self.resolve_revision(revision)
        relative = self.normalize_path(path)
        return self._history.iter_history(
            start,
            relative,
            first_parent=first_parent,
            follow_renames=follow_renames,
        )

    def find_commits(
        self,
        path: Path | str,
        *,
        revision: str = "HEAD",
        progress: ProgressCallback | None = None,
        first_parent: bool = False,
        follow_renames: bool = False,
    ) -> CommitList:
        """Build the oldest-first list of commits that modified ``path``.

        Args:
            path: Absolute path under the root, or repository-relative path.
            revision: Revision to start walking from.
            progress: Called with each matching commit id as it is found.
            first_parent: Only traverse first-parent edges at merges.
            follow_renames: Follow the file back across renames.

        Returns:
            The commit list; empty when no commit touched the path.

        Raises:
            NoSuchRevisionError: If ``revision`` cannot be resolved.
            PathOutsideRepositoryError: If ``path`` is outside the root.
        """
        start = self.resolve_revision(revision)
        relative = self.normalize_path(path)
        return self._history.find_commits(
            start,
            relative,
            progress=progress,
            first_parent=first_parent,
            follow_renames=follow_renames,
        )

    def read_blob(self, commit_id: CommitId, path: str) -> bytes:
        """Return the bytes of ``path`` as recorded in ``commit_id``.

        Raises:
            NoSuchRevisionError: If ``commit_id`` does not name a commit.
            PathNotFoundInCommitError: If no file exists at ``path``.
        """
        with log_duration(
            self._logger, "blob_read", commit=commit_id, path=path
        ) as extra:
            data = self._blobs.read_blob(commit_id, path)
            extra["size"] = len(data)
        return data
