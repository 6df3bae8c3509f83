"""Discovery of the commits that modified a file.

The walker visits commits newest-first in topological order and keeps the
ones where the tracked path exists as a file whose tree entry differs from
the entry at the same path in the first parent. Matched commits are then
classified with a rename-aware tree comparison, which is also what lets the
walker optionally follow a file back across a rename.
"""

import stat
from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING, Final

from dulwich.diff_tree import (
    CHANGE_ADD,
    CHANGE_COPY,
    CHANGE_DELETE,
    CHANGE_RENAME,
    RenameDetector,
    TreeChange,
    tree_changes,
)
from dulwich.errors import NotTreeError
from dulwich.object_store import tree_lookup_path
from dulwich.objects import S_ISGITLINK, Commit
from dulwich.repo import BaseRepo
from dulwich.walk import ORDER_TOPO

from gittimelapse.repository._commits import load_commit
from gittimelapse.repository._models import (
    ChangeKind,
    CommitId,
    CommitList,
    HistoryEntry,
    PathChange,
)
from gittimelapse.utils import (
    create_null_logger,
    decode_bytes,
    encode_text,
    log_duration,
)

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

DEFAULT_RENAME_THRESHOLD: Final = 60
"""Minimum similarity percentage for a delete/add pair to count as a rename."""

type ProgressCallback = Callable[[CommitId], None]
"""Called with each matching commit id as the walk confirms it."""

_KIND_BY_CHANGE_TYPE: Final = {
    CHANGE_ADD: ChangeKind.ADDED,
    CHANGE_DELETE: ChangeKind.DELETED,
    CHANGE_RENAME: ChangeKind.RENAMED,
    CHANGE_COPY: ChangeKind.COPIED,
}

type _TreeEntry = tuple[int, bytes]


def _first_parent(commit: Commit) -> list[bytes]:
    return commit.parents[:1]


def _entry_field(entry: object, field: str) -> bytes | None:
    # dulwich reports the missing side as None or as an all-None TreeEntry
    if entry is None:
        return None
    value: bytes | None = getattr(entry, field, None)
    return value


def _to_path_change(change: TreeChange) -> PathChange:
    old_path = _entry_field(change.old, "path")
    new_path = _entry_field(change.new, "path")
    old_sha = _entry_field(change.old, "sha")
    new_sha = _entry_field(change.new, "sha")
    return PathChange(
        old_path=decode_bytes(old_path) if old_path is not None else None,
        new_path=decode_bytes(new_path) if new_path is not None else None,
        kind=_KIND_BY_CHANGE_TYPE.get(change.type, ChangeKind.MODIFIED),
        old_id=old_sha.decode("ascii") if old_sha is not None else None,
        new_id=new_sha.decode("ascii") if new_sha is not None else None,
    )


def predecessor(commits: CommitList, commit_id: CommitId) -> CommitId | None:
    """Return the commit before ``commit_id`` in ``commits``.

    Returns:
        The preceding commit id, or None if ``commit_id`` is first or absent.
    """
    return commits.predecessor(commit_id)


class HistoryWalker:
    """Finds the commits that modified a path.

    Merge commits are compared against their first parent only, so a commit
    whose only difference is on a side branch's parent is not reported.

    Attributes:
        rename_threshold: Similarity percentage used by rename detection.
    """

    __slots__: Final = ("_logger", "_repo", "rename_threshold")

    def __init__(
        self,
        repo: BaseRepo,
        *,
        rename_threshold: int = DEFAULT_RENAME_THRESHOLD,
        logger: "FilteringBoundLogger | None" = None,  # noqa: UP037
    ) -> None:
        """Initialize the walker.

        Args:
            repo: Repository whose object store is walked.
            rename_threshold: Similarity percentage (0-100) for rename and
                copy detection.
            logger: Optional logger for walk diagnostics.
        """
        self._repo: BaseRepo = repo
        self._logger: FilteringBoundLogger = logger or create_null_logger()
        self.rename_threshold: int = rename_threshold

    # =========================================================================
    # Per-commit changes
    # =========================================================================

    def changed_paths(self, commit_id: CommitId) -> list[PathChange]:
        """List the path changes between a commit and its first parent.

        Renames and copies are detected by content similarity. A root commit
        lists every file in its tree as added.

        Args:
            commit_id: Full hex id of the commit.

        Returns:
            The path changes, in dulwich's tree order.

        Raises:
            NoSuchRevisionError: If ``commit_id`` does not name a commit.
        """
        commit = load_commit(self._repo.object_store, commit_id)
        return self._changed_paths(commit)

    def _changed_paths(self, commit: Commit) -> list[PathChange]:
        store = self._repo.object_store
        if not commit.parents:
            changes = tree_changes(store, None, commit.tree)
        else:
            parent = load_commit(store, commit.parents[0].decode("ascii"))
            detector = RenameDetector(store, rename_threshold=self.rename_threshold)
            changes = tree_changes(
                store, parent.tree, commit.tree, rename_detector=detector
            )
        return [_to_path_change(change) for change in changes]

    def _file_entry(self, tree_id: bytes, path: bytes) -> _TreeEntry | None:
        store = self._repo.object_store
        try:
            mode, sha = tree_lookup_path(store.__getitem__, tree_id, path)
        except (KeyError, NotTreeError):
            return None
        if stat.S_ISDIR(mode) or S_ISGITLINK(mode):
            return None
        return mode, sha

    def _touches(self, commit: Commit, path: bytes) -> bool:
        entry = self._file_entry(commit.tree, path)
        if entry is None:
            return False
        if not commit.parents:
            return True
        parent = load_commit(self._repo.object_store, commit.parents[0].decode("ascii"))
        return entry != self._file_entry(parent.tree, path)

    def _classify(self, commit: Commit, path: str) -> PathChange:
        for change in self._changed_paths(commit):
            if change.touches(path):
                return change
        # Only reachable for entries rename detection folds away entirely.
        kind = ChangeKind.ADDED if not commit.parents else ChangeKind.MODIFIED
        return PathChange(old_path=None, new_path=path, kind=kind)

    # =========================================================================
    # Walking
    # =========================================================================

    def iter_history(
        self,
        start: CommitId,
        path: str,
        *,
        first_parent: bool = False,
        follow_renames: bool = False,
    ) -> Iterator[HistoryEntry]:
        """Yield the commits that modified ``path``, newest first.

        The sequence is lazy: commits are tested as they are pulled, so a
        consumer can stop at any point.

        Args:
            start: Full hex id of the commit to start from.
            path: Repository-relative path of the tracked file.
            first_parent: Only traverse first-parent edges at merges.
            follow_renames: When a matching commit shows the file as renamed,
                continue with the old path for older commits.

        Yields:
            One HistoryEntry per matching commit.

        Raises:
            NoSuchRevisionError: If ``start`` does not name a commit.
        """
        store = self._repo.object_store
        load_commit(store, start)

        walker_kwargs: dict[str, object] = {
            "include": [start.encode("ascii")],
            "order": ORDER_TOPO,
        }
        if first_parent:
            walker_kwargs["get_parents"] = _first_parent

        tracked = path
        tracked_bytes = encode_text(path)
        for walk_entry in self._repo.get_walker(**walker_kwargs):  # pyright: ignore[reportArgumentType]
            commit = walk_entry.commit
            if not self._touches(commit, tracked_bytes):
                continue

            change = self._classify(commit, tracked)
            commit_id = commit.id.decode("ascii")
            self._logger.debug(
                "history_match",
                commit=commit_id,
                path=tracked,
                kind=change.kind.value,
            )
            yield HistoryEntry(commit_id=commit_id, path=tracked, change=change)

            if (
                follow_renames
                and change.kind is ChangeKind.RENAMED
                and change.old_path is not None
            ):
                self._logger.debug(
                    "history_follow_rename",
                    commit=commit_id,
                    old_path=change.old_path,
                    new_path=tracked,
                )
                tracked = change.old_path
                tracked_bytes = encode_text(tracked)

    def find_commits(
        self,
        start: CommitId,
        path: str,
        *,
        progress: ProgressCallback | None = None,
        first_parent: bool = False,
        follow_renames: bool = False,
    ) -> CommitList:
        """Build the oldest-first list of commits that modified ``path``.

        Args:
            start: Full hex id of the commit to start from.
            path: Repository-relative path of the tracked file.
            progress: Called with each matching commit id as it is found.
                An exception raised by the callback aborts the walk and
                propagates to the caller.
            first_parent: Only traverse first-parent edges at merges.
            follow_renames: Follow the file back across renames.

        Returns:
            The commit list; empty when no commit touched the path.

        Raises:
            NoSuchRevisionError: If ``start`` does not name a commit.
        """
        entries: list[HistoryEntry] = []
        with log_duration(
            self._logger, "history_walk", start=start, path=path
        ) as extra:
            for entry in self.iter_history(
                start,
                path,
                first_parent=first_parent,
                follow_renames=follow_renames,
            ):
                if progress is not None:
                    progress(entry.commit_id)
                entries.append(entry)
            extra["commits"] = len(entries)

        entries.reverse()
        return CommitList(path, entries)
