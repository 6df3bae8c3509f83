# ruff: noqa: TC003  # datetime needed at runtime for dataclass fields
"""Repository models.

This module defines the read-only records produced while walking a file's
history: commit metadata, per-commit path changes and the ordered commit
list that drives the timeline.
"""

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import overload, override

type CommitId = str
"""Full 40-character lowercase hex commit id."""


class ChangeKind(StrEnum):
    """Path-level change classification between a commit and its first parent."""

    ADDED = "added"
    DELETED = "deleted"
    MODIFIED = "modified"
    RENAMED = "renamed"
    COPIED = "copied"


# Kinds that count as "the path was touched" when matched on the new path.
TOUCHING_KINDS: frozenset[ChangeKind] = frozenset(
    {ChangeKind.ADDED, ChangeKind.MODIFIED, ChangeKind.RENAMED, ChangeKind.COPIED}
)


@dataclass(frozen=True, slots=True)
class Identity:
    """A git author or committer signature.

    Attributes:
        name: Display name.
        email: Email address without angle brackets (may be empty).
        timestamp: Signature time with the signer's UTC offset.
    """

    name: str
    email: str
    timestamp: datetime

    @override
    def __str__(self) -> str:
        if self.email:
            return f"{self.name} <{self.email}>"
        return self.name


@dataclass(frozen=True, slots=True)
class CommitRecord:
    """Metadata about a single commit.

    Attributes:
        id: Full commit id.
        parent_ids: Parent commit ids in recorded order (first parent first).
        author: Author signature.
        committer: Committer signature.
        commit_time: Commit timestamp (the committer's time).
        message: Full commit message, or None when it was not requested.
    """

    id: CommitId
    parent_ids: tuple[CommitId, ...]
    author: Identity
    committer: Identity
    commit_time: datetime
    message: str | None = None

    @property
    def short_id(self) -> str:
        """Return the conventional 7-character abbreviation of the id."""
        return self.id[:7]

    @property
    def summary(self) -> str:
        """Return the first line of the message, or an empty string."""
        lines = (self.message or "").strip().splitlines()
        return lines[0] if lines else ""


@dataclass(frozen=True, slots=True)
class PathChange:
    """A single path change between a commit and its first parent.

    Attributes:
        old_path: Path in the parent tree, or None for additions.
        new_path: Path in the commit tree, or None for deletions.
        kind: The change classification.
        old_id: Blob id in the parent tree, or None for additions.
        new_id: Blob id in the commit tree, or None for deletions.
    """

    old_path: str | None
    new_path: str | None
    kind: ChangeKind
    old_id: str | None = None
    new_id: str | None = None

    def touches(self, path: str) -> bool:
        """Return True if this change counts as modifying ``path``."""
        return self.kind in TOUCHING_KINDS and self.new_path == path


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    """A commit that modified the tracked file.

    Attributes:
        commit_id: The matching commit.
        path: Repository-relative path the file had in that commit.
        change: The path change that made the commit match, when computed.
    """

    commit_id: CommitId
    path: str
    change: PathChange | None = None


class CommitList(Sequence[CommitId]):
    """Immutable, oldest-first list of the commits that touched a path.

    Supports positional indexing, membership tests and predecessor lookup.
    An empty list means no commit reachable from the start revision touched
    the path.

    Attributes:
        path: The path the history was requested for.
    """

    __slots__: tuple[str, ...] = ("_entries", "_ids", "_positions", "path")

    def __init__(self, path: str, entries: Sequence[HistoryEntry] = ()) -> None:
        """Initialize the list.

        Args:
            path: The repository-relative path the history belongs to.
            entries: History entries, oldest first.

        Raises:
            ValueError: If a commit id appears more than once.
        """
        self.path: str = path
        self._entries: tuple[HistoryEntry, ...] = tuple(entries)
        self._ids: tuple[CommitId, ...] = tuple(e.commit_id for e in self._entries)
        self._positions: dict[CommitId, int] = {
            commit_id: index for index, commit_id in enumerate(self._ids)
        }
        if len(self._positions) != len(self._ids):
            msg = f"Duplicate commit ids in history of {path}"
            raise ValueError(msg)

    @overload
    def __getitem__(self, index: int) -> CommitId: ...

    @overload
    def __getitem__(self, index: slice) -> Sequence[CommitId]: ...

    @override
    def __getitem__(self, index: int | slice) -> CommitId | Sequence[CommitId]:
        return self._ids[index]

    @override
    def __len__(self) -> int:
        return len(self._ids)

    @override
    def __iter__(self) -> Iterator[CommitId]:
        return iter(self._ids)

    @override
    def __contains__(self, value: object) -> bool:
        return value in self._positions

    @override
    def __eq__(self, other: object) -> bool:
        if isinstance(other, CommitList):
            return self._ids == other._ids
        if isinstance(other, Sequence) and not isinstance(other, str):
            return list(self._ids) == list(other)  # pyright: ignore[reportUnknownArgumentType]
        return NotImplemented

    @override
    def __hash__(self) -> int:
        return hash(self._ids)

    @override
    def __repr__(self) -> str:
        return f"CommitList(path={self.path!r}, commits={list(self._ids)!r})"

    @property
    def entries(self) -> tuple[HistoryEntry, ...]:
        """Return the history entries, oldest first."""
        return self._entries

    def index_of(self, commit_id: CommitId) -> int | None:
        """Return the position of ``commit_id``, or None if it is not listed."""
        return self._positions.get(commit_id)

    def predecessor(self, commit_id: CommitId) -> CommitId | None:
        """Return the commit immediately before ``commit_id``.

        Returns:
            The preceding commit id, or None if ``commit_id`` is the first
            element or is not in the list.
        """
        index = self._positions.get(commit_id)
        if index is None or index == 0:
            return None
        return self._ids[index - 1]

    def latest(self) -> CommitId | None:
        """Return the newest commit, or None for an empty history."""
        return self._ids[-1] if self._ids else None

    def path_at(self, commit_id: CommitId) -> str:
        """Return the path the file had at ``commit_id``.

        Raises:
            KeyError: If ``commit_id`` is not in the list.
        """
        return self._entries[self._positions[commit_id]].path
