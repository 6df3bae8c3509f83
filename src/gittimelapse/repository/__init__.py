"""Git repository access for file history browsing.

This package locates and opens repositories, resolves revisions, walks the
commits that modified a file and reads file contents out of commit trees.

Classes:
    TimelapseRepository: Session-long handle bundling every operation below.
    HistoryWalker: Finds the commits that modified a path.
    BlobReader: Reads a file's bytes from a commit tree.

Models:
    CommitId: Full hex commit id.
    CommitList: Oldest-first list of the commits that touched a path.
    CommitRecord: Commit metadata.
    Identity: Author or committer signature.
    ChangeKind: Path-level change classification.
    PathChange: A single path change between a commit and its first parent.
    HistoryEntry: A matching commit plus the path the file had there.

Example:
    >>> from gittimelapse.repository import TimelapseRepository
    >>> with TimelapseRepository.discover() as repo:
    ...     commits = repo.find_commits("README.md")
    ...     previous = commits.predecessor(commits.latest())
"""

from gittimelapse.repository._blob import BlobReader
from gittimelapse.repository._commits import (
    load_commit,
    parse_identity,
    to_commit_record,
)
from gittimelapse.repository._history import (
    DEFAULT_RENAME_THRESHOLD,
    HistoryWalker,
    ProgressCallback,
    predecessor,
)
from gittimelapse.repository._models import (
    ChangeKind,
    CommitId,
    CommitList,
    CommitRecord,
    HistoryEntry,
    Identity,
    PathChange,
)
from gittimelapse.repository._paths import normalize_path
from gittimelapse.repository._repository import TimelapseRepository

__all__ = [
    "DEFAULT_RENAME_THRESHOLD",
    "BlobReader",
    "ChangeKind",
    "CommitId",
    "CommitList",
    "CommitRecord",
    "HistoryEntry",
    "HistoryWalker",
    "Identity",
    "PathChange",
    "ProgressCallback",
    "TimelapseRepository",
    "load_commit",
    "normalize_path",
    "parse_identity",
    "predecessor",
    "to_commit_record",
]
