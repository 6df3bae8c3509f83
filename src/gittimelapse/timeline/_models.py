"""Timeline models."""

from dataclasses import dataclass
from enum import StrEnum

from gittimelapse.patch import FileDiff, TextBuffer
from gittimelapse.repository import CommitRecord


class DisplayMode(StrEnum):
    """How two adjacent revisions are rendered side by side.

    ``ALIGNED`` pads both panes with placeholder rows so that corresponding
    lines share a row. ``REGULAR`` shows each revision's real text, with the
    lines that differ from the other revision highlighted.
    """

    ALIGNED = "aligned"
    REGULAR = "regular"


@dataclass(frozen=True, slots=True)
class RevisionPane:
    """One side of a side-by-side comparison.

    Attributes:
        commit: Metadata of the revision shown.
        path: Path of the file in that revision.
        buffer: Annotated text of the revision.
        is_binary: True when the file content is binary and was not diffed.
    """

    commit: CommitRecord
    path: str
    buffer: TextBuffer
    is_binary: bool = False


@dataclass(frozen=True, slots=True)
class RevisionPair:
    """A revision together with its predecessor in the file's history.

    Attributes:
        index: Position of ``current`` in the commit list.
        mode: Display mode the buffers were prepared for.
        current: The selected revision.
        previous: The preceding revision, or None for the first revision.
        diff: The diff from ``previous`` to ``current``, or None for the
            first revision.
    """

    index: int
    mode: DisplayMode
    current: RevisionPane
    previous: RevisionPane | None = None
    diff: FileDiff | None = None

    @property
    def is_first(self) -> bool:
        """Return True if the revision has no predecessor."""
        return self.previous is None
