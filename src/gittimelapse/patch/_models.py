"""Unified diff models.

A parsed diff is a tuple of file sections; each file section is a tuple of
hunks; each hunk carries its header ranges and its tagged body lines. All
models are immutable.
"""

from dataclasses import dataclass
from enum import StrEnum


class LineTag(StrEnum):
    """Body line tag, named after the unified diff prefix character."""

    CONTEXT = " "
    REMOVED = "-"
    ADDED = "+"


class LineKind(StrEnum):
    """Per-line change classification of an annotated text buffer."""

    UNCHANGED = "unchanged"
    ADDED = "added"
    DELETED = "deleted"


@dataclass(frozen=True, slots=True)
class HunkLine:
    """A single hunk body line.

    Attributes:
        tag: Whether the line is context, removed or added.
        content: Line text without the prefix character and newline.
    """

    tag: LineTag
    content: str


@dataclass(frozen=True, slots=True)
class Hunk:
    """A contiguous region of line changes.

    Start lines are 1-based as written in the header. For an empty range
    (count 0) the start names the line *after which* the range sits, so 0
    means "before the first line".

    Attributes:
        old_start: Start line on the old side.
        old_count: Number of old-side lines (context plus removed).
        new_start: Start line on the new side.
        new_count: Number of new-side lines (context plus added).
        lines: Body lines in diff order.
        section: Optional heading text following the closing ``@@``.
    """

    old_start: int
    old_count: int
    new_start: int
    new_count: int
    lines: tuple[HunkLine, ...]
    section: str = ""

    @property
    def header(self) -> str:
        """Return the hunk header line as it appears in a diff."""
        header = (
            f"@@ -{_format_range(self.old_start, self.old_count)} "
            f"+{_format_range(self.new_start, self.new_count)} @@"
        )
        return f"{header} {self.section}" if self.section else header

    def old_offset(self) -> int:
        """Return the 0-based index of the first old-side line."""
        return _range_offset(self.old_start, self.old_count)

    def new_offset(self) -> int:
        """Return the 0-based index of the first new-side line."""
        return _range_offset(self.new_start, self.new_count)


def _format_range(start: int, count: int) -> str:
    return str(start) if count == 1 else f"{start},{count}"


def _range_offset(start: int, count: int) -> int:
    return start if count == 0 else start - 1


@dataclass(frozen=True, slots=True)
class FileDiff:
    """The changes to a single file.

    Attributes:
        old_path: Path on the old side, or None for a created file.
        new_path: Path on the new side, or None for a deleted file.
        hunks: Hunks in file order.
        is_binary: True when the content was not diffed line by line.
        old_missing_newline: The old side's last line lacks a newline.
        new_missing_newline: The new side's last line lacks a newline.
    """

    old_path: str | None
    new_path: str | None
    hunks: tuple[Hunk, ...] = ()
    is_binary: bool = False
    old_missing_newline: bool = False
    new_missing_newline: bool = False

    @property
    def has_newline_markers(self) -> bool:
        """Return True if the diff recorded a missing final newline on either side."""
        return self.old_missing_newline or self.new_missing_newline


@dataclass(frozen=True, slots=True)
class UnifiedDiff:
    """A parsed unified diff.

    Attributes:
        files: File sections in diff order.
    """

    files: tuple[FileDiff, ...] = ()
