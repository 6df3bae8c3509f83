"""Applying a unified diff to a text buffer, forwards or backwards.

One algorithm covers the four transforms, parametrized on two axes:

``Direction``
    ``FORWARD`` applies the diff to its old side ("before") and
    ``BACKWARD`` applies it to its new side ("after"). For a direction,
    *outgoing* lines exist only on the buffer's side (removed lines going
    forward, added lines going backward) and *incoming* lines exist only on
    the other side.

``Alignment``
    ``PLAIN`` removes outgoing lines and inserts incoming lines, so the
    buffer ends up holding exactly the other side's text. ``ALIGNED`` keeps
    outgoing lines and inserts a placeholder row for each incoming line, so
    that the FORWARD-aligned "before" and BACKWARD-aligned "after" buffers
    have the same number of rows per hunk and their rows correspond.

Classifications always follow the diff's own direction: a removed line (or
its placeholder) is ``DELETED`` and an added line (or its placeholder) is
``ADDED``, whichever side is being displayed.
"""

from enum import StrEnum
from typing import TYPE_CHECKING, Final

from gittimelapse.exceptions import (
    HunkApplyMismatchError,
    InvalidPatchShapeError,
    MalformedHunkError,
)
from gittimelapse.patch._models import (
    FileDiff,
    Hunk,
    HunkLine,
    LineKind,
    LineTag,
    UnifiedDiff,
)
from gittimelapse.patch._parser import parse_unified_diff
from gittimelapse.patch._text import TextBuffer
from gittimelapse.utils import create_null_logger

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

DEFAULT_PLACEHOLDER: Final = " " * 15
"""Placeholder row text: blank but with a visible width."""

_KIND_BY_TAG: Final = {
    LineTag.REMOVED: LineKind.DELETED,
    LineTag.ADDED: LineKind.ADDED,
}


class Direction(StrEnum):
    """Which side of the diff the buffer holds when the patch is applied."""

    FORWARD = "forward"
    BACKWARD = "backward"

    @property
    def outgoing(self) -> LineTag:
        """Return the tag of lines that exist only on the buffer's side."""
        return LineTag.REMOVED if self is Direction.FORWARD else LineTag.ADDED


class Alignment(StrEnum):
    """Whether the result is the other side's text or a row-aligned rendering."""

    PLAIN = "plain"
    ALIGNED = "aligned"


def single_file(diff: UnifiedDiff | FileDiff | str) -> FileDiff:
    """Return the only file section of ``diff``.

    Args:
        diff: Parsed diff, a single file section, or diff text.

    Returns:
        The file section.

    Raises:
        InvalidPatchShapeError: If the diff does not hold exactly one file.
        MalformedHunkError: If ``diff`` is text that cannot be parsed.
    """
    if isinstance(diff, FileDiff):
        return diff
    if isinstance(diff, str):
        diff = parse_unified_diff(diff)
    if len(diff.files) != 1:
        msg = f"Expected a diff of exactly one file, got {len(diff.files)}"
        raise InvalidPatchShapeError(msg, file_count=len(diff.files))
    return diff.files[0]


def _base_offset(hunk: Hunk, direction: Direction) -> int:
    return hunk.old_offset() if direction is Direction.FORWARD else hunk.new_offset()


def _target_offset(hunk: Hunk, direction: Direction) -> int:
    return hunk.new_offset() if direction is Direction.FORWARD else hunk.old_offset()


class PatchAligner:
    """Applies single-file unified diffs to text buffers.

    Attributes:
        placeholder: Text of the rows inserted for incoming lines in aligned
            mode.
        verify: Whether context and outgoing lines are compared with the
            buffer. None means "verify plain applications only".
    """

    __slots__: Final = ("_logger", "placeholder", "verify")

    def __init__(
        self,
        *,
        placeholder: str = DEFAULT_PLACEHOLDER,
        verify: bool | None = None,
        logger: "FilteringBoundLogger | None" = None,  # noqa: UP037
    ) -> None:
        """Initialize the aligner.

        Args:
            placeholder: Placeholder row text. Must be non-empty and must not
                contain a newline.
            verify: Force content verification on (True) or off (False) for
                both alignments. By default only plain applications verify.
            logger: Optional logger for diagnostics.

        Raises:
            ValueError: If ``placeholder`` is empty or contains a newline.
        """
        if not placeholder or "\n" in placeholder:
            msg = "Placeholder must be a non-empty single line"
            raise ValueError(msg)
        self.placeholder: str = placeholder
        self.verify: bool | None = verify
        self._logger: FilteringBoundLogger = logger or create_null_logger()

    def apply(
        self,
        buffer: TextBuffer,
        diff: UnifiedDiff | FileDiff | str,
        direction: Direction,
        alignment: Alignment = Alignment.PLAIN,
    ) -> TextBuffer:
        """Apply ``diff`` to ``buffer`` in place.

        Hunk start lines are converted to 0-based indices and shifted by the
        rows earlier hunks inserted or removed. Within a hunk a cursor
        advances over every row that stays in the buffer. The classification
        map is replaced, indexed by final row positions.

        The final newline follows the side the result represents when the
        diff carries a no-newline marker; otherwise the buffer keeps its own.

        Args:
            buffer: Buffer holding the old side (FORWARD) or new side
                (BACKWARD) of the diff.
            diff: Parsed diff, single file section, or diff text.
            direction: Which side ``buffer`` holds.
            alignment: Plain or aligned result.

        Returns:
            ``buffer``, for chaining.

        Raises:
            InvalidPatchShapeError: If the diff does not hold exactly one file.
            MalformedHunkError: If a hunk refers to rows outside the buffer.
            HunkApplyMismatchError: If verification is on and a context or
                outgoing line differs from the buffer row.
        """
        file_diff = single_file(diff)
        aligned = alignment is Alignment.ALIGNED
        verify = self.verify if self.verify is not None else not aligned
        outgoing = direction.outgoing

        working = list(buffer.lines)
        changes: dict[int, LineKind] = {}
        placeholders: set[int] = set()
        drift = 0

        for hunk in file_diff.hunks:
            start = _base_offset(hunk, direction) + drift
            if not 0 <= start <= len(working):
                msg = (
                    f"Hunk {hunk.header} starts at line {start + 1}, outside a "
                    f"buffer of {len(working)} lines"
                )
                raise MalformedHunkError(msg, header=hunk.header, line_number=start + 1)

            pos = 0
            for line in hunk.lines:
                index = start + pos
                if line.tag is LineTag.CONTEXT:
                    self._check(working, index, line, hunk, verify=verify)
                    pos += 1
                elif line.tag is outgoing:
                    self._check(working, index, line, hunk, verify=verify)
                    if aligned:
                        changes[index] = _KIND_BY_TAG[line.tag]
                        pos += 1
                    else:
                        del working[index]
                        drift -= 1
                else:
                    if aligned:
                        working.insert(index, self.placeholder)
                        placeholders.add(index)
                    else:
                        working.insert(index, line.content)
                    changes[index] = _KIND_BY_TAG[line.tag]
                    pos += 1
                    drift += 1

        if file_diff.has_newline_markers:
            result_is_new = (direction is Direction.FORWARD) == (not aligned)
            missing_newline = (
                file_diff.new_missing_newline
                if result_is_new
                else file_diff.old_missing_newline
            )
        else:
            missing_newline = buffer.missing_newline

        buffer.replace_lines(
            working,
            missing_newline=missing_newline,
            changes=changes,
            placeholders=placeholders,
        )
        self._logger.debug(
            "patch_applied",
            direction=direction.value,
            alignment=alignment.value,
            hunks=len(file_diff.hunks),
            lines=buffer.line_count,
            changed=len(changes),
        )
        return buffer

    @staticmethod
    def _check(
        working: list[str],
        index: int,
        line: HunkLine,
        hunk: Hunk,
        *,
        verify: bool,
    ) -> None:
        if index >= len(working):
            msg = (
                f"Hunk {hunk.header} refers to line {index + 1}, beyond the end "
                f"of a buffer of {len(working)} lines"
            )
            raise MalformedHunkError(msg, header=hunk.header, line_number=index + 1)
        if verify and working[index] != line.content:
            msg = (
                f"Hunk {hunk.header} does not match line {index + 1}: expected "
                f"{line.content!r}, found {working[index]!r}"
            )
            raise HunkApplyMismatchError(
                msg,
                line_number=index,
                expected=line.content,
                actual=working[index],
            )


def apply_patch(
    buffer: TextBuffer,
    diff: UnifiedDiff | FileDiff | str,
    direction: Direction,
    alignment: Alignment = Alignment.PLAIN,
) -> TextBuffer:
    """Apply ``diff`` to ``buffer`` with a default :class:`PatchAligner`."""
    return PatchAligner().apply(buffer, diff, direction, alignment)


def map_line(
    diff: UnifiedDiff | FileDiff | str,
    index: int,
    direction: Direction = Direction.FORWARD,
) -> int:
    """Map a line index on one side of a diff to the other side.

    ``FORWARD`` maps an old-side index to the new side and ``BACKWARD`` maps
    a new-side index to the old side. A line that exists on the source side
    only maps to the other side's row at the same position in its hunk, which
    keeps a caret or scroll position stable when switching revisions.

    Args:
        diff: Parsed diff, single file section, or diff text.
        index: 0-based line index on the source side.
        direction: Mapping direction.

    Returns:
        The 0-based line index on the other side.

    Raises:
        ValueError: If ``index`` is negative.
        InvalidPatchShapeError: If the diff does not hold exactly one file.

    Example:
        >>> diff = diff_texts("a\\nb\\nc\\n", "a\\nc\\n", old_path="f", new_path="f")
        >>> map_line(diff, 2)
        1
    """
    if index < 0:
        msg = f"Line index must not be negative: {index}"
        raise ValueError(msg)

    file_diff = single_file(diff)
    outgoing = direction.outgoing
    delta = 0
    for hunk in file_diff.hunks:
        source = _base_offset(hunk, direction)
        if index < source:
            break
        target = _target_offset(hunk, direction)
        for line in hunk.lines:
            if line.tag is LineTag.CONTEXT:
                if source == index:
                    return target
                source += 1
                target += 1
            elif line.tag is outgoing:
                if source == index:
                    return target
                source += 1
            else:
                target += 1
        delta = target - source
    return index + delta
