"""Annotated text buffers.

A ``TextBuffer`` holds one revision of a file as a list of lines, the
character span of every line within the buffer text, the change
classification produced by the last patch application, and the rows that
are alignment placeholders rather than real file lines.
"""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Final, Self, override

from gittimelapse.patch._models import LineKind
from gittimelapse.utils import decode_bytes, encode_text


@dataclass(frozen=True, slots=True)
class LineSpan:
    """Character offsets of one line within the buffer text.

    The span includes the line's terminating newline, if any, so that the
    spans of consecutive lines are contiguous.

    Attributes:
        start: Offset of the first character of the line.
        end: Offset just past the line's newline (or past the last character
            for a final line without one).
    """

    start: int
    end: int

    @property
    def length(self) -> int:
        """Return the number of characters covered."""
        return self.end - self.start


class LineChangeMap(Mapping[int, LineKind]):
    """Read-only map from line index to change classification.

    Iteration, ``len`` and membership cover the recorded (changed) lines
    only, in ascending order. Looking up an unrecorded line index that lies
    inside the buffer returns ``LineKind.UNCHANGED``.
    """

    __slots__: Final = ("_changes", "_line_count")

    def __init__(
        self,
        changes: Mapping[int, LineKind] | None = None,
        *,
        line_count: int = 0,
    ) -> None:
        """Initialize the map.

        Args:
            changes: Recorded classifications keyed by line index.
            line_count: Number of lines in the buffer the map describes.
        """
        self._changes: dict[int, LineKind] = dict(sorted((changes or {}).items()))
        self._line_count: int = line_count

    @override
    def __getitem__(self, index: int) -> LineKind:
        if index in self._changes:
            return self._changes[index]
        if 0 <= index < self._line_count:
            return LineKind.UNCHANGED
        raise KeyError(index)

    @override
    def __iter__(self) -> Iterator[int]:
        return iter(self._changes)

    @override
    def __len__(self) -> int:
        return len(self._changes)

    @override
    def __contains__(self, key: object) -> bool:
        return key in self._changes

    @override
    def __repr__(self) -> str:
        return f"LineChangeMap({self._changes!r})"

    def lines_of(self, kind: LineKind) -> list[int]:
        """Return the indices classified as ``kind``, ascending."""
        return [index for index, value in self._changes.items() if value is kind]


def _split(text: str) -> tuple[list[str], bool]:
    """Split text into lines and report whether the final newline is missing."""
    if not text:
        return [], False
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
        return lines, False
    return lines, True


def _join(lines: list[str], *, missing_newline: bool) -> str:
    if not lines:
        return ""
    body = "\n".join(lines)
    return body if missing_newline else f"{body}\n"


class TextBuffer:
    """One revision of a text file, with per-line change annotations.

    Lines are split on ``\\n`` only. A trailing newline terminates the last
    line rather than starting an empty one, so ``"x\\ny\\n"`` has the two
    lines ``x`` and ``y`` and ``""`` has none.

    Example:
        >>> buffer = TextBuffer("x\\ny\\n")
        >>> buffer.lines
        ('x', 'y')
        >>> buffer.spans
        (LineSpan(start=0, end=2), LineSpan(start=2, end=4))
    """

    __slots__: Final = (
        "_changes",
        "_lines",
        "_missing_newline",
        "_placeholders",
        "_spans",
        "_text",
    )

    def __init__(self, text: str = "") -> None:
        """Initialize the buffer with ``text`` and no annotations."""
        self._text: str = ""
        self._lines: list[str] = []
        self._missing_newline: bool = False
        self._spans: tuple[LineSpan, ...] = ()
        self._changes: LineChangeMap = LineChangeMap()
        self._placeholders: frozenset[int] = frozenset()
        self.set_text(text)

    @classmethod
    def from_bytes(cls, data: bytes) -> Self:
        """Create a buffer from raw file bytes.

        Undecodable bytes are preserved, so :meth:`to_bytes` returns ``data``
        unchanged as long as no patch has been applied.
        """
        return cls(decode_bytes(data))

    def to_bytes(self) -> bytes:
        """Return the buffer text encoded back to bytes."""
        return encode_text(self._text)

    # =========================================================================
    # Content
    # =========================================================================

    @property
    def text(self) -> str:
        """Return the full buffer text."""
        return self._text

    @property
    def lines(self) -> tuple[str, ...]:
        """Return the lines without their newlines."""
        return tuple(self._lines)

    @property
    def line_count(self) -> int:
        """Return the number of lines."""
        return len(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    @property
    def missing_newline(self) -> bool:
        """Return True if the last line has no terminating newline."""
        return self._missing_newline

    def set_text(self, text: str) -> None:
        """Replace the content and clear all annotations."""
        lines, missing_newline = _split(text)
        self.replace_lines(lines, missing_newline=missing_newline)

    def replace_lines(
        self,
        lines: Iterable[str],
        *,
        missing_newline: bool = False,
        changes: Mapping[int, LineKind] | None = None,
        placeholders: Iterable[int] = (),
    ) -> None:
        """Replace the line sequence and its annotations in one step.

        The buffer text is rebuilt by joining the lines with ``\\n`` and
        appending a final newline unless ``missing_newline`` is set. Spans
        are recomputed.

        Args:
            lines: New lines, without newlines.
            missing_newline: Omit the newline after the last line.
            changes: Classification of changed lines, by final index.
            placeholders: Indices of rows that are alignment placeholders.

        Raises:
            ValueError: If a line contains a newline, or an annotated index
                is outside the new line range.
        """
        new_lines = list(lines)
        if any("\n" in line for line in new_lines):
            msg = "Lines must not contain newline characters"
            raise ValueError(msg)

        changes = dict(changes or {})
        placeholder_set = frozenset(placeholders)
        out_of_range = [
            index
            for index in (*changes, *placeholder_set)
            if not 0 <= index < len(new_lines)
        ]
        if out_of_range:
            msg = f"Annotated line indices outside the buffer: {sorted(out_of_range)}"
            raise ValueError(msg)

        self._lines = new_lines
        self._missing_newline = missing_newline and bool(new_lines)
        self._text = _join(new_lines, missing_newline=self._missing_newline)
        self._changes = LineChangeMap(changes, line_count=len(new_lines))
        self._placeholders = placeholder_set
        self.recompute_spans()

    # =========================================================================
    # Spans
    # =========================================================================

    @property
    def spans(self) -> tuple[LineSpan, ...]:
        """Return the character span of every line."""
        return self._spans

    def recompute_spans(self) -> tuple[LineSpan, ...]:
        """Recompute the line spans from the current lines.

        Returns:
            The recomputed spans, contiguous and covering the whole text.
        """
        spans: list[LineSpan] = []
        offset = 0
        last = len(self._lines) - 1
        for index, line in enumerate(self._lines):
            end = offset + len(line)
            if index < last or not self._missing_newline:
                end += 1
            spans.append(LineSpan(start=offset, end=end))
            offset = end
        self._spans = tuple(spans)
        return self._spans

    def line_at_offset(self, offset: int) -> int:
        """Return the index of the line containing character ``offset``.

        Raises:
            IndexError: If ``offset`` is outside the text.
        """
        if not 0 <= offset < len(self._text):
            msg = f"Offset {offset} outside text of length {len(self._text)}"
            raise IndexError(msg)
        low, high = 0, len(self._spans) - 1
        while low < high:
            middle = (low + high) // 2
            if self._spans[middle].end <= offset:
                low = middle + 1
            else:
                high = middle
        return low

    # =========================================================================
    # Annotations
    # =========================================================================

    @property
    def changes(self) -> LineChangeMap:
        """Return the classification recorded by the last patch application."""
        return self._changes

    def changed_lines(self) -> LineChangeMap:
        """Return the changed lines and their classification.

        This is the hook used by renderers to pick a style per line span.
        """
        return self._changes

    def change_kind(self, index: int) -> LineKind:
        """Return the classification of line ``index``.

        Raises:
            IndexError: If ``index`` is outside the buffer.
        """
        if not 0 <= index < len(self._lines):
            msg = f"Line {index} outside buffer of {len(self._lines)} lines"
            raise IndexError(msg)
        return self._changes[index]

    @property
    def placeholders(self) -> frozenset[int]:
        """Return the indices of alignment placeholder rows."""
        return self._placeholders

    def is_placeholder(self, index: int) -> bool:
        """Return True if row ``index`` is an alignment placeholder."""
        return index in self._placeholders

    @override
    def __repr__(self) -> str:
        return (
            f"TextBuffer(lines={len(self._lines)}, changes={len(self._changes)}, "
            f"placeholders={len(self._placeholders)})"
        )
