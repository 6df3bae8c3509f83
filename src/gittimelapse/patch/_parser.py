"""Unified diff parsing.

Hunk bodies are read by the line counts in their headers rather than by
looking for the next header, so body lines that happen to start with
``---``, ``+++`` or ``@@`` are handled correctly.
"""

import re
from typing import Final

from gittimelapse.exceptions import MalformedHunkError
from gittimelapse.patch._models import FileDiff, Hunk, HunkLine, LineTag, UnifiedDiff

_GIT_HEADER: Final = "diff --git "
_HUNK_HEADER: Final = re.compile(
    r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@ ?(.*)$"
)
_DEV_NULL: Final = "/dev/null"


def _strip_path(raw: str, prefix: str) -> str | None:
    """Turn a ``---``/``+++`` operand into a path, or None for /dev/null."""
    path = raw.split("\t", 1)[0]
    if path == _DEV_NULL:
        return None
    if path.startswith(prefix):
        return path[len(prefix) :]
    return path


class _FileBuilder:
    """Mutable accumulator for one file section."""

    __slots__: Final = (
        "has_file_lines",
        "hunks",
        "is_binary",
        "new_missing_newline",
        "new_path",
        "old_missing_newline",
        "old_path",
    )

    def __init__(
        self, old_path: str | None = None, new_path: str | None = None
    ) -> None:
        self.old_path: str | None = old_path
        self.new_path: str | None = new_path
        self.hunks: list[Hunk] = []
        self.is_binary: bool = False
        self.old_missing_newline: bool = False
        self.new_missing_newline: bool = False
        self.has_file_lines: bool = False

    def build(self) -> FileDiff:
        return FileDiff(
            old_path=self.old_path,
            new_path=self.new_path,
            hunks=tuple(self.hunks),
            is_binary=self.is_binary,
            old_missing_newline=self.old_missing_newline,
            new_missing_newline=self.new_missing_newline,
        )


def _parse_git_header(line: str) -> _FileBuilder:
    operands = line[len(_GIT_HEADER) :]
    if operands.startswith("a/") and " b/" in operands:
        old, new = operands[2:].split(" b/", 1)
        return _FileBuilder(old, new)
    return _FileBuilder()


def _mark_missing_newline(
    builder: _FileBuilder, tag: LineTag | None, header: str, line_number: int
) -> None:
    if tag is None:
        msg = "No-newline marker without a preceding line"
        raise MalformedHunkError(msg, header=header, line_number=line_number)
    if tag is not LineTag.ADDED:
        builder.old_missing_newline = True
    if tag is not LineTag.REMOVED:
        builder.new_missing_newline = True


def _parse_hunk(lines: list[str], index: int, builder: _FileBuilder) -> int:
    """Parse the hunk starting at ``lines[index]``; return the next index."""
    header = lines[index]
    match = _HUNK_HEADER.match(header)
    if match is None:
        msg = f"Invalid hunk header: {header!r}"
        raise MalformedHunkError(msg, header=header, line_number=index + 1)

    old_start = int(match.group(1))
    old_count = int(match.group(2)) if match.group(2) is not None else 1
    new_start = int(match.group(3))
    new_count = int(match.group(4)) if match.group(4) is not None else 1

    remaining_old = old_count
    remaining_new = new_count
    body: list[HunkLine] = []
    last_tag: LineTag | None = None
    index += 1

    while remaining_old > 0 or remaining_new > 0:
        if index >= len(lines):
            msg = f"Hunk body is truncated: {header!r}"
            raise MalformedHunkError(msg, header=header, line_number=index + 1)

        line = lines[index]
        if line.startswith("\\"):
            _mark_missing_newline(builder, last_tag, header, index + 1)
            index += 1
            continue

        # Some tools strip the single space of an empty context line.
        prefix, content = (line[0], line[1:]) if line else (" ", "")
        if prefix == " ":
            tag = LineTag.CONTEXT
            remaining_old -= 1
            remaining_new -= 1
        elif prefix == "-":
            tag = LineTag.REMOVED
            remaining_old -= 1
        elif prefix == "+":
            tag = LineTag.ADDED
            remaining_new -= 1
        else:
            msg = f"Unexpected line in hunk body: {line!r}"
            raise MalformedHunkError(msg, header=header, line_number=index + 1)

        if remaining_old < 0 or remaining_new < 0:
            msg = f"Hunk body does not match its header counts: {header!r}"
            raise MalformedHunkError(msg, header=header, line_number=index + 1)

        body.append(HunkLine(tag=tag, content=content))
        last_tag = tag
        index += 1

    if index < len(lines) and lines[index].startswith("\\"):
        _mark_missing_newline(builder, last_tag, header, index + 1)
        index += 1

    builder.hunks.append(
        Hunk(
            old_start=old_start,
            old_count=old_count,
            new_start=new_start,
            new_count=new_count,
            lines=tuple(body),
            section=match.group(5),
        )
    )
    return index


def parse_unified_diff(text: str) -> UnifiedDiff:
    """Parse unified diff text into file sections and hunks.

    A new file section starts at each ``diff --git`` line, or at a
    ``---``/``+++`` pair that follows hunks or another pair. ``a/`` and
    ``b/`` prefixes are stripped and ``/dev/null`` becomes a missing path.
    Header counts default to 1 when omitted. A ``\\`` marker line flags the
    side of the line before it as lacking a final newline (both sides for a
    context line). Of the extended header lines only ``rename from``,
    ``rename to``, ``new file mode``, ``deleted file mode`` and
    ``Binary files`` are interpreted.

    Args:
        text: The diff text.

    Returns:
        The parsed diff.

    Raises:
        MalformedHunkError: If a hunk header is invalid, a hunk body is
            truncated or inconsistent with its header, or a hunk appears
            before any file header.
    """
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()

    files: list[_FileBuilder] = []
    current: _FileBuilder | None = None
    index = 0

    while index < len(lines):
        line = lines[index]

        if line.startswith(_GIT_HEADER):
            current = _parse_git_header(line)
            files.append(current)
            index += 1
            continue

        if (
            line.startswith("--- ")
            and index + 1 < len(lines)
            and lines[index + 1].startswith("+++ ")
        ):
            if current is None or current.has_file_lines or current.hunks:
                current = _FileBuilder()
                files.append(current)
            current.old_path = _strip_path(line[4:], "a/")
            current.new_path = _strip_path(lines[index + 1][4:], "b/")
            current.has_file_lines = True
            index += 2
            continue

        if line.startswith("@@"):
            if current is None:
                msg = f"Hunk before any file header: {line!r}"
                raise MalformedHunkError(msg, header=line, line_number=index + 1)
            index = _parse_hunk(lines, index, current)
            continue

        if current is not None:
            if line.startswith("Binary files "):
                current.is_binary = True
            elif line.startswith("rename from "):
                current.old_path = line[len("rename from ") :]
            elif line.startswith("rename to "):
                current.new_path = line[len("rename to ") :]
            elif line.startswith("new file mode "):
                current.old_path = None
            elif line.startswith("deleted file mode "):
                current.new_path = None
        index += 1

    return UnifiedDiff(files=tuple(builder.build() for builder in files))
