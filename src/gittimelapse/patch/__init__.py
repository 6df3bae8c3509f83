"""Unified diffs and their application to annotated text buffers.

Functions:
    diff_texts / diff_blobs: Build a single-file unified diff.
    parse_unified_diff: Parse diff text into file sections and hunks.
    map_line: Map a line index across a diff.

Classes:
    PatchAligner: Applies a diff forwards or backwards, plain or aligned.
    TextBuffer: One revision of a file with per-line annotations.
    LineChangeMap: Read-only line index to LineKind mapping.

Example:
    >>> from gittimelapse.patch import Direction, PatchAligner, TextBuffer, diff_texts
    >>> diff = diff_texts("x\\ny\\n", "x\\ny2\\nz\\n", old_path="f", new_path="f")
    >>> buffer = PatchAligner().apply(TextBuffer("x\\ny\\n"), diff, Direction.FORWARD)
    >>> buffer.text
    'x\\ny2\\nz\\n'
"""

from gittimelapse.patch._aligner import (
    DEFAULT_PLACEHOLDER,
    Alignment,
    Direction,
    PatchAligner,
    apply_patch,
    map_line,
    single_file,
)
from gittimelapse.patch._diff import (
    DEFAULT_CONTEXT_LINES,
    NO_NEWLINE_MARKER,
    diff_blobs,
    diff_texts,
    split_lines,
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
from gittimelapse.patch._text import LineChangeMap, LineSpan, TextBuffer

__all__ = [
    "DEFAULT_CONTEXT_LINES",
    "DEFAULT_PLACEHOLDER",
    "NO_NEWLINE_MARKER",
    "Alignment",
    "Direction",
    "FileDiff",
    "Hunk",
    "HunkLine",
    "LineChangeMap",
    "LineKind",
    "LineSpan",
    "LineTag",
    "PatchAligner",
    "TextBuffer",
    "UnifiedDiff",
    "apply_patch",
    "diff_blobs",
    "diff_texts",
    "map_line",
    "parse_unified_diff",
    "single_file",
    "split_lines",
]
