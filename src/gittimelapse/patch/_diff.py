"""Unified diff generation between two revisions of a file.

Lines are compared with their terminators, so a last line without a
trailing newline differs from the same text with one, exactly as git sees
it. Every line lacking a newline is followed by the
``\\ No newline at end of file`` marker.
"""

from difflib import SequenceMatcher
from typing import Final

from dulwich.patch import is_binary

from gittimelapse.utils import decode_bytes

NO_NEWLINE_MARKER: Final = "\\ No newline at end of file"
DEFAULT_CONTEXT_LINES: Final = 3


def split_lines(text: str) -> list[str]:
    """Split ``text`` on ``\\n`` only, keeping the terminators.

    Carriage returns and other Unicode line breaks stay part of the line.

    Example:
        >>> split_lines("a\\r\\nb")
        ['a\\r\\n', 'b']
    """
    parts = text.split("\n")
    lines = [part + "\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def _header_start(index: int, count: int) -> int:
    return index + 1 if count else index


def _format_range(index: int, count: int) -> str:
    start = _header_start(index, count)
    return str(start) if count == 1 else f"{start},{count}"


def _emit(out: list[str], prefix: str, line: str) -> None:
    if line.endswith("\n"):
        out.append(f"{prefix}{line}")
    else:
        out.append(f"{prefix}{line}\n{NO_NEWLINE_MARKER}\n")


def _file_header(old_path: str | None, new_path: str | None) -> list[str]:
    a_path = old_path if old_path is not None else new_path
    b_path = new_path if new_path is not None else old_path
    header = [f"diff --git a/{a_path} b/{b_path}\n"]
    if old_path is not None and new_path is not None and old_path != new_path:
        header.append(f"rename from {old_path}\n")
        header.append(f"rename to {new_path}\n")
    elif old_path is None:
        header.append("new file mode 100644\n")
    elif new_path is None:
        header.append("deleted file mode 100644\n")
    return header


def _display_path(path: str | None, prefix: str) -> str:
    return "/dev/null" if path is None else f"{prefix}{path}"


def diff_texts(
    old: str,
    new: str,
    *,
    old_path: str | None,
    new_path: str | None,
    context_lines: int = DEFAULT_CONTEXT_LINES,
) -> str:
    """Produce a single-file unified diff between two texts.

    The file header is always written, so identical texts produce a diff
    with one file section and no hunks.

    Args:
        old: Old revision text.
        new: New revision text.
        old_path: Path on the old side, or None for a created file.
        new_path: Path on the new side, or None for a deleted file.
        context_lines: Unchanged lines shown around each change.

    Returns:
        The diff text.

    Example:
        >>> print(diff_texts("x\\ny\\n", "x\\ny2\\nz\\n", old_path="f", new_path="f"))
        diff --git a/f b/f
        --- a/f
        +++ b/f
        @@ -1,2 +1,3 @@
         x
        -y
        +y2
        +z
    """
    old_lines = split_lines(old)
    new_lines = split_lines(new)

    out = _file_header(old_path, new_path)
    out.append(f"--- {_display_path(old_path, 'a/')}\n")
    out.append(f"+++ {_display_path(new_path, 'b/')}\n")

    matcher = SequenceMatcher(None, old_lines, new_lines, autojunk=False)
    for group in matcher.get_grouped_opcodes(context_lines):
        _, old_begin, _, new_begin, _ = group[0]
        _, _, old_end, _, new_end = group[-1]
        out.append(
            f"@@ -{_format_range(old_begin, old_end - old_begin)} "
            f"+{_format_range(new_begin, new_end - new_begin)} @@\n"
        )
        for tag, i1, i2, j1, j2 in group:
            if tag == "equal":
                for line in old_lines[i1:i2]:
                    _emit(out, " ", line)
                continue
            if tag in {"replace", "delete"}:
                for line in old_lines[i1:i2]:
                    _emit(out, "-", line)
            if tag in {"replace", "insert"}:
                for line in new_lines[j1:j2]:
                    _emit(out, "+", line)

    return "".join(out)


def diff_blobs(
    old: bytes,
    new: bytes,
    *,
    old_path: str | None,
    new_path: str | None,
    context_lines: int = DEFAULT_CONTEXT_LINES,
) -> str:
    """Produce a single-file unified diff between two blob contents.

    Binary content (a NUL byte near the start, as git decides) yields a
    ``Binary files ... differ`` section without hunks.

    Args:
        old: Old blob bytes.
        new: New blob bytes.
        old_path: Path on the old side, or None for a created file.
        new_path: Path on the new side, or None for a deleted file.
        context_lines: Unchanged lines shown around each change.

    Returns:
        The diff text.
    """
    if is_binary(old) or is_binary(new):
        out = _file_header(old_path, new_path)
        if old != new:
            out.append(
                f"Binary files {_display_path(old_path, 'a/')} and "
                f"{_display_path(new_path, 'b/')} differ\n"
            )
        return "".join(out)

    return diff_texts(
        decode_bytes(old),
        decode_bytes(new),
        old_path=old_path,
        new_path=new_path,
        context_lines=context_lines,
    )
