from datetime import UTC, datetime, timedelta, timezone

import pytest
from rich.console import Console

from gittimelapse.cli._render import (
    focus_rows,
    format_identity,
    line_numbers,
    render_commit_info,
    render_pair,
)
from gittimelapse.patch import LineKind, TextBuffer
from gittimelapse.repository import CommitRecord, Identity
from gittimelapse.timeline import DisplayMode, RevisionPair, RevisionPane

WHEN = datetime(2024, 3, 1, 12, 30, tzinfo=UTC)
PLUS_TWO = timezone(timedelta(hours=2))


def _record(
    commit_id: str = "a" * 40,
    *,
    message: str = "Change f\n\nDetails",
    committer: str = "Ada",
) -> CommitRecord:
    author = Identity(name="Ada", email="ada@example.com", timestamp=WHEN)
    return CommitRecord(
        id=commit_id,
        parent_ids=(),
        author=author,
        committer=Identity(name=committer, email="ada@example.com", timestamp=WHEN),
        commit_time=WHEN,
        message=message,
    )


def _rendered(console: Console, renderable: object) -> str:
    console.print(renderable)
    return console.export_text()


def _aligned_buffer(lines: list[str], placeholders: list[int]) -> TextBuffer:
    buffer = TextBuffer()
    buffer.replace_lines(
        lines,
        changes={index: LineKind.ADDED for index in placeholders},
        placeholders=placeholders,
    )
    return buffer


class TestFormatIdentity:
    def test_includes_email_and_offset(self) -> None:
        identity = Identity(
            name="Ada",
            email="ada@example.com",
            timestamp=datetime(2024, 1, 2, 3, 4, 5, tzinfo=PLUS_TWO),
        )

        expected = "Ada <ada@example.com>, 2024-01-02 03:04:05 +0200"
        assert format_identity(identity) == expected


class TestLineNumbers:
    def test_placeholders_have_no_number(self) -> None:
        buffer = _aligned_buffer(["a", " ", "b", " "], [1, 3])

        assert line_numbers(buffer) == [1, None, 2, None]


class TestFocusRows:
    def test_window_around_line(self) -> None:
        buffer = TextBuffer("".join(f"{n}\n" for n in range(10)))

        assert focus_rows(buffer, 5, 2) == range(2, 7)

    def test_window_clipped_at_edges(self) -> None:
        buffer = TextBuffer("a\nb\nc\n")

        assert focus_rows(buffer, 1, 5) == range(0, 3)

    def test_skips_placeholders(self) -> None:
        buffer = _aligned_buffer(["a", " ", " ", "b", "c"], [1, 2])

        assert focus_rows(buffer, 2, 0) == range(3, 4)

    def test_line_past_end_focuses_last_row(self) -> None:
        buffer = TextBuffer("a\nb\n")

        assert focus_rows(buffer, 40, 0) == range(1, 2)


class TestRenderCommitInfo:
    def test_shows_metadata(self, console: Console) -> None:
        pane = RevisionPane(commit=_record(), path="src/f.txt", buffer=TextBuffer())

        output = _rendered(console, render_commit_info(pane, title="Current"))

        assert "Current" in output
        assert "a" * 40 in output
        assert "src/f.txt" in output
        assert "Ada <ada@example.com>" in output
        assert "Change f" in output
        assert "Details" not in output
        assert "Committer" not in output

    def test_shows_distinct_committer(self, console: Console) -> None:
        pane = RevisionPane(
            commit=_record(committer="Bob"), path="f.txt", buffer=TextBuffer()
        )

        output = _rendered(console, render_commit_info(pane))

        assert "Committer" in output
        assert "Bob" in output


class TestRenderPair:
    @pytest.fixture
    def pair(self) -> RevisionPair:
        previous = _aligned_buffer(["x", "y", " ", " "], [2, 3])
        current = _aligned_buffer(["x", " ", "y2", "z"], [1])
        return RevisionPair(
            index=1,
            mode=DisplayMode.ALIGNED,
            current=RevisionPane(
                commit=_record("b" * 40), path="f.txt", buffer=current
            ),
            previous=RevisionPane(
                commit=_record("c" * 40), path="f.txt", buffer=previous
            ),
        )

    def test_titles_name_both_revisions(
        self, console: Console, pair: RevisionPair
    ) -> None:
        output = _rendered(console, render_pair(pair))

        assert "ccccccc f.txt" in output
        assert "bbbbbbb f.txt" in output

    def test_rows_side_by_side(self, console: Console, pair: RevisionPair) -> None:
        lines = _rendered(console, render_pair(pair)).splitlines()

        assert any("z" in line and "3" in line for line in lines)
        assert sum("x" in line for line in lines) == 1

    def test_first_revision(self, console: Console) -> None:
        pair = RevisionPair(
            index=0,
            mode=DisplayMode.REGULAR,
            current=RevisionPane(
                commit=_record(), path="f.txt", buffer=TextBuffer("only\n")
            ),
        )

        output = _rendered(console, render_pair(pair))

        assert "(no previous revision)" in output
        assert "only" in output

    def test_focus_limits_rows(self, console: Console) -> None:
        text = "".join(f"row{n}\n" for n in range(1, 31))
        pair = RevisionPair(
            index=0,
            mode=DisplayMode.REGULAR,
            current=RevisionPane(
                commit=_record(), path="f.txt", buffer=TextBuffer(text)
            ),
        )

        output = _rendered(console, render_pair(pair, focus_line=15, window=1))

        assert "row14" in output
        assert "row16" in output
        assert "row13" not in output
        assert "row17" not in output

    def test_undecodable_bytes_are_printable(self, console: Console) -> None:
        pair = RevisionPair(
            index=0,
            mode=DisplayMode.REGULAR,
            current=RevisionPane(
                commit=_record(),
                path="f.txt",
                buffer=TextBuffer.from_bytes(b"caf\xe9\n"),
            ),
        )

        output = _rendered(console, render_pair(pair))

        assert "caf�" in output
