import pytest

from gittimelapse.patch import LineChangeMap, LineKind, LineSpan, TextBuffer


class TestTextBuffer:
    def test_splits_on_newlines(self) -> None:
        buffer = TextBuffer("x\ny\n")

        assert buffer.lines == ("x", "y")
        assert buffer.line_count == 2
        assert not buffer.missing_newline

    def test_final_line_without_newline(self) -> None:
        buffer = TextBuffer("x\ny")

        assert buffer.lines == ("x", "y")
        assert buffer.missing_newline
        assert buffer.text == "x\ny"

    def test_empty_text_has_no_lines(self) -> None:
        buffer = TextBuffer()

        assert buffer.lines == ()
        assert len(buffer) == 0
        assert buffer.spans == ()

    def test_blank_lines_are_kept(self) -> None:
        assert TextBuffer("\n\na\n").lines == ("", "", "a")

    def test_carriage_returns_are_content(self) -> None:
        assert TextBuffer("a\r\nb\r\n").lines == ("a\r", "b\r")

    def test_bytes_round_trip(self) -> None:
        data = b"caf\xe9\nok\n"

        assert TextBuffer.from_bytes(data).to_bytes() == data

    def test_set_text_clears_annotations(self) -> None:
        buffer = TextBuffer("a\n")
        buffer.replace_lines(["a", "b"], changes={1: LineKind.ADDED}, placeholders=[1])

        buffer.set_text("c\n")

        assert len(buffer.changes) == 0
        assert buffer.placeholders == frozenset()


class TestSpans:
    def test_spans_cover_newlines(self) -> None:
        buffer = TextBuffer("ab\n\ncd\n")

        assert buffer.spans == (
            LineSpan(start=0, end=3),
            LineSpan(start=3, end=4),
            LineSpan(start=4, end=7),
        )

    def test_last_span_without_newline(self) -> None:
        buffer = TextBuffer("ab\ncd")

        assert buffer.spans[-1] == LineSpan(start=3, end=5)
        assert buffer.spans[-1].length == 2

    def test_spans_follow_replaced_lines(self) -> None:
        buffer = TextBuffer("a\n")

        buffer.replace_lines(["long line", "b"])

        assert buffer.spans == (LineSpan(0, 10), LineSpan(10, 12))
        assert buffer.text == "long line\nb\n"

    @pytest.mark.parametrize(("offset", "line"), [(0, 0), (2, 0), (3, 1), (6, 2)])
    def test_line_at_offset(self, offset: int, line: int) -> None:
        buffer = TextBuffer("ab\n\ncd\n")

        assert buffer.line_at_offset(offset) == line

    @pytest.mark.parametrize("offset", [-1, 7, 100])
    def test_line_at_offset_outside_text(self, offset: int) -> None:
        with pytest.raises(IndexError):
            TextBuffer("ab\n\ncd\n").line_at_offset(offset)


class TestReplaceLines:
    def test_rejects_embedded_newlines(self) -> None:
        with pytest.raises(ValueError, match="newline"):
            TextBuffer().replace_lines(["a\nb"])

    def test_rejects_annotations_outside_range(self) -> None:
        with pytest.raises(ValueError, match=r"\[2\]"):
            TextBuffer().replace_lines(["a", "b"], changes={2: LineKind.ADDED})

    def test_rejects_placeholders_outside_range(self) -> None:
        with pytest.raises(ValueError, match=r"\[-1\]"):
            TextBuffer().replace_lines(["a"], placeholders=[-1])

    def test_missing_newline_ignored_for_empty_buffer(self) -> None:
        buffer = TextBuffer("a")

        buffer.replace_lines([], missing_newline=True)

        assert not buffer.missing_newline
        assert buffer.text == ""

    def test_records_annotations(self) -> None:
        buffer = TextBuffer()

        buffer.replace_lines(
            ["a", " ", "c"],
            changes={1: LineKind.ADDED, 2: LineKind.DELETED},
            placeholders=[1],
        )

        assert buffer.change_kind(0) is LineKind.UNCHANGED
        assert buffer.change_kind(1) is LineKind.ADDED
        assert buffer.is_placeholder(1)
        assert not buffer.is_placeholder(2)
        assert buffer.changed_lines() is buffer.changes

    def test_change_kind_outside_buffer(self) -> None:
        with pytest.raises(IndexError):
            TextBuffer("a\n").change_kind(1)


class TestLineChangeMap:
    def test_unrecorded_lines_are_unchanged(self) -> None:
        changes = LineChangeMap({2: LineKind.ADDED}, line_count=4)

        assert changes[0] is LineKind.UNCHANGED
        assert changes[2] is LineKind.ADDED

    def test_iterates_recorded_lines_in_order(self) -> None:
        changes = LineChangeMap(
            {3: LineKind.DELETED, 1: LineKind.ADDED}, line_count=4
        )

        assert list(changes) == [1, 3]
        assert len(changes) == 2
        assert 0 not in changes
        assert 3 in changes

    def test_lookup_outside_buffer_raises(self) -> None:
        changes = LineChangeMap({}, line_count=2)

        with pytest.raises(KeyError):
            changes[2]

    def test_lines_of(self) -> None:
        changes = LineChangeMap(
            {0: LineKind.ADDED, 1: LineKind.DELETED, 4: LineKind.ADDED},
            line_count=5,
        )

        assert changes.lines_of(LineKind.ADDED) == [0, 4]
        assert changes.lines_of(LineKind.DELETED) == [1]
        assert changes.lines_of(LineKind.UNCHANGED) == []
