from hypothesis import assume, given
from hypothesis import strategies as st

from gittimelapse.patch import (
    Alignment,
    Direction,
    LineKind,
    LineTag,
    PatchAligner,
    TextBuffer,
    diff_texts,
    map_line,
    parse_unified_diff,
    single_file,
)

# Small alphabet so that generated revisions share lines and produce real hunks.
line_text = st.sampled_from(["", "a", "b", "c", "def f():", "    return 1", " x "])
revision = st.builds(
    lambda lines, final_newline: (
        "\n".join(lines) + ("\n" if final_newline and lines else "")
    ),
    st.lists(line_text, max_size=25),
    st.booleans(),
)
context = st.integers(min_value=0, max_value=4)


@given(old=revision, new=revision, context_lines=context)
def test_forward_plain_rebuilds_new_revision(
    old: str, new: str, context_lines: int
) -> None:
    diff = diff_texts(old, new, old_path="f", new_path="f", context_lines=context_lines)

    buffer = PatchAligner().apply(TextBuffer(old), diff, Direction.FORWARD)

    assert buffer.text == new


@given(old=revision, new=revision, context_lines=context)
def test_backward_plain_rebuilds_old_revision(
    old: str, new: str, context_lines: int
) -> None:
    diff = diff_texts(old, new, old_path="f", new_path="f", context_lines=context_lines)

    buffer = PatchAligner().apply(TextBuffer(new), diff, Direction.BACKWARD)

    assert buffer.text == old


@given(old=revision, new=revision)
def test_aligned_sides_have_equal_rows(old: str, new: str) -> None:
    file_diff = single_file(diff_texts(old, new, old_path="f", new_path="f"))
    aligner = PatchAligner()

    before = aligner.apply(
        TextBuffer(old), file_diff, Direction.FORWARD, Alignment.ALIGNED
    )
    after = aligner.apply(
        TextBuffer(new), file_diff, Direction.BACKWARD, Alignment.ALIGNED
    )

    assert before.line_count == after.line_count
    assert dict(before.changes) == dict(after.changes)
    assert not before.placeholders & after.placeholders


@given(old=revision, new=revision)
def test_plain_classification_counts_match_diff(old: str, new: str) -> None:
    file_diff = single_file(diff_texts(old, new, old_path="f", new_path="f"))
    added = sum(
        line.tag is LineTag.ADDED for hunk in file_diff.hunks for line in hunk.lines
    )

    buffer = PatchAligner().apply(TextBuffer(old), file_diff, Direction.FORWARD)

    assert len(buffer.changes.lines_of(LineKind.ADDED)) == added


@given(text=revision)
def test_spans_are_contiguous_and_cover_text(text: str) -> None:
    buffer = TextBuffer(text)

    offset = 0
    for span in buffer.spans:
        assert span.start == offset
        offset = span.end
    assert offset == len(buffer.text)


@given(text=revision)
def test_recompute_spans_is_idempotent(text: str) -> None:
    buffer = TextBuffer(text)
    spans = buffer.spans

    assert buffer.recompute_spans() == buffer.recompute_spans() == spans


@given(old=revision, new=revision, aligned=st.booleans())
def test_recompute_spans_is_idempotent_after_apply(
    old: str, new: str, *, aligned: bool
) -> None:
    diff = diff_texts(old, new, old_path="f", new_path="f")
    alignment = Alignment.ALIGNED if aligned else Alignment.PLAIN
    buffer = PatchAligner().apply(TextBuffer(old), diff, Direction.FORWARD, alignment)
    spans = buffer.spans

    assert buffer.recompute_spans() == buffer.recompute_spans() == spans
    assert (spans[-1].end if spans else 0) == len(buffer.text)


@given(old=revision, new=revision, data=st.data())
def test_map_line_lands_inside_target(old: str, new: str, data: st.DataObject) -> None:
    old_lines = TextBuffer(old).line_count
    new_lines = TextBuffer(new).line_count
    assume(old_lines > 0)
    diff = diff_texts(old, new, old_path="f", new_path="f")
    index = data.draw(st.integers(min_value=0, max_value=old_lines - 1))

    mapped = map_line(diff, index, Direction.FORWARD)

    assert 0 <= mapped <= new_lines


@given(old=revision, new=revision)
def test_generated_diff_parses_to_one_file(old: str, new: str) -> None:
    parsed = parse_unified_diff(diff_texts(old, new, old_path="f", new_path="f"))

    assert len(parsed.files) == 1
