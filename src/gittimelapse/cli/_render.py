"""Rich rendering of commit metadata and side-by-side revision pairs."""

from itertools import zip_longest
from typing import Final

from rich.table import Table
from rich.text import Text

from gittimelapse.patch import LineKind, TextBuffer
from gittimelapse.repository import CommitRecord, Identity
from gittimelapse.timeline import RevisionPair, RevisionPane, Timeline
from gittimelapse.utils import decode_display, encode_text

LINE_STYLES: Final = {
    LineKind.ADDED: "on dark_green",
    LineKind.DELETED: "on dark_red",
}
PLACEHOLDER_STYLE: Final = "dim"
DATE_FORMAT: Final = "%Y-%m-%d %H:%M:%S %z"


def _printable(line: str) -> str:
    # Undecodable bytes survive as surrogates; terminals cannot encode them.
    return decode_display(encode_text(line))


def format_identity(identity: Identity) -> str:
    """Return ``Name <email>, date`` for display."""
    return f"{identity}, {identity.timestamp.strftime(DATE_FORMAT)}"


def line_numbers(buffer: TextBuffer) -> list[int | None]:
    """Return the 1-based file line number of every row, None for placeholders."""
    numbers: list[int | None] = []
    current = 0
    for index in range(buffer.line_count):
        if buffer.is_placeholder(index):
            numbers.append(None)
        else:
            current += 1
            numbers.append(current)
    return numbers


def focus_rows(buffer: TextBuffer, line: int, window: int) -> range:
    """Return the rows within ``window`` rows of file line ``line`` (1-based).

    Lines past the end of the buffer focus the last row.
    """
    numbers = line_numbers(buffer)
    row = next(
        (index for index, number in enumerate(numbers) if number == line),
        max(len(numbers) - 1, 0),
    )
    return range(max(row - window, 0), min(row + window + 1, len(numbers)))


def render_commit_info(pane: RevisionPane, *, title: str = "") -> Table:
    """Render the metadata of the revision shown in ``pane``."""
    record: CommitRecord = pane.commit
    table = Table.grid(padding=(0, 2))
    if title:
        table.title = title
    table.add_column(style="bold")
    table.add_column()
    table.add_row("Commit", record.id)
    table.add_row("Path", pane.path)
    table.add_row("Date", record.commit_time.strftime(DATE_FORMAT))
    table.add_row("Author", format_identity(record.author))
    if record.committer != record.author:
        table.add_row("Committer", format_identity(record.committer))
    if record.summary:
        table.add_row("Message", record.summary)
    return table


def _cells(
    pane: RevisionPane | None, row: int | None, numbers: list[int | None]
) -> tuple[Text, Text]:
    if pane is None or row is None:
        return Text(""), Text("")
    buffer = pane.buffer
    number = numbers[row]
    content = Text(_printable(buffer.lines[row]))
    if buffer.is_placeholder(row):
        content.stylize(PLACEHOLDER_STYLE)
    style = LINE_STYLES.get(buffer.changes[row])
    if style is not None:
        content.stylize(style)
    return Text("" if number is None else str(number), style="dim"), content


def _pane_title(pane: RevisionPane | None) -> str:
    if pane is None:
        return "(no previous revision)"
    return f"{pane.commit.short_id} {pane.path}"


def render_pair(
    pair: RevisionPair,
    *,
    focus_line: int | None = None,
    window: int = 10,
) -> Table:
    """Render a revision and its predecessor side by side.

    Added lines are highlighted green, deleted lines red and alignment
    placeholders are dimmed.

    Args:
        pair: The prepared revision pair.
        focus_line: 1-based line of the current revision to centre on. All
            rows are shown when None.
        window: Rows shown above and below the focus line.

    Returns:
        A table with line number and text columns for both revisions.
    """
    table = Table(show_header=True, header_style="bold", box=None, expand=True)
    table.add_column("", justify="right", no_wrap=True)
    table.add_column(_pane_title(pair.previous), ratio=1, overflow="fold")
    table.add_column("", justify="right", no_wrap=True)
    table.add_column(_pane_title(pair.current), ratio=1, overflow="fold")

    previous_rows = pair.previous.buffer.line_count if pair.previous else 0
    current_rows = pair.current.buffer.line_count
    previous_numbers = line_numbers(pair.previous.buffer) if pair.previous else []
    current_numbers = line_numbers(pair.current.buffer)

    if focus_line is None:
        rows = zip_longest(range(previous_rows), range(current_rows))
    else:
        visible = focus_rows(pair.current.buffer, focus_line, window)
        rows = (
            (row if row < previous_rows else None, row if row < current_rows else None)
            for row in visible
        )

    for previous_row, current_row in rows:
        table.add_row(
            *_cells(pair.previous, previous_row, previous_numbers),
            *_cells(pair.current, current_row, current_numbers),
        )
    return table


def render_commit_list(timeline: Timeline, *, selected: int | None = None) -> Table:
    """Render the commits of a timeline, oldest first."""
    table = Table(show_header=True, header_style="bold")
    table.add_column("#", justify="right")
    table.add_column("Commit", style="cyan", no_wrap=True)
    table.add_column("Date", no_wrap=True)
    table.add_column("Author")
    table.add_column("Path")
    table.add_column("Summary", overflow="ellipsis")

    for index, commit_id in enumerate(timeline.commits):
        record = timeline.commit_record(commit_id)
        marker = "*" if index == selected else ""
        table.add_row(
            f"{marker}{index}",
            record.short_id,
            record.commit_time.strftime(DATE_FORMAT),
            record.author.name,
            timeline.commits.path_at(commit_id),
            record.summary,
        )
    return table
