"""Side-by-side comparison of adjacent revisions of one file.

A :class:`Timeline` is built once per file: it walks the history, keeps the
oldest-first commit list and prepares, on request, the pair of annotated
buffers for any revision and its predecessor.
"""

from pathlib import Path
from typing import TYPE_CHECKING, Final, Self

from dulwich.patch import is_binary

from gittimelapse.exceptions import NoSuchRevisionError
from gittimelapse.patch import (
    DEFAULT_CONTEXT_LINES,
    Alignment,
    Direction,
    FileDiff,
    PatchAligner,
    TextBuffer,
    diff_blobs,
    map_line,
    single_file,
)
from gittimelapse.repository import (
    CommitId,
    CommitList,
    CommitRecord,
    ProgressCallback,
    TimelapseRepository,
)
from gittimelapse.timeline._models import DisplayMode, RevisionPair, RevisionPane
from gittimelapse.utils import create_null_logger, log_duration

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger


def _binary_buffer(data: bytes) -> TextBuffer:
    return TextBuffer(f"Binary file ({len(data)} bytes)\n")


class Timeline:
    """The history of one file, with revision pairs prepared for display.

    Example:
        >>> with TimelapseRepository.discover() as repo:
        ...     timeline = Timeline.open(repo, "README.md")
        ...     pair = timeline.latest(DisplayMode.ALIGNED)
    """

    __slots__: Final = (
        "_aligner",
        "_commits",
        "_context_lines",
        "_logger",
        "_repository",
    )

    def __init__(
        self,
        repository: TimelapseRepository,
        commits: CommitList,
        *,
        context_lines: int = DEFAULT_CONTEXT_LINES,
        aligner: PatchAligner | None = None,
        logger: "FilteringBoundLogger | None" = None,  # noqa: UP037
    ) -> None:
        """Initialize the timeline from an already-built commit list.

        Args:
            repository: Repository the commits belong to.
            commits: Oldest-first commits that modified the file.
            context_lines: Unchanged lines around each change in diffs.
            aligner: Aligner used to prepare buffers.
            logger: Optional logger for diagnostics.
        """
        self._repository: TimelapseRepository = repository
        self._commits: CommitList = commits
        self._context_lines: int = context_lines
        self._logger: FilteringBoundLogger = logger or create_null_logger()
        self._aligner: PatchAligner = aligner or PatchAligner(logger=self._logger)

    @classmethod
    def open(
        cls,
        repository: TimelapseRepository,
        path: Path | str,
        *,
        revision: str = "HEAD",
        first_parent: bool = False,
        follow_renames: bool = False,
        progress: ProgressCallback | None = None,
        context_lines: int = DEFAULT_CONTEXT_LINES,
        aligner: PatchAligner | None = None,
        logger: "FilteringBoundLogger | None" = None,  # noqa: UP037
    ) -> Self:
        """Walk the history of ``path`` and build its timeline.

        Raises:
            NoSuchRevisionError: If ``revision`` cannot be resolved.
            PathOutsideRepositoryError: If ``path`` is outside the root.
        """
        commits = repository.find_commits(
            path,
            revision=revision,
            progress=progress,
            first_parent=first_parent,
            follow_renames=follow_renames,
        )
        return cls(
            repository,
            commits,
            context_lines=context_lines,
            aligner=aligner,
            logger=logger,
        )

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def commits(self) -> CommitList:
        """Return the oldest-first commit list."""
        return self._commits

    @property
    def path(self) -> str:
        """Return the repository-relative path the timeline was opened for."""
        return self._commits.path

    @property
    def is_empty(self) -> bool:
        """Return True if no commit modified the file."""
        return len(self._commits) == 0

    def __len__(self) -> int:
        return len(self._commits)

    def commit_record(self, commit_id: CommitId) -> CommitRecord:
        """Return the metadata of a commit in the timeline.

        Raises:
            NoSuchRevisionError: If the commit is not in the timeline.
        """
        self._require(commit_id)
        return self._repository.read_commit(commit_id)

    # =========================================================================
    # Revision pairs
    # =========================================================================

    def diff(self, commit_id: CommitId) -> FileDiff | None:
        """Return the diff from the predecessor of ``commit_id`` to it.

        Returns:
            The diff, or None for the first revision.

        Raises:
            NoSuchRevisionError: If the commit is not in the timeline.
        """
        self._require(commit_id)
        previous_id = self._commits.predecessor(commit_id)
        if previous_id is None:
            return None
        previous, current = self._read_pair(previous_id, commit_id)
        return self._diff(previous_id, previous, commit_id, current)

    def show(
        self, commit_id: CommitId, mode: DisplayMode = DisplayMode.ALIGNED
    ) -> RevisionPair:
        """Prepare ``commit_id`` and its predecessor for display.

        In ``ALIGNED`` mode the predecessor's text is aligned forwards and the
        revision's text backwards, so both buffers have the same rows. In
        ``REGULAR`` mode each buffer holds its own revision's text: the
        predecessor's text is rebuilt from the revision with the deleted lines
        classified, and the revision's text from the predecessor with the
        added lines classified. The first revision has no predecessor and its
        buffer holds its plain text.

        Args:
            commit_id: Full commit id from :attr:`commits`.
            mode: Display mode.

        Returns:
            The prepared pair.

        Raises:
            NoSuchRevisionError: If the commit is not in the timeline.
            PatchError: If the diff cannot be applied.
        """
        index = self._require(commit_id)
        with log_duration(
            self._logger, "revision_prepared", commit=commit_id, mode=mode.value
        ):
            return self._show(index, commit_id, mode)

    def show_index(
        self, index: int, mode: DisplayMode = DisplayMode.ALIGNED
    ) -> RevisionPair:
        """Prepare the revision at ``index``; negative indices count from the end.

        Raises:
            IndexError: If ``index`` is out of range.
        """
        return self.show(self._commits[index], mode)

    def latest(self, mode: DisplayMode = DisplayMode.ALIGNED) -> RevisionPair:
        """Prepare the newest revision.

        Raises:
            NoSuchRevisionError: If the timeline is empty.
        """
        latest = self._commits.latest()
        if latest is None:
            msg = f"No commits modified {self.path}"
            raise NoSuchRevisionError(msg, revision="HEAD")
        return self.show(latest, mode)

    def map_focus(
        self,
        from_commit: CommitId,
        to_commit: CommitId,
        line: int,
    ) -> int:
        """Map a line of ``from_commit`` to the corresponding line of ``to_commit``.

        Used to keep the focused line stable when stepping to an adjacent
        revision. Commits that are not adjacent are mapped through every
        revision in between.

        Args:
            from_commit: Commit the line index refers to.
            to_commit: Commit to map the line index to.
            line: 0-based line index in ``from_commit``.

        Returns:
            The 0-based line index in ``to_commit``.

        Raises:
            NoSuchRevisionError: If either commit is not in the timeline.
            ValueError: If ``line`` is negative.
        """
        start = self._require(from_commit)
        end = self._require(to_commit)
        if start < end:
            for index in range(start + 1, end + 1):
                line = self._map_step(index, line, Direction.FORWARD)
        else:
            for index in range(start, end, -1):
                line = self._map_step(index, line, Direction.BACKWARD)
        return line

    # =========================================================================
    # Internals
    # =========================================================================

    def _require(self, commit_id: CommitId) -> int:
        index = self._commits.index_of(commit_id)
        if index is None:
            msg = f"Commit {commit_id} did not modify {self.path}"
            raise NoSuchRevisionError(msg, revision=commit_id)
        return index

    def _read(self, commit_id: CommitId) -> bytes:
        return self._repository.read_blob(commit_id, self._commits.path_at(commit_id))

    def _read_pair(
        self, previous_id: CommitId, commit_id: CommitId
    ) -> tuple[bytes, bytes]:
        return self._read(previous_id), self._read(commit_id)

    def _diff(
        self,
        previous_id: CommitId,
        previous: bytes,
        commit_id: CommitId,
        current: bytes,
    ) -> FileDiff:
        text = diff_blobs(
            previous,
            current,
            old_path=self._commits.path_at(previous_id),
            new_path=self._commits.path_at(commit_id),
            context_lines=self._context_lines,
        )
        return single_file(text)

    def _map_step(self, index: int, line: int, direction: Direction) -> int:
        commit_id = self._commits[index]
        previous_id = self._commits[index - 1]
        previous, current = self._read_pair(previous_id, commit_id)
        file_diff = self._diff(previous_id, previous, commit_id, current)
        if is_binary(previous) or is_binary(current):
            return 0
        return map_line(file_diff, line, direction)

    def _pane(
        self, commit_id: CommitId, buffer: TextBuffer, *, binary: bool
    ) -> RevisionPane:
        return RevisionPane(
            commit=self._repository.read_commit(commit_id),
            path=self._commits.path_at(commit_id),
            buffer=buffer,
            is_binary=binary,
        )

    def _show(
        self, index: int, commit_id: CommitId, mode: DisplayMode
    ) -> RevisionPair:
        current = self._read(commit_id)
        current_binary = is_binary(current)
        previous_id = self._commits.predecessor(commit_id)

        if previous_id is None:
            buffer = (
                _binary_buffer(current)
                if current_binary
                else TextBuffer.from_bytes(current)
            )
            return RevisionPair(
                index=index,
                mode=mode,
                current=self._pane(commit_id, buffer, binary=current_binary),
            )

        previous = self._read(previous_id)
        previous_binary = is_binary(previous)
        file_diff = self._diff(previous_id, previous, commit_id, current)

        if previous_binary or current_binary:
            previous_buffer = (
                _binary_buffer(previous)
                if previous_binary
                else TextBuffer.from_bytes(previous)
            )
            current_buffer = (
                _binary_buffer(current)
                if current_binary
                else TextBuffer.from_bytes(current)
            )
        elif mode is DisplayMode.REGULAR:
            previous_buffer = self._aligner.apply(
                TextBuffer.from_bytes(current), file_diff, Direction.BACKWARD
            )
            current_buffer = self._aligner.apply(
                TextBuffer.from_bytes(previous), file_diff, Direction.FORWARD
            )
        else:
            previous_buffer = self._aligner.apply(
                TextBuffer.from_bytes(previous),
                file_diff,
                Direction.FORWARD,
                Alignment.ALIGNED,
            )
            current_buffer = self._aligner.apply(
                TextBuffer.from_bytes(current),
                file_diff,
                Direction.BACKWARD,
                Alignment.ALIGNED,
            )

        return RevisionPair(
            index=index,
            mode=mode,
            current=self._pane(commit_id, current_buffer, binary=current_binary),
            previous=self._pane(previous_id, previous_buffer, binary=previous_binary),
            diff=file_diff,
        )
