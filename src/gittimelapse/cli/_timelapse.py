"""The timelapse command: show a file's revisions side by side."""

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Final

from rich.console import Console

from gittimelapse.config import Config, find_repository_root, safe_load_config
from gittimelapse.exceptions import (
    PatchError,
    PathOutsideRepositoryError,
    RepositoryError,
)
from gittimelapse.patch import PatchAligner
from gittimelapse.repository import CommitId, TimelapseRepository
from gittimelapse.timeline import DisplayMode, Timeline
from gittimelapse.utils import open_cli_logger

from ._render import render_commit_info, render_commit_list, render_pair
from ._shared import ExitCode, exit_with_error

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

PROMPT: Final = "[bold]\\[n]ext \\[p]revious \\[m]ode <number> \\[q]uit: [/bold]"


@dataclass(frozen=True, slots=True)
class TimelapseOptions:
    """Command-line options of a timelapse invocation.

    Unset options fall back to the loaded configuration.
    """

    path: Path
    mode: DisplayMode | None = None
    revision: str | None = None
    index: int | None = None
    list_commits: bool = False
    interactive: bool = False
    first_parent: bool = False
    follow: bool = False
    config: Path | None = None
    line: int | None = None
    window: int = 10
    verbose: bool = False

    def cli_overrides(self) -> dict[str, object]:
        """Return the configuration keys set on the command line."""
        history: dict[str, object] = {}
        if self.revision is not None:
            history["revision"] = self.revision
        if self.first_parent:
            history["first_parent"] = True
        if self.follow:
            history["follow_renames"] = True

        overrides: dict[str, object] = {}
        if history:
            overrides["history"] = history
        if self.mode is not None:
            overrides["display"] = {"mode": self.mode.value}
        if self.verbose:
            overrides["logging"] = {"level": "debug"}
        return overrides


def _absolute(path: Path) -> Path:
    return path if path.is_absolute() else Path.cwd() / path


def _open_timeline(
    repo: TimelapseRepository,
    target: Path,
    config: Config,
    console: Console,
    logger: "FilteringBoundLogger",  # noqa: UP037
) -> Timeline:
    found: list[CommitId] = []
    aligner = PatchAligner(
        placeholder=config.display.placeholder,
        verify=True if config.display.verify_aligned else None,
        logger=logger,
    )
    with console.status("Walking history...") as status:

        def _progress(commit_id: CommitId) -> None:
            found.append(commit_id)
            status.update(f"Walking history... {len(found)} commits found")

        return Timeline.open(
            repo,
            target,
            revision=config.history.revision,
            first_parent=config.history.first_parent,
            follow_renames=config.history.follow_renames,
            progress=_progress,
            context_lines=config.display.context_lines,
            aligner=aligner,
            logger=logger,
        )


def _show(
    console: Console,
    timeline: Timeline,
    index: int,
    mode: DisplayMode,
    *,
    focus_line: int | None,
    window: int,
) -> None:
    pair = timeline.show_index(index, mode)
    console.print(
        f"[bold]Revision {pair.index + 1} of {len(timeline)}[/bold] "
        f"[dim]({pair.mode.value})[/dim]"
    )
    if pair.previous is not None:
        console.print(render_commit_info(pair.previous, title="Previous"))
    console.print(render_commit_info(pair.current, title="Current"))
    console.print(render_pair(pair, focus_line=focus_line, window=window))


def _interact(
    console: Console,
    timeline: Timeline,
    index: int,
    mode: DisplayMode,
    options: TimelapseOptions,
) -> None:
    focus = options.line
    while True:
        _show(console, timeline, index, mode, focus_line=focus, window=options.window)
        try:
            answer = console.input(PROMPT).strip().lower()
        except EOFError:
            return

        target = index
        if answer in {"q", "quit"}:
            return
        if answer == "m":
            mode = (
                DisplayMode.REGULAR
                if mode is DisplayMode.ALIGNED
                else DisplayMode.ALIGNED
            )
            continue
        if answer == "n":
            target = min(index + 1, len(timeline) - 1)
        elif answer == "p":
            target = max(index - 1, 0)
        elif answer.isdigit() and int(answer) < len(timeline):
            target = int(answer)
        else:
            console.print(f"[yellow]Unknown choice:[/yellow] {answer!r}")
            continue

        if focus is not None and target != index:
            focus = (
                timeline.map_focus(
                    timeline.commits[index], timeline.commits[target], focus - 1
                )
                + 1
            )
        index = target


def _run(  # noqa: PLR0913
    options: TimelapseOptions,
    target: Path,
    start: Path,
    config: Config,
    logger: "FilteringBoundLogger",  # noqa: UP037
    *,
    console: Console,
    error_console: Console,
) -> None:
    try:
        with TimelapseRepository.discover(
            start,
            rename_threshold=config.history.rename_threshold,
            logger=logger,
        ) as repo:
            timeline = _open_timeline(repo, target, config, error_console, logger)
            if timeline.is_empty:
                exit_with_error(
                    f"No commits modified {timeline.path} "
                    f"(starting from {config.history.revision})",
                    ExitCode.NOT_FOUND,
                    console=error_console,
                )

            index = len(timeline) - 1 if options.index is None else options.index
            if not -len(timeline) <= index < len(timeline):
                exit_with_error(
                    f"Index {index} out of range: {timeline.path} has "
                    f"{len(timeline)} revisions",
                    ExitCode.VALIDATION_ERROR,
                    console=error_console,
                )
            index %= len(timeline)
            logger.info(
                "timeline_opened",
                path=timeline.path,
                commits=len(timeline),
                index=index,
            )

            if options.list_commits:
                console.print(render_commit_list(timeline, selected=index))
                return

            mode = config.display.mode
            if options.interactive:
                _interact(console, timeline, index, mode, options)
            else:
                _show(
                    console,
                    timeline,
                    index,
                    mode,
                    focus_line=options.line,
                    window=options.window,
                )
    except PatchError as e:
        logger.error("patch_failed", error=str(e))
        exit_with_error(str(e), ExitCode.PATCH_ERROR, console=error_console)
    except PathOutsideRepositoryError as e:
        exit_with_error(str(e), ExitCode.VALIDATION_ERROR, console=error_console)
    except RepositoryError as e:
        exit_with_error(str(e), ExitCode.LOAD_ERROR, console=error_console)
    except OSError as e:
        exit_with_error(str(e), ExitCode.IO_ERROR, console=error_console)


def run_timelapse(
    options: TimelapseOptions,
    *,
    console: Console,
    error_console: Console,
) -> None:
    """Run the timelapse command.

    Exits with a distinct code per failure: NOT_FOUND when no commit
    modified the file, VALIDATION_ERROR for paths outside the repository or
    bad indices, LOAD_ERROR for repository failures such as an unknown
    revision and PATCH_ERROR when a diff cannot be applied.
    """
    if options.line is not None and options.line < 1:
        exit_with_error(
            f"--line must be at least 1, got {options.line}",
            ExitCode.VALIDATION_ERROR,
            console=error_console,
        )

    target = _absolute(options.path)
    start = target.parent if not target.is_dir() else target

    config, _ = safe_load_config(
        config_path=options.config,
        repository_root=find_repository_root(start),
        cli_overrides=options.cli_overrides(),
    )
    with open_cli_logger(
        level=config.logging.level.value,
        log_format=config.logging.format.value,  # type: ignore[arg-type]
        log_file=config.logging.file,
        verbose=options.verbose,
        command="timelapse",
    ) as logger:
        _run(
            options,
            target,
            start,
            config,
            logger,
            console=console,
            error_console=error_console,
        )
