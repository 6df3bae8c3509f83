"""The command-line interface for gittimelapse."""
# ruff: noqa: TC003  # Path needed at runtime for cyclopts parameter parsing

from pathlib import Path
from typing import Annotated

from cyclopts import App, Parameter
from rich.console import Console

from gittimelapse.timeline import DisplayMode

from ._timelapse import TimelapseOptions, run_timelapse

APP_HELP = "Step through the revisions of a file in a git repository."


def create_app(
    console: Console | None = None,
    error_console: Console | None = None,
    *,
    exit_on_error: bool = True,
) -> App:
    if console is None:
        console = Console()
    if error_console is None:
        error_console = Console(stderr=True)
    app = App(
        name="gittimelapse",
        help=APP_HELP,
        help_on_error=True,
        console=console,
        error_console=error_console,
        exit_on_error=exit_on_error,
    )

    @app.default
    def _timelapse(  # pyright: ignore[reportUnusedFunction]
        path: Annotated[Path, Parameter(help="File to show the history of")],
        *,
        mode: Annotated[
            DisplayMode | None,
            Parameter(name="--mode", help="Side-by-side display mode"),
        ] = None,
        revision: Annotated[
            str | None,
            Parameter(name=["--revision", "-r"], help="Revision to start from"),
        ] = None,
        index: Annotated[
            int | None,
            Parameter(
                name=["--index", "-i"],
                help="Revision to show, 0 is the oldest; negative counts back",
            ),
        ] = None,
        list_commits: Annotated[
            bool, Parameter(name="--list", help="List the commits and exit")
        ] = False,
        interactive: Annotated[
            bool, Parameter(help="Step through revisions with a prompt")
        ] = False,
        first_parent: Annotated[
            bool, Parameter(help="Only follow first parents at merges")
        ] = False,
        follow: Annotated[
            bool, Parameter(help="Follow the file across renames")
        ] = False,
        config: Annotated[
            Path | None, Parameter(name="--config", help="Path to config file")
        ] = None,
        line: Annotated[
            int | None, Parameter(help="1-based line of the file to focus on")
        ] = None,
        window: Annotated[
            int, Parameter(help="Rows shown around the focused line")
        ] = 10,
        verbose: Annotated[
            bool, Parameter(help="Log debug-level timing diagnostics to stderr")
        ] = False,
    ) -> None:
        """Show a revision of PATH next to the revision before it.

        Args:
            path: File to show the history of.
            mode: Side-by-side display mode.
            revision: Revision the history walk starts from.
            index: Revision to show.
            list_commits: List the commits and exit.
            interactive: Step through revisions with a prompt.
            first_parent: Only follow first parents at merges.
            follow: Follow the file across renames.
            config: Explicit path to config file.
            line: Line of the file to focus on.
            window: Rows shown around the focused line.
            verbose: Enable debug-level diagnostics.
        """
        run_timelapse(
            TimelapseOptions(
                path=path,
                mode=mode,
                revision=revision,
                index=index,
                list_commits=list_commits,
                interactive=interactive,
                first_parent=first_parent,
                follow=follow,
                config=config,
                line=line,
                window=window,
                verbose=verbose,
            ),
            console=console,
            error_console=error_console,
        )

    return app


def main() -> None:
    """Default entrypoint for the `gittimelapse` CLI."""
    app = create_app()
    app()


if __name__ == "__main__":
    main()
