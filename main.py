"""
psr CLI Entry Point.

This module implements the command-line interface for psr, a package script
runner. psr finds the project that owns the current directory, whatever
package manager or build tool manages it, lists its runnable scripts and runs
the one you pick.

The pipeline operates in three stages:

1.  **Detection**: Walks up from the working directory (or ``--dir``, or a
    saved ``--project``) to the home directory and picks exactly one project
    type. Lockfiles outrank plain config files, closer directories outrank
    farther ones.
2.  **Cataloging**: Parses the project's manifest into an ordered catalog of
    scripts, infers a category for each and binds shortcut keys.
3.  **Selection & Execution**: Either prints the catalog (``--list``), runs one
    script directly (``psr run test`` or just ``psr test``), or opens the
    interactive session.

Usage:
    $ psr                    # interactive list
    $ psr --tui              # full-screen view
    $ psr --list             # machine-readable listing
    $ psr test -- --watch    # run "test" with extra arguments
    $ psr projects add api ~/src/api

Dependencies:
    - Typer: CLI argument parsing and app structure.
    - Rich: Terminal UI, colors and screen rendering.
    - Inquirer: Interactive terminal user prompts.
"""

from dataclasses import dataclass
from pathlib import Path
import sys
from typing import Annotated, Sequence

import typer
from typer.core import TyperGroup
from rich import print as pr
from rich.markup import escape
from rich.table import Table

from adapters.process import ScriptExecutor, build_invocation
from adapters.terminal import TerminalController, TerminalGuard
from core.catalog import build_catalog
from core.detection import detect_project
from core.exceptions import ProcessSpawnError, PsrError
from core.models import Catalog, Project, Resolution
from core.session import fail_run, finish_run, start_one_shot
from core.settings import (
    Settings,
    add_project,
    get_project_path,
    load_settings,
    remove_project,
    rename_project,
    resolve_theme,
    save_settings,
)
from core.synonyms import resolve_script
from models import Theme
from ui.interactive import run_interactive
from ui.prompts import confirm_overwrite, select_project
from ui.render import render_listing
from utils import console, debug, err_console, set_verbose


class DefaultToRunGroup(TyperGroup):
    """
    Command group that treats an unknown first word as a script name.

    ``psr test --watch`` is dispatched as ``psr run test --watch``.
    """

    def resolve_command(self, ctx: typer.Context, args: list[str]):
        if args and args[0] not in self.commands and not args[0].startswith("-"):
            args = ["run", *args]
        return super().resolve_command(ctx, args)


app = typer.Typer(
    cls=DefaultToRunGroup,
    help="Find and run the scripts of any project.",
    no_args_is_help=False,
)
projects_app = typer.Typer(help="Manage saved projects.")
app.add_typer(projects_app, name="projects")


@dataclass
class CliOptions:
    directory: Path | None
    project: str | None
    theme: Theme | None


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    directory: Annotated[
        Path | None,
        typer.Option(
            "--dir",
            "-d",
            exists=True,  # Typer throws error if path doesn't exist
            file_okay=False,  # Typer throws error if it's a file, not a dir
            dir_okay=True,  # Must be a directory
            resolve_path=True,  # Automatically converts to absolute path
            help="Directory to start looking for a project from. Defaults to the current directory.",
        ),
    ] = None,
    project: Annotated[
        str | None,
        typer.Option("--project", "-p", help="Use a project saved with 'psr projects add'."),
    ] = None,
    list_scripts: Annotated[
        bool,
        typer.Option("--list", "-l", help="Print the scripts, one per line, and exit."),
    ] = False,
    tui: Annotated[
        bool,
        typer.Option("--tui", help="Start in the full-screen view."),
    ] = False,
    theme: Annotated[
        Theme | None,
        typer.Option(case_sensitive=False, help="Colour theme."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Print debug output to stderr."),
    ] = False,
):
    """
    Find the project that owns the current directory and list its scripts.

    Without a subcommand, opens the interactive list (or the full-screen view
    with ``--tui``), or prints the scripts with ``--list``.

    Raises:
        typer.Exit: With the session's exit code, or 1 when detection or
            parsing fails.
    """
    set_verbose(verbose)
    if directory is not None and project is not None:
        raise typer.BadParameter("--dir and --project cannot be used together")

    ctx.obj = CliOptions(directory=directory, project=project, theme=theme)
    if ctx.invoked_subcommand is not None:
        return

    settings = load_user_settings()
    found, catalog = load_project(ctx.obj, settings)

    if list_scripts:
        typer.echo(render_listing(catalog))
        return

    if not sys.stdin.isatty() or not sys.stdout.isatty():
        err_console.print(
            "[bold red]Error:[/bold red] the interactive view needs a terminal; "
            "use --list or 'psr run <script>'"
        )
        raise typer.Exit(code=1)

    try:
        exit_code = run_interactive(
            found,
            catalog,
            resolve_theme(theme, settings),
            start_in_tui=tui,
            show_emoji=settings.show_emoji,
        )
    except Exception as e:  # noqa: BLE001
        # The terminal guard has already restored the tty at this point
        print_unexpected_err(e)
    raise typer.Exit(code=exit_code)


@app.command(
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
)
def run(
    ctx: typer.Context,
    script: Annotated[
        str | None,
        typer.Argument(help="Script to run. Defaults to 'run' (or its synonyms dev/start)."),
    ] = None,
):
    """
    Run one script and exit with its exit code.

    Extra arguments are passed through to the script. Names that are not in
    the catalog fall back to synonyms, so 'dev' runs 'start' in a project
    that has no 'dev' script.
    """
    options: CliOptions = ctx.obj
    settings = load_user_settings()
    found, catalog = load_project(options, settings)

    try:
        resolution = resolve_script(catalog, script or "run")
    except PsrError as e:
        print_psr_err(e)

    exit_code = run_one_shot(found, catalog, resolution, ctx.args, resolve_theme(options.theme, settings))
    raise typer.Exit(code=exit_code)


# ==========================================
# Saved projects
# ==========================================


@projects_app.command("add")
def projects_add(
    name: Annotated[str, typer.Argument(help="Name to save the project under.")],
    path: Annotated[
        Path,
        typer.Argument(file_okay=False, dir_okay=True, help="Project directory."),
    ] = Path("."),
):
    """Save a project directory under a name."""
    settings = load_user_settings()
    overwrite = False
    if name in settings.projects:
        if not confirm_overwrite(name, settings.projects[name]):
            pr("[yellow]Nothing changed.[/yellow]")
            raise typer.Exit()
        overwrite = True

    try:
        saved = add_project(settings, name, path, overwrite=overwrite)
        save_settings(settings)
    except PsrError as e:
        print_psr_err(e)

    pr(f"[green]Saved[/green] [bold]{escape(name)}[/bold] -> {escape(str(saved))}")


@projects_app.command("remove")
def projects_remove(
    name: Annotated[
        str | None,
        typer.Argument(help="Project to forget. Prompts when omitted."),
    ] = None,
):
    """Forget a saved project."""
    settings = load_user_settings()
    if name is None:
        name = select_project(settings.projects, action="remove")

    try:
        remove_project(settings, name)
        save_settings(settings)
    except PsrError as e:
        print_psr_err(e)

    pr(f"[green]Removed[/green] [bold]{escape(name)}[/bold]")


@projects_app.command("rename")
def projects_rename(
    old_name: Annotated[str, typer.Argument(help="Current name.")],
    new_name: Annotated[str, typer.Argument(help="New name.")],
):
    """Rename a saved project."""
    settings = load_user_settings()
    try:
        rename_project(settings, old_name, new_name)
        save_settings(settings)
    except PsrError as e:
        print_psr_err(e)

    pr(f"[green]Renamed[/green] [bold]{escape(old_name)}[/bold] -> [bold]{escape(new_name)}[/bold]")


@projects_app.command("list")
def projects_list():
    """List saved projects."""
    settings = load_user_settings()
    if not settings.projects:
        pr("No saved projects. Add one with [bold]psr projects add NAME PATH[/bold].")
        return

    table = Table(show_edge=False, header_style="bold cyan")
    table.add_column("Name")
    table.add_column("Path")
    for name, path in sorted(settings.projects.items()):
        table.add_row(name, path)
    console.print(table)


# ==========================================
# Pipeline helpers
# ==========================================


def load_user_settings() -> Settings:
    try:
        return load_settings()
    except PsrError as e:
        print_psr_err(e)


def resolve_start_dir(options: CliOptions, settings: Settings) -> Path:
    """
    Work out where detection starts: a saved project, ``--dir`` or the cwd.

    Raises:
        ProjectStoreError: If ``--project`` names an unknown project.
    """
    if options.project is not None:
        return get_project_path(settings, options.project)
    if options.directory is not None:
        return options.directory
    return Path.cwd()


def load_project(options: CliOptions, settings: Settings) -> tuple[Project, Catalog]:
    """
    Detect the project and build its catalog, exiting with a one-line error on failure.
    """
    try:
        start = resolve_start_dir(options, settings)
        project = detect_project(start)
        debug(f"Detected {project.project_type} project at {project.root}")
        catalog = build_catalog(project)
    except PsrError as e:
        print_psr_err(e)
    return project, catalog


def run_one_shot(
    project: Project,
    catalog: Catalog,
    resolution: Resolution,
    args: Sequence[str],
    theme: Theme,
) -> int:
    """
    Run a single script in the foreground and return the process exit code.

    The child's exit code is returned unchanged. When the command cannot be
    started the error is printed and 127 is returned.
    """
    state = start_one_shot(catalog, resolution, theme)
    argv = build_invocation(project.project_type, resolution.entry, args)
    if resolution.via_synonym:
        debug(f"'{resolution.requested}' is not defined, running '{resolution.entry.name}'")

    controller = TerminalController(0, 1) if sys.stdin.isatty() else None
    with TerminalGuard(controller):
        try:
            exit_code = ScriptExecutor().run(argv, project.root, resolution.env)
        except ProcessSpawnError as e:
            err_console.print(f"[bold red]Error:[/bold red] {e.step}: {escape(e.detail)}")
            state = fail_run(state, e.detail)
        else:
            state = finish_run(state, exit_code)
    return state.exit_code


def print_psr_err(e: PsrError) -> None:
    """
    Displays a one-line error for a failed pipeline step and exits.

    The line names the step that failed (detection, manifest, resolve, ...)
    followed by the detail, including the underlying filesystem or process
    error when there is one.

    Args:
        e (PsrError): The exception that was raised.

    Raises:
        typer.Exit: Always raises with exit code 1 to terminate the application.
    """
    err_console.print(f"[bold red]Error:[/bold red] {e.step}: {escape(e.detail)}")
    raise typer.Exit(code=1) from e


def print_unexpected_err(e: Exception) -> None:
    """
    Displays a user-friendly error message for unexpected errors.

    This catch-all handler ensures that any unhandled exceptions are presented
    to the user in a friendly way, rather than showing a raw Python stack trace.

    Args:
        e (Exception): The unexpected exception that was raised.

    Raises:
        typer.Exit: Always raises with exit code 1 to terminate the application.
    """
    err_console.print(
        f"[bold red]Error:[/bold red] unexpected: {type(e).__name__}: {escape(str(e))}"
    )
    if e.__cause__:
        err_console.print(f"Caused by: {escape(str(e.__cause__))}")
    raise typer.Exit(code=1) from e


if __name__ == "__main__":
    app()
