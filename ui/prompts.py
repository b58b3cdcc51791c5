"""
Interactive user prompts for the psr CLI application.

This module provides the terminal prompts used by the ``projects`` commands:

1. Project Selection: Lets the user pick a saved project to remove when no
   name is given on the command line.

2. Overwrite Confirmation: Asks before replacing a saved project that already
   uses the requested name.

The module uses the `inquirer` library for interactive prompts and `rich` for
formatted terminal output. Cancelling a prompt (Ctrl-C) exits without
changing anything.

Dependencies:
    - inquirer: Interactive terminal prompts
    - rich: Terminal formatting and colors
    - typer: CLI framework integration
"""

import inquirer  # type: ignore
from inquirer.themes import GreenPassion  # type: ignore
from rich import print as pr
import typer


def select_project(projects: dict[str, str], action: str = "remove") -> str:
    """
    Prompts the user to pick one of the saved projects.

    Args:
        projects (dict[str, str]): Saved project names mapped to their directories.
        action (str): Verb shown in the prompt, e.g. "remove".

    Returns:
        str: The selected project name.

    Raises:
        typer.Exit: If there are no saved projects or the prompt is cancelled.
    """
    if not projects:
        pr("[bold red]No saved projects.[/bold red]")
        raise typer.Exit()

    pr(f"\n[bold green]Which project do you want to {action}?[/bold green]")
    questions = [
        inquirer.List(
            "project",
            message="Hit [ENTER] to make your selection",
            choices=[(f"{name}  ({path})", name) for name, path in sorted(projects.items())],
        ),
    ]

    answers = inquirer.prompt(questions, theme=GreenPassion())
    if not answers:
        raise typer.Exit()

    return answers["project"]


def confirm_overwrite(name: str, existing_path: str) -> bool:
    """
    Asks whether a saved project should be replaced.

    Args:
        name (str): The project name that is already taken.
        existing_path (str): The directory currently saved under that name.

    Returns:
        bool: True if the user agreed to overwrite.

    Raises:
        typer.Exit: If the prompt is cancelled.
    """
    questions = [
        inquirer.Confirm(
            "overwrite",
            message=f"'{name}' already points to {existing_path}. Overwrite it?",
            default=False,
        ),
    ]

    answers = inquirer.prompt(questions, theme=GreenPassion())
    if not answers:
        raise typer.Exit()

    return bool(answers["overwrite"])
