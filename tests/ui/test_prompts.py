"""
Tests for the interactive prompts used by the projects commands.
"""

import pytest
import typer

from ui.prompts import confirm_overwrite, select_project


@pytest.mark.unit
@pytest.mark.mock
def test_select_project_returns_choice(mocker):
    """The selected project name is returned."""
    prompt = mocker.patch("ui.prompts.inquirer.prompt", return_value={"project": "api"})

    assert select_project({"api": "/src/api", "web": "/src/web"}) == "api"
    prompt.assert_called_once()


@pytest.mark.unit
@pytest.mark.mock
def test_select_project_without_projects(mocker):
    """With nothing saved there is nothing to prompt for."""
    prompt = mocker.patch("ui.prompts.inquirer.prompt")

    with pytest.raises(typer.Exit):
        select_project({})
    prompt.assert_not_called()


@pytest.mark.unit
@pytest.mark.mock
def test_select_project_cancelled(mocker):
    """Cancelling the prompt exits."""
    mocker.patch("ui.prompts.inquirer.prompt", return_value=None)

    with pytest.raises(typer.Exit):
        select_project({"api": "/src/api"})


@pytest.mark.unit
@pytest.mark.mock
@pytest.mark.parametrize("answer", [True, False])
def test_confirm_overwrite(mocker, answer):
    """The user's answer is returned as a bool."""
    mocker.patch("ui.prompts.inquirer.prompt", return_value={"overwrite": answer})
    assert confirm_overwrite("api", "/src/api") is answer


@pytest.mark.unit
@pytest.mark.mock
def test_confirm_overwrite_cancelled(mocker):
    """Cancelling the confirmation exits."""
    mocker.patch("ui.prompts.inquirer.prompt", return_value={})

    with pytest.raises(typer.Exit):
        confirm_overwrite("api", "/src/api")
