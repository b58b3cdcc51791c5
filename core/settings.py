"""
User settings and the saved-project store.

Settings live in ``~/.psr/settings.json``::

    {"theme": "dark", "show_emoji": true, "projects": {"api": "/home/me/src/api"}}

A missing file means defaults. A file that exists but cannot be read or does
not have this shape raises SettingsError rather than being silently replaced,
so a typo never wipes the saved projects on the next write.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from core.exceptions import ProjectStoreError, SettingsError
from models import Theme
from utils import debug

CONFIG_DIR = Path.home() / ".psr"
CONFIG_FILE = CONFIG_DIR / "settings.json"
THEME_ENV_VAR = "PSR_THEME"
NO_COLOR_ENV_VAR = "NO_COLOR"


@dataclass
class Settings:
    """
    Parsed settings file.

    Attributes:
        theme: Theme chosen in the settings file, or None when unset.
        show_emoji: Whether category icons are drawn next to script names.
        projects: Saved project names mapped to absolute directory strings.
    """

    theme: Theme | None = None
    show_emoji: bool = True
    projects: dict[str, str] = field(default_factory=dict)

    def to_json(self) -> dict[str, Any]:
        return {
            "theme": self.theme.value if self.theme is not None else None,
            "show_emoji": self.show_emoji,
            "projects": dict(sorted(self.projects.items())),
        }


def _parse_theme(value: Any, config_file: Path) -> Theme | None:
    if value is None:
        return None
    try:
        return Theme(str(value).lower())
    except ValueError as e:
        raise SettingsError(
            message=f"Unknown theme '{value}' in {config_file}",
            file_path=config_file,
            original_exception=e,
        ) from e


def load_settings(config_file: Path | None = None) -> Settings:
    """
    Load the settings file.

    Args:
        config_file: Settings path. Defaults to ``CONFIG_FILE``.

    Returns:
        Settings: Parsed settings, or defaults when the file does not exist.

    Raises:
        SettingsError: If the file cannot be read, is not valid JSON, or has
            fields of the wrong type.
    """
    config_file = config_file or CONFIG_FILE
    if not config_file.exists():
        debug(f"No settings file at {config_file}, using defaults")
        return Settings()

    try:
        data = json.loads(config_file.read_text(encoding="utf-8"))
    except OSError as e:
        raise SettingsError(
            message=f"Cannot read {config_file}",
            file_path=config_file,
            original_exception=e,
        ) from e
    except json.JSONDecodeError as e:
        raise SettingsError(
            message=f"Invalid JSON in {config_file}",
            file_path=config_file,
            original_exception=e,
        ) from e

    if not isinstance(data, dict):
        raise SettingsError(file_path=config_file)

    show_emoji = data.get("show_emoji", True)
    projects = data.get("projects", {})
    if not isinstance(show_emoji, bool) or not isinstance(projects, dict):
        raise SettingsError(file_path=config_file)
    if not all(isinstance(p, str) for p in projects.values()):
        raise SettingsError(
            message=f"Project paths in {config_file} must be strings",
            file_path=config_file,
        )

    return Settings(
        theme=_parse_theme(data.get("theme"), config_file),
        show_emoji=show_emoji,
        projects=dict(projects),
    )


def save_settings(settings: Settings, config_file: Path | None = None) -> None:
    """
    Write the settings file, creating its directory if needed.

    Raises:
        SettingsError: If the file cannot be written.
    """
    config_file = config_file or CONFIG_FILE
    try:
        config_file.parent.mkdir(parents=True, exist_ok=True)
        config_file.write_text(
            json.dumps(settings.to_json(), indent=2) + "\n", encoding="utf-8"
        )
    except OSError as e:
        raise SettingsError(
            message=f"Cannot write {config_file}",
            file_path=config_file,
            original_exception=e,
        ) from e


# ==========================================
# Saved projects
# ==========================================


def add_project(settings: Settings, name: str, path: Path, overwrite: bool = False) -> Path:
    """
    Save a directory under a project name.

    Args:
        settings: Settings to update in place.
        name: Project name.
        path: Directory to save. Stored as an absolute path with ``..`` and
            symlinks resolved.
        overwrite: Replace an existing entry with the same name.

    Returns:
        Path: The absolute path that was stored.

    Raises:
        ProjectStoreError: If the directory does not exist, or the name is
            taken and ``overwrite`` is False.
    """
    path = path.expanduser().resolve()
    if not path.is_dir():
        raise ProjectStoreError(message=f"Not a directory: {path}")
    if name in settings.projects and not overwrite:
        raise ProjectStoreError(message=f"Project '{name}' already exists")
    settings.projects[name] = str(path)
    return path


def remove_project(settings: Settings, name: str) -> Path:
    """
    Forget a saved project.

    Returns:
        Path: The directory the project pointed to.

    Raises:
        ProjectStoreError: If no project has this name.
    """
    if name not in settings.projects:
        raise ProjectStoreError(message=f"Unknown project '{name}'")
    return Path(settings.projects.pop(name))


def rename_project(settings: Settings, old_name: str, new_name: str) -> None:
    """
    Rename a saved project, keeping its directory.

    Raises:
        ProjectStoreError: If ``old_name`` is unknown or ``new_name`` is taken.
    """
    if old_name not in settings.projects:
        raise ProjectStoreError(message=f"Unknown project '{old_name}'")
    if new_name in settings.projects:
        raise ProjectStoreError(message=f"Project '{new_name}' already exists")
    settings.projects[new_name] = settings.projects.pop(old_name)


def get_project_path(settings: Settings, name: str) -> Path:
    """
    Look up a saved project's directory.

    Raises:
        ProjectStoreError: If no project has this name.
    """
    if name not in settings.projects:
        raise ProjectStoreError(message=f"Unknown project '{name}'")
    return Path(settings.projects[name])


# ==========================================
# Theme
# ==========================================


def resolve_theme(
    cli_theme: Theme | None,
    settings: Settings,
    environ: Mapping[str, str] | None = None,
) -> Theme:
    """
    Pick the theme for this session.

    Precedence: ``--theme``, then a non-empty ``NO_COLOR``, then
    ``PSR_THEME``, then the settings file, then Dark. An unknown ``PSR_THEME``
    value is ignored.
    """
    environ = os.environ if environ is None else environ

    if cli_theme is not None:
        return cli_theme
    if environ.get(NO_COLOR_ENV_VAR):
        return Theme.NO_COLOR

    env_theme = environ.get(THEME_ENV_VAR)
    if env_theme:
        try:
            return Theme(env_theme.lower())
        except ValueError:
            debug(f"Ignoring unknown {THEME_ENV_VAR}={env_theme}")

    if settings.theme is not None:
        return settings.theme
    return Theme.DARK
