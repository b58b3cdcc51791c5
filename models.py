"""
Type definitions and data models used across the psr CLI application.

This module contains shared type definitions including enums and TypedDict
structures that are used throughout the codebase for type safety and consistency.
"""

from enum import Enum, StrEnum
from typing import TypedDict


class ProjectType(StrEnum):
    """
    Enumeration of the package managers and build tools psr understands.

    Each value is the human-readable name shown in listings and debug output.
    The enum values are used as keys when dispatching to the per-tool manifest
    parsers and when building the command line used to run a script.
    """

    NPM = "npm"
    YARN = "yarn"
    PNPM = "pnpm"
    BUN = "bun"
    DENO = "deno"
    PIP = "pip"
    POETRY = "poetry"
    UV = "uv"
    CARGO = "cargo"
    GO = "go"
    MAKE = "make"
    JUST = "just"


NODE_PROJECT_TYPES = frozenset(
    {ProjectType.NPM, ProjectType.YARN, ProjectType.PNPM, ProjectType.BUN}
)


class PriorityClass(Enum):
    """
    Strength of the evidence a detection rule provides.

    Lockfiles are generated by exactly one package manager, so their presence
    outranks configuration files that several tools may share.
    """

    LOCKFILE = 0
    CONFIG_FALLBACK = 1


class ScriptCategory(StrEnum):
    """
    Normalized role of a script, inferred from its name and command.

    Categories drive shortcut letters and colours; anything the heuristics do
    not recognise is OTHER.
    """

    DEV = "dev"
    START = "start"
    BUILD = "build"
    TEST = "test"
    LINT = "lint"
    FORMAT = "format"
    WATCH = "watch"
    CLEAN = "clean"
    DEPLOY = "deploy"
    OTHER = "other"


class Theme(StrEnum):
    """Colour themes understood by the renderers."""

    DARK = "dark"
    LIGHT = "light"
    NO_COLOR = "nocolor"


class DetectionRule(TypedDict):
    """
    Type definition for one entry of the static detection table.

    Attributes:
        project_type: The project type selected when the rule matches.
        priority: Whether the rule is lockfile evidence or a config fallback.
        signatures: File names whose presence triggers the rule (any of them).
        manifests: Candidate manifest file names read by the catalog builder;
            the first one present in the directory is used.
        marker: Optional text the first present signature file must contain
            (e.g. "[tool.poetry" inside pyproject.toml).
    """

    project_type: ProjectType
    priority: PriorityClass
    signatures: tuple[str, ...]
    manifests: tuple[str, ...]
    marker: str | None
