"""
Shared fixtures for core module tests.

This module provides reusable pytest fixtures for testing core functionality:
in-memory project trees, a catalog builder and common test objects.
"""

import json
from pathlib import Path

import pytest

from core.file_io import MockManifestReader
from core.models import Catalog, ScriptEntry
from core.shortcuts import assign_shortcuts
from core.categorization import infer_category

HOME = Path("/home/user")


@pytest.fixture
def home():
    """Detection boundary used by in-memory trees."""
    return HOME


@pytest.fixture
def project_root(home):
    """A project directory directly below the boundary."""
    return home / "project"


@pytest.fixture
def make_reader():
    """Factory for MockManifestReader instances from relative or absolute paths."""

    def _factory(root: Path, files: dict[str, str], unreadable: set[Path] | None = None):
        return MockManifestReader(
            {root / name: content for name, content in files.items()},
            unreadable=unreadable,
        )

    return _factory


@pytest.fixture
def package_json():
    """Render a package.json from a scripts mapping and optional extra keys."""

    def _factory(scripts: dict[str, str] | None = None, **extra) -> str:
        data: dict = {"name": "app", "version": "1.0.0"}
        if scripts is not None:
            data["scripts"] = scripts
        data.update(extra)
        return json.dumps(data)

    return _factory


@pytest.fixture
def make_catalog():
    """Build a shortcut-assigned catalog from (name, command) pairs."""

    def _factory(*pairs: tuple[str, str]) -> Catalog:
        entries = [
            ScriptEntry(name=name, command=command, category=infer_category(name, command))
            for name, command in pairs
        ]
        return Catalog(assign_shortcuts(entries))

    return _factory


@pytest.fixture
def node_catalog(make_catalog):
    """A typical Node project catalog."""
    return make_catalog(
        ("dev", "vite"),
        ("build", "vite build"),
        ("test", "vitest"),
        ("lint", "eslint ."),
        ("preview", "vite preview"),
    )
