"""
Shared fixtures for UI tests: a detected project, its catalog and a fake
terminal that replays scripted key presses.
"""

import contextlib
import os
from pathlib import Path

import pytest

from core.categorization import infer_category
from core.models import Catalog, Project, ScriptEntry
from core.shortcuts import assign_shortcuts
from models import ProjectType


@pytest.fixture
def project():
    root = Path("/home/user/app")
    return Project(ProjectType.NPM, root, root / "package.json")


@pytest.fixture
def catalog():
    """Shortcuts: dev=d, build=b, test=t, lint=1, preview=2."""
    pairs = [
        ("dev", "vite", None),
        ("build", "vite build", "Bundle for production"),
        ("test", "vitest", None),
        ("lint", "eslint .", None),
        ("preview", "vite preview", None),
    ]
    entries = [
        ScriptEntry(name, command, infer_category(name, command), description)
        for name, command, description in pairs
    ]
    return Catalog(assign_shortcuts(entries))


class FakeTerminal:
    """Records everything written and replays a fixed list of keys."""

    def __init__(self, keys, columns=80, lines=24):
        self.keys = list(keys)
        self.written: list[str] = []
        self.events: list[str] = []
        self.alt_screen = False
        self._size = os.terminal_size((columns, lines))

    def enter(self, alt_screen=False):
        self.events.append(f"enter(alt={alt_screen})")
        self.alt_screen = alt_screen

    def leave(self):
        self.events.append("leave")
        self.alt_screen = False

    def switch_screen(self, alt_screen):
        self.events.append(f"switch(alt={alt_screen})")
        self.alt_screen = alt_screen

    def write(self, text):
        self.written.append(text)

    def read_key(self):
        return self.keys.pop(0) if self.keys else ""

    def size(self):
        return self._size

    @contextlib.contextmanager
    def suspended(self):
        alt_screen = self.alt_screen
        self.leave()
        self.events.append("suspended")
        try:
            yield
        finally:
            self.enter(alt_screen=alt_screen)

    @property
    def output(self) -> str:
        return "".join(self.written)


@pytest.fixture
def make_terminal():
    return FakeTerminal
