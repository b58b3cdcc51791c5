"""
Core data models for the detection, catalog and session pipeline.

This module defines the immutable data structures passed between the
detector, the catalog builder, the synonym resolver and the session
controller.
"""

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping

from models import ProjectType, ScriptCategory


@dataclass(frozen=True)
class Project:
    """
    A detected project: which tool owns it and where its manifest lives.

    Attributes:
        project_type: The package manager or build tool selected by detection.
        root: Absolute directory in which the detection rule matched.
        manifest: Absolute path of the manifest the catalog builder reads.
    """

    project_type: ProjectType
    root: Path
    manifest: Path


@dataclass(frozen=True)
class ScriptEntry:
    """
    One runnable script of a project.

    Attributes:
        name: Script name, unique within a catalog.
        command: The command text exactly as the manifest declares it.
        category: Role inferred from the name and command.
        description: Optional human-readable description.
        shortcut: Single letter or digit bound to this entry, if any.
    """

    name: str
    command: str
    category: ScriptCategory = ScriptCategory.OTHER
    description: str | None = None
    shortcut: str | None = None

    def matches(self, query: str) -> bool:
        """Case-insensitive substring match on name, command and description."""
        needle = query.lower()
        return (
            needle in self.name.lower()
            or needle in self.command.lower()
            or (self.description is not None and needle in self.description.lower())
        )


class Catalog:
    """
    Ordered, immutable collection of script entries with derived lookups.

    A catalog is built once per project and replaced wholesale; it exposes the
    entries in catalog order plus lookups by name and by shortcut.
    """

    def __init__(self, entries: Iterable[ScriptEntry]) -> None:
        self._entries: tuple[ScriptEntry, ...] = tuple(entries)
        by_name: dict[str, ScriptEntry] = {}
        by_shortcut: dict[str, ScriptEntry] = {}
        for entry in self._entries:
            if entry.name in by_name:
                raise ValueError(f"Duplicate script name in catalog: {entry.name}")
            by_name[entry.name] = entry
            if entry.shortcut is not None:
                if entry.shortcut in by_shortcut:
                    raise ValueError(f"Duplicate shortcut in catalog: {entry.shortcut}")
                by_shortcut[entry.shortcut] = entry
        self._by_name = MappingProxyType(by_name)
        self._by_shortcut = MappingProxyType(by_shortcut)

    @property
    def entries(self) -> tuple[ScriptEntry, ...]:
        return self._entries

    @property
    def names(self) -> list[str]:
        return [entry.name for entry in self._entries]

    def get(self, name: str) -> ScriptEntry | None:
        return self._by_name.get(name)

    def by_shortcut(self, key: str) -> ScriptEntry | None:
        return self._by_shortcut.get(key)

    def filter(self, query: str) -> tuple[ScriptEntry, ...]:
        """
        Return the entries matching a search query, in catalog order.

        An empty query returns every entry, so clearing a search always
        restores the original order rather than a previously narrowed one.
        """
        if not query:
            return self._entries
        return tuple(entry for entry in self._entries if entry.matches(query))

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ScriptEntry]:
        return iter(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name


@dataclass(frozen=True)
class Resolution:
    """
    Outcome of resolving a requested script name.

    Attributes:
        entry: The catalog entry that will run.
        requested: The name the user asked for.
        env: Environment overrides to inject into the child process.
    """

    entry: ScriptEntry
    requested: str
    env: Mapping[str, str] = field(default_factory=dict)

    @property
    def via_synonym(self) -> bool:
        return self.entry.name != self.requested
