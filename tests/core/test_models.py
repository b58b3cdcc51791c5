"""
Tests for the core data models.

Tests cover:
- ScriptEntry.matches: case-insensitive search over name, command, description
- Catalog: lookups, filtering, uniqueness checks
- Resolution.via_synonym
"""

import pytest

from core.models import Catalog, Resolution, ScriptEntry
from models import ScriptCategory


@pytest.mark.unit
def test_entry_matches_name_command_and_description():
    """Search matches any of the three text fields, ignoring case."""
    entry = ScriptEntry("build", "vite build", ScriptCategory.BUILD, "Bundle for Production")

    assert entry.matches("BUI")
    assert entry.matches("vite")
    assert entry.matches("production")
    assert not entry.matches("jest")


@pytest.mark.unit
def test_entry_without_description():
    """Entries without a description only match on name and command."""
    entry = ScriptEntry("test", "jest")
    assert not entry.matches("unit")


@pytest.mark.unit
def test_catalog_lookups():
    """Entries are reachable by name and by shortcut."""
    catalog = Catalog(
        [
            ScriptEntry("dev", "vite", ScriptCategory.DEV, shortcut="d"),
            ScriptEntry("preview", "vite preview", shortcut="1"),
        ]
    )

    assert len(catalog) == 2
    assert "dev" in catalog
    assert catalog.get("preview").command == "vite preview"
    assert catalog.get("missing") is None
    assert catalog.by_shortcut("d").name == "dev"
    assert catalog.by_shortcut("x") is None
    assert [e.name for e in catalog] == ["dev", "preview"]


@pytest.mark.unit
def test_catalog_filter_keeps_order():
    """Filtering returns matching entries in catalog order; empty query returns all."""
    catalog = Catalog(
        [
            ScriptEntry("test", "vitest"),
            ScriptEntry("build", "vite build"),
            ScriptEntry("lint", "eslint ."),
        ]
    )

    assert [e.name for e in catalog.filter("vite")] == ["test", "build"]
    assert catalog.filter("") == catalog.entries
    assert catalog.filter("zzz") == ()


@pytest.mark.unit
def test_catalog_rejects_duplicates():
    """Duplicate names or shortcuts are programming errors."""
    with pytest.raises(ValueError):
        Catalog([ScriptEntry("a", "x"), ScriptEntry("a", "y")])
    with pytest.raises(ValueError):
        Catalog([ScriptEntry("a", "x", shortcut="1"), ScriptEntry("b", "y", shortcut="1")])


@pytest.mark.unit
def test_resolution_via_synonym():
    """A resolution is via a synonym when the entry name differs from the request."""
    entry = ScriptEntry("start", "node .")
    assert Resolution(entry, "dev").via_synonym
    assert not Resolution(entry, "start").via_synonym
