"""
Synonym resolution.

Resolves a requested script name against a catalog. When the exact name is
missing, the first synonym group that contains it is tried in order, so
``psr dev`` still works in a project that only defines ``start``.
"""

import difflib

from constants import DEV_SYNONYM_ENV, DEV_SYNONYM_TARGETS, SYNONYM_GROUPS
from core.exceptions import ScriptNotFound
from core.models import Catalog, Resolution
from utils import debug


def synonym_group(name: str) -> tuple[str, ...]:
    """Return the first synonym group containing ``name``, or an empty tuple."""
    for group in SYNONYM_GROUPS:
        if name in group:
            return group
    return ()


def suggest_name(catalog: Catalog, name: str) -> str | None:
    """Return the catalog name closest to ``name``, if any is reasonably close."""
    matches = difflib.get_close_matches(name, catalog.names, n=1, cutoff=0.6)
    return matches[0] if matches else None


def resolve_script(catalog: Catalog, name: str) -> Resolution:
    """
    Resolve a requested script name to a catalog entry.

    Args:
        catalog: The catalog to search.
        name: The name the user asked for.

    Returns:
        Resolution: The entry to run and any environment overrides. Overrides
            are only set when ``dev`` is served by ``start`` or ``run``.

    Raises:
        ScriptNotFound: If neither the name nor any member of its synonym
            group is in the catalog.
    """
    entry = catalog.get(name)
    if entry is not None:
        return Resolution(entry=entry, requested=name)

    for candidate in synonym_group(name):
        entry = catalog.get(candidate)
        if entry is None:
            continue

        env: dict[str, str] = {}
        if name == "dev" and candidate in DEV_SYNONYM_TARGETS:
            env = dict(DEV_SYNONYM_ENV)
        debug(f"Resolved '{name}' to synonym '{candidate}'")
        return Resolution(entry=entry, requested=name, env=env)

    raise ScriptNotFound(name, suggest_name(catalog, name))
