"""
Shortcut assignment.

Binds single keystrokes to catalog entries. Letters come from
``constants.SHORTCUT_LETTERS`` and go to the first entry of each listed
category; everything else draws digits from ``NUMERIC_SHORTCUTS`` in catalog
order until they run out.
"""

from dataclasses import replace
from typing import Iterable

from constants import NUMERIC_SHORTCUTS, SHORTCUT_LETTERS
from core.models import ScriptEntry


def assign_shortcuts(entries: Iterable[ScriptEntry]) -> tuple[ScriptEntry, ...]:
    """
    Assign shortcuts to entries, preserving their order.

    Assignment is a pure function of the entry sequence: the same entries in
    the same order always get the same shortcuts. Any shortcut already set on
    an input entry is discarded.

    Args:
        entries: Script entries in catalog order.

    Returns:
        tuple[ScriptEntry, ...]: Copies of the entries with ``shortcut`` set
            (or None when both pools are exhausted).
    """
    letters = dict(SHORTCUT_LETTERS)
    claimed: set[str] = set()
    digits = iter(NUMERIC_SHORTCUTS)

    assigned: list[ScriptEntry] = []
    for entry in entries:
        shortcut: str | None = None

        letter = letters.get(entry.category)
        if letter is not None and letter not in claimed:
            claimed.add(letter)
            shortcut = letter
        else:
            shortcut = next(digits, None)

        assigned.append(replace(entry, shortcut=shortcut))

    return tuple(assigned)
