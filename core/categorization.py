"""Script categorization module.

This module infers the role of a script (dev server, build, tests, lint, ...)
from its name and, failing that, from the tools its command invokes. The
category drives shortcut assignment and the colour a script is rendered with.

Inference runs in three tiers and stops at the first hit:

1. The lowercase name equals a vocabulary word (``test``, ``build``, ...).
2. The lowercase name contains a vocabulary word (``test:watch``, ``prebuild``).
3. The command text mentions a well-known tool (``vitest``, ``eslint``, ...).

Anything else is ``ScriptCategory.OTHER``.
"""

from constants import CATEGORY_VOCABULARY, COMMAND_TOOL_CATEGORIES
from models import ScriptCategory


def infer_category(name: str, command: str = "") -> ScriptCategory:
    """
    Infer the category of a script from its name and command.

    The vocabulary is ordered, so for substring matches the earlier word wins:
    ``test:build`` is TEST because ``test`` precedes ``build``.

    Args:
        name: The script name as declared in the manifest.
        command: The command text. Only consulted when the name matches no
            vocabulary word.

    Returns:
        ScriptCategory: The inferred category, or OTHER.

    Example:
        >>> infer_category("test:watch", "vitest --watch")
        <ScriptCategory.TEST: 'test'>
        >>> infer_category("unit", "jest --coverage")
        <ScriptCategory.TEST: 'test'>
    """
    lowered = name.lower()

    for word, category in CATEGORY_VOCABULARY:
        if lowered == word:
            return category

    for word, category in CATEGORY_VOCABULARY:
        if word in lowered:
            return category

    command_lowered = command.lower()
    for tool, category in COMMAND_TOOL_CATEGORIES:
        if tool in command_lowered:
            return category

    return ScriptCategory.OTHER
