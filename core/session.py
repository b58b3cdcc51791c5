"""
Interactive session state machine.

The session is a plain value (``SessionState``) and a set of transition
functions. Nothing in this module touches the terminal or spawns processes:
the driver in ``ui/interactive.py`` reads a key, calls ``handle_key`` and
draws the new state, and when the state enters ``Mode.RUNNING`` it runs
``state.pending`` and reports back through ``finish_run`` or ``fail_run``.

Modes:

- ``CLI_LIST`` / ``TUI``: the two browsing views. ``state.view`` remembers
  which one is underneath while searching, running or showing an error.
- ``SEARCH``: typing narrows the list; the view underneath is kept.
- ``RUNNING``: a script is executing; keys are ignored.
- ``ERROR_SPLASH``: the last script failed; any key dismisses it.
- ``EXITING``: terminal state; ``state.exit_code`` is the process exit code.
"""

from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import Callable

from constants import KEY_DOWN, KEY_ENTER, KEY_QUIT, KEY_SEARCH, KEY_TUI, KEY_UP
from core.exceptions import ScriptNotFound
from core.models import Catalog, Resolution, ScriptEntry
from core.synonyms import resolve_script
from models import Theme

SPAWN_FAILURE_EXIT_CODE = 127


class Mode(Enum):
    CLI_LIST = auto()
    TUI = auto()
    SEARCH = auto()
    RUNNING = auto()
    ERROR_SPLASH = auto()
    EXITING = auto()


@dataclass(frozen=True)
class SessionState:
    """
    Snapshot of an interactive session.

    Attributes:
        catalog: The scripts being browsed.
        mode: Current mode.
        view: Browsing view underneath the current mode (CLI_LIST or TUI).
        cursor: Index of the highlighted entry in ``visible_entries``.
        query: Search text; empty outside of SEARCH.
        last_exit_code: Exit code of the most recent run, if any.
        theme: Colour theme used by the renderer.
        one_shot: True when the session runs a single script and exits.
        pending: The resolution being run while in RUNNING.
        resume_mode: Mode to return to after RUNNING or ERROR_SPLASH.
        message: One-line status shown under the list, cleared on the next key.
        exit_code: Exit code of the process once the session is EXITING.
    """

    catalog: Catalog
    mode: Mode = Mode.CLI_LIST
    view: Mode = Mode.CLI_LIST
    cursor: int = 0
    query: str = ""
    last_exit_code: int | None = None
    theme: Theme = Theme.DARK
    one_shot: bool = False
    pending: Resolution | None = None
    resume_mode: Mode | None = None
    message: str | None = None
    exit_code: int = 0


def new_session(catalog: Catalog, theme: Theme = Theme.DARK, start_in_tui: bool = False) -> SessionState:
    """Create the initial state of an interactive session."""
    view = Mode.TUI if start_in_tui else Mode.CLI_LIST
    return SessionState(catalog=catalog, mode=view, view=view, theme=theme)


def start_one_shot(catalog: Catalog, resolution: Resolution, theme: Theme = Theme.DARK) -> SessionState:
    """Create a session that runs ``resolution`` once and then exits with its code."""
    return SessionState(
        catalog=catalog,
        mode=Mode.RUNNING,
        theme=theme,
        one_shot=True,
        pending=resolution,
        resume_mode=Mode.EXITING,
    )


def visible_entries(state: SessionState) -> tuple[ScriptEntry, ...]:
    """Entries shown in the current view, in catalog order."""
    return state.catalog.filter(state.query)


def highlighted_entry(state: SessionState) -> ScriptEntry | None:
    entries = visible_entries(state)
    if not entries:
        return None
    return entries[min(state.cursor, len(entries) - 1)]


# ==========================================
# Run lifecycle
# ==========================================


def _start_run(state: SessionState, resolution: Resolution) -> SessionState:
    return replace(
        state,
        mode=Mode.RUNNING,
        pending=resolution,
        resume_mode=state.mode,
        message=None,
    )


def finish_run(state: SessionState, exit_code: int) -> SessionState:
    """
    Record the exit code of the script that was running.

    A one-shot session exits with the script's code. Otherwise a non-zero
    code shows the error splash and zero returns to the mode the run started
    from.
    """
    state = replace(state, pending=None, last_exit_code=exit_code)
    if state.one_shot:
        return replace(state, mode=Mode.EXITING, exit_code=exit_code)
    if exit_code != 0:
        return replace(state, mode=Mode.ERROR_SPLASH)
    return replace(state, mode=state.resume_mode or state.view, resume_mode=None)


def fail_run(state: SessionState, message: str) -> SessionState:
    """
    Record that the pending script could not be started.

    The session stays alive and shows ``message``; a one-shot session exits
    with code 127, the shell convention for a command that could not run.
    """
    state = replace(state, pending=None, message=message)
    if state.one_shot:
        return replace(state, mode=Mode.EXITING, exit_code=SPAWN_FAILURE_EXIT_CODE)
    return replace(state, mode=state.resume_mode or state.view, resume_mode=None)


# ==========================================
# Key handling
# ==========================================


def _move(state: SessionState, delta: int) -> SessionState:
    count = len(visible_entries(state))
    if count == 0:
        return replace(state, cursor=0)
    return replace(state, cursor=max(0, min(count - 1, state.cursor + delta)))


def _run_highlighted(state: SessionState) -> SessionState:
    entry = highlighted_entry(state)
    if entry is None:
        return state
    return _start_run(state, Resolution(entry=entry, requested=entry.name))


def _handle_view(state: SessionState, key: str) -> SessionState:
    if key in KEY_QUIT:
        return replace(state, mode=Mode.EXITING, exit_code=0)
    if key == KEY_SEARCH:
        return replace(state, mode=Mode.SEARCH, query="", cursor=0)
    if key == KEY_TUI and state.mode is Mode.CLI_LIST:
        return replace(state, mode=Mode.TUI, view=Mode.TUI)
    if key in KEY_UP:
        return _move(state, -1)
    if key in KEY_DOWN:
        return _move(state, 1)
    if key in KEY_ENTER:
        return _run_highlighted(state)

    entry = state.catalog.by_shortcut(key)
    if entry is not None:
        return _start_run(state, Resolution(entry=entry, requested=entry.name))
    return state


def _handle_search(state: SessionState, key: str) -> SessionState:
    if key == "ESC":
        return replace(state, mode=state.view, query="", cursor=0)
    if key == "CTRL_C":
        return replace(state, mode=Mode.EXITING, exit_code=0)
    if key == "BACKSPACE":
        return replace(state, query=state.query[:-1], cursor=0)
    if key == "UP":
        return _move(state, -1)
    if key == "DOWN":
        return _move(state, 1)
    if key in KEY_ENTER:
        if visible_entries(state):
            return _run_highlighted(state)
        try:
            resolution = resolve_script(state.catalog, state.query)
        except ScriptNotFound as e:
            return replace(state, message=e.message)
        return _start_run(state, resolution)
    if len(key) == 1 and key.isprintable():
        return replace(state, query=state.query + key, cursor=0)
    return state


def _handle_error_splash(state: SessionState, key: str) -> SessionState:
    return replace(state, mode=state.resume_mode or state.view, resume_mode=None)


def _ignore_key(state: SessionState, key: str) -> SessionState:
    return state


_HANDLERS: dict[Mode, Callable[[SessionState, str], SessionState]] = {
    Mode.CLI_LIST: _handle_view,
    Mode.TUI: _handle_view,
    Mode.SEARCH: _handle_search,
    Mode.RUNNING: _ignore_key,
    Mode.ERROR_SPLASH: _handle_error_splash,
    Mode.EXITING: _ignore_key,
}


def handle_key(state: SessionState, key: str) -> SessionState:
    """
    Apply one decoded key to the session.

    Args:
        state: Current state.
        key: A key token from ``adapters.terminal.read_key``: a single
            character, or one of "UP", "DOWN", "ENTER", "ESC", "BACKSPACE",
            "CTRL_C".

    Returns:
        SessionState: The next state. The status message is cleared by every
            key except the one that set it.
    """
    if state.message is not None and state.mode is not Mode.RUNNING:
        state = replace(state, message=None)
    return _HANDLERS[state.mode](state, key)
