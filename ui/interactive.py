"""
Interactive session driver.

Runs the read, update, draw loop around the pure state machine in
``core/session.py``. This is the only place where the terminal, the process
executor and the session state meet.
"""

from typing import Protocol, Sequence

from adapters.process import ScriptExecutor, build_invocation
from adapters.terminal import TerminalController, TerminalGuard
from core.exceptions import ProcessSpawnError
from core.models import Catalog, Project
from core.session import (
    Mode,
    SessionState,
    fail_run,
    finish_run,
    handle_key,
    new_session,
)
from models import Theme
from ui.render import render_cli_list, render_error_splash, render_tui, to_raw
from utils import debug


class Terminal(Protocol):
    """The subset of TerminalController the driver uses; tests supply a fake."""

    alt_screen: bool

    def enter(self, alt_screen: bool = False) -> None: ...

    def leave(self) -> None: ...

    def switch_screen(self, alt_screen: bool) -> None: ...

    def write(self, text: str) -> None: ...

    def read_key(self) -> str: ...

    def size(self): ...

    def suspended(self): ...


class InteractiveSession:
    """
    Drive one interactive session until the user quits.

    Attributes:
        project: The detected project; scripts run in its root.
        state: The current session state.
    """

    def __init__(
        self,
        project: Project,
        catalog: Catalog,
        terminal: Terminal,
        executor: ScriptExecutor | None = None,
        theme: Theme = Theme.DARK,
        start_in_tui: bool = False,
        show_emoji: bool = True,
        args: Sequence[str] = (),
    ):
        self.project = project
        self.terminal = terminal
        self.executor = executor if executor is not None else ScriptExecutor()
        self.show_emoji = show_emoji
        self.args = list(args)
        self.state: SessionState = new_session(catalog, theme, start_in_tui)
        self._drawn_lines = 0

    def run(self) -> int:
        """
        Run the loop until the session exits.

        The terminal is restored by a TerminalGuard on every exit path,
        including exceptions and SIGTERM/SIGHUP.

        Returns:
            int: The exit code for the process.
        """
        with TerminalGuard(self.terminal):  # type: ignore[arg-type]
            self.terminal.enter(alt_screen=self.state.view is Mode.TUI)
            while self.state.mode is not Mode.EXITING:
                if self.state.mode is Mode.RUNNING:
                    self._run_pending()
                    continue
                self.draw()
                key = self.terminal.read_key()
                if key == "":
                    # stdin closed
                    self.state = handle_key(self.state, "CTRL_C")
                    continue
                self.state = handle_key(self.state, key)
            self._clear_inline()
        return self.state.exit_code

    def draw(self) -> None:
        """Draw the current state, in place for the list view or full-screen for the TUI."""
        size = self.terminal.size()
        width, height = size.columns, size.lines

        wants_alt_screen = self.state.view is Mode.TUI or self.state.mode is Mode.ERROR_SPLASH
        if wants_alt_screen != self.terminal.alt_screen:
            self._clear_inline()
            self.terminal.switch_screen(wants_alt_screen)

        if self.state.mode is Mode.ERROR_SPLASH:
            frame = render_error_splash(self.state, width=width)
        elif self.state.view is Mode.TUI:
            frame = render_tui(self.state, self.project, self.show_emoji, width, height)
        else:
            frame = render_cli_list(self.state, self.project, self.show_emoji, width, height)

        if self.terminal.alt_screen:
            self.terminal.write("\x1b[H\x1b[2J" + to_raw(frame))
        else:
            self._clear_inline()
            self.terminal.write(to_raw(frame))
            self._drawn_lines = frame.count("\n")

    def _clear_inline(self) -> None:
        """Erase the previously drawn inline frame and leave the cursor where it started."""
        if self.terminal.alt_screen:
            return
        up = f"\x1b[{self._drawn_lines}A" if self._drawn_lines else ""
        self.terminal.write("\r" + up + "\x1b[J")
        self._drawn_lines = 0

    def _run_pending(self) -> None:
        resolution = self.state.pending
        if resolution is None:
            self.state = finish_run(self.state, 0)
            return

        argv = build_invocation(self.project.project_type, resolution.entry, self.args)
        self._clear_inline()
        try:
            with self.terminal.suspended():
                debug(f"Running script '{resolution.entry.name}'")
                exit_code = self.executor.run(argv, self.project.root, resolution.env)
        except ProcessSpawnError as e:
            self.state = fail_run(self.state, e.detail)
            return
        self.state = finish_run(self.state, exit_code)


def run_interactive(
    project: Project,
    catalog: Catalog,
    theme: Theme,
    start_in_tui: bool = False,
    show_emoji: bool = True,
) -> int:
    """Start an interactive session on the process's own terminal."""
    terminal = TerminalController(stdin_fd=0, stdout_fd=1)
    session = InteractiveSession(
        project,
        catalog,
        terminal,
        theme=theme,
        start_in_tui=start_in_tui,
        show_emoji=show_emoji,
    )
    return session.run()
