"""
Terminal control for the interactive session.

Owns raw-mode lifecycle, alternate-screen switching, key decoding and the
guard that puts the terminal back the way it was found on every exit path.
"""

import contextlib
import os
import select
import shutil
import signal
import termios
import tty
from types import TracebackType
from typing import Iterator

ESC_SEQUENCE_TIMEOUT_MS = 25
GUARDED_SIGNALS = (signal.SIGTERM, signal.SIGHUP)

ENTER_ALT_SCREEN = "\x1b[?1049h"
LEAVE_ALT_SCREEN = "\x1b[?1049l"
HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"

_PENDING_BYTES: list[bytes] = []


class TerminalController:
    """
    Manage terminal mode transitions for one session.

    The tty attributes are captured once, at construction. Every later
    transition starts from that saved copy, so whatever a child process does
    to the terminal is discarded when the session takes it back.
    """

    def __init__(self, stdin_fd: int, stdout_fd: int) -> None:
        """
        Capture the tty state of ``stdin_fd``.

        Raises:
            termios.error: If ``stdin_fd`` is not a terminal.
        """
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self._saved_tty_state = termios.tcgetattr(stdin_fd)
        self.active = False
        self.alt_screen = False

    def enter(self, alt_screen: bool = False) -> None:
        """Enter raw mode with the cursor hidden, optionally on the alternate screen."""
        termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, self._saved_tty_state)
        tty.setraw(self.stdin_fd, termios.TCSAFLUSH)
        self.write((ENTER_ALT_SCREEN if alt_screen else "") + HIDE_CURSOR)
        self.active = True
        self.alt_screen = alt_screen

    def leave(self) -> None:
        """Show the cursor, leave the alternate screen and restore the saved tty attributes."""
        self.write(SHOW_CURSOR + (LEAVE_ALT_SCREEN if self.alt_screen else ""))
        termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, self._saved_tty_state)
        self.active = False
        self.alt_screen = False

    def switch_screen(self, alt_screen: bool) -> None:
        """Move between the inline list and the alternate screen without leaving raw mode."""
        if alt_screen == self.alt_screen:
            return
        self.write(ENTER_ALT_SCREEN if alt_screen else LEAVE_ALT_SCREEN)
        self.alt_screen = alt_screen

    def write(self, text: str) -> None:
        os.write(self.stdout_fd, text.encode("utf-8"))

    def size(self) -> os.terminal_size:
        return shutil.get_terminal_size()

    def read_key(self) -> str:
        return read_key(self.stdin_fd)

    @contextlib.contextmanager
    def suspended(self) -> Iterator[None]:
        """
        Hand the terminal back in its original state for the duration of the block.

        Used while a script runs. On exit, raw mode (and the alternate screen,
        if it was in use) is re-entered from the saved attributes.
        """
        alt_screen = self.alt_screen
        self.leave()
        try:
            yield
        finally:
            self.enter(alt_screen=alt_screen)


class TerminalGuard:
    """
    Context manager that restores the terminal on every exit path.

    On exit the controller (if any) leaves raw mode and the alternate screen
    and shows the cursor, whether the block returned, raised, or was
    interrupted. While the guard is active SIGTERM and SIGHUP raise
    ``SystemExit(128 + signum)`` so they unwind through the same path.

    Example:
        >>> with TerminalGuard(controller):
        ...     controller.enter()
        ...     run_session()
    """

    def __init__(self, controller: TerminalController | None = None) -> None:
        self.controller = controller
        self._previous_handlers: dict[int, object] = {}

    def _on_signal(self, signum, frame):
        raise SystemExit(128 + signum)

    def __enter__(self) -> "TerminalGuard":
        for sig in GUARDED_SIGNALS:
            self._previous_handlers[sig] = signal.signal(sig, self._on_signal)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        try:
            if self.controller is not None:
                self.controller.leave()
        finally:
            for sig, handler in self._previous_handlers.items():
                signal.signal(sig, handler if handler is not None else signal.SIG_DFL)
            self._previous_handlers.clear()


# ==========================================
# Key decoding
# ==========================================


def _read_ready_byte(fd: int, timeout_ms: int) -> bytes | None:
    ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
    if not ready:
        return None
    ch = os.read(fd, 1)
    if not ch:
        return None
    return ch


def _read_utf8(fd: int, first: bytes) -> str:
    lead = first[0]
    if lead >= 0xF0:
        missing = 3
    elif lead >= 0xE0:
        missing = 2
    elif lead >= 0xC0:
        missing = 1
    else:
        missing = 0
    data = first
    for _ in range(missing):
        ch = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if ch is None:
            break
        data += ch
    return data.decode("utf-8", errors="replace")


def read_key(fd: int) -> str:
    """
    Read one key press from a raw-mode terminal.

    Returns:
        str: A printable character, or one of the tokens "UP", "DOWN",
            "LEFT", "RIGHT", "ENTER", "ESC", "BACKSPACE", "TAB", "CTRL_C",
            "CTRL_D". An empty string means end of input.
    """
    if _PENDING_BYTES:
        ch = _PENDING_BYTES.pop(0)
    else:
        ch = os.read(fd, 1)
        if not ch:
            return ""

    if ch == b"\x03":
        return "CTRL_C"
    if ch == b"\x04":
        return "CTRL_D"
    if ch == b"\t":
        return "TAB"
    if ch in {b"\x08", b"\x7f"}:
        return "BACKSPACE"
    if ch in {b"\r", b"\n"}:
        return "ENTER"

    if ch != b"\x1b":
        return _read_utf8(fd, ch)

    # Escape / arrow key sequences.
    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return "ESC"
    if seq not in {b"[", b"O"}:
        _PENDING_BYTES.append(seq)
        return "ESC"
    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq == b"A":
        return "UP"
    if seq == b"B":
        return "DOWN"
    if seq == b"C":
        return "RIGHT"
    if seq == b"D":
        return "LEFT"
    return "ESC"
