"""
Screen rendering for psr.

Everything here is a pure function from state to text. Frames are drawn with
Rich into an in-memory console and returned as strings; the interactive
driver writes them to the terminal. Three outputs exist:

- ``render_listing``: the plain ``--list`` output, one tab-separated line per
  script. Other tools parse it, so it never carries colour or decoration.
- ``render_cli_list`` / ``render_tui``: the two browsing views.
- ``render_error_splash``: shown after a script exits with a non-zero code.
"""

from io import StringIO

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.models import Catalog, Project, ScriptEntry
from core.session import Mode, SessionState, highlighted_entry, visible_entries
from models import ScriptCategory, Theme

CATEGORY_ICONS: dict[ScriptCategory, str] = {
    ScriptCategory.DEV: "🚀",
    ScriptCategory.START: "▶️",
    ScriptCategory.BUILD: "📦",
    ScriptCategory.TEST: "🧪",
    ScriptCategory.LINT: "🔍",
    ScriptCategory.FORMAT: "✨",
    ScriptCategory.WATCH: "👀",
    ScriptCategory.CLEAN: "🧹",
    ScriptCategory.DEPLOY: "🚢",
    ScriptCategory.OTHER: "🔧",
}

_DARK_STYLES: dict[str, str] = {
    ScriptCategory.DEV: "bold green",
    ScriptCategory.START: "green",
    ScriptCategory.BUILD: "bold blue",
    ScriptCategory.TEST: "bold yellow",
    ScriptCategory.LINT: "magenta",
    ScriptCategory.FORMAT: "cyan",
    ScriptCategory.WATCH: "bright_cyan",
    ScriptCategory.CLEAN: "red",
    ScriptCategory.DEPLOY: "bold magenta",
    ScriptCategory.OTHER: "white",
    "accent": "bold cyan",
    "muted": "grey50",
    "highlight": "reverse",
    "error": "bold red",
}

_LIGHT_STYLES: dict[str, str] = {
    ScriptCategory.DEV: "bold dark_green",
    ScriptCategory.START: "dark_green",
    ScriptCategory.BUILD: "bold blue",
    ScriptCategory.TEST: "bold dark_orange3",
    ScriptCategory.LINT: "purple",
    ScriptCategory.FORMAT: "dark_cyan",
    ScriptCategory.WATCH: "deep_sky_blue4",
    ScriptCategory.CLEAN: "red3",
    ScriptCategory.DEPLOY: "bold purple",
    ScriptCategory.OTHER: "black",
    "accent": "bold blue",
    "muted": "grey37",
    "highlight": "reverse",
    "error": "bold red3",
}

THEME_STYLES: dict[Theme, dict[str, str]] = {
    Theme.DARK: _DARK_STYLES,
    Theme.LIGHT: _LIGHT_STYLES,
    Theme.NO_COLOR: {},
}

CLI_LIST_HELP = "↑/↓ move · enter run · / search · t full screen · q quit"
TUI_HELP = "↑/↓ move · enter run · / search · shortcut key runs · q quit"
SEARCH_HELP = "type to filter · ↑/↓ move · enter run · esc cancel"


def render_listing(catalog: Catalog) -> str:
    """
    Render the ``--list`` output.

    One line per entry in catalog order: shortcut (or ``-``), name and
    command separated by tabs. No trailing newline.
    """
    return "\n".join(
        f"{entry.shortcut or '-'}\t{entry.name}\t{entry.command}" for entry in catalog
    )


def to_raw(text: str) -> str:
    """Convert line endings for a terminal in raw mode, which does not translate LF to CRLF."""
    return text.replace("\r\n", "\n").replace("\n", "\r\n")


def _style(theme: Theme, key: str) -> str:
    return THEME_STYLES[theme].get(key, "")


def _console(theme: Theme, width: int) -> Console:
    no_color = theme is Theme.NO_COLOR
    return Console(
        file=StringIO(),
        width=width,
        force_terminal=not no_color,
        no_color=no_color,
        color_system=None if no_color else "standard",
        highlight=False,
        emoji=False,
    )


def _capture(console: Console) -> str:
    output = console.file.getvalue()  # type: ignore[attr-defined]
    return output.rstrip("\n")


def _window(count: int, cursor: int, rows: int) -> range:
    """Indexes of the entries that fit in ``rows`` lines, keeping the cursor visible."""
    rows = max(1, rows)
    if count <= rows:
        return range(count)
    start = min(max(0, cursor - rows // 2), count - rows)
    return range(start, start + rows)


def _entry_label(entry: ScriptEntry, theme: Theme, show_emoji: bool) -> Text:
    label = Text()
    key = entry.shortcut or " "
    label.append(f"[{key}] ", style=_style(theme, "accent"))
    if show_emoji:
        label.append(f"{CATEGORY_ICONS[entry.category]} ")
    label.append(entry.name, style=_style(theme, entry.category))
    return label


def _header(state: SessionState, project: Project) -> Text:
    header = Text()
    header.append("psr", style=_style(state.theme, "accent"))
    header.append(f" {project.project_type.value} ", style="bold")
    header.append(str(project.root), style=_style(state.theme, "muted"))
    return header


def _status_lines(state: SessionState, help_text: str) -> list[Text]:
    lines: list[Text] = []
    if state.mode is Mode.SEARCH:
        search = Text("/ ", style=_style(state.theme, "accent"))
        search.append(state.query)
        lines.append(search)
    if state.message:
        lines.append(Text(state.message, style=_style(state.theme, "error")))
    lines.append(Text(help_text, style=_style(state.theme, "muted")))
    return lines


def render_cli_list(
    state: SessionState,
    project: Project,
    show_emoji: bool = True,
    width: int = 80,
    height: int = 24,
) -> str:
    """
    Render the inline list view.

    Returns:
        str: The frame, without a trailing newline. The driver redraws it in
            place, so its line count must stay below ``height``.
    """
    console = _console(state.theme, width)
    entries = visible_entries(state)
    help_text = SEARCH_HELP if state.mode is Mode.SEARCH else CLI_LIST_HELP
    footer = _status_lines(state, help_text)

    console.print(_header(state, project), overflow="ellipsis", no_wrap=True)
    rows = height - 2 - len(footer)
    for index in _window(len(entries), state.cursor, rows):
        entry = entries[index]
        selected = index == state.cursor
        line = Text("› " if selected else "  ")
        line.append_text(_entry_label(entry, state.theme, show_emoji))
        line.append(f"  {entry.command}", style=_style(state.theme, "muted"))
        if selected:
            line.stylize(_style(state.theme, "highlight"))
        console.print(line, overflow="ellipsis", no_wrap=True)
    if not entries:
        console.print(Text("  no matching scripts", style=_style(state.theme, "muted")))
    for text in footer:
        console.print(text, overflow="ellipsis", no_wrap=True)

    return _capture(console)


def render_tui(
    state: SessionState,
    project: Project,
    show_emoji: bool = True,
    width: int = 80,
    height: int = 24,
) -> str:
    """
    Render the full-screen view: a table of scripts, the details of the
    highlighted one, and the key help.
    """
    console = _console(state.theme, width)
    entries = visible_entries(state)
    help_text = SEARCH_HELP if state.mode is Mode.SEARCH else TUI_HELP
    footer = _status_lines(state, help_text)

    table = Table(
        expand=True,
        show_edge=False,
        header_style=_style(state.theme, "accent"),
        row_styles=None,
    )
    table.add_column("Key", width=3, no_wrap=True)
    table.add_column("Script", ratio=2, no_wrap=True, overflow="ellipsis")
    table.add_column("Category", width=8, no_wrap=True)
    table.add_column("Command", ratio=3, no_wrap=True, overflow="ellipsis")

    # Header, table header rule, details panel and footer take the rest.
    rows = height - 9 - len(footer)
    for index in _window(len(entries), state.cursor, rows):
        entry = entries[index]
        name = Text(
            f"{CATEGORY_ICONS[entry.category]} " if show_emoji else "",
        )
        name.append(entry.name, style=_style(state.theme, entry.category))
        table.add_row(
            entry.shortcut or "",
            name,
            entry.category.value,
            entry.command,
            style=_style(state.theme, "highlight") if index == state.cursor else None,
        )

    selected = highlighted_entry(state)
    if selected is None:
        details = Text("No matching scripts", style=_style(state.theme, "muted"))
    else:
        details = Text()
        details.append(selected.name, style="bold")
        if selected.description:
            details.append(f"\n{selected.description}")
        details.append(f"\n$ {selected.command}", style=_style(state.theme, "muted"))

    console.print(_header(state, project), overflow="ellipsis", no_wrap=True)
    console.print(
        Group(
            table,
            Panel(details, title="Details", title_align="left", height=5),
            *footer,
        )
    )
    return _capture(console)


def render_error_splash(state: SessionState, width: int = 80) -> str:
    """Render the message shown after a script fails."""
    console = _console(state.theme, width)
    body = Text()
    body.append(
        f"The script exited with code: {state.last_exit_code}\n",
        style=_style(state.theme, "error"),
    )
    body.append("Press any key to continue...", style=_style(state.theme, "muted"))
    console.print(Panel(body, title="Error", title_align="left", expand=False))
    return _capture(console)
