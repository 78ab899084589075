"""Header, search bar, and footer text for the main screen."""

from __future__ import annotations

from collections.abc import Sequence

from bib_browser.models import AreaKind, EntryColumn, FormerArea
from bib_browser.query import escape_rich_text
from bib_browser.ui_constants import KEYWORD_TRAIL_SEPARATOR, THEME_COLORS

_AREA_HINTS: dict[AreaKind, list[tuple[str, str]]] = {
    AreaKind.RECORDS: [
        ("j/k", "move"),
        ("h/l", "column"),
        ("s", "sort"),
        ("/", "search"),
        ("TAB", "keywords"),
        ("o", "open"),
        ("e", "edit"),
        ("?", "help"),
    ],
    AreaKind.KEYWORDS: [
        ("j/k", "move"),
        ("ENTER", "filter"),
        ("/", "search"),
        ("TAB", "entries"),
        ("ESC", "reset"),
        ("?", "help"),
    ],
    AreaKind.SEARCH_INPUT: [("ENTER", "confirm"), ("ESC", "abort")],
    AreaKind.POPUP: [("ESC", "close")],
}


def build_list_header(
    shown: int,
    total: int,
    selected: int | None,
    selected_column: EntryColumn,
) -> str:
    """Entries pane title with position, counts, and the active column."""
    position = f"{selected + 1}/{shown}" if selected is not None else f"0/{shown}"
    header = f" Entries {position} (of {total})  [dim]column:[/] {selected_column.label}"
    if shown == 0:
        header += f"  [{THEME_COLORS['pink']}]no entries[/]"
    return header


def build_search_bar(
    area: AreaKind,
    pattern: str,
    origin: FormerArea | None,
    keyword_trail: Sequence[str],
) -> str:
    """Search prompt while typing, else the active keyword trail."""
    accent = THEME_COLORS["accent"]
    if area is AreaKind.SEARCH_INPUT:
        scope = "keywords" if origin is FormerArea.KEYWORDS else "entries"
        return f"[bold {accent}]Search {scope}:[/] {escape_rich_text(pattern)}[reverse] [/]"
    if keyword_trail:
        trail = KEYWORD_TRAIL_SEPARATOR.join(escape_rich_text(k) for k in keyword_trail)
        return f"[bold {THEME_COLORS['green']}]Filtered by:[/] {trail}"
    return ""


def build_status_line(area: AreaKind) -> str:
    """Footer with the current area badge and its key hints."""
    accent = THEME_COLORS["accent"]
    muted = THEME_COLORS["muted"]
    badge = area.value.replace("_", " ").upper()
    hints = "  ".join(
        f"[bold {accent}]{escape_rich_text(key)}[/] [{muted}]{label}[/]"
        for key, label in _AREA_HINTS[area]
    )
    return f"[reverse] {badge} [/]  {hints}"


__all__ = ["build_list_header", "build_search_bar", "build_status_line"]
