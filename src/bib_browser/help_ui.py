"""Help popup sections describing the key map."""

from __future__ import annotations

from bib_browser.ui_constants import THEME_COLORS

HELP_SECTIONS: list[tuple[str, list[tuple[str, str]]]] = [
    (
        "Navigation",
        [
            ("j,k|↓,↑", "Select next/previous item"),
            ("Ctrl+d,Ctrl+u", "Move five items down/up"),
            ("h,l|←,→", "Select next/previous column (Entry table)"),
            ("g|Home", "Go to first item"),
            ("G|End", "Go to last item"),
            ("PgDn,PgUp|Alt+j,k", "Scroll entry info down/up"),
            ("TAB", "Toggle areas (Entries, Keywords)"),
        ],
    ),
    (
        "Search & Filter",
        [
            ("s", "Sort entries by selected column (toggles reversed)"),
            ("/|Ctrl+f", "Enter search mode"),
            ("ENTER", "Confirm search/filter by selected keyword"),
            ("ESC", "Reset all lists/abort search"),
        ],
    ),
    (
        "Actions",
        [
            ("y", "Yank/copy citekey of selected entry to clipboard"),
            ("e", "Open editor at selected entry"),
            ("o", "Open DOI/URL or file of selected entry"),
            ("a", "Add entry from DOI or BibTeX"),
            ("?", "Show this help"),
            ("q|Ctrl+c", "Quit"),
        ],
    ),
]


def build_help_lines(sections: list[tuple[str, list[tuple[str, str]]]] | None = None) -> list[str]:
    """Render help sections as Rich markup lines with aligned key columns."""
    sections = HELP_SECTIONS if sections is None else sections
    width = max((len(keys) for _, entries in sections for keys, _ in entries), default=0)
    lines: list[str] = []
    for title, entries in sections:
        if lines:
            lines.append("")
        lines.append(f"[bold]{title}[/]")
        for keys, description in entries:
            lines.append(f"  [bold {THEME_COLORS['accent']}]{keys.ljust(width)}[/]  {description}")
    return lines


__all__ = ["HELP_SECTIONS", "build_help_lines"]
