"""Overlay widget that renders the engine's active popup."""

from __future__ import annotations

from textual.widgets import Static

from bib_browser.help_ui import build_help_lines
from bib_browser.models import (
    AddEntryPopup,
    HelpPopup,
    MessagePopup,
    PopupState,
    SelectionPopup,
)
from bib_browser.query import escape_rich_text
from bib_browser.ui_constants import THEME_COLORS


def _render_form(state: AddEntryPopup) -> list[str]:
    before = escape_rich_text(state.text[: state.cursor])
    at = escape_rich_text(state.text[state.cursor : state.cursor + 1] or " ")
    after = escape_rich_text(state.text[state.cursor + 1 :])
    return [
        f"[bold {THEME_COLORS['accent']}]Add entry[/]",
        "[dim]Paste a DOI or a complete BibTeX entry, ENTER to add, ESC to cancel[/]",
        "",
        f"> {before}[reverse]{at}[/]{after}",
    ]


def _render_selection(state: SelectionPopup) -> list[str]:
    lines = [f"[bold {THEME_COLORS['accent']}]Open entry with[/]", ""]
    for index, choice in enumerate(state.choices):
        label = escape_rich_text(choice.label)
        if index == state.cursor:
            lines.append(f"[reverse] > {label} [/]")
        else:
            lines.append(f"   {label}")
    return lines


def render_popup(state: PopupState) -> tuple[str, str]:
    """Return (markup, css class) for a popup state."""
    if isinstance(state, HelpPopup):
        return "\n".join(build_help_lines()), "help"
    if isinstance(state, MessagePopup):
        css_class = "error" if state.is_error else "confirm"
        title = "Error" if state.is_error else "Info"
        color = THEME_COLORS["pink"] if state.is_error else THEME_COLORS["green"]
        body = escape_rich_text(state.text)
        return f"[bold {color}]{title}[/]\n\n{body}\n\n[dim]Press any key[/]", css_class
    if isinstance(state, SelectionPopup):
        return "\n".join(_render_selection(state)), "selection"
    return "\n".join(_render_form(state)), "form"


class PopupPanel(Static):
    """Floating panel on the overlay layer; hidden when no popup is open."""

    _STATE_CLASSES = ("help", "error", "confirm", "selection", "form")

    def show_state(self, state: PopupState | None) -> None:
        self.remove_class("visible", *self._STATE_CLASSES)
        if state is None:
            self.update("")
            return
        markup, css_class = render_popup(state)
        self.update(markup)
        self.add_class("visible", css_class)


__all__ = ["PopupPanel", "render_popup"]
