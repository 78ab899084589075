"""Entry-info pane rendering for the selected record."""

from __future__ import annotations

from textual.containers import VerticalScroll
from textual.widgets import Static

from bib_browser.models import EMPTY_ABSTRACT, Record
from bib_browser.query import escape_rich_text
from bib_browser.ui_constants import THEME_COLORS
from bib_browser.widgets.listing import EngineDrivenMixin


def _field_line(label: str, value: str, color: str) -> str:
    return f"[bold {color}]{label}:[/] {escape_rich_text(value)}"


def build_detail_lines(record: Record | None) -> list[str]:
    """Rich markup lines describing ``record`` for the info pane."""
    if record is None:
        return [f"[{THEME_COLORS['muted']}]No entry selected[/]"]

    accent = THEME_COLORS["accent"]
    lines = [
        _field_line("Authors", record.authors, accent),
        _field_line("Title", record.title, accent),
    ]
    if record.subtitle:
        lines.append(_field_line("Subtitle", record.subtitle, accent))
    lines.extend(
        [
            _field_line("Year", record.year, accent),
            _field_line("Type", record.pubtype, accent),
            _field_line("Keywords", record.keywords or "-", THEME_COLORS["green"]),
            _field_line("Citekey", record.citekey, THEME_COLORS["orange"]),
        ]
    )
    if record.weblink:
        lines.append(_field_line("DOI/URL", record.weblink, THEME_COLORS["purple"]))
    if record.filepath is not None:
        lines.append(_field_line("File", str(record.filepath), THEME_COLORS["purple"]))
    lines.append("")
    if record.abstract:
        lines.append(escape_rich_text(record.abstract))
    else:
        lines.append(f"[dim italic]{EMPTY_ABSTRACT}[/]")
    return lines


class RecordDetails(Static):
    """Static body of the info pane; re-rendered only when the record changes."""

    def __init__(self, **kwargs) -> None:
        super().__init__("", **kwargs)
        self._citekey: str | None = None
        self._shown = False

    def show_record(self, record: Record | None) -> bool:
        """Render ``record``. Returns False when it was already showing."""
        citekey = record.citekey if record is not None else None
        if self._shown and citekey == self._citekey:
            return False
        self._citekey = citekey
        self._shown = True
        self.update("\n".join(build_detail_lines(record)))
        return True

    def force_refresh(self) -> None:
        """Forget the rendered record so the next show_record re-renders."""
        self._shown = False


class InfoScroll(EngineDrivenMixin, VerticalScroll, can_focus=False):
    """Scroll container whose offset is driven by the engine.

    Wheel turns are reported with no list area so they scroll the entry
    text through the engine.
    """


__all__ = ["InfoScroll", "RecordDetails", "build_detail_lines"]
