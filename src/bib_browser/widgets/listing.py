"""Entries table and keyword list widgets."""

from __future__ import annotations

from collections.abc import Sequence

from rich.text import Text
from textual import events
from textual.message import Message
from textual.widgets import DataTable, OptionList

from bib_browser.models import AreaKind, EntryColumn, Record
from bib_browser.ui_constants import SORT_ASCENDING_MARK, SORT_DESCENDING_MARK

TITLE_MAX_LEN = 120  # Longer titles are cut in the table, shown in full in the info pane

_COLUMN_WIDTHS: dict[EntryColumn, int | None] = {
    EntryColumn.AUTHORS: 24,
    EntryColumn.TITLE: None,
    EntryColumn.YEAR: 6,
    EntryColumn.PUBTYPE: 14,
}


def truncate_text(text: str, max_len: int, suffix: str = "...") -> str:
    """Truncate text to max_len characters, adding suffix if truncated."""
    if len(text) <= max_len:
        return text
    return text[: max_len - len(suffix)] + suffix


def column_header(column: EntryColumn, sorted_by: EntryColumn, reversed_: bool) -> str:
    """Column label with a direction mark on the sorted column."""
    if column is not sorted_by:
        return column.label
    mark = SORT_DESCENDING_MARK if reversed_ else SORT_ASCENDING_MARK
    return f"{column.label} {mark}"


def record_row(record: Record) -> tuple[Text, Text, Text, Text]:
    """Table cells for one record; plain Text so braces and brackets survive."""
    return (
        Text(record.short_authors),
        Text(truncate_text(record.title, TITLE_MAX_LEN)),
        Text(record.year),
        Text(record.pubtype),
    )


class ListClicked(Message):
    """A row of an engine-driven list was clicked."""

    def __init__(self, area: AreaKind, index: int) -> None:
        super().__init__()
        self.area = area
        self.index = index


class WheelMoved(Message):
    """One mouse-wheel notch over a pane: +1 down, -1 up.

    ``area`` is the list under the pointer, or None for the info pane.
    """

    def __init__(self, area: AreaKind | None, delta: int) -> None:
        super().__init__()
        self.area = area
        self.delta = delta


class EngineDrivenMixin:
    """Turns clicks and wheel turns into messages instead of moving locally.

    The widget never changes its own cursor or scroll offset; the app
    translates the messages into engine commands and re-renders.
    """

    engine_area: AreaKind | None = None
    click_meta_key = ""

    def _on_click(self, event: events.Click) -> None:
        event.prevent_default()
        event.stop()
        if self.engine_area is None or not self.click_meta_key:
            return
        index = event.style.meta.get(self.click_meta_key)
        if isinstance(index, int) and index >= 0:
            self.post_message(ListClicked(self.engine_area, index))

    def _on_mouse_scroll_down(self, event: events.MouseScrollDown) -> None:
        event.prevent_default()
        event.stop()
        self.post_message(WheelMoved(self.engine_area, 1))

    def _on_mouse_scroll_up(self, event: events.MouseScrollUp) -> None:
        event.prevent_default()
        event.stop()
        self.post_message(WheelMoved(self.engine_area, -1))


class RecordTable(EngineDrivenMixin, DataTable, can_focus=False):
    """Entries table. The engine owns the cursor; this only mirrors it."""

    engine_area = AreaKind.RECORDS
    click_meta_key = "row"

    def __init__(self, **kwargs) -> None:
        super().__init__(cursor_type="cell", zebra_stripes=True, **kwargs)

    def show_records(
        self,
        records: Sequence[Record],
        sorted_by: EntryColumn,
        reversed_: bool,
    ) -> None:
        self.clear(columns=True)
        for column in EntryColumn:
            self.add_column(
                column_header(column, sorted_by, reversed_),
                key=column.value,
                width=_COLUMN_WIDTHS[column],
            )
        for record in records:
            self.add_row(*record_row(record), key=record.citekey)

    def show_cursor_at(self, row: int | None, column: EntryColumn) -> None:
        if row is None or row >= self.row_count:
            return
        self.move_cursor(row=row, column=list(EntryColumn).index(column), animate=False)


class KeywordList(EngineDrivenMixin, OptionList, can_focus=False):
    """Keyword list mirroring the engine's keyword selection."""

    engine_area = AreaKind.KEYWORDS
    click_meta_key = "option"

    def show_keywords(self, keywords: Sequence[str]) -> None:
        self.clear_options()
        self.add_options([Text(keyword) for keyword in keywords])

    def show_selection(self, index: int | None) -> None:
        if index is None or index >= self.option_count:
            self.highlighted = None
        else:
            self.highlighted = index


__all__ = [
    "TITLE_MAX_LEN",
    "EngineDrivenMixin",
    "KeywordList",
    "ListClicked",
    "RecordTable",
    "WheelMoved",
    "column_header",
    "record_row",
    "truncate_text",
]
