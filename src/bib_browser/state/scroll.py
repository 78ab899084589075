"""Selection, scrollbar, and info-pane offset bookkeeping."""

from __future__ import annotations

from dataclasses import dataclass

from bib_browser.models import ListSelection


class ScrollSync:
    """Keeps a list selection consistent with its collection length.

    Every method leaves ``content_length`` equal to the list length, the
    selected index inside the list (or None when empty), and the scrollbar
    thumb on the selection.
    """

    @staticmethod
    def sync(selection: ListSelection, length: int) -> None:
        selection.content_length = length
        if length == 0:
            selection.selected = None
            selection.scroll_position = 0
            return
        if selection.selected is not None:
            selection.selected = min(selection.selected, length - 1)
            selection.scroll_position = selection.selected
        else:
            selection.scroll_position = min(selection.scroll_position, length - 1)

    @staticmethod
    def select(selection: ListSelection, index: int | None, length: int) -> None:
        """Select ``index`` clamped into range; None deselects."""
        selection.content_length = length
        if index is None or length == 0:
            selection.selected = None
            selection.scroll_position = 0
            return
        selection.selected = max(0, min(index, length - 1))
        selection.scroll_position = selection.selected

    @classmethod
    def move(cls, selection: ListSelection, delta: int, length: int) -> None:
        """Move the selection by ``delta`` with saturation at both ends."""
        if length == 0:
            cls.select(selection, None, length)
            return
        current = selection.selected if selection.selected is not None else 0
        cls.select(selection, current + delta, length)

    @classmethod
    def reset(cls, selection: ListSelection, length: int, *, focused: bool = True) -> None:
        """Put the thumb back at the top, selecting the first item when focused."""
        selection.scroll_position = 0
        cls.select(selection, 0 if focused else None, length)


@dataclass(slots=True)
class DetailScroll:
    """Vertical offset of the entry-info pane."""

    offset: int = 0
    content_lines: int = 0
    viewport_height: int = 0

    @property
    def max_offset(self) -> int:
        return max(0, self.content_lines - self.viewport_height)

    def scroll(self, delta: int) -> None:
        self.offset = max(0, min(self.offset + delta, self.max_offset))

    def set_geometry(self, content_lines: int, viewport_height: int) -> None:
        """Record the rendered size and pull the offset back into range."""
        self.content_lines = max(0, content_lines)
        self.viewport_height = max(0, viewport_height)
        self.offset = min(self.offset, self.max_offset)

    def reset(self) -> None:
        self.offset = 0


__all__ = ["DetailScroll", "ScrollSync"]
