"""Single-slot modal overlay state."""

from __future__ import annotations

import logging

from bib_browser.models import (
    AddEntryPopup,
    MessagePopup,
    PopupChoice,
    PopupKind,
    PopupState,
    SelectionPopup,
)

logger = logging.getLogger(__name__)


class PopupStack:
    """Holds at most one open popup and edits its contents.

    The area bookkeeping (which area to return to) lives in the engine;
    this class only owns what the popup itself shows.
    """

    def __init__(self) -> None:
        self.state: PopupState | None = None

    @property
    def is_open(self) -> bool:
        return self.state is not None

    @property
    def kind(self) -> PopupKind | None:
        return self.state.kind if self.state is not None else None

    def open(self, state: PopupState) -> bool:
        """Open ``state`` unless another popup is showing."""
        if self.state is not None:
            logger.debug("Ignoring %s popup, %s already open", state.kind.value, self.state.kind.value)
            return False
        self.state = state
        return True

    def close(self) -> PopupState | None:
        state, self.state = self.state, None
        return state

    def replace(self, state: PopupState) -> None:
        """Swap the open popup for another without touching area bookkeeping."""
        self.state = state

    @property
    def auto_dismisses(self) -> bool:
        """Message popups close on whatever key comes next."""
        return isinstance(self.state, MessagePopup)

    # ========================================================================
    # Selection list
    # ========================================================================

    def move_cursor(self, delta: int) -> None:
        state = self.state
        if not isinstance(state, SelectionPopup) or not state.choices:
            return
        state.cursor = max(0, min(state.cursor + delta, len(state.choices) - 1))

    def selected_choice(self) -> PopupChoice | None:
        state = self.state
        if not isinstance(state, SelectionPopup) or not state.choices:
            return None
        return state.choices[state.cursor]

    # ========================================================================
    # Add-entry form
    # ========================================================================

    def insert(self, text: str) -> None:
        state = self.state
        if not isinstance(state, AddEntryPopup) or not text:
            return
        state.text = state.text[: state.cursor] + text + state.text[state.cursor :]
        state.cursor += len(text)

    def backspace(self) -> None:
        state = self.state
        if not isinstance(state, AddEntryPopup) or state.cursor == 0:
            return
        state.text = state.text[: state.cursor - 1] + state.text[state.cursor :]
        state.cursor -= 1

    def move_form_cursor(self, delta: int) -> None:
        state = self.state
        if not isinstance(state, AddEntryPopup):
            return
        state.cursor = max(0, min(state.cursor + delta, len(state.text)))

    def form_text(self) -> str | None:
        state = self.state
        return state.text if isinstance(state, AddEntryPopup) else None


__all__ = ["PopupStack"]
