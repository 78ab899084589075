"""Translate decoded key presses into engine commands, per area."""

from __future__ import annotations

from bib_browser.models import PAGE_STEP, AreaKind, PopupKind
from bib_browser.state.commands import (
    AbortSearch,
    ApplyKeywordFilter,
    ClosePopup,
    Command,
    ConfirmPopup,
    ConfirmSearch,
    EditRecord,
    EnterSearch,
    FormBackspace,
    FormCursor,
    FormInsert,
    GoFirst,
    GoLast,
    MoveColNext,
    MoveColPrev,
    MoveNext,
    MovePrev,
    OpenPopup,
    Quit,
    ResetLists,
    ScrollDetail,
    SearchEdit,
    Sort,
    ToggleArea,
    Unmapped,
    YankCitekey,
)

# Keys are Textual key names or the literal character typed.
BASE_KEYMAP: dict[str, Command] = {
    "j": MoveNext(),
    "down": MoveNext(),
    "k": MovePrev(),
    "up": MovePrev(),
    "ctrl+d": MoveNext(PAGE_STEP),
    "ctrl+u": MovePrev(PAGE_STEP),
    "g": GoFirst(),
    "home": GoFirst(),
    "G": GoLast(),
    "end": GoLast(),
    "h": MoveColPrev(),
    "left": MoveColPrev(),
    "l": MoveColNext(),
    "right": MoveColNext(),
    "s": Sort(),
    "tab": ToggleArea(),
    "shift+tab": ToggleArea(),
    "/": EnterSearch(),
    "ctrl+f": EnterSearch(),
    "escape": ResetLists(),
    "y": YankCitekey(),
    "e": EditRecord(),
    "o": OpenPopup(PopupKind.SELECTION),
    "a": OpenPopup(PopupKind.ADD_ENTRY_FORM),
    "?": OpenPopup(PopupKind.HELP),
    "pagedown": ScrollDetail(PAGE_STEP),
    "pageup": ScrollDetail(-PAGE_STEP),
    "alt+j": ScrollDetail(PAGE_STEP),
    "alt+k": ScrollDetail(-PAGE_STEP),
    "q": Quit(),
}

KEYWORDS_KEYMAP: dict[str, Command] = {
    **BASE_KEYMAP,
    "enter": ApplyKeywordFilter(),
}

HELP_KEYMAP: dict[str, Command] = {
    "escape": ClosePopup(),
    "q": ClosePopup(),
    "?": ClosePopup(),
    "enter": ConfirmPopup(),
}

SELECTION_KEYMAP: dict[str, Command] = {
    "j": MoveNext(),
    "down": MoveNext(),
    "k": MovePrev(),
    "up": MovePrev(),
    "enter": ConfirmPopup(),
    "escape": ClosePopup(),
    "q": ClosePopup(),
}

FORM_KEYMAP: dict[str, Command] = {
    "enter": ConfirmPopup(),
    "escape": ClosePopup(),
    "backspace": FormBackspace(),
    "left": FormCursor(-1),
    "right": FormCursor(1),
}


def _is_text(character: str | None) -> bool:
    return character is not None and len(character) == 1 and character.isprintable()


def _lookup(table: dict[str, Command], key: str, character: str | None) -> Command | None:
    command = table.get(key)
    if command is None and character is not None:
        command = table.get(character)
    return command


def command_for_key(
    key: str,
    character: str | None,
    *,
    area: AreaKind,
    popup_kind: PopupKind | None = None,
    pattern: str = "",
) -> Command:
    """Map one key press to a command for the area owning input.

    Unbound keys come back as ``Unmapped`` so message popups can still
    treat them as "any key".
    """
    if key == "ctrl+c":
        return Quit()

    if area is AreaKind.SEARCH_INPUT:
        if key == "enter":
            return ConfirmSearch()
        if key == "escape":
            return AbortSearch()
        if key == "backspace":
            return SearchEdit(pattern[:-1])
        if _is_text(character):
            return SearchEdit(pattern + character)
        return Unmapped(key)

    if area is AreaKind.POPUP:
        if popup_kind is PopupKind.ADD_ENTRY_FORM:
            command = FORM_KEYMAP.get(key)
            if command is None and _is_text(character):
                command = FormInsert(character)
        elif popup_kind is PopupKind.SELECTION:
            command = _lookup(SELECTION_KEYMAP, key, character)
        elif popup_kind is PopupKind.HELP:
            command = _lookup(HELP_KEYMAP, key, character)
        else:
            command = None
        return command or Unmapped(key)

    table = KEYWORDS_KEYMAP if area is AreaKind.KEYWORDS else BASE_KEYMAP
    return _lookup(table, key, character) or Unmapped(key)


def flatten_pasted_text(text: str) -> str:
    """Join pasted lines into one line for the single-line input buffers."""
    return " ".join(line.strip() for line in text.splitlines() if line.strip())


def command_for_paste(
    text: str,
    *,
    area: AreaKind,
    popup_kind: PopupKind | None = None,
    pattern: str = "",
) -> Command | None:
    """Map a bracketed paste to a command; None where pasting means nothing."""
    flat = flatten_pasted_text(text)
    if not flat:
        return None
    if area is AreaKind.SEARCH_INPUT:
        return SearchEdit(pattern + flat)
    if area is AreaKind.POPUP and popup_kind is PopupKind.ADD_ENTRY_FORM:
        return FormInsert(flat)
    return None


def command_for_wheel(
    delta: int,
    *,
    area: AreaKind,
    popup_kind: PopupKind | None = None,
    over_details: bool = False,
) -> Command | None:
    """Map one wheel notch (+1 down, -1 up) to a command.

    Over a list the wheel moves the selection of the focused area, over the
    info pane it scrolls the entry text.
    """
    move = MoveNext() if delta > 0 else MovePrev()
    if area is AreaKind.POPUP:
        return move if popup_kind is PopupKind.SELECTION else None
    if area is AreaKind.SEARCH_INPUT:
        return None
    if over_details:
        return ScrollDetail(1 if delta > 0 else -1)
    return move


def commands_for_click(
    target: AreaKind,
    index: int,
    *,
    area: AreaKind,
    selected: int | None,
) -> list[Command]:
    """Commands that focus ``target`` and select row ``index`` in it.

    ``selected`` is the current selection of ``target``. Clicks only count
    while a list area owns input.
    """
    if area not in (AreaKind.RECORDS, AreaKind.KEYWORDS) or index < 0:
        return []
    commands: list[Command] = []
    if area is not target:
        commands.append(ToggleArea())
        # Entering Keywords selects the first row
        selected = 0 if target is AreaKind.KEYWORDS else selected
    delta = index - (selected or 0)
    if delta > 0:
        commands.append(MoveNext(delta))
    elif delta < 0:
        commands.append(MovePrev(-delta))
    return commands


__all__ = [
    "BASE_KEYMAP",
    "KEYWORDS_KEYMAP",
    "command_for_key",
    "command_for_paste",
    "command_for_wheel",
    "commands_for_click",
    "flatten_pasted_text",
]
