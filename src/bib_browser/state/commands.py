"""Commands accepted by the browser engine, decoupled from raw keys."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from bib_browser.models import EntryColumn, PopupKind


@dataclass(frozen=True, slots=True)
class MoveNext:
    count: int = 1


@dataclass(frozen=True, slots=True)
class MovePrev:
    count: int = 1


@dataclass(frozen=True, slots=True)
class MoveColNext:
    pass


@dataclass(frozen=True, slots=True)
class MoveColPrev:
    pass


@dataclass(frozen=True, slots=True)
class GoFirst:
    pass


@dataclass(frozen=True, slots=True)
class GoLast:
    pass


@dataclass(frozen=True, slots=True)
class ScrollDetail:
    delta: int


@dataclass(frozen=True, slots=True)
class ToggleArea:
    pass


@dataclass(frozen=True, slots=True)
class EnterSearch:
    pass


@dataclass(frozen=True, slots=True)
class SearchEdit:
    """Replace the search pattern with ``text``."""

    text: str


@dataclass(frozen=True, slots=True)
class ConfirmSearch:
    pass


@dataclass(frozen=True, slots=True)
class AbortSearch:
    pass


@dataclass(frozen=True, slots=True)
class ApplyKeywordFilter:
    pass


@dataclass(frozen=True, slots=True)
class ResetLists:
    pass


@dataclass(frozen=True, slots=True)
class Sort:
    """Sort by ``column``, or by the selected column when None."""

    column: EntryColumn | None = None


@dataclass(frozen=True, slots=True)
class OpenPopup:
    kind: PopupKind
    message: str = ""


@dataclass(frozen=True, slots=True)
class ConfirmPopup:
    pass


@dataclass(frozen=True, slots=True)
class ClosePopup:
    pass


@dataclass(frozen=True, slots=True)
class FormInsert:
    text: str


@dataclass(frozen=True, slots=True)
class FormBackspace:
    pass


@dataclass(frozen=True, slots=True)
class FormCursor:
    delta: int


@dataclass(frozen=True, slots=True)
class YankCitekey:
    pass


@dataclass(frozen=True, slots=True)
class EditRecord:
    pass


@dataclass(frozen=True, slots=True)
class Unmapped:
    """A key press with no binding in the current area."""

    key: str = ""


@dataclass(frozen=True, slots=True)
class Quit:
    pass


Command = Union[
    MoveNext,
    MovePrev,
    MoveColNext,
    MoveColPrev,
    GoFirst,
    GoLast,
    ScrollDetail,
    ToggleArea,
    EnterSearch,
    SearchEdit,
    ConfirmSearch,
    AbortSearch,
    ApplyKeywordFilter,
    ResetLists,
    Sort,
    OpenPopup,
    ConfirmPopup,
    ClosePopup,
    FormInsert,
    FormBackspace,
    FormCursor,
    YankCitekey,
    EditRecord,
    Unmapped,
    Quit,
]

__all__ = [
    "AbortSearch",
    "ApplyKeywordFilter",
    "ClosePopup",
    "Command",
    "ConfirmPopup",
    "ConfirmSearch",
    "EditRecord",
    "EnterSearch",
    "FormBackspace",
    "FormCursor",
    "FormInsert",
    "GoFirst",
    "GoLast",
    "MoveColNext",
    "MoveColPrev",
    "MoveNext",
    "MovePrev",
    "OpenPopup",
    "Quit",
    "ResetLists",
    "ScrollDetail",
    "SearchEdit",
    "Sort",
    "ToggleArea",
    "Unmapped",
    "YankCitekey",
]
