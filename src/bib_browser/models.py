"""Data models and constants for the bibliography browser."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Union

# Application identity, single source of truth for platformdirs config paths
CONFIG_APP_NAME = "bib-browser"

# Fallback display values for missing BibTeX fields
EMPTY_AUTHORS = "empty"
EMPTY_TITLE = "no title"
EMPTY_YEAR = "n.d."
EMPTY_ABSTRACT = "no abstract"
EDITOR_SUFFIX = " (ed.)"

# Movement step for ctrl+d / ctrl+u and the info pane page keys
PAGE_STEP = 5

DOI_URL_PREFIX = "https://doi.org/"

# DOI lookup timeout bounds (seconds)
DOI_TIMEOUT_DEFAULT = 15
DOI_TIMEOUT_LIMIT = 120


class AreaKind(Enum):
    """Logical area currently owning keyboard input."""

    RECORDS = "records"
    KEYWORDS = "keywords"
    SEARCH_INPUT = "search_input"
    POPUP = "popup"


class FormerArea(Enum):
    """Area to return to once a transient area (search or popup) closes."""

    RECORDS = "records"
    KEYWORDS = "keywords"
    SEARCH_INPUT = "search_input"

    @classmethod
    def from_area(cls, area: AreaKind) -> FormerArea:
        if area is AreaKind.POPUP:
            raise ValueError("a popup cannot be a former area")
        return cls(area.value)

    def to_area(self) -> AreaKind:
        return AreaKind(self.value)


class EntryColumn(Enum):
    """Sortable columns of the entries table, in display order."""

    AUTHORS = "authors"
    TITLE = "title"
    YEAR = "year"
    PUBTYPE = "pubtype"

    @property
    def label(self) -> str:
        return _COLUMN_LABELS[self]

    def next(self) -> EntryColumn:
        members = list(EntryColumn)
        return members[(members.index(self) + 1) % len(members)]

    def prev(self) -> EntryColumn:
        members = list(EntryColumn)
        return members[(members.index(self) - 1) % len(members)]


_COLUMN_LABELS = {
    EntryColumn.AUTHORS: "Author",
    EntryColumn.TITLE: "Title",
    EntryColumn.YEAR: "Year",
    EntryColumn.PUBTYPE: "Type",
}


class PopupKind(Enum):
    """Kinds of modal overlays the engine can open."""

    HELP = "help"
    MESSAGE_CONFIRM = "message_confirm"
    MESSAGE_ERROR = "message_error"
    SELECTION = "selection"
    ADD_ENTRY_FORM = "add_entry_form"


@dataclass(frozen=True, slots=True)
class Record:
    """One bibliographic entry. Identity is the citation key."""

    citekey: str
    authors: str = field(default=EMPTY_AUTHORS, compare=False)
    title: str = field(default=EMPTY_TITLE, compare=False)
    year: str = field(default=EMPTY_YEAR, compare=False)
    pubtype: str = field(default="misc", compare=False)
    keywords: str = field(default="", compare=False)
    abstract: str | None = field(default=None, compare=False)
    weblink: str | None = field(default=None, compare=False)
    filepath: Path | None = field(default=None, compare=False)
    subtitle: str | None = field(default=None, compare=False)
    source: Path | None = field(default=None, compare=False)

    @property
    def search_text(self) -> str:
        """Composite string used for fuzzy matching."""
        return " ".join(
            [self.authors, self.title, self.year, self.pubtype, self.keywords, self.citekey]
        )

    @property
    def short_authors(self) -> str:
        """First author, with "et al." when the entry has more than one."""
        names = self.authors
        suffix = ""
        if names.endswith(EDITOR_SUFFIX):
            names = names[: -len(EDITOR_SUFFIX)]
            suffix = EDITOR_SUFFIX
        parts = [part for part in names.split(", ") if part]
        if len(parts) > 1:
            return f"{parts[0]} et al.{suffix}"
        return self.authors

    def column_value(self, column: EntryColumn) -> str:
        if column is EntryColumn.AUTHORS:
            return self.authors
        if column is EntryColumn.TITLE:
            return self.title
        if column is EntryColumn.YEAR:
            return self.year
        return self.pubtype


# ============================================================================
# Popup state variants
# ============================================================================


@dataclass(frozen=True, slots=True)
class LinkChoice:
    """Selection popup item that opens a DOI or URL."""

    url: str

    @property
    def label(self) -> str:
        return f"Weblink: {self.url}"


@dataclass(frozen=True, slots=True)
class FileChoice:
    """Selection popup item that opens a local file."""

    path: Path

    @property
    def label(self) -> str:
        return f"File: {self.path}"


PopupChoice = Union[LinkChoice, FileChoice]


@dataclass(slots=True)
class HelpPopup:
    kind: PopupKind = field(default=PopupKind.HELP, init=False)


@dataclass(slots=True)
class MessagePopup:
    """Confirmation or error message; closes on the next key press."""

    text: str
    is_error: bool = False

    @property
    def kind(self) -> PopupKind:
        return PopupKind.MESSAGE_ERROR if self.is_error else PopupKind.MESSAGE_CONFIRM


@dataclass(slots=True)
class SelectionPopup:
    """Ordered list of resource choices with a cursor."""

    choices: list[PopupChoice]
    cursor: int = 0
    kind: PopupKind = field(default=PopupKind.SELECTION, init=False)


@dataclass(slots=True)
class AddEntryPopup:
    """Single-line text buffer with an insertion cursor."""

    text: str = ""
    cursor: int = 0
    kind: PopupKind = field(default=PopupKind.ADD_ENTRY_FORM, init=False)


PopupState = Union[HelpPopup, MessagePopup, SelectionPopup, AddEntryPopup]


# ============================================================================
# Filter and selection state
# ============================================================================


@dataclass(slots=True)
class FilterState:
    """Free-text search in progress.

    The snapshot lists are the visible collections at the moment search mode
    was entered; every pattern is matched against them, never against the
    live list.
    """

    origin: FormerArea
    chained: bool
    snapshot_records: list[Record]
    snapshot_keywords: list[str]
    snapshot_citekey: str | None = None
    snapshot_keyword_index: int | None = None
    pattern: str = ""


@dataclass(slots=True)
class ListSelection:
    """Selected index plus scrollbar state for one list."""

    selected: int | None = None
    scroll_position: int = 0
    content_length: int = 0


@dataclass(slots=True)
class UserConfig:
    """Preferences read from config.json. Nothing here is written back."""

    bibfiles: list[str] = field(default_factory=list)
    editor: str = ""
    file_opener: str = ""
    link_opener: str = ""
    doi_timeout_seconds: int = DOI_TIMEOUT_DEFAULT


__all__ = [
    "CONFIG_APP_NAME",
    "DOI_TIMEOUT_DEFAULT",
    "DOI_TIMEOUT_LIMIT",
    "DOI_URL_PREFIX",
    "EDITOR_SUFFIX",
    "EMPTY_ABSTRACT",
    "EMPTY_AUTHORS",
    "EMPTY_TITLE",
    "EMPTY_YEAR",
    "PAGE_STEP",
    "AddEntryPopup",
    "AreaKind",
    "EntryColumn",
    "FileChoice",
    "FilterState",
    "FormerArea",
    "HelpPopup",
    "LinkChoice",
    "ListSelection",
    "MessagePopup",
    "PopupChoice",
    "PopupKind",
    "PopupState",
    "Record",
    "SelectionPopup",
    "UserConfig",
]
