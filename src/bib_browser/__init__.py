"""Browse BibTeX bibliographies in the terminal."""

from __future__ import annotations

__version__ = "0.4.0"

from bib_browser.models import (
    AreaKind,
    EntryColumn,
    FormerArea,
    PopupKind,
    Record,
    UserConfig,
)
from bib_browser.parsing import (
    BibParseError,
    BibRepository,
    BibWriteError,
    RepositoryError,
    parse_bib_text,
)
from bib_browser.state import BrowserEngine

__all__ = [
    "AreaKind",
    "BibParseError",
    "BibRepository",
    "BibWriteError",
    "BrowserEngine",
    "EntryColumn",
    "FormerArea",
    "PopupKind",
    "Record",
    "RepositoryError",
    "UserConfig",
    "__version__",
    "parse_bib_text",
]
