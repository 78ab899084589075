"""Interactive state engine: areas, filters, sorting, scrolling, popups."""

from bib_browser.state.engine import BrowserEngine, record_choices
from bib_browser.state.filtering import FilterPipeline
from bib_browser.state.popups import PopupStack
from bib_browser.state.scroll import DetailScroll, ScrollSync
from bib_browser.state.sorting import DEFAULT_SORT_COLUMN, SortEngine

__all__ = [
    "DEFAULT_SORT_COLUMN",
    "BrowserEngine",
    "DetailScroll",
    "FilterPipeline",
    "PopupStack",
    "ScrollSync",
    "SortEngine",
    "record_choices",
]
