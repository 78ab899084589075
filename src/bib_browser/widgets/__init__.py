"""Widget classes and render helpers for the display surface."""

from bib_browser.widgets.chrome import build_list_header, build_search_bar, build_status_line
from bib_browser.widgets.details import InfoScroll, RecordDetails, build_detail_lines
from bib_browser.widgets.listing import KeywordList, ListClicked, RecordTable, WheelMoved
from bib_browser.widgets.popup import PopupPanel, render_popup

__all__ = [
    "InfoScroll",
    "KeywordList",
    "ListClicked",
    "PopupPanel",
    "RecordDetails",
    "RecordTable",
    "WheelMoved",
    "build_detail_lines",
    "build_list_header",
    "build_search_bar",
    "build_status_line",
    "render_popup",
]
