"""Internal UI constants for the BibBrowser app."""

from __future__ import annotations

# Monokai palette used by Rich markup in rendered text
THEME_COLORS: dict[str, str] = {
    "background": "#272822",
    "panel": "#1e1e1e",
    "panel_alt": "#3e3d32",
    "text": "#f8f8f2",
    "muted": "#75715e",
    "accent": "#66d9ef",
    "accent_alt": "#e6db74",
    "green": "#a6e22e",
    "orange": "#fd971f",
    "pink": "#f92672",
    "purple": "#ae81ff",
    "highlight": "#49483e",
}

SORT_ASCENDING_MARK = "▲"
SORT_DESCENDING_MARK = "▼"
KEYWORD_TRAIL_SEPARATOR = " → "

APP_CSS = """
Screen {
    background: #272822;
    layers: base overlay;
}

Header {
    background: #3e3d32;
    color: #f8f8f2;
}

#main-container {
    height: 1fr;
}

#left-pane {
    width: 3fr;
    min-width: 50;
    height: 100%;
    border: tall #49483e;
    background: #1e1e1e;
}

#left-pane.active {
    border: tall #66d9ef;
}

#right-pane {
    width: 2fr;
    height: 100%;
}

#keywords-pane {
    height: 2fr;
    border: tall #49483e;
    background: #1e1e1e;
}

#keywords-pane.active {
    border: tall #66d9ef;
}

#info-pane {
    height: 3fr;
    border: tall #49483e;
    background: #1e1e1e;
}

#list-header, #keywords-header, #details-header {
    padding: 0 1;
    background: #1e1e1e;
    color: #66d9ef;
    text-style: bold;
}

#details-header {
    color: #e6db74;
}

#record-table {
    height: 1fr;
    scrollbar-gutter: stable;
}

#keyword-list {
    height: 1fr;
    border: none;
    background: #1e1e1e;
}

#keyword-list > .option-list--option-highlighted {
    background: #49483e;
}

#details-scroll {
    height: 1fr;
    padding: 0 1;
}

#search-bar {
    height: 1;
    padding: 0 1;
    background: #3e3d32;
    color: #f8f8f2;
}

#status-bar {
    height: 1;
    padding: 0 1;
    color: #75715e;
}

#popup {
    layer: overlay;
    display: none;
    width: 80%;
    max-width: 100;
    height: auto;
    max-height: 80%;
    margin: 2 4;
    padding: 1 2;
    background: #1e1e1e;
    border: thick #66d9ef;
    offset: 10% 10%;
}

#popup.visible {
    display: block;
}

#popup.error {
    border: thick #f92672;
}

#popup.confirm {
    border: thick #a6e22e;
}
"""

__all__ = [
    "APP_CSS",
    "KEYWORD_TRAIL_SEPARATOR",
    "SORT_ASCENDING_MARK",
    "SORT_DESCENDING_MARK",
    "THEME_COLORS",
]
