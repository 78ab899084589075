"""Textual application rendering the browser engine."""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator, Sequence
from contextlib import contextmanager

from textual.app import App, ComposeResult, SuspendNotSupported
from textual.binding import Binding, BindingType
from textual.containers import Horizontal, Vertical
from textual.events import Key, Paste, Resize
from textual.widgets import Header, Label

from bib_browser.cli import _configure_logging, _validate_interactive_tty
from bib_browser.cli import main as _cli_main
from bib_browser.config import load_config
from bib_browser.keymap import (
    command_for_key,
    command_for_paste,
    command_for_wheel,
    commands_for_click,
)
from bib_browser.models import AreaKind, Record, UserConfig
from bib_browser.services.interfaces import (
    DefaultSideEffectPorts,
    PortError,
    RecordRepository,
    SideEffectPorts,
)
from bib_browser.state.commands import Command
from bib_browser.state.engine import BrowserEngine
from bib_browser.ui_constants import APP_CSS
from bib_browser.widgets import (
    InfoScroll,
    KeywordList,
    ListClicked,
    PopupPanel,
    RecordDetails,
    RecordTable,
    WheelMoved,
    build_list_header,
    build_search_bar,
    build_status_line,
)

logger = logging.getLogger(__name__)

# Keys Textual would otherwise claim for focus changes or quitting
APP_BINDINGS: list[BindingType] = [
    Binding("tab", "dispatch_key('tab')", show=False, priority=True),
    Binding("shift+tab", "dispatch_key('shift+tab')", show=False, priority=True),
    Binding("escape", "dispatch_key('escape')", show=False, priority=True),
    Binding("ctrl+c", "dispatch_key('ctrl+c')", show=False, priority=True),
    Binding("ctrl+q", "dispatch_key('ctrl+c')", show=False, priority=True),
]


class BibBrowser(App):
    """A TUI application to browse BibTeX bibliographies."""

    TITLE = "bib-browser"

    CSS = APP_CSS

    BINDINGS = APP_BINDINGS

    ENABLE_COMMAND_PALETTE = False

    def __init__(
        self,
        records: Sequence[Record],
        config: UserConfig | None = None,
        repository: RecordRepository | None = None,
        ports: SideEffectPorts | None = None,
    ) -> None:
        super().__init__()
        self._config = config or UserConfig()
        if ports is None:
            ports = DefaultSideEffectPorts(self._config, suspend=self._editor_terminal)
        self.engine = BrowserEngine(records, repository=repository, ports=ports)
        self._rendered_generation = -1
        self._rendered_keywords: tuple[str, ...] | None = None

    @contextmanager
    def _editor_terminal(self) -> Iterator[None]:
        """Hand the terminal to a foreground child process."""
        try:
            suspension = self.suspend()
            suspension.__enter__()
        except SuspendNotSupported as e:
            raise PortError("this terminal cannot hand control to an editor") from e
        try:
            yield
        finally:
            suspension.__exit__(None, None, None)
            # Anything may have changed on disk; redraw every pane.
            self._rendered_generation = -1
            self._rendered_keywords = None

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main-container"):
            with Vertical(id="left-pane"):
                yield Label("", id="list-header")
                yield RecordTable(id="record-table")
            with Vertical(id="right-pane"):
                with Vertical(id="keywords-pane"):
                    yield Label(" Keywords", id="keywords-header")
                    yield KeywordList(id="keyword-list")
                with Vertical(id="info-pane"):
                    yield Label(" Entry Info", id="details-header")
                    with InfoScroll(id="details-scroll"):
                        yield RecordDetails(id="record-details")
        yield Label("", id="search-bar")
        yield Label("", id="status-bar")
        yield PopupPanel(id="popup")

    def on_mount(self) -> None:
        self.sub_title = f"{self.engine.total_records} entries"
        self._refresh_ui()

    def on_resize(self, event: Resize) -> None:
        self.call_after_refresh(self._sync_detail_scroll)

    # ========================================================================
    # Input
    # ========================================================================

    def on_key(self, event: Key) -> None:
        event.stop()
        event.prevent_default()
        self._handle_key(event.key, event.character)

    def action_dispatch_key(self, key: str) -> None:
        self._handle_key(key, None)

    def on_paste(self, event: Paste) -> None:
        event.stop()
        engine = self.engine
        command = command_for_paste(
            event.text,
            area=engine.current_area,
            popup_kind=engine.popups.kind,
            pattern=engine.search_pattern,
        )
        if command is not None:
            self._run([command])

    def on_list_clicked(self, message: ListClicked) -> None:
        engine = self.engine
        selection = (
            engine.records_selection
            if message.area is AreaKind.RECORDS
            else engine.keywords_selection
        )
        self._run(
            commands_for_click(
                message.area,
                message.index,
                area=engine.current_area,
                selected=selection.selected,
            )
        )

    def on_wheel_moved(self, message: WheelMoved) -> None:
        engine = self.engine
        command = command_for_wheel(
            message.delta,
            area=engine.current_area,
            popup_kind=engine.popups.kind,
            over_details=message.area is None,
        )
        if command is not None:
            self._run([command])

    def _handle_key(self, key: str, character: str | None) -> None:
        engine = self.engine
        command = command_for_key(
            key,
            character,
            area=engine.current_area,
            popup_kind=engine.popups.kind,
            pattern=engine.search_pattern,
        )
        logger.debug("Key %r -> %s in %s", key, type(command).__name__, engine.current_area.value)
        self._run([command])

    def _run(self, commands: list[Command]) -> None:
        """Dispatch commands in order, then exit or re-render."""
        if not commands:
            return
        engine = self.engine
        for command in commands:
            engine.dispatch(command)
        if not engine.running:
            self.exit()
            return
        self._refresh_ui()

    # ========================================================================
    # Rendering
    # ========================================================================

    def _refresh_ui(self) -> None:
        """Mirror engine state into the widgets."""
        engine = self.engine
        table = self.query_one(RecordTable)
        details = self.query_one(RecordDetails)
        if engine.generation != self._rendered_generation:
            table.show_records(engine.records, engine.sorted_by, engine.sort_reversed)
            details.force_refresh()
            self._rendered_generation = engine.generation
        table.show_cursor_at(engine.records_selection.selected, engine.selected_column)

        keyword_list = self.query_one(KeywordList)
        keywords = engine.keywords
        if keywords != self._rendered_keywords:
            keyword_list.show_keywords(keywords)
            self._rendered_keywords = keywords
        keyword_list.show_selection(engine.keywords_selection.selected)

        if details.show_record(engine.selected_record):
            self.call_after_refresh(self._sync_detail_scroll)
        else:
            self._scroll_details()

        area = engine.current_area
        focus_area = engine.former_area.to_area() if engine.former_area is not None else area
        self.query_one("#left-pane").set_class(focus_area is AreaKind.RECORDS, "active")
        self.query_one("#keywords-pane").set_class(focus_area is AreaKind.KEYWORDS, "active")
        self.query_one("#list-header", Label).update(
            build_list_header(
                len(engine.records),
                engine.total_records,
                engine.records_selection.selected,
                engine.selected_column,
            )
        )
        self.query_one("#search-bar", Label).update(
            build_search_bar(area, engine.search_pattern, engine.search_origin, engine.selected_keywords)
        )
        self.query_one("#status-bar", Label).update(build_status_line(area))
        self.query_one(PopupPanel).show_state(engine.popup)

    def _sync_detail_scroll(self) -> None:
        """Report the info pane's rendered size, then apply the clamped offset."""
        scroll = self.query_one(InfoScroll)
        self.engine.update_detail_geometry(
            scroll.virtual_size.height,
            scroll.scrollable_content_region.height,
        )
        self._scroll_details()

    def _scroll_details(self) -> None:
        self.query_one(InfoScroll).scroll_to(y=self.engine.detail_offset, animate=False)


def main() -> int:
    """Main entry point wrapper for CLI/bootstrap logic."""
    return _cli_main(
        load_config_fn=load_config,
        configure_logging_fn=_configure_logging,
        validate_interactive_tty_fn=_validate_interactive_tty,
        app_factory=BibBrowser,
    )


if __name__ == "__main__":
    sys.exit(main())
