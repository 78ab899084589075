"""Area state machine coordinating filters, sorting, scrolling, and popups."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from bib_browser.action_messages import (
    build_actionable_error,
    build_actionable_success,
    build_missing_citekey_notice,
)
from bib_browser.models import (
    AddEntryPopup,
    AreaKind,
    EntryColumn,
    FileChoice,
    FormerArea,
    HelpPopup,
    LinkChoice,
    ListSelection,
    MessagePopup,
    PopupChoice,
    PopupKind,
    PopupState,
    Record,
    SelectionPopup,
)
from bib_browser.parsing import RepositoryError, find_citekey_line
from bib_browser.query import index_of_citekey
from bib_browser.services.interfaces import PortError, RecordRepository, SideEffectPorts
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
    YankCitekey,
)
from bib_browser.state.filtering import FilterPipeline
from bib_browser.state.popups import PopupStack
from bib_browser.state.scroll import DetailScroll, ScrollSync
from bib_browser.state.sorting import SortEngine

logger = logging.getLogger(__name__)

_BASE_AREAS = (AreaKind.RECORDS, AreaKind.KEYWORDS)


def record_choices(record: Record) -> list[PopupChoice]:
    """Resources a record can be opened with, link first."""
    choices: list[PopupChoice] = []
    if record.weblink:
        choices.append(LinkChoice(record.weblink))
    if record.filepath is not None:
        choices.append(FileChoice(record.filepath))
    return choices


class BrowserEngine:
    """Owns what is focused, what is visible, and what an overlay restores.

    The display surface reads the properties below and feeds decoded input
    through ``dispatch``. Each command runs to completion before the next;
    invalid commands for the current area are silently ignored.
    """

    def __init__(
        self,
        records: Sequence[Record],
        *,
        repository: RecordRepository | None = None,
        ports: SideEffectPorts | None = None,
    ) -> None:
        self.repository = repository
        self.ports = ports
        self.pipeline = FilterPipeline(records)
        self.sorter = SortEngine()
        self.popups = PopupStack()
        self.records_selection = ListSelection()
        self.keywords_selection = ListSelection()
        self.detail = DetailScroll()
        self.selected_column = EntryColumn.AUTHORS
        self.current_area = AreaKind.RECORDS
        self.former_area: FormerArea | None = None
        self.running = True
        # Bumped whenever the visible record list is replaced or reordered
        self.generation = 0
        self._select_record(0)
        ScrollSync.select(self.keywords_selection, None, len(self.pipeline.keywords))

    # ========================================================================
    # Read-only views
    # ========================================================================

    @property
    def records(self) -> tuple[Record, ...]:
        return tuple(self.pipeline.records)

    @property
    def keywords(self) -> tuple[str, ...]:
        return tuple(self.pipeline.keywords)

    @property
    def selected_keywords(self) -> tuple[str, ...]:
        return tuple(self.pipeline.selected_keywords)

    @property
    def total_records(self) -> int:
        return len(self.pipeline.all_records)

    @property
    def selected_record(self) -> Record | None:
        index = self.records_selection.selected
        if index is None or index >= len(self.pipeline.records):
            return None
        return self.pipeline.records[index]

    @property
    def selected_keyword(self) -> str | None:
        index = self.keywords_selection.selected
        if index is None or index >= len(self.pipeline.keywords):
            return None
        return self.pipeline.keywords[index]

    @property
    def search_pattern(self) -> str:
        search = self.pipeline.search
        return search.pattern if search is not None else ""

    @property
    def search_origin(self) -> FormerArea | None:
        search = self.pipeline.search
        return search.origin if search is not None else None

    @property
    def popup(self) -> PopupState | None:
        return self.popups.state

    @property
    def sorted_by(self) -> EntryColumn:
        return self.sorter.sorted_by

    @property
    def sort_reversed(self) -> bool:
        return self.sorter.reversed

    @property
    def detail_offset(self) -> int:
        return self.detail.offset

    # ========================================================================
    # Dispatch
    # ========================================================================

    def dispatch(self, command: Command) -> None:
        """Apply one command. The open popup, if any, sees it first."""
        if isinstance(command, Quit):
            self.running = False
            return
        if self.current_area is AreaKind.POPUP:
            self._dispatch_popup(command)
        elif self.current_area is AreaKind.SEARCH_INPUT:
            self._dispatch_search(command)
        else:
            self._dispatch_base(command)

    def _dispatch_popup(self, command: Command) -> None:
        if self.popups.auto_dismisses:
            self.close_popup()
            return
        if isinstance(command, (ClosePopup, AbortSearch)):
            self.close_popup()
        elif isinstance(command, ConfirmPopup):
            self.confirm_popup()
        elif isinstance(command, MoveNext):
            self.popups.move_cursor(command.count)
        elif isinstance(command, MovePrev):
            self.popups.move_cursor(-command.count)
        elif isinstance(command, FormInsert):
            self.popups.insert(command.text)
        elif isinstance(command, FormBackspace):
            self.popups.backspace()
        elif isinstance(command, FormCursor):
            self.popups.move_form_cursor(command.delta)

    def _dispatch_search(self, command: Command) -> None:
        if isinstance(command, SearchEdit):
            self.apply_search_pattern(command.text)
        elif isinstance(command, ConfirmSearch):
            self.confirm_search()
        elif isinstance(command, AbortSearch):
            self.abort_search()

    def _dispatch_base(self, command: Command) -> None:
        if isinstance(command, MoveNext):
            self.move(command.count)
        elif isinstance(command, MovePrev):
            self.move(-command.count)
        elif isinstance(command, GoFirst):
            self.go_first()
        elif isinstance(command, GoLast):
            self.go_last()
        elif isinstance(command, MoveColNext):
            self.move_column(1)
        elif isinstance(command, MoveColPrev):
            self.move_column(-1)
        elif isinstance(command, ScrollDetail):
            self.scroll_detail(command.delta)
        elif isinstance(command, ToggleArea):
            self.toggle_area()
        elif isinstance(command, EnterSearch):
            self.enter_search()
        elif isinstance(command, ApplyKeywordFilter):
            self.apply_keyword_filter()
        elif isinstance(command, ResetLists):
            self.reset_lists()
        elif isinstance(command, Sort):
            self.sort(command.column)
        elif isinstance(command, OpenPopup):
            self.open_popup_kind(command.kind, command.message)
        elif isinstance(command, YankCitekey):
            self.yank_citekey()
        elif isinstance(command, EditRecord):
            self.edit_record()

    # ========================================================================
    # Selection helpers
    # ========================================================================

    def _bump(self) -> None:
        self.generation += 1

    def _select_record(self, index: int | None) -> None:
        """Select a record, resetting the info pane when the record changes."""
        before = self.selected_record
        ScrollSync.select(self.records_selection, index, len(self.pipeline.records))
        after = self.selected_record
        if before is None or after is None or before.citekey != after.citekey:
            self.detail.reset()

    def _relocate_record(self, citekey: str | None) -> None:
        index = index_of_citekey(self.pipeline.records, citekey)
        self._select_record(index if index is not None else 0)

    def _select_keyword(self, index: int | None) -> None:
        ScrollSync.select(self.keywords_selection, index, len(self.pipeline.keywords))

    def move(self, delta: int) -> None:
        if self.current_area is AreaKind.RECORDS:
            before = self.selected_record
            ScrollSync.move(self.records_selection, delta, len(self.pipeline.records))
            if self.selected_record != before:
                self.detail.reset()
        elif self.current_area is AreaKind.KEYWORDS:
            ScrollSync.move(self.keywords_selection, delta, len(self.pipeline.keywords))

    def go_first(self) -> None:
        if self.current_area is AreaKind.RECORDS:
            self._select_record(0)
        elif self.current_area is AreaKind.KEYWORDS:
            self._select_keyword(0)

    def go_last(self) -> None:
        if self.current_area is AreaKind.RECORDS:
            self._select_record(len(self.pipeline.records) - 1)
        elif self.current_area is AreaKind.KEYWORDS:
            self._select_keyword(len(self.pipeline.keywords) - 1)

    def move_column(self, step: int) -> None:
        if self.current_area is not AreaKind.RECORDS:
            return
        column = self.selected_column
        self.selected_column = column.next() if step > 0 else column.prev()

    def scroll_detail(self, delta: int) -> None:
        if self.current_area in _BASE_AREAS:
            self.detail.scroll(delta)

    def update_detail_geometry(self, content_lines: int, viewport_height: int) -> None:
        """Receive the info pane's rendered size from the display surface."""
        self.detail.set_geometry(content_lines, viewport_height)

    # ========================================================================
    # Areas
    # ========================================================================

    def toggle_area(self) -> None:
        if self.current_area is AreaKind.RECORDS:
            selection = self.records_selection
            selection.scroll_position = selection.selected or 0
            self.current_area = AreaKind.KEYWORDS
            ScrollSync.reset(self.keywords_selection, len(self.pipeline.keywords))
        elif self.current_area is AreaKind.KEYWORDS:
            self.current_area = AreaKind.RECORDS
            self._select_keyword(None)
            ScrollSync.sync(self.records_selection, len(self.pipeline.records))
        else:
            return
        logger.debug("Focus moved to %s", self.current_area.value)

    def enter_search(self) -> None:
        if self.current_area not in _BASE_AREAS:
            return
        origin = FormerArea.from_area(self.current_area)
        selected = self.selected_record
        self.pipeline.begin_search(
            origin,
            citekey=selected.citekey if selected is not None else None,
            keyword_index=self.keywords_selection.selected,
        )
        self.former_area = origin
        self.current_area = AreaKind.SEARCH_INPUT

    def apply_search_pattern(self, pattern: str) -> None:
        search = self.pipeline.search
        if self.current_area is not AreaKind.SEARCH_INPUT or search is None:
            return
        self.pipeline.apply_search_pattern(pattern)
        if search.origin is FormerArea.KEYWORDS:
            self._select_keyword(0)
        else:
            self._bump()
            self._select_record(0)
            self._select_keyword(None)

    def confirm_search(self) -> None:
        if self.current_area is not AreaKind.SEARCH_INPUT:
            return
        search = self.pipeline.confirm_search()
        if search is None:
            return
        self._return_to(search.origin)
        if search.origin is FormerArea.KEYWORDS:
            self._select_keyword(0)
        else:
            self._select_record(0)
            self._select_keyword(None)
        logger.debug("Search %r confirmed: %d records", search.pattern, len(self.pipeline.records))

    def abort_search(self) -> None:
        if self.current_area is not AreaKind.SEARCH_INPUT:
            return
        search = self.pipeline.abort_search()
        if search is None:
            return
        self._bump()
        self._return_to(search.origin)
        self._relocate_record(search.snapshot_citekey)
        self._select_keyword(search.snapshot_keyword_index)
        logger.debug("Search aborted (chained=%s)", search.chained)

    def _return_to(self, origin: FormerArea) -> None:
        self.current_area = origin.to_area()
        self.former_area = None

    def apply_keyword_filter(self) -> None:
        if self.current_area is not AreaKind.KEYWORDS:
            return
        keyword = self.selected_keyword
        if keyword is None:
            return
        self.pipeline.apply_keyword_filter(keyword)
        self._bump()
        self.current_area = AreaKind.RECORDS
        self._select_record(0)
        self._select_keyword(None)

    def reset_lists(self) -> None:
        if self.current_area not in _BASE_AREAS:
            return
        pipeline = self.pipeline
        if pipeline.is_pristine and self.sorter.is_default:
            return
        selected = self.selected_record
        pipeline.reset()
        self.sorter.reset()
        self._bump()
        self._relocate_record(selected.citekey if selected is not None else None)
        self._select_keyword(0 if self.current_area is AreaKind.KEYWORDS else None)
        logger.debug("Lists reset to %d records", len(pipeline.records))

    def sort(self, column: EntryColumn | None = None) -> None:
        if self.current_area is not AreaKind.RECORDS:
            return
        selected = self.selected_record
        ordered = self.sorter.sort(self.pipeline.records, column or self.selected_column, toggle=True)
        self.pipeline.reorder(ordered)
        self._bump()
        self._relocate_record(selected.citekey if selected is not None else None)

    # ========================================================================
    # Popups
    # ========================================================================

    def open_popup(self, state: PopupState) -> bool:
        """Show ``state`` over the current area; ignored if a popup is open."""
        if self.current_area is AreaKind.POPUP or not self.popups.open(state):
            return False
        self.former_area = FormerArea.from_area(self.current_area)
        self.current_area = AreaKind.POPUP
        logger.debug("Opened %s popup over %s", state.kind.value, self.former_area.value)
        return True

    def open_popup_kind(self, kind: PopupKind, message: str = "") -> bool:
        if kind is PopupKind.HELP:
            return self.open_popup(HelpPopup())
        if kind is PopupKind.MESSAGE_CONFIRM:
            return self.open_popup(MessagePopup(message))
        if kind is PopupKind.MESSAGE_ERROR:
            return self.open_popup(MessagePopup(message, is_error=True))
        if kind is PopupKind.ADD_ENTRY_FORM:
            return self.open_popup(AddEntryPopup())
        record = self.selected_record
        if record is None:
            return False
        choices = record_choices(record)
        if not choices:
            return self._show_error(
                build_actionable_error(
                    "open the entry",
                    why=f"{record.citekey} has no DOI, URL, or file",
                    next_step="add a doi, url, or file field with e",
                )
            )
        return self.open_popup(SelectionPopup(choices))

    def close_popup(self) -> None:
        if self.current_area is not AreaKind.POPUP:
            return
        self.popups.close()
        former, self.former_area = self.former_area, None
        search = self.pipeline.search
        if former is FormerArea.SEARCH_INPUT and search is not None:
            self.current_area = AreaKind.SEARCH_INPUT
            self.former_area = search.origin
        elif former is not None and former is not FormerArea.SEARCH_INPUT:
            self.current_area = former.to_area()
        else:
            self.current_area = AreaKind.RECORDS

    def confirm_popup(self) -> None:
        state = self.popups.state
        if self.current_area is not AreaKind.POPUP or state is None:
            return
        if isinstance(state, SelectionPopup):
            self._confirm_selection()
        elif isinstance(state, AddEntryPopup):
            self._confirm_add_entry(state.text)
        else:
            self.close_popup()

    def _show_error(self, text: str) -> bool:
        """Show an error message, replacing any popup that is already open."""
        if self.current_area is AreaKind.POPUP:
            self.popups.replace(MessagePopup(text, is_error=True))
            return True
        return self.open_popup(MessagePopup(text, is_error=True))

    def _show_message(self, text: str) -> bool:
        if self.current_area is AreaKind.POPUP:
            self.popups.replace(MessagePopup(text))
            return True
        return self.open_popup(MessagePopup(text))

    def _confirm_selection(self) -> None:
        choice = self.popups.selected_choice()
        if choice is None:
            self.close_popup()
            return
        if self.ports is None:
            self._show_error(build_actionable_error("open the entry", next_step="restart the browser"))
            return
        try:
            if isinstance(choice, LinkChoice):
                self.ports.open_link(choice.url)
            else:
                self.ports.open_file(choice.path)
        except PortError as e:
            logger.warning("Opening %s failed: %s", choice.label, e)
            what = "open the link" if isinstance(choice, LinkChoice) else "open the file"
            self._show_error(
                build_actionable_error(
                    what,
                    why=str(e),
                    next_step="set link_opener or file_opener in config.json",
                )
            )
            return
        self.close_popup()

    def _confirm_add_entry(self, text: str) -> None:
        if self.repository is None:
            self._show_error("Failed to add new entry.\nWhy: no bibliography file is attached.")
            return
        try:
            citekey = self.repository.append(text)
        except RepositoryError as e:
            logger.warning("Adding entry failed: %s", e)
            self._show_error(f"Failed to add new entry.\nWhy: {e}")
            return
        self.close_popup()
        if self.recompute_after_edit(select_citekey=citekey):
            self._show_message(build_actionable_success(f"New entry added: {citekey}"))

    # ========================================================================
    # External actions
    # ========================================================================

    def yank_citekey(self) -> None:
        record = self.selected_record
        if record is None or self.current_area not in _BASE_AREAS:
            return
        if self.ports is None:
            return
        try:
            self.ports.copy_to_clipboard(record.citekey)
        except PortError as e:
            self._show_error(
                build_actionable_error(
                    "copy the citekey",
                    why=str(e),
                    next_step="install a clipboard tool such as xclip",
                )
            )
            return
        self._show_message(f"Yanked citekey to clipboard: {record.citekey}")

    def edit_record(self) -> None:
        """Open the selected record's file in the editor, then reload."""
        record = self.selected_record
        if record is None or self.current_area not in _BASE_AREAS:
            return
        if record.source is None or self.repository is None or self.ports is None:
            return
        try:
            text = self.repository.read_text(record.source)
        except RepositoryError as e:
            self._show_error(build_actionable_error("open the editor", why=str(e), next_step="check the file"))
            return
        line = find_citekey_line(text, record.citekey)
        notice = None
        if line is None:
            line = 1
            notice = build_missing_citekey_notice(record.citekey, str(record.source))
        try:
            self.ports.launch_editor(record.source, line)
        except PortError as e:
            logger.warning("Editor failed: %s", e)
            self._show_error(
                build_actionable_error(
                    "run the editor",
                    why=str(e),
                    next_step="set editor in config.json or $EDITOR",
                )
            )
            return
        if self.recompute_after_edit(select_citekey=record.citekey) and notice:
            self._show_message(notice)

    def recompute_after_edit(self, select_citekey: str | None = None) -> bool:
        """Reload every record and restart derivation from the full set.

        Keyword trails and searches are dropped. The record with
        ``select_citekey`` is reselected when it still exists.
        """
        if self.repository is None:
            return False
        try:
            records = self.repository.load()
        except RepositoryError as e:
            logger.warning("Reload after edit failed: %s", e)
            self._show_error(
                build_actionable_error(
                    "reload the bibliography",
                    why=str(e),
                    next_step="fix the file with e; the previous entries stay visible",
                )
            )
            return False
        search = self.pipeline.search
        if self.current_area is AreaKind.SEARCH_INPUT and search is not None:
            self._return_to(search.origin)
        self.pipeline.replace_source(records)
        self.sorter.reset()
        self._bump()
        self._relocate_record(select_citekey)
        self._select_keyword(0 if self.current_area is AreaKind.KEYWORDS else None)
        logger.debug("Reloaded %d records", len(records))
        return True


__all__ = ["BrowserEngine", "record_choices"]
