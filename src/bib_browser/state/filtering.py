"""Keyword and free-text narrowing of the visible record set."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from bib_browser.models import FilterState, FormerArea, Record
from bib_browser.query import (
    collect_keywords,
    filter_records_by_keyword,
    search_keywords,
    search_records,
    sort_records,
)
from bib_browser.state.sorting import DEFAULT_SORT_COLUMN

logger = logging.getLogger(__name__)


class FilterPipeline:
    """Derives the visible records and keywords from the full record set.

    Keyword filters narrow sequentially and are remembered in
    ``selected_keywords``. A free-text search works on a snapshot of the
    visible lists taken when it starts, so shortening the pattern brings
    back records without an undo stack.
    """

    def __init__(self, records: Sequence[Record]) -> None:
        self._all: list[Record] = []
        self._all_keywords: list[str] = []
        self.records: list[Record] = []
        self.keywords: list[str] = []
        self.selected_keywords: list[str] = []
        self.search: FilterState | None = None
        self._search_narrowed = False
        self.replace_source(records)

    # ========================================================================
    # Full set
    # ========================================================================

    @property
    def all_records(self) -> tuple[Record, ...]:
        return tuple(self._all)

    def replace_source(self, records: Sequence[Record]) -> None:
        """Adopt a freshly loaded record set and drop every filter."""
        self._all = sort_records(records, DEFAULT_SORT_COLUMN)
        self._all_keywords = collect_keywords(self._all)
        self.reset()

    def reset(self) -> None:
        self.records = list(self._all)
        self.keywords = list(self._all_keywords)
        self.selected_keywords = []
        self.search = None
        self._search_narrowed = False

    @property
    def is_pristine(self) -> bool:
        """True when the visible lists are the full set in default order."""
        return (
            self.search is None
            and not self.selected_keywords
            and self.records == self._all
            and self.keywords == self._all_keywords
        )

    @property
    def is_filtered(self) -> bool:
        """True when the visible lists are narrower than the full set."""
        return bool(self.selected_keywords) or self._search_narrowed

    def reorder(self, records: list[Record]) -> None:
        """Replace the visible records with a permutation of themselves."""
        self.records = records

    # ========================================================================
    # Keyword filter
    # ========================================================================

    def apply_keyword_filter(self, keyword: str) -> None:
        before = len(self.records)
        self.records = filter_records_by_keyword(self.records, keyword)
        self.selected_keywords.append(keyword)
        self.keywords = collect_keywords(self.records)
        logger.debug(
            "Keyword filter %r: %d -> %d records (trail=%s)",
            keyword,
            before,
            len(self.records),
            self.selected_keywords,
        )

    # ========================================================================
    # Free-text search
    # ========================================================================

    def begin_search(
        self,
        origin: FormerArea,
        *,
        citekey: str | None = None,
        keyword_index: int | None = None,
    ) -> FilterState:
        self.search = FilterState(
            origin=origin,
            chained=self.is_filtered,
            snapshot_records=list(self.records),
            snapshot_keywords=list(self.keywords),
            snapshot_citekey=citekey,
            snapshot_keyword_index=keyword_index,
        )
        logger.debug("Search started from %s (chained=%s)", origin.value, self.search.chained)
        return self.search

    def apply_search_pattern(self, pattern: str) -> None:
        """Re-derive the visible lists for ``pattern`` from the snapshot."""
        search = self.search
        if search is None:
            return
        search.pattern = pattern
        if search.origin is FormerArea.KEYWORDS:
            self.keywords = search_keywords(pattern, search.snapshot_keywords)
        elif not pattern.strip():
            # An emptied pattern shows exactly the lists the search started from
            self.records = list(search.snapshot_records)
            self.keywords = list(search.snapshot_keywords)
        else:
            self.records = search_records(pattern, search.snapshot_records)
            self.keywords = collect_keywords(self.records)
        logger.debug(
            "Search %r: %d records, %d keywords", pattern, len(self.records), len(self.keywords)
        )

    def confirm_search(self) -> FilterState | None:
        """Keep the current matches as the new baseline."""
        search = self.search
        self.search = None
        if search is not None and search.pattern.strip():
            self._search_narrowed = True
        return search

    def abort_search(self) -> FilterState | None:
        """Restore the lists captured when the search started."""
        search = self.search
        if search is None:
            return None
        self.search = None
        self.records = list(search.snapshot_records)
        self.keywords = list(search.snapshot_keywords)
        if not search.chained:
            # Unchained searches started from the unfiltered set.
            self.selected_keywords = []
            self._search_narrowed = False
        return search


__all__ = ["FilterPipeline"]
