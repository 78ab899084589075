"""Column sort state for the entries table."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from bib_browser.models import EntryColumn, Record
from bib_browser.query import sort_records

logger = logging.getLogger(__name__)

DEFAULT_SORT_COLUMN = EntryColumn.AUTHORS


@dataclass(slots=True)
class SortEngine:
    """Remembers the last sorted column and direction."""

    sorted_by: EntryColumn = DEFAULT_SORT_COLUMN
    reversed: bool = False

    @property
    def is_default(self) -> bool:
        return self.sorted_by is DEFAULT_SORT_COLUMN and not self.reversed

    def sort(self, records: Sequence[Record], column: EntryColumn, toggle: bool) -> list[Record]:
        """Sort by ``column``, flipping direction when re-sorting the same column.

        Switching to a different column always starts ascending.
        """
        if column is not self.sorted_by:
            self.sorted_by = column
            self.reversed = False
        elif toggle:
            self.reversed = not self.reversed
        logger.debug("Sorting %d records by %s (reversed=%s)", len(records), column.value, self.reversed)
        return sort_records(records, self.sorted_by, self.reversed)

    def reset(self) -> None:
        self.sorted_by = DEFAULT_SORT_COLUMN
        self.reversed = False


__all__ = ["DEFAULT_SORT_COLUMN", "SortEngine"]
