"""Matching, keyword derivation, and sorting utilities for records."""

from __future__ import annotations

import functools
import unicodedata
from collections.abc import Iterable, Sequence

from rapidfuzz import fuzz
from rich.markup import escape as escape_markup

from bib_browser.models import EntryColumn, Record

# ============================================================================
# Text Normalization
# ============================================================================


@functools.lru_cache(maxsize=4096)
def normalize_text(text: str) -> str:
    """Casefold text and strip combining marks so "Gödel" matches "godel"."""
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold()


def escape_rich_text(text: str) -> str:
    """Escape text for safe use inside Rich markup strings."""
    return escape_markup(text)


# ============================================================================
# Fuzzy Matching
# ============================================================================


def _is_subsequence(needle: str, haystack: str) -> bool:
    chars = iter(haystack)
    return all(ch in chars for ch in needle)


def fuzzy_score(pattern: str, text: str) -> float | None:
    """Score text against a whitespace-separated fuzzy pattern.

    Every atom of the pattern must occur in ``text`` as a subsequence of
    characters (case-insensitive, accents ignored). Returns None when any
    atom fails, else the summed rapidfuzz partial ratio of the atoms.
    """
    atoms = normalize_text(pattern).split()
    if not atoms:
        return 0.0
    haystack = normalize_text(text)
    score = 0.0
    for atom in atoms:
        if not _is_subsequence(atom, haystack):
            return None
        score += fuzz.partial_ratio(atom, haystack)
    return score


def search_records(pattern: str, records: Sequence[Record]) -> list[Record]:
    """Return records whose composite string matches ``pattern``.

    Empty patterns keep every record in order. Otherwise results are ordered
    by descending score; ties keep their input order (sorted() is stable).
    """
    if not pattern.strip():
        return list(records)
    scored: list[tuple[float, Record]] = []
    for record in records:
        score = fuzzy_score(pattern, record.search_text)
        if score is not None:
            scored.append((score, record))
    scored.sort(key=lambda item: item[0], reverse=True)
    return [record for _, record in scored]


def search_keywords(pattern: str, keywords: Sequence[str]) -> list[str]:
    """Fuzzy-filter a keyword list with the same rules as search_records."""
    if not pattern.strip():
        return list(keywords)
    scored: list[tuple[float, str]] = []
    for keyword in keywords:
        score = fuzzy_score(pattern, keyword)
        if score is not None:
            scored.append((score, keyword))
    scored.sort(key=lambda item: item[0], reverse=True)
    return [keyword for _, keyword in scored]


# ============================================================================
# Keywords
# ============================================================================


def split_keywords(raw: str) -> list[str]:
    """Split a comma-joined keyword field into trimmed, non-empty parts."""
    return [part.strip() for part in raw.split(",") if part.strip()]


def collect_keywords(records: Iterable[Record]) -> list[str]:
    """Derive the deduplicated, case-insensitively sorted keyword list."""
    seen: set[str] = set()
    keywords: list[str] = []
    for record in records:
        for keyword in split_keywords(record.keywords):
            if keyword not in seen:
                seen.add(keyword)
                keywords.append(keyword)
    return sorted(keywords, key=str.lower)


def filter_records_by_keyword(records: Sequence[Record], keyword: str) -> list[Record]:
    """Keep records whose raw keyword field contains ``keyword``.

    This is a case-sensitive substring test on the comma-joined field, so
    "war" also keeps records tagged "warfare".
    """
    return [record for record in records if keyword in record.keywords]


# ============================================================================
# Sorting
# ============================================================================


def sort_records(
    records: Sequence[Record],
    column: EntryColumn,
    reverse: bool = False,
) -> list[Record]:
    """Sort records case-insensitively by a column's string value.

    Years compare as strings too. The sort is stable in both directions.
    """
    return sorted(records, key=lambda r: r.column_value(column).lower(), reverse=reverse)


def index_of_citekey(records: Sequence[Record], citekey: str | None) -> int | None:
    """Return the position of the record with ``citekey``, if visible."""
    if citekey is None:
        return None
    for index, record in enumerate(records):
        if record.citekey == citekey:
            return index
    return None


__all__ = [
    "collect_keywords",
    "escape_rich_text",
    "filter_records_by_keyword",
    "fuzzy_score",
    "index_of_citekey",
    "normalize_text",
    "search_keywords",
    "search_records",
    "sort_records",
    "split_keywords",
]
