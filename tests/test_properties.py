"""Property-based tests using Hypothesis.

Drives the browser engine with random command sequences and checks the
selection, scrollbar, and area invariants after every step, plus the
reset, search-abort, chained-filter, and sort-toggle laws. Each test runs
50 examples in CI, 200 in dev.

Run:
    pytest tests/test_properties.py -v
    pytest tests/test_properties.py -v --hypothesis-profile=dev
"""

from __future__ import annotations

import hypothesis.strategies as st
from hypothesis import given, settings

from bib_browser.models import AreaKind, EntryColumn, FormerArea, PopupKind, Record
from bib_browser.query import collect_keywords, filter_records_by_keyword, fuzzy_score
from bib_browser.state import BrowserEngine
from bib_browser.state.commands import (
    AbortSearch,
    ApplyKeywordFilter,
    ClosePopup,
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
    ResetLists,
    ScrollDetail,
    SearchEdit,
    Sort,
    ToggleArea,
    Unmapped,
    YankCitekey,
)
from conftest import FakePorts, FakeRepository

# ── Hypothesis profiles ─────────────────────────────────────────────
settings.register_profile("ci", max_examples=50, deadline=None)
settings.register_profile("dev", max_examples=200, deadline=None)
settings.load_profile("ci")

# ── Custom strategies ────────────────────────────────────────────────

_WORDS = ["war", "history", "logic", "art", "Gödel", "sea", "myth", "code"]
_AUTHORS = ["Arendt", "bloch", "Curie", "Dürer", "Eco", "eco", "Frege"]
_TYPES = ["article", "book", "misc", "inproceedings"]


@st.composite
def records(draw: st.DrawFn) -> Record:
    """Generate a Record with a small vocabulary so filters hit often."""
    index = draw(st.integers(min_value=0, max_value=10_000))
    keywords = draw(st.lists(st.sampled_from(_WORDS), max_size=3))
    return Record(
        citekey=f"key{index}",
        authors=draw(st.sampled_from(_AUTHORS)),
        title=" ".join(draw(st.lists(st.sampled_from(_WORDS), min_size=1, max_size=3))),
        year=str(draw(st.integers(min_value=1990, max_value=1995))),
        pubtype=draw(st.sampled_from(_TYPES)),
        keywords=", ".join(keywords),
        weblink=draw(st.none() | st.just("https://example.org")),
    )


record_lists = st.lists(records(), max_size=8, unique_by=lambda r: r.citekey)

patterns = st.text(alphabet="aeiorstwy gö", max_size=5)

_SIMPLE_COMMANDS = [
    MoveNext(),
    MoveNext(5),
    MovePrev(),
    MovePrev(5),
    MoveColNext(),
    MoveColPrev(),
    GoFirst(),
    GoLast(),
    ScrollDetail(3),
    ScrollDetail(-3),
    ToggleArea(),
    EnterSearch(),
    ConfirmSearch(),
    AbortSearch(),
    ApplyKeywordFilter(),
    ResetLists(),
    Sort(),
    OpenPopup(PopupKind.HELP),
    OpenPopup(PopupKind.SELECTION),
    OpenPopup(PopupKind.ADD_ENTRY_FORM),
    OpenPopup(PopupKind.MESSAGE_ERROR, "boom"),
    ConfirmPopup(),
    ClosePopup(),
    FormBackspace(),
    FormCursor(-1),
    FormCursor(1),
    YankCitekey(),
    EditRecord(),
    Unmapped("f1"),
]

commands = st.one_of(
    st.sampled_from(_SIMPLE_COMMANDS),
    patterns.map(SearchEdit),
    patterns.map(FormInsert),
)

# Commands that never leave the base areas
base_commands = st.sampled_from(
    [MoveNext(), MovePrev(), GoLast(), ToggleArea(), ApplyKeywordFilter(), Sort(), MoveColNext()]
)


def _engine(items: list[Record]) -> BrowserEngine:
    engine = BrowserEngine(items, repository=FakeRepository(items), ports=FakePorts())
    engine.update_detail_geometry(20, 5)
    return engine


def _assert_invariants(engine: BrowserEngine) -> None:
    for selection, items in (
        (engine.records_selection, engine.records),
        (engine.keywords_selection, engine.keywords),
    ):
        assert selection.content_length == len(items)
        if selection.selected is not None:
            assert 0 <= selection.selected < len(items)
            assert selection.scroll_position == selection.selected
    if engine.records:
        assert engine.records_selection.selected is not None

    area = engine.current_area
    if area in (AreaKind.RECORDS, AreaKind.KEYWORDS):
        assert engine.former_area is None
    else:
        assert engine.former_area is not None
    assert (area is AreaKind.POPUP) == (engine.popup is not None)
    in_search = area is AreaKind.SEARCH_INPUT or engine.former_area is FormerArea.SEARCH_INPUT
    assert in_search == (engine.pipeline.search is not None)

    assert set(engine.keywords) <= set(collect_keywords(engine.records))
    assert 0 <= engine.detail_offset <= engine.detail.max_offset


# ── Invariants ───────────────────────────────────────────────────────


@given(items=record_lists, steps=st.lists(commands, max_size=40))
def test_invariants_hold_after_every_command(items, steps):
    engine = _engine(items)
    _assert_invariants(engine)
    for command in steps:
        engine.dispatch(command)
        _assert_invariants(engine)
        assert engine.running


@given(items=record_lists, steps=st.lists(commands, max_size=30))
def test_reset_lists_is_idempotent(items, steps):
    engine = _engine(items)
    for command in steps:
        engine.dispatch(command)
    if engine.current_area not in (AreaKind.RECORDS, AreaKind.KEYWORDS):
        return
    engine.dispatch(ResetLists())
    once = (engine.records, engine.keywords, engine.records_selection.selected)
    engine.dispatch(ResetLists())
    assert (engine.records, engine.keywords, engine.records_selection.selected) == once


@given(
    items=record_lists,
    setup=st.lists(base_commands, max_size=10),
    typed=st.lists(patterns, min_size=1, max_size=6),
)
def test_search_abort_round_trip(items, setup, typed):
    engine = _engine(items)
    for command in setup:
        engine.dispatch(command)
    before = (
        engine.records,
        engine.keywords,
        engine.selected_keywords,
        engine.records_selection.selected,
        engine.keywords_selection.selected,
        engine.current_area,
    )
    engine.dispatch(EnterSearch())
    for pattern in typed:
        engine.dispatch(SearchEdit(pattern))
    engine.dispatch(AbortSearch())
    after = (
        engine.records,
        engine.keywords,
        engine.selected_keywords,
        engine.records_selection.selected,
        engine.keywords_selection.selected,
        engine.current_area,
    )
    assert after == before
    assert engine.former_area is None


@given(items=record_lists, keyword=st.sampled_from(_WORDS), pattern=patterns)
def test_chained_filter_composition(items, keyword, pattern):
    engine = _engine(items)
    engine.dispatch(ToggleArea())
    if keyword not in engine.keywords:
        return
    engine.dispatch(MoveNext(engine.keywords.index(keyword)))
    engine.dispatch(ApplyKeywordFilter())
    filtered = set(engine.records)

    engine.dispatch(EnterSearch())
    engine.dispatch(SearchEdit(pattern))
    engine.dispatch(ConfirmSearch())

    expected = {r for r in filtered if fuzzy_score(pattern, r.search_text) is not None}
    assert set(engine.records) == expected
    assert filtered == set(filter_records_by_keyword(items, keyword))
    assert engine.selected_keywords == (keyword,)


# ── Sorting ──────────────────────────────────────────────────────────


@given(items=record_lists, column=st.sampled_from(list(EntryColumn)))
def test_sort_toggle_twice_restores_order(items, column):
    engine = _engine(items)
    engine.dispatch(Sort(column))
    if column is engine.sorted_by and engine.sort_reversed:
        engine.dispatch(Sort(column))
    ordered = engine.records
    engine.dispatch(Sort(column))
    engine.dispatch(Sort(column))
    assert engine.records == ordered
    assert engine.sort_reversed is False


@given(items=record_lists)
def test_sort_by_year_is_stable(items):
    engine = _engine(items)
    before = list(engine.records)
    engine.dispatch(Sort(EntryColumn.YEAR))
    after = list(engine.records)
    for year in {r.year for r in before}:
        assert [r for r in before if r.year == year] == [r for r in after if r.year == year]


@given(items=record_lists, steps=st.lists(base_commands, max_size=15))
def test_sort_keeps_selected_record(items, steps):
    engine = _engine(items)
    for command in steps:
        engine.dispatch(command)
    if engine.current_area is not AreaKind.RECORDS:
        engine.dispatch(ToggleArea())
    selected = engine.selected_record
    engine.dispatch(Sort(EntryColumn.TITLE))
    assert engine.selected_record == selected
