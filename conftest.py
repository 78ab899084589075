"""Shared test fixtures for bib-browser tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from bib_browser.models import Record, UserConfig
from bib_browser.parsing import BibWriteError, parse_bib_text
from bib_browser.query import normalize_text
from bib_browser.services.interfaces import PortError
from bib_browser.state.engine import BrowserEngine


@pytest.fixture(autouse=True)
def _clear_caches():
    """Clear the normalization cache so tests never share memoized text."""
    yield
    normalize_text.cache_clear()


# ── Fakes ────────────────────────────────────────────────────────────────────


class FakePorts:
    """Records every side-effect call; raises PortError for names in ``fail``."""

    def __init__(self, fail: set[str] | None = None) -> None:
        self.fail = fail or set()
        self.calls: list[tuple[str, Any]] = []

    def _call(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))
        if name in self.fail:
            raise PortError(f"{name} is broken")

    def open_file(self, path: Path) -> None:
        self._call("open_file", path)

    def open_link(self, url: str) -> None:
        self._call("open_link", url)

    def copy_to_clipboard(self, text: str) -> None:
        self._call("copy_to_clipboard", text)

    def launch_editor(self, path: Path, line_hint: int) -> int:
        self._call("launch_editor", path, line_hint)
        return 0


class FakeRepository:
    """In-memory repository; ``text`` is what read_text returns for any path."""

    def __init__(self, records: list[Record], text: str = "") -> None:
        self.records = list(records)
        self.text = text
        self.load_error: Exception | None = None
        self.appended: list[str] = []

    def load(self) -> list[Record]:
        if self.load_error is not None:
            raise self.load_error
        return list(self.records)

    def append(self, raw: str) -> str:
        parsed = parse_bib_text(raw) if raw.strip().startswith("@") else []
        if len(parsed) != 1:
            raise BibWriteError("not a valid BibTeX entry")
        record = parsed[0]
        if any(r.citekey == record.citekey for r in self.records):
            raise BibWriteError(f"citekey {record.citekey} already exists")
        self.records.append(record)
        self.appended.append(raw)
        return record.citekey

    def read_text(self, path: Path) -> str:
        return self.text


# ── Factories ────────────────────────────────────────────────────────────────


@pytest.fixture
def make_record():
    """Factory fixture for creating Record instances with sensible defaults."""

    def _make(
        citekey: str = "doe2020",
        authors: str = "Doe",
        title: str = "A Test Title",
        year: str = "2020",
        pubtype: str = "article",
        keywords: str = "",
        **kwargs: Any,
    ) -> Record:
        return Record(
            citekey=citekey,
            authors=authors,
            title=title,
            year=year,
            pubtype=pubtype,
            keywords=keywords,
            **kwargs,
        )

    return _make


@pytest.fixture
def library(make_record) -> list[Record]:
    """Five records, two of them tagged "history"."""
    return [
        make_record(
            "clausewitz1832",
            authors="Clausewitz",
            title="On War",
            year="1832",
            pubtype="book",
            keywords="history, war",
            weblink="https://example.org/onwar",
        ),
        make_record(
            "bloch1949",
            authors="Bloch",
            title="The Historian's Craft",
            year="1949",
            pubtype="book",
            keywords="history, method",
        ),
        make_record(
            "knuth1984",
            authors="Knuth",
            title="Literate Programming",
            year="1984",
            pubtype="article",
            keywords="programming",
            filepath=Path("/tmp/knuth.pdf"),
        ),
        make_record(
            "arendt1958",
            authors="Arendt",
            title="The Human Condition",
            year="1958",
            pubtype="book",
            keywords="philosophy",
        ),
        make_record(
            "turing1950",
            authors="Turing",
            title="Computing Machinery and Intelligence",
            year="1950",
            pubtype="article",
            keywords="computing, philosophy",
            weblink="https://doi.org/10.1093/mind/LIX.236.433",
            filepath=Path("/tmp/turing.pdf"),
        ),
    ]


@pytest.fixture
def fake_ports() -> FakePorts:
    return FakePorts()


@pytest.fixture
def make_engine(library, fake_ports):
    """Factory fixture for a BrowserEngine wired to fakes."""

    def _make(
        records: list[Record] | None = None,
        *,
        repository: FakeRepository | None = None,
        ports: FakePorts | None = None,
    ) -> BrowserEngine:
        records = library if records is None else records
        return BrowserEngine(
            records,
            repository=repository or FakeRepository(records),
            ports=ports or fake_ports,
        )

    return _make


@pytest.fixture
def sample_config():
    """Factory fixture for creating UserConfig with optional overrides."""

    def _make(**kwargs: Any) -> UserConfig:
        return UserConfig(**kwargs)

    return _make


SAMPLE_BIB = """\
@string{jhi = "Journal of the History of Ideas"}

@book{clausewitz1832,
  author = {von Clausewitz, Carl},
  title = {Vom {K}riege},
  year = {1832},
  keywords = {history, war},
  url = {www.example.org/vomkriege},
}

@article{turing1950,
  author = {Turing, Alan M. and Someone Else},
  title = {Computing Machinery and Intelligence},
  journal = {Mind},
  date = {1950-10-01},
  doi = {10.1093/mind/LIX.236.433},
  file = {:papers/turing.pdf:PDF},
  abstract = {I propose to consider the question.},
}

@collection{edited2001,
  editor = {Smith, Jane and Brown, Bob},
  title = {Collected Essays},
  subtitle = {A Reader},
  year = {2001},
}
"""


@pytest.fixture
def sample_bib(tmp_path) -> Path:
    """A small .bib file on disk."""
    path = tmp_path / "library.bib"
    path.write_text(SAMPLE_BIB, encoding="utf-8")
    return path
