"""Tests for BibTeX loading, field cleanup, and the repository."""

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import httpx
import pytest

from bib_browser.models import EMPTY_AUTHORS, EMPTY_TITLE, EMPTY_YEAR
from bib_browser.parsing import (
    BibParseError,
    BibRepository,
    BibWriteError,
    RepositoryError,
    clean_field,
    collect_bib_files,
    entry_to_record,
    extract_doi,
    fetch_bibtex_for_doi,
    find_citekey_line,
    format_last_names,
    normalize_weblink,
    parse_bib_text,
    resolve_file_field,
)

DOI = "10.1093/mind/LIX.236.433"
RESOLVED_BIBTEX = "@article{Turing_1950, title={Computing Machinery and Intelligence}, year={1950}}"


class TestCleanField:
    def test_strips_braces_and_whitespace(self):
        assert clean_field("Vom {K}riege\n   und  mehr") == "Vom Kriege und mehr"

    def test_unwraps_commands_and_accents(self):
        assert clean_field(r"\emph{G\"{o}del} and \textbf{Escher}") == "Gödel and Escher"
        assert clean_field(r"Caf\'e \& Bar") == "Café & Bar"

    def test_math_mode(self):
        assert clean_field("$O(n^2)$ sorting") == "O(n^2) sorting"


class TestFieldHelpers:
    def test_last_names_from_both_name_forms(self):
        assert format_last_names("von Clausewitz, Carl and Hannah Arendt") == "von Clausewitz, Arendt"

    def test_last_names_skip_others(self):
        assert format_last_names("Knuth, Donald and others") == "Knuth"

    def test_last_names_of_nothing(self):
        assert format_last_names(None) == ""
        assert format_last_names("") == ""

    def test_weblink_prefers_doi(self):
        assert normalize_weblink(DOI, "https://example.org") == f"https://doi.org/{DOI}"

    def test_weblink_normalizes_www(self):
        assert normalize_weblink(None, "www.example.org/x") == "https://www.example.org/x"
        assert normalize_weblink(None, None) is None
        assert normalize_weblink("", "https://a.org") == "https://a.org"

    def test_file_field_jabref_form(self, tmp_path):
        source = tmp_path / "lib.bib"
        assert resolve_file_field(":papers/a.pdf:PDF", source) == tmp_path / "papers" / "a.pdf"

    def test_file_field_takes_first_of_many(self):
        assert resolve_file_field("/x/a.pdf;/x/b.pdf", None) == Path("/x/a.pdf")

    def test_file_field_expands_home(self):
        assert resolve_file_field("~/a.pdf", None) == Path("~/a.pdf").expanduser()

    def test_file_field_missing(self):
        assert resolve_file_field(None, None) is None
        assert resolve_file_field("", None) is None

    def test_entry_to_record_fallbacks(self):
        record = entry_to_record({"ID": "bare", "ENTRYTYPE": "Misc"})
        assert record.authors == EMPTY_AUTHORS
        assert record.title == EMPTY_TITLE
        assert record.year == EMPTY_YEAR
        assert record.pubtype == "misc"
        assert record.keywords == ""
        assert record.weblink is None
        assert record.filepath is None


class TestParseBibText:
    def test_parses_sample(self, sample_bib):
        records = parse_bib_text(sample_bib.read_text(encoding="utf-8"), source=sample_bib)
        by_key = {r.citekey: r for r in records}
        assert [r.citekey for r in records] == ["clausewitz1832", "turing1950", "edited2001"]

        war = by_key["clausewitz1832"]
        assert war.authors == "von Clausewitz"
        assert war.title == "Vom Kriege"
        assert war.year == "1832"
        assert war.pubtype == "book"
        assert war.keywords == "history, war"
        assert war.weblink == "https://www.example.org/vomkriege"
        assert war.source == sample_bib

        turing = by_key["turing1950"]
        assert turing.authors == "Turing, Else"
        assert turing.short_authors == "Turing et al."
        assert turing.year == "1950"
        assert turing.weblink == f"https://doi.org/{DOI}"
        assert turing.filepath == sample_bib.parent / "papers" / "turing.pdf"
        assert turing.abstract == "I propose to consider the question."

        edited = by_key["edited2001"]
        assert edited.authors == "Smith, Brown (ed.)"
        assert edited.short_authors == "Smith et al. (ed.)"
        assert edited.subtitle == "A Reader"
        assert edited.pubtype == "collection"

    def test_parser_failure_is_wrapped(self):
        with (
            patch("bib_browser.parsing.bibtexparser.loads", side_effect=ValueError("bad token")),
            pytest.raises(BibParseError, match="bad token"),
        ):
            parse_bib_text("@article{x, title={y}}")

    def test_dropped_entries_are_reported(self):
        database = SimpleNamespace(entries=[{"ID": "good", "ENTRYTYPE": "article"}])
        text = "@article{good, title={A}}\n@article{broken, title={B}\n"
        with (
            patch("bib_browser.parsing.bibtexparser.loads", return_value=database),
            pytest.raises(BibParseError, match="malformed entries: broken"),
        ):
            parse_bib_text(text)

    def test_string_definitions_are_not_entries(self):
        text = '@string{mind = "Mind"}\n@article{a1, journal = mind, title = {T}}\n'
        assert [r.citekey for r in parse_bib_text(text)] == ["a1"]

    def test_empty_text(self):
        assert parse_bib_text("") == []


class TestFindCitekeyLine:
    def test_finds_entry_header(self):
        text = "% comment\n\n@book{clausewitz1832,\n  title={x}\n}\n"
        assert find_citekey_line(text, "clausewitz1832") == 3

    def test_needs_brace_and_comma(self):
        text = "crossref = clausewitz1832\n@book{clausewitz18320,\n"
        assert find_citekey_line(text, "clausewitz1832") is None


class TestCollectBibFiles:
    def test_directories_are_searched_recursively(self, tmp_path):
        (tmp_path / "b.bib").write_text("", encoding="utf-8")
        nested = tmp_path / "sub"
        nested.mkdir()
        (nested / "a.bib").write_text("", encoding="utf-8")
        (nested / "notes.txt").write_text("", encoding="utf-8")
        files = collect_bib_files([tmp_path])
        assert [p.name for p in files] == ["b.bib", "a.bib"]

    def test_duplicates_are_dropped(self, sample_bib):
        assert collect_bib_files([sample_bib, sample_bib.parent]) == [sample_bib]

    def test_non_bib_file_is_rejected(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("", encoding="utf-8")
        with pytest.raises(BibParseError, match="not a .bib file"):
            collect_bib_files([path])

    def test_missing_path_is_rejected(self, tmp_path):
        with pytest.raises(BibParseError, match="does not exist"):
            collect_bib_files([tmp_path / "missing.bib"])


class TestDoi:
    @pytest.mark.parametrize(
        "text",
        [DOI, f"doi:{DOI}", f"https://doi.org/{DOI}", f"  http://dx.doi.org/{DOI}  "],
    )
    def test_extract_doi(self, text):
        assert extract_doi(text) == DOI

    def test_bibtex_is_not_a_doi(self):
        assert extract_doi(RESOLVED_BIBTEX) is None

    def test_fetch_uses_content_negotiation(self):
        response = MagicMock(text=RESOLVED_BIBTEX)
        with patch("bib_browser.parsing.httpx.get", return_value=response) as get:
            assert fetch_bibtex_for_doi(DOI, timeout=3) == RESOLVED_BIBTEX
        args, kwargs = get.call_args
        assert args[0] == f"https://doi.org/{DOI}"
        assert kwargs["headers"]["Accept"] == "application/x-bibtex"
        assert kwargs["timeout"] == 3
        assert kwargs["follow_redirects"] is True

    def test_fetch_http_error(self):
        request = httpx.Request("GET", f"https://doi.org/{DOI}")
        response = httpx.Response(404, request=request)
        error = httpx.HTTPStatusError("not found", request=request, response=response)
        mock_response = MagicMock()
        mock_response.raise_for_status.side_effect = error
        with (
            patch("bib_browser.parsing.httpx.get", return_value=mock_response),
            pytest.raises(BibWriteError, match="HTTP 404"),
        ):
            fetch_bibtex_for_doi(DOI)

    def test_fetch_network_error(self):
        with (
            patch("bib_browser.parsing.httpx.get", side_effect=httpx.ConnectError("offline")),
            pytest.raises(BibWriteError, match="lookup failed"),
        ):
            fetch_bibtex_for_doi(DOI)

    def test_fetch_rejects_non_bibtex(self):
        with (
            patch("bib_browser.parsing.httpx.get", return_value=MagicMock(text="<html></html>")),
            pytest.raises(BibWriteError, match="did not resolve"),
        ):
            fetch_bibtex_for_doi(DOI)


class TestBibRepository:
    def test_requires_a_file(self):
        with pytest.raises(ValueError):
            BibRepository([])

    def test_load_dedupes_across_files(self, sample_bib, tmp_path):
        second = tmp_path / "second.bib"
        second.write_text(
            "@misc{turing1950, title={Duplicate}}\n@misc{extra1, title={Extra}}\n",
            encoding="utf-8",
        )
        repository = BibRepository([sample_bib, second])
        records = repository.load()
        assert [r.citekey for r in records] == [
            "clausewitz1832",
            "turing1950",
            "edited2001",
            "extra1",
        ]
        assert next(r for r in records if r.citekey == "turing1950").source == sample_bib

    def test_load_unreadable_file(self, tmp_path):
        with pytest.raises(BibParseError, match="cannot read"):
            BibRepository([tmp_path / "missing.bib"]).load()

    def test_read_text(self, sample_bib):
        repository = BibRepository([sample_bib])
        assert "@book{clausewitz1832," in repository.read_text(sample_bib)

    def test_append_bibtex(self, sample_bib):
        repository = BibRepository([sample_bib])
        repository.load()
        citekey = repository.append("  @misc{new2024, title={Fresh}}  ")
        assert citekey == "new2024"
        assert sample_bib.read_text(encoding="utf-8").endswith("\n@misc{new2024, title={Fresh}}\n")
        assert "new2024" in {r.citekey for r in repository.load()}

    def test_append_resolves_doi(self, sample_bib):
        fetch = MagicMock(return_value=RESOLVED_BIBTEX)
        repository = BibRepository([sample_bib], doi_timeout=7, fetch_doi=fetch)
        repository.load()
        assert repository.append(f"doi:{DOI}") == "Turing_1950"
        fetch.assert_called_once_with(DOI, timeout=7)

    def test_append_rejects_duplicates(self, sample_bib):
        repository = BibRepository([sample_bib])
        repository.load()
        with pytest.raises(BibWriteError, match="already exists"):
            repository.append("@misc{turing1950, title={Again}}")

    def test_append_rejects_multiple_entries(self, sample_bib):
        repository = BibRepository([sample_bib])
        with pytest.raises(BibWriteError, match="exactly one entry"):
            repository.append("@misc{a, title={A}}\n@misc{b, title={B}}")

    def test_append_rejects_empty_input(self, sample_bib):
        with pytest.raises(BibWriteError, match="nothing to add"):
            BibRepository([sample_bib]).append("   ")

    def test_write_errors_share_a_base(self):
        assert issubclass(BibWriteError, RepositoryError)
        assert issubclass(BibParseError, RepositoryError)
