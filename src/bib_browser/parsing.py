"""BibTeX loading, field cleanup, and appending for the record repository."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path

import bibtexparser
import httpx
from bibtexparser.bparser import BibTexParser

from bib_browser.models import (
    DOI_URL_PREFIX,
    EDITOR_SUFFIX,
    EMPTY_AUTHORS,
    EMPTY_TITLE,
    EMPTY_YEAR,
    Record,
)

logger = logging.getLogger(__name__)

DOI_RESOLVER_URL = "https://doi.org/"
DOI_REQUEST_TIMEOUT = 15
DOI_USER_AGENT = "bib-browser/1.0"


class RepositoryError(Exception):
    """Base class for load and append failures."""


class BibParseError(RepositoryError):
    """A bibliography source is missing, unreadable, or malformed."""


class BibWriteError(RepositoryError):
    """A new entry could not be resolved, validated, or written."""


# ============================================================================
# LaTeX Cleanup
# ============================================================================

_LATEX_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    # Formatting commands: \textbf{text} -> text, \emph{text} -> text
    (re.compile(r"\\text(?:tt|bf|it|rm|sf|sc)\{([^{}]*)\}"), r"\1"),
    (re.compile(r"\\emph\{([^{}]*)\}"), r"\1"),
    # Math mode: $x^2$ -> x^2
    (re.compile(r"(?<!\\)\$([^$]*)\$"), r"\1"),
    # Accents, both \'e and \'{e} spellings
    (re.compile(r"\\c\{c\}"), "ç"),
    (re.compile(r"\\c\{C\}"), "Ç"),
    (re.compile(r"\\'\{?e\}?"), "é"),
    (re.compile(r"\\'\{?a\}?"), "á"),
    (re.compile(r"\\'\{?o\}?"), "ó"),
    (re.compile(r"\\'\{?i\}?"), "í"),
    (re.compile(r"\\'\{?u\}?"), "ú"),
    (re.compile(r"\\`\{?e\}?"), "è"),
    (re.compile(r"\\`\{?a\}?"), "à"),
    (re.compile(r'\\"\{?a\}?'), "ä"),
    (re.compile(r'\\"\{?o\}?'), "ö"),
    (re.compile(r'\\"\{?u\}?'), "ü"),
    (re.compile(r'\\"\{?A\}?'), "Ä"),
    (re.compile(r'\\"\{?O\}?'), "Ö"),
    (re.compile(r'\\"\{?U\}?'), "Ü"),
    (re.compile(r"\\ss\b\{?\}?"), "ß"),
    (re.compile(r"\\~\{?n\}?"), "ñ"),
    (re.compile(r"\\([&%$#_])"), r"\1"),
    # Generic command with braces: \foo{content} -> content
    (re.compile(r"\\[a-zA-Z]+\{([^{}]*)\}"), r"\1"),
    # Standalone commands: \foo -> (removed)
    (re.compile(r"\\[a-zA-Z]+(?:\s|$)"), " "),
]


def clean_field(text: str) -> str:
    """Turn a raw BibTeX field value into plain display text.

    Patterns are applied until nothing changes so nested commands unwrap,
    then protective braces are dropped and whitespace collapsed.
    """
    if "\\" in text or "$" in text:
        prev_text = None
        while prev_text != text:
            prev_text = text
            for pattern, replacement in _LATEX_PATTERNS:
                text = pattern.sub(replacement, text)
    text = text.replace("{", "").replace("}", "")
    return " ".join(text.split())


# ============================================================================
# Field Conversion
# ============================================================================

_NAME_SEPARATOR = re.compile(r"\s+and\s+")
_ENTRY_HEADER = re.compile(r"^[ \t]*@[ \t]*(\w+)[ \t]*[{(][ \t]*([^,\s]+)[ \t]*,", re.MULTILINE)
_NON_ENTRY_TYPES = frozenset({"comment", "string", "preamble"})
_DOI_PATTERN = re.compile(
    r"^(?:doi:\s*|https?://(?:dx\.)?doi\.org/)?(10\.\d{4,9}/\S+)$", re.IGNORECASE
)


def format_last_names(raw: str | None) -> str:
    """Join the last names of a BibTeX name list with ", "."""
    if not raw:
        return ""
    names: list[str] = []
    for name in _NAME_SEPARATOR.split(clean_field(raw)):
        name = name.strip()
        if not name or name == "others":
            continue
        if "," in name:
            names.append(name.split(",", 1)[0].strip())
        else:
            names.append(name.split()[-1])
    return ", ".join(names)


def normalize_weblink(doi: str | None, url: str | None) -> str | None:
    """Prefer the DOI as a resolver URL, else fall back to the plain URL."""
    for value in (doi, url):
        if not value:
            continue
        value = value.strip()
        if value.startswith("10."):
            return f"{DOI_URL_PREFIX}{value}"
        if value.startswith("www."):
            return f"https://{value}"
        if value:
            return value
    return None


def resolve_file_field(raw: str | None, source: Path | None) -> Path | None:
    """Extract the first path from a ``file`` field.

    JabRef stores ``description:path:type``; plain paths are used as-is.
    Relative paths are taken relative to the bib file holding the entry.
    """
    if not raw:
        return None
    first = raw.split(";", 1)[0].strip()
    parts = first.split(":")
    if len(parts) >= 3:
        first = ":".join(parts[1:-1])
    if not first:
        return None
    path = Path(first).expanduser()
    if not path.is_absolute() and source is not None:
        path = source.parent / path
    return path


def _optional(entry: dict[str, str], key: str) -> str | None:
    value = entry.get(key)
    if value is None:
        return None
    cleaned = clean_field(value)
    return cleaned or None


def entry_to_record(entry: dict[str, str], source: Path | None = None) -> Record:
    """Build a Record from one bibtexparser entry dict."""
    authors = format_last_names(entry.get("author"))
    if not authors:
        editors = format_last_names(entry.get("editor"))
        authors = f"{editors}{EDITOR_SUFFIX}" if editors else EMPTY_AUTHORS

    date = clean_field(entry.get("date") or entry.get("year") or "")
    return Record(
        citekey=entry["ID"],
        authors=authors,
        title=_optional(entry, "title") or EMPTY_TITLE,
        year=date[:4] if date else EMPTY_YEAR,
        pubtype=entry.get("ENTRYTYPE", "misc").lower(),
        keywords=clean_field(entry.get("keywords", "")),
        abstract=_optional(entry, "abstract"),
        weblink=normalize_weblink(entry.get("doi"), entry.get("url")),
        filepath=resolve_file_field(entry.get("file"), source),
        subtitle=_optional(entry, "subtitle"),
        source=source,
    )


# ============================================================================
# Parsing
# ============================================================================


def _make_parser() -> BibTexParser:
    # bibtexparser 1.x parsers keep state, so each parse gets a fresh one.
    return BibTexParser(common_strings=True, ignore_nonstandard_types=False)


def parse_bib_text(text: str, source: Path | None = None) -> list[Record]:
    """Parse BibTeX text into records in file order.

    Raises BibParseError when the parser fails or when an entry header in
    the text did not come out as an entry.
    """
    label = str(source) if source is not None else "input"
    try:
        database = bibtexparser.loads(text, parser=_make_parser())
    except Exception as exc:  # pyparsing surfaces several unrelated error types
        raise BibParseError(f"{label}: {exc}") from exc

    parsed_keys = {entry.get("ID", "") for entry in database.entries}
    missing = [
        key
        for entry_type, key in _ENTRY_HEADER.findall(text)
        if entry_type.lower() not in _NON_ENTRY_TYPES and key not in parsed_keys
    ]
    if missing:
        raise BibParseError(f"{label}: malformed entries: {', '.join(missing)}")
    return [entry_to_record(entry, source) for entry in database.entries if entry.get("ID")]


def find_citekey_line(text: str, citekey: str) -> int | None:
    """Return the 1-based line holding ``{citekey,``, or None."""
    needle = f"{{{citekey},"
    for number, line in enumerate(text.splitlines(), start=1):
        if needle in line:
            return number
    return None


def collect_bib_files(paths: Iterable[Path]) -> list[Path]:
    """Expand files and directories into an ordered, deduplicated .bib list."""
    found: list[Path] = []
    seen: set[Path] = set()
    for path in paths:
        if path.is_dir():
            candidates = sorted(p for p in path.rglob("*") if p.is_file() and p.suffix.lower() == ".bib")
        elif path.is_file():
            if path.suffix.lower() != ".bib":
                raise BibParseError(f"{path} is not a .bib file")
            candidates = [path]
        else:
            raise BibParseError(f"{path} does not exist")
        for candidate in candidates:
            resolved = candidate.resolve()
            if resolved not in seen:
                seen.add(resolved)
                found.append(candidate)
    return found


# ============================================================================
# DOI Lookup
# ============================================================================


def extract_doi(text: str) -> str | None:
    """Return the DOI if ``text`` is a bare DOI, ``doi:`` string, or doi.org URL."""
    match = _DOI_PATTERN.match(text.strip())
    return match.group(1) if match else None


def fetch_bibtex_for_doi(doi: str, *, timeout: float = DOI_REQUEST_TIMEOUT) -> str:
    """Fetch a BibTeX record for ``doi`` via doi.org content negotiation."""
    try:
        response = httpx.get(
            f"{DOI_RESOLVER_URL}{doi}",
            headers={"Accept": "application/x-bibtex", "User-Agent": DOI_USER_AGENT},
            follow_redirects=True,
            timeout=timeout,
        )
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise BibWriteError(f"DOI {doi} lookup returned HTTP {exc.response.status_code}") from exc
    except httpx.HTTPError as exc:
        raise BibWriteError(f"DOI {doi} lookup failed: {exc}") from exc
    text = response.text.strip()
    if "@" not in text:
        raise BibWriteError(f"DOI {doi} did not resolve to a BibTeX record")
    return text


# ============================================================================
# Repository
# ============================================================================


class BibRepository:
    """Record repository backed by one or more .bib files.

    New entries are appended to the first file.
    """

    def __init__(
        self,
        paths: Sequence[Path],
        *,
        doi_timeout: float = DOI_REQUEST_TIMEOUT,
        fetch_doi: Callable[..., str] = fetch_bibtex_for_doi,
    ) -> None:
        if not paths:
            raise ValueError("BibRepository needs at least one file")
        self.paths = list(paths)
        self.doi_timeout = doi_timeout
        self._fetch_doi = fetch_doi
        self._citekeys: set[str] = set()

    @property
    def main_file(self) -> Path:
        return self.paths[0]

    def load(self) -> list[Record]:
        records: list[Record] = []
        seen: set[str] = set()
        for path in self.paths:
            try:
                text = path.read_text(encoding="utf-8", errors="replace")
            except OSError as exc:
                raise BibParseError(f"cannot read {path}: {exc.strerror or exc}") from exc
            for record in parse_bib_text(text, source=path):
                if record.citekey in seen:
                    logger.warning("Duplicate citekey %s in %s, keeping the first", record.citekey, path)
                    continue
                seen.add(record.citekey)
                records.append(record)
        self._citekeys = seen
        logger.info("Loaded %d records from %d file(s)", len(records), len(self.paths))
        return records

    def read_text(self, path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            raise BibParseError(f"cannot read {path}: {exc.strerror or exc}") from exc

    def append(self, raw: str) -> str:
        """Append one BibTeX entry, or the entry a DOI resolves to.

        Returns the new citekey.
        """
        text = raw.strip()
        if not text:
            raise BibWriteError("nothing to add")
        doi = extract_doi(text)
        if doi is not None:
            logger.debug("Resolving DOI %s", doi)
            text = self._fetch_doi(doi, timeout=self.doi_timeout).strip()

        try:
            records = parse_bib_text(text)
        except BibParseError as exc:
            raise BibWriteError(f"not a valid BibTeX entry ({exc})") from exc
        if len(records) != 1:
            raise BibWriteError(f"expected exactly one entry, found {len(records)}")
        citekey = records[0].citekey
        if citekey in self._citekeys:
            raise BibWriteError(f"citekey {citekey} already exists")

        try:
            with self.main_file.open("a", encoding="utf-8") as handle:
                handle.write(f"\n{text}\n")
        except OSError as exc:
            raise BibWriteError(f"cannot write {self.main_file}: {exc.strerror or exc}") from exc
        self._citekeys.add(citekey)
        logger.info("Appended %s to %s", citekey, self.main_file)
        return citekey


__all__ = [
    "BibParseError",
    "BibRepository",
    "BibWriteError",
    "RepositoryError",
    "clean_field",
    "collect_bib_files",
    "entry_to_record",
    "extract_doi",
    "fetch_bibtex_for_doi",
    "find_citekey_line",
    "format_last_names",
    "normalize_weblink",
    "parse_bib_text",
    "resolve_file_field",
]
