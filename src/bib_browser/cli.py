"""CLI/bootstrap helpers for the bibliography browser."""

from __future__ import annotations

import argparse
import logging
import logging.handlers
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir

from bib_browser import __version__
from bib_browser.action_messages import build_actionable_error, build_no_bibliography_error
from bib_browser.config import load_config
from bib_browser.models import CONFIG_APP_NAME, Record, UserConfig
from bib_browser.parsing import BibParseError, BibRepository, RepositoryError, collect_bib_files

logger = logging.getLogger(__name__)

ResolveRecordsResult = tuple[list[Record], BibRepository] | int


def _resolve_sources(args: argparse.Namespace, config: UserConfig) -> list[Path] | int:
    """Bib files from the command line, falling back to config.json."""
    raw_paths = [Path(p) for p in args.paths] or [Path(p) for p in config.bibfiles]
    if not raw_paths:
        print(
            build_no_bibliography_error(
                "no .bib file was given and config.json lists no bibfiles",
                "run bib-browser path/to/library.bib",
            ),
            file=sys.stderr,
        )
        return 1
    try:
        files = collect_bib_files(raw_paths)
    except BibParseError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    if not files:
        print(
            build_no_bibliography_error(
                "the given directories contain no .bib files",
                "pass a .bib file directly",
            ),
            file=sys.stderr,
        )
        return 1
    return files


def _resolve_records(args: argparse.Namespace, config: UserConfig) -> ResolveRecordsResult:
    """Load every record from the resolved sources. Returns records or exit code."""
    files = _resolve_sources(args, config)
    if isinstance(files, int):
        return files
    repository = BibRepository(files, doi_timeout=config.doi_timeout_seconds)
    try:
        records = repository.load()
    except RepositoryError as e:
        print(
            build_actionable_error(
                "load the bibliography",
                why=str(e),
                next_step="fix the reported entry and start again",
            ),
            file=sys.stderr,
        )
        return 1
    return (records, repository)


def _configure_logging(debug: bool) -> None:
    """Configure logging. When debug=True, logs to file at DEBUG level."""
    if not debug:
        # Default: suppress all logging (TUI captures stderr)
        logging.disable(logging.CRITICAL)
        return

    log_dir = Path(user_config_dir(CONFIG_APP_NAME))
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "debug.log"

    handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    logging.root.addHandler(handler)
    logging.root.setLevel(logging.DEBUG)


def _validate_interactive_tty() -> bool:
    """Return True when stdin/stdout are interactive terminals."""
    return bool(sys.stdin.isatty() and sys.stdout.isatty())


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bib-browser",
        description="Browse BibTeX bibliographies in a TUI",
    )
    parser.add_argument(
        "paths",
        nargs="*",
        help=".bib files or directories searched recursively (default: bibfiles from config)",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=None,
        help="Path to an alternative config.json",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging to file (~/.config/bib-browser/debug.log)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def main(
    argv: list[str] | None = None,
    *,
    load_config_fn: Callable[[Path | None], UserConfig] = load_config,
    resolve_records_fn: Callable[
        [argparse.Namespace, UserConfig], ResolveRecordsResult
    ] = _resolve_records,
    configure_logging_fn: Callable[[bool], None] = _configure_logging,
    validate_interactive_tty_fn: Callable[[], bool] = _validate_interactive_tty,
    app_factory: Callable[..., Any] | None = None,
) -> int:
    """Main entry point. Returns exit code."""
    args = _build_parser().parse_args(argv)

    configure_logging_fn(args.debug)
    logger.debug("bib-browser starting, cwd=%s", Path.cwd())

    config = load_config_fn(args.config)

    result = resolve_records_fn(args, config)
    if isinstance(result, int):
        return result
    records, repository = result

    if not validate_interactive_tty_fn():
        print(
            build_actionable_error(
                "start the browser",
                why="bib-browser needs an interactive TTY on stdin and stdout",
                next_step="run it directly in a terminal, or see --help",
            ),
            file=sys.stderr,
        )
        return 2

    if app_factory is None:
        from bib_browser.app import BibBrowser as _BibBrowser

        app_factory = _BibBrowser

    app = app_factory(records, config=config, repository=repository)
    app.run()
    return 0


__all__ = [
    "_build_parser",
    "_configure_logging",
    "_resolve_records",
    "_resolve_sources",
    "_validate_interactive_tty",
    "main",
]
