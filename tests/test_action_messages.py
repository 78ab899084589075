"""Tests for popup and CLI message copy."""

from __future__ import annotations

from bib_browser.action_messages import (
    build_actionable_error,
    build_actionable_success,
    build_missing_citekey_notice,
    build_no_bibliography_error,
)


def test_actionable_error_has_three_parts() -> None:
    message = build_actionable_error(
        "copy the citekey", why="no clipboard tool succeeded", next_step="install xclip"
    )
    assert message.splitlines() == [
        "Could not copy the citekey.",
        "Why: no clipboard tool succeeded.",
        "Next step: install xclip.",
    ]


def test_actionable_error_without_reason() -> None:
    message = build_actionable_error("run the editor ", next_step="set $EDITOR.")
    assert message == "Could not run the editor.\nNext step: set $EDITOR."


def test_reason_whitespace_is_collapsed() -> None:
    message = build_actionable_error("add the entry", why="line 1\n  broken", next_step="retry")
    assert "Why: line 1 broken." in message


def test_success_keeps_existing_punctuation() -> None:
    assert build_actionable_success("Done!") == "Done!"
    assert build_actionable_success("New entry added: x1") == "New entry added: x1."


def test_missing_citekey_notice() -> None:
    notice = build_missing_citekey_notice("turing1950", "/tmp/library.bib")
    assert notice == (
        "Opened /tmp/library.bib at line 1.\nNo line containing {turing1950, was found."
    )


def test_no_bibliography_error() -> None:
    message = build_no_bibliography_error("nothing given", "pass a .bib file")
    assert message.startswith("Could not find a bibliography.")
