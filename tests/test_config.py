"""Targeted tests for config loading hardening."""

from __future__ import annotations

import json

import pytest

from bib_browser.config import CONFIG_FILENAME, _dict_to_config, get_config_path, load_config
from bib_browser.models import DOI_TIMEOUT_DEFAULT, DOI_TIMEOUT_LIMIT, UserConfig


def test_config_path_uses_app_name() -> None:
    path = get_config_path()
    assert path.name == CONFIG_FILENAME
    assert path.parent.name == "bib-browser"


def test_missing_file_gives_defaults(tmp_path) -> None:
    assert load_config(tmp_path / "absent.json") == UserConfig()


def test_valid_file_is_read(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "bibfiles": ["~/refs.bib", "  ", 3],
                "editor": "nvim",
                "file_opener": "zathura {path}",
                "link_opener": "firefox",
                "doi_timeout_seconds": 30,
            }
        ),
        encoding="utf-8",
    )
    config = load_config(path)
    assert config.bibfiles == ["~/refs.bib"]
    assert config.editor == "nvim"
    assert config.file_opener == "zathura {path}"
    assert config.link_opener == "firefox"
    assert config.doi_timeout_seconds == 30


@pytest.mark.parametrize("content", ["{not json", "[1, 2]", '"text"'])
def test_corrupt_file_gives_defaults(tmp_path, content, caplog) -> None:
    path = tmp_path / "config.json"
    path.write_text(content, encoding="utf-8")
    with caplog.at_level("WARNING", logger="bib_browser.config"):
        assert load_config(path) == UserConfig()
    assert caplog.records


def test_single_bibfile_string_is_accepted() -> None:
    assert _dict_to_config({"bibfiles": "refs.bib"}).bibfiles == ["refs.bib"]


def test_wrong_types_fall_back() -> None:
    config = _dict_to_config({"bibfiles": {"a": 1}, "editor": 5, "link_opener": None})
    assert config == UserConfig()


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (0, 1),
        (-4, 1),
        (10_000, DOI_TIMEOUT_LIMIT),
        ("20", DOI_TIMEOUT_DEFAULT),
        (True, DOI_TIMEOUT_DEFAULT),
        (45, 45),
    ],
)
def test_doi_timeout_is_clamped(value, expected) -> None:
    assert _dict_to_config({"doi_timeout_seconds": value}).doi_timeout_seconds == expected
