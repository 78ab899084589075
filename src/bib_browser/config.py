"""Configuration loading for the bibliography browser."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir

from bib_browser.models import (
    CONFIG_APP_NAME,
    DOI_TIMEOUT_DEFAULT,
    DOI_TIMEOUT_LIMIT,
    UserConfig,
)

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.json"


def get_config_path() -> Path:
    """Get the path to the configuration file.

    Uses platformdirs for cross-platform config directory:
    - Linux: ~/.config/bib-browser/config.json
    - macOS: ~/Library/Application Support/bib-browser/config.json
    - Windows: %APPDATA%/bib-browser/config.json
    """
    return Path(user_config_dir(CONFIG_APP_NAME)) / CONFIG_FILENAME


def _safe_get(data: dict, key: str, default: Any, expected_type: type) -> Any:
    """Safely get a value from dict with type validation.

    Returns the default if key is missing or value has wrong type.
    """
    value = data.get(key, default)
    if not isinstance(value, expected_type):
        return default
    return value


def _coerce_doi_timeout(value: Any) -> int:
    # bool is an int subclass; reject it explicitly
    if not isinstance(value, int) or isinstance(value, bool):
        return DOI_TIMEOUT_DEFAULT
    return max(1, min(value, DOI_TIMEOUT_LIMIT))


def _parse_bibfiles(data: dict[str, Any]) -> list[str]:
    raw = data.get("bibfiles", [])
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, list):
        return []
    return [item for item in raw if isinstance(item, str) and item.strip()]


def _dict_to_config(data: dict[str, Any]) -> UserConfig:
    """Deserialize a dictionary to UserConfig with type validation."""
    return UserConfig(
        bibfiles=_parse_bibfiles(data),
        editor=_safe_get(data, "editor", "", str),
        file_opener=_safe_get(data, "file_opener", "", str),
        link_opener=_safe_get(data, "link_opener", "", str),
        doi_timeout_seconds=_coerce_doi_timeout(
            data.get("doi_timeout_seconds", DOI_TIMEOUT_DEFAULT)
        ),
    )


def load_config(path: Path | None = None) -> UserConfig:
    """Load configuration from disk.

    Returns default config if file doesn't exist or is corrupted.
    Logs specific errors to help diagnose config issues.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        return UserConfig()

    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        logger.warning("Config file has invalid JSON, using defaults: %s", e)
        return UserConfig()
    except OSError as e:
        logger.warning("Could not read config file, using defaults: %s", e)
        return UserConfig()

    if not isinstance(data, dict):
        logger.warning("Config file is not a JSON object, using defaults")
        return UserConfig()
    return _dict_to_config(data)


__all__ = [
    "CONFIG_FILENAME",
    "get_config_path",
    "load_config",
]
