"""Command-line builders for opener, clipboard, and editor subprocesses."""

from __future__ import annotations

import os
import shlex
from collections.abc import Mapping
from pathlib import Path

DEFAULT_EDITOR = "vi"


def _split_command(command: str) -> list[str]:
    args = shlex.split(command, posix=os.name != "nt")
    if os.name == "nt":
        # Windows split keeps wrapping quotes when posix=False.
        args = [
            arg[1:-1] if len(arg) >= 2 and arg.startswith('"') and arg.endswith('"') else arg
            for arg in args
        ]
    return args


def build_viewer_args(viewer_cmd: str, url_or_path: str) -> list[str]:
    """Build subprocess argument list for a configured external opener command."""
    args = _split_command(viewer_cmd)
    if not args:
        raise ValueError("Viewer command is empty")
    if "{url}" in viewer_cmd or "{path}" in viewer_cmd:
        return [arg.replace("{url}", url_or_path).replace("{path}", url_or_path) for arg in args]
    return [*args, url_or_path]


def get_default_opener_command(system: str) -> list[str] | None:
    """Return the platform's "open with default application" command."""
    if system == "Darwin":
        return ["open"]
    if system == "Linux" or system.endswith("BSD"):
        return ["xdg-open"]
    if system == "Windows":
        return ["cmd", "/c", "start", ""]
    return None


def get_clipboard_command_plan(system: str) -> tuple[list[list[str]], str] | None:
    """Return clipboard command candidates and input encoding for a platform."""
    if system == "Darwin":
        return ([["pbcopy"]], "utf-8")
    if system == "Linux":
        return (
            [
                ["wl-copy"],
                ["xclip", "-selection", "clipboard"],
                ["xsel", "--clipboard", "--input"],
            ],
            "utf-8",
        )
    if system == "Windows":
        return ([["clip"]], "utf-16")
    return None


def resolve_editor_command(configured: str, environ: Mapping[str, str]) -> str:
    """Pick the editor: config value, then $VISUAL, then $EDITOR, then vi."""
    for candidate in (configured, environ.get("VISUAL", ""), environ.get("EDITOR", "")):
        if candidate.strip():
            return candidate.strip()
    return DEFAULT_EDITOR


def build_editor_args(editor_cmd: str, path: Path, line: int) -> list[str]:
    """Build ``editor +LINE path`` for jumping straight to an entry."""
    args = _split_command(editor_cmd)
    if not args:
        raise ValueError("Editor command is empty")
    return [*args, f"+{max(1, line)}", str(path)]


__all__ = [
    "DEFAULT_EDITOR",
    "build_editor_args",
    "build_viewer_args",
    "get_clipboard_command_plan",
    "get_default_opener_command",
    "resolve_editor_command",
]
