"""Collaborator interfaces + default side-effect adapter for the engine."""

from __future__ import annotations

import contextlib
import logging
import os
import platform
import subprocess
from collections.abc import Callable, Mapping
from contextlib import AbstractContextManager
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from bib_browser.io_actions import (
    build_editor_args,
    build_viewer_args,
    get_clipboard_command_plan,
    get_default_opener_command,
    resolve_editor_command,
)
from bib_browser.models import Record, UserConfig

logger = logging.getLogger(__name__)

SUBPROCESS_TIMEOUT = 5

SuspendFactory = Callable[[], AbstractContextManager[Any]]


class PortError(Exception):
    """An external program could not be launched or reported failure."""


@runtime_checkable
class RecordRepository(Protocol):
    """Interface for loading and extending the record collection."""

    def load(self) -> list[Record]:
        """Load every record; raises RepositoryError on failure."""
        ...

    def append(self, raw: str) -> str:
        """Append one entry (BibTeX or DOI) and return its citekey."""
        ...

    def read_text(self, path: Path) -> str:
        """Return the current text of a source file."""
        ...


@runtime_checkable
class SideEffectPorts(Protocol):
    """Interface for the external programs the browser launches."""

    def open_file(self, path: Path) -> None:
        """Open a local file with the configured or default application."""
        ...

    def open_link(self, url: str) -> None:
        """Open a URL with the configured or default application."""
        ...

    def copy_to_clipboard(self, text: str) -> None:
        """Place text on the system clipboard."""
        ...

    def launch_editor(self, path: Path, line_hint: int) -> int:
        """Run the editor in the foreground and return its exit status."""
        ...


class DefaultSideEffectPorts:
    """Default adapter that shells out to platform tools.

    ``suspend`` wraps the editor run so the display surface can hand the
    terminal over while the editor is in the foreground.
    """

    def __init__(
        self,
        config: UserConfig | None = None,
        *,
        suspend: SuspendFactory | None = None,
        system: str | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._config = config or UserConfig()
        self._suspend: SuspendFactory = suspend or contextlib.nullcontext
        self._system = system or platform.system()
        self._environ = environ if environ is not None else os.environ

    def _opener_args(self, configured: str, target: str) -> list[str]:
        if configured.strip():
            try:
                return build_viewer_args(configured, target)
            except ValueError as e:
                raise PortError(str(e)) from e
        base = get_default_opener_command(self._system)
        if base is None:
            raise PortError(f"no default opener known for platform {self._system}")
        return [*base, target]

    def _spawn(self, args: list[str]) -> None:
        try:
            # User-configured opener execution is an explicit feature.
            subprocess.Popen(  # nosec B603
                args,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as e:
            logger.warning("Failed to launch %s: %s", args[0], e)
            raise PortError(f"could not launch {args[0]}: {e.strerror or e}") from e

    def open_file(self, path: Path) -> None:
        if not path.exists():
            raise PortError(f"file not found: {path}")
        self._spawn(self._opener_args(self._config.file_opener, str(path)))

    def open_link(self, url: str) -> None:
        self._spawn(self._opener_args(self._config.link_opener, url))

    def copy_to_clipboard(self, text: str) -> None:
        """Try each clipboard tool for the platform until one succeeds."""
        plan = get_clipboard_command_plan(self._system)
        if plan is None:
            raise PortError(f"clipboard is not supported on {self._system}")
        commands, encoding = plan
        payload = text.encode(encoding)
        last_error: Exception | None = None
        for command in commands:
            try:
                subprocess.run(  # nosec B603
                    command,
                    input=payload,
                    check=True,
                    shell=False,
                    timeout=SUBPROCESS_TIMEOUT,
                )
                return
            except (
                FileNotFoundError,
                subprocess.CalledProcessError,
                subprocess.TimeoutExpired,
                OSError,
            ) as e:
                logger.debug("Clipboard command %s failed: %s", command[0], e)
                last_error = e
        logger.warning("Clipboard copy failed: %s", last_error)
        raise PortError(f"no clipboard tool succeeded ({last_error})")

    def launch_editor(self, path: Path, line_hint: int) -> int:
        editor = resolve_editor_command(self._config.editor, self._environ)
        try:
            args = build_editor_args(editor, path, line_hint)
        except ValueError as e:
            raise PortError(str(e)) from e
        logger.debug("Launching editor: %s", args)
        try:
            with self._suspend():
                completed = subprocess.run(args, check=False)  # nosec B603
        except OSError as e:
            logger.warning("Failed to launch editor %s: %s", args[0], e)
            raise PortError(f"could not launch editor {args[0]}: {e.strerror or e}") from e
        if completed.returncode != 0:
            raise PortError(f"editor {args[0]} exited with status {completed.returncode}")
        return completed.returncode


__all__ = [
    "DefaultSideEffectPorts",
    "PortError",
    "RecordRepository",
    "SideEffectPorts",
    "SuspendFactory",
]
