"""CI host integration: log output and job-environment primitives.

The action talks to the surrounding CI job only through a ``HostEnvironment``.
``GitHubActionsHost`` implements the GitHub Actions contract (workflow
commands on stdout plus the ``GITHUB_ENV`` and ``GITHUB_PATH`` files).
``InMemoryHost`` records everything instead, for tests and local runs.
"""

from __future__ import annotations

import os
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Protocol, TextIO

GITHUB_ENV_VAR = "GITHUB_ENV"
GITHUB_PATH_VAR = "GITHUB_PATH"
DELIMITER_PREFIX = "ghadelimiter_"


class HostEnvironment(Protocol):
    """Logging and environment primitives provided by the CI host."""

    def info(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def group(self, title: str): ...

    def export_variable(self, name: str, value: str) -> None: ...

    def add_path(self, entry: str) -> None: ...

    def set_failed(self, message: str) -> None: ...


def escape_data(message: str) -> str:
    """Escape text so it survives inside a workflow command."""
    return message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def format_file_command(name: str, value: str, delimiter: str) -> str:
    """Build a heredoc-style record for the ``GITHUB_ENV`` file.

    Raises:
        ValueError: If the name or value contains the delimiter
    """
    if delimiter in name:
        raise ValueError(f"Unexpected input: name should not contain the delimiter {delimiter!r}")
    if delimiter in value:
        raise ValueError(f"Unexpected input: value should not contain the delimiter {delimiter!r}")
    return f"{name}<<{delimiter}\n{value}\n{delimiter}\n"


def _prepend_path(entry: str, current: Optional[str]) -> str:
    """Put *entry* first in a PATH string unless it is already present."""
    if not current:
        return entry
    if entry in current.split(os.pathsep):
        return current
    return f"{entry}{os.pathsep}{current}"


class GitHubActionsHost:
    """Host implementation for GitHub Actions runners."""

    def __init__(
        self,
        *,
        environ: Optional[dict[str, str]] = None,
        stream: Optional[TextIO] = None,
    ) -> None:
        self._environ = environ if environ is not None else os.environ
        self._stream = stream

    def _write(self, line: str) -> None:
        print(line, file=self._stream, flush=True)

    def _file_for(self, variable: str) -> Optional[Path]:
        raw = self._environ.get(variable)
        if not raw:
            return None
        return Path(raw)

    def info(self, message: str) -> None:
        self._write(message)

    def warning(self, message: str) -> None:
        self._write(f"::warning::{escape_data(message)}")

    def error(self, message: str) -> None:
        self._write(f"::error::{escape_data(message)}")

    @contextmanager
    def group(self, title: str) -> Iterator[None]:
        """Fold log output produced inside the block under *title*."""
        self._write(f"::group::{escape_data(title)}")
        try:
            yield
        finally:
            self._write("::endgroup::")

    def export_variable(self, name: str, value: str) -> None:
        """Set *name* for this process and for later steps of the job."""
        self._environ[name] = value
        env_file = self._file_for(GITHUB_ENV_VAR)
        if env_file is None:
            self.info(f"[info] {GITHUB_ENV_VAR} is not set; {name} is only exported to this process.")
            return
        record = format_file_command(name, value, f"{DELIMITER_PREFIX}{uuid.uuid4()}")
        with env_file.open("a", encoding="utf-8") as handle:
            handle.write(record)

    def add_path(self, entry: str) -> None:
        """Add *entry* to the search path for this process and later steps."""
        path_file = self._file_for(GITHUB_PATH_VAR)
        if path_file is not None:
            with path_file.open("a", encoding="utf-8") as handle:
                handle.write(f"{entry}\n")
        else:
            self.info(f"[info] {GITHUB_PATH_VAR} is not set; PATH is only updated for this process.")
        self._environ["PATH"] = _prepend_path(entry, self._environ.get("PATH"))

    def set_failed(self, message: str) -> None:
        """Report the run's terminal failure."""
        self.error(message)


class InMemoryHost:
    """Host that records log lines and keeps its own environment mapping."""

    def __init__(self, environ: Optional[dict[str, str]] = None) -> None:
        self.environ: dict[str, str] = dict(environ or {})
        self.calls: list[tuple[str, str, str]] = []
        self.messages: list[tuple[str, str]] = []
        self.failure: Optional[str] = None

    def info(self, message: str) -> None:
        self.messages.append(("info", message))

    def warning(self, message: str) -> None:
        self.messages.append(("warning", message))

    def error(self, message: str) -> None:
        self.messages.append(("error", message))

    @contextmanager
    def group(self, title: str) -> Iterator[None]:
        self.messages.append(("group", title))
        try:
            yield
        finally:
            self.messages.append(("endgroup", title))

    def export_variable(self, name: str, value: str) -> None:
        self.calls.append(("set", name, value))
        self.environ[name] = value

    def add_path(self, entry: str) -> None:
        self.calls.append(("append", "PATH", entry))
        self.environ["PATH"] = _prepend_path(entry, self.environ.get("PATH"))

    def set_failed(self, message: str) -> None:
        self.failure = message
        self.error(message)


__all__ = [
    "GITHUB_ENV_VAR",
    "GITHUB_PATH_VAR",
    "HostEnvironment",
    "GitHubActionsHost",
    "InMemoryHost",
    "escape_data",
    "format_file_command",
]
