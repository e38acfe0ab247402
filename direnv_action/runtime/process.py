"""Blocking subprocess helpers for the direnv action runtime."""

from __future__ import annotations

import subprocess
import sys
import threading
from typing import Callable, Iterable

from .models import CommandResult

CommandRunner = Callable[..., CommandResult]

EXIT_NOT_EXECUTABLE = 126
EXIT_NOT_FOUND = 127


def stream_pipe(pipe, collector: list[str], target=None) -> None:
    """Collect text from a pipe, optionally forwarding each line to *target*."""
    try:
        for line in iter(pipe.readline, ""):
            collector.append(line)
            if target is not None:
                target.write(line)
                target.flush()
    finally:
        pipe.close()


def _run_command_buffered(args: list[str]) -> CommandResult:
    """Run *args* and hand back everything it wrote, unsplit."""
    process = subprocess.run(args, stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True, check=False)
    return CommandResult(returncode=process.returncode, stdout=process.stdout, stderr=process.stderr)


def _run_command_streaming(args: list[str]) -> CommandResult:
    """Echo the child's output into the job log while keeping a copy."""
    stdout_lines: list[str] = []
    stderr_lines: list[str] = []
    with subprocess.Popen(
        args, stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True, bufsize=1
    ) as process:
        # one reader thread per pipe
        readers = [
            threading.Thread(target=stream_pipe, args=(pipe, lines, target), daemon=True)
            for pipe, lines, target in (
                (process.stdout, stdout_lines, sys.stdout),
                (process.stderr, stderr_lines, sys.stderr),
            )
            if pipe is not None
        ]
        for reader in readers:
            reader.start()
        for reader in readers:
            reader.join()
        returncode = process.wait()
    return CommandResult(returncode=returncode, stdout="".join(stdout_lines), stderr="".join(stderr_lines))


def run_command(args: Iterable[str], *, live: bool = False) -> CommandResult:
    """Run a tool to completion in the current directory and environment.

    There is no timeout. A non-zero exit is returned, not raised; callers
    decide which failure it means.

    Raises:
        OSError: If the executable cannot be started
    """
    command_args = list(args)
    if live:
        return _run_command_streaming(command_args)
    return _run_command_buffered(command_args)


def os_error_exit_code(exc: OSError) -> int:
    """Shell-style exit status for a child that could not be started."""
    if isinstance(exc, FileNotFoundError):
        return EXIT_NOT_FOUND
    if isinstance(exc, PermissionError):
        return EXIT_NOT_EXECUTABLE
    return 1


def format_command(args: Iterable[str]) -> str:
    """Render a command for log lines and error messages."""
    return " ".join(args)


__all__ = [
    "CommandRunner",
    "EXIT_NOT_EXECUTABLE",
    "EXIT_NOT_FOUND",
    "run_command",
    "stream_pipe",
    "os_error_exit_code",
    "format_command",
]
