"""Authorize and export a project's .envrc with direnv."""

from __future__ import annotations

import json
from typing import Optional

from .config import DIRENV_TOOL
from .host import HostEnvironment
from .models import (
    AuthorizationFailed,
    ExportFailed,
    ExportParseFailed,
    StepOutcome,
)
from .process import CommandRunner, format_command, os_error_exit_code, run_command

ALLOW_COMMAND: tuple[str, ...] = (DIRENV_TOOL, "allow")
EXPORT_COMMAND: tuple[str, ...] = (DIRENV_TOOL, "export", "json")

EnvrcExport = dict[str, str]


def allow_envrc(
    *,
    host: HostEnvironment,
    runner: Optional[CommandRunner] = None,
) -> StepOutcome[None]:
    """Mark the .envrc in the working directory as trusted."""
    run = runner or run_command
    cmd = list(ALLOW_COMMAND)
    cmd_str = format_command(cmd)
    host.info("Allowing .envrc...")
    try:
        result = run(cmd, live=True)
    except OSError as exc:
        return StepOutcome.failed(
            AuthorizationFailed.launch_failed(
                command=cmd_str, exit_code=os_error_exit_code(exc), reason=str(exc)
            )
        )
    if not result.ok:
        return StepOutcome.failed(
            AuthorizationFailed.exit_status(command=cmd_str, exit_code=result.returncode, output=result.stderr)
        )
    return StepOutcome.success()


def parse_envrc_export(raw_output: str, *, host: Optional[HostEnvironment] = None) -> EnvrcExport:
    """Decode ``direnv export json`` output into a name to value mapping.

    ``null`` values mark variables the .envrc unsets; they are dropped because
    the host has no primitive to unset a job variable.

    Raises:
        ExportParseFailed: If the text is not a JSON object of strings
    """
    try:
        decoded = json.loads(raw_output)
    except json.JSONDecodeError as exc:
        raise ExportParseFailed.malformed(raw_output=raw_output, reason=str(exc)) from exc
    if not isinstance(decoded, dict):
        raise ExportParseFailed.not_an_object(raw_output=raw_output, received=type(decoded).__name__)

    export: EnvrcExport = {}
    for key, value in decoded.items():
        if value is None:
            if host is not None:
                host.warning(f"{key} is unset by .envrc; unsetting job variables is not supported.")
            continue
        if not isinstance(value, str):
            raise ExportParseFailed.invalid_value(
                raw_output=raw_output, key=key, received=type(value).__name__
            )
        export[key] = value
    return export


def export_envrc(
    *,
    host: HostEnvironment,
    runner: Optional[CommandRunner] = None,
) -> StepOutcome[EnvrcExport]:
    """Run ``direnv export json`` and parse everything it wrote to stdout."""
    run = runner or run_command
    cmd = list(EXPORT_COMMAND)
    cmd_str = format_command(cmd)
    host.info("Exporting envrc...")
    try:
        result = run(cmd)
    except OSError as exc:
        return StepOutcome.failed(
            ExportFailed.launch_failed(command=cmd_str, exit_code=os_error_exit_code(exc), reason=str(exc))
        )
    # direnv reports what it loaded on stderr
    for line in result.stderr.splitlines():
        if line.strip():
            host.info(line)
    if not result.ok:
        return StepOutcome.failed(
            ExportFailed.exit_status(command=cmd_str, exit_code=result.returncode, output=result.stderr)
        )
    try:
        export = parse_envrc_export(result.stdout, host=host)
    except ExportParseFailed as exc:
        return StepOutcome.failed(exc)
    return StepOutcome.success(export)


__all__ = [
    "ALLOW_COMMAND",
    "EXPORT_COMMAND",
    "EnvrcExport",
    "allow_envrc",
    "parse_envrc_export",
    "export_envrc",
]
