"""Turn a direnv export into job environment changes and apply them."""

from __future__ import annotations

import os
from typing import Mapping, Optional

from .host import HostEnvironment
from .models import (
    OPERATION_APPEND,
    OPERATION_SET,
    EnvironmentDelta,
    EnvironmentUpdateFailed,
    EnvOperation,
)

PATH_KEY = "PATH"


def host_is_case_insensitive() -> bool:
    """Return True where environment variable names ignore letter case."""
    return os.name == "nt"


def find_case_aliases(export: Mapping[str, str]) -> list[list[str]]:
    """Group keys that differ only by letter case.

    Only groups with more than one member are returned, sorted for stable
    output.
    """
    groups: dict[str, list[str]] = {}
    for key in export:
        groups.setdefault(key.upper(), []).append(key)
    return [sorted(keys) for _, keys in sorted(groups.items()) if len(keys) > 1]


def build_environment_delta(
    export: Mapping[str, str],
    *,
    host: Optional[HostEnvironment] = None,
    case_insensitive: Optional[bool] = None,
) -> EnvironmentDelta:
    """Map each exported variable onto a set or append operation.

    ``PATH`` (exact case) is appended to the search path; every other key
    overwrites the job variable of the same name. On case-insensitive hosts,
    keys that alias each other are reported but no winner is chosen.
    """
    if case_insensitive is None:
        case_insensitive = host_is_case_insensitive()
    if case_insensitive and host is not None:
        for aliases in find_case_aliases(export):
            host.warning(
                "Variables "
                + ", ".join(aliases)
                + " refer to the same name on this platform; the final value is undefined."
            )

    operations: list[EnvOperation] = []
    for name, value in export.items():
        if name == PATH_KEY:
            operations.append(EnvOperation(OPERATION_APPEND, name, value))
        else:
            operations.append(EnvOperation(OPERATION_SET, name, value))
    return EnvironmentDelta(tuple(operations))


def apply_environment_delta(delta: EnvironmentDelta, host: HostEnvironment) -> None:
    """Execute each operation against *host*.

    Raises:
        EnvironmentUpdateFailed: If the host cannot persist an operation
    """
    for op in delta:
        try:
            if op.operation == OPERATION_APPEND:
                host.info("Detected PATH in .envrc, appending to PATH...")
                host.add_path(op.value)
            else:
                host.export_variable(op.key, op.value)
        except OSError as exc:
            raise EnvironmentUpdateFailed.host_write(key=op.key, reason=str(exc)) from exc


def set_environment_variables(export: Mapping[str, str], host: HostEnvironment) -> EnvironmentDelta:
    """Build the delta for *export*, apply it, and return what was applied."""
    delta = build_environment_delta(export, host=host)
    apply_environment_delta(delta, host)
    return delta


__all__ = [
    "PATH_KEY",
    "host_is_case_insensitive",
    "find_case_aliases",
    "build_environment_delta",
    "apply_environment_delta",
    "set_environment_variables",
]
