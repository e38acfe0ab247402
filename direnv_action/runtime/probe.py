"""Locate executables on the search path."""

from __future__ import annotations

import shutil
from typing import Optional

from .host import HostEnvironment
from .models import MissingDependency, StepOutcome


def _which(name: str, host: HostEnvironment) -> Optional[str]:
    """Look *name* up on PATH, treating lookup errors as not found."""
    try:
        return shutil.which(name)
    except OSError as exc:
        host.warning(f"Could not look up {name} on PATH: {exc}")
        return None


def probe_binary(name: str, *, required: bool, host: HostEnvironment) -> StepOutcome[Optional[str]]:
    """Search PATH for *name*.

    Returns a successful outcome holding the binary path, or ``None`` when the
    binary is absent and not required. When it is required and absent the
    outcome carries a ``MissingDependency`` failure.
    """
    path = _which(name, host)
    if path:
        host.info(f"Found {name} at {path}")
        return StepOutcome.success(path)
    if required:
        return StepOutcome.failed(MissingDependency.not_on_path(name))
    host.info(f"{name} binary is not installed.")
    return StepOutcome.success(None)


def find_binary(name: str, *, required: bool, host: HostEnvironment) -> Optional[str]:
    """Raising variant of ``probe_binary``.

    Raises:
        MissingDependency: If *required* is set and the binary is absent
    """
    return probe_binary(name, required=required, host=host).unwrap()


__all__ = ["probe_binary", "find_binary"]
