"""Platform capability predicates.

A capability answers one question: does this host already ship a given tool?
The workflow consults them to skip presence checks that cannot fail.
"""

from __future__ import annotations

import platform
from typing import Callable, Iterable, Optional, Protocol

from .config import NIX_TOOL

OsReleaseReader = Callable[[], dict[str, str]]


class PlatformCapability(Protocol):
    """Predicate describing a tool bundled by the current platform."""

    name: str

    def bundles(self, tool: str) -> bool: ...


def read_os_release() -> dict[str, str]:
    """Return the parsed os-release file, or an empty mapping off Linux."""
    try:
        return platform.freedesktop_os_release()
    except OSError:
        return {}


class NixOSCapability:
    """NixOS always has Nix on the search path."""

    name = "nixos"

    def __init__(self, reader: Optional[OsReleaseReader] = None) -> None:
        self._reader = reader or read_os_release

    def bundles(self, tool: str) -> bool:
        if tool != NIX_TOOL:
            return False
        return self._reader().get("ID") == "nixos"


DEFAULT_CAPABILITIES: tuple[PlatformCapability, ...] = (NixOSCapability(),)


def bundling_platform(
    tool: str, capabilities: Iterable[PlatformCapability] = DEFAULT_CAPABILITIES
) -> Optional[str]:
    """Return the name of the first capability that bundles *tool*."""
    for capability in capabilities:
        if capability.bundles(tool):
            return capability.name
    return None


__all__ = [
    "PlatformCapability",
    "NixOSCapability",
    "DEFAULT_CAPABILITIES",
    "read_os_release",
    "bundling_platform",
]
