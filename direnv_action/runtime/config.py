"""Configuration helpers and constants for the direnv action."""

from __future__ import annotations

import os
from typing import Mapping, Optional

from .models import InputValidationAbort, InstallConfig

NIX_TOOL = "nix"
DIRENV_TOOL = "direnv"
DEFAULT_NIX_CHANNEL = "nixpkgs"

USE_NIX_PROFILE_INPUT = "use_nix_profile"
NIX_CHANNEL_INPUT = "nix_channel"

TRUE_VALUES: tuple[str, ...] = ("true", "True", "TRUE")
FALSE_VALUES: tuple[str, ...] = ("false", "False", "FALSE")


def input_env_name(name: str) -> str:
    """Return the environment variable GitHub Actions uses for an input."""
    return f"INPUT_{name.replace(' ', '_').upper()}"


def get_input(name: str, environ: Optional[Mapping[str, str]] = None) -> str:
    """Return the trimmed value of an action input, or an empty string."""
    source = os.environ if environ is None else environ
    return source.get(input_env_name(name), "").strip()


def get_boolean_input(
    name: str,
    *,
    default: bool = False,
    environ: Optional[Mapping[str, str]] = None,
) -> bool:
    """Parse a boolean input using the YAML 1.2 core schema spellings.

    Raises:
        InputValidationAbort: If the value is not a recognised boolean
    """
    raw = get_input(name, environ)
    if not raw:
        return default
    if raw in TRUE_VALUES:
        return True
    if raw in FALSE_VALUES:
        return False
    raise InputValidationAbort.not_boolean(
        name=name, received=raw, allowed=TRUE_VALUES + FALSE_VALUES
    )


def resolve_channel(channel: Optional[str]) -> str:
    """Return the Nix channel to install from, defaulting to nixpkgs."""
    if channel is None:
        return DEFAULT_NIX_CHANNEL
    stripped = channel.strip()
    if not stripped:
        raise InputValidationAbort.empty_value(name=NIX_CHANNEL_INPUT)
    return stripped


def load_install_config(environ: Optional[Mapping[str, str]] = None) -> InstallConfig:
    """Read the install configuration from the action inputs."""
    use_nix_profile = get_boolean_input(USE_NIX_PROFILE_INPUT, environ=environ)
    channel = get_input(NIX_CHANNEL_INPUT, environ) or DEFAULT_NIX_CHANNEL
    return InstallConfig(use_nix_profile=use_nix_profile, channel=channel)


__all__ = [
    "NIX_TOOL",
    "DIRENV_TOOL",
    "DEFAULT_NIX_CHANNEL",
    "USE_NIX_PROFILE_INPUT",
    "NIX_CHANNEL_INPUT",
    "TRUE_VALUES",
    "FALSE_VALUES",
    "input_env_name",
    "get_input",
    "get_boolean_input",
    "resolve_channel",
    "load_install_config",
]
