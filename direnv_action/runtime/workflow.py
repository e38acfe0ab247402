"""direnv action orchestration."""

from __future__ import annotations

import argparse
from dataclasses import replace
from typing import Iterable, Mapping, Optional

from .config import DIRENV_TOOL, NIX_TOOL, load_install_config, resolve_channel
from .environment import apply_environment_delta, build_environment_delta
from .envrc import allow_envrc, export_envrc
from .host import GitHubActionsHost, HostEnvironment
from .installer import install_direnv
from .models import ActionAbort, ActionError, EnvironmentDelta, InstallConfig
from .platforms import DEFAULT_CAPABILITIES, PlatformCapability, bundling_platform
from .probe import find_binary
from .process import CommandRunner


def configure_runtime(
    args: argparse.Namespace, environ: Optional[Mapping[str, str]] = None
) -> InstallConfig:
    """Merge CLI arguments over the action inputs."""
    config = load_install_config(environ)
    if args.use_nix_profile is not None:
        config = replace(config, use_nix_profile=args.use_nix_profile)
    if args.nix_channel is not None:
        config = replace(config, channel=resolve_channel(args.nix_channel))
    return config


def ensure_nix(
    *,
    host: HostEnvironment,
    platform_capabilities: Iterable[PlatformCapability] = DEFAULT_CAPABILITIES,
) -> None:
    """Fail unless Nix is available, skipping the lookup on bundling platforms."""
    platform_name = bundling_platform(NIX_TOOL, platform_capabilities)
    if platform_name is not None:
        host.info(f"{platform_name} bundles {NIX_TOOL}; skipping the {NIX_TOOL} check.")
        return
    find_binary(NIX_TOOL, required=True, host=host)


def ensure_direnv(
    config: InstallConfig,
    *,
    host: HostEnvironment,
    runner: Optional[CommandRunner] = None,
) -> None:
    """Install direnv unless it is already on the search path."""
    found = find_binary(DIRENV_TOOL, required=False, host=host)
    if found:
        host.info(f"{DIRENV_TOOL} is already installed.")
        return
    install_direnv(config, host=host, runner=runner)


def run_action(
    config: InstallConfig,
    *,
    host: HostEnvironment,
    platform_capabilities: Iterable[PlatformCapability] = DEFAULT_CAPABILITIES,
    runner: Optional[CommandRunner] = None,
) -> EnvironmentDelta:
    """Run every step in order; the first failure raises and stops the run."""
    with host.group("Checking for nix"):
        ensure_nix(host=host, platform_capabilities=platform_capabilities)
    with host.group(f"Ensuring {DIRENV_TOOL} is installed"):
        ensure_direnv(config, host=host, runner=runner)
    with host.group("Allowing .envrc"):
        allow_envrc(host=host, runner=runner).unwrap()
    with host.group("Exporting .envrc"):
        export = export_envrc(host=host, runner=runner).unwrap()
    delta = build_environment_delta(export or {}, host=host)
    with host.group("Setting environment variables"):
        apply_environment_delta(delta, host)
        host.info(
            f"Exported {len(delta.exported_keys)} variable(s); "
            f"added {len(delta.path_entries)} PATH entry(s)."
        )
    return delta


def parse_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments for the action CLI."""
    parser = argparse.ArgumentParser(
        description="Install direnv via Nix and export a project's .envrc into the CI job."
    )
    parser.add_argument(
        "--use-nix-profile",
        action=argparse.BooleanOptionalAction,
        help="Install direnv with `nix profile install` instead of `nix-env` (initial: input use_nix_profile)",
    )
    parser.add_argument(
        "--nix-channel",
        help="Nix channel to install direnv from (initial: input nix_channel, else nixpkgs)",
    )
    parser.set_defaults(use_nix_profile=None, nix_channel=None)
    parsed_args = list(argv) if argv is not None else None
    return parser.parse_args(parsed_args)


def main(
    argv: Optional[Iterable[str]] = None,
    *,
    host: Optional[HostEnvironment] = None,
    runner: Optional[CommandRunner] = None,
) -> int:
    """Entry point for running the action."""
    args = parse_args(argv)
    active_host = host if host is not None else GitHubActionsHost()
    try:
        config = configure_runtime(args)
        run_action(config, host=active_host, runner=runner)
    except KeyboardInterrupt:
        active_host.info("\n[info] Received Ctrl-C. Aborting direnv action.")
        return 130
    except ActionAbort as exc:
        active_host.set_failed(str(exc))
        return exc.exit_code
    except ActionError as exc:
        active_host.set_failed(str(exc))
        return 1
    return 0


__all__ = [
    "main",
    "parse_args",
    "configure_runtime",
    "ensure_nix",
    "ensure_direnv",
    "run_action",
]
