"""Install missing tools through the Nix package manager."""

from __future__ import annotations

from typing import Optional

from .config import DIRENV_TOOL
from .host import HostEnvironment
from .models import InstallationFailed, InstallConfig, StepOutcome
from .process import CommandRunner, format_command, os_error_exit_code, run_command


def build_install_command(tool: str, config: InstallConfig) -> list[str]:
    """Return the package-manager invocation for *tool*."""
    if config.use_nix_profile:
        return ["nix", "profile", "install", f"{config.channel}#{tool}"]
    return ["nix-env", "-f", f"<{config.channel}>", "-i", tool]


def install_tool(
    tool: str,
    config: InstallConfig,
    *,
    host: HostEnvironment,
    runner: Optional[CommandRunner] = None,
) -> StepOutcome[None]:
    """Install *tool* and report the outcome. No retry on failure."""
    run = runner or run_command
    cmd = build_install_command(tool, config)
    style = "nix profile" if config.use_nix_profile else "nix-env"
    host.info(f"Installing {tool} using {style}...")
    cmd_str = format_command(cmd)
    try:
        result = run(cmd, live=True)
    except OSError as exc:
        return StepOutcome.failed(
            InstallationFailed.launch_failed(
                tool=tool, command=cmd_str, exit_code=os_error_exit_code(exc), reason=str(exc)
            )
        )
    if not result.ok:
        return StepOutcome.failed(
            InstallationFailed.exit_status(
                tool=tool,
                command=cmd_str,
                exit_code=result.returncode,
                output=result.stderr,
            )
        )
    host.info(f"Installed {tool}.")
    return StepOutcome.success()


def install_direnv(
    config: InstallConfig,
    *,
    host: HostEnvironment,
    runner: Optional[CommandRunner] = None,
) -> None:
    """Install direnv, raising ``InstallationFailed`` on error."""
    install_tool(DIRENV_TOOL, config, host=host, runner=runner).unwrap()


__all__ = ["build_install_command", "install_tool", "install_direnv"]
