"""Public API for the direnv action runtime package."""

from __future__ import annotations

from typing import TYPE_CHECKING

from . import environment as _environment
from . import envrc as _envrc
from . import installer as _installer
from . import probe as _probe
from . import workflow as _workflow
from .models import EnvironmentDelta, EnvOperation, InstallConfig, StepOutcome

if TYPE_CHECKING:  # pragma: no cover - type checking helper block
    apply_environment_delta = _environment.apply_environment_delta
    build_environment_delta = _environment.build_environment_delta
    set_environment_variables = _environment.set_environment_variables
    allow_envrc = _envrc.allow_envrc
    export_envrc = _envrc.export_envrc
    parse_envrc_export = _envrc.parse_envrc_export
    build_install_command = _installer.build_install_command
    install_tool = _installer.install_tool
    find_binary = _probe.find_binary
    probe_binary = _probe.probe_binary
    main = _workflow.main
    run_action = _workflow.run_action

_MODULE_EXPORTS = [
    (_environment, ("apply_environment_delta", "build_environment_delta", "set_environment_variables")),
    (_envrc, ("allow_envrc", "export_envrc", "parse_envrc_export")),
    (_installer, ("build_install_command", "install_tool")),
    (_probe, ("find_binary", "probe_binary")),
    (_workflow, ("main", "run_action")),
]

# Static __all__ definition required for pyright analysis
__all__ = [
    # ---- models ----
    "EnvironmentDelta",
    "EnvOperation",
    "InstallConfig",
    "StepOutcome",
    # ---- environment ----
    "apply_environment_delta",
    "build_environment_delta",
    "set_environment_variables",
    # ---- envrc ----
    "allow_envrc",
    "export_envrc",
    "parse_envrc_export",
    # ---- installer ----
    "build_install_command",
    "install_tool",
    # ---- probe ----
    "find_binary",
    "probe_binary",
    # ---- workflow ----
    "main",
    "run_action",
]

for module, exports in _MODULE_EXPORTS:
    for name in exports:
        globals()[name] = getattr(module, name)
