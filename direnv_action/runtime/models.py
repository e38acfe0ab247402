"""Core data models and exception types for the direnv action runtime."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, Iterable, Optional, TypeVar

from .._messages import format_default_message

T = TypeVar("T")

OPERATION_SET = "set"
OPERATION_APPEND = "append"
OPERATIONS: tuple[str, ...] = (OPERATION_SET, OPERATION_APPEND)

RAW_OUTPUT_PREVIEW_LENGTH = 200


def _normalize_output(*sources: Optional[str]) -> str:
    """Return the first non-empty stripped string from the provided sources."""
    for source in sources:
        if source is not None:
            stripped = source.strip()
            if stripped:
                return stripped
    return ""


def _exit_detail(command: str, exit_code: int, output: Optional[str]) -> str:
    """Describe a failed child process, including its output when available."""
    detail = f"'{command}' exited with status {exit_code}"
    normalized = _normalize_output(output)
    if normalized:
        detail = f"{detail}; {normalized}"
    return detail


def _launch_detail(command: str, exit_code: int, reason: str) -> str:
    """Describe a child process that never started."""
    return f"could not run '{command}' (status {exit_code}); {reason}"


def _preview(raw_output: str) -> str:
    """Shorten raw command output for inclusion in an error message."""
    if not raw_output.strip():
        return "(empty output)"
    if len(raw_output) > RAW_OUTPUT_PREVIEW_LENGTH:
        return f"{raw_output[:RAW_OUTPUT_PREVIEW_LENGTH]!r}..."
    return repr(raw_output)


class ActionError(RuntimeError):
    """Base class for failures that abort the action run."""

    default_message = "direnv action failure"

    def __init__(self, *, detail: Optional[str] = None) -> None:
        """Initialise the exception with an optional detail string."""
        self.detail = detail
        message = format_default_message(self.default_message, detail)
        super().__init__(message)


class MissingDependency(ActionError):
    """Raised when a required binary cannot be found on the search path."""

    default_message = "Required binary is not installed"

    def __init__(self, *, tool: str, detail: Optional[str] = None) -> None:
        self.tool = tool
        super().__init__(detail=detail or f"{tool} binary is not installed.")

    @classmethod
    def not_on_path(cls, tool: str) -> "MissingDependency":
        """Factory when ``shutil.which`` could not locate the binary."""
        return cls(tool=tool)


class InstallationFailed(ActionError):
    """Raised when the package manager could not install a tool."""

    default_message = "Installation failed"

    def __init__(self, *, tool: str, exit_code: int, detail: Optional[str] = None) -> None:
        self.tool = tool
        self.exit_code = exit_code
        super().__init__(detail=detail)

    @classmethod
    def exit_status(
        cls, *, tool: str, command: str, exit_code: int, output: Optional[str] = None
    ) -> "InstallationFailed":
        """Factory when the install command exited with a non-zero status."""
        detail = f"{tool}: {_exit_detail(command, exit_code, output)}"
        return cls(tool=tool, exit_code=exit_code, detail=detail)

    @classmethod
    def launch_failed(
        cls, *, tool: str, command: str, exit_code: int, reason: str
    ) -> "InstallationFailed":
        """Factory when the package manager could not be started at all."""
        detail = f"{tool}: {_launch_detail(command, exit_code, reason)}"
        return cls(tool=tool, exit_code=exit_code, detail=detail)


class AuthorizationFailed(ActionError):
    """Raised when ``direnv allow`` fails, for example without an .envrc."""

    default_message = "direnv allow failed"

    def __init__(self, *, exit_code: int, detail: Optional[str] = None) -> None:
        self.exit_code = exit_code
        super().__init__(detail=detail)

    @classmethod
    def exit_status(
        cls, *, command: str, exit_code: int, output: Optional[str] = None
    ) -> "AuthorizationFailed":
        """Factory when the allow command exited with a non-zero status."""
        return cls(exit_code=exit_code, detail=_exit_detail(command, exit_code, output))

    @classmethod
    def launch_failed(cls, *, command: str, exit_code: int, reason: str) -> "AuthorizationFailed":
        """Factory when direnv could not be started."""
        return cls(exit_code=exit_code, detail=_launch_detail(command, exit_code, reason))


class ExportFailed(ActionError):
    """Raised when ``direnv export json`` exits with a non-zero status."""

    default_message = "direnv export failed"

    def __init__(self, *, exit_code: int, detail: Optional[str] = None) -> None:
        self.exit_code = exit_code
        super().__init__(detail=detail)

    @classmethod
    def exit_status(
        cls, *, command: str, exit_code: int, output: Optional[str] = None
    ) -> "ExportFailed":
        """Factory when the export command exited with a non-zero status."""
        return cls(exit_code=exit_code, detail=_exit_detail(command, exit_code, output))

    @classmethod
    def launch_failed(cls, *, command: str, exit_code: int, reason: str) -> "ExportFailed":
        return cls(exit_code=exit_code, detail=_launch_detail(command, exit_code, reason))


class ExportParseFailed(ActionError):
    """Raised when the export output is not a flat JSON object of strings."""

    default_message = "direnv export produced invalid JSON"

    def __init__(self, *, raw_output: str, detail: Optional[str] = None) -> None:
        self.raw_output = raw_output
        super().__init__(detail=detail)

    @classmethod
    def malformed(cls, *, raw_output: str, reason: str) -> "ExportParseFailed":
        """Factory when the captured text could not be decoded."""
        return cls(raw_output=raw_output, detail=f"{reason} (output: {_preview(raw_output)})")

    @classmethod
    def not_an_object(cls, *, raw_output: str, received: str) -> "ExportParseFailed":
        """Factory when the decoded JSON is not an object."""
        return cls(raw_output=raw_output, detail=f"expected a JSON object, got {received}")

    @classmethod
    def invalid_value(cls, *, raw_output: str, key: str, received: str) -> "ExportParseFailed":
        """Factory when a variable value is neither a string nor null."""
        return cls(
            raw_output=raw_output,
            detail=f"value for {key!r} must be a string, got {received}",
        )


class EnvironmentUpdateFailed(ActionError):
    """Raised when the host rejects a write to the job environment."""

    default_message = "Failed to update the job environment"

    def __init__(self, *, key: str, detail: Optional[str] = None) -> None:
        self.key = key
        super().__init__(detail=detail)

    @classmethod
    def host_write(cls, *, key: str, reason: str) -> "EnvironmentUpdateFailed":
        """Factory when persisting *key* to the host raised ``OSError``."""
        return cls(key=key, detail=f"{key}: {reason}")


class ActionAbort(SystemExit):
    """Base class for deliberate exits caused by invalid configuration."""

    default_message = "direnv action aborted"

    def __init__(self, *, detail: Optional[str] = None, code: int = 1) -> None:
        """Initialise the abort with a user-facing detail string."""
        self.detail = detail
        self.exit_code = code
        message = format_default_message(self.default_message, detail)
        super().__init__(message)
        self.code = code


class InputValidationAbort(ActionAbort):
    """Raised when an action input cannot be interpreted."""

    default_message = "Invalid action input"

    @classmethod
    def not_boolean(cls, *, name: str, received: str, allowed: Iterable[str]) -> "InputValidationAbort":
        """Factory when a boolean input holds an unsupported spelling."""
        choices = ", ".join(allowed)
        return cls(detail=f"input `{name}` expects one of {choices}; received `{received}`")

    @classmethod
    def empty_value(cls, *, name: str) -> "InputValidationAbort":
        """Factory when a string input that must not be blank is blank."""
        return cls(detail=f"input `{name}` must not be empty")


@dataclass
class CommandResult:
    """Captured output from a completed subprocess invocation."""

    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        """Return True when the process exited successfully."""
        return self.returncode == 0

    @property
    def combined_output(self) -> str:
        """Return stdout and stderr concatenated together."""
        return f"{self.stdout}{self.stderr}"


@dataclass(frozen=True)
class InstallConfig:
    """How a missing direnv should be installed. Read once per run."""

    use_nix_profile: bool = False
    channel: str = "nixpkgs"


@dataclass(frozen=True)
class StepOutcome(Generic[T]):
    """Result of one external invocation: a value or a tagged failure."""

    value: Optional[T] = None
    failure: Optional[ActionError] = None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "StepOutcome[T]":
        return cls(value=value)

    @classmethod
    def failed(cls, failure: ActionError) -> "StepOutcome[T]":
        return cls(failure=failure)

    @property
    def ok(self) -> bool:
        """Return True when no failure was recorded."""
        return self.failure is None

    @property
    def kind(self) -> Optional[str]:
        """Name of the failure class, or None on success."""
        if self.failure is None:
            return None
        return type(self.failure).__name__

    def unwrap(self) -> Optional[T]:
        """Return the success value or raise the recorded failure."""
        if self.failure is not None:
            raise self.failure
        return self.value


@dataclass(frozen=True)
class EnvOperation:
    """A single change to the job environment."""

    operation: str
    key: str
    value: str

    def __post_init__(self) -> None:
        if self.operation not in OPERATIONS:
            raise ValueError(f"unknown environment operation: {self.operation!r}")


@dataclass(frozen=True)
class EnvironmentDelta:
    """Ordered environment changes derived from a direnv export."""

    operations: tuple[EnvOperation, ...] = field(default_factory=tuple)

    def __iter__(self):
        return iter(self.operations)

    def __len__(self) -> int:
        return len(self.operations)

    @property
    def is_empty(self) -> bool:
        """Return True when applying the delta changes nothing."""
        return not self.operations

    @property
    def exported_keys(self) -> list[str]:
        """Keys that will be set as job variables."""
        return [op.key for op in self.operations if op.operation == OPERATION_SET]

    @property
    def path_entries(self) -> list[str]:
        """Values that will be added to the search path."""
        return [op.value for op in self.operations if op.operation == OPERATION_APPEND]


__all__ = [
    "OPERATION_SET",
    "OPERATION_APPEND",
    "OPERATIONS",
    "ActionError",
    "MissingDependency",
    "InstallationFailed",
    "AuthorizationFailed",
    "ExportFailed",
    "ExportParseFailed",
    "EnvironmentUpdateFailed",
    "ActionAbort",
    "InputValidationAbort",
    "CommandResult",
    "InstallConfig",
    "StepOutcome",
    "EnvOperation",
    "EnvironmentDelta",
]
