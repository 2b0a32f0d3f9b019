"""Error model with stable exit codes, suggestions, and hints.

Every error carries a short message plus an optional actionable suggestion and an
optional contextual hint. ``exit_code_for`` maps any exception to the CLI exit code.
"""

from __future__ import annotations

from enum import IntEnum


class ExitCode(IntEnum):
    """Process exit codes (sysexits-style where applicable). Stable across releases."""

    SUCCESS = 0
    GENERAL = 1
    CONFIG = 2
    TARGET = 3
    TOOLCHAIN = 4
    BUILD = 5
    CONTAINER = 6
    IO = 7
    USER_CANCELLED = 130


class XcrossError(Exception):
    """Base error: message, optional suggestion and hint."""

    exit_code: ExitCode = ExitCode.GENERAL

    def __init__(
        self,
        message: str,
        *,
        suggestion: str | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self._suggestion = suggestion
        self._hint = hint

    @property
    def suggestion(self) -> str | None:
        return self._suggestion

    @property
    def hint(self) -> str | None:
        return self._hint


class TargetError(XcrossError):
    """Malformed triple or unknown target."""

    exit_code = ExitCode.TARGET

    @property
    def hint(self) -> str | None:
        return self._hint or "Use 'xcross target list' to see available targets"


class InvalidTargetError(TargetError):
    def __init__(self, target: str, suggestions: list[str] | None = None) -> None:
        self.target = target
        self.suggestions = list(suggestions or [])
        if self.suggestions:
            suggestion = f"Did you mean: {', '.join(self.suggestions)}?"
        else:
            suggestion = "Run 'xcross target list' to see available targets"
        super().__init__(f"Invalid target '{target}'", suggestion=suggestion)


class ToolchainError(XcrossError):
    """Missing toolchain, target installation, or wrapper toolchain."""

    exit_code = ExitCode.TOOLCHAIN


class LinkerMissingError(ToolchainError):
    def __init__(self, linker: str, target: str, install_hint: str) -> None:
        self.linker = linker
        self.target = target
        super().__init__(
            f"Linker '{linker}' not found for target '{target}'",
            suggestion=install_hint,
            hint=f"Cross-compiling to {target} requires a compatible linker",
        )


class BuildError(XcrossError):
    """The build driver exited non-zero (or a multi-target run had failures)."""

    exit_code = ExitCode.BUILD

    def __init__(
        self,
        message: str,
        *,
        target: str | None = None,
        exit_code_value: int | None = None,
        suggestion: str | None = None,
    ) -> None:
        self.target = target
        self.exit_code_value = exit_code_value
        hint = f"Cargo exited with code {exit_code_value}" if exit_code_value is not None else None
        super().__init__(message, suggestion=suggestion, hint=hint)


class ContainerError(XcrossError):
    """Image missing/unsupported, pull failure, or container execution failure."""

    exit_code = ExitCode.CONTAINER


class ContainerNotAvailableError(ContainerError):
    def __init__(self, runtime: str, install_hint: str) -> None:
        self.runtime = runtime
        super().__init__(
            "Container runtime not available",
            suggestion=install_hint,
            hint=f"Tried to use {runtime} but it's not running",
        )


class ConfigError(XcrossError):
    """Invalid configuration values or conflicting flags."""

    exit_code = ExitCode.CONFIG


def linker_not_found(linker: str, target: str, host_os: str) -> LinkerMissingError:
    """LinkerMissingError with an install hint keyed by host OS and target."""
    if host_os == "macos" and "windows" in target:
        install_hint = "brew install mingw-w64"
    elif host_os == "macos" and "linux" in target:
        install_hint = "Consider using Zig: brew install zig && xcross build --zig"
    elif host_os == "linux" and "windows" in target:
        install_hint = "sudo apt install mingw-w64  # or your distro's package manager"
    elif host_os == "linux" and ("darwin" in target or "apple" in target):
        install_hint = (
            "macOS cross-compilation requires osxcross: https://github.com/tpoechtrager/osxcross"
        )
    elif host_os == "windows" and "linux" in target:
        install_hint = "Consider using Zig: scoop install zig && xcross build --zig"
    else:
        install_hint = f"Install a linker that supports {target}"
    return LinkerMissingError(linker, target, install_hint)


def container_not_found(runtime: str, host_os: str) -> ContainerNotAvailableError:
    """ContainerNotAvailableError with host-OS install instructions."""
    if host_os == "macos":
        install_hint = (
            "Install Docker Desktop: https://www.docker.com/products/docker-desktop\n"
            "Or Podman: brew install podman && podman machine init && podman machine start"
        )
    elif host_os == "linux":
        install_hint = (
            "Install Docker: sudo apt install docker.io && sudo systemctl start docker\n"
            "Or Podman: sudo apt install podman"
        )
    elif host_os == "windows":
        install_hint = (
            "Install Docker Desktop: https://www.docker.com/products/docker-desktop\n"
            "Or Podman: winget install RedHat.Podman"
        )
    else:
        install_hint = f"Install {runtime} or a compatible container runtime"
    return ContainerNotAvailableError(runtime, install_hint)


def exit_code_for(exc: BaseException) -> ExitCode:
    """Map an exception to its ExitCode."""
    if isinstance(exc, XcrossError):
        return exc.exit_code
    if isinstance(exc, KeyboardInterrupt):
        return ExitCode.USER_CANCELLED
    if isinstance(exc, OSError):
        return ExitCode.IO
    return ExitCode.GENERAL
