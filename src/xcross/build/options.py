"""Build request and decision types passed between the CLI, selector, and orchestrator."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum

from xcross.errors import ConfigError
from xcross.target import Target


class CargoOperation(Enum):
    BUILD = "build"
    CHECK = "check"
    TEST = "test"

    @property
    def description(self) -> str:
        return {
            CargoOperation.BUILD: "Building",
            CargoOperation.CHECK: "Checking",
            CargoOperation.TEST: "Testing",
        }[self]


class WrapperMode(Enum):
    """Zig wrapper preference: AUTO (cross-OS only), FORCE, or DISABLE."""

    AUTO = "auto"
    FORCE = "force"
    DISABLE = "disable"

    @classmethod
    def from_flags(cls, force: bool, disable: bool) -> WrapperMode:
        """--zig / --no-zig to a mode. Both set is a ConfigError."""
        if force and disable:
            msg = "Cannot use both --zig and --no-zig"
            raise ConfigError(msg, suggestion="Pass at most one of --zig and --no-zig")
        if force:
            return cls.FORCE
        if disable:
            return cls.DISABLE
        return cls.AUTO


class Strategy(Enum):
    NATIVE = "native"
    WRAPPER = "wrapper"
    CONTAINER = "container"


@dataclass
class BuildOptions:
    target: str | None = None
    release: bool = False
    toolchain: str | None = None
    wrapper: WrapperMode = WrapperMode.AUTO
    use_container: bool = False
    cargo_args: list[str] = field(default_factory=list)
    verbose: bool = False
    operation: CargoOperation = CargoOperation.BUILD

    def for_target(self, target: str) -> BuildOptions:
        """Copy with target substituted (cargo_args list copied too)."""
        return replace(self, target=target, cargo_args=list(self.cargo_args))


@dataclass(frozen=True)
class BuildDecision:
    target: Target
    strategy: Strategy
    env: dict[str, str] = field(default_factory=dict)
    linker: str | None = None
    notes: tuple[str, ...] = ()
