"""Target triple parsing, tier classification, alias resolution, and host detection.

A triple is arch-vendor-os[-env]; anything past the third component is the env/ABI
(joined back with '-'). Tier is derived from the triple alone, so a Target is a pure
parse and can be rebuilt from its string at any time.
"""

from __future__ import annotations

import difflib
import logging
import subprocess
from dataclasses import dataclass
from enum import Enum

from xcross.errors import InvalidTargetError, TargetError, ToolchainError
from xcross.helpers import cargo_env_key, os_family

log = logging.getLogger(__name__)

# Historically well-supported pairings that build with the stock toolchain.
NATIVE_TARGETS = frozenset(
    {
        "x86_64-unknown-linux-gnu",
        "x86_64-unknown-linux-musl",
        "x86_64-pc-windows-gnu",
        "x86_64-apple-darwin",
        "aarch64-apple-darwin",
        "i686-pc-windows-gnu",
        "i686-unknown-linux-gnu",
    }
)

SPECIALIZED_MARKERS = ("android", "ios")
SPECIALIZED_PREFIXES = ("wasm", "thumb", "riscv")

ALIASES: dict[str, str] = {
    "linux": "x86_64-unknown-linux-gnu",
    "windows": "x86_64-pc-windows-gnu",
    "linux-arm64": "aarch64-unknown-linux-gnu",
    "linux-aarch64": "aarch64-unknown-linux-gnu",
    "linux-armv7": "armv7-unknown-linux-gnueabihf",
    "linux-musl": "x86_64-unknown-linux-musl",
    "linux-arm64-musl": "aarch64-unknown-linux-musl",
    "windows-msvc": "x86_64-pc-windows-msvc",
    "windows-gnu": "x86_64-pc-windows-gnu",
    "windows-32": "i686-pc-windows-gnu",
    "android": "aarch64-linux-android",
    "android-arm64": "aarch64-linux-android",
    "android-armv7": "armv7-linux-androideabi",
    "android-x86": "x86_64-linux-android",
    "ios": "aarch64-apple-ios",
    "ios-arm64": "aarch64-apple-ios",
    "ios-sim": "aarch64-apple-ios-sim",
    "wasm": "wasm32-unknown-unknown",
    "wasm32": "wasm32-unknown-unknown",
}


class TargetTier(Enum):
    NATIVE = "native"
    CONTAINER = "container"
    SPECIALIZED = "specialized"

    def __str__(self) -> str:
        return {
            TargetTier.NATIVE: "Tier 1 (Native)",
            TargetTier.CONTAINER: "Tier 2 (Container)",
            TargetTier.SPECIALIZED: "Tier 3 (Specialized)",
        }[self]


def classify_tier(triple: str) -> TargetTier:
    """Native allow-list first, then mobile/embedded/wasm markers, else container-recommended."""
    if triple in NATIVE_TARGETS:
        return TargetTier.NATIVE
    if any(m in triple for m in SPECIALIZED_MARKERS) or triple.startswith(SPECIALIZED_PREFIXES):
        return TargetTier.SPECIALIZED
    return TargetTier.CONTAINER


@dataclass(frozen=True)
class Target:
    """Parsed target triple."""

    triple: str
    arch: str
    vendor: str
    os: str
    env: str | None
    tier: TargetTier

    @classmethod
    def from_triple(cls, triple: str) -> Target:
        """Parse arch-vendor-os[-env]. Raises TargetError on fewer than 3 components."""
        parts = triple.split("-")
        if len(parts) < 3:
            msg = f"Invalid target triple: {triple}. Expected format: arch-vendor-os[-env]"
            raise TargetError(msg)
        env = "-".join(parts[3:]) if len(parts) >= 4 else None
        return cls(
            triple=triple,
            arch=parts[0],
            vendor=parts[1],
            os=parts[2],
            env=env,
            tier=classify_tier(triple),
        )

    def __str__(self) -> str:
        return self.triple

    @property
    def supports_native_build(self) -> bool:
        return self.tier is TargetTier.NATIVE

    @property
    def requires_container(self) -> bool:
        return self.tier in (TargetTier.CONTAINER, TargetTier.SPECIALIZED)

    @property
    def os_family(self) -> str:
        return os_family(self.os)

    @property
    def cargo_env_key(self) -> str:
        return cargo_env_key(self.triple)

    def requirements(self):
        """Linker/tools/env needed for this target (see xcross.target.requirements)."""
        from xcross.target.requirements import requirements_for

        return requirements_for(self)


def parse_triple(triple: str) -> Target:
    return Target.from_triple(triple)


def resolve_alias(alias: str, host: Target | None = None) -> str:
    """Resolve a friendly alias (linux, windows, macos, wasm, ...) to a triple. Non-aliases pass through."""
    key = alias.lower()
    if key == "macos":
        if host is not None and host.arch == "aarch64" and host.os == "darwin":
            return "aarch64-apple-darwin"
        return "x86_64-apple-darwin"
    return ALIASES.get(key, alias)


def parse_rustc_host(output: str) -> str | None:
    """Extract the triple from the 'host: ' line of `rustc -vV` output."""
    for line in output.splitlines():
        if line.startswith("host: "):
            return line[len("host: ") :].strip()
    return None


def detect_host() -> Target:
    """Host target from `rustc -vV`. Raises ToolchainError if rustc is missing or silent."""
    try:
        r = subprocess.run(["rustc", "-vV"], capture_output=True, text=True)
    except OSError as e:
        msg = f"Failed to run rustc: {e}"
        raise ToolchainError(msg, suggestion="Install Rust from https://rustup.rs/") from e
    if r.returncode != 0:
        msg = "rustc command failed"
        raise ToolchainError(msg)
    host = parse_rustc_host(r.stdout)
    if host is None:
        msg = "Could not detect host target from rustc"
        raise ToolchainError(msg)
    log.debug("Detected host target %s", host)
    return Target.from_triple(host)


def close_matches(name: str) -> list[str]:
    """Aliases and known triples that look like name, best first."""
    candidates = sorted({*ALIASES, "macos", *ALIASES.values(), *NATIVE_TARGETS})
    return difflib.get_close_matches(name.lower(), candidates, n=3, cutoff=0.6)


def parse_target(name: str, host: Target | None = None) -> Target:
    """Resolve an alias or triple to a Target.

    A name that is neither an alias nor a full triple raises InvalidTargetError
    carrying the closest aliases/triples; other malformed input raises TargetError.
    """
    triple = resolve_alias(name, host)
    if triple.count("-") < 2:
        raise InvalidTargetError(name, close_matches(name))
    return Target.from_triple(triple)
