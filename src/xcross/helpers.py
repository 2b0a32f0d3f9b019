"""Shared helpers for xcross (PATH probes, host OS, path discovery, naming).

Used by target, toolchain, container, build, and config modules.
"""

from __future__ import annotations

import os
import platform
import shutil
from pathlib import Path

# --- PATH ---


def is_command_available(cmd: str) -> bool:
    """True if cmd resolves on PATH. Probes every call (installed tools can change)."""
    return shutil.which(cmd) is not None


# --- Host ---


def host_os_name() -> str:
    """Host OS as linux, macos, windows (lowercased platform.system() otherwise)."""
    system = platform.system()
    if system == "Darwin":
        return "macos"
    return system.lower()


def os_family(os_component: str) -> str:
    """Map a triple OS component to the host-style name used for hint keys (darwin -> macos)."""
    if os_component == "darwin":
        return "macos"
    return os_component


# --- Path ---


def find_upwards(start: Path, name: str) -> Path | None:
    """First start/name, start.parent/name, ... that is a file, else None."""
    current = start.resolve()
    for d in (current, *current.parents):
        candidate = d / name
        if candidate.is_file():
            return candidate
    return None


def has_cargo_toml(start: Path) -> bool:
    """Cargo.toml exists in start or any parent directory."""
    return find_upwards(start, "Cargo.toml") is not None


def xcross_home() -> Path:
    """Per-user application directory (XCROSS_HOME or ~/.xcross)."""
    env = os.environ.get("XCROSS_HOME")
    if env:
        return Path(env)
    return Path.home() / ".xcross"


# --- Naming ---


def cargo_env_key(triple: str) -> str:
    """Triple as used in CARGO_TARGET_* variables: uppercase, '-' -> '_'."""
    return triple.upper().replace("-", "_")


def cargo_linker_env_var(triple: str) -> str:
    """CARGO_TARGET_<TRIPLE>_LINKER (e.g. x86_64-pc-windows-gnu -> CARGO_TARGET_X86_64_PC_WINDOWS_GNU_LINKER)."""
    return f"CARGO_TARGET_{cargo_env_key(triple)}_LINKER"
