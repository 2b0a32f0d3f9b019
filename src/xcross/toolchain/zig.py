"""Zig-based cross-compilation: shim scripts that adapt `zig cc` / `zig ar` to cargo.

Cargo expects CC/AR/linker to be a single executable path, not a command with
arguments, so each target gets a small `<triple>-cc` script with `-target` fixed in.
The archiver is target-independent and shared (`zig-ar`). Scripts live in an
injected cache directory (default ~/.xcross/zig-wrappers) and are reused once written
unless reuse is turned off (build.cache: false).
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import sys
import tempfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from xcross.errors import ToolchainError
from xcross.helpers import cargo_linker_env_var, xcross_home
from xcross.target import Target

log = logging.getLogger(__name__)

ZIG_TARGETS: dict[str, str] = {
    "x86_64-unknown-linux-gnu": "x86_64-linux-gnu",
    "x86_64-unknown-linux-musl": "x86_64-linux-musl",
    "aarch64-unknown-linux-gnu": "aarch64-linux-gnu",
    "aarch64-unknown-linux-musl": "aarch64-linux-musl",
    "armv7-unknown-linux-gnueabihf": "arm-linux-gnueabihf",
    "arm-unknown-linux-gnueabihf": "arm-linux-gnueabihf",
    "i686-unknown-linux-gnu": "i386-linux-gnu",
    "x86_64-pc-windows-gnu": "x86_64-windows-gnu",
    "i686-pc-windows-gnu": "i686-windows-gnu",
}

AR_WRAPPER_NAME = "zig-ar"


class WrapperRole(Enum):
    COMPILER = "CC"
    LINKER = "LINKER"
    ARCHIVER = "AR"


@dataclass(frozen=True)
class WrapperArtifact:
    role: WrapperRole
    path: Path


def default_cache_dir() -> Path:
    return xcross_home() / "zig-wrappers"


def zig_target_for(triple: str) -> str | None:
    """Zig's triple for a Rust triple, or None when Zig cannot target it."""
    return ZIG_TARGETS.get(triple)


def _is_windows() -> bool:
    return sys.platform.startswith("win")


def _script(body: str) -> str:
    if _is_windows():
        return f"@echo off\n{body} %*\n"
    return f'#!/bin/sh\nexec {body} "$@"\n'


def _write_executable(path: Path, content: str) -> None:
    """Write content to path atomically (temp file in the same dir, then rename) and chmod 0o755."""
    fd, tmp = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.")
    try:
        with os.fdopen(fd, "w", newline="\n") as f:
            f.write(content)
        os.chmod(tmp, 0o755)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


class ZigToolchain:
    """An installed Zig plus the cache directory its wrapper scripts go into."""

    def __init__(
        self,
        zig_path: Path | str,
        version: str,
        cache_dir: Path | None = None,
        reuse_wrappers: bool = True,
    ):
        self.zig_path = Path(zig_path)
        self.version = version
        self.cache_dir = Path(cache_dir) if cache_dir is not None else default_cache_dir()
        self.reuse_wrappers = reuse_wrappers

    @classmethod
    def detect(cls, cache_dir: Path | None = None, reuse_wrappers: bool = True) -> ZigToolchain | None:
        """ZigToolchain if `zig` is on PATH and `zig version` succeeds, else None."""
        zig = shutil.which("zig")
        if zig is None:
            return None
        try:
            r = subprocess.run([zig, "version"], capture_output=True, text=True)
        except OSError as e:
            log.debug("zig version failed: %s", e)
            return None
        if r.returncode != 0:
            return None
        return cls(zig, r.stdout.strip(), cache_dir, reuse_wrappers)

    @staticmethod
    def supports_target_name(triple: str) -> bool:
        """True for the Linux/Windows triples Zig is known to handle. macOS and wasm are not."""
        return triple in ZIG_TARGETS

    def supports_target(self, target: Target) -> bool:
        return self.supports_target_name(target.triple)

    def _shim_name(self, triple: str) -> str:
        suffix = ".cmd" if _is_windows() else ""
        return f"{triple}-cc{suffix}"

    def create_wrappers(self, target: Target) -> dict[WrapperRole, WrapperArtifact]:
        """Write (or reuse, when reuse_wrappers) the compiler shim for target and the shared archiver shim."""
        zig_target = zig_target_for(target.triple)
        if zig_target is None:
            msg = f"Target {target.triple} not supported by Zig"
            raise ToolchainError(msg)
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            cc_path = self.cache_dir / self._shim_name(target.triple)
            if not (self.reuse_wrappers and cc_path.exists()):
                _write_executable(cc_path, _script(f"zig cc -target {zig_target}"))
                log.debug("Created CC wrapper %s", cc_path)
            ar_path = self.cache_dir / (AR_WRAPPER_NAME + (".cmd" if _is_windows() else ""))
            if not (self.reuse_wrappers and ar_path.exists()):
                _write_executable(ar_path, _script("zig ar"))
                log.debug("Created AR wrapper %s", ar_path)
        except OSError as e:
            msg = f"Failed to create Zig wrapper scripts in {self.cache_dir}: {e}"
            raise ToolchainError(msg) from e
        return {
            WrapperRole.COMPILER: WrapperArtifact(WrapperRole.COMPILER, cc_path),
            WrapperRole.LINKER: WrapperArtifact(WrapperRole.LINKER, cc_path),
            WrapperRole.ARCHIVER: WrapperArtifact(WrapperRole.ARCHIVER, ar_path),
        }

    def environment_for_target(self, target: Target) -> dict[str, str]:
        """CC, AR, and CARGO_TARGET_<TRIPLE>_LINKER pointing at the shims."""
        if not self.supports_target(target):
            msg = f"Target {target.triple} is not supported by Zig"
            raise ToolchainError(msg)
        wrappers = self.create_wrappers(target)
        return {
            "CC": str(wrappers[WrapperRole.COMPILER].path),
            "AR": str(wrappers[WrapperRole.ARCHIVER].path),
            # Zig's cc driver doubles as the linker.
            cargo_linker_env_var(target.triple): str(wrappers[WrapperRole.LINKER].path),
        }

    def clean_cache(self) -> bool:
        return clean_cache(self.cache_dir)


def zig_install_hint(host_os: str) -> str:
    if host_os == "macos":
        return "Install with: brew install zig"
    if host_os == "linux":
        return "Install with: snap install zig --classic --beta"
    if host_os == "windows":
        return "Install with: scoop install zig"
    return "Install Zig: https://ziglang.org/download/"


def clean_cache(cache_dir: Path | None = None) -> bool:
    """Remove the wrapper cache directory. False when there was nothing to remove."""
    cache_dir = cache_dir or default_cache_dir()
    if not cache_dir.exists():
        return False
    try:
        shutil.rmtree(cache_dir)
    except OSError as e:
        msg = f"Failed to clean Zig wrapper cache: {e}"
        raise ToolchainError(msg) from e
    return True
