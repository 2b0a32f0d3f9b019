"""rustup-backed toolchain installer: list/install toolchains and targets."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass, field

from xcross import output
from xcross.errors import ToolchainError
from xcross.target import Target

log = logging.getLogger(__name__)


@dataclass
class Toolchain:
    name: str
    is_default: bool = False
    targets: list[str] = field(default_factory=list)


def parse_toolchain_list(stdout: str) -> list[Toolchain]:
    """Parse `rustup toolchain list` (marks like '(default)' or '(active, default)' stripped)."""
    out: list[Toolchain] = []
    for line in stdout.splitlines():
        line = line.strip()
        if not line:
            continue
        name, _, marks = line.partition(" (")
        out.append(Toolchain(name=name.strip(), is_default="default" in marks))
    return out


def parse_target_list(stdout: str) -> list[str]:
    """Parse `rustup target list` output, dropping ' (installed)' markers."""
    out: list[str] = []
    for line in stdout.splitlines():
        triple = line.strip().removesuffix(" (installed)").strip()
        if triple:
            out.append(triple)
    return out


class ToolchainManager:
    """Thin wrapper over the rustup CLI. Every query shells out; nothing is cached."""

    def __init__(self, rustup: str = "rustup"):
        self.rustup = rustup

    @classmethod
    def find(cls, rustup: str = "rustup") -> ToolchainManager:
        """Verify `rustup --version` works. Raises ToolchainError otherwise."""
        try:
            r = subprocess.run([rustup, "--version"], capture_output=True, text=True)
        except OSError as e:
            msg = f"rustup not found: {e}"
            raise ToolchainError(msg, suggestion="Install rustup from https://rustup.rs/") from e
        if r.returncode != 0:
            msg = "rustup found but failed to execute. Please check your rustup installation."
            raise ToolchainError(msg)
        return cls(rustup)

    def _run(self, args: list[str], what: str) -> str:
        try:
            r = subprocess.run([self.rustup, *args], capture_output=True, text=True)
        except OSError as e:
            msg = f"Failed to {what}: {e}"
            raise ToolchainError(msg) from e
        if r.returncode != 0:
            msg = f"Failed to {what}: {(r.stderr or '').strip()}"
            raise ToolchainError(msg)
        return r.stdout or ""

    def list_toolchains(self) -> list[Toolchain]:
        return parse_toolchain_list(self._run(["toolchain", "list"], "list toolchains"))

    def default_toolchain(self) -> Toolchain | None:
        return next((t for t in self.list_toolchains() if t.is_default), None)

    def list_targets(self, toolchain: str) -> list[str]:
        """Installed targets for toolchain."""
        return parse_target_list(
            self._run(
                ["target", "list", "--installed", "--toolchain", toolchain],
                f"list targets for toolchain '{toolchain}'",
            )
        )

    def is_target_installed(self, toolchain: str, target: str) -> bool:
        return target in self.list_targets(toolchain)

    def install_target(self, toolchain: str, target: str) -> None:
        output.progress(f"Installing target {target} for toolchain {toolchain}...")
        self._run(
            ["target", "add", target, "--toolchain", toolchain],
            f"install target '{target}' for toolchain '{toolchain}'",
        )
        output.success(f"Installed target {target}")

    def ensure_target(self, toolchain: str, target: str) -> None:
        if not self.is_target_installed(toolchain, target):
            self.install_target(toolchain, target)

    def is_toolchain_installed(self, toolchain: str) -> bool:
        return any(t.name.startswith(toolchain) for t in self.list_toolchains())

    def install_toolchain(self, toolchain: str) -> None:
        output.progress(f"Installing toolchain {toolchain}...")
        self._run(["toolchain", "install", toolchain], f"install toolchain '{toolchain}'")
        output.success(f"Installed toolchain {toolchain}")

    def ensure_toolchain(self, toolchain: str) -> None:
        if not self.is_toolchain_installed(toolchain):
            self.install_toolchain(toolchain)

    def prepare_target(self, toolchain: str, target: Target) -> None:
        """Ensure toolchain is installed and target added to it."""
        self.ensure_toolchain(toolchain)
        self.ensure_target(toolchain, target.triple)
        log.debug("Toolchain %s ready for %s", toolchain, target.triple)
