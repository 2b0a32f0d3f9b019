"""Linker, tool, and environment requirements per target; PATH probes and install hints."""

from __future__ import annotations

from dataclasses import dataclass

from xcross.helpers import host_os_name, is_command_available
from xcross.target.triple import Target


@dataclass(frozen=True)
class TargetRequirements:
    linker: str | None = None
    tools: tuple[str, ...] = ()
    system_libs: tuple[str, ...] = ()
    env_vars: tuple[tuple[str, str], ...] = ()

    @classmethod
    def none(cls) -> TargetRequirements:
        return cls()

    def missing(self) -> list[str]:
        """Linker and tools not found on PATH (linker first, then tools in order, no duplicates)."""
        out: list[str] = []
        names = ([self.linker] if self.linker else []) + list(self.tools)
        for name in dict.fromkeys(names):
            if not is_command_available(name):
                out.append(name)
        return out

    def are_satisfied(self) -> bool:
        """Every named linker/tool resolves on PATH. Re-probes on every call."""
        return not self.missing()


def _gcc(name: str) -> TargetRequirements:
    return TargetRequirements(linker=name, tools=(name,))


def requirements_for(target: Target) -> TargetRequirements:
    """Static (os, arch, env) table. Unmatched combinations need nothing beyond the default toolchain."""
    os_, arch, env = target.os, target.arch, target.env
    if os_ == "linux" and arch == "aarch64" and env == "gnu":
        return _gcc("aarch64-linux-gnu-gcc")
    if os_ == "linux" and arch == "aarch64" and env == "musl":
        return _gcc("aarch64-linux-musl-gcc")
    if os_ == "linux" and arch == "armv7":
        return _gcc("arm-linux-gnueabihf-gcc")
    if os_ == "linux" and arch == "arm":
        return _gcc("arm-linux-gnueabi-gcc")
    if os_ == "windows" and arch == "x86_64" and env == "gnu":
        return _gcc("x86_64-w64-mingw32-gcc")
    if os_ == "windows" and arch == "i686" and env == "gnu":
        return _gcc("i686-w64-mingw32-gcc")
    if os_ == "windows" and env == "msvc":
        # MSVC needs xwin or a Windows host; no linker we can point cargo at.
        return TargetRequirements(tools=("cl.exe",))
    if os_ == "android":
        return TargetRequirements(
            tools=("ndk-build",),
            env_vars=(("ANDROID_NDK_HOME", "$ANDROID_NDK_HOME"),),
        )
    if os_ == "ios" or (os_ == "darwin" and env == "ios"):
        return TargetRequirements(tools=("xcrun",))
    return TargetRequirements.none()


def are_satisfied(requirements: TargetRequirements) -> bool:
    return requirements.are_satisfied()


_LINKER_ALTERNATIVES: dict[tuple[str, str], tuple[str, ...]] = {
    ("linux", "aarch64"): ("aarch64-linux-gnu-gcc", "aarch64-linux-musl-gcc"),
    ("linux", "armv7"): ("arm-linux-gnueabihf-gcc", "arm-linux-gnueabi-gcc"),
    ("windows", "x86_64"): ("x86_64-w64-mingw32-gcc", "gcc"),
    ("windows", "i686"): ("i686-w64-mingw32-gcc", "gcc"),
}


def detect_linker(target: Target) -> str | None:
    """Required linker if on PATH, else the first available alternative, else None."""
    reqs = requirements_for(target)
    if reqs.linker and is_command_available(reqs.linker):
        return reqs.linker
    for linker in _LINKER_ALTERNATIVES.get((target.os, target.arch), ("gcc", "clang", "cc")):
        if is_command_available(linker):
            return linker
    return None


def can_cross_compile_from(target: Target, host: Target) -> bool:
    """Same triple, or a native-tier target whose requirements are all on PATH."""
    if target.triple == host.triple:
        return True
    if not target.supports_native_build:
        return False
    return requirements_for(target).are_satisfied()


def install_instructions(target: Target, host_os: str | None = None) -> list[str]:
    """Install lines for missing requirements, keyed by host OS. Empty when satisfied."""
    if requirements_for(target).are_satisfied():
        return []
    host_os = host_os or host_os_name()
    key = (target.os, target.arch, host_os)
    if key == ("linux", "aarch64", "linux"):
        return [
            "# Debian/Ubuntu:",
            "sudo apt-get install gcc-aarch64-linux-gnu",
            "# Fedora/RHEL:",
            "sudo dnf install gcc-aarch64-linux-gnu",
        ]
    if key == ("linux", "aarch64", "macos"):
        return [
            "# macOS: Container build recommended",
            "# Or use cross-compilation toolchain:",
            "brew tap messense/macos-cross-toolchains",
            "brew install aarch64-unknown-linux-gnu",
        ]
    if key == ("linux", "armv7", "linux"):
        return [
            "# Debian/Ubuntu:",
            "sudo apt-get install gcc-arm-linux-gnueabihf",
            "# Fedora/RHEL:",
            "sudo dnf install gcc-arm-linux-gnu",
        ]
    if key == ("windows", "x86_64", "linux"):
        return [
            "# Debian/Ubuntu:",
            "sudo apt-get install mingw-w64",
            "# Fedora/RHEL:",
            "sudo dnf install mingw64-gcc",
        ]
    if key == ("windows", "x86_64", "macos"):
        return ["# macOS (Homebrew):", "brew install mingw-w64"]
    if target.os == "android":
        return [
            "# Install Android NDK:",
            "# Download from: https://developer.android.com/ndk/downloads",
            "export ANDROID_NDK_HOME=/path/to/ndk",
        ]
    if target.os == "ios" and host_os == "macos":
        return ["# iOS requires Xcode:", "xcode-select --install"]
    if target.os == "ios":
        return ["# iOS requires macOS with Xcode", "# Consider using a container or CI/CD on macOS"]
    return [
        f"# No automatic installation instructions available for {target.triple}",
        "# Consider using container-based build",
    ]


def linker_install_tips(host_os: str, target: Target) -> list[str]:
    """Short tips for installing a cross linker, keyed by (host OS, target OS)."""
    target_os = target.os_family
    pair = (host_os, target_os)
    if pair == ("macos", "linux"):
        return [
            "For Linux cross-compilation on macOS, consider using Zig: brew install zig",
            f"Then build with: xcross build --target {target.triple} --zig",
        ]
    if pair == ("macos", "windows"):
        return ["Install MinGW for Windows cross-compilation: brew install mingw-w64"]
    if pair == ("linux", "windows"):
        return [
            "Install MinGW: sudo apt install mingw-w64 (Debian/Ubuntu)",
            "Or: sudo dnf install mingw64-gcc (Fedora)",
        ]
    if pair == ("linux", "macos"):
        return [
            "macOS cross-compilation requires osxcross: https://github.com/tpoechtrager/osxcross"
        ]
    if pair == ("windows", "linux"):
        return ["For Linux cross-compilation on Windows, consider using WSL or containers"]
    return [f"Install cross-compilation tools for {host_os} → {target_os}"]
