"""Container image selection for cross-compilation targets (cross-rs images by default)."""

from __future__ import annotations

from dataclasses import dataclass

from xcross.errors import ContainerError

DEFAULT_REGISTRY = "ghcr.io/cross-rs"

# target triple -> (image name under registry, tag)
IMAGES: dict[str, tuple[str, str]] = {
    "x86_64-unknown-linux-gnu": ("x86_64-unknown-linux-gnu", "latest"),
    "x86_64-unknown-linux-musl": ("x86_64-unknown-linux-musl", "latest"),
    "aarch64-unknown-linux-gnu": ("aarch64-unknown-linux-gnu", "latest"),
    "aarch64-unknown-linux-musl": ("aarch64-unknown-linux-musl", "latest"),
    "armv7-unknown-linux-gnueabihf": ("armv7-unknown-linux-gnueabihf", "latest"),
    "arm-unknown-linux-gnueabihf": ("arm-unknown-linux-gnueabihf", "latest"),
    "x86_64-pc-windows-gnu": ("x86_64-pc-windows-gnu", "latest"),
    "aarch64-linux-android": ("aarch64-linux-android", "latest"),
    "armv7-linux-androideabi": ("armv7-linux-androideabi", "latest"),
    "x86_64-linux-android": ("x86_64-linux-android", "latest"),
    "i686-linux-android": ("i686-linux-android", "latest"),
}

MACOS_TARGETS = frozenset({"x86_64-apple-darwin", "aarch64-apple-darwin"})


@dataclass(frozen=True)
class CrossImage:
    repository: str
    tag: str
    target: str

    @property
    def full_name(self) -> str:
        return f"{self.repository}:{self.tag}"


class ImageSelector:
    """Pure lookup from target triple to image; registry is configurable."""

    def __init__(self, registry: str | None = None):
        self.registry = (registry or DEFAULT_REGISTRY).rstrip("/")

    def select_for_target(self, target: str) -> CrossImage:
        """Image for target. Raises ContainerError for macOS, wasm32, and unmapped targets."""
        if target in MACOS_TARGETS:
            msg = f"No container image available for macOS target: {target}"
            raise ContainerError(
                msg,
                suggestion="Consider using osxcross or build on macOS",
                hint="Consider using GitHub Actions macOS runners for macOS builds",
            )
        if target == "wasm32-unknown-unknown":
            msg = "WebAssembly doesn't require containers - use native build"
            raise ContainerError(msg, suggestion="Run without --container")
        entry = IMAGES.get(target)
        if entry is None:
            msg = f"No container image mapping for target: {target}"
            raise ContainerError(
                msg,
                suggestion=f"Specify a custom image in xcross.yaml under targets.{target}.image",
            )
        name, tag = entry
        return CrossImage(repository=f"{self.registry}/{name}", tag=tag, target=target)

    def supported_targets(self) -> list[str]:
        return list(IMAGES)
