"""Toolchains: rustup installer and the Zig cross-compiler wrapper generator."""

from .rustup import Toolchain, ToolchainManager, parse_target_list, parse_toolchain_list
from .zig import (
    ZIG_TARGETS,
    WrapperArtifact,
    WrapperRole,
    ZigToolchain,
    clean_cache,
    default_cache_dir,
    zig_install_hint,
    zig_target_for,
)

__all__ = [
    "ZIG_TARGETS",
    "Toolchain",
    "ToolchainManager",
    "WrapperArtifact",
    "WrapperRole",
    "ZigToolchain",
    "clean_cache",
    "default_cache_dir",
    "parse_target_list",
    "parse_toolchain_list",
    "zig_install_hint",
    "zig_target_for",
]
