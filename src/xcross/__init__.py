"""xcross: cross-compilation orchestrator for Cargo projects (native, Zig wrapper, or container)."""

__version__ = "0.3.0"
