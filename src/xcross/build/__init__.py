"""Build strategy selection (native, Zig wrapper, container) and multi-target orchestration."""

from .executor import DEFAULT_TOOLCHAIN, Builder
from .options import BuildDecision, BuildOptions, CargoOperation, Strategy, WrapperMode
from .orchestrator import BuildSummary, build_all, run_build_all

__all__ = [
    "DEFAULT_TOOLCHAIN",
    "BuildDecision",
    "BuildOptions",
    "BuildSummary",
    "Builder",
    "CargoOperation",
    "Strategy",
    "WrapperMode",
    "build_all",
    "run_build_all",
]
