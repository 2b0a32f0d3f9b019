"""Target triples: parse, classify tier, resolve aliases, infer linker/tool requirements."""

from .requirements import (
    TargetRequirements,
    are_satisfied,
    can_cross_compile_from,
    detect_linker,
    install_instructions,
    linker_install_tips,
    requirements_for,
)
from .triple import (
    ALIASES,
    NATIVE_TARGETS,
    Target,
    TargetTier,
    classify_tier,
    close_matches,
    detect_host,
    parse_rustc_host,
    parse_target,
    parse_triple,
    resolve_alias,
)

__all__ = [
    "ALIASES",
    "NATIVE_TARGETS",
    "Target",
    "TargetRequirements",
    "TargetTier",
    "are_satisfied",
    "can_cross_compile_from",
    "classify_tier",
    "close_matches",
    "detect_host",
    "detect_linker",
    "install_instructions",
    "linker_install_tips",
    "parse_rustc_host",
    "parse_target",
    "parse_triple",
    "requirements_for",
    "resolve_alias",
]
