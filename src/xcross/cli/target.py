"""`xcross target list|info|add`: inspect and install targets."""

from __future__ import annotations

import argparse
import sys

from xcross import output
from xcross.build import DEFAULT_TOOLCHAIN
from xcross.container import IMAGES
from xcross.target import (
    ALIASES,
    NATIVE_TARGETS,
    Target,
    TargetTier,
    install_instructions,
    parse_target,
    requirements_for,
)
from xcross.toolchain import ZIG_TARGETS, ToolchainManager, ZigToolchain


def known_targets() -> list[str]:
    """Triples xcross has a native, Zig, or container route for (sorted)."""
    return sorted(set(NATIVE_TARGETS) | set(ZIG_TARGETS) | set(IMAGES) | set(ALIASES.values()))


def run_target_list(installed: bool, toolchain: str) -> int:
    if installed:
        output.section(f"Installed targets ({toolchain})")
        for triple in ToolchainManager.find().list_targets(toolchain):
            print(f"  {triple}")
        return 0
    by_tier: dict[TargetTier, list[str]] = {tier: [] for tier in TargetTier}
    for triple in known_targets():
        by_tier[Target.from_triple(triple).tier].append(triple)
    for tier, triples in by_tier.items():
        output.section(str(tier))
        for triple in triples:
            print(f"  {triple}")
    output.section("Aliases")
    for alias, triple in sorted(ALIASES.items()):
        print(f"  {alias:<18} {triple}")
    return 0


def run_target_info(name: str) -> int:
    """Print parse, tier, requirements, and available routes for a target."""
    target = parse_target(name)
    reqs = requirements_for(target)
    output.section(f"Target: {target.triple}")
    print(f"  Architecture: {target.arch}")
    print(f"  Vendor:       {target.vendor}")
    print(f"  OS:           {target.os}")
    print(f"  Environment:  {target.env or '-'}")
    print(f"  Tier:         {target.tier}")
    print(f"  Linker:       {reqs.linker or '(default)'}")
    if reqs.tools:
        print(f"  Tools:        {', '.join(reqs.tools)}")
    for key, value in reqs.env_vars:
        print(f"  Env:          {key}={value}")
    print(f"  Zig wrapper:  {'yes' if ZigToolchain.supports_target_name(target.triple) else 'no'}")
    print(f"  Container:    {'yes' if target.triple in IMAGES else 'no'}")

    missing = reqs.missing()
    if missing:
        output.warning(f"Missing: {', '.join(missing)}")
        for line in install_instructions(target):
            print(f"  {line}")
    else:
        output.success("All requirements satisfied")
    return 0


def run_target_add(name: str, toolchain: str) -> int:
    target = parse_target(name)
    ToolchainManager.find().prepare_target(toolchain, target)
    output.success(f"Target {target.triple} ready for toolchain {toolchain}")
    return 0


def run_target_argv(argv: list[str] | None = None) -> int:
    """Parse `target` subcommand argv. Returns 0 or raises XcrossError."""
    if argv is None:
        argv = sys.argv[2:]
    ap = argparse.ArgumentParser(prog="xcross target", description="Inspect and install targets")
    sub = ap.add_subparsers(dest="action", required=True)
    p_list = sub.add_parser("list", help="List known targets by tier")
    p_list.add_argument("--installed", action="store_true", help="Installed targets (rustup)")
    p_list.add_argument("--toolchain", default=DEFAULT_TOOLCHAIN)
    p_info = sub.add_parser("info", help="Show target details and requirements")
    p_info.add_argument("target")
    p_add = sub.add_parser("add", help="Install a target with rustup")
    p_add.add_argument("target")
    p_add.add_argument("--toolchain", default=DEFAULT_TOOLCHAIN)
    args = ap.parse_args(argv)

    if args.action == "list":
        return run_target_list(args.installed, args.toolchain)
    if args.action == "info":
        return run_target_info(args.target)
    return run_target_add(args.target, args.toolchain)
