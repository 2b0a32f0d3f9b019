"""`xcross build|check|test`: pick a strategy per target and run cargo."""

from __future__ import annotations

import argparse
from pathlib import Path

from xcross.build import Builder, BuildOptions, CargoOperation, WrapperMode, run_build_all
from xcross.config import Config, load_config
from xcross.errors import ConfigError


def split_passthrough(argv: list[str]) -> tuple[list[str], list[str]]:
    """Split at the first '--': (xcross args, cargo args)."""
    if "--" in argv:
        i = argv.index("--")
        return argv[:i], argv[i + 1 :]
    return argv, []


def build_parser(operation: CargoOperation) -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog=f"xcross {operation.value}",
        description=f"Cross-compile with cargo {operation.value} (native, Zig, or container)",
    )
    ap.add_argument(
        "--target",
        "-t",
        action="append",
        default=[],
        help="Target triple or alias (repeatable; default: config targets.default, then host)",
    )
    ap.add_argument("--all", action="store_true", help="All targets in config targets.default")
    ap.add_argument("--profile", help="Targets from config profiles.<name>")
    ap.add_argument("--release", "-r", action="store_true", help="Release build")
    ap.add_argument("--toolchain", help="Rust toolchain (e.g. stable, nightly)")
    zig = ap.add_argument_group("zig")
    zig.add_argument("--zig", action="store_true", help="Force the Zig cross-compiler wrapper")
    zig.add_argument("--no-zig", action="store_true", help="Never use the Zig wrapper")
    ap.add_argument("--container", action="store_true", help="Build inside a container")
    ap.add_argument(
        "--parallel",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Build multiple targets concurrently (default: config build.parallel)",
    )
    ap.add_argument("--jobs", "-j", type=int, help="Concurrent builds with --parallel")
    ap.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    ap.add_argument(
        "--project-dir",
        type=Path,
        default=None,
        help="Project directory (default: cwd)",
    )
    return ap


def select_targets(args: argparse.Namespace, config: Config) -> list[str]:
    """--target list, else --profile, else --all (config defaults). Empty means builder default."""
    if args.target:
        return list(args.target)
    if args.profile:
        profile = config.get_profile(args.profile)
        if profile is None:
            msg = f"Profile '{args.profile}' not found in configuration"
            raise ConfigError(msg, suggestion="Define it under profiles.<name>.targets in xcross.yaml")
        return list(profile.targets)
    if args.all:
        if not config.targets.default:
            msg = "No default targets configured"
            raise ConfigError(msg, suggestion="Add targets.default to xcross.yaml")
        return list(config.targets.default)
    return []


def run_build_argv(
    argv: list[str] | None = None,
    operation: CargoOperation = CargoOperation.BUILD,
) -> int:
    """Parse argv and build. Returns the exit code; XcrossError propagates to the entry point."""
    own, cargo_args = split_passthrough(list(argv or []))
    args = build_parser(operation).parse_args(own)
    if args.jobs is not None and args.jobs <= 0:
        msg = "--jobs must be greater than 0"
        raise ConfigError(msg)

    project_dir = args.project_dir or Path.cwd()
    config, _ = load_config(project_dir)
    options = BuildOptions(
        release=args.release,
        toolchain=args.toolchain,
        wrapper=WrapperMode.from_flags(args.zig, args.no_zig),
        use_container=args.container,
        cargo_args=cargo_args,
        verbose=args.verbose,
        operation=operation,
    )
    targets = select_targets(args, config)

    def factory() -> Builder:
        return Builder(config=config, project_dir=project_dir)

    if len(targets) > 1:
        return run_build_all(
            targets,
            options,
            factory,
            parallel=config.build.parallel if args.parallel is None else args.parallel,
            jobs=args.jobs or config.build.jobs,
        )
    if targets:
        options = options.for_target(targets[0])
    factory().build(options)
    return 0
