"""Main CLI entry point for xcross."""

import logging
import sys

from xcross import __version__, output
from xcross.build import CargoOperation
from xcross.cli import build as build_cli
from xcross.cli import cache as cache_cli
from xcross.cli import target as target_cli
from xcross.errors import ExitCode, XcrossError, exit_code_for

USAGE = [
    "Usage: xcross <command> [args...]",
    "Commands:",
    "  build [--target T ...] [--release] [--zig|--no-zig] [--container] [-- cargo args]",
    "                        - Cross-compile with cargo build",
    "  check ...             - Same options, runs cargo check",
    "  test ...              - Same options, runs cargo test",
    "  target list|info|add  - List known targets, show requirements, install with rustup",
    "  cache clean           - Remove generated Zig wrapper scripts",
    "  version               - Print version",
]

OPERATIONS = {
    "build": CargoOperation.BUILD,
    "check": CargoOperation.CHECK,
    "test": CargoOperation.TEST,
}


def _configure_logging(argv: list[str]) -> None:
    # Flags after "--" belong to cargo.
    own, _ = build_cli.split_passthrough(argv)
    verbose = "--verbose" in own or "-v" in own
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def dispatch(command: str, argv: list[str]) -> int:
    """Run a subcommand. Returns its exit code; errors propagate."""
    if command in OPERATIONS:
        return build_cli.run_build_argv(argv, OPERATIONS[command])
    if command == "target":
        return target_cli.run_target_argv(argv)
    if command == "cache":
        return cache_cli.run_cache_argv(argv)
    if command in ("version", "--version"):
        print(f"xcross {__version__}")
        return 0
    print(f"Error: Unknown command: {command}", file=sys.stderr)
    return int(ExitCode.GENERAL)


def main() -> None:
    """Main CLI entry point."""
    if len(sys.argv) < 2 or sys.argv[1] in ("-h", "--help"):
        for line in USAGE:
            print(line, file=sys.stderr)
        sys.exit(1)

    command, argv = sys.argv[1], sys.argv[2:]
    _configure_logging(argv)
    try:
        rc = dispatch(command, argv)
    except KeyboardInterrupt as e:
        output.error("Cancelled")
        sys.exit(int(exit_code_for(e)))
    except (XcrossError, OSError) as e:
        output.report_error(e)
        sys.exit(int(exit_code_for(e)))
    sys.exit(rc)


if __name__ == "__main__":
    main()
