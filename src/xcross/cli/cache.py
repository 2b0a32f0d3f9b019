"""`xcross cache clean`: remove generated Zig wrapper scripts."""

from __future__ import annotations

import argparse
from pathlib import Path

from xcross import output
from xcross.toolchain import clean_cache, default_cache_dir


def run_cache_argv(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(prog="xcross cache", description="Manage the wrapper cache")
    sub = ap.add_subparsers(dest="action", required=True)
    p_clean = sub.add_parser("clean", help="Remove the Zig wrapper cache directory")
    p_clean.add_argument("--cache-dir", type=Path, default=None, help="Cache directory override")
    args = ap.parse_args(argv or [])

    cache_dir = args.cache_dir or default_cache_dir()
    if clean_cache(cache_dir):
        output.success(f"Removed {cache_dir}")
    else:
        output.info(f"Nothing to clean at {cache_dir}")
    return 0
