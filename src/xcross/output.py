"""Console status lines (print-based, emoji-prefixed). Errors and warnings go to stderr."""

from __future__ import annotations

import sys
import threading

_lock = threading.Lock()


def _emit(line: str, err: bool = False) -> None:
    # Parallel builds print from worker threads; keep lines whole.
    with _lock:
        print(line, file=sys.stderr if err else sys.stdout, flush=True)


def section(title: str) -> None:
    _emit(f"\n== {title} ==")


def info(msg: str) -> None:
    _emit(f"Info:  {msg}")


def progress(msg: str) -> None:
    _emit(f"🔨 {msg}")


def success(msg: str) -> None:
    _emit(f"✅ {msg}")


def warning(msg: str) -> None:
    _emit(f"⚠️  {msg}", err=True)


def error(msg: str) -> None:
    _emit(f"❌ {msg}", err=True)


def hint(msg: str) -> None:
    _emit(f"💡 {msg}")


def tip(msg: str) -> None:
    _emit(f"   Tip: {msg}")


def report_error(exc: BaseException) -> None:
    """Print an error with its suggestion and hint (XcrossError attributes when present)."""
    error(str(exc))
    suggestion = getattr(exc, "suggestion", None)
    if suggestion:
        for line in suggestion.splitlines():
            tip(line)
    h = getattr(exc, "hint", None)
    if h:
        hint(h)
