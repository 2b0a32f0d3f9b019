"""Find and load xcross.yaml by walking up from a start directory."""

from __future__ import annotations

import logging
from pathlib import Path

from xcross.config.model import Config
from xcross.helpers import find_upwards

log = logging.getLogger(__name__)

CONFIG_NAMES = ("xcross.yaml", "xcross.yml")


def find_config(start: Path | None = None) -> Path | None:
    """Nearest xcross.yaml (or xcross.yml) in start or a parent, else None."""
    start = start or Path.cwd()
    for name in CONFIG_NAMES:
        found = find_upwards(start, name)
        if found is not None:
            return found
    return None


def load_config(start: Path | None = None, path: Path | None = None) -> tuple[Config, Path | None]:
    """Load and validate path (or the discovered file). Defaults when none exists."""
    path = path or find_config(start)
    if path is None:
        log.debug("No xcross.yaml found; using defaults")
        return Config(), None
    config = Config.from_file(path)
    config.validate()
    log.debug("Loaded configuration from %s", path)
    return config, path
