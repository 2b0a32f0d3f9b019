"""xcross.yaml: model, validation, and discovery."""

from .discovery import CONFIG_NAMES, find_config, load_config
from .model import (
    VALID_PULL_POLICIES,
    VALID_RUNTIMES,
    VALID_USE_WHEN,
    BuildConfig,
    Config,
    ContainerSettings,
    ProfileConfig,
    TargetCustomConfig,
    TargetsConfig,
)

__all__ = [
    "CONFIG_NAMES",
    "VALID_PULL_POLICIES",
    "VALID_RUNTIMES",
    "VALID_USE_WHEN",
    "BuildConfig",
    "Config",
    "ContainerSettings",
    "ProfileConfig",
    "TargetCustomConfig",
    "TargetsConfig",
    "find_config",
    "load_config",
]
