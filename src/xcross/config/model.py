"""xcross.yaml configuration model.

YAML format:
- targets.default: triples to build when none is given
- targets.<triple>: { linker, force_container, env: {K: V}, rustflags: [...], image }
- build: { parallel, jobs, cache, force_container, cargo_flags }
  (cache: false rewrites Zig wrapper scripts on every build instead of reusing them)
- a single string where a list is expected counts as a one-item list
- container: { runtime: auto|docker|podman, use_when: always|never|"target.os != host.os",
  registry, pull_policy: always|if-not-present|never }
- profiles.<name>: { targets: [...] }
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from xcross.errors import ConfigError

VALID_RUNTIMES = ("auto", "docker", "podman")
VALID_PULL_POLICIES = ("always", "if-not-present", "never")
USE_WHEN_ALWAYS = "always"
USE_WHEN_NEVER = "never"
USE_WHEN_CROSS_OS = "target.os != host.os"
VALID_USE_WHEN = (USE_WHEN_ALWAYS, USE_WHEN_NEVER, USE_WHEN_CROSS_OS)


def _str_list(value: Any, key: str) -> list[str]:
    """A YAML list of strings; a single string is one item. None is empty."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [str(v) for v in value]
    msg = f"{key} must be a list of strings"
    raise ConfigError(msg)


def _bool(value: Any, key: str) -> bool:
    # Only real YAML booleans; bool("false") would be True.
    if not isinstance(value, bool):
        msg = f"{key} must be true or false"
        raise ConfigError(msg)
    return value


@dataclass
class TargetCustomConfig:
    linker: str | None = None
    force_container: bool | None = None
    env: dict[str, str] = field(default_factory=dict)
    rustflags: list[str] | None = None
    image: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], triple: str = "<target>") -> TargetCustomConfig:
        rustflags = data.get("rustflags")
        force_container = data.get("force_container")
        return cls(
            linker=data.get("linker"),
            force_container=(
                _bool(force_container, f"targets.{triple}.force_container")
                if force_container is not None
                else None
            ),
            env={str(k): str(v) for k, v in (data.get("env") or {}).items()},
            rustflags=(
                _str_list(rustflags, f"targets.{triple}.rustflags") if rustflags is not None else None
            ),
            image=data.get("image"),
        )


@dataclass
class TargetsConfig:
    default: list[str] = field(default_factory=list)
    custom: dict[str, TargetCustomConfig] = field(default_factory=dict)


@dataclass
class BuildConfig:
    parallel: bool = True
    jobs: int | None = None
    cache: bool = True
    force_container: bool = False
    cargo_flags: list[str] = field(default_factory=list)


@dataclass
class ContainerSettings:
    runtime: str = "auto"
    # Containers only when asked for; see DESIGN.md.
    use_when: str = USE_WHEN_NEVER
    registry: str | None = None
    pull_policy: str = "if-not-present"


@dataclass
class ProfileConfig:
    targets: list[str] = field(default_factory=list)


@dataclass
class Config:
    targets: TargetsConfig = field(default_factory=TargetsConfig)
    build: BuildConfig = field(default_factory=BuildConfig)
    container: ContainerSettings = field(default_factory=ContainerSettings)
    profiles: dict[str, ProfileConfig] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        """Build a Config from parsed YAML. Unknown top-level sections raise ConfigError."""
        unknown = set(data) - {"targets", "build", "container", "profiles"}
        if unknown:
            msg = f"Unknown configuration section(s): {', '.join(sorted(unknown))}"
            raise ConfigError(msg)
        try:
            targets_data = dict(data.get("targets") or {})
            default = _str_list(targets_data.pop("default", None), "targets.default")
            custom = {
                str(triple): TargetCustomConfig.from_dict(v or {}, str(triple))
                for triple, v in targets_data.items()
            }
            b = data.get("build") or {}
            c = data.get("container") or {}
            profiles = {
                str(name): ProfileConfig(
                    targets=_str_list((p or {}).get("targets"), f"profiles.{name}.targets")
                )
                for name, p in (data.get("profiles") or {}).items()
            }
            return cls(
                targets=TargetsConfig(default=default, custom=custom),
                build=BuildConfig(
                    parallel=_bool(b.get("parallel", True), "build.parallel"),
                    jobs=b.get("jobs"),
                    cache=_bool(b.get("cache", True), "build.cache"),
                    force_container=_bool(b.get("force_container", False), "build.force_container"),
                    cargo_flags=_str_list(b.get("cargo_flags"), "build.cargo_flags"),
                ),
                container=ContainerSettings(
                    runtime=str(c.get("runtime", "auto")),
                    use_when=str(c.get("use_when", USE_WHEN_NEVER)),
                    registry=c.get("registry"),
                    pull_policy=str(c.get("pull_policy", "if-not-present")),
                ),
                profiles=profiles,
            )
        except (AttributeError, TypeError, ValueError) as e:
            msg = f"Malformed configuration: {e}"
            raise ConfigError(msg) from e

    @classmethod
    def from_yaml(cls, text: str) -> Config:
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as e:
            msg = f"Failed to parse YAML: {e}"
            raise ConfigError(msg) from e
        if not isinstance(data, dict):
            msg = "Configuration must be a mapping"
            raise ConfigError(msg)
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, path: Path) -> Config:
        try:
            text = path.read_text()
        except OSError as e:
            msg = f"Failed to read config file {path}: {e}"
            raise ConfigError(msg) from e
        try:
            return cls.from_yaml(text)
        except ConfigError as e:
            raise ConfigError(e.message, suggestion=f"Check {path} for syntax errors") from e

    def to_dict(self) -> dict[str, Any]:
        targets: dict[str, Any] = {"default": list(self.targets.default)}
        for triple, tc in self.targets.custom.items():
            entry: dict[str, Any] = {}
            if tc.linker is not None:
                entry["linker"] = tc.linker
            if tc.force_container is not None:
                entry["force_container"] = tc.force_container
            if tc.env:
                entry["env"] = dict(tc.env)
            if tc.rustflags is not None:
                entry["rustflags"] = list(tc.rustflags)
            if tc.image is not None:
                entry["image"] = tc.image
            targets[triple] = entry
        return {
            "targets": targets,
            "build": {
                "parallel": self.build.parallel,
                "jobs": self.build.jobs,
                "cache": self.build.cache,
                "force_container": self.build.force_container,
                "cargo_flags": list(self.build.cargo_flags),
            },
            "container": {
                "runtime": self.container.runtime,
                "use_when": self.container.use_when,
                "registry": self.container.registry,
                "pull_policy": self.container.pull_policy,
            },
            "profiles": {n: {"targets": list(p.targets)} for n, p in self.profiles.items()},
        }

    def to_yaml(self) -> str:
        return yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False)

    def save(self, path: Path) -> None:
        path.write_text(self.to_yaml())

    def validate(self) -> None:
        """Raise ConfigError for invalid runtime, pull policy, use_when, or jobs."""
        if self.container.runtime not in VALID_RUNTIMES:
            msg = (
                f"Invalid container runtime: {self.container.runtime}. "
                f"Must be one of: {', '.join(VALID_RUNTIMES)}"
            )
            raise ConfigError(msg)
        if self.container.pull_policy not in VALID_PULL_POLICIES:
            msg = (
                f"Invalid pull policy: {self.container.pull_policy}. "
                f"Must be one of: {', '.join(VALID_PULL_POLICIES)}"
            )
            raise ConfigError(msg)
        if self.container.use_when not in VALID_USE_WHEN:
            msg = (
                f"Invalid container.use_when: {self.container.use_when!r}. "
                f"Must be one of: {', '.join(repr(v) for v in VALID_USE_WHEN)}"
            )
            raise ConfigError(msg)
        jobs = self.build.jobs
        if jobs is not None and (not isinstance(jobs, int) or isinstance(jobs, bool) or jobs <= 0):
            msg = "build.jobs must be greater than 0"
            raise ConfigError(msg)

    def merge(self, other: Config) -> None:
        """Overlay other onto self (other wins where it sets a value)."""
        if other.targets.default:
            self.targets.default = list(other.targets.default)
        self.targets.custom.update(other.targets.custom)
        self.build.parallel = other.build.parallel
        if other.build.jobs is not None:
            self.build.jobs = other.build.jobs
        self.build.cache = other.build.cache
        self.build.force_container = other.build.force_container
        if other.build.cargo_flags:
            self.build.cargo_flags = list(other.build.cargo_flags)
        self.container.runtime = other.container.runtime
        self.container.use_when = other.container.use_when
        if other.container.registry is not None:
            self.container.registry = other.container.registry
        self.container.pull_policy = other.container.pull_policy
        self.profiles.update(other.profiles)

    def get_target_config(self, target: str) -> TargetCustomConfig | None:
        return self.targets.custom.get(target)

    def get_profile(self, name: str) -> ProfileConfig | None:
        return self.profiles.get(name)
