"""Container engine abstraction (docker, podman). The engine is picked once, at construction."""

from __future__ import annotations

import logging
import subprocess
import sys
from abc import ABC, abstractmethod
from enum import Enum

from xcross.errors import ConfigError, ContainerError, container_not_found
from xcross.helpers import host_os_name

log = logging.getLogger(__name__)


class RuntimeType(Enum):
    AUTO = "auto"
    DOCKER = "docker"
    PODMAN = "podman"

    @classmethod
    def parse(cls, value: str) -> RuntimeType:
        try:
            return cls(value.lower())
        except ValueError:
            msg = f"Unknown runtime type: {value}. Must be one of: auto, docker, podman"
            raise ConfigError(msg) from None


def _interactive() -> bool:
    try:
        return sys.stdin is not None and sys.stdin.isatty()
    except (AttributeError, OSError, ValueError):
        return False


class ContainerRuntime(ABC):
    """Operations every engine supports."""

    name: str

    @abstractmethod
    def is_available(self) -> bool: ...

    @abstractmethod
    def pull_image(self, image: str) -> None: ...

    @abstractmethod
    def run(
        self,
        image: str,
        command: list[str],
        volumes: list[tuple[str, str]],
        env: list[tuple[str, str]],
        workdir: str,
    ) -> int: ...

    @abstractmethod
    def list_images(self) -> list[str]: ...


class CliRuntime(ContainerRuntime):
    """Engine driven through a docker-compatible CLI."""

    def is_available(self) -> bool:
        """`<engine> --version` exits 0."""
        try:
            r = subprocess.run([self.name, "--version"], capture_output=True, text=True)
        except OSError:
            return False
        return r.returncode == 0

    def pull_image(self, image: str) -> None:
        try:
            r = subprocess.run([self.name, "pull", image])
        except OSError as e:
            msg = f"Failed to execute {self.name} pull: {e}"
            raise ContainerError(msg) from e
        if r.returncode != 0:
            msg = f"Failed to pull image: {image}"
            raise ContainerError(msg, hint="Check network access and the image name")

    def run_args(
        self,
        image: str,
        command: list[str],
        volumes: list[tuple[str, str]],
        env: list[tuple[str, str]],
        workdir: str,
    ) -> list[str]:
        args = [self.name, "run", "--rm"]
        if _interactive():
            args.append("-it")
        args += ["-w", workdir]
        for host, container in volumes:
            args += ["-v", f"{host}:{container}"]
        for key, value in env:
            args += ["-e", f"{key}={value}"]
        return [*args, image, *command]

    def run(
        self,
        image: str,
        command: list[str],
        volumes: list[tuple[str, str]],
        env: list[tuple[str, str]],
        workdir: str,
    ) -> int:
        """Run command in a throwaway container. Returns the container process exit code."""
        args = self.run_args(image, command, volumes, env, workdir)
        log.debug("Executing: %s", " ".join(args))
        try:
            r = subprocess.run(args)
        except OSError as e:
            msg = f"Failed to execute {self.name} run: {e}"
            raise ContainerError(msg) from e
        return r.returncode

    def list_images(self) -> list[str]:
        try:
            r = subprocess.run(
                [self.name, "images", "--format", "{{.Repository}}:{{.Tag}}"],
                capture_output=True,
                text=True,
            )
        except OSError as e:
            msg = f"Failed to list images: {e}"
            raise ContainerError(msg) from e
        if r.returncode != 0:
            msg = "Failed to list images"
            raise ContainerError(msg)
        return [line.strip() for line in r.stdout.splitlines() if line.strip()]


class DockerRuntime(CliRuntime):
    name = "docker"


class PodmanRuntime(CliRuntime):
    name = "podman"


# Auto-detection order.
ENGINES: tuple[type[CliRuntime], ...] = (DockerRuntime, PodmanRuntime)


def create_runtime(runtime_type: RuntimeType, host_os: str | None = None) -> ContainerRuntime:
    """Probe and return an available engine. Raises ContainerNotAvailableError with install hints."""
    host_os = host_os or host_os_name()
    if runtime_type is RuntimeType.AUTO:
        for engine_cls in ENGINES:
            engine = engine_cls()
            if engine.is_available():
                log.debug("Auto-selected container runtime %s", engine.name)
                return engine
        raise container_not_found("docker/podman", host_os)
    engine = DockerRuntime() if runtime_type is RuntimeType.DOCKER else PodmanRuntime()
    if engine.is_available():
        return engine
    raise container_not_found(engine.name, host_os)