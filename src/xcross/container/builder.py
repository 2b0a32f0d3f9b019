"""Run a cargo build inside a container: select image, pull per policy, mount, run."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from xcross.container.images import CrossImage, ImageSelector
from xcross.container.runtime import ContainerRuntime, RuntimeType, create_runtime
from xcross.errors import BuildError, ContainerError

log = logging.getLogger(__name__)

PULL_POLICIES = ("always", "if-not-present", "never")
CARGO_CACHE_MOUNT = "/root/.cargo"


@dataclass
class ContainerConfig:
    runtime: RuntimeType = RuntimeType.AUTO
    image: str = ""
    volumes: list[tuple[str, str]] = field(default_factory=list)
    env: list[tuple[str, str]] = field(default_factory=list)
    workdir: str = "/project"
    pull_policy: str = "if-not-present"


def container_command(target: str, cargo_args: list[str], operation: str = "build") -> list[str]:
    return ["cargo", operation, "--target", target, *cargo_args]


class ContainerBuilder:
    """Engine + image selector. The engine is resolved here, once."""

    def __init__(
        self,
        runtime_type: RuntimeType = RuntimeType.AUTO,
        registry: str | None = None,
        runtime: ContainerRuntime | None = None,
        host_os: str | None = None,
    ):
        self.runtime = runtime if runtime is not None else create_runtime(runtime_type, host_os)
        self.image_selector = ImageSelector(registry)

    @property
    def runtime_name(self) -> str:
        return self.runtime.name

    def is_available(self) -> bool:
        return self.runtime.is_available()

    def select_image(self, target: str) -> CrossImage:
        return self.image_selector.select_for_target(target)

    def _ensure_image(self, image: str, pull_policy: str) -> None:
        if pull_policy == "never":
            return
        if pull_policy == "if-not-present" and image in self.runtime.list_images():
            log.debug("Image %s already present", image)
            return
        self.runtime.pull_image(image)

    def build(
        self,
        target: str,
        cargo_args: list[str],
        config: ContainerConfig,
        project_dir: Path | None = None,
        operation: str = "build",
    ) -> None:
        """Build target in a container. Raises ContainerError (engine/image/pull) or BuildError (exit != 0)."""
        if not self.is_available():
            msg = f"Container runtime '{self.runtime_name}' is not available"
            raise ContainerError(msg, hint="Make sure the container runtime is installed and running")
        if config.pull_policy not in PULL_POLICIES:
            msg = f"Invalid pull policy: {config.pull_policy}"
            raise ContainerError(msg)

        image = config.image or self.select_image(target).full_name
        self._ensure_image(image, config.pull_policy)

        project = (project_dir or Path.cwd()).resolve()
        volumes = [*config.volumes, (str(project), config.workdir)]
        home = os.environ.get("HOME")
        if home:
            volumes.append((str(Path(home) / ".cargo"), CARGO_CACHE_MOUNT))

        cmd = container_command(target, cargo_args, operation)
        rc = self.runtime.run(image, cmd, volumes, list(config.env), config.workdir)
        if rc != 0:
            msg = f"Container build failed for target {target}"
            raise BuildError(
                msg,
                target=target,
                exit_code_value=rc,
                suggestion="Run with --verbose to see detailed error output",
            )
