"""Container builds: engine selection (docker/podman), image lookup, and in-container cargo runs."""

from .builder import PULL_POLICIES, ContainerBuilder, ContainerConfig, container_command
from .images import DEFAULT_REGISTRY, IMAGES, CrossImage, ImageSelector
from .runtime import (
    ContainerRuntime,
    DockerRuntime,
    PodmanRuntime,
    RuntimeType,
    create_runtime,
)

__all__ = [
    "DEFAULT_REGISTRY",
    "IMAGES",
    "PULL_POLICIES",
    "ContainerBuilder",
    "ContainerConfig",
    "ContainerRuntime",
    "CrossImage",
    "DockerRuntime",
    "ImageSelector",
    "PodmanRuntime",
    "RuntimeType",
    "container_command",
    "create_runtime",
]
