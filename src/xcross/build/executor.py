"""Build strategy selection and cargo invocation for a single target.

One decision per build():
1. target: options.target > config targets.default[0] > host (aliases resolved)
2. container if requested, forced by config, or the container.use_when policy holds
3. otherwise Zig wrapper per WrapperMode (AUTO only for cross-OS targets)
4. otherwise native, with the configured or suggested linker
Per-target env and rustflags from config are layered over the strategy env.
"""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import Any, Callable

from xcross import output
from xcross.build.options import BuildDecision, BuildOptions, CargoOperation, Strategy, WrapperMode
from xcross.config import Config
from xcross.config.model import USE_WHEN_ALWAYS, USE_WHEN_CROSS_OS, USE_WHEN_NEVER
from xcross.container import IMAGES, ContainerBuilder, ContainerConfig, RuntimeType
from xcross.errors import BuildError, ConfigError, LinkerMissingError, ToolchainError, linker_not_found
from xcross.helpers import (
    cargo_linker_env_var,
    has_cargo_toml,
    host_os_name,
    is_command_available,
)
from xcross.target import Target, detect_host, linker_install_tips, parse_target, requirements_for
from xcross.toolchain import ToolchainManager, ZigToolchain, zig_install_hint

log = logging.getLogger(__name__)

DEFAULT_TOOLCHAIN = "stable"

# Sentinel: detect Zig lazily unless a toolchain (or None) is injected.
_DETECT: Any = object()


class Builder:
    """Strategy selector for one target at a time. Holds no state shared across targets."""

    def __init__(
        self,
        config: Config | None = None,
        toolchain_manager: ToolchainManager | None = None,
        zig_toolchain: ZigToolchain | None = _DETECT,
        host: Target | None = None,
        container_factory: Callable[..., ContainerBuilder] = ContainerBuilder,
        project_dir: Path | None = None,
    ):
        self.config = config if config is not None else Config()
        self._toolchain_manager = toolchain_manager
        self._zig = zig_toolchain
        self._host = host
        self.container_factory = container_factory
        self.project_dir = project_dir or Path.cwd()

    @property
    def host(self) -> Target:
        if self._host is None:
            self._host = detect_host()
        return self._host

    @property
    def zig_toolchain(self) -> ZigToolchain | None:
        if self._zig is _DETECT:
            self._zig = ZigToolchain.detect(reuse_wrappers=self.config.build.cache)
        return self._zig

    @property
    def toolchain_manager(self) -> ToolchainManager:
        if self._toolchain_manager is None:
            self._toolchain_manager = ToolchainManager.find()
        return self._toolchain_manager

    # --- Selection ---

    def resolve_target(self, options: BuildOptions) -> Target:
        """Explicit target, else first configured default, else host.

        Raises InvalidTargetError (with close matches) for an unknown short name.
        """
        if options.target:
            triple = options.target
        elif self.config.targets.default:
            triple = self.config.targets.default[0]
            output.info(f"Using default target from config: {triple}")
        else:
            output.info(f"No target specified, using host: {self.host.triple}")
            return self.host
        host = self.host if triple.lower() == "macos" else None
        return parse_target(triple, host)

    def should_use_container(self, target: Target, options: BuildOptions) -> bool:
        """Explicit request, config forcing, or the use_when policy."""
        if options.use_container or self.config.build.force_container:
            return True
        tc = self.config.get_target_config(target.triple)
        if tc is not None and tc.force_container:
            return True
        policy = self.config.container.use_when
        if policy == USE_WHEN_ALWAYS:
            return True
        if policy == USE_WHEN_NEVER:
            return False
        if policy == USE_WHEN_CROSS_OS:
            return target.os != self.host.os
        msg = f"Invalid container.use_when: {policy!r}"
        raise ConfigError(msg)

    def _try_wrapper(self, target: Target, mode: WrapperMode, notes: list[str]) -> dict[str, str] | None:
        """Zig env overrides, or None to fall through to native. Forced mode never falls through."""
        if mode is WrapperMode.DISABLE:
            log.debug("Zig disabled for %s", target.triple)
            return None
        if mode is WrapperMode.FORCE:
            zig = self.zig_toolchain
            if zig is None:
                msg = "Zig not found. Install Zig to use --zig"
                raise ToolchainError(msg, suggestion=zig_install_hint(host_os_name()))
            if not zig.supports_target(target):
                msg = f"Zig does not support target '{target.triple}'"
                raise ToolchainError(
                    msg,
                    suggestion="Zig supports Linux (x86_64, aarch64, armv7, i686) and Windows GNU targets",
                    hint="Run without --zig to use the native toolchain",
                )
            output.info(f"Zig {zig.version} forced for cross-compilation")
            return zig.environment_for_target(target)
        if mode is WrapperMode.AUTO:
            if target.os == self.host.os:
                return None
            zig = self.zig_toolchain
            if zig is not None and zig.supports_target(target):
                output.info(f"Zig {zig.version} detected, using for cross-compilation")
                return zig.environment_for_target(target)
            if zig is not None:
                notes.append(
                    f"Zig doesn't support target '{target.triple}', falling back to native toolchain"
                )
            elif ZigToolchain.supports_target_name(target.triple):
                notes.append("Zig is not installed but could simplify this cross-compilation")
                notes.append(f"{zig_install_hint(host_os_name())} (then use --zig)")
            return None
        msg = f"Unknown wrapper mode: {mode}"
        raise ConfigError(msg)

    def _layer_config_env(self, target: Target, env: dict[str, str]) -> dict[str, str]:
        tc = self.config.get_target_config(target.triple)
        if tc is None:
            return env
        env.update(tc.env)
        if tc.rustflags is not None:
            env["RUSTFLAGS"] = " ".join(tc.rustflags)
        return env

    def decide(self, target: Target, options: BuildOptions) -> BuildDecision:
        """Pick a strategy and compute env overrides without running cargo."""
        notes: list[str] = []
        if self.should_use_container(target, options):
            env = self._layer_config_env(target, {})
            return BuildDecision(target, Strategy.CONTAINER, env)

        wrapper_env = self._try_wrapper(target, options.wrapper, notes)
        if wrapper_env is not None:
            env = self._layer_config_env(target, dict(wrapper_env))
            return BuildDecision(target, Strategy.WRAPPER, env, notes=tuple(notes))

        tc = self.config.get_target_config(target.triple)
        if tc is not None and tc.linker:
            linker: str | None = tc.linker
        else:
            linker = requirements_for(target).linker
        env: dict[str, str] = {}
        if linker:
            env[cargo_linker_env_var(target.triple)] = linker
            if not is_command_available(linker):
                notes.append(f"Linker '{linker}' not found in PATH")
                notes.extend(linker_install_tips(host_os_name(), target))
                notes.append("The build may fail if the linker is not available")
        env = self._layer_config_env(target, env)
        return BuildDecision(target, Strategy.NATIVE, env, linker=linker, notes=tuple(notes))

    # --- Invocation ---

    def cargo_flags(self, options: BuildOptions) -> list[str]:
        """Flags after `--target <triple>`: release, verbose, config cargo_flags, pass-through."""
        flags: list[str] = []
        if options.release:
            flags.append("--release")
        if options.verbose or "--verbose" in self.config.build.cargo_flags:
            flags.append("--verbose")
        flags += [f for f in self.config.build.cargo_flags if f != "--verbose"]
        flags += options.cargo_args
        return flags

    def cargo_command(self, target: Target, options: BuildOptions) -> list[str]:
        cmd = ["cargo"]
        if options.toolchain:
            cmd.append(f"+{options.toolchain}")
        return [*cmd, options.operation.value, "--target", target.triple, *self.cargo_flags(options)]

    def _missing_linker(self, decision: BuildDecision) -> LinkerMissingError | None:
        """LinkerMissingError when a native build's linker is not on PATH."""
        if decision.strategy is not Strategy.NATIVE or not decision.linker:
            return None
        if is_command_available(decision.linker):
            return None
        return linker_not_found(decision.linker, decision.target.triple, host_os_name())

    def _remediation(
        self,
        decision: BuildDecision,
        options: BuildOptions,
        missing: LinkerMissingError | None = None,
    ) -> str:
        target = decision.target
        lines: list[str] = []
        if decision.strategy is Strategy.NATIVE:
            if missing is not None:
                lines.append(
                    f"Install the linker '{missing.linker}' or set targets.{target.triple}.linker in xcross.yaml"
                )
                lines.append(missing.suggestion)
            if target.os != self.host.os and ZigToolchain.supports_target_name(target.triple):
                lines.append(f"Try the Zig wrapper: xcross {options.operation.value} --target {target.triple} --zig")
            if target.triple in IMAGES:
                lines.append(
                    f"Or build in a container: xcross {options.operation.value} --target {target.triple} --container"
                )
        lines.append("Run with --verbose to see detailed error output")
        return "\n".join(lines)

    def _build_in_container(self, decision: BuildDecision, options: BuildOptions) -> None:
        target = decision.target
        settings = self.config.container
        output.section("xcross container build")
        output.info(f"Building {target.triple} using container")
        runtime_type = RuntimeType.parse(settings.runtime)
        builder = self.container_factory(runtime_type, settings.registry)
        output.success(f"Using container runtime: {builder.runtime_name}")

        tc = self.config.get_target_config(target.triple)
        image = tc.image if tc is not None and tc.image else builder.select_image(target.triple).full_name
        output.info(f"Using image: {image}")
        cfg = ContainerConfig(
            runtime=runtime_type,
            image=image,
            env=list(decision.env.items()),
            pull_policy=settings.pull_policy,
        )
        builder.build(
            target.triple,
            self.cargo_flags(options),
            cfg,
            project_dir=self.project_dir,
            operation=options.operation.value,
        )
        output.success(f"Container build completed for {target.triple}")

    def _artifact_tips(self, target: Target, options: BuildOptions) -> None:
        if options.operation is CargoOperation.CHECK:
            return
        profile = "release" if options.release else "debug"
        output.tip(f"{profile.capitalize()} build artifacts are in target/{target.triple}/{profile}/")

    def build(self, options: BuildOptions) -> BuildDecision:
        """Decide and run cargo once for options.target. Returns the decision on success.

        Raises ConfigError (no Cargo.toml, bad config), TargetError, ToolchainError,
        ContainerError, or BuildError (cargo exited non-zero).
        """
        op = options.operation
        output.section(f"xcross {op.value}")
        if not has_cargo_toml(self.project_dir):
            msg = "No Cargo.toml found. This doesn't appear to be a Rust project."
            raise ConfigError(
                msg,
                suggestion="Initialize a new Rust project with: cargo init\nOr navigate to an existing Rust project directory",
            )

        target = self.resolve_target(options)
        output.progress(f"{op.description} for target: {target.triple}")
        decision = self.decide(target, options)
        log.debug("Strategy for %s: %s", target.triple, decision.strategy.value)
        for note in decision.notes:
            output.hint(note)

        if decision.strategy is Strategy.CONTAINER:
            self._build_in_container(decision, options)
            self._artifact_tips(target, options)
            return decision

        toolchain = options.toolchain or DEFAULT_TOOLCHAIN
        output.progress("Checking toolchain and target...")
        self.toolchain_manager.prepare_target(toolchain, target)
        output.success("Toolchain and target ready")

        cmd = self.cargo_command(target, options)
        for key, value in decision.env.items():
            log.debug("Setting %s=%s", key, value)
        if options.verbose:
            output.info(f"Executing: {' '.join(cmd)}")
        output.progress(f"Running cargo {op.value}...")
        try:
            r = subprocess.run(cmd, env={**os.environ, **decision.env}, cwd=str(self.project_dir))
        except OSError as e:
            msg = f"Failed to execute cargo: {e}"
            raise BuildError(msg, target=target.triple) from e
        if r.returncode != 0:
            missing = self._missing_linker(decision)
            msg = f"{op.description} failed for target {target.triple}"
            raise BuildError(
                msg,
                target=target.triple,
                exit_code_value=r.returncode,
                suggestion=self._remediation(decision, options, missing),
            ) from missing
        output.success(f"{op.description} completed for {target.triple}")
        self._artifact_tips(target, options)
        return decision
