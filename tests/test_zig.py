"""Tests for xcross.toolchain.zig."""

import os
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from xcross.errors import ToolchainError
from xcross.helpers import cargo_linker_env_var
from xcross.target import Target
from xcross.toolchain import (
    WrapperRole,
    ZigToolchain,
    clean_cache,
    default_cache_dir,
    zig_install_hint,
    zig_target_for,
)

posix_only = pytest.mark.skipif(sys.platform.startswith("win"), reason="sh shims")


def _zig(cache_dir: Path) -> ZigToolchain:
    return ZigToolchain("/usr/bin/zig", "0.11.0", cache_dir=cache_dir)


class TestSupport:
    def test_windows_gnu_supported(self) -> None:
        assert ZigToolchain.supports_target_name("x86_64-pc-windows-gnu")

    def test_macos_not_supported(self) -> None:
        assert not ZigToolchain.supports_target_name("x86_64-apple-darwin")
        assert not ZigToolchain.supports_target_name("aarch64-apple-darwin")

    def test_wasm_and_unknown_not_supported(self) -> None:
        assert not ZigToolchain.supports_target_name("wasm32-unknown-unknown")
        assert not ZigToolchain.supports_target_name("riscv64gc-unknown-linux-gnu")

    def test_zig_triple_mapping(self) -> None:
        assert zig_target_for("i686-unknown-linux-gnu") == "i386-linux-gnu"
        assert zig_target_for("armv7-unknown-linux-gnueabihf") == "arm-linux-gnueabihf"
        assert zig_target_for("x86_64-pc-windows-gnu") == "x86_64-windows-gnu"
        assert zig_target_for("x86_64-apple-darwin") is None


class TestLinkerEnvVar:
    @pytest.mark.parametrize(
        ("triple", "expected"),
        [
            ("x86_64-pc-windows-gnu", "CARGO_TARGET_X86_64_PC_WINDOWS_GNU_LINKER"),
            ("aarch64-unknown-linux-gnu", "CARGO_TARGET_AARCH64_UNKNOWN_LINUX_GNU_LINKER"),
            ("armv7-unknown-linux-gnueabihf", "CARGO_TARGET_ARMV7_UNKNOWN_LINUX_GNUEABIHF_LINKER"),
        ],
    )
    def test_format(self, triple: str, expected: str) -> None:
        assert cargo_linker_env_var(triple) == expected


@posix_only
class TestCreateWrappers:
    def test_writes_executable_shims(self, cache_dir: Path) -> None:
        wrappers = _zig(cache_dir).create_wrappers(Target.from_triple("x86_64-pc-windows-gnu"))
        cc = wrappers[WrapperRole.COMPILER].path
        ar = wrappers[WrapperRole.ARCHIVER].path
        assert cc == cache_dir / "x86_64-pc-windows-gnu-cc"
        assert ar == cache_dir / "zig-ar"
        assert 'exec zig cc -target x86_64-windows-gnu "$@"' in cc.read_text()
        assert 'exec zig ar "$@"' in ar.read_text()
        assert cc.read_text().startswith("#!/bin/sh\n")
        assert os.access(cc, os.X_OK)
        assert os.access(ar, os.X_OK)

    def test_linker_is_compiler_shim(self, cache_dir: Path) -> None:
        wrappers = _zig(cache_dir).create_wrappers(Target.from_triple("aarch64-unknown-linux-gnu"))
        assert wrappers[WrapperRole.LINKER].path == wrappers[WrapperRole.COMPILER].path
        assert wrappers[WrapperRole.LINKER].role is WrapperRole.LINKER

    def test_existing_shim_not_rewritten(self, cache_dir: Path) -> None:
        zig = _zig(cache_dir)
        target = Target.from_triple("x86_64-unknown-linux-gnu")
        cc = zig.create_wrappers(target)[WrapperRole.COMPILER].path
        cc.write_text("#!/bin/sh\n# customised\n")
        zig.create_wrappers(target)
        assert cc.read_text() == "#!/bin/sh\n# customised\n"

    def test_rewritten_when_reuse_disabled(self, cache_dir: Path) -> None:
        target = Target.from_triple("x86_64-unknown-linux-gnu")
        cc = _zig(cache_dir).create_wrappers(target)[WrapperRole.COMPILER].path
        cc.write_text("#!/bin/sh\n# stale\n")
        zig = ZigToolchain("/usr/bin/zig", "0.11.0", cache_dir=cache_dir, reuse_wrappers=False)
        zig.create_wrappers(target)
        assert "zig cc -target x86_64-linux-gnu" in cc.read_text()
        assert sorted(p.name for p in cache_dir.iterdir()) == ["x86_64-unknown-linux-gnu-cc", "zig-ar"]

    def test_archiver_shared_across_targets(self, cache_dir: Path) -> None:
        zig = _zig(cache_dir)
        a = zig.create_wrappers(Target.from_triple("x86_64-unknown-linux-gnu"))
        b = zig.create_wrappers(Target.from_triple("x86_64-pc-windows-gnu"))
        assert a[WrapperRole.ARCHIVER].path == b[WrapperRole.ARCHIVER].path
        assert a[WrapperRole.COMPILER].path != b[WrapperRole.COMPILER].path

    def test_no_temp_files_left(self, cache_dir: Path) -> None:
        _zig(cache_dir).create_wrappers(Target.from_triple("x86_64-pc-windows-gnu"))
        assert sorted(p.name for p in cache_dir.iterdir()) == ["x86_64-pc-windows-gnu-cc", "zig-ar"]

    def test_unsupported_target_raises(self, cache_dir: Path) -> None:
        with pytest.raises(ToolchainError):
            _zig(cache_dir).create_wrappers(Target.from_triple("x86_64-apple-darwin"))
        assert not cache_dir.exists()


@posix_only
class TestEnvironmentForTarget:
    def test_cc_ar_and_linker(self, cache_dir: Path) -> None:
        env = _zig(cache_dir).environment_for_target(Target.from_triple("x86_64-pc-windows-gnu"))
        cc = str(cache_dir / "x86_64-pc-windows-gnu-cc")
        assert env == {
            "CC": cc,
            "AR": str(cache_dir / "zig-ar"),
            "CARGO_TARGET_X86_64_PC_WINDOWS_GNU_LINKER": cc,
        }

    def test_unsupported_raises(self, cache_dir: Path) -> None:
        with pytest.raises(ToolchainError):
            _zig(cache_dir).environment_for_target(Target.from_triple("wasm32-unknown-unknown"))


class TestDetect:
    def test_none_when_not_on_path(self) -> None:
        with patch("xcross.toolchain.zig.shutil.which", return_value=None):
            assert ZigToolchain.detect() is None

    def test_reads_version(self, cache_dir: Path) -> None:
        with (
            patch("xcross.toolchain.zig.shutil.which", return_value="/opt/zig/zig"),
            patch("xcross.toolchain.zig.subprocess.run") as m_run,
        ):
            m_run.return_value = type("R", (), {"returncode": 0, "stdout": "0.11.0\n"})()
            zig = ZigToolchain.detect(cache_dir)
        assert zig is not None
        assert zig.version == "0.11.0"
        assert zig.zig_path == Path("/opt/zig/zig")
        assert zig.cache_dir == cache_dir
        assert zig.reuse_wrappers is True
        assert m_run.call_args[0][0] == ["/opt/zig/zig", "version"]

    def test_none_when_version_fails(self) -> None:
        with (
            patch("xcross.toolchain.zig.shutil.which", return_value="/opt/zig/zig"),
            patch("xcross.toolchain.zig.subprocess.run") as m_run,
        ):
            m_run.return_value = type("R", (), {"returncode": 1, "stdout": ""})()
            assert ZigToolchain.detect() is None

    def test_default_cache_dir_under_xcross_home(self, isolated_home: Path) -> None:
        assert default_cache_dir() == isolated_home / "zig-wrappers"
        assert ZigToolchain("/usr/bin/zig", "0.11.0").cache_dir == isolated_home / "zig-wrappers"


class TestCache:
    @posix_only
    def test_clean_removes_shims(self, cache_dir: Path) -> None:
        zig = _zig(cache_dir)
        zig.create_wrappers(Target.from_triple("x86_64-unknown-linux-gnu"))
        assert zig.clean_cache()
        assert not cache_dir.exists()

    def test_clean_missing_dir(self, cache_dir: Path) -> None:
        assert clean_cache(cache_dir) is False

    def test_install_hint(self) -> None:
        assert zig_install_hint("macos") == "Install with: brew install zig"
        assert "ziglang.org" in zig_install_hint("plan9")
