"""Tests for xcross.toolchain.rustup and xcross.helpers."""

from pathlib import Path
from unittest.mock import patch

import pytest

from xcross.errors import ToolchainError
from xcross.helpers import find_upwards, host_os_name, os_family, xcross_home
from xcross.target import Target
from xcross.toolchain import ToolchainManager, parse_target_list, parse_toolchain_list

TOOLCHAINS = """\
stable-x86_64-unknown-linux-gnu (default)
nightly-x86_64-unknown-linux-gnu
1.80.0-x86_64-unknown-linux-gnu (active)
"""


def _r(returncode: int = 0, stdout: str = "", stderr: str = ""):
    return type("R", (), {"returncode": returncode, "stdout": stdout, "stderr": stderr})()


class TestParsing:
    def test_toolchain_list(self) -> None:
        tcs = parse_toolchain_list(TOOLCHAINS)
        assert [t.name for t in tcs] == [
            "stable-x86_64-unknown-linux-gnu",
            "nightly-x86_64-unknown-linux-gnu",
            "1.80.0-x86_64-unknown-linux-gnu",
        ]
        assert [t.is_default for t in tcs] == [True, False, False]

    def test_active_default_marks(self) -> None:
        (tc,) = parse_toolchain_list("stable-aarch64-apple-darwin (active, default)\n")
        assert tc.is_default

    def test_target_list(self) -> None:
        out = "aarch64-apple-darwin\nx86_64-unknown-linux-gnu (installed)\n\n"
        assert parse_target_list(out) == ["aarch64-apple-darwin", "x86_64-unknown-linux-gnu"]


class TestToolchainManager:
    def test_find_missing_rustup(self) -> None:
        with patch("xcross.toolchain.rustup.subprocess.run", side_effect=FileNotFoundError("rustup")):
            with pytest.raises(ToolchainError) as ei:
                ToolchainManager.find()
        assert "rustup.rs" in ei.value.suggestion

    def test_default_toolchain(self) -> None:
        with patch("xcross.toolchain.rustup.subprocess.run", return_value=_r(stdout=TOOLCHAINS)):
            tc = ToolchainManager().default_toolchain()
        assert tc is not None
        assert tc.name == "stable-x86_64-unknown-linux-gnu"

    def test_toolchain_installed_by_prefix(self) -> None:
        with patch("xcross.toolchain.rustup.subprocess.run", return_value=_r(stdout=TOOLCHAINS)):
            assert ToolchainManager().is_toolchain_installed("nightly")
            assert not ToolchainManager().is_toolchain_installed("beta")

    def test_list_targets_passes_toolchain(self) -> None:
        with patch("xcross.toolchain.rustup.subprocess.run", return_value=_r(stdout="wasm32-unknown-unknown\n")) as m_run:
            assert ToolchainManager().list_targets("stable") == ["wasm32-unknown-unknown"]
        assert m_run.call_args[0][0] == [
            "rustup", "target", "list", "--installed", "--toolchain", "stable",
        ]  # fmt: skip

    def test_prepare_target_installs_missing_target(self) -> None:
        calls: list[list[str]] = []

        def run(cmd, *args, **kwargs):
            calls.append(cmd)
            if cmd[1:3] == ["toolchain", "list"]:
                return _r(stdout=TOOLCHAINS)
            if cmd[1:3] == ["target", "list"]:
                return _r(stdout="x86_64-unknown-linux-gnu\n")
            return _r()

        with patch("xcross.toolchain.rustup.subprocess.run", side_effect=run):
            ToolchainManager().prepare_target("stable", Target.from_triple("x86_64-pc-windows-gnu"))
        assert ["rustup", "target", "add", "x86_64-pc-windows-gnu", "--toolchain", "stable"] in calls
        assert not any(c[1:3] == ["toolchain", "install"] for c in calls)

    def test_prepare_target_noop_when_ready(self) -> None:
        calls: list[list[str]] = []

        def run(cmd, *args, **kwargs):
            calls.append(cmd)
            if cmd[1:3] == ["toolchain", "list"]:
                return _r(stdout=TOOLCHAINS)
            return _r(stdout="x86_64-pc-windows-gnu\n")

        with patch("xcross.toolchain.rustup.subprocess.run", side_effect=run):
            ToolchainManager().prepare_target("stable", Target.from_triple("x86_64-pc-windows-gnu"))
        assert not any("add" in c or "install" in c for c in calls)

    def test_install_failure_raises_with_stderr(self) -> None:
        with patch(
            "xcross.toolchain.rustup.subprocess.run",
            return_value=_r(returncode=1, stderr="error: toolchain 'bogus' is not installable"),
        ):
            with pytest.raises(ToolchainError) as ei:
                ToolchainManager().install_toolchain("bogus")
        assert "not installable" in ei.value.message


class TestHelpers:
    def test_xcross_home_override(self, isolated_home: Path) -> None:
        assert xcross_home() == isolated_home

    def test_xcross_home_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("XCROSS_HOME")
        assert xcross_home() == Path.home() / ".xcross"

    def test_host_os_name(self) -> None:
        with patch("xcross.helpers.platform.system", return_value="Darwin"):
            assert host_os_name() == "macos"
        with patch("xcross.helpers.platform.system", return_value="Linux"):
            assert host_os_name() == "linux"

    def test_os_family(self) -> None:
        assert os_family("darwin") == "macos"
        assert os_family("linux") == "linux"

    def test_find_upwards(self, tmp_path: Path) -> None:
        (tmp_path / "Cargo.toml").write_text("[workspace]\n")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert find_upwards(nested, "Cargo.toml") == (tmp_path / "Cargo.toml").resolve()
        assert find_upwards(nested, "definitely-not-here.toml") is None
