"""Pytest fixtures for xcross tests."""

from pathlib import Path

import pytest

from xcross.target import Target


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XCROSS_HOME at a temp dir so no test writes wrapper scripts under ~/.xcross."""
    home = tmp_path / "xcross-home"
    monkeypatch.setenv("XCROSS_HOME", str(home))
    return home


@pytest.fixture
def cargo_project(tmp_path: Path) -> Path:
    """Temporary directory with a minimal Cargo.toml."""
    project = tmp_path / "project"
    project.mkdir()
    (project / "Cargo.toml").write_text('[package]\nname = "demo"\nversion = "0.1.0"\n')
    return project


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    return tmp_path / "zig-wrappers"


@pytest.fixture
def linux_host() -> Target:
    return Target.from_triple("x86_64-unknown-linux-gnu")


@pytest.fixture
def macos_host() -> Target:
    return Target.from_triple("aarch64-apple-darwin")
