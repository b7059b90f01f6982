"""Tests for the cppenv command line."""
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from typer.testing import CliRunner

from cppenv.cli import app
from cppenv.config import load_config
from cppenv.types import PackageRequirement

runner = CliRunner()

VERSIONS = {
    "ziglang": "0.11.0",
    "cmake": "3.28.1",
    "ninja": "1.11.1",
    "conan": "2.0.17",
    "clang-tools": "17.0.1",
}

MANIFEST = """[project]
name = "demo"

[tools]
toolA = "1.2.3"

[scripts]
build = "cmake --build build"
"""


@pytest.fixture
def workdir(project, tmp_path, monkeypatch) -> Path:
    monkeypatch.chdir(project)
    monkeypatch.setenv("CPPENV_HOME", str(tmp_path / "home"))
    return project


@pytest.fixture
def manifest(workdir) -> Path:
    path = workdir / "cppenv.toml"
    path.write_text(MANIFEST)
    return path


@pytest.fixture
def venv(workdir) -> Path:
    path = workdir / ".cppenv" / "venv"
    path.mkdir(parents=True)
    return path


def test_init_writes_latest_versions(workdir):
    lookup = AsyncMock(side_effect=lambda package: VERSIONS[package])

    with patch("cppenv.cli.latest_version", lookup):
        result = runner.invoke(app, ["init"])

    assert result.exit_code == 0, result.output
    assert "Created cppenv.toml" in result.output
    assert "ziglang: 0.11.0" in result.output

    config = load_config(workdir / "cppenv.toml")
    assert config.name == "project"
    assert config.tools == VERSIONS


def test_init_custom_name(workdir):
    with patch("cppenv.cli.latest_version", AsyncMock(return_value="1.0")):
        result = runner.invoke(app, ["init", "--name", "engine"])

    assert result.exit_code == 0, result.output
    assert load_config(workdir / "cppenv.toml").name == "engine"


def test_init_refuses_existing_manifest(manifest):
    lookup = AsyncMock()

    with patch("cppenv.cli.latest_version", lookup):
        result = runner.invoke(app, ["init"])

    assert result.exit_code == 1
    assert "already exists" in result.output
    lookup.assert_not_awaited()
    assert manifest.read_text() == MANIFEST


def test_install_requires_manifest(workdir):
    result = runner.invoke(app, ["install"])

    assert result.exit_code == 1
    assert "cppenv init" in result.output


def test_install_generates_project_files(manifest, workdir):
    ensure = AsyncMock(return_value=Path("/runtime/bin/python3"))
    create = AsyncMock()
    tools = AsyncMock()

    with patch("cppenv.cli.ensure_runtime", ensure), \
         patch("cppenv.cli.create_environment", create), \
         patch("cppenv.cli.install_tools", tools):
        result = runner.invoke(app, ["install"])

    assert result.exit_code == 0, result.output
    assert "Done!" in result.output

    ensure.assert_awaited_once()
    create.assert_awaited_once()
    env, requirements = tools.await_args.args
    assert env.project_root == workdir.resolve()
    assert requirements == [PackageRequirement("toolA", "1.2.3")]

    root = workdir / ".cppenv"
    assert (root / "zig_toolchain.cmake").is_file()
    assert (root / "conan_provider.cmake").is_file()
    assert (root / "CMakeUserPresets.json").is_file()
    assert (workdir / ".gitignore").read_text() == ".cppenv/\n"


def test_install_with_non_utf8_gitignore(manifest, workdir):
    gitignore = workdir / ".gitignore"
    gitignore.write_bytes(b"# caf\xe9\nbuild/\n")

    with patch("cppenv.cli.ensure_runtime", AsyncMock(return_value=Path("/runtime/bin/python3"))), \
         patch("cppenv.cli.create_environment", AsyncMock()), \
         patch("cppenv.cli.install_tools", AsyncMock()):
        result = runner.invoke(app, ["install"])

    assert result.exit_code == 0, result.output
    assert gitignore.read_bytes() == b"# caf\xe9\nbuild/\n.cppenv/\n"
    assert (workdir / ".cppenv" / "CMakeUserPresets.json").is_file()


def test_install_with_unusable_runtime_home(manifest, tmp_path, monkeypatch):
    home = tmp_path / "home-file"
    home.write_text("")
    monkeypatch.setenv("CPPENV_HOME", str(home))

    result = runner.invoke(app, ["install"])

    assert result.exit_code == 1
    assert "Error: Failed to write" in result.output
    assert not isinstance(result.exception, OSError)


def test_install_reuses_environment(manifest, venv):
    create = AsyncMock()

    with patch("cppenv.cli.ensure_runtime", AsyncMock(return_value=Path("/runtime/bin/python3"))), \
         patch("cppenv.cli.create_environment", create), \
         patch("cppenv.cli.install_tools", AsyncMock()):
        result = runner.invoke(app, ["install"])

    assert result.exit_code == 0, result.output
    assert "Environment already exists" in result.output
    create.assert_not_awaited()


def test_run_requires_environment(manifest):
    result = runner.invoke(app, ["run", "cmake"])

    assert result.exit_code == 1
    assert "cppenv install" in result.output


def test_run_without_command(manifest, venv):
    command = AsyncMock(return_value=0)

    with patch("cppenv.cli.run_command", command):
        result = runner.invoke(app, ["run"])

    assert result.exit_code == 1
    assert "no command given" in result.output
    command.assert_not_awaited()


def test_run_forwards_arguments_and_exit_code(manifest, venv):
    command = AsyncMock(return_value=3)

    with patch("cppenv.cli.run_command", command):
        result = runner.invoke(app, ["run", "toolA", "--version", "-x"])

    assert result.exit_code == 3
    env, argv = command.await_args.args
    assert argv == ["toolA", "--version", "-x"]


def test_run_manifest_script(manifest, venv):
    script = AsyncMock(return_value=0)

    with patch("cppenv.cli.run_script", script):
        result = runner.invoke(app, ["run", "build"])

    assert result.exit_code == 0, result.output
    assert "→ cmake --build build" in result.output
    assert script.await_args.args[1] == "cmake --build build"


def test_status_without_manifest(workdir):
    result = runner.invoke(app, ["status"])

    assert result.exit_code == 0
    assert "No cppenv.toml found" in result.output


def test_status(manifest):
    result = runner.invoke(app, ["status"])

    assert result.exit_code == 0, result.output
    assert "Project: demo" in result.output
    assert "Not installed" in result.output
    assert "Status: not installed" in result.output
    assert "toolA: 1.2.3" in result.output
    assert "build: cmake --build build" in result.output


def test_toolchain_command(manifest, venv, tmp_path):
    result = runner.invoke(app, ["toolchain"])
    assert result.exit_code == 0, result.output
    assert (venv.parent / "zig_toolchain.cmake").is_file()

    other = tmp_path / "elsewhere"
    other.mkdir()
    result = runner.invoke(app, ["toolchain", "--dir", str(other)])
    assert result.exit_code == 0, result.output
    assert (other / ".cppenv" / "zig_toolchain.cmake").is_file()


def test_toolchain_requires_environment(workdir):
    result = runner.invoke(app, ["toolchain"])
    assert result.exit_code == 1
