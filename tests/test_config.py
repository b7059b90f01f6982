"""Tests for the project manifest."""
import pytest

from cppenv.config import (
    CONFIG_FILE,
    DEFAULT_TOOLS,
    ProjectConfig,
    default_config,
    find_config,
    load_config,
    write_config,
)
from cppenv.errors import ConfigError
from cppenv.types import PackageRequirement


def write_manifest(root, text):
    path = root / CONFIG_FILE
    path.write_text(text)
    return path


def test_requirements_from_tools():
    config = ProjectConfig(name="demo", tools={"toolA": "1.2.3"})
    assert config.requirements() == [PackageRequirement("toolA", "1.2.3")]
    assert [r.token for r in config.requirements()] == ["toolA==1.2.3"]


def test_load_config(tmp_path):
    path = write_manifest(tmp_path, """
[project]
name = "demo"

[tools]
ziglang = "0.11.0"
cmake = "3.28.1"

[scripts]
build = "cmake --build build"
""")

    config = load_config(path)

    assert config.name == "demo"
    assert config.tools == {"ziglang": "0.11.0", "cmake": "3.28.1"}
    assert config.scripts == {"build": "cmake --build build"}
    assert [r.name for r in config.requirements()] == ["ziglang", "cmake"]


def test_load_minimal_config(tmp_path):
    config = load_config(write_manifest(tmp_path, '[project]\nname = "bare"\n'))
    assert config.tools == {}
    assert config.scripts == {}


def test_write_then_load(tmp_path):
    path = tmp_path / CONFIG_FILE
    config = default_config("demo", {"ninja": "1.11.1"})
    config.scripts["test"] = "ctest"

    write_config(config, path)

    assert load_config(path) == config
    assert 'name = "demo"' in path.read_text()


@pytest.mark.parametrize(
    "text",
    [
        "[project\nname = ",
        '[project]\nname = "x"\n[tools]\nziglang = 11\n',
        'tools = "ziglang"\n[project]\nname = "x"\n',
    ],
)
def test_invalid_config(tmp_path, text):
    with pytest.raises(ConfigError):
        load_config(write_manifest(tmp_path, text))


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        load_config(tmp_path / CONFIG_FILE)


def test_find_config(tmp_path, monkeypatch):
    assert find_config(tmp_path) is None

    path = write_manifest(tmp_path, '[project]\nname = "demo"\n')
    assert find_config(tmp_path) == path

    monkeypatch.chdir(tmp_path)
    assert find_config() is not None


def test_default_tools():
    assert DEFAULT_TOOLS == ["ziglang", "cmake", "ninja", "conan", "clang-tools"]
