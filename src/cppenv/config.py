"""Project manifest (cppenv.toml)."""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import tomli
import tomli_w

from cppenv.errors import ConfigError
from cppenv.types import PackageRequirement

CONFIG_FILE = "cppenv.toml"

DEFAULT_TOOLS = [
    "ziglang",
    "cmake",
    "ninja",
    "conan",
    "clang-tools",
]


@dataclass
class ProjectConfig:
    """Parsed cppenv.toml"""
    name: str
    tools: Dict[str, str] = field(default_factory=dict)
    scripts: Dict[str, str] = field(default_factory=dict)

    def requirements(self) -> List[PackageRequirement]:
        return [PackageRequirement(name=name, version=version) for name, version in self.tools.items()]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "project": {"name": self.name},
            "tools": dict(self.tools),
            "scripts": dict(self.scripts),
        }


def find_config(root: Optional[Path] = None) -> Optional[Path]:
    """Path of cppenv.toml in *root* (the working directory by default), if any."""
    path = (root or Path.cwd()) / CONFIG_FILE
    return path if path.is_file() else None


def _string_table(data: Dict[str, Any], key: str, path: Path) -> Dict[str, str]:
    table = data.get(key) or {}
    if not isinstance(table, dict):
        raise ConfigError(f"[{key}] in {path} must be a table", details={"path": str(path)})
    for name, value in table.items():
        if not isinstance(value, str):
            raise ConfigError(
                f"{key}.{name} in {path} must be a string",
                details={"path": str(path), "key": f"{key}.{name}"}
            )
    return dict(table)


def load_config(path: Path) -> ProjectConfig:
    try:
        with open(path, "rb") as f:
            data = tomli.load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}", details={"path": str(path)}) from e
    except tomli.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}", details={"path": str(path)}) from e

    project = data.get("project") or {}
    return ProjectConfig(
        name=str(project.get("name", "")),
        tools=_string_table(data, "tools", path),
        scripts=_string_table(data, "scripts", path),
    )


def default_config(name: str, tools: Dict[str, str]) -> ProjectConfig:
    return ProjectConfig(name=name, tools=dict(tools))


def write_config(config: ProjectConfig, path: Path) -> None:
    with open(path, "wb") as f:
        tomli_w.dump(config.to_dict(), f)
