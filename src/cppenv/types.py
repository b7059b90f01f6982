"""Core type definitions"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

PROJECT_DIR_NAME = ".cppenv"
VENV_DIR_NAME = "venv"


class ArchiveFormat(Enum):
    TAR_GZ = "tar.gz"
    ZIP = "zip"


@dataclass(frozen=True)
class PlatformTarget:
    """Operating system and CPU architecture pair"""
    operating_system: str
    cpu_architecture: str


@dataclass(frozen=True)
class ArchiveDescriptor:
    """Where to download a runtime archive and how it is packed"""
    download_url: str
    container_format: ArchiveFormat


@dataclass(frozen=True)
class PlatformProfile:
    """Everything that differs between operating systems, resolved once"""
    os_name: str
    arch: str
    path_separator: str
    exe_suffix: str
    script_format: str
    bin_dir_name: str
    lib_dir_name: str

    @property
    def is_windows(self) -> bool:
        return self.os_name == "windows"

    @property
    def target(self) -> PlatformTarget:
        return PlatformTarget(operating_system=self.os_name, cpu_architecture=self.arch)

    def executable(self, name: str) -> str:
        return f"{name}{self.exe_suffix}"

    def script(self, name: str) -> str:
        """File name of a generated wrapper script."""
        return f"{name}.bat" if self.script_format == "bat" else name


@dataclass(frozen=True)
class RuntimeInstallation:
    """Machine-wide interpreter installation"""
    home: Path
    profile: PlatformProfile

    @property
    def root(self) -> Path:
        return self.home / "python"

    @property
    def executable(self) -> Path:
        if self.profile.is_windows:
            return self.root / "python" / "python.exe"
        return self.root / "python" / "bin" / "python3"


@dataclass(frozen=True)
class Environment:
    """Project-local isolated environment"""
    project_root: Path
    profile: PlatformProfile

    @property
    def root(self) -> Path:
        return self.project_root / PROJECT_DIR_NAME

    @property
    def venv_dir(self) -> Path:
        return self.root / VENV_DIR_NAME

    @property
    def bin_dir(self) -> Path:
        return self.venv_dir / self.profile.bin_dir_name

    @property
    def lib_dir(self) -> Path:
        return self.venv_dir / self.profile.lib_dir_name

    @property
    def pip(self) -> Path:
        return self.bin_dir / self.profile.executable("pip")


@dataclass(frozen=True)
class PackageRequirement:
    """Exact-version package pin"""
    name: str
    version: str

    @property
    def token(self) -> str:
        return f"{self.name}=={self.version}"


@dataclass(frozen=True)
class BestEffort:
    """Outcome of a step whose failure is logged and never raised"""
    ok: bool
    error: Optional[str] = None


@dataclass(frozen=True)
class ExecutionRequest:
    """Command to run inside the environment"""
    command: str
    args: list[str] = field(default_factory=list)

    @classmethod
    def from_argv(cls, argv: list[str]) -> Optional["ExecutionRequest"]:
        if not argv:
            return None
        return cls(command=argv[0], args=list(argv[1:]))
