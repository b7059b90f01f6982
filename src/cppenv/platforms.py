"""Platform detection and mapping."""
import platform
from typing import NamedTuple, Optional

from cppenv.errors import PlatformUnsupportedError
from cppenv.types import ArchiveDescriptor, ArchiveFormat, PlatformProfile, PlatformTarget

PYTHON_VERSION = "3.11.7"
RELEASE_TAG = "20240107"
BASE_URL = "https://github.com/indygreg/python-build-standalone/releases/download"


class PlatformMapping(NamedTuple):
    """Platform-specific values."""
    os_name: str
    path_separator: str
    exe_suffix: str
    script_format: str
    bin_dir_name: str
    lib_dir_name: str


# Raw platform.machine() values to normalized architecture
ARCH_ALIASES = {
    "x86_64": "x86_64",
    "amd64": "x86_64",
    "aarch64": "aarch64",
    "arm64": "aarch64",
}

PLATFORM_MAPPINGS = {
    "Linux": PlatformMapping(
        os_name="linux",
        path_separator=":",
        exe_suffix="",
        script_format="sh",
        bin_dir_name="bin",
        lib_dir_name="lib"
    ),
    "Darwin": PlatformMapping(
        os_name="darwin",
        path_separator=":",
        exe_suffix="",
        script_format="sh",
        bin_dir_name="bin",
        lib_dir_name="lib"
    ),
    "Windows": PlatformMapping(
        os_name="windows",
        path_separator=";",
        exe_suffix=".exe",
        script_format="bat",
        bin_dir_name="Scripts",
        lib_dir_name="Lib"
    ),
}

# Every supported (os, arch) pair. Anything missing here is unsupported.
TARGET_TRIPLES = {
    ("linux", "x86_64"): ("x86_64-unknown-linux-gnu", ArchiveFormat.TAR_GZ),
    ("linux", "aarch64"): ("aarch64-unknown-linux-gnu", ArchiveFormat.TAR_GZ),
    ("darwin", "x86_64"): ("x86_64-apple-darwin", ArchiveFormat.TAR_GZ),
    ("darwin", "aarch64"): ("aarch64-apple-darwin", ArchiveFormat.TAR_GZ),
    ("windows", "x86_64"): ("x86_64-pc-windows-msvc-shared", ArchiveFormat.TAR_GZ),
}


def get_profile(system: str, machine: str) -> PlatformProfile:
    """Build the profile for an explicit system/machine pair."""
    mapping = PLATFORM_MAPPINGS.get(system)
    arch = ARCH_ALIASES.get(machine.lower())
    if mapping is None or arch is None:
        raise PlatformUnsupportedError(system, machine)
    if (mapping.os_name, arch) not in TARGET_TRIPLES:
        raise PlatformUnsupportedError(system, machine)

    return PlatformProfile(
        os_name=mapping.os_name,
        arch=arch,
        path_separator=mapping.path_separator,
        exe_suffix=mapping.exe_suffix,
        script_format=mapping.script_format,
        bin_dir_name=mapping.bin_dir_name,
        lib_dir_name=mapping.lib_dir_name
    )


def current_profile() -> PlatformProfile:
    """Get current platform profile."""
    return get_profile(platform.system(), platform.machine())


def resolve_target(
    target: PlatformTarget,
    version: str = PYTHON_VERSION,
    release_tag: str = RELEASE_TAG,
    base_url: str = BASE_URL
) -> ArchiveDescriptor:
    """Map an OS/architecture pair to its runtime archive."""
    entry = TARGET_TRIPLES.get((target.operating_system, target.cpu_architecture))
    if entry is None:
        raise PlatformUnsupportedError(target.operating_system, target.cpu_architecture)

    triple, container_format = entry
    filename = f"cpython-{version}+{release_tag}-{triple}-install_only.{container_format.value}"
    return ArchiveDescriptor(
        download_url=f"{base_url}/{release_tag}/{filename}",
        container_format=container_format
    )


def is_platform_supported(system: Optional[str] = None, machine: Optional[str] = None) -> bool:
    """Check if a platform is supported."""
    try:
        get_profile(system or platform.system(), machine or platform.machine())
        return True
    except PlatformUnsupportedError:
        return False
