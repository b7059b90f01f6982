"""CMake toolchain file pointing at the compiler wrappers."""
from pathlib import Path
from typing import Optional

from cppenv.artifacts.files import write_artifact
from cppenv.artifacts.wrappers import C_WRAPPER, CXX_WRAPPER, to_forward_slashes
from cppenv.logging import get_logger
from cppenv.types import PROJECT_DIR_NAME, Environment

logger = get_logger(__name__)

TOOLCHAIN_FILE = "zig_toolchain.cmake"
COMPILER_ID = "Clang"

TOOLCHAIN_TEMPLATE = """# Generated by cppenv - do not edit manually
set(CMAKE_C_COMPILER "{cc}")
set(CMAKE_CXX_COMPILER "{cxx}")

# Zig-specific settings
set(CMAKE_C_COMPILER_ID "{compiler_id}")
set(CMAKE_CXX_COMPILER_ID "{compiler_id}")
"""


def render_toolchain(cc: Path, cxx: Path) -> str:
    return TOOLCHAIN_TEMPLATE.format(
        cc=to_forward_slashes(cc),
        cxx=to_forward_slashes(cxx),
        compiler_id=COMPILER_ID
    )


def write_toolchain_file(env: Environment, target_dir: Optional[Path] = None) -> Path:
    """Write the toolchain file, always replacing any previous one.

    *target_dir* is the project directory to write into; it defaults to the
    environment's project root.
    """
    project_dir = (target_dir or env.project_root).resolve()
    cppenv_dir = project_dir / PROJECT_DIR_NAME
    cc = cppenv_dir / env.profile.script(C_WRAPPER)
    cxx = cppenv_dir / env.profile.script(CXX_WRAPPER)

    path = cppenv_dir / TOOLCHAIN_FILE
    write_artifact(path, render_toolchain(cc, cxx), overwrite=True)
    return path
