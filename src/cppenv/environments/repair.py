"""Post-install fixes for packages that keep their executable outside bin/."""
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from cppenv.artifacts.wrappers import C_WRAPPER, CXX_WRAPPER, write_compiler_wrappers
from cppenv.logging import get_logger
from cppenv.types import Environment
from cppenv.utils.fs import find_first_matching_subdirectory

logger = get_logger(__name__)

VERSIONED_LIB_DIR = re.compile(r"^python\d+(\.\d+)*$")


@dataclass(frozen=True)
class Payload:
    """Package whose executable the installer leaves in site-packages"""
    package: str
    relative_path: tuple[str, ...]
    link_name: str
    wrappers: tuple[tuple[str, str], ...] = ()


PAYLOADS: tuple[Payload, ...] = (
    Payload(
        package="ziglang",
        relative_path=("ziglang", "zig"),
        link_name="zig",
        wrappers=((C_WRAPPER, "cc"), (CXX_WRAPPER, "c++")),
    ),
)


def payload_relative_path(env: Environment, payload: Payload) -> Path:
    *parents, binary = payload.relative_path
    return Path("site-packages", *parents, env.profile.executable(binary))


def locate_payload(env: Environment, payload: Payload) -> Optional[Path]:
    """Find the payload executable under the environment's library tree."""
    relative = payload_relative_path(env, payload)

    if env.profile.is_windows:
        candidate = env.lib_dir / relative
        return candidate if candidate.exists() else None

    match = find_first_matching_subdirectory(
        env.lib_dir,
        lambda d: VERSIONED_LIB_DIR.match(d.name) is not None and (d / relative).exists()
    )
    return match / relative if match else None


def link_payload(env: Environment, payload: Payload, source: Path) -> Path:
    """Symlink *source* into bin/. Returns the path wrappers should call."""
    target = env.bin_dir / env.profile.executable(payload.link_name)
    if os.path.lexists(target):
        return target

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.symlink_to(source)
    except OSError as e:
        logger.warning("payload_link_failed", package=payload.package, error=str(e))
        return source

    logger.info("payload_linked", package=payload.package, source=str(source), link=str(target))
    return target


def repair_payloads(env: Environment) -> list[str]:
    """Link every known payload that is installed and write its wrappers.

    Packages whose payload cannot be found are skipped without error.
    """
    repaired = []
    for payload in PAYLOADS:
        source = locate_payload(env, payload)
        if source is None:
            logger.debug("payload_not_found", package=payload.package)
            continue

        binary = link_payload(env, payload, source)
        if payload.wrappers:
            write_compiler_wrappers(env, binary, payload.wrappers)
        repaired.append(payload.package)
    return repaired
