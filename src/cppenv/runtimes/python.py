"""Managed CPython runtime acquisition."""
import os
import tempfile
from pathlib import Path
from typing import Optional

from cppenv.errors import ArchiveError, ArtifactWriteError
from cppenv.logging import get_logger
from cppenv.platforms import PYTHON_VERSION, resolve_target
from cppenv.types import ArchiveDescriptor, PlatformProfile, RuntimeInstallation
from cppenv.utils.archives import extract_archive
from cppenv.utils.fetching import download_url

logger = get_logger(__name__)

HOME_ENV_VAR = "CPPENV_HOME"


def default_home() -> Path:
    """Machine-wide cppenv directory, overridable with CPPENV_HOME."""
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".cppenv"


def get_installation(profile: PlatformProfile, home: Optional[Path] = None) -> RuntimeInstallation:
    return RuntimeInstallation(home=home or default_home(), profile=profile)


def archive_for(installation: RuntimeInstallation) -> ArchiveDescriptor:
    return resolve_target(installation.profile.target)


def is_installed(installation: RuntimeInstallation) -> bool:
    """The interpreter executable existing is the only install marker."""
    return installation.executable.exists()


async def install(installation: RuntimeInstallation) -> Path:
    """Download the runtime archive and unpack it into the installation root."""
    descriptor = archive_for(installation)
    try:
        installation.root.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ArtifactWriteError(str(installation.root), str(e)) from e

    logger.info(
        "runtime_install_started",
        version=PYTHON_VERSION,
        url=descriptor.download_url,
        root=str(installation.root)
    )

    try:
        with tempfile.TemporaryDirectory(prefix="cppenv-") as tmpdir:
            archive_path = Path(tmpdir) / f"python.{descriptor.container_format.value}"
            await download_url(descriptor.download_url, archive_path)
            extract_archive(archive_path, installation.root, descriptor.container_format)
    except OSError as e:
        raise ArchiveError(f"Cannot stage runtime archive: {e}", descriptor.download_url) from e

    if not is_installed(installation):
        raise ArchiveError(
            f"Interpreter missing after extraction: {installation.executable}",
            descriptor.download_url
        )

    logger.info("runtime_installed", executable=str(installation.executable))
    return installation.executable


async def ensure_runtime(installation: RuntimeInstallation) -> Path:
    """Return the interpreter path, installing the runtime first if needed."""
    if is_installed(installation):
        logger.debug("runtime_already_installed", executable=str(installation.executable))
        return installation.executable

    await install(installation)
    return installation.executable
