"""Project environment lifecycle management."""
from pathlib import Path
from typing import Optional, Sequence

from cppenv.environments.repair import repair_payloads
from cppenv.errors import ArtifactWriteError, SubprocessError
from cppenv.logging import get_logger
from cppenv.types import BestEffort, Environment, PackageRequirement, PlatformProfile
from cppenv.utils.fs import run_inherited

logger = get_logger(__name__)


def get_environment(profile: PlatformProfile, project_root: Optional[Path] = None) -> Environment:
    """Environment rooted at *project_root* (the working directory by default)."""
    return Environment(project_root=(project_root or Path.cwd()).resolve(), profile=profile)


def environment_exists(env: Environment) -> bool:
    return env.venv_dir.is_dir()


async def create_environment(env: Environment, runtime_executable: Path) -> None:
    """Create the isolated environment with the managed interpreter's venv module."""
    try:
        env.root.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ArtifactWriteError(str(env.root), str(e)) from e

    cmd = [str(runtime_executable), "-m", "venv", str(env.venv_dir)]
    try:
        returncode = await run_inherited(cmd)
    except OSError as e:
        raise SubprocessError(f"Failed to create environment: {e}", cmd, 1) from e
    if returncode != 0:
        raise SubprocessError(
            f"Failed to create environment: venv exited with code {returncode}",
            cmd,
            returncode
        )

    logger.info("environment_created", path=str(env.venv_dir))


async def upgrade_installer(env: Environment) -> BestEffort:
    """Try to upgrade pip inside the environment."""
    cmd = [str(env.pip), "install", "--upgrade", "pip"]
    try:
        returncode = await run_inherited(cmd)
    except OSError as e:
        return BestEffort(ok=False, error=str(e))
    if returncode != 0:
        return BestEffort(ok=False, error=f"pip exited with code {returncode}")
    return BestEffort(ok=True)


async def install_tools(env: Environment, requirements: Sequence[PackageRequirement]) -> None:
    """Install all *requirements* in one installer call, then repair payloads."""
    upgrade = await upgrade_installer(env)
    if not upgrade.ok:
        logger.warning("installer_upgrade_failed", error=upgrade.error)

    tokens = [req.token for req in requirements]
    if not tokens:
        logger.info("no_tools_to_install")
        return

    cmd = [str(env.pip), "install", *tokens]
    try:
        returncode = await run_inherited(cmd)
    except OSError as e:
        raise SubprocessError(f"Failed to install tools: {e}", cmd, 1) from e
    if returncode != 0:
        raise SubprocessError(
            f"Failed to install tools: pip exited with code {returncode}",
            cmd,
            returncode
        )

    logger.info("tools_installed", requirements=tokens)
    repair_payloads(env)
