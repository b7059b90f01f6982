import os
from pathlib import Path

from cppenv.errors import ArtifactWriteError
from cppenv.logging import get_logger

logger = get_logger(__name__)


def write_artifact(path: Path, content: str, mode: int = 0o644, overwrite: bool = False) -> bool:
    """Write a generated file. Returns False when it exists and *overwrite* is off."""
    if path.exists() and not overwrite:
        logger.debug("artifact_exists", path=str(path))
        return False

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        os.chmod(path, mode)
    except OSError as e:
        raise ArtifactWriteError(str(path), str(e)) from e

    logger.info("artifact_written", path=str(path))
    return True
