import asyncio
import os
from pathlib import Path
from typing import Callable, Mapping, Optional, Sequence

from cppenv.logging import get_logger

logger = get_logger(__name__)


async def run_inherited(
    args: Sequence[str],
    env: Optional[Mapping[str, str]] = None,
    cwd: Optional[Path] = None
) -> int:
    """Run a command attached to our stdin/stdout/stderr and wait for it.

    Raises OSError when the executable cannot be started.
    """
    logger.debug("subprocess_exec", cmd=list(args), cwd=str(cwd) if cwd else None)

    process = await asyncio.create_subprocess_exec(
        *[str(a) for a in args],
        env=dict(env) if env is not None else None,
        cwd=cwd,
    )
    returncode = await process.wait()

    logger.debug("subprocess_complete", cmd=list(args), returncode=returncode)
    return returncode


def find_first_matching_subdirectory(
    root: Path,
    predicate: Callable[[Path], bool]
) -> Optional[Path]:
    """Return the first immediate subdirectory of *root* accepted by *predicate*.

    Subdirectories are visited in name order. Returns None when *root* does
    not exist or nothing matches.
    """
    if not root.is_dir():
        return None

    for entry in sorted(os.scandir(root), key=lambda e: e.name):
        if entry.is_dir() and predicate(Path(entry.path)):
            return Path(entry.path)
    return None
