"""Command resolution and execution inside the project environment."""
import os
import sys
from pathlib import Path
from typing import Dict, Mapping, Optional, Sequence

from cppenv.logging import get_logger
from cppenv.types import Environment, ExecutionRequest
from cppenv.utils.fs import run_inherited

logger = get_logger(__name__)

PATH_VAR = "PATH"


def resolve_command(env: Environment, name: str) -> str:
    """Prefer an executable from the environment's bin directory.

    Falls back to the bare *name* so the normal PATH lookup applies.
    """
    candidate = env.bin_dir / name
    if env.profile.is_windows and not name.lower().endswith(".exe"):
        exe = candidate.with_name(f"{name}.exe")
        if exe.is_file():
            return str(exe)
    if candidate.is_file():
        return str(candidate)
    return name


def activated_environment(
    env: Environment,
    base: Optional[Mapping[str, str]] = None
) -> Dict[str, str]:
    """Copy of *base* (os.environ by default) with bin/ first on PATH.

    Every case variant of PATH is prefixed and keeps its casing.
    """
    source = os.environ if base is None else base
    bin_dir = str(env.bin_dir)

    activated: Dict[str, str] = {}
    path_set = False
    for key, value in source.items():
        if key.upper() == PATH_VAR:
            activated[key] = f"{bin_dir}{env.profile.path_separator}{value}" if value else bin_dir
            path_set = True
        else:
            activated[key] = value

    if not path_set:
        activated[PATH_VAR] = bin_dir

    logger.debug("environment_activated", bin_dir=bin_dir)
    return activated


async def run_command(env: Environment, argv: Sequence[str], cwd: Optional[Path] = None) -> int:
    """Run argv in the activated environment and return its exit code.

    Returns 1 when argv is empty or the program cannot be started.
    """
    request = ExecutionRequest.from_argv(list(argv))
    if request is None:
        return 1

    executable = resolve_command(env, request.command)
    try:
        return await run_inherited(
            [executable, *request.args],
            env=activated_environment(env),
            cwd=cwd
        )
    except OSError as e:
        logger.debug("command_start_failed", command=request.command, error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1


def shell_argv(env: Environment, script: str) -> list[str]:
    """Wrap a manifest script in the platform shell."""
    if env.profile.is_windows:
        return ["cmd", "/c", script]
    return ["sh", "-c", script]


async def run_script(env: Environment, script: str, cwd: Optional[Path] = None) -> int:
    return await run_command(env, shell_argv(env, script), cwd=cwd)
