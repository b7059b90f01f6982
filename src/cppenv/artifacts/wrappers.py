"""Compiler wrapper scripts around a multi-command compiler driver."""
from pathlib import Path
from typing import Iterable

from cppenv.artifacts.files import write_artifact
from cppenv.types import Environment, PlatformProfile

C_WRAPPER = "zig-cc"
CXX_WRAPPER = "zig-c++"


def to_forward_slashes(path: Path | str) -> str:
    return str(path).replace("\\", "/")


def wrapper_path(env: Environment, name: str) -> Path:
    return env.root / env.profile.script(name)


def compiler_wrapper_paths(env: Environment) -> tuple[Path, Path]:
    """C and C++ wrapper locations for this environment."""
    return wrapper_path(env, C_WRAPPER), wrapper_path(env, CXX_WRAPPER)


def render_wrapper(profile: PlatformProfile, binary: Path | str, subcommand: str) -> str:
    binary = to_forward_slashes(binary)
    if profile.script_format == "bat":
        return f'@echo off\r\n"{binary}" {subcommand} %*\r\n'
    return f'#!/bin/sh\nexec "{binary}" {subcommand} "$@"\n'


def write_compiler_wrappers(
    env: Environment,
    binary: Path,
    wrappers: Iterable[tuple[str, str]]
) -> dict[Path, bool]:
    """Create each (name, subcommand) wrapper if it does not exist yet."""
    results = {}
    for name, subcommand in wrappers:
        path = wrapper_path(env, name)
        results[path] = write_artifact(
            path,
            render_wrapper(env.profile, binary, subcommand),
            mode=0o755
        )
    return results
