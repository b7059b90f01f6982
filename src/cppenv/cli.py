"""Command-line interface."""
import asyncio
from pathlib import Path
from typing import List, Optional

import typer

from cppenv.artifacts.gitignore import add_gitignore_entry
from cppenv.artifacts.presets import write_build_presets, write_dependency_provider
from cppenv.artifacts.toolchain import write_toolchain_file
from cppenv.config import (
    CONFIG_FILE,
    DEFAULT_TOOLS,
    default_config,
    find_config,
    load_config,
    write_config,
)
from cppenv.environments.commands import run_command, run_script
from cppenv.environments.environment import (
    create_environment,
    environment_exists,
    get_environment,
    install_tools,
)
from cppenv.errors import ArtifactWriteError, ConfigError, CppenvError, EnvironmentMissingError, log_error
from cppenv.logging import configure_logging, get_logger
from cppenv.platforms import current_profile
from cppenv.pypi import latest_version
from cppenv.runtimes.python import ensure_runtime, get_installation, is_installed
from cppenv.types import Environment

logger = get_logger("cli")

app = typer.Typer(
    name="cppenv",
    help="Reproducible C++ build environments using pip-installable tools.",
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output to stderr."),
) -> None:
    configure_logging("DEBUG" if verbose else "WARNING")


def _fail(error: CppenvError) -> typer.Exit:
    log_error(error, logger=logger)
    typer.echo(f"Error: {error}", err=True)
    return typer.Exit(code=1)


def _require_environment() -> Environment:
    env = get_environment(current_profile())
    if not environment_exists(env):
        raise EnvironmentMissingError(str(env.venv_dir))
    return env


async def _fetch_versions(packages: List[str]) -> dict[str, str]:
    tools = {}
    for package in packages:
        typer.echo(f"  {package}: ", nl=False)
        tools[package] = await latest_version(package)
        typer.echo(tools[package])
    return tools


@app.command()
def init(
    name: Optional[str] = typer.Option(
        None, "--name", "-n", help="Project name (default: current directory name)."
    ),
) -> None:
    """Create cppenv.toml with the latest versions of the default tools."""
    try:
        if find_config() is not None:
            raise ConfigError(f"{CONFIG_FILE} already exists")

        project_name = name or Path.cwd().name
        typer.echo("Fetching latest tool versions...")
        tools = asyncio.run(_fetch_versions(DEFAULT_TOOLS))
        write_config(default_config(project_name, tools), Path.cwd() / CONFIG_FILE)
    except CppenvError as e:
        raise _fail(e) from e

    typer.echo(f"\nCreated {CONFIG_FILE}")
    typer.echo("Run 'cppenv install' to set up the environment")


async def _install(env: Environment, requirements) -> None:
    installation = get_installation(env.profile)

    typer.echo("Checking Python...")
    python = await ensure_runtime(installation)
    typer.echo(f"Using Python at: {python}")

    if not environment_exists(env):
        typer.echo("Creating environment...")
        await create_environment(env, python)
    else:
        typer.echo("Environment already exists")

    typer.echo("\nInstalling tools...")
    for requirement in requirements:
        typer.echo(f"  {requirement.token}")
    await install_tools(env, requirements)


@app.command()
def install() -> None:
    """Install the runtime, the environment and every configured tool."""
    try:
        config_path = find_config()
        if config_path is None:
            raise ConfigError(f"no {CONFIG_FILE} found, run 'cppenv init' first")
        config = load_config(config_path)

        env = get_environment(current_profile())
        asyncio.run(_install(env, config.requirements()))

        typer.echo("\nGenerating CMake toolchain file...")
        typer.echo(f"Created: {write_toolchain_file(env)}")

        try:
            if add_gitignore_entry(env.project_root):
                typer.echo("Added .cppenv/ to .gitignore")
        except ArtifactWriteError as e:
            typer.echo(f"Warning: could not update .gitignore: {e}")

        if write_dependency_provider(env):
            typer.echo("Created: .cppenv/conan_provider.cmake")
        if write_build_presets(env):
            typer.echo("Created: .cppenv/CMakeUserPresets.json")
    except CppenvError as e:
        raise _fail(e) from e

    typer.echo("\nDone! You can now use 'cppenv run <command>' to run tools.")


@app.command(
    context_settings={
        "allow_extra_args": True,
        "ignore_unknown_options": True,
        "allow_interspersed_args": False,
        "help_option_names": [],
    }
)
def run(
    ctx: typer.Context,
    command: Optional[str] = typer.Argument(None, help="Script name from cppenv.toml or a command."),
) -> None:
    """Run a script or command using the project environment."""
    try:
        env = _require_environment()
    except CppenvError as e:
        raise _fail(e) from e

    if command is None:
        typer.echo("Error: no command given", err=True)
        raise typer.Exit(code=1)

    scripts = {}
    config_path = find_config()
    if config_path is not None:
        try:
            scripts = load_config(config_path).scripts
        except ConfigError as e:
            logger.warning("config_unreadable", path=str(config_path), error=str(e))

    if command in scripts:
        typer.echo(f"→ {scripts[command]}")
        code = asyncio.run(run_script(env, scripts[command]))
    else:
        code = asyncio.run(run_command(env, [command, *ctx.args]))
    raise typer.Exit(code=code)


@app.command()
def status() -> None:
    """Show project status and configured tools."""
    config_path = find_config()
    if config_path is None:
        typer.echo(f"No {CONFIG_FILE} found in current directory.")
        typer.echo("Run 'cppenv init' to create one.")
        return

    try:
        config = load_config(config_path)
        profile = current_profile()
    except CppenvError as e:
        raise _fail(e) from e

    installation = get_installation(profile)
    env = get_environment(profile)

    typer.echo(f"Project: {config.name}\n")

    typer.echo("Python:")
    if is_installed(installation):
        typer.echo(f"  Installed: {installation.executable}")
    else:
        typer.echo("  Not installed (will download on 'cppenv install')")
    typer.echo()

    typer.echo("Environment:")
    if environment_exists(env):
        typer.echo(f"  Path: {env.venv_dir}")
        typer.echo("  Status: installed")
    else:
        typer.echo("  Status: not installed")
        typer.echo("  Run 'cppenv install' to set up")
    typer.echo()

    typer.echo("Tools:")
    for package, version in config.tools.items():
        typer.echo(f"  {package}: {version}")

    if config.scripts:
        typer.echo("\nScripts:")
        for script_name, script in config.scripts.items():
            typer.echo(f"  {script_name}: {script}")


@app.command()
def toolchain(
    target_dir: Optional[Path] = typer.Option(
        None, "--dir", help="Project directory to write the toolchain file into."
    ),
) -> None:
    """Regenerate the CMake toolchain file."""
    try:
        env = _require_environment()
        path = write_toolchain_file(env, target_dir)
    except CppenvError as e:
        raise _fail(e) from e

    typer.echo(f"Toolchain file created: {path}\n")
    typer.echo("Use with CMake:")
    typer.echo(f"  cmake -B build -DCMAKE_TOOLCHAIN_FILE={path}")


def main() -> None:
    """Run the cppenv CLI."""
    app()
