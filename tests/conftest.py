import io
import os
import tarfile
from pathlib import Path

import pytest

from cppenv.platforms import current_profile, get_profile
from cppenv.runtimes.python import get_installation
from cppenv.types import Environment, PlatformProfile, RuntimeInstallation


class FakeContent:
    def __init__(self, body: bytes):
        self._buffer = io.BytesIO(body)

    async def read(self, n: int = -1) -> bytes:
        return self._buffer.read(n)


class FakeResponse:
    """Stand-in for an aiohttp response used as an async context manager"""

    def __init__(self, status: int = 200, body: bytes = b"", payload=None):
        self.status = status
        self.content = FakeContent(body)
        self._payload = payload

    async def json(self, content_type=None):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class FakeSession:
    """Replaces aiohttp.ClientSession; records requested URLs"""

    def __init__(self, response: FakeResponse):
        self.response = response
        self.requested: list[str] = []
        self.session_kwargs: dict = {}

    def __call__(self, **kwargs):
        self.session_kwargs = kwargs
        return self

    def get(self, url, **kwargs):
        self.requested.append(url)
        return self.response

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


def add_file(tf: tarfile.TarFile, name: str, data: bytes, mode: int = 0o644) -> None:
    info = tarfile.TarInfo(name)
    info.size = len(data)
    info.mode = mode
    tf.addfile(info, io.BytesIO(data))


def add_dir(tf: tarfile.TarFile, name: str) -> None:
    info = tarfile.TarInfo(name)
    info.type = tarfile.DIRTYPE
    info.mode = 0o755
    tf.addfile(info)


def add_symlink(tf: tarfile.TarFile, name: str, target: str) -> None:
    info = tarfile.TarInfo(name)
    info.type = tarfile.SYMTYPE
    info.linkname = target
    tf.addfile(info)


def runtime_tarball(executable: str = "python/bin/python3") -> bytes:
    """Minimal install_only style archive holding a fake interpreter."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tf:
        add_dir(tf, "python")
        add_dir(tf, "python/bin")
        add_file(tf, "python/bin/python3.11", b"#!/bin/sh\necho fake\n", mode=0o755)
        if executable == "python/bin/python3":
            add_symlink(tf, "python/bin/python3", "python3.11")
        elif executable:
            add_file(tf, executable, b"MZ", mode=0o755)
    return buffer.getvalue()


@pytest.fixture
def linux_profile() -> PlatformProfile:
    return get_profile("Linux", "x86_64")


@pytest.fixture
def windows_profile() -> PlatformProfile:
    return get_profile("Windows", "AMD64")


@pytest.fixture
def profile() -> PlatformProfile:
    """Profile of the machine running the tests"""
    return current_profile()


@pytest.fixture
def project(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def environment(project: Path, profile: PlatformProfile) -> Environment:
    return Environment(project_root=project, profile=profile)


@pytest.fixture
def linux_environment(project: Path, linux_profile: PlatformProfile) -> Environment:
    return Environment(project_root=project, profile=linux_profile)


@pytest.fixture
def windows_environment(project: Path, windows_profile: PlatformProfile) -> Environment:
    return Environment(project_root=project, profile=windows_profile)


@pytest.fixture
def installation(tmp_path: Path, linux_profile: PlatformProfile) -> RuntimeInstallation:
    return get_installation(linux_profile, home=tmp_path / "home")


def make_executable(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    os.chmod(path, 0o755)
    return path
