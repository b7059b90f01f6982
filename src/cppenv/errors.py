"""Error handling for cppenv."""
from typing import Any, Dict, Optional

from cppenv.logging import get_logger


def log_error(
    error: Exception,
    context: Optional[Dict[str, Any]] = None,
    logger: Optional[Any] = None
) -> None:
    """Log an error with context."""
    logger = logger or get_logger(__name__)

    error_info = {
        "error_type": error.__class__.__name__,
        "error_message": str(error)
    }
    if context:
        error_info["context"] = context
    if isinstance(error, CppenvError):
        error_info["details"] = error.details

    logger.error("cppenv_error", **error_info)


class CppenvError(Exception):
    """Base error class for cppenv."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class PlatformUnsupportedError(CppenvError):
    """No runtime archive exists for this OS/architecture pair."""
    def __init__(self, system: str, machine: str):
        super().__init__(
            f"Unsupported platform: {system}/{machine}",
            details={"system": system, "machine": machine}
        )


class NetworkError(CppenvError):
    """Download or index lookup failed."""
    def __init__(self, message: str, url: str, status: Optional[int] = None):
        super().__init__(message, details={"url": url, "status": status})
        self.url = url
        self.status = status


class ArchiveError(CppenvError):
    """Archive could not be unpacked."""
    def __init__(self, message: str, archive: str):
        super().__init__(message, details={"archive": archive})


class SubprocessError(CppenvError):
    """Underlying tool exited non-zero."""
    def __init__(self, message: str, cmd: list[str], returncode: int):
        super().__init__(message, details={"cmd": cmd, "returncode": returncode})
        self.cmd = cmd
        self.returncode = returncode


class ArtifactWriteError(CppenvError):
    """Generated file could not be written."""
    def __init__(self, path: str, reason: str):
        super().__init__(
            f"Failed to write {path}: {reason}",
            details={"path": path, "reason": reason}
        )


class ConfigError(CppenvError):
    """Project manifest is missing or malformed."""


class EnvironmentMissingError(CppenvError):
    """Operation needs an environment that has not been created."""
    def __init__(self, path: str):
        super().__init__(
            "environment not found, run 'cppenv install' first",
            details={"path": path}
        )
