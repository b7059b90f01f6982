"""Keep the project environment out of version control."""
from pathlib import Path

from cppenv.errors import ArtifactWriteError
from cppenv.logging import get_logger
from cppenv.types import PROJECT_DIR_NAME

logger = get_logger(__name__)

GITIGNORE_FILE = ".gitignore"


def has_entry(content: bytes, name: str = PROJECT_DIR_NAME) -> bool:
    """Line-exact match on *name* with or without a trailing slash.

    Works on raw bytes so files in any encoding can be scanned.
    """
    accepted = {name.encode(), f"{name}/".encode()}
    return any(line.strip() in accepted for line in content.splitlines())


def add_gitignore_entry(project_root: Path, name: str = PROJECT_DIR_NAME) -> bool:
    """Append ``<name>/`` to the project's .gitignore unless already listed.

    Returns True when the entry was added. Existing lines are never touched.
    """
    path = project_root / GITIGNORE_FILE

    try:
        content = path.read_bytes() if path.exists() else b""
        if has_entry(content, name):
            logger.debug("gitignore_entry_present", path=str(path))
            return False

        prefix = b"\n" if content and not content.endswith(b"\n") else b""
        with open(path, "ab") as f:
            f.write(prefix + f"{name}/\n".encode())
    except OSError as e:
        raise ArtifactWriteError(str(path), str(e)) from e

    logger.info("gitignore_entry_added", path=str(path), entry=f"{name}/")
    return True
