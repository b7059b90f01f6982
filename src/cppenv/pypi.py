"""Latest-version lookups against the Python Package Index."""
from cppenv.errors import NetworkError
from cppenv.logging import get_logger
from cppenv.utils.fetching import fetch_json

logger = get_logger(__name__)

PYPI_URL = "https://pypi.org/pypi/{package}/json"
REQUEST_TIMEOUT = 10


async def latest_version(package: str) -> str:
    """Return the newest released version of *package*."""
    url = PYPI_URL.format(package=package)
    data = await fetch_json(url, timeout=REQUEST_TIMEOUT)

    info = data.get("info") if isinstance(data, dict) else None
    version = info.get("version") if isinstance(info, dict) else None
    if not isinstance(version, str) or not version:
        raise NetworkError(f"No version found for package: {package}", url)

    logger.debug("latest_version", package=package, version=version)
    return version
