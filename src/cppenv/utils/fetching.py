import asyncio
from pathlib import Path
from typing import Any, Optional

import aiohttp

from cppenv.errors import NetworkError
from cppenv.logging import get_logger

logger = get_logger(__name__)

CHUNK_SIZE = 64 * 1024

# Archive downloads are unbounded; only connecting is limited.
DOWNLOAD_TIMEOUT = aiohttp.ClientTimeout(total=None, sock_connect=30)


async def download_url(url: str, dest: Path) -> Path:
    """Stream *url* into *dest*. Any non-200 response is fatal."""
    logger.info("download_started", url=url, destination=str(dest))
    dest.parent.mkdir(parents=True, exist_ok=True)
    downloaded = 0

    try:
        async with aiohttp.ClientSession(timeout=DOWNLOAD_TIMEOUT) as session:
            async with session.get(url) as response:
                if response.status != 200:
                    raise NetworkError(
                        f"Download failed: HTTP {response.status} for {url}",
                        url,
                        response.status
                    )

                with open(dest, "wb") as f:
                    while chunk := await response.content.read(CHUNK_SIZE):
                        f.write(chunk)
                        downloaded += len(chunk)

    except NetworkError:
        if dest.exists():
            dest.unlink()
        raise
    except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
        if dest.exists():
            dest.unlink()
        raise NetworkError(f"Failed to download {url}: {e}", url) from e

    logger.info("download_complete", url=url, size=downloaded)
    return dest


async def fetch_json(url: str, timeout: Optional[float] = None) -> Any:
    """GET *url* and decode the JSON body."""
    session_kwargs = {"timeout": aiohttp.ClientTimeout(total=timeout)} if timeout else {}
    try:
        async with aiohttp.ClientSession(**session_kwargs) as session:
            async with session.get(url) as response:
                if response.status != 200:
                    raise NetworkError(
                        f"Request failed: HTTP {response.status} for {url}",
                        url,
                        response.status
                    )
                return await response.json(content_type=None)
    except NetworkError:
        raise
    except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
        raise NetworkError(f"Failed to query {url}: {e}", url) from e
