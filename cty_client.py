"""
HTTP client for downloading country files.
"""

import logging
from typing import Optional

import httpx

from config import config
from cty_parser import CountryTable, parse

USER_AGENT = "CtyLookup/1.0"

logger = logging.getLogger(__name__)


class CtyFetchError(Exception):
    """Exception for country file download errors."""
    pass


async def fetch_cty_text(url: Optional[str] = None, timeout: Optional[float] = None) -> str:
    """
    Download the raw text of a country file.

    Args:
        url: Location of the file, defaults to CTY_URL
        timeout: Request timeout in seconds, defaults to CTY_FETCH_TIMEOUT

    Returns:
        File contents

    Raises:
        CtyFetchError: On transport errors, non-200 responses or an empty body
    """
    url = url or config.CTY_URL
    timeout = timeout or config.CTY_FETCH_TIMEOUT

    async with httpx.AsyncClient() as client:
        try:
            response = await client.get(
                url,
                headers={"User-Agent": USER_AGENT},
                timeout=timeout,
                follow_redirects=True,
            )
        except httpx.HTTPError as e:
            raise CtyFetchError(f"HTTP error: {e}")

    if response.status_code != 200:
        raise CtyFetchError(f"Unexpected status {response.status_code} from {url}")

    # Decode like the file loader instead of trusting the server's charset
    try:
        text = response.content.decode(config.CTY_FILE_ENCODING)
    except UnicodeDecodeError as e:
        raise CtyFetchError(f"Could not decode country file from {url}: {e}")
    if not text.strip():
        raise CtyFetchError(f"Empty country file from {url}")

    logger.info(f"Downloaded country file from {url} ({len(text)} characters)")
    return text


async def fetch_table(url: Optional[str] = None, timeout: Optional[float] = None) -> CountryTable:
    """Download and parse a country file. Parse errors propagate unchanged."""
    table = parse(await fetch_cty_text(url, timeout))
    logger.info(f"Parsed {len(table)} country entries (version {table.version or 'unknown'})")
    return table
