"""
Loads a country file from disk and hands its text to the parser.
"""

import logging
import os
from typing import Optional

from config import config
from cty_parser import CountryTable, parse

logger = logging.getLogger(__name__)


class CtyFileError(Exception):
    """Exception for country files that cannot be read."""
    pass


def read_cty_file(path: str, encoding: Optional[str] = None) -> str:
    """
    Read the raw text of a country file.

    Args:
        path: Path to the file
        encoding: Text encoding, defaults to CTY_FILE_ENCODING

    Returns:
        File contents

    Raises:
        CtyFileError: If the file is missing or unreadable
    """
    encoding = encoding or config.CTY_FILE_ENCODING
    if not os.path.exists(path):
        raise CtyFileError(f"Country file not found: {path}")

    try:
        with open(path, "r", encoding=encoding) as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise CtyFileError(f"Could not read country file {path}: {e}")


def load_table(path: Optional[str] = None, encoding: Optional[str] = None) -> CountryTable:
    """
    Read and parse a country file.

    Parse errors propagate unchanged so callers see the entry and line.
    """
    path = path or config.CTY_FILE_PATH
    table = parse(read_cty_file(path, encoding))
    logger.info(f"Loaded {len(table)} country entries from {path} (version {table.version or 'unknown'})")
    return table
