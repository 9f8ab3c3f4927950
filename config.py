"""
Centralized configuration for the country file lookup service.

All configurable values are loaded from environment variables with sensible defaults.
"""

import os


def _positive_float(name: str, default: str) -> float:
    """
    Read a positive float from the environment.

    Raises an error on unusable values so misconfiguration fails at startup.
    """
    raw = os.getenv(name, default)
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be a number, got '{raw}'")
    if value <= 0:
        raise ValueError(f"Environment variable {name} must be positive, got {value}")
    return value


class Config:
    """Application configuration loaded from environment variables."""

    # Country file on disk
    CTY_FILE_PATH: str = os.getenv("CTY_FILE_PATH", "cty.dat")
    # cty.dat releases are plain ASCII, older mirrors ship latin-1
    CTY_FILE_ENCODING: str = os.getenv("CTY_FILE_ENCODING", "latin-1")

    # Download location
    CTY_URL: str = os.getenv("CTY_URL", "https://www.country-files.com/cty/cty.dat")
    CTY_FETCH_TIMEOUT: float = _positive_float("CTY_FETCH_TIMEOUT", "30")

    # Where the web app builds its table from at startup: file or url
    CTY_SOURCE: str = os.getenv("CTY_SOURCE", "file").lower()

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Testing mode
    TESTING: bool = bool(os.getenv("TESTING", ""))


# Global config instance
config = Config()
