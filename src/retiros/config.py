"""
Configuration for the retreat ledger.

Contains defaults and environment lookups used by the CLI and the MCP bridge.
"""

import logging
import os
from typing import Optional

from dotenv import load_dotenv

VERSION = "0.1.0"

# Database configuration
DATABASE_URL_ENV = "DATABASE_URL"
DEFAULT_DATABASE_URL = "sqlite:./retiros.db"
ASYNC_SQLITE_SCHEME = "sqlite+aiosqlite"

# Logging configuration
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_LEVEL_ENV = "RETIROS_LOG_LEVEL"

# CLI defaults
DEFAULT_TRANSACTION_LIST_LIMIT = 20
DEFAULT_TOP_CATEGORIES = 5
DEFAULT_RECENT_FINISHED = 5
DESCRIPTION_DISPLAY_WIDTH = 28


def load_env() -> None:
    """Load a .env file from the working directory without overriding the environment."""
    load_dotenv(override=False)


def normalize_database_url(url: str) -> str:
    """
    Turn a database URL into one the async engine accepts.

    The short forms "sqlite:path" and "sqlite://path" map onto the aiosqlite
    driver. Full SQLAlchemy URLs ("sqlite+aiosqlite:///...",
    "postgresql+asyncpg://...") pass through unchanged.

    Args:
        url: Database URL from the environment or the command line

    Returns:
        SQLAlchemy URL string
    """
    if url.startswith("sqlite+"):
        return url
    if url.startswith("sqlite:///"):
        return ASYNC_SQLITE_SCHEME + url[len("sqlite"):]

    if url.startswith("sqlite://"):
        path = url[len("sqlite://"):]
    elif url.startswith("sqlite:"):
        path = url[len("sqlite:"):]
    else:
        return url

    if path in ("", ":memory:"):
        return f"{ASYNC_SQLITE_SCHEME}://"
    return f"{ASYNC_SQLITE_SCHEME}:///{path}"


def get_database_url(override: Optional[str] = None) -> str:
    """Resolve the database URL from an explicit override, the environment, or the default."""
    url = override or os.getenv(DATABASE_URL_ENV) or DEFAULT_DATABASE_URL
    return normalize_database_url(url)


def get_log_level(verbose: bool = False) -> int:
    """Get the configured log level."""
    if verbose:
        return logging.DEBUG

    level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    return level_map.get(os.getenv(LOG_LEVEL_ENV, "WARNING").upper(), logging.WARNING)
