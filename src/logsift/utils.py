"""Utility functions for logsift"""

import logging
import os
from pathlib import Path

import click


logger = logging.getLogger(__name__)


def get_int_env(key: str, default: int = 0) -> int:
    """Get integer value from environment variable, return default if not set or invalid."""
    val = os.getenv(key)
    if val is None:
        return default
    try:
        return int(val)
    except ValueError:
        logger.warning(f'Ignoring invalid integer {key}={val!r}')
        return default


def get_float_env(key: str, default: float) -> float:
    """Get float value from environment variable, return default if not set or invalid."""
    val = os.getenv(key)
    if val is None:
        return default
    try:
        return float(val)
    except ValueError:
        logger.warning(f'Ignoring invalid number {key}={val!r}')
        return default


def get_str_env(key: str, default: str) -> str:
    """
    Get string from environment variable, return default if not set.

    Args:
        key: Environment variable name
        default: Default value if not set

    Returns:
        String value or default
    """
    return os.getenv(key, default)


def setup_logging(verbose: bool = False) -> None:
    """Configure the root logger from LOGSIFT_LOG_LEVEL (DEBUG when verbose)."""
    if verbose:
        level = logging.DEBUG
    else:
        level_name = get_str_env('LOGSIFT_LOG_LEVEL', 'WARNING').upper()
        level = getattr(logging, level_name, logging.WARNING)
    logging.basicConfig(level=level, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    # httpx logs every request at INFO
    logging.getLogger('httpx').setLevel(max(level, logging.WARNING))


def debug_or_progress(show_progress: bool, msg: str) -> None:
    """Log a message, and also show it on stderr when progress is requested."""
    logger.debug(msg)
    if show_progress:
        click.echo(click.style('[+] ', fg='yellow', bold=True) + msg, err=True)


def get_logsift_cache_base() -> Path:
    """Get the base cache directory for logsift.

    Priority:
    1. LOGSIFT_CACHE_DIR environment variable (if set)
    2. XDG_CACHE_HOME environment variable (if set)
    3. ~/.cache (default)

    Returns:
        Path to the base cache directory (e.g., ~/.cache/logsift)
    """
    logsift_cache = os.environ.get('LOGSIFT_CACHE_DIR')
    if logsift_cache:
        return Path(logsift_cache)

    xdg_cache = os.environ.get('XDG_CACHE_HOME')
    if xdg_cache:
        base = Path(xdg_cache)
    else:
        base = Path.home() / '.cache'

    return base / 'logsift'


def get_logsift_cache_dir(subdir: str) -> Path:
    """Get a specific cache subdirectory for logsift.

    Args:
        subdir: Subdirectory name (e.g., 'models')

    Returns:
        Path to the cache subdirectory, created if necessary
    """
    cache_dir = get_logsift_cache_base() / subdir
    cache_dir.mkdir(parents=True, exist_ok=True)
    return cache_dir
