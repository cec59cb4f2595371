"""
Runtime settings read from the environment.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional
from dotenv import load_dotenv
from votd.verse_client import DEFAULT_API_URL, DEFAULT_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

CACHE_FILE_NAME = "votd-cli-cache.db"


@dataclass
class Settings:
    """Resolved CLI settings."""
    cache_path: Optional[Path]
    api_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT_SECONDS


def load_dev_env(path: str = ".dev.env"):
    """Load local overrides when a .dev.env file is present."""
    if os.path.exists(path):
        load_dotenv(path)


def default_cache_path(environ: Mapping[str, str]) -> Optional[Path]:
    """
    Per-user cache file location.

    Uses $XDG_CACHE_HOME, falling back to ~/.cache. Returns None when
    neither is set and the home directory cannot be determined.
    """
    cache_home = environ.get("XDG_CACHE_HOME")
    if cache_home:
        return Path(cache_home) / CACHE_FILE_NAME
    try:
        home = Path.home()
    except RuntimeError as e:
        logger.warning("Can't determine where to place a cache file. Skipping. (%s)", e)
        return None
    return home / ".cache" / CACHE_FILE_NAME


def load_settings(
    environ: Optional[Mapping[str, str]] = None,
    cache_path: Optional[Path] = None,
) -> Settings:
    """
    Build settings from environment variables.

    Args:
        environ: Environment mapping (defaults to os.environ)
        cache_path: Explicit cache file location; wins over VOTD_CACHE_PATH

    Returns:
        Settings; cache_path is None when no location could be determined

    Raises:
        ValueError: If VOTD_TIMEOUT_SECONDS is not a positive number
    """
    if environ is None:
        environ = os.environ

    env_cache_path = environ.get("VOTD_CACHE_PATH")
    timeout_raw = environ.get("VOTD_TIMEOUT_SECONDS")

    timeout = DEFAULT_TIMEOUT_SECONDS
    if timeout_raw:
        try:
            timeout = float(timeout_raw)
        except ValueError:
            raise ValueError(f"VOTD_TIMEOUT_SECONDS must be a number, got {timeout_raw!r}")
        if timeout <= 0:
            raise ValueError(f"VOTD_TIMEOUT_SECONDS must be positive, got {timeout_raw!r}")

    if cache_path is None:
        if env_cache_path:
            cache_path = Path(env_cache_path).expanduser()
        else:
            cache_path = default_cache_path(environ)

    return Settings(
        cache_path=cache_path,
        api_url=environ.get("VOTD_API_URL") or DEFAULT_API_URL,
        timeout=timeout,
    )


def ensure_cache_dir(settings: Settings):
    """Create the cache directory if missing; failures only disable caching."""
    if settings.cache_path is None:
        return
    try:
        settings.cache_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.warning("Cannot create cache directory %s: %s", settings.cache_path.parent, e)
