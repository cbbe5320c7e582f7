"""
Configuration and environment variable management.
"""

import os
from pathlib import Path
from typing import Optional
import logging

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_MANIFEST_URL = "https://mars.jpl.nasa.gov/msl-raw-images/image/image_manifest.json"


class Config:
    """
    Configuration manager for the raw-image cache.

    Loads environment variables from .env file and provides
    convenient access to configuration values.
    """

    def __init__(self, env_file: Optional[Path] = None):
        """
        Initialize configuration.

        Parameters
        ----------
        env_file : Path, optional
            Path to .env file. If None, searches for .env in the current
            directory and its parents.
        """
        if env_file is None:
            current = Path.cwd()
            for parent in [current] + list(current.parents):
                env_path = parent / ".env"
                if env_path.exists():
                    env_file = env_path
                    break

        if env_file and Path(env_file).exists():
            load_dotenv(env_file)
            logger.info(f"Loaded environment from {env_file}")
        else:
            logger.debug("No .env file found - using environment variables only")

    def _get_number(self, key: str, default: str, kind: type, minimum: float):
        raw = os.getenv(key, default)
        try:
            value = kind(raw)
        except (TypeError, ValueError):
            raise ValueError(f"{key} must be a {kind.__name__}, got {raw!r}") from None
        if value < minimum:
            raise ValueError(f"{key} must be >= {minimum}, got {value}")
        return value

    # Remote source
    @property
    def manifest_url(self) -> str:
        """Get image manifest URL."""
        return os.getenv("MARS_IMAGES_MANIFEST_URL", DEFAULT_MANIFEST_URL)

    @property
    def request_timeout(self) -> float:
        """Per-request timeout in seconds."""
        return self._get_number("MARS_IMAGES_TIMEOUT", "30", float, 0.001)

    # Loading
    @property
    def max_workers(self) -> int:
        """Number of catalogs fetched concurrently."""
        return self._get_number("MARS_IMAGES_MAX_WORKERS", "4", int, 1)

    @property
    def default_sols(self) -> int:
        """Number of most recent sols loaded when none is given."""
        return self._get_number("MARS_IMAGES_SOLS", "3", int, 0)

    def validate(self):
        """
        Validate configuration values.

        Raises
        ------
        ValueError
            If a value is missing or invalid
        """
        try:
            if not self.manifest_url:
                raise ValueError("MARS_IMAGES_MANIFEST_URL is empty")
            _ = self.request_timeout
            _ = self.max_workers
            _ = self.default_sols
        except ValueError as e:
            logger.error(str(e))
            raise

        logger.info("Configuration validated successfully")


# Global configuration instance
_config = None


def get_config(reload: bool = False) -> Config:
    """
    Get global configuration instance.

    Parameters
    ----------
    reload : bool
        Whether to reload configuration from .env file

    Returns
    -------
    Config
        Global configuration instance
    """
    global _config
    if _config is None or reload:
        _config = Config()
    return _config
