"""Configuration management for barry."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv

from ..data.mercury_client import DEFAULT_API_BASE_URL
from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

API_KEY_ENV = 'MERCURY_API_KEY'


@dataclass
class Settings:
    """Process-wide settings read from the environment."""
    api_key: Optional[str] = None
    api_base_url: str = DEFAULT_API_BASE_URL
    timeout: int = 30
    log_level: str = 'WARNING'
    console_colors: bool = False


def load_config(env_path: Optional[Union[str, Path]] = None) -> Settings:
    """
    Load settings from a .env file (if present) and environment variables.

    Variables already set in the environment win over values in the file.

    Args:
        env_path: .env file to read; defaults to .env in the working directory.

    Returns:
        Populated Settings.

    Raises:
        ConfigurationError: If a value is malformed or the base URL is empty.
    """
    env_file = Path(env_path) if env_path is not None else Path.cwd() / '.env'
    if env_file.exists():
        load_dotenv(env_file)
        logger.info(f"Loaded configuration from {env_file}")
    else:
        logger.debug("No .env file found, using environment variables only")

    timeout_raw = os.getenv('MERCURY_TIMEOUT', '30')
    try:
        timeout = int(timeout_raw)
    except ValueError as e:
        raise ConfigurationError(f"MERCURY_TIMEOUT must be an integer, got {timeout_raw!r}") from e

    settings = Settings(
        api_key=os.getenv(API_KEY_ENV) or None,
        api_base_url=os.getenv('MERCURY_API_URL', DEFAULT_API_BASE_URL),
        timeout=timeout,
        log_level=os.getenv('LOG_LEVEL', 'WARNING').upper(),
        console_colors=os.getenv('CONSOLE_COLORS', 'False').lower() == 'true',
    )

    _validate_config(settings)
    return settings


def _validate_config(settings: Settings) -> None:
    if not settings.api_base_url.strip():
        raise ConfigurationError("MERCURY_API_URL is empty; cannot proceed.")
    if settings.timeout <= 0:
        raise ConfigurationError(f"MERCURY_TIMEOUT must be positive, got {settings.timeout}")
    if not settings.api_key:
        logger.debug(f"{API_KEY_ENV} not set; an --api-key flag will be required")
