"""Configuration for the EONET client."""
import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from client.request_builder import API

logger = logging.getLogger(__name__)


@dataclass
class Settings:
    """Client settings, with defaults for the public EONET v2.1 API."""
    api_url: str = API
    timeout_seconds: int = 30
    default_days: int = 360
    log_level: str = 'INFO'

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'Settings':
        """
        Read settings from environment variables.

        Recognized variables are EONET_API_URL, EONET_TIMEOUT_SECONDS,
        EONET_DEFAULT_DAYS and LOG_LEVEL. Missing or invalid values fall back
        to the defaults.

        Args:
            environ: Mapping to read from (default: os.environ)

        Returns:
            Settings instance
        """
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            api_url=env.get('EONET_API_URL', defaults.api_url),
            timeout_seconds=_positive_int(env, 'EONET_TIMEOUT_SECONDS', defaults.timeout_seconds),
            default_days=_positive_int(env, 'EONET_DEFAULT_DAYS', defaults.default_days),
            log_level=env.get('LOG_LEVEL', defaults.log_level)
        )


def _positive_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        value = 0
    if value <= 0:
        logger.warning(f"Ignoring invalid {name}={raw!r}, using {default}")
        return default
    return value
