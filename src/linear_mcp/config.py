"""Environment-driven configuration for the Linear MCP server.

A ``.env`` file in the working directory is loaded first (existing
environment variables win), then settings are read from the environment.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.linear.app/graphql"
DEFAULT_PORT = 3124
DEFAULT_LOG_LEVEL = "info"
DEFAULT_TIMEOUT = 30


class ConfigError(Exception):
    """Raised when required configuration is missing."""


@dataclass(frozen=True)
class Settings:
    api_key: str = ""
    api_url: str = DEFAULT_API_URL
    port: int = DEFAULT_PORT
    log_level: str = DEFAULT_LOG_LEVEL
    log_file: str | None = None
    timeout: int = DEFAULT_TIMEOUT


def _int_setting(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Invalid integer for %s (%r), using default %d", key, raw, default)
        return default


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Build :class:`Settings` from *env* (default: ``os.environ`` after ``.env`` loading).

    Does not validate; call :func:`validate_settings` before serving.
    """
    if env is None:
        load_dotenv()
        env = os.environ
    return Settings(
        api_key=env.get("LINEAR_API_KEY", ""),
        api_url=env.get("LINEAR_API_URL") or DEFAULT_API_URL,
        port=_int_setting(env, "PORT", DEFAULT_PORT),
        log_level=(env.get("LOG_LEVEL") or DEFAULT_LOG_LEVEL).lower(),
        log_file=env.get("LOG_FILE") or None,
        timeout=_int_setting(env, "LINEAR_TIMEOUT", DEFAULT_TIMEOUT),
    )


def validate_settings(settings: Settings) -> None:
    """Raise :class:`ConfigError` naming every missing required variable."""
    required = {"LINEAR_API_KEY": settings.api_key}
    missing = [key for key, value in required.items() if not value]
    if missing:
        msg = f"Missing required environment variables: {', '.join(missing)}"
        raise ConfigError(msg)
