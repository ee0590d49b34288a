"""Runtime configuration read from the environment (and an optional .env file)."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_API_URL = "https://cartsmash-api.onrender.com"
ENV_PATH = Path(".env")


class ConfigError(Exception):
    """Raised when required configuration is missing."""


def load_env_file(path: Path | None = None) -> None:
    """Load variables from a .env file without overriding the real environment.

    Safe to call more than once, and a no-op when the file does not exist.
    """
    env_path = path or ENV_PATH
    if env_path.exists():
        load_dotenv(env_path, override=False)


def get_api_url() -> str:
    """Backend base URL: ``CARTSMASH_API_URL`` or the production fallback."""
    url = os.getenv("CARTSMASH_API_URL") or DEFAULT_API_URL
    return url.rstrip("/")


def get_kroger_credentials() -> tuple[str, str]:
    """Return ``(client_id, client_secret)`` for the Kroger API."""
    client_id = os.getenv("KROGER_CLIENT_ID", "")
    client_secret = os.getenv("KROGER_CLIENT_SECRET", "")
    missing = [
        name
        for name, value in (
            ("KROGER_CLIENT_ID", client_id),
            ("KROGER_CLIENT_SECRET", client_secret),
        )
        if not value
    ]
    if missing:
        raise ConfigError(f"Missing environment variables: {', '.join(missing)}")
    return client_id, client_secret


def get_log_level() -> int:
    name = os.getenv("CARTSMASH_LOG_LEVEL", "WARNING").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.WARNING


def configure_logging(verbose: bool = False) -> None:
    """Send ``cartsmash`` log records to stderr.

    Library modules only create loggers; this is called once by the CLI.
    """
    logger = logging.getLogger("cartsmash")
    logger.handlers.clear()
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else get_log_level())
    logger.propagate = False
