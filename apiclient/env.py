from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv
from pydantic import AnyHttpUrl, ValidationError

from .constants import (
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_TOKEN_STORE_PATH,
    LOGGER,
)


@dataclass(frozen=True)
class Settings:
    base_url: str
    timeout: float
    debug: bool
    token_store_path: str


def is_truthy(value: str | None) -> bool:
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_env_float(key: str, default: float) -> float:
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise RuntimeError(f"{key} must be a number of seconds.")
    if value <= 0:
        raise RuntimeError(f"{key} must be greater than zero.")
    return value


def load_env() -> None:
    env_path = Path(__file__).resolve().parent.parent / ".env"
    if not env_path.exists():
        return
    load_dotenv(env_path, override=True)


def validate_base_url(raw: str) -> str:
    try:
        url = AnyHttpUrl(raw.strip())
    except ValidationError as error:
        raise RuntimeError(
            "API_BASE_URL must be a valid http(s) URL (for example: "
            "https://api.yourapp.com)."
        ) from error
    return str(url).rstrip("/")


def load_settings() -> Settings:
    base_url = validate_base_url(os.getenv("API_BASE_URL", DEFAULT_BASE_URL))
    if base_url.startswith("http://"):
        LOGGER.warning("API_BASE_URL is not HTTPS; bearer tokens will be sent in clear text.")

    return Settings(
        base_url=base_url,
        timeout=_get_env_float("API_TIMEOUT", DEFAULT_TIMEOUT_SECONDS),
        debug=is_truthy(os.getenv("API_DEBUG", "1")),
        token_store_path=os.getenv("TOKEN_STORE_PATH", "").strip() or DEFAULT_TOKEN_STORE_PATH,
    )


def setup_logging(debug_enabled: bool) -> bool:
    if debug_enabled:
        logging.basicConfig(level=logging.INFO)
        LOGGER.setLevel(logging.INFO)
    return debug_enabled
