"""config.py — Runtime settings read from the environment (and .env)."""

import os
from dataclasses import dataclass

VERSION = "0.3.0"

DEFAULT_HTTP_TIMEOUT = 30.0
DEFAULT_LANGUAGE = "zh-CN"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


@dataclass
class Settings:
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    user_agent: str = f"epubsaver/{VERSION}"
    secure_context: bool = False    # Upgrade http:// images to https://
    language: str = DEFAULT_LANGUAGE
    log_format: str = "console"     # "console" or "json"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number of seconds, got '{raw}'") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive, got '{raw}'")
    return value


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean (true/false), got '{raw}'")


def load_settings() -> Settings:
    """Build Settings from EPUBSAVER_* environment variables.

    Call load_dotenv() first if values should come from a .env file.
    """
    log_format = os.getenv("EPUBSAVER_LOG_FORMAT", "console").strip().lower() or "console"
    if log_format not in ("console", "json"):
        raise ValueError(f"EPUBSAVER_LOG_FORMAT must be 'console' or 'json', got '{log_format}'")

    return Settings(
        http_timeout=_env_float("EPUBSAVER_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT),
        user_agent=os.getenv("EPUBSAVER_USER_AGENT", "").strip() or f"epubsaver/{VERSION}",
        secure_context=_env_bool("EPUBSAVER_SECURE_CONTEXT", False),
        language=os.getenv("EPUBSAVER_LANGUAGE", "").strip() or DEFAULT_LANGUAGE,
        log_format=log_format,
    )
