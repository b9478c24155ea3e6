"""Application configuration using Pydantic Settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """mediabot settings.

    Loaded from environment variables or .env file.
    """

    # --- Application ---
    APP_NAME: str = "mediabot"
    DEBUG: bool = False
    HTTP_TIMEOUT: float = 30.0
    TMP_DIR: str = "tmp"

    # --- Polling (shared) ---
    POLL_BACKOFF: float = 1.0  # multiplier per attempt; 1.0 keeps a fixed cadence
    POLL_MAX_INTERVAL: float = 30.0

    # --- nanana.app (image editor) ---
    NANANA_BASE_URL: str = "https://nanana.app"
    NANANA_USER_AGENT: str = "Mozilla/5.0 (Linux; Android 10)"
    NANANA_ACCEPT_LANGUAGE: str = "en-US,en;q=0.9"
    EDIT_POLL_INTERVAL: float = 5.0
    EDIT_MAX_ATTEMPTS: int = 30
    EDIT_POLL_TIMEOUT: float = 300.0

    # --- akunlama.com (disposable mailbox) ---
    MAILBOX_BASE_URL: str = "https://akunlama.com"
    MAILBOX_DOMAIN: str = "akunlama.com"
    OTP_POLL_INTERVAL: float = 3.0
    OTP_MAX_ATTEMPTS: int = 20
    OTP_POLL_TIMEOUT: float = 120.0

    # --- YouTube / ytconvert.org (video converter) ---
    YT_OEMBED_URL: str = "https://www.youtube.com/oembed"
    YT_CONVERT_URL: str = "https://hub.ytconvert.org/api/download"
    YT_CONVERT_FALLBACK_URL: str = "https://api.ytconvert.org/api/download"
    YT_USER_AGENT: str = "Mozilla/5.0 (Android)"
    YT_REFERER: str = "https://ytmp3.gg/"
    YT_POLL_INTERVAL: float = 2.0
    YT_MAX_ATTEMPTS: int = 150
    YT_POLL_TIMEOUT: float = 600.0
    DEFAULT_QUALITY: str = "720p"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings singleton."""
    return Settings()
