"""
Configuration - environment-driven settings for cartsync.

Values are read from the process environment, with a `.env` file in the
working directory loaded first when present.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Storage backends accepted by CART_STORAGE_BACKEND
STORAGE_FILE = "file"
STORAGE_REDIS = "redis"
STORAGE_MEMORY = "memory"
STORAGE_BACKENDS = (STORAGE_FILE, STORAGE_REDIS, STORAGE_MEMORY)

# Namespaced slot for the cart snapshot
DEFAULT_STORAGE_KEY = "@RocketShoes:cart"
DEFAULT_STORAGE_PATH = str(Path.home() / ".cartsync" / "storage.json")
DEFAULT_INVENTORY_URL = "http://localhost:3333"


def _get_env(key: str, default: str = "") -> str:
    value = os.environ.get(key)
    if value is None or value.strip() == "":
        return default
    return value.strip()


def _get_float(key: str, default: float) -> float:
    value = _get_env(key)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{key} must be a number, got {value!r}")


@dataclass(frozen=True)
class Settings:
    inventory_api_url: str = DEFAULT_INVENTORY_URL
    inventory_timeout: float = 5.0
    storage_backend: str = STORAGE_FILE
    storage_path: str = DEFAULT_STORAGE_PATH
    storage_key: str = DEFAULT_STORAGE_KEY
    language: str = "pt"
    redis_url: str = ""
    redis_token: str = ""

    def __post_init__(self):
        if self.storage_backend not in STORAGE_BACKENDS:
            raise ValueError(
                f"CART_STORAGE_BACKEND must be one of {', '.join(STORAGE_BACKENDS)}, "
                f"got {self.storage_backend!r}"
            )
        if self.inventory_timeout <= 0:
            raise ValueError("INVENTORY_TIMEOUT must be positive")

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables."""
        return cls(
            inventory_api_url=_get_env("INVENTORY_API_URL", DEFAULT_INVENTORY_URL).rstrip("/"),
            inventory_timeout=_get_float("INVENTORY_TIMEOUT", 5.0),
            storage_backend=_get_env("CART_STORAGE_BACKEND", STORAGE_FILE).lower(),
            storage_path=os.path.expanduser(_get_env("CART_STORAGE_PATH", DEFAULT_STORAGE_PATH)),
            storage_key=_get_env("CART_STORAGE_KEY", DEFAULT_STORAGE_KEY),
            language=_get_env("CART_LANGUAGE", "pt"),
            redis_url=_get_env("UPSTASH_REDIS_REST_URL"),
            redis_token=_get_env("UPSTASH_REDIS_REST_TOKEN"),
        )


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get settings (singleton), loading `.env` on first use."""
    global _settings

    if _settings is None:
        load_dotenv()
        _settings = Settings.from_env()

    return _settings


def reset_settings() -> None:
    """Forget cached settings so the environment is read again."""
    global _settings
    _settings = None
