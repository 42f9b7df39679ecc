"""Configuration management for personfinder."""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


def _flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes", "on")


def _key(name: str) -> str | None:
    value = os.getenv(name, "").strip()
    return value or None


@dataclass(frozen=True)
class Config:
    """Global configuration."""

    clearbit_api_key: str | None = None
    hunter_api_key: str | None = None
    use_mock: bool = False
    discovery: str = "duckduckgo"
    http_timeout: float = 10.0
    max_retries: int = 3
    retry_base_delay: float = 1.0
    max_failures: int = 5
    open_duration: float = 60.0
    cache_ttl: float = 30 * 60
    match_threshold: int = 7
    discovery_delay: float = 0.5
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, *, dotenv: bool = True) -> Config:
        if dotenv:
            load_dotenv()
        return cls(
            clearbit_api_key=_key("CLEARBIT_API_KEY"),
            hunter_api_key=_key("HUNTER_API_KEY"),
            use_mock=_flag("PERSONFINDER_USE_MOCK"),
            discovery=os.getenv("PERSONFINDER_DISCOVERY", "duckduckgo").strip().lower(),
            http_timeout=float(os.getenv("PERSONFINDER_TIMEOUT", "10")),
            max_retries=int(os.getenv("PERSONFINDER_MAX_RETRIES", "3")),
            retry_base_delay=float(os.getenv("PERSONFINDER_RETRY_BASE_DELAY", "1.0")),
            max_failures=int(os.getenv("PERSONFINDER_MAX_FAILURES", "5")),
            open_duration=float(os.getenv("PERSONFINDER_OPEN_DURATION", "60")),
            cache_ttl=float(os.getenv("PERSONFINDER_CACHE_TTL", "1800")),
            match_threshold=int(os.getenv("PERSONFINDER_MATCH_THRESHOLD", "7")),
            discovery_delay=float(os.getenv("PERSONFINDER_DISCOVERY_DELAY", "0.5")),
            log_level=os.getenv("PERSONFINDER_LOG_LEVEL", "INFO"),
        )
