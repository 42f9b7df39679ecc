"""Build the provider list from the available credentials."""

from __future__ import annotations

import logging

from personfinder.config import Config
from personfinder.matching.discovery import DiscoveryBackend, DuckDuckGoDiscovery, NullDiscovery
from personfinder.matching.engine import IdentityMatcher
from personfinder.providers.base import BaseProvider, HttpProvider
from personfinder.providers.basic import BasicProvider
from personfinder.providers.clearbit import ClearbitProvider
from personfinder.providers.hunter import HunterProvider
from personfinder.providers.mock import MockProvider
from personfinder.providers.resilience import CircuitBreaker, RetryPolicy

logger = logging.getLogger(__name__)

__all__ = [
    "BaseProvider",
    "BasicProvider",
    "ClearbitProvider",
    "HttpProvider",
    "HunterProvider",
    "MockProvider",
    "build_discovery",
    "build_providers",
]


def build_discovery(config: Config) -> DiscoveryBackend:
    if config.discovery in ("off", "none", ""):
        return NullDiscovery()
    return DuckDuckGoDiscovery(timeout=min(config.http_timeout, 5.0))


def build_providers(
    config: Config, *, discovery: DiscoveryBackend | None = None
) -> list[BaseProvider]:
    """Instantiate one adapter per configured source, in priority order.

    Missing API keys never fail startup; the key-less BasicProvider is
    always registered last so paid sources win every merged field.
    """
    retry = RetryPolicy(max_retries=config.max_retries, base_delay=config.retry_base_delay)

    def breaker() -> CircuitBreaker:
        return CircuitBreaker(max_failures=config.max_failures, open_duration=config.open_duration)

    providers: list[BaseProvider] = []

    if config.use_mock:
        providers.append(MockProvider(breaker=breaker()))
        logger.info("Mock provider enabled")

    if config.clearbit_api_key:
        providers.append(
            ClearbitProvider(
                config.clearbit_api_key, timeout=config.http_timeout, retry=retry, breaker=breaker()
            )
        )
        logger.info("Clearbit API configured")
    else:
        logger.info("Clearbit API not configured (set CLEARBIT_API_KEY)")

    if config.hunter_api_key:
        providers.append(
            HunterProvider(
                config.hunter_api_key, timeout=config.http_timeout, retry=retry, breaker=breaker()
            )
        )
        logger.info("Hunter API configured")
    else:
        logger.info("Hunter API not configured (set HUNTER_API_KEY)")

    matcher = IdentityMatcher(
        discovery or build_discovery(config),
        person_threshold=config.match_threshold,
        query_delay=config.discovery_delay,
    )
    providers.append(BasicProvider(matcher, breaker=breaker()))

    return providers
