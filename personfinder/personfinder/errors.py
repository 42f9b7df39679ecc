"""Exception hierarchy for personfinder."""

from __future__ import annotations


class PersonFinderError(Exception):
    """Base class for all personfinder errors."""


class ValidationError(PersonFinderError, ValueError):
    """Malformed query, search type, email or phone. Never retried."""


class ProviderError(PersonFinderError):
    """Raised inside a provider adapter; never escapes the adapter guard."""

    def __init__(self, provider: str, message: str, status_code: int | None = None) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.status_code = status_code


class ProviderTransientError(ProviderError):
    """Network failure, timeout or 5xx response. Retried, then counted by the circuit."""


class ProviderNotFoundError(ProviderError):
    """404 from the source: a valid, empty answer."""


class ProviderRateLimitedError(ProviderError):
    """429 from the source: skipped for this cycle."""


class ProviderResponseError(ProviderError):
    """Any other client error or an unparseable payload."""
