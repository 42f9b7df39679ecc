"""Base provider interface and the failure-isolating guard around it."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, TypeVar

import httpx

from personfinder.errors import (
    ProviderNotFoundError,
    ProviderRateLimitedError,
    ProviderResponseError,
    ProviderTransientError,
)
from personfinder.models import PartialPersonData
from personfinder.providers.resilience import CircuitBreaker, RetryPolicy, retry_async
from personfinder.utils.http import fetch_response
from personfinder.utils.privacy import mask_email

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BaseProvider(ABC):
    """All provider adapters must implement this interface.

    The public ``search_*`` methods never raise for expected failure
    modes: not-found, rate limiting, transport errors and 5xx responses
    all come back as ``None`` / ``[]`` and are logged.
    """

    def __init__(self, *, breaker: CircuitBreaker | None = None) -> None:
        self.breaker = breaker or CircuitBreaker()

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return the human-readable provider name."""
        ...

    # ------------------------------------------------------------------
    # Public entry points
    # ------------------------------------------------------------------

    async def search_by_email(self, email: str) -> PartialPersonData | None:
        return await self._guarded(
            "email", mask_email(email), lambda: self._search_by_email(email), None
        )

    async def search_by_company(self, company_name: str) -> list[PartialPersonData]:
        result = await self._guarded(
            "company", "[COMPANY_NAME]", lambda: self._search_by_company(company_name), []
        )
        return result or []

    async def search_by_name(self, name: str) -> list[PartialPersonData]:
        result = await self._guarded("name", "[NAME]", lambda: self._search_by_name(name), [])
        return result or []

    # ------------------------------------------------------------------
    # Adapter hooks
    # ------------------------------------------------------------------

    @abstractmethod
    async def _search_by_email(self, email: str) -> PartialPersonData | None:
        ...

    @abstractmethod
    async def _search_by_company(self, company_name: str) -> list[PartialPersonData]:
        ...

    async def _search_by_name(self, name: str) -> list[PartialPersonData]:
        return []

    # ------------------------------------------------------------------
    # Guard
    # ------------------------------------------------------------------

    async def _guarded(
        self,
        operation: str,
        subject: str,
        call: Callable[[], Awaitable[T]],
        empty: T,
    ) -> T:
        provider = self.get_provider_name()
        extra = {"provider": provider}

        if not self.breaker.allow_request():
            logger.warning(
                "%s circuit %s, skipping %s search for %s",
                provider, self.breaker.state, operation, subject,
                extra=extra,
            )
            return empty

        try:
            result = await call()
        except ProviderTransientError:
            self.breaker.record_failure()
            logger.warning(
                "%s %s search failed for %s (%d consecutive failures)",
                provider, operation, subject, self.breaker.failure_count,
                exc_info=True, extra=extra,
            )
            return empty
        except ProviderNotFoundError:
            logger.debug("%s has no %s match for %s", provider, operation, subject, extra=extra)
            return empty
        except ProviderRateLimitedError:
            logger.warning("%s rate limit reached, skipping %s search", provider, operation, extra=extra)
            return empty
        except ProviderResponseError:
            logger.warning(
                "%s rejected %s search for %s", provider, operation, subject,
                exc_info=True, extra=extra,
            )
            return empty
        else:
            self.breaker.record_success()
            return result
        finally:
            self.breaker.release()


class HttpProvider(BaseProvider):
    """A provider backed by a JSON HTTP API, with timeout, retries and a circuit."""

    def __init__(
        self,
        *,
        timeout: float = 10.0,
        retry: RetryPolicy | None = None,
        breaker: CircuitBreaker | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(breaker=breaker)
        self.timeout = timeout
        self.retry = retry or RetryPolicy()
        self._transport = transport

    def _build_headers(self) -> dict[str, str]:
        return {}

    async def _get_json(self, url: str, *, params: dict[str, Any] | None = None) -> Any:
        """GET *url*, retrying transport errors and 5xx, and map the status to an error."""
        name = self.get_provider_name()

        async def attempt() -> httpx.Response:
            try:
                resp = await fetch_response(
                    url,
                    headers=self._build_headers(),
                    params=params,
                    timeout=self.timeout,
                    transport=self._transport,
                )
            except httpx.TransportError as exc:
                raise ProviderTransientError(name, f"transport error: {exc!r}") from exc
            if resp.status_code >= 500:
                raise ProviderTransientError(name, f"HTTP {resp.status_code}", resp.status_code)
            return resp

        resp = await retry_async(attempt, self.retry, on_retry=self._log_retry)

        if resp.status_code == 404:
            raise ProviderNotFoundError(name, "not found", 404)
        if resp.status_code == 429:
            raise ProviderRateLimitedError(name, "rate limited", 429)
        if resp.status_code >= 400:
            raise ProviderResponseError(name, f"HTTP {resp.status_code}", resp.status_code)
        try:
            return resp.json()
        except ValueError as exc:
            raise ProviderResponseError(name, "response is not JSON", resp.status_code) from exc

    def _log_retry(self, attempt: int, exc: BaseException, delay: float) -> None:
        logger.info(
            "%s retry %d/%d in %.1fs after %s",
            self.get_provider_name(), attempt, self.retry.max_retries, delay, exc,
            extra={"provider": self.get_provider_name()},
        )
