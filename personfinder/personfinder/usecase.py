"""Cache-aware search orchestration.

Per request: validate -> cache lookup -> (fresh hit: return) -> aggregate
-> (nothing found: not-found response) -> persist -> return.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any, Callable

from personfinder.errors import ValidationError
from personfinder.models import (
    PersonRecord,
    SearchResponse,
    SearchType,
    normalize_email,
    utcnow,
    validate_email,
)
from personfinder.repository import PersonRepository
from personfinder.service import PersonSearchService
from personfinder.utils.privacy import redact_query

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL = 30 * 60

NOT_FOUND_MESSAGE = "No information found"
INTERNAL_ERROR_MESSAGE = "Internal server error"


class SearchPersonUseCase:
    """The single place where "no data" becomes a user-facing not-found."""

    def __init__(
        self,
        search_service: PersonSearchService,
        repository: PersonRepository,
        *,
        cache_ttl: float = DEFAULT_CACHE_TTL,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._search_service = search_service
        self._repository = repository
        self._cache_ttl = cache_ttl
        self._clock = clock

    async def execute(self, query: Any, search_type: Any) -> SearchResponse:
        try:
            kind, normalized = self._validate(query, search_type)
        except ValidationError as exc:
            return SearchResponse(success=False, error=str(exc), error_kind="validation")

        extra = {"query_type": kind.value}
        try:
            if kind is SearchType.EMAIL:
                return await self._search_email(normalized, extra)
            return await self._search_company(normalized, extra)
        except ValidationError as exc:
            return SearchResponse(success=False, error=str(exc), error_kind="validation")
        except Exception:
            logger.exception(
                "Search failed for %s", redact_query(normalized, kind.value), extra=extra
            )
            return SearchResponse(success=False, error=INTERNAL_ERROR_MESSAGE, error_kind="internal")

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    async def _search_email(self, email: str, extra: dict[str, str]) -> SearchResponse:
        cached = await self._repository.find_by_email(email)
        if cached is not None and cached.is_fresh(self._cache_ttl, self._clock()):
            logger.debug("Cache hit for %s", redact_query(email, "email"), extra=extra)
            return SearchResponse(success=True, data=cached, cached=True)
        if cached is not None:
            logger.debug("Stale cache entry for %s", redact_query(email, "email"), extra=extra)

        person = await self._search_service.search_by_email(email)
        if person is None:
            return self._not_found()

        await self._persist([person], key=email)
        return SearchResponse(success=True, data=person, cached=False)

    async def _search_company(self, company_name: str, extra: dict[str, str]) -> SearchResponse:
        now = self._clock()
        cached = [
            p
            for p in await self._repository.find_by_company(company_name)
            if p.is_fresh(self._cache_ttl, now)
        ]
        if cached:
            logger.debug("Cache hit for company query (%d records)", len(cached), extra=extra)
            return SearchResponse(success=True, data=cached, cached=True)

        persons = await self._search_service.search_by_company(company_name)
        if not persons:
            return self._not_found()

        await self._persist(persons)
        return SearchResponse(success=True, data=persons, cached=False)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _validate(query: Any, search_type: Any) -> tuple[SearchType, str]:
        if not isinstance(query, str) or not query.strip():
            raise ValidationError("Search query is required")
        try:
            kind = SearchType(search_type)
        except ValueError:
            raise ValidationError('Search type must be "email" or "company"') from None

        if kind is SearchType.EMAIL:
            email = normalize_email(query)
            if not validate_email(email):
                raise ValidationError("Invalid email")
            return kind, email
        return kind, query.strip()

    async def _persist(self, persons: list[PersonRecord], *, key: str | None = None) -> None:
        """Best effort: a failed save is logged, the response still succeeds."""
        outcomes = await asyncio.gather(
            *(self._repository.save(p, key=key) for p in persons), return_exceptions=True
        )
        for person, outcome in zip(persons, outcomes):
            if isinstance(outcome, Exception):
                logger.warning("Failed to cache %s", person.id, exc_info=outcome)

    @staticmethod
    def _not_found() -> SearchResponse:
        return SearchResponse(success=False, error=NOT_FOUND_MESSAGE, error_kind="not_found")
