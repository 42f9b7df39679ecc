"""Aggregation service — concurrent fan-out to providers and field-by-field merge."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Iterable, Sequence, TypeVar

from personfinder.errors import ValidationError
from personfinder.models import (
    PERSON_FIELDS,
    PartialPersonData,
    PersonRecord,
    validate_email,
    validate_phone,
)
from personfinder.providers.base import BaseProvider
from personfinder.utils.privacy import mask_email

logger = logging.getLogger(__name__)

T = TypeVar("T")


def merge_partials(partials: Iterable[PartialPersonData | None]) -> PartialPersonData | None:
    """First non-empty value wins, field by field, in provider order.

    A later partial still fills any field the earlier ones left empty.
    Returns None when no partial contributed anything.
    """
    merged: dict[str, str] = {}
    for partial in partials:
        if partial is None:
            continue
        for field in PERSON_FIELDS:
            if field in merged:
                continue
            value = getattr(partial, field)
            if value and value.strip():
                merged[field] = value
    return PartialPersonData(**merged) if merged else None


class PersonSearchService:
    """Stateless coordinator: one call, N providers, one merged answer."""

    def __init__(self, providers: Sequence[BaseProvider]) -> None:
        self._providers = list(providers)

    @property
    def providers(self) -> list[BaseProvider]:
        return list(self._providers)

    async def search_by_email(self, email: str) -> PersonRecord | None:
        email = email.strip()
        if not validate_email(email):
            raise ValidationError("Invalid email")

        partials = await self._fan_out(
            "email", mask_email(email), [p.search_by_email(email) for p in self._providers]
        )
        merged = merge_partials(partials)
        if merged is None or not merged.name:
            return None
        return self._promote(merged, fallback_email=email)

    async def search_by_company(self, company_name: str) -> list[PersonRecord]:
        company_name = company_name.strip()
        if not company_name:
            raise ValidationError("Company name is required")

        batches = await self._fan_out(
            "company", "[COMPANY_NAME]", [p.search_by_company(company_name) for p in self._providers]
        )

        persons: list[PersonRecord] = []
        for provider, batch in zip(self._providers, batches):
            for partial in batch or []:
                if not partial.name:
                    continue
                fields = partial.model_dump(exclude_none=True)
                fields["company"] = partial.company or company_name
                try:
                    persons.append(PersonRecord.create(**fields))
                except ValidationError:
                    logger.warning(
                        "Skipping invalid candidate from %s", provider.get_provider_name(),
                        exc_info=True, extra={"provider": provider.get_provider_name()},
                    )
        return persons

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _fan_out(
        self, operation: str, subject: str, calls: list[Awaitable[T]]
    ) -> list[T | None]:
        """Run every provider call concurrently and wait for all of them to settle."""
        started = time.perf_counter()
        outcomes = await asyncio.gather(*calls, return_exceptions=True)

        results: list[Any] = []
        for provider, outcome in zip(self._providers, outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                logger.error(
                    "%s %s search raised unexpectedly for %s",
                    provider.get_provider_name(), operation, subject,
                    exc_info=outcome, extra={"provider": provider.get_provider_name()},
                )
                results.append(None)
            else:
                results.append(outcome)

        logger.debug(
            "%s search settled across %d provider(s)", operation, len(self._providers),
            extra={"duration_ms": round((time.perf_counter() - started) * 1000)},
        )
        return results

    @staticmethod
    def _promote(merged: PartialPersonData, *, fallback_email: str) -> PersonRecord:
        """Build a record, dropping fields that break its invariants."""
        fields = merged.model_dump(exclude_none=True)

        if fields.get("email") and not validate_email(fields["email"]):
            logger.warning("Dropping malformed email from merged result")
            del fields["email"]
        fields.setdefault("email", fallback_email)

        if fields.get("phone") and not validate_phone(fields["phone"]):
            logger.warning("Dropping malformed phone from merged result")
            del fields["phone"]

        return PersonRecord.create(**fields)
