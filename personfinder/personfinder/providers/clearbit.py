"""Clearbit Combined/Company API adapter."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from personfinder.errors import ProviderResponseError
from personfinder.models import PartialPersonData
from personfinder.providers.base import HttpProvider
from personfinder.providers.resilience import CircuitBreaker, RetryPolicy

logger = logging.getLogger(__name__)

_PERSON_URL = "https://person.clearbit.com/v2/combined/find"
_COMPANY_URL = "https://company.clearbit.com/v2/companies/find"


class ClearbitProvider(HttpProvider):
    """Look people up by email through Clearbit's combined endpoint."""

    def __init__(
        self,
        api_key: str,
        *,
        timeout: float = 10.0,
        retry: RetryPolicy | None = None,
        breaker: CircuitBreaker | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(timeout=timeout, retry=retry, breaker=breaker, transport=transport)
        self._api_key = api_key

    def get_provider_name(self) -> str:
        return "Clearbit"

    def _build_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._api_key}"}

    async def _search_by_email(self, email: str) -> PartialPersonData | None:
        data = await self._get_json(_PERSON_URL, params={"email": email})
        if not isinstance(data, dict):
            raise ProviderResponseError(self.get_provider_name(), "unexpected payload")

        person = data.get("person")
        if not person:
            return None
        return self._to_partial(person, data.get("company") or {})

    async def _search_by_company(self, company_name: str) -> list[PartialPersonData]:
        company = await self._get_json(_COMPANY_URL, params={"name": company_name})
        if not isinstance(company, dict) or not company.get("domain"):
            return []
        # The company endpoint resolves the domain but lists no employees.
        logger.debug(
            "Clearbit resolved company domain %s", company["domain"],
            extra={"provider": self.get_provider_name()},
        )
        return []

    @staticmethod
    def _to_partial(person: dict[str, Any], company: dict[str, Any]) -> PartialPersonData:
        name_info = person.get("name") or {}
        full_name = name_info.get("fullName") or " ".join(
            part for part in (name_info.get("givenName"), name_info.get("familyName")) if part
        )
        linkedin = (person.get("linkedin") or {}).get("handle")
        twitter = (person.get("twitter") or {}).get("handle")
        return PartialPersonData(
            name=full_name or None,
            email=person.get("email"),
            company=company.get("name"),
            linked_in=f"https://linkedin.com/in/{linkedin}" if linkedin else None,
            twitter=f"https://twitter.com/{twitter}" if twitter else None,
            phone=person.get("phone"),
        )
