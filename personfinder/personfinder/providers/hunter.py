"""Hunter.io adapter: email verification and domain search."""

from __future__ import annotations

from typing import Any

import httpx

from personfinder.errors import ProviderResponseError
from personfinder.models import PartialPersonData
from personfinder.providers.base import HttpProvider
from personfinder.providers.resilience import CircuitBreaker, RetryPolicy

_API_BASE = "https://api.hunter.io/v2"


class HunterProvider(HttpProvider):
    """Verify emails and list people at a company through Hunter.io."""

    def __init__(
        self,
        api_key: str,
        *,
        timeout: float = 10.0,
        retry: RetryPolicy | None = None,
        breaker: CircuitBreaker | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        limit: int = 10,
    ) -> None:
        super().__init__(timeout=timeout, retry=retry, breaker=breaker, transport=transport)
        self._api_key = api_key
        self._limit = limit

    def get_provider_name(self) -> str:
        return "Hunter"

    async def _search_by_email(self, email: str) -> PartialPersonData | None:
        payload = await self._get_json(
            f"{_API_BASE}/email-verifier",
            params={"email": email, "api_key": self._api_key},
        )
        data = self._unwrap(payload)
        if data.get("result") != "deliverable":
            return None

        first, last = data.get("first_name"), data.get("last_name")
        return PartialPersonData(
            email=data.get("email"),
            name=f"{first} {last}" if first and last else None,
        )

    async def _search_by_company(self, company_name: str) -> list[PartialPersonData]:
        payload = await self._get_json(
            f"{_API_BASE}/domain-search",
            params={"company": company_name, "api_key": self._api_key, "limit": self._limit},
        )
        emails = self._unwrap(payload).get("emails") or []

        people: list[PartialPersonData] = []
        for entry in emails:
            first, last = entry.get("first_name"), entry.get("last_name")
            if first and last:
                people.append(
                    PartialPersonData(
                        name=f"{first} {last}",
                        email=entry.get("value"),
                        company=company_name,
                        phone=entry.get("phone_number"),
                        linked_in=entry.get("linkedin"),
                        twitter=self._twitter_url(entry.get("twitter")),
                    )
                )
        return people

    def _unwrap(self, payload: Any) -> dict[str, Any]:
        if not isinstance(payload, dict) or not isinstance(payload.get("data"), dict):
            raise ProviderResponseError(self.get_provider_name(), "unexpected payload")
        return payload["data"]

    @staticmethod
    def _twitter_url(handle: str | None) -> str | None:
        if not handle:
            return None
        if handle.startswith("http"):
            return handle
        return f"https://twitter.com/{handle.lstrip('@')}"
