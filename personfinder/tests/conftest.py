"""Shared fixtures: stub providers, canned discovery and a controllable clock."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from personfinder.matching.discovery import DiscoveryBackend
from personfinder.models import PartialPersonData, SearchHit
from personfinder.providers.base import BaseProvider
from personfinder.repository import InMemoryPersonRepository


class StubProvider(BaseProvider):
    """Returns canned answers and counts how often it was asked."""

    def __init__(
        self,
        name: str,
        *,
        email_result: PartialPersonData | None = None,
        company_result: list[PartialPersonData] | None = None,
        error: Exception | None = None,
    ) -> None:
        super().__init__()
        self.name = name
        self.email_result = email_result
        self.company_result = company_result or []
        self.error = error
        self.email_calls: list[str] = []
        self.company_calls: list[str] = []

    def get_provider_name(self) -> str:
        return self.name

    async def _search_by_email(self, email: str) -> PartialPersonData | None:
        self.email_calls.append(email)
        if self.error:
            raise self.error
        return self.email_result

    async def _search_by_company(self, company_name: str) -> list[PartialPersonData]:
        self.company_calls.append(company_name)
        if self.error:
            raise self.error
        return list(self.company_result)


class CannedDiscovery(DiscoveryBackend):
    """Answers queries from a dict; unknown queries return no hits."""

    def __init__(self, answers: dict[str, list[SearchHit]] | None = None) -> None:
        self.answers = answers or {}
        self.queries: list[str] = []

    async def search(self, query: str) -> list[SearchHit]:
        self.queries.append(query)
        return list(self.answers.get(query, []))


class FakeClock:
    """Monotonic seconds for the circuit breaker."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class WallClock:
    """Timezone-aware datetimes for cache freshness checks."""

    def __init__(self) -> None:
        self.now = datetime.now(timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, minutes: float) -> None:
        self.now += timedelta(minutes=minutes)


@pytest.fixture
def repository() -> InMemoryPersonRepository:
    return InMemoryPersonRepository()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def wall_clock() -> WallClock:
    return WallClock()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep real credentials out of tests."""
    for key in (
        "CLEARBIT_API_KEY",
        "HUNTER_API_KEY",
        "PERSONFINDER_USE_MOCK",
        "PERSONFINDER_DISCOVERY",
        "PERSONFINDER_CACHE_TTL",
        "PERSONFINDER_LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)
