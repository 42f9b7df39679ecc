"""Seeded in-memory provider for demos and local development."""

from __future__ import annotations

import asyncio

from personfinder.models import PartialPersonData
from personfinder.providers.base import BaseProvider
from personfinder.providers.resilience import CircuitBreaker

_SEED: tuple[PartialPersonData, ...] = (
    PartialPersonData(
        name="Matheus Gomes",
        email="matheus.gomes@elroma.com.br",
        company="Elroma",
        instagram="matheus_gomes_dev",
        whatsapp="+5511999887766",
        linked_in="https://linkedin.com/in/matheus-gomes-dev",
        twitter="https://twitter.com/matheus_dev",
        phone="+5511999887766",
    ),
    PartialPersonData(
        name="Ana Silva",
        email="ana.silva@elroma.com.br",
        company="Elroma",
        instagram="ana_silva_design",
        whatsapp="+5511888776655",
        linked_in="https://linkedin.com/in/ana-silva-design",
    ),
    PartialPersonData(
        name="Joao Santos",
        email="joao.santos@techcorp.com",
        company="TechCorp",
        instagram="joao_tech",
        whatsapp="+5511777665544",
        phone="+5511777665544",
    ),
)


class MockProvider(BaseProvider):
    """Serve a fixed set of people; unknown queries come back empty."""

    def __init__(
        self,
        people: tuple[PartialPersonData, ...] | list[PartialPersonData] = _SEED,
        *,
        latency: float = 0.0,
        breaker: CircuitBreaker | None = None,
    ) -> None:
        super().__init__(breaker=breaker)
        self._people = list(people)
        self._latency = latency

    def get_provider_name(self) -> str:
        return "Mock"

    async def _search_by_email(self, email: str) -> PartialPersonData | None:
        await self._simulate_latency()
        needle = email.lower()
        for person in self._people:
            if person.email and person.email.lower() == needle:
                return person
        return None

    async def _search_by_company(self, company_name: str) -> list[PartialPersonData]:
        await self._simulate_latency()
        needle = company_name.lower()
        return [p for p in self._people if p.company and needle in p.company.lower()]

    async def _search_by_name(self, name: str) -> list[PartialPersonData]:
        await self._simulate_latency()
        needle = name.lower()
        return [p for p in self._people if p.name and needle in p.name.lower()]

    async def _simulate_latency(self) -> None:
        if self._latency:
            await asyncio.sleep(self._latency)
