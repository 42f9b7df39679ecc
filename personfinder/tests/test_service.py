"""Tests for the aggregation service."""

from __future__ import annotations

import asyncio

import pytest

from conftest import StubProvider
from personfinder.errors import ValidationError
from personfinder.models import PartialPersonData
from personfinder.providers.base import BaseProvider
from personfinder.service import PersonSearchService, merge_partials


class TestMergePartials:
    def test_first_non_empty_wins_per_field(self) -> None:
        merged = merge_partials(
            [
                PartialPersonData(name="X"),
                PartialPersonData(name="Y", email="y@z.com"),
            ]
        )
        assert merged is not None
        assert merged.name == "X"
        assert merged.email == "y@z.com"

    def test_blank_values_do_not_count(self) -> None:
        merged = merge_partials(
            [PartialPersonData(name="  ", phone=""), PartialPersonData(name="Ana", phone="+5511888776655")]
        )
        assert merged == PartialPersonData(name="Ana", phone="+5511888776655")

    def test_skips_missing_partials(self) -> None:
        merged = merge_partials([None, PartialPersonData(company="Elroma")])
        assert merged == PartialPersonData(company="Elroma")

    def test_nothing_contributed(self) -> None:
        assert merge_partials([None, PartialPersonData()]) is None
        assert merge_partials([]) is None


class TestSearchByEmail:
    @pytest.mark.asyncio
    async def test_invalid_email_calls_no_provider(self) -> None:
        provider = StubProvider("A", email_result=PartialPersonData(name="Ana"))
        service = PersonSearchService([provider])
        with pytest.raises(ValidationError):
            await service.search_by_email("not-an-email")
        assert provider.email_calls == []

    @pytest.mark.asyncio
    async def test_merges_in_provider_order(self) -> None:
        service = PersonSearchService(
            [
                StubProvider("A", email_result=PartialPersonData(name="X")),
                StubProvider("B", email_result=PartialPersonData(name="Y", email="y@z.com")),
            ]
        )
        person = await service.search_by_email("query@z.com")
        assert person is not None
        assert person.name == "X"
        assert person.email == "y@z.com"
        assert person.id.startswith("person_")

    @pytest.mark.asyncio
    async def test_query_email_fills_missing_email(self) -> None:
        service = PersonSearchService(
            [StubProvider("A", email_result=PartialPersonData(name="Ana"))]
        )
        person = await service.search_by_email("ana@elroma.com.br")
        assert person is not None
        assert person.email == "ana@elroma.com.br"

    @pytest.mark.asyncio
    async def test_no_name_is_absent(self) -> None:
        service = PersonSearchService(
            [StubProvider("A", email_result=PartialPersonData(phone="+5511888776655"))]
        )
        assert await service.search_by_email("ana@elroma.com.br") is None

    @pytest.mark.asyncio
    async def test_invalid_fields_dropped(self) -> None:
        service = PersonSearchService(
            [
                StubProvider(
                    "A",
                    email_result=PartialPersonData(name="Ana", phone="123", email="broken"),
                )
            ]
        )
        person = await service.search_by_email("ana@elroma.com.br")
        assert person is not None
        assert person.phone is None
        assert person.email == "ana@elroma.com.br"

    @pytest.mark.asyncio
    async def test_crashing_provider_does_not_abort_others(self) -> None:
        broken = StubProvider("Broken", error=RuntimeError("bug"))
        healthy = StubProvider("Healthy", email_result=PartialPersonData(name="Ana"))
        service = PersonSearchService([broken, healthy])

        person = await service.search_by_email("ana@elroma.com.br")
        assert person is not None
        assert person.name == "Ana"
        assert healthy.email_calls == ["ana@elroma.com.br"]

    @pytest.mark.asyncio
    async def test_providers_run_concurrently(self) -> None:
        started: list[str] = []
        gate = asyncio.Event()

        class Waiting(BaseProvider):
            def __init__(self, name: str) -> None:
                super().__init__()
                self.name = name

            def get_provider_name(self) -> str:
                return self.name

            async def _search_by_email(self, email: str) -> PartialPersonData | None:
                started.append(self.name)
                if len(started) == 2:
                    gate.set()
                await asyncio.wait_for(gate.wait(), timeout=1)
                return PartialPersonData(name=self.name)

            async def _search_by_company(self, company_name: str) -> list[PartialPersonData]:
                return []

        service = PersonSearchService([Waiting("A"), Waiting("B")])
        person = await service.search_by_email("ana@elroma.com.br")
        assert person is not None
        assert person.name == "A"
        assert sorted(started) == ["A", "B"]


class TestSearchByCompany:
    @pytest.mark.asyncio
    async def test_empty_name_rejected(self) -> None:
        with pytest.raises(ValidationError):
            await PersonSearchService([]).search_by_company("   ")

    @pytest.mark.asyncio
    async def test_collects_from_every_provider(self) -> None:
        service = PersonSearchService(
            [
                StubProvider("A", company_result=[PartialPersonData(name="Ana Silva")]),
                StubProvider(
                    "B",
                    company_result=[
                        PartialPersonData(name="Joao Santos", company="TechCorp Ltda"),
                    ],
                ),
            ]
        )
        people = await service.search_by_company("TechCorp")
        assert [(p.name, p.company) for p in people] == [
            ("Ana Silva", "TechCorp"),
            ("Joao Santos", "TechCorp Ltda"),
        ]

    @pytest.mark.asyncio
    async def test_invalid_candidates_skipped(self) -> None:
        service = PersonSearchService(
            [
                StubProvider(
                    "A",
                    company_result=[
                        PartialPersonData(name="Ana", phone="12"),
                        PartialPersonData(email="nameless@techcorp.com"),
                        PartialPersonData(name="Joao"),
                    ],
                )
            ]
        )
        people = await service.search_by_company("TechCorp")
        assert [p.name for p in people] == ["Joao"]

    @pytest.mark.asyncio
    async def test_crashing_provider_does_not_abort_batch(self) -> None:
        service = PersonSearchService(
            [
                StubProvider("Broken", error=RuntimeError("bug")),
                StubProvider("Ok", company_result=[PartialPersonData(name="Ana")]),
            ]
        )
        people = await service.search_by_company("Elroma")
        assert [p.name for p in people] == ["Ana"]
