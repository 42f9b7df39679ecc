"""Tests for handle scoring, discovery parsing and the identity matcher."""

from __future__ import annotations

import httpx
import pytest

from conftest import CannedDiscovery
from personfinder.matching import DuckDuckGoDiscovery, IdentityMatcher, NullDiscovery
from personfinder.matching.discovery import (
    instagram_handle_from_url,
    linkedin_company_slug_from_url,
    linkedin_slug_from_url,
    mentions_in_text,
)
from personfinder.matching.scoring import (
    fold,
    generate_company_handles,
    generate_company_slugs,
    generate_person_handles,
    generate_person_slugs,
    is_company_match,
    is_person_match,
    normalize_handle,
    score_company_handle,
    score_person_handle,
    slug_mentions_person,
    strip_legal_suffixes,
)
from personfinder.models import MatchCandidate, SearchHit


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------


class TestNormalization:
    def test_fold_accents(self) -> None:
        assert fold("João Gonçalves") == "joao goncalves"

    def test_normalize_handle(self) -> None:
        assert normalize_handle("@Pedro.Brito_") == "pedrobrito"

    def test_strip_legal_suffixes(self) -> None:
        assert strip_legal_suffixes("Acme Comércio Ltda") == "acme"
        assert strip_legal_suffixes("Globex Inc.") == "globex"


class TestPersonScoring:
    def test_full_name_handle_matches(self) -> None:
        assert is_person_match("pedro.brito", "Pedro Brito")

    def test_accented_name(self) -> None:
        assert is_person_match("joaosilva", "João Silva")

    def test_initial_combo(self) -> None:
        assert is_person_match("pbrito", "Pedro Brito")

    def test_generic_word_rejected(self) -> None:
        assert not is_person_match("admin", "Pedro Brito")
        assert score_person_handle("pedrobrito_admin", "Pedro Brito") < score_person_handle(
            "pedrobrito", "Pedro Brito"
        )

    def test_generic_word_rejects_otherwise_strong_match(self) -> None:
        assert not is_person_match("admin", "Ad Min")
        assert not is_person_match("pedrobrito.test", "Pedro Brito")
        assert score_person_handle("pedrobrito_admin", "Pedro Brito") < 0

    def test_single_token_name(self) -> None:
        assert is_person_match("pedro", "Pedro")
        assert is_person_match("pedro.77", "Pedro")
        assert not is_person_match("maria", "Pedro")

    def test_unrelated_handle(self) -> None:
        assert not is_person_match("travelgram", "Pedro Brito")

    def test_first_name_alone_is_not_enough(self) -> None:
        assert score_person_handle("pedro", "Pedro Brito") < 7

    def test_empty_inputs(self) -> None:
        assert score_person_handle("", "Pedro Brito") == 0
        assert score_person_handle("pedro", "") == 0

    def test_slug_mentions_person(self) -> None:
        assert slug_mentions_person("pedro-brito-1a2b", "Pedro Brito")
        assert not slug_mentions_person("maria-lima", "Pedro Brito")


class TestCompanyScoring:
    def test_official_suffix_allowed(self) -> None:
        assert is_company_match("acmeofficial", "Acme Ltda")

    def test_multi_word(self) -> None:
        assert score_company_handle("blueocean", "Blue Ocean Consultoria") >= 7 + 5

    def test_unrelated(self) -> None:
        assert not is_company_match("globex", "Acme Ltda")

    def test_generic_word_rejects_company_handle(self) -> None:
        assert not is_company_match("acme_admin", "Acme Ltda")
        assert score_company_handle("acmetest", "Acme Ltda") < 0

    def test_generated_handles(self) -> None:
        handles = generate_company_handles("Blue Ocean Ltda")
        assert handles[0] == "blueocean"
        assert "blueoceanofficial" in handles
        assert "blue_ocean" in handles
        assert "bo" in handles
        assert len(handles) == len(set(handles))

    def test_generated_handles_empty(self) -> None:
        assert generate_company_handles("Ltda") == []

    def test_generated_person_handles(self) -> None:
        assert generate_person_handles("Joao Santos", "j.santos") == [
            "jsantos",
            "j.santos",
            "j_santos",
            "joaosantos",
            "joao.santos",
            "joao_santos",
        ]
        assert generate_person_handles("Pedro") == ["pedro"]

    def test_generated_person_slugs(self) -> None:
        assert generate_person_slugs("Joao Santos", "j.santos") == ["j-santos", "joao-santos"]
        assert generate_person_slugs("Maria Clara Souza") == ["maria-clara-souza", "maria-clara"]

    def test_generated_company_slugs(self) -> None:
        assert generate_company_slugs("Blue Ocean Ltda") == [
            "blue-ocean",
            "blue-ocean-ltda",
            "blue-ocean-brasil",
            "blue-ocean-br",
        ]
        assert generate_company_slugs("") == []


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


class TestHitParsing:
    def test_instagram_handle(self) -> None:
        assert instagram_handle_from_url("https://www.instagram.com/pedro.brito/") == "pedro.brito"
        assert instagram_handle_from_url("https://instagram.com/p/Cx1abc/") is None
        assert instagram_handle_from_url("https://example.com") is None

    def test_linkedin_slug(self) -> None:
        assert linkedin_slug_from_url("https://br.linkedin.com/in/pedro-brito?trk=x") == "pedro-brito"
        assert linkedin_slug_from_url("https://linkedin.com/company/acme") is None

    def test_linkedin_company_slug(self) -> None:
        url = "https://br.linkedin.com/company/acme-brasil/about"
        assert linkedin_company_slug_from_url(url) == "acme-brasil"
        assert linkedin_company_slug_from_url("https://linkedin.com/in/pedro") is None

    def test_mentions(self) -> None:
        assert mentions_in_text("Follow @pedro.brito and @acme.") == ["pedro.brito", "acme"]


class TestDuckDuckGoDiscovery:
    @pytest.mark.asyncio
    async def test_parses_results_and_nested_topics(self) -> None:
        payload = {
            "Results": [{"FirstURL": "https://instagram.com/acme", "Text": "Acme"}],
            "RelatedTopics": [
                {"FirstURL": "https://linkedin.com/in/pedro-brito", "Text": "Pedro"},
                {"Name": "Group", "Topics": [{"FirstURL": "https://x.com/a", "Text": "@a"}]},
            ],
        }
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=payload)

        backend = DuckDuckGoDiscovery(transport=httpx.MockTransport(handler))
        hits = await backend.search('"Pedro Brito" linkedin')

        assert [h.url for h in hits] == [
            "https://instagram.com/acme",
            "https://linkedin.com/in/pedro-brito",
            "https://x.com/a",
        ]
        assert seen[0].url.params["q"] == '"Pedro Brito" linkedin'
        assert seen[0].url.params["format"] == "json"

    @pytest.mark.asyncio
    async def test_failure_is_empty(self) -> None:
        backend = DuckDuckGoDiscovery(
            transport=httpx.MockTransport(lambda request: httpx.Response(500))
        )
        assert await backend.search("anything") == []

    @pytest.mark.asyncio
    async def test_null_discovery(self) -> None:
        assert await NullDiscovery().search("anything") == []


# ---------------------------------------------------------------------------
# IdentityMatcher
# ---------------------------------------------------------------------------


class TestIdentityMatcher:
    def test_matches_uses_right_threshold(self) -> None:
        matcher = IdentityMatcher(NullDiscovery())
        assert matcher.matches(MatchCandidate(identifier="pedrobrito", person_name="Pedro Brito"))
        assert matcher.matches(MatchCandidate(identifier="acme", company_name="Acme Ltda"))
        assert not matcher.matches(MatchCandidate(identifier="acme"))

    def test_custom_threshold(self) -> None:
        strict = IdentityMatcher(NullDiscovery(), person_threshold=30)
        assert not strict.matches(MatchCandidate(identifier="pbrito", person_name="Pedro Brito"))

    def test_best_match_prefers_highest_score(self) -> None:
        matcher = IdentityMatcher(NullDiscovery())
        found = matcher.best_match(
            ["travelgram", "pbrito", "pedro.brito"], person_name="Pedro Brito"
        )
        assert found == "pedro.brito"

    def test_best_match_excludes(self) -> None:
        matcher = IdentityMatcher(NullDiscovery())
        found = matcher.best_match(
            ["pedro.brito"], person_name="Pedro Brito", exclude=["pedrobrito"]
        )
        assert found is None

    @pytest.mark.asyncio
    async def test_company_instagram_from_search(self) -> None:
        discovery = CannedDiscovery(
            {
                '"Acme" instagram site:instagram.com': [
                    SearchHit(url="https://www.instagram.com/explore/tags/acme/"),
                    SearchHit(url="https://www.instagram.com/acmeoficial/"),
                ]
            }
        )
        matcher = IdentityMatcher(discovery)
        assert await matcher.find_company_instagram("Acme") == "acmeoficial"

    @pytest.mark.asyncio
    async def test_company_instagram_verified_from_generated_handle(self) -> None:
        discovery = CannedDiscovery(
            {"site:instagram.com/acme": [SearchHit(url="https://instagram.com/acme")]}
        )
        matcher = IdentityMatcher(discovery)
        assert await matcher.find_company_instagram("Acme Ltda") == "acme"

    @pytest.mark.asyncio
    async def test_person_instagram_from_mentions(self) -> None:
        discovery = CannedDiscovery(
            {
                '"Pedro Brito" "@acme" instagram': [
                    SearchHit(url="https://example.com/team", text="Meet @acme and @pedro_brito")
                ]
            }
        )
        matcher = IdentityMatcher(discovery)
        assert await matcher.find_person_instagram("Pedro Brito", "acme") == "@pedro_brito"

    @pytest.mark.asyncio
    async def test_person_linkedin(self) -> None:
        discovery = CannedDiscovery(
            {
                '"Pedro Brito" site:linkedin.com/in "Acme"': [
                    SearchHit(url="https://linkedin.com/in/maria-lima"),
                    SearchHit(url="https://linkedin.com/in/pedro-brito-9a"),
                ]
            }
        )
        matcher = IdentityMatcher(discovery)
        assert (
            await matcher.find_person_linkedin("Pedro Brito", "Acme")
            == "https://linkedin.com/in/pedro-brito-9a"
        )

    @pytest.mark.asyncio
    async def test_discover_social_nothing_found(self) -> None:
        discovery = CannedDiscovery()
        matcher = IdentityMatcher(discovery)
        social = await matcher.discover_social("Pedro Brito", "Acme")
        assert social.is_empty()
        assert '"Pedro Brito" instagram' in discovery.queries

    @pytest.mark.asyncio
    async def test_company_linkedin_verified(self) -> None:
        discovery = CannedDiscovery(
            {
                'site:linkedin.com/company/acme-brasil "Acme"': [
                    SearchHit(url="https://br.linkedin.com/company/acme-brasil")
                ]
            }
        )
        matcher = IdentityMatcher(discovery)
        assert await matcher.find_company_linkedin("Acme") == "acme-brasil"
        assert discovery.queries[0] == 'site:linkedin.com/company/acme "Acme"'

    @pytest.mark.asyncio
    async def test_person_linkedin_through_company_page(self) -> None:
        discovery = CannedDiscovery(
            {
                'site:linkedin.com/company/acme "Acme"': [
                    SearchHit(url="https://linkedin.com/company/acme")
                ],
                '"Pedro Brito" site:linkedin.com/in "acme"': [
                    SearchHit(url="https://linkedin.com/in/pedro-brito-9a")
                ],
            }
        )
        matcher = IdentityMatcher(discovery)
        social = await matcher.discover_social("Pedro Brito", "Acme")

        assert social.linked_in == "https://linkedin.com/in/pedro-brito-9a"
        assert '"Pedro Brito" site:linkedin.com/in "Acme"' not in discovery.queries

    @pytest.mark.asyncio
    async def test_person_instagram_from_local_part(self) -> None:
        discovery = CannedDiscovery(
            {"site:instagram.com/jsantos": [SearchHit(url="https://www.instagram.com/jsantos/")]}
        )
        matcher = IdentityMatcher(discovery)
        social = await matcher.discover_social("Joao Santos", local_part="jsantos")
        assert social.instagram == "@jsantos"

    @pytest.mark.asyncio
    async def test_person_linkedin_from_local_part(self) -> None:
        discovery = CannedDiscovery(
            {"site:linkedin.com/in/j-santos": [SearchHit(url="https://linkedin.com/in/j-santos")]}
        )
        matcher = IdentityMatcher(discovery)
        social = await matcher.discover_social("Joao Santos", local_part="j.santos")
        assert social.linked_in == "https://linkedin.com/in/j-santos"

    @pytest.mark.asyncio
    async def test_generic_guesses_never_checked(self) -> None:
        discovery = CannedDiscovery()
        matcher = IdentityMatcher(discovery)
        await matcher.discover_social("Admin", local_part="admin")
        assert not any(q.startswith("site:instagram.com/admin") for q in discovery.queries)
        assert not any(q.startswith("site:linkedin.com/in/admin") for q in discovery.queries)
