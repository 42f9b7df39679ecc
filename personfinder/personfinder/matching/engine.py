"""Identity matching engine — find social profiles that belong to a person or company."""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Callable, Iterable

from personfinder.matching.discovery import (
    DiscoveryBackend,
    instagram_handle_from_url,
    linkedin_company_slug_from_url,
    linkedin_slug_from_url,
    mentions_in_text,
)
from personfinder.matching.scoring import (
    COMPANY_MATCH_THRESHOLD,
    PERSON_MATCH_THRESHOLD,
    generate_company_handles,
    generate_company_slugs,
    generate_person_handles,
    generate_person_slugs,
    normalize_handle,
    score_company_handle,
    score_person_handle,
    slug_mentions_person,
)
from personfinder.models import MatchCandidate, PartialPersonData, SearchHit

logger = logging.getLogger(__name__)

_VERIFY_HANDLES = 3  # generated guesses checked when search finds none


class IdentityMatcher:
    """Score candidate handles and drive discovery queries.

    The discovery backend is injected so tests can substitute canned hits
    for real search-engine traffic.
    """

    def __init__(
        self,
        discovery: DiscoveryBackend,
        *,
        person_threshold: int = PERSON_MATCH_THRESHOLD,
        company_threshold: int = COMPANY_MATCH_THRESHOLD,
        query_delay: float = 0.0,
    ) -> None:
        self.discovery = discovery
        self.person_threshold = person_threshold
        self.company_threshold = company_threshold
        self.query_delay = query_delay

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    def score(self, candidate: MatchCandidate) -> int:
        if candidate.person_name:
            return score_person_handle(candidate.identifier, candidate.person_name)
        if candidate.company_name:
            return score_company_handle(candidate.identifier, candidate.company_name)
        return 0

    def matches(self, candidate: MatchCandidate) -> bool:
        threshold = self.person_threshold if candidate.person_name else self.company_threshold
        return self.score(candidate) >= threshold

    def best_match(
        self,
        identifiers: Iterable[str],
        *,
        person_name: str | None = None,
        company_name: str | None = None,
        exclude: Iterable[str] = (),
    ) -> str | None:
        """Highest scoring identifier at or above the threshold; first one wins ties."""
        excluded = {normalize_handle(e) for e in exclude}
        best: tuple[int, str] | None = None
        seen: set[str] = set()
        for identifier in identifiers:
            key = normalize_handle(identifier)
            if not key or key in excluded or key in seen:
                continue
            seen.add(key)
            candidate = MatchCandidate(
                identifier=identifier, person_name=person_name, company_name=company_name
            )
            if not self.matches(candidate):
                continue
            score = self.score(candidate)
            logger.debug("Candidate %s scored %d", identifier, score)
            if best is None or score > best[0]:
                best = (score, identifier)
        return best[1] if best else None

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    async def discover_social(
        self,
        person_name: str,
        company_name: str | None = None,
        *,
        local_part: str | None = None,
    ) -> PartialPersonData:
        """Instagram handle and LinkedIn URL for *person_name*, when found.

        The company's own Instagram handle and LinkedIn page are located
        first and narrow the person queries. *local_part* (the part of the
        email before ``@``) seeds extra handle guesses checked directly.
        """
        company_handle = company_slug = None
        if company_name:
            company_handle, company_slug = await asyncio.gather(
                self.find_company_instagram(company_name),
                self.find_company_linkedin(company_name),
            )

        instagram, linked_in = await asyncio.gather(
            self.find_person_instagram(person_name, company_handle, local_part=local_part),
            self.find_person_linkedin(
                person_name, company_name, company_slug=company_slug, local_part=local_part
            ),
        )
        social = PartialPersonData(instagram=instagram, linked_in=linked_in)
        if social.is_empty():
            logger.debug("No social profiles discovered")
        return social

    async def find_company_instagram(self, company_name: str) -> str | None:
        queries = [
            f'"{company_name}" instagram site:instagram.com',
            f"{company_name} instagram official",
        ]
        async for hits in self._run_queries(queries):
            handles = [h for h in (instagram_handle_from_url(hit.url) for hit in hits) if h]
            found = self.best_match(handles, company_name=company_name)
            if found:
                logger.info("Company instagram found: @%s", found)
                return found

        for handle in generate_company_handles(company_name)[:_VERIFY_HANDLES]:
            if not self.matches(MatchCandidate(identifier=handle, company_name=company_name)):
                continue
            if await self._profile_exists("instagram.com", handle, instagram_handle_from_url):
                logger.info("Company instagram verified: @%s", handle)
                return handle
        return None

    async def find_company_linkedin(self, company_name: str) -> str | None:
        """Slug of the company's LinkedIn page, checked per generated guess."""
        for slug in generate_company_slugs(company_name):
            hits = await self.discovery.search(
                f'site:linkedin.com/company/{slug} "{company_name}"'
            )
            if any(_same_id(linkedin_company_slug_from_url(hit.url), slug) for hit in hits):
                logger.info("Company linkedin verified: %s", slug)
                return slug
        return None

    async def find_person_instagram(
        self,
        person_name: str,
        company_handle: str | None = None,
        *,
        local_part: str | None = None,
    ) -> str | None:
        queries: list[str] = []
        if company_handle:
            queries += [
                f'"{person_name}" "@{company_handle}" instagram',
                f'site:instagram.com/{company_handle} "{person_name}"',
            ]
        queries.append(f'"{person_name}" instagram')
        exclude = [company_handle] if company_handle else []

        async for hits in self._run_queries(queries):
            found = self.best_match(
                self._instagram_candidates(hits), person_name=person_name, exclude=exclude
            )
            if found:
                logger.info("Person instagram candidate: @%s", found)
                return f"@{found}"

        guesses = generate_person_handles(person_name, local_part)
        for handle in self._plausible(guesses, person_name):
            if await self._profile_exists("instagram.com", handle, instagram_handle_from_url):
                logger.info("Person instagram verified: @%s", handle)
                return f"@{handle}"
        return None

    async def find_person_linkedin(
        self,
        person_name: str,
        company_name: str | None = None,
        *,
        company_slug: str | None = None,
        local_part: str | None = None,
    ) -> str | None:
        queries: list[str] = []
        if company_slug:
            queries.append(f'"{person_name}" site:linkedin.com/in "{company_slug}"')
        if company_name:
            queries.append(f'"{person_name}" site:linkedin.com/in "{company_name}"')
        queries.append(f'"{person_name}" linkedin')

        async for hits in self._run_queries(queries):
            slugs = [
                slug
                for slug in (linkedin_slug_from_url(hit.url) for hit in hits)
                if slug and slug_mentions_person(slug, person_name)
            ]
            found = self.best_match(slugs, person_name=person_name)
            if found:
                logger.info("Person linkedin candidate: %s", found)
                return f"https://linkedin.com/in/{found}"

        guesses = generate_person_slugs(person_name, local_part)
        for slug in self._plausible(guesses, person_name):
            if await self._profile_exists("linkedin.com/in", slug, linkedin_slug_from_url):
                logger.info("Person linkedin verified: %s", slug)
                return f"https://linkedin.com/in/{slug}"
        return None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _run_queries(self, queries: list[str]) -> AsyncIterator[list[SearchHit]]:
        """Yield hits per query, pausing between queries to stay under rate limits."""
        for i, query in enumerate(queries):
            if i and self.query_delay:
                await asyncio.sleep(self.query_delay)
            yield await self.discovery.search(query)

    @staticmethod
    def _instagram_candidates(hits: list[SearchHit]) -> list[str]:
        candidates: list[str] = []
        for hit in hits:
            handle = instagram_handle_from_url(hit.url)
            if handle:
                candidates.append(handle)
            candidates.extend(mentions_in_text(hit.text))
        return candidates

    def _plausible(self, guesses: list[str], person_name: str) -> list[str]:
        """The first ``_VERIFY_HANDLES`` guesses that score as the person."""
        return [
            g
            for g in guesses
            if self.matches(MatchCandidate(identifier=g, person_name=person_name))
        ][:_VERIFY_HANDLES]

    async def _profile_exists(
        self, site: str, identifier: str, extract: Callable[[str], str | None]
    ) -> bool:
        hits = await self.discovery.search(f"site:{site}/{identifier}")
        return any(_same_id(extract(hit.url), identifier) for hit in hits)


def _same_id(found: str | None, expected: str) -> bool:
    return found is not None and found.lower() == expected.lower()
