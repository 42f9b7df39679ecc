"""Discovery backends — public search engines queried for social profiles."""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from typing import Any

import httpx

from personfinder.models import SearchHit
from personfinder.utils.http import fetch_json

logger = logging.getLogger(__name__)

_DDG_URL = "https://api.duckduckgo.com/"

_INSTAGRAM_URL_RE = re.compile(r"instagram\.com/([^/?#\s]+)", re.IGNORECASE)
_LINKEDIN_URL_RE = re.compile(r"linkedin\.com/in/([^/?#\s]+)", re.IGNORECASE)
_LINKEDIN_COMPANY_URL_RE = re.compile(r"linkedin\.com/company/([^/?#\s]+)", re.IGNORECASE)
_MENTION_RE = re.compile(r"@([a-zA-Z0-9_.]+)")

# instagram.com/<path> segments that are not profiles
_INSTAGRAM_RESERVED = frozenset({"p", "explore", "reel", "reels", "stories", "accounts", "tv"})


class DiscoveryBackend(ABC):
    """A search engine that turns a free-text query into hits."""

    @abstractmethod
    async def search(self, query: str) -> list[SearchHit]:
        """Return hits for *query*; never raises for network failures."""
        ...


class NullDiscovery(DiscoveryBackend):
    """Discovery disabled: every query comes back empty."""

    async def search(self, query: str) -> list[SearchHit]:
        return []


class DuckDuckGoDiscovery(DiscoveryBackend):
    """DuckDuckGo instant-answer API (JSON, no key required)."""

    def __init__(
        self,
        *,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.timeout = timeout
        self._transport = transport

    async def search(self, query: str) -> list[SearchHit]:
        try:
            data = await fetch_json(
                _DDG_URL,
                params={"q": query, "format": "json", "no_html": "1", "skip_disambig": "1"},
                timeout=self.timeout,
                transport=self._transport,
            )
        except (httpx.HTTPError, ValueError):
            logger.debug("Discovery query failed: %s", query, exc_info=True)
            return []
        if not isinstance(data, dict):
            return []
        return self._parse(data)

    @staticmethod
    def _parse(data: dict[str, Any]) -> list[SearchHit]:
        rows: list[dict[str, Any]] = list(data.get("Results") or [])
        # RelatedTopics may nest groups under "Topics"
        for topic in data.get("RelatedTopics") or []:
            if isinstance(topic, dict) and "Topics" in topic:
                rows.extend(t for t in topic["Topics"] if isinstance(t, dict))
            elif isinstance(topic, dict):
                rows.append(topic)
        return [
            SearchHit(url=row.get("FirstURL") or "", text=row.get("Text") or "")
            for row in rows
        ]


# ---------------------------------------------------------------------------
# Hit parsing
# ---------------------------------------------------------------------------


def instagram_handle_from_url(url: str) -> str | None:
    match = _INSTAGRAM_URL_RE.search(url)
    if not match:
        return None
    handle = match.group(1)
    return None if handle.lower() in _INSTAGRAM_RESERVED else handle


def linkedin_slug_from_url(url: str) -> str | None:
    match = _LINKEDIN_URL_RE.search(url)
    return match.group(1) if match else None


def linkedin_company_slug_from_url(url: str) -> str | None:
    match = _LINKEDIN_COMPANY_URL_RE.search(url)
    return match.group(1) if match else None


def mentions_in_text(text: str) -> list[str]:
    return [m.rstrip(".") for m in _MENTION_RE.findall(text)]
