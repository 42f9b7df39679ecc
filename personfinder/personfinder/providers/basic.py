"""Key-less provider: infers what it can from the email and public search engines."""

from __future__ import annotations

import logging
import re

from personfinder.errors import ValidationError
from personfinder.matching.engine import IdentityMatcher
from personfinder.matching.scoring import strip_legal_suffixes
from personfinder.models import CompanyRecord, PartialPersonData
from personfinder.providers.base import BaseProvider
from personfinder.providers.resilience import CircuitBreaker

logger = logging.getLogger(__name__)

_ROLE_ADDRESSES = ("contact", "info", "sales")
_SECOND_LEVEL_LABELS = frozenset({"com", "co", "org", "net", "gov", "edu"})
_LOCAL_PART_NOISE_RE = re.compile(r"\+.*$|\d+")
_LOCAL_PART_SEPARATORS_RE = re.compile(r"[._\-]+")


class BasicProvider(BaseProvider):
    """Works without API keys; social handles come from the identity matcher."""

    def __init__(
        self,
        matcher: IdentityMatcher,
        *,
        default_tld: str = "com",
        breaker: CircuitBreaker | None = None,
    ) -> None:
        super().__init__(breaker=breaker)
        self.matcher = matcher
        self.default_tld = default_tld

    def get_provider_name(self) -> str:
        return "Basic"

    async def _search_by_email(self, email: str) -> PartialPersonData | None:
        local_part, _, domain = email.partition("@")
        name = name_from_local_part(local_part)
        if not name or not domain:
            return None

        company = company_from_domain(domain)
        company_name = company.name if company else None
        social = await self.matcher.discover_social(
            name, company_name, local_part=local_part.partition("+")[0]
        )

        return PartialPersonData(
            name=name,
            email=email,
            company=company_name,
            instagram=social.instagram,
            linked_in=social.linked_in,
        )

    async def _search_by_company(self, company_name: str) -> list[PartialPersonData]:
        company = self._guess_company(company_name)
        if company is None:
            return []
        return [
            PartialPersonData(
                name=f"{role.capitalize()} - {company.name}",
                email=f"{role}@{company.domain}",
                company=company.name,
            )
            for role in _ROLE_ADDRESSES
        ]

    def _guess_company(self, company_name: str) -> CompanyRecord | None:
        label = re.sub(r"[^a-z0-9]", "", strip_legal_suffixes(company_name))
        if not label:
            return None
        try:
            return CompanyRecord.create(name=company_name.strip(), domain=f"{label}.{self.default_tld}")
        except ValidationError:
            logger.debug("Cannot derive a domain for company query", exc_info=True)
            return None


def name_from_local_part(local_part: str) -> str:
    """``joao.santos`` -> ``Joao Santos``; digits and ``+tags`` are dropped."""
    cleaned = _LOCAL_PART_NOISE_RE.sub("", local_part)
    words = [w for w in _LOCAL_PART_SEPARATORS_RE.split(cleaned) if w]
    return " ".join(w.capitalize() for w in words)


def company_from_domain(domain: str) -> CompanyRecord | None:
    """``mail.techcorp.com`` -> ``Techcorp``; ``elroma.com.br`` -> ``Elroma``."""
    labels = [label for label in domain.lower().split(".") if label]
    if len(labels) < 2:
        return None
    if len(labels) > 2 and labels[-2] in _SECOND_LEVEL_LABELS:
        registered = labels[-3:]
    else:
        registered = labels[-2:]
    try:
        return CompanyRecord.create(name=registered[0].capitalize(), domain=".".join(registered))
    except ValidationError:
        return None
