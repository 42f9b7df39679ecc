"""Identity matching: handle scoring and search-engine discovery."""

from personfinder.matching.discovery import DiscoveryBackend, DuckDuckGoDiscovery, NullDiscovery
from personfinder.matching.engine import IdentityMatcher
from personfinder.matching.scoring import (
    COMPANY_MATCH_THRESHOLD,
    PERSON_MATCH_THRESHOLD,
    is_company_match,
    is_person_match,
    score_company_handle,
    score_person_handle,
)

__all__ = [
    "COMPANY_MATCH_THRESHOLD",
    "PERSON_MATCH_THRESHOLD",
    "DiscoveryBackend",
    "DuckDuckGoDiscovery",
    "IdentityMatcher",
    "NullDiscovery",
    "is_company_match",
    "is_person_match",
    "score_company_handle",
    "score_person_handle",
]
