"""Weighted substring scoring for social handles, slugs and usernames.

A candidate identifier is normalised (separators ``.``, ``_``, ``-``
removed, lower-cased, accents folded) and checked for containment of
name fragments. Each fragment carries a weight, and a candidate matches
when its score reaches the threshold. A candidate containing a generic
word such as ``admin`` or ``test`` is rejected whatever else it matches.
This is a ranking heuristic, so false positives and negatives are expected.
"""

from __future__ import annotations

import re
import unicodedata

PERSON_MATCH_THRESHOLD = 7
COMPANY_MATCH_THRESHOLD = 5

# Person weights
FULL_NAME_WEIGHT = 10
INITIAL_COMBO_WEIGHT = 8
LAST_NAME_WEIGHT = 5
FIRST_NAME_WEIGHT = 5
INITIALS_WEIGHT = 3

# Company weights
COMPANY_FULL_WEIGHT = 7
COMPANY_MAIN_WORD_WEIGHT = 5
COMPANY_WORD_WEIGHT = 3
COMPANY_INITIALS_WEIGHT = 4

GENERIC_PENALTY = 10
GENERIC_WORDS: tuple[str, ...] = (
    "admin",
    "official",
    "oficial",
    "company",
    "test",
    "user",
    "brand",
    "personal",
)
# Company accounts are often suffixed "official".
COMPANY_ALLOWED_WORDS: frozenset[str] = frozenset({"official", "oficial"})

MIN_NAME_PART_LENGTH = 3  # first/last name alone only count when longer

_SEPARATORS_RE = re.compile(r"[._\-]")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")
_LEGAL_SUFFIX_RE = re.compile(
    r"\b("
    r"ltda|ltd|inc|llc|corp|corporation|co|plc|gmbh|s\.?a\.?|me|mei|eireli|"
    r"sociedade|empresa|tecnologia|tech|sistemas|system|systems|solucoes|solutions|"
    r"servicos|services|comercio|comercial|industria|industrial|consultoria|group|grupo"
    r")\b"
)


def fold(text: str) -> str:
    """Lower-case and strip diacritics (``João`` -> ``joao``)."""
    decomposed = unicodedata.normalize("NFKD", text.lower())
    return "".join(c for c in decomposed if not unicodedata.combining(c))


def normalize_handle(candidate: str) -> str:
    return _SEPARATORS_RE.sub("", fold(candidate.strip().lstrip("@")))


def name_tokens(name: str) -> list[str]:
    return [t for t in _NON_ALNUM_RE.sub(" ", fold(name)).split() if t]


def strip_legal_suffixes(company_name: str) -> str:
    cleaned = _LEGAL_SUFFIX_RE.sub(" ", fold(company_name))
    cleaned = _NON_ALNUM_RE.sub(" ", cleaned)
    return " ".join(cleaned.split())


def company_tokens(company_name: str) -> list[str]:
    return [w for w in strip_legal_suffixes(company_name).split() if len(w) > 2]


def _has_generic_word(handle: str, allowed: frozenset[str] = frozenset()) -> bool:
    return any(word in handle for word in GENERIC_WORDS if word not in allowed)


# ---------------------------------------------------------------------------
# Scores
# ---------------------------------------------------------------------------


def score_person_handle(candidate: str, person_name: str) -> int:
    """Score how plausibly *candidate* is a handle of *person_name*."""
    handle = normalize_handle(candidate)
    tokens = name_tokens(person_name)
    if not handle or not tokens:
        return 0

    first = tokens[0]
    last = tokens[-1]
    has_last = len(tokens) >= 2

    if _has_generic_word(handle):
        return -GENERIC_PENALTY

    score = 0
    if has_last and f"{first}{last}" in handle:
        score += FULL_NAME_WEIGHT
    if has_last and (f"{first[0]}{last}" in handle or f"{first}{last[0]}" in handle):
        score += INITIAL_COMBO_WEIGHT
    if len(last) > MIN_NAME_PART_LENGTH and last in handle:
        score += LAST_NAME_WEIGHT
    if len(first) > MIN_NAME_PART_LENGTH and first in handle:
        score += FIRST_NAME_WEIGHT

    initials = "".join(t[0] for t in tokens)
    if len(initials) >= 2 and initials in handle:
        score += INITIALS_WEIGHT

    return score


def score_company_handle(candidate: str, company_name: str) -> int:
    """Score *candidate* against the company name with legal suffixes removed."""
    handle = normalize_handle(candidate)
    words = company_tokens(company_name)
    if not handle or not words:
        return 0
    if _has_generic_word(handle, COMPANY_ALLOWED_WORDS):
        return -GENERIC_PENALTY

    score = 0
    if "".join(words) in handle:
        score += COMPANY_FULL_WEIGHT
    if words[0] in handle:
        score += COMPANY_MAIN_WORD_WEIGHT
    for word in words[1:]:
        if word in handle:
            score += COMPANY_WORD_WEIGHT
    if len(words) > 1 and "".join(w[0] for w in words) in handle:
        score += COMPANY_INITIALS_WEIGHT

    return score


def is_person_match(
    candidate: str, person_name: str, threshold: int = PERSON_MATCH_THRESHOLD
) -> bool:
    return score_person_handle(candidate, person_name) >= threshold


def is_company_match(
    candidate: str, company_name: str, threshold: int = COMPANY_MATCH_THRESHOLD
) -> bool:
    return score_company_handle(candidate, company_name) >= threshold


def slug_mentions_person(slug: str, person_name: str) -> bool:
    """Lenient pre-filter: the slug contains any name token longer than 2 chars."""
    clean = normalize_handle(slug)
    return any(len(t) > 2 and t in clean for t in name_tokens(person_name))


# ---------------------------------------------------------------------------
# Candidate generation
# ---------------------------------------------------------------------------


def generate_company_handles(company_name: str) -> list[str]:
    """Likely social handles for a company, most specific first."""
    cleaned = strip_legal_suffixes(company_name)
    words = cleaned.split()
    if not words:
        return []

    clean = "".join(words)
    variations: list[str] = [
        clean,
        f"{clean}official",
        f"{clean}_official",
        f"{clean}.official",
        "_".join(words),
        ".".join(words),
    ]
    if len(words) > 1:
        initials = "".join(w[0] for w in words)
        variations += [
            initials,
            f"{initials}official",
            words[0] + "".join(w[0] for w in words[1:]),
        ]
    variations += [words[0], f"{words[0]}official"]
    original = re.sub(r"[^a-z0-9]", "", fold(company_name))
    variations.append(original)

    return _dedupe(variations, min_length=2)


def generate_person_handles(person_name: str, local_part: str | None = None) -> list[str]:
    """Handle guesses from the email local part, then from the name.

    Each source yields its parts joined plainly, with ``.`` and with ``_``.
    """
    sources = [name_tokens(person_name)]
    if local_part:
        sources.insert(0, [p for p in _SEPARATORS_RE.split(fold(local_part)) if p])

    variations = [sep.join(parts) for parts in sources if parts for sep in ("", ".", "_")]
    return _dedupe(variations, min_length=3)


def generate_person_slugs(person_name: str, local_part: str | None = None) -> list[str]:
    """LinkedIn ``/in/`` slug guesses: ``joao-santos`` style, local part first."""
    tokens = name_tokens(person_name)
    variations: list[str] = []
    if local_part:
        variations.append("-".join(p for p in _SEPARATORS_RE.split(fold(local_part)) if p))
    if tokens:
        variations.append("-".join(tokens))
    if len(tokens) > 2:
        variations.append(f"{tokens[0]}-{tokens[1]}")
    return _dedupe(variations, min_length=3)


def generate_company_slugs(company_name: str) -> list[str]:
    """LinkedIn ``/company/`` slug guesses, including the ``-brasil``/``-br`` pages."""
    words = strip_legal_suffixes(company_name).split()
    full = re.sub(r"[^a-z0-9]+", "-", fold(company_name)).strip("-")
    base = "-".join(words) if words else full
    if not base:
        return []
    return _dedupe([base, full, f"{base}-brasil", f"{base}-br"], min_length=2)


def _dedupe(variations: list[str], *, min_length: int) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for v in variations:
        if len(v) >= min_length and v not in seen:
            seen.add(v)
            out.append(v)
    return out
