"""Core data models for personfinder."""

from __future__ import annotations

import re
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any

import pydantic
from pydantic import BaseModel, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel

from personfinder.errors import ValidationError

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_PHONE_RE = re.compile(r"^\+?[\d\s\-()]+$")
_DOMAIN_RE = re.compile(r"^(?:[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?\.)+[a-zA-Z]{2,}$")

MIN_PHONE_LENGTH = 10


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def validate_email(email: str) -> bool:
    """Return True when *email* matches ``local@domain.tld``."""
    return bool(_EMAIL_RE.match(email))


def validate_phone(phone: str) -> bool:
    """Digits, spaces, dashes, parentheses and a leading ``+``; at least 10 chars."""
    return bool(_PHONE_RE.match(phone)) and len(phone) >= MIN_PHONE_LENGTH


def validate_domain(domain: str) -> bool:
    return bool(_DOMAIN_RE.match(domain))


def normalize_email(email: str) -> str:
    """Lookup key for an email address."""
    return email.strip().lower()


class SearchType(str, Enum):
    EMAIL = "email"
    COMPANY = "company"


# ---------------------------------------------------------------------------
# Person
# ---------------------------------------------------------------------------


class PartialPersonData(
    BaseModel, frozen=True, alias_generator=to_camel, populate_by_name=True
):
    """Whatever one provider knows about a person. No invariants."""

    name: str | None = None
    email: str | None = None
    company: str | None = None
    instagram: str | None = None
    whatsapp: str | None = None
    linked_in: str | None = None
    twitter: str | None = None
    phone: str | None = None

    def is_empty(self) -> bool:
        return not any(getattr(self, f) for f in type(self).model_fields)


PERSON_FIELDS: tuple[str, ...] = tuple(PartialPersonData.model_fields)


class PersonRecord(
    BaseModel, frozen=True, alias_generator=to_camel, populate_by_name=True
):
    """A validated person. Replaced, never mutated."""

    id: str
    name: str
    email: str | None = None
    company: str | None = None
    instagram: str | None = None
    whatsapp: str | None = None
    linked_in: str | None = None
    twitter: str | None = None
    phone: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("name must not be empty")
        return value

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str | None) -> str | None:
        if value is not None and not validate_email(value):
            raise ValueError(f"invalid email: {value!r}")
        return value

    @field_validator("phone")
    @classmethod
    def _check_phone(cls, value: str | None) -> str | None:
        if value is not None and not validate_phone(value):
            raise ValueError(f"invalid phone: {value!r}")
        return value

    @computed_field(alias="hasContactInfo")  # type: ignore[prop-decorator]
    @property
    def has_contact_info(self) -> bool:
        return bool(self.whatsapp or self.phone or self.email)

    @computed_field(alias="hasSocialMedia")  # type: ignore[prop-decorator]
    @property
    def has_social_media(self) -> bool:
        return bool(self.instagram or self.linked_in or self.twitter)

    @classmethod
    def create(cls, **fields: Any) -> PersonRecord:
        """Build a new record with a fresh id and timestamps.

        Raises :class:`personfinder.errors.ValidationError` when a field
        breaks the record invariants.
        """
        now = utcnow()
        fields = {k: v for k, v in fields.items() if v is not None}
        try:
            return cls(
                id=f"person_{uuid.uuid4().hex[:16]}",
                created_at=now,
                updated_at=now,
                **fields,
            )
        except pydantic.ValidationError as exc:
            raise ValidationError(str(exc)) from exc

    def is_fresh(self, ttl_seconds: float, now: datetime | None = None) -> bool:
        """``now - updated_at < ttl``."""
        now = now or utcnow()
        return (now - self.updated_at).total_seconds() < ttl_seconds

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


# ---------------------------------------------------------------------------
# Company
# ---------------------------------------------------------------------------


class CompanyRecord(
    BaseModel, frozen=True, alias_generator=to_camel, populate_by_name=True
):
    """A company and the domain its people use for email."""

    id: str
    name: str
    domain: str
    website: str | None = None
    industry: str | None = None
    size: str | None = None
    location: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("domain")
    @classmethod
    def _check_domain(cls, value: str) -> str:
        if not validate_domain(value):
            raise ValueError(f"invalid company domain: {value!r}")
        return value

    @classmethod
    def create(cls, **fields: Any) -> CompanyRecord:
        now = utcnow()
        fields = {k: v for k, v in fields.items() if v is not None}
        try:
            return cls(
                id=f"company_{uuid.uuid4().hex[:16]}",
                created_at=now,
                updated_at=now,
                **fields,
            )
        except pydantic.ValidationError as exc:
            raise ValidationError(str(exc)) from exc


# ---------------------------------------------------------------------------
# Matching
# ---------------------------------------------------------------------------


class MatchCandidate(BaseModel, frozen=True):
    """An external handle/slug/URL plus the person or company it is scored against."""

    identifier: str
    person_name: str | None = None
    company_name: str | None = None


class SearchHit(BaseModel, frozen=True):
    """One result row from a discovery backend."""

    url: str = ""
    text: str = ""


# ---------------------------------------------------------------------------
# Use case I/O
# ---------------------------------------------------------------------------


class SearchResponse(BaseModel, frozen=True):
    """Outcome of one search; ``data`` is a record for email, a list for company."""

    success: bool
    data: PersonRecord | list[PersonRecord] | None = None
    error: str | None = None
    error_kind: str | None = None
    cached: bool | None = None

    def to_json(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"success": self.success}
        if isinstance(self.data, list):
            payload["data"] = [p.to_json() for p in self.data]
        elif self.data is not None:
            payload["data"] = self.data.to_json()
        if self.error is not None:
            payload["error"] = self.error
        if self.cached is not None:
            payload["cached"] = self.cached
        return payload
