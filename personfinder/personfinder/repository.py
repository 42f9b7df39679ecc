"""Keyed store for person records — the search cache."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod

from personfinder.models import PersonRecord, normalize_email


class PersonRepository(ABC):
    """Lookup contract every store must honour."""

    @abstractmethod
    async def find_by_id(self, person_id: str) -> PersonRecord | None: ...

    @abstractmethod
    async def find_by_email(self, email: str) -> PersonRecord | None: ...

    @abstractmethod
    async def find_by_company(self, company_name: str) -> list[PersonRecord]: ...

    @abstractmethod
    async def save(self, person: PersonRecord, *, key: str | None = None) -> PersonRecord:
        """Store ``person``; ``key`` is an extra email the record is found under."""

    @abstractmethod
    async def update(self, person: PersonRecord) -> PersonRecord: ...

    @abstractmethod
    async def delete(self, person_id: str) -> None: ...

    @abstractmethod
    async def count(self) -> int: ...


class InMemoryPersonRepository(PersonRepository):
    """Dict-backed store, safe for concurrent readers and writers.

    Records are indexed by id and by normalised email, plus the lookup
    key they were saved under. Saving a record under an email that is
    already indexed replaces the older record.
    """

    def __init__(self) -> None:
        self._persons: dict[str, PersonRecord] = {}
        self._by_email: dict[str, str] = {}
        self._lock = threading.RLock()

    async def find_by_id(self, person_id: str) -> PersonRecord | None:
        with self._lock:
            return self._persons.get(person_id)

    async def find_by_email(self, email: str) -> PersonRecord | None:
        with self._lock:
            person_id = self._by_email.get(normalize_email(email))
            return self._persons.get(person_id) if person_id else None

    async def find_by_company(self, company_name: str) -> list[PersonRecord]:
        needle = company_name.strip().lower()
        with self._lock:
            return [
                p for p in self._persons.values() if p.company and needle in p.company.lower()
            ]

    async def save(self, person: PersonRecord, *, key: str | None = None) -> PersonRecord:
        with self._lock:
            return self._save_locked(person, key)

    async def update(self, person: PersonRecord) -> PersonRecord:
        with self._lock:
            if person.id not in self._persons:
                raise KeyError(f"Person with id {person.id} not found")
            return self._save_locked(person, None)

    async def delete(self, person_id: str) -> None:
        with self._lock:
            self._drop(person_id)

    async def count(self) -> int:
        with self._lock:
            return len(self._persons)

    def clear(self) -> None:
        with self._lock:
            self._persons.clear()
            self._by_email.clear()

    def all(self) -> list[PersonRecord]:
        with self._lock:
            return list(self._persons.values())

    # Callers hold self._lock.

    def _save_locked(self, person: PersonRecord, key: str | None) -> PersonRecord:
        keys = {normalize_email(k) for k in (person.email, key) if k}
        for stale in [k for k, pid in self._by_email.items() if pid == person.id]:
            del self._by_email[stale]
        for k in keys:
            previous = self._by_email.get(k)
            if previous and previous != person.id:
                self._drop(previous)
            self._by_email[k] = person.id
        self._persons[person.id] = person
        return person

    def _drop(self, person_id: str) -> None:
        self._persons.pop(person_id, None)
        for k in [k for k, pid in self._by_email.items() if pid == person_id]:
            del self._by_email[k]
