"""Read-only lookups the core needs from the catalog and the roster.

The engine and the controller depend on these protocols, never on the
database. ``InMemoryTemplateRepository`` and ``InMemoryPersonRepository``
serve both as test fakes and as snapshots loaded from the Entity Store.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from hearthgames.models.catalog import GameTemplate
from hearthgames.models.roster import Person


class TemplateRepository(Protocol):
    def get(self, template_id: str) -> GameTemplate | None: ...

    def all(self) -> list[GameTemplate]: ...


class PersonRepository(Protocol):
    def get(self, person_id: str) -> Person | None: ...

    def get_many(self, person_ids: Iterable[str]) -> list[Person]: ...


class InMemoryTemplateRepository:
    def __init__(self, templates: Iterable[GameTemplate] = ()) -> None:
        self._by_id: dict[str, GameTemplate] = {t.id: t for t in templates}

    def add(self, template: GameTemplate) -> GameTemplate:
        self._by_id[template.id] = template
        return template

    def get(self, template_id: str) -> GameTemplate | None:
        return self._by_id.get(template_id)

    def all(self) -> list[GameTemplate]:
        return list(self._by_id.values())


class InMemoryPersonRepository:
    def __init__(self, people: Iterable[Person] = ()) -> None:
        self._by_id: dict[str, Person] = {p.id: p for p in people}

    def add(self, person: Person) -> Person:
        self._by_id[person.id] = person
        return person

    def get(self, person_id: str) -> Person | None:
        return self._by_id.get(person_id)

    def get_many(self, person_ids: Iterable[str]) -> list[Person]:
        """Resolve ids in order, silently skipping unknown ones."""
        return [self._by_id[pid] for pid in person_ids if pid in self._by_id]
