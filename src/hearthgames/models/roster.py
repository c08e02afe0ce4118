"""Roster models: the people who can be placed on teams."""

from __future__ import annotations

import uuid

from pydantic import BaseModel, Field


def _uuid() -> str:
    return str(uuid.uuid4())


class Person(BaseModel):
    """Someone on the roster. Attributes are optional; absent values never count."""

    id: str = Field(default_factory=_uuid)
    display_name: str
    sex: str | None = None
    spouse_id: str | None = None
    age: int | None = Field(default=None, ge=0)
    weight: int | None = Field(default=None, ge=0)
    athletic_ability: int | None = Field(default=None, ge=0)
    height: str | None = None
    is_active: bool = True

    def is_married_to(self, other: Person) -> bool:
        """True only when both sides of the spouse link point at each other."""
        return self.spouse_id == other.id and other.spouse_id == self.id

    def matches_sex(self, prefix: str) -> bool:
        """Loose match on the first letter of ``sex`` ("M", "male", "f", ...)."""
        if not self.sex:
            return False
        return self.sex.strip().upper().startswith(prefix.upper())
