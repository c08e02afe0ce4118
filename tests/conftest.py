"""Shared test fixtures."""

import random

import pytest

from hearthgames.config import Settings
from hearthgames.core.lifecycle import EventController
from hearthgames.core.repositories import InMemoryPersonRepository, InMemoryTemplateRepository
from hearthgames.models.catalog import GameTemplate
from hearthgames.models.event import Event
from hearthgames.models.roster import Person


@pytest.fixture
def settings() -> Settings:
    """Test settings with defaults."""
    return Settings(
        hearthgames_env="development",
        database_url="sqlite+aiosqlite:///:memory:",
        hearthgames_search_seed=7,
    )


@pytest.fixture
def rng() -> random.Random:
    return random.Random(42)


@pytest.fixture
def people() -> list[Person]:
    """Eight people: three mutual couples and two singles."""
    roster = [
        Person(id="p-ada", display_name="Ada", sex="F", age=34, weight=130, athletic_ability=6),
        Person(id="p-ben", display_name="Ben", sex="M", age=36, weight=185, athletic_ability=7),
        Person(id="p-cleo", display_name="Cleo", sex="F", age=29, weight=140, athletic_ability=8),
        Person(id="p-dev", display_name="Dev", sex="M", age=31, weight=170, athletic_ability=5),
        Person(id="p-esme", display_name="Esme", sex="F", age=62, weight=150, athletic_ability=3),
        Person(id="p-frank", display_name="Frank", sex="M", age=65, weight=200, athletic_ability=4),
        Person(id="p-gus", display_name="Gus", sex="M", age=14, weight=110, athletic_ability=9),
        Person(id="p-hana", display_name="Hana", sex="F", age=12, weight=90, athletic_ability=7),
    ]
    by_id = {p.id: p for p in roster}
    for a, b in (("p-ada", "p-ben"), ("p-cleo", "p-dev"), ("p-esme", "p-frank")):
        by_id[a].spouse_id = b
        by_id[b].spouse_id = a
    return roster


@pytest.fixture
def person_repo(people: list[Person]) -> InMemoryPersonRepository:
    return InMemoryPersonRepository(people)


@pytest.fixture
def templates() -> list[GameTemplate]:
    return [
        GameTemplate(id="t-charades", name="Charades", group_name="Acting"),
        GameTemplate(id="t-mime", name="Mime Off", group_name="Acting"),
        GameTemplate(id="t-pictionary", name="Pictionary", group_name="Drawing"),
        GameTemplate(id="t-trivia", name="Trivia", group_name=None),
    ]


@pytest.fixture
def template_repo(templates: list[GameTemplate]) -> InMemoryTemplateRepository:
    return InMemoryTemplateRepository(templates)


@pytest.fixture
def controller(
    template_repo: InMemoryTemplateRepository,
    person_repo: InMemoryPersonRepository,
    rng: random.Random,
) -> EventController:
    return EventController(template_repo, person_repo, rng=rng)


@pytest.fixture
def event(people: list[Person]) -> Event:
    return Event(name="Game Night", participant_ids=[p.id for p in people])
