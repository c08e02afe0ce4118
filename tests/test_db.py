"""Tests for database layer: engine, ORM models, repository round-trips."""

from datetime import UTC, datetime

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncEngine

from hearthgames.db.engine import create_engine, get_session, init_db
from hearthgames.db.models import EventGameRow, RoundRow
from hearthgames.db.repository import Repository
from hearthgames.models.catalog import TeamType
from hearthgames.models.event import (
    EventGame,
    EventStatus,
    GameStatus,
    Round,
    RoundResultType,
    RoundTeam,
)


@pytest.fixture
async def engine() -> AsyncEngine:
    """Create an in-memory SQLite engine with all tables."""
    eng = create_engine("sqlite+aiosqlite:///:memory:")
    await init_db(eng)
    yield eng
    await eng.dispose()


@pytest.fixture
async def repo(engine: AsyncEngine) -> Repository:
    """Yield a repository with a session bound to the in-memory database."""
    async with get_session(engine) as session:
        yield Repository(session)


async def _count(engine: AsyncEngine, model) -> int:
    async with get_session(engine) as session:
        result = await session.execute(select(func.count()).select_from(model))
        return result.scalar_one()


class TestTableCreation:
    async def test_all_tables_created(self, engine: AsyncEngine):
        async with engine.connect() as conn:
            tables = await conn.run_sync(
                lambda sync_conn: sync_conn.dialect.get_table_names(sync_conn)
            )
        expected = {"people", "game_templates", "events", "event_games", "rounds"}
        assert expected.issubset(set(tables))


class TestPeople:
    async def test_create_and_retrieve_person(self, repo: Repository):
        person = await repo.create_person("Ada", sex="F", age=34, athletic_ability=6)
        retrieved = await repo.get_person(person.id)
        assert retrieved is not None
        assert retrieved.display_name == "Ada"
        assert retrieved.is_active is True

    async def test_people_sorted_by_name(self, repo: Repository):
        await repo.create_person("Zed")
        await repo.create_person("Amy")
        assert [p.display_name for p in await repo.get_all_people()] == ["Amy", "Zed"]

    async def test_link_spouses_is_symmetric(self, repo: Repository):
        a = await repo.create_person("A")
        b = await repo.create_person("B")
        await repo.link_spouses(a.id, b.id)
        assert a.spouse_id == b.id
        assert b.spouse_id == a.id

    async def test_relinking_unlinks_old_partners(self, repo: Repository):
        a = await repo.create_person("A")
        b = await repo.create_person("B")
        c = await repo.create_person("C")
        await repo.link_spouses(a.id, b.id)
        await repo.link_spouses(c.id, b.id)
        assert a.spouse_id is None
        assert b.spouse_id == c.id
        assert c.spouse_id == b.id

    async def test_unlink(self, repo: Repository):
        a = await repo.create_person("A")
        b = await repo.create_person("B")
        await repo.link_spouses(a.id, b.id)
        await repo.link_spouses(a.id, None)
        assert a.spouse_id is None
        assert b.spouse_id is None

    async def test_load_roster_subset(self, repo: Repository):
        a = await repo.create_person("A")
        await repo.create_person("B")
        roster = await repo.load_roster([a.id])
        assert [p.id for p in roster.get_many([a.id])] == [a.id]
        assert len(roster.get_many(p.id for p in await repo.get_all_people())) == 1


class TestTemplates:
    async def test_catalog_snapshot(self, repo: Repository):
        row = await repo.create_template(
            "Newlywed",
            group_name="Trivia",
            default_team_count=3,
            default_team_type=TeamType.COUPLES_ONLY,
        )
        catalog = await repo.load_catalog()
        template = catalog.get(row.id)
        assert template is not None
        assert template.default_team_type == TeamType.COUPLES_ONLY
        assert template.group == "Trivia"
        assert template.default_players_per_team == 2


class TestEventAggregate:
    async def test_create_event(self, repo: Repository):
        event = await repo.create_event("Night", ["p1", "p2"])
        assert event.status == EventStatus.AVAILABLE
        assert event.participant_ids == ["p1", "p2"]
        assert event.games == []

    async def test_missing_event(self, repo: Repository):
        assert await repo.load_event("nope") is None
        assert await repo.delete_event("nope") is False

    async def test_round_trip_across_sessions(self, engine: AsyncEngine):
        async with get_session(engine) as session:
            repo = Repository(session)
            event = await repo.create_event("Night", ["p1", "p2", "p3", "p4"])
            game = EventGame(
                event_id=event.id,
                template_id="t1",
                status=GameStatus.IN_PROGRESS,
                override_team_type=TeamType.MALE_ONLY,
            )
            team_a = RoundTeam(member_person_ids=["p1", "p2"])
            team_b = RoundTeam(member_person_ids=["p3", "p4"])
            game.rounds.append(
                Round(
                    event_game_id=game.id,
                    round_index=0,
                    completed_at=datetime.now(UTC),
                    teams=[team_a, team_b],
                    placements={"p1": 1, "p2": 1, "p3": 2, "p4": 2},
                    result_type=RoundResultType.WIN,
                    winning_team_id=team_a.id,
                )
            )
            event.games.append(game)
            event.status = EventStatus.ACTIVE
            event.current_game_id = game.id
            await repo.save_event(event)

        async with get_session(engine) as session:
            loaded = await Repository(session).load_event(event.id)

        assert loaded is not None
        assert loaded.status == EventStatus.ACTIVE
        assert loaded.current_game_id == game.id
        (loaded_game,) = loaded.games
        assert loaded_game.override_team_type == TeamType.MALE_ONLY
        (loaded_round,) = loaded_game.rounds
        assert loaded_round.teams == [team_a, team_b]
        assert loaded_round.placements == {"p1": 1, "p2": 1, "p3": 2, "p4": 2}
        assert loaded_round.result_type == RoundResultType.WIN
        assert loaded_round.is_locked
        assert loaded_round.completed_at.tzinfo is not None

    async def test_save_removes_orphans(self, engine: AsyncEngine):
        async with get_session(engine) as session:
            repo = Repository(session)
            event = await repo.create_event("Night")
            keep = EventGame(event_id=event.id, template_id="t1", order_index=0)
            drop = EventGame(event_id=event.id, template_id="t2", order_index=1)
            drop.rounds.append(Round(event_game_id=drop.id, round_index=0))
            event.games = [keep, drop]
            await repo.save_event(event)

        assert await _count(engine, EventGameRow) == 2
        assert await _count(engine, RoundRow) == 1

        async with get_session(engine) as session:
            repo = Repository(session)
            event = await repo.load_event(event.id)
            event.games = [g for g in event.games if g.template_id == "t1"]
            await repo.save_event(event)

        assert await _count(engine, EventGameRow) == 1
        assert await _count(engine, RoundRow) == 0

    async def test_rounds_cleared_on_reset(self, engine: AsyncEngine):
        async with get_session(engine) as session:
            repo = Repository(session)
            event = await repo.create_event("Night")
            game = EventGame(event_id=event.id, template_id="t1")
            game.rounds = [Round(event_game_id=game.id, round_index=i) for i in range(3)]
            event.games = [game]
            await repo.save_event(event)

        async with get_session(engine) as session:
            repo = Repository(session)
            event = await repo.load_event(event.id)
            event.games[0].rounds = []
            await repo.save_event(event)

        assert await _count(engine, RoundRow) == 0

    async def test_delete_cascades(self, engine: AsyncEngine):
        async with get_session(engine) as session:
            repo = Repository(session)
            event = await repo.create_event("Night")
            game = EventGame(event_id=event.id, template_id="t1")
            game.rounds.append(Round(event_game_id=game.id, round_index=0))
            event.games = [game]
            await repo.save_event(event)

        async with get_session(engine) as session:
            assert await Repository(session).delete_event(event.id) is True

        assert await _count(engine, EventGameRow) == 0
        assert await _count(engine, RoundRow) == 0

    async def test_load_events(self, repo: Repository):
        await repo.create_event("One")
        await repo.create_event("Two")
        names = {e.name for e in await repo.load_events()}
        assert names == {"One", "Two"}
