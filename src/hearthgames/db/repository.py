"""Repository pattern for database access.

Wraps SQLAlchemy async sessions. People and templates are simple rows; an
Event is loaded and saved as a whole aggregate (event → games → rounds) and
handed to the core as pydantic models. JSON encoding of round teams and
placements happens here and nowhere else.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from hearthgames.core.repositories import InMemoryPersonRepository, InMemoryTemplateRepository
from hearthgames.db.models import EventGameRow, EventRow, GameTemplateRow, PersonRow, RoundRow
from hearthgames.models.catalog import GameTemplate, TeamType
from hearthgames.models.event import (
    Event,
    EventGame,
    EventStatus,
    GameStatus,
    Round,
    RoundResultType,
    RoundTeam,
)
from hearthgames.models.roster import Person


def _aware(value: datetime | None) -> datetime | None:
    """SQLite drops tzinfo; everything we store is UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def person_from_row(row: PersonRow) -> Person:
    return Person(
        id=row.id,
        display_name=row.display_name,
        sex=row.sex,
        spouse_id=row.spouse_id,
        age=row.age,
        weight=row.weight,
        athletic_ability=row.athletic_ability,
        height=row.height,
        is_active=row.is_active,
    )


def template_from_row(row: GameTemplateRow) -> GameTemplate:
    return GameTemplate(
        id=row.id,
        name=row.name,
        group_name=row.group_name,
        default_team_count=row.default_team_count,
        default_players_per_team=row.default_players_per_team,
        default_rounds_per_game=row.default_rounds_per_game,
        default_team_type=TeamType(row.default_team_type),
        instructions=row.instructions,
    )


def round_from_row(row: RoundRow) -> Round:
    return Round(
        id=row.id,
        event_game_id=row.event_game_id,
        round_index=row.round_index,
        created_at=_aware(row.created_at),
        completed_at=_aware(row.completed_at),
        teams=[RoundTeam.model_validate(t) for t in row.teams or []],
        placements={pid: int(rank) for pid, rank in (row.placements or {}).items()},
        result_type=RoundResultType(row.result_type) if row.result_type else None,
        winning_team_id=row.winning_team_id,
    )


def game_from_row(row: EventGameRow) -> EventGame:
    return EventGame(
        id=row.id,
        event_id=row.event_id,
        template_id=row.template_id,
        status=GameStatus(row.status),
        order_index=row.order_index,
        override_team_count=row.override_team_count,
        override_players_per_team=row.override_players_per_team,
        override_rounds_per_game=row.override_rounds_per_game,
        override_team_type=TeamType(row.override_team_type) if row.override_team_type else None,
        override_instructions=row.override_instructions,
        rounds=[round_from_row(r) for r in row.rounds],
    )


def event_from_row(row: EventRow) -> Event:
    return Event(
        id=row.id,
        name=row.name,
        status=EventStatus(row.status),
        participant_ids=list(row.participant_ids or []),
        games=[game_from_row(g) for g in row.games],
        current_game_id=row.current_game_id,
        created_at=_aware(row.created_at),
        last_modified_at=_aware(row.last_modified_at),
    )


def _apply_round(row: RoundRow, r: Round) -> None:
    row.round_index = r.round_index
    row.created_at = r.created_at
    row.completed_at = r.completed_at
    row.teams = [t.model_dump() for t in r.teams]
    row.placements = dict(r.placements)
    row.result_type = r.result_type.value if r.result_type else None
    row.winning_team_id = r.winning_team_id


def _apply_game(row: EventGameRow, game: EventGame) -> None:
    row.template_id = game.template_id
    row.status = game.status.value
    row.order_index = game.order_index
    row.override_team_count = game.override_team_count
    row.override_players_per_team = game.override_players_per_team
    row.override_rounds_per_game = game.override_rounds_per_game
    row.override_team_type = game.override_team_type.value if game.override_team_type else None
    row.override_instructions = game.override_instructions

    existing = {r.id: r for r in row.rounds}
    rounds = []
    for r in game.rounds:
        round_row = existing.get(r.id) or RoundRow(id=r.id)
        _apply_round(round_row, r)
        rounds.append(round_row)
    # delete-orphan removes rounds that left the aggregate
    row.rounds = rounds


class Repository:
    """Async repository for all database operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    # --- People ---

    async def create_person(
        self,
        display_name: str,
        sex: str | None = None,
        age: int | None = None,
        weight: int | None = None,
        athletic_ability: int | None = None,
        height: str | None = None,
        is_active: bool = True,
    ) -> PersonRow:
        row = PersonRow(
            display_name=display_name,
            sex=sex,
            age=age,
            weight=weight,
            athletic_ability=athletic_ability,
            height=height,
            is_active=is_active,
        )
        self.session.add(row)
        await self.session.flush()
        return row

    async def get_person(self, person_id: str) -> PersonRow | None:
        return await self.session.get(PersonRow, person_id)

    async def get_all_people(self) -> list[PersonRow]:
        stmt = select(PersonRow).order_by(PersonRow.display_name)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def link_spouses(self, person_id: str, spouse_id: str | None) -> None:
        """Set a symmetric spouse link, unlinking any previous partners.

        Passing ``spouse_id=None`` only unlinks.
        """
        person = await self.get_person(person_id)
        if person is None:
            return
        if person.spouse_id:
            old = await self.get_person(person.spouse_id)
            if old is not None and old.spouse_id == person.id:
                old.spouse_id = None
        person.spouse_id = None

        if spouse_id is not None:
            spouse = await self.get_person(spouse_id)
            if spouse is None:
                return
            if spouse.spouse_id and spouse.spouse_id != person.id:
                previous = await self.get_person(spouse.spouse_id)
                if previous is not None:
                    previous.spouse_id = None
            person.spouse_id = spouse.id
            spouse.spouse_id = person.id
        await self.session.flush()

    async def load_roster(
        self, person_ids: Iterable[str] | None = None
    ) -> InMemoryPersonRepository:
        """Snapshot people (all, or just ``person_ids``) for the core."""
        stmt = select(PersonRow)
        if person_ids is not None:
            stmt = stmt.where(PersonRow.id.in_(list(person_ids)))
        result = await self.session.execute(stmt)
        return InMemoryPersonRepository(person_from_row(r) for r in result.scalars().all())

    # --- Game templates ---

    async def create_template(
        self,
        name: str,
        group_name: str | None = None,
        default_team_count: int = 2,
        default_players_per_team: int = 2,
        default_rounds_per_game: int = 1,
        default_team_type: TeamType = TeamType.ANY,
        instructions: str | None = None,
    ) -> GameTemplateRow:
        row = GameTemplateRow(
            name=name,
            group_name=group_name,
            default_team_count=default_team_count,
            default_players_per_team=default_players_per_team,
            default_rounds_per_game=default_rounds_per_game,
            default_team_type=TeamType(default_team_type).value,
            instructions=instructions,
        )
        self.session.add(row)
        await self.session.flush()
        return row

    async def get_template(self, template_id: str) -> GameTemplateRow | None:
        return await self.session.get(GameTemplateRow, template_id)

    async def get_all_templates(self) -> list[GameTemplateRow]:
        stmt = select(GameTemplateRow).order_by(GameTemplateRow.name)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def load_catalog(self) -> InMemoryTemplateRepository:
        """Snapshot the whole template catalog for the core."""
        rows = await self.get_all_templates()
        return InMemoryTemplateRepository(template_from_row(r) for r in rows)

    # --- Events ---

    async def create_event(self, name: str, participant_ids: list[str] | None = None) -> Event:
        row = EventRow(name=name, participant_ids=list(participant_ids or []), games=[])
        self.session.add(row)
        await self.session.flush()
        return event_from_row(row)

    async def _get_event_row(self, event_id: str) -> EventRow | None:
        stmt = (
            select(EventRow)
            .where(EventRow.id == event_id)
            .options(selectinload(EventRow.games).selectinload(EventGameRow.rounds))
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def load_event(self, event_id: str) -> Event | None:
        """Load an event with all its games and rounds."""
        row = await self._get_event_row(event_id)
        return event_from_row(row) if row is not None else None

    async def load_events(self) -> list[Event]:
        """Load every event aggregate, most recent first."""
        stmt = (
            select(EventRow)
            .order_by(EventRow.created_at.desc())
            .options(selectinload(EventRow.games).selectinload(EventGameRow.rounds))
        )
        result = await self.session.execute(stmt)
        return [event_from_row(r) for r in result.scalars().all()]

    async def save_event(self, event: Event) -> None:
        """Write the aggregate back. Games and rounds missing from it are deleted."""
        row = await self._get_event_row(event.id)
        if row is None:
            row = EventRow(id=event.id, created_at=event.created_at, games=[])
            self.session.add(row)

        row.name = event.name
        row.status = event.status.value
        row.participant_ids = list(event.participant_ids)
        row.current_game_id = event.current_game_id
        row.last_modified_at = event.last_modified_at

        existing = {g.id: g for g in row.games}
        games = []
        for game in event.games:
            game_row = existing.get(game.id) or EventGameRow(id=game.id, rounds=[])
            _apply_game(game_row, game)
            games.append(game_row)
        row.games = games
        await self.session.flush()

    async def delete_event(self, event_id: str) -> bool:
        """Delete an event; its games and rounds go with it."""
        row = await self._get_event_row(event_id)
        if row is None:
            return False
        await self.session.delete(row)
        await self.session.flush()
        return True
