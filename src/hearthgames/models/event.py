"""Event, EventGame, Round and RoundTeam models.

An Event owns its games, a game owns its rounds. Children point back to their
owner by id only, so the aggregate stays a tree and serializes cleanly.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, Field

from hearthgames.models.catalog import GameSettings, GameTemplate, TeamType


def _uuid() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(UTC)


class EventStatus(StrEnum):
    AVAILABLE = "available"
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"


class GameStatus(StrEnum):
    NOT_STARTED = "notStarted"
    IN_PROGRESS = "inProgress"
    COMPLETED = "completed"


class RoundResultType(StrEnum):
    WIN = "win"
    TIE = "tie"


class RoundTeam(BaseModel):
    """One team within a round: an id plus its ordered members."""

    id: str = Field(default_factory=_uuid)
    member_person_ids: list[str] = Field(default_factory=list)


class Round(BaseModel):
    """One playthrough of an EventGame. Locked once ``completed_at`` is set."""

    id: str = Field(default_factory=_uuid)
    event_game_id: str | None = None
    round_index: int = Field(ge=0)
    created_at: datetime = Field(default_factory=_now)
    completed_at: datetime | None = None
    teams: list[RoundTeam] = Field(default_factory=list)
    placements: dict[str, int] = Field(default_factory=dict)
    result_type: RoundResultType | None = None
    winning_team_id: str | None = None

    @property
    def is_locked(self) -> bool:
        return self.completed_at is not None

    def assigned_person_ids(self) -> list[str]:
        return [pid for team in self.teams for pid in team.member_person_ids]

    def get_team(self, team_id: str) -> RoundTeam | None:
        for team in self.teams:
            if team.id == team_id:
                return team
        return None


class EventGame(BaseModel):
    """A scheduled instance of a GameTemplate within one Event."""

    id: str = Field(default_factory=_uuid)
    event_id: str | None = None
    template_id: str
    status: GameStatus = GameStatus.NOT_STARTED
    order_index: int = 0
    override_team_count: int | None = None
    override_players_per_team: int | None = None
    override_rounds_per_game: int | None = None
    override_team_type: TeamType | None = None
    override_instructions: str | None = None
    rounds: list[Round] = Field(default_factory=list)

    def settings(self, template: GameTemplate) -> GameSettings:
        """Resolve the effective team shape. Counts are clamped to at least 1."""
        def pick(override: object, default: object) -> object:
            return default if override is None else override

        return GameSettings(
            team_count=max(1, pick(self.override_team_count, template.default_team_count)),
            players_per_team=max(
                1, pick(self.override_players_per_team, template.default_players_per_team)
            ),
            rounds_per_game=pick(self.override_rounds_per_game, template.default_rounds_per_game),
            team_type=pick(self.override_team_type, template.default_team_type),
            instructions=pick(self.override_instructions, template.instructions),
        )

    def get_round(self, round_id: str) -> Round | None:
        for r in self.rounds:
            if r.id == round_id:
                return r
        return None

    def completed_rounds(self) -> list[Round]:
        return [r for r in self.rounds if r.is_locked]

    def current_round(self) -> Round | None:
        """Highest-index round that is still open."""
        open_rounds = [r for r in self.rounds if not r.is_locked]
        if not open_rounds:
            return None
        return max(open_rounds, key=lambda r: r.round_index)

    def next_round_index(self) -> int:
        if not self.rounds:
            return 0
        return max(r.round_index for r in self.rounds) + 1


class Event(BaseModel):
    """A hosted event: a participant pool plus an ordered list of games."""

    id: str = Field(default_factory=_uuid)
    name: str
    status: EventStatus = EventStatus.AVAILABLE
    participant_ids: list[str] = Field(default_factory=list)
    games: list[EventGame] = Field(default_factory=list)
    current_game_id: str | None = None
    created_at: datetime = Field(default_factory=_now)
    last_modified_at: datetime = Field(default_factory=_now)

    def get_game(self, game_id: str) -> EventGame | None:
        for game in self.games:
            if game.id == game_id:
                return game
        return None

    def current_game(self) -> EventGame | None:
        if self.current_game_id is None:
            return None
        return self.get_game(self.current_game_id)

    def find_round(self, round_id: str) -> tuple[EventGame, Round] | None:
        for game in self.games:
            r = game.get_round(round_id)
            if r is not None:
                return game, r
        return None

    def games_with_status(self, status: GameStatus) -> list[EventGame]:
        return sorted(
            (g for g in self.games if g.status == status),
            key=lambda g: g.order_index,
        )

    def max_order_index(self) -> int:
        return max((g.order_index for g in self.games), default=-1)

    def touch(self) -> None:
        self.last_modified_at = _now()
