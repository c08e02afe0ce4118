"""Game catalog models: templates and the effective settings of a scheduled game."""

from __future__ import annotations

import uuid
from enum import StrEnum

from pydantic import BaseModel, Field


class TeamType(StrEnum):
    """Constraint on who may form a team."""

    ANY = "any"
    MALE_ONLY = "maleOnly"
    FEMALE_ONLY = "femaleOnly"
    COUPLES_ONLY = "couplesOnly"


class GameTemplate(BaseModel):
    """Catalog definition of a game. Scheduled copies live on EventGame."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    group_name: str | None = None
    default_team_count: int = 2
    default_players_per_team: int = 2
    default_rounds_per_game: int = 1
    default_team_type: TeamType = TeamType.ANY
    instructions: str | None = None

    @property
    def group(self) -> str | None:
        """Trimmed group name, or None when blank."""
        if self.group_name is None:
            return None
        trimmed = self.group_name.strip()
        return trimmed or None


class GameSettings(BaseModel):
    """Effective team shape for one EventGame (override, else template default)."""

    team_count: int
    players_per_team: int
    rounds_per_game: int
    team_type: TeamType = TeamType.ANY
    instructions: str | None = None

    @property
    def required_players(self) -> int:
        return self.team_count * self.players_per_team

    @property
    def couples_only(self) -> bool:
        return self.team_type == TeamType.COUPLES_ONLY
