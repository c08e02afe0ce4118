"""Leaderboard rows computed from finalized rounds."""

from __future__ import annotations

from pydantic import BaseModel


class PlayerStats(BaseModel):
    """Placement tally for one person across one or more events."""

    person_id: str
    display_name: str = "Unknown"
    games_played: int = 0
    first_place: int = 0
    second_place: int = 0
    third_place: int = 0
    rank: int = 0

    @property
    def total_points(self) -> int:
        """3 points per win, 2 per second place, 1 per third."""
        return self.first_place * 3 + self.second_place * 2 + self.third_place
