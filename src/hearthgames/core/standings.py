"""Event leaderboard computed from finalized rounds.

Scoring: 3 points per 1st place, 2 per 2nd, 1 per 3rd. A tie credits every
member of every team with a 1st place.
"""

from __future__ import annotations

from collections.abc import Iterable

from hearthgames.models.event import Event, RoundResultType
from hearthgames.models.roster import Person
from hearthgames.models.stats import PlayerStats


def compute_player_stats(
    events: Iterable[Event],
    people: Iterable[Person] = (),
) -> list[PlayerStats]:
    """Tally placements across ``events``.

    Returns:
        Rows sorted by total points (desc), then games played (asc), with
        1-based ``rank`` set from that order.
    """
    stats: dict[str, PlayerStats] = {}

    def row(person_id: str) -> PlayerStats:
        if person_id not in stats:
            stats[person_id] = PlayerStats(person_id=person_id)
        return stats[person_id]

    for event in events:
        for game in event.games:
            for r in game.completed_rounds():
                for person_id, placement in r.placements.items():
                    s = row(person_id)
                    s.games_played += 1
                    if placement == 1:
                        s.first_place += 1
                    elif placement == 2:
                        s.second_place += 1
                    elif placement == 3:
                        s.third_place += 1

                if r.result_type == RoundResultType.TIE and r.winning_team_id is None:
                    for person_id in r.assigned_person_ids():
                        s = row(person_id)
                        if person_id not in r.placements:
                            s.games_played += 1
                        s.first_place += 1

    names = {p.id: p.display_name for p in people}
    for s in stats.values():
        s.display_name = names.get(s.person_id, "Unknown")

    ordered = sorted(stats.values(), key=lambda s: (-s.total_points, s.games_played))
    for index, s in enumerate(ordered, start=1):
        s.rank = index
    return ordered
