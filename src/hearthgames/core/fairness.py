"""Fair team assignment.

Picks who plays the next round (equal playing time first) and partitions them
into teams. Couples-only games pair mutual spouses; every other game runs a
bounded randomized search over shuffled partitions and keeps the best score
from ``hearthgames.core.scoring``.

The search is a heuristic, not an optimizer: it always returns a full,
feasible partition within ``iterations`` tries, and is non-deterministic
unless a seeded ``random.Random`` is injected.
"""

from __future__ import annotations

import logging
import math
import random
from collections import Counter
from dataclasses import dataclass, field

from hearthgames.core.errors import (
    MissingEventGameError,
    MissingTemplateError,
    NotEnoughCouplesError,
    NotEnoughPlayersError,
)
from hearthgames.core.repositories import PersonRepository, TemplateRepository
from hearthgames.core.scoring import matchup_signature, score_partition
from hearthgames.models.catalog import GameSettings, TeamType
from hearthgames.models.event import Event, EventGame, Round, RoundTeam
from hearthgames.models.roster import Person

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_ITERATIONS = 600


@dataclass
class SearchResult:
    """Best partition found by the randomized search."""

    teams: list[RoundTeam] = field(default_factory=list)
    score: float = math.inf
    iterations: int = 0


def rounds_played_counts(event: Event) -> Counter[str]:
    """Completed rounds each person has played across every game of the event."""
    counts: Counter[str] = Counter()
    for game in event.games:
        for r in game.completed_rounds():
            counts.update(r.assigned_person_ids())
    return counts


def matchup_history(game: EventGame) -> set[str]:
    """Signatures of every completed round in this game."""
    return {matchup_signature(r.teams) for r in game.completed_rounds()}


def fairness_order(people: list[Person], played: Counter[str]) -> list[Person]:
    """Fewest rounds played first; ties by case-insensitive name."""
    return sorted(people, key=lambda p: (played[p.id], p.display_name.casefold()))


def choose_participants(
    eligible: list[Person],
    required: int,
    played: Counter[str],
) -> list[Person]:
    return fairness_order(eligible, played)[:required]


def choose_with_preferred(
    eligible: list[Person],
    preferred_ids: list[str],
    required: int,
    played: Counter[str],
) -> list[Person]:
    """Honour a preferred list, topping up or trimming to exactly ``required``.

    Preferred ids that are no longer eligible are dropped. When there are too
    many, the most experienced (most rounds played) are kept.
    """
    by_id = {p.id: p for p in eligible}
    seen: set[str] = set()
    preferred: list[Person] = []
    for pid in preferred_ids:
        if pid in by_id and pid not in seen:
            seen.add(pid)
            preferred.append(by_id[pid])

    if len(preferred) == required:
        return preferred
    if len(preferred) > required:
        ranked = sorted(preferred, key=lambda p: (-played[p.id], p.display_name.casefold()))
        return ranked[:required]

    rest = [p for p in eligible if p.id not in seen]
    return preferred + choose_participants(rest, required - len(preferred), played)


def pair_couples(people: list[Person]) -> list[list[str]]:
    """Mutual spouse pairs among ``people``, in roster order. Singles are dropped."""
    by_id = {p.id: p for p in people}
    used: set[str] = set()
    pairs: list[list[str]] = []
    for person in people:
        if person.id in used or person.spouse_id is None:
            continue
        spouse = by_id.get(person.spouse_id)
        if spouse is None or spouse.id in used or not person.is_married_to(spouse):
            continue
        used.update((person.id, spouse.id))
        pairs.append([person.id, spouse.id])
    return pairs


def couples_only_teams(chosen: list[Person], team_count: int) -> list[RoundTeam]:
    pairs = pair_couples(chosen)
    if len(pairs) < team_count:
        raise NotEnoughCouplesError(required=team_count, available=len(pairs))
    return [RoundTeam(member_person_ids=pair) for pair in pairs[:team_count]]


def partition(ids: list[str], team_count: int, players_per_team: int) -> list[RoundTeam]:
    """Slice ``ids`` into contiguous teams of ``players_per_team``."""
    return [
        RoundTeam(member_person_ids=ids[i * players_per_team : (i + 1) * players_per_team])
        for i in range(team_count)
    ]


def search_partition(
    chosen: list[Person],
    team_count: int,
    players_per_team: int,
    history: set[str],
    rng: random.Random,
    iterations: int = DEFAULT_SEARCH_ITERATIONS,
    allow_spouses_together: bool = False,
) -> SearchResult:
    """Shuffle-and-slice local search; stops early on a zero score."""
    people_by_id = {p.id: p for p in chosen}
    ids = [p.id for p in chosen]
    result = SearchResult()

    for i in range(iterations):
        rng.shuffle(ids)
        teams = partition(ids, team_count, players_per_team)
        score = score_partition(teams, people_by_id, history, allow_spouses_together)
        result.iterations = i + 1
        if score < result.score:
            result.teams = teams
            result.score = score
            if score == 0:
                break

    return result


class FairnessEngine:
    """Selects participants for a round and computes its team partition.

    Read-only: the engine never mutates the round or the event. The
    lifecycle controller commits what it returns.
    """

    def __init__(
        self,
        templates: TemplateRepository,
        people: PersonRepository,
        rng: random.Random | None = None,
        iterations: int = DEFAULT_SEARCH_ITERATIONS,
    ) -> None:
        self.templates = templates
        self.people = people
        self.rng = rng or random.Random()
        self.iterations = iterations

    def generate_teams(
        self,
        round_: Round,
        event: Event,
        preferred_player_ids: list[str] | None = None,
    ) -> list[RoundTeam]:
        game = self._game_for(round_, event)
        template = self.templates.get(game.template_id)
        if template is None:
            raise MissingTemplateError(game.template_id)
        settings = game.settings(template)

        eligible = self.eligible_people(event, settings)
        required = settings.required_players
        if len(eligible) < required:
            raise NotEnoughPlayersError(required=required, available=len(eligible))

        played = rounds_played_counts(event)
        if preferred_player_ids is not None:
            chosen = choose_with_preferred(eligible, preferred_player_ids, required, played)
        else:
            pool = self._rotation_pool(round_, eligible, required)
            chosen = choose_participants(pool, required, played)

        if settings.couples_only:
            teams = couples_only_teams(chosen, settings.team_count)
            logger.info(
                "teams_generated round=%s game=%s mode=couples teams=%d",
                round_.id,
                game.id,
                len(teams),
            )
            return teams

        result = search_partition(
            chosen,
            settings.team_count,
            settings.players_per_team,
            matchup_history(game),
            self.rng,
            iterations=self.iterations,
        )
        logger.info(
            "teams_generated round=%s game=%s mode=search score=%.2f iterations=%d",
            round_.id,
            game.id,
            result.score,
            result.iterations,
        )
        return result.teams

    def eligible_people(self, event: Event, settings: GameSettings) -> list[Person]:
        """Active people from the event pool, filtered by single-sex team types."""
        people = [p for p in self.people.get_many(event.participant_ids) if p.is_active]
        if settings.team_type == TeamType.MALE_ONLY:
            return [p for p in people if p.matches_sex("M")]
        if settings.team_type == TeamType.FEMALE_ONLY:
            return [p for p in people if p.matches_sex("F")]
        return people

    def _game_for(self, round_: Round, event: Event) -> EventGame:
        game = event.get_game(round_.event_game_id) if round_.event_game_id else None
        if game is None:
            raise MissingEventGameError(round_.id)
        return game

    @staticmethod
    def _rotation_pool(round_: Round, eligible: list[Person], required: int) -> list[Person]:
        """On regeneration, bench everyone currently assigned if enough remain."""
        if not round_.teams:
            return eligible
        assigned = set(round_.assigned_person_ids())
        rotated = [p for p in eligible if p.id not in assigned]
        return rotated if len(rotated) >= required else eligible
