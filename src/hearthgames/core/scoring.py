"""Partition scoring. Lower is better; zero is a perfect partition.

Three additive terms, from heaviest to lightest:
  1. Exact repeat of a head-to-head matchup already played in this game.
  2. A mutual couple placed on the same team (skipped for couples-only games).
  3. Imbalance of per-team attribute totals (ability, age, weight).

Penalties are sized so a repeat always outweighs any spouse conflict, and a
spouse conflict outweighs the balance terms for realistic roster values.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from hearthgames.models.event import RoundTeam
from hearthgames.models.roster import Person

REPEAT_MATCHUP_PENALTY = 10_000_000.0
SPOUSE_PENALTY = 100_000.0

# Weight per attribute on the variance of team totals.
BALANCE_WEIGHTS: dict[str, float] = {
    "athletic_ability": 2.0,
    "age": 0.5,
    "weight": 0.25,
}


def matchup_signature(teams: Iterable[RoundTeam]) -> str:
    """Canonical encoding of a grouping, independent of team and member order."""
    normalized = sorted(",".join(sorted(team.member_person_ids)) for team in teams)
    return "||".join(normalized)


def variance_penalty(values: list[float]) -> float:
    """Sum of squared deviations from the mean. Zero for fewer than two values."""
    if len(values) < 2:
        return 0.0
    mean = sum(values) / len(values)
    return sum((v - mean) ** 2 for v in values)


def team_total(
    team: RoundTeam,
    people_by_id: dict[str, Person],
    attribute: Callable[[Person], int | None],
) -> float:
    """Sum of the attribute over members who have it; absent values are skipped."""
    total = 0.0
    for pid in team.member_person_ids:
        person = people_by_id.get(pid)
        if person is None:
            continue
        value = attribute(person)
        if value is not None:
            total += value
    return total


def balance_penalty(teams: list[RoundTeam], people_by_id: dict[str, Person]) -> float:
    """Weighted variance of team totals across every balanced attribute."""
    penalty = 0.0
    for attr, weight in BALANCE_WEIGHTS.items():
        totals = [
            team_total(team, people_by_id, lambda p, a=attr: getattr(p, a)) for team in teams
        ]
        penalty += variance_penalty(totals) * weight
    return penalty


def spouse_conflicts(teams: list[RoundTeam], people_by_id: dict[str, Person]) -> int:
    """Number of mutual couples that share a team."""
    conflicts = 0
    for team in teams:
        members = set(team.member_person_ids)
        for pid in members:
            person = people_by_id.get(pid)
            if person is None or person.spouse_id is None or person.spouse_id not in members:
                continue
            spouse = people_by_id.get(person.spouse_id)
            # Count each pair once, from its lexically smaller side.
            if spouse is not None and person.is_married_to(spouse) and pid < spouse.id:
                conflicts += 1
    return conflicts


def score_partition(
    teams: list[RoundTeam],
    people_by_id: dict[str, Person],
    history_signatures: set[str],
    allow_spouses_together: bool = False,
) -> float:
    """Score a candidate partition against history, couples, and balance."""
    score = 0.0
    if matchup_signature(teams) in history_signatures:
        score += REPEAT_MATCHUP_PENALTY
    if not allow_spouses_together:
        score += spouse_conflicts(teams, people_by_id) * SPOUSE_PENALTY
    score += balance_penalty(teams, people_by_id)
    return score
