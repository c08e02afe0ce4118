"""Tests for partition scoring: signatures, repeats, couples, balance."""

from hearthgames.core.scoring import (
    BALANCE_WEIGHTS,
    REPEAT_MATCHUP_PENALTY,
    SPOUSE_PENALTY,
    balance_penalty,
    matchup_signature,
    score_partition,
    spouse_conflicts,
    variance_penalty,
)
from hearthgames.models.event import RoundTeam
from hearthgames.models.roster import Person


def _teams(*groups: list[str]) -> list[RoundTeam]:
    return [RoundTeam(member_person_ids=list(g)) for g in groups]


class TestMatchupSignature:
    def test_order_independent(self):
        a = matchup_signature(_teams(["b", "a"], ["d", "c"]))
        b = matchup_signature(_teams(["c", "d"], ["a", "b"]))
        assert a == b == "a,b||c,d"

    def test_different_groupings_differ(self):
        assert matchup_signature(_teams(["a", "b"], ["c", "d"])) != matchup_signature(
            _teams(["a", "c"], ["b", "d"])
        )

    def test_ignores_team_ids(self):
        t1 = [RoundTeam(id="x", member_person_ids=["a"]), RoundTeam(member_person_ids=["b"])]
        t2 = [RoundTeam(id="z", member_person_ids=["b"]), RoundTeam(member_person_ids=["a"])]
        assert matchup_signature(t1) == matchup_signature(t2)


class TestVariance:
    def test_fewer_than_two_values(self):
        assert variance_penalty([]) == 0.0
        assert variance_penalty([5.0]) == 0.0

    def test_sum_of_squared_deviations(self):
        # mean 2, deviations -1, 1
        assert variance_penalty([1.0, 3.0]) == 2.0

    def test_equal_values(self):
        assert variance_penalty([4.0, 4.0, 4.0]) == 0.0


class TestBalance:
    def test_absent_values_skipped(self):
        people = {
            "a": Person(id="a", display_name="A", athletic_ability=5),
            "b": Person(id="b", display_name="B"),
        }
        # Totals 5 and 0 on ability only.
        penalty = balance_penalty(_teams(["a"], ["b"]), people)
        assert penalty == variance_penalty([5.0, 0.0]) * BALANCE_WEIGHTS["athletic_ability"]

    def test_balanced_teams_score_zero(self):
        people = {
            pid: Person(id=pid, display_name=pid, age=30, weight=150, athletic_ability=5)
            for pid in "abcd"
        }
        assert balance_penalty(_teams(["a", "b"], ["c", "d"]), people) == 0.0


class TestSpouseConflicts:
    def test_mutual_couple_counted_once(self):
        people = {
            "a": Person(id="a", display_name="A", spouse_id="b"),
            "b": Person(id="b", display_name="B", spouse_id="a"),
            "c": Person(id="c", display_name="C"),
        }
        assert spouse_conflicts(_teams(["a", "b", "c"]), people) == 1

    def test_one_sided_link_ignored(self):
        people = {
            "a": Person(id="a", display_name="A", spouse_id="b"),
            "b": Person(id="b", display_name="B"),
        }
        assert spouse_conflicts(_teams(["a", "b"]), people) == 0

    def test_split_couple_no_conflict(self):
        people = {
            "a": Person(id="a", display_name="A", spouse_id="b"),
            "b": Person(id="b", display_name="B", spouse_id="a"),
        }
        assert spouse_conflicts(_teams(["a"], ["b"]), people) == 0


class TestScorePartition:
    def test_repeat_penalty_applied(self):
        people = {pid: Person(id=pid, display_name=pid) for pid in "abcd"}
        teams = _teams(["a", "b"], ["c", "d"])
        history = {matchup_signature(teams)}
        assert score_partition(teams, people, history) == REPEAT_MATCHUP_PENALTY
        assert score_partition(teams, people, set()) == 0.0

    def test_spouse_penalty_can_be_disabled(self):
        people = {
            "a": Person(id="a", display_name="A", spouse_id="b"),
            "b": Person(id="b", display_name="B", spouse_id="a"),
        }
        teams = _teams(["a", "b"])
        assert score_partition(teams, people, set()) == SPOUSE_PENALTY
        assert score_partition(teams, people, set(), allow_spouses_together=True) == 0.0

    def test_repeat_outweighs_spouse_and_balance(self):
        assert REPEAT_MATCHUP_PENALTY > SPOUSE_PENALTY * 10
