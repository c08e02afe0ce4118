"""Tests for the placement leaderboard."""

from datetime import UTC, datetime

from hearthgames.core.standings import compute_player_stats
from hearthgames.models.event import Event, EventGame, Round, RoundResultType, RoundTeam
from hearthgames.models.roster import Person


def _round(index: int, placements: dict[str, int], teams=None, tie: bool = False) -> Round:
    return Round(
        round_index=index,
        completed_at=datetime.now(UTC),
        teams=[RoundTeam(member_person_ids=list(t)) for t in teams or []],
        placements=placements,
        result_type=RoundResultType.TIE if tie else RoundResultType.WIN,
        winning_team_id=None if tie else "w",
    )


class TestComputePlayerStats:
    def test_points_and_order(self):
        game = EventGame(
            template_id="t",
            rounds=[
                _round(0, {"a": 1, "b": 2, "c": 3}),
                _round(1, {"a": 1, "c": 2}),
            ],
        )
        stats = compute_player_stats([Event(name="x", games=[game])])
        assert [(s.person_id, s.total_points, s.rank) for s in stats] == [
            ("a", 6, 1),
            ("c", 3, 2),
            ("b", 2, 3),
        ]
        assert stats[0].games_played == 2
        assert stats[0].first_place == 2

    def test_fewer_games_breaks_point_ties(self):
        game = EventGame(
            template_id="t",
            rounds=[
                _round(0, {"a": 1}),
                _round(1, {"b": 2}),
                _round(2, {"b": 3}),
            ],
        )
        stats = compute_player_stats([Event(name="x", games=[game])])
        assert [s.person_id for s in stats] == ["a", "b"]
        assert stats[0].total_points == stats[1].total_points == 3

    def test_tie_credits_everyone_first(self):
        game = EventGame(
            template_id="t",
            rounds=[_round(0, {}, teams=[["a", "b"], ["c"]], tie=True)],
        )
        stats = compute_player_stats([Event(name="x", games=[game])])
        assert {s.person_id: (s.first_place, s.games_played) for s in stats} == {
            "a": (1, 1),
            "b": (1, 1),
            "c": (1, 1),
        }

    def test_open_rounds_ignored(self):
        game = EventGame(
            template_id="t",
            rounds=[Round(round_index=0, placements={"a": 1})],
        )
        assert compute_player_stats([Event(name="x", games=[game])]) == []

    def test_names_resolved_from_roster(self):
        game = EventGame(template_id="t", rounds=[_round(0, {"a": 1, "ghost": 2})])
        stats = compute_player_stats(
            [Event(name="x", games=[game])],
            [Person(id="a", display_name="Ada")],
        )
        names = {s.person_id: s.display_name for s in stats}
        assert names == {"a": "Ada", "ghost": "Unknown"}

    def test_across_events(self):
        e1 = Event(name="1", games=[EventGame(template_id="t", rounds=[_round(0, {"a": 1})])])
        e2 = Event(name="2", games=[EventGame(template_id="t", rounds=[_round(0, {"a": 2})])])
        (row,) = compute_player_stats([e1, e2])
        assert row.games_played == 2
        assert row.total_points == 5
