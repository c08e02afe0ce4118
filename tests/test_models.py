"""Tests for the Pydantic domain models."""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from hearthgames.models.catalog import GameTemplate, TeamType
from hearthgames.models.event import (
    Event,
    EventGame,
    EventStatus,
    GameStatus,
    Round,
    RoundTeam,
)
from hearthgames.models.roster import Person
from hearthgames.models.stats import PlayerStats

# --- Person ---


class TestPerson:
    def test_defaults(self):
        p = Person(display_name="Ada")
        assert p.id
        assert p.is_active is True
        assert p.spouse_id is None

    def test_negative_attributes_rejected(self):
        with pytest.raises(ValidationError):
            Person(display_name="Ada", age=-1)

    def test_married_requires_both_links(self):
        a = Person(id="a", display_name="A", spouse_id="b")
        b = Person(id="b", display_name="B", spouse_id="a")
        c = Person(id="c", display_name="C", spouse_id="a")
        assert a.is_married_to(b)
        assert b.is_married_to(a)
        assert not c.is_married_to(a)
        assert not a.is_married_to(c)

    def test_matches_sex_is_loose(self):
        assert Person(display_name="x", sex="male").matches_sex("M")
        assert Person(display_name="x", sex=" f ").matches_sex("F")
        assert not Person(display_name="x", sex=None).matches_sex("F")
        assert not Person(display_name="x", sex="F").matches_sex("M")


# --- Catalog ---


class TestGameTemplate:
    def test_group_is_trimmed(self):
        assert GameTemplate(name="x", group_name="  Acting ").group == "Acting"

    def test_blank_group_is_none(self):
        assert GameTemplate(name="x", group_name="   ").group is None
        assert GameTemplate(name="x").group is None


class TestEventGameSettings:
    def test_template_defaults(self):
        template = GameTemplate(
            name="Relay",
            default_team_count=3,
            default_players_per_team=4,
            default_rounds_per_game=2,
            instructions="Run.",
        )
        settings = EventGame(template_id=template.id).settings(template)
        assert settings.team_count == 3
        assert settings.players_per_team == 4
        assert settings.rounds_per_game == 2
        assert settings.required_players == 12
        assert settings.instructions == "Run."
        assert not settings.couples_only

    def test_overrides_win(self):
        template = GameTemplate(name="Relay")
        game = EventGame(
            template_id=template.id,
            override_team_count=4,
            override_players_per_team=1,
            override_team_type=TeamType.COUPLES_ONLY,
        )
        settings = game.settings(template)
        assert settings.team_count == 4
        assert settings.players_per_team == 1
        assert settings.couples_only

    def test_counts_clamped_to_one(self):
        template = GameTemplate(name="Odd", default_team_count=0, default_players_per_team=-2)
        settings = EventGame(template_id=template.id).settings(template)
        assert settings.team_count == 1
        assert settings.players_per_team == 1

    def test_rounds_not_clamped(self):
        template = GameTemplate(name="Broken", default_rounds_per_game=0)
        assert EventGame(template_id=template.id).settings(template).rounds_per_game == 0


# --- Rounds ---


class TestRound:
    def test_round_index_non_negative(self):
        with pytest.raises(ValidationError):
            Round(round_index=-1)

    def test_locked_when_completed(self):
        r = Round(round_index=0)
        assert not r.is_locked
        r.completed_at = datetime.now(UTC)
        assert r.is_locked

    def test_assigned_and_get_team(self):
        team = RoundTeam(id="t1", member_person_ids=["a", "b"])
        r = Round(round_index=0, teams=[team, RoundTeam(member_person_ids=["c"])])
        assert r.assigned_person_ids() == ["a", "b", "c"]
        assert r.get_team("t1") is team
        assert r.get_team("missing") is None


class TestEventGameRounds:
    def test_current_round_is_highest_open(self):
        game = EventGame(template_id="t")
        done = Round(round_index=0, completed_at=datetime.now(UTC))
        open1 = Round(round_index=1)
        open2 = Round(round_index=2)
        game.rounds = [done, open2, open1]
        assert game.current_round() is open2
        assert game.completed_rounds() == [done]
        assert game.next_round_index() == 3

    def test_no_rounds(self):
        game = EventGame(template_id="t")
        assert game.current_round() is None
        assert game.next_round_index() == 0


# --- Event ---


class TestEvent:
    def test_defaults(self):
        event = Event(name="Night")
        assert event.status == EventStatus.AVAILABLE
        assert event.games == []
        assert event.max_order_index() == -1

    def test_games_with_status_sorted_by_order(self):
        g1 = EventGame(template_id="a", order_index=2)
        g2 = EventGame(template_id="b", order_index=0)
        g3 = EventGame(template_id="c", order_index=1, status=GameStatus.COMPLETED)
        event = Event(name="Night", games=[g1, g2, g3])
        assert event.games_with_status(GameStatus.NOT_STARTED) == [g2, g1]
        assert event.max_order_index() == 2

    def test_find_round(self):
        r = Round(round_index=0)
        game = EventGame(template_id="a", rounds=[r])
        event = Event(name="Night", games=[game])
        assert event.find_round(r.id) == (game, r)
        assert event.find_round("nope") is None

    def test_current_game(self):
        game = EventGame(template_id="a")
        event = Event(name="Night", games=[game])
        assert event.current_game() is None
        event.current_game_id = game.id
        assert event.current_game() is game

    def test_json_round_trip(self):
        r = Round(round_index=0, teams=[RoundTeam(member_person_ids=["a"])])
        event = Event(name="Night", games=[EventGame(template_id="a", rounds=[r])])
        restored = Event.model_validate(event.model_dump(mode="json"))
        assert restored == event


# --- Stats ---


class TestPlayerStats:
    def test_total_points(self):
        s = PlayerStats(person_id="a", first_place=2, second_place=1, third_place=3)
        assert s.total_points == 11
