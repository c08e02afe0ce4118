"""Event / EventGame / Round lifecycle.

Event phases:
    AVAILABLE -> ACTIVE <-> PAUSED
    ACTIVE -> COMPLETED (no eligible game left) -> ACTIVE (games added later)
    any -> AVAILABLE (reset)

EventGame phases:
    NOT_STARTED -> IN_PROGRESS -> COMPLETED
    IN_PROGRESS -> NOT_STARTED (skipped before any round was finalized)

Rounds lock one-way when finalized.

Every operation validates (and computes any team partition) before it
touches the aggregate, so a raised error leaves the event exactly as it was.
The controller only mutates in-memory models; persistence belongs to the
caller (see ``hearthgames.core.service``).
"""

from __future__ import annotations

import logging
import random
from datetime import UTC, datetime

from hearthgames.core.errors import (
    DuplicateTeamError,
    InvalidRoundCountError,
    InvalidTransitionError,
    LockedRoundError,
    MissingTemplateError,
    NoParticipantsError,
    UnknownTeamError,
)
from hearthgames.core.fairness import DEFAULT_SEARCH_ITERATIONS, FairnessEngine
from hearthgames.core.repositories import PersonRepository, TemplateRepository
from hearthgames.models.event import (
    Event,
    EventGame,
    EventStatus,
    GameStatus,
    Round,
    RoundResultType,
    RoundTeam,
)

logger = logging.getLogger(__name__)


ALLOWED_EVENT_TRANSITIONS: dict[EventStatus, set[EventStatus]] = {
    EventStatus.AVAILABLE: {EventStatus.ACTIVE, EventStatus.COMPLETED},
    EventStatus.ACTIVE: {EventStatus.ACTIVE, EventStatus.PAUSED, EventStatus.COMPLETED},
    EventStatus.PAUSED: {EventStatus.PAUSED, EventStatus.ACTIVE, EventStatus.COMPLETED},
    EventStatus.COMPLETED: {EventStatus.COMPLETED, EventStatus.ACTIVE},
}

ALLOWED_GAME_TRANSITIONS: dict[GameStatus, set[GameStatus]] = {
    GameStatus.NOT_STARTED: {GameStatus.IN_PROGRESS, GameStatus.COMPLETED},
    GameStatus.IN_PROGRESS: {
        GameStatus.IN_PROGRESS,
        GameStatus.COMPLETED,
        GameStatus.NOT_STARTED,
    },
    GameStatus.COMPLETED: {GameStatus.COMPLETED},
}


def check_event_transition(event: Event, target: EventStatus) -> None:
    if target not in ALLOWED_EVENT_TRANSITIONS[event.status]:
        raise InvalidTransitionError("event", event.status.value, f"change event to {target}")


def check_game_transition(game: EventGame, target: GameStatus) -> None:
    if target not in ALLOWED_GAME_TRANSITIONS[game.status]:
        raise InvalidTransitionError("game", game.status.value, f"change game to {target}")


def _set_event_status(event: Event, target: EventStatus) -> None:
    if event.status != target:
        logger.info(
            "event_status_changed event=%s from=%s to=%s",
            event.id,
            event.status.value,
            target.value,
        )
    event.status = target


def _set_game_status(game: EventGame, target: GameStatus) -> None:
    if game.status != target:
        logger.info(
            "game_status_changed game=%s from=%s to=%s",
            game.id,
            game.status.value,
            target.value,
        )
    game.status = target


class EventController:
    """Drives an Event through its games and rounds.

    Args:
        templates: Catalog lookup for game templates.
        people: Roster lookup, used by the fairness engine.
        rng: Randomness for game picking and team search. Inject a seeded
            ``random.Random`` for reproducible runs.
        search_iterations: Upper bound on partitions tried per generation.
    """

    def __init__(
        self,
        templates: TemplateRepository,
        people: PersonRepository,
        rng: random.Random | None = None,
        search_iterations: int = DEFAULT_SEARCH_ITERATIONS,
    ) -> None:
        self.templates = templates
        self.rng = rng or random.Random()
        self.fairness = FairnessEngine(
            templates, people, rng=self.rng, iterations=search_iterations
        )

    # --- Participants / games ---

    def set_participants(self, event: Event, participant_ids: list[str]) -> None:
        """Replace the eligible pool. Order is kept, duplicates dropped."""
        event.participant_ids = list(dict.fromkeys(participant_ids))
        event.touch()
        logger.info("participants_set event=%s count=%d", event.id, len(event.participant_ids))

    def add_game(self, event: Event, template_id: str) -> EventGame | None:
        """Schedule a template at the back of the event. No-op if already scheduled."""
        if self.templates.get(template_id) is None:
            raise MissingTemplateError(template_id)
        if any(g.template_id == template_id for g in event.games):
            return None
        game = EventGame(
            event_id=event.id,
            template_id=template_id,
            order_index=event.max_order_index() + 1,
        )
        event.games.append(game)
        event.touch()
        return game

    def import_catalog_games(self, event: Event) -> list[EventGame]:
        """Schedule every catalog template the event does not hold yet."""
        added = []
        for template in self.templates.all():
            game = self.add_game(event, template.id)
            if game is not None:
                added.append(game)
        logger.info("catalog_imported event=%s added=%d", event.id, len(added))
        return added

    # --- Event lifecycle ---

    def start_event(self, event: Event) -> EventGame | None:
        """Activate the event and start a randomly picked next game, if any."""
        self._require_participants(event)
        check_event_transition(event, EventStatus.ACTIVE)
        next_game = self.pick_next_game_random(event)
        if next_game is not None:
            self._check_startable(event, next_game)

        _set_event_status(event, EventStatus.ACTIVE)
        if next_game is not None:
            self._apply_start(event, next_game)
        event.touch()
        return next_game

    def pause_event(self, event: Event) -> None:
        check_event_transition(event, EventStatus.PAUSED)
        _set_event_status(event, EventStatus.PAUSED)
        event.touch()

    def resume_event(self, event: Event) -> EventGame | None:
        """Resume in place, or move on to a new game when the current one is done.

        Returns the game now in play, or None when the event completed.
        """
        self._require_participants(event)
        current = event.current_game()
        if current is not None and current.status != GameStatus.COMPLETED:
            check_event_transition(event, EventStatus.ACTIVE)
            _set_event_status(event, EventStatus.ACTIVE)
            event.touch()
            return current

        next_game = self.pick_next_game_random(event)
        if next_game is None:
            check_event_transition(event, EventStatus.COMPLETED)
            _set_event_status(event, EventStatus.COMPLETED)
            event.current_game_id = None
            event.touch()
            return None

        self._check_startable(event, next_game)
        _set_event_status(event, EventStatus.ACTIVE)
        self._apply_start(event, next_game)
        event.touch()
        return next_game

    def reset_event(self, event: Event) -> None:
        """Drop every round, return all games to not-started, event to available."""
        for game in event.games:
            game.rounds = []
            _set_game_status(game, GameStatus.NOT_STARTED)
        _set_event_status(event, EventStatus.AVAILABLE)
        event.current_game_id = None
        event.touch()
        logger.info("event_reset event=%s games=%d", event.id, len(event.games))

    # --- Game lifecycle ---

    def start(self, event: Event, game: EventGame) -> Round:
        """Make ``game`` the current game. Creates Round 0 only if it has no rounds.

        Returns the game's current (open) round, or its latest round.
        """
        self._require_participants(event)
        self._check_startable(event, game)
        _set_event_status(event, EventStatus.ACTIVE)
        round_ = self._apply_start(event, game)
        event.touch()
        return round_

    def create_next_round(self, event: Event, game: EventGame) -> Round:
        """Append an empty round after the highest existing index."""
        self._require_owned(event, game)
        round_ = Round(event_game_id=game.id, round_index=game.next_round_index())
        game.rounds.append(round_)
        event.touch()
        logger.info("round_created game=%s round_index=%d", game.id, round_.round_index)
        return round_

    def complete_game(self, event: Event, game: EventGame) -> None:
        self._require_owned(event, game)
        check_game_transition(game, GameStatus.COMPLETED)
        _set_game_status(game, GameStatus.COMPLETED)
        if event.current_game_id == game.id:
            event.current_game_id = None
        event.touch()

    def pick_next_game_random(self, event: Event) -> EventGame | None:
        """Random not-started game, preferring a group other than the last one played."""
        return self._pick_from(event, event.games_with_status(GameStatus.NOT_STARTED))

    def push_game_to_later(self, event: Event, game: EventGame) -> None:
        self._require_owned(event, game)
        if game.status != GameStatus.NOT_STARTED:
            raise InvalidTransitionError("game", game.status.value, "push game to later")
        game.order_index = event.max_order_index() + 1
        event.touch()

    def remove_game_from_event(self, event: Event, game: EventGame) -> None:
        self._require_owned(event, game)
        if game.status != GameStatus.NOT_STARTED:
            raise InvalidTransitionError("game", game.status.value, "remove game")
        event.games = [g for g in event.games if g.id != game.id]
        if event.current_game_id == game.id:
            event.current_game_id = None
        event.touch()
        logger.info("game_removed event=%s game=%s", event.id, game.id)

    def skip_to_next_game(
        self,
        event: Event,
        game: EventGame,
        keep_player_ids: list[str] | None = None,
    ) -> EventGame | None:
        """Abandon ``game`` and start another, carrying the kept players over.

        A game with no finalized round goes back to not-started at the end of
        the queue; otherwise it is completed. When no other game is queued, an
        unplayed game restarts with a fresh round 0. Returns the game now in
        progress, or None when nothing is left and the event completes.
        """
        self._require_participants(event)
        self._require_owned(event, game)
        played = any(r.is_locked for r in game.rounds)
        abandoned_status = GameStatus.COMPLETED if played else GameStatus.NOT_STARTED
        check_game_transition(game, abandoned_status)

        remaining = [
            g for g in event.games_with_status(GameStatus.NOT_STARTED) if g.id != game.id
        ]
        next_game = self._pick_from(event, remaining)
        if next_game is None and not played:
            next_game = game
        target_round: Round | None = None
        teams: list[RoundTeam] = []
        if next_game is None:
            check_event_transition(event, EventStatus.COMPLETED)
        else:
            self._check_startable(event, next_game)
            if next_game is game:
                target_round = Round(event_game_id=game.id, round_index=0)
            else:
                target_round = next_game.current_round() or Round(
                    event_game_id=next_game.id, round_index=next_game.next_round_index()
                )
            teams = self.fairness.generate_teams(
                target_round, event, preferred_player_ids=list(keep_player_ids or [])
            )

        if not played:
            game.rounds = []
            game.order_index = event.max_order_index() + 1
        _set_game_status(game, abandoned_status)
        if event.current_game_id == game.id:
            event.current_game_id = None

        if target_round is None:
            _set_event_status(event, EventStatus.COMPLETED)
        else:
            _set_event_status(event, EventStatus.ACTIVE)
            event.current_game_id = next_game.id
            _set_game_status(next_game, GameStatus.IN_PROGRESS)
            if next_game.get_round(target_round.id) is None:
                next_game.rounds.append(target_round)
            target_round.teams = teams
        event.touch()
        logger.info(
            "game_skipped event=%s game=%s next=%s kept=%d",
            event.id,
            game.id,
            next_game.id if next_game else None,
            len(keep_player_ids or []),
        )
        return next_game

    # --- Rounds ---

    def generate_teams(self, event: Event, round_: Round) -> list[RoundTeam]:
        """Compute and commit a fresh partition for an open round."""
        self._require_unlocked(round_)
        teams = self.fairness.generate_teams(round_, event)
        round_.teams = teams
        event.touch()
        return teams

    def generate_teams_with_preferred_players(
        self,
        event: Event,
        round_: Round,
        preferred_player_ids: list[str],
    ) -> list[RoundTeam]:
        self._require_unlocked(round_)
        teams = self.fairness.generate_teams(
            round_, event, preferred_player_ids=preferred_player_ids
        )
        round_.teams = teams
        event.touch()
        return teams

    def swap_player(
        self,
        event: Event,
        round_: Round,
        outgoing_id: str,
        incoming_id: str,
    ) -> bool:
        """Put ``incoming_id`` in ``outgoing_id``'s seat.

        If the incoming person already plays in another team of this round,
        the two trade places. Returns False (and changes nothing) when
        ``outgoing_id`` is not in the round.
        """
        self._require_unlocked(round_)
        outgoing_team = next(
            (t for t in round_.teams if outgoing_id in t.member_person_ids), None
        )
        if outgoing_team is None:
            return False

        for team in round_.teams:
            team.member_person_ids = [
                incoming_id if pid == outgoing_id else outgoing_id if pid == incoming_id else pid
                for pid in team.member_person_ids
            ]
        event.touch()
        return True

    def finalize_round(
        self,
        event: Event,
        round_: Round,
        winner_team_id: str | None = None,
        second_team_id: str | None = None,
        third_team_id: str | None = None,
    ) -> None:
        """Lock the round and record its outcome.

        With a winner, members of the winning/second/third teams get
        placements 1/2/3. Without one the round is a tie and no placements are
        derived.
        """
        self._require_unlocked(round_)
        ranked: list[tuple[int, RoundTeam]] = []
        for rank, team_id in enumerate((winner_team_id, second_team_id, third_team_id), start=1):
            if team_id is None:
                continue
            team = round_.get_team(team_id)
            if team is None:
                raise UnknownTeamError(team_id)
            if any(placed.id == team_id for _, placed in ranked):
                raise DuplicateTeamError(team_id)
            ranked.append((rank, team))

        round_.completed_at = datetime.now(UTC)
        if winner_team_id is None:
            round_.result_type = RoundResultType.TIE
            round_.winning_team_id = None
        else:
            round_.result_type = RoundResultType.WIN
            round_.winning_team_id = winner_team_id
            placements = dict(round_.placements)
            for rank, team in ranked:
                for pid in team.member_person_ids:
                    placements[pid] = rank
            round_.placements = placements
        event.touch()
        logger.info(
            "round_finalized round=%s result=%s winner=%s",
            round_.id,
            round_.result_type.value,
            round_.winning_team_id,
        )

    # --- Helpers ---

    def _pick_from(self, event: Event, remaining: list[EventGame]) -> EventGame | None:
        if not remaining:
            return None

        last_group = None
        completed = event.games_with_status(GameStatus.COMPLETED)
        if completed:
            last = self.templates.get(completed[-1].template_id)
            last_group = last.group if last is not None else None

        if last_group is not None:
            different = [g for g in remaining if self._group_of(g) != last_group]
            if different:
                return self.rng.choice(different)
        return self.rng.choice(remaining)

    def _group_of(self, game: EventGame) -> str | None:
        template = self.templates.get(game.template_id)
        return template.group if template is not None else None

    def _check_startable(self, event: Event, game: EventGame) -> None:
        self._require_owned(event, game)
        template = self.templates.get(game.template_id)
        if template is None:
            raise MissingTemplateError(game.template_id)
        rounds_per_game = game.settings(template).rounds_per_game
        if rounds_per_game < 1:
            raise InvalidRoundCountError(rounds_per_game)
        check_event_transition(event, EventStatus.ACTIVE)
        check_game_transition(game, GameStatus.IN_PROGRESS)

    def _apply_start(self, event: Event, game: EventGame) -> Round:
        event.current_game_id = game.id
        _set_game_status(game, GameStatus.IN_PROGRESS)
        if not game.rounds:
            game.rounds.append(Round(event_game_id=game.id, round_index=0))
            logger.info("round_created game=%s round_index=0", game.id)
        return game.current_round() or max(game.rounds, key=lambda r: r.round_index)

    @staticmethod
    def _require_participants(event: Event) -> None:
        if not event.participant_ids:
            raise NoParticipantsError()

    @staticmethod
    def _require_owned(event: Event, game: EventGame) -> None:
        if event.get_game(game.id) is None:
            raise InvalidTransitionError("game", "not part of this event", "use game")

    @staticmethod
    def _require_unlocked(round_: Round) -> None:
        if round_.is_locked:
            raise LockedRoundError(round_.id)
