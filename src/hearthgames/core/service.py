"""Async service layer: one store session, one controller call, one save.

Each public method loads the Event aggregate plus catalog and roster
snapshots, runs a single ``EventController`` operation, and writes the
aggregate back only if the operation succeeded. Combined with
``get_session`` (commit on success, rollback on error) every operation either
fully applies and persists or leaves the store untouched.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from typing import TYPE_CHECKING, TypeVar

from hearthgames.core.errors import HearthGamesError, NotFoundError
from hearthgames.core.fairness import DEFAULT_SEARCH_ITERATIONS
from hearthgames.core.lifecycle import EventController
from hearthgames.core.standings import compute_player_stats
from hearthgames.models.event import Event, EventGame, Round, RoundTeam
from hearthgames.models.stats import PlayerStats

if TYPE_CHECKING:
    from hearthgames.config import Settings
    from hearthgames.db.repository import Repository

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EventService:
    """Persistence-aware facade over ``EventController``."""

    def __init__(
        self,
        repo: Repository,
        rng: random.Random | None = None,
        search_iterations: int = DEFAULT_SEARCH_ITERATIONS,
    ) -> None:
        self.repo = repo
        self.rng = rng or random.Random()
        self.search_iterations = search_iterations

    @classmethod
    def from_settings(
        cls,
        repo: Repository,
        settings: Settings,
        rng: random.Random | None = None,
    ) -> EventService:
        """Build a service; pass a long-lived ``rng`` to continue one seeded sequence."""
        return cls(
            repo,
            rng=rng or random.Random(settings.hearthgames_search_seed),
            search_iterations=settings.hearthgames_search_iterations,
        )

    # --- Plumbing ---

    async def _controller(self, event: Event) -> EventController:
        catalog = await self.repo.load_catalog()
        roster = await self.repo.load_roster(event.participant_ids)
        return EventController(
            catalog, roster, rng=self.rng, search_iterations=self.search_iterations
        )

    async def get_event(self, event_id: str) -> Event:
        event = await self.repo.load_event(event_id)
        if event is None:
            raise NotFoundError("Event", event_id)
        return event

    async def _run(
        self,
        event_id: str,
        operation: str,
        fn: Callable[[EventController, Event], T],
    ) -> tuple[Event, T]:
        event = await self.get_event(event_id)
        controller = await self._controller(event)
        try:
            result = fn(controller, event)
        except HearthGamesError as exc:
            logger.warning(
                "operation_rejected op=%s event=%s code=%s detail=%s",
                operation,
                event_id,
                exc.code,
                exc,
            )
            raise
        await self.repo.save_event(event)
        return event, result

    @staticmethod
    def _game(event: Event, game_id: str) -> EventGame:
        game = event.get_game(game_id)
        if game is None:
            raise NotFoundError("EventGame", game_id)
        return game

    @staticmethod
    def _round(event: Event, round_id: str) -> Round:
        found = event.find_round(round_id)
        if found is None:
            raise NotFoundError("Round", round_id)
        return found[1]

    # --- Events ---

    async def create_event(self, name: str, participant_ids: list[str] | None = None) -> Event:
        event = await self.repo.create_event(name, list(dict.fromkeys(participant_ids or [])))
        logger.info("event_created event=%s name=%s", event.id, name)
        return event

    async def set_participants(self, event_id: str, participant_ids: list[str]) -> Event:
        event, _ = await self._run(
            event_id, "set_participants", lambda c, e: c.set_participants(e, participant_ids)
        )
        return event

    async def add_game(self, event_id: str, template_id: str) -> tuple[Event, EventGame | None]:
        return await self._run(event_id, "add_game", lambda c, e: c.add_game(e, template_id))

    async def import_catalog_games(self, event_id: str) -> tuple[Event, list[EventGame]]:
        return await self._run(
            event_id, "import_catalog_games", lambda c, e: c.import_catalog_games(e)
        )

    async def start_event(self, event_id: str) -> Event:
        event, _ = await self._run(event_id, "start_event", lambda c, e: c.start_event(e))
        return event

    async def pause_event(self, event_id: str) -> Event:
        event, _ = await self._run(event_id, "pause_event", lambda c, e: c.pause_event(e))
        return event

    async def resume_event(self, event_id: str) -> Event:
        event, _ = await self._run(event_id, "resume_event", lambda c, e: c.resume_event(e))
        return event

    async def reset_event(self, event_id: str) -> Event:
        event, _ = await self._run(event_id, "reset_event", lambda c, e: c.reset_event(e))
        return event

    async def delete_event(self, event_id: str) -> None:
        if not await self.repo.delete_event(event_id):
            raise NotFoundError("Event", event_id)
        logger.info("event_deleted event=%s", event_id)

    # --- Games ---

    async def start_game(self, event_id: str, game_id: str) -> tuple[Event, Round]:
        return await self._run(
            event_id, "start", lambda c, e: c.start(e, self._game(e, game_id))
        )

    async def create_next_round(self, event_id: str, game_id: str) -> tuple[Event, Round]:
        return await self._run(
            event_id,
            "create_next_round",
            lambda c, e: c.create_next_round(e, self._game(e, game_id)),
        )

    async def complete_game(self, event_id: str, game_id: str) -> Event:
        event, _ = await self._run(
            event_id, "complete_game", lambda c, e: c.complete_game(e, self._game(e, game_id))
        )
        return event

    async def pick_next_game(self, event_id: str) -> EventGame | None:
        """Suggest a next game without changing anything."""
        event = await self.get_event(event_id)
        controller = await self._controller(event)
        return controller.pick_next_game_random(event)

    async def push_game_to_later(self, event_id: str, game_id: str) -> Event:
        event, _ = await self._run(
            event_id,
            "push_game_to_later",
            lambda c, e: c.push_game_to_later(e, self._game(e, game_id)),
        )
        return event

    async def remove_game(self, event_id: str, game_id: str) -> Event:
        event, _ = await self._run(
            event_id,
            "remove_game_from_event",
            lambda c, e: c.remove_game_from_event(e, self._game(e, game_id)),
        )
        return event

    async def skip_to_next_game(
        self,
        event_id: str,
        game_id: str,
        keep_player_ids: list[str] | None = None,
    ) -> tuple[Event, EventGame | None]:
        return await self._run(
            event_id,
            "skip_to_next_game",
            lambda c, e: c.skip_to_next_game(e, self._game(e, game_id), keep_player_ids),
        )

    # --- Rounds ---

    async def generate_teams(
        self,
        event_id: str,
        round_id: str,
        preferred_player_ids: list[str] | None = None,
    ) -> tuple[Event, list[RoundTeam]]:
        def op(c: EventController, e: Event) -> list[RoundTeam]:
            round_ = self._round(e, round_id)
            if preferred_player_ids is None:
                return c.generate_teams(e, round_)
            return c.generate_teams_with_preferred_players(e, round_, preferred_player_ids)

        return await self._run(event_id, "generate_teams", op)

    async def swap_player(
        self,
        event_id: str,
        round_id: str,
        outgoing_id: str,
        incoming_id: str,
    ) -> tuple[Event, bool]:
        return await self._run(
            event_id,
            "swap_player",
            lambda c, e: c.swap_player(e, self._round(e, round_id), outgoing_id, incoming_id),
        )

    async def finalize_round(
        self,
        event_id: str,
        round_id: str,
        winner_team_id: str | None = None,
        second_team_id: str | None = None,
        third_team_id: str | None = None,
    ) -> Event:
        event, _ = await self._run(
            event_id,
            "finalize_round",
            lambda c, e: c.finalize_round(
                e, self._round(e, round_id), winner_team_id, second_team_id, third_team_id
            ),
        )
        return event

    # --- Stats ---

    async def player_stats(self, event_id: str | None = None) -> list[PlayerStats]:
        """Leaderboard for one event, or across every event when ``event_id`` is None."""
        if event_id is None:
            events = await self.repo.load_events()
        else:
            events = [await self.get_event(event_id)]
        roster = await self.repo.load_roster()
        return compute_player_stats(events, roster.all())
