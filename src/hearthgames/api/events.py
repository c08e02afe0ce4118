"""Event API endpoints: lifecycle, games, rounds and the leaderboard."""

from __future__ import annotations

from fastapi import APIRouter, Response
from pydantic import BaseModel, Field

from hearthgames.api.deps import ServiceDep
from hearthgames.models.event import Event

router = APIRouter(prefix="/api/events", tags=["events"])


class CreateEventRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    participant_ids: list[str] = Field(default_factory=list)


class ParticipantsRequest(BaseModel):
    participant_ids: list[str]


class AddGameRequest(BaseModel):
    template_id: str


class SkipGameRequest(BaseModel):
    keep_player_ids: list[str] = Field(default_factory=list)


class GenerateTeamsRequest(BaseModel):
    preferred_player_ids: list[str] | None = None


class SwapPlayerRequest(BaseModel):
    outgoing_id: str
    incoming_id: str


class FinalizeRoundRequest(BaseModel):
    """No ``winner_team_id`` means the round is recorded as a tie."""

    winner_team_id: str | None = None
    second_team_id: str | None = None
    third_team_id: str | None = None


def _event(event: Event) -> dict:
    return event.model_dump(mode="json")


# --- Events ---


@router.post("", status_code=201)
async def create_event(body: CreateEventRequest, service: ServiceDep) -> dict:
    event = await service.create_event(body.name, body.participant_ids)
    return {"data": _event(event)}


@router.get("")
async def list_events(service: ServiceDep) -> dict:
    events = await service.repo.load_events()
    return {
        "data": [
            {
                "id": e.id,
                "name": e.name,
                "status": e.status,
                "participant_count": len(e.participant_ids),
                "game_count": len(e.games),
                "current_game_id": e.current_game_id,
            }
            for e in events
        ],
    }


@router.get("/{event_id}")
async def get_event(event_id: str, service: ServiceDep) -> dict:
    """Full event aggregate with games and rounds."""
    return {"data": _event(await service.get_event(event_id))}


@router.delete("/{event_id}", status_code=204)
async def delete_event(event_id: str, service: ServiceDep) -> Response:
    await service.delete_event(event_id)
    return Response(status_code=204)


@router.put("/{event_id}/participants")
async def set_participants(event_id: str, body: ParticipantsRequest, service: ServiceDep) -> dict:
    event = await service.set_participants(event_id, body.participant_ids)
    return {"data": _event(event)}


@router.post("/{event_id}/start")
async def start_event(event_id: str, service: ServiceDep) -> dict:
    return {"data": _event(await service.start_event(event_id))}


@router.post("/{event_id}/pause")
async def pause_event(event_id: str, service: ServiceDep) -> dict:
    return {"data": _event(await service.pause_event(event_id))}


@router.post("/{event_id}/resume")
async def resume_event(event_id: str, service: ServiceDep) -> dict:
    return {"data": _event(await service.resume_event(event_id))}


@router.post("/{event_id}/reset")
async def reset_event(event_id: str, service: ServiceDep) -> dict:
    return {"data": _event(await service.reset_event(event_id))}


@router.get("/{event_id}/stats")
async def event_stats(event_id: str, service: ServiceDep) -> dict:
    """Leaderboard for a single event."""
    stats = await service.player_stats(event_id)
    return {
        "data": [s.model_dump(mode="json") | {"total_points": s.total_points} for s in stats],
    }


# --- Games ---


@router.post("/{event_id}/games", status_code=201)
async def add_game(event_id: str, body: AddGameRequest, service: ServiceDep) -> dict:
    """Schedule a template. ``game`` is null when it was already scheduled."""
    event, game = await service.add_game(event_id, body.template_id)
    return {
        "data": {
            "event": _event(event),
            "game": game.model_dump(mode="json") if game else None,
        },
    }


@router.post("/{event_id}/games/import")
async def import_catalog_games(event_id: str, service: ServiceDep) -> dict:
    event, added = await service.import_catalog_games(event_id)
    return {"data": {"event": _event(event), "added": [g.id for g in added]}}


@router.get("/{event_id}/games/next")
async def pick_next_game(event_id: str, service: ServiceDep) -> dict:
    """Suggested next game; nothing is changed."""
    game = await service.pick_next_game(event_id)
    return {"data": game.model_dump(mode="json") if game else None}


@router.post("/{event_id}/games/{game_id}/start")
async def start_game(event_id: str, game_id: str, service: ServiceDep) -> dict:
    event, round_ = await service.start_game(event_id, game_id)
    return {"data": {"event": _event(event), "round": round_.model_dump(mode="json")}}


@router.post("/{event_id}/games/{game_id}/rounds", status_code=201)
async def create_next_round(event_id: str, game_id: str, service: ServiceDep) -> dict:
    event, round_ = await service.create_next_round(event_id, game_id)
    return {"data": {"event": _event(event), "round": round_.model_dump(mode="json")}}


@router.post("/{event_id}/games/{game_id}/complete")
async def complete_game(event_id: str, game_id: str, service: ServiceDep) -> dict:
    return {"data": _event(await service.complete_game(event_id, game_id))}


@router.post("/{event_id}/games/{game_id}/push")
async def push_game_to_later(event_id: str, game_id: str, service: ServiceDep) -> dict:
    return {"data": _event(await service.push_game_to_later(event_id, game_id))}


@router.post("/{event_id}/games/{game_id}/skip")
async def skip_to_next_game(
    event_id: str,
    game_id: str,
    service: ServiceDep,
    body: SkipGameRequest | None = None,
) -> dict:
    keep = body.keep_player_ids if body else []
    event, next_game = await service.skip_to_next_game(event_id, game_id, keep)
    return {
        "data": {
            "event": _event(event),
            "next_game_id": next_game.id if next_game else None,
        },
    }


@router.delete("/{event_id}/games/{game_id}")
async def remove_game(event_id: str, game_id: str, service: ServiceDep) -> dict:
    return {"data": _event(await service.remove_game(event_id, game_id))}


# --- Rounds ---


@router.post("/{event_id}/rounds/{round_id}/teams")
async def generate_teams(
    event_id: str,
    round_id: str,
    service: ServiceDep,
    body: GenerateTeamsRequest | None = None,
) -> dict:
    preferred = body.preferred_player_ids if body else None
    _, teams = await service.generate_teams(event_id, round_id, preferred)
    return {"data": [t.model_dump(mode="json") for t in teams]}


@router.post("/{event_id}/rounds/{round_id}/swap")
async def swap_player(
    event_id: str, round_id: str, body: SwapPlayerRequest, service: ServiceDep
) -> dict:
    event, swapped = await service.swap_player(
        event_id, round_id, body.outgoing_id, body.incoming_id
    )
    found = event.find_round(round_id)
    teams = found[1].teams if found else []
    return {"data": {"swapped": swapped, "teams": [t.model_dump(mode="json") for t in teams]}}


@router.post("/{event_id}/rounds/{round_id}/finalize")
async def finalize_round(
    event_id: str, round_id: str, body: FinalizeRoundRequest, service: ServiceDep
) -> dict:
    event = await service.finalize_round(
        event_id,
        round_id,
        body.winner_team_id,
        body.second_team_id,
        body.third_team_id,
    )
    return {"data": _event(event)}
