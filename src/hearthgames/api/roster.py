"""Roster and catalog endpoints: people, spouse links, game templates."""

from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel, Field

from hearthgames.api.deps import RepoDep, ServiceDep
from hearthgames.core.errors import NotFoundError
from hearthgames.db.repository import person_from_row, template_from_row
from hearthgames.models.catalog import TeamType

people_router = APIRouter(prefix="/api/people", tags=["people"])
templates_router = APIRouter(prefix="/api/templates", tags=["templates"])
stats_router = APIRouter(prefix="/api/stats", tags=["stats"])


class CreatePersonRequest(BaseModel):
    display_name: str = Field(min_length=1, max_length=100)
    sex: str | None = None
    age: int | None = Field(default=None, ge=0)
    weight: int | None = Field(default=None, ge=0)
    athletic_ability: int | None = Field(default=None, ge=0)
    height: str | None = None
    is_active: bool = True


class SpouseRequest(BaseModel):
    spouse_id: str | None = None


class CreateTemplateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    group_name: str | None = None
    default_team_count: int = 2
    default_players_per_team: int = 2
    default_rounds_per_game: int = 1
    default_team_type: TeamType = TeamType.ANY
    instructions: str | None = None


@people_router.post("", status_code=201)
async def create_person(body: CreatePersonRequest, repo: RepoDep) -> dict:
    row = await repo.create_person(**body.model_dump())
    return {"data": person_from_row(row).model_dump(mode="json")}


@people_router.get("")
async def list_people(repo: RepoDep) -> dict:
    rows = await repo.get_all_people()
    return {"data": [person_from_row(r).model_dump(mode="json") for r in rows]}


@people_router.get("/{person_id}")
async def get_person(person_id: str, repo: RepoDep) -> dict:
    row = await repo.get_person(person_id)
    if row is None:
        raise NotFoundError("Person", person_id)
    return {"data": person_from_row(row).model_dump(mode="json")}


@people_router.put("/{person_id}/spouse")
async def set_spouse(person_id: str, body: SpouseRequest, repo: RepoDep) -> dict:
    """Link two people as mutual spouses, or unlink with ``spouse_id: null``."""
    if await repo.get_person(person_id) is None:
        raise NotFoundError("Person", person_id)
    if body.spouse_id is not None and await repo.get_person(body.spouse_id) is None:
        raise NotFoundError("Person", body.spouse_id)
    await repo.link_spouses(person_id, body.spouse_id)
    row = await repo.get_person(person_id)
    return {"data": person_from_row(row).model_dump(mode="json")}


@templates_router.post("", status_code=201)
async def create_template(body: CreateTemplateRequest, repo: RepoDep) -> dict:
    row = await repo.create_template(**body.model_dump())
    return {"data": template_from_row(row).model_dump(mode="json")}


@templates_router.get("")
async def list_templates(repo: RepoDep) -> dict:
    rows = await repo.get_all_templates()
    return {"data": [template_from_row(r).model_dump(mode="json") for r in rows]}


@stats_router.get("")
async def overall_stats(service: ServiceDep) -> dict:
    """Leaderboard across every event."""
    stats = await service.player_stats()
    return {
        "data": [s.model_dump(mode="json") | {"total_points": s.total_points} for s in stats],
    }
