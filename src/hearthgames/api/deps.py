"""FastAPI dependency injection for database sessions, repository and service."""

from __future__ import annotations

import random
from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from hearthgames.config import Settings
from hearthgames.core.service import EventService
from hearthgames.db.engine import create_session_factory
from hearthgames.db.repository import Repository


async def get_engine(request: Request) -> AsyncEngine:
    """Get the database engine from app state."""
    return request.app.state.engine


async def get_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_rng(request: Request) -> random.Random:
    """App-wide random source, seeded once from settings."""
    return request.app.state.rng


async def get_session(
    engine: Annotated[AsyncEngine, Depends(get_engine)],
) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async session."""
    factory = create_session_factory(engine)
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_repo(session: Annotated[AsyncSession, Depends(get_session)]) -> Repository:
    """Get a repository instance bound to the current session."""
    return Repository(session)


RepoDep = Annotated[Repository, Depends(get_repo)]


async def get_service(
    repo: RepoDep,
    settings: Annotated[Settings, Depends(get_settings)],
    rng: Annotated[random.Random, Depends(get_rng)],
) -> EventService:
    """Event service sharing the request's session."""
    return EventService.from_settings(repo, settings, rng=rng)


ServiceDep = Annotated[EventService, Depends(get_service)]
