"""FastAPI application factory."""

import logging
import random
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from hearthgames.api.events import router as events_router
from hearthgames.api.roster import people_router, stats_router, templates_router
from hearthgames.config import Settings
from hearthgames.core.errors import HearthGamesError, NotFoundError
from hearthgames.db.engine import create_engine, init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: create engine and tables. Shutdown: dispose the engine."""
    settings: Settings = app.state.settings
    engine = create_engine(settings.database_url)
    await init_db(engine)
    app.state.engine = engine
    logger.info("app_started env=%s", settings.hearthgames_env)

    yield

    await engine.dispose()
    logger.info("app_stopped")


async def domain_error_handler(request: Request, exc: HearthGamesError) -> JSONResponse:
    """Render domain errors as ``{"error": {"code", "message"}}``."""
    status = 404 if isinstance(exc, NotFoundError) else 409
    return JSONResponse(
        status_code=status,
        content={"error": {"code": exc.code, "message": str(exc)}},
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the Hearth Games FastAPI application."""
    settings = settings or Settings()

    logging.basicConfig(
        level=getattr(logging, settings.hearthgames_log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Hearth Games",
        version="0.1.0",
        description="Party game host: event lifecycle and fair team generation",
        docs_url="/docs" if settings.hearthgames_env != "production" else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.rng = random.Random(settings.hearthgames_search_seed)
    app.add_exception_handler(HearthGamesError, domain_error_handler)

    app.include_router(people_router)
    app.include_router(templates_router)
    app.include_router(events_router)
    app.include_router(stats_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok", "env": settings.hearthgames_env}

    return app


app = create_app()
