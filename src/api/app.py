"""
FastAPI application: exposes the running match to the renderer and the command center controls.

Run with an ASGI server, e.g. `uvicorn src.api.app:create_app --factory`.
"""

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator
from typing import Optional
from uuid import UUID

from fastapi import FastAPI, HTTPException

from src.api.models import (
    ArchivedGameResponse,
    GameStateResponse,
    ReplayResponse,
    StrategyRequest,
)
from src.core.config import Settings, configure_logging
from src.core.exceptions import RepositoryError
from src.db.database import create_db_engine, session_factory
from src.db.sql_repository import SQLGameRepository
from src.services.match_service import MatchService
from src.services.remote import remote_client

logger = logging.getLogger(__name__)


def build_service(settings: Settings) -> MatchService:
    """Wire the service to its SQL archive and remote collaborator"""
    engine = create_db_engine(settings.database_url)
    session = session_factory(engine)()
    return MatchService(
        repository=SQLGameRepository(session),
        remote=remote_client(settings),
        settings=settings,
    )


def create_app(
    service: Optional[MatchService] = None, settings: Optional[Settings] = None
) -> FastAPI:
    settings = settings or (service.settings if service else Settings.from_env())
    configure_logging(settings.log_level)
    match = service or build_service(settings)

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        loop_task: Optional[asyncio.Task] = None
        if settings.autoplay:
            loop_task = asyncio.create_task(match.run(settings.move_delay))
            logger.info("Autoplay started, %.2fs between half-moves", settings.move_delay)
        try:
            yield
        finally:
            if loop_task is not None:
                loop_task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await loop_task
            await match.aclose()

    app = FastAPI(title="Blitz Napoleonic", lifespan=lifespan)
    app.state.match = match

    # NOTE: all handlers are async so they run on the event loop, the single writer of the match state.

    # --- GAME ---
    @app.get("/game", response_model=GameStateResponse)
    async def get_game() -> GameStateResponse:
        return match.game_response()

    @app.post("/game/step", response_model=GameStateResponse)
    async def step() -> GameStateResponse:
        """Run one decision cycle right now (no-op if paused, over, or a cycle is running)."""
        await match.play_turn()
        return match.game_response()

    @app.post("/game/pause", response_model=GameStateResponse)
    async def pause() -> GameStateResponse:
        match.pause()
        return match.game_response()

    @app.post("/game/resume", response_model=GameStateResponse)
    async def resume() -> GameStateResponse:
        match.resume()
        return match.game_response()

    @app.post("/game/restart", response_model=GameStateResponse)
    async def restart() -> GameStateResponse:
        match.restart()
        return match.game_response()

    @app.put("/game/strategy", response_model=GameStateResponse)
    async def set_strategy(request: StrategyRequest) -> GameStateResponse:
        match.set_strategy(request.side, request.strategy)
        return match.game_response()

    # --- ARCHIVE ---
    @app.get("/games", response_model=list[ArchivedGameResponse])
    async def list_games() -> list[ArchivedGameResponse]:
        return match.archived_games()

    @app.get("/games/{game_id}", response_model=ArchivedGameResponse)
    async def get_archived_game(game_id: UUID) -> ArchivedGameResponse:
        try:
            return match.archived_game(game_id)
        except RepositoryError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc

    @app.get("/games/{game_id}/replay", response_model=ReplayResponse)
    async def replay_archived_game(game_id: UUID) -> ReplayResponse:
        """Rebuild the final position of an archived game from its moves"""
        try:
            return match.replay_response(game_id)
        except RepositoryError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc

    @app.delete("/games/{game_id}", response_model=ArchivedGameResponse)
    async def delete_archived_game(game_id: UUID) -> ArchivedGameResponse:
        try:
            return match.delete_archived_game(game_id)
        except RepositoryError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc

    return app
