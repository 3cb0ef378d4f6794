"""FastAPI application wiring for Goblin War.

Domain errors raised by the services are translated to HTTP responses here,
so routes only deal with the happy path.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from goblinwar.api import routes
from goblinwar.api.runtime import ApiState, build_state
from goblinwar.config import get_settings
from goblinwar.errors import (
    ArmyNotFoundError,
    BattleConflictError,
    DuplicateAttemptError,
    PersistenceError,
)

logger = logging.getLogger(__name__)


def _error(status_code: int, detail: object) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": detail})


async def _army_not_found(request: Request, exc: ArmyNotFoundError) -> JSONResponse:
    return _error(status.HTTP_404_NOT_FOUND, "player army not found")


async def _duplicate_attempt(request: Request, exc: DuplicateAttemptError) -> JSONResponse:
    record = routes.BattleRecordPayload.from_record(exc.record)
    return _error(
        status.HTTP_409_CONFLICT,
        {
            "message": "battle attempt already resolved",
            "battleResult": record.model_dump(mode="json", by_alias=True),
        },
    )


async def _conflict(request: Request, exc: BattleConflictError) -> JSONResponse:
    return _error(status.HTTP_409_CONFLICT, str(exc))


async def _persistence_failure(request: Request, exc: PersistenceError) -> JSONResponse:
    logger.error("%s %s failed in storage: %s", request.method, request.url.path, exc)
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to simulate battle")


async def _invalid_value(request: Request, exc: ValueError) -> JSONResponse:
    return _error(status.HTTP_400_BAD_REQUEST, str(exc))


def create_app(*, state_factory: Callable[[], ApiState] = build_state) -> FastAPI:
    """Instantiate the FastAPI application with routing, error mapping and lifecycle hooks."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        state = state_factory()
        app.state.api_state = state
        try:
            yield
        finally:
            await state.shutdown()

    app = FastAPI(title="Goblin War API", version="0.1.0", lifespan=lifespan)
    settings = get_settings()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(ArmyNotFoundError, _army_not_found)
    app.add_exception_handler(DuplicateAttemptError, _duplicate_attempt)
    app.add_exception_handler(BattleConflictError, _conflict)
    app.add_exception_handler(PersistenceError, _persistence_failure)
    app.add_exception_handler(ValueError, _invalid_value)
    app.include_router(routes.router)
    return app


app = create_app()
