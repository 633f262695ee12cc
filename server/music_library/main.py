import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from music_library.config import VERSION, Settings, settings
from music_library.api import songs
from music_library.db import create_engine, init_schema
from music_library.errors import (
    AlreadyExistsError,
    EditConflictError,
    FailedValidationError,
    RecordNotFoundError,
    SongInfoError,
)
from music_library.logging_utils import setup_logging
from music_library.services.song_info_service import SongInfoService

logger = logging.getLogger(__name__)

_SERVER_ERROR = "the server encountered a problem and could not process your request"


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RecordNotFoundError)
    async def not_found(_request: Request, exc: RecordNotFoundError) -> JSONResponse:
        logger.warning("Song not found: %s", exc)
        return JSONResponse(status_code=404, content={"detail": "the requested resource could not be found"})

    @app.exception_handler(FailedValidationError)
    async def failed_validation(_request: Request, exc: FailedValidationError) -> JSONResponse:
        logger.warning("Validation has not passed: %s", exc.errors)
        return JSONResponse(status_code=422, content={"detail": exc.errors})

    @app.exception_handler(AlreadyExistsError)
    async def already_exists(_request: Request, exc: AlreadyExistsError) -> JSONResponse:
        logger.warning("Song is already in database: %s", exc)
        return JSONResponse(status_code=409, content={"detail": {"song": "a song of this group already exists"}})

    @app.exception_handler(EditConflictError)
    async def edit_conflict(_request: Request, exc: EditConflictError) -> JSONResponse:
        logger.warning("Edit conflict: %s", exc)
        return JSONResponse(
            status_code=409,
            content={"detail": "unable to update the record due to an edit conflict, please try again"},
        )

    @app.exception_handler(SongInfoError)
    async def song_info_failed(_request: Request, exc: SongInfoError) -> JSONResponse:
        logger.error("Failed to fetch song details: %s", exc)
        return JSONResponse(status_code=502, content={"detail": "failed to fetch song details"})

    @app.exception_handler(TimeoutError)
    @app.exception_handler(SQLAlchemyError)
    async def storage_failed(_request: Request, exc: Exception) -> JSONResponse:
        logger.error("Storage operation failed", exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": _SERVER_ERROR})


def create_app(config: Settings | None = None) -> FastAPI:
    config = config or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        setup_logging(config.log_level, config.log_json)

        # SQLite needs the database directory to exist before connecting
        if config.sqlite_path is not None:
            config.sqlite_path.parent.mkdir(parents=True, exist_ok=True)

        engine = create_engine(config.database_url, echo=config.db_echo)
        await init_schema(engine)
        app.state.engine = engine
        app.state.song_info = SongInfoService(config.music_info_api_url, config.music_info_timeout_seconds)
        logger.info("Music Library %s started (%s)", VERSION, config.environment)
        try:
            yield
        finally:
            await app.state.song_info.close()
            await engine.dispose()

    app = FastAPI(
        title="Music Library API",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.config = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_error_handlers(app)

    # API routes
    app.include_router(songs.router, prefix="/v1", tags=["songs"])

    @app.get("/v1/healthcheck")
    async def health_check() -> dict:
        return {
            "status": "available",
            "system_info": {"environment": config.environment, "version": VERSION},
        }

    return app


app = create_app()
