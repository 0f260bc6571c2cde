"""FastAPI application factory."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.podcast_studio.api.routes import create_router
from src.podcast_studio.config import Settings
from src.podcast_studio.services.orchestrator import PodcastOrchestrator

logger = structlog.get_logger()


def _format_validation_errors(exc: RequestValidationError) -> str:
    messages = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        messages.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return ", ".join(messages)


def create_app(
    settings: Settings | None = None, orchestrator: PodcastOrchestrator | None = None
) -> FastAPI:
    """Create and configure the FastAPI application."""
    if settings is None:
        settings = Settings()
    if orchestrator is None:
        orchestrator = PodcastOrchestrator(settings)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        logger.info("Starting Podcast Studio service")
        yield
        await orchestrator.shutdown()
        logger.info("Shutting down Podcast Studio")

    app = FastAPI(
        title="Podcast Studio",
        description="Two-host podcast generation: script -> speech -> MP3",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(_request: Request, exc: RequestValidationError):
        invalid_json = any(err.get("type") == "json_invalid" for err in exc.errors())
        if invalid_json:
            return JSONResponse(
                status_code=400, content={"status": "error", "message": "Invalid JSON body"}
            )
        return JSONResponse(
            status_code=400,
            content={
                "status": "error",
                "message": "Validation failed",
                "error": _format_validation_errors(exc),
            },
        )

    app.state.settings = settings
    app.state.orchestrator = orchestrator
    app.include_router(create_router())

    return app
