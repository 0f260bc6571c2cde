"""FastAPI route handlers for Podcast Studio."""

import re
from typing import Any

import structlog
from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse

from src.podcast_studio.models.podcast import (
    JobStatus,
    JobStatusResponse,
    PodcastRequest,
    SubmitResponse,
)

logger = structlog.get_logger()


def download_filename(topic: str) -> str:
    """``podcast-<slug>.mp3`` from the first 30 characters of the topic."""
    slug = re.sub(r"[^a-zA-Z0-9]", "-", topic[:30])
    return f"podcast-{slug}.mp3"


def create_router() -> APIRouter:
    """Create the API router with all endpoints."""
    router = APIRouter()

    def _get_orchestrator(request: Request):
        return request.app.state.orchestrator

    @router.post("/api/generate-podcast", response_model=SubmitResponse)
    async def generate_podcast(request: Request, body: PodcastRequest) -> SubmitResponse:
        """Accept a podcast request and start generation in the background."""
        orchestrator = _get_orchestrator(request)
        job_id = orchestrator.submit(body)
        return SubmitResponse(jobId=job_id)

    @router.get(
        "/api/podcast-status/{job_id}",
        response_model=JobStatusResponse,
        response_model_exclude_none=True,
    )
    async def podcast_status(request: Request, job_id: str) -> Any:
        job = _get_orchestrator(request).store.get(job_id)
        if job is None:
            return JSONResponse(
                status_code=404, content={"status": "error", "error": "Job not found"}
            )
        return JobStatusResponse(
            status=job.status, progress=job.progress, stage=job.stage, error=job.error
        )

    @router.get("/api/podcast-download/{job_id}")
    async def podcast_download(request: Request, job_id: str) -> Response:
        orchestrator = _get_orchestrator(request)
        job = orchestrator.store.get(job_id)
        if job is None:
            return JSONResponse(status_code=404, content={"error": "Job not found"})
        audio = job.audio
        if job.status != JobStatus.completed or not audio:
            return JSONResponse(status_code=400, content={"error": "Podcast not ready yet"})

        if request.app.state.settings.release_audio_after_download:
            orchestrator.store.release_audio(job_id)

        logger.info("Podcast downloaded", job_id=job_id, size=len(audio))
        return Response(
            content=audio,
            media_type="audio/mpeg",
            headers={
                "Content-Disposition": f'attachment; filename="{download_filename(job.topic)}"'
            },
        )

    @router.get("/health")
    async def health_check(request: Request) -> dict[str, Any]:
        orchestrator = _get_orchestrator(request)
        services = await orchestrator.check_external_services()
        return {
            "status": "healthy",
            "services": services,
            "active_jobs": orchestrator.active_jobs,
            "tracked_jobs": len(orchestrator.store),
        }

    @router.get("/")
    async def root(request: Request) -> dict[str, Any]:
        orchestrator = _get_orchestrator(request)
        return {
            "service": "Podcast Studio",
            "version": request.app.version,
            "description": "Two-host podcast generation with polling progress",
            "features": {
                "url_mode": orchestrator.url_mode,
                "job_ttl_seconds": orchestrator.store.ttl,
            },
            "endpoints": {
                "health": "/health",
                "generate": "/api/generate-podcast",
                "status": "/api/podcast-status/{job_id}",
                "download": "/api/podcast-download/{job_id}",
            },
        }

    return router
