"""Job orchestrator: accepts requests and runs the generation pipeline in the background."""

from __future__ import annotations

import asyncio
import math
import uuid
from typing import TYPE_CHECKING

import httpx
import structlog

from src.podcast_studio.models.podcast import JobStatus, PodcastRequest
from src.podcast_studio.services.audio import AudioSynthesizer
from src.podcast_studio.services.fetcher import ContentFetcher
from src.podcast_studio.services.job_store import JobStore
from src.podcast_studio.services.script import ScriptSynthesizer

if TYPE_CHECKING:
    from src.podcast_studio.config import Settings

logger = structlog.get_logger()

SCRIPT_PROGRESS = 5
AUDIO_PROGRESS_START = 40
AUDIO_PROGRESS_END = 95
UNKNOWN_ERROR = "Unknown error occurred"


def progress_for(index: int, total: int) -> int:
    """Map audio progress ``index/total`` linearly onto [40, 95], rounding half up."""
    if total <= 0:
        return AUDIO_PROGRESS_START
    span = AUDIO_PROGRESS_END - AUDIO_PROGRESS_START
    return AUDIO_PROGRESS_START + math.floor(index * span / total + 0.5)


class PodcastOrchestrator:
    """Owns the job store and coordinates script and audio synthesis per job."""

    def __init__(
        self,
        settings: Settings,
        store: JobStore | None = None,
        script_synthesizer: ScriptSynthesizer | None = None,
        audio_synthesizer: AudioSynthesizer | None = None,
        fetcher: ContentFetcher | None = None,
    ) -> None:
        self.settings = settings
        self.store = store if store is not None else JobStore(ttl=settings.job_ttl)
        self.script_synthesizer = script_synthesizer or ScriptSynthesizer(settings)
        self.audio_synthesizer = audio_synthesizer or AudioSynthesizer(settings)
        self.fetcher = fetcher or ContentFetcher(settings)
        self.url_mode = settings.url_mode

        # Strong references so running pipelines are not garbage collected
        self._tasks: set[asyncio.Task] = set()

        logger.info(
            "PodcastOrchestrator initialized",
            llm_model=settings.llm_model,
            tts_model=settings.tts_model,
            url_mode=self.url_mode,
            job_ttl=self.store.ttl,
        )

    @property
    def active_jobs(self) -> int:
        return len(self._tasks)

    def submit(self, request: PodcastRequest) -> str:
        """Create a job and start its pipeline without waiting for it.

        Must be called from a running event loop. Returns the new job id.
        """
        job_id = uuid.uuid4().hex
        self.store.create(job_id, request.topic)

        task = asyncio.create_task(self.run_pipeline(job_id, request), name=f"podcast-{job_id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        logger.info("Job submitted", job_id=job_id, duration=request.duration, urls=len(request.urls))
        return job_id

    async def run_pipeline(self, job_id: str, request: PodcastRequest) -> None:
        """Script -> audio -> result. Every failure ends in the job's error state."""
        try:
            audio = await self._generate(job_id, request)
        except Exception as e:
            logger.exception("Job failed", job_id=job_id, error=str(e))
            self.store.update(
                job_id,
                status=JobStatus.error,
                progress=0,
                stage="Failed",
                error=str(e) or UNKNOWN_ERROR,
            )
            return

        self.store.update(
            job_id,
            status=JobStatus.completed,
            progress=100,
            stage="Complete!",
            audio=audio,
        )
        logger.info("Job completed", job_id=job_id, size=len(audio))

    async def _generate(self, job_id: str, request: PodcastRequest) -> bytes:
        urls = [str(url) for url in request.urls]
        context = ""

        if urls and self.url_mode == "prefetch":
            self.store.update(job_id, stage="Reading reference URLs...", progress=SCRIPT_PROGRESS)
            fetched = await self.fetcher.fetch_all(urls)
            if fetched.failed_urls:
                logger.warning("Skipping unreadable URLs", job_id=job_id, urls=fetched.failed_urls)
            context = fetched.summaries
            urls = []

        self.store.update(job_id, stage="Generating podcast script...", progress=SCRIPT_PROGRESS)
        segments = await self.script_synthesizer.generate(
            request.topic,
            urls,
            request.duration,
            request.tone.value,
            request.audience.value,
            context=context,
        )
        if not segments:
            raise ValueError("Script generation returned no segments")

        self.store.update(
            job_id,
            stage=f"Generating audio ({len(segments)} segments)...",
            progress=AUDIO_PROGRESS_START,
        )

        def on_progress(index: int, total: int) -> None:
            self.store.update(
                job_id,
                stage=f"Generating audio segment {index}/{total}...",
                progress=progress_for(index, total),
            )

        return await self.audio_synthesizer.synthesize(segments, on_progress=on_progress)

    async def shutdown(self) -> None:
        """Cancel pipelines still running at application shutdown."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info("Cancelled running jobs", count=len(tasks))

    async def check_external_services(self) -> dict[str, bool]:
        """Check reachability of the generation and synthesis services.

        Any non-5xx answer counts as reachable; the probes carry no credentials.
        """
        llm, tts = await asyncio.gather(
            self._check_service(f"{self.script_synthesizer.base_url}/models"),
            self._check_service(f"{self.audio_synthesizer.tts_url}/models"),
        )
        return {"llm": llm, "tts": tts}

    @staticmethod
    async def _check_service(url: str) -> bool:
        try:
            async with httpx.AsyncClient(timeout=5.0) as client:
                resp = await client.get(url)
                return resp.status_code < 500
        except Exception:
            return False
