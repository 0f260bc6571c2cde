"""In-memory registry of podcast jobs with lazy expiry."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import structlog

from src.podcast_studio.models.podcast import TERMINAL_STATUSES, JobStatus

logger = structlog.get_logger()

DEFAULT_TTL = 30 * 60

_UPDATABLE = frozenset({"status", "progress", "stage", "audio", "error"})


@dataclass
class Job:
    """Lifecycle state of one podcast generation request."""

    id: str
    topic: str
    created_at: float
    status: JobStatus = JobStatus.processing
    progress: int = 0
    stage: str = "Starting..."
    audio: bytes | None = field(default=None, repr=False)
    error: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


class JobStore:
    """Process-local job map.

    Jobs older than ``ttl`` seconds are dropped by the sweep that runs on every
    ``create``; there is no background eviction. Nothing survives a restart.
    """

    def __init__(self, ttl: float = DEFAULT_TTL, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._jobs: dict[str, Job] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._jobs)

    def sweep(self) -> list[str]:
        """Remove expired jobs and return their ids."""
        now = self._clock()
        with self._lock:
            expired = [
                job_id for job_id, job in self._jobs.items() if now - job.created_at > self.ttl
            ]
            for job_id in expired:
                del self._jobs[job_id]
        if expired:
            logger.info("Expired jobs removed", count=len(expired))
        return expired

    def create(self, job_id: str, topic: str) -> Job:
        self.sweep()
        job = Job(id=job_id, topic=topic, created_at=self._clock())
        with self._lock:
            self._jobs[job_id] = job
        logger.info("Job created", job_id=job_id)
        return job

    def update(self, job_id: str, **fields: Any) -> None:
        """Merge ``fields`` into a job.

        Unknown ids are ignored, as are updates to a job that already reached a
        terminal state. A non-terminal update never lowers progress.
        """
        unknown = set(fields) - _UPDATABLE
        if unknown:
            raise TypeError(f"Cannot update job fields: {sorted(unknown)}")

        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                return
            if job.is_terminal:
                logger.warning("Ignoring update to finished job", job_id=job_id)
                return

            status = fields.get("status", job.status)
            if (
                status not in TERMINAL_STATUSES
                and "progress" in fields
                and fields["progress"] < job.progress
            ):
                fields["progress"] = job.progress

            for name, value in fields.items():
                setattr(job, name, value)

    def get(self, job_id: str) -> Job | None:
        return self._jobs.get(job_id)

    def get_audio(self, job_id: str) -> bytes | None:
        job = self._jobs.get(job_id)
        return job.audio if job else None

    def release_audio(self, job_id: str) -> None:
        """Drop the audio bytes of a job, keeping its status record."""
        with self._lock:
            job = self._jobs.get(job_id)
            if job is not None:
                job.audio = None
