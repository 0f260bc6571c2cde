"""Pydantic models for podcast generation requests, jobs and dialogue."""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field, HttpUrl


class JobStatus(str, Enum):
    """Status of a podcast generation job."""

    processing = "processing"
    completed = "completed"
    error = "error"


TERMINAL_STATUSES = frozenset({JobStatus.completed, JobStatus.error})


class Speaker(str, Enum):
    """The two fixed podcast host roles."""

    host_a = "HOST_A"
    host_b = "HOST_B"


class Tone(str, Enum):
    conversational = "conversational"
    educational = "educational"
    professional = "professional"
    entertaining = "entertaining"
    deep_dive = "deep_dive"


class Audience(str, Enum):
    general = "general"
    technical = "technical"
    business = "business"
    students = "students"
    enthusiasts = "enthusiasts"


Duration = Literal["1-3", "3-5", "5-10"]

# Target word counts per duration bucket (min, max)
DURATION_WORD_COUNTS: dict[str, tuple[int, int]] = {
    "1-3": (300, 450),
    "3-5": (450, 750),
    "5-10": (750, 1500),
}

TONE_LABELS: dict[str, str] = {
    "conversational": "Conversational (friendly, casual discussion)",
    "educational": "Educational (informative, teaching-focused)",
    "professional": "Professional (formal, business-oriented)",
    "entertaining": "Entertaining (fun, engaging, lighthearted)",
    "deep_dive": "Deep Dive (analytical, detailed exploration)",
}

AUDIENCE_LABELS: dict[str, str] = {
    "general": "General Public (accessible to everyone)",
    "technical": "Technical/Expert (assumes domain knowledge)",
    "business": "Business Leaders (strategic, executive perspective)",
    "students": "Students (educational, learning-focused)",
    "enthusiasts": "Enthusiasts (passionate hobbyists)",
}


class DialogueSegment(BaseModel):
    """One speaker turn in the generated script."""

    speaker: Speaker
    text: str = Field(..., min_length=1)


class PodcastRequest(BaseModel):
    """Request body for POST /api/generate-podcast."""

    topic: str = Field(..., min_length=1, max_length=500, description="Podcast topic")
    urls: list[HttpUrl] = Field(default_factory=list, description="Reference URLs")
    duration: Duration = Field(..., description="Target length bucket in minutes")
    tone: Tone
    audience: Audience


class SubmitResponse(BaseModel):
    status: Literal["processing"] = "processing"
    jobId: str
    message: str = "Your podcast is being generated."


class JobStatusResponse(BaseModel):
    """Polling view of a job."""

    status: JobStatus
    progress: int = Field(..., ge=0, le=100)
    stage: str
    error: str | None = None
