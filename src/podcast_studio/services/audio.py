"""Per-segment speech synthesis and MP3 assembly."""

from __future__ import annotations

import asyncio
import math
from collections.abc import Callable
from typing import TYPE_CHECKING

import httpx
import structlog

from src.podcast_studio.models.podcast import DialogueSegment, Speaker
from src.podcast_studio.services.errors import AudioSynthesisError
from src.podcast_studio.services.retry import Sleep, with_retries

if TYPE_CHECKING:
    from src.podcast_studio.config import Settings

logger = structlog.get_logger()

ProgressCallback = Callable[[int, int], None]

# MPEG-1 Layer III, 128 kbps, 44.1 kHz stereo: 1152 samples per frame
MP3_FRAME_MS = 26.12
MP3_FRAME_SIZE = 417
MP3_FRAME_HEADER = b"\xff\xfb\x90\x00"


def create_silence_mp3(duration_ms: int = 300) -> bytes:
    """Build a run of silent MP3 frames lasting roughly ``duration_ms``.

    Each frame decodes on its own, so the clip can be byte-concatenated
    between independently synthesized MP3 clips.
    """
    frames = math.ceil(duration_ms / MP3_FRAME_MS)
    frame = MP3_FRAME_HEADER + bytes(MP3_FRAME_SIZE - len(MP3_FRAME_HEADER))
    return frame * frames


class AudioSynthesizer:
    """Turns an ordered dialogue into one MP3 byte stream."""

    def __init__(self, settings: Settings, sleep: Sleep = asyncio.sleep) -> None:
        self.tts_url = settings.tts_url.rstrip("/")
        self.api_key = settings.tts_api_key
        self.model = settings.tts_model
        self.response_format = settings.tts_response_format
        self.voices = {
            Speaker.host_a: settings.voice_host_a,
            Speaker.host_b: settings.voice_host_b,
        }
        self.attempts = settings.max_retries
        self.base_delay = settings.retry_base_delay
        self.timeout = httpx.Timeout(timeout=settings.request_timeout)
        self.silence = create_silence_mp3(settings.silence_ms)
        self._sleep = sleep

    def voice_for(self, speaker: Speaker) -> str:
        return self.voices[speaker]

    async def synthesize_speech(self, text: str, voice: str) -> bytes:
        """Single TTS call returning compressed audio bytes."""
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.post(
                f"{self.tts_url}/audio/speech",
                headers={"Authorization": f"Bearer {self.api_key}"},
                json={
                    "model": self.model,
                    "input": text,
                    "voice": voice,
                    "response_format": self.response_format,
                },
            )
            if resp.status_code >= 400:
                raise AudioSynthesisError(f"TTS API error {resp.status_code}: {resp.text}")
            return resp.content

    async def synthesize_segment(self, segment: DialogueSegment) -> bytes:
        voice = self.voice_for(segment.speaker)
        return await with_retries(
            lambda: self.synthesize_speech(segment.text, voice),
            attempts=self.attempts,
            base_delay=self.base_delay,
            label=f"tts:{segment.speaker.value}",
            sleep=self._sleep,
        )

    async def synthesize(
        self,
        segments: list[DialogueSegment],
        on_progress: ProgressCallback | None = None,
    ) -> bytes:
        """Synthesize every segment in order, separated by short silences.

        A segment that exhausts its retries fails the whole call.
        """
        total = len(segments)
        logger.info("Generating audio", segments=total)

        chunks: list[bytes] = []
        for i, segment in enumerate(segments):
            if on_progress is not None:
                on_progress(i + 1, total)
            logger.debug("Synthesizing segment", index=i + 1, total=total, speaker=segment.speaker)
            chunks.append(await self.synthesize_segment(segment))
            if i < total - 1:
                chunks.append(self.silence)

        audio = b"".join(chunks)
        logger.info("Podcast audio assembled", size_mb=round(len(audio) / 1024 / 1024, 2))
        return audio
