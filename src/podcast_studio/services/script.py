"""Two-host dialogue script generation via an OpenAI-compatible chat API."""

from __future__ import annotations

import asyncio
import re
from typing import TYPE_CHECKING

import httpx
import structlog

from src.podcast_studio.models.podcast import (
    AUDIENCE_LABELS,
    DURATION_WORD_COUNTS,
    TONE_LABELS,
    DialogueSegment,
    Speaker,
)
from src.podcast_studio.services.errors import ScriptGenerationError, ScriptParseError
from src.podcast_studio.services.retry import Sleep, with_retries

if TYPE_CHECKING:
    from src.podcast_studio.config import Settings

logger = structlog.get_logger()

_LINE_RE = re.compile(r"^(HOST_A|HOST_B):\s*(.+)")


def parse_script(script: str) -> list[DialogueSegment]:
    """Parse ``HOST_A: ...`` / ``HOST_B: ...`` lines into ordered segments.

    Blank lines and lines without a recognized speaker label are skipped.
    """
    segments = []
    for line in script.splitlines():
        match = _LINE_RE.match(line)
        if not match:
            continue
        text = match.group(2).strip()
        if text:
            segments.append(DialogueSegment(speaker=Speaker(match.group(1)), text=text))
    return segments


def build_system_prompt(
    duration: str,
    tone: str,
    audience: str,
    urls: list[str] | None = None,
    context: str = "",
) -> str:
    """Build the writer instructions.

    ``urls`` are listed for the model to look up itself; ``context`` is
    pre-fetched reference text embedded as-is. Either, both or neither may be
    given.
    """
    min_words, max_words = DURATION_WORD_COUNTS[duration]

    sources = ""
    if context:
        sources += f"Context from URLs:\n{context}\n\n"
    if urls:
        listed = "\n".join(f"- {url}" for url in urls)
        sources += (
            "Reference URLs to incorporate (use their content specifically in the "
            f"conversation):\n{listed}\n\n"
        )

    return (
        "You are a podcast script writer. Create a natural, engaging conversation "
        "between two podcast hosts about the given topic. Ground the conversation in "
        "current, up-to-date information about the topic.\n\n"
        f"{sources}"
        "Requirements:\n"
        f"- Duration: {duration} minutes (approximately {min_words}-{max_words} words total)\n"
        f"- Tone: {TONE_LABELS.get(tone, tone)}\n"
        f"- Audience: {AUDIENCE_LABELS.get(audience, audience)}\n"
        "- Format: Dialogue between Host A and Host B\n"
        "- Each speaker should talk for 1-3 sentences before switching\n"
        "- Include natural conversational elements (agreements, follow-up questions, excitement)\n"
        "- Make it informative but entertaining\n"
        "- End with a brief wrap-up/conclusion\n\n"
        "Output format (strictly follow this, one line per speaker turn):\n"
        "HOST_A: [dialogue]\n"
        "HOST_B: [dialogue]\n"
        "HOST_A: [dialogue]\n"
        "...\n\n"
        "Do NOT include any other text, headers, or formatting. "
        "Only output the HOST_A/HOST_B lines."
    )


class ScriptSynthesizer:
    """Generates a dialogue script with retry and backoff."""

    def __init__(self, settings: Settings, sleep: Sleep = asyncio.sleep) -> None:
        self.base_url = settings.llm_base_url.rstrip("/")
        self.api_key = settings.llm_api_key
        self.model = settings.llm_model
        self.temperature = settings.llm_temperature
        self.max_tokens = settings.llm_max_tokens
        self.attempts = settings.max_retries
        self.base_delay = settings.retry_base_delay
        self.timeout = httpx.Timeout(timeout=settings.request_timeout)
        self._sleep = sleep

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Single chat completion call, returns the message content."""
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.post(
                f"{self.base_url}/chat/completions",
                headers={"Authorization": f"Bearer {self.api_key}"},
                json={
                    "model": self.model,
                    "messages": [
                        {"role": "system", "content": system_prompt},
                        {"role": "user", "content": user_prompt},
                    ],
                    "temperature": self.temperature,
                    "max_tokens": self.max_tokens,
                },
            )
            resp.raise_for_status()
            choices = resp.json().get("choices") or [{}]
            return (choices[0].get("message") or {}).get("content") or ""

    async def generate(
        self,
        topic: str,
        urls: list[str] | None,
        duration: str,
        tone: str,
        audience: str,
        context: str = "",
    ) -> list[DialogueSegment]:
        """Generate and parse a script for ``topic``."""
        system_prompt = build_system_prompt(duration, tone, audience, urls=urls, context=context)
        user_prompt = f"Create a podcast script about: {topic}"

        async def attempt() -> list[DialogueSegment]:
            script = await self.complete(system_prompt, user_prompt)
            if not script.strip():
                raise ScriptGenerationError("No script content generated")
            segments = parse_script(script)
            if not segments:
                raise ScriptParseError(
                    "Failed to parse script: no valid dialogue segments found"
                )
            return segments

        segments = await with_retries(
            attempt,
            attempts=self.attempts,
            base_delay=self.base_delay,
            label="script_generation",
            sleep=self._sleep,
        )
        logger.info("Script generated", segments=len(segments), duration=duration)
        return segments
