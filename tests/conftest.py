"""Shared test fixtures for podcast-studio."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.podcast_studio.models.podcast import DialogueSegment, Speaker

TEST_ENV = {
    "HOST": "127.0.0.1",
    "PORT": "8000",
    "LLM_BASE_URL": "http://llm.test/v1",
    "LLM_API_KEY": "test-key",
    "LLM_MODEL": "test-model",
    "TTS_URL": "http://tts.test/v1",
    "TTS_API_KEY": "test-key",
    "TTS_MODEL": "test-tts",
    "RETRY_BASE_DELAY": "0",
    "URL_MODE": "direct",
}


def make_settings(**overrides):
    env = dict(TEST_ENV)
    for key, value in overrides.items():
        env[key.upper()] = str(value).lower() if isinstance(value, bool) else str(value)
    with patch.dict("os.environ", env):
        from src.podcast_studio.config import Settings

        return Settings(_env_file=None)


@pytest.fixture
def mock_settings():
    """Settings pointing at fake services, with no retry delay."""
    return make_settings()


@pytest.fixture
def segments():
    return [
        DialogueSegment(speaker=Speaker.host_a, text="Welcome to the show."),
        DialogueSegment(speaker=Speaker.host_b, text="Glad to be here."),
        DialogueSegment(speaker=Speaker.host_a, text="Let's begin."),
    ]


@pytest.fixture
def podcast_request():
    from src.podcast_studio.models.podcast import PodcastRequest

    return PodcastRequest(
        topic="The history of jazz",
        duration="1-3",
        tone="conversational",
        audience="general",
    )


@pytest.fixture
def fake_script_synthesizer(segments):
    synth = MagicMock()
    synth.base_url = "http://llm.test/v1"
    synth.generate = AsyncMock(return_value=segments)
    return synth


@pytest.fixture
def fake_audio_synthesizer():
    """Audio synthesizer that reports progress for every segment."""
    synth = MagicMock()
    synth.tts_url = "http://tts.test/v1"

    async def synthesize(segs, on_progress=None):
        for i in range(len(segs)):
            if on_progress is not None:
                on_progress(i + 1, len(segs))
        return b"ID3-fake-mp3"

    synth.synthesize = AsyncMock(side_effect=synthesize)
    return synth


@pytest.fixture
def fake_fetcher():
    from src.podcast_studio.services.fetcher import FetchResult

    fetcher = MagicMock()
    fetcher.fetch_all = AsyncMock(return_value=FetchResult(summaries="", failed_urls=[]))
    return fetcher


@pytest.fixture
def orchestrator(mock_settings, fake_script_synthesizer, fake_audio_synthesizer, fake_fetcher):
    from src.podcast_studio.services.orchestrator import PodcastOrchestrator

    return PodcastOrchestrator(
        mock_settings,
        script_synthesizer=fake_script_synthesizer,
        audio_synthesizer=fake_audio_synthesizer,
        fetcher=fake_fetcher,
    )


@pytest.fixture
def app(mock_settings, orchestrator):
    """FastAPI test app with external services faked."""
    from src.podcast_studio.api.app import create_app

    return create_app(mock_settings, orchestrator)


@pytest.fixture
def client(app):
    """TestClient running the app lifespan, so background jobs keep a live loop."""
    from fastapi.testclient import TestClient

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def settings_factory():
    """Build Settings with per-test overrides, e.g. ``settings_factory(url_mode="prefetch")``."""
    return make_settings
