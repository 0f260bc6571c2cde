"""Tests for Settings configuration."""

from unittest.mock import patch

import pytest
from pydantic import ValidationError


class TestSettings:
    def test_default_values(self):
        """Settings loads with sane defaults."""
        with patch.dict("os.environ", {"HOST": "0.0.0.0", "PORT": "8000"}, clear=True):
            from src.podcast_studio.config import Settings

            settings = Settings(_env_file=None)
            assert settings.host == "0.0.0.0"
            assert settings.port == 8000
            assert settings.max_retries == 3
            assert settings.retry_base_delay == 1.0
            assert settings.job_ttl == 1800
            assert settings.fetch_timeout == 10.0
            assert settings.fetch_max_words == 500
            assert settings.silence_ms == 300
            assert settings.tts_response_format == "mp3"
            assert settings.url_mode == "direct"
            assert settings.release_audio_after_download is False

    def test_override_from_env(self):
        """Settings can be overridden via environment variables."""
        with patch.dict(
            "os.environ",
            {
                "PORT": "9999",
                "LLM_BASE_URL": "http://localhost:4000/v1",
                "LLM_MODEL": "llama3",
                "VOICE_HOST_A": "alloy",
                "VOICE_HOST_B": "nova",
                "JOB_TTL": "60",
                "URL_MODE": "prefetch",
            },
        ):
            from src.podcast_studio.config import Settings

            settings = Settings(_env_file=None)
            assert settings.port == 9999
            assert settings.llm_base_url == "http://localhost:4000/v1"
            assert settings.llm_model == "llama3"
            assert settings.voice_host_a == "alloy"
            assert settings.voice_host_b == "nova"
            assert settings.job_ttl == 60
            assert settings.url_mode == "prefetch"

    def test_bool_parsing(self):
        with patch.dict("os.environ", {"RELEASE_AUDIO_AFTER_DOWNLOAD": "true"}):
            from src.podcast_studio.config import Settings

            settings = Settings(_env_file=None)
            assert settings.release_audio_after_download is True

    def test_invalid_url_mode_rejected(self):
        with patch.dict("os.environ", {"URL_MODE": "scrape-everything"}):
            from src.podcast_studio.config import Settings

            with pytest.raises(ValidationError):
                Settings(_env_file=None)
