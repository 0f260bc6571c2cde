"""Centralized configuration via pydantic-settings."""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Service
    host: str = "0.0.0.0"
    port: int = 8000

    # Script generation (OpenAI-compatible chat completions)
    llm_base_url: str = "https://api.openai.com/v1"
    llm_api_key: str = ""
    llm_model: str = "gpt-4o"
    llm_temperature: float = 0.8
    llm_max_tokens: int = 4096

    # Speech synthesis (OpenAI-compatible audio/speech)
    tts_url: str = "https://api.openai.com/v1"
    tts_api_key: str = ""
    tts_model: str = "gpt-4o-mini-tts"
    tts_response_format: str = "mp3"
    voice_host_a: str = "marin"
    voice_host_b: str = "cedar"
    silence_ms: int = 300

    # Retry policy shared by script and audio calls
    max_retries: int = 3
    retry_base_delay: float = 1.0
    request_timeout: float = 120.0

    # Reference URLs: "direct" hands URLs to the model, "prefetch" scrapes them first
    url_mode: Literal["direct", "prefetch"] = "direct"
    fetch_timeout: float = 10.0
    fetch_max_words: int = 500

    # Job store
    job_ttl: int = 1800
    release_audio_after_download: bool = False
