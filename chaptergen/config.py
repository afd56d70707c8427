"""Runtime configuration for ChapterGen."""

from __future__ import annotations

from enum import StrEnum
from functools import lru_cache

from pydantic_settings import BaseSettings


class LLMProvider(StrEnum):
    """Chat-completion backends the pipeline can call."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"


class Settings(BaseSettings):
    """ChapterGen settings.

    Every field can be set from an upper-cased environment variable or a
    ``.env`` file in the working directory (e.g. ``MIN_TRANSCRIPT_CHARS=150``).
    """

    # Provider credentials
    openai_api_key: str = ""
    anthropic_api_key: str = ""  # Only needed when llm_provider=anthropic

    # Chat model
    llm_provider: LLMProvider = LLMProvider.OPENAI
    chapter_model: str = "gpt-4o"
    anthropic_model: str = "claude-sonnet-4-20250514"
    openai_base_url: str = ""  # Empty means the SDK default endpoint
    max_tokens: int = 2000
    draft_temperature: float = 0.3
    spelling_temperature: float = 0.1
    refine_temperature: float = 0.3

    # Transcript limits (characters)
    min_transcript_chars: int = 100
    max_transcript_chars: int = 50_000

    # Page extraction
    segment_poll_interval_ms: int = 200
    segment_timeout_ms: int = 10_000
    browser_headless: bool = True
    browser_timeout_ms: int = 30_000

    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""

    # Access gate
    api_key_prefix: str = "ltgv_"
    free_generation_limit: int = 1

    # Server
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build the settings once per process.

    An unreadable ``.env`` (bad encoding, permissions) is skipped and only the
    process environment is used.
    """
    try:
        return Settings()
    except (OSError, UnicodeDecodeError):
        return Settings(_env_file=None)  # type: ignore[call-arg]


settings = get_settings()
