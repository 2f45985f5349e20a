from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.constants import DEFAULT_MODEL

# Load .env once at module import; every BaseSettings subclass sees the env vars
load_dotenv()


class OpenAISettings(BaseSettings):
    """OpenAI API settings. Env vars prefixed with OPENAI_."""

    model_config = SettingsConfigDict(env_prefix="OPENAI_")

    api_key: str  # required, fail fast if missing
    base_url: str | None = None
    max_retries: int = Field(3, ge=0, le=10)


class JournalSettings(BaseSettings):
    """Memory journal settings. Env vars prefixed with JOURNAL_."""

    model_config = SettingsConfigDict(env_prefix="JOURNAL_")

    path: Path = Path("memory.jsonl")
    model: str = DEFAULT_MODEL
    max_results: int | None = None  # cap on retrieve() selections, None = unbounded
    verbatim_only: bool = False  # drop selections not stored verbatim

    @field_validator("model")
    @classmethod
    def _validate_model(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("JOURNAL_MODEL must not be empty")
        return v

    @field_validator("max_results")
    @classmethod
    def _validate_max_results(cls, v: int | None) -> int | None:
        if v is not None and v <= 0:
            raise ValueError(f"JOURNAL_MAX_RESULTS must be > 0, got {v}")
        return v


class Settings(BaseSettings):
    """Root settings composing all sub-configurations."""

    model_config = SettingsConfigDict(extra="ignore")

    openai: OpenAISettings = Field(default_factory=OpenAISettings)
    journal: JournalSettings = Field(default_factory=JournalSettings)


def get_settings() -> Settings:
    """Load and validate settings. Raises ValidationError on missing required fields."""
    return Settings()
