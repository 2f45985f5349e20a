"""Process-boundary wiring: settings -> model client -> Journal.

The only place where environment configuration reaches the journal.
"""

from __future__ import annotations

import structlog

from src.config.settings import Settings, get_settings
from src.journal.journal import Journal
from src.llm.model_client import ModelClient, OpenAICompatModelClient

logger = structlog.get_logger()


def build_model_client(settings: Settings) -> ModelClient:
    return OpenAICompatModelClient(
        api_key=settings.openai.api_key,
        base_url=settings.openai.base_url,
        max_retries=settings.openai.max_retries,
    )


def build_journal(
    settings: Settings | None = None,
    *,
    model_client: ModelClient | None = None,
) -> Journal:
    """Build a Journal from settings (loaded from env/.env when omitted)."""
    settings = settings or get_settings()
    client = model_client or build_model_client(settings)
    journal_settings = settings.journal
    logger.info(
        "journal_configured",
        path=str(journal_settings.path),
        model=journal_settings.model,
        verbatim_only=journal_settings.verbatim_only,
    )
    return Journal(
        journal_settings.path,
        client,
        model=journal_settings.model,
        max_results=journal_settings.max_results,
        verbatim_only=journal_settings.verbatim_only,
    )
