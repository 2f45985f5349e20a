"""Shared pytest fixtures for mem-moi tests.

The model client is always a test double: no test talks to a real endpoint.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.journal.journal import Journal


@pytest.fixture()
def journal_path(tmp_path: Path) -> Path:
    return tmp_path / "memory.jsonl"


@pytest.fixture()
def model_client() -> MagicMock:
    """Mock ModelClient; tests set chat.return_value / side_effect."""
    client = MagicMock()
    client.chat = AsyncMock()
    return client


@pytest.fixture()
def journal(journal_path: Path, model_client: MagicMock) -> Journal:
    return Journal(journal_path, model_client)
