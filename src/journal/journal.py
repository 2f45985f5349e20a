"""Memory journal: append-only JSON Lines file plus LLM-mediated store/retrieve.

Responsibilities:
- load: read every entry from disk (missing file = empty journal)
- append: write one validated entry as a single line
- store: ask the model whether an interaction is novel, append if so
- retrieve: ask the model which stored memories fit an interaction

No caching: every operation re-reads the file. No cross-process locking:
concurrent writers on the same path must be serialized by the caller.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

from src.constants import DEFAULT_MODEL, JOURNAL_ENCODING
from src.infra.errors import (
    EntryValidationError,
    JournalIOError,
    JournalLoadError,
)
from src.journal.prompts import build_retrieve_messages, build_store_messages
from src.journal.responses import parse_retrieve_response, parse_store_response
from src.journal.schema import MemoryEntry, serialize_entry, validate_entry

if TYPE_CHECKING:
    from src.llm.model_client import ModelClient

logger = structlog.get_logger()

# Novelty and selection judgments always use the most deterministic sampling.
_TEMPERATURE = 0.0


class Journal:
    """Append-only memory journal bound to one file and one model client."""

    def __init__(
        self,
        path: str | Path,
        model_client: ModelClient,
        *,
        model: str = DEFAULT_MODEL,
        max_results: int | None = None,
        verbatim_only: bool = False,
    ) -> None:
        if max_results is not None and max_results <= 0:
            raise ValueError(f"max_results must be > 0, got {max_results}")
        self._path = Path(path)
        self._model_client = model_client
        self._model = model
        self._max_results = max_results
        self._verbatim_only = verbatim_only

    @property
    def path(self) -> Path:
        return self._path

    @property
    def model(self) -> str:
        return self._model

    def validate_entry(self, candidate: Any) -> MemoryEntry:
        """Validate a caller-supplied entry. Raises EntryValidationError."""
        return validate_entry(candidate)

    async def load(self) -> list[MemoryEntry]:
        """Read all entries in file order (first = oldest).

        Returns [] when the file does not exist.
        Raises: JournalLoadError on any unparseable line,
                JournalIOError on other read failures.
        """
        try:
            text = self._path.read_text(encoding=JOURNAL_ENCODING)
        except FileNotFoundError:
            logger.debug("journal_missing", path=str(self._path))
            return []
        except UnicodeDecodeError as e:
            raise JournalLoadError(
                f"Journal {self._path} is not valid {JOURNAL_ENCODING}: {e}"
            ) from e
        except OSError as e:
            raise JournalIOError(f"Cannot read journal {self._path}: {e}") from e

        lines = text.split("\n")
        if lines and lines[-1] == "":
            lines.pop()

        entries: list[MemoryEntry] = []
        for line_number, line in enumerate(lines, start=1):
            try:
                entries.append(validate_entry(json.loads(line)))
            except (ValueError, RecursionError, EntryValidationError) as e:
                logger.warning(
                    "journal_corrupt",
                    path=str(self._path),
                    line_number=line_number,
                    error=str(e),
                )
                raise JournalLoadError(
                    f"Journal {self._path} line {line_number} is corrupt: {e}",
                    line_number=line_number,
                ) from e

        logger.debug("journal_loaded", path=str(self._path), entries=len(entries))
        return entries

    async def append(self, entry: MemoryEntry) -> None:
        """Append one entry as a single JSON line, creating the file if needed.

        Raises: EntryValidationError if the entry is malformed,
                JournalIOError on any write failure (not retried).
        """
        entry = validate_entry(entry)
        line = serialize_entry(entry) + "\n"
        try:
            with self._path.open("a", encoding=JOURNAL_ENCODING) as f:
                f.write(line)
        except OSError as e:
            raise JournalIOError(f"Cannot append to journal {self._path}: {e}") from e

        logger.info(
            "journal_appended",
            path=str(self._path),
            bytes_written=len(line.encode(JOURNAL_ENCODING)),
        )

    async def store(self, interaction: str) -> MemoryEntry | None:
        """Remember ``interaction`` if the model judges it novel.

        Returns the appended entry, or None when the model found nothing new.
        Raises: ModelResponseError if the reply is not {"memory": string | null};
                the journal is left unchanged.
        """
        entries = await self.load()
        messages = build_store_messages(entries, interaction)
        raw = await self._model_client.chat(
            messages, model=self._model, temperature=_TEMPERATURE
        )
        memory = parse_store_response(raw).unwrap()

        content = memory.strip() if memory else ""
        if not content:
            logger.info("memory_not_novel", existing=len(entries))
            return None

        entry = MemoryEntry.new(content)
        await self.append(entry)
        logger.info("memory_stored", existing=len(entries), chars=len(content))
        return entry

    async def retrieve(self, interaction: str) -> list[str]:
        """Return the stored memories the model selects for ``interaction``.

        Strings are returned as the model wrote them unless verbatim_only is
        set, in which case only exact matches of stored contents survive, in
        journal order. An empty journal returns [] without a model call.
        Raises: ModelResponseError if the reply is not a JSON array of strings.
        """
        entries = await self.load()
        if not entries:
            logger.debug("retrieve_skipped_empty", path=str(self._path))
            return []

        messages = build_retrieve_messages(
            entries, interaction, max_results=self._max_results
        )
        raw = await self._model_client.chat(
            messages, model=self._model, temperature=_TEMPERATURE
        )
        selected = parse_retrieve_response(raw).unwrap()

        if self._verbatim_only:
            chosen = set(selected)
            selected = list(dict.fromkeys(e.content for e in entries if e.content in chosen))
        if self._max_results is not None:
            selected = selected[: self._max_results]

        logger.info(
            "memories_retrieved",
            available=len(entries),
            selected=len(selected),
        )
        return selected
