"""Tests for Journal.load and Journal.append (JSON Lines file handling)."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from src.infra.errors import EntryValidationError, JournalIOError, JournalLoadError
from src.journal.journal import Journal
from src.journal.schema import MemoryEntry, validate_entry


def _entry(
    content: str,
    *,
    tags: list[str] | None = None,
    created_at: str = "2025-04-19T00:00:00.000Z",
) -> dict:
    return {"content": content, "tags": tags or [], "createdAt": created_at}


def _write_lines(path: Path, *records: dict) -> None:
    """Write records as JSON Lines, bypassing Journal.append."""
    path.write_text("".join(json.dumps(r) + "\n" for r in records), encoding="utf-8")


class TestLoad:
    @pytest.mark.asyncio
    async def test_missing_file_returns_empty(self, journal: Journal) -> None:
        assert not journal.path.exists()
        assert await journal.load() == []

    @pytest.mark.asyncio
    async def test_empty_file_returns_empty(self, journal: Journal) -> None:
        journal.path.write_text("", encoding="utf-8")
        assert await journal.load() == []

    @pytest.mark.asyncio
    async def test_entries_returned_in_file_order(self, journal: Journal) -> None:
        _write_lines(
            journal.path,
            _entry("oldest"),
            _entry("middle", tags=["x"]),
            _entry("newest"),
        )

        entries = await journal.load()

        assert [e.content for e in entries] == ["oldest", "middle", "newest"]
        assert entries[1].tags == ("x",)

    @pytest.mark.asyncio
    async def test_no_trailing_newline_accepted(self, journal: Journal) -> None:
        journal.path.write_text(json.dumps(_entry("only")), encoding="utf-8")
        entries = await journal.load()
        assert [e.content for e in entries] == ["only"]

    @pytest.mark.asyncio
    async def test_non_json_line_raises(self, journal: Journal) -> None:
        journal.path.write_text("oops\n", encoding="utf-8")
        with pytest.raises(JournalLoadError) as exc_info:
            await journal.load()
        assert exc_info.value.line_number == 1
        assert exc_info.value.code == "JOURNAL_CORRUPT"

    @pytest.mark.asyncio
    async def test_bad_line_is_not_dropped(self, journal: Journal) -> None:
        good = json.dumps(_entry("good"))
        journal.path.write_text(f"{good}\noops\n{good}\n", encoding="utf-8")
        with pytest.raises(JournalLoadError, match="line 2"):
            await journal.load()

    @pytest.mark.asyncio
    async def test_schema_violation_raises(self, journal: Journal) -> None:
        _write_lines(journal.path, {"content": 42, "tags": "oops"})
        with pytest.raises(JournalLoadError) as exc_info:
            await journal.load()
        assert isinstance(exc_info.value.__cause__, EntryValidationError)

    @pytest.mark.asyncio
    async def test_non_object_line_raises(self, journal: Journal) -> None:
        journal.path.write_text("[1, 2]\n", encoding="utf-8")
        with pytest.raises(JournalLoadError):
            await journal.load()

    @pytest.mark.asyncio
    async def test_blank_line_in_middle_raises(self, journal: Journal) -> None:
        good = json.dumps(_entry("good"))
        journal.path.write_text(f"{good}\n\n{good}\n", encoding="utf-8")
        with pytest.raises(JournalLoadError, match="line 2"):
            await journal.load()

    @pytest.mark.asyncio
    async def test_oversized_integer_raises_load_error(self, journal: Journal) -> None:
        journal.path.write_text('{"content": 1' + "0" * 5000 + "}\n", encoding="utf-8")
        with pytest.raises(JournalLoadError) as exc_info:
            await journal.load()
        assert exc_info.value.line_number == 1

    @pytest.mark.asyncio
    async def test_deeply_nested_line_raises_load_error(self, journal: Journal) -> None:
        journal.path.write_text("[" * 100_000 + "\n", encoding="utf-8")
        with pytest.raises(JournalLoadError):
            await journal.load()

    @pytest.mark.asyncio
    async def test_invalid_utf8_raises(self, journal: Journal) -> None:
        journal.path.write_bytes(b"\xff\xfe\xfa\n")
        with pytest.raises(JournalLoadError):
            await journal.load()

    @pytest.mark.asyncio
    async def test_directory_path_raises_io_error(
        self, tmp_path: Path, model_client
    ) -> None:
        journal = Journal(tmp_path, model_client)
        with pytest.raises(JournalIOError):
            await journal.load()

    @pytest.mark.asyncio
    async def test_extra_fields_tolerated(self, journal: Journal) -> None:
        _write_lines(journal.path, {**_entry("with id"), "id": "1"})
        entries = await journal.load()
        assert [e.content for e in entries] == ["with id"]

    @pytest.mark.asyncio
    async def test_every_load_rereads_disk(self, journal: Journal) -> None:
        _write_lines(journal.path, _entry("first"))
        assert len(await journal.load()) == 1

        _write_lines(journal.path, _entry("first"), _entry("second"))
        assert len(await journal.load()) == 2


class TestAppend:
    @pytest.mark.asyncio
    async def test_round_trip_on_empty_journal(self, journal: Journal) -> None:
        entry = validate_entry(_entry("User moved to Austin, TX.", tags=["location"]))

        await journal.append(entry)

        assert await journal.load() == [entry]

    @pytest.mark.asyncio
    async def test_creates_file_with_one_terminated_line(self, journal: Journal) -> None:
        await journal.append(MemoryEntry.new("fact"))

        raw = journal.path.read_text(encoding="utf-8")
        assert raw.endswith("\n")
        assert raw.count("\n") == 1
        assert json.loads(raw)["content"] == "fact"

    @pytest.mark.asyncio
    async def test_appends_after_existing_lines(self, journal: Journal) -> None:
        _write_lines(journal.path, _entry("existing"))

        await journal.append(MemoryEntry.new("appended"))

        entries = await journal.load()
        assert [e.content for e in entries] == ["existing", "appended"]

    @pytest.mark.asyncio
    async def test_serialized_bytes_match_original(self, journal: Journal) -> None:
        line = '{"content":"A","tags":["t"],"createdAt":"2025-04-19T00:00:00.000Z"}\n'
        journal.path.write_text(line, encoding="utf-8")
        [entry] = await journal.load()

        other = Journal(journal.path.with_name("copy.jsonl"), journal._model_client)
        await other.append(entry)

        assert other.path.read_text(encoding="utf-8") == line

    @pytest.mark.asyncio
    async def test_invalid_entry_rejected(self, journal: Journal) -> None:
        with pytest.raises(EntryValidationError):
            await journal.append({"content": "", "tags": [], "createdAt": "nope"})
        assert not journal.path.exists()

    @pytest.mark.asyncio
    async def test_missing_parent_directory_raises_io_error(
        self, tmp_path: Path, model_client
    ) -> None:
        journal = Journal(tmp_path / "missing" / "memory.jsonl", model_client)
        with pytest.raises(JournalIOError) as exc_info:
            await journal.append(MemoryEntry.new("fact"))
        assert exc_info.value.code == "JOURNAL_IO_ERROR"

    @pytest.mark.asyncio
    @pytest.mark.skipif(
        not hasattr(os, "geteuid") or os.geteuid() == 0,
        reason="permission bits are not enforced for root",
    )
    async def test_read_only_file_raises_io_error(self, journal: Journal) -> None:
        _write_lines(journal.path, _entry("existing"))
        journal.path.chmod(0o444)
        try:
            with pytest.raises(JournalIOError):
                await journal.append(MemoryEntry.new("fact"))
        finally:
            journal.path.chmod(0o644)


class TestValidateEntryMethod:
    def test_returns_entry_when_valid(self, journal: Journal) -> None:
        candidate = _entry("fact")
        entry = journal.validate_entry(candidate)
        assert entry.model_dump(mode="json", by_alias=True) == candidate

    def test_raises_on_bad_input(self, journal: Journal) -> None:
        with pytest.raises(EntryValidationError):
            journal.validate_entry({"content": 42, "tags": "oops"})
