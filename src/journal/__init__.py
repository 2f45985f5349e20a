"""Journal module: append-only memory file with LLM-mediated store and retrieve."""

from src.journal.journal import Journal
from src.journal.responses import Err, Ok, parse_retrieve_response, parse_store_response
from src.journal.schema import MemoryEntry, serialize_entry, validate_entry

__all__ = [
    "Err",
    "Journal",
    "MemoryEntry",
    "Ok",
    "parse_retrieve_response",
    "parse_store_response",
    "serialize_entry",
    "validate_entry",
]
