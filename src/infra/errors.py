"""Custom exception hierarchy for mem-moi.

All application-specific exceptions inherit from MemMoiError,
which carries an error code callers can map to their own error surface.
"""

from __future__ import annotations


class MemMoiError(Exception):
    """Base exception for all mem-moi errors."""

    def __init__(self, message: str, *, code: str = "INTERNAL_ERROR") -> None:
        super().__init__(message)
        self.code = code


class EntryValidationError(MemMoiError):
    """A candidate memory entry does not match the entry schema."""

    def __init__(self, message: str, *, code: str = "ENTRY_INVALID") -> None:
        super().__init__(message, code=code)


class JournalError(MemMoiError):
    """Errors reading or writing the journal file."""

    def __init__(self, message: str, *, code: str = "JOURNAL_ERROR") -> None:
        super().__init__(message, code=code)


class JournalLoadError(JournalError):
    """The journal file exists but cannot be parsed."""

    def __init__(self, message: str, *, line_number: int | None = None) -> None:
        super().__init__(message, code="JOURNAL_CORRUPT")
        self.line_number = line_number


class JournalIOError(JournalError):
    """Disk read/write failure other than a missing journal file."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="JOURNAL_IO_ERROR")


class ModelResponseError(MemMoiError):
    """Model output could not be parsed into the expected shape."""

    def __init__(self, message: str, *, raw: str | None = None) -> None:
        super().__init__(message, code="MODEL_RESPONSE_INVALID")
        self.raw = raw


class LLMError(MemMoiError):
    """Errors from LLM API calls (timeouts, rate limits, failures)."""

    def __init__(self, message: str, *, code: str = "LLM_ERROR") -> None:
        super().__init__(message, code=code)
