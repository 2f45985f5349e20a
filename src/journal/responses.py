"""Parse raw model output into tagged results.

Model replies are untyped text. Each parser returns ``Ok(value)`` when the
text is JSON of the expected shape and ``Err(ModelResponseError)`` otherwise.
No repair is attempted: code fences, trailing prose and the like are errors.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Generic, NoReturn, TypeVar

from src.infra.errors import ModelResponseError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Model output parsed into the expected shape."""

    value: T

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    """Model output that did not match the expected shape."""

    error: ModelResponseError

    def unwrap(self) -> NoReturn:
        raise self.error


def _loads(raw: str, *, expected: str) -> Ok[Any] | Err:
    try:
        return Ok(json.loads(raw))
    except (ValueError, RecursionError, TypeError) as e:
        return Err(
            ModelResponseError(
                f"Model response is not valid JSON ({expected}): {e}", raw=raw
            )
        )


def parse_store_response(raw: str) -> Ok[str | None] | Err:
    """Parse ``{"memory": string | null}``. An absent key means null."""
    result = _loads(raw, expected="object")
    if isinstance(result, Err):
        return result
    data = result.value
    if not isinstance(data, dict):
        return Err(
            ModelResponseError(
                f"Expected a JSON object, got {type(data).__name__}", raw=raw
            )
        )
    memory = data.get("memory")
    if memory is not None and not isinstance(memory, str):
        return Err(
            ModelResponseError(
                f"'memory' must be a string or null, got {type(memory).__name__}", raw=raw
            )
        )
    return Ok(memory)


def parse_retrieve_response(raw: str) -> Ok[list[str]] | Err:
    """Parse a JSON array of strings."""
    result = _loads(raw, expected="array of strings")
    if isinstance(result, Err):
        return result
    data = result.value
    if not isinstance(data, list):
        return Err(
            ModelResponseError(
                f"Expected a JSON array, got {type(data).__name__}", raw=raw
            )
        )
    for i, item in enumerate(data):
        if not isinstance(item, str):
            return Err(
                ModelResponseError(
                    f"Array item {i} must be a string, got {type(item).__name__}", raw=raw
                )
            )
    return Ok(data)
