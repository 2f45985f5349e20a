"""Prompt construction for the novelty judgment and the selection call."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.journal.schema import MemoryEntry

STORE_SYSTEM_PROMPT = """You are a memory filter for a long-running conversation.

Your task: decide whether a new interaction contains information that is not
already captured by the existing memories.

Rules:
1. If the interaction adds a new, lasting fact, restate it as one concise sentence.
2. If everything in it is already known, trivial, or transient, return null.
3. Return ONLY a JSON object of the form {"memory": string | null}, nothing else.
"""

RETRIEVE_SYSTEM_PROMPT = """You are a memory selector for a long-running conversation.

Your task: choose the stored memories that help respond to a new interaction.

Rules:
1. Select only memories that are relevant to the interaction.
2. Copy each selected memory's text exactly as listed, without the [index] prefix.
3. Return ONLY a JSON array of strings, nothing else. Return [] if none apply.
"""


def _quote(interaction: str) -> str:
    return f'"""{interaction}"""'


def build_store_messages(
    entries: Sequence[MemoryEntry],
    interaction: str,
) -> list[dict[str, str]]:
    """Messages asking whether ``interaction`` is novel against ``entries``."""
    if entries:
        memories = "\n".join(f"- {e.content}" for e in entries)
    else:
        memories = "(none)"
    user_prompt = (
        f"## Existing memories\n\n{memories}\n\n"
        f"## New interaction\n\n{_quote(interaction)}\n\n"
        'Return JSON: {"memory": string | null}'
    )
    return [
        {"role": "system", "content": STORE_SYSTEM_PROMPT},
        {"role": "user", "content": user_prompt},
    ]


def build_retrieve_messages(
    entries: Sequence[MemoryEntry],
    interaction: str,
    *,
    max_results: int | None = None,
) -> list[dict[str, str]]:
    """Messages asking which of ``entries`` are relevant to ``interaction``."""
    memories = "\n".join(f"[{i}] {e.content}" for i, e in enumerate(entries))
    if max_results is not None:
        instruction = f"Select up to {max_results} memories. Return a JSON array of strings."
    else:
        instruction = "Return a JSON array of strings."
    user_prompt = (
        f"## Interaction\n\n{_quote(interaction)}\n\n"
        f"## Memories\n\n{memories}\n\n"
        f"{instruction}"
    )
    return [
        {"role": "system", "content": RETRIEVE_SYSTEM_PROMPT},
        {"role": "user", "content": user_prompt},
    ]
