"""Shared prompt helpers used across prompt modules."""

from __future__ import annotations
from typing import Sequence

from ..models import Message, ScoredRecord


def faq_context_block(records: Sequence[ScoredRecord]) -> str:
    """Enumerate the top records as numbered Question/Answer pairs."""
    return "\n\n".join(
        f"FAQ {i}:\nQuestion: {r.question}\nAnswer: {r.answer}"
        for i, r in enumerate(records, start=1)
    )


def history_turns(history: Sequence[Message] | None) -> list[Message]:
    """Keep only well-formed user/assistant/system turns, in order."""
    turns: list[Message] = []
    for m in history or []:
        role = m.get("role", "")
        content = (m.get("content") or "").strip()
        if role not in ("system", "user", "assistant") or not content:
            continue
        turns.append({"role": role, "content": content})
    return turns


def seed_turns(*, system: str, history: Sequence[Message] | None) -> list[Message]:
    return [{"role": "system", "content": system}, *history_turns(history)]


def assemble(
    *, system: str, history: Sequence[Message] | None, user_text: str
) -> list[Message]:
    return [
        *seed_turns(system=system, history=history),
        {"role": "user", "content": user_text},
    ]
