"""Facade exposing the prompt helpers through a single DefaultPromptFactory."""

from __future__ import annotations
from typing import Optional, Sequence

from ..models import Message, ScoredRecord
from . import faq as _faq
from .common import assemble as _assemble
from .common import seed_turns as _seed_turns


class DefaultPromptFactory:
    def __init__(self, *, max_words: int = _faq.MAX_ANSWER_WORDS) -> None:
        self.max_words = max_words

    def build_system(self) -> str:
        return _faq.build_faq_system(max_words=self.max_words)

    def answer_instruction(
        self, *, question: str, records: Sequence[ScoredRecord]
    ) -> str:
        return _faq.answer_instruction(
            question=question, records=records, max_words=self.max_words
        )

    def seed_turns(
        self, *, system: str, history: Optional[list[Message]]
    ) -> list[Message]:
        return _seed_turns(system=system, history=history)

    def assemble(
        self, *, system: str, history: Optional[list[Message]], user_text: str
    ) -> list[Message]:
        return _assemble(system=system, history=history, user_text=user_text)
