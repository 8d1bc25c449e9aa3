"""
Canonical data shapes, shared truth for typing/validation between layers.

Typical contents:
- FAQEntry (question, answer) as read from the static corpus.
- FAQRecord (entry + embedding) as cached in storage.
- ScoredRecord (record + similarity) produced per search call.
- Message (role, content) for conversation history.
- GeneratorAvailability / BackendStatus for the answer source selector.
- LLMSettings (model, temperature, top_p, max_tokens).

Testing: Trivial; mostly types. Serialization helpers covered by store tests.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Literal, Optional, TypedDict
from enum import Enum


class GeneratorAvailability(str, Enum):
    UNAVAILABLE = "unavailable"
    PRIMARY = "primary"
    FALLBACK = "fallback"


class BackendStatus(str, Enum):
    AVAILABLE = "available"
    DOWNLOADABLE = "downloadable"
    DOWNLOADING = "downloading"
    UNAVAILABLE = "unavailable"


class Message(TypedDict):
    role: Literal["system", "user", "assistant"]
    content: str


@dataclass(frozen=True)
class FAQEntry:
    question: str
    answer: str


@dataclass(frozen=True)
class FAQRecord:
    question: str
    answer: str
    embedding: tuple[float, ...] = ()

    def to_storage(self) -> dict:
        """Layout written to the key-value store."""
        return {
            "embedding": list(self.embedding),
            "text": self.question,
            "metadata": {"question": self.question, "answer": self.answer},
        }

    @classmethod
    def from_storage(cls, item: dict) -> "FAQRecord":
        """Inverse of to_storage. Raises on missing or malformed fields."""
        meta = item["metadata"]
        question = meta["question"]
        answer = meta["answer"]
        if not isinstance(question, str) or not isinstance(answer, str):
            raise ValueError("FAQ record question/answer must be strings.")
        embedding = item["embedding"]
        if not isinstance(embedding, list):
            raise ValueError("FAQ record embedding must be a list.")
        return cls(question=question, answer=answer, embedding=tuple(embedding))


@dataclass(frozen=True)
class ScoredRecord:
    record: FAQRecord
    score: float
    index: int = 0

    @property
    def question(self) -> str:
        return self.record.question

    @property
    def answer(self) -> str:
        return self.record.answer


@dataclass
class LLMSettings:
    model: str
    temperature: float = 0.7
    top_p: float = 1.0
    max_tokens: int = 120
    frequency_penalty: float = 0.0
    presence_penalty: float = 0.0


@dataclass
class SessionState:
    history: list[Message] = field(default_factory=list)
    last_availability: Optional[GeneratorAvailability] = None
