"""
Abstractions for pluggable services. Inversion of control: core depends
on interfaces, not concrete services. Enables fakes/mocks and future swaps.
Protocols define what services or components can do,
without saying how they do it.

Common protocols:
- Embedder.embed(text) -> vector
- KeyValueStore.get(key) / set(key, value) / remove(key)
- PrimaryBackend.is_present() / availability() / create_session(initial_prompts)
- PrimarySession.prompt(text) / destroy()
- SecondaryLoader.load() -> SecondaryGenerator; SecondaryGenerator.generate(messages)
- PromptFactory.build_system() / answer_instruction(...) / assemble(...)

Testing: Use simple fake implementations to test the selector and controller
without network calls or model downloads.
"""

from __future__ import annotations
from typing import Optional, Protocol, Sequence
from .models import BackendStatus, Message, ScoredRecord


class Embedder(Protocol):
    async def embed(self, text: str) -> list[float]: ...


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class PrimarySession(Protocol):
    async def prompt(self, text: str) -> str: ...

    def destroy(self) -> None: ...


class PrimaryBackend(Protocol):
    def is_present(self) -> bool: ...

    async def availability(self) -> BackendStatus | str: ...

    async def create_session(
        self, *, initial_prompts: list[Message]
    ) -> PrimarySession: ...


class SecondaryGenerator(Protocol):
    async def generate(self, messages: list[Message]) -> str: ...


class SecondaryLoader(Protocol):
    async def load(self) -> SecondaryGenerator: ...


class PromptFactory(Protocol):
    def build_system(self) -> str: ...

    def answer_instruction(
        self, *, question: str, records: Sequence[ScoredRecord]
    ) -> str: ...

    def seed_turns(self, *, system: str, history: list[Message]) -> list[Message]: ...

    def assemble(
        self, *, system: str, history: list[Message], user_text: str
    ) -> list[Message]: ...
