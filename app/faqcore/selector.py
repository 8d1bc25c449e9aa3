"""
Purpose: Decide which generation backend (if any) answers a question, and
produce the generated answer.

Fallback chain: primary (remote chat model) -> secondary (local model)
-> None, in which case the caller returns raw FAQ answers instead.

Key responsibilities:
- probe_availability(): report which backend is usable right now, loading
  the secondary backend when the primary is absent, unavailable, or its
  probe raises.
- generate_answer(): try the primary (live re-check), then an already loaded
  secondary; never raise to the caller.
- SecondaryBackendState: process-scoped cache of the loaded secondary
  generator, injected so tests can swap in fakes.

Testing: Fake backends for every branch of the chain; assert the primary
session is destroyed on success and failure.
"""

from __future__ import annotations
import asyncio
import logging
import weakref
from contextlib import asynccontextmanager
from typing import Optional, Sequence

from .interfaces import (
    PrimaryBackend,
    PromptFactory,
    SecondaryGenerator,
    SecondaryLoader,
)
from .models import BackendStatus, GeneratorAvailability, Message, ScoredRecord
from .prompts import DefaultPromptFactory

logger = logging.getLogger(__name__)


class SecondaryBackendState:
    """Holds the loaded secondary generator for the life of the process.

    Only a successful load is cached; a failed load is retried on the next
    call, since the model may become available later (e.g. download done).
    """

    def __init__(self) -> None:
        self.generator: Optional[SecondaryGenerator] = None
        self._locks: weakref.WeakKeyDictionary = weakref.WeakKeyDictionary()

    def _lock(self) -> asyncio.Lock:
        """One lock per event loop; an asyncio.Lock cannot span loops."""
        loop = asyncio.get_running_loop()
        lock = self._locks.get(loop)
        if lock is None:
            lock = self._locks[loop] = asyncio.Lock()
        return lock

    @property
    def initialized(self) -> bool:
        return self.generator is not None

    async def ensure_loaded(
        self, loader: Optional[SecondaryLoader]
    ) -> Optional[SecondaryGenerator]:
        if self.generator is not None or loader is None:
            return self.generator
        async with self._lock():
            if self.generator is None:
                try:
                    self.generator = await loader.load()
                    logger.info("Secondary generation backend loaded")
                except Exception as e:
                    logger.warning(f"Secondary generation backend failed to load: {e}")
        return self.generator

    def teardown(self) -> None:
        self.generator = None


def _is_available(status) -> bool:
    return status == BackendStatus.AVAILABLE


class AnswerSourceSelector:
    def __init__(
        self,
        *,
        primary: Optional[PrimaryBackend] = None,
        secondary_loader: Optional[SecondaryLoader] = None,
        state: Optional[SecondaryBackendState] = None,
        prompts: Optional[PromptFactory] = None,
    ):
        self.primary = primary
        self.secondary_loader = secondary_loader
        self.state = state if state is not None else SecondaryBackendState()
        self.prompts: PromptFactory = prompts or DefaultPromptFactory()

    def _primary_present(self) -> bool:
        if self.primary is None:
            return False
        try:
            return bool(self.primary.is_present())
        except Exception as e:
            logger.warning(f"Primary backend presence check failed: {e}")
            return False

    async def _primary_status(self):
        """Live availability of the primary; None when absent or the probe fails."""
        if not self._primary_present():
            return None
        try:
            return await self.primary.availability()
        except Exception as e:
            logger.warning(f"Primary backend availability probe failed: {e}")
            return None

    async def _fall_back(self, reason: str) -> GeneratorAvailability:
        logger.info(f"Primary backend not usable ({reason}); trying secondary")
        try:
            generator = await self.state.ensure_loaded(self.secondary_loader)
        except Exception as e:
            logger.warning(f"Secondary generation backend check failed: {e}")
            return GeneratorAvailability.UNAVAILABLE
        if generator is None:
            return GeneratorAvailability.UNAVAILABLE
        return GeneratorAvailability.FALLBACK

    async def probe_availability(self) -> GeneratorAvailability:
        if not self._primary_present():
            return await self._fall_back("not present")
        status = await self._primary_status()
        if status is None:
            return await self._fall_back("probe failed")
        if not _is_available(status):
            return await self._fall_back(f"status {getattr(status, 'value', status)}")
        return GeneratorAvailability.PRIMARY

    @asynccontextmanager
    async def _primary_session(self, initial_prompts: list[Message]):
        session = await self.primary.create_session(initial_prompts=initial_prompts)
        try:
            yield session
        finally:
            session.destroy()

    async def _generate_primary(
        self, question: str, records: Sequence[ScoredRecord], history: list[Message]
    ) -> Optional[str]:
        system = self.prompts.build_system()
        seed = self.prompts.seed_turns(system=system, history=history)
        prompt = self.prompts.answer_instruction(question=question, records=records)
        async with self._primary_session(seed) as session:
            return await session.prompt(prompt)

    async def _generate_secondary(
        self, question: str, records: Sequence[ScoredRecord], history: list[Message]
    ) -> Optional[str]:
        messages = self.prompts.assemble(
            system=self.prompts.build_system(),
            history=history,
            user_text=self.prompts.answer_instruction(
                question=question, records=records
            ),
        )
        return await self.state.generator.generate(messages)

    async def generate_answer(
        self,
        question: str,
        top_records: Sequence[ScoredRecord],
        history: Optional[list[Message]] = None,
    ) -> Optional[str]:
        """Generated answer, or None when no backend produced one."""
        history = list(history or [])

        if _is_available(await self._primary_status()):
            try:
                text = await self._generate_primary(question, top_records, history)
                if text and text.strip():
                    return text.strip()
                logger.warning("Primary backend returned an empty answer")
            except Exception as e:
                logger.warning(f"Primary backend generation failed: {e}")

        if not self.state.initialized:
            return None
        try:
            text = await self._generate_secondary(question, top_records, history)
        except Exception as e:
            logger.warning(f"Secondary backend generation failed: {e}")
            return None
        if text and text.strip():
            return text.strip()
        return None
