"""
Purpose: The single orchestration point for the FAQ assistant. Owns the
vector store, the answer source selector and the conversation history.
It centralizes "one-turn" logic (search, ask) and session lifecycle (reset).
Prevents a UI from knowing how embeddings, ranking or language models work.

Key responsibilities:
- Make sure the corpus embeddings exist (vector_store.ensure_records).
- Probe which generator is usable (selector.probe_availability).
- Embed the query and rank the corpus (services.similarity.rank).
- Ask the selector for a generated answer from the top matches.
- Fall back to the raw stored answers when nothing was generated.
- Hold and sync history (list of messages).

search() never raises for storage, embedding or generator failures; the
worst case is an empty answer list.

Testing: Pure unit tests with fakes: fake Embedder, in-memory store, fake
backends. Verify fallback to raw answers and history handling.
"""

from __future__ import annotations
import logging
from typing import Optional

from .config import AppConfig, configure_logging
from .corpus import load_faq_entries
from .interfaces import Embedder, KeyValueStore
from .models import FAQEntry, GeneratorAvailability, LLMSettings, Message, SessionState
from .persistence.kv_store import JsonFileKeyValueStore
from .persistence.vector_store import FAQVectorStore
from .selector import AnswerSourceSelector, SecondaryBackendState
from .services.security import DefaultSecurity
from .services.similarity import rank

logger = logging.getLogger(__name__)

RESULT_LIMIT = 10
CONTEXT_SIZE = 3


class FAQAssistantController:
    def __init__(
        self,
        *,
        embedder: Embedder,
        store: KeyValueStore,
        entries: list[FAQEntry],
        selector: Optional[AnswerSourceSelector] = None,
        result_limit: int = RESULT_LIMIT,
        context_size: int = CONTEXT_SIZE,
    ):
        self.embedder = embedder
        self.vectors = FAQVectorStore(store, embedder, entries)
        self.selector = selector or AnswerSourceSelector()
        self.security = DefaultSecurity()
        self.result_limit = result_limit
        self.context_size = context_size
        self.state = SessionState()

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        *,
        state: Optional[SecondaryBackendState] = None,
    ) -> "FAQAssistantController":
        """Wire the concrete adapters described by `config`."""
        from .services.embeddings import SentenceTransformerEmbedder
        from .services.llm_local import LocalModelLoader
        from .services.llm_openai import OpenAIChatBackend

        configure_logging(config.log_level)
        primary = None
        if config.openai_api_key:
            try:
                primary = OpenAIChatBackend(
                    config.openai_api_key,
                    LLMSettings(model=config.openai_model, temperature=0.7),
                )
            except RuntimeError as e:
                logger.warning(f"Primary backend disabled: {e}")

        loader = None
        if config.local_enabled:
            loader = LocalModelLoader(
                config.local_model, model_dir=config.local_model_dir
            )

        selector = AnswerSourceSelector(
            primary=primary, secondary_loader=loader, state=state
        )
        return cls(
            embedder=SentenceTransformerEmbedder(config.embed_model),
            store=JsonFileKeyValueStore(config.store_path),
            entries=load_faq_entries(config.corpus_path),
            selector=selector,
            result_limit=config.result_limit,
            context_size=config.context_size,
        )

    def set_history(self, messages: list[Message]) -> None:
        """Overwrite the full history with a new list of messages."""
        self.state.history = messages[:]

    def get_history(self) -> list[Message]:
        """Get the current full history of messages."""
        return self.state.history

    def append_assistant(self, text: str) -> None:
        """Append an assistant message to history."""
        self.state.history.append({"role": "assistant", "content": text})

    def append_user(self, text: str) -> None:
        """Append a user message to history."""
        self.state.history.append({"role": "user", "content": text})

    @property
    def last_availability(self) -> Optional[GeneratorAvailability]:
        return self.state.last_availability

    def reset(self) -> None:
        """Clear history and the last availability probe. Cached embeddings stay."""
        self.state = SessionState()

    def clear_storage(self) -> None:
        self.vectors.clear_storage()

    async def init(self) -> None:
        await self.vectors.init()

    def _redacted(self, history: Optional[list[Message]]) -> list[Message]:
        """Copy of history with PII redacted from every turn."""
        turns: list[Message] = []
        for m in history or []:
            content, _ = self.security.redact_pii(m.get("content") or "")
            turns.append({**m, "content": content})
        return turns

    async def search(
        self, query: str, history: Optional[list[Message]] = None
    ) -> list[str]:
        """
        Answer a query: [generated answer] when a generator is usable,
        otherwise the stored answers of the best matches in score order.
        """
        query = self.security.sanitize_for_prompt(query)
        if not query:
            return []

        try:
            records = await self.vectors.ensure_records()
            availability = await self.selector.probe_availability()
            self.state.last_availability = availability
            query_vec = await self.embedder.embed(query)
        except Exception as e:
            logger.error(f"FAQ search failed before ranking: {e}")
            return []

        ranked = rank(query_vec, records, self.result_limit)
        if not ranked:
            logger.warning("No FAQ entries to rank")
            return []
        logger.info(
            f"Ranked {len(records)} FAQ entries; top score {ranked[0].score:.3f}"
        )

        question, pii = self.security.redact_pii(query)
        if pii:
            logger.info(f"Redacted {', '.join(pii)} from question before generation")

        answer = await self.selector.generate_answer(
            question, ranked[: self.context_size], self._redacted(history)
        )
        if answer:
            return [answer]
        return [r.answer for r in ranked]

    async def ask(self, query: str) -> list[str]:
        """search() with the controller's own history, then record the turn."""
        answers = await self.search(query, self.get_history())
        text, _ = self.security.redact_pii(self.security.sanitize_for_prompt(query))
        if text:
            self.append_user(text)
            if answers:
                self.append_assistant(answers[0])
        return answers
