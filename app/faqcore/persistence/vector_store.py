"""
Purpose: Embedded FAQ corpus cached under one key of a key-value store.
Why: Embedding the corpus is the slow step; do it once per store.

What is inside:
FAQVectorStore.init() embeds the corpus when the key is empty.
load_records() parses the cached corpus; corrupt data is dropped.
ensure_records() combines both and rebuilds once after corruption.
clear_storage() forgets the cached corpus.

Concurrent init() calls against an empty store may both embed and both
write. They write the same corpus, so the second write is harmless.

Testing: In-memory store + fake embedder; corrupt payloads; overlapping init.
"""

from __future__ import annotations
import json
import logging
from typing import Sequence

from ..interfaces import Embedder, KeyValueStore
from ..models import FAQEntry, FAQRecord

logger = logging.getLogger(__name__)

STORAGE_KEY = "vector_store_embeddings"


def embedding_text(entry: FAQEntry) -> str:
    return entry.question + " " + entry.answer


class FAQVectorStore:
    def __init__(
        self,
        store: KeyValueStore,
        embedder: Embedder,
        entries: Sequence[FAQEntry],
        *,
        key: str = STORAGE_KEY,
    ):
        self.store = store
        self.embedder = embedder
        self.entries = list(entries)
        self.key = key

    def is_initialized(self) -> bool:
        return bool(self.store.get(self.key))

    async def init(self) -> None:
        """Embed and cache the corpus unless a cached value already exists."""
        if self.is_initialized():
            return

        records: list[FAQRecord] = []
        for entry in self.entries:
            vector = await self.embedder.embed(embedding_text(entry))
            records.append(
                FAQRecord(
                    question=entry.question,
                    answer=entry.answer,
                    embedding=tuple(vector),
                )
            )

        self.store.set(self.key, json.dumps([r.to_storage() for r in records]))
        logger.info(f"Embedded {len(records)} FAQ entries into '{self.key}'")

    def _parse(self, raw: str) -> list[FAQRecord] | None:
        """Parsed records, or None when the payload is corrupt."""
        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError("expected a JSON array")
            return [FAQRecord.from_storage(item) for item in data]
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"Discarding corrupt FAQ embeddings under '{self.key}': {e}")
            return None

    def load_records(self) -> list[FAQRecord]:
        """Cached records; corrupt data is removed and reads as empty."""
        raw = self.store.get(self.key)
        if not raw:
            return []
        records = self._parse(raw)
        if records is None:
            self.store.remove(self.key)
            return []
        return records

    async def ensure_records(self) -> list[FAQRecord]:
        await self.init()
        raw = self.store.get(self.key)
        records = self._parse(raw) if raw else []
        if records is not None:
            return records

        self.store.remove(self.key)
        await self.init()
        return self.load_records()

    def clear_storage(self) -> None:
        self.store.remove(self.key)
