"""
Purpose: Vectorize FAQ entries and queries for semantic search.
Wraps a sentence-transformers model; the model is loaded lazily on first use
and kept for the life of the embedder.

Testing: Deterministic embeddings via fakes; this adapter is not exercised
against a real model in unit tests.
"""

from __future__ import annotations
import asyncio
import logging
import threading

logger = logging.getLogger(__name__)

DEFAULT_EMBED_MODEL = "sentence-transformers/all-MiniLM-L6-v2"


class SentenceTransformerEmbedder:
    def __init__(self, model_name: str = DEFAULT_EMBED_MODEL, *, model=None):
        self.model_name = model_name
        self._model = model
        self._lock = threading.Lock()

    def _get_model(self):
        with self._lock:
            if self._model is None:
                from sentence_transformers import SentenceTransformer

                logger.info(f"Loading embedding model {self.model_name}")
                self._model = SentenceTransformer(self.model_name)
            return self._model

    def embed_sync(self, text: str) -> list[float]:
        vec = self._get_model().encode(text, normalize_embeddings=True)
        return [float(x) for x in vec.tolist()]

    async def embed(self, text: str) -> list[float]:
        return await asyncio.to_thread(self.embed_sync, text)
