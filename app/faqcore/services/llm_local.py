"""
Purpose: Secondary generation backend. A small instruction-tuned model run
locally through a Hugging Face `transformers` text-generation pipeline.

Loading is two steps: resolve the model asset bundle (a configured local
directory, or a snapshot from the Hub cache / download), then build the
pipeline from that path. Both steps block, so they run in a worker thread.
The loaded generator is meant to be cached by SecondaryBackendState and
reused for the life of the process.

Testing: Fake pipeline callables; assert chat output extraction.
"""

from __future__ import annotations
import asyncio
import logging
from pathlib import Path
from typing import Any, Optional

from ..models import Message

logger = logging.getLogger(__name__)


def _extract_text(output: Any) -> str:
    """Pull the assistant reply out of a text-generation pipeline result."""
    if isinstance(output, list) and output:
        output = output[0]
    if isinstance(output, dict):
        output = output.get("generated_text", "")
    if isinstance(output, list):
        # chat input: generated_text is the whole conversation
        for m in reversed(output):
            if isinstance(m, dict) and m.get("role") == "assistant":
                return (m.get("content") or "").strip()
        return ""
    return str(output or "").strip()


class LocalGenerator:
    def __init__(self, pipe, *, max_new_tokens: int = 96):
        self.pipe = pipe
        self.max_new_tokens = max_new_tokens

    async def generate(self, messages: list[Message]) -> str:
        def run():
            return self.pipe(
                [dict(m) for m in messages],
                max_new_tokens=self.max_new_tokens,
                do_sample=False,
            )

        return _extract_text(await asyncio.to_thread(run))


class LocalModelLoader:
    def __init__(
        self,
        model_id: str,
        *,
        model_dir: Optional[str] = None,
        max_new_tokens: int = 96,
    ):
        self.model_id = model_id
        self.model_dir = model_dir
        self.max_new_tokens = max_new_tokens

    def resolve_assets(self) -> str:
        """Return a local path holding the model files."""
        if self.model_dir:
            path = Path(self.model_dir)
            if not path.is_dir():
                raise RuntimeError(f"Local model directory not found: {path}")
            return str(path)
        from huggingface_hub import snapshot_download

        return snapshot_download(repo_id=self.model_id)

    def build_pipeline(self, path: str):
        from transformers import pipeline

        return pipeline("text-generation", model=path)

    async def load(self) -> LocalGenerator:
        path = await asyncio.to_thread(self.resolve_assets)
        logger.info(f"Loading local model {self.model_id} from {path}")
        pipe = await asyncio.to_thread(self.build_pipeline, path)
        return LocalGenerator(pipe, max_new_tokens=self.max_new_tokens)
