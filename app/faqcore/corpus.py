"""
Purpose: Load the static FAQ corpus (ordered question/answer pairs).
The packaged corpus lives in data/faq.json; a different file can be
configured with FAQ_CORPUS_PATH.
"""

from __future__ import annotations
import json
from pathlib import Path
from typing import Optional

from .models import FAQEntry

DEFAULT_CORPUS_PATH = Path(__file__).parent / "data" / "faq.json"


def parse_faq_entries(data) -> list[FAQEntry]:
    if not isinstance(data, list):
        raise ValueError("FAQ corpus must be a JSON array.")
    entries: list[FAQEntry] = []
    for i, item in enumerate(data):
        if not isinstance(item, dict):
            raise ValueError(f"FAQ item {i} is not an object.")
        question = (item.get("question") or "").strip()
        answer = (item.get("answer") or "").strip()
        if not question or not answer:
            raise ValueError(f"FAQ item {i} needs a question and an answer.")
        entries.append(FAQEntry(question=question, answer=answer))
    return entries


def load_faq_entries(path: Optional[str | Path] = None) -> list[FAQEntry]:
    """Read the corpus once; order is preserved."""
    p = Path(path) if path else DEFAULT_CORPUS_PATH
    with open(p, "r", encoding="utf-8") as f:
        return parse_faq_entries(json.load(f))
