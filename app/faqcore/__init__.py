"""Retrieval-augmented FAQ assistant: embed, rank, optionally rewrite."""

from .config import AppConfig, configure_logging
from .controller import FAQAssistantController
from .models import FAQEntry, FAQRecord, GeneratorAvailability, ScoredRecord
from .selector import AnswerSourceSelector, SecondaryBackendState
from .services.similarity import rank, similarity

__all__ = [
    "AppConfig",
    "configure_logging",
    "FAQAssistantController",
    "FAQEntry",
    "FAQRecord",
    "GeneratorAvailability",
    "ScoredRecord",
    "AnswerSourceSelector",
    "SecondaryBackendState",
    "rank",
    "similarity",
]
