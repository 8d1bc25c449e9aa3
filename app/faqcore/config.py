"""
Purpose: Runtime configuration from the environment (and a local .env file)
and logging setup. FAQAssistantController.from_config turns an AppConfig into
wired adapters.
"""

from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .corpus import DEFAULT_CORPUS_PATH

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    try:
        return int(raw) if raw is not None and raw.strip() else default
    except ValueError:
        logger.warning(f"Ignoring non-integer {name}={raw!r}; using {default}")
        return default


@dataclass
class AppConfig:
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    embed_model: str = "sentence-transformers/all-MiniLM-L6-v2"
    local_model: str = "Qwen/Qwen2.5-0.5B-Instruct"
    local_model_dir: Optional[str] = None
    local_enabled: bool = True
    store_path: Path = Path(".cache/faq_store.json")
    corpus_path: Path = DEFAULT_CORPUS_PATH
    result_limit: int = 10
    context_size: int = 3
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, *, dotenv: bool = True) -> "AppConfig":
        if dotenv:
            load_dotenv()
        return cls(
            openai_api_key=os.getenv("OPENAI_API_KEY") or None,
            openai_model=os.getenv("FAQ_OPENAI_MODEL", cls.openai_model),
            embed_model=os.getenv("FAQ_EMBED_MODEL", cls.embed_model),
            local_model=os.getenv("FAQ_LOCAL_MODEL", cls.local_model),
            local_model_dir=os.getenv("FAQ_LOCAL_MODEL_DIR") or None,
            local_enabled=_env_bool("FAQ_LOCAL_ENABLED", True),
            store_path=Path(os.getenv("FAQ_STORE_PATH", str(cls.store_path))),
            corpus_path=Path(os.getenv("FAQ_CORPUS_PATH", str(DEFAULT_CORPUS_PATH))),
            result_limit=_env_int("FAQ_RESULT_LIMIT", cls.result_limit),
            context_size=_env_int("FAQ_CONTEXT_SIZE", cls.context_size),
            log_level=os.getenv("FAQ_LOG_LEVEL", cls.log_level).upper(),
        )


def configure_logging(level: str = "INFO") -> None:
    numeric = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=numeric, format=LOG_FORMAT)
    logging.getLogger().setLevel(numeric)
