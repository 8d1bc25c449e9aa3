"""
Purpose: Primary generation backend. Thin client wrapper around OpenAI chat
completions, shaped as a session API: presence check, availability probe,
session create (seeded with prior turns), prompt, destroy.
One place for auth, retries, model options and response normalization.

Extensibility:
- Add other providers behind the same PrimaryBackend protocol without
  touching the selector.

Testing: Mock SDK calls; assert availability mapping, retries and that a
destroyed session refuses further prompts.
"""

from __future__ import annotations
import asyncio
import logging
from typing import Optional

from ..models import BackendStatus, LLMSettings, Message

try:
    from openai import AsyncOpenAI
    from openai import (
        APIError,
        APITimeoutError,
        AuthenticationError,
        BadRequestError,
        NotFoundError,
        PermissionDeniedError,
        RateLimitError,
    )
except Exception:
    AsyncOpenAI = None
    APIError = APITimeoutError = AuthenticationError = BadRequestError = Exception
    NotFoundError = PermissionDeniedError = RateLimitError = Exception

logger = logging.getLogger(__name__)

RETRY_DELAYS = (0.5, 1.0, 2.0, 4.0)
# a repeat of the same request cannot succeed
NOT_RETRYABLE = (
    AuthenticationError,
    PermissionDeniedError,
    NotFoundError,
    BadRequestError,
)


async def _with_retries(fn, *args, delays=RETRY_DELAYS, **kwargs):
    for delay in delays:
        try:
            return await fn(*args, **kwargs)
        except (RateLimitError, APITimeoutError, APIError) as e:
            if isinstance(e, NOT_RETRYABLE):
                raise
            logger.warning(f"OpenAI call failed ({e}); retrying in {delay}s")
            await asyncio.sleep(delay)
    return await fn(*args, **kwargs)


class OpenAIChatSession:
    """Stateful chat: seed turns plus every prompt/reply exchanged so far."""

    def __init__(self, client, settings: LLMSettings, initial_prompts: list[Message]):
        self.client = client
        self.settings = settings
        self.messages: list[Message] = list(initial_prompts)
        self.destroyed = False

    async def prompt(self, text: str) -> str:
        if self.destroyed:
            raise RuntimeError("Session has been destroyed.")
        payload = [*self.messages, {"role": "user", "content": text}]

        def call_cc():
            return self.client.chat.completions.create(
                model=self.settings.model,
                messages=payload,
                temperature=self.settings.temperature,
                top_p=self.settings.top_p,
                max_tokens=self.settings.max_tokens,
                frequency_penalty=self.settings.frequency_penalty,
                presence_penalty=self.settings.presence_penalty,
            )

        cc = await _with_retries(call_cc)
        reply = (cc.choices[0].message.content or "").strip()
        usage = getattr(cc, "usage", None)
        logger.info(
            f"OpenAI reply from {getattr(cc, 'model', self.settings.model)}: "
            f"tokens_in={getattr(usage, 'prompt_tokens', 0) if usage else 0} "
            f"tokens_out={getattr(usage, 'completion_tokens', 0) if usage else 0}"
        )
        self.messages = [*payload, {"role": "assistant", "content": reply}]
        return reply

    def destroy(self) -> None:
        self.messages = []
        self.destroyed = True


class OpenAIChatBackend:
    def __init__(
        self,
        api_key: Optional[str],
        settings: LLMSettings,
        *,
        client=None,
    ):
        self.api_key = api_key
        self.settings = settings
        self.client = client
        if self.client is not None:
            return
        if not self.api_key:
            raise RuntimeError("Missing OPENAI_API_KEY")
        if AsyncOpenAI is None:
            raise RuntimeError("openai package not installed. pip install openai")
        try:
            self.client = AsyncOpenAI(api_key=self.api_key)
        except Exception as e:
            raise RuntimeError(f"Failed to initialize OpenAI client: {e}")

    def is_present(self) -> bool:
        return self.client is not None

    async def availability(self) -> BackendStatus:
        """Check that the configured model can be used with this key.

        Auth and not-found errors mean unavailable; connection errors propagate.
        """
        try:
            await self.client.models.retrieve(self.settings.model)
        except (AuthenticationError, PermissionDeniedError, NotFoundError) as e:
            logger.warning(f"OpenAI model {self.settings.model} unavailable: {e}")
            return BackendStatus.UNAVAILABLE
        return BackendStatus.AVAILABLE

    async def create_session(
        self, *, initial_prompts: list[Message]
    ) -> OpenAIChatSession:
        return OpenAIChatSession(self.client, self.settings, initial_prompts)
