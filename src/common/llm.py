"""Clients for the chat and embedding APIs used by the briefing pipeline."""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, field
from typing import Callable

from openai import OpenAI, OpenAIError

logger = logging.getLogger(__name__)

DEFAULT_CHAT_BASE_URL = "https://api.deepseek.com/v1"
DEFAULT_EMBEDDING_BASE_URL = "https://api.together.xyz/v1"


class RateLimiter:
    """Enforce a minimum interval between consecutive calls.

    The first call goes through immediately; each later call waits until
    ``min_interval`` seconds have passed since the previous one finished.
    """

    def __init__(
        self,
        min_interval: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.min_interval = max(0.0, min_interval)
        self._clock = clock
        self._sleep = sleep
        self._last_call: float | None = None

    def wait(self) -> None:
        if self._last_call is not None:
            remaining = self.min_interval - (self._clock() - self._last_call)
            if remaining > 0:
                logger.debug("Rate limiter sleeping %.2fs", remaining)
                self._sleep(remaining)

    def mark(self) -> None:
        self._last_call = self._clock()


class ChatClient:
    """Single-turn chat completion against an OpenAI-compatible endpoint."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str = "deepseek-chat",
        max_tokens: int = 2048,
        temperature: float = 0.7,
        client: OpenAI | None = None,
    ) -> None:
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        if client is not None:
            self._client = client
            return

        api_key = api_key or os.environ.get("DEEPSEEK_API_KEY")
        if not api_key:
            raise RuntimeError("DEEPSEEK_API_KEY not found in environment variables")
        self._client = OpenAI(
            api_key=api_key,
            base_url=base_url or os.environ.get("DEEPSEEK_BASE_URL", DEFAULT_CHAT_BASE_URL),
        )

    def chat_complete(self, prompt: str, system_prompt: str | None = None) -> str | None:
        """Return the trimmed completion text, or None if the call failed or came back empty."""
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        try:
            response = self._client.chat.completions.create(
                model=self.model,
                messages=messages,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except OpenAIError as exc:
            logger.error("Chat completion failed (model=%s): %s", self.model, exc)
            return None

        if not response.choices:
            return None
        content = response.choices[0].message.content
        if not content or not content.strip():
            return None
        return content.strip()


class RateLimitedChatClient:
    """Wrap a chat client so that calls are paced by a RateLimiter."""

    def __init__(self, client: ChatClient, limiter: RateLimiter) -> None:
        self.client = client
        self.limiter = limiter

    def chat_complete(self, prompt: str, system_prompt: str | None = None) -> str | None:
        self.limiter.wait()
        try:
            return self.client.chat_complete(prompt, system_prompt=system_prompt)
        finally:
            self.limiter.mark()


class EmbeddingClient:
    """Embedding lookups against an OpenAI-compatible endpoint."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str = "togethercomputer/m2-bert-80M-32k-retrieval",
        client: OpenAI | None = None,
    ) -> None:
        self.model = model
        if client is not None:
            self._client = client
            return

        api_key = api_key or os.environ.get("EMBEDDING_API_KEY")
        if not api_key:
            raise RuntimeError("EMBEDDING_API_KEY not found in environment variables")
        self._client = OpenAI(
            api_key=api_key,
            base_url=base_url or os.environ.get("EMBEDDING_BASE_URL", DEFAULT_EMBEDDING_BASE_URL),
        )

    def embed_text(self, text: str) -> list[float] | None:
        logger.debug("Embedding text snippet: %r", text[:50])
        try:
            response = self._client.embeddings.create(model=self.model, input=[text])
        except OpenAIError as exc:
            logger.error("Embedding request failed (model=%s): %s", self.model, exc)
            return None

        if not response.data:
            logger.warning("No embedding returned for text")
            return None
        return list(response.data[0].embedding)


@dataclass
class ConnectivityReport:
    chat: bool = False
    embedding: bool = False
    errors: list[str] = field(default_factory=list)


def check_connectivity(
    chat: ChatClient | None,
    embedder: EmbeddingClient | None,
) -> ConnectivityReport:
    """Probe both APIs with a tiny request each."""
    report = ConnectivityReport()

    if chat is None:
        report.errors.append("Chat client not configured")
    elif chat.chat_complete('Respond with "OK" if you can read this.') is None:
        report.errors.append("Chat API returned null response")
    else:
        report.chat = True

    if embedder is None:
        report.errors.append("Embedding client not configured")
    else:
        embedding = embedder.embed_text("This is a test for embedding API connectivity.")
        if embedding:
            report.embedding = True
        else:
            report.errors.append("Embedding API returned null or empty embedding")

    return report
