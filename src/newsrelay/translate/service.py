"""
Translation Service provider.

The core only needs one call: send a prompt with a given credential and
get raw text back. SDK rate-limit and overload errors are mapped onto the
translator error types; anything else propagates untouched.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

import anthropic
from anthropic import AsyncAnthropic

from newsrelay.translate.translator import (
    UNAVAILABLE_STATUSES,
    TranslationRateLimitError,
    TranslationUnavailableError,
)

if TYPE_CHECKING:
    from newsrelay.translate.config import TranslationConfig

logger = logging.getLogger(__name__)


class TranslationService(Protocol):
    """Batch translation backend."""

    async def complete(self, prompt: str, credential: str) -> str:
        """Return the raw model response for prompt, authenticated by credential."""
        ...


class AnthropicTranslationService:
    """
    Anthropic Messages API backend.

    One client per credential, created lazily. The SDK's own retries are
    disabled so rate limits surface immediately and the credential pool
    can rotate.
    """

    def __init__(self, config: TranslationConfig) -> None:
        self._config = config
        self._clients: dict[str, AsyncAnthropic] = {}

    def _client_for(self, credential: str) -> AsyncAnthropic:
        client = self._clients.get(credential)
        if client is None:
            client = AsyncAnthropic(
                api_key=credential,
                max_retries=0,
                timeout=self._config.timeout_s,
            )
            self._clients[credential] = client
        return client

    async def complete(self, prompt: str, credential: str) -> str:
        client = self._client_for(credential)
        try:
            response = await client.messages.create(
                model=self._config.model,
                max_tokens=self._config.max_tokens,
                temperature=0.0,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.RateLimitError as e:
            raise TranslationRateLimitError(str(e)) from e
        except anthropic.APIStatusError as e:
            if e.status_code in UNAVAILABLE_STATUSES:
                raise TranslationUnavailableError(str(e)) from e
            raise
        except anthropic.APIConnectionError as e:
            raise TranslationUnavailableError(str(e)) from e

        if not response.content:
            raise ValueError("Empty response from Anthropic API")

        return "".join(
            block.text for block in response.content if getattr(block, "type", "text") == "text"
        )

    async def close(self) -> None:
        for client in self._clients.values():
            await client.close()
        self._clients.clear()
