"""
Webhook sink.

Delivers chat messages via an incoming-webhook URL. HTTP 429 is the one
failure class retried without limit, honoring the server's retry_after.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import aiohttp
import orjson

from newsrelay.delivery.sinks.base import DeliveryResult, DeliverySink

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from newsrelay.delivery.config import WebhookSinkConfig

logger = logging.getLogger(__name__)


def parse_retry_after(body: str, default_s: float = 1.0) -> float:
    """
    Extract retry_after (seconds) from a 429 response body.

    Falls back to default_s when the body is not JSON or the value is
    missing or not a non-negative number.
    """
    try:
        data = orjson.loads(body) if body else None
    except orjson.JSONDecodeError:
        return default_s

    if not isinstance(data, dict):
        return default_s

    value = data.get("retry_after")
    if isinstance(value, bool):
        return default_s
    try:
        retry_after = float(value)
    except (TypeError, ValueError):
        return default_s
    return retry_after if retry_after >= 0 else default_s


class WebhookSink(DeliverySink):
    """
    Chat webhook delivery sink.

    POSTs {"content": text} to the configured URL.
    - 2xx: accepted
    - 429: sleep retry_after*1000 + padding ms, resend, no retry cap
    - other: failure carrying status and body
    """

    def __init__(
        self,
        config: WebhookSinkConfig,
        *,
        index: int = 0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._config = config
        self._index = index
        self._sleep = sleep
        self._session: aiohttp.ClientSession | None = None

    @property
    def name(self) -> str:
        # Don't expose webhook URL in name
        return f"webhook:{self._index}"

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self._config.timeout_s)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    def retry_delay_s(self, body: str) -> float:
        """Delay before resending after a 429 with the given body."""
        retry_after = parse_retry_after(body, self._config.default_retry_after_s)
        return (retry_after * 1000 + self._config.retry_padding_ms) / 1000

    async def send(self, content: str) -> DeliveryResult:
        """Send one chunk to the webhook."""
        payload = {"content": content}
        rate_limited = 0

        while True:
            try:
                session = await self._get_session()
                async with session.post(self._config.url, json=payload) as resp:
                    status = resp.status

                    if 200 <= status < 300:
                        return DeliveryResult(
                            success=True,
                            sink_name=self.name,
                            status_code=status,
                            rate_limited=rate_limited,
                        )

                    body = await resp.text()

            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                logger.error(
                    "Webhook connection error",
                    extra={"sink": self.name, "error": str(e)},
                )
                return DeliveryResult(
                    success=False,
                    sink_name=self.name,
                    error=f"Connection error: {e}",
                    rate_limited=rate_limited,
                )

            if status == 429:
                rate_limited += 1
                delay_s = self.retry_delay_s(body)
                logger.warning(
                    "Webhook rate limited",
                    extra={"sink": self.name, "delay_s": delay_s, "attempt": rate_limited},
                )
                await self._sleep(delay_s)
                continue

            logger.error(
                "Webhook send failed",
                extra={"sink": self.name, "status": status, "error": body[:200]},
            )
            return DeliveryResult(
                success=False,
                sink_name=self.name,
                error=f"HTTP {status}: {body[:200]}",
                status_code=status,
                body=body,
                rate_limited=rate_limited,
            )

    async def close(self) -> None:
        """Close aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None
