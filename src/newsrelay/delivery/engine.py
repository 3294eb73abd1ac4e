"""
Delivery engine.

Sends the chunks of one message to the sink picked by position, strictly
sequentially, pausing between chunks. Any non-retryable sink failure is
raised as DeliveryError and aborts the run.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from newsrelay.delivery.formatter import add_part_markers
from newsrelay.delivery.rotation import SinkRotator
from newsrelay.delivery.sinks.webhook import WebhookSink

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from newsrelay.delivery.config import DeliveryConfig
    from newsrelay.delivery.sinks.base import DeliveryResult, DeliverySink

logger = logging.getLogger(__name__)


class DeliveryError(Exception):
    """A sink rejected a chunk with a non-retryable status, or was unreachable."""

    def __init__(
        self,
        message: str,
        *,
        sink_name: str,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.sink_name = sink_name
        self.status_code = status_code
        self.body = body


@dataclass
class DeliveryMetrics:
    """Metrics for delivery operations."""

    messages_delivered: int = 0
    chunks_sent: int = 0
    rate_limited: int = 0
    sink_successes: dict[str, int] = field(default_factory=dict)


class DeliveryEngine:
    """
    Sequential chunk delivery with stable sink rotation.

    The i-th message of a run goes to sinks[i mod N] regardless of earlier
    failures. Chunks of a multi-part message carry `Part i/N` markers.
    """

    def __init__(
        self,
        config: DeliveryConfig,
        sinks: Sequence[DeliverySink] | None = None,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._config = config
        self._sleep = sleep
        if sinks is None:
            sinks = [
                WebhookSink(sink_config, index=index, sleep=sleep)
                for index, sink_config in enumerate(config.sinks)
            ]
        self._sinks = list(sinks)
        self._rotator = SinkRotator(self._sinks)
        self._metrics = DeliveryMetrics()

    @property
    def metrics(self) -> DeliveryMetrics:
        return self._metrics

    @property
    def sinks(self) -> list[DeliverySink]:
        return list(self._sinks)

    def sink_for(self, position: int) -> DeliverySink:
        """Sink used for the message at this position in the batch."""
        return self._rotator.select(position)

    async def deliver(self, position: int, chunks: list[str]) -> list[DeliveryResult]:
        """
        Deliver all chunks of one message.

        Returns only when every chunk was accepted; raises DeliveryError
        otherwise. No state is recorded here on failure.
        """
        if not chunks:
            raise ValueError("cannot deliver an empty message")

        sink = self.sink_for(position)
        contents = add_part_markers(chunks)

        if self._config.dry_run:
            for content in contents:
                logger.info(
                    "Dry run delivery",
                    extra={"sink": sink.name, "position": position, "text": content[:200]},
                )
            return []

        results: list[DeliveryResult] = []
        for index, content in enumerate(contents):
            if index > 0 and self._config.chunk_delay_ms:
                await self._sleep(self._config.chunk_delay_ms / 1000)

            result = await sink.send(content)
            self._metrics.rate_limited += result.rate_limited

            if not result.success:
                raise DeliveryError(
                    f"{sink.name} rejected part {index + 1}/{len(contents)}: {result.error}",
                    sink_name=sink.name,
                    status_code=result.status_code,
                    body=result.body,
                )

            self._metrics.chunks_sent += 1
            results.append(result)

        self._metrics.messages_delivered += 1
        self._metrics.sink_successes[sink.name] = (
            self._metrics.sink_successes.get(sink.name, 0) + 1
        )
        logger.debug(
            "Message delivered",
            extra={"sink": sink.name, "position": position, "parts": len(contents)},
        )
        return results

    async def close(self) -> None:
        """Close all sinks and release resources."""
        for sink in self._sinks:
            try:
                await sink.close()
            except Exception as e:
                logger.error(
                    "Error closing sink",
                    extra={"sink": sink.name, "error": str(e)},
                )
