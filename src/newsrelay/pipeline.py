"""
Relay pipeline.

One single-shot run:
    load processed set -> scrape -> drop seen records -> oldest-first
    -> optional translation -> format -> deliver (rotating sinks)
    -> save processed set

The processed set is saved once, after every delivery succeeded. A fatal
error aborts the run before saving, so the whole batch is re-evaluated on
the next invocation.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from newsrelay.contracts import DeliveryUnit
from newsrelay.delivery.formatter import NewsFormatter

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from newsrelay.contracts import RawRecord
    from newsrelay.delivery.config import DeliveryConfig
    from newsrelay.delivery.engine import DeliveryEngine
    from newsrelay.source.base import SourceAdapter
    from newsrelay.state.store import ProcessedSetStore
    from newsrelay.translate.translator import TranslationStage

logger = logging.getLogger(__name__)


@dataclass
class RunSummary:
    """Outcome of a successful run."""

    scraped: int = 0
    new: int = 0
    delivered: int = 0
    chunks_sent: int = 0
    rate_limited: int = 0
    summaries_translated: bool = False
    full_tweets_translated: bool = False
    dry_run: bool = False


def select_new_units(records: Sequence[RawRecord], processed: set[str]) -> list[DeliveryUnit]:
    """
    Build delivery units for unseen records, oldest-first.

    Input is newest-first as scraped. Duplicates inside one scrape are
    kept once (the newest occurrence).
    """
    seen: set[str] = set()
    units: list[DeliveryUnit] = []
    for record in records:
        unit = DeliveryUnit.from_record(record)
        if unit.fingerprint in processed or unit.fingerprint in seen:
            continue
        seen.add(unit.fingerprint)
        units.append(unit)
    units.reverse()
    return units


class RelayPipeline:
    """Ties source, dedup store, translation and delivery into one run."""

    def __init__(
        self,
        *,
        source: SourceAdapter,
        store: ProcessedSetStore,
        engine: DeliveryEngine,
        config: DeliveryConfig,
        max_items: int,
        translation: TranslationStage | None = None,
        formatter: NewsFormatter | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._source = source
        self._store = store
        self._engine = engine
        self._config = config
        self._max_items = max_items
        self._translation = translation
        self._formatter = formatter or NewsFormatter(config.formatter)
        self._sleep = sleep

    async def run(self) -> RunSummary:
        """Execute one run. Raises on run-fatal errors without saving state."""
        processed = self._store.load()
        summary = RunSummary(dry_run=self._config.dry_run)

        records = await self._source.fetch_records(self._max_items)
        summary.scraped = len(records)

        units = select_new_units(records, processed)
        summary.new = len(units)
        logger.info(
            "Records selected for delivery",
            extra={"scraped": summary.scraped, "new": summary.new, "known": len(processed)},
        )

        outcome = None
        if units and self._translation is not None:
            outcome = await self._translation.run(units)
            summary.summaries_translated = outcome.summaries is not None
            summary.full_tweets_translated = outcome.full_tweets is not None

        for position, unit in enumerate(units):
            if position > 0 and self._config.message_delay_ms:
                await self._sleep(self._config.message_delay_ms / 1000)

            record = outcome.apply(position, unit.record) if outcome else unit.record
            message = self._formatter.format(record)
            await self._engine.deliver(position, message.chunks)

            # Commit only after every chunk was accepted
            processed.add(unit.fingerprint)
            summary.delivered += 1

        metrics = self._engine.metrics
        summary.chunks_sent = metrics.chunks_sent
        summary.rate_limited = metrics.rate_limited
        logger.info(
            "Delivery finished",
            extra={
                "delivered": summary.delivered,
                "chunks": summary.chunks_sent,
                "per_sink": dict(metrics.sink_successes),
            },
        )

        if self._config.dry_run:
            logger.info("Dry run, state file not written")
        else:
            self._store.save(processed)

        return summary
