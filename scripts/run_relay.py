#!/usr/bin/env python3
"""
Single-shot news relay run.

Scrapes the dashboard, skips items already delivered, optionally
translates the rest, and posts them to the configured webhooks.

Usage:
    python -m scripts.run_relay
    python -m scripts.run_relay --env-file deploy/.env --verbose
    python -m scripts.run_relay --dry-run  # format and log, send nothing

Exit codes:
    0  run finished, state saved
    1  run-fatal error (dashboard or webhook failure), state not saved
    2  startup-fatal configuration error
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from newsrelay.config import RelayConfig
from newsrelay.delivery.engine import DeliveryEngine, DeliveryError
from newsrelay.delivery.rotation import CredentialPool
from newsrelay.logging_config import setup_logging
from newsrelay.pipeline import RelayPipeline, RunSummary
from newsrelay.source.base import SourceError
from newsrelay.source.dashboard import DashboardSource
from newsrelay.state.store import ProcessedSetStore
from newsrelay.translate.service import AnthropicTranslationService
from newsrelay.translate.translator import BatchTranslator, TranslationStage

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_RUN_FATAL = 1
EXIT_CONFIG = 2


async def run_relay(config: RelayConfig) -> RunSummary:
    """Wire components from config and execute one run."""
    engine = DeliveryEngine(config.delivery)

    translation: TranslationStage | None = None
    service: AnthropicTranslationService | None = None
    if config.translation.enabled:
        service = AnthropicTranslationService(config.translation)
        pool = CredentialPool(
            config.translation.credentials,
            cooldown_s=config.translation.credential_cooldown_s,
        )
        translation = TranslationStage(
            BatchTranslator(service, pool, config.translation),
            full_tweet_placeholders=config.delivery.formatter.full_tweet_placeholders,
        )

    pipeline = RelayPipeline(
        source=DashboardSource(config.source),
        store=ProcessedSetStore(config.state_file),
        engine=engine,
        config=config.delivery,
        max_items=config.max_items,
        translation=translation,
    )

    try:
        return await pipeline.run()
    finally:
        await engine.close()
        if service is not None:
            await service.close()


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Relay new dashboard items to chat webhooks.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Load environment from this file (default: ./.env if present)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Scrape, translate and format, but do not send or save state",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args(argv)

    # Real environment wins over the file
    if args.env_file is not None:
        load_dotenv(args.env_file, override=False)
    else:
        load_dotenv(override=False)

    try:
        config = RelayConfig.from_env()
    except ValueError as e:
        setup_logging()
        logger.error("Invalid configuration: %s", e)
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG

    config.delivery.dry_run = args.dry_run
    setup_logging(
        level=logging.DEBUG if args.verbose else config.log_level,
        json_format=config.log_json,
    )

    logger.info(
        "Starting relay run",
        extra={
            "sinks": len(config.delivery.sinks),
            "max_items": config.max_items,
            "translation": config.translation.enabled,
            "dry_run": args.dry_run,
        },
    )

    try:
        summary = asyncio.run(run_relay(config))
    except (SourceError, DeliveryError) as e:
        logger.error("Relay run failed: %s", e, exc_info=True)
        return EXIT_RUN_FATAL
    except Exception:
        logger.exception("Relay run failed unexpectedly")
        return EXIT_RUN_FATAL

    logger.info(
        "Relay run finished",
        extra={
            "scraped": summary.scraped,
            "delivered": summary.delivered,
            "chunks": summary.chunks_sent,
            "rate_limited": summary.rate_limited,
        },
    )
    print(f"Processed {summary.delivered} new item(s).")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
