"""
Relay configuration.

Assembles the per-component config dataclasses from environment
variables. Every validation failure raises ValueError with a message
naming the offending setting; the CLI treats it as startup-fatal.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from newsrelay.delivery.config import (
    DEFAULT_CHART_URL_TEMPLATE,
    DEFAULT_MAX_CHARS,
    DeliveryConfig,
    FormatterConfig,
    WebhookSinkConfig,
)
from newsrelay.source.config import DEFAULT_USER_AGENT, SourceConfig
from newsrelay.translate.config import DEFAULT_RETRY_MULTIPLIER, TranslationConfig

if TYPE_CHECKING:
    from collections.abc import Mapping

REQUIRED_ENV_VARS = ("SITE_URL", "DISCORD_WEBHOOK_URL", "LOG_FILE")

_LIST_SPLIT = re.compile(r"[,\s]+")
_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off"})


def split_list(value: str | None) -> list[str]:
    """Split a comma/whitespace separated env value, dropping empties."""
    if not value:
        return []
    return [item for item in _LIST_SPLIT.split(value.strip()) if item]


def _get_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _get_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def _get_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name, "").strip().lower()
    if not raw:
        return default
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise ValueError(f"{name} must be true/false, got {raw!r}")


@dataclass
class RelayConfig:
    """Configuration for one relay run."""

    source: SourceConfig
    delivery: DeliveryConfig
    state_file: Path
    translation: TranslationConfig = field(default_factory=TranslationConfig)
    max_items: int = 10
    log_level: str = "INFO"
    log_json: bool = False

    def __post_init__(self) -> None:
        if not 1 <= self.max_items <= 500:
            raise ValueError(f"MAX_NEWS_MESSAGES must be 1..500, got {self.max_items}")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"LOG_LEVEL is not a valid level: {self.log_level!r}")
        self.log_level = self.log_level.upper()

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RelayConfig:
        """Build configuration from environment variables."""
        env = os.environ if environ is None else environ

        missing = [name for name in REQUIRED_ENV_VARS if not env.get(name, "").strip()]
        if missing:
            raise ValueError(f"Missing required environment values: {', '.join(missing)}")

        site_url = env["SITE_URL"].strip()
        webhook_timeout_s = _get_float(env, "WEBHOOK_TIMEOUT_S", 15.0)
        sink_urls = split_list(env.get("DISCORD_WEBHOOK_URL")) + split_list(
            env.get("DISCORD_WEBHOOK_URLS")
        )
        sinks = [WebhookSinkConfig(url=url, timeout_s=webhook_timeout_s) for url in sink_urls]

        placeholders_raw = env.get("FULL_TWEET_PLACEHOLDERS")
        placeholders = frozenset(
            split_list(placeholders_raw) if placeholders_raw is not None else ["00"]
        )

        formatter = FormatterConfig(
            site_url=site_url,
            tag=env.get("DISCORD_TAG", ""),
            max_chars=_get_int(env, "MESSAGE_MAX_CHARS", DEFAULT_MAX_CHARS),
            chart_url_template=env.get("CHART_URL_TEMPLATE", "").strip()
            or DEFAULT_CHART_URL_TEMPLATE,
            full_tweet_placeholders=placeholders,
        )

        delivery = DeliveryConfig(
            sinks=sinks,
            formatter=formatter,
            chunk_delay_ms=_get_int(env, "CHUNK_DELAY_MS", 500),
            message_delay_ms=_get_int(env, "MESSAGE_DELAY_MS", 1000),
        )

        source = SourceConfig(
            site_url=site_url,
            headless=_get_bool(env, "HEADLESS", True),
            navigation_timeout_ms=_get_int(env, "NAV_TIMEOUT_MS", 60000),
            page_wait_timeout_ms=_get_int(env, "PAGE_WAIT_TIMEOUT_MS", 45000),
            user_agent=env.get("USER_AGENT", "").strip() or DEFAULT_USER_AGENT,
        )

        credentials = split_list(env.get("TRANSLATION_API_KEYS"))
        if not credentials and env.get("ANTHROPIC_API_KEY", "").strip():
            credentials = [env["ANTHROPIC_API_KEY"].strip()]

        translation = TranslationConfig(
            target_language=env.get("TRANSLATE_TARGET_LANGUAGE", "").strip(),
            credentials=credentials,
            model=env.get("TRANSLATION_MODEL", "").strip() or TranslationConfig.model,
            timeout_s=_get_float(env, "TRANSLATION_TIMEOUT_S", 30.0),
            batch_size=_get_int(env, "TRANSLATION_BATCH_SIZE", 10),
            batch_delay_ms=_get_int(env, "TRANSLATION_BATCH_DELAY_MS", 1500),
            retry_multiplier=_get_int(
                env, "TRANSLATION_RETRY_MULTIPLIER", DEFAULT_RETRY_MULTIPLIER
            ),
        )

        return cls(
            source=source,
            delivery=delivery,
            state_file=Path(env["LOG_FILE"].strip()),
            translation=translation,
            max_items=_get_int(env, "MAX_NEWS_MESSAGES", 10),
            log_level=env.get("LOG_LEVEL", "").strip() or "INFO",
            log_json=_get_bool(env, "LOG_JSON", False),
        )
