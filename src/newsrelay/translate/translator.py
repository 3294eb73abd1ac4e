"""
Batch translation with credential rotation and fallback.

BatchTranslator turns a list of texts into a list of translations of the
same length and order, one prompt per fixed-size group:
- rate limit (429, "too many requests", "quota"): mark the credential,
  retry the same group with a fresh one, bounded per call
- service unavailable (500/503/529, "overloaded"): raise immediately
- anything else: raise immediately

TranslationStage wraps it for a run: any failure on either field yields
"no translation available" for both, and the original text is kept.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

import orjson

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from newsrelay.contracts import DeliveryUnit, RawRecord
    from newsrelay.delivery.rotation import CredentialPool
    from newsrelay.translate.config import TranslationConfig
    from newsrelay.translate.service import TranslationService

logger = logging.getLogger(__name__)


class TranslationError(Exception):
    """Base class for translation failures."""


class TranslationRateLimitError(TranslationError):
    """Provider signalled quota or rate-limit pressure."""


class TranslationUnavailableError(TranslationError):
    """Provider is overloaded or down."""


class TranslationQuotaExhaustedError(TranslationError):
    """Rate-limit retries for one batch call exceeded the cap."""


class TranslationFormatError(TranslationError, ValueError):
    """Provider response did not contain a usable translations array."""


class ErrorKind(str, Enum):
    """Classification of a provider error."""

    RATE_LIMIT = "RATE_LIMIT"
    UNAVAILABLE = "UNAVAILABLE"
    OTHER = "OTHER"


RATE_LIMIT_STATUSES = frozenset({429})
UNAVAILABLE_STATUSES = frozenset({500, 503, 529})
RATE_LIMIT_MARKERS = ("too many requests", "quota", "rate limit", "rate_limit")
UNAVAILABLE_MARKERS = ("overloaded", "service unavailable", "unavailable")


def classify_error(error: BaseException) -> ErrorKind:
    """Classify a provider exception from its status code and message."""
    if isinstance(error, TranslationRateLimitError):
        return ErrorKind.RATE_LIMIT
    if isinstance(error, TranslationUnavailableError):
        return ErrorKind.UNAVAILABLE

    status = getattr(error, "status_code", None)
    if status in RATE_LIMIT_STATUSES:
        return ErrorKind.RATE_LIMIT
    if status in UNAVAILABLE_STATUSES:
        return ErrorKind.UNAVAILABLE

    message = str(error).lower()
    if any(marker in message for marker in RATE_LIMIT_MARKERS):
        return ErrorKind.RATE_LIMIT
    if any(marker in message for marker in UNAVAILABLE_MARKERS):
        return ErrorKind.UNAVAILABLE
    return ErrorKind.OTHER


PROMPT_TEMPLATE = """You are a translation engine for financial news headlines.

Translate the "text" of every item below into {language}.

RULES:
1. Return exactly {count} translations, in the same order as the items.
2. Keep ticker symbols, $cashtags, numbers, URLs and emoji unchanged.
3. Do not add commentary, notes or explanations.
4. Output MUST be valid JSON with exactly this shape (no markdown):
{{"translations": ["...", "..."]}}

ITEMS:
{items}"""


def build_prompt(texts: Sequence[str], language: str) -> str:
    """Build a batch prompt for texts."""
    items = [{"i": index, "text": text} for index, text in enumerate(texts)]
    return PROMPT_TEMPLATE.format(
        language=language,
        count=len(texts),
        items=orjson.dumps({"items": items}).decode(),
    )


def _strip_code_fence(text: str) -> str:
    text = text.strip()
    if not text.startswith("```"):
        return text
    lines = text.split("\n")[1:]
    if lines and lines[-1].strip().startswith("```"):
        lines = lines[:-1]
    return "\n".join(lines).strip()


def parse_translations(raw_response: str, expected: int) -> list[str]:
    """
    Parse a provider response into exactly `expected` trimmed strings.

    Raises TranslationFormatError on invalid JSON or length mismatch.
    """
    text = _strip_code_fence(raw_response)

    try:
        data = orjson.loads(text.encode())
    except orjson.JSONDecodeError as e:
        raise TranslationFormatError(f"Invalid JSON in translation response: {e}") from e

    translations = data.get("translations") if isinstance(data, dict) else data
    if not isinstance(translations, list):
        raise TranslationFormatError("Missing 'translations' array in response")
    if len(translations) != expected:
        raise TranslationFormatError(
            f"Expected {expected} translations, got {len(translations)}"
        )

    return ["" if item is None else str(item).strip() for item in translations]


class BatchTranslator:
    """Translate texts in fixed-size groups using a rotating credential pool."""

    def __init__(
        self,
        service: TranslationService,
        pool: CredentialPool,
        config: TranslationConfig,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._service = service
        self._pool = pool
        self._config = config
        self._sleep = sleep
        self._batches_sent = 0

    @property
    def max_rate_limit_retries(self) -> int:
        return len(self._pool) * self._config.retry_multiplier

    async def translate(self, texts: Sequence[str]) -> list[str]:
        """
        Translate texts, preserving length and order.

        Raises TranslationQuotaExhaustedError once rate-limit retries for
        this call reach the cap, and propagates any other provider error.
        """
        results: list[str] = []
        rate_limit_hits = 0
        size = self._config.batch_size

        for start in range(0, len(texts), size):
            group = list(texts[start : start + size])

            while True:
                if self._batches_sent > 0 and self._config.batch_delay_ms:
                    await self._sleep(self._config.batch_delay_ms / 1000)

                credential = self._pool.acquire()
                self._batches_sent += 1
                try:
                    raw = await self._service.complete(
                        build_prompt(group, self._config.target_language), credential
                    )
                except Exception as e:
                    if classify_error(e) is not ErrorKind.RATE_LIMIT:
                        raise
                    self._pool.mark_limited(credential)
                    rate_limit_hits += 1
                    logger.warning(
                        "Translation rate limited, rotating credential",
                        extra={"hits": rate_limit_hits, "cap": self.max_rate_limit_retries},
                    )
                    if rate_limit_hits >= self.max_rate_limit_retries:
                        raise TranslationQuotaExhaustedError(
                            f"rate limited {rate_limit_hits} times; giving up on batch"
                        ) from e
                    continue

                results.extend(parse_translations(raw, len(group)))
                break

        return results


@dataclass
class TranslationOutcome:
    """Per-field translations, index-aligned with the units. None = unavailable."""

    summaries: list[str] | None = None
    full_tweets: list[str] | None = None

    def apply(self, position: int, record: RawRecord) -> RawRecord:
        """Return record with translated display text where available."""
        update: dict[str, str] = {}
        if self.summaries is not None and self.summaries[position]:
            update["summary"] = self.summaries[position]
        if self.full_tweets is not None and self.full_tweets[position]:
            update["full_tweet"] = self.full_tweets[position]
        return record.model_copy(update=update) if update else record


class TranslationStage:
    """
    Optional augmentation stage of a run.

    Translation never blocks or discards an item; it only changes the
    displayed summary and full tweet. A failure on either field discards
    both, so a message is never half translated.
    """

    def __init__(
        self,
        translator: BatchTranslator,
        *,
        full_tweet_placeholders: frozenset[str] = frozenset(),
    ) -> None:
        self._translator = translator
        self._placeholders = full_tweet_placeholders

    async def _translate_field(self, texts: list[str]) -> list[str]:
        # Only non-empty texts are sent; empty ones stay empty
        indices = [i for i, text in enumerate(texts) if text]
        if not indices:
            return list(texts)

        translated = await self._translator.translate([texts[i] for i in indices])

        merged = list(texts)
        for index, text in zip(indices, translated, strict=True):
            merged[index] = text
        return merged

    async def run(self, units: Sequence[DeliveryUnit]) -> TranslationOutcome:
        summaries = [u.record.summary.strip() for u in units]
        full_tweets = [
            "" if u.record.full_tweet.strip() in self._placeholders else u.record.full_tweet.strip()
            for u in units
        ]

        field_name = "summary"
        try:
            translated_summaries = await self._translate_field(summaries)
            field_name = "full_tweet"
            translated_full_tweets = await self._translate_field(full_tweets)
        except Exception as e:
            logger.warning(
                "Translation failed, using original text",
                extra={"field": field_name, "error_type": type(e).__name__, "reason": str(e)[:100]},
            )
            return TranslationOutcome()

        logger.info("Translation stage finished", extra={"units": len(units)})
        return TranslationOutcome(summaries=translated_summaries, full_tweets=translated_full_tweets)
