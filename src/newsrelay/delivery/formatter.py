"""
News record formatter.

Deterministic template-based rendering of a RawRecord into one or more
chat-message chunks, each within a hard length ceiling.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from newsrelay.delivery.config import FormatterConfig

if TYPE_CHECKING:
    from collections.abc import Iterable

    from newsrelay.contracts import RawRecord

# Checked in order; first match wins
SENTIMENT_ICONS: tuple[tuple[str, str], ...] = (
    ("bullish", "\U0001f7e2"),  # green circle
    ("bearish", "\U0001f534"),  # red circle
    ("neutral", "⚪"),  # white circle
)
DEFAULT_SENTIMENT_ICON = "\U0001f7e6"  # blue square

PLACEHOLDER = "—"  # em dash, as displayed by the dashboard
MISSING = "N/A"
FULL_TWEET_PREFIX = "\U0001f4ac **Full Tweet:**"

TICKER_PATTERN = re.compile(r"^[A-Z0-9.\-]{1,12}$")

# Split points must land past this fraction of the ceiling
SPLIT_MIN_RATIO = 0.7

# Hard per-message limit of the chat platform, part marker included
PLATFORM_MAX_CHARS = 2000


def sentiment_icon(sentiment: str) -> str:
    """Map a free-text sentiment label to its marker."""
    lowered = sentiment.lower()
    for keyword, icon in SENTIMENT_ICONS:
        if keyword in lowered:
            return icon
    return DEFAULT_SENTIMENT_ICON


def normalize_tickers(tickers: Iterable[str]) -> list[str]:
    """Uppercase, validate and de-duplicate tickers, keeping first occurrence."""
    seen: set[str] = set()
    result: list[str] = []
    for raw in tickers:
        symbol = raw.strip().upper()
        if not TICKER_PATTERN.match(symbol) or symbol in seen:
            continue
        seen.add(symbol)
        result.append(symbol)
    return result


def split_message(text: str, max_chars: int) -> list[str]:
    """
    Split text into chunks no longer than max_chars.

    Prefers the last newline past 70% of the ceiling, then the last space
    past 70%, else hard-splits at the ceiling. Chunks are stripped.
    """
    chunks: list[str] = []
    remaining = text.strip()
    min_cut = int(max_chars * SPLIT_MIN_RATIO)

    while len(remaining) > max_chars:
        # One extra char so a break exactly at the ceiling is found
        window = remaining[: max_chars + 1]
        cut = window.rfind("\n")
        if cut <= min_cut:
            cut = window.rfind(" ")
        if cut <= min_cut:
            cut = max_chars

        chunk = remaining[:cut].strip()
        if chunk:
            chunks.append(chunk)
        remaining = remaining[cut:].strip()

    if remaining:
        chunks.append(remaining)

    return chunks


def _part_marker(index: int, total: int) -> str:
    return f"**Part {index}/{total}**\n"


def add_part_markers(chunks: list[str], limit: int = PLATFORM_MAX_CHARS) -> list[str]:
    """
    Prefix each chunk with `Part i/N` when a message spans several chunks.

    The marker is not part of the split ceiling, but a marked part must
    still fit the platform limit: chunks that would overflow are split
    again, which can raise N.
    """
    if len(chunks) <= 1:
        return list(chunks)

    parts = list(chunks)
    while True:
        total = len(parts)
        room = limit - len(_part_marker(total, total))
        if all(len(part) <= room for part in parts):
            break
        parts = [piece for part in parts for piece in split_message(part, room)]

    return [f"{_part_marker(i, total)}{part}" for i, part in enumerate(parts, start=1)]


@dataclass
class FormattedMessage:
    """Formatted message ready for delivery."""

    text: str  # Full body before splitting
    chunks: list[str]  # Split body, each within the ceiling

    @property
    def parts(self) -> int:
        return len(self.chunks)


class NewsFormatter:
    """
    Deterministic formatter for RawRecord objects.

    Body layout:
        **Tickers:** <chart links>      (omitted when no valid tickers)
        **Sector:** <sector>            (omitted when placeholder)
        <blank>                         (only if either line above present)
        `time` (icon **sentiment**)
        summary
        <blank>
        Full Tweet: <text or nothing>
        <site url>
        tag                             (omitted when empty)
    """

    def __init__(self, config: FormatterConfig | None = None) -> None:
        self._config = config or FormatterConfig()

    @property
    def config(self) -> FormatterConfig:
        return self._config

    def full_tweet_text(self, record: RawRecord) -> str:
        """Full tweet with configured placeholders treated as absent."""
        text = record.full_tweet.strip()
        if text in self._config.full_tweet_placeholders:
            return ""
        return text

    def render_tickers(self, tickers: Iterable[str]) -> str:
        """Render tickers as chart links, or the placeholder when none are valid."""
        symbols = normalize_tickers(tickers)
        if not symbols:
            return PLACEHOLDER
        links = [
            f"[{symbol}](<{self._config.chart_url_template.format(symbol=symbol)}>)"
            for symbol in symbols
        ]
        return ", ".join(links)

    def render(self, record: RawRecord) -> str:
        """Compose the canonical multi-line body."""
        time = record.time.strip() or MISSING
        sentiment = record.sentiment.strip() or MISSING
        summary = record.summary.strip() or MISSING
        sector = record.sector.strip()

        lines: list[str] = []

        tickers = self.render_tickers(record.tickers)
        if tickers != PLACEHOLDER:
            lines.append(f"**Tickers:** {tickers}")

        if sector.strip(PLACEHOLDER + "-"):
            lines.append(f"**Sector:** {sector}")

        if lines:
            lines.append("")

        lines.append(f"`{time}` ({sentiment_icon(sentiment)} **{sentiment}**)")
        lines.append(summary)
        lines.append("")

        full_tweet = self.full_tweet_text(record)
        lines.append(f"{FULL_TWEET_PREFIX} {full_tweet}".rstrip())

        if self._config.site_url:
            lines.append(f"<{self._config.site_url}>")

        body = "\n".join(lines)
        tag = self._config.tag.strip()
        if tag:
            body = f"{body}\n{tag}"
        return body

    def format(self, record: RawRecord) -> FormattedMessage:
        """Render and split a record into sendable chunks."""
        text = self.render(record)
        return FormattedMessage(text=text, chunks=split_message(text, self._config.max_chars))
