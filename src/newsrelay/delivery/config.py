"""
Delivery configuration.

Sinks, message formatting limits and pacing between sends.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# Split ceiling; the platform hard limit of 2000 is enforced when parts are marked.
DEFAULT_MAX_CHARS = 1990
DEFAULT_CHART_URL_TEMPLATE = "https://www.tradingview.com/chart/?symbol={symbol}"


@dataclass
class WebhookSinkConfig:
    """Single outbound webhook endpoint."""

    url: str
    timeout_s: float = 15.0
    # 429 responses are retried without a cap; these only pad the wait
    default_retry_after_s: float = 1.0
    retry_padding_ms: int = 250

    def __post_init__(self) -> None:
        if not self.url.startswith(("http://", "https://")):
            raise ValueError("webhook url must be an http(s) URL")
        if self.timeout_s <= 0:
            raise ValueError(f"timeout_s must be > 0, got {self.timeout_s}")
        if self.default_retry_after_s < 0:
            raise ValueError(
                f"default_retry_after_s must be >= 0, got {self.default_retry_after_s}"
            )
        if self.retry_padding_ms < 0:
            raise ValueError(f"retry_padding_ms must be >= 0, got {self.retry_padding_ms}")


@dataclass
class FormatterConfig:
    """Message rendering options."""

    site_url: str = ""
    tag: str = ""
    max_chars: int = DEFAULT_MAX_CHARS
    chart_url_template: str = DEFAULT_CHART_URL_TEMPLATE
    # Full-tweet values that mean "absent" on the live dashboard
    full_tweet_placeholders: frozenset[str] = field(default_factory=lambda: frozenset({"00"}))

    def __post_init__(self) -> None:
        if not 100 <= self.max_chars <= 2000:
            raise ValueError(f"max_chars must be 100..2000, got {self.max_chars}")
        if "{symbol}" not in self.chart_url_template:
            raise ValueError("chart_url_template must contain '{symbol}'")


@dataclass
class DeliveryConfig:
    """Main delivery configuration."""

    sinks: list[WebhookSinkConfig] = field(default_factory=list)
    formatter: FormatterConfig = field(default_factory=FormatterConfig)

    # Pacing to respect sink-side burst limits
    chunk_delay_ms: int = 500
    message_delay_ms: int = 1000

    # Dry run mode: log but don't send
    dry_run: bool = False

    def __post_init__(self) -> None:
        if not self.sinks:
            raise ValueError("at least one webhook sink is required")
        if self.chunk_delay_ms < 0:
            raise ValueError(f"chunk_delay_ms must be >= 0, got {self.chunk_delay_ms}")
        if self.message_delay_ms < 0:
            raise ValueError(f"message_delay_ms must be >= 0, got {self.message_delay_ms}")
