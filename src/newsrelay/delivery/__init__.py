"""
Message delivery.

Formats records into chat messages and delivers them to webhook sinks
with stable round-robin rotation and 429-aware retries.
"""

from __future__ import annotations

from newsrelay.delivery.config import DeliveryConfig, FormatterConfig, WebhookSinkConfig
from newsrelay.delivery.engine import DeliveryEngine, DeliveryError
from newsrelay.delivery.formatter import FormattedMessage, NewsFormatter
from newsrelay.delivery.rotation import CredentialPool, SinkRotator

__all__ = [
    "CredentialPool",
    "DeliveryConfig",
    "DeliveryEngine",
    "DeliveryError",
    "FormattedMessage",
    "FormatterConfig",
    "NewsFormatter",
    "SinkRotator",
    "WebhookSinkConfig",
]
