"""Delivery sinks."""

from newsrelay.delivery.sinks.base import DeliveryResult, DeliverySink
from newsrelay.delivery.sinks.webhook import WebhookSink

__all__ = ["DeliveryResult", "DeliverySink", "WebhookSink"]
