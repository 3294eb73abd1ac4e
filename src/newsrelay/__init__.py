"""NewsRelay - dashboard news relay to chat webhooks."""

__version__ = "0.1.0"
