"""
Base sink protocol.

Abstract base for all delivery sinks.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class DeliveryResult:
    """Result of a delivery attempt."""

    success: bool
    sink_name: str
    error: str | None = None
    status_code: int | None = None
    body: str | None = None
    rate_limited: int = 0  # 429 responses absorbed before the final status


class DeliverySink(ABC):
    """Abstract base class for delivery sinks."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique name for this sink (never the raw URL)."""
        ...

    @abstractmethod
    async def send(self, content: str) -> DeliveryResult:
        """
        Send one chunk of text to this sink.

        Args:
            content: Message text within the sink's size limit

        Returns:
            DeliveryResult indicating success or failure
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close any resources held by this sink."""
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
