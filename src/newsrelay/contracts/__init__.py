"""Data contracts for the relay pipeline."""

from newsrelay.contracts.records import (
    FIELD_SEPARATOR,
    TICKER_SEPARATOR,
    DeliveryUnit,
    RawRecord,
    compute_fingerprint,
)

__all__ = [
    "FIELD_SEPARATOR",
    "TICKER_SEPARATOR",
    "DeliveryUnit",
    "RawRecord",
    "compute_fingerprint",
]
