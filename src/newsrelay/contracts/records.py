"""
Record contracts for the relay pipeline.

RawRecord is the canonical shape produced by the Source Adapter. All fields
are display strings; no numeric or temporal parsing is performed.
"""

from __future__ import annotations

import hashlib

import orjson
from pydantic import BaseModel, ConfigDict, Field, field_validator

# Canonical serialization for fingerprints. Field order is fixed.
FIELD_SEPARATOR = "|"
TICKER_SEPARATOR = ","


class RawRecord(BaseModel):
    """
    One scraped news entry.

    Attributes:
        time: Timestamp exactly as displayed on the dashboard.
        sentiment: Free-text sentiment label.
        summary: Display text (recovered from the title attribute when truncated).
        full_tweet: Long-form text, empty when unavailable.
        tickers: Ordered exchange symbols, may be empty.
        sector: Free-text sector or the placeholder token.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    time: str = Field(default="", description="Displayed timestamp")
    sentiment: str = Field(default="", description="Sentiment label")
    summary: str = Field(default="", description="Summary text")
    full_tweet: str = Field(default="", description="Full tweet text")
    tickers: tuple[str, ...] = Field(default=(), description="Affected securities")
    sector: str = Field(default="", description="Sector label")

    @field_validator("time", "sentiment", "summary", "full_tweet", "sector", mode="before")
    @classmethod
    def none_to_empty(cls, v: object) -> object:
        """Absent fields serialize as empty string."""
        return "" if v is None else v

    @field_validator("tickers", mode="before")
    @classmethod
    def none_to_empty_tickers(cls, v: object) -> object:
        return () if v is None else v

    def canonical(self) -> str:
        """Canonical `|`-joined form used for fingerprinting."""
        return FIELD_SEPARATOR.join(
            [
                self.time,
                self.sentiment,
                self.full_tweet,
                self.summary,
                TICKER_SEPARATOR.join(self.tickers),
                self.sector,
            ]
        )

    def to_json(self) -> bytes:
        """Serialize to JSON bytes using orjson."""
        return orjson.dumps(self.model_dump(mode="json"))

    @classmethod
    def from_json(cls, data: bytes | str) -> RawRecord:
        """Deserialize from JSON."""
        if isinstance(data, str):
            data = data.encode()
        return cls.model_validate(orjson.loads(data))


def compute_fingerprint(record: RawRecord) -> str:
    """
    Compute the dedup fingerprint of a record.

    SHA-256 over the UTF-8 canonical form. Pure and deterministic across
    processes: same field values always produce the same digest.
    """
    return hashlib.sha256(record.canonical().encode("utf-8")).hexdigest()


class DeliveryUnit(BaseModel):
    """A record paired with its fingerprint, queued for one outbound send."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    record: RawRecord
    fingerprint: str = Field(..., min_length=64, max_length=64)

    @classmethod
    def from_record(cls, record: RawRecord) -> DeliveryUnit:
        return cls(record=record, fingerprint=compute_fingerprint(record))
