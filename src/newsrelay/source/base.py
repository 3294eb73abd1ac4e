"""Source adapter interface."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from newsrelay.contracts import RawRecord


class SourceError(Exception):
    """The dashboard could not be loaded or read."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SourceAdapter(Protocol):
    """
    Produces raw records from the live dashboard.

    Records are returned newest-first. Optional fields that cannot be
    recovered are empty strings; the adapter never returns partial
    progress and raises SourceError on unrecoverable failures.
    """

    async def fetch_records(self, limit: int) -> list[RawRecord]:
        ...
