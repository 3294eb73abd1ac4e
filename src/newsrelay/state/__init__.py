"""Durable processed-set state."""

from newsrelay.state.store import ProcessedSetStore

__all__ = ["ProcessedSetStore"]
