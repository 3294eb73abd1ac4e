"""
Sink and credential rotation.

Two independent rotations:
- Sink rotation: stateless round-robin over the position of a unit in the batch.
- Credential rotation: stateful cursor over translation credentials, skipping
  credentials that hit a rate limit within the cooldown window.

Both are explicit objects owned by a single run; no locking is required.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_COOLDOWN_S = 3600.0


class SinkRotator(Generic[T]):
    """Stable round-robin: the i-th unit of a run goes to sinks[i mod N]."""

    def __init__(self, sinks: Sequence[T]) -> None:
        if not sinks:
            raise ValueError("SinkRotator requires at least one sink")
        self._sinks = list(sinks)

    def __len__(self) -> int:
        return len(self._sinks)

    def select(self, position: int) -> T:
        if position < 0:
            raise ValueError(f"position must be >= 0, got {position}")
        return self._sinks[position % len(self._sinks)]


@dataclass
class CredentialState:
    """Rate-limit state for one credential."""

    credential: str = field(repr=False)
    limited_at: float | None = None

    def is_rate_limited(self, now: float, cooldown_s: float) -> bool:
        if self.limited_at is None:
            return False
        return now - self.limited_at < cooldown_s


@dataclass
class CredentialPool:
    """
    Round-robin pool of translation credentials.

    acquire() returns the next credential not rate-limited within the
    cooldown. When every credential is limited it returns the first one
    anyway and logs a warning, so callers never block on quota.
    """

    credentials: list[str] = field(repr=False)
    cooldown_s: float = DEFAULT_COOLDOWN_S
    # Injectable clock (seconds) for deterministic tests
    time_fn: Callable[[], float] = field(default=time.time, repr=False)

    _states: list[CredentialState] = field(init=False, repr=False)
    _cursor: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        if not self.credentials:
            raise ValueError("CredentialPool requires at least one credential")
        if self.cooldown_s < 0:
            raise ValueError(f"cooldown_s must be >= 0, got {self.cooldown_s}")
        # Repeated keys share one rate-limit state
        self.credentials = list(dict.fromkeys(self.credentials))
        self._states = [CredentialState(credential=c) for c in self.credentials]

    def __len__(self) -> int:
        return len(self._states)

    @property
    def cursor(self) -> int:
        return self._cursor

    def acquire(self) -> str:
        """Return the next eligible credential and advance the cursor past it."""
        now = self.time_fn()
        count = len(self._states)

        for offset in range(count):
            index = (self._cursor + offset) % count
            state = self._states[index]
            if state.is_rate_limited(now, self.cooldown_s):
                continue
            # Cooldown elapsed; clear lazily
            state.limited_at = None
            self._cursor = (index + 1) % count
            return state.credential

        logger.warning(
            "All translation credentials are rate limited, using first anyway",
            extra={"pool_size": count},
        )
        return self._states[0].credential

    def mark_limited(self, credential: str) -> None:
        """Record a rate-limit hit against a credential."""
        now = self.time_fn()
        for index, state in enumerate(self._states):
            if state.credential == credential:
                state.limited_at = now
                logger.info(
                    "Translation credential rate limited",
                    extra={
                        "key_index": index,
                        "cooldown_s": self.cooldown_s,
                        "available": self.available_count(),
                    },
                )
                return
        raise KeyError("credential is not part of this pool")

    def is_rate_limited(self, credential: str) -> bool:
        now = self.time_fn()
        return any(
            s.credential == credential and s.is_rate_limited(now, self.cooldown_s)
            for s in self._states
        )

    def available_count(self) -> int:
        now = self.time_fn()
        return sum(1 for s in self._states if not s.is_rate_limited(now, self.cooldown_s))
