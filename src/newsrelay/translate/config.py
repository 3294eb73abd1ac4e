"""Translation configuration."""

from __future__ import annotations

from dataclasses import dataclass, field

# Rate-limit retries allowed per batch call = credentials * multiplier
DEFAULT_RETRY_MULTIPLIER = 3


@dataclass
class TranslationConfig:
    """Configuration for the optional translation stage."""

    target_language: str = ""  # Empty disables translation
    credentials: list[str] = field(default_factory=list, repr=False)
    model: str = "claude-3-5-haiku-latest"
    max_tokens: int = 4096
    timeout_s: float = 30.0
    batch_size: int = 10
    batch_delay_ms: int = 1500
    retry_multiplier: int = DEFAULT_RETRY_MULTIPLIER
    credential_cooldown_s: float = 3600.0

    def __post_init__(self) -> None:
        if self.enabled and not self.credentials:
            raise ValueError(
                "translation credentials required when TRANSLATE_TARGET_LANGUAGE is set"
            )
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {self.batch_size}")
        if self.batch_delay_ms < 0:
            raise ValueError(f"batch_delay_ms must be >= 0, got {self.batch_delay_ms}")
        if self.retry_multiplier < 1:
            raise ValueError(f"retry_multiplier must be >= 1, got {self.retry_multiplier}")
        if self.timeout_s <= 0:
            raise ValueError(f"timeout_s must be > 0, got {self.timeout_s}")

    @property
    def enabled(self) -> bool:
        return bool(self.target_language.strip())
