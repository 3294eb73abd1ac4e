"""
Optional translation stage.

Translates summaries and full tweets in batches through a rotating pool
of credentials. Any failure falls back to the original text.
"""

from newsrelay.translate.config import TranslationConfig
from newsrelay.translate.service import AnthropicTranslationService, TranslationService
from newsrelay.translate.translator import (
    BatchTranslator,
    ErrorKind,
    TranslationError,
    TranslationFormatError,
    TranslationOutcome,
    TranslationQuotaExhaustedError,
    TranslationRateLimitError,
    TranslationStage,
    TranslationUnavailableError,
    classify_error,
)

__all__ = [
    "AnthropicTranslationService",
    "BatchTranslator",
    "ErrorKind",
    "TranslationConfig",
    "TranslationError",
    "TranslationFormatError",
    "TranslationOutcome",
    "TranslationQuotaExhaustedError",
    "TranslationRateLimitError",
    "TranslationService",
    "TranslationStage",
    "TranslationUnavailableError",
    "classify_error",
]
