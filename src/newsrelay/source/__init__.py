"""Dashboard source adapter."""

from newsrelay.source.base import SourceAdapter, SourceError
from newsrelay.source.config import SourceConfig
from newsrelay.source.parser import parse_dashboard

__all__ = ["SourceAdapter", "SourceConfig", "SourceError", "parse_dashboard"]
