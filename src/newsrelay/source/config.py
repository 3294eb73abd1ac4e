"""Source adapter configuration."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/132.0.0.0 Safari/537.36"
)


@dataclass
class SourceConfig:
    """Dashboard scraping knobs."""

    site_url: str
    headless: bool = True
    navigation_timeout_ms: int = 60000
    page_wait_timeout_ms: int = 45000
    user_agent: str = DEFAULT_USER_AGENT
    locale: str = "en-US"
    timezone_id: str = "America/New_York"
    # Navigations to these path fragments are aborted
    blocked_paths: tuple[str, ...] = ("/terms", "/privacy")

    def __post_init__(self) -> None:
        if not self.site_url.startswith(("http://", "https://")):
            raise ValueError("SITE_URL must be an http(s) URL")
        if self.navigation_timeout_ms <= 0:
            raise ValueError(
                f"navigation_timeout_ms must be > 0, got {self.navigation_timeout_ms}"
            )
        if self.page_wait_timeout_ms <= 0:
            raise ValueError(
                f"page_wait_timeout_ms must be > 0, got {self.page_wait_timeout_ms}"
            )
