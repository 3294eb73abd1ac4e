"""
Live dashboard source.

Renders the dashboard in headless Chromium, clears popups, nudges the
virtualized table into rendering rows, then hands the page HTML to the
table parser.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING
from urllib.parse import urlsplit

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from newsrelay.source.base import SourceError
from newsrelay.source.parser import ROW_SELECTOR, parse_dashboard

if TYPE_CHECKING:
    from playwright.async_api import Browser, BrowserContext, Frame, Page, Route

    from newsrelay.contracts import RawRecord
    from newsrelay.source.config import SourceConfig

logger = logging.getLogger(__name__)

CLOSE_SELECTORS = (
    'button[aria-label="Close"]',
    'button[aria-label="close"]',
    '[role="dialog"] button:has-text("×")',
    '[role="dialog"] button[aria-label="Close"]',
    '[role="dialog"] svg[aria-label="Close"]',
    '[role="dialog"] .close',
    '[role="dialog"] button',
)
MAX_DISMISS_PASSES = 5
MAX_SCROLL_STEPS = 10

HIDE_WEBDRIVER_SCRIPT = "Object.defineProperty(navigator, 'webdriver', { get: () => undefined });"


class DashboardSource:
    """Playwright-backed SourceAdapter for the news dashboard."""

    def __init__(self, config: SourceConfig) -> None:
        self._config = config
        self._dashboard_path = urlsplit(config.site_url).path.rstrip("/")
        self._pending: set[asyncio.Task[None]] = set()

    async def fetch_records(self, limit: int) -> list[RawRecord]:
        """Load the dashboard and return up to limit records, newest-first."""
        async with async_playwright() as pw:
            browser = await pw.chromium.launch(
                headless=self._config.headless,
                args=["--disable-blink-features=AutomationControlled"],
            )
            try:
                context = await self._new_context(browser)
                page = await context.new_page()
                try:
                    html = await self._load(page)
                finally:
                    for task in list(self._pending):
                        task.cancel()
                    await context.close()
            finally:
                await browser.close()

        records = parse_dashboard(html, limit)
        logger.info("Dashboard scraped", extra={"records": len(records), "limit": limit})
        return records

    async def _new_context(self, browser: Browser) -> BrowserContext:
        context = await browser.new_context(
            locale=self._config.locale,
            timezone_id=self._config.timezone_id,
            viewport={"width": 1280, "height": 720},
            user_agent=self._config.user_agent,
            extra_http_headers={
                "Accept-Language": "en-US,en;q=0.9",
                "Upgrade-Insecure-Requests": "1",
            },
        )
        await context.add_init_script(HIDE_WEBDRIVER_SCRIPT)
        return context

    async def _load(self, page: Page) -> str:
        await self._install_navigation_guard(page)

        try:
            response = await page.goto(
                self._config.site_url,
                wait_until="domcontentloaded",
                timeout=self._config.navigation_timeout_ms,
            )
        except PlaywrightError as e:
            raise SourceError(f"Dashboard navigation failed: {e}") from e

        if response is not None and response.status >= 400:
            raise SourceError(f"Site responded with HTTP {response.status}.", response.status)

        with contextlib.suppress(PlaywrightTimeoutError):
            await page.wait_for_load_state("networkidle")

        await self._dismiss_overlays(page)
        await self._scroll_table(page)

        try:
            await page.locator(ROW_SELECTOR).first.wait_for(
                timeout=self._config.page_wait_timeout_ms
            )
        except PlaywrightTimeoutError as e:
            raise SourceError("Dashboard table rows did not appear") from e

        return await page.content()

    async def _install_navigation_guard(self, page: Page) -> None:
        async def guard(route: Route) -> None:
            url = route.request.url
            if any(path in url for path in self._config.blocked_paths):
                await route.abort()
            else:
                await route.continue_()

        await page.route("**/*", guard)

        def on_navigated(frame: Frame) -> None:
            if frame != page.main_frame:
                return
            if urlsplit(frame.url).path.rstrip("/") == self._dashboard_path:
                return
            logger.info("Navigated away from dashboard, returning")
            task = asyncio.ensure_future(self._return_to_dashboard(page))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

        page.on("framenavigated", on_navigated)

    async def _return_to_dashboard(self, page: Page) -> None:
        with contextlib.suppress(PlaywrightError):
            await page.goto(
                self._config.site_url,
                wait_until="domcontentloaded",
                timeout=self._config.navigation_timeout_ms,
            )

    async def _dismiss_overlays(self, page: Page) -> None:
        with contextlib.suppress(PlaywrightError):
            await page.keyboard.press("Escape")

        for _ in range(MAX_DISMISS_PASSES):
            closed = False
            with contextlib.suppress(PlaywrightError):
                if await page.locator('[role="dialog"]').count():
                    for selector in CLOSE_SELECTORS:
                        button = page.locator(selector).first
                        with contextlib.suppress(PlaywrightError):
                            if await button.is_visible():
                                await button.click(timeout=800)
                                closed = True
            if not closed:
                break
            await page.wait_for_timeout(300)

    async def _scroll_table(self, page: Page) -> None:
        with contextlib.suppress(PlaywrightError):
            heading = page.get_by_text("Recent Tweets").first
            if await heading.count():
                await heading.scroll_into_view_if_needed()
                await page.wait_for_timeout(400)

        with contextlib.suppress(PlaywrightError):
            table = page.locator(".rt-table").first
            if await table.count():
                await table.click(timeout=1000)

        for _ in range(MAX_SCROLL_STEPS):
            with contextlib.suppress(PlaywrightError):
                await page.mouse.wheel(0, 1200)
            await page.wait_for_timeout(250)
            with contextlib.suppress(PlaywrightError):
                if await page.locator(ROW_SELECTOR).count() > 0:
                    return
