from __future__ import annotations

import logging
import os
from typing import Any

from playwright.async_api import (
    Browser,
    BrowserContext,
    Page,
    Playwright,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)

from smart_locator.config import settings
from .page_snapshot import SNAPSHOT_STYLES, PageSnapshot, parse_dom_snapshot

logger = logging.getLogger(__name__)


class BrowserSession:
    def __init__(self, user_data_dir: str | None = None, headless: bool | None = None) -> None:
        self.browser: Browser | None = None
        self.context: BrowserContext | None = None
        self.page: Page | None = None
        self._playwright: Playwright | None = None
        self.headless = settings.headless if headless is None else headless
        self.user_data_dir = os.path.expanduser(
            user_data_dir or settings.user_data_dir or "~/.smart_locator_profiles/default"
        )

    async def __aenter__(self) -> "BrowserSession":
        self._playwright = await async_playwright().start()
        self.context = await self._playwright.chromium.launch_persistent_context(
            user_data_dir=self.user_data_dir,
            headless=self.headless,
        )
        self.page = await self.context.new_page()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.context:
            await self.context.close()
        if self._playwright:
            await self._playwright.stop()

    async def goto(self, url: str, wait_ms: int | None = None) -> None:
        """
        Navigate to a URL and give the app a moment to hydrate.
        """
        if not self.page:
            raise RuntimeError("Browser page is not initialized. Use within an async context manager.")

        await self.page.goto(url, wait_until="domcontentloaded", timeout=settings.navigation_timeout_ms)
        try:
            await self.page.wait_for_load_state("networkidle", timeout=5000)
        except PlaywrightTimeoutError:
            logger.info("networkidle_timeout url=%s continuing", url)

        wait_ms = settings.hydrate_wait_ms if wait_ms is None else wait_ms
        if wait_ms > 0:
            await self.page.wait_for_timeout(wait_ms)

    def __repr__(self) -> str:
        return f"BrowserSession(headless={self.headless})"

    async def capture_page_snapshot(self) -> PageSnapshot | None:
        """
        Capture the rendered DOM with layout boxes and the computed styles the
        locator needs, via Chrome DevTools Protocol.

        Returns None when CDP is not available (non-Chromium browsers) or the
        capture fails, so the caller can decide how to report it.
        """

        if not self.page or not self.context:
            return None

        try:
            session = await self.context.new_cdp_session(self.page)
        except Exception as exc:  # pragma: no cover - depends on runtime browser
            logger.warning("cdp_snapshot_unavailable reason=%s", exc)
            return None

        try:
            dom_snapshot: dict[str, Any] = await session.send(
                "DOMSnapshot.captureSnapshot",
                {
                    "computedStyles": SNAPSHOT_STYLES,
                    "includeDOMRects": True,
                    "includePaintOrder": False,
                },
            )
        except Exception as exc:  # pragma: no cover - depends on runtime browser
            logger.warning("cdp_snapshot_failed reason=%s", exc)
            return None
        finally:
            try:
                await session.detach()
            except Exception as exc:  # pragma: no cover - session may already be gone
                logger.debug("cdp_session_detach_failed reason=%s", exc)

        try:
            return parse_dom_snapshot(dom_snapshot)
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            logger.warning("cdp_snapshot_parse_failed reason=%s", exc)
            return None
