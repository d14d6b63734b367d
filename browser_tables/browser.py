"""
Browser Tables - Browser Control

Minimal Playwright browser lifecycle for the extraction service: launch
headless Chromium, open a page, navigate, close.
"""

import asyncio
import logging
from typing import Optional

from playwright.async_api import Browser as PWBrowser
from playwright.async_api import BrowserContext, Page, async_playwright

from .config import CONFIG

logger = logging.getLogger(__name__)


class TableBrowser:
    """Playwright browser wrapper owning one context and one page"""

    def __init__(self):
        self.playwright = None
        self.browser: Optional[PWBrowser] = None
        self.context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None

    async def launch(self, headless: bool = True) -> bool:
        """Start Playwright and open a fresh page. Returns False on failure."""
        try:
            self.playwright = await async_playwright().start()
            self.browser = await self.playwright.chromium.launch(
                headless=headless,
                args=["--disable-dev-shm-usage", "--no-sandbox"],
            )
            self.context = await self.browser.new_context(viewport={"width": 1280, "height": 800})
            self.context.set_default_navigation_timeout(CONFIG.NAVIGATION_TIMEOUT)
            self.page = await self.context.new_page()
            logger.info(f"🌐 Browser launched (headless={headless})")
            return True
        except Exception as e:
            logger.error(f"Failed to launch browser: {e}")
            await self.close()
            return False

    async def navigate(self, url: str, timeout: Optional[int] = None) -> bool:
        """Open ``url`` and wait for the DOM. Returns False on failure."""
        if timeout is None:
            timeout = CONFIG.NAVIGATION_TIMEOUT
        if not self.page:
            logger.error("Navigation requested before launch()")
            return False

        # Bare hosts are treated as https
        if not url.startswith(("http://", "https://", "file://", "data:")):
            url = "https://" + url

        try:
            await self.page.goto(url, wait_until="domcontentloaded", timeout=timeout)
            logger.info(f"✅ Navigated to: {url}")
            return True
        except Exception as e:
            logger.error(f"Navigation failed: {e}")
            return False

    async def close(self) -> None:
        """Release page, context, browser and Playwright, in that order"""
        for name in ("page", "context", "browser"):
            resource = getattr(self, name)
            if resource is None:
                continue
            try:
                await resource.close()
            except Exception as e:
                logger.debug(f"Ignoring error while closing {name}: {e}")
            setattr(self, name, None)

        if self.playwright:
            # Let subprocess pipes flush before stopping
            await asyncio.sleep(0.1)
            await self.playwright.stop()
            self.playwright = None
            logger.info("🔒 Browser closed")
