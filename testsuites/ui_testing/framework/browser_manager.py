"""
================================================================================
Browser Manager
================================================================================

Browser lifecycle management providing the page handles consumed by the test
orchestrator.

Features:
    - Single browser instance per session
    - Isolated context per page
    - Pre-authenticated pages restored from a saved storage state
    - Browser configuration from ConfigLoader

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

from loguru import logger
from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Page,
    Playwright,
)

from testsuites.api_testing.framework.config_loader import ConfigLoader


# Storage state file written after a successful login
DEFAULT_STORAGE_STATE = Path("storage-state.json")


class BrowserManager:
    """
    Manages the browser and its contexts for UI testing.

    Usage:
        async with BrowserManager(config) as manager:
            page = await manager.new_page()
            authenticated = await manager.new_page(authenticated=True)
    """

    DEFAULT_CONTEXT_OPTIONS: Dict[str, Any] = {
        "viewport": {"width": 1920, "height": 1080},
        "ignore_https_errors": True,
    }

    def __init__(self, config: Optional[ConfigLoader] = None):
        config = config or ConfigLoader()

        self.base_url: Optional[str] = config.get("ui.base_url")
        self.headless: bool = config.get("ui.headless", True)
        self.browser_type: str = config.get("ui.browser", "chromium")
        self.storage_state = Path(config.get("auth.storage_state", str(DEFAULT_STORAGE_STATE)))

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._contexts: List[BrowserContext] = []

    async def __aenter__(self) -> "BrowserManager":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def start(self) -> None:
        """Start Playwright and launch the configured browser."""
        self._playwright = await async_playwright().start()

        launcher = getattr(self._playwright, self.browser_type, None)
        if launcher is None:
            logger.warning(f"Unknown browser '{self.browser_type}', using chromium")
            launcher = self._playwright.chromium

        self._browser = await launcher.launch(headless=self.headless)
        logger.debug(f"Browser started: {self.browser_type} (headless={self.headless})")

    async def close(self) -> None:
        """Close all contexts, the browser and Playwright."""
        for context in self._contexts:
            try:
                await context.close()
            except Exception as e:
                logger.debug(f"Context already closed: {e}")
        self._contexts.clear()

        if self._browser:
            await self._browser.close()
            self._browser = None

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

        logger.debug("Browser closed")

    def context_options(self, authenticated: bool = False, **overrides: Any) -> Dict[str, Any]:
        """
        Build options for a new context.

        An authenticated context restores the saved storage state when the
        file exists; otherwise it silently falls back to a fresh context.
        """
        options = {**self.DEFAULT_CONTEXT_OPTIONS, **overrides}
        if self.base_url:
            options.setdefault("base_url", self.base_url)

        if authenticated:
            if self.storage_state.exists():
                options["storage_state"] = str(self.storage_state)
            else:
                logger.warning(
                    f"No storage state at {self.storage_state}; "
                    f"authenticated page starts logged out"
                )
        return options

    async def new_context(self, authenticated: bool = False, **options: Any) -> BrowserContext:
        if not self._browser:
            raise RuntimeError("Browser not started. Call start() first.")

        context = await self._browser.new_context(
            **self.context_options(authenticated, **options)
        )
        self._contexts.append(context)
        return context

    async def new_page(self, authenticated: bool = False, **options: Any) -> Page:
        """Open a page in a fresh, isolated context."""
        context = await self.new_context(authenticated, **options)
        return await context.new_page()

    async def save_auth_state(self, page: Page) -> None:
        """Persist cookies and localStorage of ``page`` for authenticated pages."""
        await page.context.storage_state(path=str(self.storage_state))
        logger.info(f"Authentication state saved to: {self.storage_state}")

    @property
    def browser(self) -> Optional[Browser]:
        return self._browser


__all__ = [
    "BrowserManager",
    "DEFAULT_STORAGE_STATE",
]
