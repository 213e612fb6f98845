"""
Browser session lifecycle.

One session per loop iteration: the previous browser is torn down completely
before a fresh one is launched, so no page or frame state survives between
join attempts. The profile directory is persistent so the portal login does.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Optional

from playwright.async_api import async_playwright, BrowserContext, Page

from portal_joiner.config import settings, get_logger, BrowserSettings
from portal_joiner.core.exceptions import LaunchFailure


logger = get_logger("session_manager")


class BrowserSession:
    """
    One Playwright driver and the persistent browser context it launched.

    The first page of the context is the primary page; pages opened later
    (e.g. the meeting window) belong to the same context.
    """

    def __init__(self, playwright, context: BrowserContext, primary_page: Page) -> None:
        self._playwright = playwright
        self.context = context
        self.primary_page = primary_page
        self._closed = False
        context.on("close", lambda _: self._mark_closed())

    def _mark_closed(self) -> None:
        self._closed = True

    @property
    def is_closed(self) -> bool:
        """Return True once the browser is gone."""
        return self._closed

    @property
    def pages(self) -> List[Page]:
        """Pages currently open in the browser."""
        return list(self.context.pages)

    async def close(self) -> None:
        """
        Close every page, then the browser, then the driver.
        """
        if not self._closed:
            logger.info("Closing all browser tabs...")
            for page in self.pages:
                if page.is_closed():
                    continue
                try:
                    await page.close()
                except Exception as e:
                    logger.debug(f"Closing tab {page.url} failed: {e}")
            logger.info("All tabs closed.")

            try:
                await self.context.close()
            finally:
                self._closed = True

        if self._playwright is not None:
            try:
                await self._playwright.stop()
            finally:
                self._playwright = None


class SessionManager:
    """
    Launches and replaces browser sessions.

    Usage pattern:
        manager = SessionManager()
        session = await manager.reset_session()
        ...
        session = await manager.reset_session(session)
    """

    def __init__(
        self,
        browser_settings: Optional[BrowserSettings] = None,
        playwright_factory: Callable = async_playwright,
    ) -> None:
        self._settings = browser_settings or settings.browser
        self._playwright_factory = playwright_factory

    @property
    def launch_args(self) -> List[str]:
        """Fixed Chromium flags for every launch."""
        return [
            "--no-sandbox",
            "--disable-setuid-sandbox",
            "--no-protocol-handler",
            f"--window-size={self._settings.window_width},{self._settings.window_height}",
        ]

    async def reset_session(self, previous: Optional[BrowserSession] = None) -> BrowserSession:
        """
        Tear down ``previous`` (if still open) and launch a fresh session.

        Raises:
            LaunchFailure: If the new browser cannot be started.
        """
        if previous is not None:
            await self.close_session(previous)
        return await self.launch()

    async def close_session(self, session: BrowserSession) -> None:
        """Close a session; teardown errors are logged, not raised."""
        try:
            await session.close()
        except Exception as e:
            logger.warning(f"Error while closing previous browser: {e}")

    async def launch(self) -> BrowserSession:
        """
        Start Playwright and launch Chromium with the persistent profile.
        """
        logger.info("Launching browser...")
        playwright = None
        try:
            playwright = await self._playwright_factory().start()
            context = await playwright.chromium.launch_persistent_context(
                str(Path(self._settings.user_data_dir).resolve()),
                executable_path=self._settings.executable_path or None,
                headless=self._settings.headless,
                args=self.launch_args,
                ignore_default_args=["--enable-automation"],
                no_viewport=True,
            )
            primary_page = context.pages[0] if context.pages else await context.new_page()
        except Exception as e:
            if playwright is not None:
                try:
                    await playwright.stop()
                except Exception:
                    logger.debug("Playwright stop after failed launch also failed")
            raise LaunchFailure(f"Browser launch failed: {e}", {"user_data_dir": self._settings.user_data_dir}) from e

        logger.info("Browser launched.")
        return BrowserSession(playwright, context, primary_page)
