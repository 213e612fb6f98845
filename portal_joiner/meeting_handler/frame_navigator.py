"""
Navigation from the portal page down to the calendar frame.

The calendar lives two iframes deep: the portal wraps its content in an outer
frame, and that frame embeds the calendar application. Each level is only
reachable through its parent's content frame.
"""

from __future__ import annotations

from typing import Optional

from playwright.async_api import Frame, TimeoutError as PlaywrightTimeoutError

from portal_joiner.config import settings, get_logger, PortalSettings
from portal_joiner.core.exceptions import ElementNotFound, NavigationTimeout, PageLoadTimeout
from .diagnostics import DiagnosticsRecorder
from .session_manager import BrowserSession


logger = get_logger("frame_navigator")


class FrameNavigator:
    """Loads the portal and returns the calendar frame."""

    def __init__(
        self,
        portal_settings: Optional[PortalSettings] = None,
        diagnostics: Optional[DiagnosticsRecorder] = None,
    ) -> None:
        self._settings = portal_settings or settings.portal
        self._diagnostics = diagnostics or DiagnosticsRecorder()

    async def locate_calendar_surface(self, session: BrowserSession) -> Frame:
        """
        Navigate the primary page to the portal and descend to the calendar.

        Raises:
            PageLoadTimeout: If the portal does not settle in time.
            NavigationTimeout: If a frame does not appear in time.
            ElementNotFound: If a frame element has no document.
        """
        page = session.primary_page
        await page.bring_to_front()

        logger.info(f"Navigating to the portal: {self._settings.url}")
        page_load_ms = self._settings.page_load_timeout_seconds * 1000
        try:
            await page.goto(self._settings.url, wait_until="networkidle", timeout=page_load_ms)
        except PlaywrightTimeoutError as e:
            raise PageLoadTimeout(
                f"Portal did not finish loading within {self._settings.page_load_timeout_seconds}s",
                {"url": self._settings.url}
            ) from e

        logger.info("Portal loaded.")
        await self._diagnostics.capture(page, "portal_loaded")

        logger.info("Accessing outer iframe...")
        outer = await self._enter_frame(page, self._settings.outer_frame_selector, "outer")

        logger.info("Accessing calendar iframe...")
        return await self._enter_frame(outer, self._settings.calendar_frame_selector, "calendar")

    async def _enter_frame(self, parent, selector: str, name: str) -> Frame:
        """Wait for an iframe inside ``parent`` and return its document."""
        timeout_ms = self._settings.element_timeout_seconds * 1000
        try:
            element = await parent.wait_for_selector(selector, state="visible", timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            raise NavigationTimeout(
                f"The {name} iframe did not appear within {self._settings.element_timeout_seconds}s",
                {"selector": selector}
            ) from e

        frame = await element.content_frame() if element is not None else None
        if frame is None:
            raise ElementNotFound(f"The {name} iframe has no document", {"selector": selector})

        logger.debug(f"Entered {name} iframe: {frame.url}")
        return frame
