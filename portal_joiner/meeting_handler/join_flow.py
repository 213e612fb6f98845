"""
Join flow for a matched calendar entry.

Flow:
1. Click the entry on the calendar
2. Wait for the join modal and click its join button
3. Take over the meeting window that the click opens
4. Click "Continue on this browser"
5. Click "Join now" on the pre-join screen
6. Mute the microphone if the client left it on

Each step waits for its control with a bounded timeout. A failed step ends the
flow; the caller decides what happens next.
"""

from __future__ import annotations

from typing import Callable, Optional

from playwright.async_api import Frame, Page, TimeoutError as PlaywrightTimeoutError

from portal_joiner.config import settings, get_logger, JoinSettings
from portal_joiner.core.exceptions import (
    ElementNotFound,
    ElementNotVisibleInTime,
    SecondaryPageTimeout,
)
from portal_joiner.models import JoinContext, JoinState, MeetingWindow
from .diagnostics import DiagnosticsRecorder
from .portal_scripts import CLICK_EVENT_LINK_JS, CLICK_IF_PRESENT_JS, get_selector
from .session_manager import BrowserSession


logger = get_logger("join_flow")


class JoinStateMachine:
    """
    Drives one join attempt from the calendar entry to a muted call.

    Usage pattern:
        flow = JoinStateMachine()
        context = await flow.run(session, surface, meeting)
    """

    def __init__(
        self,
        join_settings: Optional[JoinSettings] = None,
        diagnostics: Optional[DiagnosticsRecorder] = None,
        checkpoint: Optional[Callable[[], None]] = None,
    ) -> None:
        self._settings = join_settings or settings.join
        self._diagnostics = diagnostics or DiagnosticsRecorder()
        self._checkpoint = checkpoint or (lambda: None)

    async def run(self, session: BrowserSession, surface: Frame, meeting: MeetingWindow) -> JoinContext:
        """
        Join ``meeting``.

        Returns:
            The context in its final (DONE) state.

        Raises:
            ElementNotFound: If the entry disappeared before it was clicked.
            ElementNotVisibleInTime: If a control did not show up in time.
            SecondaryPageTimeout: If the meeting window never opened.
        """
        ctx = JoinContext(meeting=meeting, primary_page=session.primary_page, surface=surface)
        logger.info(f"Joining meeting: {meeting}")

        await self._activate_link(ctx)
        await self._open_meeting_window(session, ctx)
        await self._continue_on_web(ctx)
        await self._join_now(ctx)
        await self._normalize_mic(ctx)

        self._advance(ctx, JoinState.DONE)
        logger.info(f"Joined meeting: {meeting.title}")
        return ctx

    def _advance(self, ctx: JoinContext, state: JoinState) -> None:
        self._checkpoint()
        logger.debug(f"Join state: {ctx.state.value} -> {state.value}")
        ctx.state = state

    async def _activate_link(self, ctx: JoinContext) -> None:
        """Scroll the entry into view and click it."""
        self._checkpoint()
        logger.info("Clicking the event link...")
        clicked = await ctx.surface.evaluate(CLICK_EVENT_LINK_JS, ctx.meeting.join_handle)
        if not clicked:
            raise ElementNotFound(
                f"Calendar entry {ctx.meeting.title!r} is no longer on the page",
                {"join_handle": ctx.meeting.join_handle}
            )
        self._advance(ctx, JoinState.LINK_ACTIVATED)
        await self._diagnostics.capture(ctx.primary_page, "event_clicked")

    async def _open_meeting_window(self, session: BrowserSession, ctx: JoinContext) -> None:
        """Confirm the join modal and take over the page it opens."""
        logger.info("Waiting for the join modal...")
        await self._wait_visible(
            ctx.surface, get_selector("join_modal"), self._settings.modal_timeout_seconds, "join modal"
        )
        self._advance(ctx, JoinState.MODAL_VISIBLE)

        page_timeout_ms = self._settings.secondary_page_timeout_seconds * 1000
        try:
            async with session.context.expect_page(timeout=page_timeout_ms) as page_info:
                logger.info("Modal appeared. Clicking join button...")
                await self._click(ctx.surface, get_selector("join_modal_button"), "modal join button")
                self._advance(ctx, JoinState.JOIN_CLICKED)
            secondary_page = await page_info.value
        except PlaywrightTimeoutError as e:
            raise SecondaryPageTimeout(
                f"No meeting window opened within {self._settings.secondary_page_timeout_seconds}s",
                {"meeting": ctx.meeting.title}
            ) from e

        ctx.secondary_page = secondary_page
        self._advance(ctx, JoinState.SECONDARY_PAGE_SPAWNED)
        logger.info(f"Meeting window opened: {secondary_page.url}")

        screenshot = await self._diagnostics.capture(secondary_page, "meeting_window")
        self._diagnostics.recognize_in_background(screenshot)

    async def _continue_on_web(self, ctx: JoinContext) -> None:
        logger.info('Waiting for "Continue on this browser" button...')
        await self._wait_visible(
            ctx.secondary_page, get_selector("continue_on_web"),
            self._settings.control_timeout_seconds, '"Continue on this browser" button'
        )
        await self._click_if_present(ctx.secondary_page, get_selector("continue_on_web"), '"Continue on this browser"')
        self._advance(ctx, JoinState.CONTINUE_ON_WEB_CLICKED)

    async def _join_now(self, ctx: JoinContext) -> None:
        logger.info('Waiting for "Join now" button...')
        await self._wait_visible(
            ctx.secondary_page, get_selector("join_now"),
            self._settings.control_timeout_seconds, '"Join now" button'
        )
        self._advance(ctx, JoinState.PRE_JOIN_READY)
        await self._click_if_present(ctx.secondary_page, get_selector("join_now"), '"Join now"')
        self._advance(ctx, JoinState.JOIN_NOW_CLICKED)

    async def _normalize_mic(self, ctx: JoinContext) -> None:
        """
        Mute the microphone once if the call started unmuted.

        The toggle's aria-label names the action it performs, so a label
        containing "unmute" means the mic is already off.
        """
        if not self._settings.mute_on_join:
            logger.info("Mute on join disabled; leaving microphone as is")
            self._advance(ctx, JoinState.MIC_NORMALIZED)
            return

        selector = get_selector("microphone")
        logger.info("Waiting for microphone button...")
        await self._wait_visible(
            ctx.secondary_page, selector, self._settings.control_timeout_seconds, "microphone button"
        )
        self._advance(ctx, JoinState.MIC_CONTROL_VISIBLE)

        label = await ctx.secondary_page.get_attribute(selector, "aria-label") or ""
        if "unmute" in label.lower():
            logger.info("Mic already muted")
        else:
            logger.info(f"Mic is not muted ({label!r}). Muting...")
            await self._click(ctx.secondary_page, selector, "microphone button")
        self._advance(ctx, JoinState.MIC_NORMALIZED)

    async def _wait_visible(self, target, selector: str, timeout_seconds: int, name: str) -> None:
        self._checkpoint()
        try:
            await target.wait_for_selector(selector, state="visible", timeout=timeout_seconds * 1000)
        except PlaywrightTimeoutError as e:
            raise ElementNotVisibleInTime(
                f"The {name} did not become visible within {timeout_seconds}s",
                {"selector": selector}
            ) from e

    async def _click(self, target, selector: str, name: str) -> None:
        self._checkpoint()
        try:
            await target.click(selector, timeout=self._settings.control_timeout_seconds * 1000)
        except PlaywrightTimeoutError as e:
            raise ElementNotFound(f"Could not click the {name}", {"selector": selector}) from e

    async def _click_if_present(self, page: Page, selector: str, name: str) -> bool:
        """Click through the page's own DOM; a vanished control is a no-op."""
        self._checkpoint()
        clicked = await page.evaluate(CLICK_IF_PRESENT_JS, selector)
        if clicked:
            logger.info(f"Clicked {name} button.")
        else:
            logger.info(f"{name} button went away before it was clicked")
        return clicked
