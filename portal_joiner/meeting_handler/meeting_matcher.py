"""
Finding the meeting to join on the calendar surface.

Entries are read in DOM order and the first one whose window contains "now"
wins. That order is not guaranteed to be chronological: when two windows
overlap, the one rendered first is chosen, not the one starting first.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import List, Optional, Sequence

from playwright.async_api import Frame, TimeoutError as PlaywrightTimeoutError

from portal_joiner.config import settings, get_logger, PortalSettings
from portal_joiner.core.exceptions import ConfigurationError, ElementNotVisibleInTime
from portal_joiner.models import MeetingWindow
from portal_joiner.scheduler import parse_time_of_day, split_time_range
from .diagnostics import DiagnosticsRecorder
from .portal_scripts import EXTRACT_EVENTS_JS, get_selector


logger = get_logger("meeting_matcher")


def select_current_meeting(
    meetings: Sequence[MeetingWindow],
    now: datetime,
    grace: timedelta = timedelta(minutes=5),
) -> Optional[MeetingWindow]:
    """
    Pick the first meeting whose window contains ``now``.

    A window runs from ``grace`` before its start up to and including its end.
    """
    for meeting in meetings:
        logger.debug(f"Comparing event: {meeting}")
        if meeting.is_current(now, grace):
            return meeting
    return None


def build_meeting_windows(raw_events: Sequence[dict]) -> List[MeetingWindow]:
    """
    Turn scraped ``{time, title, href}`` records into meeting windows.

    Records without a parsable ``start - end`` time are skipped.
    """
    meetings = []
    for raw in raw_events:
        try:
            start_text, end_text = split_time_range(raw.get("time", ""))
            meetings.append(MeetingWindow(
                title=raw.get("title", ""),
                start=parse_time_of_day(start_text),
                end=parse_time_of_day(end_text),
                join_handle=raw.get("href", ""),
            ))
        except ConfigurationError as e:
            logger.warning(f"Skipping calendar entry {raw.get('title', '')!r}: {e.message}")
    return meetings


class MeetingMatcher:
    """Switches the calendar to Day view and finds the current meeting."""

    def __init__(
        self,
        portal_settings: Optional[PortalSettings] = None,
        diagnostics: Optional[DiagnosticsRecorder] = None,
        grace_minutes: Optional[int] = None,
    ) -> None:
        self._settings = portal_settings or settings.portal
        self._diagnostics = diagnostics or DiagnosticsRecorder()
        minutes = settings.schedule.grace_minutes if grace_minutes is None else grace_minutes
        self._grace = timedelta(minutes=minutes)

    async def find_current_meeting(self, surface: Frame, now: datetime) -> Optional[MeetingWindow]:
        """
        Return the meeting to join right now, or None if there is none.
        """
        await self.switch_to_day_view(surface)

        meetings = await self.scrape_meetings(surface)
        logger.info(f"Found {len(meetings)} calendar entries")

        logger.info(f"Finding the event matching {now.strftime('%I:%M %p')}...")
        meeting = select_current_meeting(meetings, now, self._grace)
        if meeting:
            logger.info(f"Found matching event: {meeting}")
        else:
            logger.info("No matching event found.")
        return meeting

    async def switch_to_day_view(self, surface: Frame) -> None:
        """Open the view picker and select "Day"."""
        page = surface.page

        logger.info("Opening the calendar view picker...")
        await self._wait_visible(surface, get_selector("view_picker"), "view picker")
        await surface.click(get_selector("view_picker"), force=True)
        await self._wait_visible(surface, get_selector("view_menu"), "view menu")
        await self._diagnostics.capture(page, "view_picker_open")

        logger.info('Selecting "Day" view...')
        await self._wait_visible(surface, get_selector("day_option"), '"Day" option')
        await surface.click(get_selector("day_option"), force=True)
        await self._diagnostics.capture(page, "day_view")

    async def scrape_meetings(self, surface: Frame) -> List[MeetingWindow]:
        """Read every rendered calendar entry, in DOM order."""
        raw_events = await surface.eval_on_selector_all(
            get_selector("event"),
            EXTRACT_EVENTS_JS,
            {"time": get_selector("event_time"), "title": get_selector("event_title")},
        )
        logger.debug(f"Raw calendar entries: {raw_events}")
        return build_meeting_windows(raw_events)

    async def _wait_visible(self, surface: Frame, selector: str, name: str) -> None:
        timeout_ms = self._settings.element_timeout_seconds * 1000
        try:
            await surface.wait_for_selector(selector, state="visible", timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            raise ElementNotVisibleInTime(
                f"The {name} did not become visible within {self._settings.element_timeout_seconds}s",
                {"selector": selector}
            ) from e
