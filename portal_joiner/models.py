"""
Data models for the join loop.
"""

from dataclasses import dataclass
from datetime import datetime, time, timedelta
from enum import Enum
from typing import Any, Optional


class Outcome(str, Enum):
    """Result of one join-loop iteration."""
    NO_MEETING = "no_meeting"
    JOINED = "joined"
    FAILED = "failed"
    LAUNCH_FAILED = "launch_failed"
    SHUTDOWN = "shutdown"


class JoinState(str, Enum):
    """Steps of the join flow, in the order they are reached."""
    MATCHED = "matched"
    LINK_ACTIVATED = "link_activated"
    MODAL_VISIBLE = "modal_visible"
    JOIN_CLICKED = "join_clicked"
    SECONDARY_PAGE_SPAWNED = "secondary_page_spawned"
    CONTINUE_ON_WEB_CLICKED = "continue_on_web_clicked"
    PRE_JOIN_READY = "pre_join_ready"
    JOIN_NOW_CLICKED = "join_now_clicked"
    MIC_CONTROL_VISIBLE = "mic_control_visible"
    MIC_NORMALIZED = "mic_normalized"
    DONE = "done"


@dataclass(frozen=True)
class TimeRange:
    """A configured daily window anchored to a concrete day."""
    start: datetime
    end: datetime


@dataclass(frozen=True)
class MeetingWindow:
    """
    A calendar entry scraped from the portal.

    The join handle is the entry's href; it is used to find the element again
    when the entry is clicked.
    """
    title: str
    start: time
    end: time
    join_handle: str

    def start_on(self, day: datetime) -> datetime:
        """Start of the meeting on the day (and in the timezone) of ``day``."""
        return datetime.combine(day.date(), self.start, tzinfo=day.tzinfo)

    @property
    def crosses_midnight(self) -> bool:
        """True for entries such as ``11:30 PM - 12:30 AM``."""
        return self.end < self.start

    def end_on(self, day: datetime) -> datetime:
        """End of the meeting that starts on the day of ``day``; the next day if it crosses midnight."""
        end = datetime.combine(day.date(), self.end, tzinfo=day.tzinfo)
        if self.crosses_midnight:
            end += timedelta(days=1)
        return end

    def is_current(self, now: datetime, grace: timedelta) -> bool:
        """Check if ``now`` falls inside the window, opened ``grace`` early."""
        days = [now]
        if self.crosses_midnight:
            # after midnight the running occurrence is the one that started yesterday
            days.append(now - timedelta(days=1))
        return any(self.start_on(day) - grace <= now <= self.end_on(day) for day in days)

    def __str__(self) -> str:
        return f"{self.title} ({self.start.strftime('%I:%M %p')} - {self.end.strftime('%I:%M %p')})"


@dataclass
class JoinContext:
    """State threaded through one run of the join flow."""
    meeting: MeetingWindow
    primary_page: Any
    surface: Any
    secondary_page: Optional[Any] = None
    state: JoinState = JoinState.MATCHED
