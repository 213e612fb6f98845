"""
Wake-up computation for the join loop.

The loop sleeps until the start of the next configured meeting window. Once
every window of the day has started, it sleeps until the first window of the
list comes round again tomorrow.
"""

import re
from datetime import datetime, time, timedelta, timezone
from typing import List, Optional, Sequence

from dateutil.parser import parse, ParserError

from portal_joiner.core.exceptions import ConfigurationError
from portal_joiner.models import TimeRange

# "09:00 AM - 09:30 AM", "9:00am-9:30am", "9:00 AM – 9:30 AM"
_RANGE_SEPARATOR = re.compile(r"\s*[-–]\s*")


def parse_time_of_day(text: str) -> time:
    """
    Parse a clock time such as ``09:00 AM`` or ``2:30pm``.

    Raises:
        ConfigurationError: If the text is not a time of day.
    """
    try:
        return parse(text.strip()).time()
    except (ParserError, ValueError, OverflowError) as e:
        raise ConfigurationError(f"Invalid time of day: {text!r}", {"value": text}) from e


def split_time_range(text: str) -> List[str]:
    """Split ``start - end`` into its two halves."""
    parts = _RANGE_SEPARATOR.split(text.strip(), maxsplit=1)
    if len(parts) != 2 or not all(parts):
        raise ConfigurationError(
            f"Invalid time range: {text!r} (expected 'HH:MM AM - HH:MM PM')",
            {"value": text}
        )
    return parts


def parse_time_range(text: str, anchor: Optional[datetime] = None) -> TimeRange:
    """
    Parse a ``start - end`` range and anchor it to the day of ``anchor``.

    Args:
        text: Range such as ``09:00 AM - 09:30 AM``.
        anchor: Day (and timezone) to anchor to. Defaults to today.

    Returns:
        The anchored range.
    """
    anchor = anchor or datetime.now()
    start_text, end_text = split_time_range(text)
    start = parse_time_of_day(start_text)
    end = parse_time_of_day(end_text)
    return TimeRange(
        start=datetime.combine(anchor.date(), start, tzinfo=anchor.tzinfo),
        end=datetime.combine(anchor.date(), end, tzinfo=anchor.tzinfo),
    )


def compute_wait_duration(windows: Sequence[str], now: datetime) -> timedelta:
    """
    Compute how long to sleep before the next join attempt.

    Windows are scanned in the given order; the first one starting strictly
    after ``now`` wins. The list is assumed to be chronological but this is
    not checked.

    Args:
        windows: Configured daily ranges.
        now: Current time.

    Returns:
        Non-negative duration until the next wake-up.

    Raises:
        ConfigurationError: If ``windows`` is empty or an entry is malformed.
    """
    if not windows:
        raise ConfigurationError("No meeting windows configured")

    ranges = [parse_time_range(window, now) for window in windows]

    for time_range in ranges:
        if time_range.start > now:
            return _elapsed(now, time_range.start)

    # Same wall clock tomorrow; may be 23 or 25 hours away across a DST change
    first_tomorrow = ranges[0].start + timedelta(days=1)
    return _elapsed(now, first_tomorrow)


def _elapsed(since: datetime, until: datetime) -> timedelta:
    # Same-tzinfo subtraction ignores UTC offset changes, so compare in UTC.
    # Naive values are taken as local time.
    return max(timedelta(0), until.astimezone(timezone.utc) - since.astimezone(timezone.utc))
