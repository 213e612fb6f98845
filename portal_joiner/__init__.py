"""
Portal Joiner Package.
Unattended join of recurring meetings listed on a portal calendar.
"""

from .bot import MeetingJoinBot
from .models import MeetingWindow, JoinContext, JoinState, Outcome, TimeRange
from .config import settings, logger, get_logger
from .scheduler import compute_wait_duration

__version__ = "1.0.0"

__all__ = [
    # Main
    "MeetingJoinBot",

    # Models
    "MeetingWindow",
    "JoinContext",
    "JoinState",
    "Outcome",
    "TimeRange",

    # Config
    "settings",
    "logger",
    "get_logger",

    # Scheduler
    "compute_wait_duration",
]
