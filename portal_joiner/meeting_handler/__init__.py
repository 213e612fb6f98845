"""
Meeting handler module.

Browser automation for the portal: session lifecycle, frame navigation,
meeting matching and the join flow.
"""

from .diagnostics import DiagnosticsRecorder, recognize_text
from .session_manager import BrowserSession, SessionManager
from .frame_navigator import FrameNavigator
from .meeting_matcher import MeetingMatcher, select_current_meeting, build_meeting_windows
from .join_flow import JoinStateMachine

__all__ = [
    "DiagnosticsRecorder",
    "recognize_text",
    "BrowserSession",
    "SessionManager",
    "FrameNavigator",
    "MeetingMatcher",
    "select_current_meeting",
    "build_meeting_windows",
    "JoinStateMachine",
]
