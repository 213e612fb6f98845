"""
Configuration module for the Portal Joiner.
"""

from .settings import (
    Settings,
    settings,
    PortalSettings,
    BrowserSettings,
    ScheduleSettings,
    JoinSettings,
    DiagnosticsSettings,
)
from .logger import logger, get_logger, setup_logging

__all__ = [
    "Settings",
    "settings",
    "PortalSettings",
    "BrowserSettings",
    "ScheduleSettings",
    "JoinSettings",
    "DiagnosticsSettings",
    "logger",
    "get_logger",
    "setup_logging",
]
