"""
Core module exports.
"""

from .exceptions import (
    PortalJoinerError,
    ConfigurationError,
    LaunchFailure,
    NavigationTimeout,
    PageLoadTimeout,
    ElementNotFound,
    ElementNotVisibleInTime,
    SecondaryPageTimeout,
    RecognitionFailure,
    ShutdownRequested,
)

__all__ = [
    "PortalJoinerError",
    "ConfigurationError",
    "LaunchFailure",
    "NavigationTimeout",
    "PageLoadTimeout",
    "ElementNotFound",
    "ElementNotVisibleInTime",
    "SecondaryPageTimeout",
    "RecognitionFailure",
    "ShutdownRequested",
]
