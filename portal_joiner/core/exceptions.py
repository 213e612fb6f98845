"""
Custom exceptions for the Portal Joiner.

Every runtime error below is recoverable at the granularity of one join-loop
iteration: the supervisor logs it and moves on to the next scheduled wake-up.
"""

from typing import Any, Dict, Optional


class PortalJoinerError(Exception):
    """Base exception for Portal Joiner errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(PortalJoinerError):
    """Raised when configuration is invalid."""
    pass


class LaunchFailure(PortalJoinerError):
    """Raised when the browser cannot be started."""
    pass


class NavigationTimeout(PortalJoinerError):
    """Raised when a frame or page does not become available in time."""
    pass


class PageLoadTimeout(NavigationTimeout):
    """Raised when the portal page does not reach network idle in time."""
    pass


class ElementNotFound(PortalJoinerError):
    """Raised when an element is missing at the moment it is needed."""
    pass


class ElementNotVisibleInTime(PortalJoinerError):
    """Raised when an element does not become visible before its timeout."""
    pass


class SecondaryPageTimeout(PortalJoinerError):
    """Raised when the meeting window is not opened after clicking join."""
    pass


class RecognitionFailure(PortalJoinerError):
    """Raised when text recognition fails. Never escapes the diagnostics task."""
    pass


class ShutdownRequested(Exception):
    """Raised at a checkpoint once a graceful shutdown has been requested."""
    pass
