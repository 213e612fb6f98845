"""Pytest configuration and shared fixtures."""

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from portal_joiner.config import (
    DiagnosticsSettings,
    JoinSettings,
    PortalSettings,
)
from portal_joiner.meeting_handler import DiagnosticsRecorder


@pytest.fixture
def diagnostics(tmp_path):
    """Diagnostics writing into a temp dir, OCR off."""
    return DiagnosticsRecorder(DiagnosticsSettings(
        screenshot_dir=str(tmp_path / "screenshots"),
        ocr_enabled=False,
    ))


@pytest.fixture
def portal_settings():
    return PortalSettings(
        url="https://portal.example.com/course",
        calendar_frame_pattern="https://portal.example.com/calendar/",
        page_load_timeout_seconds=1,
        element_timeout_seconds=1,
    )


@pytest.fixture
def join_settings():
    return JoinSettings(
        modal_timeout_seconds=1,
        secondary_page_timeout_seconds=1,
        control_timeout_seconds=1,
    )


@pytest.fixture
def timeout_error():
    """Factory for Playwright timeouts."""
    return lambda: PlaywrightTimeoutError("Timeout 1000ms exceeded.")
