"""
Tests for configuration loading and validation.

Run with: pytest tests/test_settings.py -v
"""

import pytest
from pydantic import ValidationError

from portal_joiner.config import PortalSettings, ScheduleSettings, Settings
from portal_joiner.core.exceptions import ConfigurationError


class TestScheduleSettings:

    def test_event_times_from_environment(self, monkeypatch):
        monkeypatch.setenv("SCHEDULE_EVENT_TIMES", '["09:00 AM - 09:30 AM", "02:00 PM - 02:30 PM"]')

        schedule = ScheduleSettings()

        assert schedule.event_times == ["09:00 AM - 09:30 AM", "02:00 PM - 02:30 PM"]

    def test_malformed_event_time_is_rejected(self):
        with pytest.raises(ValidationError):
            ScheduleSettings(event_times=["09:00 AM"])

    def test_defaults(self):
        schedule = ScheduleSettings()

        assert schedule.grace_minutes == 5
        assert schedule.launch_failure_backoff_seconds == 60


class TestPortalSettings:

    def test_calendar_frame_selector(self):
        portal = PortalSettings(calendar_frame_pattern="https://cal.example.com/calendar/")

        assert portal.calendar_frame_selector == 'iframe[src*="https://cal.example.com/calendar/"]'


class TestSettings:

    def test_log_level_is_normalized(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Settings(log_level="chatty")

    def test_validate_for_run_requires_portal_url(self):
        app_settings = Settings(
            portal=PortalSettings(url=""),
            schedule=ScheduleSettings(event_times=["09:00 AM - 09:30 AM"]),
        )

        with pytest.raises(ConfigurationError, match="PORTAL_URL"):
            app_settings.validate_for_run()

    def test_validate_for_run_requires_schedule(self):
        app_settings = Settings(
            portal=PortalSettings(url="https://portal.example.com"),
            schedule=ScheduleSettings(event_times=[]),
        )

        with pytest.raises(ConfigurationError, match="SCHEDULE_EVENT_TIMES"):
            app_settings.validate_for_run()

    def test_validate_for_run_accepts_complete_settings(self):
        app_settings = Settings(
            portal=PortalSettings(url="https://portal.example.com"),
            schedule=ScheduleSettings(event_times=["09:00 AM - 09:30 AM"]),
        )

        app_settings.validate_for_run()

    def test_explicit_timezone(self):
        tzinfo = Settings(timezone="Asia/Singapore").tz_info

        assert tzinfo is not None
        assert "Singapore" in str(tzinfo)
