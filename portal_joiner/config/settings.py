"""
Configuration settings for the Portal Joiner.
Uses Pydantic Settings for type-safe configuration with environment variable support.
"""

from typing import Optional, List
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from dateutil import tz


class PortalSettings(BaseSettings):
    """Target portal configuration."""
    model_config = SettingsConfigDict(env_prefix="PORTAL_")

    url: str = Field(default="", description="Portal page that hosts the calendar")
    outer_frame_selector: str = Field(
        default="#unit-iframe",
        description="Selector of the outer portal iframe"
    )
    calendar_frame_pattern: str = Field(
        default="https://lithan.teams.sambaash.com/calendar/",
        description="Substring of the calendar iframe's src attribute"
    )
    page_load_timeout_seconds: int = Field(default=60, description="Max wait for network idle")
    element_timeout_seconds: int = Field(default=30, description="Max wait for frames and calendar controls")

    @property
    def calendar_frame_selector(self) -> str:
        """Selector of the inner calendar iframe."""
        return f'iframe[src*="{self.calendar_frame_pattern}"]'


class BrowserSettings(BaseSettings):
    """Browser launch configuration."""
    model_config = SettingsConfigDict(env_prefix="BROWSER_")

    user_data_dir: str = Field(
        default=".playwright_user_data",
        description="Persistent profile directory (keeps the portal login)"
    )
    executable_path: Optional[str] = Field(
        default=None,
        description="Chrome/Chromium executable (bundled Chromium if unset)"
    )
    headless: bool = Field(default=False, description="Run without a visible window")
    window_width: int = Field(default=1920, description="Window width")
    window_height: int = Field(default=1080, description="Window height")


class ScheduleSettings(BaseSettings):
    """Daily meeting schedule."""
    model_config = SettingsConfigDict(env_prefix="SCHEDULE_")

    event_times: List[str] = Field(
        default=[],
        description='Ordered daily windows, e.g. ["09:00 AM - 09:30 AM"]'
    )
    grace_minutes: int = Field(default=5, description="Minutes before start a meeting is joinable")
    launch_failure_backoff_seconds: int = Field(
        default=60,
        description="Max sleep after a failed browser launch"
    )

    @field_validator("event_times")
    @classmethod
    def validate_event_times(cls, v: List[str]) -> List[str]:
        from portal_joiner.core.exceptions import ConfigurationError
        from portal_joiner.scheduler.wait_duration import parse_time_range

        for entry in v:
            try:
                parse_time_range(entry)
            except ConfigurationError as e:
                raise ValueError(e.message) from e
        return v


class JoinSettings(BaseSettings):
    """Join flow timeouts and behavior."""
    model_config = SettingsConfigDict(env_prefix="JOIN_")

    modal_timeout_seconds: int = Field(default=60, description="Max wait for the join modal")
    secondary_page_timeout_seconds: int = Field(
        default=30,
        description="Max wait for the meeting window to open"
    )
    control_timeout_seconds: int = Field(
        default=60,
        description="Max wait for each pre-join / in-call control"
    )
    mute_on_join: bool = Field(default=True, description="Mute the microphone after joining")


class DiagnosticsSettings(BaseSettings):
    """Screenshots and text recognition."""
    model_config = SettingsConfigDict(env_prefix="DIAGNOSTICS_")

    screenshots_enabled: bool = Field(default=True, description="Save step screenshots")
    screenshot_dir: str = Field(default="logs/screenshots", description="Screenshot directory")
    ocr_enabled: bool = Field(default=True, description="Run OCR on the meeting page screenshot")
    ocr_language: str = Field(default="eng", description="Tesseract language")


class Settings(BaseSettings):
    """Main application settings."""
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore"
    )

    # Nested settings
    portal: PortalSettings = Field(default_factory=PortalSettings)
    browser: BrowserSettings = Field(default_factory=BrowserSettings)
    schedule: ScheduleSettings = Field(default_factory=ScheduleSettings)
    join: JoinSettings = Field(default_factory=JoinSettings)
    diagnostics: DiagnosticsSettings = Field(default_factory=DiagnosticsSettings)

    # Application settings
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")
    log_dir: str = Field(default="logs", description="Log directory")
    timezone: str = Field(default="auto", description="Timezone (or 'auto')")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()

    @property
    def tz_info(self):
        """Get timezone info (auto-detected if 'auto')."""
        if self.timezone.lower() == "auto":
            return tz.tzlocal()
        return tz.gettz(self.timezone) or tz.UTC

    def validate_for_run(self) -> None:
        """
        Check the settings the join loop cannot start without.

        Raises:
            ConfigurationError: If the portal URL or the schedule is missing.
        """
        from portal_joiner.core.exceptions import ConfigurationError

        if not self.portal.url:
            raise ConfigurationError("PORTAL_URL is not set")
        if not self.schedule.event_times:
            raise ConfigurationError("SCHEDULE_EVENT_TIMES is empty")


# Global settings instance
settings = Settings()
