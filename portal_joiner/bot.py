"""
Portal Joiner orchestrator.
Runs the join loop: fresh browser, find the current meeting, join it, sleep.
"""

import asyncio
from datetime import datetime, timedelta
from typing import Callable, Optional

from portal_joiner.config import settings, get_logger, Settings
from portal_joiner.core.exceptions import LaunchFailure, ShutdownRequested
from portal_joiner.meeting_handler import (
    BrowserSession,
    DiagnosticsRecorder,
    FrameNavigator,
    JoinStateMachine,
    MeetingMatcher,
    SessionManager,
)
from portal_joiner.models import Outcome
from portal_joiner.scheduler import compute_wait_duration
from portal_joiner.utils import format_duration

logger = get_logger("bot")


class MeetingJoinBot:
    """
    Main Portal Joiner orchestrator.

    Each iteration replaces the browser session, looks for a meeting that is
    on right now and joins it. Every failure is logged and ends the
    iteration; the loop then sleeps until the next configured window and
    tries again, forever or until shutdown is requested.
    """

    def __init__(
        self,
        app_settings: Optional[Settings] = None,
        session_manager: Optional[SessionManager] = None,
        navigator: Optional[FrameNavigator] = None,
        matcher: Optional[MeetingMatcher] = None,
        join_flow: Optional[JoinStateMachine] = None,
        diagnostics: Optional[DiagnosticsRecorder] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize the bot. Collaborators default to the configured ones."""
        self._settings = app_settings or settings
        self.diagnostics = diagnostics or DiagnosticsRecorder(self._settings.diagnostics)
        self.session_manager = session_manager or SessionManager(self._settings.browser)
        self.navigator = navigator or FrameNavigator(self._settings.portal, self.diagnostics)
        self.matcher = matcher or MeetingMatcher(
            self._settings.portal, self.diagnostics, self._settings.schedule.grace_minutes
        )
        self.join_flow = join_flow or JoinStateMachine(
            self._settings.join, self.diagnostics, checkpoint=self.checkpoint
        )
        self._clock = clock or (lambda: datetime.now(self._settings.tz_info))

        self.session: Optional[BrowserSession] = None
        self.last_outcome: Optional[Outcome] = None

        # Shutdown flag
        self._shutdown_event = asyncio.Event()

    @property
    def shutdown_requested(self) -> bool:
        """Check if a graceful shutdown was requested."""
        return self._shutdown_event.is_set()

    def request_shutdown(self) -> None:
        """Ask the loop to stop at its next checkpoint."""
        if not self._shutdown_event.is_set():
            logger.info("Shutdown requested")
        self._shutdown_event.set()

    def checkpoint(self) -> None:
        """Raise ShutdownRequested if the loop should stop."""
        if self._shutdown_event.is_set():
            raise ShutdownRequested()

    async def run(self) -> None:
        """
        Run the join loop until shutdown is requested.

        Raises:
            ConfigurationError: If the settings cannot drive the loop.
        """
        self._settings.validate_for_run()
        logger.info(f"Join loop started with {len(self._settings.schedule.event_times)} daily windows")

        try:
            while not self.shutdown_requested:
                outcome = await self.run_iteration()
                if outcome == Outcome.SHUTDOWN:
                    break

                wait = self.next_wait(outcome, self._clock())
                logger.info(f"Waiting for {format_duration(wait)} before next run...")
                await self._sleep(wait)
        finally:
            await self.shutdown()

    async def run_iteration(self) -> Outcome:
        """
        Run one full iteration: session reset, navigation, matching, join.

        Never raises; the outcome says how it went.
        """
        try:
            self.checkpoint()
            previous, self.session = self.session, None
            self.session = await self.session_manager.reset_session(previous)
            outcome = await self.run_once(self.session, self._clock())
        except ShutdownRequested:
            outcome = Outcome.SHUTDOWN
        except LaunchFailure:
            logger.exception("Error launching browser")
            outcome = Outcome.LAUNCH_FAILED
        except Exception as e:
            logger.exception(f"Error during automation run: {e}")
            outcome = Outcome.FAILED

        self.last_outcome = outcome
        logger.info(f"Iteration finished: {outcome.value}")
        return outcome

    async def run_once(self, session: BrowserSession, now: datetime) -> Outcome:
        """
        Find the meeting that is on at ``now`` and join it.

        Stage failures propagate to the caller.
        """
        surface = await self.navigator.locate_calendar_surface(session)
        self.checkpoint()

        meeting = await self.matcher.find_current_meeting(surface, now)
        if meeting is None:
            return Outcome.NO_MEETING
        self.checkpoint()

        await self.join_flow.run(session, surface, meeting)
        return Outcome.JOINED

    def next_wait(self, outcome: Outcome, now: datetime) -> timedelta:
        """Sleep until the next window; capped after a failed launch."""
        wait = compute_wait_duration(self._settings.schedule.event_times, now)
        if outcome == Outcome.LAUNCH_FAILED:
            backoff = timedelta(seconds=self._settings.schedule.launch_failure_backoff_seconds)
            wait = min(wait, backoff)
        return wait

    async def _sleep(self, wait: timedelta) -> None:
        """Sleep for ``wait`` or until shutdown, whichever comes first."""
        try:
            await asyncio.wait_for(self._shutdown_event.wait(), timeout=wait.total_seconds())
        except asyncio.TimeoutError:
            pass

    async def shutdown(self) -> None:
        """Close the browser and cancel pending diagnostics."""
        logger.info("Shutting down Portal Joiner...")

        if self.session is not None:
            await self.session_manager.close_session(self.session)
            self.session = None

        await self.diagnostics.drain()
        logger.info("Portal Joiner shutdown complete")
