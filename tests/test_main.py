"""
Tests for the entry point's signal handling.

Run with: pytest tests/test_main.py -v
"""

import asyncio
import os
import signal
import sys
import time
from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from portal_joiner.bot import MeetingJoinBot
from portal_joiner.main import _setup_signal_handlers


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals only")
class TestSignalHandlers:

    @pytest.mark.asyncio
    async def test_sigterm_wakes_long_sleep(self, diagnostics):
        bot = MeetingJoinBot(
            session_manager=MagicMock(),
            navigator=MagicMock(),
            matcher=MagicMock(),
            join_flow=MagicMock(),
            diagnostics=diagnostics,
        )
        loop = asyncio.get_running_loop()
        _setup_signal_handlers(bot, loop)
        try:
            loop.call_later(0.2, os.kill, os.getpid(), signal.SIGTERM)
            started = time.monotonic()

            await bot._sleep(timedelta(seconds=8))

            assert time.monotonic() - started < 3
            assert bot.shutdown_requested
        finally:
            loop.remove_signal_handler(signal.SIGINT)
            loop.remove_signal_handler(signal.SIGTERM)

    def test_handlers_go_through_the_loop(self):
        bot = MagicMock()
        loop = MagicMock()

        _setup_signal_handlers(bot, loop)

        loop.add_signal_handler.assert_any_call(signal.SIGINT, bot.request_shutdown)
        loop.add_signal_handler.assert_any_call(signal.SIGTERM, bot.request_shutdown)
