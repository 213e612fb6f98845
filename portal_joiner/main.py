"""
Main Portal Joiner application.
Joins the day's recurring portal meetings unattended.
"""

import asyncio
import signal
import sys
from datetime import datetime

from portal_joiner.bot import MeetingJoinBot
from portal_joiner.config import settings, setup_logging, get_logger
from portal_joiner.core.exceptions import ConfigurationError

main_logger = get_logger("main")


def _setup_signal_handlers(bot: MeetingJoinBot, loop: asyncio.AbstractEventLoop) -> None:
    """Set up signal handlers for graceful shutdown."""
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, bot.request_shutdown)
        except NotImplementedError:
            # Windows: no loop signal handlers, hand the request to the loop thread
            signal.signal(sig, lambda s, f: loop.call_soon_threadsafe(bot.request_shutdown))


async def main() -> None:
    """Main entry point."""
    print("\n" + "=" * 60)
    print("PORTAL JOINER")
    print("=" * 60)
    print(f"Starting at {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print(f"Portal: {settings.portal.url or '(not set)'}")
    print(f"Daily windows: {', '.join(settings.schedule.event_times) or '(none)'}")
    print("=" * 60 + "\n")

    setup_logging()

    bot = MeetingJoinBot()
    _setup_signal_handlers(bot, asyncio.get_running_loop())
    await bot.run()


def run() -> None:
    """Run the Portal Joiner (synchronous entry point)."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nGoodbye!")
    except ConfigurationError as e:
        main_logger.error(f"Configuration error: {e.message}")
        sys.exit(1)
    except Exception as e:
        print(f"\nFatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    run()
