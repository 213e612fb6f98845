"""Playwright test doubles shared by the test modules."""

from unittest.mock import AsyncMock, MagicMock

from playwright.async_api import TimeoutError as PlaywrightTimeoutError


class FakeExpectPage:
    """Stands in for the context manager returned by ``context.expect_page``."""

    def __init__(self, page=None):
        self._page = page

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False

    @property
    def value(self):
        async def _value():
            if self._page is None:
                raise PlaywrightTimeoutError("Timeout 30000ms exceeded while waiting for event \"page\"")
            return self._page
        return _value()


def make_page(url="about:blank", mic_label="Mute mic"):
    """A Playwright page double with async methods."""
    page = MagicMock()
    page.url = url
    page.is_closed = MagicMock(return_value=False)
    page.close = AsyncMock()
    page.goto = AsyncMock()
    page.bring_to_front = AsyncMock()
    page.screenshot = AsyncMock()
    page.wait_for_selector = AsyncMock()
    page.click = AsyncMock()
    page.evaluate = AsyncMock(return_value=True)
    page.get_attribute = AsyncMock(return_value=mic_label)
    return page


def make_surface(raw_events=None, page=None):
    """A calendar frame double."""
    surface = MagicMock()
    surface.url = "https://portal.example.com/calendar/"
    surface.page = page or make_page()
    surface.wait_for_selector = AsyncMock()
    surface.click = AsyncMock()
    surface.evaluate = AsyncMock(return_value=True)
    surface.eval_on_selector_all = AsyncMock(return_value=raw_events or [])
    return surface


def make_session(secondary_page=None):
    """A BrowserSession double whose context opens ``secondary_page``."""
    session = MagicMock()
    session.primary_page = make_page()
    session.context = MagicMock()
    session.context.expect_page = MagicMock(return_value=FakeExpectPage(secondary_page))
    session.is_closed = False
    return session
