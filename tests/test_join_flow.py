"""
Tests for the join flow.

Run with: pytest tests/test_join_flow.py -v
"""

from datetime import time

import pytest

from portal_joiner.core.exceptions import (
    ElementNotFound,
    ElementNotVisibleInTime,
    SecondaryPageTimeout,
    ShutdownRequested,
)
from portal_joiner.meeting_handler import JoinStateMachine
from portal_joiner.meeting_handler.portal_scripts import (
    CLICK_EVENT_LINK_JS,
    CLICK_IF_PRESENT_JS,
    get_selector,
)
from portal_joiner.models import JoinState, MeetingWindow

from .fakes import make_page, make_session, make_surface

LECTURE = MeetingWindow("Lecture", time(9, 0), time(9, 30), "/calendar/event/42")


class TestJoinFlowSuccess:
    """Complete walk through the states."""

    @pytest.mark.asyncio
    async def test_reaches_done(self, join_settings, diagnostics):
        call_page = make_page(url="https://teams.example.com/meet")
        session = make_session(secondary_page=call_page)
        surface = make_surface()
        flow = JoinStateMachine(join_settings, diagnostics)

        ctx = await flow.run(session, surface, LECTURE)

        assert ctx.state == JoinState.DONE
        assert ctx.secondary_page is call_page
        assert ctx.meeting is LECTURE
        surface.evaluate.assert_awaited_once_with(CLICK_EVENT_LINK_JS, LECTURE.join_handle)
        assert surface.click.await_args.args[0] == get_selector("join_modal_button")

    @pytest.mark.asyncio
    async def test_prejoin_buttons_are_clicked_in_page(self, join_settings, diagnostics):
        call_page = make_page()
        flow = JoinStateMachine(join_settings, diagnostics)

        await flow.run(make_session(call_page), make_surface(), LECTURE)

        evaluated = [call.args for call in call_page.evaluate.await_args_list]
        assert evaluated == [
            (CLICK_IF_PRESENT_JS, get_selector("continue_on_web")),
            (CLICK_IF_PRESENT_JS, get_selector("join_now")),
        ]

    @pytest.mark.asyncio
    async def test_unmuted_mic_is_clicked_once(self, join_settings, diagnostics):
        call_page = make_page(mic_label="Mute mic")
        flow = JoinStateMachine(join_settings, diagnostics)

        await flow.run(make_session(call_page), make_surface(), LECTURE)

        call_page.click.assert_awaited_once()
        assert call_page.click.await_args.args[0] == get_selector("microphone")

    @pytest.mark.asyncio
    async def test_muted_mic_is_left_alone(self, join_settings, diagnostics):
        call_page = make_page(mic_label="Unmute mic")
        flow = JoinStateMachine(join_settings, diagnostics)

        ctx = await flow.run(make_session(call_page), make_surface(), LECTURE)

        call_page.click.assert_not_awaited()
        assert ctx.state == JoinState.DONE

    @pytest.mark.asyncio
    async def test_mute_on_join_disabled(self, join_settings, diagnostics):
        join_settings.mute_on_join = False
        call_page = make_page(mic_label="Mute mic")
        flow = JoinStateMachine(join_settings, diagnostics)

        ctx = await flow.run(make_session(call_page), make_surface(), LECTURE)

        call_page.get_attribute.assert_not_awaited()
        call_page.click.assert_not_awaited()
        assert ctx.state == JoinState.DONE

    @pytest.mark.asyncio
    async def test_vanished_prejoin_button_is_a_no_op(self, join_settings, diagnostics):
        call_page = make_page()
        call_page.evaluate.return_value = False
        flow = JoinStateMachine(join_settings, diagnostics)

        ctx = await flow.run(make_session(call_page), make_surface(), LECTURE)

        assert ctx.state == JoinState.DONE


class TestJoinFlowFailures:
    """Each failing step aborts the flow with its own error."""

    @pytest.mark.asyncio
    async def test_missing_event_link(self, join_settings, diagnostics):
        surface = make_surface()
        surface.evaluate.return_value = False
        flow = JoinStateMachine(join_settings, diagnostics)

        with pytest.raises(ElementNotFound):
            await flow.run(make_session(make_page()), surface, LECTURE)

        surface.wait_for_selector.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_modal_timeout(self, join_settings, diagnostics, timeout_error):
        surface = make_surface()
        surface.wait_for_selector.side_effect = timeout_error()
        session = make_session(make_page())
        flow = JoinStateMachine(join_settings, diagnostics)

        with pytest.raises(ElementNotVisibleInTime) as exc_info:
            await flow.run(session, surface, LECTURE)

        assert exc_info.value.details["selector"] == get_selector("join_modal")
        surface.click.assert_not_awaited()
        session.context.expect_page.assert_not_called()

    @pytest.mark.asyncio
    async def test_meeting_window_never_opens(self, join_settings, diagnostics):
        session = make_session(secondary_page=None)
        flow = JoinStateMachine(join_settings, diagnostics)

        with pytest.raises(SecondaryPageTimeout):
            await flow.run(session, make_surface(), LECTURE)

        session.context.expect_page.assert_called_once_with(timeout=1000)

    @pytest.mark.asyncio
    async def test_join_now_timeout(self, join_settings, diagnostics, timeout_error):
        call_page = make_page()
        call_page.wait_for_selector.side_effect = [None, timeout_error()]
        flow = JoinStateMachine(join_settings, diagnostics)

        with pytest.raises(ElementNotVisibleInTime) as exc_info:
            await flow.run(make_session(call_page), make_surface(), LECTURE)

        assert exc_info.value.details["selector"] == get_selector("join_now")

    @pytest.mark.asyncio
    async def test_shutdown_checkpoint_stops_flow(self, join_settings, diagnostics):
        def checkpoint():
            raise ShutdownRequested()

        surface = make_surface()
        flow = JoinStateMachine(join_settings, diagnostics, checkpoint=checkpoint)

        with pytest.raises(ShutdownRequested):
            await flow.run(make_session(make_page()), surface, LECTURE)

        surface.evaluate.assert_not_awaited()
