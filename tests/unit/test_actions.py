"""Unit tests for the action executor and the cross-frame text click."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from pagedigest.browser.actions import CLICKABLE_SELECTOR, click_all_matching, execute_action
from pagedigest.models.action import Action, ActionType


def _frame(name: str = "", url: str = "about:blank") -> MagicMock:
    frame = MagicMock()
    frame.name = name
    frame.url = url
    return frame


def _handle(text: str | None, *, click_error: Exception | None = None) -> MagicMock:
    handle = MagicMock()
    handle.text_content = AsyncMock(return_value=text)
    handle.click = AsyncMock(side_effect=click_error)
    return handle


# ---------------------------------------------------------------------------
# execute_action
# ---------------------------------------------------------------------------


class TestExecuteAction:
    """Dispatch and failure handling for each action variant."""

    @pytest.mark.anyio
    async def test_none_returns_false(self, fake_page) -> None:
        assert await execute_action(fake_page, Action.none("nothing")) is False
        fake_page.click.assert_not_called()

    @pytest.mark.anyio
    async def test_click_by_selector(self, fake_page) -> None:
        ok = await execute_action(fake_page, Action.click(target_selector="#accept"), selector_timeout_ms=1234)
        assert ok is True
        fake_page.wait_for_selector.assert_awaited_once_with("#accept", 1234)
        fake_page.click.assert_awaited_once_with("#accept")

    @pytest.mark.anyio
    async def test_click_by_selector_times_out(self, fake_page) -> None:
        fake_page.wait_for_selector.side_effect = TimeoutError("not visible")
        ok = await execute_action(fake_page, Action.click(target_selector="#missing"))
        assert ok is False
        fake_page.click.assert_not_called()

    @pytest.mark.anyio
    async def test_click_by_text_prefers_text_over_selector(self, fake_page) -> None:
        with patch("pagedigest.browser.actions.click_all_matching", new=AsyncMock()) as clicker:
            ok = await execute_action(fake_page, Action.click(target_text="Accept", target_selector="#accept"))
        assert ok is True
        clicker.assert_awaited_once_with(fake_page, "Accept")
        fake_page.click.assert_not_called()

    @pytest.mark.anyio
    async def test_click_by_text_succeeds_even_without_matches(self, fake_page) -> None:
        fake_page.frames.return_value = [_frame("main")]
        fake_page.query_all.return_value = []
        assert await execute_action(fake_page, Action.click(target_text="Accept")) is True

    @pytest.mark.anyio
    async def test_type(self, fake_page) -> None:
        ok = await execute_action(fake_page, Action.type_text("input[name=q]", "pagedigest"))
        assert ok is True
        fake_page.type.assert_awaited_once_with("input[name=q]", "pagedigest")

    @pytest.mark.anyio
    async def test_type_failure_returns_false(self, fake_page) -> None:
        fake_page.type.side_effect = RuntimeError("detached")
        assert await execute_action(fake_page, Action.type_text("#q", "x")) is False

    @pytest.mark.anyio
    async def test_type_missing_text_is_rejected(self, fake_page) -> None:
        action = Action(action=ActionType.TYPE, target_selector="#q")
        assert await execute_action(fake_page, action) is False
        fake_page.type.assert_not_called()

    @pytest.mark.anyio
    async def test_scroll(self, fake_page) -> None:
        assert await execute_action(fake_page, Action.scroll(700)) is True
        fake_page.scroll_by.assert_awaited_once_with(700)

    @pytest.mark.anyio
    async def test_scroll_error_returns_false(self, fake_page) -> None:
        fake_page.scroll_by.side_effect = RuntimeError("page closed")
        assert await execute_action(fake_page, Action.scroll(700)) is False

    @pytest.mark.anyio
    async def test_wait(self, fake_page) -> None:
        assert await execute_action(fake_page, Action.wait(10)) is True
        fake_page.click.assert_not_called()


# ---------------------------------------------------------------------------
# click_all_matching
# ---------------------------------------------------------------------------


class TestClickAllMatching:
    """Cross-frame search over links and buttons."""

    @pytest.mark.anyio
    async def test_matches_are_case_insensitive_substrings(self, fake_page) -> None:
        accept = _handle("  ACCEPT all cookies ")
        other = _handle("Settings")
        fake_page.frames.return_value = [_frame("main")]
        fake_page.query_all.return_value = [accept, other]

        summary = await click_all_matching(fake_page, "accept")

        fake_page.query_all.assert_awaited_once()
        assert fake_page.query_all.call_args[0][1] == CLICKABLE_SELECTOR
        accept.click.assert_awaited_once()
        other.click.assert_not_called()
        assert summary.frames_matched == 1
        assert summary.elements_clicked == 1

    @pytest.mark.anyio
    async def test_two_of_three_frames_when_one_throws(self, fake_page) -> None:
        main, consent, broken = _frame("main"), _frame("", "https://cmp.example/consent"), _frame("ads")
        handles = {
            id(main): [_handle("Accept")],
            id(consent): [_handle("Accept all"), _handle("Reject")],
        }

        async def query_all(frame, selector):
            if frame is broken:
                raise RuntimeError("Frame was detached")
            return handles[id(frame)]

        fake_page.frames.return_value = [main, consent, broken]
        fake_page.query_all.side_effect = query_all

        summary = await click_all_matching(fake_page, "Accept")

        assert summary.frames_matched == 2
        assert summary.elements_clicked == 2
        by_frame = {match.frame: match for match in summary.frames}
        assert by_frame["https://cmp.example/consent"].found is True
        assert by_frame["ads"].found is False
        assert "detached" in by_frame["ads"].error

    @pytest.mark.anyio
    async def test_failed_click_is_not_counted(self, fake_page) -> None:
        good = _handle("Accept")
        bad = _handle("Accept", click_error=RuntimeError("not visible"))
        fake_page.frames.return_value = [_frame("main")]
        fake_page.query_all.return_value = [good, bad]

        summary = await click_all_matching(fake_page, "Accept")

        assert summary.frames_matched == 1
        assert summary.elements_clicked == 1

    @pytest.mark.anyio
    async def test_elements_without_text_are_skipped(self, fake_page) -> None:
        icon = _handle(None)
        fake_page.frames.return_value = [_frame("main")]
        fake_page.query_all.return_value = [icon]

        summary = await click_all_matching(fake_page, "Accept")

        icon.click.assert_not_called()
        assert summary.frames_matched == 0
        assert summary.elements_clicked == 0
