"""
Tests for the background notification dispatcher.
"""

import logging

import pytest

from admissions.core.notifications import NotificationDispatcher


async def _delivered() -> bool:
    return True


async def _not_delivered() -> bool:
    return False


async def _boom() -> bool:
    raise RuntimeError("smtp exploded")


class TestNotificationDispatcher:
    @pytest.mark.asyncio
    async def test_dispatch_runs_in_background_and_drains(self):
        dispatcher = NotificationDispatcher()

        dispatcher.dispatch("ok", _delivered())
        assert dispatcher.pending == 1

        await dispatcher.drain()
        assert dispatcher.pending == 0

    @pytest.mark.asyncio
    async def test_failure_is_logged_not_raised(self, caplog):
        dispatcher = NotificationDispatcher()

        with caplog.at_level(logging.ERROR, logger="admissions.core.notifications"):
            task = dispatcher.dispatch("broken", _boom())
            await dispatcher.drain()

        assert task.exception() is None
        assert "broken" in caplog.text

    @pytest.mark.asyncio
    async def test_undelivered_result_is_logged(self, caplog):
        dispatcher = NotificationDispatcher()

        with caplog.at_level(logging.ERROR, logger="admissions.core.notifications"):
            dispatcher.dispatch("bounced", _not_delivered())
            await dispatcher.drain()

        assert "was not delivered" in caplog.text

    @pytest.mark.asyncio
    async def test_drain_with_nothing_pending(self):
        await NotificationDispatcher().drain()
