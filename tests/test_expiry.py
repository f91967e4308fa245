"""Tests du timer d'expiration."""

import asyncio
import logging

from core.roster.expiry import ExpiryTimer


class TestExpiryTimer:
    def test_overdue_timer_fires_once(self):
        """Une échéance passée déclenche le callback immédiatement, une seule fois."""
        calls = []

        async def callback(roster_id):
            calls.append(roster_id)

        async def scenario():
            timer = ExpiryTimer(clock=lambda: 100.0)
            timer.schedule(7, 50.0, callback)
            await asyncio.sleep(0.01)
            return timer.pending(7)

        assert asyncio.run(scenario()) is False
        assert calls == [7]

    def test_cancel_prevents_firing(self):
        """Un timer annulé ne se déclenche pas."""
        calls = []

        async def callback(roster_id):
            calls.append(roster_id)

        async def scenario():
            timer = ExpiryTimer(clock=lambda: 0.0)
            timer.schedule(7, 0.01, callback)
            cancelled = timer.cancel(7)
            await asyncio.sleep(0.03)
            return cancelled, timer.cancel(7)

        assert asyncio.run(scenario()) == (True, False)
        assert calls == []

    def test_reschedule_replaces_previous_timer(self):
        """Reprogrammer remplace l'échéance précédente."""
        calls = []

        async def callback(roster_id):
            calls.append(roster_id)

        async def scenario():
            timer = ExpiryTimer(clock=lambda: 0.0)
            timer.schedule(7, 0.01, callback)
            timer.schedule(7, 3600, callback)
            await asyncio.sleep(0.03)
            pending = timer.pending(7)
            timer.cancel_all()
            return pending

        assert asyncio.run(scenario()) is True
        assert calls == []

    def test_callback_errors_are_logged(self, caplog):
        """Une erreur du callback est loggée, pas propagée."""

        async def callback(roster_id):
            raise RuntimeError("boom")

        async def scenario():
            timer = ExpiryTimer(clock=lambda: 10.0)
            timer.schedule(7, 0.0, callback)
            await asyncio.sleep(0.01)

        with caplog.at_level(logging.ERROR, logger="core.roster.expiry"):
            asyncio.run(scenario())
        assert "Echec expiration du roster 7" in caplog.text
