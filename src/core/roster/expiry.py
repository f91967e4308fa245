"""
Déclencheur d'expiration : une tâche asyncio par roster, annulable.

Le timer ne connaît pas le Dispatcher ; il reçoit le callback à appeler à
l'échéance (en pratique `RosterDispatcher.expire`).
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Dict

logger = logging.getLogger(__name__)

ExpireCallback = Callable[[int], Awaitable[object]]


class ExpiryTimer:
    def __init__(self, clock: Callable[[], float] = time.time):
        self.clock = clock
        self.tasks: Dict[int, asyncio.Task] = {}

    def schedule(self, roster_id: int, at: float, callback: ExpireCallback) -> None:
        """Programme `callback(roster_id)` à l'instant epoch `at` (remplace un timer existant)."""
        self.cancel(roster_id)
        delay = max(0.0, at - self.clock())
        self.tasks[roster_id] = asyncio.get_running_loop().create_task(
            self._fire_later(roster_id, delay, callback),
            name=f"roster-expiry-{roster_id}",
        )
        logger.debug("Expiration du roster %s programmée dans %.0fs", roster_id, delay)

    def cancel(self, roster_id: int) -> bool:
        task = self.tasks.pop(roster_id, None)
        if task is None:
            return False
        task.cancel()
        return True

    def cancel_all(self) -> None:
        for roster_id in list(self.tasks):
            self.cancel(roster_id)

    def pending(self, roster_id: int) -> bool:
        return roster_id in self.tasks

    async def _fire_later(self, roster_id: int, delay: float, callback: ExpireCallback) -> None:
        await asyncio.sleep(delay)
        # Retiré avant l'appel : le callback peut appeler cancel() sur ce roster
        self.tasks.pop(roster_id, None)
        try:
            await callback(roster_id)
        except Exception:  # noqa: BLE001
            logger.exception("Echec expiration du roster %s", roster_id)


__all__ = ["ExpiryTimer"]
