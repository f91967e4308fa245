"""
Intent Dispatcher : sérialise les intentions par roster et orchestre load/apply/save.

Discipline de concurrence :
- un `asyncio.Lock` par id de roster (retiré quand le roster devient inactif) ;
  ids différents => exécution indépendante,
- annuler un appel encore en attente du verrou n'a aucun effet de bord,
- une fois le verrou obtenu, load/apply/save s'exécute dans une tâche protégée
  (`asyncio.shield`) qui libère elle-même le verrou : jamais d'interruption en vol,
- un échec de sauvegarde remonte en `StoreError` (rien n'a été validé).
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Awaitable, Callable, Dict, List, Optional

from . import engine
from .errors import RosterError, StoreError
from .expiry import ExpiryTimer
from .models import AnyRoster, Expire, Intent, JobClass, Outcome, SelectRole
from .store import RosterStore

logger = logging.getLogger(__name__)

ExpiryListener = Callable[["Applied"], Awaitable[None]]


@dataclass(frozen=True)
class Applied:
    """Résultat d'une intention appliquée : nouvel état + descripteur."""

    roster: AnyRoster
    outcome: Outcome


class RosterDispatcher:
    def __init__(self, store: RosterStore, timer: Optional[ExpiryTimer] = None):
        self.store = store
        self.timer = timer
        self.locks: Dict[int, asyncio.Lock] = {}
        self.expiry_listeners: List[ExpiryListener] = []

    # ---------- utilitaires ----------
    def get_lock(self, roster_id: int) -> asyncio.Lock:
        lock = self.locks.get(roster_id)
        if lock is None:
            lock = asyncio.Lock()
            self.locks[roster_id] = lock
        return lock

    def add_expiry_listener(self, listener: ExpiryListener) -> None:
        self.expiry_listeners.append(listener)

    @staticmethod
    def _normalize(intent: Intent) -> Intent:
        # Les rôles arrivent parfois en texte brut depuis l'UI
        if isinstance(intent, SelectRole) and not isinstance(intent.role, JobClass):
            return replace(intent, role=JobClass.parse(str(intent.role)))
        return intent

    async def _call_store(self, what: str, roster_id: int, coro):
        try:
            return await coro
        except RosterError:
            raise
        except Exception as exc:  # noqa: BLE001
            logger.exception("Store: echec %s pour le roster %s", what, roster_id)
            raise StoreError(f"Echec {what} du roster {roster_id}") from exc

    # ---------- cycle de vie ----------
    async def create(self, roster: AnyRoster) -> AnyRoster:
        async with self.get_lock(roster.id):
            await self._call_store("création", roster.id, self.store.create(roster))
        logger.info("Roster %s créé (%s, créateur %s)", roster.id, roster.kind.value, roster.creator_id)
        self._schedule_expiry(roster)
        return roster

    async def get(self, roster_id: int) -> AnyRoster:
        return await self._call_store("lecture", roster_id, self.store.load(roster_id))

    async def restore(self) -> int:
        """Reprogramme l'expiration des rosters actifs (démarrage du bot)."""
        rosters = await self._call_store("listing", 0, self.store.list_active())
        count = 0
        for roster in rosters:
            if self._schedule_expiry(roster):
                count += 1
        logger.info("Rosters actifs: %s | expirations reprogrammées: %s", len(rosters), count)
        return count

    def _schedule_expiry(self, roster: AnyRoster) -> bool:
        if self.timer is None or roster.ends_at is None or not roster.is_active:
            return False
        self.timer.schedule(roster.id, roster.ends_at, self.expire)
        return True

    async def expire(self, roster_id: int) -> Applied:
        applied = await self.submit(roster_id, Expire())
        if applied.outcome.changed:
            for listener in list(self.expiry_listeners):
                try:
                    await listener(applied)
                except Exception:  # noqa: BLE001
                    logger.exception("Listener d'expiration en échec pour %s", roster_id)
        return applied

    # ---------- intentions ----------
    async def submit(self, roster_id: int, intent: Intent) -> Applied:
        intent = self._normalize(intent)
        lock = self.get_lock(roster_id)
        # CancelledError ici : rien n'est encore acquis ni modifié
        await lock.acquire()
        try:
            task = asyncio.ensure_future(self._apply_locked(roster_id, intent))
        except BaseException:
            lock.release()
            raise
        task.add_done_callback(lambda t: self._finish(lock, t))
        return await asyncio.shield(task)

    @staticmethod
    def _finish(lock: asyncio.Lock, task: asyncio.Future) -> None:
        lock.release()
        # Appelant annulé en vol : l'erreur est déjà loggée, on la marque comme lue
        if not task.cancelled():
            task.exception()

    async def _apply_locked(self, roster_id: int, intent: Intent) -> Applied:
        current = await self._call_store("lecture", roster_id, self.store.load(roster_id))
        try:
            new, outcome = engine.apply(current, intent)
        except RosterError as exc:
            logger.info("Roster %s: %s refusé (%s)", roster_id, type(intent).__name__, exc.code.value)
            raise
        if not outcome.changed:
            logger.debug("Roster %s: %s sans effet", roster_id, type(intent).__name__)
            return Applied(current, outcome)

        new = replace(new, version=current.version + 1)
        await self._call_store("sauvegarde", roster_id, self.store.save(new))
        if not new.is_active:
            if self.timer is not None:
                self.timer.cancel(roster_id)
            # Roster inactif : plus aucune écriture, le verrou n'est plus utile
            self.locks.pop(roster_id, None)
        logger.info(
            "Roster %s: %s -> %s%s",
            roster_id,
            type(intent).__name__,
            outcome.kind.value,
            f" (promus: {[p.user_id for p in outcome.promoted]})" if outcome.promoted else "",
        )
        return Applied(new, outcome)


__all__ = ["RosterDispatcher", "Applied"]
