"""
Roster Store : persistance clé -> roster avec compare-and-store sur `version`.

Implémentations :
- `MemoryRosterStore` : dictionnaire en mémoire (tests, bot lancé sans DATABASE_URL)
- `PgRosterStore` : PostgreSQL via asyncpg (`db/rosters.py`)

Les stores renvoient toujours des modèles du domaine (jamais de Record asyncpg).
"""
from __future__ import annotations

import copy
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List

import asyncpg

from db import rosters as db

from .codec import roster_from_record, roster_to_record
from .errors import RosterNotFound, StoreConflict, StoreError
from .models import AnyRoster

logger = logging.getLogger(__name__)


class RosterStore(ABC):
    """Interface de persistance des rosters."""

    @abstractmethod
    async def load(self, roster_id: int) -> AnyRoster:
        """Renvoie le roster, ou lève RosterNotFound."""
        ...

    @abstractmethod
    async def create(self, roster: AnyRoster) -> None:
        """Enregistre un nouveau roster (StoreError si l'id existe déjà)."""
        ...

    @abstractmethod
    async def save(self, roster: AnyRoster) -> None:
        """Remplace le roster stocké si sa version vaut `roster.version - 1`.

        Lève StoreConflict sinon.
        """
        ...

    @abstractmethod
    async def list_active(self) -> List[AnyRoster]:
        """Renvoie tous les rosters encore actifs."""
        ...


class MemoryRosterStore(RosterStore):
    def __init__(self):
        self._records: Dict[int, Dict[str, Any]] = {}

    async def load(self, roster_id: int) -> AnyRoster:
        rec = self._records.get(roster_id)
        if rec is None:
            raise RosterNotFound(roster_id)
        return roster_from_record(copy.deepcopy(rec))

    async def create(self, roster: AnyRoster) -> None:
        if roster.id in self._records:
            raise StoreError(f"Roster {roster.id} déjà existant")
        self._records[roster.id] = roster_to_record(roster)

    async def save(self, roster: AnyRoster) -> None:
        current = self._records.get(roster.id)
        if current is None:
            raise RosterNotFound(roster.id)
        if current["version"] != roster.version - 1:
            raise StoreConflict(roster.id, roster.version - 1)
        self._records[roster.id] = roster_to_record(roster)

    async def list_active(self) -> List[AnyRoster]:
        return [roster_from_record(copy.deepcopy(r)) for r in self._records.values() if r["is_active"]]


class PgRosterStore(RosterStore):
    """Store PostgreSQL ; les erreurs asyncpg/réseau deviennent des StoreError."""

    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    async def ensure_schema(self) -> None:
        await db.ensure_roster_schema(self.pool)

    async def load(self, roster_id: int) -> AnyRoster:
        try:
            rec = await db.fetch_roster(self.pool, roster_id)
        except (asyncpg.PostgresError, OSError) as exc:
            raise StoreError(f"Lecture du roster {roster_id} impossible") from exc
        if rec is None:
            raise RosterNotFound(roster_id)
        return roster_from_record(rec)

    async def create(self, roster: AnyRoster) -> None:
        try:
            inserted = await db.insert_roster(self.pool, roster_to_record(roster))
        except (asyncpg.PostgresError, OSError) as exc:
            raise StoreError(f"Création du roster {roster.id} impossible") from exc
        if not inserted:
            raise StoreError(f"Roster {roster.id} déjà existant")

    async def save(self, roster: AnyRoster) -> None:
        try:
            ok = await db.update_roster(self.pool, roster_to_record(roster), roster.version - 1)
        except (asyncpg.PostgresError, OSError) as exc:
            raise StoreError(f"Sauvegarde du roster {roster.id} impossible") from exc
        if not ok:
            raise StoreConflict(roster.id, roster.version - 1)

    async def list_active(self) -> List[AnyRoster]:
        try:
            records = await db.fetch_active_rosters(self.pool)
        except (asyncpg.PostgresError, OSError) as exc:
            raise StoreError("Lecture des rosters actifs impossible") from exc
        out: List[AnyRoster] = []
        for rec in records:
            try:
                out.append(roster_from_record(rec))
            except StoreError:
                logger.exception("Roster illisible ignoré: %s", rec.get("id"))
        return out


__all__ = ["RosterStore", "MemoryRosterStore", "PgRosterStore"]
