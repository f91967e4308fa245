"""
Helpers base de données pour les rosters (sièges et dungeon runs).

Une ligne par événement ; l'état complet est sérialisé dans `state` (JSONB) par
`core.roster.codec`, les colonnes d'en-tête servent au filtrage (actifs, expiration).
La colonne `version` porte le compare-and-store.
"""
from __future__ import annotations

import json
from typing import Any, Dict, Optional, Sequence

import asyncpg

ROSTER_SCHEMA = """
CREATE TABLE IF NOT EXISTS roster (
    id BIGINT PRIMARY KEY,
    kind TEXT NOT NULL,
    creator_id BIGINT NOT NULL,
    channel_id BIGINT NULL,
    is_active BOOLEAN NOT NULL DEFAULT TRUE,
    ends_at BIGINT NULL,
    version INT NOT NULL DEFAULT 0,
    state JSONB NOT NULL,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS idx_roster_active ON roster(is_active) WHERE is_active;
"""


async def ensure_roster_schema(pool: asyncpg.Pool):
    async with pool.acquire() as conn:
        await conn.execute(ROSTER_SCHEMA)


def _state(record: Dict[str, Any]) -> str:
    return json.dumps(record, separators=(",", ":"))


def _decode(row: Optional[asyncpg.Record]) -> Optional[Dict[str, Any]]:
    if row is None:
        return None
    raw = row["state"]
    # Sans codec JSONB enregistré, asyncpg renvoie le texte brut
    return json.loads(raw) if isinstance(raw, str) else dict(raw)


async def fetch_roster(pool: asyncpg.Pool, roster_id: int) -> Optional[Dict[str, Any]]:
    q = "SELECT state FROM roster WHERE id=$1"
    async with pool.acquire() as conn:
        return _decode(await conn.fetchrow(q, roster_id))


async def insert_roster(pool: asyncpg.Pool, record: Dict[str, Any]) -> bool:
    """Insère un nouveau roster. Renvoie False si l'id existe déjà."""
    q = """INSERT INTO roster(id, kind, creator_id, channel_id, is_active, ends_at, version, state)
            VALUES($1,$2,$3,$4,$5,$6,$7,$8::jsonb)
            ON CONFLICT (id) DO NOTHING
            RETURNING id"""
    async with pool.acquire() as conn:
        rid = await conn.fetchval(
            q,
            record["id"],
            record["kind"],
            record["creator_id"],
            record.get("channel_id"),
            record.get("is_active", True),
            record.get("ends_at"),
            record.get("version", 0),
            _state(record),
        )
    return rid is not None


async def update_roster(pool: asyncpg.Pool, record: Dict[str, Any], expected_version: int) -> bool:
    """Compare-and-store : n'écrit que si la version stockée vaut `expected_version`."""
    q = """
        UPDATE roster SET
            is_active = $2,
            ends_at = $3,
            version = $4,
            state = $5::jsonb,
            updated_at = NOW()
        WHERE id=$1 AND version=$6
        RETURNING id
    """
    async with pool.acquire() as conn:
        rid = await conn.fetchval(
            q,
            record["id"],
            record.get("is_active", True),
            record.get("ends_at"),
            record["version"],
            _state(record),
            expected_version,
        )
    return rid is not None


async def fetch_active_rosters(pool: asyncpg.Pool) -> Sequence[Dict[str, Any]]:
    q = "SELECT state FROM roster WHERE is_active=TRUE ORDER BY created_at"
    async with pool.acquire() as conn:
        rows = await conn.fetch(q)
    return [rec for rec in (_decode(r) for r in rows) if rec is not None]


__all__ = [
    "ensure_roster_schema", "fetch_roster", "insert_roster", "update_roster", "fetch_active_rosters",
]
