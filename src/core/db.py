"""
Abstraction pour PostgreSQL via asyncpg.

Principes :
- Le pool est créé par le bot et injecté (pas de pool global au module)
- Les requêtes vivent dans `db/*.py` (fonctions atomiques, pas d'ORM)
"""
from __future__ import annotations

import asyncpg
import logging

logger = logging.getLogger(__name__)


async def create_pool(dsn: str, *, min_size: int = 1, max_size: int = 5) -> asyncpg.Pool:
    """
    Crée le pool asyncpg.
    Args :
        dsn : URL de connexion Postgres
    """
    pool = await asyncpg.create_pool(dsn, min_size=min_size, max_size=max_size)
    logger.info("Pool asyncpg initialisé (%s-%s connexions)", min_size, max_size)
    return pool


async def close_pool(pool: asyncpg.Pool | None) -> None:
    if pool is None:
        return
    await pool.close()
    logger.info("Pool asyncpg fermé")


__all__ = ["create_pool", "close_pool"]
