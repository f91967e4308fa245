"""Roster core package (sièges et dungeon runs).

Les imports sont lazy : le moteur pur (models, engine) reste importable sans
charger asyncpg (requis uniquement par le store PostgreSQL).
"""
from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # aide mypy/IDE sans exécuter les imports au runtime initial
	from .dispatcher import Applied, RosterDispatcher  # noqa: F401
	from .expiry import ExpiryTimer  # noqa: F401
	from .store import MemoryRosterStore, PgRosterStore, RosterStore  # noqa: F401

_LAZY = {
	"RosterDispatcher": "core.roster.dispatcher",
	"Applied": "core.roster.dispatcher",
	"ExpiryTimer": "core.roster.expiry",
	"RosterStore": "core.roster.store",
	"MemoryRosterStore": "core.roster.store",
	"PgRosterStore": "core.roster.store",
}

__all__ = list(_LAZY)


def __getattr__(name: str):  # lazy resolution
	target = _LAZY.get(name)
	if target is None:
		raise AttributeError(name)
	return getattr(import_module(target), name)
