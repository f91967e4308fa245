"""
Point d'entrée du moteur : `apply(roster, intent) -> (nouveau_roster, outcome)`.

Logique pure et synchrone (aucune I/O) :
- gère Close / Expire communs aux deux types de roster,
- refuse toute autre intention sur un roster inactif,
- délègue au module de la variante (`siege`, `dungeon`).
"""
from __future__ import annotations

from dataclasses import replace
from typing import Tuple

from . import dungeon, siege
from .errors import InvalidIntent, RosterInactive, Unauthorized
from .models import (
    ROLES_BY_KIND,
    UNCHANGED,
    AnyRoster,
    Close,
    DungeonRoster,
    Expire,
    Intent,
    Outcome,
    OutcomeKind,
    SelectRole,
    SiegeRoster,
)


def _close(roster: AnyRoster, intent: Close) -> Tuple[AnyRoster, Outcome]:
    if intent.user_id != roster.creator_id:
        raise Unauthorized(intent.user_id, "close")
    if not roster.is_active:
        return roster, UNCHANGED
    return replace(roster, is_active=False), Outcome(OutcomeKind.CLOSED)


def _expire(roster: AnyRoster) -> Tuple[AnyRoster, Outcome]:
    if not roster.is_active:
        return roster, UNCHANGED
    return replace(roster, is_active=False), Outcome(OutcomeKind.EXPIRED)


def apply(roster: AnyRoster, intent: Intent) -> Tuple[AnyRoster, Outcome]:
    if isinstance(intent, Close):
        return _close(roster, intent)
    if isinstance(intent, Expire):
        return _expire(roster)
    if not roster.is_active:
        raise RosterInactive(roster.id)
    if isinstance(intent, SelectRole) and intent.role not in ROLES_BY_KIND[roster.kind]:
        raise InvalidIntent(f"Rôle {intent.role} indisponible pour {roster.kind.value}")
    if isinstance(roster, SiegeRoster):
        return siege.apply(roster, intent)
    if isinstance(roster, DungeonRoster):
        return dungeon.apply(roster, intent)
    raise InvalidIntent(f"Type de roster inconnu: {type(roster).__name__}")


__all__ = ["apply"]
