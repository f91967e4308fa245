"""
Identifiants de composants Discord (custom_id) des rosters et leur traduction en intentions.

Format : `<type>:<action>[:<argument>]`
- siège   : siege:attend:yes|no, siege:job:<rôle>, siege:close
- dungeon : dungeon:join, dungeon:job:<rôle>, dungeon:itemdrop, dungeon:manage, dungeon:close
- éphémères : dungeon:kick:<message_id> (select d'exclusion), dungeon:drop:<message_id> (modal de loot)

Module pur (aucun appel Discord) : l'id du roster est celui du message portant les boutons.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from core.roster.errors import InvalidIntent
from core.roster.models import (
    Close,
    Intent,
    JobClass,
    RosterKind,
    SelectRole,
    SetAttendance,
    ToggleJoin,
)

_PREFIX = {RosterKind.SIEGE: "siege", RosterKind.DUNGEON_RUN: "dungeon"}
_KIND_BY_PREFIX = {v: k for k, v in _PREFIX.items()}

# Actions qui ouvrent une UI (modal, select) au lieu de produire une intention
OPENS_DROP_MODAL = "itemdrop"
OPENS_KICK_MENU = "manage"

SIEGE_ATTEND_YES = "siege:attend:yes"
SIEGE_ATTEND_NO = "siege:attend:no"
SIEGE_CLOSE = "siege:close"
DUNGEON_JOIN = "dungeon:join"
DUNGEON_ITEMDROP = "dungeon:itemdrop"
DUNGEON_MANAGE = "dungeon:manage"
DUNGEON_CLOSE = "dungeon:close"

_ACTIONS = {
    RosterKind.SIEGE: {"attend", "job", "close"},
    RosterKind.DUNGEON_RUN: {"join", "job", "close", OPENS_DROP_MODAL, OPENS_KICK_MENU},
}


@dataclass(frozen=True)
class ComponentAction:
    kind: RosterKind
    action: str
    arg: Optional[str] = None

    @property
    def opens_ui(self) -> bool:
        return self.action in (OPENS_DROP_MODAL, OPENS_KICK_MENU)


def job_id(kind: RosterKind, role: JobClass) -> str:
    return f"{_PREFIX[kind]}:job:{role.slug}"


def kick_select_id(roster_id: int) -> str:
    return f"dungeon:kick:{roster_id}"


def drop_modal_id(roster_id: int) -> str:
    return f"dungeon:drop:{roster_id}"


def parse_custom_id(custom_id: str) -> ComponentAction:
    """Découpe un custom_id de bouton de roster. Lève InvalidIntent si inconnu."""
    parts = (custom_id or "").split(":")
    kind = _KIND_BY_PREFIX.get(parts[0])
    if kind is None or len(parts) not in (2, 3) or parts[1] not in _ACTIONS[kind]:
        raise InvalidIntent(f"Composant inconnu: {custom_id!r}")
    action = parts[1]
    arg = parts[2] if len(parts) == 3 else None
    needs_arg = action in ("attend", "job")
    if needs_arg != (arg is not None):
        raise InvalidIntent(f"Composant mal formé: {custom_id!r}")
    if action == "attend" and arg not in ("yes", "no"):
        raise InvalidIntent(f"Composant mal formé: {custom_id!r}")
    return ComponentAction(kind, action, arg)


def intent_for_action(action: ComponentAction, user_id: int) -> Intent:
    if action.action == "attend":
        return SetAttendance(user_id, action.arg == "yes")
    if action.action == "job":
        return SelectRole(user_id, JobClass.parse(action.arg or ""))
    if action.action == "join":
        return ToggleJoin(user_id)
    if action.action == "close":
        return Close(user_id)
    raise InvalidIntent(f"Le composant {action.action!r} ouvre une interface, pas une intention")


def _roster_id_from(custom_id: str, prefix: str) -> int:
    if not (custom_id or "").startswith(prefix):
        raise InvalidIntent(f"Composant inconnu: {custom_id!r}")
    raw = custom_id[len(prefix):]
    if not raw.isdigit():
        raise InvalidIntent(f"Composant mal formé: {custom_id!r}")
    return int(raw)


def parse_kick_select_id(custom_id: str) -> int:
    return _roster_id_from(custom_id, "dungeon:kick:")


def parse_drop_modal_id(custom_id: str) -> int:
    return _roster_id_from(custom_id, "dungeon:drop:")


__all__ = [
    "ComponentAction", "SIEGE_ATTEND_YES", "SIEGE_ATTEND_NO", "SIEGE_CLOSE", "DUNGEON_JOIN",
    "DUNGEON_ITEMDROP", "DUNGEON_MANAGE", "DUNGEON_CLOSE", "job_id", "kick_select_id", "drop_modal_id",
    "parse_custom_id", "intent_for_action", "parse_kick_select_id",
    "parse_drop_modal_id",
]
