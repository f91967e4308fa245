"""
Moteur de roster, variante dungeon run : capacité plate sur `participants`.

Les rôles ne sont qu'une étiquette informative (au plus une par membre), le
journal de loot est en ajout seul.
"""
from __future__ import annotations

from dataclasses import replace
from typing import Dict, Tuple

from .errors import InvalidIntent, NotParticipant, RosterFull, SelfKick, Unauthorized
from .models import (
    UNCHANGED,
    DropRecord,
    DungeonRoster,
    JobClass,
    Join,
    Kick,
    Leave,
    Outcome,
    OutcomeKind,
    RecordDrop,
    SelectRole,
    ToggleJoin,
)


def _untag(role_of, user_id: int) -> Dict[JobClass, Tuple[int, ...]]:
    out: Dict[JobClass, Tuple[int, ...]] = {}
    for role, users in role_of.items():
        kept = tuple(u for u in users if u != user_id)
        if kept:
            out[role] = kept
    return out


def _remove_member(roster: DungeonRoster, user_id: int) -> DungeonRoster:
    return replace(
        roster,
        participants=tuple(u for u in roster.participants if u != user_id),
        role_of=_untag(roster.role_of, user_id),
    )


def join(roster: DungeonRoster, intent: Join) -> Tuple[DungeonRoster, Outcome]:
    if intent.user_id in roster.participants:
        return roster, UNCHANGED
    if roster.is_full:
        raise RosterFull(roster.capacity)
    return replace(roster, participants=roster.participants + (intent.user_id,)), Outcome(OutcomeKind.JOINED)


def leave(roster: DungeonRoster, intent: Leave) -> Tuple[DungeonRoster, Outcome]:
    if intent.user_id not in roster.participants and roster.tagged_role(intent.user_id) is None:
        return roster, UNCHANGED
    previous = roster.tagged_role(intent.user_id)
    return _remove_member(roster, intent.user_id), Outcome(OutcomeKind.LEFT, previous_role=previous)


def toggle_join(roster: DungeonRoster, intent: ToggleJoin) -> Tuple[DungeonRoster, Outcome]:
    if intent.user_id in roster.participants:
        return leave(roster, Leave(intent.user_id))
    return join(roster, Join(intent.user_id))


def select_role(roster: DungeonRoster, intent: SelectRole) -> Tuple[DungeonRoster, Outcome]:
    uid, role = intent.user_id, intent.role
    current = roster.tagged_role(uid)
    if current is role:
        return replace(roster, role_of=_untag(roster.role_of, uid)), Outcome(OutcomeKind.REMOVED, role=role)

    # Rejoint automatiquement ; RosterFull annule tout le changement de rôle
    joined, _ = join(roster, Join(uid))
    role_of = _untag(joined.role_of, uid)
    role_of[role] = role_of.get(role, ()) + (uid,)
    return replace(joined, role_of=role_of), Outcome(OutcomeKind.ADDED, role=role, previous_role=current)


def record_drop(roster: DungeonRoster, intent: RecordDrop) -> Tuple[DungeonRoster, Outcome]:
    if intent.user_id not in roster.participants:
        raise NotParticipant(intent.user_id)
    text = (intent.text or "").strip()
    if not text:
        raise InvalidIntent("Description du loot vide")
    record = DropRecord(recorded_at=intent.recorded_at, author_id=intent.user_id, text=text)
    return replace(roster, drops=roster.drops + (record,)), Outcome(OutcomeKind.DROP_RECORDED)


def kick(roster: DungeonRoster, intent: Kick) -> Tuple[DungeonRoster, Outcome]:
    if intent.user_id != roster.creator_id:
        raise Unauthorized(intent.user_id, "kick")
    if intent.target_id == roster.creator_id:
        raise SelfKick()
    if intent.target_id not in roster.participants:
        return roster, UNCHANGED
    previous = roster.tagged_role(intent.target_id)
    return _remove_member(roster, intent.target_id), Outcome(
        OutcomeKind.KICKED, previous_role=previous, target_id=intent.target_id
    )


_HANDLERS = {
    Join: join,
    Leave: leave,
    ToggleJoin: toggle_join,
    SelectRole: select_role,
    RecordDrop: record_drop,
    Kick: kick,
}


def apply(roster: DungeonRoster, intent) -> Tuple[DungeonRoster, Outcome]:
    handler = _HANDLERS.get(type(intent))
    if handler is None:
        raise InvalidIntent(f"{type(intent).__name__} non supporté pour un dungeon run")
    return handler(roster, intent)


__all__ = ["apply", "join", "leave", "toggle_join", "select_role", "record_drop", "kick"]
