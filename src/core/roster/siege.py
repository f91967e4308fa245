"""
Moteur de roster, variante siège : slots bornés par rôle + liste d'attente FIFO.

Règles :
- Un utilisateur est principal quelque part XOR en attente quelque part XOR nulle part.
- Toute sortie d'un slot principal déclenche la promotion de la tête de la liste
  d'attente du même rôle avant de rendre la main (aucun slot vide « silencieux »).
- Réclamer un rôle vaut déclaration de présence (attending), se déclarer absent
  libère tout slot occupé.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, List, Optional, Tuple

from .errors import InvalidIntent
from .models import (
    UNCHANGED,
    JobClass,
    Outcome,
    OutcomeKind,
    Promotion,
    SelectRole,
    SetAttendance,
    SiegeRoster,
)

logger = logging.getLogger(__name__)


def _without(seq: Tuple[int, ...], user_id: int) -> Tuple[int, ...]:
    return tuple(u for u in seq if u != user_id)


def _with(seq: Tuple[int, ...], user_id: int) -> Tuple[int, ...]:
    return seq if user_id in seq else seq + (user_id,)


class _Slots:
    """Copie de travail des principaux / listes d'attente pendant une application."""

    def __init__(self, roster: SiegeRoster):
        self.roster = roster
        self.principals: Dict[JobClass, Tuple[int, ...]] = dict(roster.principals)
        self.waitlist: Dict[JobClass, Tuple[int, ...]] = dict(roster.waitlist)
        self.promoted: List[Promotion] = []

    def _set(self, table: Dict[JobClass, Tuple[int, ...]], role: JobClass, users: Tuple[int, ...]) -> None:
        if users:
            table[role] = users
        else:
            table.pop(role, None)

    def remove_principal(self, role: JobClass, user_id: int) -> None:
        self._set(self.principals, role, _without(self.principals.get(role, ()), user_id))
        self._promote(role)

    def remove_waitlisted(self, role: JobClass, user_id: int) -> None:
        self._set(self.waitlist, role, _without(self.waitlist.get(role, ()), user_id))

    def _promote(self, role: JobClass) -> None:
        queue = self.waitlist.get(role, ())
        current = self.principals.get(role, ())
        if not queue or len(current) >= self.roster.slots(role):
            return
        head = queue[0]
        self._set(self.waitlist, role, queue[1:])
        self._set(self.principals, role, current + (head,))
        self.promoted.append(Promotion(role, head))
        logger.debug("Roster %s: promotion de %s en %s", self.roster.id, head, role.value)

    def vacate(self, user_id: int) -> Optional[JobClass]:
        """Retire l'utilisateur de tout slot (principal ou attente). Renvoie le rôle quitté."""
        for role, users in list(self.principals.items()):
            if user_id in users:
                self.remove_principal(role, user_id)
                return role
        for role, users in list(self.waitlist.items()):
            if user_id in users:
                self.remove_waitlisted(role, user_id)
                return role
        return None

    def claim(self, role: JobClass, user_id: int) -> OutcomeKind:
        current = self.principals.get(role, ())
        if len(current) < self.roster.slots(role):
            self._set(self.principals, role, current + (user_id,))
            return OutcomeKind.ADDED
        self._set(self.waitlist, role, self.waitlist.get(role, ()) + (user_id,))
        return OutcomeKind.MOVED_TO_WAITLIST

    def build(self, **changes) -> SiegeRoster:
        return replace(self.roster, principals=self.principals, waitlist=self.waitlist, **changes)


def set_attendance(roster: SiegeRoster, intent: SetAttendance) -> Tuple[SiegeRoster, Outcome]:
    uid = intent.user_id
    if intent.attending:
        if uid in roster.attending and uid not in roster.declined:
            return roster, UNCHANGED
        new = replace(
            roster,
            attending=_with(roster.attending, uid),
            declined=_without(roster.declined, uid),
        )
        return new, Outcome(OutcomeKind.ATTENDING)

    slots = _Slots(roster)
    vacated = slots.vacate(uid)
    if vacated is None and uid in roster.declined and uid not in roster.attending:
        return roster, UNCHANGED
    new = slots.build(
        attending=_without(roster.attending, uid),
        declined=_with(roster.declined, uid),
    )
    return new, Outcome(OutcomeKind.DECLINED, previous_role=vacated, promoted=tuple(slots.promoted))


def select_role(roster: SiegeRoster, intent: SelectRole) -> Tuple[SiegeRoster, Outcome]:
    uid, role = intent.user_id, intent.role
    slots = _Slots(roster)

    # Clic sur son propre rôle : on se retire (avec promotion si slot principal)
    if uid in roster.principals_of(role):
        slots.remove_principal(role, uid)
        return slots.build(), Outcome(OutcomeKind.REMOVED, role=role, promoted=tuple(slots.promoted))
    if uid in roster.waitlist_of(role):
        slots.remove_waitlisted(role, uid)
        return slots.build(), Outcome(OutcomeKind.REMOVED, role=role)

    previous = slots.vacate(uid)
    kind = slots.claim(role, uid)
    new = slots.build(
        attending=_with(roster.attending, uid),
        declined=_without(roster.declined, uid),
    )
    return new, Outcome(kind, role=role, previous_role=previous, promoted=tuple(slots.promoted))


def apply(roster: SiegeRoster, intent) -> Tuple[SiegeRoster, Outcome]:
    if isinstance(intent, SetAttendance):
        return set_attendance(roster, intent)
    if isinstance(intent, SelectRole):
        return select_role(roster, intent)
    raise InvalidIntent(f"{type(intent).__name__} non supporté pour un siège")


__all__ = ["apply", "set_attendance", "select_role"]
