"""
Modèle de données des rosters (siège / dungeon run).

Un roster est une valeur immuable : le moteur (`core.roster.engine`) ne la modifie
jamais en place, il renvoie une nouvelle instance via `dataclasses.replace`.

Contenu :
- `JobClass` : énumération fermée des rôles (classes de personnage)
- `SiegeRoster` / `DungeonRoster` : état autoritatif d'un événement
- Intents : transitions demandées par un déclencheur externe (bouton, timer…)
- `Outcome` : descripteur du résultat renvoyé au Presentation Adapter
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import ClassVar, Dict, Mapping, Optional, Tuple, Union

from .errors import UnknownRole


class JobClass(str, enum.Enum):
    """Classes jouables ; l'ordre de déclaration est l'ordre d'affichage."""

    BLADE = "Blade"
    KNIGHT = "Knight"
    RANGER = "Ranger"
    JESTER = "Jester"
    PSYKEEPER = "Psykeeper"
    ELEMENTOR = "Elementor"
    BILLPOSTER = "Billposter"
    RINGMASTER = "Ringmaster"

    @classmethod
    def parse(cls, raw: str) -> "JobClass":
        """Résout un nom libre (`blade`, `Blade`, ` BLADE `) en JobClass.

        Lève `UnknownRole` si le nom ne correspond à aucune classe.
        """
        key = (raw or "").strip().lower()
        for job in cls:
            if job.value.lower() == key:
                return job
        raise UnknownRole(raw)

    @property
    def slug(self) -> str:
        return self.value.lower()


class RosterKind(str, enum.Enum):
    SIEGE = "siege"
    DUNGEON_RUN = "dungeon_run"


# Rôles autorisés par type de roster (validés à la frontière du Dispatcher)
ROLES_BY_KIND: Dict[RosterKind, Tuple[JobClass, ...]] = {
    RosterKind.SIEGE: tuple(JobClass),
    RosterKind.DUNGEON_RUN: tuple(JobClass),
}


@dataclass(frozen=True)
class DropRecord:
    """Entrée du journal de loot d'un dungeon run (append-only)."""

    recorded_at: datetime
    author_id: int
    text: str

    def render(self) -> str:
        return f"[{self.recorded_at:%Y-%m-%d %H:%M}] {self.text}"


@dataclass(frozen=True)
class Roster:
    """En-tête commun à tous les rosters.

    id : identifiant externe stable (id du message Discord publié)
    version : compteur de compare-and-store, incrémenté à chaque sauvegarde
    """

    kind: ClassVar[RosterKind]

    id: int
    creator_id: int
    channel_id: Optional[int] = None
    title: str = ""
    starts_at: Optional[int] = None
    ends_at: Optional[int] = None
    is_active: bool = True
    version: int = 0


@dataclass(frozen=True)
class SiegeRoster(Roster):
    kind: ClassVar[RosterKind] = RosterKind.SIEGE

    tier: Optional[str] = None
    capacity: Mapping[JobClass, int] = field(default_factory=dict)
    attending: Tuple[int, ...] = ()
    declined: Tuple[int, ...] = ()
    principals: Mapping[JobClass, Tuple[int, ...]] = field(default_factory=dict)
    waitlist: Mapping[JobClass, Tuple[int, ...]] = field(default_factory=dict)

    def slots(self, role: JobClass) -> int:
        return self.capacity.get(role, 0)

    def principals_of(self, role: JobClass) -> Tuple[int, ...]:
        return self.principals.get(role, ())

    def waitlist_of(self, role: JobClass) -> Tuple[int, ...]:
        return self.waitlist.get(role, ())

    def principal_role(self, user_id: int) -> Optional[JobClass]:
        for role, users in self.principals.items():
            if user_id in users:
                return role
        return None

    def waitlisted_role(self, user_id: int) -> Optional[JobClass]:
        for role, users in self.waitlist.items():
            if user_id in users:
                return role
        return None


@dataclass(frozen=True)
class DungeonRoster(Roster):
    kind: ClassVar[RosterKind] = RosterKind.DUNGEON_RUN

    capacity: int = 8
    notes: str = ""
    participants: Tuple[int, ...] = ()
    role_of: Mapping[JobClass, Tuple[int, ...]] = field(default_factory=dict)
    drops: Tuple[DropRecord, ...] = ()

    @property
    def is_full(self) -> bool:
        return len(self.participants) >= self.capacity

    def tagged_role(self, user_id: int) -> Optional[JobClass]:
        for role, users in self.role_of.items():
            if user_id in users:
                return role
        return None


AnyRoster = Union[SiegeRoster, DungeonRoster]


def new_siege(
    roster_id: int,
    creator_id: int,
    capacity: Mapping[JobClass, int],
    *,
    channel_id: Optional[int] = None,
    title: str = "",
    tier: Optional[str] = None,
    starts_at: Optional[int] = None,
    ends_at: Optional[int] = None,
) -> SiegeRoster:
    return SiegeRoster(
        id=roster_id,
        creator_id=creator_id,
        channel_id=channel_id,
        title=title,
        starts_at=starts_at,
        ends_at=ends_at,
        tier=tier,
        capacity=dict(capacity),
    )


def new_dungeon_run(
    roster_id: int,
    creator_id: int,
    capacity: int,
    *,
    channel_id: Optional[int] = None,
    title: str = "",
    notes: str = "",
    starts_at: Optional[int] = None,
    ends_at: Optional[int] = None,
) -> DungeonRoster:
    if capacity < 1:
        raise ValueError("La taille du groupe doit être positive")
    return DungeonRoster(
        id=roster_id,
        creator_id=creator_id,
        channel_id=channel_id,
        title=title,
        starts_at=starts_at,
        ends_at=ends_at,
        capacity=capacity,
        notes=notes,
    )


# ---------- intents ----------

@dataclass(frozen=True)
class SetAttendance:
    user_id: int
    attending: bool


@dataclass(frozen=True)
class SelectRole:
    user_id: int
    role: JobClass


@dataclass(frozen=True)
class Join:
    user_id: int


@dataclass(frozen=True)
class Leave:
    user_id: int


@dataclass(frozen=True)
class ToggleJoin:
    """Bouton « Join » : rejoint si absent, quitte si déjà membre."""

    user_id: int


@dataclass(frozen=True)
class RecordDrop:
    user_id: int
    text: str
    recorded_at: datetime


@dataclass(frozen=True)
class Kick:
    user_id: int
    target_id: int


@dataclass(frozen=True)
class Close:
    user_id: int


@dataclass(frozen=True)
class Expire:
    """Fin programmée de l'événement (acteur système, pas de contrôle créateur)."""


Intent = Union[SetAttendance, SelectRole, Join, Leave, ToggleJoin, RecordDrop, Kick, Close, Expire]


# ---------- outcomes ----------

class OutcomeKind(str, enum.Enum):
    ADDED = "added"
    REMOVED = "removed"
    MOVED_TO_WAITLIST = "moved_to_waitlist"
    ATTENDING = "attending"
    DECLINED = "declined"
    JOINED = "joined"
    LEFT = "left"
    DROP_RECORDED = "drop_recorded"
    KICKED = "kicked"
    CLOSED = "closed"
    EXPIRED = "expired"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class Promotion:
    role: JobClass
    user_id: int


@dataclass(frozen=True)
class Outcome:
    kind: OutcomeKind
    role: Optional[JobClass] = None
    previous_role: Optional[JobClass] = None
    promoted: Tuple[Promotion, ...] = ()
    target_id: Optional[int] = None

    @property
    def changed(self) -> bool:
        return self.kind is not OutcomeKind.UNCHANGED


UNCHANGED = Outcome(OutcomeKind.UNCHANGED)


__all__ = [
    "JobClass", "RosterKind", "ROLES_BY_KIND", "DropRecord", "Roster", "SiegeRoster", "DungeonRoster",
    "AnyRoster", "new_siege", "new_dungeon_run", "SetAttendance", "SelectRole", "Join", "Leave",
    "ToggleJoin", "RecordDrop", "Kick", "Close", "Expire", "Intent", "OutcomeKind", "Promotion",
    "Outcome", "UNCHANGED",
]
