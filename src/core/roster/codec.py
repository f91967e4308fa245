"""
Conversion Roster <-> dict compatible JSON (colonne JSONB / store mémoire).

Les clés de rôles sont sérialisées par leur valeur (`"Blade"`), les horodatages
de loot en ISO 8601.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Mapping, Tuple

from .errors import StoreError, UnknownRole
from .models import AnyRoster, DropRecord, DungeonRoster, JobClass, RosterKind, SiegeRoster


def _roles_out(table: Mapping[JobClass, Tuple[int, ...]]) -> Dict[str, list]:
    return {role.value: list(users) for role, users in table.items() if users}


def _roles_in(raw: Mapping[str, Any] | None) -> Dict[JobClass, Tuple[int, ...]]:
    out: Dict[JobClass, Tuple[int, ...]] = {}
    for name, users in (raw or {}).items():
        if users:
            out[JobClass.parse(name)] = tuple(int(u) for u in users)
    return out


def roster_to_record(roster: AnyRoster) -> Dict[str, Any]:
    rec: Dict[str, Any] = {
        "kind": roster.kind.value,
        "id": roster.id,
        "creator_id": roster.creator_id,
        "channel_id": roster.channel_id,
        "title": roster.title,
        "starts_at": roster.starts_at,
        "ends_at": roster.ends_at,
        "is_active": roster.is_active,
        "version": roster.version,
    }
    if isinstance(roster, SiegeRoster):
        rec.update(
            tier=roster.tier,
            capacity={role.value: n for role, n in roster.capacity.items()},
            attending=list(roster.attending),
            declined=list(roster.declined),
            principals=_roles_out(roster.principals),
            waitlist=_roles_out(roster.waitlist),
        )
    else:
        rec.update(
            capacity=roster.capacity,
            notes=roster.notes,
            participants=list(roster.participants),
            role_of=_roles_out(roster.role_of),
            drops=[
                {"recorded_at": d.recorded_at.isoformat(), "author_id": d.author_id, "text": d.text}
                for d in roster.drops
            ],
        )
    return rec


def roster_from_record(rec: Mapping[str, Any]) -> AnyRoster:
    try:
        kind = RosterKind(rec["kind"])
        header = dict(
            id=int(rec["id"]),
            creator_id=int(rec["creator_id"]),
            channel_id=rec.get("channel_id"),
            title=rec.get("title") or "",
            starts_at=rec.get("starts_at"),
            ends_at=rec.get("ends_at"),
            is_active=bool(rec.get("is_active", True)),
            version=int(rec.get("version", 0)),
        )
        if kind is RosterKind.SIEGE:
            return SiegeRoster(
                **header,
                tier=rec.get("tier"),
                capacity={JobClass.parse(k): int(v) for k, v in (rec.get("capacity") or {}).items()},
                attending=tuple(int(u) for u in rec.get("attending") or ()),
                declined=tuple(int(u) for u in rec.get("declined") or ()),
                principals=_roles_in(rec.get("principals")),
                waitlist=_roles_in(rec.get("waitlist")),
            )
        return DungeonRoster(
            **header,
            capacity=int(rec.get("capacity", 8)),
            notes=rec.get("notes") or "",
            participants=tuple(int(u) for u in rec.get("participants") or ()),
            role_of=_roles_in(rec.get("role_of")),
            drops=tuple(
                DropRecord(
                    recorded_at=datetime.fromisoformat(d["recorded_at"]),
                    author_id=int(d["author_id"]),
                    text=str(d["text"]),
                )
                for d in rec.get("drops") or ()
            ),
        )
    except (KeyError, TypeError, ValueError, UnknownRole) as exc:
        raise StoreError(f"Enregistrement de roster illisible: {exc}") from exc


__all__ = ["roster_to_record", "roster_from_record"]
