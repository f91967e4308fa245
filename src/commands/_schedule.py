"""
Conversion date/heure saisies dans une commande -> timestamp epoch (UTC).

Les fuseaux proposés sont des décalages fixes (pas d'heure d'été), voir
`core.config.TIMEZONE_OFFSETS`.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone as dt_timezone
from typing import Mapping, Optional, Tuple

from discord import app_commands

from core import config

TIMEZONE_CHOICES = [
    app_commands.Choice(name=f"{name.split('/')[-1]} (GMT+{offset})", value=name)
    for name, offset in config.TIMEZONE_OFFSETS.items()
]


class ScheduleError(ValueError):
    """Date, heure ou fuseau invalide (message affichable tel quel)."""


def parse_event_timestamp(
    date: str,
    time: str,
    timezone: Optional[str] = None,
    offsets: Mapping[str, int] = config.TIMEZONE_OFFSETS,
) -> int:
    """`2024-01-15` + `20:00` en Asia/Bangkok -> 1705323600."""
    tz_name = timezone or config.DEFAULT_TIMEZONE
    if tz_name not in offsets:
        raise ScheduleError(f"Fuseau inconnu: {tz_name}")
    try:
        local = datetime.strptime(f"{(date or '').strip()} {(time or '').strip()}", "%Y-%m-%d %H:%M")
    except ValueError:
        raise ScheduleError("Format attendu : date YYYY-MM-DD et heure HH:MM") from None
    aware = local.replace(tzinfo=dt_timezone(timedelta(hours=offsets[tz_name])))
    return int(aware.timestamp())


def event_window(starts_at: int, duration_hours: int = config.EVENT_DURATION_HOURS) -> Tuple[int, int]:
    return starts_at, starts_at + duration_hours * 3600
