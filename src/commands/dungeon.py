"""
Commande slash `/dungeon-run` : publie un groupe de donjon (8 ou 24 joueurs).
"""
from __future__ import annotations

import logging
from typing import Optional

import discord
from discord import app_commands

from commands._schedule import TIMEZONE_CHOICES, ScheduleError, event_window, parse_event_timestamp
from commands.rosters import ensure_roster_runtime
from core import config
from core.roster.models import new_dungeon_run

logger = logging.getLogger(__name__)

PARTY_SIZE_CHOICES = [app_commands.Choice(name=f"{n} joueurs", value=n) for n in config.DUNGEON_PARTY_SIZES]


@app_commands.command(name="dungeon-run", description="Créer un dungeon run")
@app_commands.describe(
    dungeon="Nom du donjon",
    date="Date du run (ex: 2024-01-15)",
    time="Heure du run (ex: 20:00)",
    party_size="Taille du groupe (8 par défaut)",
    timezone="Fuseau horaire (Bangkok par défaut)",
    notes="Notes affichées sous l'événement",
)
@app_commands.rename(party_size="party-size")
@app_commands.choices(party_size=PARTY_SIZE_CHOICES, timezone=TIMEZONE_CHOICES)
async def dungeon_run(
    interaction: discord.Interaction,
    dungeon: str,
    date: str,
    time: str,
    party_size: Optional[int] = None,
    timezone: Optional[str] = None,
    notes: Optional[str] = None,
):
    try:
        starts_at, ends_at = event_window(parse_event_timestamp(date, time, timezone))
    except ScheduleError as exc:
        await interaction.response.send_message(str(exc), ephemeral=True)
        return
    size = party_size or config.DUNGEON_DEFAULT_PARTY_SIZE
    logger.info("/dungeon-run par %s (%s, %s joueurs)", interaction.user.id, dungeon, size)
    draft = new_dungeon_run(
        0,
        interaction.user.id,
        size,
        title=f"🏰 Dungeon Run - {dungeon.strip()[:200]}",
        notes=(notes or "").strip(),
        starts_at=starts_at,
        ends_at=ends_at,
    )
    await ensure_roster_runtime(interaction.client).publish(interaction, draft)


def register(bot: discord.Client):
    bot.tree.add_command(dungeon_run)


__all__ = ["register"]
