"""
Commande slash `/create-siege` : publie un siège de guilde avec inscriptions par classe.
"""
from __future__ import annotations

import logging
from typing import Optional

import discord
from discord import app_commands

from commands._schedule import TIMEZONE_CHOICES, ScheduleError, event_window, parse_event_timestamp
from commands.rosters import ensure_roster_runtime
from core import config
from core.roster.models import new_siege

logger = logging.getLogger(__name__)


def siege_title(tier: Optional[str]) -> str:
    tier = (tier or "").strip()
    return f"⚔️ Siège de guilde - {tier}" if tier else "⚔️ Siège de guilde"


@app_commands.command(name="create-siege", description="Créer un événement de siège")
@app_commands.describe(
    date="Date du siège (ex: 2024-01-15)",
    time="Heure du siège (ex: 20:00)",
    timezone="Fuseau horaire (Bangkok par défaut)",
    siege_tier="Palier du siège (optionnel, ex: 60, 80)",
)
@app_commands.rename(siege_tier="siege-tier")
@app_commands.choices(timezone=TIMEZONE_CHOICES)
async def create_siege(
    interaction: discord.Interaction,
    date: str,
    time: str,
    timezone: Optional[str] = None,
    siege_tier: Optional[str] = None,
):
    try:
        starts_at, ends_at = event_window(parse_event_timestamp(date, time, timezone))
    except ScheduleError as exc:
        await interaction.response.send_message(str(exc), ephemeral=True)
        return
    logger.info("/create-siege par %s (%s %s %s)", interaction.user.id, date, time, timezone or config.DEFAULT_TIMEZONE)
    draft = new_siege(
        0,
        interaction.user.id,
        config.SIEGE_CAPACITY,
        title=siege_title(siege_tier),
        tier=(siege_tier or "").strip() or None,
        starts_at=starts_at,
        ends_at=ends_at,
    )
    await ensure_roster_runtime(interaction.client).publish(interaction, draft)


def register(bot: discord.Client):
    bot.tree.add_command(create_siege)


__all__ = ["register"]
