"""
Handlers d'événements Discord liés aux rosters.

Un message d'événement supprimé met fin à son roster (intention Expire) : le
timer d'expiration est annulé et plus aucun clic ne peut le modifier.
"""
from __future__ import annotations

import logging
import discord

from core.roster.errors import RosterError, RosterNotFound
from core.roster.models import Expire

logger = logging.getLogger(__name__)


async def expire_deleted(dispatcher, message_id: int) -> bool:
    """Expire le roster porté par `message_id`. Renvoie True si un roster a été fermé."""
    try:
        roster = await dispatcher.get(message_id)
    except RosterNotFound:
        return False
    if not roster.is_active:
        return False
    applied = await dispatcher.submit(message_id, Expire())
    if applied.outcome.changed:
        logger.info("Message %s supprimé -> roster expiré", message_id)
    return applied.outcome.changed


def setup(bot: discord.Client):
    @bot.event
    async def on_raw_message_delete(payload: discord.RawMessageDeleteEvent):
        dispatcher = getattr(bot, "rosters", None)
        if dispatcher is None:
            return
        try:
            await expire_deleted(dispatcher, payload.message_id)
        except RosterError:
            logger.exception("Echec expiration du roster %s (message supprimé)", payload.message_id)
