"""
Configuration centrale du bot Discord.

Ce module charge les variables d'environnement (.env) et prépare :
- Les intents Discord (guilds, messages ; pas d'intent privilégié requis)
- Le token du bot (BOT_TOKEN, obligatoire)
- L'URL de la base de données (DATABASE_URL, optionnelle : sans elle les rosters restent en mémoire)
- Les paramètres des rosters (slots de siège, tailles de groupe, durée, fuseau par défaut)

Une valeur mal formée est ignorée avec un warning et remplacée par sa valeur par défaut.
"""
from __future__ import annotations

import os
import logging
from typing import Dict
from dotenv import load_dotenv
import discord

from core.roster.errors import UnknownRole
from core.roster.models import JobClass

load_dotenv()

logger = logging.getLogger(__name__)

INTENTS = discord.Intents.default()

BOT_TOKEN = os.getenv("BOT_TOKEN")
DATABASE_URL = os.getenv("DATABASE_URL")


def _env_int(name: str, default: int, minimum: int = 1) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("%s invalide (%r), valeur par défaut %s", name, raw, default)
        return default
    if value < minimum:
        logger.warning("%s doit être >= %s (%r), valeur par défaut %s", name, minimum, raw, default)
        return default
    return value


def parse_siege_slots(raw: str | None, per_role: int) -> Dict[JobClass, int]:
    """Construit la capacité par rôle d'un siège.

    `raw` est une liste `Rôle=N` séparée par des virgules (ex: "Blade=3,Knight=2") ;
    les rôles non mentionnés prennent `per_role`. Les entrées invalides sont ignorées.
    """
    capacity = {job: per_role for job in JobClass}
    for part in (raw or "").split(","):
        part = part.strip()
        if not part:
            continue
        name, sep, count = part.partition("=")
        try:
            if not sep:
                raise ValueError(part)
            role = JobClass.parse(name)
            slots = int(count)
            if slots < 0:
                raise ValueError(count)
        except (UnknownRole, ValueError):
            logger.warning("SIEGE_SLOTS: entrée ignorée %r", part)
            continue
        capacity[role] = slots
    return capacity


SIEGE_SLOTS_PER_ROLE = _env_int("SIEGE_SLOTS_PER_ROLE", 5, minimum=0)
SIEGE_CAPACITY = parse_siege_slots(os.getenv("SIEGE_SLOTS"), SIEGE_SLOTS_PER_ROLE)

DUNGEON_PARTY_SIZES = (8, 24)
DUNGEON_DEFAULT_PARTY_SIZE = 8

EVENT_DURATION_HOURS = _env_int("EVENT_DURATION_HOURS", 3)

# Fuseaux proposés par les commandes (décalages fixes, sans heure d'été)
TIMEZONE_OFFSETS = {
    "Asia/Bangkok": 7,
    "Asia/Manila": 8,
    "Asia/Tokyo": 9,
}
DEFAULT_TIMEZONE = (os.getenv("DEFAULT_TIMEZONE") or "Asia/Bangkok").strip()
if DEFAULT_TIMEZONE not in TIMEZONE_OFFSETS:
    logger.warning("DEFAULT_TIMEZONE inconnu (%r), utilisation de Asia/Bangkok", DEFAULT_TIMEZONE)
    DEFAULT_TIMEZONE = "Asia/Bangkok"


# Avertit si le token du bot est absent
if not BOT_TOKEN:
    logger.warning("BOT_TOKEN manquant dans l'environnement")
