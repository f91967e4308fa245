"""
Classe principale du bot Discord.

Responsabilités :
- Crée le client Discord et l'arbre de commandes slash.
- Choisit le store des rosters : PostgreSQL si DATABASE_URL est défini, mémoire sinon.
- Assemble timer d'expiration + Dispatcher (injectés, aucun singleton global).
- Charge dynamiquement les commandes et enregistre les événements.

Note : L'initialisation asynchrone est centralisée dans `setup_hook`, appelé avant `on_ready`.
"""
from __future__ import annotations

import logging
import discord
from discord import app_commands

from core import config, db
from core.roster.dispatcher import RosterDispatcher
from core.roster.expiry import ExpiryTimer
from core.roster.store import MemoryRosterStore, PgRosterStore, RosterStore

logger = logging.getLogger(__name__)


class Bot(discord.Client):
    """
    Client Discord étendu, encapsulant l'état applicatif.

    Attributs principaux :
        tree : Arbre des commandes slash (CommandTree)
        db_pool : Pool asyncpg (None si aucune DB configurée)
        rosters : Dispatcher des intentions de roster
        expiry : Timer d'expiration des événements
    """

    def __init__(self):
        super().__init__(intents=config.INTENTS)
        self.tree = app_commands.CommandTree(self)
        self.db_pool = None  # Sera peuplé si DATABASE_URL défini
        self.expiry = ExpiryTimer()
        self.rosters: RosterDispatcher | None = None

    async def _make_store(self) -> RosterStore:
        if config.DATABASE_URL:
            try:
                self.db_pool = await db.create_pool(config.DATABASE_URL)
                store = PgRosterStore(self.db_pool)
                await store.ensure_schema()
                logger.info("Schéma roster vérifié, DB prête")
                return store
            except Exception:  # noqa: BLE001
                logger.exception("Erreur init DB, repli sur le store mémoire")
                await db.close_pool(self.db_pool)
                self.db_pool = None
        logger.warning("Rosters conservés en mémoire : ils seront perdus au redémarrage")
        return MemoryRosterStore()

    async def setup_hook(self):
        """
        Initialise les sous-systèmes avant la mise en ligne.

        Séquence :
        1. Store (DB ou mémoire) puis Dispatcher
        2. Commandes dynamiques (et vues persistantes), reprise des expirations
        3. Événements, puis synchronisation des commandes slash
        """
        store = await self._make_store()
        self.rosters = RosterDispatcher(store, self.expiry)
        try:
            from commands import load_all_commands  # type: ignore
            await load_all_commands(self)
        except Exception:  # noqa: BLE001
            logger.exception("Erreur chargement commandes dynamiques")
        # Après les commandes : le runtime doit écouter les expirations reprises
        try:
            await self.rosters.restore()
        except Exception:  # noqa: BLE001
            logger.exception("Erreur reprise des rosters actifs")
        try:
            from events.rosters import setup as setup_rosters  # type: ignore
            setup_rosters(self)
        except Exception:  # noqa: BLE001
            logger.exception("Erreur setup events")
        try:
            await self.tree.sync()
            logger.info("Slash commands synchronisées")
        except Exception:  # noqa: BLE001
            logger.exception("Erreur sync slash commands")

    async def on_ready(self):
        logger.info("Connecté: %s (%s)", self.user, getattr(self.user, 'id', '?'))

    async def close(self):  # type: ignore[override]
        """
        Fermeture propre du bot : timers d'expiration annulés puis pool asyncpg fermé.
        Les expirations seront reprogrammées au prochain démarrage (`restore`).
        """
        self.expiry.cancel_all()
        try:
            await db.close_pool(self.db_pool)
        except Exception:  # noqa: BLE001
            logger.exception("Erreur fermeture pool")
        await super().close()
