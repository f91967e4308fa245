"""
Registre dynamique des commandes slash et runtimes du bot Discord.

Convention :
- Chaque fichier de ce package (hors _*) expose une fonction `register(bot)`
	qui attache ses commandes au `bot.tree` ou son runtime au client.
- Les modules `_*` sont des helpers partagés, jamais chargés comme commandes.
- `load_all_commands(bot)` les importe et les enregistre ; renvoie le nombre de modules chargés.
"""
from __future__ import annotations

import importlib
import pkgutil
import logging
import discord

logger = logging.getLogger(__name__)


async def load_all_commands(bot: discord.Client) -> int:
	loaded = 0
	for mod in sorted(pkgutil.iter_modules(__path__), key=lambda m: m.name):  # type: ignore[name-defined]
		if mod.name.startswith('_'):
			continue
		full_name = f"{__name__}.{mod.name}"
		try:
			module = importlib.import_module(full_name)
			register = getattr(module, 'register', None)
			if register is None:
				continue
			result = register(bot)
			if hasattr(result, '__await__'):
				await result
			loaded += 1
			logger.debug("Module chargé: %s", full_name)
		except Exception:  # noqa: BLE001
			logger.exception("Echec chargement commande %s", full_name)
	logger.info("Commandes chargées: %s", loaded)
	return loaded

__all__ = ["load_all_commands"]
