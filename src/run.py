"""
Entrée principale du bot de rosters (sièges et dungeon runs).

Le dossier `src/` est ajouté à sys.path pour permettre les imports absolus
(core, commands, views…) lors d'un lancement via `python src/run.py`.
"""
from __future__ import annotations

import sys
import os

_CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
if _CURRENT_DIR not in sys.path:
    sys.path.insert(0, _CURRENT_DIR)

from core.logging_config import setup_logging  # noqa: E402
setup_logging()

from core import config, bot as bot_module  # noqa: E402


def main() -> None:
    if not config.BOT_TOKEN:
        raise SystemExit("BOT_TOKEN manquant")
    bot = bot_module.Bot()
    try:
        # log_handler=None : le logging est déjà configuré par setup_logging
        bot.run(config.BOT_TOKEN, log_handler=None)
    except KeyboardInterrupt:
        print("Arrêt manuel")


if __name__ == "__main__":
    main()
