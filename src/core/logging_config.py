"""
Configuration centralisée du logging pour le bot Discord.

Objectifs :
- Un seul setup idempotent (évite la duplication des handlers)
- Déduplication des messages identiques (utile quand Discord redélivre une interaction)
- Format et niveaux configurables via variables d'environnement :
  LOG_LEVEL (racine), LOG_FORMAT, DISCORD_LOG_LEVEL (bibliothèque discord.py)
"""
from __future__ import annotations

import logging
import threading
import os

_INITIALIZED = False
_SEEN_LOCK = threading.Lock()
_SEEN_RECORDS = set()
_MAX_SEEN = 5000

DEFAULT_FORMAT = '[%(asctime)s] %(levelname)s %(name)s: %(message)s'


def _level(name: str, default: str) -> int:
    raw = (os.getenv(name) or default).strip().upper()
    level = logging.getLevelName(raw)
    return level if isinstance(level, int) else logging.getLevelName(default)


class _DeduplicateFilter(logging.Filter):
    """Ignore un message déjà émis (même logger, niveau et texte rendu).

    Les erreurs (ERROR et plus) ne sont jamais filtrées.
    """

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        if record.levelno >= logging.ERROR:
            return True
        try:
            rendered = record.getMessage()
        except Exception:  # noqa: BLE001
            rendered = str(record.msg)
        key = (record.name, record.levelno, rendered)
        with _SEEN_LOCK:
            if key in _SEEN_RECORDS:
                return False
            if len(_SEEN_RECORDS) >= _MAX_SEEN:
                _SEEN_RECORDS.clear()
            _SEEN_RECORDS.add(key)
        return True


def setup_logging(force: bool = False) -> None:
    global _INITIALIZED
    if _INITIALIZED and not force:
        return

    fmt = logging.Formatter(os.getenv("LOG_FORMAT") or DEFAULT_FORMAT)
    root = logging.getLogger()
    if force:
        for h in list(root.handlers):
            root.removeHandler(h)
    if not root.handlers:
        root.addHandler(logging.StreamHandler())
    for h in root.handlers:
        if not any(isinstance(f, _DeduplicateFilter) for f in h.filters):
            h.addFilter(_DeduplicateFilter())
        h.setFormatter(fmt)
    root.setLevel(_level("LOG_LEVEL", "INFO"))
    # discord.py est très bavard en DEBUG (gateway, heartbeats)
    logging.getLogger("discord").setLevel(_level("DISCORD_LOG_LEVEL", "WARNING"))
    _INITIALIZED = True


__all__ = ["setup_logging"]
