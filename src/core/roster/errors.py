"""
Taxonomie des erreurs du moteur de roster.

Toutes les erreurs dérivent de `RosterError` ; l'adaptateur Discord traduit chaque
`code` en message court (voir `views/messages.py`). Seule `StoreError` est
`retryable` : aucune mutation n'a été validée quand elle est levée.
"""
from __future__ import annotations

import enum


class ErrorCode(str, enum.Enum):
    NOT_FOUND = "NOT_FOUND"
    INACTIVE = "INACTIVE"
    UNAUTHORIZED = "UNAUTHORIZED"
    FULL = "FULL"
    SELF_KICK = "SELF_KICK"
    NOT_PARTICIPANT = "NOT_PARTICIPANT"
    UNKNOWN_ROLE = "UNKNOWN_ROLE"
    INVALID_INTENT = "INVALID_INTENT"
    STORE_ERROR = "STORE_ERROR"


class RosterError(Exception):
    """Base de toutes les erreurs de roster."""

    code: ErrorCode = ErrorCode.INVALID_INTENT
    retryable = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class RosterNotFound(RosterError):
    code = ErrorCode.NOT_FOUND

    def __init__(self, roster_id):
        self.roster_id = roster_id
        super().__init__(f"Roster {roster_id} introuvable")


class RosterInactive(RosterError):
    code = ErrorCode.INACTIVE

    def __init__(self, roster_id):
        self.roster_id = roster_id
        super().__init__(f"Roster {roster_id} fermé")


class Unauthorized(RosterError):
    code = ErrorCode.UNAUTHORIZED

    def __init__(self, user_id, action: str):
        self.user_id = user_id
        self.action = action
        super().__init__(f"Utilisateur {user_id} non autorisé ({action})")


class RosterFull(RosterError):
    code = ErrorCode.FULL

    def __init__(self, capacity: int):
        self.capacity = capacity
        super().__init__(f"Groupe complet ({capacity}/{capacity})")


class SelfKick(RosterError):
    code = ErrorCode.SELF_KICK

    def __init__(self):
        super().__init__("Le créateur ne peut pas s'exclure lui-même")


class NotParticipant(RosterError):
    code = ErrorCode.NOT_PARTICIPANT

    def __init__(self, user_id):
        self.user_id = user_id
        super().__init__(f"Utilisateur {user_id} absent du groupe")


class UnknownRole(RosterError):
    code = ErrorCode.UNKNOWN_ROLE

    def __init__(self, raw):
        self.raw = raw
        super().__init__(f"Rôle inconnu: {raw!r}")


class InvalidIntent(RosterError):
    code = ErrorCode.INVALID_INTENT


class StoreError(RosterError):
    """Echec de la couche de persistance (load/save)."""

    code = ErrorCode.STORE_ERROR
    retryable = True


class StoreConflict(StoreError):
    """Compare-and-store refusé : la version stockée a changé entre load et save."""

    def __init__(self, roster_id, expected_version: int):
        self.roster_id = roster_id
        self.expected_version = expected_version
        super().__init__(f"Conflit de version pour {roster_id} (attendu {expected_version})")


__all__ = [
    "ErrorCode", "RosterError", "RosterNotFound", "RosterInactive", "Unauthorized", "RosterFull",
    "SelfKick", "NotParticipant", "UnknownRole", "InvalidIntent", "StoreError", "StoreConflict",
]
