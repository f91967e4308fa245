"""
Textes courts (éphémères / DM) des rosters.
"""
from __future__ import annotations

from core.roster.errors import ErrorCode, RosterError, RosterFull
from core.roster.models import AnyRoster, DungeonRoster, JobClass, Outcome, OutcomeKind

_ERRORS = {
    ErrorCode.NOT_FOUND: "Événement introuvable.",
    ErrorCode.INACTIVE: "Cet événement est fermé.",
    ErrorCode.UNAUTHORIZED: "Seul le créateur de l'événement peut faire cela.",
    ErrorCode.FULL: "Le groupe est complet.",
    ErrorCode.SELF_KICK: "Vous ne pouvez pas vous exclure vous-même.",
    ErrorCode.NOT_PARTICIPANT: "Vous devez faire partie du groupe.",
    ErrorCode.UNKNOWN_ROLE: "Classe inconnue.",
    ErrorCode.INVALID_INTENT: "Action invalide.",
    ErrorCode.STORE_ERROR: "Erreur de sauvegarde, réessayez.",
}


def msg_error(exc: RosterError) -> str:
    if isinstance(exc, RosterFull):
        return f"Le groupe est complet ({exc.capacity}/{exc.capacity})."
    return _ERRORS.get(exc.code, "Echec.")


def _role(role: JobClass | None) -> str:
    return f"**{role.value}**" if role else "?"


def msg_outcome(outcome: Outcome) -> str:
    kind = outcome.kind
    if kind is OutcomeKind.ADDED:
        if outcome.previous_role and outcome.previous_role is not outcome.role:
            return f"Classe changée : {_role(outcome.previous_role)} -> {_role(outcome.role)}."
        return f"Inscrit en {_role(outcome.role)}."
    if kind is OutcomeKind.MOVED_TO_WAITLIST:
        return f"{_role(outcome.role)} est complet : vous êtes en liste d'attente."
    if kind is OutcomeKind.REMOVED:
        return f"Retiré de {_role(outcome.role)}."
    if kind is OutcomeKind.ATTENDING:
        return "Présence confirmée."
    if kind is OutcomeKind.DECLINED:
        return "Absence enregistrée."
    if kind is OutcomeKind.JOINED:
        return "Vous avez rejoint le groupe."
    if kind is OutcomeKind.LEFT:
        return "Vous avez quitté le groupe."
    if kind is OutcomeKind.DROP_RECORDED:
        return "Loot enregistré."
    if kind is OutcomeKind.KICKED:
        return f"<@{outcome.target_id}> a été retiré du groupe."
    if kind is OutcomeKind.CLOSED:
        return "Événement fermé."
    if kind is OutcomeKind.EXPIRED:
        return "Événement terminé."
    return "Aucun changement."


def msg_promoted_dm(role: JobClass, title: str, jump_url: str | None = None) -> str:
    where = f" ({jump_url})" if jump_url else ""
    return f"Une place s'est libérée : vous passez principal en {_role(role)} pour {title}{where}."


def msg_event_ended(roster: AnyRoster) -> str:
    """Bilan de fin : présents pour un siège, membres du groupe pour un dungeon run."""
    count = len(roster.participants) if isinstance(roster, DungeonRoster) else len(roster.attending)
    title = roster.title or "Événement"
    return f"🏁 **{title}** est terminé !\n📊 Participants : {count}"


def msg_event_created(jump_url: str) -> str: return f"Événement créé : {jump_url}"
def msg_channel_requis() -> str: return "Commande utilisable uniquement dans un salon de serveur."
def msg_publication_impossible() -> str: return "Impossible de publier l'événement dans ce salon."
def msg_creation_echec() -> str: return "Echec de la création de l'événement, réessayez."
def msg_kick_aucun() -> str: return "Aucun membre à retirer."
def msg_kick_choisir() -> str: return "Choisissez le membre à retirer :"


__all__ = [name for name in globals().keys() if name.startswith('msg_')]
