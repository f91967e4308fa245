"""
Composants UI des rosters (siège / dungeon run).

Ce module fournit :
- build_embed : rendu d'un roster (principaux, attente, présences, loot)
- SiegeView / DungeonView : vues persistantes (timeout=None, custom_id stables)
- ItemDropModal : saisie d'un loot (dungeon run)
- KickSelectView : liste éphémère des membres à retirer (créateur uniquement)

Les callbacks délèguent au runtime attaché au client (`bot.roster_runtime`).
Les vues persistantes ne dépendent d'aucun roster : l'id du roster est celui du
message cliqué, une seule instance par type suffit (`bot.add_view`).

Contraintes Discord :
- 5 boutons par ligne, 5 lignes maximum
- 25 champs par embed, 1024 caractères par valeur de champ
"""
from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import discord

from core.roster.models import AnyRoster, DungeonRoster, JobClass, RosterKind, SiegeRoster
from views import custom_ids as cid

ACTIVE_COLOR = discord.Color.blurple()
DUNGEON_COLOR = discord.Color.green()
CLOSED_COLOR = discord.Color.dark_grey()

SEPARATOR = "━━━━━━━━━━━━━━━━━━━━━━━━━━━━"
CLOSED_FOOTER = "🔒 Événement fermé • Inscriptions terminées"
MAX_DROPS_SHOWN = 10
NAMES_PER_FIELD = 10

EMBED_LIMIT = 6000
FIELD_LIMIT = 1024
MAX_FIELDS = 25
FOOTER_ROOM = len(CLOSED_FOOTER)


def _mentions(user_ids: Sequence[int]) -> List[str]:
    return [f"<@{uid}>" for uid in user_ids]


def _chunks(lines: Sequence[str], size: int = NAMES_PER_FIELD) -> List[str]:
    return ["\n".join(lines[i:i + size]) for i in range(0, len(lines), size)]


def _truncate(value: str, limit: int) -> str:
    if len(value) <= limit:
        return value
    cut = value[:limit - 2]
    # coupe entre deux mentions
    idx = max(cut.rfind("\n"), cut.rfind(","))
    if idx > 0:
        cut = cut[:idx]
    return cut + "\n…"


def _add_field(e: discord.Embed, name: str, value: str, *, inline: bool = False, keep: int = 0) -> bool:
    """Ajoute un champ sans dépasser les limites Discord (25 champs, 1024/champ, 6000 au total).

    `keep` réserve des caractères pour la suite (pied de page, champs finaux).
    Renvoie False si le champ n'a pas pu être ajouté.
    """
    room = EMBED_LIMIT - FOOTER_ROOM - keep - len(e) - len(name)
    if len(e.fields) >= MAX_FIELDS or room < 16:
        return False
    e.add_field(name=name, value=_truncate(value, min(FIELD_LIMIT, room)), inline=inline)
    return True


def _when(roster: AnyRoster) -> str:
    if roster.starts_at is None:
        return "📅 **Date :** non précisée"
    return f"📅 **Date :** <t:{roster.starts_at}:F> (<t:{roster.starts_at}:R>)"


def build_siege_embed(roster: SiegeRoster) -> discord.Embed:
    lines = [
        _when(roster),
        "",
        "**📋 Inscription :**",
        "• ✅ **Présent** / ❌ **Absent** pour déclarer votre présence",
        "• Cliquez sur votre classe pour prendre une place (liste d'attente si complet)",
        "• Recliquez sur votre classe pour vous retirer",
    ]
    e = discord.Embed(
        title=roster.title or "Siège de guilde",
        description="\n".join(lines),
        color=ACTIVE_COLOR if roster.is_active else CLOSED_COLOR,
    )
    stats = f"✅ Présents : {len(roster.attending)}\n❌ Absents : {len(roster.declined)}"
    e.add_field(name="**POSTES PRINCIPAUX**", value=SEPARATOR, inline=False)
    for role in JobClass:
        principals = roster.principals_of(role)
        waiting = roster.waitlist_of(role)
        value = "\n".join(f"✅ {m}" for m in _mentions(principals)) or "🔹 Place libre"
        if waiting:
            value += "\n⏳ " + ", ".join(_mentions(waiting))
        _add_field(e, f"**{role.value}** ({len(principals)}/{roster.slots(role)})", value, keep=len(stats) + 32)
    _add_field(e, "📊 **Inscriptions**", stats)
    # Les absents gardent un champ même quand la liste des présents est longue
    absent_room = 256 if roster.declined else 0
    for idx, chunk in enumerate(_chunks(_mentions(roster.attending))):
        if len(e.fields) >= MAX_FIELDS - 1:
            break
        if not _add_field(e, "✅ **Présents**" if idx == 0 else "\u200b", chunk, keep=absent_room):
            break
    if roster.declined:
        _add_field(e, "❌ **Absents**", ", ".join(_mentions(roster.declined)))
    if not roster.is_active:
        e.set_footer(text=CLOSED_FOOTER)
    return e


def build_dungeon_embed(roster: DungeonRoster) -> discord.Embed:
    lines = [_when(roster)]
    if roster.notes:
        lines += ["", f"📝 {_truncate(roster.notes, 1000)}"]
    e = discord.Embed(
        title=roster.title or "Dungeon Run",
        description="\n".join(lines),
        color=DUNGEON_COLOR if roster.is_active else CLOSED_COLOR,
    )
    e.add_field(name="**COMPOSITION DU GROUPE**", value=SEPARATOR, inline=False)
    for role in JobClass:
        tagged = roster.role_of.get(role, ())
        _add_field(e, f"**{role.value}**", ", ".join(_mentions(tagged)) or "🔹 —", inline=True)
    members = "\n".join(_mentions(roster.participants)) or "Aucun participant"
    _add_field(e, f"👥 **Participants** ({len(roster.participants)}/{roster.capacity})", members)
    if roster.drops:
        shown = [d.render() for d in roster.drops[-MAX_DROPS_SHOWN:]]
        if len(roster.drops) > MAX_DROPS_SHOWN:
            shown.append(f"… {len(roster.drops) - MAX_DROPS_SHOWN} plus anciens")
        _add_field(e, "💎 **Loot**", "```\n" + "\n".join(shown)[:1000] + "\n```")
    if not roster.is_active:
        e.set_footer(text=CLOSED_FOOTER)
    return e


def build_embed(roster: AnyRoster) -> discord.Embed:
    if isinstance(roster, SiegeRoster):
        return build_siege_embed(roster)
    return build_dungeon_embed(roster)


async def _on_component(interaction: discord.Interaction):
    rt = getattr(interaction.client, 'roster_runtime', None)
    handler = getattr(rt, 'handle_component', None)
    if not callable(handler):
        await interaction.response.send_message("Rosters non initialisés. Réessayez.", ephemeral=True)
        return
    await handler(interaction)


class _RosterView(discord.ui.View):
    def __init__(self):
        super().__init__(timeout=None)

    def _button(self, label: str, custom_id: str, style: discord.ButtonStyle, row: int, emoji: Optional[str] = None):
        btn = discord.ui.Button(label=label, style=style, custom_id=custom_id, row=row, emoji=emoji)
        btn.callback = _on_component  # type: ignore
        self.add_item(btn)

    def _job_buttons(self, kind: RosterKind, first_row: int):
        for idx, role in enumerate(JobClass):
            self._button(role.value, cid.job_id(kind, role), discord.ButtonStyle.secondary, first_row + idx // 4)


class SiegeView(_RosterView):
    """Présent / Absent, une ligne de classes sur deux rangées, fermeture."""

    def __init__(self):
        super().__init__()
        self._button("Présent", cid.SIEGE_ATTEND_YES, discord.ButtonStyle.success, 0, emoji="✅")
        self._button("Absent", cid.SIEGE_ATTEND_NO, discord.ButtonStyle.danger, 0, emoji="❌")
        self._job_buttons(RosterKind.SIEGE, 1)
        self._button("Fermer", cid.SIEGE_CLOSE, discord.ButtonStyle.secondary, 3, emoji="🔒")


class DungeonView(_RosterView):
    def __init__(self):
        super().__init__()
        self._button("Rejoindre / Quitter", cid.DUNGEON_JOIN, discord.ButtonStyle.success, 0)
        self._button("Loot", cid.DUNGEON_ITEMDROP, discord.ButtonStyle.primary, 0, emoji="💎")
        self._button("Gérer", cid.DUNGEON_MANAGE, discord.ButtonStyle.secondary, 0, emoji="⚙️")
        self._button("Fermer", cid.DUNGEON_CLOSE, discord.ButtonStyle.secondary, 0, emoji="🔒")
        self._job_buttons(RosterKind.DUNGEON_RUN, 1)


def view_for(roster: AnyRoster) -> Optional[discord.ui.View]:
    """Vue à afficher sous le message ; None une fois le roster fermé (boutons retirés)."""
    if not roster.is_active:
        return None
    return SiegeView() if isinstance(roster, SiegeRoster) else DungeonView()


def persistent_views() -> List[discord.ui.View]:
    return [SiegeView(), DungeonView()]


class ItemDropModal(discord.ui.Modal):
    def __init__(self, roster_id: int):
        super().__init__(title="Enregistrer un loot", custom_id=cid.drop_modal_id(roster_id))
        self.item = discord.ui.TextInput(label="Objet obtenu", placeholder="ex: Epic Sword +3", max_length=200)
        self.add_item(self.item)

    async def on_submit(self, interaction: discord.Interaction):  # type: ignore[override]
        rt = getattr(interaction.client, 'roster_runtime', None)
        await rt.handle_drop(interaction, self.item.value)


class KickSelectView(discord.ui.View):
    """Select éphémère (créateur uniquement) : retire le membre choisi du dungeon run."""

    def __init__(self, roster_id: int, members: Sequence[Tuple[int, str]], *, timeout: Optional[float] = 60):
        super().__init__(timeout=timeout)
        options = [discord.SelectOption(label=label[:100], value=str(uid)) for uid, label in members[:25]]
        select = discord.ui.Select(
            placeholder="Membre à retirer",
            min_values=1,
            max_values=1,
            options=options,
            custom_id=cid.kick_select_id(roster_id),
        )

        async def _cb(inter: discord.Interaction):  # type: ignore
            rt = getattr(inter.client, 'roster_runtime', None)
            await rt.handle_kick(inter, int(select.values[0]))

        select.callback = _cb  # type: ignore
        self.add_item(select)


__all__ = [
    "build_embed", "build_siege_embed", "build_dungeon_embed", "SiegeView", "DungeonView", "view_for",
    "persistent_views", "ItemDropModal", "KickSelectView",
]
