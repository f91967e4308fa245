"""
Runtime Discord des rosters : clics sur les boutons, modal de loot, menu d'exclusion.

Chaque action est traduite en intention puis soumise au Dispatcher (`bot.rosters`).
Après une intention appliquée, le message de l'événement est re-rendu depuis le
roster ; une erreur de roster devient un message éphémère et l'affichage reste
inchangé. À l'expiration, un bilan (nombre de participants) est posté dans le salon.
Les échecs Discord (édition, DM, bilan) sont loggés sans annuler la mutation.
"""
from __future__ import annotations

import logging
from dataclasses import replace

import discord

from core.roster.dispatcher import Applied, RosterDispatcher
from core.roster.errors import NotParticipant, RosterError, RosterInactive, Unauthorized
from core.roster.models import AnyRoster, Intent, Kick, RecordDrop
from views import custom_ids as cid
from views import messages as msg
from views import rosters as ui

logger = logging.getLogger(__name__)


class RosterRuntime:
    def __init__(self, bot: discord.Client):
        self.bot = bot

    @property
    def dispatcher(self) -> RosterDispatcher:
        d = getattr(self.bot, "rosters", None)
        if d is None:
            raise RuntimeError("Dispatcher de rosters non initialisé")
        return d  # type: ignore

    # ---------- publication ----------
    async def publish(self, interaction: discord.Interaction, draft: AnyRoster) -> None:
        """Poste le message de l'événement puis crée le roster (id = id du message)."""
        channel = interaction.channel
        if interaction.guild is None or not isinstance(channel, (discord.TextChannel, discord.Thread)):
            await interaction.response.send_message(msg.msg_channel_requis(), ephemeral=True)
            return
        await interaction.response.defer(ephemeral=True)
        draft = replace(draft, channel_id=channel.id)
        try:
            message = await channel.send(embed=ui.build_embed(draft), view=ui.view_for(draft))
        except discord.HTTPException:
            logger.exception("Publication impossible dans %s", channel.id)
            await interaction.followup.send(msg.msg_publication_impossible(), ephemeral=True)
            return
        try:
            await self.dispatcher.create(replace(draft, id=message.id))
        except RosterError:
            logger.exception("Création du roster %s échouée", message.id)
            try:
                await message.delete()
            except discord.HTTPException:
                logger.warning("Message orphelin %s non supprimé", message.id)
            await interaction.followup.send(msg.msg_creation_echec(), ephemeral=True)
            return
        await interaction.followup.send(msg.msg_event_created(message.jump_url), ephemeral=True)

    # ---------- composants ----------
    @staticmethod
    def _custom_id(interaction: discord.Interaction) -> str:
        return (interaction.data or {}).get("custom_id", "")  # type: ignore[union-attr]

    async def handle_component(self, interaction: discord.Interaction):
        roster_id = interaction.message.id if interaction.message else 0
        try:
            action = cid.parse_custom_id(self._custom_id(interaction))
            if action.opens_ui:
                if action.action == cid.OPENS_DROP_MODAL:
                    await self._open_drop_modal(interaction, roster_id)
                else:
                    await self._open_kick_menu(interaction, roster_id)
                return
            intent = cid.intent_for_action(action, interaction.user.id)
        except RosterError as exc:
            await interaction.response.send_message(msg.msg_error(exc), ephemeral=True)
            return
        await interaction.response.defer(ephemeral=True, thinking=False)
        await self.submit(interaction, roster_id, intent)

    async def _open_drop_modal(self, interaction: discord.Interaction, roster_id: int):
        roster = await self.dispatcher.get(roster_id)
        if not roster.is_active:
            raise RosterInactive(roster_id)
        # pas de modal pour un non-membre
        if interaction.user.id not in getattr(roster, "participants", ()):
            raise NotParticipant(interaction.user.id)
        await interaction.response.send_modal(ui.ItemDropModal(roster_id))

    async def _open_kick_menu(self, interaction: discord.Interaction, roster_id: int):
        roster = await self.dispatcher.get(roster_id)
        if interaction.user.id != roster.creator_id:
            raise Unauthorized(interaction.user.id, "kick")
        if not roster.is_active:
            raise RosterInactive(roster_id)
        members = []
        for uid in getattr(roster, "participants", ()):
            if uid == roster.creator_id:
                continue
            member = interaction.guild.get_member(uid) if interaction.guild else None
            members.append((uid, member.display_name if member else f"Utilisateur {uid}"))
        if not members:
            await interaction.response.send_message(msg.msg_kick_aucun(), ephemeral=True)
            return
        await interaction.response.send_message(
            msg.msg_kick_choisir(), view=ui.KickSelectView(roster_id, members), ephemeral=True
        )

    async def handle_drop(self, interaction: discord.Interaction, text: str):
        """Soumission du modal de loot : l'id du roster est porté par le custom_id du modal."""
        await interaction.response.defer(ephemeral=True, thinking=False)
        try:
            roster_id = cid.parse_drop_modal_id(self._custom_id(interaction))
        except RosterError as exc:
            await interaction.followup.send(msg.msg_error(exc), ephemeral=True)
            return
        intent = RecordDrop(interaction.user.id, text, discord.utils.utcnow())
        await self.submit(interaction, roster_id, intent)

    async def handle_kick(self, interaction: discord.Interaction, target_id: int):
        await interaction.response.defer(ephemeral=True, thinking=False)
        try:
            roster_id = cid.parse_kick_select_id(self._custom_id(interaction))
        except RosterError as exc:
            await interaction.followup.send(msg.msg_error(exc), ephemeral=True)
            return
        await self.submit(interaction, roster_id, Kick(interaction.user.id, target_id))

    # ---------- soumission / rendu ----------
    async def submit(self, interaction: discord.Interaction, roster_id: int, intent: Intent):
        try:
            applied = await self.dispatcher.submit(roster_id, intent)
        except RosterError as exc:
            await interaction.followup.send(msg.msg_error(exc), ephemeral=True)
            return
        if applied.outcome.changed:
            await self.refresh(applied.roster)
            await self.notify_promoted(applied)
        await interaction.followup.send(msg.msg_outcome(applied.outcome), ephemeral=True)

    async def _channel(self, roster: AnyRoster):
        return self.bot.get_channel(roster.channel_id) or await self.bot.fetch_channel(roster.channel_id)

    async def refresh(self, roster: AnyRoster) -> bool:
        """Ré-affiche le message de l'événement (boutons retirés si fermé)."""
        if roster.channel_id is None:
            return False
        try:
            channel = await self._channel(roster)
            message = channel.get_partial_message(roster.id)  # type: ignore[union-attr]
            await message.edit(embed=ui.build_embed(roster), view=ui.view_for(roster))
        except (discord.HTTPException, AttributeError):
            logger.exception("Rafraîchissement du message %s impossible", roster.id)
            return False
        return True

    async def post_summary(self, roster: AnyRoster) -> bool:
        """Bilan de fin d'événement posté sous le message (participants au moment de l'expiration)."""
        if roster.channel_id is None:
            return False
        try:
            channel = await self._channel(roster)
            await channel.send(msg.msg_event_ended(roster))  # type: ignore[union-attr]
        except (discord.HTTPException, AttributeError):
            logger.exception("Bilan de l'événement %s non publié", roster.id)
            return False
        return True

    async def notify_promoted(self, applied: Applied) -> int:
        sent = 0
        for promo in applied.outcome.promoted:
            try:
                user = self.bot.get_user(promo.user_id) or await self.bot.fetch_user(promo.user_id)
                await user.send(msg.msg_promoted_dm(promo.role, applied.roster.title))
                sent += 1
            except discord.HTTPException:
                logger.info("DM de promotion impossible pour %s", promo.user_id)
        return sent

    async def on_expired(self, applied: Applied):
        """Fin programmée : boutons retirés puis bilan posté dans le salon."""
        if await self.refresh(applied.roster):
            await self.post_summary(applied.roster)


def ensure_roster_runtime(bot: discord.Client) -> RosterRuntime:
    rt = getattr(bot, 'roster_runtime', None)
    if not isinstance(rt, RosterRuntime):
        rt = RosterRuntime(bot)
        bot.roster_runtime = rt  # type: ignore
    return rt


def register(bot: discord.Client):
    """Runtime + vues persistantes (les boutons restent actifs après un redémarrage)."""
    rt = ensure_roster_runtime(bot)
    dispatcher = getattr(bot, "rosters", None)
    if dispatcher is not None:
        dispatcher.add_expiry_listener(rt.on_expired)
    for view in ui.persistent_views():
        bot.add_view(view)
    logger.info("Vues persistantes des rosters enregistrées")


__all__ = ["register", "ensure_roster_runtime", "RosterRuntime"]
