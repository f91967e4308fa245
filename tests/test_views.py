"""Tests du rendu des rosters et des messages utilisateur."""

import asyncio
from dataclasses import replace

from core.roster import engine
from core.roster.errors import (
    ErrorCode,
    InvalidIntent,
    NotParticipant,
    RosterFull,
    RosterInactive,
    RosterNotFound,
    SelfKick,
    StoreError,
    Unauthorized,
    UnknownRole,
)
from core.roster.models import JobClass, Outcome, OutcomeKind, SelectRole, SetAttendance
from views import custom_ids as cid
from views import messages as msg
from views import rosters as ui


class TestEmbeds:
    def test_siege_embed_shows_slots_and_waitlist(self, siege):
        """Chaque classe affiche ses principaux, sa capacité et sa liste d'attente."""
        r = siege
        for user in (5, 6):
            r, _ = engine.apply(r, SelectRole(user, JobClass.KNIGHT))
        embed = ui.build_embed(r)
        knight = next(f for f in embed.fields if "Knight" in f.name)
        assert "(1/1)" in knight.name
        assert "<@5>" in knight.value
        assert "⏳ <@6>" in knight.value
        assert embed.footer.text is None

    def test_closed_roster_has_footer_and_no_buttons(self, dungeon):
        """Un roster fermé affiche son état et n'a plus de boutons."""
        closed = replace(dungeon, is_active=False)
        embed = ui.build_embed(closed)
        assert embed.footer.text == ui.CLOSED_FOOTER
        assert ui.view_for(closed) is None

    def test_crowded_siege_stays_within_discord_limits(self, siege, apply_all):
        """Des centaines d'inscrits ne font pas dépasser les limites d'un embed."""
        base = 10 ** 17
        present = [base + i for i in range(300)]
        absent = [base + 1000 + i for i in range(120)]
        intents = [SetAttendance(u, True) for u in present]
        intents += [SelectRole(u, JobClass.KNIGHT) for u in present[:150]]
        intents += [SetAttendance(u, False) for u in absent]
        r, _ = apply_all(siege, intents)

        for roster in (r, replace(r, is_active=False)):
            embed = ui.build_embed(roster)
            assert len(embed) <= ui.EMBED_LIMIT
            assert len(embed.fields) <= ui.MAX_FIELDS
            assert all(len(f.value) <= ui.FIELD_LIMIT for f in embed.fields)
            assert any("Absents" in f.name for f in embed.fields)
        assert embed.footer.text == ui.CLOSED_FOOTER

    def test_persistent_views_cover_every_button(self):
        """Les vues persistantes déclarent tous les custom_id, sans timeout."""

        async def scenario():
            return ui.persistent_views()

        siege_view, dungeon_view = asyncio.run(scenario())
        ids = {item.custom_id for view in (siege_view, dungeon_view) for item in view.children}
        assert siege_view.timeout is None and dungeon_view.timeout is None
        assert siege_view.is_persistent() and dungeon_view.is_persistent()
        for fixed in (cid.SIEGE_ATTEND_YES, cid.SIEGE_ATTEND_NO, cid.SIEGE_CLOSE, cid.DUNGEON_JOIN,
                      cid.DUNGEON_ITEMDROP, cid.DUNGEON_MANAGE, cid.DUNGEON_CLOSE):
            assert fixed in ids
        assert "siege:job:psykeeper" in ids and "dungeon:job:blade" in ids


class TestMessages:
    def test_every_error_code_has_a_message(self):
        """Chaque type d'erreur a son propre message court."""
        errors = [
            RosterNotFound(1), RosterInactive(1), Unauthorized(1, "close"), RosterFull(8), SelfKick(),
            NotParticipant(1), UnknownRole("x"), InvalidIntent("x"), StoreError("x"),
        ]
        assert {e.code for e in errors} == set(ErrorCode)
        texts = [msg.msg_error(e) for e in errors]
        assert len(set(texts)) == len(texts)
        assert "8/8" in msg.msg_error(RosterFull(8))

    def test_outcome_messages(self):
        """Les outcomes principaux ont un retour lisible."""
        assert "attente" in msg.msg_outcome(Outcome(OutcomeKind.MOVED_TO_WAITLIST, role=JobClass.BLADE))
        assert "Blade" in msg.msg_outcome(Outcome(OutcomeKind.ADDED, role=JobClass.BLADE))
        switched = msg.msg_outcome(Outcome(OutcomeKind.ADDED, role=JobClass.KNIGHT, previous_role=JobClass.BLADE))
        assert "Blade" in switched and "Knight" in switched
        assert msg.msg_outcome(Outcome(OutcomeKind.UNCHANGED)) == "Aucun changement."

    def test_event_ended_counts_attendees(self, siege, apply_all):
        """Le bilan d'un siège compte les présents, pas les absents."""
        r, _ = apply_all(siege, [SetAttendance(5, True), SetAttendance(6, True), SetAttendance(7, False)])
        text = msg.msg_event_ended(r)
        assert "Siège test" in text
        assert text.endswith("Participants : 2")
