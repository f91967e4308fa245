"""Tests du moteur de roster, variante dungeon run (capacité plate, étiquettes, loot)."""

import random
from datetime import datetime, timezone

import pytest

from core.roster import engine
from core.roster.errors import (
    InvalidIntent,
    NotParticipant,
    RosterFull,
    RosterInactive,
    SelfKick,
    Unauthorized,
)
from core.roster.models import (
    Close,
    JobClass,
    Join,
    Kick,
    Leave,
    OutcomeKind,
    RecordDrop,
    SelectRole,
    SetAttendance,
    ToggleJoin,
)

CREATOR = 1
A, B, C, D = 101, 102, 103, 104
BLADE, KNIGHT = JobClass.BLADE, JobClass.KNIGHT
NOW = datetime(2024, 1, 15, 13, 0, tzinfo=timezone.utc)


class TestMembership:
    def test_toggle_join_then_leave(self, dungeon):
        """Le bouton Join rejoint puis, recliqué, fait quitter le groupe."""
        r, out = engine.apply(dungeon, ToggleJoin(A))
        assert out.kind is OutcomeKind.JOINED
        assert r.participants == (A,)
        r, out = engine.apply(r, ToggleJoin(A))
        assert out.kind is OutcomeKind.LEFT
        assert r.participants == ()

    def test_join_when_member_is_unchanged(self, dungeon, apply_all):
        """Join d'un membre déjà présent est un no-op, même groupe complet."""
        r, _ = apply_all(dungeon, [Join(A), Join(B), Join(C)])
        r2, out = engine.apply(r, Join(A))
        assert out.kind is OutcomeKind.UNCHANGED
        assert r2 is r

    def test_join_full_fails(self, dungeon, apply_all):
        """Join échoue en Full exactement quand |participants| == capacité."""
        r, _ = apply_all(dungeon, [Join(A), Join(B)])
        r, _ = engine.apply(r, Join(C))
        with pytest.raises(RosterFull) as exc:
            engine.apply(r, Join(D))
        assert exc.value.capacity == 3

    def test_leave_removes_role_tag(self, dungeon, apply_all):
        """Quitter retire aussi l'étiquette de rôle."""
        r, _ = apply_all(dungeon, [SelectRole(A, BLADE)])
        r, out = engine.apply(r, Leave(A))
        assert out.kind is OutcomeKind.LEFT
        assert out.previous_role is BLADE
        assert r.role_of == {}

    def test_leave_absent_is_unchanged(self, dungeon):
        """Quitter sans être membre est un no-op."""
        _, out = engine.apply(dungeon, Leave(A))
        assert out.kind is OutcomeKind.UNCHANGED


class TestSelectRole:
    def test_select_role_auto_joins(self, dungeon):
        """Choisir une classe fait rejoindre le groupe."""
        r, out = engine.apply(dungeon, SelectRole(A, BLADE))
        assert out.kind is OutcomeKind.ADDED
        assert r.participants == (A,)
        assert r.tagged_role(A) is BLADE

    def test_select_same_role_untags_but_keeps_membership(self, dungeon, apply_all):
        """Recliquer sa classe la retire, le joueur reste dans le groupe."""
        r, outs = apply_all(dungeon, [SelectRole(A, BLADE), SelectRole(A, BLADE)])
        assert outs[1].kind is OutcomeKind.REMOVED
        assert r.participants == (A,)
        assert r.tagged_role(A) is None

    def test_switching_role_keeps_single_tag(self, dungeon, apply_all):
        """Au plus une étiquette par joueur."""
        r, outs = apply_all(dungeon, [SelectRole(A, BLADE), SelectRole(A, KNIGHT)])
        assert outs[1].previous_role is BLADE
        assert r.role_of == {KNIGHT: (A,)}

    def test_role_tags_are_not_capacity_bounded(self, dungeon, apply_all):
        """Plusieurs joueurs peuvent porter la même classe."""
        r, _ = apply_all(dungeon, [SelectRole(A, BLADE), SelectRole(B, BLADE)])
        assert r.role_of[BLADE] == (A, B)

    def test_select_role_on_full_party_aborts(self, dungeon, apply_all):
        """Groupe complet : l'auto-join échoue et aucun changement n'est appliqué."""
        r, _ = apply_all(dungeon, [Join(A), Join(B), Join(C)])
        with pytest.raises(RosterFull):
            engine.apply(r, SelectRole(D, BLADE))
        assert D not in r.participants
        assert r.role_of == {}

    def test_member_can_change_role_when_full(self, dungeon, apply_all):
        """Un membre d'un groupe complet peut toujours changer de classe."""
        r, _ = apply_all(dungeon, [Join(A), Join(B), Join(C)])
        r, out = engine.apply(r, SelectRole(A, KNIGHT))
        assert out.kind is OutcomeKind.ADDED


class TestDrops:
    def test_member_records_drop(self, dungeon, apply_all):
        """Le loot est ajouté au journal, texte nettoyé."""
        r, _ = apply_all(dungeon, [Join(A)])
        r, out = engine.apply(r, RecordDrop(A, "  Epic Sword +3 ", NOW))
        assert out.kind is OutcomeKind.DROP_RECORDED
        assert len(r.drops) == 1
        assert r.drops[0].text == "Epic Sword +3"
        assert r.drops[0].author_id == A
        assert r.drops[0].render() == "[2024-01-15 13:00] Epic Sword +3"

    def test_drops_are_append_only(self, dungeon, apply_all):
        """Chaque loot s'ajoute en fin de journal."""
        r, _ = apply_all(dungeon, [Join(A), RecordDrop(A, "first", NOW), RecordDrop(A, "second", NOW)])
        assert [d.text for d in r.drops] == ["first", "second"]

    def test_non_member_cannot_record(self, dungeon):
        """Seuls les membres du groupe enregistrent du loot."""
        with pytest.raises(NotParticipant):
            engine.apply(dungeon, RecordDrop(A, "Sword", NOW))

    def test_blank_drop_is_invalid(self, dungeon, apply_all):
        """Un texte vide est refusé."""
        r, _ = apply_all(dungeon, [Join(A)])
        with pytest.raises(InvalidIntent):
            engine.apply(r, RecordDrop(A, "   ", NOW))


class TestKick:
    def test_creator_kicks_member(self, dungeon, apply_all):
        """Kick retire le joueur et son étiquette."""
        r, _ = apply_all(dungeon, [SelectRole(A, BLADE), Join(B)])
        r, out = engine.apply(r, Kick(CREATOR, A))
        assert out.kind is OutcomeKind.KICKED
        assert out.target_id == A
        assert out.previous_role is BLADE
        assert r.participants == (B,)
        assert r.role_of == {}

    def test_non_creator_cannot_kick(self, dungeon, apply_all):
        """Kick réservé au créateur."""
        r, _ = apply_all(dungeon, [Join(A), Join(B)])
        with pytest.raises(Unauthorized):
            engine.apply(r, Kick(A, B))

    def test_creator_cannot_kick_self(self, dungeon, apply_all):
        """Le créateur ne peut pas s'exclure."""
        r, _ = apply_all(dungeon, [Join(CREATOR)])
        with pytest.raises(SelfKick):
            engine.apply(r, Kick(CREATOR, CREATOR))

    def test_kick_absent_target_is_unchanged(self, dungeon):
        """Exclure un non-membre est un no-op."""
        _, out = engine.apply(dungeon, Kick(CREATOR, A))
        assert out.kind is OutcomeKind.UNCHANGED


class TestLifecycle:
    def test_closed_run_rejects_join(self, dungeon):
        """Un run fermé refuse toute nouvelle inscription."""
        r, _ = engine.apply(dungeon, Close(CREATOR))
        with pytest.raises(RosterInactive):
            engine.apply(r, Join(A))

    def test_close_twice_is_a_noop(self, dungeon, apply_all):
        """Fermer un run deux fois : même état, le second outcome est un no-op."""
        r, (first, second) = apply_all(dungeon, [Close(CREATOR), Close(CREATOR)])
        assert first.kind is OutcomeKind.CLOSED
        assert second.kind is OutcomeKind.UNCHANGED
        assert not second.changed
        assert r.is_active is False

    @pytest.mark.parametrize(
        "intent",
        [Kick(CREATOR, A), RecordDrop(A, "Epic Sword", NOW), SelectRole(A, BLADE), Leave(A), ToggleJoin(A)],
    )
    def test_closed_run_is_frozen(self, dungeon, apply_all, intent):
        """Sur un run fermé, toute intention autre que Close est refusée et rien ne change."""
        closed, _ = apply_all(dungeon, [Join(A), Close(CREATOR)])
        with pytest.raises(RosterInactive):
            engine.apply(closed, intent)
        assert closed.participants == (A,)
        assert closed.drops == ()

    def test_siege_intent_on_dungeon_is_invalid(self, dungeon):
        """SetAttendance n'existe pas pour un dungeon run."""
        with pytest.raises(InvalidIntent):
            engine.apply(dungeon, SetAttendance(A, True))

    @pytest.mark.parametrize("seed", range(20))
    def test_random_sequences_keep_invariants(self, seed, dungeon, assert_dungeon_invariants):
        """Capacité et étiquettes restent cohérentes après chaque intention acceptée."""
        rng = random.Random(seed)
        users = [CREATOR, A, B, C, D]
        r = dungeon
        for _ in range(60):
            user = rng.choice(users)
            pick = rng.random()
            if pick < 0.4:
                intent = SelectRole(user, rng.choice([BLADE, KNIGHT]))
            elif pick < 0.8:
                intent = ToggleJoin(user)
            else:
                intent = Kick(CREATOR, user)
            try:
                r, _ = engine.apply(r, intent)
            except (RosterFull, SelfKick):
                pass
            assert_dungeon_invariants(r)
