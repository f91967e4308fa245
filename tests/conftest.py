"""Configuration pytest et fixtures partagées."""

from typing import Iterable, List, Tuple

import pytest

from core.roster import engine
from core.roster.models import DungeonRoster, JobClass, Outcome, SiegeRoster, new_dungeon_run, new_siege

CREATOR = 1


@pytest.fixture
def siege() -> SiegeRoster:
    """Siège actif : 2 places Blade, 1 place Knight, aucune autre classe."""
    return new_siege(900, CREATOR, {JobClass.BLADE: 2, JobClass.KNIGHT: 1}, title="Siège test")


@pytest.fixture
def dungeon() -> DungeonRoster:
    """Dungeon run actif de 3 joueurs."""
    return new_dungeon_run(901, CREATOR, 3, title="Run test")


@pytest.fixture
def apply_all():
    """Applique des intentions en séquence ; renvoie l'état final et les outcomes."""

    def _apply(roster, intents: Iterable) -> Tuple[object, List[Outcome]]:
        outcomes = []
        for intent in intents:
            roster, outcome = engine.apply(roster, intent)
            outcomes.append(outcome)
        return roster, outcomes

    return _apply


@pytest.fixture
def assert_siege_invariants():
    def _check(r: SiegeRoster) -> None:
        # présent XOR absent
        assert not set(r.attending) & set(r.declined)
        seen = []
        for role, users in list(r.principals.items()) + list(r.waitlist.items()):
            assert len(users) == len(set(users))
            seen.extend(users)
        # un seul placement par joueur, principal ou en attente
        assert len(seen) == len(set(seen))
        for role, users in r.principals.items():
            # pas de sur-réservation
            assert len(users) <= r.slots(role)
        # placé implique présent
        assert set(seen) <= set(r.attending)

    return _check


@pytest.fixture
def assert_dungeon_invariants():
    def _check(r: DungeonRoster) -> None:
        # capacité
        assert len(r.participants) <= r.capacity
        assert len(r.participants) == len(set(r.participants))
        tagged = [u for users in r.role_of.values() for u in users]
        assert set(tagged) <= set(r.participants)
        # une étiquette max par joueur
        assert len(tagged) == len(set(tagged))

    return _check
