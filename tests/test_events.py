"""Tests de l'expiration d'un roster dont le message a été supprimé."""

import asyncio
from dataclasses import replace

from core.roster.dispatcher import RosterDispatcher
from core.roster.errors import RosterInactive
from core.roster.models import Join
from core.roster.store import MemoryRosterStore
from events.rosters import expire_deleted


class TestDeletedMessage:
    def test_deleting_the_message_expires_the_roster(self, dungeon):
        """Le roster devient inactif et refuse les clics suivants."""

        async def scenario():
            dispatcher = RosterDispatcher(MemoryRosterStore())
            await dispatcher.create(dungeon)
            expired = await expire_deleted(dispatcher, dungeon.id)
            try:
                await dispatcher.submit(dungeon.id, Join(5))
            except RosterInactive:
                refused = True
            else:
                refused = False
            return expired, await dispatcher.get(dungeon.id), refused

        expired, stored, refused = asyncio.run(scenario())
        assert expired is True
        assert stored.is_active is False
        assert refused is True

    def test_unrelated_or_closed_messages_are_ignored(self, siege):
        """Un message inconnu ou un roster déjà fermé ne change rien."""

        async def scenario():
            dispatcher = RosterDispatcher(MemoryRosterStore())
            await dispatcher.create(replace(siege, is_active=False))
            return (
                await expire_deleted(dispatcher, 12345),
                await expire_deleted(dispatcher, siege.id),
                (await dispatcher.get(siege.id)).version,
            )

        assert asyncio.run(scenario()) == (False, False, 0)
