"""RoomGateway - exclusive room updates and best-effort notifications.

Every read-modify-write of a room goes through edit(): the room lock is held
for the whole update, the body works on a private copy, and the copy is
written back in a single put only if the body finishes without raising.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from werewolf_party.engine.keyed_locks import KeyedLocks
from werewolf_party.engine.role_assignment import format_composition
from werewolf_party.errors import ActionRejected
from werewolf_party.models import Room
from werewolf_party.ports import (
    MessageRefResolver,
    NotificationPort,
    PlayerStore,
    RoomDisplay,
    RoomStore,
)


logger = logging.getLogger(__name__)


def build_display(room: Room) -> RoomDisplay:
    """Room state for the persistent status display."""
    return RoomDisplay(
        room_id=room.room_id,
        owner_id=room.owner_id,
        status=room.status,
        max_players=room.config.max_players,
        show_vote_targets=room.config.show_vote_targets,
        composition=format_composition(room.config, len(room.players)),
        members=[p.player_id for p in room.players],
        deleted=room.deleted,
    )


class RoomGateway:
    """Shared access to stores, locks and outbound ports."""

    def __init__(
        self,
        rooms: RoomStore,
        players: PlayerStore,
        notifier: NotificationPort,
        displays: Optional[MessageRefResolver] = None,
    ):
        self.rooms = rooms
        self.players = players
        self.notifier = notifier
        self.displays = displays
        self.room_locks = KeyedLocks()
        self.player_locks = KeyedLocks()

    async def load(self, room_id: str) -> Optional[Room]:
        """Read a live (not deleted) room without locking."""
        room = await self.rooms.get(room_id)
        if room is None or room.deleted:
            return None
        return room

    @asynccontextmanager
    async def edit(self, room_id: str) -> AsyncIterator[Room]:
        """Lock, load and yield a room; persist it if the body succeeds.

        Raises:
            ActionRejected: The room does not exist or was deleted.
        """
        async with self.room_locks(room_id):
            room = await self.load(room_id)
            if room is None:
                raise ActionRejected("Room not found.")
            yield room
            await self.rooms.put(room)

    async def announce(
        self,
        channel_id: str,
        text: str,
        elements: Optional[list[str]] = None,
    ) -> None:
        """Send an announcement; failures are logged, never raised."""
        try:
            await self.notifier.announce(channel_id, text, elements)
        except Exception:
            logger.exception("Announcement to channel %s failed", channel_id)

    async def refresh_display(self, room_id: str) -> None:
        """Push the stored state of a room to its status display.

        The room is reloaded and rendered under its lock, so overlapping
        refreshes always end on the latest committed state. Deleted rooms
        are rendered too (the display shows the deletion notice).
        """
        if self.displays is None:
            return
        async with self.room_locks(room_id):
            room = await self.rooms.get(room_id)
            if room is None or room.top_message_ref is None:
                return
            try:
                handle = await self.displays.resolve(room.top_message_ref)
                if handle is None:
                    logger.info("Room %s: status display %s is gone", room_id, room.top_message_ref)
                    return
                await self.displays.update(handle, build_display(room))
            except Exception:
                logger.exception("Room %s: status display update failed", room_id)
