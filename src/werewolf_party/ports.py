"""Collaborator interfaces the engine is wired to.

The engine only needs keyed get/put for rooms and player profiles, a one-way
announcement channel, and a way to keep one status display per room up to
date. Implementations live outside the engine (a chat platform adapter, a
database); store/ and notify/ hold reference implementations.
"""

from typing import Any, Optional, Protocol

from pydantic import BaseModel, Field

from werewolf_party.models import PlayerProfile, Room, RoomStatus


class RoomDisplay(BaseModel):
    """Room state handed to the status display renderer."""

    room_id: str
    owner_id: str
    status: RoomStatus
    max_players: int
    show_vote_targets: bool
    composition: str
    members: list[str] = Field(default_factory=list)
    deleted: bool = False


class RoomStore(Protocol):
    """Keyed room records."""

    async def get(self, room_id: str) -> Optional[Room]:
        ...

    async def put(self, room: Room) -> None:
        ...


class PlayerStore(Protocol):
    """Keyed player profiles."""

    async def get(self, user_id: str) -> Optional[PlayerProfile]:
        ...

    async def put(self, profile: PlayerProfile) -> None:
        ...


class NotificationPort(Protocol):
    """Fire-and-forget announcements to a room's channel."""

    async def announce(
        self,
        channel_id: str,
        text: str,
        elements: Optional[list[str]] = None,
    ) -> None:
        """Send text to the channel.

        Args:
            channel_id: Channel the room plays in.
            text: Message body.
            elements: Optional interactive element ids (e.g. a role-check button).
        """
        ...


class MessageRefResolver(Protocol):
    """Keeps the persistent room status display in sync."""

    async def resolve(self, ref: str) -> Optional[Any]:
        """Return an updatable handle for ref, or None if it is gone."""
        ...

    async def update(self, handle: Any, display: RoomDisplay) -> None:
        ...
