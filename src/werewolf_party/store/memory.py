"""In-memory room and player stores.

Records are deep-copied on the way in and out, so a caller holding a record
never aliases the stored one. Per-room exclusivity is the engine's job (see
KeyedLocks); these stores only provide atomic point get/put.
"""

from typing import Optional

from werewolf_party.models import PlayerProfile, Room


class InMemoryRoomStore:
    """RoomStore backed by a dict."""

    def __init__(self) -> None:
        self._rooms: dict[str, Room] = {}

    async def get(self, room_id: str) -> Optional[Room]:
        room = self._rooms.get(room_id)
        return room.model_copy(deep=True) if room is not None else None

    async def put(self, room: Room) -> None:
        self._rooms[room.room_id] = room.model_copy(deep=True)

    def __contains__(self, room_id: str) -> bool:
        return room_id in self._rooms


class InMemoryPlayerStore:
    """PlayerStore backed by a dict."""

    def __init__(self) -> None:
        self._profiles: dict[str, PlayerProfile] = {}

    async def get(self, user_id: str) -> Optional[PlayerProfile]:
        profile = self._profiles.get(user_id)
        return profile.model_copy(deep=True) if profile is not None else None

    async def put(self, profile: PlayerProfile) -> None:
        self._profiles[profile.user_id] = profile.model_copy(deep=True)
