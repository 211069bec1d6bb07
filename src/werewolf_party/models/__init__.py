"""Models package."""

from werewolf_party.models.player import (
    Role,
    Faction,
    Player,
    PlayerProfile,
    TOWN_ROLES,
    RESERVED_ROLES,
)
from werewolf_party.models.room import (
    Room,
    RoomConfig,
    RoomStatus,
    QUOTA_ROLES,
)

__all__ = [
    "Role",
    "Faction",
    "Player",
    "PlayerProfile",
    "TOWN_ROLES",
    "RESERVED_ROLES",
    "Room",
    "RoomConfig",
    "RoomStatus",
    "QUOTA_ROLES",
]
