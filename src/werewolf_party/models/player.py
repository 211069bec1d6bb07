"""Player and Role models."""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class Role(str, Enum):
    """Player roles in the game.

    MEDIUM, LUNATIC and FOX are reserved: they can be assigned through the
    room quotas but have no skill and no faction yet.
    """

    VILLAGER = "villager"
    WEREWOLF = "werewolf"
    SEER = "seer"
    MEDIUM = "medium"
    HUNTER = "hunter"
    LUNATIC = "lunatic"
    FOX = "fox"
    UNASSIGNED = "unassigned"

    @property
    def label(self) -> str:
        """Display name used in announcements."""
        return self.value.capitalize()

    @property
    def faction(self) -> Optional["Faction"]:
        """Faction counted by the victory check, None for reserved roles."""
        if self == Role.WEREWOLF:
            return Faction.WEREWOLF
        if self in TOWN_ROLES:
            return Faction.TOWN
        return None

    @property
    def is_reserved(self) -> bool:
        return self in RESERVED_ROLES


class Faction(str, Enum):
    """Factions for victory conditions."""

    WEREWOLF = "WEREWOLF"
    TOWN = "TOWN"


TOWN_ROLES = frozenset({Role.VILLAGER, Role.SEER, Role.MEDIUM, Role.HUNTER})
RESERVED_ROLES = frozenset({Role.MEDIUM, Role.LUNATIC, Role.FOX})


class Player(BaseModel):
    """A member of one room.

    player_id is the platform-wide identity; everything else is round state.
    """

    player_id: str
    role: Role = Role.UNASSIGNED
    is_alive: bool = True
    is_guarded: bool = False
    is_black: bool = False  # werewolf-detectable by the seer

    def reset_for_round(self) -> None:
        """Restore the state a member has before roles are dealt."""
        self.role = Role.UNASSIGNED
        self.is_alive = True
        self.is_guarded = False
        self.is_black = False

    def to_dict(self) -> dict:
        """Convert to dictionary, hiding secret info."""
        return {
            "player_id": self.player_id,
            "is_alive": self.is_alive,
        }


class PlayerProfile(BaseModel):
    """Registry record for a person, independent of any room."""

    user_id: str
    nick: Optional[str] = None
    admin: bool = False
    banned: bool = False
    created_at: datetime = Field(default_factory=datetime.now)
    joined_room_id: Optional[str] = None
    exp: int = 0
