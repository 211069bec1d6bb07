"""Room, room configuration and status models."""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from werewolf_party.models.player import Player, Role


class RoomStatus(str, Enum):
    """Room lifecycle states.

    recruitment -> processing -> (discussion -> voting -> night -> processing)*
    -> end -> recruitment
    """

    RECRUITMENT = "recruitment"
    PROCESSING = "processing"
    DISCUSSION = "discussion"
    VOTING = "voting"
    NIGHT = "night"
    END = "end"


# Config key -> role it sets a quota for
QUOTA_ROLES: dict[str, Role] = {
    "werewolves": Role.WEREWOLF,
    "seers": Role.SEER,
    "mediums": Role.MEDIUM,
    "hunters": Role.HUNTER,
    "lunatics": Role.LUNATIC,
    "foxes": Role.FOX,
}


class RoomConfig(BaseModel):
    """Role quotas and room policies.

    Quotas are soft upper bounds: missing seats are padded with villagers and
    surplus quota is truncated when roles are dealt.
    """

    max_players: int = Field(default=0, ge=0)  # 0 = unlimited
    show_vote_targets: bool = False
    villagers: int = Field(default=0, ge=0)
    werewolves: int = Field(default=0, ge=0)
    seers: int = Field(default=0, ge=0)
    mediums: int = Field(default=0, ge=0)
    hunters: int = Field(default=0, ge=0)
    lunatics: int = Field(default=0, ge=0)
    foxes: int = Field(default=0, ge=0)

    model_config = ConfigDict(validate_assignment=True)

    def quotas(self) -> dict[Role, int]:
        """Non-villager quotas in dealing order."""
        return {role: getattr(self, key) for key, role in QUOTA_ROLES.items()}

    def is_full(self, player_count: int) -> bool:
        return self.max_players != 0 and player_count >= self.max_players


class Room(BaseModel):
    """One game session: roster, configuration and phase state."""

    room_id: str
    owner_id: str
    channel_id: str
    status: RoomStatus = RoomStatus.RECRUITMENT
    config: RoomConfig = Field(default_factory=RoomConfig)
    players: list[Player] = Field(default_factory=list)
    votes: dict[str, list[str]] = Field(default_factory=dict)  # target -> voters
    skill_uses: dict[str, str] = Field(default_factory=dict)  # actor -> target
    day: int = 0
    top_message_ref: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.now)
    deleted: bool = False

    def get_player(self, player_id: str) -> Optional[Player]:
        for player in self.players:
            if player.player_id == player_id:
                return player
        return None

    def is_member(self, player_id: str) -> bool:
        return self.get_player(player_id) is not None

    @property
    def living_players(self) -> list[Player]:
        return [p for p in self.players if p.is_alive]

    def living_ids(self) -> list[str]:
        return [p.player_id for p in self.players if p.is_alive]

    def living_werewolves(self) -> list[Player]:
        return [p for p in self.players if p.is_alive and p.role == Role.WEREWOLF]

    def raid_targets(self) -> list[str]:
        """Living players the werewolves may attack."""
        return [p.player_id for p in self.players if p.is_alive and p.role != Role.WEREWOLF]

    def clear_tally(self) -> None:
        """Start a new voting or night sub-phase."""
        self.votes = {}
        self.skill_uses = {}
