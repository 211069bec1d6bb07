"""Event types for round outcomes."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from werewolf_party.models.player import Faction


class GameEvent(BaseModel):
    """Base class for all round events."""

    timestamp: str = Field(default_factory=lambda: datetime.now().isoformat())
    room_id: str
    day: int = 0

    def announcement(self) -> str:
        """One-line text for the room channel."""
        raise NotImplementedError

    def __str__(self) -> str:
        return f"{self.__class__.__name__}(room={self.room_id}, day={self.day})"


class Banishment(GameEvent):
    """A living player was eliminated by the day vote."""

    target: str
    votes: dict[str, int] = Field(default_factory=dict)  # target -> count
    tied_players: list[str] = Field(default_factory=list)
    by_vote: bool = True  # False when nobody voted and the target was drawn

    def announcement(self) -> str:
        reason = "By vote" if self.by_vote else "Nobody voted, so by lot"
        return f"{reason}, <@{self.target}> has been executed."

    def __str__(self) -> str:
        return f"Banishment(day={self.day}, target={self.target}, by_vote={self.by_vote})"


class NightOutcome(GameEvent):
    """Result of the werewolf raid."""

    target: Optional[str] = None
    attack_failed: bool = False

    @property
    def killed(self) -> Optional[str]:
        if self.target is None or self.attack_failed:
            return None
        return self.target

    def announcement(self) -> str:
        if self.killed is None:
            return "Nobody was attacked last night."
        return f"<@{self.killed}> was attacked last night."

    def __str__(self) -> str:
        return f"NightOutcome(day={self.day}, target={self.target}, failed={self.attack_failed})"


class GameOver(GameEvent):
    """The round ended."""

    winner: Optional[Faction] = None  # None = no decision could be computed

    def announcement(self) -> str:
        if self.winner == Faction.WEREWOLF:
            return "The werewolves win!"
        if self.winner == Faction.TOWN:
            return "The town wins!"
        return "The game is over."
