"""Events package."""

from werewolf_party.events.game_events import (
    GameEvent,
    Banishment,
    NightOutcome,
    GameOver,
)

__all__ = [
    "GameEvent",
    "Banishment",
    "NightOutcome",
    "GameOver",
]
