"""Engine settings: phase timings and room limits."""

import os
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field


class Reminder(BaseModel):
    """Announcement sent after waiting `after` seconds into a window."""

    after: float = Field(ge=0)
    text: str


class PhaseTimings(BaseModel):
    """Wall-clock lengths of the timed windows, in seconds.

    A window is a sequence of wait-then-announce reminders followed by a
    final wait; reminders are fixed offsets, not reactions to game events.
    """

    role_reveal: float = 15
    discussion: list[Reminder] = Field(default_factory=lambda: [
        Reminder(after=60, text="4 minutes left"),
        Reminder(after=60, text="3 minutes left"),
        Reminder(after=60, text="2 minutes left"),
        Reminder(after=60, text="1 minute left"),
        Reminder(after=30, text="30 seconds left"),
        Reminder(after=15, text="15 seconds left"),
    ])
    discussion_tail: float = 15
    voting: list[Reminder] = Field(default_factory=list)
    voting_tail: float = 60
    night: list[Reminder] = Field(default_factory=lambda: [
        Reminder(after=50, text="10 seconds left"),
    ])
    night_tail: float = 10

    def scaled(self, factor: float) -> "PhaseTimings":
        """Copy with every wait multiplied by factor (0 = no waiting)."""
        def scale(reminders: list[Reminder]) -> list[Reminder]:
            return [Reminder(after=r.after * factor, text=r.text) for r in reminders]

        return PhaseTimings(
            role_reveal=self.role_reveal * factor,
            discussion=scale(self.discussion),
            discussion_tail=self.discussion_tail * factor,
            voting=scale(self.voting),
            voting_tail=self.voting_tail * factor,
            night=scale(self.night),
            night_tail=self.night_tail * factor,
        )


class EngineSettings(BaseModel):
    """Tunable engine parameters."""

    prefix: str = "!"
    min_players: int = Field(default=3, ge=1)
    max_rounds: int = Field(default=20, ge=1)  # cap on discussion/voting/night cycles
    room_id_length: int = Field(default=6, ge=4)
    timings: PhaseTimings = Field(default_factory=PhaseTimings)


def load_settings(env_file: Optional[str] = None) -> EngineSettings:
    """Build settings from the environment (and a .env file if present).

    Recognized variables: WEREWOLF_PREFIX, WEREWOLF_MIN_PLAYERS,
    WEREWOLF_MAX_ROUNDS, WEREWOLF_TIME_SCALE.

    Raises:
        pydantic.ValidationError: A variable holds an invalid value.
    """
    load_dotenv(env_file)

    overrides: dict[str, Any] = {}
    if os.getenv("WEREWOLF_PREFIX"):
        overrides["prefix"] = os.environ["WEREWOLF_PREFIX"]
    if os.getenv("WEREWOLF_MIN_PLAYERS"):
        overrides["min_players"] = os.environ["WEREWOLF_MIN_PLAYERS"]
    if os.getenv("WEREWOLF_MAX_ROUNDS"):
        overrides["max_rounds"] = os.environ["WEREWOLF_MAX_ROUNDS"]
    if os.getenv("WEREWOLF_TIME_SCALE"):
        overrides["timings"] = PhaseTimings().scaled(float(os.environ["WEREWOLF_TIME_SCALE"]))

    return EngineSettings(**overrides)
