"""Plain result type returned by every inbound engine call."""

from enum import Enum
from typing import Any
from pydantic import BaseModel, Field

from werewolf_party.errors import AlreadyActed, EngineError


class Outcome(str, Enum):
    OK = "OK"
    REJECTED = "REJECTED"
    ALREADY_ACTED = "ALREADY_ACTED"


class ActionResult(BaseModel):
    """Outcome of one player action, with a human-readable message."""

    outcome: Outcome
    message: str
    data: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.outcome == Outcome.OK

    @classmethod
    def success(cls, message: str, **data: Any) -> "ActionResult":
        return cls(outcome=Outcome.OK, message=message, data=data)

    @classmethod
    def from_error(cls, error: EngineError) -> "ActionResult":
        outcome = Outcome.ALREADY_ACTED if isinstance(error, AlreadyActed) else Outcome.REJECTED
        return cls(outcome=outcome, message=error.message)

    def __str__(self) -> str:
        return self.message
