"""Engine exceptions.

Validation failures are raised inside a locked room update and converted
into an ActionResult at the public boundary, so callers only ever see a
one-line reason. Store failures are not wrapped and propagate as-is.
"""


class EngineError(Exception):
    """Base class for expected, player-facing failures."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ActionRejected(EngineError):
    """The action is invalid in the current state; nothing was changed."""


class AlreadyActed(EngineError):
    """The player already used their vote or skill this sub-phase."""
