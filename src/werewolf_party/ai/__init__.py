"""AI package - stub players."""

from werewolf_party.ai.stub_ai import StubPlayer, StubTable

__all__ = ["StubPlayer", "StubTable"]
