"""Store package - reference implementations of the store ports."""

from werewolf_party.store.memory import InMemoryRoomStore, InMemoryPlayerStore

__all__ = [
    "InMemoryRoomStore",
    "InMemoryPlayerStore",
]
