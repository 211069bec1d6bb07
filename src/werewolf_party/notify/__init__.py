"""Notify package - reference implementations of the outbound ports."""

from werewolf_party.notify.console import ConsoleNotifier

__all__ = [
    "ConsoleNotifier",
]
