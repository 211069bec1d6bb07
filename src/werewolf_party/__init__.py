"""Werewolf party game engine.

Room lifecycle, secret role dealing, the day/night phase state machine,
vote tallying, night action resolution and victory checks for a chat-based
Werewolf game. Rendering and the chat platform itself live outside.
"""

__version__ = "0.1.0"
