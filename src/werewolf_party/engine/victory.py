"""Victory check, run after every elimination."""

from typing import Optional

from werewolf_party.models.player import Faction, Player


def count_factions(players: list[Player]) -> tuple[int, int]:
    """Count living werewolves and living town members.

    Reserved roles (lunatic, fox) belong to neither side.

    Returns:
        Tuple of (werewolf_count, town_count)
    """
    werewolves = 0
    town = 0
    for player in players:
        if not player.is_alive:
            continue
        faction = player.role.faction
        if faction == Faction.WEREWOLF:
            werewolves += 1
        elif faction == Faction.TOWN:
            town += 1
    return werewolves, town


def check_victory(players: list[Player]) -> Optional[Faction]:
    """Decide whether a faction has won.

    - Town wins when no werewolf is alive
    - Werewolves win when living werewolves >= living town members

    Returns:
        The winning Faction, or None if the round continues.
    """
    werewolves, town = count_factions(players)

    if werewolves == 0:
        return Faction.TOWN

    if werewolves >= town:
        return Faction.WEREWOLF

    return None
