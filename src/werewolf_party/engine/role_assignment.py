"""Secret role dealing from room quotas."""

import random
from collections import Counter
from typing import Optional

from werewolf_party.models.player import Player, Role
from werewolf_party.models.room import RoomConfig


def build_role_pool(config: RoomConfig, player_count: int) -> list[Role]:
    """Build the flat list of roles to deal.

    Every non-zero quota contributes that many copies, the rest of the seats
    are villagers, and the pool is truncated to player_count when the quotas
    ask for more roles than there are players.

    Args:
        config: Room configuration holding the role quotas.
        player_count: Number of players to deal to.

    Returns:
        List of exactly player_count roles, unshuffled.
    """
    roles: list[Role] = []
    for role, count in config.quotas().items():
        if count > 0:
            roles.extend([role] * count)

    if len(roles) < player_count:
        roles.extend([Role.VILLAGER] * (player_count - len(roles)))

    return roles[:player_count]


def assign_roles(
    players: list[Player],
    config: RoomConfig,
    rng: Optional[random.Random] = None,
) -> list[Player]:
    """Deal roles to players in place.

    Players and roles are shuffled independently, then paired by position.
    Werewolves are marked black for the seer.

    Args:
        players: Room members; reordered by the shuffle.
        config: Room configuration holding the role quotas.
        rng: Random source. Defaults to SystemRandom so that the pairing
            cannot be reconstructed from a seed.

    Returns:
        The same list, shuffled, with every player holding a role.
    """
    rng = rng or random.SystemRandom()
    roles = build_role_pool(config, len(players))

    rng.shuffle(players)
    rng.shuffle(roles)

    for player, role in zip(players, roles):
        player.role = role
        player.is_black = role == Role.WEREWOLF

    return players


def role_composition(config: RoomConfig, player_count: int) -> dict[Role, int]:
    """Role counts a room of player_count players would be dealt."""
    counts = Counter(build_role_pool(config, player_count))
    ordered = [Role.VILLAGER, *config.quotas().keys()]
    return {role: counts[role] for role in ordered if counts[role] > 0}


def format_composition(config: RoomConfig, player_count: int) -> str:
    """Render role_composition as one line per role."""
    if player_count == 0:
        return "Unknown"
    composition = role_composition(config, player_count)
    return "\n".join(f"{role.label}: {count}" for role, count in composition.items())


def describe_config(config: RoomConfig) -> str:
    """Render the configurable room settings, one per line."""
    max_players = "unlimited" if config.max_players == 0 else str(config.max_players)
    visibility = "public" if config.show_vote_targets else "hidden"
    lines = [
        f"Max players: {max_players}",
        f"Vote targets: {visibility}",
        f"Villagers: {config.villagers}",
        f"Seers: {config.seers}",
        f"Hunters: {config.hunters}",
        f"Werewolves: {config.werewolves}",
        f"Lunatics: {config.lunatics}",
    ]
    return "\n".join(lines)
