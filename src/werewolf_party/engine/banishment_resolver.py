"""Day vote resolution - eliminates one living player."""

import logging
import random
from typing import Optional

from werewolf_party.engine.vote_tally import VoteTally
from werewolf_party.events.game_events import Banishment
from werewolf_party.models.room import Room


logger = logging.getLogger(__name__)


def begin_voting(room: Room) -> None:
    """Clear the previous tally before day votes are collected."""
    room.clear_tally()


class BanishmentResolver:
    """Resolves the day vote over all living players.

    Unlike the raid, the pool includes werewolves: a living werewolf can be
    executed by lot when nobody voted.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng

    def resolve(self, room: Room) -> Optional[Banishment]:
        """Apply the day vote to room in place.

        Returns:
            Banishment, or None if no player is alive to be eliminated.
        """
        tally = VoteTally(room.votes, rng=self._rng)
        result = tally.resolve(room.living_ids())
        if result is None:
            logger.warning("Room %s: nobody alive to banish", room.room_id)
            return None

        room.get_player(result.target).is_alive = False
        logger.info("Room %s: %s banished (by_vote=%s)", room.room_id, result.target, result.by_vote)
        return Banishment(
            room_id=room.room_id,
            day=room.day,
            target=result.target,
            votes=result.counts,
            tied_players=result.tied,
            by_vote=result.by_vote,
        )
