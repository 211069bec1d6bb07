"""Night action resolution - applies the guard and the werewolf raid."""

import logging
import random
from typing import Optional

from werewolf_party.engine.vote_tally import VoteTally
from werewolf_party.events.game_events import NightOutcome
from werewolf_party.models.room import Room


logger = logging.getLogger(__name__)


def begin_night(room: Room) -> None:
    """Reset the night tally and every guard before actions are collected."""
    room.clear_tally()
    for player in room.players:
        player.is_guarded = False


class NightActionResolver:
    """Resolves the werewolf raid against the guards already in place.

    Resolution order:
    1. Guards are set by hunters during the night and persisted immediately
    2. Raid target is resolved from the werewolves' votes over living
       non-werewolves (werewolves are never a raid target, not even by lot)
    3. A guarded target survives, anyone else dies
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng

    def resolve(self, room: Room) -> NightOutcome:
        """Apply the raid to room in place.

        Args:
            room: Room in its end-of-night state (votes hold raid votes).

        Returns:
            NightOutcome with the target (None if nobody could be attacked)
            and whether the attack failed on a guard.
        """
        tally = VoteTally(room.votes, rng=self._rng)
        result = tally.resolve(room.raid_targets())

        if result is None:
            logger.warning("Room %s: no raid target available", room.room_id)
            room.votes = {}
            return NightOutcome(room_id=room.room_id, day=room.day)

        target = room.get_player(result.target)
        if target.is_guarded:
            logger.info("Room %s: raid on %s blocked by guard", room.room_id, target.player_id)
            return NightOutcome(
                room_id=room.room_id,
                day=room.day,
                target=target.player_id,
                attack_failed=True,
            )

        target.is_alive = False
        logger.info("Room %s: %s killed in raid", room.room_id, target.player_id)
        return NightOutcome(room_id=room.room_id, day=room.day, target=target.player_id)
