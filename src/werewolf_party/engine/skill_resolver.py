"""Skill resolution - role ability dispatch for the voting and night phases.

Skills by role:
- SEER: learns whether a living player is a werewolf (voting or night)
- HUNTER: guards a living player against tonight's raid (night only)
- WEREWOLF: casts the raid vote (night only)
- MEDIUM, LUNATIC, FOX: reserved, no skill yet
- VILLAGER, UNASSIGNED: no skill

Each actor may use their skill once per sub-phase.
"""

import logging
from typing import Callable

from werewolf_party.engine.vote_tally import VoteTally
from werewolf_party.errors import ActionRejected, AlreadyActed
from werewolf_party.models.player import Player, Role
from werewolf_party.models.room import Room, RoomStatus


logger = logging.getLogger(__name__)

SKILL_PHASES = (RoomStatus.VOTING, RoomStatus.NIGHT)


class SkillResolver:
    """Dispatches a skill use to the handler for the actor's role."""

    def __init__(self) -> None:
        self._handlers: dict[Role, Callable[[Room, Player, Player], str]] = {
            Role.SEER: self._divine,
            Role.HUNTER: self._guard,
            Role.WEREWOLF: self._raid,
            Role.MEDIUM: self._reserved,
            Role.LUNATIC: self._reserved,
            Role.FOX: self._reserved,
            Role.VILLAGER: self._no_skill,
            Role.UNASSIGNED: self._no_skill,
        }

    def resolve(self, room: Room, actor_id: str, target_id: str) -> str:
        """Use actor_id's skill on target_id, mutating room in place.

        Raises:
            ActionRejected: The skill cannot be used now or on this target.
            AlreadyActed: The actor already used a skill this sub-phase.

        Returns:
            Human-readable result for the actor.
        """
        if room.status not in SKILL_PHASES:
            raise ActionRejected("Skills can only be used during voting or at night.")

        actor = room.get_player(actor_id)
        if actor is None or not actor.is_alive:
            raise ActionRejected("You are dead or have no role.")

        target = room.get_player(target_id)
        if target is None:
            raise ActionRejected("That player is not in this room.")

        handler = self._handlers[actor.role]
        return handler(room, actor, target)

    def _require_fresh(self, room: Room, actor: Player) -> None:
        if actor.player_id in room.skill_uses:
            raise AlreadyActed("You have already used your skill.")

    def _divine(self, room: Room, actor: Player, target: Player) -> str:
        if actor.player_id == target.player_id:
            raise ActionRejected("You cannot divine yourself.")
        if not target.is_alive:
            raise ActionRejected("That player is already dead.")
        self._require_fresh(room, actor)

        room.skill_uses[actor.player_id] = target.player_id
        verdict = "a werewolf" if target.is_black else "not a werewolf"
        return f"Divination: <@{target.player_id}> is {verdict}."

    def _guard(self, room: Room, actor: Player, target: Player) -> str:
        if room.status != RoomStatus.NIGHT:
            raise ActionRejected("You can only guard at night.")
        if actor.player_id == target.player_id:
            raise ActionRejected("You cannot guard yourself.")
        if not target.is_alive:
            raise ActionRejected("That player is already dead.")
        self._require_fresh(room, actor)

        room.skill_uses[actor.player_id] = target.player_id
        target.is_guarded = True
        logger.info("Room %s: %s guarded", room.room_id, target.player_id)
        return f"You are guarding <@{target.player_id}>."

    def _raid(self, room: Room, actor: Player, target: Player) -> str:
        if room.status != RoomStatus.NIGHT:
            raise ActionRejected("You can only raid at night.")
        if target.role == Role.WEREWOLF:
            raise ActionRejected("You cannot attack a werewolf.")
        if not target.is_alive:
            raise ActionRejected("That player is already dead.")

        if not VoteTally(room.votes).cast(actor.player_id, target.player_id):
            raise AlreadyActed("You have already voted.")
        return f"You voted to attack <@{target.player_id}>."

    def _reserved(self, room: Room, actor: Player, target: Player) -> str:
        raise ActionRejected(f"The {actor.role.label} skill is not available yet.")

    def _no_skill(self, room: Room, actor: Player, target: Player) -> str:
        raise ActionRejected("Your role has no skill to use.")
