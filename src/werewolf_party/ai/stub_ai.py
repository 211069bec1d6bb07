"""Stub players that act randomly but always validly.

Useful for:
- The local demo (a full room without real people)
- Integration tests of the complete round flow

StubTable is passed to the engine as its phase hook; on every voting or
night phase each living bot picks a random valid target for its role.
"""

import random
from typing import Optional, TYPE_CHECKING

from werewolf_party.engine.results import ActionResult
from werewolf_party.models import Role, Room, RoomStatus
from werewolf_party.ports import RoomStore

if TYPE_CHECKING:
    from werewolf_party.engine.game_engine import GameEngine


class StubPlayer:
    """A bot seat in a room."""

    def __init__(self, player_id: str, seed: Optional[int] = None):
        self.player_id = player_id
        self._rng = random.Random(seed)
        self.results: list[ActionResult] = []

    def choose_target(self, room: Room, status: RoomStatus) -> Optional[str]:
        """Pick a valid target for this phase, or None to pass."""
        me = room.get_player(self.player_id)
        if me is None or not me.is_alive:
            return None

        others = [p for p in room.living_players if p.player_id != self.player_id]
        if status == RoomStatus.NIGHT:
            if me.role == Role.WEREWOLF:
                others = [p for p in others if p.role != Role.WEREWOLF]
            elif me.role not in (Role.HUNTER, Role.SEER):
                return None
        elif status != RoomStatus.VOTING:
            return None

        if not others:
            return None
        return self._rng.choice(others).player_id

    async def act(self, engine: "GameEngine", room: Room, status: RoomStatus) -> None:
        target = self.choose_target(room, status)
        if target is None:
            return
        if status == RoomStatus.VOTING:
            self.results.append(await engine.cast_vote(self.player_id, target))
        else:
            self.results.append(await engine.cast_night_action(self.player_id, target))


class StubTable:
    """Phase hook that lets every registered bot act."""

    def __init__(self, rooms: RoomStore):
        self._rooms = rooms
        self.bots: dict[str, StubPlayer] = {}
        self.engine: Optional["GameEngine"] = None

    def seat(self, bot: StubPlayer) -> None:
        self.bots[bot.player_id] = bot

    async def __call__(self, room_id: str, status: RoomStatus) -> None:
        if self.engine is None or status not in (RoomStatus.VOTING, RoomStatus.NIGHT):
            return
        room = await self._rooms.get(room_id)
        if room is None:
            return
        for player in room.players:
            bot = self.bots.get(player.player_id)
            if bot is not None:
                await bot.act(self.engine, room, status)
