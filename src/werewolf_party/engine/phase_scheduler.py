"""PhaseScheduler - drives one room through a complete round.

Round flow:
1. Processing: role reveal (roles were dealt when the game was started)
2. Discussion: timed, chat open, countdown reminders
3. Voting: timed, day votes collected, one living player eliminated
4. Night: timed, guards and raid votes collected, raid resolved at dawn
5. Repeat 2-4 until a faction wins, then End -> Recruitment

The victory check runs right after every elimination and may skip the rest
of the cycle. Each round is one asyncio task; concurrently running rooms
never share state. The room lock is only held for each individual update,
never across a timed window.
"""

import asyncio
import logging
import random
from typing import Awaitable, Callable, Optional

from werewolf_party.engine.banishment_resolver import BanishmentResolver, begin_voting
from werewolf_party.engine.night_action_resolver import NightActionResolver, begin_night
from werewolf_party.engine.role_assignment import format_composition
from werewolf_party.engine.room_gateway import RoomGateway
from werewolf_party.engine.victory import check_victory
from werewolf_party.events.game_events import Banishment, GameOver, NightOutcome
from werewolf_party.models import Faction, Room, RoomStatus
from werewolf_party.settings import EngineSettings, Reminder


logger = logging.getLogger(__name__)

# Interactive element offered with the role reveal announcement
ROLE_CHECK_ELEMENT = "check_role"

PhaseHook = Callable[[str, RoomStatus], Awaitable[None]]


class PhaseScheduler:
    """Runs the phase state machine of a room."""

    def __init__(
        self,
        gateway: RoomGateway,
        settings: EngineSettings,
        rng: Optional[random.Random] = None,
        on_phase: Optional[PhaseHook] = None,
    ):
        """Initialize the scheduler.

        Args:
            gateway: Locked room access and outbound ports.
            settings: Phase timings and the round cap.
            rng: Random source for tie-breaks and draws.
            on_phase: Optional callback fired after every status change,
                outside the room lock. Failures are logged and ignored.
        """
        self._gateway = gateway
        self._settings = settings
        self._banishment = BanishmentResolver(rng=rng)
        self._night = NightActionResolver(rng=rng)
        self._on_phase = on_phase

    async def run(self, room_id: str) -> GameOver:
        """Run a started room until the round ends.

        The room must already be in PROCESSING with roles dealt.

        Returns:
            GameOver with the winning faction (None if no decision was reached).
        """
        timings = self._settings.timings
        room = await self._gateway.load(room_id)
        if room is None:
            raise LookupError(f"Room {room_id} not found")
        channel = room.channel_id

        await self._reveal_roles(room)
        await self._fire_hook(room_id, RoomStatus.PROCESSING)
        await asyncio.sleep(timings.role_reveal)

        winner = await self._check_victory(room_id)
        rounds = 0

        while winner is None:
            if rounds >= self._settings.max_rounds:
                logger.warning("Room %s: round cap of %d reached", room_id, rounds)
                break
            rounds += 1

            # Discussion
            await self._transition(room_id, RoomStatus.DISCUSSION, _next_day)
            await self._gateway.announce(channel, "**Discussion has started!**\nYou can chat now.")
            await self._run_window(channel, timings.discussion, timings.discussion_tail)

            # Voting
            await self._transition(room_id, RoomStatus.VOTING, begin_voting)
            await self._gateway.announce(
                channel,
                f"Voting has started ({_window_length(timings.voting, timings.voting_tail)}s)."
                " Use /vote to vote.",
            )
            await self._run_window(channel, timings.voting, timings.voting_tail)

            banishment = await self._resolve_day(room_id)
            if banishment is None:
                logger.error("Room %s: day vote had no eligible target", room_id)
                break
            await self._gateway.announce(channel, banishment.announcement())

            winner = await self._check_victory(room_id)
            if winner is not None:
                break

            # Night
            await self._transition(room_id, RoomStatus.NIGHT, begin_night)
            await self._gateway.announce(
                channel,
                f"Night has fallen ({_window_length(timings.night, timings.night_tail)}s).",
            )
            await self._run_window(channel, timings.night, timings.night_tail)

            # Dawn recap
            await self._gateway.announce(channel, "Dawn has come.")
            outcome = await self._resolve_night(room_id)
            await self._fire_hook(room_id, RoomStatus.PROCESSING)
            await self._gateway.announce(channel, outcome.announcement())

            winner = await self._check_victory(room_id)

        return await self._finish(room_id, channel, winner)

    async def _reveal_roles(self, room: Room) -> None:
        channel = room.channel_id
        mentions = " ".join(f"<@{p.player_id}>" for p in room.players)
        await self._gateway.announce(channel, f"### The game has started!\n{mentions}")
        await self._gateway.refresh_display(room.room_id)
        await self._gateway.announce(
            channel,
            "Use the button below to check your role.",
            [ROLE_CHECK_ELEMENT],
        )
        await self._gateway.announce(channel, format_composition(room.config, len(room.players)))
        await self._gateway.announce(
            channel,
            f"**You cannot chat yet**\nDiscussion starts in {self._settings.timings.role_reveal:g} seconds.",
        )

    async def _run_window(self, channel: str, reminders: list[Reminder], tail: float) -> None:
        """Wait through a timed window, announcing each reminder."""
        for reminder in reminders:
            await asyncio.sleep(reminder.after)
            await self._gateway.announce(channel, reminder.text)
        await asyncio.sleep(tail)

    async def _transition(
        self,
        room_id: str,
        status: RoomStatus,
        prepare: Optional[Callable[[Room], None]] = None,
    ) -> None:
        async with self._gateway.edit(room_id) as room:
            room.status = status
            if prepare is not None:
                prepare(room)
        logger.info("Room %s: day %d, %s", room_id, room.day, status.value)
        await self._fire_hook(room_id, status)

    async def _resolve_day(self, room_id: str) -> Optional[Banishment]:
        async with self._gateway.edit(room_id) as room:
            return self._banishment.resolve(room)

    async def _resolve_night(self, room_id: str) -> NightOutcome:
        async with self._gateway.edit(room_id) as room:
            room.status = RoomStatus.PROCESSING
            return self._night.resolve(room)

    async def _check_victory(self, room_id: str) -> Optional[Faction]:
        """Evaluate victory; on a decision the room moves to END."""
        async with self._gateway.edit(room_id) as room:
            winner = check_victory(room.players)
            if winner is not None:
                room.status = RoomStatus.END
        if winner is not None:
            logger.info("Room %s: %s victory", room_id, winner.value)
        return winner

    async def _finish(self, room_id: str, channel: str, winner: Optional[Faction]) -> GameOver:
        async with self._gateway.edit(room_id) as room:
            room.status = RoomStatus.END
            room.clear_tally()
        await self._fire_hook(room_id, RoomStatus.END)

        game_over = GameOver(room_id=room_id, day=room.day, winner=winner)
        if winner is None:
            logger.warning("Room %s: round ended without a winner", room_id)
        await self._gateway.announce(channel, game_over.announcement())

        async with self._gateway.edit(room_id) as room:
            room.status = RoomStatus.RECRUITMENT
        await self._gateway.refresh_display(room_id)
        await self._fire_hook(room_id, RoomStatus.RECRUITMENT)
        return game_over

    async def _fire_hook(self, room_id: str, status: RoomStatus) -> None:
        if self._on_phase is None:
            return
        try:
            await self._on_phase(room_id, status)
        except Exception:
            logger.exception("Room %s: phase hook failed on %s", room_id, status.value)


def _next_day(room: Room) -> None:
    room.day += 1


def _window_length(reminders: list[Reminder], tail: float) -> str:
    return f"{sum(r.after for r in reminders) + tail:g}"
