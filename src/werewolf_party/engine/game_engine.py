"""GameEngine - the inbound API the messaging layer calls.

One method per player verb. Every method takes plain ids and strings and
returns an ActionResult; validation failures never raise. Lock order is
player profile first, then room, for every call that touches both.
"""

import asyncio
import functools
import logging
import random
import string
from typing import Any, Awaitable, Callable, Optional

from pydantic import ValidationError

from werewolf_party.engine.phase_scheduler import PhaseHook, PhaseScheduler
from werewolf_party.engine.results import ActionResult
from werewolf_party.engine.role_assignment import assign_roles, describe_config
from werewolf_party.engine.room_gateway import RoomGateway
from werewolf_party.engine.skill_resolver import SkillResolver
from werewolf_party.engine.vote_tally import VoteTally
from werewolf_party.errors import ActionRejected, AlreadyActed, EngineError
from werewolf_party.events.game_events import GameOver
from werewolf_party.models import (
    Player,
    PlayerProfile,
    Role,
    Room,
    RoomConfig,
    RoomStatus,
)
from werewolf_party.ports import MessageRefResolver, NotificationPort, PlayerStore, RoomStore
from werewolf_party.settings import EngineSettings


logger = logging.getLogger(__name__)

# Statuses in which only commands may be sent to the room channel
SILENT_STATUSES = (RoomStatus.PROCESSING, RoomStatus.NIGHT)

ROOM_ID_ALPHABET = string.ascii_lowercase + string.digits


def _as_result(method: Callable[..., Awaitable[ActionResult]]) -> Callable[..., Awaitable[ActionResult]]:
    """Turn EngineError raised by an inbound call into a rejected result."""

    @functools.wraps(method)
    async def wrapper(*args: Any, **kwargs: Any) -> ActionResult:
        try:
            return await method(*args, **kwargs)
        except EngineError as e:
            return ActionResult.from_error(e)

    return wrapper


class GameEngine:
    """Room lifecycle, player actions and per-room game tasks."""

    def __init__(
        self,
        rooms: RoomStore,
        players: PlayerStore,
        notifier: NotificationPort,
        displays: Optional[MessageRefResolver] = None,
        settings: Optional[EngineSettings] = None,
        rng: Optional[random.Random] = None,
        on_phase: Optional[PhaseHook] = None,
    ):
        """Initialize the engine.

        Args:
            rooms: Room record store.
            players: Player profile store.
            notifier: Outbound announcements.
            displays: Optional resolver for the persistent status displays.
            settings: Engine settings (defaults to EngineSettings()).
            rng: Random source for role dealing, draws and room ids.
                 Defaults to SystemRandom.
            on_phase: Optional callback fired on every phase change.
        """
        self.settings = settings or EngineSettings()
        self._rng = rng or random.SystemRandom()
        self._gateway = RoomGateway(rooms, players, notifier, displays)
        self._scheduler = PhaseScheduler(
            self._gateway, self.settings, rng=self._rng, on_phase=on_phase
        )
        self._skills = SkillResolver()
        self._runs: dict[str, asyncio.Task] = {}

    # ------------------------------------------------------------------
    # Registration and room lifecycle
    # ------------------------------------------------------------------

    @_as_result
    async def register(self, user_id: str, nick: Optional[str] = None) -> ActionResult:
        async with self._gateway.player_locks(user_id):
            if await self._gateway.players.get(user_id) is not None:
                raise ActionRejected("You are already registered.")
            await self._gateway.players.put(PlayerProfile(user_id=user_id, nick=nick))
        logger.info("Registered player %s", user_id)
        return ActionResult.success("Registration complete!")

    @_as_result
    async def create_room(
        self,
        owner_id: str,
        channel_id: str,
        top_message_ref: Optional[str] = None,
    ) -> ActionResult:
        """Create a room in recruitment with the owner as its first member."""
        async with self._gateway.player_locks(owner_id):
            profile = await self._require_profile(owner_id)
            if profile.joined_room_id is not None:
                raise ActionRejected("You have already joined another room.")

            room_id = await self._new_room_id()
            async with self._gateway.room_locks(room_id):
                room = Room(
                    room_id=room_id,
                    owner_id=owner_id,
                    channel_id=channel_id,
                    top_message_ref=top_message_ref,
                    players=[Player(player_id=owner_id)],
                )
                await self._gateway.rooms.put(room)

            profile.joined_room_id = room_id
            await self._gateway.players.put(profile)

        logger.info("Room %s created by %s", room_id, owner_id)
        await self._gateway.refresh_display(room_id)
        return ActionResult.success(f"Room {room_id} created.", room_id=room_id)

    @_as_result
    async def join_room(self, room_id: str, player_id: str) -> ActionResult:
        async with self._gateway.player_locks(player_id):
            profile = await self._require_profile(player_id)
            if profile.joined_room_id is not None:
                raise ActionRejected("You have already joined another room.")

            async with self._gateway.edit(room_id) as room:
                if room.config.is_full(len(room.players)):
                    raise ActionRejected("This room is full.")
                if room.status != RoomStatus.RECRUITMENT:
                    raise ActionRejected("You cannot join right now.")
                if room.is_member(player_id):
                    raise ActionRejected("You are already in this room.")
                room.players.append(Player(player_id=player_id))

            profile.joined_room_id = room_id
            await self._gateway.players.put(profile)

        await self._gateway.refresh_display(room_id)
        return ActionResult.success(f"Joined room {room_id}.", room_id=room_id)

    @_as_result
    async def leave_room(self, player_id: str) -> ActionResult:
        async with self._gateway.player_locks(player_id):
            profile = await self._require_profile(player_id)
            room_id = self._require_room_id(profile)

            async with self._gateway.edit(room_id) as room:
                if room.owner_id == player_id:
                    raise ActionRejected(
                        f"The room owner cannot leave; delete the room with {self.settings.prefix}dr instead."
                    )
                if room.status != RoomStatus.RECRUITMENT:
                    raise ActionRejected("You cannot leave while a game is running.")
                room.players = [p for p in room.players if p.player_id != player_id]

            profile.joined_room_id = None
            await self._gateway.players.put(profile)

        await self._gateway.refresh_display(room_id)
        return ActionResult.success(f"Left room {room_id}.", room_id=room_id)

    @_as_result
    async def delete_room(self, player_id: str) -> ActionResult:
        """Soft-delete the owner's room: membership is cleared, the record stays."""
        async with self._gateway.player_locks(player_id):
            profile = await self._require_profile(player_id)
            room_id = self._require_room_id(profile)

            async with self._gateway.edit(room_id) as room:
                if room.owner_id != player_id:
                    raise ActionRejected("You are not the owner of this room.")
                members = [p.player_id for p in room.players]
                room.players = []
                room.clear_tally()
                room.deleted = True

            for member_id in members:
                await self._release_member(member_id, room_id, locked=member_id == player_id)

        task = self._runs.pop(room_id, None)
        if task is not None and not task.done():
            task.cancel()

        logger.info("Room %s deleted by %s", room_id, player_id)
        await self._gateway.refresh_display(room_id)
        self._gateway.room_locks.discard(room_id)
        return ActionResult.success("The room has been deleted.", room_id=room_id)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @_as_result
    async def update_config(self, player_id: str, key: str, value: Any) -> ActionResult:
        """Set one room setting (owner only, during recruitment)."""
        return await self._edit_config(player_id, key, lambda current: value)

    @_as_result
    async def adjust_config(self, player_id: str, key: str, delta: int) -> ActionResult:
        """Step a numeric setting by delta (clamped at 0); toggles booleans."""
        def step(current: Any) -> Any:
            if isinstance(current, bool):
                return not current if delta else current
            return max(0, current + delta)

        return await self._edit_config(player_id, key, step)

    async def _edit_config(
        self,
        player_id: str,
        key: str,
        compute: Callable[[Any], Any],
    ) -> ActionResult:
        if key not in RoomConfig.model_fields:
            raise ActionRejected(f"Unknown setting: {key}")

        profile = await self._require_profile(player_id)
        room_id = self._require_room_id(profile)

        async with self._gateway.edit(room_id) as room:
            if room.owner_id != player_id:
                raise ActionRejected("You are not the owner of this room.")
            if room.status != RoomStatus.RECRUITMENT:
                raise ActionRejected("Settings can only be changed while recruiting.")
            value = compute(getattr(room.config, key))
            try:
                setattr(room.config, key, value)
            except ValidationError:
                raise ActionRejected(f"Invalid value for {key}: {value!r}") from None

        await self._gateway.refresh_display(room_id)
        new_value = getattr(room.config, key)
        return ActionResult.success(
            f"{key} set to {new_value}",
            key=key,
            value=new_value,
            summary=describe_config(room.config),
        )

    @_as_result
    async def describe_room_config(self, room_id: str) -> ActionResult:
        room = await self._gateway.load(room_id)
        if room is None:
            raise ActionRejected("Room not found.")
        return ActionResult.success(describe_config(room.config))

    @_as_result
    async def reload_display(self, room_id: str) -> ActionResult:
        room = await self._gateway.load(room_id)
        if room is None:
            raise ActionRejected("Room not found.")
        await self._gateway.refresh_display(room_id)
        return ActionResult.success("Display reloaded.")

    # ------------------------------------------------------------------
    # Game
    # ------------------------------------------------------------------

    @_as_result
    async def start_game(self, player_id: str) -> ActionResult:
        """Deal roles and launch the room's round task (owner only)."""
        profile = await self._require_profile(player_id)
        room_id = self._require_room_id(profile)

        async with self._gateway.edit(room_id) as room:
            if room.owner_id != player_id:
                raise ActionRejected("You are not the owner of this room.")
            if room.status != RoomStatus.RECRUITMENT:
                raise ActionRejected("The game has already started.")
            if len(room.players) < self.settings.min_players:
                raise ActionRejected(
                    f"At least {self.settings.min_players} players are needed to start the game."
                )

            room.status = RoomStatus.PROCESSING
            room.day = 0
            room.clear_tally()
            for player in room.players:
                player.reset_for_round()
            assign_roles(room.players, room.config, rng=self._rng)

        task = asyncio.create_task(self._scheduler.run(room_id))
        task.add_done_callback(functools.partial(self._on_run_done, room_id))
        self._runs[room_id] = task

        logger.info("Room %s: game started with %d players", room_id, len(room.players))
        return ActionResult.success("The game has started!", room_id=room_id)

    @_as_result
    async def cast_vote(self, voter_id: str, target_id: str) -> ActionResult:
        """Cast a day vote against a living member of the voter's room."""
        profile = await self._require_profile(voter_id)
        room_id = self._require_room_id(profile)

        async with self._gateway.edit(room_id) as room:
            if room.status != RoomStatus.VOTING:
                raise ActionRejected("Voting is not open right now.")
            voter = room.get_player(voter_id)
            if voter is None:
                raise ActionRejected("You are not in this game.")
            if not voter.is_alive:
                raise ActionRejected("You are already dead.")
            if voter_id == target_id:
                raise ActionRejected("You cannot vote for yourself.")
            target = room.get_player(target_id)
            if target is None or not target.is_alive:
                raise ActionRejected("That player is not alive in this game.")
            if not VoteTally(room.votes).cast(voter_id, target_id):
                raise AlreadyActed("You have already voted.")
            public = room.config.show_vote_targets

        return ActionResult.success(f"You voted for <@{target_id}>.", public=public)

    @_as_result
    async def cast_night_action(self, player_id: str, target_id: str) -> ActionResult:
        """Use the player's role skill (divine, guard or raid vote)."""
        profile = await self._require_profile(player_id)
        room_id = self._require_room_id(profile)

        async with self._gateway.edit(room_id) as room:
            message = self._skills.resolve(room, player_id, target_id)
        return ActionResult.success(message)

    @_as_result
    async def query_own_role(self, player_id: str) -> ActionResult:
        profile = await self._require_profile(player_id)
        room_id = self._require_room_id(profile)
        room = await self._gateway.load(room_id)
        if room is None:
            raise ActionRejected("The room you joined could not be found.")

        player = room.get_player(player_id)
        if player is None or player.role == Role.UNASSIGNED:
            raise ActionRejected("Your role has not been assigned.")

        message = f"Your role is **{player.role.label}**."
        if player.role == Role.WEREWOLF:
            pack = [p.player_id for p in room.living_werewolves() if p.player_id != player_id]
            if pack:
                message += "\n\nYour fellow werewolves:\n" + "\n".join(f"<@{p}>" for p in pack)
        return ActionResult.success(message, role=player.role.value)

    async def may_chat(self, player_id: str, channel_id: str, text: str) -> bool:
        """Whether a chat message may stay in the room channel.

        Commands are always allowed. Otherwise nobody may chat while the room
        is processing or at night, and dead players may not chat at all.
        """
        if text.startswith(self.settings.prefix):
            return True
        profile = await self._gateway.players.get(player_id)
        if profile is None or profile.joined_room_id is None:
            return True
        room = await self._gateway.load(profile.joined_room_id)
        if room is None or room.channel_id != channel_id:
            return True
        if room.status in SILENT_STATUSES:
            return False
        player = room.get_player(player_id)
        return player is None or player.is_alive

    # ------------------------------------------------------------------
    # Task management
    # ------------------------------------------------------------------

    def is_running(self, room_id: str) -> bool:
        task = self._runs.get(room_id)
        return task is not None and not task.done()

    async def wait_for_game(self, room_id: str) -> Optional[GameOver]:
        """Wait for the room's current round task and return its result.

        Returns None when no round is running (finished rounds are dropped).
        """
        task = self._runs.get(room_id)
        if task is None:
            return None
        return await task

    async def shutdown(self) -> None:
        """Cancel every running round and wait for the tasks to unwind."""
        tasks = [task for task in self._runs.values() if not task.done()]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._runs.clear()

    def _on_run_done(self, room_id: str, task: asyncio.Task) -> None:
        if self._runs.get(room_id) is task:
            del self._runs[room_id]
        if task.cancelled():
            logger.info("Room %s: round cancelled", room_id)
            return
        error = task.exception()
        if error is not None:
            logger.error("Room %s: round aborted", room_id, exc_info=error)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _require_profile(self, user_id: str) -> PlayerProfile:
        profile = await self._gateway.players.get(user_id)
        if profile is None:
            raise ActionRejected(
                f"Your player data was not found. Register with {self.settings.prefix}reg"
            )
        return profile

    def _require_room_id(self, profile: PlayerProfile) -> str:
        if profile.joined_room_id is None:
            raise ActionRejected("You have not joined a room.")
        return profile.joined_room_id

    async def _new_room_id(self) -> str:
        while True:
            room_id = "".join(
                self._rng.choice(ROOM_ID_ALPHABET) for _ in range(self.settings.room_id_length)
            )
            if await self._gateway.rooms.get(room_id) is None:
                return room_id

    async def _release_member(self, member_id: str, room_id: str, locked: bool) -> None:
        """Clear a member's room link if it still points at room_id."""
        if locked:
            await self._clear_link(member_id, room_id)
            return
        async with self._gateway.player_locks(member_id):
            await self._clear_link(member_id, room_id)

    async def _clear_link(self, member_id: str, room_id: str) -> None:
        profile = await self._gateway.players.get(member_id)
        if profile is not None and profile.joined_room_id == room_id:
            profile.joined_room_id = None
            await self._gateway.players.put(profile)
