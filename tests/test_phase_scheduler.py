"""End-to-end tests of a round: reveal, discussion, voting, night, victory.

Timings are scaled to zero so every window only yields to the event loop.
A scripted phase hook plays the part of the players: on each (day, status)
it casts the planned votes and skills, addressing players by role label
("W" for the werewolf, "H" for the hunter, "V1".."Vn" for villagers in id
order) since the dealing itself is random.
"""

import asyncio
import random
from typing import Optional

import pytest

from werewolf_party.engine import GameEngine, ROLE_CHECK_ELEMENT
from werewolf_party.models import Faction, Role, Room, RoomStatus
from werewolf_party.settings import EngineSettings, PhaseTimings
from werewolf_party.store import InMemoryPlayerStore, InMemoryRoomStore


FAST = PhaseTimings().scaled(0)

Plan = dict[tuple[int, RoomStatus], list[tuple[str, str]]]


class RecordingNotifier:
    def __init__(self) -> None:
        self.texts: list[str] = []
        self.elements: list[str] = []

    async def announce(self, channel_id: str, text: str, elements: Optional[list[str]] = None) -> None:
        self.texts.append(text)
        self.elements.extend(elements or [])


class FailingNotifier:
    async def announce(self, channel_id: str, text: str, elements: Optional[list[str]] = None) -> None:
        raise ConnectionError("channel unavailable")


class ScriptedTable:
    """Phase hook that replays a plan of actions keyed by (day, status)."""

    def __init__(self, rooms: InMemoryRoomStore, plan: Optional[Plan] = None):
        self.rooms = rooms
        self.plan = plan or {}
        self.engine: Optional[GameEngine] = None
        self.labels: dict[str, str] = {}
        self.statuses: list[RoomStatus] = []
        self.snapshots: dict[tuple[int, RoomStatus], Room] = {}
        self.results = []

    async def __call__(self, room_id: str, status: RoomStatus) -> None:
        self.statuses.append(status)
        room = await self.rooms.get(room_id)
        self.snapshots[(room.day, status)] = room
        if not self.labels:
            self.labels = label_players(room)

        for actor, target in self.plan.get((room.day, status), []):
            actor_id, target_id = self.labels[actor], self.labels[target]
            if status == RoomStatus.VOTING:
                result = await self.engine.cast_vote(actor_id, target_id)
            else:
                result = await self.engine.cast_night_action(actor_id, target_id)
            self.results.append(result)

    def player(self, label: str, day: int, status: RoomStatus):
        return self.snapshots[(day, status)].get_player(self.labels[label])


def label_players(room: Room) -> dict[str, str]:
    labels: dict[str, str] = {}
    villagers = sorted(p.player_id for p in room.players if p.role == Role.VILLAGER)
    for index, player_id in enumerate(villagers, start=1):
        labels[f"V{index}"] = player_id
    for player in room.players:
        if player.role == Role.WEREWOLF:
            labels["W"] = player.player_id
        elif player.role == Role.HUNTER:
            labels["H"] = player.player_id
    return labels


@pytest.fixture
def rooms() -> InMemoryRoomStore:
    return InMemoryRoomStore()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


def make_engine(rooms, notifier, table: ScriptedTable, **settings) -> GameEngine:
    engine = GameEngine(
        rooms,
        InMemoryPlayerStore(),
        notifier,
        settings=EngineSettings(timings=FAST, **settings),
        rng=random.Random(2024),
        on_phase=table,
    )
    table.engine = engine
    return engine


async def play(engine: GameEngine, player_count: int, **config):
    """Open a room of player_count players, apply config and play one round."""
    user_ids = [f"p{i}" for i in range(player_count)]
    for user_id in user_ids:
        await engine.register(user_id)
    created = await engine.create_room(user_ids[0], channel_id="chan")
    room_id = created.data["room_id"]
    for user_id in user_ids[1:]:
        await engine.join_room(room_id, user_id)
    for key, value in config.items():
        assert (await engine.update_config(user_ids[0], key, value)).ok

    assert (await engine.start_game(user_ids[0])).ok
    game_over = await engine.wait_for_game(room_id)
    return room_id, game_over


# ============================================================================
# Complete rounds
# ============================================================================


class TestCompleteRound:
    """Rounds played through to a victory."""

    @pytest.mark.asyncio
    async def test_three_players_one_werewolf(self, rooms, notifier):
        """The day vote leaves one werewolf against one villager."""
        table = ScriptedTable(rooms, {
            (1, RoomStatus.VOTING): [("W", "V1"), ("V2", "V1"), ("V1", "W")],
        })
        engine = make_engine(rooms, notifier, table)

        room_id, game_over = await play(engine, 3, werewolves=1)

        assert game_over.winner == Faction.WEREWOLF
        assert table.statuses == [
            RoomStatus.PROCESSING,
            RoomStatus.DISCUSSION,
            RoomStatus.VOTING,
            RoomStatus.END,
            RoomStatus.RECRUITMENT,
        ]
        assert all(r.ok for r in table.results)

        room = await rooms.get(room_id)
        assert room.status == RoomStatus.RECRUITMENT
        roles = sorted(p.role for p in room.players)
        assert roles == sorted([Role.WEREWOLF, Role.VILLAGER, Role.VILLAGER])
        assert room.get_player(table.labels["V1"]).is_alive is False

        v1 = table.labels["V1"]
        assert f"By vote, <@{v1}> has been executed." in notifier.texts
        assert notifier.texts[-1] == "The werewolves win!"

    @pytest.mark.asyncio
    async def test_town_votes_out_werewolf(self, rooms, notifier):
        table = ScriptedTable(rooms, {
            (1, RoomStatus.VOTING): [("V1", "W"), ("V2", "W"), ("W", "V1")],
        })
        engine = make_engine(rooms, notifier, table)

        _, game_over = await play(engine, 3, werewolves=1)

        assert game_over.winner == Faction.TOWN
        assert notifier.texts[-1] == "The town wins!"

    @pytest.mark.asyncio
    async def test_night_raid_decides(self, rooms, notifier):
        table = ScriptedTable(rooms, {
            (1, RoomStatus.VOTING): [("W", "V1"), ("V2", "V1"), ("V3", "V1"), ("V1", "V2")],
            (1, RoomStatus.NIGHT): [("W", "V2")],
        })
        engine = make_engine(rooms, notifier, table)

        room_id, game_over = await play(engine, 4, werewolves=1)

        assert game_over.winner == Faction.WEREWOLF
        assert table.statuses == [
            RoomStatus.PROCESSING,
            RoomStatus.DISCUSSION,
            RoomStatus.VOTING,
            RoomStatus.NIGHT,
            RoomStatus.PROCESSING,
            RoomStatus.END,
            RoomStatus.RECRUITMENT,
        ]
        v2 = table.labels["V2"]
        assert "Dawn has come." in notifier.texts
        assert f"<@{v2}> was attacked last night." in notifier.texts
        room = await rooms.get(room_id)
        assert room.get_player(v2).is_alive is False

    @pytest.mark.asyncio
    async def test_guard_blocks_raid_and_resets(self, rooms, notifier):
        table = ScriptedTable(rooms, {
            (1, RoomStatus.VOTING): [("W", "V3"), ("H", "V3"), ("V1", "V3"), ("V2", "V3"), ("V3", "V2")],
            (1, RoomStatus.NIGHT): [("H", "V1"), ("W", "V1")],
            (2, RoomStatus.VOTING): [("W", "V2"), ("H", "V2"), ("V1", "V2"), ("V2", "W")],
            (2, RoomStatus.NIGHT): [("W", "V1")],
        })
        engine = make_engine(rooms, notifier, table)

        room_id, game_over = await play(engine, 5, werewolves=1, hunters=1)

        assert all(r.ok for r in table.results)
        assert "Nobody was attacked last night." in notifier.texts

        # Guard held through the first dawn
        dawn = table.player("V1", 1, RoomStatus.PROCESSING)
        assert dawn.is_alive is True
        assert dawn.is_guarded is True

        # and was lifted when the second night began
        assert table.player("V1", 2, RoomStatus.NIGHT).is_guarded is False

        assert game_over.winner == Faction.WEREWOLF
        room = await rooms.get(room_id)
        assert room.get_player(table.labels["V1"]).is_alive is False
        assert room.get_player(table.labels["H"]).is_alive is True

    @pytest.mark.asyncio
    async def test_no_werewolves_town_wins_immediately(self, rooms, notifier):
        table = ScriptedTable(rooms)
        engine = make_engine(rooms, notifier, table)

        _, game_over = await play(engine, 3)

        assert game_over.winner == Faction.TOWN
        assert table.statuses == [RoomStatus.PROCESSING, RoomStatus.END, RoomStatus.RECRUITMENT]

    @pytest.mark.asyncio
    async def test_round_cap(self, rooms, notifier):
        table = ScriptedTable(rooms, {
            (1, RoomStatus.VOTING): [("W", "V1"), ("V2", "V1"), ("V3", "V1"), ("V4", "V1")],
            (1, RoomStatus.NIGHT): [("W", "V2")],
        })
        engine = make_engine(rooms, notifier, table, max_rounds=1)

        _, game_over = await play(engine, 5, werewolves=1)

        assert game_over.winner is None
        assert notifier.texts[-1] == "The game is over."
        assert table.statuses[-2:] == [RoomStatus.END, RoomStatus.RECRUITMENT]


# ============================================================================
# Announcements and failures
# ============================================================================


class TestRoundAnnouncements:
    @pytest.mark.asyncio
    async def test_reveal_offers_role_check(self, rooms, notifier):
        engine = make_engine(rooms, notifier, ScriptedTable(rooms))
        await play(engine, 3)

        assert notifier.texts[0].startswith("### The game has started!")
        assert "<@p0>" in notifier.texts[0]
        assert notifier.elements == [ROLE_CHECK_ELEMENT]
        assert "Villager: 3" in notifier.texts

    @pytest.mark.asyncio
    async def test_discussion_reminders_announced(self, rooms, notifier):
        table = ScriptedTable(rooms, {
            (1, RoomStatus.VOTING): [("W", "V1"), ("V2", "V1")],
        })
        engine = make_engine(rooms, notifier, table)
        await play(engine, 3, werewolves=1)

        assert "4 minutes left" in notifier.texts
        assert "15 seconds left" in notifier.texts

    @pytest.mark.asyncio
    async def test_unvoted_day_drawn_by_lot(self, rooms, notifier):
        engine = make_engine(rooms, notifier, ScriptedTable(rooms))
        _, game_over = await play(engine, 3, werewolves=1)

        assert game_over.winner is not None
        assert any(t.startswith("Nobody voted, so by lot") for t in notifier.texts)


class TestFailures:
    """Outbound failures never stall a round."""

    @pytest.mark.asyncio
    async def test_failing_notifier(self, rooms):
        table = ScriptedTable(rooms, {
            (1, RoomStatus.VOTING): [("V1", "W"), ("V2", "W")],
        })
        engine = make_engine(rooms, FailingNotifier(), table)

        room_id, game_over = await play(engine, 3, werewolves=1)

        assert game_over.winner == Faction.TOWN
        assert (await rooms.get(room_id)).status == RoomStatus.RECRUITMENT

    @pytest.mark.asyncio
    async def test_failing_hook(self, rooms, notifier):
        async def hook(room_id: str, status: RoomStatus) -> None:
            raise RuntimeError("hook exploded")

        engine = GameEngine(
            rooms,
            InMemoryPlayerStore(),
            notifier,
            settings=EngineSettings(timings=FAST),
            rng=random.Random(7),
            on_phase=hook,
        )
        _, game_over = await play(engine, 3)
        assert game_over.winner == Faction.TOWN


class TestReplay:
    @pytest.mark.asyncio
    async def test_room_can_start_again(self, rooms, notifier):
        table = ScriptedTable(rooms, {
            (1, RoomStatus.VOTING): [("W", "V1"), ("V2", "V1")],
        })
        engine = make_engine(rooms, notifier, table)
        room_id, _ = await play(engine, 3, werewolves=1)

        table.labels = {}
        table.statuses = []
        assert (await engine.start_game("p0")).ok
        room = await rooms.get(room_id)
        assert all(p.is_alive for p in room.players)
        assert room.day == 0

        game_over = await engine.wait_for_game(room_id)
        assert game_over.winner == Faction.WEREWOLF
        assert table.statuses[0] == RoomStatus.PROCESSING

    @pytest.mark.asyncio
    async def test_finished_round_dropped(self, rooms, notifier):
        engine = make_engine(rooms, notifier, ScriptedTable(rooms))
        room_id, game_over = await play(engine, 3)
        await asyncio.sleep(0)

        assert game_over.winner == Faction.TOWN
        assert not engine.is_running(room_id)
        assert room_id not in engine._runs
        assert await engine.wait_for_game(room_id) is None
