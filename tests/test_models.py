"""Tests for the player and room models."""

import pytest
from pydantic import ValidationError

from werewolf_party.models import (
    Faction,
    Player,
    PlayerProfile,
    Role,
    Room,
    RoomConfig,
    RoomStatus,
)


def make_room(*players: Player) -> Room:
    return Room(room_id="abc123", owner_id="p0", channel_id="c1", players=list(players))


class TestRole:
    """Tests for Role helpers."""

    def test_werewolf_faction(self):
        assert Role.WEREWOLF.faction == Faction.WEREWOLF

    @pytest.mark.parametrize("role", [Role.VILLAGER, Role.SEER, Role.MEDIUM, Role.HUNTER])
    def test_town_roles(self, role: Role):
        assert role.faction == Faction.TOWN

    @pytest.mark.parametrize("role", [Role.LUNATIC, Role.FOX, Role.UNASSIGNED])
    def test_roles_without_faction(self, role: Role):
        assert role.faction is None

    def test_reserved_roles(self):
        assert Role.MEDIUM.is_reserved
        assert Role.LUNATIC.is_reserved
        assert Role.FOX.is_reserved
        assert not Role.HUNTER.is_reserved

    def test_label(self):
        assert Role.WEREWOLF.label == "Werewolf"


class TestPlayer:
    """Tests for Player."""

    def test_defaults(self):
        player = Player(player_id="p1")
        assert player.role == Role.UNASSIGNED
        assert player.is_alive is True
        assert player.is_guarded is False
        assert player.is_black is False

    def test_reset_for_round(self):
        player = Player(player_id="p1", role=Role.WEREWOLF, is_alive=False, is_guarded=True, is_black=True)
        player.reset_for_round()
        assert player == Player(player_id="p1")

    def test_to_dict_hides_role(self):
        player = Player(player_id="p1", role=Role.WEREWOLF)
        assert "role" not in player.to_dict()


class TestPlayerProfile:
    def test_defaults(self):
        profile = PlayerProfile(user_id="u1")
        assert profile.joined_room_id is None
        assert profile.admin is False
        assert profile.exp == 0


class TestRoomConfig:
    """Tests for RoomConfig."""

    def test_defaults(self):
        config = RoomConfig()
        assert config.max_players == 0
        assert config.show_vote_targets is False
        assert all(count == 0 for count in config.quotas().values())

    def test_negative_quota_rejected(self):
        with pytest.raises(ValidationError):
            RoomConfig(werewolves=-1)

    def test_negative_assignment_rejected(self):
        config = RoomConfig()
        with pytest.raises(ValidationError):
            config.hunters = -2
        assert config.hunters == 0

    def test_quotas_exclude_villagers(self):
        config = RoomConfig(villagers=3, werewolves=2, seers=1)
        quotas = config.quotas()
        assert Role.VILLAGER not in quotas
        assert quotas[Role.WEREWOLF] == 2
        assert quotas[Role.SEER] == 1

    def test_unlimited_room_never_full(self):
        assert not RoomConfig(max_players=0).is_full(100)

    def test_limited_room_full(self):
        config = RoomConfig(max_players=4)
        assert not config.is_full(3)
        assert config.is_full(4)


class TestRoom:
    """Tests for Room helpers."""

    def test_new_room_is_recruiting(self):
        room = make_room()
        assert room.status == RoomStatus.RECRUITMENT
        assert room.votes == {}
        assert room.deleted is False

    def test_get_player(self):
        room = make_room(Player(player_id="p0"), Player(player_id="p1"))
        assert room.get_player("p1").player_id == "p1"
        assert room.get_player("p9") is None
        assert room.is_member("p0")

    def test_living_ids(self):
        room = make_room(
            Player(player_id="p0"),
            Player(player_id="p1", is_alive=False),
            Player(player_id="p2"),
        )
        assert room.living_ids() == ["p0", "p2"]

    def test_raid_targets_exclude_werewolves_and_dead(self):
        room = make_room(
            Player(player_id="w1", role=Role.WEREWOLF),
            Player(player_id="v1", role=Role.VILLAGER),
            Player(player_id="v2", role=Role.VILLAGER, is_alive=False),
            Player(player_id="s1", role=Role.SEER),
        )
        assert room.raid_targets() == ["v1", "s1"]

    def test_clear_tally(self):
        room = make_room()
        room.votes = {"p1": ["p2"]}
        room.skill_uses = {"p3": "p1"}
        room.clear_tally()
        assert room.votes == {}
        assert room.skill_uses == {}

    def test_json_round_trip(self):
        room = make_room(Player(player_id="p0", role=Role.HUNTER))
        restored = Room.model_validate_json(room.model_dump_json())
        assert restored == room
