"""Engine package - game orchestration components."""

from .results import ActionResult, Outcome
from .role_assignment import (
    assign_roles,
    build_role_pool,
    role_composition,
    format_composition,
    describe_config,
)
from .vote_tally import VoteTally, TallyResult
from .night_action_resolver import NightActionResolver, begin_night
from .banishment_resolver import BanishmentResolver, begin_voting
from .victory import check_victory, count_factions
from .skill_resolver import SkillResolver
from .keyed_locks import KeyedLocks
from .room_gateway import RoomGateway, build_display
from .phase_scheduler import PhaseScheduler, ROLE_CHECK_ELEMENT
from .game_engine import GameEngine

__all__ = [
    "ActionResult",
    "Outcome",
    "assign_roles",
    "build_role_pool",
    "role_composition",
    "format_composition",
    "describe_config",
    "VoteTally",
    "TallyResult",
    "NightActionResolver",
    "begin_night",
    "BanishmentResolver",
    "begin_voting",
    "check_victory",
    "count_factions",
    "SkillResolver",
    "KeyedLocks",
    "RoomGateway",
    "build_display",
    "PhaseScheduler",
    "ROLE_CHECK_ELEMENT",
    "GameEngine",
]
