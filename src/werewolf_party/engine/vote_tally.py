"""Vote tally - collects one choice per participant and resolves the winner.

Used for the day vote and for the werewolves' night raid vote. Rules:
- One vote per voter per sub-phase (a second cast is rejected)
- Counts are restricted to the eligible targets at resolution time
- Ties are broken uniformly at random
- No votes at all = uniform random pick among eligible targets
"""

import logging
import random
from collections import defaultdict
from typing import Optional, Sequence
from pydantic import BaseModel, Field


logger = logging.getLogger(__name__)


class TallyResult(BaseModel):
    """Resolved target and the counts it was drawn from."""

    target: str
    counts: dict[str, int] = Field(default_factory=dict)
    tied: list[str] = Field(default_factory=list)
    by_vote: bool = True


class VoteTally:
    """View over a room's votes mapping (target -> voter ids).

    The mapping is mutated in place so the caller persists it with the room.
    """

    def __init__(
        self,
        votes: dict[str, list[str]],
        rng: Optional[random.Random] = None,
    ):
        self.votes = votes
        self._rng = rng or random.SystemRandom()

    def has_voted(self, voter_id: str) -> bool:
        return any(voter_id in voters for voters in self.votes.values())

    def cast(self, voter_id: str, target_id: str) -> bool:
        """Record a vote.

        Returns:
            False if the voter already voted this sub-phase, True otherwise.
        """
        if self.has_voted(voter_id):
            return False
        self.votes.setdefault(target_id, []).append(voter_id)
        return True

    def counts(self, eligible_targets: Sequence[str]) -> dict[str, int]:
        """Vote counts per target, restricted to eligible_targets."""
        eligible = set(eligible_targets)
        tally: dict[str, int] = defaultdict(int)
        for target, voters in self.votes.items():
            if target in eligible and voters:
                tally[target] += len(voters)
        return dict(tally)

    def resolve(self, eligible_targets: Sequence[str]) -> Optional[TallyResult]:
        """Pick the target with the most votes and clear the tally.

        Args:
            eligible_targets: Player ids that may be selected.

        Returns:
            TallyResult, or None when there is no valid target (the tally is
            left untouched in that case).
        """
        candidates = list(eligible_targets)
        if not candidates:
            return None

        tally = self.counts(candidates)

        if not self.votes:
            target = self._rng.choice(candidates)
            self.votes.clear()
            return TallyResult(target=target, by_vote=False)

        if not tally:
            # Every vote went to a target that is no longer eligible
            logger.warning(
                "No votes for eligible targets (votes=%s, eligible=%s), drawing at random",
                self.votes, candidates,
            )
            target = self._rng.choice(candidates)
            self.votes.clear()
            return TallyResult(target=target, by_vote=False)

        max_votes = max(tally.values())
        tied = [target for target, count in tally.items() if count == max_votes]
        target = self._rng.choice(tied)

        self.votes.clear()
        return TallyResult(
            target=target,
            counts=tally,
            tied=tied if len(tied) > 1 else [],
            by_vote=True,
        )
