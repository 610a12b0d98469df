"""
Shared protocol of the knockout topologies.

Every topology builds its skeleton in two passes:

    placeholder() - before the pool phase ends; slots hold SourceRef and
                    DependencyRef values with human-readable labels.
    populate()    - after the pool phase; sources are resolved to
                    competitors, byes are settled and ready matches are
                    scheduled.

Match and bracket-position counters live in an explicit BuildState that
builders take and return.
"""
import logging
from typing import Dict, List, NamedTuple, Optional, Sequence, Set, Tuple

from .models import (
    Bound, DependencyRef, Match, Placeholder, Placement, SourceRef, StandingEntry, UnresolvedTie,
    BYE_LABEL, LOSER, WINNER,
)
from .placements import ordinal, placement_label, terminal_placements
from .propagation import resolve_byes, schedule_ready
from .seeding import pool_name
from .settings import merge_settings
from .standings import best_of_rank, competitor_at

logger = logging.getLogger(__name__)


class TopologyError(ValueError):
    """A topology was requested for a pool count or format it cannot serve."""


class BuildState(NamedTuple):
    next_number: int = 1
    next_position: int = 1


class PopulateResult(NamedTuple):
    matches: List[Match]
    eliminated_ids: List[str]
    unresolved_ties: List[UnresolvedTie]


def new_match(state: BuildState, prefix: str, round: int, slot_a, slot_b, **fields) -> Tuple[Match, BuildState]:
    """Create the next match of a skeleton and return it with the advanced state."""
    match = Match(
        id=f"{prefix}-{state.next_number}",
        round=round,
        match_number=state.next_number,
        slot_a=slot_a,
        slot_b=slot_b,
        bracket_position=state.next_position,
        **fields
    )
    return match, BuildState(state.next_number + 1, state.next_position + 1)


def source(pool_index: int, rank: int) -> SourceRef:
    """Slot for the competitor finishing ``rank`` in a pool."""
    return SourceRef(pool_index, rank, f"{ordinal(rank)} Pool {pool_name(pool_index)}")


def best_source(rank: int, k: int, label: Optional[str] = None) -> SourceRef:
    """Slot for the k-th best competitor of ``rank`` across all pools."""
    if label is None:
        label = f"{ordinal(k)} best {ordinal(rank)} place"
    return SourceRef(None, rank, label, best_of_rank=k)


def winner_of(match: Match) -> DependencyRef:
    return DependencyRef(match.id, WINNER, f"Winner Match {match.match_number}")


def loser_of(match: Match) -> DependencyRef:
    return DependencyRef(match.id, LOSER, f"Loser Match {match.match_number}")


class BracketTopology:
    """Base class: one subclass per knockout topology."""

    name = None
    id_prefix = 'ko'
    supported_pool_counts = ()

    def __init__(self, pool_count: int, pool_size: int = 4, number_of_courts: int = 1,
                 third_place_match: bool = True, referees: bool = False):
        if pool_count not in self.supported_pool_counts:
            raise TopologyError(
                f"{self.name} bracket does not support {pool_count} pools "
                f"(supported: {', '.join(str(c) for c in self.supported_pool_counts)})")
        self.pool_count = pool_count
        self.pool_size = pool_size
        self.number_of_courts = max(1, number_of_courts)
        self.third_place_match = third_place_match
        self.referees = referees

    def __repr__(self):
        return f"{self.__class__.__name__}(pool_count={self.pool_count}, pool_size={self.pool_size})"

    def court(self, index: int) -> Optional[int]:
        """Court for the index-th match of a round; None once the courts run out."""
        return index + 1 if index < self.number_of_courts else None

    def placeholder(self) -> List[Match]:
        raise NotImplementedError

    def expected_match_count(self) -> int:
        raise NotImplementedError

    def placements(self, matches: Sequence[Match], eliminated_ids: Sequence[str] = ()) -> List[Placement]:
        return terminal_placements(matches)

    def eliminated_placement(self, participants: int, eliminated_ids: Sequence[str]) -> List[Placement]:
        """Shared range placement for competitors knocked out in the pools."""
        if not eliminated_ids:
            return []
        label = placement_label(participants + 1, participants + len(eliminated_ids))
        return [Placement(cid, label) for cid in eliminated_ids]

    def resolve_sources(self, matches: Sequence[Match],
                        standings: Dict[int, List[StandingEntry]]) -> Tuple[List[Match], Set[str], List[UnresolvedTie]]:
        """
        Replace every SourceRef with the competitor it names.

        Sources with nobody behind them (a short pool) become byes. Returns
        the new matches, the ids placed into the bracket and any unresolved
        best-of-rank ties.
        """
        spots = {}
        for match in matches:
            for slot in (match.slot_a, match.slot_b):
                if isinstance(slot, SourceRef) and slot.best_of_rank:
                    spots[slot.rank] = max(spots.get(slot.rank, 0), slot.best_of_rank)

        best = {}
        ties = []
        for rank, count in spots.items():
            ranked, rank_ties = best_of_rank(standings, rank, count)
            best[rank] = [entry.competitor_id for _, entry in ranked]
            ties.extend(rank_ties)

        placed = set()

        def resolve(slot, bye):
            if not isinstance(slot, SourceRef):
                return slot
            if slot.best_of_rank:
                candidates = best.get(slot.rank, [])
                competitor = candidates[slot.best_of_rank - 1] if slot.best_of_rank <= len(candidates) else None
            else:
                competitor = competitor_at(standings, slot.pool_index, slot.rank)
            if competitor is None:
                return bye
            return Bound(competitor)

        resolved = []
        for match in matches:
            slot_a = resolve(match.slot_a, Placeholder(BYE_LABEL))
            slot_b = resolve(match.slot_b, Placeholder(BYE_LABEL))
            for slot in (slot_a, slot_b):
                if isinstance(slot, Bound):
                    placed.add(slot.competitor_id)
            referee = resolve(match.referee, None) if self.referees else None
            resolved.append(match._replace(slot_a=slot_a, slot_b=slot_b, referee=referee))
        return resolved, placed, ties

    def populate(self, matches: Sequence[Match], standings: Dict[int, List[StandingEntry]],
                 settings: Optional[Dict] = None) -> PopulateResult:
        """Fill a placeholder skeleton from final pool standings."""
        settings = merge_settings(settings)
        resolved, placed, ties = self.resolve_sources(matches, standings)
        resolved = resolve_byes(resolved, settings)
        resolved = schedule_ready(resolved)

        eliminated = [
            entry.competitor_id
            for pool_index in sorted(standings)
            for entry in standings[pool_index]
            if entry.competitor_id not in placed
        ]
        logger.debug("Populated %s bracket: %d placed, %d eliminated, %d unresolved ties",
                     self.name, len(placed), len(eliminated), len(ties))
        return PopulateResult(resolved, eliminated, ties)
