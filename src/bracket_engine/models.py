"""
Immutable records shared by every part of the engine.

A match slot is one of four variants: ``Bound``, ``Placeholder``,
``SourceRef`` or ``DependencyRef``. Only ``Bound`` carries a competitor.
"""
from typing import NamedTuple, Optional, Tuple, Union

PENDING = 'pending'
SCHEDULED = 'scheduled'
IN_PROGRESS = 'in-progress'
COMPLETED = 'completed'

MATCH_STATUSES = (PENDING, SCHEDULED, IN_PROGRESS, COMPLETED)

WINNER = 'winner'
LOSER = 'loser'

BYE_LABEL = 'Bye'


class Competitor(NamedTuple):
    id: str
    name: str
    seed: int


class SetScore(NamedTuple):
    a: int
    b: int


class Bound(NamedTuple):
    competitor_id: str


class Placeholder(NamedTuple):
    label: str


class SourceRef(NamedTuple):
    """A pool finishing position, resolved once the pool phase is over.

    ``pool_index`` is None when the slot takes the ``best_of_rank``-th best
    finisher of ``rank`` across all pools.
    """
    pool_index: Optional[int]
    rank: int
    label: str
    best_of_rank: Optional[int] = None


class DependencyRef(NamedTuple):
    match_id: str
    outcome: str
    label: str


Slot = Union[Bound, Placeholder, SourceRef, DependencyRef]


def bound_id(slot: Optional[Slot]) -> Optional[str]:
    """Return the competitor id of a bound slot, None otherwise."""
    if isinstance(slot, Bound):
        return slot.competitor_id
    return None


def slot_label(slot: Optional[Slot], names: Optional[dict] = None) -> str:
    if slot is None:
        return ''
    if isinstance(slot, Bound):
        if names and slot.competitor_id in names:
            return names[slot.competitor_id]
        return slot.competitor_id
    return slot.label


class Match(NamedTuple):
    id: str
    round: int
    match_number: int
    slot_a: Slot
    slot_b: Slot
    status: str = PENDING
    court: Optional[int] = None
    scores: Tuple[SetScore, ...] = ()
    winner_id: Optional[str] = None
    pool_id: Optional[str] = None
    stage: Optional[str] = None
    placement_interval: Optional[Tuple[int, int]] = None
    playoff_for_place: Optional[int] = None
    referee: Optional[Slot] = None
    bracket_position: Optional[int] = None

    @property
    def competitor_a(self) -> Optional[str]:
        return bound_id(self.slot_a)

    @property
    def competitor_b(self) -> Optional[str]:
        return bound_id(self.slot_b)

    @property
    def competitor_ids(self) -> Tuple[str, ...]:
        return tuple(c for c in (self.competitor_a, self.competitor_b) if c)

    @property
    def loser_id(self) -> Optional[str]:
        """The bound competitor that is not the winner (None for byes)."""
        if self.winner_id is None:
            return None
        if self.competitor_a == self.winner_id:
            return self.competitor_b
        if self.competitor_b == self.winner_id:
            return self.competitor_a
        return None

    @property
    def is_completed(self) -> bool:
        return self.status == COMPLETED

    @property
    def winner_interval(self) -> Optional[Tuple[int, int]]:
        """Top half of the placement interval."""
        if self.placement_interval is None:
            return None
        lo, hi = self.placement_interval
        mid = lo + (hi - lo) // 2
        return (lo, mid)

    @property
    def loser_interval(self) -> Optional[Tuple[int, int]]:
        """Bottom half of the placement interval."""
        if self.placement_interval is None:
            return None
        lo, hi = self.placement_interval
        mid = lo + (hi - lo) // 2
        return (mid + 1, hi)

    def dependencies(self) -> Tuple[DependencyRef, ...]:
        return tuple(s for s in (self.slot_a, self.slot_b) if isinstance(s, DependencyRef))


class Group(NamedTuple):
    id: str
    name: str
    member_ids: Tuple[str, ...] = ()
    bye_count: int = 0


class StandingEntry(NamedTuple):
    competitor_id: str
    played: int = 0
    won: int = 0
    lost: int = 0
    sets_won: int = 0
    sets_lost: int = 0
    points_won: int = 0
    points_lost: int = 0
    points: int = 0
    rank: Optional[int] = None
    pool_id: Optional[str] = None

    @property
    def set_diff(self) -> int:
        return self.sets_won - self.sets_lost

    @property
    def point_diff(self) -> int:
        return self.points_won - self.points_lost


class Placement(NamedTuple):
    competitor_id: str
    placement: str


class UnresolvedTie(NamedTuple):
    """Finishers that cannot be ordered by points and point difference."""
    rank: int
    positions: Tuple[int, ...]
    competitor_ids: Tuple[str, ...]
