"""
Referee assignment for knockout rounds.

Competitors out of the running referee the next round: pool 4ths referee
the intermediate round and the quarterfinals, intermediate-round losers the
semifinals, quarterfinal losers the finals. A referee who has not met either
competitor in the pools is preferred.
"""
from typing import Dict, Iterable, List, Sequence, Set

from .models import Bound, Match, StandingEntry
from .placements import FINAL, INTERMEDIATE, QUARTERFINAL, SEMIFINAL, THIRD_PLACE, losers_of


def opponent_history(pool_matches: Iterable[Match]) -> Dict[str, Set[str]]:
    """Who played whom in the pool phase."""
    history = {}
    for match in pool_matches:
        a, b = match.competitor_a, match.competitor_b
        if not (a and b):
            continue
        history.setdefault(a, set()).add(b)
        history.setdefault(b, set()).add(a)
    return history


def _has_played(referee: str, match: Match, history: Dict[str, Set[str]]) -> bool:
    opponents = history.get(referee, set())
    return any(c in opponents for c in match.competitor_ids)


def assign_referees(matches: Sequence[Match], stages: Sequence[str], candidates: Sequence[str],
                    history: Dict[str, Set[str]]) -> List[Match]:
    """
    Bind a referee to every match of ``stages`` that has both competitors.

    Each candidate referees at most one of these matches.
    """
    used = set()
    updated = []
    for match in matches:
        if match.stage not in stages or not (match.competitor_a and match.competitor_b) \
                or isinstance(match.referee, Bound):
            updated.append(match)
            continue

        available = [c for c in candidates if c not in used and c not in match.competitor_ids]
        fresh = [c for c in available if not _has_played(c, match, history)]
        choice = (fresh or available or [None])[0]
        if choice is None:
            updated.append(match)
            continue
        used.add(choice)
        updated.append(match._replace(referee=Bound(choice)))
    return updated


def assign_knockout_referees(matches: Sequence[Match], pool_standings: Dict[int, List[StandingEntry]],
                             pool_matches: Sequence[Match]) -> List[Match]:
    """Assign referees round by round for the fixed four-pool knockout."""
    history = opponent_history(pool_matches)
    fourth_placed = [
        entry.competitor_id
        for pool_index in sorted(pool_standings)
        for entry in pool_standings[pool_index]
        if entry.rank == 4
    ]

    updated = assign_referees(matches, (INTERMEDIATE,), fourth_placed, history)
    updated = assign_referees(updated, (QUARTERFINAL,), fourth_placed, history)
    updated = assign_referees(updated, (SEMIFINAL,), losers_of(updated, INTERMEDIATE), history)
    return assign_referees(updated, (THIRD_PLACE, FINAL), losers_of(updated, QUARTERFINAL), history)
