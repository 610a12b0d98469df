"""
Pool and overall standings.
"""
import logging
from functools import cmp_to_key
from typing import Dict, List, Optional, Sequence, Tuple

from .models import Group, Match, StandingEntry, UnresolvedTie, COMPLETED
from .settings import HEAD_TO_HEAD_FIRST, POINT_DIFF_FIRST

logger = logging.getLogger(__name__)


def _empty_stats(competitor_id: str) -> Dict:
    return {
        'competitor_id': competitor_id,
        'played': 0,
        'won': 0,
        'lost': 0,
        'sets_won': 0,
        'sets_lost': 0,
        'points_won': 0,
        'points_lost': 0,
        'points': 0,
    }


def _accumulate(stats: Dict[str, Dict], match: Match, sets_per_match: int, win_points: int, loss_points: int):
    """Add one completed match to both competitors' stats."""
    a, b = match.competitor_a, match.competitor_b
    sets_a = sets_b = points_a = points_b = 0
    for score in match.scores:
        points_a += score.a
        points_b += score.b
        if score.a > score.b:
            sets_a += 1
        elif score.b > score.a:
            sets_b += 1

    for team, sets_for, sets_against, points_for, points_against in (
            (a, sets_a, sets_b, points_a, points_b),
            (b, sets_b, sets_a, points_b, points_a)):
        team_stats = stats[team]
        team_stats['played'] += 1
        team_stats['sets_won'] += sets_for
        team_stats['sets_lost'] += sets_against
        team_stats['points_won'] += points_for
        team_stats['points_lost'] += points_against

    loser = b if match.winner_id == a else a
    stats[match.winner_id]['won'] += 1
    stats[loser]['lost'] += 1
    if sets_per_match == 2:
        # Two-set format: one ranking point per set won, even in a 1:1 split
        stats[a]['points'] += sets_a
        stats[b]['points'] += sets_b
    else:
        stats[match.winner_id]['points'] += win_points
        stats[loser]['points'] += loss_points


def _countable(match: Match, stats: Dict[str, Dict]) -> bool:
    return (match.status == COMPLETED
            and match.competitor_a in stats
            and match.competitor_b in stats
            and match.winner_id in (match.competitor_a, match.competitor_b))


def head_to_head(a: str, b: str, matches: Sequence[Match], pool_id: Optional[str] = None) -> int:
    """
    Compare two competitors by their direct match.

    Returns -1 when ``a`` won, 1 when ``b`` won and 0 when they have not
    played (or the match is not completed).
    """
    for match in matches:
        if match.status != COMPLETED or match.pool_id != pool_id:
            continue
        if set(match.competitor_ids) != {a, b}:
            continue
        if match.winner_id == a:
            return -1
        if match.winner_id == b:
            return 1
    return 0


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def pool_standings(pool_id: str, member_ids: Sequence[str], matches: Sequence[Match],
                   sets_per_match: int = 1, tiebreaker_order: str = HEAD_TO_HEAD_FIRST) -> List[StandingEntry]:
    """
    Calculate the ranked standings of one pool.

    Only completed matches of the pool count. Ranking: points, then either
    head-to-head before point difference or the reverse (per
    ``tiebreaker_order``), then set difference. Remaining ties fall back to
    seeding order so ranks 1..k are always a total order.
    """
    stats = {cid: _empty_stats(cid) for cid in member_ids}
    pool_matches = [m for m in matches if m.pool_id == pool_id and _countable(m, stats)]
    for match in pool_matches:
        _accumulate(stats, match, sets_per_match, 1, 0)

    seed_order = {cid: i for i, cid in enumerate(member_ids)}

    def point_diff(entry):
        return entry['points_won'] - entry['points_lost']

    def set_diff(entry):
        return entry['sets_won'] - entry['sets_lost']

    def compare(x, y):
        if x['points'] != y['points']:
            return _sign(y['points'] - x['points'])

        h2h = head_to_head(x['competitor_id'], y['competitor_id'], pool_matches, pool_id)
        diff = _sign(point_diff(y) - point_diff(x))
        if tiebreaker_order == POINT_DIFF_FIRST:
            order = (diff, h2h)
        else:
            order = (h2h, diff)
        for result in order:
            if result:
                return result

        if set_diff(x) != set_diff(y):
            return _sign(set_diff(y) - set_diff(x))
        return _sign(seed_order[x['competitor_id']] - seed_order[y['competitor_id']])

    ranked = sorted(stats.values(), key=cmp_to_key(compare))
    return [
        StandingEntry(rank=i + 1, pool_id=pool_id, **entry)
        for i, entry in enumerate(ranked)
    ]


def all_pool_standings(groups: Sequence[Group], matches: Sequence[Match], settings: Dict) -> Dict[int, List[StandingEntry]]:
    """Standings for every pool, keyed by pool index."""
    return {
        index: pool_standings(
            group.id,
            group.member_ids,
            matches,
            settings.get('sets_per_match', 1),
            settings.get('tiebreaker_order', HEAD_TO_HEAD_FIRST),
        )
        for index, group in enumerate(groups)
    }


def global_standings(competitor_ids: Sequence[str], matches: Sequence[Match],
                     sets_per_match: int = 1) -> List[StandingEntry]:
    """
    Overall standings across every completed match.

    A win is worth 2 points and a loss 1 (sets won under the two-set
    format). Sorted by points, set difference, point difference.
    """
    stats = {cid: _empty_stats(cid) for cid in competitor_ids}
    for match in matches:
        if _countable(match, stats):
            _accumulate(stats, match, sets_per_match, 2, 1)

    order = {cid: i for i, cid in enumerate(competitor_ids)}
    ranked = sorted(
        stats.values(),
        key=lambda x: (-x['points'],
                       -(x['sets_won'] - x['sets_lost']),
                       -(x['points_won'] - x['points_lost']),
                       order[x['competitor_id']])
    )
    return [StandingEntry(rank=i + 1, **entry) for i, entry in enumerate(ranked)]


def competitor_at(standings: Dict[int, List[StandingEntry]], pool_index: int, rank: int) -> Optional[str]:
    """Competitor finishing at ``rank`` in the pool, None if the pool is short."""
    for entry in standings.get(pool_index, []):
        if entry.rank == rank:
            return entry.competitor_id
    return None


def best_of_rank(standings: Dict[int, List[StandingEntry]], rank: int,
                 spots: Optional[int] = None) -> Tuple[List[Tuple[int, StandingEntry]], List[UnresolvedTie]]:
    """
    Rank the finishers at ``rank`` across all pools by points, then point
    difference.

    There is no further tiebreak: finishers level on both are kept in pool
    order and reported as an UnresolvedTie when the tie touches one of the
    first ``spots`` positions (all positions when ``spots`` is None).
    """
    candidates = []
    for pool_index in sorted(standings):
        for entry in standings[pool_index]:
            if entry.rank == rank:
                candidates.append((pool_index, entry))

    candidates.sort(key=lambda c: (-c[1].points, -c[1].point_diff, c[0]))

    ties = []
    start = 0
    while start < len(candidates):
        end = start + 1
        key = (candidates[start][1].points, candidates[start][1].point_diff)
        while end < len(candidates) and (candidates[end][1].points, candidates[end][1].point_diff) == key:
            end += 1
        if end - start > 1 and (spots is None or start < spots):
            tie = UnresolvedTie(
                rank=rank,
                positions=tuple(range(start + 1, end + 1)),
                competitor_ids=tuple(c[1].competitor_id for c in candidates[start:end]),
            )
            ties.append(tie)
            logger.warning("Unresolved tie among rank %d finishers at positions %s: %s",
                           rank, tie.positions, ', '.join(tie.competitor_ids))
        start = end

    return candidates, ties
