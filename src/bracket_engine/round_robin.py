"""
Round-robin pairings using the circle method.
"""
import logging
from typing import List, Optional, Sequence

from .models import Bound, Group, Match, SCHEDULED

logger = logging.getLogger(__name__)

_BYE = object()


def circle_rounds(competitor_ids: Sequence[str]) -> List[List[tuple]]:
    """
    Pair competitors round by round with the circle method.

    The first competitor stays fixed while the others rotate one position
    per round. Odd counts are padded with a bye; pairings against the bye
    are dropped. Returns one list of (a, b) pairs per round.
    """
    entries = list(competitor_ids)
    if len(entries) < 2:
        return []
    if len(entries) % 2 != 0:
        entries.append(_BYE)

    n = len(entries)
    fixed = entries[0]
    rotating = entries[1:]
    rounds = []
    for _ in range(n - 1):
        current = [fixed] + rotating
        pairs = []
        for i in range(n // 2):
            a = current[i]
            b = current[n - 1 - i]
            if a is _BYE or b is _BYE:
                continue
            pairs.append((a, b))
        rounds.append(pairs)
        rotating = [rotating[-1]] + rotating[:-1]
    return rounds


def round_robin(competitor_ids: Sequence[str], number_of_courts: int = 1,
                pool_id: Optional[str] = None, start_number: int = 1,
                id_prefix: str = 'rr') -> List[Match]:
    """
    Generate every pairing of ``competitor_ids`` exactly once.

    Courts cycle 1..number_of_courts within each round. Matches beyond the
    available courts in a round get no court.
    """
    matches = []
    match_number = start_number
    for round_index, pairs in enumerate(circle_rounds(competitor_ids), start=1):
        court = 1
        for a, b in pairs:
            matches.append(Match(
                id=f"{id_prefix}-{match_number}",
                round=round_index,
                match_number=match_number,
                slot_a=Bound(a),
                slot_b=Bound(b),
                status=SCHEDULED,
                court=court if court <= number_of_courts else None,
                pool_id=pool_id,
            ))
            match_number += 1
            court += 1
    return matches


def pool_phase(groups: Sequence[Group], number_of_courts: int = 1) -> List[Match]:
    """
    Generate the round robin of every pool, interleaved so pools play in
    parallel.

    Matches are ordered by round, then pool. Match numbers run across the
    whole phase. Courts are shared by all pools: they count up from 1 within
    each round and matches beyond the available courts get no court.
    """
    per_pool = [circle_rounds(group.member_ids) for group in groups]
    max_rounds = max((len(r) for r in per_pool), default=0)

    matches = []
    match_number = 1
    for round_index in range(max_rounds):
        court = 1
        for group, rounds in zip(groups, per_pool):
            if round_index >= len(rounds):
                continue
            for a, b in rounds[round_index]:
                matches.append(Match(
                    id=f"{group.id}-{match_number}",
                    round=round_index + 1,
                    match_number=match_number,
                    slot_a=Bound(a),
                    slot_b=Bound(b),
                    status=SCHEDULED,
                    court=court if court <= number_of_courts else None,
                    pool_id=group.id,
                ))
                match_number += 1
                court += 1

    logger.debug("Generated %d pool matches for %d pools", len(matches), len(groups))
    return matches


def round_robin_match_count(n: int) -> int:
    """Number of matches in a full round robin of ``n`` competitors."""
    return n * (n - 1) // 2 if n > 1 else 0


def pool_phase_match_count(groups: Sequence[Group], pool_size: Optional[int] = None) -> int:
    """
    Number of pool-phase matches.

    Uses actual pool membership; with ``pool_size`` given, empty (manual)
    pools count as ``pool_size`` minus their byes.
    """
    total = 0
    for group in groups:
        size = len(group.member_ids)
        if not size and pool_size:
            size = pool_size - group.bye_count
        total += round_robin_match_count(size)
    return total
