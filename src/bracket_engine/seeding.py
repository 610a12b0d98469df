"""
Pool draws: snake draft, random draft, manual pools and feasibility checks.
"""
import logging
import math
import random
from typing import List, NamedTuple, Optional, Sequence

from .models import Competitor, Group

logger = logging.getLogger(__name__)

MIN_POOLS = 2
MAX_POOLS = 8
POOL_SIZES = (3, 4, 5)
POOL_NAMES = 'ABCDEFGH'


class DistributionResult(NamedTuple):
    valid: bool
    pool_count: int
    byes_needed: int
    error: Optional[str] = None


def pool_name(index: int) -> str:
    """Get the pool letter for an index (0 -> A, 1 -> B, ...)."""
    if index < len(POOL_NAMES):
        return POOL_NAMES[index]
    return str(index + 1)


def validate(count: int, pool_count: Optional[int] = None, pool_size: int = 4) -> DistributionResult:
    """
    Check that ``count`` competitors fit into pools of ``pool_size``.

    When ``pool_count`` is omitted the smallest number of pools that holds
    everyone is used. Never raises: problems come back as ``error``.
    """
    if pool_size not in POOL_SIZES:
        return DistributionResult(False, 0, 0, f"Pool size must be one of {POOL_SIZES}")

    min_count = MIN_POOLS * pool_size
    max_count = MAX_POOLS * pool_size
    if count < min_count:
        return DistributionResult(
            False, 0, 0, f"At least {min_count} competitors are needed for pools of {pool_size}")
    if count > max_count:
        return DistributionResult(
            False, 0, 0, f"At most {max_count} competitors fit into {MAX_POOLS} pools of {pool_size}")

    if pool_count is None:
        pool_count = math.ceil(count / pool_size)
    if pool_count < MIN_POOLS or pool_count > MAX_POOLS:
        return DistributionResult(
            False, pool_count, 0, f"Pool count must be between {MIN_POOLS} and {MAX_POOLS}")

    slots = pool_count * pool_size
    if count > slots:
        return DistributionResult(
            False, pool_count, 0, f"{count} competitors do not fit into {pool_count} pools of {pool_size}")

    byes_needed = slots - count
    if byes_needed >= pool_size:
        return DistributionResult(
            False, pool_count, byes_needed,
            f"{byes_needed} byes would leave a pool without competitors")

    return DistributionResult(True, pool_count, byes_needed)


def distribute_byes(pool_count: int, byes_needed: int) -> List[int]:
    """Spread byes over the pools, starting from the last pool."""
    byes = [0] * pool_count
    for i in range(byes_needed):
        byes[pool_count - 1 - (i % pool_count)] += 1
    return byes


def describe_distribution(count: int, pool_size: int = 4) -> str:
    """Human-readable summary of how ``count`` competitors are split up."""
    result = validate(count, pool_size=pool_size)
    if not result.valid:
        return result.error
    matches_per_pool = pool_size * (pool_size - 1) // 2
    if result.byes_needed == 0:
        return f"{result.pool_count} pools of {pool_size} ({matches_per_pool} matches per pool)"
    byes = 'bye' if result.byes_needed == 1 else 'byes'
    return (f"{result.pool_count} pools of {pool_size} with {result.byes_needed} {byes} "
            f"({matches_per_pool} matches per pool)")


def _empty_groups(pool_count: int, byes_needed: int) -> List[Group]:
    byes = distribute_byes(pool_count, byes_needed) if byes_needed else [0] * pool_count
    return [
        Group(id=f"pool-{pool_name(i)}", name=f"Pool {pool_name(i)}", bye_count=byes[i])
        for i in range(pool_count)
    ]


def _deal(ordered: Sequence[Competitor], groups: List[Group], pool_size: Optional[int], order) -> List[Group]:
    """Deal competitors into groups following ``order`` (a pool index generator).

    Pools that reached ``pool_size`` minus their byes are skipped.
    """
    members = [[] for _ in groups]
    capacity = [
        (pool_size - g.bye_count) if pool_size else len(ordered)
        for g in groups
    ]
    if sum(capacity) < len(ordered):
        raise ValueError(f"{len(ordered)} competitors do not fit into {len(groups)} pools")
    indexes = order()
    for competitor in ordered:
        index = next(indexes)
        while len(members[index]) >= capacity[index]:
            index = next(indexes)
        members[index].append(competitor.id)
    return [g._replace(member_ids=tuple(m)) for g, m in zip(groups, members)]


def _snake_order(pool_count: int):
    def order():
        forward = True
        while True:
            pools = range(pool_count) if forward else range(pool_count - 1, -1, -1)
            for index in pools:
                yield index
            forward = not forward
    return order


def _cyclic_order(pool_count: int):
    def order():
        index = 0
        while True:
            yield index % pool_count
            index += 1
    return order


def snake_draft(competitors: Sequence[Competitor], pool_count: int,
                byes_needed: int = 0, pool_size: Optional[int] = None) -> List[Group]:
    """
    Distribute competitors over pools in snake order.

    Example with 16 competitors and 4 pools:
    Pool A: 1, 8, 9, 16
    Pool B: 2, 7, 10, 15
    Pool C: 3, 6, 11, 14
    Pool D: 4, 5, 12, 13
    """
    ordered = sorted(competitors, key=lambda c: c.seed)
    groups = _empty_groups(pool_count, byes_needed)
    return _deal(ordered, groups, pool_size, _snake_order(pool_count))


def random_draft(competitors: Sequence[Competitor], pool_count: int, byes_needed: int = 0,
                 pool_size: Optional[int] = None, rng: Optional[random.Random] = None) -> List[Group]:
    """Shuffle competitors, then deal them round-robin over the pools."""
    rng = rng or random.Random()
    shuffled = list(competitors)
    rng.shuffle(shuffled)
    groups = _empty_groups(pool_count, byes_needed)
    return _deal(shuffled, groups, pool_size, _cyclic_order(pool_count))


def manual_draft(pool_count: int, byes_needed: int = 0) -> List[Group]:
    """Empty pools to be filled by hand."""
    return _empty_groups(pool_count, byes_needed)


def draw_pools(competitors: Sequence[Competitor], pool_size: int = 4, method: str = 'snake',
               pool_count: Optional[int] = None, rng: Optional[random.Random] = None):
    """
    Validate the roster and draw pools with the configured seeding method.

    Returns (groups, DistributionResult). Groups is empty when the
    distribution is invalid.
    """
    result = validate(len(competitors), pool_count, pool_size)
    if not result.valid:
        logger.info("Pool draw rejected: %s", result.error)
        return [], result

    if method == 'snake':
        groups = snake_draft(competitors, result.pool_count, result.byes_needed, pool_size)
    elif method == 'random':
        groups = random_draft(competitors, result.pool_count, result.byes_needed, pool_size, rng)
    elif method == 'manual':
        groups = manual_draft(result.pool_count, result.byes_needed)
    else:
        return [], DistributionResult(False, result.pool_count, result.byes_needed,
                                      f"Unknown seeding method: {method}")

    logger.debug("Drew %d pools (%d byes) using %s seeding",
                 result.pool_count, result.byes_needed, method)
    return groups, result
