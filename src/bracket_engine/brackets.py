"""
Knockout topology selection by format and pool count.
"""
from typing import Dict, Optional, Sequence

from .fixed_four import FixedFourPoolBracket
from .knockout import GeneralizedBracket
from .models import Group
from .placement_tree import PlacementTree
from .round_robin import pool_phase_match_count
from .settings import merge_settings
from .short_main_round import ShortMainRound
from .topology import BracketTopology, TopologyError

KNOCKOUT = 'knockout'
FIXED_FOUR = 'fixed-four'
PLACEMENT_TREE = 'placement-tree'
SHORT_MAIN_ROUND = 'short-main-round'

FORMATS = (KNOCKOUT, FIXED_FOUR, PLACEMENT_TREE, SHORT_MAIN_ROUND)


def create_topology(knockout_format: str, pool_count: int, settings: Optional[Dict] = None) -> BracketTopology:
    """
    Build the topology for a format and pool count.

    Four pools in the plain knockout format use the fixed four-pool bracket.
    Raises TopologyError for unknown formats and unsupported pool counts.
    """
    settings = merge_settings(settings)
    options = {
        'pool_size': settings['pool_size'],
        'number_of_courts': settings['number_of_courts'],
        'third_place_match': settings['third_place_match'],
        'referees': settings['referees'],
    }

    if knockout_format == FIXED_FOUR:
        return FixedFourPoolBracket(pool_count, **options)
    if knockout_format == KNOCKOUT:
        if pool_count == 4:
            return FixedFourPoolBracket(pool_count, **options)
        return GeneralizedBracket(pool_count, **options)
    if knockout_format == PLACEMENT_TREE:
        return PlacementTree(pool_count, **options)
    if knockout_format == SHORT_MAIN_ROUND:
        return ShortMainRound(pool_count, **options)

    raise TopologyError(f"Unknown knockout format: {knockout_format}")


def expected_match_count(knockout_format: str, pool_count: int, settings: Optional[Dict] = None) -> int:
    """Number of knockout matches the format generates for ``pool_count`` pools."""
    return create_topology(knockout_format, pool_count, settings).expected_match_count()


def tournament_match_count(groups: Sequence[Group], settings: Optional[Dict] = None) -> int:
    """Pool phase plus knockout matches, for progress display."""
    settings = merge_settings(settings)
    pool_matches = pool_phase_match_count(groups, settings['pool_size'])
    return pool_matches + expected_match_count(settings['knockout_format'], len(groups), settings)
