"""
Human-readable stage labels, placement strings and final placements.
"""
from typing import Iterable, List, Optional, Sequence, Tuple

from .models import Match, Placement, COMPLETED

INTERMEDIATE = 'intermediate'
QUARTERFINAL = 'quarterfinal'
SEMIFINAL = 'semifinal'
THIRD_PLACE = 'third-place'
FINAL = 'final'

QUALIFICATION = 'qualification'
TOP_QUARTERFINAL = 'top-quarterfinal'
TOP_SEMIFINAL = 'top-semifinal'
TOP_FINAL = 'top-final'
PLACEMENT_5_8 = 'placement-5-8'
PLACEMENT_9_12 = 'placement-9-12'
PLACEMENT_13_16 = 'placement-13-16'

PLACEMENT_FINAL = 'placement-final'
PLACEMENT_ROUND = 'placement-round-'

STAGE_LABELS = {
    INTERMEDIATE: 'Intermediate round',
    QUARTERFINAL: 'Quarterfinal',
    SEMIFINAL: 'Semifinal',
    THIRD_PLACE: 'Match for 3rd place',
    FINAL: 'Final',
    QUALIFICATION: 'Qualification',
    TOP_QUARTERFINAL: 'Quarterfinal',
    TOP_SEMIFINAL: 'Semifinal',
    TOP_FINAL: 'Final',
    PLACEMENT_5_8: 'Places 5-8',
    PLACEMENT_9_12: 'Places 9-12',
    PLACEMENT_13_16: 'Places 13-16',
}


def ordinal(n: int) -> str:
    """1 -> '1st', 2 -> '2nd', 11 -> '11th'."""
    if 10 <= n % 100 <= 20:
        suffix = 'th'
    else:
        suffix = {1: 'st', 2: 'nd', 3: 'rd'}.get(n % 10, 'th')
    return f"{n}{suffix}"


def placement_label(lo: int, hi: Optional[int] = None) -> str:
    """Placement string: '1.' for a single rank, '13.-16.' for a range."""
    if hi is None or hi == lo:
        return f"{lo}."
    return f"{lo}.-{hi}."


def stage_label(stage: Optional[str], interval: Optional[Tuple[int, int]] = None) -> str:
    """Get the display name of a knockout stage."""
    if stage is None:
        return 'Pool match'
    if interval and interval[1] - interval[0] == 1 and stage not in (FINAL, TOP_FINAL, THIRD_PLACE):
        if stage == PLACEMENT_FINAL or stage in (PLACEMENT_5_8, PLACEMENT_9_12, PLACEMENT_13_16):
            return f"Match for {ordinal(interval[0])} place"
    if stage in STAGE_LABELS:
        return STAGE_LABELS[stage]
    if stage.startswith(PLACEMENT_ROUND):
        return f"Placement round {stage[len(PLACEMENT_ROUND):]}"
    if stage == PLACEMENT_FINAL:
        return 'Placement final'
    return 'Knockout round'


def _rank_key(placement: Placement) -> int:
    return int(placement.placement.split('.')[0])


def sort_placements(placements: Iterable[Placement]) -> List[Placement]:
    return sorted(placements, key=_rank_key)


def decided(match: Optional[Match]) -> bool:
    return match is not None and match.status == COMPLETED and match.winner_id is not None


def terminal_placements(matches: Sequence[Match]) -> List[Placement]:
    """
    Placements from every decided match that plays for an exact rank:
    the winner takes ``playoff_for_place``, the loser the rank after it.
    """
    placements = []
    for match in matches:
        if match.playoff_for_place is None or not decided(match):
            continue
        place = match.playoff_for_place
        placements.append(Placement(match.winner_id, placement_label(place)))
        if match.loser_id:
            placements.append(Placement(match.loser_id, placement_label(place + 1)))
    return sort_placements(placements)


def losers_of(matches: Sequence[Match], stage: str) -> List[str]:
    """Losers of every decided match of ``stage``."""
    return [
        m.loser_id for m in matches
        if m.stage == stage and decided(m) and m.loser_id
    ]
