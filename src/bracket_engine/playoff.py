"""
Playoff round: adjacent finishers of a standings table play for placement.
"""
from typing import List, Sequence

from .models import Bound, Match, StandingEntry, SCHEDULED
from .placements import ordinal


def playoff_matches(standings: Sequence[StandingEntry], number_of_courts: int = 1) -> List[Match]:
    """
    Pair 1st with 2nd, 3rd with 4th and so on.

    Each match plays for the rank of its better-placed competitor. An odd
    last finisher keeps their rank without a match.
    """
    matches = []
    for i in range(0, len(standings) - 1, 2):
        number = len(matches) + 1
        matches.append(Match(
            id=f"po-{number}",
            round=1,
            match_number=number,
            slot_a=Bound(standings[i].competitor_id),
            slot_b=Bound(standings[i + 1].competitor_id),
            status=SCHEDULED,
            court=number if number <= number_of_courts else None,
            stage=f"playoff-{i + 1}",
            placement_interval=(i + 1, i + 2),
            playoff_for_place=i + 1,
        ))
    return matches


def playoff_label(match: Match) -> str:
    place = match.playoff_for_place
    return f"Match for {ordinal(place)}/{ordinal(place + 1)} place"
