"""
Shortened main round.

Four pools (16 competitors with pools of four, 24 matches):

    Round 1  qualification 2A-3D, 2B-3C, 2C-3B, 2D-3A
             13-16 semifinals 4A-4B, 4C-4D
    Round 2  quarterfinals: pool winners against qualification winners
             9-12 semifinals between qualification losers
             matches for 13th and 15th place
    Round 3  semifinals, 5-8 semifinals, matches for 9th and 11th place
    Round 4  final, match for 3rd place, matches for 5th and 7th place

Every rank 1..16 is played out.

Two pools play semifinals 1A-2B and 1B-2A. Five to eight pools play
quarterfinals between the pool winners and the best runners-up. Both then
finish with the match for 3rd place and the final; quarterfinal losers share
5th place and everyone else is eliminated in the pools. Three pools have no
shortened main round.
"""
from typing import List, Sequence

from .knockout import BRACKET_SIZE, quarterfinal_pairs
from .models import Match, Placement
from .placements import (
    QUALIFICATION, TOP_QUARTERFINAL, TOP_SEMIFINAL, TOP_FINAL, THIRD_PLACE,
    PLACEMENT_5_8, PLACEMENT_9_12, PLACEMENT_13_16,
    losers_of, placement_label, sort_placements, terminal_placements,
)
from .topology import BracketTopology, BuildState, new_match, source, winner_of, loser_of

QUALIFICATION_PAIRINGS = ((0, 3), (1, 2), (2, 1), (3, 0))
QUARTERFINAL_PAIRINGS = ((0, 1), (1, 0), (2, 3), (3, 2))
BOTTOM_PAIRINGS = ((0, 1), (2, 3))


def short_main_round_match_count(pool_count: int = 4) -> int:
    if pool_count == 4:
        # 4 + 2 in round 1, 4 + 2 + 2 in round 2, 2 + 2 + 2 in round 3, 1 + 1 + 2 in round 4
        return 24
    # Semifinals or quarterfinals and semifinals, then the match for 3rd place and the final
    return 4 if pool_count == 2 else 8


class ShortMainRound(BracketTopology):
    name = 'short-main-round'
    id_prefix = 'smr'
    supported_pool_counts = (2, 4, 5, 6, 7, 8)

    def __init__(self, pool_count: int, pool_size: int = 4, number_of_courts: int = 1,
                 third_place_match: bool = True, referees: bool = False):
        # The match for 3rd place always exists
        super().__init__(pool_count, pool_size, number_of_courts, True, referees)

    def _pair_round(self, state: BuildState, round: int, pairs, stage: str, interval,
                    playoff_for_place=None, court_offset: int = 0):
        matches = []
        for i, (slot_a, slot_b) in enumerate(pairs):
            match, state = new_match(
                state, self.id_prefix, round, slot_a, slot_b,
                stage=stage, court=self.court(court_offset + i),
                placement_interval=interval, playoff_for_place=playoff_for_place,
            )
            matches.append(match)
        return matches, state

    def _placement_pair(self, state: BuildState, round: int, semis: List[Match], stage: str, first_place: int):
        """Winners play for ``first_place``, losers for the rank two below."""
        winners, state = self._pair_round(
            state, round, [(winner_of(semis[0]), winner_of(semis[1]))], stage,
            (first_place, first_place + 1), first_place)
        losers, state = self._pair_round(
            state, round, [(loser_of(semis[0]), loser_of(semis[1]))], stage,
            (first_place + 2, first_place + 3), first_place + 2, court_offset=1)
        return winners + losers, state

    def _medal_round(self, state: BuildState, round: int, semifinals: List[Match]):
        third, state = self._pair_round(
            state, round, [(loser_of(semifinals[0]), loser_of(semifinals[1]))], THIRD_PLACE, (3, 4), 3)
        final, state = self._pair_round(
            state, round, [(winner_of(semifinals[0]), winner_of(semifinals[1]))], TOP_FINAL, (1, 2), 1,
            court_offset=1)
        return third + final, state

    def _four_pools(self) -> List[Match]:
        state = BuildState()

        # Round 1
        qualification, state = self._pair_round(
            state, 1, [(source(a, 2), source(b, 3)) for a, b in QUALIFICATION_PAIRINGS],
            QUALIFICATION, (1, 12))
        bottom_semis, state = self._pair_round(
            state, 1, [(source(a, 4), source(b, 4)) for a, b in BOTTOM_PAIRINGS],
            PLACEMENT_13_16, (13, 16))

        # Round 2
        quarterfinals, state = self._pair_round(
            state, 2, [(source(pool, 1), winner_of(qualification[q])) for pool, q in QUARTERFINAL_PAIRINGS],
            TOP_QUARTERFINAL, (1, 8))
        lower_semis, state = self._pair_round(
            state, 2, [(loser_of(qualification[0]), loser_of(qualification[1])),
                       (loser_of(qualification[2]), loser_of(qualification[3]))],
            PLACEMENT_9_12, (9, 12))
        bottom_finals, state = self._placement_pair(state, 2, bottom_semis, PLACEMENT_13_16, 13)

        # Round 3
        semifinals, state = self._pair_round(
            state, 3, [(winner_of(quarterfinals[0]), winner_of(quarterfinals[1])),
                       (winner_of(quarterfinals[2]), winner_of(quarterfinals[3]))],
            TOP_SEMIFINAL, (1, 4))
        middle_semis, state = self._pair_round(
            state, 3, [(loser_of(quarterfinals[0]), loser_of(quarterfinals[1])),
                       (loser_of(quarterfinals[2]), loser_of(quarterfinals[3]))],
            PLACEMENT_5_8, (5, 8))
        lower_finals, state = self._placement_pair(state, 3, lower_semis, PLACEMENT_9_12, 9)

        # Round 4
        medals, state = self._medal_round(state, 4, semifinals)
        middle_finals, state = self._placement_pair(state, 4, middle_semis, PLACEMENT_5_8, 5)

        return (qualification + bottom_semis
                + quarterfinals + lower_semis + bottom_finals
                + semifinals + middle_semis + lower_finals
                + medals + middle_finals)

    def _top_bracket(self) -> List[Match]:
        state = BuildState()
        if self.pool_count == 2:
            semifinals, state = self._pair_round(
                state, 1, [(source(0, 1), source(1, 2)), (source(1, 1), source(0, 2))],
                TOP_SEMIFINAL, (1, 4))
            matches = list(semifinals)
        else:
            quarterfinals, state = self._pair_round(
                state, 1, quarterfinal_pairs(self.pool_count), TOP_QUARTERFINAL, (1, BRACKET_SIZE))
            semifinals, state = self._pair_round(
                state, 2, [(winner_of(quarterfinals[0]), winner_of(quarterfinals[1])),
                           (winner_of(quarterfinals[2]), winner_of(quarterfinals[3]))],
                TOP_SEMIFINAL, (1, 4))
            matches = quarterfinals + semifinals

        medals, state = self._medal_round(state, semifinals[0].round + 1, semifinals)
        return matches + medals

    def placeholder(self) -> List[Match]:
        if self.pool_count == 4:
            return self._four_pools()
        return self._top_bracket()

    def expected_match_count(self) -> int:
        return short_main_round_match_count(self.pool_count)

    @property
    def participants(self) -> int:
        if self.pool_count == 4:
            return 4 * 4
        return 4 if self.pool_count == 2 else BRACKET_SIZE

    def placements(self, matches: Sequence[Match], eliminated_ids: Sequence[str] = ()) -> List[Placement]:
        placements = terminal_placements(matches)
        if self.pool_count != 4:
            placements.extend(Placement(loser, placement_label(5, 8))
                              for loser in losers_of(matches, TOP_QUARTERFINAL))
        placements.extend(self.eliminated_placement(self.participants, eliminated_ids))
        return sort_placements(placements)
