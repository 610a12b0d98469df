"""
Fixed knockout for exactly four pools.

Pool winners get a bye into the quarterfinals. Second and third placed
competitors play an intermediate round, each 2nd facing the 3rd of the pool
at the opposite end of the seeding order (2A-3D, 2B-3C, 2C-3B, 2D-3A).
Everyone below 3rd is eliminated. Semifinals, an optional match for 3rd
place and the final follow.
"""
from typing import List, Sequence

from .models import Match, Placement
from .placements import (
    INTERMEDIATE, QUARTERFINAL, SEMIFINAL, THIRD_PLACE, FINAL,
    decided, losers_of, placement_label,
)
from .topology import BracketTopology, BuildState, new_match, source, winner_of, loser_of

# (pool of the 2nd, pool of the 3rd)
INTERMEDIATE_PAIRINGS = ((0, 3), (1, 2), (2, 1), (3, 0))

# (pool whose winner plays, intermediate match it meets)
QUARTERFINAL_PAIRINGS = ((0, 1), (1, 0), (2, 3), (3, 2))

# Pools supplying the 4th-placed referee, chosen outside the pools playing
INTERMEDIATE_REFEREE_POOLS = (1, 0, 3, 2)
QUARTERFINAL_REFEREE_POOLS = (3, 2, 1, 0)


def knockout_match_count(third_place_match: bool = True) -> int:
    """4 intermediate + 4 quarterfinals + 2 semifinals + final (+ 3rd place)."""
    return 12 if third_place_match else 11


class FixedFourPoolBracket(BracketTopology):
    name = 'fixed-four'
    supported_pool_counts = (4,)

    def _referee_source(self, pool_index: int):
        # Pools of 3 have no 4th place to referee
        if not self.referees or self.pool_size < 4:
            return None
        return source(pool_index, 4)

    def placeholder(self) -> List[Match]:
        state = BuildState()
        matches = []

        intermediates = []
        for i, (pool_a, pool_b) in enumerate(INTERMEDIATE_PAIRINGS):
            match, state = new_match(
                state, self.id_prefix, 1, source(pool_a, 2), source(pool_b, 3),
                stage=INTERMEDIATE, court=self.court(i),
                referee=self._referee_source(INTERMEDIATE_REFEREE_POOLS[i]),
            )
            intermediates.append(match)
        matches.extend(intermediates)

        quarterfinals = []
        for i, (pool, feeder) in enumerate(QUARTERFINAL_PAIRINGS):
            match, state = new_match(
                state, self.id_prefix, 2, source(pool, 1), winner_of(intermediates[feeder]),
                stage=QUARTERFINAL, court=self.court(i), placement_interval=(1, 8),
                referee=self._referee_source(QUARTERFINAL_REFEREE_POOLS[i]),
            )
            quarterfinals.append(match)
        matches.extend(quarterfinals)

        semifinals = []
        for i in range(2):
            match, state = new_match(
                state, self.id_prefix, 3,
                winner_of(quarterfinals[2 * i]), winner_of(quarterfinals[2 * i + 1]),
                stage=SEMIFINAL, court=self.court(i), placement_interval=(1, 4),
                referee=loser_of(intermediates[i]) if self.referees else None,
            )
            semifinals.append(match)
        matches.extend(semifinals)

        if self.third_place_match:
            match, state = new_match(
                state, self.id_prefix, 4, loser_of(semifinals[0]), loser_of(semifinals[1]),
                stage=THIRD_PLACE, court=1, placement_interval=(3, 4), playoff_for_place=3,
                referee=loser_of(quarterfinals[0]) if self.referees else None,
            )
            matches.append(match)

        final, state = new_match(
            state, self.id_prefix, 4, winner_of(semifinals[0]), winner_of(semifinals[1]),
            stage=FINAL, court=self.court(1) if self.third_place_match else 1,
            placement_interval=(1, 2), playoff_for_place=1,
            referee=loser_of(quarterfinals[1]) if self.referees else None,
        )
        matches.append(final)
        return matches

    def expected_match_count(self) -> int:
        return knockout_match_count(self.third_place_match)

    def placements(self, matches: Sequence[Match], eliminated_ids: Sequence[str] = ()) -> List[Placement]:
        placements = []
        final = next((m for m in matches if m.stage == FINAL), None)
        third = next((m for m in matches if m.stage == THIRD_PLACE), None)

        if decided(final):
            placements.append(Placement(final.winner_id, placement_label(1)))
            if final.loser_id:
                placements.append(Placement(final.loser_id, placement_label(2)))

        if third is not None:
            if decided(third):
                placements.append(Placement(third.winner_id, placement_label(3)))
                if third.loser_id:
                    placements.append(Placement(third.loser_id, placement_label(4)))
        else:
            for loser in losers_of(matches, SEMIFINAL):
                placements.append(Placement(loser, placement_label(3, 4)))

        for loser in losers_of(matches, QUARTERFINAL):
            placements.append(Placement(loser, placement_label(5, 8)))
        for loser in losers_of(matches, INTERMEDIATE):
            placements.append(Placement(loser, placement_label(9, 12)))

        placements.extend(self.eliminated_placement(12, eliminated_ids))
        return placements
