"""
Generalized knockout for 2 to 8 pools.

    2 pools:   semifinals 1A-2B and 1B-2A
    3 pools:   pool winners plus the best runner-up; the semifinal pairing
               depends on which pool that runner-up came from
    4-8 pools: pool winners plus the best runners-up fill eight seeds,
               quarterfinals 1v8, 2v7, 3v6, 4v5

Everyone else is eliminated in the pools.
"""
import logging
from typing import Dict, List, Sequence

from .models import Match, Placement, StandingEntry
from .placements import QUARTERFINAL, SEMIFINAL, THIRD_PLACE, FINAL, decided, losers_of, placement_label
from .standings import best_of_rank
from .topology import BracketTopology, BuildState, best_source, new_match, source, winner_of, loser_of

logger = logging.getLogger(__name__)

BRACKET_SIZE = 8
QUARTERFINAL_SEEDS = ((1, 8), (2, 7), (3, 6), (4, 5))

# Semifinal pairings for three pools, keyed by the pool of the best runner-up.
# Each side is (pool_index, rank).
THREE_POOL_PAIRINGS = {
    0: (((0, 1), (0, 2)), ((1, 1), (2, 1))),
    1: (((0, 1), (2, 1)), ((1, 1), (1, 2))),
    2: (((0, 1), (1, 1)), ((2, 1), (2, 2))),
}


def seed_slot(pool_count: int, seed: int):
    """Seeds 1..pool_count are the pool winners, the rest the best runners-up."""
    if seed <= pool_count:
        return source(seed - 1, 1)
    return best_source(2, seed - pool_count)


def quarterfinal_pairs(pool_count: int):
    return tuple((seed_slot(pool_count, a), seed_slot(pool_count, b)) for a, b in QUARTERFINAL_SEEDS)


class GeneralizedBracket(BracketTopology):
    name = 'knockout'
    supported_pool_counts = (2, 3, 4, 5, 6, 7, 8)

    def _first_round(self, state: BuildState):
        """Semifinal or quarterfinal entries, depending on the pool count."""
        if self.pool_count == 2:
            pairs = ((source(0, 1), source(1, 2)), (source(1, 1), source(0, 2)))
        elif self.pool_count == 3:
            pairs = ((source(0, 1), best_source(2, 1, 'Best 2nd place')),
                     (source(1, 1), source(2, 1)))
        else:
            pairs = quarterfinal_pairs(self.pool_count)

        stage = SEMIFINAL if len(pairs) == 2 else QUARTERFINAL
        interval = (1, 4) if stage == SEMIFINAL else (1, BRACKET_SIZE)
        matches = []
        for i, (slot_a, slot_b) in enumerate(pairs):
            match, state = new_match(state, self.id_prefix, 1, slot_a, slot_b,
                                     stage=stage, court=self.court(i), placement_interval=interval)
            matches.append(match)
        return matches, state

    def placeholder(self) -> List[Match]:
        state = BuildState()
        first_round, state = self._first_round(state)
        matches = list(first_round)

        if first_round[0].stage == QUARTERFINAL:
            semifinals = []
            for i in range(2):
                match, state = new_match(
                    state, self.id_prefix, 2,
                    winner_of(first_round[2 * i]), winner_of(first_round[2 * i + 1]),
                    stage=SEMIFINAL, court=self.court(i), placement_interval=(1, 4),
                )
                semifinals.append(match)
            matches.extend(semifinals)
        else:
            semifinals = first_round

        final_round = semifinals[0].round + 1
        if self.third_place_match:
            match, state = new_match(
                state, self.id_prefix, final_round, loser_of(semifinals[0]), loser_of(semifinals[1]),
                stage=THIRD_PLACE, court=1, placement_interval=(3, 4), playoff_for_place=3,
            )
            matches.append(match)

        final, state = new_match(
            state, self.id_prefix, final_round, winner_of(semifinals[0]), winner_of(semifinals[1]),
            stage=FINAL, court=self.court(1) if self.third_place_match else 1,
            placement_interval=(1, 2), playoff_for_place=1,
        )
        matches.append(final)
        return matches

    def expected_match_count(self) -> int:
        count = 3 if self.pool_count <= 3 else 7
        return count + 1 if self.third_place_match else count

    @property
    def participants(self) -> int:
        return 4 if self.pool_count <= 3 else BRACKET_SIZE

    def resolve_sources(self, matches: Sequence[Match], standings: Dict[int, List[StandingEntry]]):
        if self.pool_count != 3:
            return super().resolve_sources(matches, standings)

        # Both semifinals are re-paired around the pool of the best runner-up
        ranked, ties = best_of_rank(standings, 2, 1)
        if ranked:
            best_pool = ranked[0][0]
            logger.debug("Best runner-up comes from pool %d", best_pool)
            pairings = THREE_POOL_PAIRINGS[best_pool]
            semifinals = [m for m in matches if m.stage == SEMIFINAL and m.round == 1]
            rewritten = {
                match.id: match._replace(slot_a=source(*side_a), slot_b=source(*side_b))
                for match, (side_a, side_b) in zip(semifinals, pairings)
            }
            matches = [rewritten.get(m.id, m) for m in matches]

        resolved, placed, more_ties = super().resolve_sources(matches, standings)
        return resolved, placed, ties + more_ties

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

        placements.extend(self.eliminated_placement(self.participants, eliminated_ids))
        return placements
