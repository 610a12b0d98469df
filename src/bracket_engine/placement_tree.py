"""
Placement tree: a knockout in which every competitor plays every round and
every rank 1..N is decided.

Seeds are ordered by pool rank first and pool index second. Round 1 pairs
seed i with seed N+1-i over the interval [1, N]. Each match sends its winner
to the top half and its loser to the bottom half of its interval. In later
rounds the feeders of an interval are paired first against last by bracket
position. A match whose interval spans two ranks is terminal: its winner
takes the first rank and its loser the second.

Competitor counts that are not a power of two are padded with byes up to the
next power of two. Padding is routed while the tree is built: the winner of
a match between two byes and the loser of any match with a bye are byes
themselves, so no competitor ever waits on a match nobody can play.
"""
import logging
import math
from typing import List, Tuple

from .models import Match, Placeholder, BYE_LABEL, LOSER, WINNER
from .placements import PLACEMENT_FINAL, PLACEMENT_ROUND
from .topology import BracketTopology, BuildState, new_match, source, winner_of, loser_of

logger = logging.getLogger(__name__)


def bracket_size(count: int) -> int:
    """Next power of two (at least 2)."""
    if count <= 2:
        return 2
    return 2 ** math.ceil(math.log2(count))


def placement_tree_match_count(count: int) -> int:
    """
    Matches in a placement tree for ``count`` competitors.

    Every round has size/2 matches and there are log2(size) rounds, which
    is never less than count - 1.
    """
    size = bracket_size(count)
    return size // 2 * int(math.log2(size))


def placement_tree_rounds(count: int) -> int:
    return int(math.log2(bracket_size(count)))


class PlacementTree(BracketTopology):
    name = 'placement-tree'
    id_prefix = 'pt'
    supported_pool_counts = (2, 3, 4, 5, 6, 7, 8)

    @property
    def competitor_count(self) -> int:
        return self.pool_count * self.pool_size

    def seed_slots(self) -> list:
        """Seed order: every pool's 1st, then every pool's 2nd, and so on."""
        slots = [
            source(pool_index, rank)
            for rank in range(1, self.pool_size + 1)
            for pool_index in range(self.pool_count)
        ]
        size = bracket_size(len(slots))
        slots.extend(Placeholder(BYE_LABEL) for _ in range(size - len(slots)))
        return slots

    def _court(self, position: int):
        return self.court(position - 1)

    @staticmethod
    def _feed(match: Match, outcome: str):
        """Slot fed by ``outcome`` of ``match``, or a bye when padding decides it."""
        byes = sum(isinstance(s, Placeholder) for s in (match.slot_a, match.slot_b))
        if byes == 2 or (byes == 1 and outcome == LOSER):
            return Placeholder(BYE_LABEL)
        return winner_of(match) if outcome == WINNER else loser_of(match)

    @staticmethod
    def _stage(round: int, interval: Tuple[int, int]) -> str:
        if interval[1] - interval[0] == 1:
            return PLACEMENT_FINAL
        return f"{PLACEMENT_ROUND}{round}"

    def _first_round(self, state: BuildState, slots: list):
        size = len(slots)
        interval = (1, size)
        matches = []
        for i in range(size // 2):
            match, state = new_match(
                state, self.id_prefix, 1, slots[i], slots[size - 1 - i],
                stage=self._stage(1, interval), court=self._court(state.next_position),
                placement_interval=interval,
                playoff_for_place=1 if size == 2 else None,
            )
            matches.append(match)
        return matches, state

    def _next_round(self, state: BuildState, round: int, previous: List[Match]):
        """Pair the feeders of every interval produced by ``previous``."""
        groups = {}
        for match in previous:
            if match.playoff_for_place is not None:
                continue
            groups.setdefault(match.winner_interval, []).append((match, WINNER))
            groups.setdefault(match.loser_interval, []).append((match, LOSER))

        matches = []
        for interval in sorted(groups):
            feeders = sorted(groups[interval], key=lambda f: f[0].bracket_position)
            terminal = interval[1] - interval[0] == 1
            for i in range(len(feeders) // 2):
                first, first_outcome = feeders[i]
                last, last_outcome = feeders[len(feeders) - 1 - i]
                slot_a = self._feed(first, first_outcome)
                slot_b = self._feed(last, last_outcome)
                match, state = new_match(
                    state, self.id_prefix, round, slot_a, slot_b,
                    stage=self._stage(round, interval), court=self._court(state.next_position),
                    placement_interval=interval,
                    playoff_for_place=interval[0] if terminal else None,
                )
                matches.append(match)
        return matches, state

    def placeholder(self) -> List[Match]:
        slots = self.seed_slots()
        state = BuildState()
        current, state = self._first_round(state, slots)
        matches = list(current)

        round = 2
        while any(m.playoff_for_place is None for m in current):
            # Bracket positions restart every round; match numbers do not
            current, state = self._next_round(state._replace(next_position=1), round, current)
            matches.extend(current)
            round += 1

        logger.debug("Placement tree for %d competitors: %d matches in %d rounds",
                     self.competitor_count, len(matches), round - 1)
        return matches

    def expected_match_count(self) -> int:
        return placement_tree_match_count(self.competitor_count)
