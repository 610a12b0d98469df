"""
Unit tests for round-robin generation.
"""
from itertools import combinations

import pytest

from bracket_engine.models import Group, SCHEDULED
from bracket_engine.round_robin import (
    circle_rounds, pool_phase, pool_phase_match_count, round_robin, round_robin_match_count,
)
from bracket_engine.seeding import snake_draft


def _pairs(matches):
    return [frozenset((m.competitor_a, m.competitor_b)) for m in matches]


class TestCircleMethod:
    """Tests for circle_rounds()."""

    @pytest.mark.parametrize("n", [2, 3, 4, 5, 6, 7, 8])
    def test_every_pair_exactly_once(self, n):
        """Test each pair meets once and nobody plays themselves."""
        ids = [f"c{i}" for i in range(n)]
        pairs = [frozenset(p) for r in circle_rounds(ids) for p in r]
        assert len(pairs) == n * (n - 1) // 2
        assert set(pairs) == {frozenset(p) for p in combinations(ids, 2)}
        assert all(len(p) == 2 for p in pairs)

    @pytest.mark.parametrize("n", [3, 4, 5, 6])
    def test_at_most_one_match_per_round(self, n):
        """Test no competitor appears twice in a round."""
        ids = [f"c{i}" for i in range(n)]
        for pairs in circle_rounds(ids):
            seen = [c for p in pairs for c in p]
            assert len(seen) == len(set(seen))

    def test_round_count(self):
        """Test n-1 rounds for even n and n rounds for odd n."""
        assert len(circle_rounds(['a', 'b', 'c', 'd'])) == 3
        assert len(circle_rounds(['a', 'b', 'c'])) == 3

    def test_too_few(self):
        """Test fewer than two competitors produce nothing."""
        assert circle_rounds([]) == []
        assert circle_rounds(['a']) == []

    def test_first_round_of_four(self):
        """Test the fixed competitor meets the last one first."""
        assert circle_rounds(['a', 'b', 'c', 'd'])[0] == [('a', 'd'), ('b', 'c')]


class TestRoundRobin:
    """Tests for round_robin()."""

    def test_matches_are_scheduled(self):
        """Test every pairing is bound and scheduled."""
        matches = round_robin(['a', 'b', 'c', 'd'], number_of_courts=2, pool_id='pool-A')
        assert len(matches) == 6
        assert all(m.status == SCHEDULED for m in matches)
        assert all(m.pool_id == 'pool-A' for m in matches)
        assert [m.match_number for m in matches] == list(range(1, 7))

    def test_courts_reset_each_round(self):
        """Test courts count up within a round."""
        matches = round_robin(['a', 'b', 'c', 'd'], number_of_courts=2)
        assert [m.court for m in matches] == [1, 2, 1, 2, 1, 2]

    def test_no_court_beyond_capacity(self):
        """Test matches beyond the courts of a round get no court."""
        matches = round_robin(['a', 'b', 'c', 'd'], number_of_courts=1)
        assert [m.court for m in matches if m.round == 1] == [1, None]

    def test_match_counts(self):
        """Test the n(n-1)/2 formula."""
        assert round_robin_match_count(4) == 6
        assert round_robin_match_count(5) == 10
        assert round_robin_match_count(1) == 0


class TestPoolPhase:
    """Tests for pool_phase()."""

    @pytest.fixture
    def groups(self):
        return [
            Group('pool-A', 'Pool A', ('a1', 'a2', 'a3', 'a4')),
            Group('pool-B', 'Pool B', ('b1', 'b2', 'b3', 'b4')),
            Group('pool-C', 'Pool C', ('c1', 'c2', 'c3'), bye_count=1),
        ]

    def test_match_count(self, groups):
        """Test the phase holds every pool's round robin."""
        matches = pool_phase(groups, 3)
        assert len(matches) == 6 + 6 + 3
        assert pool_phase_match_count(groups) == 15

    def test_no_duplicate_pairings(self, groups):
        """Test no pairing is generated twice."""
        pairs = _pairs(pool_phase(groups, 3))
        assert len(pairs) == len(set(pairs))

    def test_interleaved_by_round(self, groups):
        """Test matches are ordered by round, then pool."""
        matches = pool_phase(groups, 3)
        rounds = [m.round for m in matches]
        assert rounds == sorted(rounds)
        first_round = [m.pool_id for m in matches if m.round == 1]
        assert first_round == ['pool-A', 'pool-A', 'pool-B', 'pool-B', 'pool-C']

    def test_pairs_stay_inside_pools(self, groups):
        """Test competitors only meet their own pool."""
        members = {g.id: set(g.member_ids) for g in groups}
        for match in pool_phase(groups, 3):
            assert set(match.competitor_ids) <= members[match.pool_id]

    def test_courts_shared_within_round(self, groups):
        """Test no court is booked twice in a round and surplus matches get none."""
        matches = pool_phase(groups, 3)
        assert [m.court for m in matches if m.round == 1] == [1, 2, 3, None, None]
        assert [m.court for m in matches if m.round == 2][0] == 1

    def test_four_pools_on_four_courts(self, competitors):
        """Test four pools of four fill four courts each round."""
        matches = pool_phase(snake_draft(competitors, 4), 4)
        for round_number in (1, 2, 3):
            courts = [m.court for m in matches if m.round == round_number]
            assert courts == [1, 2, 3, 4, None, None, None, None]

    def test_ids_are_unique(self, groups):
        """Test match ids carry the pool and are unique."""
        matches = pool_phase(groups, 2)
        assert len({m.id for m in matches}) == len(matches)
        assert matches[0].id == 'pool-A-1'

    def test_manual_pools_count_capacity(self):
        """Test empty manual pools are counted from their capacity."""
        groups = [Group('pool-A', 'Pool A'), Group('pool-B', 'Pool B', bye_count=1)]
        assert pool_phase_match_count(groups, pool_size=4) == 6 + 3
