"""
Shared pytest fixtures for bracket engine tests.

Running tests:
    pytest tests/                  - full suite
    pytest tests/ -m "not slow"   - skip the full tournament simulations
"""
import pytest
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from bracket_engine.models import Competitor, SetScore, StandingEntry, SCHEDULED
from bracket_engine.propagation import record_result
from bracket_engine.seeding import pool_name
from bracket_engine.settings import get_default_settings


@pytest.fixture
def settings():
    """Default settings: single set to 21, head-to-head first."""
    return get_default_settings()


@pytest.fixture
def competitors():
    """Sixteen competitors seeded 1..16."""
    return [Competitor(id=f"t{i}", name=f"Team {i}", seed=i) for i in range(1, 17)]


@pytest.fixture
def make_standings():
    """
    Build pool standings without playing any matches.

    Competitor ids are pool letter plus rank ('A1', 'B3'). ``stats`` maps
    (pool_index, rank) to (points, point_diff) for the entries a test cares
    about; everything else gets points decreasing with rank.
    """
    def build(pool_count, pool_size=4, stats=None, short_pools=()):
        stats = stats or {}
        standings = {}
        for pool_index in range(pool_count):
            size = pool_size - 1 if pool_index in short_pools else pool_size
            entries = []
            for rank in range(1, size + 1):
                points, diff = stats.get((pool_index, rank), (size - rank, 0))
                entries.append(StandingEntry(
                    competitor_id=f"{pool_name(pool_index)}{rank}",
                    points=points,
                    points_won=100 + diff,
                    points_lost=100,
                    rank=rank,
                    pool_id=f"pool-{pool_name(pool_index)}",
                ))
            standings[pool_index] = entries
        return standings
    return build


@pytest.fixture
def play_out():
    """
    Play every scheduled match until none is left.

    Side A wins unless ``winner`` (a function of the match) says otherwise.
    """
    def play(matches, settings, winner=None):
        while True:
            ready = [m for m in matches if m.status == SCHEDULED]
            if not ready:
                return matches
            match = min(ready, key=lambda m: m.match_number)
            a_wins = winner(match) == match.competitor_a if winner else True
            score = SetScore(21, 15) if a_wins else SetScore(15, 21)
            scores = [score] if settings['sets_per_match'] == 1 else [score, score]
            matches = record_result(matches, match.id, scores, settings)
    return play
