"""
Unit tests for knockout referee assignment.
"""
from bracket_engine.fixed_four import FixedFourPoolBracket
from bracket_engine.models import Bound, Match, SCHEDULED
from bracket_engine.placements import INTERMEDIATE, QUARTERFINAL, SEMIFINAL
from bracket_engine.referees import assign_knockout_referees, assign_referees, opponent_history


def _match(match_id, a, b, stage=INTERMEDIATE):
    return Match(match_id, 1, 1, Bound(a), Bound(b), status=SCHEDULED, stage=stage)


class TestOpponentHistory:
    """Tests for opponent_history()."""

    def test_both_directions(self):
        """Test each pool match is recorded for both competitors."""
        history = opponent_history([_match('m1', 'a', 'b'), _match('m2', 'a', 'c')])
        assert history == {'a': {'b', 'c'}, 'b': {'a'}, 'c': {'a'}}


class TestAssignReferees:
    """Tests for assign_referees()."""

    def test_prefers_fresh_referee(self):
        """Test a referee who has not met either side is picked first."""
        matches = [_match('m1', 'a', 'b'), _match('m2', 'c', 'd')]
        history = {'x': {'a'}}
        assigned = assign_referees(matches, (INTERMEDIATE,), ['x', 'y'], history)
        assert assigned[0].referee == Bound('y')
        assert assigned[1].referee == Bound('x')

    def test_each_candidate_once(self):
        """Test no candidate referees two matches of the same call."""
        matches = [_match('m1', 'a', 'b'), _match('m2', 'c', 'd')]
        assigned = assign_referees(matches, (INTERMEDIATE,), ['x'], {})
        assert assigned[0].referee == Bound('x')
        assert assigned[1].referee is None

    def test_never_referees_own_match(self):
        """Test a competitor is not picked for their own match."""
        assigned = assign_referees([_match('m1', 'a', 'b')], (INTERMEDIATE,), ['a'], {})
        assert assigned[0].referee is None

    def test_other_stages_untouched(self):
        """Test matches outside the stages are left alone."""
        match = _match('m1', 'a', 'b', stage=SEMIFINAL)
        assert assign_referees([match], (INTERMEDIATE,), ['x'], {}) == [match]


class TestKnockoutReferees:
    """Tests for referees in the fixed four-pool bracket."""

    def test_fourth_places_referee_intermediate_round(self, make_standings, settings):
        """Test pool 4ths are assigned to the intermediate round."""
        bracket = FixedFourPoolBracket(4)
        standings = make_standings(4)
        result = bracket.populate(bracket.placeholder(), standings, settings)
        assigned = assign_knockout_referees(result.matches, standings, [])
        referees = [m.referee for m in assigned if m.stage == INTERMEDIATE]
        assert referees == [Bound('A4'), Bound('B4'), Bound('C4'), Bound('D4')]
        assert all(m.referee is None for m in assigned if m.stage == QUARTERFINAL)

    def test_referee_slots_in_skeleton(self, make_standings, settings):
        """Test referee slots resolve from other pools when enabled."""
        bracket = FixedFourPoolBracket(4, referees=True)
        result = bracket.populate(bracket.placeholder(), make_standings(4), settings)
        intermediates = [m for m in result.matches if m.stage == INTERMEDIATE]
        assert [m.referee for m in intermediates] == [Bound('B4'), Bound('A4'), Bound('D4'), Bound('C4')]

    def test_referees_follow_results(self, make_standings, settings, play_out):
        """Test intermediate losers referee the semifinals."""
        bracket = FixedFourPoolBracket(4, referees=True)
        result = bracket.populate(bracket.placeholder(), make_standings(4), settings)
        matches = play_out(result.matches, settings)
        semifinals = [m for m in matches if m.stage == SEMIFINAL]
        assert semifinals[0].referee == Bound('D3')
        assert semifinals[1].referee == Bound('C3')

    def test_no_referees_by_default(self, make_standings, settings):
        """Test referee slots stay empty when the option is off."""
        bracket = FixedFourPoolBracket(4)
        result = bracket.populate(bracket.placeholder(), make_standings(4), settings)
        assert all(m.referee is None for m in result.matches)
