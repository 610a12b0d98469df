"""
Unit tests for result propagation and bye resolution.
"""
import pytest

from bracket_engine.models import (
    Bound, DependencyRef, Match, Placeholder, SetScore,
    BYE_LABEL, COMPLETED, IN_PROGRESS, LOSER, PENDING, SCHEDULED, WINNER,
)
from bracket_engine.propagation import (
    advance, correct_result, dependents_index, record_result, resolve_byes,
    schedule_ready, start_match,
)
from bracket_engine.scoring import ScoreError

BYE = Placeholder(BYE_LABEL)


def _winner(match_id, number):
    return DependencyRef(match_id, WINNER, f"Winner Match {number}")


def _loser(match_id, number):
    return DependencyRef(match_id, LOSER, f"Loser Match {number}")


def _by_id(matches):
    return {m.id: m for m in matches}


@pytest.fixture
def four_bracket():
    """Semifinals a-b and c-d, then a match for 3rd place and the final."""
    return [
        Match('s1', 1, 1, Bound('a'), Bound('b'), status=SCHEDULED),
        Match('s2', 1, 2, Bound('c'), Bound('d'), status=SCHEDULED),
        Match('t', 2, 3, _loser('s1', 1), _loser('s2', 2), playoff_for_place=3),
        Match('f', 2, 4, _winner('s1', 1), _winner('s2', 2), playoff_for_place=1),
    ]


class TestRecordResult:
    """Tests for record_result()."""

    def test_completes_match(self, four_bracket, settings):
        """Test a valid score completes the match with a winner."""
        matches = record_result(four_bracket, 's1', [[21, 15]], settings)
        s1 = _by_id(matches)['s1']
        assert s1.status == COMPLETED
        assert s1.winner_id == 'a'
        assert s1.scores == (SetScore(21, 15),)

    def test_binds_dependents(self, four_bracket, settings):
        """Test winner and loser are handed on."""
        matches = record_result(four_bracket, 's1', [[15, 21]], settings)
        by_id = _by_id(matches)
        assert by_id['f'].slot_a == Bound('b')
        assert by_id['t'].slot_a == Bound('a')
        assert by_id['f'].status == PENDING

    def test_schedules_when_both_bound(self, four_bracket, settings):
        """Test a dependent with both slots bound becomes scheduled."""
        matches = record_result(four_bracket, 's1', [[21, 15]], settings)
        matches = record_result(matches, 's2', [[21, 15]], settings)
        by_id = _by_id(matches)
        assert by_id['f'].status == SCHEDULED
        assert by_id['f'].competitor_ids == ('a', 'c')
        assert by_id['t'].competitor_ids == ('b', 'd')

    def test_input_list_untouched(self, four_bracket, settings):
        """Test matches are never modified in place."""
        record_result(four_bracket, 's1', [[21, 15]], settings)
        assert four_bracket[0].status == SCHEDULED
        assert four_bracket[3].slot_a == _winner('s1', 1)

    def test_invalid_score_rejected(self, four_bracket, settings):
        """Test the reason is raised and nothing changes."""
        with pytest.raises(ScoreError, match='won by 2'):
            record_result(four_bracket, 's1', [[21, 20]], settings)

    def test_decided_match_rejected(self, four_bracket, settings):
        """Test a second result for the same match is rejected."""
        matches = record_result(four_bracket, 's1', [[21, 15]], settings)
        with pytest.raises(ScoreError, match='already decided'):
            record_result(matches, 's1', [[15, 21]], settings)

    def test_unbound_match_rejected(self, four_bracket, settings):
        """Test a result needs both competitors."""
        with pytest.raises(ScoreError):
            record_result(four_bracket, 'f', [[21, 15]], settings)

    def test_unknown_match_rejected(self, four_bracket, settings):
        """Test an unknown id is rejected."""
        with pytest.raises(ScoreError):
            record_result(four_bracket, 'nope', [[21, 15]], settings)

    def test_in_progress_match_can_be_recorded(self, four_bracket, settings):
        """Test a started match accepts its result."""
        matches = start_match(four_bracket, 's1')
        assert _by_id(matches)['s1'].status == IN_PROGRESS
        matches = record_result(matches, 's1', [[21, 15]], settings)
        assert _by_id(matches)['s1'].status == COMPLETED


class TestCorrectResult:
    """Tests for correct_result()."""

    def test_same_winner_accepted(self, four_bracket, settings):
        """Test new scores with the same winner replace the old ones."""
        matches = record_result(four_bracket, 's1', [[21, 15]], settings)
        matches = correct_result(matches, 's1', [[21, 19]], settings)
        s1 = _by_id(matches)['s1']
        assert s1.scores == (SetScore(21, 19),)
        assert _by_id(matches)['f'].slot_a == Bound('a')

    def test_winner_change_rejected(self, four_bracket, settings):
        """Test a correction cannot flip the winner."""
        matches = record_result(four_bracket, 's1', [[21, 15]], settings)
        with pytest.raises(ScoreError, match='change its winner'):
            correct_result(matches, 's1', [[15, 21]], settings)

    def test_undecided_rejected(self, four_bracket, settings):
        """Test only decided matches can be corrected."""
        with pytest.raises(ScoreError):
            correct_result(four_bracket, 's1', [[21, 15]], settings)


class TestAdvance:
    """Tests for advance()."""

    def test_idempotent(self, four_bracket, settings):
        """Test advancing twice changes nothing the second time."""
        matches = record_result(four_bracket, 's1', [[21, 15]], settings)
        assert advance(matches, 's1') == matches
        assert advance(advance(matches, 's1'), 's1') == matches

    def test_undecided_is_noop(self, four_bracket):
        """Test undecided and unknown matches leave the list as it is."""
        assert advance(four_bracket, 's1') == four_bracket
        assert advance(four_bracket, 'missing') == four_bracket

    def test_dependents_index(self, four_bracket):
        """Test the reverse dependency map."""
        index = dependents_index(four_bracket)
        assert index == {'s1': ['t', 'f'], 's2': ['t', 'f']}


class TestByes:
    """Tests for resolve_byes()."""

    def test_single_bye_auto_completes(self, four_bracket, settings):
        """Test a bound competitor facing a bye advances with a walk-over."""
        matches = [four_bracket[0], four_bracket[1]._replace(slot_b=BYE)] + four_bracket[2:]
        by_id = _by_id(resolve_byes(matches, settings))
        assert by_id['s2'].status == COMPLETED
        assert by_id['s2'].winner_id == 'c'
        assert by_id['s2'].scores == (SetScore(21, 19),)
        assert by_id['f'].slot_b == Bound('c')
        assert by_id['t'].slot_b == BYE

    def test_bye_loser_cascades(self, four_bracket, settings):
        """Test the match fed by a bye's loser completes once its other side is known."""
        matches = [four_bracket[0], four_bracket[1]._replace(slot_b=BYE)] + four_bracket[2:]
        matches = resolve_byes(matches, settings)
        matches = record_result(matches, 's1', [[21, 15]], settings)
        by_id = _by_id(matches)
        assert by_id['t'].status == COMPLETED
        assert by_id['t'].winner_id == 'b'
        assert by_id['f'].status == SCHEDULED

    def test_result_into_match_facing_bye(self, settings):
        """Test a recorded winner meeting a bye advances straight through."""
        matches = [
            Match('r1', 1, 1, Bound('a'), Bound('b'), status=SCHEDULED),
            Match('q1', 2, 2, _winner('r1', 1), BYE),
            Match('f', 3, 3, _winner('q1', 2), Bound('c')),
        ]
        matches = record_result(resolve_byes(matches, settings), 'r1', [[21, 15]], settings)
        by_id = _by_id(matches)
        assert by_id['q1'].status == COMPLETED
        assert by_id['q1'].winner_id == 'a'
        assert by_id['f'].competitor_ids == ('a', 'c')
        assert by_id['f'].status == SCHEDULED

    def test_double_bye_is_dead(self, settings):
        """Test two byes leave the match undecided and its dependents waiting."""
        matches = [
            Match('r1', 1, 1, Bound('a'), BYE),
            Match('r2', 1, 2, BYE, BYE),
            Match('q1', 2, 3, _winner('r1', 1), _winner('r2', 2)),
        ]
        by_id = _by_id(resolve_byes(matches, settings))
        assert by_id['r1'].winner_id == 'a'
        assert by_id['r2'].status != COMPLETED
        assert by_id['r2'].winner_id is None
        assert by_id['q1'].status == PENDING
        assert by_id['q1'].winner_id is None
        assert by_id['q1'].slot_a == Bound('a')
        assert by_id['q1'].slot_b == _winner('r2', 2)

    def test_cascade_over_rounds(self, settings):
        """Test byes resolve through several rounds in one pass."""
        matches = [
            Match('r1', 1, 1, Bound('a'), BYE),
            Match('r2', 1, 2, Bound('c'), BYE),
            Match('r3', 1, 3, BYE, Bound('b')),
            Match('q1', 2, 4, _winner('r1', 1), _loser('r2', 2)),
            Match('q2', 2, 5, _winner('r3', 3), _winner('r2', 2)),
            Match('f', 3, 6, _winner('q1', 4), _winner('q2', 5)),
        ]
        by_id = _by_id(schedule_ready(resolve_byes(matches, settings)))
        assert by_id['q1'].winner_id == 'a'
        assert by_id['q2'].status == SCHEDULED
        assert by_id['q2'].competitor_ids == ('b', 'c')
        assert by_id['f'].slot_a == Bound('a')
        assert by_id['f'].status == PENDING

    def test_idempotent(self, four_bracket, settings):
        """Test a second pass changes nothing."""
        matches = [four_bracket[0], four_bracket[1]._replace(slot_b=BYE)] + four_bracket[2:]
        once = resolve_byes(matches, settings)
        assert resolve_byes(once, settings) == once

    def test_no_byes_no_change(self, four_bracket, settings):
        """Test a bracket without byes is returned unchanged."""
        assert resolve_byes(four_bracket, settings) == four_bracket

    def test_schedule_ready(self):
        """Test pending matches with both competitors become scheduled."""
        matches = schedule_ready([Match('m', 1, 1, Bound('a'), Bound('b'))])
        assert matches[0].status == SCHEDULED
