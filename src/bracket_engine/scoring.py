"""
Score validation for the supported set formats.

Formats (``sets_per_match``):
    1 - a single set to ``points_per_set``
    2 - exactly two sets to ``points_per_set``
    3 - best of three, the decider played to ``points_per_third_set``
"""
from typing import Dict, NamedTuple, Optional, Sequence, Tuple

from .models import SetScore


class ScoreValidation(NamedTuple):
    valid: bool
    error: Optional[str] = None
    winner_index: Optional[int] = None


class ScoreError(ValueError):
    """A score was rejected; the message is the reason shown to the user."""


def _pair(score) -> Tuple[int, int]:
    if isinstance(score, SetScore):
        return score.a, score.b
    return score[0], score[1]


def to_set_scores(scores: Sequence) -> Tuple[SetScore, ...]:
    """Normalize ``[[21, 19], ...]`` style input into SetScore tuples."""
    return tuple(SetScore(*_pair(s)) for s in scores)


def validate_score_inputs(scores: Sequence) -> Optional[str]:
    """Check every value is a non-negative integer. Returns an error or None."""
    for i, score in enumerate(scores):
        try:
            a, b = _pair(score)
        except (TypeError, IndexError, KeyError):
            return f"Set {i + 1}: a score needs two values"
        for side, value in (('A', a), ('B', b)):
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                return f"Set {i + 1}: side {side} must be a non-negative whole number"
    return None


def validate_set(score, cap: int, index: int = 0) -> Optional[str]:
    """
    Validate a single set played to ``cap`` points.

    The winner must reach the cap; at the cap the margin must be at least 2,
    past the cap it must be exactly 2. Draws are never valid.
    """
    a, b = _pair(score)
    high, low = max(a, b), min(a, b)
    label = f"Set {index + 1}"

    if high < cap:
        return f"{label}: one side must reach {cap} points"
    if high == cap and low > cap - 2:
        return f"{label}: at {cap}:{low} the set must be won by 2 points"
    if high > cap and high - low != 2:
        return f"{label}: past {cap} points the set must be won by exactly 2 points"
    if a == b:
        return f"{label}: a set cannot end in a draw"
    return None


def determine_winner(scores: Sequence) -> Tuple[Optional[int], Tuple[int, int]]:
    """Determine winner from set scores. Returns (winner_index, set_wins)."""
    if not scores:
        return None, (0, 0)

    wins = [0, 0]
    for score in scores:
        a, b = _pair(score)
        if a > b:
            wins[0] += 1
        elif b > a:
            wins[1] += 1

    # Best of 3 needs 2 wins, a single set needs 1
    if wins[0] >= 2 or (len(scores) == 1 and wins[0] > wins[1]):
        return 0, tuple(wins)
    elif wins[1] >= 2 or (len(scores) == 1 and wins[1] > wins[0]):
        return 1, tuple(wins)

    return None, tuple(wins)


def _validate_best_of_three(scores: Sequence, points_per_set: int, points_per_third_set: int) -> ScoreValidation:
    sets_won = [0, 0]
    for i, score in enumerate(scores[:3]):
        a, b = _pair(score)
        if a == 0 and b == 0:
            continue
        cap = points_per_third_set if i == 2 else points_per_set
        error = validate_set(score, cap, i)
        if error:
            return ScoreValidation(False, error)
        sets_won[0 if a > b else 1] += 1

    if len(scores) > 3:
        return ScoreValidation(False, "A best of three match has at most 3 sets")

    if sets_won[0] < 2 and sets_won[1] < 2:
        return ScoreValidation(False, "One side must win 2 sets to decide the match")

    if len(scores) > 2:
        decider = _pair(scores[2])
        if decider[0] > 0 or decider[1] > 0:
            first_two = [0, 0]
            for score in scores[:2]:
                a, b = _pair(score)
                first_two[0 if a > b else 1] += 1
            if 2 in first_two:
                return ScoreValidation(False, "A third set is only played when the first two are split 1:1")

    return ScoreValidation(True, winner_index=0 if sets_won[0] >= 2 else 1)


def validate_scores(scores: Sequence, settings: Dict) -> ScoreValidation:
    """Validate a full match result against the configured format."""
    error = validate_score_inputs(scores)
    if error:
        return ScoreValidation(False, error)

    sets_per_match = settings.get('sets_per_match', 1)
    points_per_set = settings.get('points_per_set', 21)
    points_per_third_set = settings.get('points_per_third_set', 15)

    if sets_per_match == 3:
        return _validate_best_of_three(scores, points_per_set, points_per_third_set)

    if len(scores) != sets_per_match:
        return ScoreValidation(False, f"Exactly {sets_per_match} set(s) must be entered")

    for i, score in enumerate(scores):
        error = validate_set(score, points_per_set, i)
        if error:
            return ScoreValidation(False, error)

    if sets_per_match == 1:
        a, b = _pair(scores[0])
        return ScoreValidation(True, winner_index=0 if a > b else 1)

    # Two sets: more sets wins, a 1:1 split goes to total points
    _, (sets_a, sets_b) = determine_winner(scores)
    if sets_a != sets_b:
        return ScoreValidation(True, winner_index=0 if sets_a > sets_b else 1)
    points_a = sum(_pair(s)[0] for s in scores)
    points_b = sum(_pair(s)[1] for s in scores)
    if points_a == points_b:
        return ScoreValidation(False, "Sets are split 1:1 with equal points; the match is undecided")
    return ScoreValidation(True, winner_index=0 if points_a > points_b else 1)


def required_sets_count(scores: Sequence, sets_per_match: int) -> int:
    """How many sets the match needs given the scores so far."""
    if sets_per_match != 3:
        return sets_per_match
    if len(scores) >= 2:
        first_two = [0, 0]
        for score in scores[:2]:
            a, b = _pair(score)
            first_two[0 if a > b else 1] += 1
        if 2 in first_two:
            return 2
    return 3


def walkover_scores(settings: Dict, winner_index: int = 0) -> Tuple[SetScore, ...]:
    """Synthetic scores for a bye: the winner takes every needed set by 2."""
    cap = settings.get('points_per_set', 21)
    sets_per_match = settings.get('sets_per_match', 1)
    if winner_index == 0:
        winning_set = SetScore(cap, cap - 2)
    else:
        winning_set = SetScore(cap - 2, cap)
    if sets_per_match == 1:
        return (winning_set,)
    return (winning_set, winning_set)
