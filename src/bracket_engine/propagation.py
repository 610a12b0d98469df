"""
Result propagation through match dependencies, including automatic byes.

Every function takes a sequence of matches and returns a new list; matches
are never modified in place. Unknown match ids are ignored.
"""
import logging
from collections import deque
from typing import Dict, Iterable, List, Optional, Sequence

from .models import (
    Bound, DependencyRef, Match, Placeholder,
    BYE_LABEL, COMPLETED, IN_PROGRESS, PENDING, SCHEDULED, WINNER,
)
from .scoring import ScoreError, to_set_scores, validate_scores, walkover_scores

logger = logging.getLogger(__name__)


def dependents_index(matches: Sequence[Match]) -> Dict[str, List[str]]:
    """Map each match id to the ids of matches with a slot depending on it."""
    index = {}
    for match in matches:
        for slot in (match.slot_a, match.slot_b, match.referee):
            if isinstance(slot, DependencyRef):
                ids = index.setdefault(slot.match_id, [])
                if match.id not in ids:
                    ids.append(match.id)
    return index


def _resolve_slot(slot, completed: Match):
    if isinstance(slot, DependencyRef) and slot.match_id == completed.id:
        competitor = completed.winner_id if slot.outcome == WINNER else completed.loser_id
        # An upstream bye has no loser to hand on
        return (Bound(competitor) if competitor else Placeholder(BYE_LABEL)), True
    return slot, False


def _bind(match: Match, completed: Match) -> Match:
    """Bind every slot of ``match`` that depends on ``completed``."""
    if match.id == completed.id or match.status == COMPLETED:
        return match

    slot_a, changed_a = _resolve_slot(match.slot_a, completed)
    slot_b, changed_b = _resolve_slot(match.slot_b, completed)
    referee, changed_ref = _resolve_slot(match.referee, completed)
    if not (changed_a or changed_b or changed_ref):
        return match

    updated = match._replace(slot_a=slot_a, slot_b=slot_b, referee=referee)
    if updated.status == PENDING and updated.competitor_a and updated.competitor_b:
        updated = updated._replace(status=SCHEDULED)
    return updated


def advance(matches: Sequence[Match], match_id: str) -> List[Match]:
    """
    Hand the winner and loser of a completed match to its dependents.

    A dependent that ends up with both slots bound moves from pending to
    scheduled. Applying this twice for the same match changes nothing the
    second time; undecided or unknown matches leave the list as it is.
    """
    completed = next((m for m in matches if m.id == match_id), None)
    if completed is None or completed.status != COMPLETED or completed.winner_id is None:
        return list(matches)
    return [_bind(m, completed) for m in matches]


class _ByeResolver:
    """Worklist over match ids, settling byes until nothing changes."""

    def __init__(self, matches: Sequence[Match], settings: Dict):
        self.order = [m.id for m in matches]
        self.by_id = {m.id: m for m in matches}
        self.dependents = dependents_index(matches)
        self.settings = settings

    @staticmethod
    def is_bye(slot) -> bool:
        """A slot that is empty and waits on no other match."""
        return isinstance(slot, Placeholder)

    def run(self, match_ids: Optional[Iterable[str]] = None) -> List[Match]:
        worklist = deque(self.order if match_ids is None else match_ids)
        queued = set(worklist)

        def push(ids):
            for i in ids:
                if i not in queued:
                    queued.add(i)
                    worklist.append(i)

        while worklist:
            match_id = worklist.popleft()
            queued.discard(match_id)
            match = self.by_id.get(match_id)
            if match is None or match.status == COMPLETED:
                continue

            bye_a = self.is_bye(match.slot_a)
            bye_b = self.is_bye(match.slot_b)

            if bye_a and bye_b:
                logger.debug("Match %s has no competitors; left undecided", match.id)
                continue
            if bye_a and match.competitor_b:
                winner, winner_index = match.competitor_b, 1
            elif bye_b and match.competitor_a:
                winner, winner_index = match.competitor_a, 0
            else:
                continue

            completed = match._replace(
                winner_id=winner,
                status=COMPLETED,
                scores=walkover_scores(self.settings, winner_index),
            )
            self.by_id[match.id] = completed
            logger.debug("Match %s decided by bye, %s advances", match.id, winner)

            for dependent_id in self.dependents.get(match.id, []):
                self.by_id[dependent_id] = _bind(self.by_id[dependent_id], completed)
            push(self.dependents.get(match.id, []))

        return [self.by_id[i] for i in self.order]


def resolve_byes(matches: Sequence[Match], settings: Dict,
                 match_ids: Optional[Iterable[str]] = None) -> List[Match]:
    """
    Auto-complete every match that has a bye on exactly one side.

    The bound opponent wins with a synthetic walk-over score and the result
    is propagated like a played one, so byes cascade. A match with byes on
    both sides stays undecided and never propagates, so matches depending on
    it keep waiting.

    ``match_ids`` restricts the starting worklist; matches affected by a
    resolved bye are always revisited.
    """
    return _ByeResolver(matches, settings).run(match_ids)


def schedule_ready(matches: Sequence[Match]) -> List[Match]:
    """Move pending matches whose both slots are bound to scheduled."""
    return [
        m._replace(status=SCHEDULED)
        if m.status == PENDING and m.competitor_a and m.competitor_b else m
        for m in matches
    ]


def _find(matches: Sequence[Match], match_id: str) -> Match:
    for match in matches:
        if match.id == match_id:
            return match
    raise ScoreError(f"Match {match_id} does not exist")


def _winner_from_scores(match: Match, scores, settings: Dict) -> str:
    if not (match.competitor_a and match.competitor_b):
        raise ScoreError("Both competitors must be known before a result is recorded")
    validation = validate_scores(scores, settings)
    if not validation.valid:
        raise ScoreError(validation.error)
    return match.competitor_a if validation.winner_index == 0 else match.competitor_b


def record_result(matches: Sequence[Match], match_id: str, scores, settings: Dict) -> List[Match]:
    """
    Record a played result and propagate it.

    Raises ScoreError with the reason when the score is invalid or the
    match is already decided. Nothing is changed in that case.
    """
    match = _find(matches, match_id)
    if match.status == COMPLETED:
        raise ScoreError(f"Match {match.match_number} is already decided")
    winner = _winner_from_scores(match, scores, settings)

    # Dependents must be looked up before advance() binds their slots
    dependents = dependents_index(matches).get(match_id, [])
    completed = match._replace(scores=to_set_scores(scores), winner_id=winner, status=COMPLETED)
    updated = [completed if m.id == match_id else m for m in matches]
    updated = advance(updated, match_id)
    logger.debug("Match %s won by %s", match_id, winner)
    return resolve_byes(updated, settings, dependents)


def correct_result(matches: Sequence[Match], match_id: str, scores, settings: Dict) -> List[Match]:
    """
    Replace the scores of a decided match.

    Only corrections that keep the same winner are accepted; downstream
    matches already hold that winner, so they stay valid.
    """
    match = _find(matches, match_id)
    if match.status != COMPLETED:
        raise ScoreError(f"Match {match.match_number} has no result to correct")
    winner = _winner_from_scores(match, scores, settings)
    if winner != match.winner_id:
        raise ScoreError(f"Correcting match {match.match_number} would change its winner")

    corrected = match._replace(scores=to_set_scores(scores))
    updated = [corrected if m.id == match_id else m for m in matches]
    return advance(updated, match_id)


def start_match(matches: Sequence[Match], match_id: str) -> List[Match]:
    """Mark a scheduled match as in progress."""
    return [
        m._replace(status=IN_PROGRESS) if m.id == match_id and m.status == SCHEDULED else m
        for m in matches
    ]
