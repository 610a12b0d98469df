"""
Plain-dict conversion of engine records for the JSON API.
"""
from typing import Dict, List, Optional

from .models import (
    Bound, Competitor, DependencyRef, Group, Match, Placeholder, Placement,
    SetScore, SourceRef, StandingEntry, UnresolvedTie,
)

_SLOT_TYPES = {
    Bound: 'bound',
    Placeholder: 'placeholder',
    SourceRef: 'source',
    DependencyRef: 'dependency',
}
_SLOT_CLASSES = {name: cls for cls, name in _SLOT_TYPES.items()}


def slot_to_dict(slot) -> Optional[Dict]:
    if slot is None:
        return None
    data = slot._asdict()
    data['type'] = _SLOT_TYPES[type(slot)]
    return data


def slot_from_dict(data: Optional[Dict]):
    if data is None:
        return None
    data = dict(data)
    slot_type = data.pop('type', None)
    if slot_type not in _SLOT_CLASSES:
        raise ValueError(f"Unknown slot type: {slot_type}")
    return _SLOT_CLASSES[slot_type](**data)


def match_to_dict(match: Match) -> Dict:
    data = match._asdict()
    data['slot_a'] = slot_to_dict(match.slot_a)
    data['slot_b'] = slot_to_dict(match.slot_b)
    data['referee'] = slot_to_dict(match.referee)
    data['scores'] = [[s.a, s.b] for s in match.scores]
    if match.placement_interval is not None:
        data['placement_interval'] = list(match.placement_interval)
    return data


def match_from_dict(data: Dict) -> Match:
    data = dict(data)
    data['slot_a'] = slot_from_dict(data['slot_a'])
    data['slot_b'] = slot_from_dict(data['slot_b'])
    data['referee'] = slot_from_dict(data.get('referee'))
    data['scores'] = tuple(SetScore(*s) for s in data.get('scores') or [])
    if data.get('placement_interval') is not None:
        data['placement_interval'] = tuple(data['placement_interval'])
    return Match(**data)


def matches_from_list(items: List[Dict]) -> List[Match]:
    return [match_from_dict(item) for item in items]


def matches_to_list(matches) -> List[Dict]:
    return [match_to_dict(m) for m in matches]


def competitor_from_dict(data: Dict, index: int = 0) -> Competitor:
    """Roster entry; ``id`` defaults to the name and ``seed`` to list order."""
    name = data['name']
    return Competitor(id=str(data.get('id', name)), name=name, seed=int(data.get('seed', index + 1)))


def group_to_dict(group: Group) -> Dict:
    data = group._asdict()
    data['member_ids'] = list(group.member_ids)
    return data


def group_from_dict(data: Dict) -> Group:
    data = dict(data)
    data['member_ids'] = tuple(data.get('member_ids', ()))
    return Group(**data)


def standing_to_dict(entry: StandingEntry) -> Dict:
    data = entry._asdict()
    data['set_diff'] = entry.set_diff
    data['point_diff'] = entry.point_diff
    return data


def standing_from_dict(data: Dict) -> StandingEntry:
    fields = {k: v for k, v in data.items() if k in StandingEntry._fields}
    return StandingEntry(**fields)


def standings_from_dict(data: Dict) -> Dict[int, List[StandingEntry]]:
    """Pool standings keyed by pool index (JSON keys arrive as strings)."""
    return {int(k): [standing_from_dict(e) for e in v] for k, v in data.items()}


def standings_to_dict(standings: Dict[int, List[StandingEntry]]) -> Dict:
    return {str(k): [standing_to_dict(e) for e in v] for k, v in standings.items()}


def placement_to_dict(placement: Placement) -> Dict:
    return placement._asdict()


def tie_to_dict(tie: UnresolvedTie) -> Dict:
    return {'rank': tie.rank, 'positions': list(tie.positions), 'competitor_ids': list(tie.competitor_ids)}
