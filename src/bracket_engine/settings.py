"""
Tournament format settings: defaults, YAML loading and validation.
"""
import os
from typing import Dict, List

import yaml

HEAD_TO_HEAD_FIRST = 'head-to-head-first'
POINT_DIFF_FIRST = 'point-diff-first'

TIEBREAKER_ORDERS = (HEAD_TO_HEAD_FIRST, POINT_DIFF_FIRST)
SEEDING_METHODS = ('snake', 'random', 'manual')
SETS_PER_MATCH = (1, 2, 3)


def get_default_settings() -> Dict:
    """Return default tournament settings."""
    return {
        'sets_per_match': 1,
        'points_per_set': 21,
        'points_per_third_set': 15,
        'tiebreaker_order': HEAD_TO_HEAD_FIRST,
        'pool_size': 4,
        'seeding_method': 'snake',
        'number_of_courts': 2,
        'third_place_match': True,
        'referees': False,
        'knockout_format': 'knockout',
    }


def merge_settings(data: Dict = None) -> Dict:
    """Fill in every key missing from ``data`` with its default."""
    settings = get_default_settings()
    if data:
        settings.update(data)
    return settings


def load_settings(file_path: str) -> Dict:
    """Load settings from a YAML file, merging with defaults."""
    defaults = get_default_settings()
    if not os.path.exists(file_path):
        return defaults
    with open(file_path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)
        if not data:
            return defaults
        # Merge with defaults to ensure all keys exist
        for key, value in defaults.items():
            if key not in data:
                data[key] = value
        return data


def validate_settings(settings: Dict) -> List[str]:
    """Return a list of problems with ``settings``; empty when usable."""
    errors = []
    if settings.get('sets_per_match') not in SETS_PER_MATCH:
        errors.append(f"sets_per_match must be one of {SETS_PER_MATCH}")
    for key in ('points_per_set', 'points_per_third_set', 'number_of_courts'):
        value = settings.get(key)
        if not isinstance(value, int) or isinstance(value, bool) or value < 1:
            errors.append(f"{key} must be a positive integer")
    if settings.get('tiebreaker_order') not in TIEBREAKER_ORDERS:
        errors.append(f"tiebreaker_order must be one of {TIEBREAKER_ORDERS}")
    if settings.get('seeding_method') not in SEEDING_METHODS:
        errors.append(f"seeding_method must be one of {SEEDING_METHODS}")
    if settings.get('pool_size') not in (3, 4, 5):
        errors.append("pool_size must be 3, 4 or 5")
    return errors
