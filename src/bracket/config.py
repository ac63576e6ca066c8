"""
Tournament settings loaded from YAML.

Settings are plain dicts. Values from the file are merged over
DEFAULT_SETTINGS, nested sections key by key.
"""
import copy
import os
import random
from typing import Any, Dict, List, Optional, Tuple

import yaml

from bracket.exceptions import ConfigurationError
from bracket.groups import GROUP_SIZE, GroupShape
from bracket.models import Tier
from bracket.policies import POLICIES, WinnerPolicy, get_policy

DEFAULT_SETTINGS = {
    'max_players': 64,
    'max_rounds': None,
    'random_seed': None,
    'seed_count': 0,
    'bracket_policy': 'lower_rank',
    'group_policy': 'random',
    'group_stage': {
        'enabled': False,
        'advance': 2,
        'layout': [
            {'name': 'mixed', 'count': 6,
             'composition': {'early': 1, 'regular': 2, 'wildcard': 1}},
            {'name': 'standard', 'count': 10,
             'composition': {'early': 1, 'regular': 3}},
        ],
    },
    'report': {
        'recent_matches': 5,
    },
}


def deep_merge(base: Dict[str, Any], update: Dict[str, Any]) -> Dict[str, Any]:
    """Overlay ``update`` on ``base``. Sections present in both merge key by key; other values are replaced."""
    merged = dict(base)
    for key, value in update.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            value = deep_merge(current, value)
        merged[key] = value
    return merged


def load_settings(file_path: Optional[str] = None) -> Dict[str, Any]:
    """Load settings from a YAML file; a missing or empty file yields the defaults."""
    if not file_path or not os.path.exists(file_path):
        return validate_settings(copy.deepcopy(DEFAULT_SETTINGS))
    with open(file_path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Settings file {file_path} must contain a mapping")
    return validate_settings(deep_merge(copy.deepcopy(DEFAULT_SETTINGS), data))


def _non_negative_int(key, value) -> None:
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise ConfigurationError(f"{key} must be a non-negative integer", {'value': value})


def _mapping(key, value) -> None:
    if not isinstance(value, dict):
        raise ConfigurationError(f"{key} must be a mapping", {'value': value})


def validate_settings(settings: Dict[str, Any]) -> Dict[str, Any]:
    _mapping('group_stage', settings['group_stage'])
    _mapping('report', settings['report'])
    _non_negative_int('max_players', settings['max_players'])
    _non_negative_int('seed_count', settings['seed_count'])
    if settings['max_rounds'] is not None:
        _non_negative_int('max_rounds', settings['max_rounds'])
    for key in ('bracket_policy', 'group_policy'):
        if settings[key] not in POLICIES:
            raise ConfigurationError(f"Unknown winner policy for {key}: {settings[key]}",
                                     {'available': sorted(POLICIES)})
    group_stage = settings['group_stage']
    _non_negative_int('group_stage.advance', group_stage['advance'])
    if group_stage['advance'] > GROUP_SIZE:
        raise ConfigurationError(f"group_stage.advance cannot exceed {GROUP_SIZE}",
                                 {'value': group_stage['advance']})
    build_layout(settings)
    _non_negative_int('report.recent_matches', settings['report']['recent_matches'])
    return settings


def build_layout(settings: Dict[str, Any]) -> List[GroupShape]:
    """Turn the ``group_stage.layout`` section into GroupShape objects."""
    layout = settings['group_stage']['layout']
    if not isinstance(layout, list):
        raise ConfigurationError("group_stage.layout must be a list of group shapes",
                                 {'value': layout})
    shapes = []
    for entry in layout:
        _mapping('group layout entry', entry)
        try:
            composition = {Tier.parse(tier): count
                           for tier, count in entry['composition'].items()}
            shape = GroupShape(entry.get('name', f"shape{len(shapes) + 1}"),
                               entry['count'], composition)
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            raise ConfigurationError(f"Invalid group layout entry: {entry}", {'error': str(e)})
        _non_negative_int(f"group layout {shape.name} count", shape.count)
        for tier, n in shape.composition.items():
            _non_negative_int(f"group layout {shape.name} {tier.value}", n)
        if shape.size != GROUP_SIZE:
            raise ConfigurationError(
                f"Group shape {shape.name} holds {shape.size} players; groups must hold {GROUP_SIZE}")
        shapes.append(shape)
    return shapes


def build_policies(settings: Dict[str, Any]) -> Tuple[WinnerPolicy, WinnerPolicy]:
    """Return (bracket_policy, group_policy) sharing one seeded random generator."""
    rng = random.Random(settings['random_seed'])
    return (get_policy(settings['bracket_policy'], rng),
            get_policy(settings['group_policy'], rng))
