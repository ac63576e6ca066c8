"""
Unit tests for settings loading and validation.
"""
import pytest
import yaml

from bracket.config import (
    DEFAULT_SETTINGS,
    build_layout,
    build_policies,
    deep_merge,
    load_settings,
    validate_settings,
)
from bracket.exceptions import ConfigurationError
from bracket.models import Tier
from bracket.policies import LowerRankWins, RandomWinner


def write_settings(tmp_path, data):
    path = tmp_path / "settings.yaml"
    path.write_text(yaml.dump(data, default_flow_style=False))
    return str(path)


class TestLoadSettings:
    def test_missing_file_gives_defaults(self, tmp_path):
        settings = load_settings(str(tmp_path / "absent.yaml"))
        assert settings == DEFAULT_SETTINGS
        assert settings is not DEFAULT_SETTINGS

    def test_no_path_gives_defaults(self):
        assert load_settings()['max_players'] == 64

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("")
        assert load_settings(str(path))['bracket_policy'] == 'lower_rank'

    def test_nested_values_merge(self, tmp_path):
        path = write_settings(tmp_path, {'random_seed': 7, 'group_stage': {'enabled': True}})
        settings = load_settings(path)
        assert settings['random_seed'] == 7
        assert settings['group_stage']['enabled'] is True
        assert settings['group_stage']['advance'] == 2
        assert len(settings['group_stage']['layout']) == 2

    def test_defaults_not_mutated(self, tmp_path):
        settings = load_settings(write_settings(tmp_path, {'group_stage': {'advance': 1}}))
        settings['report']['recent_matches'] = 99
        assert DEFAULT_SETTINGS['report']['recent_matches'] == 5
        assert DEFAULT_SETTINGS['group_stage']['advance'] == 2

    def test_non_mapping_rejected(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ConfigurationError):
            load_settings(str(path))


class TestValidation:
    @pytest.mark.parametrize("override", [
        {'bracket_policy': 'coin_toss'},
        {'group_policy': 'fastest'},
        {'max_players': -1},
        {'max_rounds': 'many'},
        {'seed_count': True},
        {'group_stage': {'advance': 5}},
        {'group_stage': {'layout': [{'name': 'big', 'count': 1, 'composition': {'regular': 5}}]}},
        {'group_stage': {'layout': [{'name': 'odd', 'count': 1, 'composition': {'vip': 4}}]}},
        {'group_stage': {'layout': [{'name': 'neg', 'count': -1, 'composition': {'regular': 4}}]}},
        {'group_stage': {'layout': [{'count': 1}]}},
        {'group_stage': None},
        {'report': None},
        {'group_stage': {'layout': None}},
        {'group_stage': {'layout': ['mixed']}},
    ])
    def test_invalid_settings(self, override):
        with pytest.raises(ConfigurationError):
            validate_settings(deep_merge(DEFAULT_SETTINGS, override))

    def test_empty_sections_in_file_rejected(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("group_stage:\nreport:\n")
        with pytest.raises(ConfigurationError):
            load_settings(str(path))

    def test_defaults_are_valid(self):
        assert validate_settings(deep_merge(DEFAULT_SETTINGS, {})) is not None


class TestBuilders:
    def test_build_layout(self):
        settings = deep_merge(DEFAULT_SETTINGS, {'group_stage': {'layout': [
            {'name': 'pairs', 'count': 3, 'composition': {'early': 2, 'wildcard': 2}},
        ]}})
        shapes = build_layout(settings)
        assert len(shapes) == 1
        assert shapes[0].count == 3
        assert shapes[0].composition == {Tier.EARLY: 2, Tier.WILDCARD: 2}

    def test_build_policies(self):
        bracket, group = build_policies(DEFAULT_SETTINGS)
        assert isinstance(bracket, LowerRankWins)
        assert isinstance(group, RandomWinner)

    def test_seeded_policies_repeat(self):
        settings = deep_merge(DEFAULT_SETTINGS, {'random_seed': 3, 'bracket_policy': 'random'})
        first, _ = build_policies(settings)
        second, _ = build_policies(settings)
        assert [first.rng.random() for _ in range(5)] == [second.rng.random() for _ in range(5)]
