"""
Unit tests for settings defaults, loading and validation.
"""
import yaml

from bracket_engine.settings import (
    POINT_DIFF_FIRST, get_default_settings, load_settings, merge_settings, validate_settings,
)


class TestSettings:
    """Tests for the settings helpers."""

    def test_defaults_are_valid(self):
        """Test the defaults pass validation."""
        assert validate_settings(get_default_settings()) == []

    def test_merge_fills_missing(self):
        """Test merge keeps given values and fills the rest."""
        settings = merge_settings({'sets_per_match': 3})
        assert settings['sets_per_match'] == 3
        assert settings['points_per_set'] == 21

    def test_load_missing_file(self, tmp_path):
        """Test a missing file yields the defaults."""
        assert load_settings(str(tmp_path / 'none.yaml')) == get_default_settings()

    def test_load_merges_defaults(self, tmp_path):
        """Test a partial file is merged with defaults."""
        path = tmp_path / 'settings.yaml'
        path.write_text(yaml.dump({'tiebreaker_order': POINT_DIFF_FIRST, 'pool_size': 5}))
        settings = load_settings(str(path))
        assert settings['tiebreaker_order'] == POINT_DIFF_FIRST
        assert settings['pool_size'] == 5
        assert settings['number_of_courts'] == 2

    def test_load_empty_file(self, tmp_path):
        """Test an empty file yields the defaults."""
        path = tmp_path / 'settings.yaml'
        path.write_text('')
        assert load_settings(str(path)) == get_default_settings()

    def test_validation_errors(self):
        """Test each bad value is reported."""
        errors = validate_settings(merge_settings({
            'sets_per_match': 4,
            'points_per_set': 0,
            'tiebreaker_order': 'coin',
            'seeding_method': 'lottery',
            'pool_size': 6,
        }))
        assert len(errors) == 5
        assert any('sets_per_match' in e for e in errors)
        assert any('points_per_set' in e for e in errors)

    def test_boolean_is_not_a_count(self):
        """Test True is not accepted as a court count."""
        assert validate_settings(merge_settings({'number_of_courts': True}))
