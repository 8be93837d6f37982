"""
Tests for INI configuration handling.
"""

from config_manager import ConfigManager
from rbn_models import FilterState


class TestConfigManager:

    def test_creates_defaults(self, tmp_path):
        path = tmp_path / "rbn.ini"
        config = ConfigManager(path)
        assert path.exists()
        assert config.get('STATION', 'my_callsign') == 'N0CALL'
        assert config.get('FEED', 'base_url') == 'http://localhost:3000'
        assert config.getint('FEED', 'poll_interval_s') == 120
        assert config.getfloat('APPEARANCE', 'opacity') == 0.7

    def test_default_filter_state(self, tmp_path):
        assert ConfigManager(tmp_path / "rbn.ini").filter_state() == FilterState()

    def test_filter_state_round_trip(self, tmp_path):
        path = tmp_path / "rbn.ini"
        state = FilterState(selected_band="20m", time_window_minutes=60,
                            min_snr_db=-5, show_paths=False)
        ConfigManager(path).save_filter_state(state)
        assert ConfigManager(path).filter_state() == state

    def test_missing_keys_filled_from_defaults(self, tmp_path):
        path = tmp_path / "rbn.ini"
        path.write_text("[STATION]\nmy_callsign = W1AW\n")
        config = ConfigManager(path)
        assert config.get('STATION', 'my_callsign') == 'W1AW'
        assert config.get('STATION', 'my_grid') == 'FN03'
        assert config.getint('FEED', 'limit') == 100

    def test_bad_values_fall_back(self, tmp_path):
        config = ConfigManager(tmp_path / "rbn.ini")
        config.save_setting('FILTER', 'time_window', 'soon')
        config.save_setting('FILTER', 'show_paths', 'maybe')
        state = config.filter_state()
        assert state.time_window_minutes == 30
        assert state.show_paths is True

    def test_non_positive_window_uses_default(self, tmp_path):
        config = ConfigManager(tmp_path / "rbn.ini")
        config.save_setting('FILTER', 'time_window', '-15')
        assert config.filter_state().time_window_minutes == 30

    def test_save_setting_persists(self, tmp_path):
        path = tmp_path / "rbn.ini"
        ConfigManager(path).save_setting('WINDOW', 'geometry', 'abcd')
        assert ConfigManager(path).get('WINDOW', 'geometry') == 'abcd'

    def test_off_step_values_snap_to_controls(self, tmp_path):
        config = ConfigManager(tmp_path / "rbn.ini")
        config.save_setting('FILTER', 'time_window', '5')
        config.save_setting('FILTER', 'min_snr', '-12')
        state = config.filter_state()
        assert state.time_window_minutes == 10
        assert state.min_snr_db == -10

        config.save_setting('FILTER', 'time_window', '44')
        config.save_setting('FILTER', 'min_snr', '99')
        state = config.filter_state()
        assert state.time_window_minutes == 40
        assert state.min_snr_db == 30

    def test_non_finite_min_snr_uses_default(self, tmp_path):
        config = ConfigManager(tmp_path / "rbn.ini")
        config.save_setting('FILTER', 'min_snr', 'nan')
        assert config.filter_state().min_snr_db == -10
