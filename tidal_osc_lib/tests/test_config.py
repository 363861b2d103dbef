"""
Tests for YAML config persistence.
"""

import logging

from tidal_osc_lib.config import load_config, save_config
from tidal_osc_lib.tidal_config import BridgeConfig


class TestSaveLoad:
    """Test save_config / load_config."""

    def test_round_trip(self, tmp_path):
        path = tmp_path / "config.yaml"
        config = BridgeConfig(in_port=57130, listen_rms=True, address_pattern="/dirt/play")
        assert save_config(config, path)
        assert load_config(path) == config

    def test_creates_parent_dirs(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "config.yaml"
        assert save_config(BridgeConfig(), path)
        assert path.exists()

    def test_saved_under_bridge_key(self, tmp_path):
        path = tmp_path / "config.yaml"
        save_config(BridgeConfig(), path)
        assert path.read_text().startswith("bridge:")


class TestLoadConfig:
    """Test load_config with hand-written files."""

    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_config(tmp_path / "absent.yaml") == BridgeConfig()

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_config(path) == BridgeConfig()

    def test_top_level_camel_case(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("inPort: 57200\naddMidiData: true\nlistenTempo: true\n")
        config = load_config(path)
        assert config.in_port == 57200
        assert config.add_midi_data is True
        assert config.listen_tempo is True
        assert config.out_port == 6010

    def test_invalid_yaml_gives_defaults(self, tmp_path, caplog):
        path = tmp_path / "config.yaml"
        path.write_text("bridge: [unclosed\n")
        with caplog.at_level(logging.ERROR):
            assert load_config(path) == BridgeConfig()
        assert "Failed to load config" in caplog.text

    def test_non_mapping_gives_defaults(self, tmp_path, caplog):
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n")
        with caplog.at_level(logging.ERROR):
            assert load_config(path) == BridgeConfig()
        assert "not a mapping" in caplog.text

    def test_unknown_keys_ignored(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("bridge:\n  in_port: 57300\n  colour: blue\n")
        assert load_config(path) == BridgeConfig(in_port=57300)
