"""
Tests for Tidal OSC configuration.

Tests classify_address, BridgeConfig defaults, option parsing and endpoints.
"""

import pytest
from tidal_osc_lib.model import Channel
from tidal_osc_lib.tidal_config import (
    BridgeConfig,
    PLAY_ADDRESS,
    RMS_ADDRESS,
    TEMPO_ADDRESS,
    classify_address,
)


class TestClassifyAddress:
    """Test classify_address function."""

    @pytest.mark.parametrize("address,expected", [
        ("/play2", Channel.TRIGGER),
        ("/play2/orbit1", Channel.TRIGGER),
        ("/cps/cycle", Channel.TEMPO),
        ("/rms", Channel.METERING),
        ("/foo", Channel.UNMATCHED),
        ("/play", Channel.UNMATCHED),
        ("/cps/cycle/extra", Channel.UNMATCHED),
        ("/rms2", Channel.UNMATCHED),
    ])
    def test_default_pattern(self, address, expected):
        """Default pattern matches /play2 by prefix, others exactly."""
        assert classify_address(address) == expected

    def test_custom_trigger_pattern(self):
        """Trigger pattern is configurable."""
        assert classify_address("/dirt/play", "/dirt/play") == Channel.TRIGGER
        assert classify_address("/play2", "/dirt/play") == Channel.UNMATCHED

    @pytest.mark.parametrize("pattern", ["/", "/rms", "/cps"])
    def test_exact_channels_take_precedence(self, pattern):
        """A trigger pattern overlapping tempo/rms never shadows them."""
        assert classify_address(TEMPO_ADDRESS, pattern) == Channel.TEMPO
        assert classify_address(RMS_ADDRESS, pattern) == Channel.METERING

    def test_empty_pattern_matches_nothing(self):
        """An empty trigger pattern disables the trigger channel."""
        assert classify_address("/play2", "") == Channel.UNMATCHED


class TestBridgeConfig:
    """Test BridgeConfig defaults and parsing."""

    def test_defaults(self):
        """Every option has an explicit default."""
        config = BridgeConfig()
        assert config.in_address == "127.0.0.1"
        assert config.in_port == 57120
        assert config.out_address == "127.0.0.1"
        assert config.out_port == 6010
        assert config.address_pattern == PLAY_ADDRESS
        assert config.add_midi_data is False
        assert config.listen_tempo is False
        assert config.tempo_address == "127.0.0.1"
        assert config.tempo_port == 9160
        assert config.listen_rms is False
        assert config.rms_address == "127.0.0.1"
        assert config.rms_port == 57110

    def test_immutability(self):
        config = BridgeConfig()
        with pytest.raises(AttributeError):
            config.in_port = 1

    def test_from_mapping_camel_case(self):
        """Original option names are accepted."""
        config = BridgeConfig.from_mapping({
            "inPort": 9000,
            "listenRms": True,
            "addMidiData": True,
            "addressPattern": "/dirt/play",
        })
        assert config.in_port == 9000
        assert config.listen_rms is True
        assert config.add_midi_data is True
        assert config.address_pattern == "/dirt/play"
        assert config.out_port == 6010

    def test_from_mapping_snake_case(self):
        config = BridgeConfig.from_mapping({"listen_tempo": True, "tempo_port": 9999})
        assert config.listen_tempo is True
        assert config.tempo_port == 9999

    def test_from_mapping_ignores_unknown(self, caplog):
        """Unknown keys are logged and skipped."""
        config = BridgeConfig.from_mapping({"bogus": 1, "inPort": 1234})
        assert config.in_port == 1234
        assert "bogus" in caplog.text

    def test_to_dict_round_trip(self):
        config = BridgeConfig(in_port=9000, listen_tempo=True)
        assert BridgeConfig.from_mapping(config.to_dict()) == config


class TestEndpoints:
    """Test derived endpoints."""

    def test_main_endpoint(self):
        endpoint = BridgeConfig(in_port=9000, out_port=6011).main_endpoint()
        assert endpoint.local_port == 9000
        assert endpoint.remote == ("127.0.0.1", 6011)
        assert endpoint.broadcast is True

    def test_tempo_endpoint_offset(self):
        """Tempo connection binds in_port + 1."""
        endpoint = BridgeConfig(in_port=9000, tempo_port=9161).tempo_endpoint()
        assert endpoint.local_port == 9001
        assert endpoint.remote_port == 9161

    def test_rms_endpoint_offset(self):
        """Metering connection binds in_port + 2."""
        endpoint = BridgeConfig(in_port=9000, rms_address="10.0.0.5").rms_endpoint()
        assert endpoint.local_port == 9002
        assert endpoint.remote == ("10.0.0.5", 57110)
