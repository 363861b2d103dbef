"""
Tests for argument decoding.

Tests decode_trigger, decode_tempo and decode_metering.
"""

import pytest
from tidal_osc_lib.decoder import decode_metering, decode_tempo, decode_trigger
from tidal_osc_lib.model import (
    ChannelLevel,
    DecodeError,
    MeteringEvent,
    OscArgument,
    TempoEvent,
    TypeTag,
)


class TestDecodeTrigger:
    """Test key/value trigger decoding."""

    def test_pairs_become_mapping(self):
        """Alternating args rebuild exactly the mapping."""
        args = ["s", "bd", "n", 3, "gain", 1.2, "delta", 0.25]
        assert decode_trigger(args) == {"s": "bd", "n": 3, "gain": 1.2, "delta": 0.25}

    def test_accepts_typed_arguments(self):
        """OscArguments are unwrapped to their values."""
        args = [OscArgument(TypeTag.STRING, "s"), OscArgument(TypeTag.STRING, "sn")]
        assert decode_trigger(args) == {"s": "sn"}

    def test_keys_coerced_to_str(self):
        assert decode_trigger([1, "one"]) == {"1": "one"}

    def test_empty(self):
        assert decode_trigger([]) == {}

    def test_odd_length_rejected(self):
        """A dangling key is an error, not silently dropped."""
        with pytest.raises(DecodeError) as info:
            decode_trigger(["s", "bd", "n"])
        assert info.value.reason == DecodeError.UNDEFINED_KEY


class TestDecodeTempo:
    """Test positional tempo decoding."""

    def test_positional_fields(self):
        assert decode_tempo([2.0, 0.5, False]) == TempoEvent(at_cycle=2.0, cps=0.5, paused=False)

    def test_paused_coerced_to_bool(self):
        """Integer paused flags become booleans."""
        event = decode_tempo([OscArgument(TypeTag.FLOAT, 4.0),
                              OscArgument(TypeTag.FLOAT, 0.5625),
                              OscArgument(TypeTag.INT, 1)])
        assert event.paused is True
        assert event.cps == 0.5625

    def test_extra_values_ignored(self):
        assert decode_tempo([1.0, 0.5, 0, "extra"]) == TempoEvent(1.0, 0.5, False)

    @pytest.mark.parametrize("args", [[], [1.0], [1.0, 0.5]])
    def test_too_few_rejected(self, args):
        with pytest.raises(DecodeError) as info:
            decode_tempo(args)
        assert info.value.reason == DecodeError.MISSING_FIELD

    def test_non_numeric_rejected(self):
        with pytest.raises(DecodeError):
            decode_tempo(["soon", 0.5, 0])

    @pytest.mark.parametrize("paused", ["false", "true", None, b"\x00"])
    def test_non_numeric_paused_rejected(self, paused):
        """Only numeric or boolean paused flags are accepted."""
        with pytest.raises(DecodeError) as info:
            decode_tempo([1.0, 0.5, paused])
        assert info.value.reason == DecodeError.MISSING_FIELD


class TestDecodeMetering:
    """Test RMS decoding."""

    def test_channels_in_pairs(self):
        """Header, orbit, then peak/power per channel."""
        event = decode_metering([0, 3, -6.0, 0.25, -3.0, 0.5])
        assert event == MeteringEvent(
            orbit=3,
            channels=(ChannelLevel(peak=-6.0, power=0.25), ChannelLevel(peak=-3.0, power=0.5)),
        )

    def test_no_channels(self):
        assert decode_metering([0, 1]) == MeteringEvent(orbit=1, channels=())

    def test_orbit_is_int(self):
        assert decode_metering([0, 2.0, 0.1, 0.2]).orbit == 2

    @pytest.mark.parametrize("args", [[], [0]])
    def test_missing_orbit_rejected(self, args):
        with pytest.raises(DecodeError) as info:
            decode_metering(args)
        assert info.value.reason == DecodeError.MISSING_FIELD

    def test_dangling_value_rejected(self):
        """A peak without power is an error."""
        with pytest.raises(DecodeError) as info:
            decode_metering([0, 1, -6.0, 0.25, -3.0])
        assert info.value.reason == DecodeError.DANGLING_VALUE
