"""
Argument Decoding - Pure Functions

Turns flat OSC argument lists into structured event records.
Each decoder accepts OscArguments or plain values and raises
DecodeError on malformed input instead of guessing.
"""

from typing import Any, List, Sequence

from .model import (
    ChannelLevel,
    DecodeError,
    MeteringEvent,
    OscArgument,
    TempoEvent,
    TriggerEvent,
)


def _values(args: Sequence[Any]) -> List[Any]:
    """Strip type tags, leaving plain python values."""
    return [a.value if isinstance(a, OscArgument) else a for a in args]


def decode_trigger(args: Sequence[Any]) -> TriggerEvent:
    """
    Rebuild a trigger event from alternating key/value arguments.

    Args:
        args: [k1, v1, k2, v2, ...]

    Returns:
        Dict {k1: v1, k2: v2, ...} with keys coerced to str

    Raises:
        DecodeError: UNDEFINED_KEY if the list has odd length
    """
    values = _values(args)
    if len(values) % 2:
        raise DecodeError(
            DecodeError.UNDEFINED_KEY,
            f"Odd number of trigger arguments ({len(values)}); "
            f"key {values[-1]!r} has no value",
        )
    return {str(values[i]): values[i + 1] for i in range(0, len(values), 2)}


def decode_tempo(args: Sequence[Any]) -> TempoEvent:
    """
    Decode a positional tempo update.

    Args:
        args: [atCycle, cps, paused]; extra trailing values are ignored

    Raises:
        DecodeError: MISSING_FIELD if fewer than 3 arguments or a field
            (including the paused flag) is not numeric
    """
    values = _values(args)
    if len(values) < 3:
        raise DecodeError(
            DecodeError.MISSING_FIELD,
            f"Tempo update needs 3 arguments (atCycle, cps, paused), got {len(values)}",
        )
    at_cycle, cps, paused = values[:3]
    if not isinstance(paused, (bool, int, float)):
        raise DecodeError(DecodeError.MISSING_FIELD, f"Non-numeric paused flag: {paused!r}")
    try:
        return TempoEvent(at_cycle=float(at_cycle), cps=float(cps), paused=bool(paused))
    except (TypeError, ValueError) as e:
        raise DecodeError(DecodeError.MISSING_FIELD, f"Non-numeric tempo field: {e}") from e


def decode_metering(args: Sequence[Any]) -> MeteringEvent:
    """
    Decode an RMS reading.

    Layout: [reserved, orbit, peak0, power0, peak1, power1, ...]

    Raises:
        DecodeError: MISSING_FIELD if the orbit is missing,
            DANGLING_VALUE if a peak has no matching power
    """
    values = _values(args)
    if len(values) < 2:
        raise DecodeError(
            DecodeError.MISSING_FIELD,
            f"RMS message needs at least 2 arguments, got {len(values)}",
        )
    levels = values[2:]
    if len(levels) % 2:
        raise DecodeError(
            DecodeError.DANGLING_VALUE,
            f"RMS levels must come in peak/power pairs, got {len(levels)} values",
        )
    try:
        orbit = int(values[1])
        channels = tuple(
            ChannelLevel(peak=float(levels[i]), power=float(levels[i + 1]))
            for i in range(0, len(levels), 2)
        )
    except (TypeError, ValueError) as e:
        raise DecodeError(DecodeError.MISSING_FIELD, f"Non-numeric RMS field: {e}") from e
    return MeteringEvent(orbit=orbit, channels=channels)
