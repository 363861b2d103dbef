"""
MIDI-style enrichment of trigger events.
"""

import logging

from .model import TriggerEvent

logger = logging.getLogger(__name__)

DEFAULT_OCTAVE = 5


def add_midi_data(event: TriggerEvent, enabled: bool = True) -> TriggerEvent:
    """
    Add a midinote field derived from n/note and octave.

    midinote = n + (octave + 1) * 12, where n falls back to note, then 0,
    and octave defaults to 5 whichever note field is used. Any existing
    midinote is overwritten.

    Returns a new dict; the input is left untouched.
    """
    if not enabled:
        return event

    enriched = dict(event)
    octave = enriched.get("octave")
    if octave is None:
        octave = DEFAULT_OCTAVE
        enriched["octave"] = octave

    if "n" in enriched:
        n = enriched["n"]
    elif "note" in enriched:
        n = enriched["note"]
    else:
        n = 0

    if not (_is_number(n) and _is_number(octave)):
        logger.debug(f"Skipping midinote for non-numeric n={n!r} octave={octave!r}")
        return enriched

    enriched["midinote"] = n + (octave + 1) * 12
    return enriched


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
