"""
Tidal OSC Library

Bidirectional OSC bridge between TidalCycles and SuperDirt.

Features:
- Trigger (/play2), tempo (/cps/cycle) and RMS (/rms) decoding
- Delta-scheduled delivery of trigger events
- Optional MIDI note enrichment (midinote from n/note + octave)
- Typed /ctrl control messages back to Tidal

Usage:
    import asyncio
    from tidal_osc_lib import TidalSession, BridgeConfig

    async def main():
        session = TidalSession(BridgeConfig(listen_tempo=True))
        session.messages.add_callback(lambda m: print("message", m))
        session.tempo.add_callback(lambda t: print("tempo", t))
        async with session:
            session.send_float("cutoff", 0.5)
            await asyncio.sleep(60)

    asyncio.run(main())
"""

from .model import (
    # Errors
    TidalOscError,
    TransportError,
    DecodeError,
    # OSC types
    TypeTag,
    OscArgument,
    RawPacket,
    Endpoint,
    # Channels and events
    Channel,
    TriggerEvent,
    TempoEvent,
    ChannelLevel,
    MeteringEvent,
    ControlMessage,
)
from .tidal_config import (
    BridgeConfig,
    DEFAULT_CONFIG,
    PLAY_ADDRESS,
    TEMPO_ADDRESS,
    RMS_ADDRESS,
    CTRL_ADDRESS,
    HELLO_ADDRESS,
    NOTIFY_ADDRESS,
    classify_address,
)
from .decoder import decode_trigger, decode_tempo, decode_metering
from .enrich import add_midi_data
from .scheduler import SchedulingGate
from .encoder import (
    ControlEncoder,
    encode_ctrl_message,
    decode_ctrl_message,
    parse_float,
    parse_int,
)
from .osc_client import OscPort, encode_packet, decode_datagram
from .events import EventChannel
from .session import TidalSession
from .config import save_config, load_config, DEFAULT_CONFIG_PATH

__all__ = [
    # Errors
    "TidalOscError",
    "TransportError",
    "DecodeError",
    # OSC types
    "TypeTag",
    "OscArgument",
    "RawPacket",
    "Endpoint",
    # Channels and events
    "Channel",
    "TriggerEvent",
    "TempoEvent",
    "ChannelLevel",
    "MeteringEvent",
    "ControlMessage",
    # Tidal config
    "BridgeConfig",
    "DEFAULT_CONFIG",
    "PLAY_ADDRESS",
    "TEMPO_ADDRESS",
    "RMS_ADDRESS",
    "CTRL_ADDRESS",
    "HELLO_ADDRESS",
    "NOTIFY_ADDRESS",
    "classify_address",
    # Decoding / enrichment / scheduling
    "decode_trigger",
    "decode_tempo",
    "decode_metering",
    "add_midi_data",
    "SchedulingGate",
    # Encoding
    "ControlEncoder",
    "encode_ctrl_message",
    "decode_ctrl_message",
    "parse_float",
    "parse_int",
    # Transport
    "OscPort",
    "encode_packet",
    "decode_datagram",
    # Session
    "EventChannel",
    "TidalSession",
    # Config persistence
    "save_config",
    "load_config",
    "DEFAULT_CONFIG_PATH",
]

__version__ = "1.0.0"
