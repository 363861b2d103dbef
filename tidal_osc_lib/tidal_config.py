"""
Tidal OSC Configuration

Single source of truth for all Tidal/SuperDirt-specific constants:
- OSC address patterns (inbound and outbound)
- Default ports and hosts
- Bridge configuration (immutable, assembled once per session)
- Address classification into semantic channels
"""

import logging
from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping

from .model import Channel, Endpoint

logger = logging.getLogger(__name__)


# =============================================================================
# OSC ADDRESSES
# =============================================================================

# Inbound
PLAY_ADDRESS = "/play2"        # Default trigger pattern, matched as prefix
TEMPO_ADDRESS = "/cps/cycle"   # Exact match
RMS_ADDRESS = "/rms"           # Exact match

# Outbound
CTRL_ADDRESS = "/ctrl"         # Control change: [s:name, <tag>:value]
HELLO_ADDRESS = "/hello"       # Tempo subscription handshake, no args
NOTIFY_ADDRESS = "/notify"     # Metering subscription handshake, [i:1]

# Offsets from in_port for the secondary connections
TEMPO_PORT_OFFSET = 1
RMS_PORT_OFFSET = 2


# =============================================================================
# BRIDGE CONFIGURATION
# =============================================================================

# Legacy camelCase option names accepted in config files
_CAMEL_CASE_KEYS = {
    "inAddress": "in_address",
    "inPort": "in_port",
    "outAddress": "out_address",
    "outPort": "out_port",
    "addressPattern": "address_pattern",
    "addMidiData": "add_midi_data",
    "listenTempo": "listen_tempo",
    "tempoAddress": "tempo_address",
    "tempoPort": "tempo_port",
    "listenRms": "listen_rms",
    "rmsAddress": "rms_address",
    "rmsPort": "rms_port",
}


@dataclass(frozen=True)
class BridgeConfig:
    """
    Bridge configuration.

    Attributes:
        in_address: Local address to bind all connections to
        in_port: Local port for trigger messages (SuperDirt's port)
        out_address: Tidal host for control messages
        out_port: Tidal control port
        address_pattern: Trigger address, matched as a prefix
        add_midi_data: Derive a midinote field from note/octave
        listen_tempo: Open the tempo connection on in_port + 1
        tempo_address: Tidal host serving tempo updates
        tempo_port: Tidal tempo port
        listen_rms: Open the metering connection on in_port + 2
        rms_address: Synthesis server host emitting /rms
        rms_port: Synthesis server port
    """
    in_address: str = "127.0.0.1"
    in_port: int = 57120
    out_address: str = "127.0.0.1"
    out_port: int = 6010
    address_pattern: str = PLAY_ADDRESS
    add_midi_data: bool = False
    listen_tempo: bool = False
    tempo_address: str = "127.0.0.1"
    tempo_port: int = 9160
    listen_rms: bool = False
    rms_address: str = "127.0.0.1"
    rms_port: int = 57110

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "BridgeConfig":
        """
        Build a config from a mapping, filling in defaults.

        Accepts snake_case names and the legacy camelCase option names.
        Unknown keys are logged and ignored.
        """
        known = {f.name for f in fields(cls)}
        values: Dict[str, Any] = {}
        for key, value in data.items():
            name = _CAMEL_CASE_KEYS.get(key, key)
            if name not in known:
                logger.warning(f"Ignoring unknown config option: {key}")
                continue
            values[name] = value
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def main_endpoint(self) -> Endpoint:
        return Endpoint(
            local_address=self.in_address,
            local_port=self.in_port,
            remote_address=self.out_address,
            remote_port=self.out_port,
            broadcast=True,
        )

    def tempo_endpoint(self) -> Endpoint:
        return Endpoint(
            local_address=self.in_address,
            local_port=self.in_port + TEMPO_PORT_OFFSET,
            remote_address=self.tempo_address,
            remote_port=self.tempo_port,
        )

    def rms_endpoint(self) -> Endpoint:
        return Endpoint(
            local_address=self.in_address,
            local_port=self.in_port + RMS_PORT_OFFSET,
            remote_address=self.rms_address,
            remote_port=self.rms_port,
        )


DEFAULT_CONFIG = BridgeConfig()


# =============================================================================
# ADDRESS CLASSIFICATION
# =============================================================================

def classify_address(address: str, trigger_pattern: str = PLAY_ADDRESS) -> Channel:
    """
    Classify an OSC address into a channel.

    Exact-match channels (tempo, metering) are checked before the trigger
    prefix, so a trigger pattern such as "/" or "/rms" never shadows them.

    Args:
        address: OSC address path
        trigger_pattern: Trigger address prefix (e.g. "/play2" also
            matches "/play2/orbit0")

    Returns:
        Channel enum value
    """
    if address == TEMPO_ADDRESS:
        return Channel.TEMPO
    if address == RMS_ADDRESS:
        return Channel.METERING
    if trigger_pattern and address.startswith(trigger_pattern):
        return Channel.TRIGGER
    return Channel.UNMATCHED
